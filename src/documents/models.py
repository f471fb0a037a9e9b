"""Pydantic models for generated document requests and history.

This module defines one request variant per document type:
- PaystubRequest: Employee earnings statement for a single pay period
- W2Request: Wage and Tax Statement for a tax year
- BankStatementRequest: Account statement with transactions

Variants use snake_case attributes with camelCase aliases that match the
form field names. Every field is optional at the model level; which fields
are required is decided per template by the validator, so a partially
filled form still parses and every missing field can be reported at once.

All monetary fields use Decimal for precision.
SSN and EIN fields are validated and formatted consistently.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class DocumentType(str, Enum):
    """Type of generated document."""

    PAYSTUB = "paystub"
    W2 = "w2"
    BANK_STATEMENT = "bank_statement"


class DocumentStatus(str, Enum):
    """Outcome of a generation call."""

    GENERATED = "generated"
    FAILED = "failed"


class OutputFormat(str, Enum):
    """Rendered output format."""

    HTML = "html"
    JSON = "json"
    XLSX = "xlsx"

    @property
    def media_type(self) -> str:
        """MIME type for downloads."""
        return {
            OutputFormat.HTML: "text/html; charset=utf-8",
            OutputFormat.JSON: "application/json",
            OutputFormat.XLSX: (
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
            ),
        }[self]

    @property
    def extension(self) -> str:
        """File extension without the dot."""
        return self.value


def validate_ssn(value: str) -> str:
    """Validate and format SSN.

    Args:
        value: SSN string, with or without dashes/spaces.

    Returns:
        Formatted SSN as XXX-XX-XXXX.

    Raises:
        ValueError: If SSN is not exactly 9 digits after cleaning.
    """
    digits = re.sub(r"\D", "", value)

    if len(digits) != 9:
        raise ValueError(f"SSN must be exactly 9 digits, got {len(digits)}")

    return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"


def validate_ein(value: str) -> str:
    """Validate and format EIN.

    Args:
        value: EIN string, with or without dash.

    Returns:
        Formatted EIN as XX-XXXXXXX.

    Raises:
        ValueError: If EIN is not exactly 9 digits after cleaning.
    """
    digits = re.sub(r"\D", "", value)

    if len(digits) != 9:
        raise ValueError(f"EIN must be exactly 9 digits, got {len(digits)}")

    return f"{digits[:2]}-{digits[2:]}"


class FormRecord(BaseModel):
    """Base for all request variants.

    Blank strings are treated as absent values so that an untouched form
    input reads the same as a missing key.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        """Replace blank string values with None."""
        if isinstance(data, dict):
            return {
                key: None if isinstance(value, str) and not value.strip() else value
                for key, value in data.items()
            }
        return data

    def to_record(self) -> dict[str, Any]:
        """Dump present fields keyed by their form field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class PartyFields(FormRecord):
    """Employee and employer identity shared by paystubs and W-2s."""

    # Employee
    employee_name: str | None = Field(default=None, description="Employee full name")
    employee_address: str | None = None
    employee_city: str | None = None
    employee_state: str | None = None
    employee_zip: str | None = None
    employee_ssn: str | None = Field(default=None, alias="employeeSSN")

    # Employer
    employer_name: str | None = Field(default=None, description="Employer legal name")
    employer_address: str | None = None
    employer_city: str | None = None
    employer_state: str | None = None
    employer_zip: str | None = None
    employer_ein: str | None = Field(default=None, alias="employerEIN")

    @field_validator("employee_zip", "employer_zip", mode="before")
    @classmethod
    def zip_to_string(cls, v: object) -> object:
        """Accept ZIP codes entered as numbers."""
        return str(v) if isinstance(v, int) else v

    @field_validator("employee_ssn")
    @classmethod
    def validate_employee_ssn(cls, v: str | None) -> str | None:
        """Validate and format employee SSN."""
        return validate_ssn(v) if v is not None else None

    @field_validator("employer_ein")
    @classmethod
    def validate_employer_ein(cls, v: str | None) -> str | None:
        """Validate and format employer EIN."""
        return validate_ein(v) if v is not None else None


class PaystubRequest(PartyFields):
    """Paystub for a single pay period.

    `prior_ytd_*` fields are year-to-date totals before this period. They
    are inputs only; the `ytd_*` fields shown on the document are derived
    from them unless supplied directly.
    """

    # Pay period
    pay_period_start: date | None = None
    pay_period_end: date | None = None
    pay_date: date | None = None
    pay_frequency: str | None = Field(default=None, description="Pay period name")

    # Earnings
    gross_pay: Decimal | None = None
    hourly_rate: Decimal | None = None
    hours_worked: Decimal | None = None

    # Deductions
    federal_tax: Decimal | None = None
    state_tax: Decimal | None = None
    social_security: Decimal | None = None
    medicare: Decimal | None = None
    state_disability: Decimal | None = None
    health_insurance: Decimal | None = None
    retirement_401k: Decimal | None = Field(default=None, alias="retirement401k")
    net_pay: Decimal | None = None

    # Year to date
    ytd_gross_pay: Decimal | None = None
    ytd_federal_tax: Decimal | None = None
    ytd_state_tax: Decimal | None = None
    ytd_social_security: Decimal | None = None
    ytd_medicare: Decimal | None = None
    prior_ytd_gross_pay: Decimal | None = None
    prior_ytd_federal_tax: Decimal | None = None
    prior_ytd_state_tax: Decimal | None = None
    prior_ytd_social_security: Decimal | None = None
    prior_ytd_medicare: Decimal | None = None

    @field_validator("pay_frequency")
    @classmethod
    def normalize_pay_frequency(cls, v: str | None) -> str | None:
        """Lower-case the pay period name."""
        return v.strip().lower() if v is not None else None


class W2Request(PartyFields):
    """W-2 Wage and Tax Statement. Box numbers follow the IRS layout."""

    tax_year: int | None = Field(default=None, description="Tax year")
    control_number: str | None = Field(default=None, description="Box d")
    wages: Decimal | None = Field(default=None, description="Box 1: Wages, tips, other compensation")
    federal_tax_withheld: Decimal | None = Field(default=None, description="Box 2")
    social_security_wages: Decimal | None = Field(default=None, description="Box 3")
    social_security_tax_withheld: Decimal | None = Field(default=None, description="Box 4")
    medicare_wages: Decimal | None = Field(default=None, description="Box 5")
    medicare_tax_withheld: Decimal | None = Field(default=None, description="Box 6")
    state_wages: Decimal | None = Field(default=None, description="Box 16")
    state_tax_withheld: Decimal | None = Field(default=None, description="Box 17")


class Transaction(FormRecord):
    """Single bank transaction. Positive amounts are credits."""

    posted_on: date | None = Field(default=None, alias="date")
    description: str | None = None
    amount: Decimal


class BankStatementRequest(FormRecord):
    """Bank account statement."""

    bank_name: str | None = None
    account_holder: str | None = None
    account_number: str | None = None
    routing_number: str | None = None
    statement_period: str | None = None
    opening_balance: Decimal | None = None
    closing_balance: Decimal | None = None
    transactions: list[Transaction] | None = None
    total_credits: Decimal | None = None
    total_debits: Decimal | None = None

    @field_validator("account_number", "routing_number", mode="before")
    @classmethod
    def number_to_string(cls, v: object) -> object:
        """Accept account numbers entered as numbers."""
        return str(v) if isinstance(v, int) else v


class DocumentRecord(BaseModel):
    """History entry for one generated document."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    type: DocumentType
    name: str
    created_at: datetime
    status: DocumentStatus = DocumentStatus.GENERATED


@dataclass
class DocumentStructure:
    """Presentation-independent document content.

    Attributes:
        header: Type-specific header fields, always including documentTitle.
        body: Template fields present in the record, in template order.
        footer: Signature, timestamp, document id and notice.
        styles: CSS-like style hints for renderers that use them.
        currency_fields: Extra field names rendered as currency.
    """

    header: dict[str, Any]
    body: dict[str, Any]
    footer: dict[str, Any]
    styles: dict[str, str] = field(default_factory=dict)
    currency_fields: frozenset[str] = frozenset()

    @property
    def document_id(self) -> str:
        """Identifier printed in the footer."""
        return self.footer["documentId"]
