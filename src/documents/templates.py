"""Document templates and the registry that holds them.

A template declares everything the pipeline needs to know about one
document type: the request model, the ordered field list shown in the
document body, the required fields, the wizard sections, which quality
checks apply, and style hints for renderers.

The registry is an ordinary object built at startup and passed to the
validator, assembler and generator; there is no module-level lookup table.

Example:
    >>> registry = build_default_registry()
    >>> registry.get("paystub").name
    'Standard Paystub'
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from src.documents.errors import TemplateNotFoundError
from src.documents.models import (
    BankStatementRequest,
    DocumentType,
    FormRecord,
    PaystubRequest,
    W2Request,
)

CHECK_PAY_PLAUSIBILITY = "pay_plausibility"
CHECK_TAX_CONSISTENCY = "tax_consistency"
CHECK_BALANCE_CONSISTENCY = "balance_consistency"
CHECK_NET_PAY = "net_pay"

BASE_STYLES: dict[str, str] = {
    "fontFamily": "Arial, sans-serif",
    "fontSize": "12px",
    "lineHeight": "1.4",
    "color": "#000000",
}


@dataclass(frozen=True)
class Section:
    """One wizard step.

    Attributes:
        key: Step identifier (identity, counterparty, amounts).
        title: Human-readable step title.
        required: Fields that must be present before advancing.
    """

    key: str
    title: str
    required: tuple[str, ...]


@dataclass(frozen=True)
class Template:
    """Definition of a document type.

    Attributes:
        document_type: Type this template renders.
        name: Display name.
        model: Request variant used to coerce raw form values.
        fields: Ordered body fields.
        required: Fields whose absence fails validation.
        sections: Wizard steps, in order, before the review step.
        checks: Quality checks run on the enriched record.
        currency_fields: Numeric fields rendered as currency even though
            their names carry no currency keyword.
        masked_fields: Fields shown with all but the last four characters
            replaced by `*`.
        styles: Style hints passed through to renderers.
    """

    document_type: DocumentType
    name: str
    model: type[FormRecord]
    fields: tuple[str, ...]
    required: tuple[str, ...]
    sections: tuple[Section, ...] = ()
    checks: tuple[str, ...] = ()
    currency_fields: frozenset[str] = frozenset()
    masked_fields: frozenset[str] = frozenset()
    styles: dict[str, str] = field(default_factory=lambda: dict(BASE_STYLES))


class TemplateRegistry:
    """Lookup of templates by document type."""

    def __init__(self, templates: list[Template] | None = None) -> None:
        self._templates: dict[str, Template] = {}
        for template in templates or []:
            self.register(template)

    def register(self, template: Template) -> None:
        """Add or replace the template for its document type."""
        self._templates[template.document_type.value] = template

    def get(self, document_type: str | DocumentType) -> Template:
        """Return the template for a document type.

        Raises:
            TemplateNotFoundError: If the type is not registered.
        """
        key = (
            document_type.value
            if isinstance(document_type, DocumentType)
            else str(document_type)
        )
        try:
            return self._templates[key]
        except KeyError:
            raise TemplateNotFoundError(key) from None

    def __contains__(self, document_type: object) -> bool:
        if isinstance(document_type, DocumentType):
            document_type = document_type.value
        return document_type in self._templates

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)


EMPLOYEE_FIELDS = (
    "employeeName",
    "employeeAddress",
    "employeeCity",
    "employeeState",
    "employeeZip",
    "employeeSSN",
)
EMPLOYER_FIELDS = (
    "employerName",
    "employerAddress",
    "employerCity",
    "employerState",
    "employerZip",
    "employerEIN",
)


def paystub_template() -> Template:
    """Paystub with full employee/employer identity (SSN and EIN required)."""
    pay_required = ("payPeriodStart", "payPeriodEnd", "payDate", "grossPay")
    return Template(
        document_type=DocumentType.PAYSTUB,
        name="Standard Paystub",
        model=PaystubRequest,
        fields=(
            *EMPLOYEE_FIELDS,
            *EMPLOYER_FIELDS,
            "payPeriodStart",
            "payPeriodEnd",
            "payDate",
            "payFrequency",
            "hourlyRate",
            "hoursWorked",
            "grossPay",
            "federalTax",
            "stateTax",
            "socialSecurity",
            "medicare",
            "stateDisability",
            "healthInsurance",
            "retirement401k",
            "netPay",
            "ytdGrossPay",
            "ytdFederalTax",
            "ytdStateTax",
            "ytdSocialSecurity",
            "ytdMedicare",
        ),
        required=(*EMPLOYEE_FIELDS, *EMPLOYER_FIELDS, *pay_required),
        sections=(
            Section("identity", "Employee Information", EMPLOYEE_FIELDS),
            Section("counterparty", "Employer Information", EMPLOYER_FIELDS),
            Section("amounts", "Pay Information", pay_required),
        ),
        checks=(CHECK_PAY_PLAUSIBILITY, CHECK_TAX_CONSISTENCY, CHECK_NET_PAY),
        currency_fields=frozenset(
            {
                "hourlyRate",
                "socialSecurity",
                "medicare",
                "stateDisability",
                "healthInsurance",
                "retirement401k",
                "ytdSocialSecurity",
                "ytdMedicare",
            }
        ),
        styles={**BASE_STYLES, "headerBackground": "#f0f0f0", "borderColor": "#cccccc"},
    )


def w2_template() -> Template:
    """W-2 Wage and Tax Statement."""
    wage_required = ("taxYear", "wages")
    return Template(
        document_type=DocumentType.W2,
        name="W-2 Wage and Tax Statement",
        model=W2Request,
        fields=(
            *EMPLOYEE_FIELDS,
            *EMPLOYER_FIELDS,
            "taxYear",
            "controlNumber",
            "wages",
            "federalTaxWithheld",
            "socialSecurityWages",
            "socialSecurityTaxWithheld",
            "medicareWages",
            "medicareTaxWithheld",
            "stateWages",
            "stateTaxWithheld",
        ),
        required=(*EMPLOYEE_FIELDS, *EMPLOYER_FIELDS, *wage_required),
        sections=(
            Section("identity", "Employee Information", EMPLOYEE_FIELDS),
            Section("counterparty", "Employer Information", EMPLOYER_FIELDS),
            Section("amounts", "Wages and Withholding", wage_required),
        ),
        checks=(CHECK_PAY_PLAUSIBILITY, CHECK_TAX_CONSISTENCY),
        currency_fields=frozenset(
            {"wages", "socialSecurityWages", "medicareWages", "stateWages"}
        ),
        styles={
            **BASE_STYLES,
            "fontFamily": "'Courier New', monospace",
            "headerBackground": "#f5f5f5",
            "borderColor": "#000000",
        },
    )


def bank_statement_template() -> Template:
    """Bank account statement with transactions."""
    holder = ("accountHolder", "bankName")
    account = ("accountNumber", "statementPeriod")
    balances = ("openingBalance", "closingBalance")
    return Template(
        document_type=DocumentType.BANK_STATEMENT,
        name="Bank Statement",
        model=BankStatementRequest,
        fields=(
            "bankName",
            "accountHolder",
            "accountNumber",
            "routingNumber",
            "statementPeriod",
            "openingBalance",
            "closingBalance",
            "totalCredits",
            "totalDebits",
            "transactions",
        ),
        required=(*holder, *account, *balances),
        sections=(
            Section("identity", "Account Holder", holder),
            Section("counterparty", "Account Details", account),
            Section("amounts", "Balances", balances),
        ),
        checks=(CHECK_BALANCE_CONSISTENCY,),
        currency_fields=frozenset({"totalCredits", "totalDebits"}),
        masked_fields=frozenset({"accountNumber"}),
        styles={**BASE_STYLES, "headerBackground": "#e6f3ff", "borderColor": "#0066cc"},
    )


def build_default_registry() -> TemplateRegistry:
    """Registry with every built-in document type."""
    return TemplateRegistry(
        [paystub_template(), w2_template(), bank_statement_template()]
    )
