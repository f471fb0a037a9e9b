"""Request validation for document generation.

This module checks raw form records before any calculation runs. Every
problem is collected rather than stopping at the first one, so a caller can
show the complete list of fixes at once.

Checks:
- Required fields for the document type are present (explicit zero counts
  as present, blank strings do not)
- Values coerce to their declared types (dates, amounts, SSN/EIN)
- Gross pay and wages are not negative
- Bank account numbers have at least 8 characters

Example:
    >>> validator = DocumentValidator(build_default_registry())
    >>> result = validator.validate("paystub", {"employeeName": "Jane Doe"})
    >>> result.is_valid
    False
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from src.documents.models import DocumentType, FormRecord
from src.documents.templates import Template, TemplateRegistry
from src.tax.calculator import to_decimal

MIN_ACCOUNT_NUMBER_LENGTH = 8


@dataclass
class ValidationResult:
    """Result of request validation.

    Attributes:
        is_valid: True if no errors were found.
        errors: Every problem that blocks generation.
        warnings: Issues worth reviewing that do not block generation.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def is_absent(value: object) -> bool:
    """True for None and blank strings. Zero is a present value."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def missing_fields(names: Iterable[str], request: Mapping[str, Any]) -> list[str]:
    """Names from `names` that are absent in `request`, in order."""
    return [name for name in names if is_absent(request.get(name))]


def coerce_request(
    template: Template, request: Mapping[str, Any]
) -> tuple[FormRecord | None, list[str]]:
    """Parse a raw record into the template's request model.

    Returns:
        The parsed model (None on failure) and the names of fields that
        could not be coerced, deduplicated and in error order.
    """
    try:
        return template.model.model_validate(dict(request)), []
    except ValidationError as exc:
        invalid: list[str] = []
        for error in exc.errors():
            loc = error.get("loc") or ("request",)
            name = str(loc[0])
            if name not in invalid:
                invalid.append(name)
        return None, invalid


class DocumentValidator:
    """Validate raw document requests against their templates.

    The validator is side-effect free; it never mutates the request.
    """

    def __init__(self, registry: TemplateRegistry) -> None:
        self.registry = registry

    def validate(
        self, document_type: str | DocumentType, request: Mapping[str, Any]
    ) -> ValidationResult:
        """Validate a request for a document type.

        Args:
            document_type: Registered document type.
            request: Raw form record keyed by form field name.

        Returns:
            ValidationResult with one error per missing required field plus
            any coercion and range errors.

        Raises:
            TemplateNotFoundError: If the document type is unknown.
        """
        template = self.registry.get(document_type)
        errors: list[str] = []
        warnings: list[str] = []

        missing = missing_fields(template.required, request)
        errors.extend(f"missing field: {name}" for name in missing)

        parsed, invalid = coerce_request(template, request)
        errors.extend(
            f"invalid field: {name}" for name in invalid if name not in missing
        )

        errors.extend(self._range_errors(template, request))

        if parsed is not None:
            errors.extend(self._consistency_errors(template, parsed.to_record()))

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def validate_fields(
        self, names: Iterable[str], request: Mapping[str, Any]
    ) -> list[str]:
        """Missing-field errors for a subset of fields (one wizard step)."""
        return [f"missing field: {name}" for name in missing_fields(names, request)]

    @staticmethod
    def _range_errors(template: Template, request: Mapping[str, Any]) -> list[str]:
        """Numeric sanity checks on raw values."""
        errors: list[str] = []
        document_type = template.document_type

        if document_type == DocumentType.PAYSTUB:
            gross = to_decimal(request.get("grossPay"))
            if gross is not None and gross < Decimal("0"):
                errors.append("Gross pay cannot be negative")

        if document_type == DocumentType.W2:
            wages = to_decimal(request.get("wages"))
            if wages is not None and wages < Decimal("0"):
                errors.append("Wages cannot be negative")

        account_number = request.get("accountNumber")
        if not is_absent(account_number):
            if len(str(account_number).strip()) < MIN_ACCOUNT_NUMBER_LENGTH:
                errors.append(
                    f"Account number must be at least {MIN_ACCOUNT_NUMBER_LENGTH} characters"
                )

        return errors

    @staticmethod
    def _consistency_errors(template: Template, record: Mapping[str, Any]) -> list[str]:
        """Cross-field checks on the coerced record."""
        errors: list[str] = []
        if template.document_type == DocumentType.PAYSTUB:
            start = record.get("payPeriodStart")
            end = record.get("payPeriodEnd")
            if start and end and end < start:
                errors.append(f"Pay period end ({end}) is before start ({start})")
        return errors
