"""Tests for document request validation."""

import pytest

from src.documents.errors import TemplateNotFoundError
from src.documents.validation import DocumentValidator, is_absent, missing_fields


def test_complete_paystub_is_valid(validator: DocumentValidator, paystub_request: dict) -> None:
    result = validator.validate("paystub", paystub_request)

    assert result.is_valid
    assert result.errors == []


@pytest.mark.parametrize("document_type", ["paystub", "w2", "bank_statement"])
def test_one_error_per_missing_required_field(
    validator: DocumentValidator, registry, document_type: str
) -> None:
    template = registry.get(document_type)

    result = validator.validate(document_type, {})

    assert not result.is_valid
    assert result.errors == [f"missing field: {name}" for name in template.required]


def test_missing_field_reported_once(validator: DocumentValidator, paystub_request: dict) -> None:
    del paystub_request["employeeName"]
    paystub_request["employerName"] = "   "

    result = validator.validate("paystub", paystub_request)

    assert result.errors == [
        "missing field: employeeName",
        "missing field: employerName",
    ]


def test_invalid_values_reported(validator: DocumentValidator, paystub_request: dict) -> None:
    paystub_request["employeeSSN"] = "123"
    paystub_request["grossPay"] = "lots"

    result = validator.validate("paystub", paystub_request)

    assert "invalid field: employeeSSN" in result.errors
    assert "invalid field: grossPay" in result.errors


@pytest.mark.parametrize("value", ["NaN", "nan", "Infinity", "-inf"])
def test_non_finite_gross_pay_reported(
    validator: DocumentValidator, paystub_request: dict, value: str
) -> None:
    paystub_request["grossPay"] = value

    result = validator.validate("paystub", paystub_request)

    assert not result.is_valid
    assert "invalid field: grossPay" in result.errors
    assert "Gross pay cannot be negative" not in result.errors


def test_non_finite_wages_reported(validator: DocumentValidator, w2_request: dict) -> None:
    w2_request["wages"] = "nan"

    result = validator.validate("w2", w2_request)

    assert result.errors == ["invalid field: wages"]


def test_zero_gross_pay_is_present(validator: DocumentValidator, paystub_request: dict) -> None:
    paystub_request["grossPay"] = 0
    assert validator.validate("paystub", paystub_request).is_valid


def test_negative_gross_pay_rejected(validator: DocumentValidator, paystub_request: dict) -> None:
    paystub_request["grossPay"] = "-10"
    result = validator.validate("paystub", paystub_request)
    assert "Gross pay cannot be negative" in result.errors


def test_negative_wages_rejected(validator: DocumentValidator, w2_request: dict) -> None:
    w2_request["wages"] = -1
    result = validator.validate("w2", w2_request)
    assert "Wages cannot be negative" in result.errors


def test_pay_period_order(validator: DocumentValidator, paystub_request: dict) -> None:
    paystub_request["payPeriodEnd"] = "2024-02-20"

    result = validator.validate("paystub", paystub_request)

    assert result.errors == ["Pay period end (2024-02-20) is before start (2024-03-01)"]


def test_short_account_number_rejected(validator: DocumentValidator, bank_request: dict) -> None:
    bank_request["accountNumber"] = "1234"
    result = validator.validate("bank_statement", bank_request)
    assert result.errors == ["Account number must be at least 8 characters"]


def test_complete_bank_statement_is_valid(
    validator: DocumentValidator, bank_request: dict
) -> None:
    assert validator.validate("bank_statement", bank_request).is_valid


def test_unknown_type_raises(validator: DocumentValidator) -> None:
    with pytest.raises(TemplateNotFoundError, match="passport"):
        validator.validate("passport", {})


def test_validate_fields_subset(validator: DocumentValidator) -> None:
    errors = validator.validate_fields(["bankName", "accountHolder"], {"bankName": "X"})
    assert errors == ["missing field: accountHolder"]


def test_absence_helpers() -> None:
    assert is_absent(None)
    assert is_absent("  ")
    assert not is_absent(0)
    assert missing_fields(["a", "b", "c"], {"a": 1, "b": ""}) == ["b", "c"]
