"""Tests for the form wizard state machine."""

import pytest
from statemachine.exceptions import TransitionNotAllowed

from src.documents.wizard import STEPS, FormWizard, create_wizard


class TestFormWizard:
    """Tests for FormWizard transitions."""

    def test_starts_at_identity(self, registry, validator) -> None:
        wizard = FormWizard(registry.get("paystub"), {}, validator)

        assert wizard.step == "identity"
        assert wizard.current_state == wizard.identity
        assert wizard.section.title == "Employee Information"

    def test_advance_blocked_by_missing_fields(self, registry, validator) -> None:
        wizard = FormWizard(registry.get("paystub"), {"employeeName": "Jane"}, validator)

        with pytest.raises(TransitionNotAllowed):
            wizard.advance()

        assert wizard.step == "identity"
        assert "missing field: employeeSSN" in wizard.missing_fields()
        assert "missing field: employeeName" not in wizard.missing_fields()

    def test_walks_to_review(self, registry, validator, paystub_request: dict) -> None:
        wizard = FormWizard(registry.get("paystub"), paystub_request, validator)

        wizard.advance()
        assert wizard.step == "counterparty"
        wizard.advance()
        assert wizard.step == "amounts"
        wizard.advance()

        assert wizard.step == "review"
        assert wizard.section is None
        assert wizard.missing_fields() == []

    def test_hourly_inputs_satisfy_amounts(
        self, registry, validator, paystub_request: dict
    ) -> None:
        del paystub_request["grossPay"]
        paystub_request.update(hourlyRate="25", hoursWorked="80")
        wizard = FormWizard(
            registry.get("paystub"), paystub_request, validator, start_value="amounts"
        )

        wizard.advance()

        assert wizard.step == "review"

    def test_back(self, registry, validator) -> None:
        wizard = FormWizard(registry.get("w2"), {}, validator, start_value="review")

        wizard.back()
        wizard.back()
        wizard.back()

        assert wizard.step == "identity"
        with pytest.raises(TransitionNotAllowed):
            wizard.back()

    def test_review_cannot_advance(self, registry, validator, bank_request: dict) -> None:
        wizard = FormWizard(
            registry.get("bank_statement"), bank_request, validator, start_value="review"
        )
        with pytest.raises(TransitionNotAllowed):
            wizard.advance()

    def test_bank_statement_sections(self, registry, validator, bank_request: dict) -> None:
        wizard = FormWizard(registry.get("bank_statement"), bank_request, validator)
        for expected in STEPS[1:]:
            wizard.advance()
            assert wizard.step == expected


def test_create_wizard_rejects_unknown_step(registry, validator) -> None:
    with pytest.raises(ValueError, match="Unknown wizard step"):
        create_wizard(registry.get("paystub"), {}, validator, step="payment")


def test_create_wizard_resumes(registry, validator) -> None:
    wizard = create_wizard(registry.get("paystub"), {}, validator, step="counterparty")
    assert wizard.step == "counterparty"
