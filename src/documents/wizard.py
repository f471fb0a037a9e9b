"""Multi-step form wizard for document requests.

Every template has three input sections followed by a review step:

- identity: who the document is about (employee or account holder)
- counterparty: employer or account details
- amounts: pay, wages or balances
- review: everything entered, ready to preview or generate

Advancing requires the current section's required fields. Going back is
always allowed from any step after the first.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from src.documents.calculations import normalize_request
from src.documents.templates import Section, Template
from src.documents.validation import DocumentValidator

logger = structlog.get_logger()

STEPS = ("identity", "counterparty", "amounts", "review")


class FormWizard(StateMachine):
    """Section-gated progression through a document form.

    Transitions:
    - advance: identity -> counterparty -> amounts -> review
    - back: review -> amounts -> counterparty -> identity
    """

    identity = State(initial=True, value="identity")
    counterparty = State(value="counterparty")
    amounts = State(value="amounts")
    review = State(value="review")

    advance = (
        identity.to(counterparty, cond="section_complete")
        | counterparty.to(amounts, cond="section_complete")
        | amounts.to(review, cond="section_complete")
    )
    back = counterparty.to(identity) | amounts.to(counterparty) | review.to(amounts)

    def __init__(
        self,
        template: Template,
        record: Mapping[str, Any],
        validator: DocumentValidator,
        start_value: str | None = None,
    ) -> None:
        """Initialize the wizard at a step.

        Args:
            template: Template whose sections drive the steps.
            record: Form values entered so far.
            validator: Validator used to check section fields.
            start_value: Step to resume at; defaults to identity.
        """
        self.template = template
        self.record = dict(record)
        self.validator = validator
        super().__init__(start_value=start_value)

    @property
    def step(self) -> str:
        """Current step name."""
        return self.current_state.value

    @property
    def section(self) -> Section | None:
        """Section for the current step; None on review."""
        for section in self.template.sections:
            if section.key == self.step:
                return section
        return None

    def missing_fields(self) -> list[str]:
        """Missing-field errors for the current section."""
        section = self.section
        if section is None:
            return []
        normalized = normalize_request(self.template, self.record)
        return self.validator.validate_fields(section.required, normalized)

    def section_complete(self) -> bool:
        """Guard for advance: the current section has all required fields."""
        return not self.missing_fields()

    def on_advance(self, source: State, target: State) -> None:
        logger.info(
            "wizard_advanced",
            document_type=self.template.document_type.value,
            source=source.id,
            target=target.id,
        )


def create_wizard(
    template: Template,
    record: Mapping[str, Any],
    validator: DocumentValidator,
    step: str | None = None,
) -> FormWizard:
    """Build a wizard resumed at `step`.

    Raises:
        ValueError: If `step` is not a wizard step.
    """
    if step is not None and step not in STEPS:
        raise ValueError(f"Unknown wizard step: {step}")
    return FormWizard(template, record, validator, start_value=step)


__all__ = [
    "STEPS",
    "FormWizard",
    "TransitionNotAllowed",
    "create_wizard",
]
