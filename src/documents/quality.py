"""Quality checks for enriched document records.

Checks never block generation. Each applicable check passes or fails with
a message; failed checks become warnings and the score is the percentage
of applicable checks that passed. A check whose inputs are absent from the
record is skipped and does not count toward the score.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from src.documents.models import DocumentType
from src.documents.templates import (
    CHECK_BALANCE_CONSISTENCY,
    CHECK_NET_PAY,
    CHECK_PAY_PLAUSIBILITY,
    CHECK_TAX_CONSISTENCY,
    TemplateRegistry,
)
from src.tax.calculator import ZERO, annualize_pay, compute_taxes, round_cents
from src.tax.rates import PayPeriod, PayrollRates

if TYPE_CHECKING:
    from src.core.config import Settings


@dataclass(frozen=True)
class QualityThresholds:
    """Limits used by the quality checks."""

    plausible_pay_min: Decimal = Decimal("15000")
    plausible_pay_max: Decimal = Decimal("500000")
    tax_deviation: Decimal = Decimal("0.10")
    balance_tolerance: Decimal = Decimal("0.01")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "QualityThresholds":
        """Build thresholds from application settings."""
        return cls(
            plausible_pay_min=settings.plausible_pay_min,
            plausible_pay_max=settings.plausible_pay_max,
            tax_deviation=settings.tax_deviation_threshold,
        )


@dataclass(slots=True)
class CheckResult:
    """Outcome of one named check."""

    name: str
    passed: bool
    message: str
    suggestions: list[str] = field(default_factory=list)
    details: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class QualityReport:
    """Scored summary of every applicable check."""

    score: int
    warnings: list[str]
    results: list[CheckResult]

    @property
    def suggestions(self) -> list[str]:
        """Suggestions from every failed check."""
        return [s for result in self.results if not result.passed for s in result.suggestions]

    def to_dict(self) -> dict[str, object]:
        """Serialize report for API responses."""
        return {
            "score": self.score,
            "warnings": list(self.warnings),
            "suggestions": self.suggestions,
            "results": [asdict(result) for result in self.results],
        }


def _money(amount: Decimal) -> str:
    return f"${round_cents(amount):,.2f}"


def _relative_deviation(supplied: Decimal, expected: Decimal) -> Decimal:
    if expected == ZERO:
        return ZERO if supplied == ZERO else Decimal("Infinity")
    return abs(supplied - expected) / expected


class QualityChecker:
    """Run the checks a template declares against an enriched record."""

    def __init__(
        self,
        registry: TemplateRegistry,
        rates: PayrollRates,
        thresholds: QualityThresholds | None = None,
    ) -> None:
        self.registry = registry
        self.rates = rates
        self.thresholds = thresholds or QualityThresholds()
        self._checks: dict[str, Callable[[DocumentType, Mapping[str, Any]], CheckResult | None]] = {
            CHECK_PAY_PLAUSIBILITY: self.check_pay_plausibility,
            CHECK_TAX_CONSISTENCY: self.check_tax_consistency,
            CHECK_BALANCE_CONSISTENCY: self.check_balance_consistency,
            CHECK_NET_PAY: self.check_net_pay,
        }

    def run_checks(
        self, document_type: str | DocumentType, record: Mapping[str, Any]
    ) -> QualityReport:
        """Run every check declared by the document type's template.

        Args:
            document_type: Registered document type.
            record: Enriched record keyed by field name.

        Returns:
            QualityReport with score 0-100 rounded half-up. A document with
            no applicable checks scores 100.

        Raises:
            TemplateNotFoundError: If the document type is unknown.
        """
        template = self.registry.get(document_type)
        results: list[CheckResult] = []
        for name in template.checks:
            check = self._checks.get(name)
            if check is None:
                continue
            result = check(template.document_type, record)
            if result is not None:
                results.append(result)

        if not results:
            return QualityReport(score=100, warnings=[], results=[])

        passed = sum(1 for result in results if result.passed)
        score = (Decimal(passed) * 100 / len(results)).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return QualityReport(
            score=int(score),
            warnings=[result.message for result in results if not result.passed],
            results=results,
        )

    def _gross_and_period(
        self, document_type: DocumentType, record: Mapping[str, Any]
    ) -> tuple[Decimal | None, str]:
        if document_type == DocumentType.W2:
            return record.get("wages"), PayPeriod.ANNUALLY.value
        return (
            record.get("grossPay"),
            record.get("payFrequency") or self.rates.default_pay_period,
        )

    def check_pay_plausibility(
        self, document_type: DocumentType, record: Mapping[str, Any]
    ) -> CheckResult | None:
        """Annualized pay must fall within the plausible range."""
        gross, period = self._gross_and_period(document_type, record)
        if gross is None:
            return None

        annual = annualize_pay(gross, period, self.rates)
        details = {"annualized_pay": str(annual)}
        if annual < self.thresholds.plausible_pay_min:
            return CheckResult(
                name=CHECK_PAY_PLAUSIBILITY,
                passed=False,
                message=f"Pay seems unusually low ({_money(annual)} per year)",
                suggestions=["Check the gross pay amount and pay frequency"],
                details=details,
            )
        if annual > self.thresholds.plausible_pay_max:
            return CheckResult(
                name=CHECK_PAY_PLAUSIBILITY,
                passed=False,
                message=f"Pay seems unusually high ({_money(annual)} per year)",
                suggestions=["Check the gross pay amount and pay frequency"],
                details=details,
            )
        return CheckResult(
            name=CHECK_PAY_PLAUSIBILITY,
            passed=True,
            message="Pay is within normal range",
            details=details,
        )

    def check_tax_consistency(
        self, document_type: DocumentType, record: Mapping[str, Any]
    ) -> CheckResult | None:
        """Supplied federal and state withholding must be near the expected amounts."""
        gross, period = self._gross_and_period(document_type, record)
        if gross is None:
            return None

        if document_type == DocumentType.W2:
            federal_field, state_field = "federalTaxWithheld", "stateTaxWithheld"
        else:
            federal_field, state_field = "federalTax", "stateTax"

        expected = compute_taxes(gross, period, self.rates)
        comparisons = (
            ("Federal", federal_field, expected.federal),
            ("State", state_field, expected.state),
        )

        failures: list[str] = []
        suggestions: list[str] = []
        details: dict[str, str] = {}
        compared = 0
        for label, name, expected_amount in comparisons:
            supplied = record.get(name)
            if supplied is None:
                continue
            compared += 1
            deviation = _relative_deviation(supplied, expected_amount)
            details[f"{label.lower()}_expected"] = str(expected_amount)
            details[f"{label.lower()}_deviation"] = str(deviation)
            if deviation > self.thresholds.tax_deviation:
                failures.append(
                    f"{label} tax {_money(supplied)} differs from expected "
                    f"{_money(expected_amount)}"
                )
                suggestions.append(f"Check {label.lower()} tax calculation")

        if compared == 0:
            return None
        if failures:
            return CheckResult(
                name=CHECK_TAX_CONSISTENCY,
                passed=False,
                message="; ".join(failures),
                suggestions=suggestions,
                details=details,
            )
        return CheckResult(
            name=CHECK_TAX_CONSISTENCY,
            passed=True,
            message="Tax calculations appear accurate",
            details=details,
        )

    def check_balance_consistency(
        self, document_type: DocumentType, record: Mapping[str, Any]
    ) -> CheckResult | None:
        """Opening balance plus transactions must equal the closing balance."""
        opening = record.get("openingBalance")
        closing = record.get("closingBalance")
        if opening is None or closing is None:
            return None

        calculated = opening + sum(
            (tx["amount"] for tx in record.get("transactions") or []), ZERO
        )
        difference = abs(calculated - closing)
        details = {"calculated_balance": str(calculated), "difference": str(difference)}
        if difference < self.thresholds.balance_tolerance:
            return CheckResult(
                name=CHECK_BALANCE_CONSISTENCY,
                passed=True,
                message="Balance calculations are accurate",
                details=details,
            )
        return CheckResult(
            name=CHECK_BALANCE_CONSISTENCY,
            passed=False,
            message=f"Balance discrepancy of {_money(difference)} detected",
            suggestions=["Check the closing balance against the transactions"],
            details=details,
        )

    def check_net_pay(
        self, document_type: DocumentType, record: Mapping[str, Any]
    ) -> CheckResult | None:
        """Net pay must not be negative."""
        net_pay = record.get("netPay")
        if net_pay is None:
            return None
        if net_pay < ZERO:
            return CheckResult(
                name=CHECK_NET_PAY,
                passed=False,
                message=f"Net pay is negative ({_money(net_pay)}); deductions exceed gross pay",
                suggestions=["Review the deduction amounts"],
                details={"net_pay": str(net_pay)},
            )
        return CheckResult(
            name=CHECK_NET_PAY,
            passed=True,
            message="Net pay is consistent with deductions",
            details={"net_pay": str(net_pay)},
        )
