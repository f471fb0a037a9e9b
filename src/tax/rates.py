"""Payroll rate tables used by the withholding calculator.

This module centralizes the withholding rates, pay-period multipliers and
federal bracket cutoffs so calculation code never hardcodes them. A
`PayrollRates` instance is built once at startup (usually from settings)
and passed explicitly to everything that computes amounts.

Example:
    >>> from src.tax.rates import DEFAULT_RATES
    >>> DEFAULT_RATES.multiplier_for("monthly")
    12
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.config import Settings


class PayPeriod(str, Enum):
    """Recurring interval over which wages are paid."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


PERIOD_MULTIPLIERS: dict[str, int] = {
    PayPeriod.WEEKLY.value: 52,
    PayPeriod.BIWEEKLY.value: 26,
    PayPeriod.SEMIMONTHLY.value: 24,
    PayPeriod.MONTHLY.value: 12,
    PayPeriod.QUARTERLY.value: 4,
    PayPeriod.ANNUALLY.value: 1,
}

# (inclusive upper bound of annualized income, marginal rate)
FEDERAL_BRACKETS: tuple[tuple[Decimal | None, Decimal], ...] = (
    (Decimal("10275"), Decimal("0.10")),
    (Decimal("41775"), Decimal("0.12")),
    (Decimal("89450"), Decimal("0.22")),
    (Decimal("190750"), Decimal("0.24")),
    (Decimal("364200"), Decimal("0.32")),
    (Decimal("462500"), Decimal("0.35")),
    (None, Decimal("0.37")),
)


@dataclass(frozen=True)
class PayrollRates:
    """Withholding rates and lookup tables.

    All monetary values are Decimal. Frozen so a shared instance can be
    handed to every component without risk of mutation.

    Attributes:
        federal_brackets: Ascending (cutoff, rate) pairs; a None cutoff is
            the top bracket.
        state_rate: Flat state withholding rate.
        social_security_rate: Employee Social Security rate.
        medicare_rate: Employee Medicare rate.
        state_disability_rate: State disability insurance rate on paystubs.
        ss_wage_base: Annual Social Security wage cap.
        period_multipliers: Pay periods per year keyed by period name.
        default_multiplier: Multiplier used for unknown pay periods.
        default_pay_period: Period assumed when a record names none.
    """

    federal_brackets: tuple[tuple[Decimal | None, Decimal], ...] = FEDERAL_BRACKETS
    state_rate: Decimal = Decimal("0.05")
    social_security_rate: Decimal = Decimal("0.062")
    medicare_rate: Decimal = Decimal("0.0145")
    state_disability_rate: Decimal = Decimal("0.01")
    ss_wage_base: Decimal = Decimal("168600")
    period_multipliers: dict[str, int] = field(
        default_factory=lambda: dict(PERIOD_MULTIPLIERS)
    )
    default_multiplier: int = 26
    default_pay_period: str = PayPeriod.BIWEEKLY.value

    def multiplier_for(self, pay_period: str | None) -> int:
        """Return pay periods per year, falling back to the default."""
        if not pay_period:
            return self.default_multiplier
        return self.period_multipliers.get(
            str(pay_period).strip().lower(), self.default_multiplier
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PayrollRates":
        """Build the rate table from application settings."""
        return replace(
            DEFAULT_RATES,
            state_rate=settings.state_tax_rate,
            ss_wage_base=settings.ss_wage_base,
            default_pay_period=settings.default_pay_period,
        )


DEFAULT_RATES = PayrollRates()
