"""Withholding calculation functions for generated payroll documents.

This module provides pure functions for computing payroll amounts:
- Pay annualization by pay period
- Federal rate selection using a flat marginal lookup
- Federal, state, Social Security and Medicare withholding
- Net pay, year-to-date accumulation and wage-cap handling
- Running balances and credit/debit totals for bank statements

The federal computation is deliberately simplified: the whole gross amount
is taxed at the single marginal rate selected for the annualized income.
It is not progressive taxation.

All monetary values use Decimal for precision.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.tax.rates import DEFAULT_RATES, PayrollRates

CENT = Decimal("0.01")
ZERO = Decimal("0")


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class TaxBreakdown:
    """Withholding computed from a single gross pay amount.

    Attributes:
        federal: Federal income tax withholding.
        state: State income tax withholding.
        social_security: Employee Social Security tax.
        medicare: Employee Medicare tax.
    """

    federal: Decimal
    state: Decimal
    social_security: Decimal
    medicare: Decimal

    @property
    def total(self) -> Decimal:
        """Sum of all four withholdings."""
        return self.federal + self.state + self.social_security + self.medicare

    def to_dict(self) -> dict[str, Decimal]:
        """Return the breakdown keyed by document field names."""
        return {
            "federal": self.federal,
            "state": self.state,
            "socialSecurity": self.social_security,
            "medicare": self.medicare,
        }


@dataclass(frozen=True)
class TransactionSummary:
    """Credit and debit totals for a list of transactions.

    Attributes:
        total_credits: Sum of positive amounts.
        total_debits: Sum of negative amounts, as a positive number.
        net_change: Credits minus debits.
    """

    total_credits: Decimal
    total_debits: Decimal
    net_change: Decimal


# =============================================================================
# Helpers
# =============================================================================


def to_decimal(value: object) -> Decimal | None:
    """Convert numeric-like input to Decimal.

    Returns None for None, booleans, blank strings, NaN or infinity, and
    anything that does not parse as a number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, str):
        value = value.strip().replace("$", "").replace(",", "")
        if not value:
            return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    return result if result.is_finite() else None


def round_cents(amount: Decimal) -> Decimal:
    """Round to cents using round-half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# Withholding
# =============================================================================


def annualize_pay(
    gross_pay: Decimal,
    pay_period: str | None,
    rates: PayrollRates = DEFAULT_RATES,
) -> Decimal:
    """Scale a per-period amount to a yearly amount.

    Args:
        gross_pay: Pay for one period.
        pay_period: Period name (weekly, biweekly, ...). Unknown or missing
            periods use the default multiplier of 26.
        rates: Rate table providing the multipliers.

    Returns:
        Annualized pay.

    Example:
        >>> annualize_pay(Decimal("1000"), "biweekly")
        Decimal('26000')
    """
    return gross_pay * rates.multiplier_for(pay_period)


def federal_rate(annual_pay: Decimal, rates: PayrollRates = DEFAULT_RATES) -> Decimal:
    """Select the marginal federal rate for an annualized income.

    Cutoffs are inclusive upper bounds, so the selected rate never
    decreases as income increases.
    """
    for cutoff, rate in rates.federal_brackets:
        if cutoff is None or annual_pay <= cutoff:
            return rate
    return rates.federal_brackets[-1][1]


def compute_taxes(
    gross_pay: Decimal,
    pay_period: str | None = None,
    rates: PayrollRates = DEFAULT_RATES,
) -> TaxBreakdown:
    """Compute withholding for one pay period.

    Social Security is computed on the full gross amount. Callers that
    track year-to-date wages apply the annual wage cap themselves via
    `taxable_social_security_wages`.

    Args:
        gross_pay: Pay for the period. Must be non-negative.
        pay_period: Period name used to annualize pay for rate selection.
        rates: Rate table.

    Returns:
        TaxBreakdown with each amount rounded half-up to cents.
    """
    annual = annualize_pay(gross_pay, pay_period or rates.default_pay_period, rates)
    return TaxBreakdown(
        federal=round_cents(gross_pay * federal_rate(annual, rates)),
        state=round_cents(gross_pay * rates.state_rate),
        social_security=round_cents(gross_pay * rates.social_security_rate),
        medicare=round_cents(gross_pay * rates.medicare_rate),
    )


def taxable_social_security_wages(
    gross_pay: Decimal,
    prior_ytd_wages: Decimal = ZERO,
    rates: PayrollRates = DEFAULT_RATES,
) -> Decimal:
    """Portion of this period's pay still under the annual wage cap."""
    remaining = rates.ss_wage_base - prior_ytd_wages
    if remaining <= ZERO:
        return ZERO
    return min(gross_pay, remaining)


def social_security_tax(
    gross_pay: Decimal,
    prior_ytd_wages: Decimal = ZERO,
    rates: PayrollRates = DEFAULT_RATES,
) -> Decimal:
    """Social Security tax with the annual wage cap applied."""
    taxable = taxable_social_security_wages(gross_pay, prior_ytd_wages, rates)
    return round_cents(taxable * rates.social_security_rate)


def compute_net_pay(gross_pay: Decimal, deductions: Mapping[str, object]) -> Decimal:
    """Subtract every deduction from gross pay.

    Negative results are returned as-is so callers can flag them.

    Example:
        >>> compute_net_pay(Decimal("1000"), {"federal": 100, "state": 50})
        Decimal('850')
    """
    total = sum(
        (amount for amount in map(to_decimal, deductions.values()) if amount is not None),
        ZERO,
    )
    return gross_pay - total


def accumulate_ytd(current: Decimal, previous_ytd: Decimal | None = None) -> Decimal:
    """Add the current amount to a caller-supplied prior total."""
    return (previous_ytd or ZERO) + current


def derive_gross_pay(hourly_rate: Decimal, hours_worked: Decimal) -> Decimal:
    """Gross pay from an hourly rate and hours worked, rounded to cents."""
    return round_cents(hourly_rate * hours_worked)


# =============================================================================
# Bank balances
# =============================================================================


def running_balance(opening_balance: Decimal, amounts: Iterable[Decimal]) -> list[Decimal]:
    """Balance after each transaction, starting with the opening balance."""
    balance = opening_balance
    history = [balance]
    for amount in amounts:
        balance += amount
        history.append(balance)
    return history


def summarize_transactions(amounts: Iterable[Decimal]) -> TransactionSummary:
    """Total credits (positive amounts) and debits (negative amounts)."""
    credits = ZERO
    debits = ZERO
    for amount in amounts:
        if amount >= ZERO:
            credits += amount
        else:
            debits += -amount
    return TransactionSummary(
        total_credits=credits,
        total_debits=debits,
        net_change=credits - debits,
    )
