"""Tests for the payroll rate table."""

from decimal import Decimal

from src.core.config import Settings
from src.tax.rates import DEFAULT_RATES, FEDERAL_BRACKETS, PayPeriod, PayrollRates


def test_brackets_ascend_and_end_open() -> None:
    cutoffs = [cutoff for cutoff, _ in FEDERAL_BRACKETS]
    rates = [rate for _, rate in FEDERAL_BRACKETS]

    assert cutoffs[-1] is None
    assert cutoffs[:-1] == sorted(cutoffs[:-1])
    assert rates == sorted(rates)


def test_multiplier_for_known_and_unknown_periods() -> None:
    assert DEFAULT_RATES.multiplier_for(PayPeriod.WEEKLY.value) == 52
    assert DEFAULT_RATES.multiplier_for(" Monthly ") == 12
    assert DEFAULT_RATES.multiplier_for("daily") == 26
    assert DEFAULT_RATES.multiplier_for(None) == 26


def test_from_settings_overrides_configurable_rates() -> None:
    cfg = Settings(
        state_tax_rate=Decimal("0.0425"),
        ss_wage_base=Decimal("176100"),
        default_pay_period="Weekly",
    )

    rates = PayrollRates.from_settings(cfg)

    assert rates.state_rate == Decimal("0.0425")
    assert rates.ss_wage_base == Decimal("176100")
    assert rates.default_pay_period == "weekly"
    assert rates.social_security_rate == DEFAULT_RATES.social_security_rate
