"""Payroll withholding calculations and rate tables."""

from src.tax.calculator import (
    TaxBreakdown,
    TransactionSummary,
    accumulate_ytd,
    annualize_pay,
    compute_net_pay,
    compute_taxes,
    derive_gross_pay,
    federal_rate,
    round_cents,
    running_balance,
    social_security_tax,
    summarize_transactions,
    taxable_social_security_wages,
    to_decimal,
)
from src.tax.rates import DEFAULT_RATES, PayPeriod, PayrollRates

__all__ = [
    "DEFAULT_RATES",
    "PayPeriod",
    "PayrollRates",
    "TaxBreakdown",
    "TransactionSummary",
    "accumulate_ytd",
    "annualize_pay",
    "compute_net_pay",
    "compute_taxes",
    "derive_gross_pay",
    "federal_rate",
    "round_cents",
    "running_balance",
    "social_security_tax",
    "summarize_transactions",
    "taxable_social_security_wages",
    "to_decimal",
]
