"""Per-document enrichment of validated records.

Each document type has one enrichment function that fills derived amounts
into a copy of the record: withholdings, net pay, year-to-date totals,
W-2 boxes, bank statement totals and running balances.

Supplied values always win over computed ones, except net pay, which is
always recomputed from the deductions actually printed on the document.
When an input a calculation depends on is absent the dependent fields are
left out; nothing here raises for missing data.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.documents.models import DocumentType
from src.documents.templates import Template
from src.tax.calculator import (
    ZERO,
    accumulate_ytd,
    compute_net_pay,
    compute_taxes,
    derive_gross_pay,
    round_cents,
    running_balance,
    social_security_tax,
    summarize_transactions,
    to_decimal,
)
from src.tax.rates import PayPeriod, PayrollRates

PAYSTUB_DEDUCTIONS = (
    "federalTax",
    "stateTax",
    "socialSecurity",
    "medicare",
    "stateDisability",
    "healthInsurance",
    "retirement401k",
)

# (ytd field, current-period field, prior ytd input field)
PAYSTUB_YTD_FIELDS = (
    ("ytdGrossPay", "grossPay", "priorYtdGrossPay"),
    ("ytdFederalTax", "federalTax", "priorYtdFederalTax"),
    ("ytdStateTax", "stateTax", "priorYtdStateTax"),
    ("ytdSocialSecurity", "socialSecurity", "priorYtdSocialSecurity"),
    ("ytdMedicare", "medicare", "priorYtdMedicare"),
)

Enricher = Callable[[dict[str, Any], PayrollRates, datetime], None]


def normalize_request(template: Template, request: Mapping[str, Any]) -> dict[str, Any]:
    """Fill inputs the form would have derived before submission.

    Paystubs without gross pay get it from hourly rate times hours worked
    when both are positive.
    """
    normalized = dict(request)
    if template.document_type == DocumentType.PAYSTUB:
        gross = to_decimal(normalized.get("grossPay"))
        rate = to_decimal(normalized.get("hourlyRate"))
        hours = to_decimal(normalized.get("hoursWorked"))
        if gross is None and rate and hours and rate > ZERO and hours > ZERO:
            normalized["grossPay"] = derive_gross_pay(rate, hours)
    return normalized


def _enrich_paystub(record: dict[str, Any], rates: PayrollRates, now: datetime) -> None:
    gross: Decimal | None = record.get("grossPay")
    if gross is None:
        return

    record.setdefault("payFrequency", rates.default_pay_period)
    taxes = compute_taxes(gross, record["payFrequency"], rates)
    prior_gross = record.get("priorYtdGrossPay", ZERO)

    record.setdefault("federalTax", taxes.federal)
    record.setdefault("stateTax", taxes.state)
    record.setdefault("socialSecurity", social_security_tax(gross, prior_gross, rates))
    record.setdefault("medicare", taxes.medicare)
    record.setdefault("stateDisability", round_cents(gross * rates.state_disability_rate))

    record["netPay"] = compute_net_pay(
        gross, {name: record.get(name) for name in PAYSTUB_DEDUCTIONS}
    )

    for ytd_field, current_field, prior_field in PAYSTUB_YTD_FIELDS:
        if ytd_field not in record:
            record[ytd_field] = accumulate_ytd(
                record[current_field], record.get(prior_field)
            )


def _enrich_w2(record: dict[str, Any], rates: PayrollRates, now: datetime) -> None:
    if "controlNumber" not in record:
        record["controlNumber"] = str(int(now.timestamp() * 1000))[-8:]

    wages: Decimal | None = record.get("wages")
    if wages is None:
        return

    record.setdefault("socialSecurityWages", wages)
    record.setdefault("medicareWages", wages)
    record.setdefault("stateWages", wages)

    taxes = compute_taxes(wages, PayPeriod.ANNUALLY.value, rates)
    record.setdefault("federalTaxWithheld", taxes.federal)
    record.setdefault(
        "socialSecurityTaxWithheld",
        social_security_tax(record["socialSecurityWages"], ZERO, rates),
    )
    record.setdefault(
        "medicareTaxWithheld", round_cents(record["medicareWages"] * rates.medicare_rate)
    )
    record.setdefault(
        "stateTaxWithheld", round_cents(record["stateWages"] * rates.state_rate)
    )


def _enrich_bank_statement(
    record: dict[str, Any], rates: PayrollRates, now: datetime
) -> None:
    amounts = [tx["amount"] for tx in record.get("transactions") or []]
    summary = summarize_transactions(amounts)
    record.setdefault("totalCredits", summary.total_credits)
    record.setdefault("totalDebits", summary.total_debits)

    opening: Decimal | None = record.get("openingBalance")
    if opening is not None and amounts:
        # balance after each transaction
        balances = running_balance(opening, amounts)[1:]
        record["transactions"] = [
            {**tx, "balance": balance}
            for tx, balance in zip(record["transactions"], balances)
        ]


ENRICHERS: dict[DocumentType, Enricher] = {
    DocumentType.PAYSTUB: _enrich_paystub,
    DocumentType.W2: _enrich_w2,
    DocumentType.BANK_STATEMENT: _enrich_bank_statement,
}


def apply_calculations(
    template: Template,
    record: Mapping[str, Any],
    rates: PayrollRates,
    now: datetime,
) -> dict[str, Any]:
    """Return a copy of `record` with derived amounts filled in.

    Args:
        template: Template of the document being generated.
        record: Coerced record (Decimal amounts, dates) keyed by field name.
        rates: Rate table.
        now: Generation time, used for W-2 control numbers.

    Returns:
        Enriched record. The input mapping is not modified.
    """
    enriched = dict(record)
    enricher = ENRICHERS.get(template.document_type)
    if enricher is not None:
        enricher(enriched, rates, now)
    return enriched
