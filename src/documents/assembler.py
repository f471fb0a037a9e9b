"""Assemble enriched records into presentation-independent documents.

A DocumentStructure has three parts:
- header: type-specific identification (employer, bank, title, date)
- body: the record projected onto the template's field list
- footer: generator signature, ISO-8601 timestamp and document id

Renderers turn a structure into HTML, JSON or XLSX without touching any
calculation logic.
"""

from __future__ import annotations

import random
import re
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from src.documents.models import DocumentStructure, DocumentType
from src.documents.templates import Template, TemplateRegistry

NOVELTY_NOTICE = "This document is for novelty and educational purposes only."

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


def mask_account_number(account_number: object) -> str:
    """Replace all but the last four characters with asterisks.

    Example:
        >>> mask_account_number("123456789")
        '*****6789'
        >>> mask_account_number("123")
        '123'
    """
    if account_number is None:
        return ""
    text = str(account_number)
    if len(text) <= 4:
        return text
    return "*" * (len(text) - 4) + text[-4:]


def generate_document_id(
    document_type: str | DocumentType,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """Build `<PREFIX>-<epoch ms>-<3-digit random>`.

    The prefix is the first three letters of the type, upper-cased and
    padded with X when the type has fewer letters (w2 -> WXX). Ids are
    advisory; two calls in the same millisecond may collide.
    """
    name = document_type.value if isinstance(document_type, DocumentType) else str(document_type)
    prefix = re.sub(r"[^A-Za-z]", "", name)[:3].upper().ljust(3, "X")
    timestamp = int((now or utc_now()).timestamp() * 1000)
    suffix = (rng or random).randrange(1000)
    return f"{prefix}-{timestamp}-{suffix:03d}"


class DocumentAssembler:
    """Build DocumentStructure objects from enriched records."""

    def __init__(
        self,
        registry: TemplateRegistry,
        signature: str,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.signature = signature
        self.clock = clock
        self.rng = rng

    def assemble(
        self,
        document_type: str | DocumentType,
        record: Mapping[str, Any],
        document_id: str | None = None,
    ) -> DocumentStructure:
        """Assemble header, body and footer for a record.

        Args:
            document_type: Registered document type.
            record: Enriched record keyed by field name.
            document_id: Identifier to print; generated when omitted.

        Returns:
            DocumentStructure ready for rendering.

        Raises:
            TemplateNotFoundError: If the document type is unknown.
        """
        template = self.registry.get(document_type)
        now = self.clock()
        return DocumentStructure(
            header=self.build_header(template, record, now),
            body=self.build_body(template, record),
            footer=self.build_footer(
                template,
                now,
                document_id or generate_document_id(template.document_type, now, self.rng),
            ),
            styles=dict(template.styles),
            currency_fields=template.currency_fields,
        )

    @staticmethod
    def build_header(
        template: Template, record: Mapping[str, Any], now: datetime
    ) -> dict[str, Any]:
        """Type-specific header fields."""
        if template.document_type == DocumentType.PAYSTUB:
            start = record.get("payPeriodStart")
            end = record.get("payPeriodEnd")
            if start and end:
                pay_period = f"{start} - {end}"
            else:
                pay_period = record.get("payFrequency") or "Pay Period"
            return {
                "companyName": record.get("employerName") or "Company Name",
                "documentTitle": "PAYROLL STATEMENT",
                "payPeriod": pay_period,
                "date": now.date().isoformat(),
            }

        if template.document_type == DocumentType.BANK_STATEMENT:
            return {
                "bankName": record.get("bankName") or "Bank Name",
                "documentTitle": "ACCOUNT STATEMENT",
                "accountNumber": mask_account_number(record.get("accountNumber")),
                "statementPeriod": record.get("statementPeriod") or "Statement Period",
            }

        return {
            "documentTitle": template.name.upper(),
            "date": now.date().isoformat(),
        }

    @staticmethod
    def build_body(template: Template, record: Mapping[str, Any]) -> dict[str, Any]:
        """Template fields present in the record, in template order.

        Masked fields keep only their last four characters.
        """
        return {
            name: mask_account_number(record[name])
            if name in template.masked_fields
            else record[name]
            for name in template.fields
            if record.get(name) is not None
        }

    def build_footer(
        self, template: Template, now: datetime, document_id: str
    ) -> dict[str, Any]:
        """Signature, timestamp, id and notice."""
        return {
            "generatedBy": self.signature,
            "timestamp": now.isoformat(),
            "documentId": document_id,
            "notice": NOVELTY_NOTICE,
        }
