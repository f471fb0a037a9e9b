"""Simulated checkout for document purchases.

No payment processor is contacted. The delay only gives the client
something to show a spinner for.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from src.core.logging import get_logger
from src.documents.models import DocumentType

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentReceipt:
    """Confirmation of a simulated payment."""

    confirmation: str
    document_type: DocumentType
    amount: Decimal
    paid_at: datetime


async def process_demo_payment(
    document_type: DocumentType, amount: Decimal, delay_seconds: float = 0.0
) -> PaymentReceipt:
    """Wait for the configured delay and return a receipt.

    Args:
        document_type: Document being purchased.
        amount: Price charged.
        delay_seconds: Simulated processing latency.

    Returns:
        PaymentReceipt with a random confirmation code.
    """
    if amount < Decimal("0"):
        raise ValueError(f"Payment amount cannot be negative: {amount}")
    if delay_seconds > 0:
        await asyncio.sleep(delay_seconds)

    receipt = PaymentReceipt(
        confirmation=f"PAY-{uuid.uuid4().hex[:12].upper()}",
        document_type=document_type,
        amount=amount,
        paid_at=datetime.now(UTC),
    )
    logger.info(
        "demo_payment_processed",
        confirmation=receipt.confirmation,
        amount=str(amount),
    )
    return receipt
