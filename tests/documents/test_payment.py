"""Tests for the simulated checkout."""

import re
from decimal import Decimal

import pytest

from src.documents.models import DocumentType
from src.documents.payment import process_demo_payment


@pytest.mark.asyncio
async def test_receipt() -> None:
    receipt = await process_demo_payment(DocumentType.PAYSTUB, Decimal("9.99"))

    assert re.match(r"^PAY-[0-9A-F]{12}$", receipt.confirmation)
    assert receipt.amount == Decimal("9.99")
    assert receipt.document_type == DocumentType.PAYSTUB
    assert receipt.paid_at.tzinfo is not None


@pytest.mark.asyncio
async def test_confirmations_are_unique() -> None:
    first = await process_demo_payment(DocumentType.W2, Decimal("9.99"))
    second = await process_demo_payment(DocumentType.W2, Decimal("9.99"))
    assert first.confirmation != second.confirmation


@pytest.mark.asyncio
async def test_negative_amount_rejected() -> None:
    with pytest.raises(ValueError, match="cannot be negative"):
        await process_demo_payment(DocumentType.W2, Decimal("-1"))
