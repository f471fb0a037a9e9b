"""Pytest configuration and shared fixtures for tests."""

import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.core.config import Settings
from src.documents.assembler import DocumentAssembler
from src.documents.generator import DocumentGenerator, build_generator
from src.documents.history import HistoryStore
from src.documents.quality import QualityChecker
from src.documents.templates import TemplateRegistry, build_default_registry
from src.documents.validation import DocumentValidator
from src.main import app, init_app_state
from src.tax.rates import DEFAULT_RATES, PayrollRates

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests.

    Returns:
        Backend name string.
    """
    return "asyncio"


@pytest.fixture
def registry() -> TemplateRegistry:
    return build_default_registry()


@pytest.fixture
def rates() -> PayrollRates:
    return DEFAULT_RATES


@pytest.fixture
def validator(registry: TemplateRegistry) -> DocumentValidator:
    return DocumentValidator(registry)


@pytest.fixture
def checker(registry: TemplateRegistry, rates: PayrollRates) -> QualityChecker:
    return QualityChecker(registry, rates)


@pytest.fixture
def assembler(registry: TemplateRegistry) -> DocumentAssembler:
    """Assembler with a fixed clock so headers and footers are stable."""
    return DocumentAssembler(
        registry,
        signature="BuellDocs Professional Document Solutions",
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def storage_url() -> str:
    """Unique in-memory storage root per test."""
    return f"memory://buelldocs-test-{uuid.uuid4().hex}"


@pytest.fixture
def history(storage_url: str) -> HistoryStore:
    return HistoryStore(storage_url)


@pytest.fixture
def test_settings(storage_url: str) -> Settings:
    """Settings with no simulated delays and in-memory history."""
    return Settings(
        generation_delay_seconds=0,
        payment_delay_seconds=0,
        history_storage_url=storage_url,
    )


@pytest.fixture
def generator(test_settings: Settings, history: HistoryStore) -> DocumentGenerator:
    generator = build_generator(test_settings, history=history)
    generator.clock = lambda: FIXED_NOW
    generator.assembler.clock = lambda: FIXED_NOW
    return generator


@pytest.fixture
def paystub_request() -> dict[str, Any]:
    """Complete paystub form for a $2,000 biweekly paycheck."""
    return {
        "employeeName": "Jane Doe",
        "employeeAddress": "1 Main St",
        "employeeCity": "Springfield",
        "employeeState": "IL",
        "employeeZip": "62701",
        "employeeSSN": "123-45-6789",
        "employerName": "Acme Corp",
        "employerAddress": "500 Market St",
        "employerCity": "Chicago",
        "employerState": "IL",
        "employerZip": "60601",
        "employerEIN": "12-3456789",
        "payPeriodStart": "2024-03-01",
        "payPeriodEnd": "2024-03-14",
        "payDate": "2024-03-15",
        "payFrequency": "biweekly",
        "grossPay": "2000.00",
    }


@pytest.fixture
def w2_request(paystub_request: dict[str, Any]) -> dict[str, Any]:
    """Complete W-2 form for $52,000 in wages."""
    party = {
        key: value
        for key, value in paystub_request.items()
        if key.startswith(("employee", "employer"))
    }
    return {**party, "taxYear": 2023, "wages": "52000"}


@pytest.fixture
def bank_request() -> dict[str, Any]:
    """Balanced bank statement with one credit and one debit."""
    return {
        "bankName": "First Bank",
        "accountHolder": "Jane Doe",
        "accountNumber": "123456789",
        "routingNumber": "021000021",
        "statementPeriod": "March 2024",
        "openingBalance": "1000.00",
        "closingBalance": "1450.00",
        "transactions": [
            {"date": "2024-03-01", "description": "Payroll deposit", "amount": "500.00"},
            {"date": "2024-03-05", "description": "Groceries", "amount": "-50.00"},
        ],
    }


@pytest_asyncio.fixture
async def api_client(test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """API test client with fresh document services on app state."""
    init_app_state(app, test_settings)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def session_token(api_client: AsyncClient) -> str:
    """Sign in and return the session token."""
    response = await api_client.post(
        "/api/auth/login",
        json={"email": "jane.doe@example.com", "password": "secret"},
    )
    return response.json()["token"]
