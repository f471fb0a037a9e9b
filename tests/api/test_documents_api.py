"""Tests for document API endpoints."""

import base64

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_templates(api_client: AsyncClient) -> None:
    response = await api_client.get("/api/templates")

    assert response.status_code == 200
    templates = {t["type"]: t for t in response.json()}
    assert set(templates) == {"paystub", "w2", "bank_statement"}
    assert templates["paystub"]["name"] == "Standard Paystub"
    assert templates["paystub"]["price"] == "9.99"
    assert templates["w2"]["sections"][0]["key"] == "identity"


@pytest.mark.asyncio
async def test_calculate_taxes(api_client: AsyncClient) -> None:
    response = await api_client.post(
        "/api/calculations/taxes", json={"grossPay": "1000", "payPeriod": "biweekly"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["federal"] == "120.00"
    assert data["socialSecurity"] == "62.00"
    assert data["medicare"] == "14.50"
    assert data["total"] == "246.50"
    assert data["annualizedPay"] == "26000"
    assert data["federalRate"] == "0.12"


@pytest.mark.asyncio
async def test_calculate_taxes_rejects_negative(api_client: AsyncClient) -> None:
    response = await api_client.post("/api/calculations/taxes", json={"grossPay": "-1"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_validate(api_client: AsyncClient, paystub_request: dict) -> None:
    del paystub_request["employeeSSN"]

    response = await api_client.post("/api/documents/paystub/validate", json=paystub_request)

    assert response.status_code == 200
    assert response.json() == {
        "isValid": False,
        "errors": ["missing field: employeeSSN"],
        "warnings": [],
    }


@pytest.mark.asyncio
async def test_validate_reports_nan_amount(api_client: AsyncClient, paystub_request: dict) -> None:
    paystub_request["grossPay"] = "NaN"

    response = await api_client.post("/api/documents/paystub/validate", json=paystub_request)

    assert response.status_code == 200
    assert response.json()["errors"] == ["invalid field: grossPay"]


@pytest.mark.asyncio
async def test_unknown_type_is_404(api_client: AsyncClient) -> None:
    response = await api_client.post("/api/documents/passport/validate", json={})

    assert response.status_code == 404
    assert response.json()["detail"] == "Template not found for document type: passport"


@pytest.mark.asyncio
async def test_wizard_advance(api_client: AsyncClient, paystub_request: dict) -> None:
    response = await api_client.post(
        "/api/documents/paystub/wizard",
        json={"step": "identity", "action": "advance", "data": paystub_request},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["step"] == "counterparty"
    assert data["moved"] is True
    assert data["missingFields"] == []


@pytest.mark.asyncio
async def test_wizard_blocked(api_client: AsyncClient) -> None:
    response = await api_client.post(
        "/api/documents/w2/wizard",
        json={"step": "identity", "action": "advance", "data": {"employeeName": "Jane"}},
    )

    data = response.json()
    assert data["step"] == "identity"
    assert data["moved"] is False
    assert "missing field: employeeSSN" in data["missingFields"]


@pytest.mark.asyncio
async def test_wizard_unknown_step(api_client: AsyncClient) -> None:
    response = await api_client.post(
        "/api/documents/w2/wizard", json={"step": "checkout", "action": "status"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_preview(api_client: AsyncClient, paystub_request: dict) -> None:
    response = await api_client.post("/api/documents/paystub/preview", json=paystub_request)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "PAYROLL STATEMENT" in response.text
    assert "<label>Net Pay:</label> <span>$1287.00</span>" in response.text


@pytest.mark.asyncio
async def test_preview_validation_error(api_client: AsyncClient) -> None:
    response = await api_client.post("/api/documents/paystub/preview", json={})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["errors"][0] == "missing field: employeeName"
    assert detail["message"].startswith("Validation failed: ")


@pytest.mark.asyncio
async def test_generate_requires_session(api_client: AsyncClient, paystub_request: dict) -> None:
    response = await api_client.post("/api/documents/paystub/generate", json=paystub_request)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_generate_records_history(
    api_client: AsyncClient, session_token: str, paystub_request: dict
) -> None:
    headers = {"X-Session-Token": session_token}

    response = await api_client.post(
        "/api/documents/paystub/generate", json=paystub_request, headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["document"]["filename"] == "paystub-jane-doe-2024-03-15.html"
    assert data["document"]["encoding"] == "utf-8"
    assert data["metadata"]["qualityScore"] == 100
    assert data["payment"]["amount"] == "9.99"
    assert data["payment"]["confirmation"].startswith("PAY-")

    history = await api_client.get("/api/history", headers=headers)
    items = history.json()["items"]
    assert history.json()["total"] == 1
    assert items[0]["id"] == data["metadata"]["documentId"]
    assert items[0]["name"] == "Paystub - Jane Doe (2024-03-15)"
    assert items[0]["type"] == "paystub"
    assert "createdAt" in items[0]


@pytest.mark.asyncio
async def test_generate_invalid_skips_payment_and_history(
    api_client: AsyncClient, session_token: str
) -> None:
    headers = {"X-Session-Token": session_token}

    response = await api_client.post("/api/documents/w2/generate", json={}, headers=headers)

    assert response.status_code == 422
    history = await api_client.get("/api/history", headers=headers)
    assert history.json()["total"] == 0


@pytest.mark.asyncio
async def test_generate_xlsx_is_base64(
    api_client: AsyncClient, session_token: str, w2_request: dict
) -> None:
    response = await api_client.post(
        "/api/documents/w2/generate?format=xlsx",
        json=w2_request,
        headers={"X-Session-Token": session_token},
    )

    document = response.json()["document"]
    assert document["encoding"] == "base64"
    assert base64.b64decode(document["content"])[:2] == b"PK"


@pytest.mark.asyncio
async def test_download_attachment(api_client: AsyncClient, bank_request: dict) -> None:
    response = await api_client.post(
        "/api/documents/bank_statement/download?format=json", json=bank_request
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.headers["content-disposition"] == (
        'attachment; filename="bank-statement-jane-doe.json"'
    )
    assert response.json()["header"]["documentTitle"] == "ACCOUNT STATEMENT"


@pytest.mark.asyncio
async def test_clear_history(
    api_client: AsyncClient, session_token: str, bank_request: dict
) -> None:
    headers = {"X-Session-Token": session_token}
    await api_client.post(
        "/api/documents/bank_statement/generate", json=bank_request, headers=headers
    )

    response = await api_client.delete("/api/history", headers=headers)

    assert response.json() == {"removed": 1}
    history = await api_client.get("/api/history", headers=headers)
    assert history.json()["items"] == []


@pytest.mark.asyncio
async def test_history_requires_session(api_client: AsyncClient) -> None:
    response = await api_client.get("/api/history")
    assert response.status_code == 401
