"""Configuration parsing tests."""

from decimal import Decimal

from src.core.config import DEFAULT_CORS_ORIGINS, Settings


def test_cors_origins_accepts_csv(monkeypatch) -> None:
    """CSV string in env parses into a list of origins."""
    monkeypatch.setenv(
        "CORS_ORIGINS",
        "https://buelldocs.example.com/, http://localhost:3000",
    )
    cfg = Settings()
    assert cfg.cors_origins == [
        "https://buelldocs.example.com",
        "http://localhost:3000",
    ]


def test_cors_origins_accepts_json_array(monkeypatch) -> None:
    """JSON array string in env parses into a deduplicated list."""
    monkeypatch.setenv(
        "CORS_ORIGINS",
        '["http://localhost:3000","http://localhost:3000/","http://127.0.0.1:3000"]',
    )
    cfg = Settings()
    assert cfg.cors_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]


def test_cors_origins_blank_falls_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "  ")
    assert Settings().cors_origins == DEFAULT_CORS_ORIGINS


def test_cors_origins_rejects_invalid_object(monkeypatch) -> None:
    """Invalid values fail with a clear validation error."""
    monkeypatch.setenv("CORS_ORIGINS", '{"invalid":"json"}')
    try:
        Settings()
    except Exception as exc:
        assert "CORS_ORIGINS" in str(exc)
    else:
        raise AssertionError("Expected invalid CORS_ORIGINS to fail")


def test_document_settings_from_env(monkeypatch) -> None:
    """Amounts and delays parse from plain environment strings."""
    monkeypatch.setenv("DOCUMENT_PRICE", "4.99")
    monkeypatch.setenv("GENERATION_DELAY_SECONDS", "0")
    monkeypatch.setenv("DEFAULT_PAY_PERIOD", " SemiMonthly ")

    cfg = Settings()

    assert cfg.document_price == Decimal("4.99")
    assert cfg.generation_delay_seconds == 0
    assert cfg.default_pay_period == "semimonthly"


def test_defaults() -> None:
    cfg = Settings()
    assert cfg.history_namespace == "buelldocs_documents"
    assert cfg.generator_signature == "BuellDocs Professional Document Solutions"
    assert cfg.ss_wage_base == Decimal("168600")
