"""Settings, dependencies, error payloads and log formatting"""
import json
import logging
from decimal import Decimal

from app.config import Settings, settings
from app.core.deps import get_conversion_engine
from app.core.errors import InvalidAmount, InvalidRateConfiguration
from app.core.logging import JsonFormatter, init_logging
from app.services.conversion_engine import PairDirection, parse_supported_pairs
from app.services.rate_catalog import InMemoryRateCatalog, RateInvariant


def test_default_settings_describe_a_usable_deployment() -> None:
    assert settings.BRIDGE_CURRENCY == "USDT"
    assert parse_supported_pairs(settings.SUPPORTED_PAIRS) == {
        ("BRL", "BOB"): PairDirection.FORWARD,
        ("BOB", "BRL"): PairDirection.REVERSE,
    }
    assert RateInvariant(settings.RATE_INVARIANT) is RateInvariant.BUY_ABOVE_SELL


def test_settings_read_pairs_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SUPPORTED_PAIRS", '{"USD:EUR": "forward"}')
    monkeypatch.setenv("RATE_INVARIANT", "sell_above_buy")
    custom = Settings()
    assert custom.SUPPORTED_PAIRS == {"USD:EUR": "forward"}
    assert custom.RATE_INVARIANT == "sell_above_buy"


def test_engine_dependency_uses_settings() -> None:
    catalog = InMemoryRateCatalog()
    engine = get_conversion_engine(catalog)
    assert engine.catalog is catalog
    assert engine.list_supported_pairs() == {("BRL", "BOB"), ("BOB", "BRL")}
    assert engine.invariant is RateInvariant.BUY_ABOVE_SELL


def test_error_payload_is_json_safe() -> None:
    payload = InvalidRateConfiguration("BRL", Decimal("4.80"), Decimal("5.00"), "rule").to_dict()
    assert payload["success"] is False
    assert payload["error"] == "invalid_rate_configuration"
    assert payload["context"] == {"currency": "BRL", "buy_rate": "4.80", "sell_rate": "5.00"}
    json.dumps(payload, allow_nan=False)

    payload = InvalidAmount(float("nan")).to_dict()
    assert payload["context"] == {"amount": "nan"}
    json.dumps(payload, allow_nan=False)


def test_json_formatter() -> None:
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "converted %s", ("BRL",), None)
    line = json.loads(JsonFormatter().format(record))
    assert line["level"] == "INFO"
    assert line["logger"] == "app.test"
    assert line["message"] == "converted BRL"


def test_invalid_rate_configuration_maps_to_422() -> None:
    exc = InvalidRateConfiguration("BRL", Decimal("4.80"), Decimal("5.00"), "rule")
    assert exc.status_code == 422


def test_json_formatter_carries_conversion_fields() -> None:
    record = logging.makeLogRecord(
        {
            "name": "app.services.conversion_engine",
            "levelno": logging.INFO,
            "levelname": "INFO",
            "msg": "converted",
            "from_currency": "BRL",
            "to_currency": "BOB",
            "amount": Decimal("1000.00"),
        }
    )
    line = json.loads(JsonFormatter(service="Cambio").format(record))
    assert line["service"] == "Cambio"
    assert line["from_currency"] == "BRL"
    assert line["to_currency"] == "BOB"
    assert line["amount"] == "1000.00"
    assert "args" not in line and "pathname" not in line


def test_init_logging_quiets_database_loggers() -> None:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        init_logging("info", service="Cambio")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.handlers[0].formatter.service == "Cambio"
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
