"""Testes de config.logging: tenant_id nos registros, máscara e fallback."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    CorrelationIdFilter,
    configure_logging,
    create_json_formatter,
    log_fallback,
    mask_address,
)


def _record(**attrs: object) -> logging.LogRecord:
    record = logging.LogRecord("gateway", logging.INFO, "", 0, "evento", (), None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_single_handler_with_correlation_filter(self, restore_root_logger) -> None:
        restore_root_logger.handlers = [logging.NullHandler(), logging.NullHandler()]

        configure_logging(level="debug", correlation_id_getter=lambda: "corr-1")

        [handler] = restore_root_logger.handlers
        assert restore_root_logger.level == logging.DEBUG
        assert any(isinstance(f, CorrelationIdFilter) for f in handler.filters)

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")


class TestCorrelationIdFilter:
    def test_injects_service_correlation_and_empty_tenant(self) -> None:
        record = _record()

        assert CorrelationIdFilter("wa-gateway", lambda: "corr-123").filter(record) is True
        assert record.service == "wa-gateway"
        assert record.correlation_id == "corr-123"
        assert record.tenant_id == ""

    def test_keeps_tenant_and_correlation_from_extra(self) -> None:
        record = _record(tenant_id="loja-1", correlation_id="explicit")

        CorrelationIdFilter("svc", lambda: "from-getter").filter(record)

        assert record.tenant_id == "loja-1"
        assert record.correlation_id == "explicit"

    def test_json_output_carries_tenant_id(self) -> None:
        record = _record(tenant_id="loja-1")
        CorrelationIdFilter("svc").filter(record)

        payload = json.loads(create_json_formatter().format(record))

        assert payload["tenant_id"] == "loja-1"
        assert payload["message"] == "evento"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "gateway"


class TestLogFallback:
    def test_component_reason_and_tenant_in_extra(self) -> None:
        logger = MagicMock(spec=logging.Logger)

        log_fallback(logger, "profile_lookup", "TimeoutError", "loja-1")

        args, kwargs = logger.info.call_args
        assert args == ("Fallback applied for %s", "profile_lookup")
        assert kwargs["extra"] == {
            "fallback_used": True,
            "component": "profile_lookup",
            "reason": "TimeoutError",
            "tenant_id": "loja-1",
        }

    def test_optional_fields_omitted(self) -> None:
        logger = MagicMock(spec=logging.Logger)

        log_fallback(logger, "media_download")

        extra = logger.info.call_args.kwargs["extra"]
        assert "reason" not in extra
        assert "tenant_id" not in extra


class TestMaskAddress:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("5511999998888@s.whatsapp.net", "***8888"),
            ("5511999998888", "***8888"),
            ("123", "***"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_keeps_only_last_digits(self, value, expected) -> None:
        assert mask_address(value) == expected
