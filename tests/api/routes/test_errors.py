"""Testes da tradução de erros de domínio para HTTP."""

from __future__ import annotations

import pytest

from api.routes.errors import error_body, status_code_for
from utils.errors import (
    AlreadyExistsError,
    GatewayError,
    InvalidAddressError,
    InvalidMediaError,
    NotConnectedError,
    PersistenceError,
    TenantNotFoundError,
    TransportError,
)


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (NotConnectedError("x"), 409),
        (InvalidAddressError("x"), 400),
        (InvalidMediaError("x"), 400),
        (AlreadyExistsError("x"), 409),
        (TenantNotFoundError("x"), 404),
        (TransportError("x"), 502),
        (PersistenceError("x"), 503),
        (GatewayError("x"), 500),
    ],
)
def test_status_code_for(error, expected) -> None:
    assert status_code_for(error) == expected


def test_error_codes_are_stable() -> None:
    assert NotConnectedError.error_code == "not_connected"
    assert PersistenceError("x", tenant_id="acme").tenant_id == "acme"
    assert isinstance(PersistenceError("x"), RuntimeError)


def test_error_body() -> None:
    assert error_body("not_connected", "msg") == {
        "success": False,
        "error": "not_connected",
        "message": "msg",
    }
