"""Testes do protocol client loopback (desenvolvimento)."""

from __future__ import annotations

import asyncio

import pytest

from app.infra.whatsapp import LoopbackClient
from app.infra.whatsapp.loopback_client import LOOPBACK_ACCOUNT_ID
from app.sessions.events import (
    Closed,
    CredsUpdated,
    MessageReceived,
    Opened,
    PairingChallengeIssued,
)


@pytest.fixture
def events() -> list:
    return []


async def test_connect_with_credentials_opens(events) -> None:
    client = LoopbackClient("acme", b"saved", events.append)

    await client.connect()

    assert events == [Opened(account_id=LOOPBACK_ACCOUNT_ID)]


async def test_connect_without_credentials_issues_challenge_then_pairs(events) -> None:
    client = LoopbackClient("acme", b"", events.append, auto_pair_seconds=0.01)

    await client.connect()
    assert isinstance(events[0], PairingChallengeIssued)
    assert events[0].token.startswith("loopback-")

    await asyncio.sleep(0.05)

    assert isinstance(events[1], CredsUpdated)
    assert events[1].credentials == b"loopback:acme"
    assert isinstance(events[2], Opened)


async def test_close_cancels_auto_pair(events) -> None:
    client = LoopbackClient("acme", b"", events.append, auto_pair_seconds=0.05)

    await client.connect()
    await client.close()
    await asyncio.sleep(0.1)

    assert len(events) == 1


async def test_send_records_messages(events) -> None:
    client = LoopbackClient("acme", b"saved", events.append)

    text_id = await client.send_text("5511999998888@s.whatsapp.net", "Olá")
    media_id = await client.send_media(
        "5511999998888@s.whatsapp.net", "image", b"123", "a.jpg", "legenda"
    )

    assert text_id != media_id
    assert [m.kind for m in client.sent] == ["text", "image"]
    assert client.sent[1].size_bytes == 3


async def test_send_after_close_raises(events) -> None:
    client = LoopbackClient("acme", b"saved", events.append)
    await client.close()

    with pytest.raises(ConnectionError):
        await client.send_text("5511999998888@s.whatsapp.net", "Olá")


def test_simulation_helpers(events) -> None:
    client = LoopbackClient("acme", b"saved", events.append)

    client.simulate_inbound({"key": {"remoteJid": "x@s.whatsapp.net"}})
    client.simulate_drop(401, "logged_out")

    assert isinstance(events[0], MessageReceived)
    assert events[1] == Closed(status_code=401, reason="logged_out")
