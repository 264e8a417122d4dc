"""Testes do extrator de mensagens recebidas."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from api.normalizers.whatsapp import PLACEHOLDERS, extract_inbound_message, jid_to_address
from app.sessions.models import MessageKind


def _raw(message: dict, **overrides) -> dict:
    raw = {
        "key": {"remoteJid": "5511999998888@s.whatsapp.net", "fromMe": False, "id": "ABC123"},
        "message": message,
        "pushName": "Maria",
        "messageTimestamp": 1_700_000_000,
    }
    raw.update(overrides)
    return raw


class TestJidToAddress:
    @pytest.mark.parametrize(
        ("jid", "expected"),
        [
            ("5511999998888@s.whatsapp.net", "5511999998888"),
            ("5511999998888:7@s.whatsapp.net", "5511999998888"),
            ("120363000000@g.us", "120363000000"),
        ],
    )
    def test_user_part(self, jid, expected) -> None:
        assert jid_to_address(jid) == expected


class TestExtractInboundMessage:
    def test_conversation_text(self) -> None:
        message = extract_inbound_message(_raw({"conversation": "Olá"}))

        assert message.kind is MessageKind.TEXT
        assert message.text == "Olá"
        assert message.sender_address == "5511999998888"
        assert message.push_name == "Maria"
        assert message.message_id == "ABC123"
        assert message.from_me is False
        assert message.timestamp == datetime.fromtimestamp(1_700_000_000, tz=UTC)

    def test_extended_text(self) -> None:
        message = extract_inbound_message(_raw({"extendedTextMessage": {"text": "link"}}))

        assert message.kind is MessageKind.TEXT
        assert message.text == "link"

    def test_image_with_caption(self) -> None:
        message = extract_inbound_message(
            _raw({"imageMessage": {"caption": " foto ", "mimetype": "image/jpeg"}})
        )

        assert message.kind is MessageKind.IMAGE
        assert message.text == "foto"
        assert message.media_mimetype == "image/jpeg"

    @pytest.mark.parametrize(
        ("block", "kind"),
        [
            ("imageMessage", MessageKind.IMAGE),
            ("audioMessage", MessageKind.AUDIO),
            ("videoMessage", MessageKind.VIDEO),
            ("documentMessage", MessageKind.DOCUMENT),
        ],
    )
    def test_media_without_caption_uses_placeholder(self, block, kind) -> None:
        message = extract_inbound_message(_raw({block: {}}))

        assert message.kind is kind
        assert message.text == PLACEHOLDERS[kind]

    def test_document_keeps_filename(self) -> None:
        message = extract_inbound_message(
            _raw({"documentMessage": {"fileName": "contrato.pdf", "mimetype": "application/pdf"}})
        )

        assert message.media_filename == "contrato.pdf"

    def test_ephemeral_wrapper_is_unwrapped(self) -> None:
        message = extract_inbound_message(
            _raw({"ephemeralMessage": {"message": {"conversation": "some"}}})
        )

        assert message.kind is MessageKind.TEXT
        assert message.text == "some"

    def test_unknown_content_is_unsupported(self) -> None:
        message = extract_inbound_message(_raw({"stickerMessage": {}}))

        assert message.kind is MessageKind.UNSUPPORTED
        assert message.text == PLACEHOLDERS[MessageKind.UNSUPPORTED]

    def test_group_and_broadcast_flags(self) -> None:
        group = extract_inbound_message(
            _raw({"conversation": "oi"}, key={"remoteJid": "1203@g.us"})
        )
        status = extract_inbound_message(
            _raw({"conversation": "oi"}, key={"remoteJid": "status@broadcast"})
        )

        assert group.is_group
        assert status.is_broadcast

    def test_optional_fields_missing(self) -> None:
        message = extract_inbound_message(
            {"key": {"remoteJid": "5511999998888@s.whatsapp.net"}, "message": {"conversation": "x"}}
        )

        assert message.push_name is None
        assert message.message_id is None
        assert message.from_me is False

    @pytest.mark.parametrize(
        "raw",
        [
            "not a mapping",
            {"message": {"conversation": "x"}},
            {"key": {"remoteJid": ""}},
            {"key": "invalid"},
        ],
    )
    def test_malformed_payload_raises(self, raw) -> None:
        with pytest.raises(ValueError):
            extract_inbound_message(raw)
