"""Política de endereços (números de telefone) aceitos pelo gateway.

Aplicada tanto a destinatários de envio quanto a remetentes de
mensagens recebidas.
"""

from __future__ import annotations

import re

from config.settings import AddressPolicySettings
from utils.errors import InvalidAddressError

USER_JID_SUFFIX = "@s.whatsapp.net"
BRAZIL_COUNTRY_CODE = "55"
_MIN_DDD = 11
_MAX_DDD = 99
_NON_DIGITS = re.compile(r"\D+")


def normalize_address(raw: str) -> str:
    """Reduz endereço a dígitos (aceita jid, "+55 (11) 9...", etc.)."""
    user = raw.split("@", 1)[0].split(":", 1)[0]
    return _NON_DIGITS.sub("", user)


def to_jid(digits: str) -> str:
    """Converte dígitos em jid de usuário."""
    return f"{digits}{USER_JID_SUFFIX}"


def _matching_country_code(digits: str, policy: AddressPolicySettings) -> str | None:
    # Prefixo mais longo primeiro ("1" não deve mascarar "1242")
    for code in sorted(policy.allowed_country_codes, key=len, reverse=True):
        if digits.startswith(code):
            return code
    return None


def is_address_allowed(digits: str, policy: AddressPolicySettings) -> bool:
    """Verifica país, tamanho e DDD (para o Brasil).

    Args:
        digits: Endereço já normalizado
        policy: Política vigente

    Returns:
        True se o endereço passa na política
    """
    if not digits.isdigit():
        return False
    if not policy.min_length <= len(digits) <= policy.max_length:
        return False

    country = _matching_country_code(digits, policy)
    if country is None:
        return False

    if country == BRAZIL_COUNTRY_CODE:
        ddd = int(digits[2:4])
        return _MIN_DDD <= ddd <= _MAX_DDD

    return True


def is_sender_allowed(digits: str, policy: AddressPolicySettings) -> bool:
    """Allow-list de remetentes (vazia = todos passam)."""
    if not policy.allowed_senders:
        return True
    return digits in policy.allowed_senders


def validate_address(raw: str, policy: AddressPolicySettings) -> str:
    """Normaliza e valida endereço de destino.

    Raises:
        InvalidAddressError: Se o endereço não passa na política

    Returns:
        Endereço normalizado (apenas dígitos)
    """
    digits = normalize_address(raw or "")
    if not digits:
        raise InvalidAddressError("Endereço vazio ou sem dígitos")
    if not is_address_allowed(digits, policy):
        raise InvalidAddressError("Endereço fora da política de números aceitos")
    return digits
