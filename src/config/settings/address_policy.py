"""Settings da política de endereços (números aceitos)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


def _split_csv(raw: str) -> frozenset[str]:
    return frozenset(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class AddressPolicySettings:
    """Política aplicada a remetentes e destinatários.

    Attributes:
        allowed_country_codes: Prefixos de país aceitos (ex: {"55"})
        min_length: Quantidade mínima de dígitos
        max_length: Quantidade máxima de dígitos
        allowed_senders: Allow-list de remetentes (vazia = todos)
    """

    allowed_country_codes: frozenset[str] = frozenset({"55"})
    min_length: int = 12
    max_length: int = 13
    allowed_senders: frozenset[str] = field(default_factory=frozenset)

    def validate(self) -> list[str]:
        """Valida a política de endereços."""
        errors: list[str] = []

        if not self.allowed_country_codes:
            errors.append("ALLOWED_COUNTRY_CODES não pode ser vazio")

        if any(not code.isdigit() for code in self.allowed_country_codes):
            errors.append("ALLOWED_COUNTRY_CODES deve conter apenas dígitos")

        if self.min_length < 1 or self.max_length < self.min_length:
            errors.append("ADDRESS_MIN_LENGTH/ADDRESS_MAX_LENGTH inconsistentes")

        return errors


def _load_from_env() -> AddressPolicySettings:
    """Carrega AddressPolicySettings a partir de variáveis de ambiente."""
    return AddressPolicySettings(
        allowed_country_codes=_split_csv(os.getenv("ALLOWED_COUNTRY_CODES", "55")),
        min_length=int(os.getenv("ADDRESS_MIN_LENGTH", "12")),
        max_length=int(os.getenv("ADDRESS_MAX_LENGTH", "13")),
        allowed_senders=_split_csv(os.getenv("ALLOWED_SENDERS", "")),
    )


@lru_cache(maxsize=1)
def get_address_policy_settings() -> AddressPolicySettings:
    """Retorna instância cacheada de AddressPolicySettings."""
    return _load_from_env()
