"""Validators — políticas de endereço e de mídia aplicadas na borda.

Estrutura:
- whatsapp/: números aceitos (país, tamanho, DDD) e arquivos de mídia
"""

__all__: list[str] = []
