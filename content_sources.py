"""Escolha da origem do conteúdo exibido em cada seção do site.

O armazenamento local é a origem principal. Um cliente de CMS hospedado pode
ser informado como reserva para seções vazias; ele é sempre recebido como
parâmetro e nunca mesclado ao documento local.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from content_store import ContentStore

logger = logging.getLogger(__name__)

SOURCE_STORE = "store"
SOURCE_FALLBACK = "fallback"


class SectionSource(Protocol):
    """Qualquer origem capaz de devolver os itens de uma seção."""

    def get_section(self, name: str) -> List[Dict[str, Any]]:
        ...


class StoreSource:
    """Adapta o ``ContentStore`` ao protocolo de origens."""

    def __init__(self, store: "ContentStore") -> None:
        """Guarda o armazenamento consultado a cada chamada de ``get_section``."""

        self.store = store

    def get_section(self, name: str) -> List[Dict[str, Any]]:
        return self.store.get_section(name)


def resolve_section(
    name: str,
    primary: SectionSource,
    fallback: Optional[SectionSource] = None,
) -> Tuple[List[Dict[str, Any]], str]:
    """Retorna os itens da seção e o nome da origem utilizada.

    Erros do armazenamento local são propagados; falhas do CMS de reserva são
    registradas e resultam em uma lista vazia.
    """

    items = primary.get_section(name)
    if items or fallback is None:
        return items, SOURCE_STORE

    try:
        fallback_items = list(fallback.get_section(name) or [])
    except Exception:
        logger.warning("Falha ao consultar o CMS de reserva para '%s'", name, exc_info=True)
        return items, SOURCE_STORE

    if fallback_items:
        return fallback_items, SOURCE_FALLBACK
    return items, SOURCE_STORE
