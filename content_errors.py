"""Exceções levantadas pelo armazenamento de conteúdo do site."""

from __future__ import annotations

from typing import Iterable


class ContentStoreError(RuntimeError):
    """Base para as falhas do armazenamento de conteúdo."""


class ValidationError(ContentStoreError):
    """O documento não respeita a estrutura esperada e não foi aplicado."""

    def __init__(self, errors: Iterable[str], message: str = "Formato de dados inválido.") -> None:
        self.errors = list(errors)
        detail = "; ".join(self.errors)
        super().__init__(f"{message} {detail}".strip())


class StorageError(ContentStoreError):
    """Falha de leitura ou escrita do documento principal em disco."""


class MigrationError(ContentStoreError):
    """O documento legado existe mas não pôde ser interpretado."""


class BackupNotFoundError(ContentStoreError):
    """A cópia de segurança solicitada não existe."""
