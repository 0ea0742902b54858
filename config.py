"""Configurações centrais da aplicação Flask."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _repair_surrogates(value: str) -> str:
    """Reinterpreta variáveis com caracteres substitutos oriundos do Windows."""

    # Comentário: em ambientes Windows, variáveis com caracteres fora de ASCII
    # podem chegar como "surrogateescape" (\udc80-\udcff). Reconstruímos os
    # bytes originais e decodificamos usando codificações compatíveis.
    if not any("\udc80" <= char <= "\udcff" for char in value):
        return value

    raw_bytes = value.encode("utf-8", "surrogateescape")
    for encoding in ("utf-8", sys.getfilesystemencoding() or "utf-8", "latin-1"):
        try:
            return raw_bytes.decode(encoding)
        except UnicodeDecodeError:
            continue

    return raw_bytes.decode("utf-8", "ignore")


def _env_path(name: str, default: Path) -> Path:
    """Lê um caminho do ambiente, usando ``default`` quando não definido."""

    value = os.getenv(name)
    if not value:
        return default
    return Path(_repair_surrogates(value)).expanduser()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return default


class Config:
    """Configuração padrão com valores voltados ao ambiente local."""

    # Comentário: o diretório base é calculado para facilitar o uso em qualquer SO.
    BASE_DIR = Path(__file__).resolve().parent

    # Comentário: pasta onde ficam o documento principal, o legado e os backups.
    CONTENT_DATA_DIR = _env_path("CONTENT_DATA_DIR", BASE_DIR / "data")

    CONTENT_FILE = _env_path("CONTENT_FILE", CONTENT_DATA_DIR / "content-v2.json")

    # Comentário: arquivo da primeira geração, somente lido para a migração.
    LEGACY_CONTENT_FILE = _env_path(
        "LEGACY_CONTENT_FILE", CONTENT_DATA_DIR / "content.json"
    )

    CONTENT_BACKUP_DIR = _env_path("CONTENT_BACKUP_DIR", CONTENT_DATA_DIR / "backups")

    # Comentário: quantidade máxima de cópias de segurança mantidas em disco.
    CONTENT_BACKUP_RETENTION = _env_int("CONTENT_BACKUP_RETENTION", 10)
