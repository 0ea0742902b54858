"""Leitura e gravação do conteúdo público do site.

O conteúdo fica em um único documento JSON por site. A leitura carrega o
documento principal ou, na ausência dele, migra o arquivo legado ou gera o
conteúdo padrão. A gravação valida o documento, cria uma cópia de segurança do
arquivo atual e substitui o principal de forma atômica.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
import tempfile
import threading
from typing import Any, Dict, List, Mapping, Optional, Type

from content.default_content import SECTION_NAMES, build_default_document, utcnow_iso
from content_backups import DEFAULT_RETENTION, BackupInfo, BackupManager
from content_errors import (
    BackupNotFoundError,
    ContentStoreError,
    MigrationError,
    StorageError,
    ValidationError,
)
from content_migration import DocumentVariant, detect_variant, migrate
from content_validation import collect_errors

__all__ = [
    "BackupNotFoundError",
    "ContentStore",
    "ContentStoreError",
    "MigrationError",
    "StorageError",
    "ValidationError",
    "WriteResult",
    "load_content",
    "save_content",
]

logger = logging.getLogger(__name__)

# Comentário: uma trava por arquivo, compartilhada por todas as instâncias.
_DOCUMENT_LOCKS: Dict[str, threading.RLock] = {}
_DOCUMENT_LOCKS_GUARD = threading.Lock()


def document_lock(path: Path) -> threading.RLock:
    """Devolve a trava reentrante do arquivo, criando-a no primeiro uso.

    O caminho é resolvido antes da consulta, então instâncias diferentes que
    apontam para o mesmo arquivo recebem a mesma trava.
    """

    key = str(Path(path).resolve())
    with _DOCUMENT_LOCKS_GUARD:
        return _DOCUMENT_LOCKS.setdefault(key, threading.RLock())


def serialize_content(data: Any) -> bytes:
    """Converte o documento no JSON indentado gravado em disco."""

    try:
        serialized = json.dumps(data, ensure_ascii=False, indent=2, allow_nan=False)
    except (TypeError, ValueError) as error:
        raise ValidationError([f"o documento não pode ser convertido para JSON: {error}"]) from error
    return (serialized + "\n").encode("utf-8")


def load_content(path: Path, error_class: Type[ContentStoreError] = StorageError) -> Optional[Any]:
    """Carrega um arquivo JSON, retornando ``None`` quando ele não existe."""

    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        return None
    except OSError as error:
        raise error_class(f"Não foi possível ler o arquivo {path}: {error}") from error

    try:
        return json.loads(raw)
    except ValueError as error:
        raise error_class(f"Conteúdo inválido no arquivo {path}: {error}") from error


def save_content(path: Path, payload: bytes) -> None:
    """Substitui o arquivo por ``payload`` sem expor gravações parciais."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    descriptor, temporary = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(descriptor, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temporary, path)
    except BaseException:
        try:
            os.unlink(temporary)
        except FileNotFoundError:
            pass
        raise


@dataclass
class WriteResult:
    """Documento efetivamente gravado e o backup criado antes dele."""

    document: Dict[str, Any]
    backup: Optional[str]


class ContentStore:
    """Único ponto de acesso ao documento de conteúdo do site."""

    def __init__(
        self,
        path: Path,
        legacy_path: Optional[Path] = None,
        backup_dir: Optional[Path] = None,
        retention: int = DEFAULT_RETENTION,
    ) -> None:
        self.path = Path(path)
        self.legacy_path = Path(legacy_path) if legacy_path else self.path.with_name("content.json")
        backup_dir = Path(backup_dir) if backup_dir else self.path.parent / "backups"
        self.backups = BackupManager(self.path, backup_dir, retention=retention)
        self._lock = document_lock(self.path)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ContentStore":
        """Cria o armazenamento a partir das chaves ``CONTENT_*`` da aplicação."""

        return cls(
            path=Path(config["CONTENT_FILE"]),
            legacy_path=Path(config["LEGACY_CONTENT_FILE"]),
            backup_dir=Path(config["CONTENT_BACKUP_DIR"]),
            retention=int(config.get("CONTENT_BACKUP_RETENTION", DEFAULT_RETENTION)),
        )

    # Leitura -----------------------------------------------------------------

    def read(self) -> Dict[str, Any]:
        """Retorna o documento atual, criando-o na primeira leitura."""

        raw = self._read_primary()
        if raw is None or detect_variant(raw) is DocumentVariant.LEGACY:
            with self._lock:
                # Comentário: outra thread pode ter inicializado o arquivo.
                raw = self._read_primary()
                if raw is None:
                    return self._initialize()
                if detect_variant(raw) is DocumentVariant.LEGACY:
                    return self._upgrade_primary(raw)
        return self._checked(raw)

    def get_section(self, name: str) -> List[Dict[str, Any]]:
        if name not in SECTION_NAMES:
            raise KeyError(name)
        return list(self.read()["data"][name])

    def _read_primary(self) -> Optional[Dict[str, Any]]:
        raw = load_content(self.path, StorageError)
        if raw is not None and not isinstance(raw, dict):
            raise ValidationError(["o documento precisa ser um objeto JSON"])
        return raw

    def _checked(self, document: Dict[str, Any]) -> Dict[str, Any]:
        errors = collect_errors(document)
        if errors:
            logger.error("Documento %s com estrutura inválida: %s", self.path, errors)
            raise ValidationError(errors, "Documento salvo com estrutura inválida.")
        return document

    def _initialize(self) -> Dict[str, Any]:
        legacy = load_content(self.legacy_path, MigrationError)
        if legacy is None:
            document = build_default_document()
            logger.info("Conteúdo padrão criado em %s", self.path)
        elif not isinstance(legacy, dict):
            raise MigrationError(f"O arquivo legado {self.legacy_path} não contém um objeto JSON.")
        elif detect_variant(legacy) is DocumentVariant.V2:
            errors = collect_errors(legacy)
            if errors:
                raise MigrationError(
                    f"O arquivo {self.legacy_path} está incompleto: " + "; ".join(errors)
                )
            document = legacy
            logger.info("Conteúdo 2.0 copiado de %s", self.legacy_path)
        else:
            document = migrate(legacy)
            logger.info("Conteúdo legado migrado de %s", self.legacy_path)

        self._persist(document)
        return document

    def _upgrade_primary(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        document = migrate(raw)
        self.backups.snapshot()
        self._persist(document)
        logger.info("Documento %s convertido para a versão %s", self.path, document["version"])
        return document

    # Gravação ----------------------------------------------------------------

    def write(self, document: Any) -> WriteResult:
        """Valida, faz o backup e grava o documento como o novo principal.

        Levanta ``ValidationError`` sem tocar no disco quando a estrutura é
        inválida e ``StorageError`` quando o arquivo principal não pode ser
        gravado. Falhas no backup apenas geram log.
        """

        with self._lock:
            errors = collect_errors(document)
            if errors:
                raise ValidationError(errors)

            stored = copy.deepcopy(dict(document))
            stored["lastUpdated"] = utcnow_iso()
            payload = serialize_content(stored)

            backup = self.backups.snapshot()
            self._persist_payload(payload)

        logger.info("Conteúdo salvo em %s (backup: %s)", self.path, backup)
        return WriteResult(document=stored, backup=backup)

    def restore(self, backup_id: str) -> WriteResult:
        """Regrava o conteúdo de uma cópia de segurança pelo fluxo normal."""

        with self._lock:
            document = self.backups.load_backup(backup_id)
            result = self.write(document)
        logger.info("Backup %s restaurado", backup_id)
        return result

    def list_backups(self) -> List[BackupInfo]:
        return self.backups.list_backups()

    def _persist(self, document: Dict[str, Any]) -> None:
        self._persist_payload(serialize_content(document))

    def _persist_payload(self, payload: bytes) -> None:
        try:
            save_content(self.path, payload)
        except OSError as error:
            logger.error("Falha ao gravar %s: %s", self.path, error)
            raise StorageError(f"Não foi possível gravar o conteúdo em {self.path}: {error}") from error
