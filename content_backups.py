"""Cópias de segurança do documento principal antes de cada gravação."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import json
import logging
from pathlib import Path
import re
from typing import Any, Dict, List, Optional

from content.default_content import isoformat
from content_errors import BackupNotFoundError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = 10

BACKUP_PREFIX = "content-"
BACKUP_SUFFIX = ".json"

_SLOT_PATTERN = re.compile(r"^content-[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9-]+Z\.json$")
_SLOT_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"


def slot_name(moment: datetime) -> str:
    """Nome do arquivo de backup com ``:`` e ``.`` trocados por ``-``."""

    stamp = moment.astimezone(timezone.utc).isoformat(timespec="microseconds")
    stamp = stamp.replace("+00:00", "Z")
    return f"{BACKUP_PREFIX}{re.sub(r'[:.]', '-', stamp)}{BACKUP_SUFFIX}"


def is_slot_name(name: str) -> bool:
    return bool(_SLOT_PATTERN.match(name))


def _slot_moment(name: str) -> Optional[datetime]:
    stamp = name[len(BACKUP_PREFIX) : -len(BACKUP_SUFFIX)]
    try:
        return datetime.strptime(stamp, _SLOT_TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


@dataclass(frozen=True)
class BackupInfo:
    """Resumo de uma cópia de segurança existente."""

    id: str
    size: int
    created: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "size": self.size, "created": self.created}


class BackupManager:
    """Mantém o diretório de backups do documento principal.

    Somente o armazenamento de conteúdo chama ``snapshot`` e sempre dentro da
    trava de escrita do documento, de modo que a criação e a limpeza de cópias
    nunca concorrem entre si.
    """

    def __init__(
        self,
        source: Path,
        directory: Path,
        retention: int = DEFAULT_RETENTION,
    ) -> None:
        self.source = Path(source)
        self.directory = Path(directory)
        self.retention = max(int(retention), 1)
        self._last_moment: Optional[datetime] = None

    def slot_names(self) -> List[str]:
        """Nomes das cópias existentes, da mais recente para a mais antiga."""

        if not self.directory.is_dir():
            return []
        names = [
            entry.name
            for entry in self.directory.iterdir()
            if entry.name.startswith(BACKUP_PREFIX)
            and entry.name.endswith(BACKUP_SUFFIX)
            and entry.is_file()
        ]
        return sorted(names, reverse=True)

    def _next_moment(self, existing: List[str]) -> datetime:
        moment = datetime.now(timezone.utc)
        floor = self._last_moment
        if existing:
            newest = _slot_moment(existing[0])
            if newest is not None and (floor is None or newest > floor):
                floor = newest
        if floor is not None and moment <= floor:
            moment = floor + timedelta(microseconds=1)
        return moment

    def snapshot(self) -> Optional[str]:
        """Copia o documento principal para um novo slot e retorna o nome.

        Retorna ``None`` quando ainda não há documento principal ou quando a
        cópia falha. Falhas são registradas e nunca impedem a gravação.
        """

        try:
            payload = self.source.read_bytes()
        except FileNotFoundError:
            return None
        except OSError:
            logger.exception("Falha ao ler %s para criar o backup", self.source)
            return None

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            existing = self.slot_names()
            moment = self._next_moment(existing)
            target = self.directory / slot_name(moment)
            while target.exists():
                moment += timedelta(microseconds=1)
                target = self.directory / slot_name(moment)
            target.write_bytes(payload)
        except OSError:
            logger.exception("Falha ao criar backup em %s", self.directory)
            return None

        self._last_moment = moment
        logger.info("Backup criado: %s", target.name)
        self.prune()
        return target.name

    def prune(self) -> List[str]:
        """Remove as cópias além da retenção e retorna os nomes excluídos."""

        try:
            names = self.slot_names()
        except OSError:
            logger.warning("Não foi possível listar %s", self.directory, exc_info=True)
            return []

        removed = []
        for name in names[self.retention :]:
            try:
                (self.directory / name).unlink()
            except FileNotFoundError:
                continue
            except OSError:
                logger.warning("Não foi possível excluir o backup %s", name, exc_info=True)
                continue
            removed.append(name)

        if removed:
            logger.debug("Backups antigos removidos: %s", ", ".join(removed))
        return removed

    def list_backups(self) -> List[BackupInfo]:
        backups = []
        for name in self.slot_names():
            try:
                stat = (self.directory / name).stat()
            except FileNotFoundError:
                continue
            moment = _slot_moment(name)
            if moment is None:
                moment = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
            backups.append(BackupInfo(id=name, size=stat.st_size, created=isoformat(moment)))
        return backups

    def load_backup(self, backup_id: str) -> Any:
        """Lê o conteúdo JSON de uma cópia de segurança."""

        if not is_slot_name(backup_id):
            raise BackupNotFoundError(f"Backup inexistente: {backup_id}")

        path = self.directory / backup_id
        try:
            raw = path.read_bytes()
        except FileNotFoundError as error:
            raise BackupNotFoundError(f"Backup inexistente: {backup_id}") from error
        except OSError as error:
            raise StorageError(f"Não foi possível ler o backup {backup_id}: {error}") from error

        try:
            return json.loads(raw)
        except ValueError as error:
            raise StorageError(f"Conteúdo inválido no backup {backup_id}: {error}") from error
