"""Conversão do conteúdo da primeira geração para o formato 2.0.0.

O documento legado guarda as quatro seções diretamente na raiz, sem ``id``,
sem objetos de mídia e sem ``status``. A migração é feita uma única vez: o
armazenamento persiste o resultado logo em seguida.

Os ids sintéticos são gerados com ``uuid4`` e, portanto, mudam a cada
execução. Duas migrações do mesmo arquivo produzem documentos válidos, porém
com ids diferentes; nada no sistema deve depender da estabilidade deles.
"""

from __future__ import annotations

import copy
from enum import Enum
import re
from typing import Any, Dict, List, Mapping, Optional
import uuid

from content.default_content import (
    CURRENT_VERSION,
    DEFAULT_SCHEMA,
    DEFAULT_SETTINGS,
    SECTION_NAMES,
    utcnow_iso,
)
from content_errors import MigrationError
from content_validation import collect_errors

SERVICE_ICONS = ("🔍", "📋", "⚙️", "📈", "🎯")
DEFAULT_SERVICE_ICON = "⚙️"

STAT_ICONS = ("📊", "🏢", "🌱", "⭐", "💼")
DEFAULT_STAT_ICON = "📊"

DEFAULT_TREND_PERIOD = "同比去年"
DEFAULT_ARTICLE_TITLE = "未命名文章"
DEFAULT_ARTICLE_CATEGORY = "行业趋势"
DEFAULT_AUTHOR = {"name": "Methas 研究团队", "avatar": "/images/authors/team.jpg"}

SERVICE_PLACEHOLDER = "/api/placeholder/800/600"
ARTICLE_PLACEHOLDER = "/api/placeholder/800/450"

_NUMBER_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]+)?")


class DocumentVariant(Enum):
    """Geração do documento, decidida uma única vez ao carregar o JSON."""

    LEGACY = "legacy"
    V2 = "v2"


def detect_variant(raw: Mapping[str, Any]) -> DocumentVariant:
    """Identifica a geração pelo campo ``version`` (ausente = legado)."""

    version = raw.get("version")
    if version is None or version == "":
        return DocumentVariant.LEGACY

    major = str(version).strip().lstrip("vV").split(".", 1)[0]
    try:
        if int(major) < 2:
            return DocumentVariant.LEGACY
    except ValueError:
        # Comentário: versões ilegíveis ficam a cargo do validador.
        pass
    return DocumentVariant.V2


def _synthetic_id(prefix: str) -> str:
    return f"{prefix}_legacy_{uuid.uuid4().hex}"


def _timestamps(now: str) -> Dict[str, str]:
    return {"createdAt": now, "updatedAt": now}


def split_features(features: Any) -> List[str]:
    """Converte ``"a, b, c"`` em ``["a", "b", "c"]`` descartando vazios."""

    if isinstance(features, list):
        return list(features)
    if not features:
        return []
    return [part.strip() for part in str(features).split(",") if part.strip()]


def split_stat_value(value: Any) -> tuple[str, str]:
    """Separa a parte numérica da unidade (``"85%"`` → ``("85", "%")``)."""

    text = "" if value is None else str(value).strip()
    numbers = _NUMBER_PATTERN.findall(text)
    if not numbers:
        return text, ""
    unit = _NUMBER_PATTERN.sub("", text).strip()
    return "".join(numbers), unit


def _service_icon(step: Any) -> str:
    if isinstance(step, int) and not isinstance(step, bool) and 1 <= step <= len(SERVICE_ICONS):
        return SERVICE_ICONS[step - 1]
    return DEFAULT_SERVICE_ICON


def _stat_icon(index: int) -> str:
    if 0 <= index < len(STAT_ICONS):
        return STAT_ICONS[index]
    return DEFAULT_STAT_ICON


def _migrate_hero(item: Mapping[str, Any], index: int, now: str) -> Dict[str, Any]:
    image = item.get("image")
    if isinstance(image, Mapping):
        image = image.get("url")
    return {
        "id": _synthetic_id("hero"),
        "title": item.get("title"),
        "subtitle": item.get("subtitle"),
        "buttonText": item.get("buttonText"),
        "image": {
            "url": image,
            "alt": item.get("title"),
            "width": 1920,
            "height": 1080,
        },
        "priority": index + 1,
        "status": "published",
        **_timestamps(now),
    }


def _migrate_service(item: Mapping[str, Any], index: int, now: str) -> Dict[str, Any]:
    step = item.get("step")
    if step is None:
        step = index + 1
    return {
        "id": _synthetic_id("service"),
        "step": step,
        "title": item.get("title"),
        "description": item.get("description"),
        "features": split_features(item.get("features")),
        "image": {
            "url": SERVICE_PLACEHOLDER,
            "alt": item.get("title"),
            "width": 800,
            "height": 600,
        },
        "icon": _service_icon(step),
        "mediaGallery": [],
        "status": "published",
        **_timestamps(now),
    }


def _migrate_article(item: Mapping[str, Any], index: int, now: str) -> Dict[str, Any]:
    title = item.get("title") or DEFAULT_ARTICLE_TITLE
    excerpt = item.get("excerpt") or item.get("summary") or ""
    tags = list(item.get("tags") or [])
    return {
        "id": _synthetic_id("article"),
        "title": title,
        "category": item.get("category") or DEFAULT_ARTICLE_CATEGORY,
        "excerpt": excerpt,
        "content": item.get("content") or "",
        "coverImage": {
            "url": item.get("image") or ARTICLE_PLACEHOLDER,
            "alt": item.get("title") or "文章封面",
            "width": 800,
            "height": 450,
        },
        "gallery": [],
        "tags": tags,
        "author": dict(DEFAULT_AUTHOR),
        "publishedAt": item.get("publishedAt") or now,
        "status": "published",
        "seo": {
            "metaTitle": title,
            "metaDescription": excerpt,
            "keywords": ",".join(str(tag) for tag in tags),
        },
        **_timestamps(now),
    }


def _migrate_stat(item: Mapping[str, Any], index: int, now: str) -> Dict[str, Any]:
    value, unit = split_stat_value(item.get("value"))
    return {
        "id": _synthetic_id("stat"),
        "label": item.get("label"),
        "value": value,
        "unit": unit,
        "description": item.get("description"),
        "icon": _stat_icon(index),
        "trend": {
            "direction": "stable",
            "percentage": 0,
            "period": DEFAULT_TREND_PERIOD,
        },
        "status": "published",
        **_timestamps(now),
    }


_SECTION_MIGRATORS = {
    "hero": _migrate_hero,
    "services": _migrate_service,
    "articles": _migrate_article,
    "stats": _migrate_stat,
}


def migrate(legacy: Any, now: Optional[str] = None) -> Dict[str, Any]:
    """Gera um documento 2.0.0 a partir do conteúdo legado.

    O documento de entrada não é alterado. Levanta ``MigrationError`` quando o
    conteúdo não pode ser interpretado ou quando o resultado não passaria na
    validação; nenhuma migração parcial é devolvida.
    """

    if not isinstance(legacy, Mapping):
        raise MigrationError("O conteúdo legado precisa ser um objeto JSON.")

    now = now or utcnow_iso()
    source = copy.deepcopy(dict(legacy))
    data: Dict[str, List[Dict[str, Any]]] = {}

    for section in SECTION_NAMES:
        items = source.get(section)
        if items is None:
            items = []
        if not isinstance(items, list):
            raise MigrationError(f"A seção legada '{section}' precisa ser uma lista.")

        migrator = _SECTION_MIGRATORS[section]
        migrated = []
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                raise MigrationError(
                    f"O item {index} da seção legada '{section}' não é um objeto."
                )
            migrated.append(migrator(item, index, now))
        data[section] = migrated

    document = {
        "version": CURRENT_VERSION,
        "lastUpdated": now,
        "schema": copy.deepcopy(DEFAULT_SCHEMA),
        "data": data,
        "settings": copy.deepcopy(DEFAULT_SETTINGS),
    }

    errors = collect_errors(document)
    if errors:
        raise MigrationError(
            "O conteúdo legado está incompleto: " + "; ".join(errors)
        )
    return document
