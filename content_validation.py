"""Regras estruturais do documento de conteúdo da segunda geração."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from content.default_content import SECTION_NAMES


def _is_present(value: Any) -> bool:
    """Considera ausentes ``None`` e textos vazios (ou só com espaços)."""

    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _image_url(item: Mapping[str, Any]) -> Any:
    image = item.get("image")
    if isinstance(image, Mapping):
        return image.get("url")
    return None


def _check_hero(item: Mapping[str, Any]) -> List[str]:
    problems = [
        f"campo '{field}' ausente"
        for field in ("id", "title", "subtitle")
        if not _is_present(item.get(field))
    ]
    if not _is_present(_image_url(item)):
        problems.append("campo 'image.url' ausente")
    return problems


def _check_service(item: Mapping[str, Any]) -> List[str]:
    problems = [
        f"campo '{field}' ausente"
        for field in ("id", "title", "description")
        if not _is_present(item.get(field))
    ]
    if not _is_number(item.get("step")):
        problems.append("campo 'step' precisa ser numérico")
    return problems


def _required_fields(*fields: str) -> Callable[[Mapping[str, Any]], List[str]]:
    def check(item: Mapping[str, Any]) -> List[str]:
        return [
            f"campo '{field}' ausente"
            for field in fields
            if not _is_present(item.get(field))
        ]

    return check


SECTION_RULES: Dict[str, Callable[[Mapping[str, Any]], List[str]]] = {
    "hero": _check_hero,
    "services": _check_service,
    "articles": _required_fields("id", "title", "category", "content"),
    "stats": _required_fields("id", "label", "value", "description"),
}


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Interpreta um carimbo ISO 8601; textos inválidos viram ``None``."""

    if not isinstance(value, str):
        return None
    try:
        moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is None:
        # Comentário: carimbos sem fuso são tratados como UTC.
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _check_timestamps(item: Mapping[str, Any]) -> List[str]:
    """Recusa ``updatedAt`` anterior a ``createdAt`` quando ambos são legíveis."""

    created = _parse_timestamp(item.get("createdAt"))
    updated = _parse_timestamp(item.get("updatedAt"))
    if created is not None and updated is not None and updated < created:
        return ["campo 'updatedAt' anterior a 'createdAt'"]
    return []


def collect_errors(document: Any) -> List[str]:
    """Lista os problemas estruturais encontrados no documento.

    A verificação não altera o documento e não confere invariantes entre itens
    (ids duplicados, por exemplo, passam despercebidos). Dentro de cada item,
    ``updatedAt`` não pode ser anterior a ``createdAt``; carimbos ilegíveis
    não são comparados.
    """

    if not isinstance(document, Mapping):
        return ["o documento precisa ser um objeto JSON"]

    errors: List[str] = []
    if not _is_present(document.get("version")):
        errors.append("campo 'version' ausente")

    data = document.get("data")
    if not isinstance(data, Mapping):
        errors.append("campo 'data' ausente")
        return errors

    for section in SECTION_NAMES:
        items = data.get(section)
        if not isinstance(items, list):
            errors.append(f"a seção '{section}' precisa ser uma lista")
            continue

        rule = SECTION_RULES[section]
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                errors.append(f"{section}[{index}]: o item precisa ser um objeto")
                continue
            problems = rule(item) + _check_timestamps(item)
            errors.extend(f"{section}[{index}]: {problem}" for problem in problems)

    return errors


def validate(document: Any) -> bool:
    """Retorna ``True`` quando o documento respeita todas as regras."""

    return not collect_errors(document)
