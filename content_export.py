"""Exportação do conteúdo do site para download no painel."""

from __future__ import annotations

import csv
from datetime import datetime, timezone
import io
import json
import re
from typing import Any, Mapping, Optional

from content.default_content import SECTION_NAMES, isoformat

EXPORT_FORMATS = {
    "json": "application/json",
    "csv": "text/csv",
}


def export_filename(fmt: str, now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    stamp = re.sub(r"[:.]", "-", isoformat(moment))
    return f"methas-content-{stamp}.{fmt}"


def export_json(document: Mapping[str, Any]) -> str:
    return json.dumps(document, ensure_ascii=False, indent=2) + "\n"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def export_csv(document: Mapping[str, Any]) -> str:
    """Gera um bloco CSV por seção não vazia.

    As colunas vêm do primeiro item da seção: campos simples e ``image``
    (serializado em JSON). Todas as células são delimitadas por aspas.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    data = document.get("data") or {}

    for section in SECTION_NAMES:
        items = data.get(section) or []
        if not items:
            continue

        first = items[0]
        headers = [
            key
            for key, value in first.items()
            if not isinstance(value, (dict, list)) or key == "image"
        ]

        buffer.write(f"\n=== {section.upper()} ===\n")
        writer.writerow(headers)
        for item in items:
            writer.writerow([_cell(item.get(header)) for header in headers])
        buffer.write("\n")

    return buffer.getvalue()
