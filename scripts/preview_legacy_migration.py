#!/usr/bin/env python3
"""Mostra como o conteúdo legado ficará após a conversão para a versão 2.0.0."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from content_errors import MigrationError  # noqa: E402
from content_migration import DocumentVariant, detect_variant, migrate  # noqa: E402
from content_store import load_content, save_content, serialize_content  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Converte o arquivo de conteúdo da primeira geração sem alterar "
            "o original e exibe (ou grava) o resultado."
        )
    )
    parser.add_argument(
        "legacy",
        type=Path,
        help="Arquivo legado (normalmente data/content.json).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Grava o documento convertido neste caminho em vez de exibi-lo.",
    )
    args = parser.parse_args()

    print(f"\n▶ Lendo {args.legacy}")
    try:
        legacy = load_content(args.legacy, MigrationError)
        if legacy is None:
            raise MigrationError(f"Arquivo inexistente: {args.legacy}")
        if not isinstance(legacy, dict):
            raise MigrationError("O arquivo legado não contém um objeto JSON.")
        if detect_variant(legacy) is DocumentVariant.V2:
            print("ℹ O arquivo já está no formato 2.0.0; nada a converter.")
            return
        document = migrate(legacy)
    except MigrationError as exc:
        print(f"❌ Falha na conversão: {exc}")
        raise SystemExit(1) from exc

    for name, items in document["data"].items():
        print(f"  {name}: {len(items)} itens")

    if args.output:
        save_content(args.output, serialize_content(document))
        print(f"✔ Documento convertido gravado em {args.output}")
    else:
        print(json.dumps(document, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
