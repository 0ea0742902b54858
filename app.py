"""Aplicação Flask que expõe o conteúdo do site Methas."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional

import click
from flask import Blueprint, Flask, Response, current_app, jsonify, request

from config import Config
from content.default_content import LEGACY_SAMPLE_CONTENT, SECTION_NAMES
from content_errors import (
    BackupNotFoundError,
    MigrationError,
    StorageError,
    ValidationError,
)
from content_export import EXPORT_FORMATS, export_csv, export_filename, export_json
from content_sources import SectionSource, StoreSource, resolve_section
from content_store import ContentStore

# Comentário: chaves usadas em ``app.extensions``.
STORE_EXTENSION_KEY = "content_store"
FALLBACK_EXTENSION_KEY = "content_fallback"


content_bp = Blueprint("content", __name__, url_prefix="/api")


def get_store() -> ContentStore:
    return current_app.extensions[STORE_EXTENSION_KEY]


def _error(message: str, status: int, **extra: Any):
    payload = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


@content_bp.route("/admin/content", methods=["GET"])
def get_content():
    """Retorna o documento completo para o painel administrativo."""

    try:
        document = get_store().read()
    except (StorageError, ValidationError, MigrationError):
        current_app.logger.exception("Falha ao obter o conteúdo do site.")
        return _error("Falha ao obter o conteúdo.", 500)
    return jsonify(document)


@content_bp.route("/admin/content", methods=["POST"])
def save_content():
    """Grava o documento enviado pelo painel administrativo."""

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error(
            "Formato de dados inválido.",
            400,
            details=["o corpo da requisição precisa ser um objeto JSON"],
        )

    try:
        result = get_store().write(payload)
    except ValidationError as exc:
        return _error("Formato de dados inválido.", 400, details=exc.errors)
    except StorageError:
        current_app.logger.exception("Falha ao salvar o conteúdo do site.")
        return _error("Falha ao salvar o conteúdo. Tente novamente.", 500)

    return jsonify(
        {
            "success": True,
            "message": "Conteúdo salvo com sucesso.",
            "backup": result.backup,
            "lastUpdated": result.document["lastUpdated"],
        }
    )


@content_bp.route("/admin/content/backups", methods=["GET"])
def list_backups():
    try:
        backups = get_store().list_backups()
    except OSError:
        current_app.logger.exception("Falha ao listar os backups.")
        return _error("Falha ao listar os backups.", 500)
    return jsonify({"backups": [backup.to_dict() for backup in backups]})


@content_bp.route("/admin/content/backups/<backup_id>/restore", methods=["POST"])
def restore_backup(backup_id: str):
    try:
        result = get_store().restore(backup_id)
    except BackupNotFoundError:
        return _error("Backup não encontrado.", 404)
    except ValidationError as exc:
        return _error("O backup possui formato inválido.", 400, details=exc.errors)
    except StorageError:
        current_app.logger.exception("Falha ao restaurar o backup %s.", backup_id)
        return _error("Falha ao restaurar o backup. Tente novamente.", 500)

    return jsonify(
        {
            "success": True,
            "message": "Backup restaurado com sucesso.",
            "backup": result.backup,
        }
    )


@content_bp.route("/admin/content/export", methods=["GET"])
def export_content():
    fmt = (request.args.get("format") or "json").lower()
    if fmt not in EXPORT_FORMATS:
        return _error("Formato de exportação não suportado.", 400)

    try:
        document = get_store().read()
    except (StorageError, ValidationError, MigrationError):
        current_app.logger.exception("Falha ao exportar o conteúdo do site.")
        return _error("Falha ao exportar o conteúdo.", 500)

    body = export_csv(document) if fmt == "csv" else export_json(document)
    filename = export_filename(fmt)
    return Response(
        body,
        mimetype=EXPORT_FORMATS[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@content_bp.route("/content/<section>", methods=["GET"])
def get_section(section: str):
    """Itens públicos de uma seção, recorrendo ao CMS quando ela está vazia."""

    if section not in SECTION_NAMES:
        return _error("Seção inexistente.", 404)

    fallback = current_app.extensions.get(FALLBACK_EXTENSION_KEY)
    try:
        items, source = resolve_section(section, StoreSource(get_store()), fallback)
    except (StorageError, ValidationError, MigrationError):
        current_app.logger.exception("Falha ao obter a seção %s.", section)
        return _error("Falha ao obter o conteúdo.", 500)
    return jsonify({"section": section, "items": items, "source": source})


def register_commands(app: Flask) -> None:
    """Comandos ``flask content-*`` para manutenção do conteúdo."""

    @app.cli.command("content-check")
    def content_check() -> None:
        """Carrega o documento (migrando se necessário) e exibe um resumo."""

        try:
            document = get_store().read()
        except ValidationError as exc:
            for problem in exc.errors:
                click.echo(f"- {problem}", err=True)
            raise click.ClickException("O documento salvo possui estrutura inválida.")
        except (StorageError, MigrationError) as exc:
            raise click.ClickException(str(exc))

        click.echo(f"Versão {document['version']} (atualizado em {document.get('lastUpdated')})")
        for name in SECTION_NAMES:
            click.echo(f"{name}: {len(document['data'][name])} itens")

    @app.cli.command("content-backups")
    def content_backups() -> None:
        """Lista as cópias de segurança, da mais recente para a mais antiga."""

        backups = get_store().list_backups()
        if not backups:
            click.echo("Nenhum backup encontrado.")
            return
        for backup in backups:
            click.echo(f"{backup.id}\t{backup.size} bytes\t{backup.created}")

    @app.cli.command("content-restore")
    @click.argument("backup_id")
    def content_restore(backup_id: str) -> None:
        """Restaura uma cópia de segurança como documento principal."""

        try:
            result = get_store().restore(backup_id)
        except BackupNotFoundError:
            raise click.ClickException(f"Backup não encontrado: {backup_id}")
        except (ValidationError, StorageError) as exc:
            raise click.ClickException(str(exc))
        click.echo(f"Backup {backup_id} restaurado (cópia anterior: {result.backup}).")

    @app.cli.command("content-export")
    @click.option(
        "--format",
        "fmt",
        type=click.Choice(sorted(EXPORT_FORMATS)),
        default="json",
        help="Formato do arquivo exportado.",
    )
    @click.option(
        "--output",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Arquivo de destino (padrão: saída padrão).",
    )
    def content_export(fmt: str, output: Optional[Path]) -> None:
        """Exporta o documento atual em JSON ou CSV."""

        try:
            document = get_store().read()
        except (StorageError, ValidationError, MigrationError) as exc:
            raise click.ClickException(str(exc))

        body = export_csv(document) if fmt == "csv" else export_json(document)
        if output is None:
            click.echo(body, nl=False)
            return
        output.write_text(body, encoding="utf-8")
        click.echo(f"Conteúdo exportado para {output}.")

    @app.cli.command("content-seed-legacy")
    @click.option("--force", is_flag=True, help="Sobrescreve o arquivo legado existente.")
    def content_seed_legacy(force: bool) -> None:
        """Grava o conteúdo da primeira geração no arquivo legado."""

        legacy_path = get_store().legacy_path
        if legacy_path.exists() and not force:
            raise click.ClickException(f"O arquivo {legacy_path} já existe.")

        legacy_path.parent.mkdir(parents=True, exist_ok=True)
        legacy_path.write_text(
            json.dumps(LEGACY_SAMPLE_CONTENT, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        click.echo(f"Conteúdo legado gravado em {legacy_path}.")


def create_app(
    config_overrides: Optional[Mapping[str, Any]] = None,
    fallback_source: Optional[SectionSource] = None,
) -> Flask:
    """Cria e configura a aplicação Flask."""

    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Comentário: respostas JSON preservam os textos em chinês sem escapes.
    app.json.ensure_ascii = False

    app.extensions[STORE_EXTENSION_KEY] = ContentStore.from_config(app.config)
    app.extensions[FALLBACK_EXTENSION_KEY] = fallback_source

    app.register_blueprint(content_bp)
    register_commands(app)

    @app.errorhandler(404)
    def handle_not_found(_: Exception):
        return _error("Recurso não encontrado.", 404)

    @app.errorhandler(500)
    def handle_internal_error(_: Exception):
        return _error("Erro interno do servidor.", 500)

    return app


# Comentário: instância utilizada por servidores WSGI ou pelo Flask CLI.
app = create_app()


if __name__ == "__main__":
    # Comentário: execução direta do módulo para ambientes de desenvolvimento.
    app.run(debug=True)
