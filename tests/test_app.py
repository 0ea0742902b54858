import json

import pytest

from app import create_app


class FakeCMS:
    def get_section(self, name):
        return [{"id": f"cms_{name}"}]


@pytest.fixture
def flask_app(app_config):
    return create_app(app_config)


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


def _store(flask_app):
    return flask_app.extensions["content_store"]


def test_get_content_initializes_document(client, flask_app):
    response = client.get("/api/admin/content")

    assert response.status_code == 200
    assert response.get_json()["version"] == "2.0.0"
    assert _store(flask_app).path.exists()


def test_post_content_saves_and_reports_backup(client, make_document):
    client.get("/api/admin/content")

    response = client.post("/api/admin/content", json=make_document())

    payload = response.get_json()
    assert response.status_code == 200
    assert payload["success"] is True
    assert payload["backup"].startswith("content-")
    saved = client.get("/api/admin/content").get_json()
    assert saved["data"] == make_document()["data"]


def test_post_invalid_content_returns_400(client, flask_app, make_document):
    client.post("/api/admin/content", json=make_document())
    original = _store(flask_app).path.read_bytes()
    document = make_document()
    document["data"]["hero"] = "not-a-list"

    response = client.post("/api/admin/content", json=document)

    assert response.status_code == 400
    assert response.get_json()["details"] == ["a seção 'hero' precisa ser uma lista"]
    assert _store(flask_app).path.read_bytes() == original


def test_post_non_json_body_returns_400(client):
    response = client.post("/api/admin/content", data="oops", content_type="text/plain")

    assert response.status_code == 400
    assert "error" in response.get_json()


def test_get_content_with_corrupt_file_returns_500(client, flask_app):
    path = _store(flask_app).path
    path.parent.mkdir(parents=True)
    path.write_text("{quebrado", encoding="utf-8")

    response = client.get("/api/admin/content")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Falha ao obter o conteúdo."}


def test_backups_listing_and_restore(client, make_document):
    client.get("/api/admin/content")
    first = make_document()
    client.post("/api/admin/content", json=first)
    second = make_document()
    second["data"]["stats"][0]["value"] = "90"
    backup = client.post("/api/admin/content", json=second).get_json()["backup"]

    listing = client.get("/api/admin/content/backups").get_json()["backups"]
    assert [item["id"] for item in listing][0] == backup
    assert len(listing) == 2

    response = client.post(f"/api/admin/content/backups/{backup}/restore")

    assert response.status_code == 200
    restored = client.get("/api/admin/content").get_json()
    assert restored["data"]["stats"][0]["value"] == "85"


def test_restore_unknown_backup_returns_404(client):
    response = client.post(
        "/api/admin/content/backups/content-2020-01-01T00-00-00-000000Z.json/restore"
    )
    assert response.status_code == 404


def test_export_csv_is_an_attachment(client, make_document):
    client.post("/api/admin/content", json=make_document())

    response = client.get("/api/admin/content/export?format=csv")

    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert "attachment; filename=\"methas-content-" in response.headers["Content-Disposition"]
    assert "=== HERO ===" in response.get_data(as_text=True)


def test_export_unknown_format_returns_400(client):
    assert client.get("/api/admin/content/export?format=xlsx").status_code == 400


def test_public_section_falls_back_to_cms(app_config):
    client = create_app(app_config, fallback_source=FakeCMS()).test_client()

    response = client.get("/api/content/articles")

    assert response.get_json() == {
        "section": "articles",
        "items": [{"id": "cms_articles"}],
        "source": "fallback",
    }


def test_public_section_prefers_store(client, make_document):
    client.post("/api/admin/content", json=make_document())

    payload = client.get("/api/content/stats").get_json()

    assert payload["source"] == "store"
    assert payload["items"][0]["label"] == "减排效率"


def test_unknown_section_returns_404(client):
    assert client.get("/api/content/team").status_code == 404


def test_cli_content_check_reports_migrated_legacy(flask_app):
    runner = flask_app.test_cli_runner()

    seeded = runner.invoke(args=["content-seed-legacy"])
    result = runner.invoke(args=["content-check"])

    assert seeded.exit_code == 0
    assert result.exit_code == 0
    assert "Versão 2.0.0" in result.output
    assert "services: 4 itens" in result.output


def test_cli_seed_legacy_refuses_to_overwrite(flask_app):
    runner = flask_app.test_cli_runner()
    runner.invoke(args=["content-seed-legacy"])

    result = runner.invoke(args=["content-seed-legacy"])

    assert result.exit_code != 0


def test_cli_backups_and_restore(flask_app, make_document):
    store = _store(flask_app)
    store.read()
    backup = store.write(make_document()).backup
    runner = flask_app.test_cli_runner()

    listing = runner.invoke(args=["content-backups"])
    restored = runner.invoke(args=["content-restore", backup])

    assert backup in listing.output
    assert restored.exit_code == 0
    assert store.read()["data"]["hero"] == []


def test_cli_export_to_file(flask_app, make_document, tmp_path):
    _store(flask_app).write(make_document())
    target = tmp_path / "export.json"

    result = flask_app.test_cli_runner().invoke(
        args=["content-export", "--format", "json", "--output", str(target)]
    )

    assert result.exit_code == 0
    assert json.loads(target.read_text(encoding="utf-8"))["data"] == make_document()["data"]
