from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from content_store import ContentStore  # noqa: E402

TIMESTAMP = "2024-05-01T10:00:00.000Z"


def _build_document():
    return {
        "version": "2.0.0",
        "lastUpdated": TIMESTAMP,
        "schema": {},
        "data": {
            "hero": [
                {
                    "id": "hero_1",
                    "title": "推动甲烷减排",
                    "subtitle": "助力农业农村减污降碳",
                    "buttonText": "了解更多",
                    "image": {
                        "url": "/images/hero.jpg",
                        "alt": "推动甲烷减排",
                        "width": 1920,
                        "height": 1080,
                    },
                    "priority": 1,
                    "status": "published",
                    "createdAt": TIMESTAMP,
                    "updatedAt": TIMESTAMP,
                }
            ],
            "services": [
                {
                    "id": "service_1",
                    "step": 1,
                    "title": "现场调研",
                    "description": "深入了解您的排放源和运营特点",
                    "features": ["实地考察", "数据采集"],
                    "status": "published",
                    "createdAt": TIMESTAMP,
                    "updatedAt": TIMESTAMP,
                }
            ],
            "articles": [
                {
                    "id": "article_1",
                    "title": "农业甲烷减排路径",
                    "category": "行业趋势",
                    "excerpt": "概要",
                    "content": "正文",
                    "tags": ["甲烷"],
                    "status": "published",
                    "createdAt": TIMESTAMP,
                    "updatedAt": TIMESTAMP,
                }
            ],
            "stats": [
                {
                    "id": "stat_1",
                    "label": "减排效率",
                    "value": "85",
                    "unit": "%",
                    "description": "平均甲烷减排率",
                    "status": "published",
                    "createdAt": TIMESTAMP,
                    "updatedAt": TIMESTAMP,
                }
            ],
        },
        "settings": {"autoBackup": True},
    }


@pytest.fixture
def make_document():
    """Fábrica de documentos 2.0.0 válidos e independentes entre si."""

    return _build_document


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return ContentStore(
        data_dir / "content-v2.json",
        legacy_path=data_dir / "content.json",
        backup_dir=data_dir / "backups",
    )


@pytest.fixture
def app_config(data_dir):
    return {
        "TESTING": True,
        "CONTENT_FILE": data_dir / "content-v2.json",
        "LEGACY_CONTENT_FILE": data_dir / "content.json",
        "CONTENT_BACKUP_DIR": data_dir / "backups",
        "CONTENT_BACKUP_RETENTION": 10,
    }
