"""Conteúdos padrão utilizados quando o site ainda não possui dados salvos."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Dict, Optional

CURRENT_VERSION = "2.0.0"

SECTION_NAMES = ("hero", "services", "articles", "stats")

# Comentário: descrição informativa dos campos de cada seção (não é imposta).
DEFAULT_SCHEMA = {
    "hero": {
        "type": "carousel",
        "required": ["title", "subtitle", "buttonText", "image"],
        "optional": ["link", "priority"],
    },
    "services": {
        "type": "process_steps",
        "required": ["step", "title", "description", "features"],
        "optional": ["image", "icon", "mediaGallery"],
    },
    "articles": {
        "type": "content_collection",
        "required": ["id", "title", "category", "excerpt", "content", "publishedAt"],
        "optional": ["coverImage", "gallery", "tags", "author", "status", "seo"],
    },
    "stats": {
        "type": "metrics",
        "required": ["label", "value", "description"],
        "optional": ["icon", "trend", "unit"],
    },
}

DEFAULT_SETTINGS = {
    "contentVersion": CURRENT_VERSION,
    "autoBackup": True,
    "backupInterval": "daily",
    "imageUploadPath": "/uploads",
    "maxImageSize": "5MB",
    "allowedImageTypes": ["jpg", "jpeg", "png", "webp"],
    "contentStatus": {
        "draft": "草稿",
        "review": "待审核",
        "published": "已发布",
        "archived": "已归档",
    },
    "categories": {
        "articles": ["行业趋势", "政策法规", "技术创新", "案例分析", "市场动态"],
    },
}

# Comentário: conteúdo da primeira geração publicado originalmente no site.
LEGACY_SAMPLE_CONTENT = {
    "hero": [
        {
            "title": "推动甲烷减排",
            "subtitle": "助力农业农村减污降碳",
            "buttonText": "了解更多",
            "image": "/api/placeholder/1200/600",
        }
    ],
    "services": [
        {
            "step": 1,
            "title": "现场调研",
            "description": "深入了解您的排放源和运营特点",
            "features": "实地考察, 数据采集, 问题诊断",
        },
        {
            "step": 2,
            "title": "方案设计",
            "description": "制定科学可行的减排方案",
            "features": "技术选择, 成本分析, 效益评估",
        },
        {
            "step": 3,
            "title": "实施部署",
            "description": "专业团队负责方案落地",
            "features": "设备安装, 系统调试, 人员培训",
        },
        {
            "step": 4,
            "title": "持续优化",
            "description": "长期跟踪效果并持续改进",
            "features": "数据监测, 效果评估, 方案优化",
        },
    ],
    "articles": [],
    "stats": [
        {"label": "减排效率", "value": "85%", "description": "平均甲烷减排率"},
        {"label": "服务项目", "value": "200+", "description": "累计服务项目数"},
        {"label": "碳减排量", "value": "50万吨", "description": "年度碳减排总量"},
        {"label": "客户满意度", "value": "98%", "description": "客户满意度评分"},
    ],
}


def isoformat(moment: datetime, timespec: str = "milliseconds") -> str:
    """Formata o instante em ISO 8601 (UTC) com sufixo ``Z``.

    O padrão usa milissegundos, como os nomes de exportação; ``timespec``
    aceita os mesmos valores de :meth:`datetime.isoformat`.
    """

    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec=timespec).replace("+00:00", "Z")


def utcnow_iso() -> str:
    # Comentário: microssegundos, para o carimbo nunca ficar antes do instante real.
    return isoformat(datetime.now(timezone.utc), timespec="microseconds")


def build_default_document(now: Optional[str] = None) -> Dict[str, Any]:
    """Monta o documento vazio da geração atual."""

    return {
        "version": CURRENT_VERSION,
        "lastUpdated": now or utcnow_iso(),
        "schema": copy.deepcopy(DEFAULT_SCHEMA),
        "data": {name: [] for name in SECTION_NAMES},
        "settings": copy.deepcopy(DEFAULT_SETTINGS),
    }
