from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .config import CONFIG

logger = logging.getLogger(__name__)

HISTORY_KEY = "payroll_history_v3"
THEME_KEY = "theme"


class JsonStore:
    """Small key/value store persisted as one JSON document."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path or CONFIG.store_path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            logger.warning("Ignoring unreadable store at %s", self.path)
            return {}
        return payload if isinstance(payload, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        payload = self._load()
        payload.update(values)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp.replace(self.path)
