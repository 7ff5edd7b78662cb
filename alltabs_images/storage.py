"""JSON-backed key-value settings store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("alltabs_images")


class SettingsStore:
    """Persist small settings values in a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self.path)
            return {}
        return data

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".settings-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=4)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise
