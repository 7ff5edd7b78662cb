"""Configuration objects and constants for tab image harvesting."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_FOLDER = "AllTabsImages"
STORAGE_KEY = "targetFolder"
DEFAULT_CDP_ENDPOINT = "http://127.0.0.1:9222"

PROMPTS = {
    "folder": "Folder inside downloads (will be created if missing)",
    "new_folder": "New folder inside downloads",
}


def default_downloads_root() -> Path:
    return Path.home() / "Downloads"


def default_settings_path() -> Path:
    return Path.home() / ".config" / "alltabs-images" / "settings.json"


@dataclass
class HarvestConfig:
    """Top-level settings that control browser access and downloading."""

    downloads_root: Path = field(default_factory=default_downloads_root)
    settings_path: Path = field(default_factory=default_settings_path)
    cdp_endpoint: str = DEFAULT_CDP_ENDPOINT
    wait_after_load: float = 1.0
    navigation_timeout: float = 30.0
    request_timeout: float = 60.0

    @classmethod
    def from_env(cls) -> "HarvestConfig":
        """Build a config from ``ALLTABS_*`` environment variables."""
        config = cls()
        endpoint = os.getenv("ALLTABS_CDP_ENDPOINT")
        if endpoint:
            config.cdp_endpoint = endpoint
        downloads_dir = os.getenv("ALLTABS_DOWNLOADS_DIR")
        if downloads_dir:
            config.downloads_root = Path(downloads_dir).expanduser()
        settings_file = os.getenv("ALLTABS_SETTINGS_FILE")
        if settings_file:
            config.settings_path = Path(settings_file).expanduser()
        return config
