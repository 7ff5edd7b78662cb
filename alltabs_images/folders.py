"""Destination folder lookup, prompting and persistence."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .config import DEFAULT_FOLDER, PROMPTS, STORAGE_KEY
from .storage import SettingsStore

logger = logging.getLogger("alltabs_images")

Prompt = Callable[[str, str], str]


def console_prompt(message: str, default: str) -> str:
    """Ask on the terminal; an empty answer or EOF yields an empty string."""
    try:
        value = input(f"{message} [{default}]: ")
    except EOFError:
        return ""
    return value.strip() if value else ""


def default_prompt(message: str, default: str) -> str:
    """Non-interactive prompt that always accepts the default."""
    return default


class FolderResolver:
    """Resolve the folder inside the downloads root that receives images."""

    def __init__(self, store: SettingsStore, prompt: Prompt = default_prompt) -> None:
        self.store = store
        self.prompt = prompt

    def _ask(self, message: str, fallback: str) -> str:
        answer = self.prompt(message, fallback)
        return (answer or "").strip() or fallback

    def current(self) -> str:
        return self.store.get(STORAGE_KEY) or DEFAULT_FOLDER

    def resolve(self) -> str:
        """Return the stored folder, asking for and saving one if unset."""
        stored = self.store.get(STORAGE_KEY)
        if stored:
            return stored
        folder = self._ask(PROMPTS["folder"], DEFAULT_FOLDER)
        self.store.set(STORAGE_KEY, folder)
        logger.info("Using download folder %s", folder)
        return folder

    def change(self, value: Optional[str] = None) -> Optional[str]:
        """Set a new folder, from ``value`` or by prompting; ``None`` if empty."""
        current = self.current()
        if value is not None:
            folder = value.strip() or current
        else:
            folder = self._ask(PROMPTS["new_folder"], current)
        if not folder:
            return None
        self.store.set(STORAGE_KEY, folder)
        logger.info("Download folder changed to %s", folder)
        return folder
