"""Command dispatch for the download, download-largest and folder commands."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from playwright.async_api import Error as PlaywrightError, async_playwright

from .config import HarvestConfig
from .downloads import LocalDownloadService
from .folders import FolderResolver, Prompt, default_prompt
from .orchestrator import DownloadOrchestrator
from .storage import SettingsStore
from .tabs import BrowserTabs

logger = logging.getLogger("alltabs_images")

COMMANDS = ("download", "download-largest", "set-folder", "get-folder")


class UnknownCommandError(ValueError):
    """Raised for a command name the dispatcher does not handle."""


class CommandDispatcher:
    """Map command names to orchestrator runs and folder operations."""

    def __init__(
        self,
        orchestrator: Optional[DownloadOrchestrator],
        folders: FolderResolver,
    ) -> None:
        self.orchestrator = orchestrator
        self.folders = folders

    async def _run(self, command: str) -> Dict[str, Any]:
        try:
            if command == "download":
                await self.orchestrator.download_all()
            else:
                await self.orchestrator.download_largest()
        except Exception:  # pylint: disable=broad-except
            logger.exception("Command %s failed", command)
            return {"ok": False}
        return {"ok": True}

    async def dispatch(self, command: str, folder: Optional[str] = None) -> Dict[str, Any]:
        if command in ("download", "download-largest"):
            return await self._run(command)
        if command == "set-folder":
            changed = self.folders.change(folder)
            return {"ok": bool(changed), "folder": changed or None}
        if command == "get-folder":
            return {"folder": self.folders.current()}
        raise UnknownCommandError(f"Unknown command: {command}")


async def run_command(
    command: str,
    config: HarvestConfig,
    launch_urls: Optional[Sequence[str]] = None,
    folder: Optional[str] = None,
    prompt: Prompt = default_prompt,
) -> Dict[str, Any]:
    """Execute one command against a real browser and the local downloads root.

    The browser is only contacted for the download commands. With
    ``launch_urls`` a headless browser opens those URLs as its tabs,
    otherwise the browser at ``config.cdp_endpoint`` is attached.
    """
    if command not in COMMANDS:
        raise UnknownCommandError(f"Unknown command: {command}")
    folders = FolderResolver(SettingsStore(config.settings_path), prompt=prompt)
    if command not in ("download", "download-largest"):
        return await CommandDispatcher(None, folders).dispatch(command, folder=folder)

    downloads = LocalDownloadService(config.downloads_root, timeout=config.request_timeout)
    async with async_playwright() as playwright:
        try:
            if launch_urls:
                tabs = await BrowserTabs.launch(playwright, launch_urls, config)
            else:
                tabs = await BrowserTabs.connect(playwright, config.cdp_endpoint)
        except PlaywrightError as exc:
            logger.error("Could not open browser: %s", exc)
            return {"ok": False}
        try:
            orchestrator = DownloadOrchestrator(tabs, downloads, folders)
            return await CommandDispatcher(orchestrator, folders).dispatch(command)
        finally:
            await tabs.close()
