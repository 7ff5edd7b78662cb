"""Download service that saves submitted URLs under a downloads root."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

import requests

logger = logging.getLogger("alltabs_images")

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
CHUNK_SIZE = 1024 * 256
CONFLICT_ACTIONS = {"uniquify", "overwrite"}


def open_in_file_manager(path: Path) -> None:
    """Show ``path`` in the platform file manager."""
    if sys.platform.startswith("win"):
        os.startfile(str(path.parent))  # type: ignore[attr-defined]
    elif sys.platform == "darwin":
        subprocess.run(["open", "-R", str(path)], check=False)
    else:
        subprocess.run(["xdg-open", str(path.parent)], check=False)


def unique_path(target: Path) -> Path:
    """Return ``target`` or the first free ``name (N).ext`` beside it."""
    if not target.exists():
        return target
    stem, suffix = target.stem, target.suffix
    counter = 1
    while True:
        candidate = target.with_name(f"{stem} ({counter}){suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


class DownloadService:
    """Interface of the download manager used by the orchestrator."""

    async def submit(self, url: str, filename: str, conflict_action: str = "uniquify") -> int:
        raise NotImplementedError

    async def reveal(self, job_id: int) -> None:
        raise NotImplementedError


class LocalDownloadService(DownloadService):
    """Fetch each submission once and write it below ``root``.

    ``http``/``https`` URLs go through a shared ``requests`` session, ``file``
    URLs are copied from disk. Job ids are sequential integers.
    """

    def __init__(
        self,
        root: Path,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
        opener: Callable[[Path], None] = open_in_file_manager,
    ) -> None:
        self.root = Path(root)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.opener = opener
        self._paths: Dict[int, Path] = {}
        self._next_id = 1

    def target_path(self, filename: str) -> Path:
        relative = PurePosixPath(filename.replace("\\", "/"))
        if relative.is_absolute() or not relative.parts or ".." in relative.parts:
            raise ValueError(f"Refusing unsafe download filename: {filename!r}")
        return self.root.joinpath(*relative.parts)

    async def submit(self, url: str, filename: str, conflict_action: str = "uniquify") -> int:
        if conflict_action not in CONFLICT_ACTIONS:
            raise ValueError(f"Unknown conflict action: {conflict_action}")
        target = self.target_path(filename)
        path = await asyncio.to_thread(self._fetch, url, target, conflict_action)
        job_id = self._next_id
        self._next_id += 1
        self._paths[job_id] = path
        logger.info("Saved %s to %s", url, path)
        return job_id

    def _fetch(self, url: str, target: Path, conflict_action: str) -> Path:
        scheme = urlsplit(url).scheme
        if scheme not in ("http", "https", "file"):
            raise ValueError(f"Unsupported URL scheme for download: {url}")

        target.parent.mkdir(parents=True, exist_ok=True)
        if conflict_action == "uniquify":
            target = unique_path(target)

        if scheme == "file":
            source = Path(url2pathname(urlsplit(url).path))
            shutil.copyfile(source, target)
            return target

        partial = target.with_name(target.name + ".part")
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as resp:
                resp.raise_for_status()
                with partial.open("wb") as handle:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
            partial.replace(target)
        finally:
            if partial.exists():
                partial.unlink()
        return target

    def path_for(self, job_id: int) -> Path:
        return self._paths[job_id]

    async def reveal(self, job_id: int) -> None:
        path = self.path_for(job_id)
        self.opener(path)
