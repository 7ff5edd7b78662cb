"""
Pytest fixtures for alltabs_images tests
"""
import logging

import pytest

from alltabs_images.downloads import DownloadService
from alltabs_images.folders import FolderResolver
from alltabs_images.models import Tab
from alltabs_images.scanner import ScanError
from alltabs_images.storage import SettingsStore


class FakeTabs:
    """Tab source serving canned candidates, or raising for failing tabs"""

    def __init__(self, pages):
        self.pages = pages
        self.scanned = []

    async def list_tabs(self):
        return [Tab(id=f"tab-{i}", url=url) for i, (url, _) in enumerate(self.pages, start=1)]

    async def scan(self, tab):
        self.scanned.append(tab.id)
        index = int(tab.id.split("-")[1]) - 1
        result = self.pages[index][1]
        if isinstance(result, Exception):
            raise result
        return list(result)


class FakeDownloads(DownloadService):
    """Records submissions; URLs listed in ``failing`` raise on submit"""

    def __init__(self, failing=(), reveal_error=None):
        self.failing = set(failing)
        self.reveal_error = reveal_error
        self.submitted = []
        self.revealed = []

    async def submit(self, url, filename, conflict_action="uniquify"):
        if url in self.failing:
            raise OSError(f"cannot fetch {url}")
        self.submitted.append((url, filename, conflict_action))
        return len(self.submitted) + 100

    async def reveal(self, job_id):
        if self.reveal_error:
            raise self.reveal_error
        self.revealed.append(job_id)


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def folders(store):
    return FolderResolver(store)


@pytest.fixture
def downloads():
    return FakeDownloads()


@pytest.fixture
def scan_error():
    return ScanError("tab closed")


@pytest.fixture(autouse=True)
def restore_root_logging():
    """cli.main reconfigures the root logger; put handlers and level back afterwards"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
