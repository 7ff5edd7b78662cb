"""Sequential orchestration of tab scans and download submissions."""

from __future__ import annotations

import itertools
import logging
from typing import Iterable, Iterator, List, Optional, Protocol, Set, Tuple, runtime_checkable

from .downloads import DownloadService
from .folders import FolderResolver
from .models import DownloadJob, ImageCandidate, RunReport, Tab
from .utils import make_filename

logger = logging.getLogger("alltabs_images")

MODE_ALL = "all"
MODE_LARGEST = "largest"


@runtime_checkable
class TabSource(Protocol):
    """Lists the tabs of a run and scans them one at a time."""

    async def list_tabs(self) -> List[Tab]: ...

    async def scan(self, tab: Tab) -> List[ImageCandidate]: ...


def unseen_candidates(
    candidates: Iterable[ImageCandidate],
    seen: Set[str],
) -> List[ImageCandidate]:
    """Return candidates whose URL is not in ``seen`` and record them there."""
    fresh: List[ImageCandidate] = []
    for candidate in candidates:
        if candidate.url in seen:
            continue
        seen.add(candidate.url)
        fresh.append(candidate)
    return fresh


def pick_largest(candidates: List[ImageCandidate]) -> Optional[ImageCandidate]:
    """Highest scoring candidate; the first one wins a tie."""
    if not candidates:
        return None
    return max(candidates, key=lambda candidate: candidate.score)


class DownloadOrchestrator:
    """Scan every admissible tab and submit downloads for what was found.

    Tabs are processed one at a time. A tab that fails to scan or a download
    that fails to submit is logged and skipped; neither stops the run.
    """

    def __init__(
        self,
        tabs: TabSource,
        downloads: DownloadService,
        folders: FolderResolver,
    ) -> None:
        self.tabs = tabs
        self.downloads = downloads
        self.folders = folders

    async def _scan(self, tab: Tab) -> Optional[List[ImageCandidate]]:
        try:
            return await self.tabs.scan(tab)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Skipping tab %s: %s", tab.url, exc)
            return None

    async def _submit(self, candidate: ImageCandidate, folder: str, index: int) -> DownloadJob:
        job = DownloadJob(url=candidate.url, filename=make_filename(folder, candidate.url, index))
        try:
            job.result_id = await self.downloads.submit(
                job.url, job.filename, conflict_action="uniquify"
            )
        except Exception as exc:  # pylint: disable=broad-except
            job.error = str(exc) or exc.__class__.__name__
            logger.error("Download of %s failed: %s", job.url, job.error)
        return job

    async def _reveal(self, report: RunReport) -> None:
        first = report.first_success
        if first is None:
            return
        try:
            await self.downloads.reveal(first.result_id)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Could not show download %s: %s", first.result_id, exc)

    async def _start(self, mode: str) -> Tuple[List[Tab], RunReport]:
        tabs = await self.tabs.list_tabs()
        report = RunReport(mode=mode)
        if not tabs:
            logger.info("No tabs with an http, https or file URL to scan")
            return tabs, report
        report.folder = self.folders.resolve()
        logger.info("Scanning %d tab(s) into folder %s", len(tabs), report.folder)
        return tabs, report

    async def download_all(self) -> RunReport:
        """Download every unique image found across all tabs."""
        tabs, report = await self._start(MODE_ALL)
        seen: Set[str] = set()
        counter: Iterator[int] = itertools.count(1)
        for tab in tabs:
            candidates = await self._scan(tab)
            if candidates is None:
                report.tabs_failed += 1
                continue
            report.tabs_scanned += 1
            for candidate in unseen_candidates(candidates, seen):
                report.jobs.append(await self._submit(candidate, report.folder, next(counter)))
        await self._reveal(report)
        self._log_summary(report)
        return report

    async def download_largest(self) -> RunReport:
        """Download the highest scoring image of each tab."""
        tabs, report = await self._start(MODE_LARGEST)
        counter: Iterator[int] = itertools.count(1)
        for tab in tabs:
            candidates = await self._scan(tab)
            if candidates is None:
                report.tabs_failed += 1
                continue
            report.tabs_scanned += 1
            best = pick_largest(candidates)
            if best is None:
                continue
            report.jobs.append(await self._submit(best, report.folder, next(counter)))
        await self._reveal(report)
        self._log_summary(report)
        return report

    @staticmethod
    def _log_summary(report: RunReport) -> None:
        if not report.tabs_scanned and not report.tabs_failed:
            return
        logger.info(
            "Run %s finished: %d tab(s) scanned, %d skipped, %d download(s) submitted, %d failed",
            report.mode,
            report.tabs_scanned,
            report.tabs_failed,
            report.submitted,
            report.failed,
        )
