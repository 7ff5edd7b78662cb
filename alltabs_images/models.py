"""Data models used throughout the harvesting pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Tab:
    """A browser tab as seen for the duration of one run."""

    id: str
    url: Optional[str]


@dataclass(frozen=True)
class ImageCandidate:
    """Image reference discovered on a page with its quality score."""

    url: str
    score: int = 0


@dataclass
class DownloadJob:
    """Outcome of a single download submission."""

    url: str
    filename: str
    result_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result_id is not None


@dataclass
class RunReport:
    """Summary of one download-all or download-largest run."""

    mode: str
    folder: Optional[str] = None
    tabs_scanned: int = 0
    tabs_failed: int = 0
    jobs: List[DownloadJob] = field(default_factory=list)

    @property
    def first_success(self) -> Optional[DownloadJob]:
        return next((job for job in self.jobs if job.succeeded), None)

    @property
    def submitted(self) -> int:
        return sum(1 for job in self.jobs if job.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for job in self.jobs if not job.succeeded)
