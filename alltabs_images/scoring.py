"""Scoring rules for picking the best representation of an image."""

from __future__ import annotations

import math
import re
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .models import ImageCandidate

DENSITY_BASELINE = 1000

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_CSS_URL = re.compile(r"url\([\"']?(.*?)[\"']?\)", re.IGNORECASE)


def _dimension(value) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) and number > 0 else 0.0


def image_area(record: Mapping[str, object]) -> int:
    """Pixel area of an ``img``, preferring natural over layout dimensions."""
    width = _dimension(record.get("naturalWidth")) or _dimension(record.get("width"))
    height = _dimension(record.get("naturalHeight")) or _dimension(record.get("height"))
    return int(width * height)


def descriptor_score(descriptor: str) -> int:
    """Score a srcset descriptor: ``Nw`` gives N, ``Nx`` gives N * 1000."""
    if descriptor.endswith("w"):
        match = _INT_PREFIX.match(descriptor)
        return max(0, int(match.group())) if match else 0
    if descriptor.endswith("x"):
        match = _FLOAT_PREFIX.match(descriptor)
        if not match:
            return 0
        scaled = float(match.group()) * DENSITY_BASELINE
        if not math.isfinite(scaled):
            return 0
        return max(0, math.floor(scaled + 0.5))
    return 0


def iter_srcset(value: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(url, descriptor)`` pairs from a srcset attribute."""
    for part in value.split(","):
        pieces = part.split()
        if not pieces:
            continue
        yield pieces[0], pieces[1] if len(pieces) > 1 else ""


def best_srcset_entry(value: Optional[str]) -> Optional[Tuple[str, int]]:
    """Return the single highest scoring srcset entry; ties keep the first."""
    best: Optional[Tuple[str, int]] = None
    for url, descriptor in iter_srcset(value or ""):
        score = descriptor_score(descriptor)
        if best is None or score > best[1]:
            best = (url, score)
    return best


def background_urls(value: Optional[str]) -> List[str]:
    """Extract every ``url(...)`` reference from a background-image value."""
    if not value or value == "none":
        return []
    urls = []
    for entry in value.split(","):
        match = _CSS_URL.fullmatch(entry.strip())
        if match and match.group(1):
            urls.append(match.group(1))
    return urls


def merge_candidates(candidates: Iterable[ImageCandidate]) -> List[ImageCandidate]:
    """Collapse same-URL candidates keeping the maximum score, first-seen order."""
    best: Dict[str, int] = {}
    for candidate in candidates:
        current = best.get(candidate.url)
        if current is None or candidate.score > current:
            best[candidate.url] = candidate.score
    return [ImageCandidate(url, score) for url, score in best.items()]
