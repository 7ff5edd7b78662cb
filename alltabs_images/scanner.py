"""In-page image discovery and conversion of page snapshots to candidates."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

from playwright.async_api import Error as PlaywrightError, Page

from .models import ImageCandidate
from .scoring import background_urls, best_srcset_entry, image_area, merge_candidates
from .utils import resolve_url

logger = logging.getLogger("alltabs_images")

# Runs inside the page. Only plain JSON data leaves the page context.
# img.src is already resolved by the browser, honouring <base href>.
SCAN_SCRIPT = """
() => {
  const images = [];
  document.querySelectorAll("img[src]").forEach((img) => {
    images.push({
      src: img.src,
      naturalWidth: img.naturalWidth || 0,
      naturalHeight: img.naturalHeight || 0,
      width: img.width || 0,
      height: img.height || 0,
    });
  });

  const srcsets = [];
  document.querySelectorAll("source[srcset],img[srcset]").forEach((el) => {
    const set = el.getAttribute("srcset");
    if (set) srcsets.push(set);
  });

  const backgrounds = [];
  document.querySelectorAll("*").forEach((el) => {
    const bg = getComputedStyle(el).backgroundImage;
    if (bg && bg !== "none") backgrounds.push(bg);
  });

  return { base: location.href, images, srcsets, backgrounds };
}
"""


class ScanError(RuntimeError):
    """Raised when a tab cannot be scanned; the tab contributes no candidates."""


def candidates_from_snapshot(snapshot: Mapping[str, Any]) -> List[ImageCandidate]:
    """Score and deduplicate the raw element data collected by ``SCAN_SCRIPT``."""
    base = snapshot["base"]
    if not isinstance(base, str):
        raise TypeError(f"snapshot base must be a string, got {type(base).__name__}")

    found: List[ImageCandidate] = []

    def push(raw: Any, score: int = 0) -> None:
        url = resolve_url(raw, base) if isinstance(raw, str) else None
        if url:
            found.append(ImageCandidate(url, score))

    for record in snapshot.get("images") or []:
        push(record.get("src"), image_area(record))

    for srcset in snapshot.get("srcsets") or []:
        best = best_srcset_entry(srcset)
        if best:
            push(*best)

    for background in snapshot.get("backgrounds") or []:
        for url in background_urls(background):
            push(url, 0)

    return merge_candidates(found)


async def scan_page(page: Page) -> List[ImageCandidate]:
    """Collect image candidates from a live page.

    Raises ``ScanError`` if the page cannot be evaluated or returns something
    unusable; a failed scan never yields a partial list.
    """
    try:
        snapshot = await page.evaluate(SCAN_SCRIPT)
    except PlaywrightError as exc:
        raise ScanError(f"could not evaluate scan script: {exc}") from exc
    try:
        candidates = candidates_from_snapshot(snapshot)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ScanError(f"malformed page snapshot: {exc}") from exc
    logger.debug("Found %d image candidates on %s", len(candidates), snapshot["base"])
    return candidates
