"""Helpers for URL admission, resolution and download naming."""

from __future__ import annotations

from typing import Optional
from urllib.parse import SplitResult, urljoin, urlsplit

ALLOWED_SCHEMES = {"http", "https", "file"}
FALLBACK_EXTENSION = ".png"


def _split(url: str) -> Optional[SplitResult]:
    """Split a URL, returning ``None`` when it is not well formed."""
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if not parts.scheme:
        return None
    if parts.scheme in ("http", "https") and not parts.hostname:
        return None
    return parts


def is_allowed_url(url: Optional[str]) -> bool:
    """Return True when ``url`` parses and uses http, https or file."""
    if not url:
        return False
    parts = _split(url.strip())
    return parts is not None and parts.scheme in ALLOWED_SCHEMES


def resolve_url(raw: Optional[str], base: str) -> Optional[str]:
    """Resolve ``raw`` against ``base``; ``None`` if it is not a fetchable location.

    Pseudo-URLs such as ``data:`` or ``javascript:`` carry no host and are
    dropped here along with anything that fails to parse.
    """
    if not raw:
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        absolute = urljoin(base, raw)
    except ValueError:
        return None
    parts = _split(absolute)
    if parts is None:
        return None
    if not parts.netloc and parts.scheme != "file":
        return None
    return absolute


def make_filename(folder: str, url: str, index: int) -> str:
    """Derive ``<folder>/<basename>`` for a download of ``url``.

    The last non-empty path segment is used as the base name, falling back to
    ``image-<index>``. Names without an extension get ``.png``.
    """
    parts = _split(url)
    segments = [segment for segment in parts.path.split("/") if segment] if parts else []
    name = segments[-1] if segments else f"image-{index}"
    if "." not in name:
        name += FALLBACK_EXTENSION
    return f"{folder}/{name}"
