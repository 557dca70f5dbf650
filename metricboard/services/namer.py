"""
Namer - derives service identifiers and endpoint prefixes from URLs
"""

import re
from typing import List, Optional

DEFAULT_SERVICE = "default_service"
ENDPOINT_DEPTH = 4

_NON_WORD = re.compile(r"\W")


def _segments(url: str) -> List[str]:
    path = (url or "").split("?", 1)[0].split("#", 1)[0]
    return [s for s in path.split("/") if s]


def normalized_path(url: str) -> str:
    """Path of url without query, fragment or empty segments"""
    return "/" + "/".join(_segments(url))


def derive_service(path: str) -> str:
    """First non-empty path segment, or DEFAULT_SERVICE"""
    segments = _segments(path)
    return segments[0] if segments else DEFAULT_SERVICE


def endpoint_prefix(url: str) -> Optional[str]:
    """
    /a/b/c/d/ for URLs with more than four path segments, else None.
    """
    segments = _segments(url)
    if len(segments) <= ENDPOINT_DEPTH:
        return None
    return "/" + "/".join(segments[:ENDPOINT_DEPTH]) + "/"


def endpoint_slug(prefix: str) -> str:
    return _NON_WORD.sub("_", prefix)
