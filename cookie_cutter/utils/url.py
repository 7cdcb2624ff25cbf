"""
URL helpers for hostname extraction and link navigation checks.
"""

from __future__ import annotations

import re
from urllib import parse

# href values that keep the browser on the current document.
_NO_OP_HREF_RE = re.compile(r"^(#.*|javascript:\s*(void\s*\(?\s*0?\s*\)?)?\s*;?\s*)$", re.IGNORECASE)


def extract_hostname(url: str) -> str:
    """Extract the hostname from a URL string."""
    try:
        parsed = parse.urlparse(url)
        return parsed.hostname or "unknown"
    except ValueError:
        return "unknown"


def is_navigating_href(href: str | None) -> bool:
    """Return ``True`` if following *href* would leave the current page.

    Missing or empty hrefs, fragment-only hrefs and ``javascript:``
    no-ops are JS-driven actions, everything else is navigation.
    """
    if href is None:
        return False
    trimmed = href.strip()
    if not trimmed:
        return False
    return not _NO_OP_HREF_RE.match(trimmed)
