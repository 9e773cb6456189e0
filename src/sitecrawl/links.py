"""
URL normalization, reference extraction and link classification.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup

# Default ports dropped during normalization
DEFAULT_PORTS: frozenset[Tuple[str, int]] = frozenset((("http", 80), ("https", 443)))

# Elements whose href/src attributes are inspected
REFERENCE_TAGS: Tuple[str, ...] = ("script", "link", "img", "area", "a")
REFERENCE_ATTRS: frozenset[str] = frozenset(("href", "src"))


class LinkCategory(str, Enum):
    """Category assigned to one extracted reference."""
    SCRIPT = "script"
    FILE = "file"
    IMAGE = "image"
    INTERNAL = "internal"
    EXTERNAL = "external"


TAG_CATEGORIES: Dict[str, LinkCategory] = {
    "script": LinkCategory.SCRIPT,
    "link": LinkCategory.FILE,
    "img": LinkCategory.IMAGE,
    "area": LinkCategory.INTERNAL,
    "a": LinkCategory.INTERNAL,
}


def normalize_url(url: str) -> Optional[str]:
    """
    Normalize URL for cache lookups and display.

    - Lowercases scheme and host
    - Removes default ports (:80, :443)
    - Drops fragments (#...)
    - Keeps querystrings (they matter for uniqueness)

    Returns None if the URL cannot be parsed.
    """
    try:
        parsed = urlsplit(url.strip())
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    if (scheme, port) in DEFAULT_PORTS:
        netloc = netloc.rsplit(":", 1)[0]

    path = parsed.path or ("/" if netloc else "")
    return urlunsplit((scheme, netloc, path, parsed.query, ""))


def _parse_netloc(url: str) -> Optional[str]:
    """Return the lowercased netloc of an absolute URL, or None if it does not parse."""
    try:
        parsed = urlsplit(url)
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if not parsed.scheme:
        return None
    return parsed.netloc.lower()


def classify_link(
    value: str,
    tag: str,
    scheme: str,
    host: str,
    restrict_to_domain: bool,
) -> Optional[Tuple[str, LinkCategory]]:
    """
    Resolve a raw href/src value and assign it a category.

    Root-relative values ("/x") are joined to the page's scheme and host and
    are never external. Scheme-relative ("//x") and absolute values are
    forced into EXTERNAL under domain restriction when their host differs
    from the page host.

    Returns None for empty values, unknown tags, and values that do not
    resolve to a parseable absolute URL.
    """
    category = TAG_CATEGORIES.get(tag.lower())
    value = value.strip()
    if category is None or not value:
        return None

    if value.startswith("/") and not value.startswith("//"):
        absolute = f"{scheme}://{host}{value}"
        if _parse_netloc(absolute) is None:
            return None
        return absolute, category

    absolute = f"{scheme}:{value}" if value.startswith("//") else value
    link_host = _parse_netloc(absolute)
    if link_host is None:
        return None

    if restrict_to_domain and link_host != host.lower():
        return absolute, LinkCategory.EXTERNAL
    return absolute, category


def extract_references(html: str) -> Iterator[Tuple[str, str]]:
    """Yield (value, tag) for every non-empty href/src on reference elements, in document order."""
    soup = BeautifulSoup(html, "lxml")
    for element in soup.find_all(list(REFERENCE_TAGS)):
        tag = element.name.lower()
        for key, attr_value in element.attrs.items():
            if key.lower() not in REFERENCE_ATTRS:
                continue
            if isinstance(attr_value, list):
                attr_value = " ".join(attr_value)
            if attr_value:
                yield attr_value, tag
