"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import sys
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, TextIO, Tuple
from urllib.parse import urlsplit

import requests
from bs4.builder import ParserRejectedMarkup

from sitecrawl.links import LinkCategory, classify_link, extract_references, normalize_url

DEFAULT_TIMEOUT: float = 15.0
DEFAULT_USER_AGENT: str = "SiteCrawl/1.0"
SUPPORTED_SCHEMES: frozenset[str] = frozenset(("http", "https"))
FAILURE_MARKER: str = " -> Failed to Fetch (!!)"
INDENT: str = "    "


@dataclass(frozen=True, slots=True)
class PageResult:
    """Categorized references found on a single fetched page."""
    location: str
    scripts: Tuple[str, ...] = ()
    files: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()
    internal_links: Tuple[str, ...] = ()
    external_links: Tuple[str, ...] = ()

    def counts(self) -> Tuple[int, int, int, int]:
        """Return (scripts, files, images, external links) counts."""
        return len(self.scripts), len(self.files), len(self.images), len(self.external_links)

    def summary_line(self, failed: bool = False) -> str:
        """Format as 'host+path. (scripts, files, images, external)'."""
        parsed = urlsplit(self.location)
        path = parsed.path + FAILURE_MARKER if failed else parsed.path
        scripts, files, images, external = self.counts()
        return f"{parsed.netloc}{path}. ({scripts}, {files}, {images}, {external})"


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Crawl-wide settings, fixed once a crawl is initialized."""
    seed_url: str
    restrict_to_domain: bool
    max_depth: int
    timeout_s: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max-depth must be greater than or equal to 1.")
        if self.timeout_s <= 0:
            raise ValueError("timeout must be greater than 0.")


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    urls_fetched: int = 0
    pages_fetched: int = 0
    fetch_failures: int = 0
    cache_hits: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_error(self, kind: str) -> None:
        """Record a failed fetch by failure kind."""
        self.fetch_failures += 1
        self.error_counts[kind] += 1


def build_page_result(location: str, html: str, restrict_to_domain: bool) -> PageResult:
    """
    Classify every reference in an HTML document fetched from location.

    One absolute URL lands in exactly one category; when the same URL is
    referenced by several elements, the last one in document order decides.
    """
    parsed = urlsplit(location)
    categories: Dict[str, LinkCategory] = {}
    for value, tag in extract_references(html):
        classified = classify_link(value, tag, parsed.scheme, parsed.netloc, restrict_to_domain)
        if classified is not None:
            url, category = classified
            categories[url] = category

    buckets: Dict[LinkCategory, List[str]] = {category: [] for category in LinkCategory}
    for url, category in categories.items():
        buckets[category].append(url)

    return PageResult(
        location=location,
        scripts=tuple(buckets[LinkCategory.SCRIPT]),
        files=tuple(buckets[LinkCategory.FILE]),
        images=tuple(buckets[LinkCategory.IMAGE]),
        internal_links=tuple(sorted(buckets[LinkCategory.INTERNAL])),
        external_links=tuple(buckets[LinkCategory.EXTERNAL]),
    )


def _is_html(content_type: str) -> bool:
    """Treat a missing Content-Type as HTML; otherwise require an HTML media type."""
    if not content_type:
        return True
    return "html" in content_type.lower()


class Crawler:
    """
    Depth-bounded, depth-first crawler with a per-crawl fetch cache.

    Usage:
        crawler = Crawler()
        ok, message = crawler.init("https://example.com", False, 2)
        if ok:
            crawler.crawl()
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout_s: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        out: Optional[TextIO] = None,
        verbose: bool = False,
    ) -> None:
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = user_agent
        self.session = session
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.out = out
        self.verbose = verbose

        self.config: Optional[CrawlConfig] = None
        self.results: Dict[str, PageResult] = {}
        self.failed: Set[str] = set()
        self.stats = CrawlStats()

    def init(self, seed_url: str, restrict_to_domain: bool, max_depth: int) -> Tuple[bool, str]:
        """
        Validate the seed URL and settings and reset all crawl state.

        Returns (True, "Success") or (False, error message).
        """
        try:
            parsed = urlsplit(seed_url)
            parsed.port  # raises ValueError on a malformed port
        except ValueError:
            return False, f"Failed to parse URL: {seed_url}."
        if parsed.scheme not in SUPPORTED_SCHEMES:
            return False, f"Unsupported scheme: {parsed.scheme}. Supported schemes: http, https."

        try:
            config = CrawlConfig(
                seed_url=seed_url,
                restrict_to_domain=restrict_to_domain,
                max_depth=max_depth,
                timeout_s=self.timeout_s,
                user_agent=self.user_agent,
            )
        except ValueError as e:
            return False, str(e)

        self.config = config
        self.results = {}
        self.failed = set()
        self.stats = CrawlStats()
        return True, "Success"

    def crawl(self, seed_url: Optional[str] = None) -> None:
        """
        Walk internal links depth-first from the seed, printing one line per page.

        Pages are printed in pre-order. A page at max_depth is fetched and
        printed but its links are not followed.
        """
        if self.config is None:
            raise RuntimeError("Crawler.init() must succeed before crawl()")
        config = self.config
        start = seed_url if seed_url is not None else config.seed_url

        if self.verbose:
            sys.stderr.write(f"Starting crawl from: {start}\n")
            sys.stderr.write(f"Max depth: {config.max_depth}\n")
            sys.stderr.write(f"Restrict to domain: {config.restrict_to_domain}\n\n")

        stack: List[Tuple[str, int]] = [(start, 1)]
        while stack:
            url, depth = stack.pop()
            if depth > config.max_depth:
                continue

            location = normalize_url(url)
            if location is None:
                continue

            result = self._lookup(location)
            if result is None:
                self._emit(PageResult(location=location).summary_line(failed=True), depth)
                continue

            self._emit(result.summary_line(), depth)

            if depth == config.max_depth:
                continue
            # Reversed so the lowest link is popped (visited) first
            for link in reversed(result.internal_links):
                stack.append((link, depth + 1))

        if self.verbose:
            sys.stderr.write("\n")

    def fetch_url(self, url: str) -> Tuple[PageResult, bool]:
        """
        Fetch one URL and classify its references.

        Returns (result, True) on success or (empty result, False) on any
        network, HTTP, content-type or parse failure.
        """
        self.stats.urls_fetched += 1
        empty = PageResult(location=url)
        restrict = self.config.restrict_to_domain if self.config else False

        try:
            resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=True)
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            self._record_failure(url, str(status) if status else "connection_error", e)
            return empty, False
        except requests.RequestException as e:
            self._record_failure(url, "connection_error", e)
            return empty, False

        content_type = resp.headers.get("content-type") or ""
        if not _is_html(content_type):
            self._record_failure(url, "non_html", content_type)
            return empty, False

        try:
            result = build_page_result(url, resp.text, restrict)
        except ParserRejectedMarkup as e:
            self._record_failure(url, "parse_error", e)
            return empty, False

        self.stats.pages_fetched += 1
        if self.verbose:
            sys.stderr.write(f"  → OK {url} (+{len(result.internal_links)} links)\n")
        return result, True

    def _lookup(self, location: str) -> Optional[PageResult]:
        """Return the cached result for location, fetching it on first visit."""
        if location in self.results:
            self.stats.cache_hits += 1
            return self.results[location]
        if location in self.failed:
            return None

        result, ok = self.fetch_url(location)
        if not ok:
            self.failed.add(location)
            return None
        self.results[location] = result
        return result

    def _record_failure(self, url: str, kind: str, reason: object) -> None:
        self.stats.record_error(kind)
        if self.verbose:
            sys.stderr.write(f"  ✗ ERROR {url}: {reason}\n")

    def _emit(self, line: str, depth: int) -> None:
        out = self.out if self.out is not None else sys.stdout
        out.write(INDENT * (depth - 1) + line + "\n")
