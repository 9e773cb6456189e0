# File: tests/conftest.py
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from sitecrawl.core import Crawler


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, url: str, text: str, content_type: Optional[str], status_code: int) -> None:
        self.url = url
        self.text = text
        self.status_code = status_code
        self.headers: CaseInsensitiveDict = CaseInsensitiveDict()
        if content_type is not None:
            self.headers["Content-Type"] = content_type

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


class FakeSession:
    """
    Serves canned pages keyed by exact URL.
    Unknown URLs raise requests.ConnectionError, like an unreachable host.
    """

    def __init__(self) -> None:
        self.headers: Dict[str, str] = {}
        self.pages: Dict[str, Tuple[str, Optional[str], int]] = {}
        self.requested: List[str] = []

    def add(self, url: str, html: str, content_type: Optional[str] = "text/html", status: int = 200) -> None:
        self.pages[url] = (html, content_type, status)

    def get(self, url: str, timeout: Optional[float] = None, allow_redirects: bool = True) -> FakeResponse:
        self.requested.append(url)
        if url not in self.pages:
            raise requests.ConnectionError(f"Failed to establish a new connection: {url}")
        html, content_type, status = self.pages[url]
        return FakeResponse(url, html, content_type, status)


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def make_crawler(session):
    """Return a factory building an initialized Crawler on the fake session."""

    def _make(seed: str = "http://example.com/", restrict: bool = False, depth: int = 1, **kwargs) -> Crawler:
        crawler = Crawler(session=session, **kwargs)
        ok, message = crawler.init(seed, restrict, depth)
        assert ok, message
        return crawler

    return _make
