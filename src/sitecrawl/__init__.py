"""
Web crawler that walks internal links depth-first from a seed URL.
Prints, per page, how many scripts, files, images and external links it references.
"""
from sitecrawl.core import Crawler, CrawlConfig, CrawlStats, PageResult
from sitecrawl.links import LinkCategory, classify_link, normalize_url

__version__ = "1.0.0"
__all__ = [
    "Crawler",
    "CrawlConfig",
    "CrawlStats",
    "PageResult",
    "LinkCategory",
    "classify_link",
    "normalize_url",
]
