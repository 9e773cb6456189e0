"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Tuple

from sitecrawl.core import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, CrawlStats, Crawler

TRUE_VALUES: frozenset[str] = frozenset(("1", "t", "T", "TRUE", "true", "True"))
FALSE_VALUES: frozenset[str] = frozenset(("0", "f", "F", "FALSE", "false", "False"))

LEGEND = (
    "Output: Path (Number of Scripts, Number of Files (e.g, CSS), "
    "Number of Images, Number of External Links)"
)


def parse_bool(text: str) -> bool:
    """Parse a boolean flag such as 'true', 'F' or '1'."""
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean: {text!r}")


def check_input(restrict_arg: str, depth_arg: str) -> Tuple[bool, int]:
    """Validate the restrict-to-domain and max-depth arguments."""
    try:
        depth = int(depth_arg)
    except ValueError:
        raise ValueError("max-depth must be an integer.") from None
    if depth < 1:
        raise ValueError("max-depth must be greater than or equal to 1.")
    try:
        restrict = parse_bool(restrict_arg)
    except ValueError:
        raise ValueError("restrict-to-domain must be a boolean value (e.g., true, false, 1, 0).") from None
    return restrict, depth


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"URLs fetched:           {stats.urls_fetched}\n")
    sys.stderr.write(f"Pages fetched:          {stats.pages_fetched}\n")
    sys.stderr.write(f"Fetch failures:         {stats.fetch_failures}\n")
    sys.stderr.write(f"Cache hits:             {stats.cache_hits}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            if error_type == "connection_error":
                label = "Connection errors"
            elif error_type == "non_html":
                label = "Non-HTML responses"
            elif error_type == "parse_error":
                label = "Parse errors"
            else:
                label = f"HTTP {error_type}"
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = argparse.ArgumentParser(
        prog="sitecrawl",
        description="Crawl a site depth-first and summarize the scripts, files, images and links on each page.",
        epilog="Example: sitecrawl http://example.com false 2",
    )
    parser.add_argument("site", help="Start URL (e.g. https://example.com)")
    parser.add_argument("restrict_to_domain", help="Count links to other hosts as external (true/false)")
    parser.add_argument("max_depth", help="Maximum link depth to follow, starting at 1")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    args = parser.parse_args(argv)

    try:
        restrict, depth = check_input(args.restrict_to_domain, args.max_depth)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if args.timeout <= 0:
        print("Error: timeout must be greater than 0.")
        return 1

    crawler = Crawler(timeout_s=args.timeout, user_agent=args.user_agent, verbose=args.verbose)
    ok, message = crawler.init(args.site, restrict, depth)
    if not ok:
        print(f"Error: {message}")
        return 1

    print(LEGEND)
    crawler.crawl(args.site)

    if args.verbose:
        print_summary(crawler.stats)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
