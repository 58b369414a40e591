"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from sitecrawl.analysis import analyze_page
from sitecrawl.config import DEFAULT_USER_AGENT, CrawlConfig
from sitecrawl.core import CrawlReport, ProgressSnapshot, crawl
from sitecrawl.logger import setup_logger


def print_progress(snapshot: ProgressSnapshot) -> None:
    """Print real-time progress to stderr."""
    sys.stderr.write(
        f"[{snapshot.percent_complete:3d}%] Crawled: {snapshot.pages_crawled} | "
        f"Discovered: {snapshot.pages_discovered} | Queue: {snapshot.remaining} | "
        f"Batch: {snapshot.in_progress} | Depth: {snapshot.max_depth_reached}\n"
    )
    sys.stderr.flush()


def print_summary(report: CrawlReport) -> None:
    """Print crawl summary to stderr."""
    stats = report.stats
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Start URL:              {report.start_url}\n")
    sys.stderr.write(f"Pages crawled:          {stats.pages_crawled}\n")
    sys.stderr.write(f"Pages discovered:       {stats.pages_discovered}\n")
    sys.stderr.write(f"Pages failed:           {stats.pages_failed}\n")
    sys.stderr.write(f"Skipped by robots.txt:  {stats.pages_skipped}\n")
    sys.stderr.write(f"Max depth reached:      {stats.max_depth_reached}\n")
    sys.stderr.write(f"Duration:               {stats.crawl_duration_seconds:.1f}s\n")
    if report.cancelled:
        sys.stderr.write("Crawl was cancelled; results are partial.\n")
    sys.stderr.write("\n")

    failures = [r for r in report.results if not r.success]
    if failures:
        sys.stderr.write("Failures:\n")
        for result in failures:
            sys.stderr.write(f"  {result.url}: {result.error}\n")
        sys.stderr.write("\n")


def generate_output_path(start_url: str) -> Path:
    """Generate output path: crawls/{hostname}_{datetime}.json"""
    parsed = urlparse(start_url)
    hostname = parsed.hostname or "unknown"
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path("crawls") / f"{hostname_safe}_{timestamp}.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl same-host links starting from a URL and output JSON page analyses."
    )
    parser.add_argument("start_url", help="Start URL (e.g. https://example.com)")
    parser.add_argument("--max-pages", type=int, help="Maximum pages to crawl (default: 20)")
    parser.add_argument("--max-depth", type=int, help="Maximum link depth (default: 3)")
    parser.add_argument("--concurrency", type=int, help="Pages fetched per batch (default: 3)")
    parser.add_argument("--delay", type=float, help="Seconds to wait after each fetch (default: 1.0)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 30)")
    parser.add_argument("--max-retries", type=int, help="Retries per failed fetch (default: 2)")
    parser.add_argument("--user-agent", help=f"User-Agent header (default: {DEFAULT_USER_AGENT})")
    parser.add_argument("--ignore-robots", action="store_true", help="Do not consult robots.txt")
    parser.add_argument("--keep-query", action="store_true", help="Treat URLs differing by query string as distinct")
    parser.add_argument("--no-redirects", action="store_true", help="Do not follow redirects")
    parser.add_argument("--skip-assets", action="store_true", help="Do not queue images, media, archives, css/js")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in crawls/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress, log messages and summary")
    parser.add_argument("--log-file", help="Also write log messages to this file")
    return parser


def config_from_args(args: argparse.Namespace) -> CrawlConfig:
    return CrawlConfig.from_mapping({
        "max_pages": args.max_pages,
        "max_depth": args.max_depth,
        "concurrency": args.concurrency,
        "delay": args.delay,
        "timeout": args.timeout,
        "max_retries": args.max_retries,
        "user_agent": args.user_agent,
        "respect_robots": not args.ignore_robots,
        "ignore_query": not args.keep_query,
        "follow_redirects": not args.no_redirects,
        "skip_assets": args.skip_assets,
    })


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    setup_logger(log_file=args.log_file, level=logging.INFO if args.verbose else logging.WARNING)

    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=1) as runner:
        future = runner.submit(
            crawl,
            args.start_url,
            config,
            analyze_page,
            print_progress if args.verbose else None,
            cancel=cancel,
        )
        try:
            report = future.result()
        except KeyboardInterrupt:
            sys.stderr.write("\nInterrupted; finishing the current batch...\n")
            cancel.set()
            report = future.result()

    if args.verbose:
        print_summary(report)

    json_text = json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out) if args.out else generate_output_path(report.start_url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
