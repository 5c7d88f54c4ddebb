"""Command-line entrypoint that extracts news items from one page."""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from adaptive_news.config import SettingsError, load_settings
from adaptive_news.config.settings import DEFAULT_SETTINGS_PATH, ENV_SETTINGS_PATH, AppSettings
from adaptive_news.pipeline import FetchError, NewsExtractionService, PageFetcher
from adaptive_news.telemetry import configure_logging, configure_metrics_from_env


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract news items from a rendered news page.")
    parser.add_argument("url", help="Page URL, used to resolve relative links")
    parser.add_argument("--html-file", type=Path, help="Read HTML from this file instead of downloading it")
    parser.add_argument("--max-items", type=int, help="Maximum number of records to print (0 = unlimited)")
    parser.add_argument("--settings", type=Path, help="Path to a settings YAML file")
    return parser


def _load(path: Optional[Path]) -> AppSettings:
    if path is None and not os.environ.get(ENV_SETTINGS_PATH) and not DEFAULT_SETTINGS_PATH.exists():
        return AppSettings()
    return load_settings(path)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging()
    configure_metrics_from_env()

    try:
        settings = _load(args.settings)
    except SettingsError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        return 2
    if args.max_items is not None:
        settings.extraction.max_items = max(0, args.max_items)

    try:
        if args.html_file is not None:
            html = args.html_file.read_text(encoding="utf-8", errors="replace")
        else:
            html = PageFetcher(settings.request_timeout, settings.user_agent).fetch(args.url)
    except (FetchError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    page = NewsExtractionService(settings).extract_page(html, args.url)
    json.dump(page.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
