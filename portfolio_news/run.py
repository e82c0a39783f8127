"""Entry point: ``python -m portfolio_news.run``

One-shot query from the command line.  Prints the dashboard feed as JSON
or writes it to ``--export``.

Credentials come from the environment:
    NEWS_API_KEY, FINNHUB_API_KEY, ALPHA_VANTAGE_API_KEY,
    TWITTER_BEARER_TOKEN, ENABLE_REDDIT=1 (default: on)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .common_types import CATEGORIES
from .config import Config
from .feed import build_news_feed, export_feed
from .log_redaction import apply_global_log_redaction
from .pipeline import NewsAggregator


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="portfolio_news.run",
        description="Aggregate portfolio news from every configured provider.",
    )
    parser.add_argument(
        "--symbols",
        default="",
        help="Comma-separated tickers, e.g. AAPL,NVDA (default: general market news).",
    )
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of items.")
    parser.add_argument("--category", choices=CATEGORIES, default=None, help="Keep only one category.")
    parser.add_argument("--export", default="", help="Write the JSON payload to this path instead of stdout.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    apply_global_log_redaction()

    cfg = Config()
    logging.getLogger(__name__).info("Configured sources: %s", cfg.available_sources)

    symbols = [s.strip() for s in args.symbols.split(",") if s.strip()]
    aggregator = NewsAggregator(cfg)
    try:
        payload = build_news_feed(aggregator, symbols or None, args.limit, args.category)
    finally:
        aggregator.close()

    if args.export:
        export_feed(args.export, payload)
        logging.getLogger(__name__).info("Wrote %d items to %s", len(payload["news"]), args.export)
    else:
        json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
