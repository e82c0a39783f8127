"""Entry point: ``python -m portfolio_news.check_keys``

Prints which provider credentials are configured.  Reads the process
environment, optionally seeded from a dotenv-style file
(``--env-file .env.local``).  A value still holding a ``your_…``
placeholder counts as missing.
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class KeyCheck:
    label: str
    env_var: str


KEY_CHECKS: tuple[KeyCheck, ...] = (
    KeyCheck("NewsAPI", "NEWS_API_KEY"),
    KeyCheck("Finnhub API", "FINNHUB_API_KEY"),
    KeyCheck("Alpha Vantage (news sentiment)", "ALPHA_VANTAGE_API_KEY"),
    KeyCheck("Twitter Bearer Token", "TWITTER_BEARER_TOKEN"),
)


def read_env_file(path: str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines; ``#`` comments and blank lines are skipped."""
    values: dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export "):].strip()
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            if key:
                values[key] = value.strip().strip("\"'")
    return values


def is_configured(value: str | None) -> bool:
    return bool(value) and "your_" not in (value or "")


def lookup(env: Mapping[str, str], var: str) -> str:
    return env.get(var) or env.get(f"NEXT_PUBLIC_{var}") or ""


def report(env: Mapping[str, str]) -> tuple[list[str], int]:
    """Return ``(lines, configured_count)``."""
    lines: list[str] = []
    configured = 0
    for check in KEY_CHECKS:
        ok = is_configured(lookup(env, check.env_var))
        if ok:
            configured += 1
        status = "configured" if ok else "optional"
        lines.append(f"{status:<12} {check.label} ({check.env_var})")
    lines.append("reddit       public JSON, no key needed")
    return lines, configured


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="portfolio_news.check_keys", description=__doc__.splitlines()[0])
    parser.add_argument("--env-file", default="", help="dotenv-style file to read before the environment.")
    args = parser.parse_args(argv)

    env: dict[str, str] = {}
    if args.env_file:
        try:
            env.update(read_env_file(args.env_file))
        except FileNotFoundError:
            print(f"env file not found: {args.env_file}", file=sys.stderr)
            return 2
    env.update({k: v for k, v in os.environ.items() if v})

    lines, configured = report(env)
    print("API key configuration")
    print("=" * 50)
    for line in lines:
        print(line)
    print("=" * 50)
    print(f"{configured}/{len(KEY_CHECKS)} provider keys configured")
    if configured == 0:
        print("Only Reddit will be queried; set the keys above for broader coverage.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
