"""Tests for the dashboard feed payload, JSON export, both CLIs and log
redaction."""

from __future__ import annotations

import json
import logging
import os
import sys
from unittest.mock import MagicMock, patch

import pytest

from portfolio_news import check_keys, run
from portfolio_news.common_types import NewsItem
from portfolio_news.config import Config
from portfolio_news.feed import build_news_feed, export_feed
from portfolio_news.log_redaction import LogRedactionFilter, apply_log_redaction, redact_secrets

_CFG = Config(
    news_api_key="n",
    finnhub_api_key="",
    alpha_vantage_api_key="",
    twitter_bearer_token="",
    enable_reddit=True,
    request_timeout_s=1.0,
    adapter_timeout_s=1.0,
    default_limit=20,
    user_agent="test/1.0",
)


def _item(n: int, category: str = "market") -> NewsItem:
    return NewsItem(
        id=f"stub_{n}",
        title=f"Story {n}",
        summary="",
        url=f"https://example.com/{n}",
        published_at="2025-01-15T10:00:00Z",
        sentiment="neutral",
        source="stub",
        category=category,  # type: ignore[arg-type]
        relevance_score=5.0,
    )


def _aggregator(items=None, exc: Exception | None = None) -> MagicMock:
    agg = MagicMock()
    agg.cfg = _CFG
    if exc is not None:
        agg.get_comprehensive_news.side_effect = exc
    else:
        agg.get_comprehensive_news.return_value = items or []
    return agg


# ── build_news_feed ─────────────────────────────────────────────


class TestBuildNewsFeed:
    def test_payload_shape(self):
        agg = _aggregator([_item(1), _item(2)])
        payload = build_news_feed(agg, ["AAPL"], 10)
        agg.get_comprehensive_news.assert_called_once_with(["AAPL"], 10)
        assert [n["id"] for n in payload["news"]] == ["stub_1", "stub_2"]
        assert payload["sources"] == _CFG.available_sources
        assert payload["timestamp"].endswith("Z")
        assert "error" not in payload

    def test_category_filter_applied_after_query(self):
        agg = _aggregator([_item(1, "earnings"), _item(2, "market"), _item(3, "earnings")])
        payload = build_news_feed(agg, category="earnings")
        assert [n["id"] for n in payload["news"]] == ["stub_1", "stub_3"]
        agg.get_comprehensive_news.assert_called_once_with(None, None)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError, match="unknown category"):
            build_news_feed(_aggregator(), category="sports")

    def test_aggregator_failure_serves_fallback(self, caplog):
        agg = _aggregator(exc=RuntimeError("boom"))
        with caplog.at_level(logging.ERROR, logger="portfolio_news.feed"):
            payload = build_news_feed(agg, ["AAPL"])
        assert [n["id"] for n in payload["news"]] == ["fallback_1", "fallback_2"]
        assert payload["error"] == "Using fallback news data"
        assert set(payload["sources"]) == set(_CFG.available_sources)
        assert not any(payload["sources"].values())
        assert "serving fallback" in caplog.text


# ── export_feed ─────────────────────────────────────────────────


class TestExportFeed:
    def test_writes_json_and_creates_dirs(self, tmp_path):
        dest = tmp_path / "out" / "news.json"
        export_feed(str(dest), {"news": [], "sources": {}, "timestamp": "t"})
        assert json.loads(dest.read_text(encoding="utf-8"))["timestamp"] == "t"
        assert [p.name for p in dest.parent.iterdir()] == ["news.json"]

    def test_unserialisable_payload_touches_nothing(self, tmp_path):
        dest = tmp_path / "news.json"
        with pytest.raises(ValueError):
            export_feed(str(dest), {"bad": float("nan")})
        assert list(tmp_path.iterdir()) == []

    def test_returns_absolute_path_and_overwrites(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "news.json").write_text("old", encoding="utf-8")
        written = export_feed("news.json", {"news": [{"id": "a"}]})
        assert os.path.isabs(written) and os.path.samefile(written, tmp_path / "news.json")
        assert json.loads((tmp_path / "news.json").read_text(encoding="utf-8")) == {"news": [{"id": "a"}]}

    def test_failed_rename_cleans_up_temp_file(self, tmp_path):
        dest = tmp_path / "news.json"
        with patch("portfolio_news.feed.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                export_feed(str(dest), {"news": []})
        assert list(tmp_path.iterdir()) == []


# ── run CLI ─────────────────────────────────────────────────────


@pytest.fixture
def patched_run():
    agg = _aggregator([_item(1, "earnings"), _item(2)])
    with patch.object(run, "NewsAggregator", return_value=agg) as ctor, \
            patch.object(run, "apply_global_log_redaction"):
        yield ctor, agg


class TestRunMain:
    def test_prints_json(self, patched_run, capsys):
        ctor, agg = patched_run
        assert run.main(["--symbols", "aapl, NVDA", "--limit", "5"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert [n["id"] for n in out["news"]] == ["stub_1", "stub_2"]
        agg.get_comprehensive_news.assert_called_once_with(["aapl", "NVDA"], 5)
        agg.close.assert_called_once()

    def test_category_and_export(self, patched_run, tmp_path, capsys):
        dest = tmp_path / "feed.json"
        assert run.main(["--category", "earnings", "--export", str(dest)]) == 0
        assert capsys.readouterr().out == ""
        data = json.loads(dest.read_text(encoding="utf-8"))
        assert [n["id"] for n in data["news"]] == ["stub_1"]

    def test_bad_category_is_usage_error(self, patched_run):
        with pytest.raises(SystemExit):
            run.main(["--category", "sports"])


# ── check_keys CLI ──────────────────────────────────────────────


_ALL_KEY_VARS = [c.env_var for c in check_keys.KEY_CHECKS]


@pytest.fixture
def clean_env(monkeypatch):
    for var in _ALL_KEY_VARS:
        monkeypatch.delenv(var, raising=False)
        monkeypatch.delenv(f"NEXT_PUBLIC_{var}", raising=False)


class TestCheckKeys:
    def test_placeholder_counts_as_missing(self):
        assert check_keys.is_configured("abc123")
        assert not check_keys.is_configured("your_newsapi_key_here")
        assert not check_keys.is_configured("")
        assert not check_keys.is_configured(None)

    def test_report(self):
        env = {
            "NEWS_API_KEY": "abc",
            "FINNHUB_API_KEY": "your_finnhub_key",
            "NEXT_PUBLIC_TWITTER_BEARER_TOKEN": "tok",
        }
        lines, configured = check_keys.report(env)
        assert configured == 2
        assert lines[0].startswith("configured") and "NEWS_API_KEY" in lines[0]
        assert lines[1].startswith("optional") and "FINNHUB_API_KEY" in lines[1]
        assert lines[3].startswith("configured")
        assert lines[-1].startswith("reddit")

    def test_read_env_file(self, tmp_path):
        f = tmp_path / ".env.local"
        f.write_text('# comment\n\nNEWS_API_KEY="abc"\nJUNK\nFINNHUB_API_KEY = def\n', encoding="utf-8")
        assert check_keys.read_env_file(str(f)) == {"NEWS_API_KEY": "abc", "FINNHUB_API_KEY": "def"}

    def test_read_env_file_strips_export_prefix(self, tmp_path):
        f = tmp_path / ".env"
        f.write_text("export TWITTER_BEARER_TOKEN='tok'\nexport =nokey\n", encoding="utf-8")
        assert check_keys.read_env_file(str(f)) == {"TWITTER_BEARER_TOKEN": "tok"}

    def test_main_with_env_file(self, tmp_path, capsys, clean_env):
        f = tmp_path / ".env.local"
        f.write_text("NEWS_API_KEY=abc\nALPHA_VANTAGE_API_KEY=your_key\n", encoding="utf-8")
        assert check_keys.main(["--env-file", str(f)]) == 0
        out = capsys.readouterr().out
        assert "1/4 provider keys configured" in out

    def test_environment_overrides_file(self, tmp_path, capsys, clean_env, monkeypatch):
        f = tmp_path / ".env.local"
        f.write_text("NEWS_API_KEY=your_key\n", encoding="utf-8")
        monkeypatch.setenv("NEWS_API_KEY", "real")
        check_keys.main(["--env-file", str(f)])
        assert "1/4 provider keys configured" in capsys.readouterr().out

    def test_main_missing_env_file(self, tmp_path, capsys, clean_env):
        assert check_keys.main(["--env-file", str(tmp_path / "nope")]) == 2
        assert "not found" in capsys.readouterr().err

    def test_main_no_keys_hint(self, capsys, clean_env):
        assert check_keys.main([]) == 0
        assert "Only Reddit" in capsys.readouterr().out


# ── log redaction ───────────────────────────────────────────────


def _record(msg, args=None, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord("portfolio_news.test", logging.WARNING, __file__, 1, msg, args, exc_info)


class TestLogRedaction:
    def test_query_params_scrubbed(self):
        url = "https://newsapi.org/v2/everything?q=x&apiKey=abc123&pageSize=15"
        out = redact_secrets(url)
        assert "abc123" not in out
        assert "apiKey=***REDACTED***&pageSize=15" in out
        assert "zzz" not in redact_secrets("https://finnhub.io/api/v1/news?token=zzz")
        assert "avk" not in redact_secrets("query?function=NEWS_SENTIMENT&apikey=avk")

    def test_bearer_scrubbed(self):
        out = redact_secrets("Authorization: Bearer AAAA%2Bxyz.123")
        assert out == "Authorization: Bearer ***REDACTED***"

    def test_plain_text_untouched(self):
        assert redact_secrets("reddit returned 10 items") == "reddit returned 10 items"
        assert redact_secrets("") == ""

    def test_filter_renders_args(self):
        rec = _record("fetch %s failed: %s", ("newsapi", "url?apiKey=sekrit"))
        assert LogRedactionFilter().filter(rec) is True
        assert "sekrit" not in rec.getMessage()
        assert rec.getMessage().startswith("fetch newsapi failed")

    def test_filter_scrubs_traceback(self):
        try:
            raise RuntimeError("GET https://finnhub.io/api/v1/news?token=leak")
        except RuntimeError:
            rec = _record("boom", exc_info=sys.exc_info())
        LogRedactionFilter().filter(rec)
        assert "leak" not in logging.Formatter().format(rec)

    def test_apply_once_per_handler(self):
        logger = logging.getLogger("portfolio_news.test_redaction")
        handler = logging.NullHandler()
        logger.addHandler(handler)
        try:
            apply_log_redaction(logger)
            apply_log_redaction(logger)
            assert sum(isinstance(f, LogRedactionFilter) for f in handler.filters) == 1
        finally:
            logger.removeHandler(handler)

