"""Normalisation functions: raw provider payloads → NewsItem.

Each provider has its own normaliser.  The functions are
**schema-tolerant**: missing or ``null`` fields fall back to placeholders
so a single odd article never sinks a whole batch.

Reddit (``/r/<sub>/hot.json`` and ``search.json`` children[].data):
    id, title, selftext, permalink, created_utc, score, num_comments,
    author, subreddit, thumbnail

NewsAPI (``/v2/everything`` articles[]):
    source.name, author, title, description, url, urlToImage,
    publishedAt, content

Finnhub (``/news`` and ``/company-news``):
    id, headline, summary, url, datetime (epoch s), source, image,
    related

Alpha Vantage (NEWS_SENTIMENT feed[]):
    title, url, time_published ("YYYYMMDDTHHMMSS"), authors, summary,
    banner_image, source, overall_sentiment_score, ticker_sentiment

Twitter v2 (recent search data[]):
    id, text, created_at, public_metrics
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from dateutil import parser as dtparser

from . import scoring
from .common_types import Engagement, NewsItem
from .sentiment import analyze_sentiment, categorize_news, map_sentiment_score

logger = logging.getLogger(__name__)

SUMMARY_MAX_CHARS = 200
TWEET_TITLE_CHARS = 80
TWEET_MARKER = "\U0001f4ac"  # speech balloon


# ── Shared helpers ──────────────────────────────────────────────

def truncate_summary(text: str | None, max_chars: int = SUMMARY_MAX_CHARS) -> str:
    """Cut *text* to *max_chars* and append ``...`` when it was longer."""
    text = (text or "").strip()
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def url_key(url: str | None, *fallback: Any) -> str:
    """Short stable id for providers that only identify articles by URL.

    Articles without a URL are keyed on *fallback* (title, publish time)
    so two of them in one batch do not share an id.
    """
    basis = url or "\x1f".join(str(part or "") for part in fallback)
    return hashlib.sha1(basis.encode("utf-8")).hexdigest()[:12]


def iso_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def epoch_to_iso(ts: Any) -> str:
    """Epoch seconds → ISO-8601 UTC; empty string when unusable."""
    try:
        return iso_utc(datetime.fromtimestamp(float(ts), tz=timezone.utc))
    except (TypeError, ValueError, OverflowError, OSError):
        return ""


def to_iso(s: str | None) -> str:
    """Parse any date string the providers emit into ISO-8601 UTC.

    Naive datetimes are assumed UTC.  Returns ``""`` for empty or
    unparseable input.
    """
    if not s:
        return ""
    s_stripped = str(s).strip()
    try:
        dt = dtparser.parse(s_stripped)
    except (ValueError, OverflowError):
        logger.warning("Unparseable date %r; leaving publishedAt empty.", s_stripped[:80])
        return ""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return iso_utc(dt)


def _now_iso() -> str:
    return iso_utc(datetime.now(timezone.utc))


def _int_or_none(v: Any) -> int | None:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


# ── Reddit ──────────────────────────────────────────────────────

def normalize_reddit(post: dict[str, Any], symbols: Iterable[str] | None = None) -> NewsItem:
    """Normalise one Reddit listing child's ``data`` dict."""
    title = str(post.get("title") or "").strip()
    selftext = str(post.get("selftext") or "")
    thumbnail = post.get("thumbnail")
    return NewsItem(
        id=f"reddit_{post.get('id') or url_key(post.get('permalink'))}",
        title=title,
        summary=truncate_summary(selftext),
        url=f"https://reddit.com{post.get('permalink') or ''}",
        published_at=epoch_to_iso(post.get("created_utc")) or _now_iso(),
        sentiment=analyze_sentiment(f"{title} {selftext}"),
        source=f"r/{post.get('subreddit') or 'unknown'}",
        category="market",
        relevance_score=scoring.reddit_relevance(post, symbols),
        engagement=Engagement(
            upvotes=_int_or_none(post.get("score")),
            comments=_int_or_none(post.get("num_comments")),
        ),
        image_url=thumbnail if isinstance(thumbnail, str) and thumbnail.startswith("http") else None,
        author=post.get("author") or None,
    )


# ── NewsAPI ─────────────────────────────────────────────────────

def normalize_newsapi(article: dict[str, Any], symbols: Iterable[str] | None = None) -> NewsItem:
    """Normalise one NewsAPI ``articles[]`` entry."""
    title = str(article.get("title") or "").strip()
    description = str(article.get("description") or "")
    summary = truncate_summary(description or article.get("content"))
    source = article.get("source")
    source_name = source.get("name") if isinstance(source, dict) else None
    url = str(article.get("url") or "")
    text = f"{title} {description}"
    return NewsItem(
        id=f"newsapi_{url_key(url, title, article.get('publishedAt'))}",
        title=title,
        summary=summary,
        url=url or "#",
        published_at=to_iso(article.get("publishedAt")) or _now_iso(),
        sentiment=analyze_sentiment(text),
        source=str(source_name or "NewsAPI"),
        category=categorize_news(text),
        relevance_score=scoring.newsapi_relevance(article, symbols),
        image_url=article.get("urlToImage") or None,
        author=article.get("author") or None,
    )


# ── Finnhub ─────────────────────────────────────────────────────

def normalize_finnhub(
    article: dict[str, Any],
    symbols: Iterable[str] | None = None,
    queried_symbol: str | None = None,
) -> NewsItem:
    """Normalise one Finnhub news entry.

    *queried_symbol* is the ticker of the ``company-news`` request the
    article came from; general-market articles pass ``None``.
    """
    title = str(article.get("headline") or article.get("title") or "").strip()
    summary = str(article.get("summary") or "")
    url = str(article.get("url") or "")
    symbol = article.get("symbol") or queried_symbol or None
    local_id = article.get("id") or url_key(url, title, article.get("datetime"))
    return NewsItem(
        id=f"finnhub_{local_id}",
        title=title,
        summary=truncate_summary(summary),
        url=url or "#",
        published_at=epoch_to_iso(article.get("datetime")) or _now_iso(),
        sentiment=analyze_sentiment(f"{title} {summary}"),
        source=str(article.get("source") or "Finnhub"),
        category="stock",
        symbol=symbol,
        relevance_score=scoring.finnhub_relevance(symbol, symbols),
        image_url=article.get("image") or None,
    )


# ── Alpha Vantage ───────────────────────────────────────────────

def normalize_alphavantage(article: dict[str, Any], symbols: Iterable[str] | None = None) -> NewsItem:
    """Normalise one Alpha Vantage NEWS_SENTIMENT ``feed[]`` entry."""
    url = str(article.get("url") or "")
    title = str(article.get("title") or "").strip()
    authors = article.get("authors")
    try:
        score = float(article.get("overall_sentiment_score") or 0)
    except (TypeError, ValueError):
        score = 0.0
    return NewsItem(
        id=f"alphavantage_{url_key(url, title, article.get('time_published'))}",
        title=title,
        summary=truncate_summary(article.get("summary")),
        url=url or "#",
        published_at=to_iso(article.get("time_published")) or _now_iso(),
        sentiment=map_sentiment_score(score),
        source=str(article.get("source") or "Alpha Vantage"),
        category="stock",
        relevance_score=scoring.alphavantage_relevance(article, symbols),
        image_url=article.get("banner_image") or None,
        author=authors[0] if isinstance(authors, list) and authors else None,
    )


# ── Twitter ─────────────────────────────────────────────────────

def normalize_tweet(tweet: dict[str, Any], symbol: str) -> NewsItem:
    """Normalise one Twitter v2 search result found for *symbol*."""
    text = str(tweet.get("text") or "")
    head = text[:TWEET_TITLE_CHARS]
    if len(text) > TWEET_TITLE_CHARS:
        head += "..."
    metrics = tweet.get("public_metrics") or {}
    return NewsItem(
        id=f"twitter_{tweet.get('id')}",
        title=f"{TWEET_MARKER} {head}",
        summary=text,
        url=f"https://twitter.com/user/status/{tweet.get('id')}",
        published_at=to_iso(tweet.get("created_at")) or _now_iso(),
        sentiment=analyze_sentiment(text),
        source="Twitter (Limited)",
        category="stock",
        symbol=symbol,
        relevance_score=scoring.twitter_relevance(tweet, symbol),
        engagement=Engagement(
            upvotes=_int_or_none(metrics.get("like_count")) or 0,
            comments=_int_or_none(metrics.get("reply_count")) or 0,
            shares=_int_or_none(metrics.get("retweet_count")) or 0,
        ),
    )
