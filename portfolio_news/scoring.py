"""Provider-specific relevance scores.

Scores are additive and unbounded: a provider-trust base plus bonuses for
symbol mentions and (for social sources) engagement.  The constants are
deliberately not normalised across providers, so cross-provider ranking
is approximate.

Each function takes the **raw** provider payload so it can look at
fields the normalised ``NewsItem`` drops (ticker_sentiment, public
metrics, …).
"""

from __future__ import annotations

from typing import Any, Iterable

# ── Base scores (provider trust) ────────────────────────────────

NEWSAPI_BASE = 5.0
FINNHUB_BASE = 7.0
ALPHAVANTAGE_BASE = 8.0
TWITTER_BASE = 5.0

# ── Bonuses ─────────────────────────────────────────────────────

REDDIT_SYMBOL_BONUS = 10.0
NEWSAPI_SYMBOL_BONUS = 10.0
FINNHUB_SYMBOL_BONUS = 15.0
ALPHAVANTAGE_TICKER_BONUS = 12.0
TWITTER_CASHTAG_BONUS = 10.0

REDDIT_MAX_UPVOTE_POINTS = 5.0
REDDIT_MAX_COMMENT_POINTS = 3.0


def _num(v: Any) -> float:
    try:
        return float(v or 0)
    except (TypeError, ValueError):
        return 0.0


def mentions_symbol(text: str, symbol: str) -> bool:
    """Case-insensitive bare or ``$``-prefixed substring match."""
    content = (text or "").lower()
    sym = symbol.lower()
    return sym in content or f"${sym}" in content


def reddit_relevance(post: dict[str, Any], symbols: Iterable[str] | None) -> float:
    """Engagement points (capped) plus a bonus per mentioned symbol."""
    score = min(_num(post.get("score")) / 100, REDDIT_MAX_UPVOTE_POINTS)
    score += min(_num(post.get("num_comments")) / 20, REDDIT_MAX_COMMENT_POINTS)
    # Heavily downvoted posts must not drag the score below zero.
    score = max(0.0, score)

    if symbols:
        content = f"{post.get('title') or ''} {post.get('selftext') or ''}"
        for sym in symbols:
            if mentions_symbol(content, sym):
                score += REDDIT_SYMBOL_BONUS
    return score


def newsapi_relevance(article: dict[str, Any], symbols: Iterable[str] | None) -> float:
    score = NEWSAPI_BASE
    if symbols:
        content = f"{article.get('title') or ''} {article.get('description') or ''}".lower()
        for sym in symbols:
            if sym.lower() in content:
                score += NEWSAPI_SYMBOL_BONUS
    return score


def finnhub_relevance(symbol: str | None, symbols: Iterable[str] | None) -> float:
    """Base plus a bonus when the article is tagged with a requested symbol."""
    score = FINNHUB_BASE
    if symbols and symbol and symbol in set(symbols):
        score += FINNHUB_SYMBOL_BONUS
    return score


def alphavantage_relevance(article: dict[str, Any], symbols: Iterable[str] | None) -> float:
    score = ALPHAVANTAGE_BASE
    ticker_sentiment = article.get("ticker_sentiment")
    if symbols and isinstance(ticker_sentiment, list):
        wanted = set(symbols)
        for entry in ticker_sentiment:
            if isinstance(entry, dict) and entry.get("ticker") in wanted:
                score += ALPHAVANTAGE_TICKER_BONUS
    return score


def tweet_engagement(tweet: dict[str, Any], include_replies: bool = False) -> int:
    """Likes + retweets (+ replies) from ``public_metrics``."""
    metrics = tweet.get("public_metrics") or {}
    total = int(_num(metrics.get("like_count")) + _num(metrics.get("retweet_count")))
    if include_replies:
        total += int(_num(metrics.get("reply_count")))
    return total


def twitter_relevance(tweet: dict[str, Any], symbol: str) -> float:
    score = TWITTER_BASE
    if f"${symbol}" in (tweet.get("text") or ""):
        score += TWITTER_CASHTAG_BONUS

    engagement = tweet_engagement(tweet, include_replies=True)
    if engagement > 100:
        score += 5
    if engagement > 1000:
        score += 10
    return score
