"""portfolio_news – multi-source news aggregation for a portfolio dashboard.

Fans out to Reddit, NewsAPI, Finnhub and Alpha Vantage (plus a
quota-gated Twitter search) with unified normalisation, exact-title
dedupe, relevance ranking and portfolio reprioritisation.

Call ``NewsAggregator(Config()).get_comprehensive_news(symbols, limit)``;
``feed.build_news_feed()`` wraps the result for the UI.
"""
