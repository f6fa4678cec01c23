"""
Startup prefetch.

Three full scans (articles, media, comments) fill both the aggregate keys
and one key per article.  Per-article comment keys are written for every
article, including those with no comments; media keys only for articles
that have media, matching what the read path caches.
"""
import logging
from collections import defaultdict

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.cache import ALL_ARTICLES, ALL_COMMENTS, ALL_VISUALS, article_key, cache, comments_key, visuals_key
from newsdesk.services import article_service, comment_service, media_service

logger = logging.getLogger(__name__)


async def warm_cache(db: AsyncSession) -> dict[str, int]:
    """Populate the cache from the store and return the number of rows per table."""
    articles = await article_service.load_all_rows(db)
    media = await media_service.load_all_rows(db)
    comments = await comment_service.load_all_rows(db)

    # Rows carry the padded external id; keys are built from the integer.
    await cache.set(ALL_ARTICLES, articles)
    for row in articles:
        await cache.set(article_key(int(row["article_id"])), row)

    await cache.set(ALL_VISUALS, media)
    media_by_article: dict[int, list[dict]] = defaultdict(list)
    for row in media:
        media_by_article[int(row["article_id"])].append(row)
    for article_id, rows in media_by_article.items():
        await cache.set(visuals_key(article_id), rows)

    await cache.set(ALL_COMMENTS, comments)
    comments_by_article: dict[int, list[dict]] = {int(row["article_id"]): [] for row in articles}
    for row in comments:
        comments_by_article.setdefault(int(row["article_id"]), []).append(row)
    for article_id, rows in comments_by_article.items():
        await cache.set(comments_key(article_id), rows)

    totals = {"articles": len(articles), "media": len(media), "comments": len(comments)}
    logger.info(
        "Cache warmed: %d articles, %d media items, %d comments",
        totals["articles"],
        totals["media"],
        totals["comments"],
    )
    return totals
