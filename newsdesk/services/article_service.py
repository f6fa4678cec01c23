"""
Article service: read path and write path for the Article aggregate.

Design notes
------------
- Reads are read-through (cache → store → write back).  Cached values are
  raw rows keyed by column name; routers project them into the external
  shape with ``ArticleView.from_row``.
- ``get_all_articles`` only fills the aggregate key.  Fanning out into
  per-id keys is left to the startup warm-up so a request never pays for
  N cache writes.
- Writes commit before they invalidate.  A reader that misses after the
  invalidation therefore sees the committed row, never the previous one.
- Creation invalidates the aggregate only: the new id is assigned by the
  store, so no per-id entry for it can exist yet.
- Likes change through a single UPDATE with the arithmetic in SQL; the
  client never supplies a like count.
"""
import logging

from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.cache import ALL_ARTICLES, article_key, cache, pad_id
from newsdesk.errors import ValidationError
from newsdesk.models import Article, ArticleKeyword, Comment, MediaItem
from newsdesk.schemas import ArticleCreate, ArticleUpdate

logger = logging.getLogger(__name__)

# Request field -> column.
_FIELD_COLUMNS: dict[str, str] = {
    "title": "headline_title",
    "description": "short_desc",
    "content": "article_content",
    "city": "city",
    "author": "author",
    "date": "date",
    "category": "category",
    "ads": "ads",
}


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def article_to_row(article: Article) -> dict:
    """
    Serialise an Article to its raw row (the cached and list-view shape).

    ``article_id`` is already the padded external form; cache keys are built
    from the integer, never from the row.
    """
    return {
        "article_id": pad_id(article.article_id),
        "headline_title": article.headline_title,
        "short_desc": article.short_desc,
        "article_content": article.article_content,
        "author": article.author,
        "date": article.date.isoformat() if article.date else None,
        "category": article.category,
        "likes": article.likes,
        "city": article.city,
        "ads": article.ads,
    }


async def load_all_rows(db: AsyncSession) -> list[dict]:
    q = select(Article).order_by(Article.article_id).execution_options(populate_existing=True)
    result = await db.execute(q)
    return [article_to_row(a) for a in result.scalars().all()]


async def _load_row(db: AsyncSession, article_id: int) -> dict | None:
    q = (
        select(Article)
        .where(Article.article_id == article_id)
        .execution_options(populate_existing=True)
    )
    article = (await db.execute(q)).scalar_one_or_none()
    return article_to_row(article) if article is not None else None


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------

async def get_all_articles(db: AsyncSession) -> list[dict]:
    """Return every article as a raw row, serving the aggregate from cache."""
    return await cache.get_or_load(ALL_ARTICLES, lambda: load_all_rows(db))


async def get_article(db: AsyncSession, article_id: int) -> dict | None:
    """
    Return the raw row for *article_id*, or None when the store has none.

    Misses are not cached, so an article created later is found on the
    next request.
    """
    return await cache.get_or_load(article_key(article_id), lambda: _load_row(db, article_id))


async def article_exists(db: AsyncSession, article_id: int) -> bool:
    return await get_article(db, article_id) is not None


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------

async def create_article(db: AsyncSession, data: ArticleCreate) -> dict:
    """
    Insert a new article (likes start at 0) and return its raw row.

    Accepts the admin variant of the payload too, which also carries ``ads``.
    """
    values = {_FIELD_COLUMNS[field]: value for field, value in data.model_dump().items()}
    article = Article(likes=0, **values)
    db.add(article)
    await db.flush()
    row = article_to_row(article)
    await db.commit()

    await cache.invalidate_article()
    logger.info("Created article %s by %r", article.article_id, article.author)
    return row


async def update_article(db: AsyncSession, article_id: int, data: ArticleUpdate) -> dict | None:
    """
    Apply the fields present in *data* and return the updated raw row.

    Returns None when no article has *article_id*; the cache is left alone
    in that case.
    """
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No fields to update")
    values = {_FIELD_COLUMNS[field]: value for field, value in changes.items()}

    stmt = (
        update(Article)
        .where(Article.article_id == article_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        return None
    await db.commit()

    await cache.invalidate_article(article_id)
    logger.info("Updated article %s (%s)", article_id, ", ".join(sorted(values)))
    return await get_article(db, article_id)


async def delete_article(db: AsyncSession, article_id: int) -> bool:
    """
    Delete the article with its comments, media and keyword links.

    Returns False when the article does not exist.
    """
    for model in (Comment, MediaItem, ArticleKeyword):
        await db.execute(delete(model).where(model.article_id == article_id))
    result = await db.execute(delete(Article).where(Article.article_id == article_id))
    if result.rowcount == 0:
        await db.rollback()
        return False
    await db.commit()

    await cache.invalidate_article_removal(article_id)
    logger.info("Deleted article %s", article_id)
    return True


async def set_like(db: AsyncSession, article_id: int, action: str) -> int | None:
    """
    Apply ``"like"`` (+1) or ``"unlike"`` (-1, never below 0) and return the
    new like count, or None when the article does not exist.
    """
    if action == "like":
        new_likes = Article.likes + 1
    else:
        new_likes = case((Article.likes > 0, Article.likes - 1), else_=0)

    stmt = (
        update(Article)
        .where(Article.article_id == article_id)
        .values(likes=new_likes)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        return None
    likes = (
        await db.execute(select(Article.likes).where(Article.article_id == article_id))
    ).scalar_one()
    await db.commit()

    await cache.invalidate_article(article_id)
    return likes
