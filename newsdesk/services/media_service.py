"""
Media service: read-only access to the media items attached to articles.

Media lists are cached per article under ``visuals_<id>``.  An article with
no media is not cached, so media added later is visible immediately.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.cache import ALL_VISUALS, cache, pad_id, visuals_key
from newsdesk.models import MediaItem


def media_to_row(item: MediaItem) -> dict:
    return {
        "id": item.id,
        "article_id": pad_id(item.article_id),
        "name": item.name,
        "description": item.description,
        "file_type": item.file_type,
        "css_class": item.css_class,
        "filepath": item.filepath,
    }


async def load_all_rows(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(MediaItem).order_by(MediaItem.article_id, MediaItem.id))
    return [media_to_row(m) for m in result.scalars().all()]


async def get_media(db: AsyncSession, article_id: int) -> list[dict] | None:
    """Return the media rows of *article_id*, or None when it has none."""

    async def load() -> list[dict] | None:
        q = select(MediaItem).where(MediaItem.article_id == article_id).order_by(MediaItem.id)
        rows = [media_to_row(m) for m in (await db.execute(q)).scalars().all()]
        return rows or None

    return await cache.get_or_load(visuals_key(article_id), load)


async def get_all_media(db: AsyncSession) -> list[dict]:
    return await cache.get_or_load(ALL_VISUALS, lambda: load_all_rows(db))
