"""
Keyword service: the admin-managed keyword pool and its article links.

Keywords are not cached; they are only read by admins and by the article
keyword listing.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.errors import ValidationError
from newsdesk.models import ArticleKeyword, Keyword
from newsdesk.services import article_service
from newsdesk.store import insert_ignore

logger = logging.getLogger(__name__)


def keyword_to_dict(keyword: Keyword) -> dict:
    return {"keywordId": keyword.keyword_id, "keyword": keyword.keyword}


async def list_keywords(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(Keyword).order_by(Keyword.keyword))
    return [keyword_to_dict(k) for k in result.scalars().all()]


async def create_keyword(db: AsyncSession, keyword: str) -> dict:
    keyword = keyword.strip()
    if not keyword:
        raise ValidationError("Keyword required")
    row = Keyword(keyword=keyword)
    db.add(row)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Keyword already exists") from None
    created = keyword_to_dict(row)
    await db.commit()
    logger.info("Created keyword %s (%r)", row.keyword_id, keyword)
    return created


async def delete_keyword(db: AsyncSession, keyword_id: int) -> bool:
    """Remove a keyword and its article links.  False when it does not exist."""
    await db.execute(delete(ArticleKeyword).where(ArticleKeyword.keyword_id == keyword_id))
    result = await db.execute(delete(Keyword).where(Keyword.keyword_id == keyword_id))
    if result.rowcount == 0:
        await db.rollback()
        return False
    await db.commit()
    return True


async def attach_keywords(db: AsyncSession, article_id: int, keyword_ids: list[int]) -> list[dict] | None:
    """
    Link *keyword_ids* to *article_id*; links that already exist are kept.

    Returns the article's keywords afterwards, or None when the article does
    not exist.  Unknown keyword ids are rejected before anything is written.
    """
    if not await article_service.article_exists(db, article_id):
        return None

    wanted = set(keyword_ids)
    known = set(
        (await db.execute(select(Keyword.keyword_id).where(Keyword.keyword_id.in_(wanted))))
        .scalars()
        .all()
    )
    missing = sorted(wanted - known)
    if missing:
        raise ValidationError("Unknown keyword ids", keywordIds=missing)

    for keyword_id in sorted(wanted):
        await insert_ignore(db, ArticleKeyword, article_id=article_id, keyword_id=keyword_id)
    await db.commit()
    return await get_article_keywords(db, article_id)


async def get_article_keywords(db: AsyncSession, article_id: int) -> list[dict]:
    q = (
        select(Keyword)
        .join(ArticleKeyword, ArticleKeyword.keyword_id == Keyword.keyword_id)
        .where(ArticleKeyword.article_id == article_id)
        .order_by(Keyword.keyword)
    )
    return [keyword_to_dict(k) for k in (await db.execute(q)).scalars().all()]
