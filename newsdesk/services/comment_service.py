"""
Comment service: per-article comment threads.

Comments are listed oldest first and cached per article.  Anyone may post
(the author name is free text); deletion is a moderator action gated in
the router.  Every write drops the thread's cache entry and the global
comment list.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.cache import ALL_COMMENTS, cache, comments_key, pad_id
from newsdesk.models import Article, Comment
from newsdesk.schemas import CommentCreate

logger = logging.getLogger(__name__)


def comment_to_row(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "article_id": pad_id(comment.article_id),
        "username": comment.username,
        "text": comment.text,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
    }


async def load_all_rows(db: AsyncSession) -> list[dict]:
    q = select(Comment).order_by(Comment.article_id, Comment.created_at, Comment.id)
    return [comment_to_row(c) for c in (await db.execute(q)).scalars().all()]


async def get_comments(db: AsyncSession, article_id: int) -> list[dict]:
    """Return the comments of *article_id*, oldest first."""

    async def load() -> list[dict]:
        q = (
            select(Comment)
            .where(Comment.article_id == article_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return [comment_to_row(c) for c in (await db.execute(q)).scalars().all()]

    return await cache.get_or_load(comments_key(article_id), load)


async def get_all_comments(db: AsyncSession) -> list[dict]:
    return await cache.get_or_load(ALL_COMMENTS, lambda: load_all_rows(db))


async def add_comment(db: AsyncSession, article_id: int, data: CommentCreate) -> dict | None:
    """
    Append a comment to *article_id* and return it.

    Returns None when the article does not exist.
    """
    exists = await db.execute(select(Article.article_id).where(Article.article_id == article_id))
    if exists.scalar_one_or_none() is None:
        return None

    comment = Comment(article_id=article_id, username=data.username, text=data.text)
    db.add(comment)
    await db.flush()
    await db.refresh(comment)
    row = comment_to_row(comment)
    await db.commit()

    await cache.invalidate_comments(article_id)
    return row


async def delete_comment(db: AsyncSession, comment_id: int) -> bool:
    """Delete a comment.  Returns False when it does not exist."""
    comment = await db.get(Comment, comment_id)
    if comment is None:
        return False
    article_id = comment.article_id
    await db.delete(comment)
    await db.commit()

    await cache.invalidate_comments(article_id)
    logger.info("Deleted comment %s on article %s", comment_id, article_id)
    return True
