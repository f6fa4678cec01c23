"""
Engagement service: keyword read counters and promotion to interests.

Every read of an article adds one to the reader's counter for each of the
article's keywords.  When a counter reaches the threshold the keyword is
promoted into the reader's interests, exactly once: the promotion is
claimed with a conditional UPDATE on the ``promoted`` flag, so concurrent
reads of the same keyword cannot both promote it and a read that skips
past the threshold still promotes it.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.errors import NotFound
from newsdesk.models import UserInterest, UserKeywordRead
from newsdesk.services import article_service
from newsdesk.store import insert_ignore, upsert_increment

logger = logging.getLogger(__name__)


def _distinct_keywords(keywords: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for keyword in keywords:
        keyword = keyword.strip()
        if keyword:
            seen.setdefault(keyword, None)
    return list(seen)


async def _claim_promotion(db: AsyncSession, user_id: int, keyword: str) -> bool:
    stmt = (
        update(UserKeywordRead)
        .where(
            UserKeywordRead.user_id == user_id,
            UserKeywordRead.keyword == keyword,
            UserKeywordRead.count >= settings.KEYWORD_INTEREST_THRESHOLD,
            UserKeywordRead.promoted.is_(False),
        )
        .values(promoted=True)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount == 1


async def record_article_read(
    db: AsyncSession, user_id: int, article_id: int, keywords: list[str]
) -> list[str]:
    """
    Count a read of *article_id* by *user_id* against each keyword.

    Returns the keywords this read promoted into the user's interests.
    Raises NotFound when the article does not exist.
    """
    if not await article_service.article_exists(db, article_id):
        raise NotFound("Article not found")

    promoted: list[str] = []
    for keyword in _distinct_keywords(keywords):
        await upsert_increment(
            db, UserKeywordRead, "count", {"user_id": user_id, "keyword": keyword}
        )
        if await _claim_promotion(db, user_id, keyword):
            await insert_ignore(db, UserInterest, user_id=user_id, interest=keyword)
            promoted.append(keyword)
    await db.commit()

    if promoted:
        logger.info("User %s: promoted %s to interests", user_id, ", ".join(promoted))
    return promoted
