from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.cache import cache
from newsdesk.database import get_db
from newsdesk.models import Article, Comment, MediaItem, User
from newsdesk.schemas import MetricsResponse

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    return MetricsResponse(
        total_articles=await _count(db, Article),
        total_media=await _count(db, MediaItem),
        total_comments=await _count(db, Comment),
        total_users=await _count(db, User),
        cache_info=cache.stats,
    )
