from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.dependencies import canonical_article_id
from newsdesk.schemas import MediaItemView
from newsdesk.services import media_service

router = APIRouter(prefix="/api/media", tags=["media"])


@router.get("")
async def list_media(db: AsyncSession = Depends(get_db)):
    return await media_service.get_all_media(db)


@router.get("/{article_id}", response_model=list[MediaItemView])
async def get_article_media(
    article_id: int = Depends(canonical_article_id),
    db: AsyncSession = Depends(get_db),
):
    rows = await media_service.get_media(db, article_id)
    if not rows:
        raise HTTPException(status_code=404, detail="No media found for this article")
    return [MediaItemView.from_row(row) for row in rows]
