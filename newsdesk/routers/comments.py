from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.auth import MODERATOR_ONLY, Actor
from newsdesk.database import get_db
from newsdesk.services import comment_service

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("")
async def list_all_comments(db: AsyncSession = Depends(get_db)):
    return await comment_service.get_all_comments(db)


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    actor: Actor = Depends(MODERATOR_ONLY),
    db: AsyncSession = Depends(get_db),
):
    if not await comment_service.delete_comment(db, comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
    return {"message": "Comment deleted"}
