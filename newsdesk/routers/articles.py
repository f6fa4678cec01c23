from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.auth import ARTICLE_AUTHOR, ARTICLE_EDITOR, Actor, Role
from newsdesk.database import get_db
from newsdesk.dependencies import canonical_article_id
from newsdesk.errors import Forbidden
from newsdesk.schemas import ArticleCreate, ArticleUpdate, ArticleView, CommentCreate, LikeRequest
from newsdesk.services import article_service, comment_service, keyword_service

router = APIRouter(prefix="/api/articles", tags=["articles"])


@router.get("")
async def list_articles(db: AsyncSession = Depends(get_db)):
    return await article_service.get_all_articles(db)


@router.get("/{article_id}", response_model=ArticleView)
async def get_article(
    article_id: int = Depends(canonical_article_id),
    db: AsyncSession = Depends(get_db),
):
    row = await article_service.get_article(db, article_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return ArticleView.from_row(row)


@router.post("", status_code=201)
async def create_article(
    data: ArticleCreate,
    actor: Actor = Depends(ARTICLE_AUTHOR),
    db: AsyncSession = Depends(get_db),
):
    if actor.role == Role.EDITOR:
        data = data.model_copy(update={"author": actor.username})
    row = await article_service.create_article(db, data)
    return {"id": row["article_id"], "message": "Article created successfully"}


@router.put("/{article_id}")
async def update_article(
    data: ArticleUpdate,
    article_id: int = Depends(canonical_article_id),
    actor: Actor = Depends(ARTICLE_EDITOR),
    db: AsyncSession = Depends(get_db),
):
    # Editors may not hand their article to someone else.
    if actor.role == Role.EDITOR and data.author is not None and data.author != actor.username:
        raise Forbidden("No permission")
    row = await article_service.update_article(db, article_id, data)
    if row is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"message": "Article updated successfully", "article": ArticleView.from_row(row)}


@router.delete("/{article_id}")
async def delete_article(
    article_id: int = Depends(canonical_article_id),
    actor: Actor = Depends(ARTICLE_EDITOR),
    db: AsyncSession = Depends(get_db),
):
    if not await article_service.delete_article(db, article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    return {"message": "Article deleted successfully"}


@router.post("/{article_id}/like")
async def like_article(
    data: LikeRequest,
    article_id: int = Depends(canonical_article_id),
    db: AsyncSession = Depends(get_db),
):
    likes = await article_service.set_like(db, article_id, data.action)
    if likes is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"likes": likes}


# --- Comments ---

@router.get("/{article_id}/comments")
async def list_comments(
    article_id: int = Depends(canonical_article_id),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.get_comments(db, article_id)


@router.post("/{article_id}/comments", status_code=201)
async def add_comment(
    data: CommentCreate,
    article_id: int = Depends(canonical_article_id),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.add_comment(db, article_id, data)
    if comment is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return comment


# --- Keywords ---

@router.get("/{article_id}/keywords")
async def list_article_keywords(
    article_id: int = Depends(canonical_article_id),
    db: AsyncSession = Depends(get_db),
):
    if not await article_service.article_exists(db, article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    return await keyword_service.get_article_keywords(db, article_id)
