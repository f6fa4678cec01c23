from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.auth import ADMIN_ONLY, Actor
from newsdesk.database import get_db
from newsdesk.dependencies import canonical_article_id
from newsdesk.schemas import (
    AdminArticleCreate,
    AdminArticleUpdate,
    ArticleView,
    KeywordAttach,
    KeywordCreate,
    RoleAssignment,
    RoleChange,
)
from newsdesk.services import article_service, keyword_service, user_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


# --- Roles ---

@router.post("/assign-role")
async def assign_role(
    data: RoleAssignment,
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    if not await user_service.assign_role(db, data.target_user_id, data.role, actor.id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True}


@router.post("/users/{user_id}/role")
async def change_role(
    user_id: int,
    data: RoleChange,
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    if not await user_service.assign_role(db, user_id, data.role, actor.id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "Role updated"}


# --- Articles ---

@router.post("/articles", status_code=201)
async def create_article(
    data: AdminArticleCreate,
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    row = await article_service.create_article(db, data)
    return {"id": row["article_id"], "message": "Article created successfully"}


@router.put("/articles/{article_id}")
async def update_article(
    data: AdminArticleUpdate,
    article_id: int = Depends(canonical_article_id),
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    row = await article_service.update_article(db, article_id, data)
    if row is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"message": "Article updated successfully", "article": ArticleView.from_row(row)}


@router.delete("/articles/{article_id}")
async def delete_article(
    article_id: int = Depends(canonical_article_id),
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    if not await article_service.delete_article(db, article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    return {"message": "Article deleted successfully"}


@router.post("/articles/{article_id}/keywords")
async def attach_keywords(
    data: KeywordAttach,
    article_id: int = Depends(canonical_article_id),
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    keywords = await keyword_service.attach_keywords(db, article_id, data.keyword_ids)
    if keywords is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"success": True, "keywords": keywords}


# --- Keyword pool ---

@router.get("/keywords")
async def list_keywords(
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    return await keyword_service.list_keywords(db)


@router.post("/keywords", status_code=201)
async def create_keyword(
    data: KeywordCreate,
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    return await keyword_service.create_keyword(db, data.keyword)


@router.delete("/keywords/{keyword_id}")
async def delete_keyword(
    keyword_id: int,
    actor: Actor = Depends(ADMIN_ONLY),
    db: AsyncSession = Depends(get_db),
):
    if not await keyword_service.delete_keyword(db, keyword_id):
        raise HTTPException(status_code=404, detail="Keyword not found")
    return {"success": True}
