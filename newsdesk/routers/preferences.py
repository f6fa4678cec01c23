from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.auth import REGISTERED, Actor
from newsdesk.database import get_db
from newsdesk.dependencies import parse_article_id
from newsdesk.schemas import InterestChange, ReadArticleEvent, TopicChange
from newsdesk.services import engagement_service, preference_service

router = APIRouter(prefix="/api/user", tags=["preferences"])


# --- Membership sets ---

@router.post("/interests")
async def add_interest(
    data: InterestChange,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    await preference_service.add_membership(db, "interests", actor.id, data.interest)
    return {"success": True}


@router.delete("/interests")
async def remove_interest(
    data: InterestChange,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    await preference_service.remove_membership(db, "interests", actor.id, data.interest)
    return {"success": True}


@router.post("/dislikes")
async def add_dislike(
    data: TopicChange,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    await preference_service.add_membership(db, "dislikes", actor.id, data.topic)
    return {"success": True}


@router.delete("/dislikes")
async def remove_dislike(
    data: TopicChange,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    await preference_service.remove_membership(db, "dislikes", actor.id, data.topic)
    return {"success": True}


@router.post("/subscriptions")
async def add_subscription(
    data: TopicChange,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    await preference_service.add_membership(db, "subscriptions", actor.id, data.topic)
    return {"success": True}


@router.delete("/subscriptions")
async def remove_subscription(
    data: TopicChange,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    await preference_service.remove_membership(db, "subscriptions", actor.id, data.topic)
    return {"success": True}


@router.get("/preferences")
async def get_preferences(
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    return await preference_service.get_preferences(db, actor.id)


# --- Engagement / feed ---

@router.post("/read-article")
async def read_article(
    data: ReadArticleEvent,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    article_id = parse_article_id(data.article_id)
    promoted = await engagement_service.record_article_read(db, actor.id, article_id, data.keywords)
    return {"success": True, "promoted": promoted}


@router.get("/articles")
async def personalized_articles(
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    return await preference_service.personalized_feed(db, actor.id)
