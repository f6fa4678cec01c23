"""
Preference service: interests, dislikes and subscriptions, and the
personalised feed built from them.

Each preference kind is a (user, topic) membership set.  Adding an existing
member and removing a missing one are both no-ops, never errors.
"""
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models import UserDislike, UserInterest, UserSubscription
from newsdesk.services import article_service
from newsdesk.store import insert_ignore

# kind -> (model, value column)
MEMBERSHIPS = {
    "interests": (UserInterest, "interest"),
    "dislikes": (UserDislike, "topic"),
    "subscriptions": (UserSubscription, "topic"),
}


async def add_membership(db: AsyncSession, kind: str, user_id: int, value: str) -> bool:
    """Add *value* to the user's *kind* set.  Returns False if already present."""
    model, column = MEMBERSHIPS[kind]
    inserted = await insert_ignore(db, model, user_id=user_id, **{column: value})
    await db.commit()
    return inserted


async def remove_membership(db: AsyncSession, kind: str, user_id: int, value: str) -> bool:
    """Remove *value* from the user's *kind* set.  Returns False if absent."""
    model, column = MEMBERSHIPS[kind]
    result = await db.execute(
        delete(model).where(model.user_id == user_id, getattr(model, column) == value)
    )
    await db.commit()
    return result.rowcount > 0


async def list_memberships(db: AsyncSession, kind: str, user_id: int) -> list[str]:
    model, column = MEMBERSHIPS[kind]
    value_col = getattr(model, column)
    q = select(value_col).where(model.user_id == user_id).order_by(value_col)
    return list((await db.execute(q)).scalars().all())


async def get_preferences(db: AsyncSession, user_id: int) -> dict:
    return {kind: await list_memberships(db, kind, user_id) for kind in MEMBERSHIPS}


async def personalized_feed(db: AsyncSession, user_id: int) -> dict:
    """
    Split the article list for *user_id*.

    ``feed`` is every article whose category the user has not disliked;
    ``subscriptions`` is every article in a subscribed category.
    """
    disliked = set(await list_memberships(db, "dislikes", user_id))
    subscribed = set(await list_memberships(db, "subscriptions", user_id))
    articles = await article_service.get_all_articles(db)
    return {
        "feed": [a for a in articles if a["category"] not in disliked],
        "subscriptions": [a for a in articles if a["category"] in subscribed],
    }
