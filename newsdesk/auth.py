"""
Authorization gate.

Identity is asserted by the caller: ``userId`` in the JSON body, or in the
query string when the body has none.  It is not verified cryptographically.

A route states who may call it by depending on a ``Policy``::

    @router.put("/{article_id}")
    async def update_article(..., actor: Actor = Depends(ARTICLE_EDITOR)):
        ...

A policy is a list of grants.  A grant admits a set of roles and may add
an ownership predicate evaluated against the request's path parameters.
The request is allowed when any grant matches.  A missing or unknown
identity and a failed grant all end in 403.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.dependencies import parse_article_id
from newsdesk.errors import Forbidden, ValidationError
from newsdesk.models import User
from newsdesk.services import article_service

logger = logging.getLogger(__name__)


class Role(str, Enum):
    GUEST = "guest"
    USER = "user"
    EDITOR = "editor"
    MODERATOR = "moderator"
    ADMIN = "admin"


ASSIGNABLE_ROLES = frozenset({Role.USER, Role.EDITOR, Role.MODERATOR, Role.ADMIN})


def parse_assignable_role(value: Any) -> Role:
    """Return the Role named by *value*; guest and unknown names are rejected."""
    try:
        role = Role(value)
    except ValueError:
        raise ValidationError("Invalid role") from None
    if role not in ASSIGNABLE_ROLES:
        raise ValidationError("Invalid role")
    return role


@dataclass(frozen=True)
class Actor:
    """The user a request acts as."""

    id: int
    username: str
    role: Role


OwnershipCheck = Callable[[AsyncSession, Actor, Mapping[str, Any]], Awaitable[bool]]


# ---------------------------------------------------------------------------
# Ownership predicates
# ---------------------------------------------------------------------------

async def authors_article(db: AsyncSession, actor: Actor, path_params: Mapping[str, Any]) -> bool:
    """True when the article named by the path was written by *actor*."""
    raw = path_params.get("article_id")
    if raw is None:
        return False
    row = await article_service.get_article(db, parse_article_id(raw))
    return row is not None and row["author"] == actor.username


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------

async def asserted_user_id(request: Request) -> int | None:
    """Read the acting user id from the JSON body, then the query string."""
    raw = None
    body = await request.body()
    if body:
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            raw = payload.get("userId")
    if raw is None or raw == "":
        raw = request.query_params.get("userId")
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


async def resolve_actor(db: AsyncSession, user_id: int) -> Actor | None:
    q = select(User.id, User.username, User.role).where(User.id == user_id)
    row = (await db.execute(q)).one_or_none()
    if row is None:
        return None
    return Actor(id=row.id, username=row.username, role=Role(row.role))


# ---------------------------------------------------------------------------
# Grants and policies
# ---------------------------------------------------------------------------

class Grant:
    def __init__(self, *roles: Role, owns: OwnershipCheck | None = None) -> None:
        self.roles = frozenset(roles)
        self.owns = owns

    async def permits(self, db: AsyncSession, actor: Actor, path_params: Mapping[str, Any]) -> bool:
        if actor.role not in self.roles:
            return False
        if self.owns is None:
            return True
        return await self.owns(db, actor, path_params)


class Policy:
    """
    FastAPI dependency that resolves the acting user and checks the grants.

    Returns the ``Actor`` so handlers can use the caller's id and username.
    """

    def __init__(self, name: str, *grants: Grant, denial: str = "Forbidden") -> None:
        self.name = name
        self.grants = grants
        self.denial = denial

    async def authorize(self, db: AsyncSession, actor: Actor, path_params: Mapping[str, Any]) -> bool:
        for grant in self.grants:
            if await grant.permits(db, actor, path_params):
                return True
        return False

    async def __call__(self, request: Request, db: AsyncSession = Depends(get_db)) -> Actor:
        user_id = await asserted_user_id(request)
        if user_id is None:
            raise Forbidden("Forbidden")
        actor = await resolve_actor(db, user_id)
        if actor is None:
            raise Forbidden("Forbidden")
        if not await self.authorize(db, actor, request.path_params):
            logger.warning(
                "Denied %s %s to user %s (%s): %s",
                request.method,
                request.url.path,
                actor.id,
                actor.role.value,
                self.name,
            )
            raise Forbidden(self.denial)
        return actor


ADMIN_ONLY = Policy("admin-only", Grant(Role.ADMIN), denial="Admin only")

# Admins edit any article; editors only their own.
ARTICLE_EDITOR = Policy(
    "article-editor",
    Grant(Role.ADMIN),
    Grant(Role.EDITOR, owns=authors_article),
    denial="No permission",
)

ARTICLE_AUTHOR = Policy("article-author", Grant(Role.ADMIN, Role.EDITOR), denial="No permission")

EDITOR_ONLY = Policy("editor-only", Grant(Role.EDITOR), denial="Editor only")

MODERATOR_ONLY = Policy("moderator-only", Grant(Role.MODERATOR), denial="Moderator only")

REGISTERED = Policy(
    "registered",
    Grant(Role.USER, Role.EDITOR, Role.MODERATOR, Role.ADMIN),
)
