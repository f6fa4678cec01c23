"""
Admin endpoint tests: role assignment, article management with ads, the
keyword pool, and the metrics endpoint.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models import Article, User


async def _role(db: AsyncSession, user_id: int) -> str:
    return (await db.execute(select(User.role).where(User.id == user_id))).scalar_one()


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_assign_role(async_client: AsyncClient, make_user, db_session: AsyncSession):
    admin_id = await make_user("admin")
    user_id = await make_user("user")
    resp = await async_client.post("/api/admin/assign-role", json={
        "userId": admin_id, "targetUserId": user_id, "role": "editor",
    })
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert await _role(db_session, user_id) == "editor"


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["guest", "owner", ""])
async def test_assign_invalid_role_is_400(async_client: AsyncClient, make_user, db_session: AsyncSession, role):
    admin_id = await make_user("admin")
    user_id = await make_user("user")
    resp = await async_client.post("/api/admin/assign-role", json={
        "userId": admin_id, "targetUserId": user_id, "role": role,
    })
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid role"}
    assert await _role(db_session, user_id) == "user"


@pytest.mark.asyncio
async def test_role_change_for_missing_user_is_404(async_client: AsyncClient, make_user):
    admin_id = await make_user("admin")
    resp = await async_client.post("/api/admin/users/999/role", json={"userId": admin_id, "role": "moderator"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_role_change_takes_effect_on_next_request(async_client: AsyncClient, make_user, make_article):
    admin_id = await make_user("admin")
    user_id = await make_user("user")
    article_id = await make_article()

    resp = await async_client.put(f"/api/articles/{article_id}", json={"userId": user_id, "title": "x"})
    assert resp.status_code == 403

    resp = await async_client.post(f"/api/admin/users/{user_id}/role", json={"userId": admin_id, "role": "admin"})
    assert resp.json() == {"message": "Role updated"}

    resp = await async_client.put(f"/api/articles/{article_id}", json={"userId": user_id, "title": "x"})
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_admin_article_lifecycle_with_ads(async_client: AsyncClient, make_user, db_session: AsyncSession):
    admin_id = await make_user("admin")

    resp = await async_client.post("/api/admin/articles", json={
        "userId": admin_id,
        "title": "Sponsored",
        "content": "Body",
        "author": "desk",
        "date": "2024-05-01",
        "ads": "<banner>",
    })
    assert resp.status_code == 201
    padded = resp.json()["id"]
    article_id = int(padded)

    ads = (await db_session.execute(select(Article.ads).where(Article.article_id == article_id))).scalar_one()
    assert ads == "<banner>"
    assert (await async_client.get(f"/api/articles/{padded}")).json()["date"] == "2024-05-01"

    resp = await async_client.put(f"/api/admin/articles/{padded}", json={"userId": admin_id, "ads": "<none>"})
    assert resp.status_code == 200
    ads = (
        await db_session.execute(
            select(Article.ads).where(Article.article_id == article_id).execution_options(populate_existing=True)
        )
    ).scalar_one()
    assert ads == "<none>"

    resp = await async_client.request("DELETE", f"/api/admin/articles/{padded}", json={"userId": admin_id})
    assert resp.status_code == 200
    assert (await async_client.get(f"/api/articles/{padded}")).status_code == 404


@pytest.mark.asyncio
async def test_admin_update_missing_article_is_404(async_client: AsyncClient, make_user):
    admin_id = await make_user("admin")
    resp = await async_client.put("/api/admin/articles/808", json={"userId": admin_id, "title": "x"})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Keyword pool
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_keyword_pool(async_client: AsyncClient, make_user):
    admin_id = await make_user("admin")

    created = await async_client.post("/api/admin/keywords", json={"userId": admin_id, "keyword": "tides"})
    assert created.status_code == 201
    assert created.json()["keyword"] == "tides"

    duplicate = await async_client.post("/api/admin/keywords", json={"userId": admin_id, "keyword": "tides"})
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Keyword already exists"}

    await async_client.post("/api/admin/keywords", json={"userId": admin_id, "keyword": "boats"})
    listed = await async_client.get("/api/admin/keywords", params={"userId": admin_id})
    assert [k["keyword"] for k in listed.json()] == ["boats", "tides"]

    keyword_id = created.json()["keywordId"]
    resp = await async_client.delete(f"/api/admin/keywords/{keyword_id}", params={"userId": admin_id})
    assert resp.status_code == 200
    resp = await async_client.delete(f"/api/admin/keywords/{keyword_id}", params={"userId": admin_id})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_attach_keywords(async_client: AsyncClient, make_user, make_article):
    admin_id = await make_user("admin")
    article_id = await make_article()
    tides = (await async_client.post("/api/admin/keywords", json={"userId": admin_id, "keyword": "tides"})).json()
    boats = (await async_client.post("/api/admin/keywords", json={"userId": admin_id, "keyword": "boats"})).json()

    url = f"/api/admin/articles/{article_id}/keywords"
    body = {"userId": admin_id, "keywordIds": [tides["keywordId"], boats["keywordId"]]}
    assert (await async_client.post(url, json=body)).status_code == 200
    # Attaching again keeps one link per keyword.
    resp = await async_client.post(url, json=body)
    assert resp.status_code == 200
    assert [k["keyword"] for k in resp.json()["keywords"]] == ["boats", "tides"]

    listed = await async_client.get(f"/api/articles/{article_id:03d}/keywords")
    assert [k["keyword"] for k in listed.json()] == ["boats", "tides"]

    # Deleting a keyword removes its links.
    await async_client.delete(f"/api/admin/keywords/{boats['keywordId']}", params={"userId": admin_id})
    listed = await async_client.get(f"/api/articles/{article_id}/keywords")
    assert [k["keyword"] for k in listed.json()] == ["tides"]


@pytest.mark.asyncio
async def test_attach_unknown_keyword_is_400(async_client: AsyncClient, make_user, make_article):
    admin_id = await make_user("admin")
    article_id = await make_article()
    resp = await async_client.post(
        f"/api/admin/articles/{article_id}/keywords", json={"userId": admin_id, "keywordIds": [41]},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown keyword ids", "keywordIds": [41]}


@pytest.mark.asyncio
async def test_attach_to_missing_article_is_404(async_client: AsyncClient, make_user):
    admin_id = await make_user("admin")
    resp = await async_client.post("/api/admin/articles/999/keywords", json={"userId": admin_id, "keywordIds": [1]})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_metrics(async_client: AsyncClient, make_user, make_article, make_media):
    await make_user()
    article_id = await make_article()
    await make_media(article_id)
    await async_client.post(f"/api/articles/{article_id}/comments", json={"username": "ana", "text": "Hi"})
    await async_client.get("/api/articles")
    await async_client.get("/api/articles")

    resp = await async_client.get("/api/metrics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_articles"] == 1
    assert data["total_media"] == 1
    assert data["total_comments"] == 1
    assert data["total_users"] == 1
    assert data["cache_info"]["backend"] == "memory"
    assert data["cache_info"]["hits"] >= 1
