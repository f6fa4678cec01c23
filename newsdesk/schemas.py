import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request bodies use camelCase keys (``userId``, ``firstName``...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Article ---

class ArticleCreate(CamelModel):
    title: str = Field(min_length=1, max_length=300)
    description: str = Field("", max_length=500)
    content: str = Field(min_length=1)
    city: str = Field("", max_length=100)
    author: str = Field("", max_length=100)
    date: dt.date | None = None
    category: str = Field("", max_length=100)


class ArticleUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = Field(None, max_length=500)
    content: str | None = Field(None, min_length=1)
    city: str | None = Field(None, max_length=100)
    author: str | None = Field(None, max_length=100)
    date: dt.date | None = None
    category: str | None = Field(None, max_length=100)


class AdminArticleCreate(ArticleCreate):
    ads: str | None = None


class AdminArticleUpdate(ArticleUpdate):
    ads: str | None = None


class ArticleView(BaseModel):
    """External shape of a single article (``GET /api/articles/{id}``)."""

    id: str
    title: str
    description: str
    content: str
    city: str
    author: str
    date: str
    category: str
    likes: int

    @classmethod
    def from_row(cls, row: dict) -> "ArticleView":
        return cls(
            id=row.get("article_id") or "UNKNOWN",
            title=row.get("headline_title") or "Untitled Article",
            description=row.get("short_desc") or "",
            content=row.get("article_content") or "Content not available",
            city=row.get("city") or "",
            author=row.get("author") or "",
            date=row.get("date") or "",
            category=row.get("category") or "",
            likes=row.get("likes") or 0,
        )


class LikeRequest(BaseModel):
    action: Literal["like", "unlike"]


# --- Media ---

class MediaItemView(BaseModel):
    name: str
    description: str
    file_type: str
    css_class: str
    filepath: str

    @classmethod
    def from_row(cls, row: dict) -> "MediaItemView":
        return cls(
            name=row.get("name") or "No Name",
            description=row.get("description") or "",
            file_type=row.get("file_type") or "",
            css_class=row.get("css_class") or "",
            filepath=row.get("filepath") or "",
        )


# --- Comment ---

class CommentCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    text: str = Field(min_length=1)


# --- User ---

class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    country: str = Field(min_length=1, max_length=100)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    biography: str | None = None


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AvailabilityCheck(BaseModel):
    username: str | None = None
    email: str | None = None


class ProfileUpdate(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    country: str | None = Field(None, min_length=1, max_length=100)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)


class BiographyUpdate(BaseModel):
    biography: str = Field(min_length=1)


class UserProfile(CamelModel):
    """Profile as shown to its owner; never carries the credential."""

    id: int
    username: str
    email: str
    country: str
    first_name: str
    last_name: str
    role: str
    biography: str | None = None
    interests: list[str] = []

    @classmethod
    def from_user(cls, user, interests: list[str]) -> "UserProfile":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            country=user.country,
            first_name=user.firstname,
            last_name=user.lastname,
            role=user.role,
            biography=user.biography,
            interests=interests,
        )


# --- Preferences / engagement ---

class InterestChange(BaseModel):
    interest: str = Field(min_length=1, max_length=100)


class TopicChange(BaseModel):
    topic: str = Field(min_length=1, max_length=100)


class ReadArticleEvent(CamelModel):
    article_id: int | str
    keywords: list[str]


# --- Admin ---

class RoleAssignment(CamelModel):
    target_user_id: int
    role: str


class RoleChange(BaseModel):
    role: str


class KeywordCreate(BaseModel):
    keyword: str = Field(min_length=1, max_length=100)


class KeywordAttach(CamelModel):
    keyword_ids: list[int] = Field(min_length=1)


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_articles: int
    total_media: int
    total_comments: int
    total_users: int
    cache_info: dict = {}
