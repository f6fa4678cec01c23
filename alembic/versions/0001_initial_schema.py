"""initial schema - articles, media, users, comments, engagement, keywords"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "articles",
        sa.Column("article_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("headline_title", sa.String(length=300), nullable=False),
        sa.Column("short_desc", sa.String(length=500), nullable=False),
        sa.Column("article_content", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=100), nullable=False),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("ads", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("article_id"),
        sa.CheckConstraint("likes >= 0", name="ck_articles_likes_non_negative"),
    )
    op.create_index("ix_articles_author", "articles", ["author"])
    op.create_index("ix_articles_category", "articles", ["category"])

    op.create_table(
        "visuallist",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(length=50), nullable=False),
        sa.Column("css_class", sa.String(length=100), nullable=False),
        sa.Column("filepath", sa.String(length=500), nullable=False),
        sa.ForeignKeyConstraint(["article_id"], ["articles.article_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_visuallist_article_id", "visuallist", ["article_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=100), nullable=False),
        sa.Column("firstname", sa.String(length=100), nullable=False),
        sa.Column("lastname", sa.String(length=100), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("biography", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.CheckConstraint("role IN ('user', 'editor', 'moderator', 'admin')", name="ck_users_role"),
    )
    op.create_index("uq_users_username_lower", "users", [sa.text("lower(username)")], unique=True)

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["article_id"], ["articles.article_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_article_id", "comments", ["article_id"])

    # Membership sets: the composite key is what makes inserts idempotent.
    for table, column in (
        ("user_interests", "interest"),
        ("user_dislikes", "topic"),
        ("user_subscriptions", "topic"),
    ):
        op.create_table(
            table,
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column(column, sa.String(length=100), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("user_id", column),
        )

    op.create_table(
        "user_keyword_reads",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("keyword", sa.String(length=100), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("promoted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "keyword"),
    )

    op.create_table(
        "keywords",
        sa.Column("keyword_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("keyword", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("keyword_id"),
        sa.UniqueConstraint("keyword"),
    )

    op.create_table(
        "article_keywords",
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("keyword_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["article_id"], ["articles.article_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["keyword_id"], ["keywords.keyword_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("article_id", "keyword_id"),
    )


def downgrade() -> None:
    op.drop_table("article_keywords")
    op.drop_table("keywords")
    op.drop_table("user_keyword_reads")
    op.drop_table("user_subscriptions")
    op.drop_table("user_dislikes")
    op.drop_table("user_interests")
    op.drop_index("ix_comments_article_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("uq_users_username_lower", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_visuallist_article_id", table_name="visuallist")
    op.drop_table("visuallist")
    op.drop_index("ix_articles_category", table_name="articles")
    op.drop_index("ix_articles_author", table_name="articles")
    op.drop_table("articles")
