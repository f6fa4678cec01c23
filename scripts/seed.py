"""Development database seeder: articles, media, comments, keywords and staff accounts."""
import asyncio
import argparse
import random
import time
from datetime import date, timedelta

from newsdesk.database import engine, async_session, Base
from newsdesk.models import Article, ArticleKeyword, Comment, Keyword, MediaItem, User
from newsdesk.security import hash_password

CATEGORIES = ["politics", "business", "technology", "sports", "culture", "science", "travel"]
CITIES = ["Lisbon", "Nairobi", "Osaka", "Toronto", "Lyon", "Quito", "Perth"]
KEYWORDS = ["election", "markets", "ai", "football", "cinema", "climate", "transit",
            "housing", "startups", "health", "space", "energy"]
FILE_TYPES = [("image", "jpg"), ("image", "png"), ("video", "mp4")]

# Every seeded account shares this password; it satisfies the strength rules.
SEED_PASSWORD = "Newsdesk1!"


async def seed(small: bool = False):
    num_articles = 30 if small else 500
    num_comments_per_article = 2 if small else 6

    print(f"Seeding: {num_articles} articles, up to {num_articles * num_comments_per_article} comments")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    password = hash_password(SEED_PASSWORD)

    async with async_session() as session:
        # Staff accounts; the admin comes first, as registration would make it.
        staff = []
        for role in ("admin", "editor", "editor", "moderator", "user"):
            n = len(staff)
            user = User(
                username=f"{role}{n}",
                email=f"{role}{n}@newsdesk.example",
                password=password,
                country="Portugal",
                firstname=role.capitalize(),
                lastname=f"Seed{n}",
                role=role,
                biography=f"Seeded {role} account." if role == "editor" else None,
            )
            session.add(user)
            staff.append(user)
        await session.flush()
        editors = [u.username for u in staff if u.role == "editor"]
        print(f"  Created {len(staff)} accounts (password {SEED_PASSWORD!r})")

        keywords = [Keyword(keyword=k) for k in KEYWORDS]
        session.add_all(keywords)
        await session.flush()
        print(f"  Created {len(keywords)} keywords")

        total_media = 0
        total_comments = 0
        for i in range(num_articles):
            category = random.choice(CATEGORIES)
            article = Article(
                headline_title=f"Story {i}: what changed in {category} this week",
                short_desc=f"A short look at {category} news from {random.choice(CITIES)}.",
                article_content=f"Full text of story {i}. " * 30,
                author=random.choice(editors),
                date=date.today() - timedelta(days=random.randint(0, 365)),
                category=category,
                likes=random.randint(0, 250),
                city=random.choice(CITIES),
            )
            session.add(article)
            await session.flush()

            for keyword in random.sample(keywords, k=random.randint(1, 3)):
                session.add(ArticleKeyword(article_id=article.article_id, keyword_id=keyword.keyword_id))

            for n in range(random.randint(0, 3)):
                kind, ext = random.choice(FILE_TYPES)
                session.add(MediaItem(
                    article_id=article.article_id,
                    name=f"story-{i}-{n}",
                    description=f"{kind.capitalize()} for story {i}",
                    file_type=kind,
                    css_class=f"media-{kind}",
                    filepath=f"/media/{article.article_id:03d}/{n}.{ext}",
                ))
                total_media += 1

            for _ in range(random.randint(0, num_comments_per_article)):
                session.add(Comment(
                    article_id=article.article_id,
                    username=random.choice(staff).username,
                    text=f"Thoughts on story {i}: well worth the read.",
                ))
                total_comments += 1

            if (i + 1) % 100 == 0:
                await session.flush()
                print(f"  {i + 1} articles created")

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Articles: {num_articles}")
    print(f"  Media items: {total_media}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the newsdesk database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (30 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
