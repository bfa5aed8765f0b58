"""Database seeder for local development of the board API."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta
from board.database import engine, async_session, Base
from board.models import Account, Post, PostComment, PostLike
from board.security import hash_password

TOPICS = ["lecture notes", "dorm life", "club recruiting", "exam schedule",
          "lost and found", "cafeteria menu", "study group", "internships"]

SEED_PASSWORD = "password123"

async def seed(small: bool = False):
    num_accounts = 10 if small else 50
    num_posts = 100 if small else 5000
    max_comments_per_post = 3 if small else 8

    print(f"Seeding: {num_accounts} accounts, {num_posts} posts")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # Hash once; every seeded account shares the same password.
    password_hash = hash_password(SEED_PASSWORD)

    async with async_session() as session:
        accounts = []
        for i in range(num_accounts):
            account = Account(
                email=f"student{i:04d}@example.com",
                nickname=f"student_{i:04d}",
                password=password_hash,
            )
            session.add(account)
            accounts.append(account)
        await session.flush()
        print(f"  Created {len(accounts)} accounts")

        total_likes = 0
        total_comments = 0
        batch_size = 500
        for batch_start in range(0, num_posts, batch_size):
            batch_end = min(batch_start + batch_size, num_posts)
            posts = []
            for i in range(batch_start, batch_end):
                days_ago = random.randint(0, 365)
                post = Post(
                    title=f"Post {i}: about {random.choice(TOPICS)}",
                    content=f"This is the body of post {i}. " * 10,
                    is_anonymous=random.random() > 0.3,
                    created_at=datetime.now(timezone.utc) - timedelta(days=days_ago),
                )
                post.assign_account(random.choice(accounts))
                session.add(post)
                posts.append(post)
            await session.flush()

            for post in posts:
                # Distinct likers per post keep the unique constraint satisfied.
                for liker in random.sample(accounts, k=random.randint(0, min(10, len(accounts)))):
                    session.add(PostLike(account_id=liker.id, post_id=post.id))
                    total_likes += 1

                ordinals: dict[int, int] = {}
                for _ in range(random.randint(0, max_comments_per_post)):
                    commenter = random.choice(accounts)
                    if commenter.id not in ordinals:
                        ordinals[commenter.id] = len(ordinals) + 1
                    session.add(PostComment(
                        comment=f"Comment from {commenter.nickname}.",
                        is_anonymous=random.random() > 0.5,
                        order_num=ordinals[commenter.id],
                        post_id=post.id,
                        account_id=commenter.id,
                    ))
                    total_comments += 1
            await session.flush()

            print(f"  Batch {batch_start}-{batch_end}: posts created")

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Accounts: {num_accounts} (password: {SEED_PASSWORD})")
    print(f"  Posts: {num_posts}")
    print(f"  Likes: {total_likes}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the board database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (100 posts)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
