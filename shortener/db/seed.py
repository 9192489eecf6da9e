"""
Development seed data.
"""

from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.logging import get_logger
from shortener.core.security import get_password_hash
from shortener.models.types import utcnow
from shortener.models.url import URL
from shortener.models.user import ROLE_USER, User, new_user_id

logger = get_logger(__name__)

SEED_PASSWORD = "password"
SEED_USER_COUNT = 6

SEED_LINKS = {
    "google": "https://www.google.com",
    "youtube": "https://www.youtube.com",
    "github": "https://www.github.com",
    "telegram": "https://www.telegram.org",
    "habr": "https://www.habr.com",
    "wiki": "https://www.wikipedia.org",
}


def seed_email(i: int) -> str:
    return f"test{i}@example.org"


async def seed(session: AsyncSession) -> int:
    """
    Insert six users and six anonymous links expiring in one hour.

    Rows that already exist are left alone, so running it again is safe.

    Returns:
        Number of rows added
    """
    now = utcnow()
    expires = now + timedelta(hours=1)
    hashed_password = get_password_hash(SEED_PASSWORD)
    added = 0

    for link_id, link in SEED_LINKS.items():
        if await session.get(URL, link_id) is not None:
            continue
        session.add(
            URL(
                id=link_id,
                link=link,
                expiration_date=expires,
                user_id="",
                created_at=now,
                updated_at=now,
            )
        )
        added += 1

    emails = [seed_email(i) for i in range(1, SEED_USER_COUNT + 1)]
    result = await session.execute(select(User.email).where(User.email.in_(emails)))
    existing = set(result.scalars().all())

    for i, email in enumerate(emails, start=1):
        if email in existing:
            continue
        session.add(
            User(
                id=new_user_id(),
                full_name=f"User {i}",
                email=email,
                hashed_password=hashed_password,
                roles=[ROLE_USER],
                created_at=now,
                updated_at=now,
            )
        )
        added += 1

    await session.commit()
    logger.info(f"Seeded {added} rows ({len(SEED_LINKS)} links and {SEED_USER_COUNT} users wanted)")
    return added
