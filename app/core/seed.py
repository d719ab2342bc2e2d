"""Seed the first admin account on app startup."""

import logging
from app.core.config import settings
from app.core.database import async_session
from app.models.user import User, UserRole
from app.services.auth import hash_password, get_user_by_email

logger = logging.getLogger(__name__)


async def seed_admin_account():
    """Create the SEED_ADMIN_* admin if configured and not present yet."""
    if not settings.SEED_ADMIN_EMAIL or not settings.SEED_ADMIN_PASSWORD:
        logger.debug("Admin seed skipped (SEED_ADMIN_EMAIL/SEED_ADMIN_PASSWORD not set)")
        return

    async with async_session() as db:
        try:
            if await get_user_by_email(db, settings.SEED_ADMIN_EMAIL):
                logger.info("Admin account already exists: %s", settings.SEED_ADMIN_EMAIL)
                return

            db.add(User(
                email=settings.SEED_ADMIN_EMAIL,
                name=settings.SEED_ADMIN_NAME,
                hashed_password=hash_password(settings.SEED_ADMIN_PASSWORD),
                role=UserRole.ADMIN,
                is_active=True,
            ))
            await db.commit()
            logger.info("Admin account created: %s", settings.SEED_ADMIN_EMAIL)

        except Exception as e:
            logger.error("Failed to seed admin account: %s", e)
            await db.rollback()
