"""
app/db/indexes.py

Purpose: Database index management

- Unique email index (authoritative duplicate-account guard)
- Lookup index on payment_session_id for audits
"""

from pymongo import ASCENDING, DESCENDING
from motor.motor_asyncio import AsyncIOMotorCollection

from app.db.mongo import get_users_collection
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes(users: AsyncIOMotorCollection = None):
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        if users is None:
            users = get_users_collection()

        logger.info("Creating database indexes...")

        # The store relies on this index to reject duplicate accounts
        await users.create_index(
            [("email", ASCENDING)],
            unique=True,
            name="email_unique"
        )
        logger.debug("Created unique index on users.email")

        await users.create_index(
            [("payment_session_id", ASCENDING)],
            sparse=True,
            name="payment_session_idx"
        )
        logger.debug("Created index on users.payment_session_id")

        await users.create_index(
            [("created_at", DESCENDING)],
            name="created_at_idx"
        )
        logger.debug("Created index on users.created_at")

        user_indexes = await users.index_information()
        logger.info(f"Index summary: Users={len(user_indexes)}")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    import asyncio
    from app.db.mongo import connect_to_mongo, close_mongo_connection

    async def main():
        await connect_to_mongo()
        await create_indexes()
        await close_mongo_connection()

    asyncio.run(main())
