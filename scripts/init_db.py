"""
Database initialization script

Run once to create the users collection indexes:
    python scripts/init_db.py

Reads MONGODB_URL / MONGODB_DB_NAME from the environment or .env.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, get_users_collection
from app.db.indexes import create_indexes

setup_logging()
logger = get_logger(__name__)


async def main():
    await connect_to_mongo()
    try:
        users = get_users_collection()
        await create_indexes(users)

        indexes = await users.index_information()
        for name, info in indexes.items():
            unique = " (unique)" if info.get("unique") else ""
            logger.info(f"  users.{name}: {info['key']}{unique}")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
