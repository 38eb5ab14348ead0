"""
app/services/user_store.py

Purpose: User data management

- Create, find and update account records
- The unique email index is the source of truth for duplicates;
  a rejected write surfaces as ConflictError
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.core.logging import get_logger
from app.models.user import UserAccount

logger = get_logger(__name__)


def _to_object_id(account_id: Optional[str]) -> Optional[ObjectId]:
    # ObjectId(None) would mint a fresh id
    if not account_id:
        return None
    try:
        return ObjectId(account_id)
    except (InvalidId, TypeError):
        return None


class MongoUserStore:
    """
    Account persistence over a motor collection.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_by_email(self, email: str) -> Optional[UserAccount]:
        doc = await self.collection.find_one({"email": email})
        return UserAccount.from_document(doc) if doc else None

    async def find_by_id(self, account_id: str) -> Optional[UserAccount]:
        oid = _to_object_id(account_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        return UserAccount.from_document(doc) if doc else None

    async def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        has_paid_plan: bool = False,
        payment_session_id: Optional[str] = None,
    ) -> UserAccount:
        """
        Inserts a new account.

        Raises:
            ConflictError: If the email is already taken
        """
        now = datetime.now(timezone.utc)
        doc: Dict[str, Any] = {
            "name": name,
            "email": email,
            "password": password_hash,
            "has_paid_plan": has_paid_plan,
            "payment_session_id": payment_session_id,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            logger.warning("Duplicate account rejected by store", extra={"email": email})
            raise ConflictError("User already exists")

        doc["_id"] = result.inserted_id
        return UserAccount.from_document(doc)

    async def update(self, account_id: str, fields: Dict[str, Any]) -> Optional[UserAccount]:
        """
        Overwrites the given fields and returns the updated account,
        or None if it no longer exists.

        Raises:
            ConflictError: If the new email belongs to another account
        """
        oid = _to_object_id(account_id)
        if oid is None:
            return None

        changes = {**fields, "updated_at": datetime.now(timezone.utc)}
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            logger.warning("Email change rejected by store", extra={"account_id": account_id})
            raise ConflictError("User already exists")

        return UserAccount.from_document(doc) if doc else None
