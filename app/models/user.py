"""
app/models/user.py

Purpose: User document model

- Display name, unique email, bcrypt password hash
- Paid plan flag and the checkout session that unlocked it
- Conversion from raw MongoDB documents
"""

from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class UserAccount(BaseModel):
    """
    A stored account. `password_hash` never leaves the service layer.
    """
    id: str
    name: str
    email: str
    password_hash: str = Field(repr=False)
    has_paid_plan: bool = False
    payment_session_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserAccount":
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            email=doc["email"],
            password_hash=doc.get("password", ""),
            has_paid_plan=bool(doc.get("has_paid_plan", False)),
            payment_session_id=doc.get("payment_session_id"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )
