"""
app/schemas/user.py

Purpose: Account request/response schemas

- Request bodies accept missing fields; presence is checked by the
  account service so every flow reports the same validation message
- Responses use the public field names (_id, hasPaidPlan, ...)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.user import UserAccount


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "password": "s3cret-pass"
            }
        }
    )


class PaidRegisterRequest(RegisterRequest):
    sessionId: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class AccountToken(BaseModel):
    """
    Account summary plus a freshly issued token.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    token: str


class PlanAccountToken(AccountToken):
    has_paid_plan: bool = Field(alias="hasPaidPlan")

    @classmethod
    def from_account(cls, account: UserAccount, token: str) -> "PlanAccountToken":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            has_paid_plan=account.has_paid_plan,
            token=token,
        )


class Profile(BaseModel):
    """
    Stored account without the password hash.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    has_paid_plan: bool = Field(alias="hasPaidPlan")
    payment_session_id: Optional[str] = Field(default=None, alias="paymentSessionId")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_account(cls, account: UserAccount) -> "Profile":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            has_paid_plan=account.has_paid_plan,
            payment_session_id=account.payment_session_id,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )
