"""
app/core/security.py

Purpose: Credential handling

- bcrypt password hashing and verification
- Signed session tokens (JWT) bound to an account id
- Token decoding for the bearer guard
"""

import asyncio
from datetime import timedelta
from typing import Dict, Any

import bcrypt
import jwt

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ValidationError
from utils.constants import MAX_PASSWORD_BYTES, PASSWORD_TOO_LONG_MESSAGE
from utils.time_utils import utcnow


class CredentialService:
    """
    Hashes passwords and issues/validates session tokens.

    bcrypt is CPU bound, so hashing runs in a worker thread to keep the
    event loop free for other requests.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_days: int = 30,
        bcrypt_rounds: int = 10,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_days = expires_days
        self.bcrypt_rounds = bcrypt_rounds

    def check_password_length(self, password: str) -> None:
        """
        bcrypt only reads the first 72 bytes, so longer passwords are refused.

        Raises:
            ValidationError: If the encoded password is too long
        """
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(PASSWORD_TOO_LONG_MESSAGE)

    async def hash_password(self, password: str) -> str:
        self.check_password_length(password)
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        hashed = await asyncio.to_thread(bcrypt.hashpw, password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    async def verify_password(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return False
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw,
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    def create_token(self, account_id: str) -> str:
        """Issue a signed token for the account, valid for `expires_days`."""
        now = utcnow()
        payload = {
            "id": str(account_id),
            "iat": now,
            "exp": now + timedelta(days=self.expires_days),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and verify a token.

        Raises:
            AuthenticationError: If the token is expired, tampered with, or has no id
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Not authorized, token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Not authorized, token failed")

        if not payload.get("id"):
            raise AuthenticationError("Not authorized, token failed")
        return payload


def build_credential_service() -> CredentialService:
    return CredentialService(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_days=settings.JWT_EXPIRES_DAYS,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
