"""
app/api/deps.py

Purpose: Request dependencies

- Resolves the services built at startup (stored on app.state)
- Bearer-token guard yielding the caller's account id
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.exceptions import AuthenticationError
from app.core.security import CredentialService
from app.services.account_service import AccountService
from app.services.checkout_service import CheckoutService
from utils.constants import NOT_AUTHORIZED_MESSAGE

bearer_scheme = HTTPBearer(auto_error=False)


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_current_account_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    credential_service: CredentialService = Depends(get_credential_service),
) -> str:
    """
    Validates the bearer token and returns the account id it is bound to.
    Whether the account still exists is checked by the operation itself.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(NOT_AUTHORIZED_MESSAGE)

    payload = credential_service.decode_token(credentials.credentials)
    return payload["id"]
