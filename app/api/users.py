"""
app/api/users.py

Purpose: Account endpoints

- Registration (free and post-payment), login
- Profile read/update for the authenticated caller
"""

from fastapi import APIRouter, Depends, status

from app.api.deps import get_account_service, get_current_account_id
from app.schemas.response import DataResponse
from app.schemas.user import (
    AccountToken,
    LoginRequest,
    PaidRegisterRequest,
    PlanAccountToken,
    Profile,
    RegisterRequest,
    UpdateProfileRequest,
)
from app.services.account_service import AccountService

router = APIRouter(prefix="/users")


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[AccountToken],
)
async def register_user(
    payload: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Register a new account without a paid plan."""
    account = await accounts.register_free_user(payload.name, payload.email, payload.password)
    return DataResponse[AccountToken](data=account)


@router.post(
    "/register-paid-user",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[PlanAccountToken],
)
async def register_paid_user(
    payload: PaidRegisterRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Register a new account after a completed checkout."""
    account = await accounts.register_paid_user(
        payload.name,
        payload.email,
        payload.password,
        payload.sessionId,
    )
    return DataResponse[PlanAccountToken](data=account)


@router.post("/login", response_model=DataResponse[PlanAccountToken])
async def login_user(
    payload: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    account = await accounts.login_user(payload.email, payload.password)
    return DataResponse[PlanAccountToken](data=account)


@router.get("/profile", response_model=DataResponse[Profile])
async def get_user_profile(
    account_id: str = Depends(get_current_account_id),
    accounts: AccountService = Depends(get_account_service),
):
    profile = await accounts.get_profile(account_id)
    return DataResponse[Profile](data=profile)


@router.put("/profile", response_model=DataResponse[PlanAccountToken])
async def update_user_profile(
    payload: UpdateProfileRequest,
    account_id: str = Depends(get_current_account_id),
    accounts: AccountService = Depends(get_account_service),
):
    account = await accounts.update_profile(
        account_id,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return DataResponse[PlanAccountToken](data=account)
