"""Authentication endpoints for the mobile client and the admin dashboard."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.security import create_access_token, get_current_account
from catalogue_admin.interfaces.http.deps import get_account_service, get_db_session, get_request_origin
from catalogue_admin.modules.accounts import (
    Account,
    AccountAlreadyExistsError,
    AccountCreateInput,
    AccountService,
)
from catalogue_admin.modules.activities import ActivityKind, ActivityService
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.schemas import (
    AccountData,
    AccountResponse,
    Envelope,
    LoginData,
    LoginRequest,
    RegisterRequest,
    envelope,
)

router = APIRouter()


def build_login_data(account: Account) -> LoginData:
    token = create_access_token(account.id, account.username, account.role)
    return LoginData(access_token=token, account=AccountResponse.model_validate(account))


@router.post(
    "/register",
    response_model=Envelope[LoginData],
    status_code=status.HTTP_201_CREATED,
    summary="用户注册",
)
async def register(
    payload: RegisterRequest,
    origin: RequestOrigin = Depends(get_request_origin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        account = await account_service.create_account(
            AccountCreateInput(
                username=payload.username,
                password=payload.password,
                name=payload.name,
                role="user",
                email=str(payload.email) if payload.email else None,
            )
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    await ActivityService.with_session(db).create(
        ActivityKind.USER_REGISTER,
        user_id=account.id,
        details={"username": account.username, "email": account.email},
        origin=origin,
    )
    return envelope(build_login_data(account), "Registration successful")


@router.post("/login", response_model=Envelope[LoginData], summary="用户登录")
async def login(
    payload: LoginRequest,
    origin: RequestOrigin = Depends(get_request_origin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    account = await account_service.authenticate(payload.username, payload.password)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    await account_service.set_last_login(account.id)
    await ActivityService.with_session(db).create(
        ActivityKind.LOGIN,
        user_id=account.id,
        details={"username": account.username},
        origin=origin,
    )
    return envelope(build_login_data(account), "Login successful")


@router.get("/me", response_model=Envelope[AccountData], summary="当前账号信息")
async def me(account: Account = Depends(get_current_account)):
    return envelope(AccountData(account=AccountResponse.model_validate(account)), "Profile retrieved")
