"""Administrative endpoints: login, dashboard, user and subscriber management, audit views."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.errors import NotFoundError, ValidationFailedError
from catalogue_admin.core.security import get_current_admin, get_super_admin
from catalogue_admin.db.models import utcnow
from catalogue_admin.interfaces.http.deps import (
    get_account_service,
    get_db_session,
    get_newsletter_service,
    get_report_service,
    get_request_origin,
)
from catalogue_admin.interfaces.http.routers.auth import build_login_data
from catalogue_admin.modules.accounts import (
    UNSET,
    Account,
    AccountAlreadyExistsError,
    AccountCreateInput,
    AccountNotFoundError,
    AccountService,
    AccountUpdateInput,
)
from catalogue_admin.modules.activities import ActivityEntry, ActivityKind, ActivityService
from catalogue_admin.modules.catalogues import CatalogueService
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.modules.downloads import DownloadQueryService, DownloadRecord
from catalogue_admin.modules.newsletter import NewsletterService, Subscriber
from catalogue_admin.modules.reports import ReportService
from catalogue_admin.schemas import (
    AccountCreateRequest,
    AccountDetailData,
    AccountListData,
    AccountResponse,
    AccountStatusRequest,
    AccountUpdateRequest,
    ActivityListData,
    ActivityResponse,
    CounterMismatchResponse,
    DashboardData,
    DashboardStats,
    DownloadListData,
    DownloadRecordResponse,
    Envelope,
    IntegrityData,
    LoginData,
    LoginRequest,
    PaginationResponse,
    StatsData,
    SubscriberData,
    SubscriberListData,
    SubscriberResponse,
    SubscriberStatusRequest,
    UserData,
    envelope,
)

router = APIRouter()


def _download_response(record: DownloadRecord) -> DownloadRecordResponse:
    event = record.event
    return DownloadRecordResponse(
        id=event.id,
        user_id=event.user_id,
        user_name=record.user_name,
        user_email=record.user_email,
        catalogue_id=event.catalogue_id,
        catalogue_name=record.catalogue_name,
        file_name=event.file_name,
        file_size=event.file_size,
        ip_address=event.ip_address,
        user_agent=event.user_agent,
        timestamp=event.timestamp,
    )


def _activity_response(entry: ActivityEntry) -> ActivityResponse:
    return ActivityResponse.model_validate(entry)


def _subscriber_response(subscriber: Subscriber) -> SubscriberResponse:
    return SubscriberResponse.model_validate(subscriber)


def _user_not_found() -> NotFoundError:
    return NotFoundError("user_not_found", "User not found")


@router.post("/login", response_model=Envelope[LoginData], summary="管理员登录")
async def admin_login(
    payload: LoginRequest,
    origin: RequestOrigin = Depends(get_request_origin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    account = await account_service.authenticate(payload.username, payload.password)
    if account is None or not account.is_admin():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin credentials")

    await account_service.set_last_login(account.id)
    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_LOGIN,
        admin_id=account.id,
        details={"username": account.username},
        origin=origin,
    )
    return envelope(build_login_data(account), "Admin login successful")


@router.get("/dashboard", response_model=Envelope[DashboardData], summary="仪表盘统计")
async def dashboard(
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
    newsletter: NewsletterService = Depends(get_newsletter_service),
    db: AsyncSession = Depends(get_db_session),
):
    catalogues = CatalogueService.with_session(db)
    downloads = DownloadQueryService.with_session(db)
    activities = ActivityService.with_session(db)

    stats = DashboardStats(
        total_catalogues=await catalogues.count(),
        active_catalogues=await catalogues.count(active_only=True),
        total_downloads=await downloads.count(),
        total_accounts=await account_service.count_accounts(),
        active_users=await account_service.count_accounts(active_only=True),
        total_activities=await activities.count(),
        total_subscribers=await newsletter.count(),
        active_subscribers=await newsletter.count(active_only=True),
    )
    return envelope(
        DashboardData(
            stats=stats,
            recent_downloads=[_download_response(record) for record in await downloads.recent(10)],
            recent_activities=[_activity_response(entry) for entry in await activities.recent(10)],
            recent_users=[
                AccountResponse.model_validate(account) for account in await account_service.recent_accounts(5)
            ],
        ),
        "Dashboard statistics retrieved",
    )


@router.get("/stats", response_model=Envelope[StatsData], summary="使用情况统计")
async def usage_stats(
    period: str = Query("30d"),
    admin: Account = Depends(get_current_admin),
    reports: ReportService = Depends(get_report_service),
):
    stats = await reports.usage(period)
    return envelope(StatsData.model_validate(stats), "Statistics retrieved")


# ---- 用户管理 ----


@router.get("/users", response_model=Envelope[AccountListData], summary="用户列表")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    q: Optional[str] = Query(None, max_length=100),
    role: Optional[str] = Query(None, max_length=20),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    result = await account_service.list_accounts(page=page, limit=limit, search=q, role=role, is_active=is_active)
    return envelope(
        AccountListData(
            users=[AccountResponse.model_validate(account) for account in result.items],
            pagination=PaginationResponse.model_validate(result.pagination),
        ),
        "Users retrieved",
    )


@router.post(
    "/users",
    response_model=Envelope[UserData],
    status_code=status.HTTP_201_CREATED,
    summary="创建用户",
)
async def create_user(
    payload: AccountCreateRequest,
    origin: RequestOrigin = Depends(get_request_origin),
    admin: Account = Depends(get_super_admin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        account = await account_service.create_account(
            AccountCreateInput(
                username=payload.username,
                password=payload.password,
                role=payload.role,
                name=payload.name,
                email=str(payload.email) if payload.email else None,
                company_name=payload.company_name,
                phone_number=payload.phone_number,
                city=payload.city,
                is_active=payload.is_active,
            )
        )
    except AccountAlreadyExistsError as exc:
        raise ValidationFailedError("duplicate_account", str(exc)) from exc

    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_CREATE_USER,
        admin_id=admin.id,
        user_id=account.id,
        details={"username": account.username, "email": account.email, "role": account.role},
        origin=origin,
    )
    return envelope(UserData(user=AccountResponse.model_validate(account)), "User created")


@router.get("/users/{account_id}", response_model=Envelope[AccountDetailData], summary="用户详情")
async def get_user(
    account_id: str,
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        account = await account_service.get_account(account_id)
    except AccountNotFoundError as exc:
        raise _user_not_found() from exc

    activities = await ActivityService.with_session(db).recent(10, user_id=account.id)
    downloads = await DownloadQueryService.with_session(db).recent(10, user_id=account.id)
    return envelope(
        AccountDetailData(
            user=AccountResponse.model_validate(account),
            activities=[_activity_response(entry) for entry in activities],
            downloads=[_download_response(record) for record in downloads],
        ),
        "User retrieved",
    )


@router.put("/users/{account_id}", response_model=Envelope[UserData], summary="更新用户资料")
async def update_user(
    account_id: str,
    payload: AccountUpdateRequest,
    origin: RequestOrigin = Depends(get_request_origin),
    admin: Account = Depends(get_super_admin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    update_data = payload.model_dump(exclude_unset=True)
    if update_data.get("role", UNSET) is None:
        del update_data["role"]
    update_input = AccountUpdateInput(
        name=update_data.get("name", UNSET),
        email=update_data.get("email", UNSET),
        role=update_data.get("role", UNSET),
        company_name=update_data.get("company_name", UNSET),
        phone_number=update_data.get("phone_number", UNSET),
        city=update_data.get("city", UNSET),
    )

    try:
        account = await account_service.update_account(account_id, update_input)
    except AccountNotFoundError as exc:
        raise _user_not_found() from exc
    except AccountAlreadyExistsError as exc:
        raise ValidationFailedError("duplicate_email", str(exc)) from exc

    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_UPDATE_USER,
        admin_id=admin.id,
        user_id=account.id,
        details={"username": account.username, "fields": sorted(update_input.changes())},
        origin=origin,
    )
    return envelope(UserData(user=AccountResponse.model_validate(account)), "User updated")


@router.put("/users/{account_id}/status", response_model=Envelope[UserData], summary="启用/停用用户")
async def update_user_status(
    account_id: str,
    payload: AccountStatusRequest,
    origin: RequestOrigin = Depends(get_request_origin),
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        account = await account_service.set_status(account_id, payload.is_active)
    except AccountNotFoundError as exc:
        raise _user_not_found() from exc

    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_CHANGE_USER_STATUS,
        admin_id=admin.id,
        user_id=account.id,
        details={"username": account.username, "isActive": account.is_active},
        origin=origin,
    )
    message = "User activated" if account.is_active else "User deactivated"
    return envelope(UserData(user=AccountResponse.model_validate(account)), message)


@router.delete("/users/{account_id}", response_model=Envelope[dict], summary="删除用户")
async def delete_user(
    account_id: str,
    origin: RequestOrigin = Depends(get_request_origin),
    admin: Account = Depends(get_super_admin),
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
):
    if account_id == admin.id:
        raise ValidationFailedError("cannot_delete_self", "You cannot delete your own account")
    try:
        account = await account_service.delete_account(account_id)
    except AccountNotFoundError as exc:
        raise _user_not_found() from exc

    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_DELETE_USER,
        admin_id=admin.id,
        user_id=account.id,
        details={"username": account.username},
        origin=origin,
    )
    return envelope({}, "User deleted")


# ---- 邮件订阅 ----


@router.get("/newsletter/subscribers", response_model=Envelope[SubscriberListData], summary="订阅者列表")
async def list_subscribers(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    q: Optional[str] = Query(None, max_length=100),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    admin: Account = Depends(get_current_admin),
    newsletter: NewsletterService = Depends(get_newsletter_service),
):
    result = await newsletter.list_subscribers(page=page, limit=limit, search=q, is_active=is_active)
    return envelope(
        SubscriberListData(
            subscribers=[_subscriber_response(subscriber) for subscriber in result.items],
            pagination=PaginationResponse.model_validate(result.pagination),
        ),
        "Subscribers retrieved",
    )


@router.put(
    "/newsletter/subscribers/{subscriber_id}/status",
    response_model=Envelope[SubscriberData],
    summary="启用/停用订阅",
)
async def update_subscriber_status(
    subscriber_id: str,
    payload: SubscriberStatusRequest,
    origin: RequestOrigin = Depends(get_request_origin),
    admin: Account = Depends(get_current_admin),
    newsletter: NewsletterService = Depends(get_newsletter_service),
    db: AsyncSession = Depends(get_db_session),
):
    subscriber = await newsletter.set_status(subscriber_id, payload.is_active)
    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_CHANGE_SUBSCRIBER_STATUS,
        admin_id=admin.id,
        details={"email": subscriber.email, "isActive": subscriber.is_active},
        origin=origin,
    )
    message = "Subscriber activated" if subscriber.is_active else "Subscriber deactivated"
    return envelope(SubscriberData(subscriber=_subscriber_response(subscriber)), message)


@router.get("/newsletter/export", summary="导出订阅者 CSV")
async def export_subscribers(
    admin: Account = Depends(get_current_admin),
    newsletter: NewsletterService = Depends(get_newsletter_service),
):
    content = await newsletter.export_csv()
    filename = f"newsletter-subscribers-{utcnow():%Y-%m-%d}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---- 审计 ----


@router.get("/catalogue/downloads", response_model=Envelope[DownloadListData], summary="目录下载记录")
async def catalogue_downloads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    result = await DownloadQueryService.with_session(db).list_downloads(page=page, limit=limit)
    return envelope(
        DownloadListData(
            downloads=[_download_response(record) for record in result.items],
            pagination=PaginationResponse.model_validate(result.pagination),
        ),
        "Catalogue downloads retrieved",
    )


@router.get("/activities", response_model=Envelope[ActivityListData], summary="操作日志")
async def list_activities(
    type: Optional[str] = Query(None, max_length=50),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    result = await ActivityService.with_session(db).list_activities(page=page, limit=limit, kind=type)
    return envelope(
        ActivityListData(
            activities=[_activity_response(entry) for entry in result.items],
            pagination=PaginationResponse.model_validate(result.pagination),
        ),
        "Activities retrieved",
    )


@router.get("/catalogue/integrity", response_model=Envelope[IntegrityData], summary="下载计数一致性检查")
async def catalogue_integrity(
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    mismatches = await CatalogueService.with_session(db).integrity_report()
    return envelope(
        IntegrityData(
            mismatches=[
                CounterMismatchResponse(
                    catalogue_id=item.catalogue.id,
                    original_name=item.catalogue.original_name,
                    download_count=item.catalogue.download_count,
                    recorded_events=item.recorded_events,
                    difference=item.difference,
                )
                for item in mismatches
            ],
            checked_at=utcnow(),
        ),
        "Integrity check completed",
    )
