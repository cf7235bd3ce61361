"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class APIModel(BaseModel):
    """Base for payloads exchanged with the dashboard and mobile client (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T
    message: str = ""
    error: Optional[str] = None


def envelope(data: Any = None, message: str = "") -> dict[str, Any]:
    return {"success": True, "data": data if data is not None else {}, "message": message, "error": None}


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


# ---- 认证 ----


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None


class AccountResponse(APIModel):
    id: str
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str
    is_active: bool
    company_name: Optional[str] = None
    phone_number: Optional[str] = None
    city: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


class LoginData(APIModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountResponse


class AccountData(APIModel):
    account: AccountResponse


# ---- 目录 ----


class PaginationResponse(APIModel):
    current: int
    pages: int
    total: int
    limit: int


class CatalogueResponse(APIModel):
    id: str
    file_name: str
    original_name: str
    file_size: int
    mime_type: str
    uploaded_by: Optional[str] = None
    is_active: bool
    download_count: int
    description: Optional[str] = None
    category: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class CatalogueData(APIModel):
    catalogue: CatalogueResponse


class CatalogueListData(APIModel):
    catalogues: list[CatalogueResponse]
    pagination: PaginationResponse


class CatalogueUpdateRequest(APIModel):
    description: Optional[str] = Field(default=None, max_length=1000)
    category: Optional[str] = Field(default=None, max_length=100)
    is_active: Optional[bool] = None


class DownloadLinkResponse(APIModel):
    catalogue_id: str
    name: str
    size: int
    mime_type: str
    url: str


class ProductDownloadData(APIModel):
    product: str
    files: list[DownloadLinkResponse]


class EmailRequest(APIModel):
    product_id: str | int
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=100)


class EmailRequestData(APIModel):
    product: str
    email: str
    sent: list[str]


class LegacyCatalogueItem(APIModel):
    url: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=500)
    type: Optional[str] = None


class LegacyTrackRequest(APIModel):
    # 旧版客户端字段名为 catalogueUrls
    catalogue_urls: list[LegacyCatalogueItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("catalogueUrls", "catalogue_urls", "catalogues"),
    )
    product_id: Optional[str | int] = None
    product_title: Optional[str] = None
    downloaded_at: Optional[datetime] = None


class LegacyTrackData(APIModel):
    tracked_catalogues: int
    suppressed_catalogues: int
    product_id: Optional[str | int] = None
    product_title: Optional[str] = None


# ---- 后台 ----


class DownloadRecordResponse(APIModel):
    id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    catalogue_id: Optional[str] = None
    catalogue_name: Optional[str] = None
    file_name: str
    file_size: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime


class DownloadListData(APIModel):
    downloads: list[DownloadRecordResponse]
    pagination: PaginationResponse


class ActivityResponse(APIModel):
    id: int
    type: str
    user_id: Optional[str] = None
    admin_id: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime


class ActivityListData(APIModel):
    activities: list[ActivityResponse]
    pagination: PaginationResponse


class DashboardStats(APIModel):
    total_catalogues: int
    active_catalogues: int
    total_downloads: int
    total_accounts: int
    active_users: int = 0
    total_activities: int
    total_subscribers: int = 0
    active_subscribers: int = 0


class DashboardData(APIModel):
    stats: DashboardStats
    recent_downloads: list[DownloadRecordResponse]
    recent_activities: list[ActivityResponse]
    recent_users: list[AccountResponse] = Field(default_factory=list)


class CounterMismatchResponse(APIModel):
    catalogue_id: str
    original_name: str
    download_count: int
    recorded_events: int
    difference: int


class IntegrityData(APIModel):
    mismatches: list[CounterMismatchResponse]
    checked_at: datetime


# ---- 用户管理 ----


class AccountListData(APIModel):
    users: list[AccountResponse]
    pagination: PaginationResponse


class AccountCreateRequest(APIModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    role: Literal["user", "admin", "super_admin"] = "user"
    is_active: bool = True
    company_name: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    city: Optional[str] = Field(default=None, max_length=100)


class AccountUpdateRequest(APIModel):
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Literal["user", "admin", "super_admin"]] = None
    company_name: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    city: Optional[str] = Field(default=None, max_length=100)


class AccountStatusRequest(APIModel):
    is_active: bool


class UserData(APIModel):
    user: AccountResponse


class AccountDetailData(APIModel):
    user: AccountResponse
    activities: list[ActivityResponse]
    downloads: list[DownloadRecordResponse]


# ---- 统计 ----


class MonthlyCountResponse(APIModel):
    year: int
    month: int
    count: int


class HourlyCountResponse(APIModel):
    date: str
    hour: int
    count: int


class StatusCountResponse(APIModel):
    is_active: bool
    count: int


class TopDownloadResponse(APIModel):
    catalogue_id: str
    catalogue_name: Optional[str] = None
    count: int


class StatsData(APIModel):
    period: str
    since: datetime
    user_growth: list[MonthlyCountResponse]
    user_status: list[StatusCountResponse]
    downloads_over_time: list[MonthlyCountResponse]
    login_frequency: list[HourlyCountResponse]
    top_downloads: list[TopDownloadResponse]


# ---- 邮件订阅 ----


class SubscribeRequest(APIModel):
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=50)
    company_name: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    city: Optional[str] = Field(default=None, max_length=100)
    source: Optional[Literal["website", "app", "admin", "other"]] = None


class SubscribeData(APIModel):
    subscriber_id: str
    email: str


class SubscriberResponse(APIModel):
    id: str
    email: str
    name: Optional[str] = None
    company_name: Optional[str] = None
    phone_number: Optional[str] = None
    city: Optional[str] = None
    source: str
    is_active: bool
    subscribed_at: datetime
    unsubscribed_at: Optional[datetime] = None
    email_count: int = 0


class SubscriberData(APIModel):
    subscriber: SubscriberResponse


class SubscriberListData(APIModel):
    subscribers: list[SubscriberResponse]
    pagination: PaginationResponse


class SubscriberStatusRequest(APIModel):
    is_active: bool
