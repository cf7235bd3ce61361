"""Catalogue registry and access endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.errors import ValidationFailedError
from catalogue_admin.core.security import get_current_account, get_current_admin, get_optional_account
from catalogue_admin.interfaces.http.deps import (
    get_access_service,
    get_catalogue_service,
    get_db_session,
    get_request_origin,
)
from catalogue_admin.modules.access import CatalogueAccessService
from catalogue_admin.modules.accounts import Account
from catalogue_admin.modules.activities import ActivityKind, ActivityService
from catalogue_admin.modules.catalogues import CatalogueEntry, CatalogueService
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.modules.downloads import LegacyDownloadItem
from catalogue_admin.schemas import (
    CatalogueData,
    CatalogueListData,
    CatalogueResponse,
    CatalogueUpdateRequest,
    DownloadLinkResponse,
    EmailRequest,
    EmailRequestData,
    Envelope,
    LegacyTrackData,
    LegacyTrackRequest,
    PaginationResponse,
    ProductDownloadData,
    envelope,
)

router = APIRouter()


@router.get("", response_model=Envelope[CatalogueListData], summary="目录列表")
async def list_catalogues(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None, max_length=100),
    service: CatalogueService = Depends(get_catalogue_service),
):
    result = await service.list_catalogues(page=page, limit=limit, search=search, category=category)
    return envelope(
        CatalogueListData(
            catalogues=[CatalogueResponse.model_validate(entry) for entry in result.items],
            pagination=PaginationResponse.model_validate(result.pagination),
        ),
        "Catalogues retrieved successfully",
    )


@router.post(
    "/upload",
    response_model=Envelope[CatalogueData],
    status_code=status.HTTP_201_CREATED,
    summary="上传目录（管理员）",
)
async def upload_catalogue(
    catalogue: Optional[UploadFile] = File(default=None),
    description: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    admin: Account = Depends(get_current_admin),
    origin: RequestOrigin = Depends(get_request_origin),
    service: CatalogueService = Depends(get_catalogue_service),
    db: AsyncSession = Depends(get_db_session),
):
    if catalogue is None:
        raise ValidationFailedError("no_file", "No file uploaded")
    entry = await service.store_upload(
        uploader_id=admin.id,
        upload=catalogue,
        description=description,
        category=category,
    )
    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_UPLOAD_CATALOGUE,
        admin_id=admin.id,
        details={"catalogueId": entry.id, "fileName": entry.original_name, "fileSize": entry.file_size},
        origin=origin,
    )
    return envelope(CatalogueData(catalogue=CatalogueResponse.model_validate(entry)), "Catalogue uploaded successfully")


@router.post("/request-email", response_model=Envelope[EmailRequestData], summary="通过邮件发送产品目录")
async def request_catalogue_email(
    payload: EmailRequest,
    account: Optional[Account] = Depends(get_optional_account),
    origin: RequestOrigin = Depends(get_request_origin),
    access: CatalogueAccessService = Depends(get_access_service),
):
    result = await access.request_email(
        payload.product_id,
        str(payload.email),
        origin,
        actor=account.as_actor() if account else None,
        name=payload.name,
    )
    return envelope(
        EmailRequestData(product=result.product, email=result.destination, sent=list(result.sent)),
        "Catalogues sent successfully",
    )


@router.post(
    "/download",
    response_model=Envelope[LegacyTrackData],
    status_code=status.HTTP_201_CREATED,
    summary="记录目录下载（旧版客户端）",
)
async def track_download(
    payload: LegacyTrackRequest,
    account: Optional[Account] = Depends(get_optional_account),
    origin: RequestOrigin = Depends(get_request_origin),
    access: CatalogueAccessService = Depends(get_access_service),
):
    result = await access.track_legacy(
        [LegacyDownloadItem(url=item.url, title=item.title, type=item.type) for item in payload.catalogue_urls],
        origin,
        actor=account.as_actor() if account else None,
        downloaded_at=payload.downloaded_at,
    )
    return envelope(
        LegacyTrackData(
            tracked_catalogues=result.recorded,
            suppressed_catalogues=result.suppressed,
            product_id=payload.product_id,
            product_title=payload.product_title,
        ),
        "Download tracked successfully",
    )


@router.get(
    "/product/{product_id}/download",
    response_model=Envelope[ProductDownloadData],
    summary="产品目录下载链接",
)
async def download_product_catalogues(
    product_id: str,
    request: Request,
    account: Account = Depends(get_current_account),
    origin: RequestOrigin = Depends(get_request_origin),
    access: CatalogueAccessService = Depends(get_access_service),
):
    def link_for(entry: CatalogueEntry) -> str:
        return str(request.url_for("download_catalogue", catalogue_id=entry.id))

    bundle = await access.product_download_links(product_id, account.as_actor(), origin, link_for)
    return envelope(
        ProductDownloadData(
            product=bundle.product,
            files=[DownloadLinkResponse.model_validate(link) for link in bundle.links],
        ),
        "Product catalogues ready for download",
    )


@router.get("/{catalogue_id}", response_model=Envelope[CatalogueData], summary="目录详情")
async def get_catalogue(
    catalogue_id: str,
    service: CatalogueService = Depends(get_catalogue_service),
):
    entry = await service.get_catalogue(catalogue_id)
    return envelope(CatalogueData(catalogue=CatalogueResponse.model_validate(entry)), "Catalogue retrieved successfully")


@router.get("/{catalogue_id}/download", name="download_catalogue", summary="下载目录文件")
async def download_catalogue(
    catalogue_id: str,
    account: Account = Depends(get_current_account),
    origin: RequestOrigin = Depends(get_request_origin),
    access: CatalogueAccessService = Depends(get_access_service),
):
    return await access.download_catalogue(catalogue_id, account.as_actor(), origin)


@router.put("/{catalogue_id}", response_model=Envelope[CatalogueData], summary="编辑目录（管理员）")
async def update_catalogue(
    catalogue_id: str,
    payload: CatalogueUpdateRequest,
    admin: Account = Depends(get_current_admin),
    origin: RequestOrigin = Depends(get_request_origin),
    service: CatalogueService = Depends(get_catalogue_service),
    db: AsyncSession = Depends(get_db_session),
):
    entry = await service.update_catalogue(
        catalogue_id,
        description=payload.description,
        category=payload.category,
        is_active=payload.is_active,
    )
    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_UPDATE_CATALOGUE,
        admin_id=admin.id,
        details={"catalogueId": entry.id, "changes": payload.model_dump(exclude_none=True)},
        origin=origin,
    )
    return envelope(CatalogueData(catalogue=CatalogueResponse.model_validate(entry)), "Catalogue updated successfully")


@router.delete("/{catalogue_id}", response_model=Envelope[dict], summary="删除目录（管理员，软删除）")
async def delete_catalogue(
    catalogue_id: str,
    admin: Account = Depends(get_current_admin),
    origin: RequestOrigin = Depends(get_request_origin),
    service: CatalogueService = Depends(get_catalogue_service),
    db: AsyncSession = Depends(get_db_session),
):
    entry = await service.deactivate(catalogue_id)
    await ActivityService.with_session(db).create(
        ActivityKind.ADMIN_DELETE_CATALOGUE,
        admin_id=admin.id,
        details={"catalogueId": entry.id, "fileName": entry.original_name},
        origin=origin,
    )
    return envelope({}, "Catalogue deleted successfully")
