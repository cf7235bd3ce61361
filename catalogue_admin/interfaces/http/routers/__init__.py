from fastapi import APIRouter

from catalogue_admin.interfaces.http.routers import admin, auth, catalogue, newsletter


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["认证"])
    router.include_router(catalogue.router, prefix="/catalogue", tags=["目录"])
    router.include_router(admin.router, prefix="/admin", tags=["后台管理"])
    router.include_router(newsletter.router, prefix="/newsletter", tags=["邮件订阅"])
    return router


__all__ = [
    "create_api_router",
]
