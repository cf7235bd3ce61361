import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalogue_admin import __version__
from catalogue_admin.core.config import get_settings
from catalogue_admin.core.container import get_container
from catalogue_admin.core.errors import CatalogueAccessError
from catalogue_admin.core.logging_config import setup_logging
from catalogue_admin.infrastructure.database import dispose_engine, init_db
from catalogue_admin.interfaces.http.routers import create_api_router

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent

_STATUS_TAGS = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: "file_too_large",
}


def _resolve_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _error_response(status_code: int, error: str, message: str, data: dict | None = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": data or {}, "message": message, "error": error},
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings)
    container = get_container()
    await init_db()
    logger.info("%s %s started (%s)", settings.project_name, __version__, settings.environment)
    yield
    await container.drain()
    await dispose_engine()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogueAccessError)
    async def catalogue_error_handler(request: Request, exc: CatalogueAccessError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.error)
        return _error_response(exc.status_code, exc.error, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        tag = _STATUS_TAGS.get(exc.status_code, "http_error")
        message = exc.detail if isinstance(exc.detail, str) else tag.replace("_", " ").capitalize()
        return _error_response(exc.status_code, tag, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "validation_failed",
            "Validation failed",
            data={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "server_error", "Server error")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.project_name,
        description="产品目录管理与下载追踪服务端",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get(f"{settings.api_prefix}/health", tags=["系统"], summary="健康检查")
    async def health():
        return {
            "success": True,
            "data": {"status": "ok", "version": __version__, "environment": settings.environment},
            "message": "Server is running",
            "error": None,
        }

    # 前端构建产物存在时托管管理后台
    frontend_dir = _resolve_path(settings.frontend_dir)
    if frontend_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(frontend_dir), html=True), name="frontend")

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with the configured uvicorn options."""
    import uvicorn

    server = get_settings().server
    uvicorn.run("catalogue_admin.main:app", host=server.host, port=server.port, reload=server.reload)
