"""Main FastAPI application."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from sitecms.core.config import settings
from sitecms.core.exceptions import AppError
from sitecms.api.responses import format_response
from sitecms.api.router import api_router
from sitecms.db.base import engine, Base, SessionLocal

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def _provision_site_settings():
    """Create the configured admin and the first settings version if missing."""
    from sitecms.services.accounts import ensure_initial_admin
    from sitecms.services.image_service import ImageService, get_storage_adapter
    from sitecms.services.site_settings_service import SiteSettingsService

    db = SessionLocal()
    try:
        admin = ensure_initial_admin(db)
        service = SiteSettingsService(db, ImageService(get_storage_adapter()))
        record = service.get_current(admin.admin_id if admin else None)
        logger.info("Site settings provisioned", settings_id=record.settings_id)
    except Exception as e:
        db.rollback()
        logger.error("Failed to provision site settings", error=str(e))
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application", app_name=settings.APP_NAME, env=settings.APP_ENV)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    if settings.PROVISION_SETTINGS_ON_STARTUP:
        _provision_site_settings()

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    description="Content management API for the marketing website",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    return format_response("Site CMS API", {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
        "endpoints": {
            "admin": f"{settings.API_V1_PREFIX}/admin",
            "users": f"{settings.API_V1_PREFIX}/users",
        },
    })


@app.get("/health")
async def health_check():
    return format_response("Server is healthy", {"status": "healthy", "env": settings.APP_ENV})


def _field_errors(errors) -> list:
    """Flatten pydantic errors into ``[{field, message, value}]``."""
    result = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
        result.append({
            "field": ".".join(loc) or "body",
            "message": error.get("msg", "Invalid value"),
            "value": error.get("input"),
        })
    return jsonable_encoder(result)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("Request failed", error=exc.message, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=format_response(exc.message, status=exc.status, errors=exc.errors)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=format_response("Validation failed", status="fail", errors=_field_errors(exc.errors()))
    )


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content=format_response("Validation failed", status="fail", errors=_field_errors(exc.errors()))
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = f"Can't find {request.url.path} on this server!"
    return JSONResponse(
        status_code=exc.status_code,
        content=format_response(message, status="fail" if exc.status_code < 500 else "error"),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=format_response("Something went wrong!", status="error")
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
