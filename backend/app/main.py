import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes import attendance, health, schedule, statistics, substitutions
from app.core.config import get_settings
from app.core.exceptions import AppError
from app.core.middleware import RequestLogMiddleware, RequestSizeLimitMiddleware
from app.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        ensure_runtime_schema_compatibility()
    except SQLAlchemyError:
        logger.warning("Schema compatibility check skipped: database unreachable", exc_info=True)
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(RequestLogMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

school_prefix = f"{settings.api_prefix}/schools/{{school_id}}"

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(schedule.router, prefix=f"{school_prefix}/schedule", tags=["schedule"])
app.include_router(substitutions.router, prefix=f"{school_prefix}/substitutions", tags=["substitutions"])
app.include_router(attendance.router, prefix=f"{school_prefix}/attendance", tags=["attendance"])
app.include_router(statistics.router, prefix=f"{school_prefix}/statistics", tags=["statistics"])
