import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from newsdesk.cache import cache
from newsdesk.config import settings
from newsdesk.database import async_session
from newsdesk.errors import ApiError
from newsdesk.middleware import RequestLogMiddleware
from newsdesk.routers import admin, articles, comments, media, metrics, preferences, users
from newsdesk.services.cache_warmup import warm_cache

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Stream handler on the root logger; level from ``LOG_LEVEL``."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(handler)
    root_logger.setLevel(settings.LOG_LEVEL.upper())


configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await cache.connect()
    if settings.CACHE_PREFETCH and cache.enabled:
        try:
            async with async_session() as db:
                await warm_cache(db)
        except Exception:
            logger.exception("Cache warm-up failed; serving from the database")
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Newsdesk API",
    description="Articles, media, comments and user engagement behind a read-through cache",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error rendering: every failure is {"error": message}
# ---------------------------------------------------------------------------

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Database error"})


# Routers
app.include_router(articles.router)
app.include_router(media.router)
app.include_router(comments.router)
app.include_router(users.router)
app.include_router(preferences.router)
app.include_router(admin.router)
app.include_router(metrics.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0", "cache": cache.stats["backend"]}
