import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from board.config import settings
from board.database import engine
from board.exceptions import AuthenticationError, BoardError
from board.logging_config import setup_logging
from board.middleware import RequestLoggingMiddleware
from board.routers import auth, comments, posts

logger = logging.getLogger(__name__)

_ERROR_TZ = timezone(timedelta(hours=settings.TIMEZONE_OFFSET_HOURS))


def error_payload(request: Request, message: str) -> dict:
    """Body shared by every error response: timestamp, message and request uri."""
    return {
        "timestamp": datetime.now(_ERROR_TZ).strftime("%Y-%m-%d %H:%M"),
        "message": message,
        "details": f"uri={request.url.path}",
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.LOG_LEVEL)
    logger.info("Starting board API (%s)", settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Bulletin Board API",
    description="Posts, comments and likes behind JWT authentication",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(BoardError)
async def handle_board_error(request: Request, exc: BoardError):
    if exc.context:
        logger.info("%s: %s %s", type(exc).__name__, exc.message, exc.context)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(request, exc.message),
        headers=headers,
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_payload(request, "An unexpected error occurred"),
    )


# Routers
app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(comments.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
