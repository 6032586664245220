"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from driveeasy import __version__
from driveeasy.api import router as api_router
from driveeasy.core.config import settings
from driveeasy.core.errors import register_error_handlers

logger = logging.getLogger(__name__)

app = FastAPI(
    title="DriveEasy API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["set-cookie"],
)

register_error_handlers(app)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    response = await call_next(request)
    user_id = getattr(request.state, "user_id", None)
    who = f"[User: {user_id}]" if user_id is not None else "[Anonymous]"
    logger.info("%s %s %s -> %s", request.method, request.url.path, who, response.status_code)
    return response


app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {
        "message": "DriveEasy API",
        "version": __version__,
        "status": "active",
        "timestamp": datetime.now(UTC).isoformat(),
    }
