"""
Governance forum API gateway.
Run with: python server.py   (PORT, HOST and the rest come from the environment)
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from api.forum import ForumClient
from api.health import API_NAME, API_VERSION, router as health_router
from api.posts import router as posts_router
from config import Settings
from logging_setup import configure_logging, get_logger

logger = get_logger("server")


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse requests that declare a body larger than ``max_bytes``."""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                return JSONResponse({"detail": "Invalid Content-Length header"}, status_code=400)
            if size > self.max_bytes:
                logger.warning("Request body too large", size=size, limit=self.max_bytes)
                return JSONResponse({"detail": "Request body too large"}, status_code=413)
        return await call_next(request)


async def _unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the gateway application from ``settings`` (environment if omitted)."""
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Gateway ready", upstream=settings.UPSTREAM_BASE_URL)
        yield

    app = FastAPI(title=API_NAME, version=API_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.forum_client = ForumClient(
        settings.UPSTREAM_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _unhandled_exception)

    app.include_router(health_router)
    app.include_router(posts_router)
    return app


def main() -> None:
    import uvicorn

    settings = Settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    logger.info(f"Server running on port {settings.PORT}")
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
