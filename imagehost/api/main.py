"""FastAPI entrypoint and application wiring."""

from __future__ import annotations

import logging
import mimetypes
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from imagehost.api.limits import BodySizeLimitMiddleware, body_limit_for
from imagehost.api.routes import router
from imagehost.config.settings import Settings, get_settings
from imagehost.errors import ImageHostError
from imagehost.imgproc.normalize import TARGET_EXTENSION, TARGET_MEDIA_TYPE, ImageNormalizer
from imagehost.storage.backend import LocalStorage

logger = logging.getLogger(__name__)

mimetypes.add_type(TARGET_MEDIA_TYPE, TARGET_EXTENSION)


async def _image_host_error_handler(request: Request, exc: ImageHostError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


class CatchAllMiddleware:
    """Turn unclassified errors into a 400 JSON body inside the app.

    Sits inside CORS so the response still carries CORS headers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception:
            if response_started:
                raise
            logger.exception("Unhandled error on %s %s", scope.get("method"), scope.get("path"))
            response = JSONResponse(status_code=400, content={"message": "Bad request."})
            await response(scope, receive, send)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Initialise the FastAPI application."""

    settings = settings or get_settings()
    storage = LocalStorage(settings.storage_path)
    normalizer = ImageNormalizer(settings.webp_quality, workers=settings.encode_workers)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Server running on http://%s:%d", settings.host, settings.port)
        logger.info("Images will be served from directory: %s", storage.root)
        logger.info("Allowed origins for writes: %s", ", ".join(settings.allowed_origins) or "(none)")
        try:
            yield
        finally:
            normalizer.shutdown()

    app = FastAPI(
        title="Image Host",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.normalizer = normalizer

    app.add_middleware(CatchAllMiddleware)
    # Reads are public; writes are guarded by the origin gate, not by CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=body_limit_for(settings.max_upload_bytes))

    app.add_exception_handler(ImageHostError, _image_host_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    app.include_router(router)
    app.mount("/images", StaticFiles(directory=storage.root, html=False), name="images")
    return app
