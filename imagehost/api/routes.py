"""Upload, delete and health routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse, Response
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from imagehost.api.limits import body_limit_for, check_declared_length
from imagehost.api.origin import OriginGateDependency
from imagehost.api.schemas import MessageResponse, UploadResponse
from imagehost.config.settings import Settings
from imagehost.errors import ImageHostError, ProcessingFailure, ValidationFailure
from imagehost.imgproc.filter import check_size, check_upload
from imagehost.imgproc.normalize import ImageNormalizer
from imagehost.metrics.prometheus_exporter import image_deletes_total, image_uploads_total, render_latest
from imagehost.storage.backend import LocalStorage
from imagehost.storage.naming import generate_filename

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = "image"
READ_CHUNK_BYTES = 64 * 1024
HEALTH_TEXT = "Simple CDN server is running!"


async def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an uploaded file in chunks, stopping once it passes ``max_bytes``."""

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        result = check_size(total, max_bytes)
        if not result.accepted:
            raise result.failure
        chunks.append(chunk)
    return b"".join(chunks)


async def parse_form(request: Request) -> FormData:
    """Parse the multipart body, mapping parser errors onto validation failures."""

    try:
        return await request.form(max_files=1)
    except ImageHostError:
        raise
    except StarletteHTTPException as exc:
        raise ValidationFailure(str(exc.detail)) from exc
    except (MultiPartException, ValueError) as exc:
        raise ValidationFailure("Malformed multipart body.") from exc


def public_url(request: Request, settings: Settings, filename: str) -> str:
    if settings.public_base_url:
        return f"{settings.public_base_url}/images/{filename}"
    return str(request.url_for("images", path=filename))


@router.get("/", response_class=PlainTextResponse, tags=["system"])
async def health_check() -> str:
    """Liveness text; never gated."""

    return HEALTH_TEXT


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    body, content_type = render_latest()
    return Response(content=body, media_type=content_type)


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadResponse,
    dependencies=[OriginGateDependency],
    tags=["images"],
)
async def upload_image(request: Request) -> UploadResponse:
    """Accept one image, convert it to WebP and store it under a fresh name."""

    settings: Settings = request.app.state.settings
    storage: LocalStorage = request.app.state.storage
    normalizer: ImageNormalizer = request.app.state.normalizer

    form = None
    try:
        check_declared_length(request, body_limit_for(settings.max_upload_bytes))
        form = await parse_form(request)
        upload = form.get(UPLOAD_FIELD)
        if not isinstance(upload, UploadFile):
            raise ValidationFailure("No image file was uploaded.")

        result = check_upload(upload.content_type, upload.size or 0, settings.max_upload_bytes)
        if not result.accepted:
            raise result.failure

        data = await read_upload(upload, settings.max_upload_bytes)
        original_name = upload.filename
    except ValidationFailure:
        image_uploads_total.labels(outcome="rejected").inc()
        raise
    finally:
        if form is not None:
            await form.close()

    try:
        encoded = await normalizer.normalize(data)
        filename = generate_filename(original_name)
        await storage.put(encoded, filename)
    except ProcessingFailure:
        logger.exception("Error while processing upload %r", original_name)
        image_uploads_total.labels(outcome="failed").inc()
        raise

    logger.info("Stored %s (%d bytes)", filename, len(encoded))
    image_uploads_total.labels(outcome="stored").inc()
    return UploadResponse(
        message="Image uploaded and converted to WebP.",
        filename=filename,
        url=public_url(request, settings, filename),
    )


@router.delete(
    "/delete/{filename:path}",
    response_model=MessageResponse,
    dependencies=[OriginGateDependency],
    tags=["images"],
)
async def delete_image(filename: str, request: Request) -> MessageResponse:
    """Remove a stored image by name."""

    storage: LocalStorage = request.app.state.storage
    try:
        await storage.delete(filename)
    except ImageHostError as exc:
        image_deletes_total.labels(outcome=type(exc).__name__).inc()
        raise

    logger.info("Deleted %s", filename)
    image_deletes_total.labels(outcome="deleted").inc()
    return MessageResponse(message="File deleted successfully.")
