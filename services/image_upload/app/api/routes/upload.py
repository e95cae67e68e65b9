"""Upload API endpoint."""

from typing import Annotated

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse

from services.image_upload.app.api.deps import Handler
from services.image_upload.app.core.schemas import (
    ErrorResponse,
    ProblemResponse,
    UploadRequest,
    UploadResponse,
    UploadResult,
)
from shared.utils.logging import get_correlation_id, get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _read_upload(file: UploadFile | None) -> UploadRequest:
    """Turn the multipart part into an UploadRequest.

    The size comes from the spooled part, so the body is only read into
    memory once the upload has passed validation.
    """
    if file is None:
        return UploadRequest(
            file_bytes=None,
            declared_content_type="",
            declared_file_name="",
            size_bytes=0,
        )
    if file.size is None:
        content = await file.read()
        return UploadRequest(
            file_bytes=content,
            declared_content_type=file.content_type or "",
            declared_file_name=file.filename or "",
            size_bytes=len(content),
        )
    return UploadRequest(
        file_bytes=None,
        declared_content_type=file.content_type or "",
        declared_file_name=file.filename or "",
        size_bytes=file.size,
        reader=file.read,
    )


def to_response(result: UploadResult) -> JSONResponse:
    """Map an upload result to its HTTP response by error kind."""
    if result.ok:
        body = UploadResponse.from_stored(result.stored)
        return JSONResponse(
            status_code=200,
            content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

    error = result.error
    if error.is_client_error:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=error.message).model_dump(),
        )

    problem = ProblemResponse(
        detail=f"Error uploading file: {error.message}",
        correlation_id=get_correlation_id() or None,
    )
    return JSONResponse(
        status_code=500,
        content=problem.model_dump(by_alias=True, exclude_none=True),
        media_type="application/problem+json",
    )


@router.post(
    "/upload-image",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ProblemResponse}},
)
async def upload_image(
    handler: Handler,
    file: Annotated[UploadFile | None, File(description="Image file to upload")] = None,
):
    """Upload an image.

    The image is:
    1. Validated (present, JPEG/PNG/GIF/WebP, at most 5MB)
    2. Stored under a fresh random key
    3. Returned with a URL it can be read from
    """
    logger.info("image_upload_started")
    request = await _read_upload(file)
    try:
        result = await handler.handle(request)
    finally:
        if file is not None:
            await file.close()
    return to_response(result)
