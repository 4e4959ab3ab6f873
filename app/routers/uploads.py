# =============================================================================
# app/routers/uploads.py - Multipart Upload Endpoints
# =============================================================================
#   POST /upload-audio          voice recording  -> audio bucket
#   POST /upload-image          content image    -> images bucket
#   POST /upload-image-replace  asset image swap -> images bucket
#
# Form fields keep the camelCase names the web client sends. Fields are
# optional at the schema level so a missing one gets a 400 with a clear
# message instead of a validation error list.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.dependencies import BusinessId, rate_limit
from app.exceptions import InvalidRequestError
from core.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(rate_limit("upload"))])

OptionalFile = Annotated[UploadFile | None, File()]


@router.post("/upload-audio")
async def upload_audio(
    business_id: BusinessId,
    file: OptionalFile = None,
    form_business_id: Annotated[str | None, Form(alias="businessId")] = None,
    content_id: Annotated[str | None, Form(alias="contentId")] = None,
):
    """Store a voice recording as {businessId}_{contentId}.{ext}."""
    if file is None or not form_business_id or not content_id:
        raise InvalidRequestError("Missing required fields: file, businessId, or contentId")

    content = await file.read()
    return UploadService.upload_audio(
        business_id,
        form_business_id,
        content_id,
        content,
        file.content_type,
        filename=file.filename,
    )


@router.post("/upload-image")
async def upload_image(
    business_id: BusinessId,
    file: OptionalFile = None,
    form_business_id: Annotated[str | None, Form(alias="businessId")] = None,
    content_id: Annotated[str | None, Form(alias="contentId")] = None,
    image_type: Annotated[str | None, Form(alias="imageType")] = None,
):
    """Store a content image as {businessId}_{contentId}_{imageType}.{ext}."""
    if file is None or not form_business_id or not content_id:
        raise InvalidRequestError("Missing required fields: file, businessId, or contentId")

    content = await file.read()
    return UploadService.upload_image(
        business_id,
        form_business_id,
        content_id,
        content,
        file.content_type,
        image_type=image_type,
        filename=file.filename,
    )


@router.post("/upload-image-replace")
async def upload_image_replace(
    business_id: BusinessId,
    file: OptionalFile = None,
    content_asset_id: Annotated[str | None, Form(alias="contentAssetId")] = None,
    content_type: Annotated[str | None, Form(alias="contentType")] = None,
):
    """Replace an asset's image and point image_url at the new file."""
    if file is None or not content_asset_id or not content_type:
        raise InvalidRequestError("Missing required fields")

    content = await file.read()
    return UploadService.replace_asset_image(
        business_id,
        content_asset_id,
        content_type,
        content,
        file.content_type,
        filename=file.filename,
    )
