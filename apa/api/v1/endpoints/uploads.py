"""Image upload API: forwards one image to the image host and returns its URL."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile

from apa.api.v1.dependencies import CurrentActor, get_image_uploader
from apa.application.interfaces.services import IImageUploader
from apa.core.config import get_settings
from apa.core.limiter import limit_upload
from apa.domain.exceptions import ValidationException

router = APIRouter()

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})


@router.post("/images", status_code=201)
@limit_upload
async def upload_image(
    request: Request,
    actor: CurrentActor,
    uploader: Annotated[IImageUploader, Depends(get_image_uploader)],
    file: Annotated[UploadFile, File()],
) -> dict[str, str]:
    """Upload an image (authenticated); returns {"url": secure_url}."""
    content_type = file.content_type or ""
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationException(f"Unsupported image type: {content_type or 'unknown'}", field="file")
    max_size = get_settings().max_upload_size
    content = await file.read(max_size + 1)
    if len(content) > max_size:
        raise ValidationException(f"Image larger than {max_size} bytes", field="file")
    if not content:
        raise ValidationException("Empty file", field="file")
    url = await uploader.upload(file.filename or "image", content, content_type)
    return {"url": url}
