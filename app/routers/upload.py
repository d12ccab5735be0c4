import logging
import os
import uuid

import aiofiles
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.core.config import settings
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.upload import UPLOAD_TYPES, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED, summary="Upload a photo", description="multipart/form-data upload. Types: `review`, `logo`. Returns the URL to attach to a review or builder.")
async def upload_file(
    file: UploadFile = File(...),
    type: str = Form(...),
    _user: User = Depends(get_current_user),
):
    if type not in UPLOAD_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid upload type")

    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only images can be uploaded")

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large")

    ext = os.path.splitext(file.filename or "file")[1]
    filename = f"{uuid.uuid4()}{ext}"
    upload_dir = os.path.join(settings.UPLOAD_DIR, type)
    os.makedirs(upload_dir, exist_ok=True)

    filepath = os.path.join(upload_dir, filename)
    async with aiofiles.open(filepath, "wb") as f:
        await f.write(content)

    logger.info("Stored %s upload %s (%d bytes)", type, filename, len(content))
    return UploadResponse(
        url=f"/uploads/{type}/{filename}",
        type=type,
        size=len(content),
        mime_type=file.content_type or "application/octet-stream",
    )
