"""
Palette Maker Imaging Utilities
Handles upload validation and thumbnail generation.
"""
import io

from fastapi import HTTPException, UploadFile
from PIL import Image

from palette_maker.config import config


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file metadata before reading it.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 400 for oversized files, 415 for unsupported formats
    """
    # file.size might be None for some clients
    if file.size and file.size > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    if file.filename and '.' in file.filename:
        ext = "." + file.filename.lower().rsplit('.', 1)[-1]
        if ext not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


async def read_upload(file: UploadFile) -> bytes:
    """
    Read upload bytes, enforcing the size limit.

    Raises:
        HTTPException: 400 for empty, unreadable or oversized files
    """
    try:
        file_bytes = await file.read()
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    if not file_bytes:
        raise HTTPException(status_code=400, detail="Empty file")

    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    return file_bytes


def make_thumbnail(image: Image.Image, max_edge: int = None, quality: int = None) -> bytes:
    """
    Encode a low-quality JPEG thumbnail to store alongside a palette.

    Args:
        image: Source image in any mode
        max_edge: Longest side of the thumbnail (default from config)
        quality: JPEG quality (default from config)

    Returns:
        JPEG bytes
    """
    if max_edge is None:
        max_edge = config.THUMBNAIL_MAX_EDGE
    if quality is None:
        quality = config.THUMBNAIL_QUALITY

    thumb = image.convert('RGB')
    thumb.thumbnail((max_edge, max_edge), Image.Resampling.BILINEAR)

    buffer = io.BytesIO()
    thumb.save(buffer, format='JPEG', quality=quality)
    return buffer.getvalue()
