"""File storage for admin uploads: content images and resume PDFs."""

import io
import os
import re
import time
import uuid
from pathlib import Path
from typing import Tuple

from fastapi import UploadFile, HTTPException, status
from PIL import Image, UnidentifiedImageError

# Allowed image MIME types
ALLOWED_IMAGE_TYPES = {
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/png': '.png',
    'image/webp': '.webp',
    'image/gif': '.gif'
}

PDF_CONTENT_TYPE = 'application/pdf'

IMAGE_BUCKETS = frozenset({'project-images', 'blog-images'})
DOCUMENT_BUCKETS = frozenset({'resumes'})
BUCKETS = IMAGE_BUCKETS | DOCUMENT_BUCKETS

# Max file size: 10MB per upload
MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024

# Larger images are downscaled to fit, keeping aspect ratio
MAX_IMAGE_DIMENSION = 2000


def get_uploads_dir() -> Path:
    """Root directory of the stored files; one sub-directory per bucket."""
    configured = os.environ.get("UPLOADS_DIR")
    if configured:
        return Path(configured)
    if os.environ.get("DYNO"):  # Heroku has an ephemeral filesystem outside /tmp
        return Path("/tmp/uploads")
    return Path("uploads")


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent path traversal attacks."""
    if not filename:
        return str(uuid.uuid4())[:8]

    # Remove path components
    filename = os.path.basename(filename.replace('\\', '/'))

    name, ext = os.path.splitext(filename)

    # Sanitize name: only alphanumeric, dots, hyphens, underscores
    name = re.sub(r'[^a-zA-Z0-9._-]', '_', name).lstrip('.')
    ext = re.sub(r'[^a-zA-Z0-9.]', '', ext)

    name = name[:100]
    ext = ext[:10]

    # If name is empty, use UUID
    if not name or set(name) == {'_'}:
        name = str(uuid.uuid4())[:8]

    return name + ext if ext else name


def _read_upload(file: UploadFile) -> bytes:
    """Read the whole upload, enforcing the size limit."""
    file.file.seek(0, os.SEEK_END)
    file_size = file.file.tell()
    file.file.seek(0)

    if file_size > MAX_UPLOAD_SIZE_BYTES:
        size_mb = file_size / (1024 * 1024)
        max_mb = MAX_UPLOAD_SIZE_BYTES / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large ({size_mb:.1f}MB). Maximum size: {max_mb:.0f}MB"
        )

    if file_size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is empty"
        )

    return file.file.read()


def store_image(file: UploadFile, bucket_dir: Path) -> Tuple[str, int]:
    """
    Verify, normalize and save an image.

    The image is re-encoded as JPEG (dropping metadata and anything that is not
    pixel data) and downscaled if larger than MAX_IMAGE_DIMENSION.

    Returns:
        Tuple of (stored file name, stored size in bytes)
    """
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed types: {', '.join(ALLOWED_IMAGE_TYPES.keys())}"
        )

    image_data = _read_upload(file)

    try:
        image = Image.open(io.BytesIO(image_data))
        image.load()
        # Convert to RGB if necessary (handles RGBA, P, etc.)
        if image.mode in ('RGBA', 'LA', 'P'):
            # White background for transparency
            if image.mode == 'P':
                image = image.convert('RGBA')
            rgb_image = Image.new('RGB', image.size, (255, 255, 255))
            rgb_image.paste(image, mask=image.split()[-1])
            image = rgb_image
        elif image.mode != 'RGB':
            image = image.convert('RGB')
    except (UnidentifiedImageError, OSError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid image file: {str(e)}"
        )

    if image.width > MAX_IMAGE_DIMENSION or image.height > MAX_IMAGE_DIMENSION:
        image.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION), Image.Resampling.LANCZOS)

    bucket_dir.mkdir(parents=True, exist_ok=True)
    stored_name = f"{uuid.uuid4()}.jpg"
    stored_path = bucket_dir / stored_name
    image.save(stored_path, 'JPEG', quality=85, optimize=True)

    return stored_name, stored_path.stat().st_size


def store_pdf(file: UploadFile, bucket_dir: Path) -> Tuple[str, int]:
    """Save a PDF after checking its content type and file header."""
    if file.content_type != PDF_CONTENT_TYPE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are allowed"
        )

    data = _read_upload(file)
    if not data.startswith(b'%PDF'):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is not a valid PDF"
        )

    bucket_dir.mkdir(parents=True, exist_ok=True)
    # Timestamp prefix keeps every upload unique while preserving the original name
    stored_name = f"{int(time.time() * 1000)}_{sanitize_filename(file.filename)}"
    if not stored_name.lower().endswith('.pdf'):
        stored_name += '.pdf'
    (bucket_dir / stored_name).write_bytes(data)

    return stored_name, len(data)


def store_upload(bucket: str, file: UploadFile) -> Tuple[str, int]:
    """
    Store an upload in a bucket.

    Returns:
        Tuple of (path relative to the uploads root, size in bytes)
    """
    if bucket not in BUCKETS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown bucket '{bucket}'"
        )

    bucket_dir = get_uploads_dir() / bucket
    if bucket in IMAGE_BUCKETS:
        stored_name, size = store_image(file, bucket_dir)
    else:
        stored_name, size = store_pdf(file, bucket_dir)

    return f"{bucket}/{stored_name}", size
