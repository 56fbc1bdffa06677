import io
from PIL import Image as PILImage, UnidentifiedImageError

from app.errors import ValidationError


MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_VIDEO_SIZE = 200 * 1024 * 1024  # 200 MB
VIDEO_CONTENT_TYPES = {
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/webm": "webm",
}


def validate_image(image_bytes):
    """Validate and sanitize an uploaded color image.

    - Checks file size
    - Verifies it's a real image via Pillow
    - Strips EXIF data by re-encoding
    - Converts to JPEG

    Returns:
        Sanitized JPEG bytes

    Raises:
        ValidationError on invalid input
    """
    if not image_bytes:
        raise ValidationError("Image file is required")
    if len(image_bytes) > MAX_IMAGE_SIZE:
        raise ValidationError(
            f"Image too large: {len(image_bytes)} bytes (max {MAX_IMAGE_SIZE})"
        )

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()  # verify it's a real image
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationError("Invalid image file")

    # Re-open (verify() closes the file) and re-encode to strip EXIF
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def create_thumbnail(image_bytes, max_size=(640, 640)):
    """Shrink a video poster frame for the feed."""
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode != "RGB":
        img = img.convert("RGB")
    img.thumbnail(max_size, PILImage.LANCZOS)
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=80)
    return buffer.getvalue()


def validate_video(video_bytes, content_type):
    """Return the file extension for an acceptable video upload."""
    if not video_bytes:
        raise ValidationError("Video file is required")
    if len(video_bytes) > MAX_VIDEO_SIZE:
        raise ValidationError(
            f"Video too large: {len(video_bytes)} bytes (max {MAX_VIDEO_SIZE})"
        )
    ext = VIDEO_CONTENT_TYPES.get((content_type or "").split(";")[0].strip().lower())
    if not ext:
        raise ValidationError(f"Unsupported video type: {content_type}")
    return ext
