"""Downscale and re-encode uploaded photos before they are sent to the model.

Phone cameras produce multi-megapixel images; the model only needs enough
detail to see the spine, so every upload is fitted inside a 1024px box and
re-encoded as JPEG.
"""
import base64
import io
import logging

from fastapi import UploadFile
from PIL import Image, ImageOps, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from spinecheck.config import settings
from spinecheck.schemas.analysis import PreparedImage
from spinecheck.utils.exceptions import FileReadError, ImageDecodeError, RenderSurfaceError

logger = logging.getLogger(__name__)

OUTPUT_MIME_TYPE = "image/jpeg"


def target_size(width: int, height: int, max_side: int = 1024) -> tuple[int, int]:
    """Fit (width, height) inside a max_side box, keeping the aspect ratio.

    Images already inside the box are returned unchanged, never upscaled.
    """
    if width >= height:
        if width > max_side:
            height = round(height * max_side / width)
            width = max_side
    elif height > max_side:
        width = round(width * max_side / height)
        height = max_side
    return max(width, 1), max(height, 1)


def _decode(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return ImageOps.exif_transpose(image)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning("Could not decode uploaded image: %s", e)
        raise ImageDecodeError() from e


def _render(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Draw the image onto a fresh RGB surface of the given size."""
    try:
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            rgba = image.convert("RGBA")
            surface = Image.new("RGB", rgba.size, (255, 255, 255))
            surface.paste(rgba, mask=rgba.getchannel("A"))
        else:
            surface = image.convert("RGB")
        if surface.size != size:
            surface = surface.resize(size, Image.Resampling.LANCZOS)
        return surface
    except (MemoryError, OSError, ValueError) as e:
        logger.exception("Failed to render image surface %sx%s", *size)
        raise RenderSurfaceError() from e


def prepare_image(data: bytes, max_side: int | None = None, quality: int | None = None) -> PreparedImage:
    if not data:
        raise FileReadError("빈 파일입니다. 다른 사진을 선택해주세요.")

    max_side = max_side or settings.max_image_side
    quality = quality or settings.jpeg_quality

    image = _decode(data)
    size = target_size(image.width, image.height, max_side)
    surface = _render(image, size)

    buffer = io.BytesIO()
    try:
        surface.save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError) as e:
        logger.exception("JPEG encoding failed")
        raise RenderSurfaceError() from e

    encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
    logger.info(
        "Prepared image %sx%s -> %sx%s (%d bytes jpeg)",
        image.width, image.height, size[0], size[1], buffer.tell(),
    )
    return PreparedImage(data=encoded, mime_type=OUTPUT_MIME_TYPE, width=size[0], height=size[1])


async def prepare_upload(file: UploadFile) -> PreparedImage:
    """Read an uploaded file and prepare it off the event loop."""
    try:
        content = await file.read()
    except OSError as e:
        logger.warning("Failed to read upload %s: %s", file.filename, e)
        raise FileReadError() from e

    if len(content) > settings.max_upload_size_bytes:
        raise FileReadError("사진 용량이 너무 큽니다.", status_code=413)

    return await run_in_threadpool(prepare_image, content)
