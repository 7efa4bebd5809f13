from __future__ import annotations
import base64
import binascii
import io
import logging
import os
import re
from typing import Union

from PIL import Image, ImageCms, ImageOps, UnidentifiedImageError

from errors import DecodeError
from pixelbuffer import PixelBuffer

logger = logging.getLogger(__name__)

MAX_DIMENSION = 8192
DEFAULT_JPEG_QUALITY = 95

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".gif", ".webp"}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]*)(?:;[\w=.-]+)*;base64,(?P<payload>.*)$", re.DOTALL)

ImageInput = Union[bytes, bytearray, memoryview, str]


def ensure_srgb(img: Image.Image) -> Image.Image:
    icc = img.info.get("icc_profile")
    if not icc or img.mode not in ("RGB", "RGBA"):
        return img
    try:
        srgb = ImageCms.createProfile("sRGB")
        src = ImageCms.ImageCmsProfile(io.BytesIO(icc))
        return ImageCms.profileToProfile(img, src, srgb, outputMode=img.mode)
    except (ImageCms.PyCMSError, OSError) as e:
        # a broken profile shouldn't make the image unusable
        logger.debug("Ignoring unusable ICC profile: %s", e)
        return img


def decode_data_url(url: str) -> bytes:
    m = _DATA_URL_RE.match(url.strip())
    if not m:
        raise DecodeError("not a base64 data URL")
    try:
        return base64.b64decode(m.group("payload"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"invalid base64 payload: {e}") from e


def to_data_url(data: bytes, fmt: str) -> str:
    mime = "image/png" if fmt.upper() == "PNG" else "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_image(data: ImageInput) -> PixelBuffer:
    """Decode encoded image bytes (or a data URL) into a fresh RGBA buffer."""
    if isinstance(data, str):
        data = decode_data_url(data)
    raw = bytes(data)
    if not raw:
        raise DecodeError("empty image data")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            w, h = img.size
            if w > MAX_DIMENSION or h > MAX_DIMENSION:
                raise DecodeError(f"image {w}x{h} exceeds maximum dimension {MAX_DIMENSION}")
            img = ImageOps.exif_transpose(img)
            # Pillow lazy loads; ensure it's loaded now
            img.load()
            img = ensure_srgb(img)
            buf = PixelBuffer.from_image(img)
    except DecodeError:
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise DecodeError(f"cannot decode image: {e}") from e

    logger.debug("Decoded image %dx%d", buf.width, buf.height)
    return buf


def encode_image(buf: PixelBuffer, fmt: str = "JPEG", quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    fmt = fmt.upper()
    out = io.BytesIO()
    if fmt == "PNG":
        buf.to_image("RGBA").save(out, format="PNG")
    elif fmt in ("JPEG", "JPG"):
        q = max(1, min(100, int(quality)))
        buf.to_image("RGB").save(out, format="JPEG", quality=q)
    else:
        raise ValueError(f"unsupported output format: {fmt}")
    return out.getvalue()


def read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def write_bytes(path: str, data: bytes, overwrite: bool = True) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    if os.path.exists(path) and not overwrite:
        raise FileExistsError(path)
    with open(path, "wb") as f:
        f.write(data)


def make_output_path(out_dir: str, in_path: str, variant_name: str, ext: str) -> str:
    base = os.path.splitext(os.path.basename(in_path))[0]
    filename = f"{base}_{variant_name}.{ext}"
    return os.path.join(out_dir, filename)
