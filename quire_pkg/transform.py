"""
Image resizing and re-encoding.

``process_image`` is a pure function over ``(bytes, ImageResolution)``: it
decodes the source, computes the target size, resizes with the policy's fit
mode and re-encodes. PNG sources stay PNG; everything else becomes JPEG with
4:4:4 chroma subsampling.
"""

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError
from .models import FIT_MODES, ImageResolution

logger = logging.getLogger('Quire.transform')

RESAMPLE = Image.Resampling.LANCZOS

# Pillow's JPEG encoder uses 0 for 4:4:4 chroma subsampling
SUBSAMPLING_444 = 0


def decode_image(data, source=None):
    """Decode raw bytes into a loaded Pillow image or raise DecodeError."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        label = source or 'image data'
        raise DecodeError(f"Cannot decode {label}: {e}", source=source) from e
    return img


def aspect_adjusted_height(width, height, resolution: ImageResolution):
    """Height implied by the policy's aspect ratio, based on the unclamped width."""
    ratio = resolution.ratio()
    if not ratio:
        return height
    w, h = ratio
    return (h * width) // w


def compute_dimensions(src_width, src_height, resolution: ImageResolution):
    """
    Compute the target ``(width, height)`` for a source of the given size.

    The aspect ratio step uses the source width, then the width is clamped
    to the policy width (never upscaled) and the height is rescaled against
    the original source width.
    """
    original_width = src_width
    width = src_width
    height = aspect_adjusted_height(src_width, src_height, resolution)

    if resolution.width and resolution.width < width:
        width = resolution.width

    height = (height * width) // original_width
    return width, max(height, 1)


def _normalize_mode(img):
    if img.mode in ('RGB', 'RGBA', 'L', 'LA'):
        return img
    if 'transparency' in img.info or img.mode in ('PA', 'RGBa'):
        return img.convert('RGBA')
    return img.convert('RGB')


def _background(img):
    bands = img.getbands()
    color = [0] * len(bands)
    if 'A' in bands:
        color[bands.index('A')] = 255
    return tuple(color) if len(color) > 1 else color[0]


def resize_image(img, size, fit='cover'):
    """Resize ``img`` to ``size`` using one of the supported fit modes."""
    if fit not in FIT_MODES:
        raise ValueError(f"Unsupported fit mode: {fit}")

    img = _normalize_mode(img)
    width, height = size

    if fit == 'cover':
        return ImageOps.fit(img, size, method=RESAMPLE)
    if fit == 'contain':
        return ImageOps.pad(img, size, method=RESAMPLE, color=_background(img))
    if fit == 'fill':
        return img.resize(size, RESAMPLE)
    if fit == 'inside':
        return ImageOps.contain(img, size, method=RESAMPLE)

    # outside: smallest aspect-preserving size covering the box
    scale = max(width / img.width, height / img.height)
    target = (max(1, round(img.width * scale)), max(1, round(img.height * scale)))
    return img.resize(target, RESAMPLE)


def encode_png(img, quality):
    if quality < 100:
        # Lower quality trades colours for size via an adaptive palette
        colors = max(2, min(256, round(256 * quality / 100)))
        img = img.convert('RGBA' if 'A' in img.getbands() else 'RGB')
        img = img.quantize(colors=colors, method=Image.Quantize.FASTOCTREE)
    output = io.BytesIO()
    img.save(output, format='PNG', optimize=True)
    return output.getvalue()


def encode_jpeg(img, quality):
    if img.mode != 'RGB':
        img = img.convert('RGB')
    output = io.BytesIO()
    img.save(output, format='JPEG', quality=quality, subsampling=SUBSAMPLING_444)
    return output.getvalue()


def process_image(data, resolution: ImageResolution, source=None):
    """
    Resize and re-encode an image according to ``resolution``.

    Args:
        data: Raw source image bytes
        resolution: Target width, aspect ratio, quality and fit mode
        source: Optional label used in error messages

    Returns:
        Encoded image bytes
    """
    img = decode_image(data, source)
    is_png = img.format == 'PNG'

    width, height = compute_dimensions(img.width, img.height, resolution)
    resized = resize_image(img, (width, height), resolution.effective_fit)
    logger.debug(f"Resized {source or 'image'} from {img.width}x{img.height} "
                 f"to {resized.width}x{resized.height} ({resolution.effective_fit})")

    quality = resolution.effective_quality
    if is_png:
        return encode_png(resized, quality)
    return encode_jpeg(resized, quality)
