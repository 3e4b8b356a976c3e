"""Resample a page image and re-encode it as a metadata-free JPEG."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from .errors import DecodeError
from .scale import PageSpec, ScaleConfig, compute_page_spec

logger = logging.getLogger(__name__)

JPEG_QUALITY = 75
BACKGROUND_COLOR = (255, 255, 255)
RESAMPLING_FILTER = Image.Resampling.LANCZOS

# Inputs are local scans, not uploads.  Pillow's decompression-bomb guard
# (about 179 MP) rejects an A3 page at 1200 DPI, so it is switched off.
Image.MAX_IMAGE_PIXELS = None


@dataclass(frozen=True)
class ResampledPage:
    """An encoded page image and the page geometry it was resized to."""

    source: Path
    data: bytes
    spec: PageSpec


def _load_rgba(path: Path) -> Image.Image:
    try:
        with Image.open(path) as image:
            return image.convert("RGBA")
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Cannot decode image {path}: {exc}") from exc


def _flatten(image: Image.Image) -> Image.Image:
    """Composite an RGBA image onto an opaque canvas."""
    canvas = Image.new("RGB", image.size, BACKGROUND_COLOR)
    canvas.paste(image, mask=image.getchannel("A"))
    return canvas


def resample_image(path: Path | str, scale: ScaleConfig) -> ResampledPage:
    """Resize one image by the run's divisor and encode it for the PDF.

    The image is decoded as RGBA, resized with a Lanczos filter, flattened
    onto a white canvas and saved as a quality-75 JPEG.  The canvas is a new
    image, so EXIF, ICC profiles and comments from the source never reach
    the output.

    Raises:
        DecodeError: If *path* is not a readable image.
        ResizeError: If the divisor shrinks a dimension to zero pixels.
    """
    path = Path(path)
    original = _load_rgba(path)
    spec = compute_page_spec(original.width, original.height, scale)

    resized = original.resize((spec.width_px, spec.height_px), RESAMPLING_FILTER)
    flattened = _flatten(resized)

    buffer = io.BytesIO()
    flattened.save(buffer, format="JPEG", quality=JPEG_QUALITY)

    logger.debug(
        "Resampled %s from %dx%d to %dx%d (%.2f x %.2f pt)",
        path.name,
        original.width,
        original.height,
        spec.width_px,
        spec.height_px,
        spec.width_pts,
        spec.height_pts,
    )
    return ResampledPage(source=path, data=buffer.getvalue(), spec=spec)
