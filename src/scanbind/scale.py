"""Resolution and page size arithmetic."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import InvalidSettingError, ResizeError

POINTS_PER_INCH = 72


@dataclass(frozen=True)
class ScaleConfig:
    """Per-run scaling settings, shared read-only by every image."""

    source_dpi: float
    divisor: float

    @property
    def output_dpi(self) -> float:
        return self.source_dpi / self.divisor


@dataclass(frozen=True)
class PageSpec:
    """Pixel size of a resampled image and the matching page size in points."""

    width_px: int
    height_px: int
    width_pts: float
    height_pts: float


def _check_setting(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidSettingError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidSettingError(f"{name} must be a positive number, got {value}")
    return value


def compute_scale(source_dpi: float, divisor: float) -> ScaleConfig:
    """Build the run's :class:`ScaleConfig`.

    Raises:
        InvalidSettingError: If either value is not a positive finite number.
    """
    return ScaleConfig(
        source_dpi=_check_setting("Source resolution", source_dpi),
        divisor=_check_setting("Divisor", divisor),
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    ``round()`` rounds halves to even, which would turn 2.5 into 2.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def compute_page_spec(width: int, height: int, scale: ScaleConfig) -> PageSpec:
    """Compute the output pixel size and page size for a *width* x *height* image.

    Raises:
        ResizeError: If the divisor rounds either dimension down to zero.
    """
    width_px = round_half_up(width / scale.divisor)
    height_px = round_half_up(height / scale.divisor)

    if width_px <= 0 or height_px <= 0:
        raise ResizeError(
            f"Dividing {width}x{height} by {scale.divisor:g} gives "
            f"{width_px}x{height_px} pixels"
        )

    return PageSpec(
        width_px=width_px,
        height_px=height_px,
        width_pts=width_px * POINTS_PER_INCH / scale.output_dpi,
        height_pts=height_px * POINTS_PER_INCH / scale.output_dpi,
    )
