"""DORI parameter-range solver (inverse of the DORI distance formula).

Given one target DORI distance and any subset of fixed camera parameters,
work out which remaining parameters are determined (single-point range),
which have a bounded feasible range, and which are left at their physical
bounds.

Governing relations::

    D = (focal_length * pixel_width) / (sensor_width * P)     DORI
    sensor_width = 2 * focal_length * tan(FOV / 2)            angular

Cases are selected by which of {FOV, focal length, sensor width, pixel
width} are fixed. FOV takes priority because it couples focal length and
sensor width directly; after FOV, focal length beats sensor width, which
beats pixel width. The 16 combinations are listed explicitly in
``_CASES`` so every one maps to exactly one handler.
"""

from __future__ import annotations

import math
import logging
from typing import Callable, NamedTuple

from . import constants
from .calculations import angular_fov_deg, ieee_div
from .types import DoriParameterRanges, DoriTargets, ParameterConstraint, ParameterRange

logger = logging.getLogger(__name__)


class NoDoriTargetError(ValueError):
    """Raised when a solve is requested without any DORI target distance."""


class DoriTarget(NamedTuple):
    category: str
    distance_m: float
    px_per_m: float


def select_target(targets: DoriTargets) -> DoriTarget:
    """Pick the authoritative target: identification > recognition > observation > detection."""
    if targets.is_empty():
        raise NoDoriTargetError("At least one DORI target distance must be specified")
    return next(
        DoriTarget(category, getattr(targets, f"{category}_m"), px_per_m)
        for category, px_per_m in constants.DORI_PX_PER_M.items()
        if getattr(targets, f"{category}_m") is not None
    )


# ---------------------------------------------------------------------------
# Range helpers
# ---------------------------------------------------------------------------

_Ranges = dict[str, ParameterRange]


def _full_pixel_range() -> ParameterRange:
    return ParameterRange(float(constants.MIN_PIXEL_WIDTH), float(constants.MAX_PIXEL_WIDTH))


def _full_sensor_range() -> ParameterRange:
    return ParameterRange(constants.MIN_SENSOR_WIDTH_MM, constants.MAX_SENSOR_WIDTH_MM)


def _full_focal_range() -> ParameterRange:
    return ParameterRange(constants.MIN_FOCAL_LENGTH_MM, constants.MAX_FOCAL_LENGTH_MM)


def _pixel_range_from_floor(required_pixels: float) -> ParameterRange:
    """Pixel width must reach *required_pixels*; anything up to the maximum works."""
    return ParameterRange(
        max(required_pixels, float(constants.MIN_PIXEL_WIDTH)),
        float(constants.MAX_PIXEL_WIDTH),
    )


def _focal_sensor_ranges_for_fov(tan_half_fov: float) -> tuple[ParameterRange, ParameterRange]:
    """Focal range keeping sensor = 2*f*tan(FOV/2) inside the sensor bounds, and that sensor range."""
    min_focal = max(
        ieee_div(constants.MIN_SENSOR_WIDTH_MM, 2.0 * tan_half_fov),
        constants.MIN_FOCAL_LENGTH_MM,
    )
    max_focal = min(
        ieee_div(constants.MAX_SENSOR_WIDTH_MM, 2.0 * tan_half_fov),
        constants.MAX_FOCAL_LENGTH_MM,
    )
    focal = ParameterRange(min_focal, max_focal)
    sensor = ParameterRange(2.0 * min_focal * tan_half_fov, 2.0 * max_focal * tan_half_fov)
    return focal, sensor


# ---------------------------------------------------------------------------
# Case handlers
#
# Each handler returns the ranges it determines; heights and the FOV range
# are filled in afterwards by calculate_dori_parameter_ranges.
# ---------------------------------------------------------------------------

def _tan_half_fov(c: ParameterConstraint) -> float:
    return math.tan(math.radians(c.horizontal_fov_deg) / 2.0)


def _fov_and_focal(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    # Sensor follows from the angular relation. A fixed sensor width is
    # recomputed here and reported so the caller can spot an inconsistency.
    sensor = 2.0 * c.focal_length_mm * _tan_half_fov(c)
    ranges = {"sensor_width_mm": ParameterRange.point(sensor)}
    if c.pixel_width is None:
        required = ieee_div(target.distance_m * sensor * target.px_per_m, c.focal_length_mm)
        ranges["pixel_width"] = _pixel_range_from_floor(required)
    return ranges


def _fov_and_sensor(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    focal = ieee_div(c.sensor_width_mm, 2.0 * _tan_half_fov(c))
    ranges = {"focal_length_mm": ParameterRange.point(focal)}
    if c.pixel_width is None:
        required = ieee_div(target.distance_m * c.sensor_width_mm * target.px_per_m, focal)
        ranges["pixel_width"] = _pixel_range_from_floor(required)
    return ranges


def _fov_and_pixel(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    # Substituting the angular relation into the DORI equation cancels the
    # focal length, so only the physical sensor bounds limit focal/sensor.
    focal, sensor = _focal_sensor_ranges_for_fov(_tan_half_fov(c))
    return {"focal_length_mm": focal, "sensor_width_mm": sensor}


def _fov_only(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    tan_half_fov = _tan_half_fov(c)
    focal, sensor = _focal_sensor_ranges_for_fov(tan_half_fov)
    # pixels = D * 2 * tan(FOV/2) * P
    required = target.distance_m * 2.0 * tan_half_fov * target.px_per_m
    return {
        "focal_length_mm": focal,
        "sensor_width_mm": sensor,
        "pixel_width": _pixel_range_from_floor(required),
    }


def _focal_and_sensor(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    ranges: _Ranges = {
        "horizontal_fov_deg": ParameterRange.point(
            angular_fov_deg(c.sensor_width_mm, c.focal_length_mm)
        ),
    }
    if c.pixel_width is None:
        required = ieee_div(
            target.distance_m * c.sensor_width_mm * target.px_per_m,
            c.focal_length_mm,
        )
        ranges["pixel_width"] = _pixel_range_from_floor(required)
    return ranges


def _focal_and_pixel(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    # sensor = (focal * pixels) / (D * P)
    sensor = ieee_div(
        c.focal_length_mm * c.pixel_width,
        target.distance_m * target.px_per_m,
    )
    return {"sensor_width_mm": ParameterRange.point(sensor)}


def _focal_only(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    return {"sensor_width_mm": _full_sensor_range(), "pixel_width": _full_pixel_range()}


def _sensor_and_pixel(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    # Only the minimum focal length follows from D; the maximum is the
    # global physical bound.
    min_focal = ieee_div(
        target.distance_m * c.sensor_width_mm * target.px_per_m,
        c.pixel_width,
    )
    return {
        "focal_length_mm": ParameterRange(
            max(min_focal, constants.MIN_FOCAL_LENGTH_MM),
            constants.MAX_FOCAL_LENGTH_MM,
        ),
    }


def _sensor_only(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    return {"focal_length_mm": _full_focal_range(), "pixel_width": _full_pixel_range()}


def _pixel_only(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    d_times_p = target.distance_m * target.px_per_m
    pixels = c.pixel_width

    # focal = D * sensor * P / pixels, evaluated at the sensor bounds
    min_focal = ieee_div(constants.MIN_SENSOR_WIDTH_MM * d_times_p, pixels)
    max_focal = ieee_div(constants.MAX_SENSOR_WIDTH_MM * d_times_p, pixels)
    # sensor = focal * pixels / (D * P), evaluated at the focal bounds
    min_sensor = ieee_div(constants.MIN_FOCAL_LENGTH_MM * pixels, d_times_p)
    max_sensor = ieee_div(constants.MAX_FOCAL_LENGTH_MM * pixels, d_times_p)

    return {
        "focal_length_mm": ParameterRange(
            max(min_focal, constants.MIN_FOCAL_LENGTH_MM),
            min(max_focal, constants.MAX_FOCAL_LENGTH_MM),
        ),
        "sensor_width_mm": ParameterRange(
            max(min_sensor, constants.MIN_SENSOR_WIDTH_MM),
            min(max_sensor, constants.MAX_SENSOR_WIDTH_MM),
        ),
    }


def _unconstrained(target: DoriTarget, c: ParameterConstraint) -> _Ranges:
    return {
        "focal_length_mm": _full_focal_range(),
        "sensor_width_mm": _full_sensor_range(),
        "pixel_width": _full_pixel_range(),
    }


_Handler = Callable[[DoriTarget, ParameterConstraint], _Ranges]

# (fov, focal, sensor_width, pixel_width) fixed -> handler
_CASES: dict[tuple[bool, bool, bool, bool], _Handler] = {
    (True, True, True, True): _fov_and_focal,
    (True, True, True, False): _fov_and_focal,
    (True, True, False, True): _fov_and_focal,
    (True, True, False, False): _fov_and_focal,
    (True, False, True, True): _fov_and_sensor,
    (True, False, True, False): _fov_and_sensor,
    (True, False, False, True): _fov_and_pixel,
    (True, False, False, False): _fov_only,
    (False, True, True, True): _focal_and_sensor,
    (False, True, True, False): _focal_and_sensor,
    (False, True, False, True): _focal_and_pixel,
    (False, True, False, False): _focal_only,
    (False, False, True, True): _sensor_and_pixel,
    (False, False, True, False): _sensor_only,
    (False, False, False, True): _pixel_only,
    (False, False, False, False): _unconstrained,
}


def case_key(constraints: ParameterConstraint) -> tuple[bool, bool, bool, bool]:
    """Which of (FOV, focal length, sensor width, pixel width) are fixed."""
    return (
        constraints.horizontal_fov_deg is not None,
        constraints.focal_length_mm is not None,
        constraints.sensor_width_mm is not None,
        constraints.pixel_width is not None,
    )


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def _range_or_fixed(ranges: _Ranges, key: str, fixed: float | None) -> ParameterRange | None:
    if key in ranges:
        return ranges[key]
    if fixed is not None:
        return ParameterRange.point(float(fixed))
    return None


def _derive_fov_range(ranges: _Ranges, c: ParameterConstraint) -> None:
    """Narrowest FOV at (min sensor, max focal), widest at (max sensor, min focal)."""
    if "horizontal_fov_deg" in ranges:
        return
    sensor = _range_or_fixed(ranges, "sensor_width_mm", c.sensor_width_mm)
    focal = _range_or_fixed(ranges, "focal_length_mm", c.focal_length_mm)
    if sensor is None or focal is None:
        return
    ranges["horizontal_fov_deg"] = ParameterRange(
        angular_fov_deg(sensor.min, focal.max),
        angular_fov_deg(sensor.max, focal.min),
    )


def _derive_heights(ranges: _Ranges, c: ParameterConstraint) -> None:
    """Fill unfixed heights from the width (range or fixed value) at the standard 4:3."""
    pairs = (
        ("sensor_height_mm", c.sensor_height_mm, "sensor_width_mm", c.sensor_width_mm),
        ("pixel_height", c.pixel_height, "pixel_width", c.pixel_width),
    )
    for height_key, fixed_height, width_key, fixed_width in pairs:
        if fixed_height is not None:
            continue
        width = _range_or_fixed(ranges, width_key, fixed_width)
        if width is not None:
            ranges[height_key] = width.scaled(1.0 / constants.STANDARD_ASPECT_RATIO)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def calculate_dori_parameter_ranges(
    targets: DoriTargets,
    constraints: ParameterConstraint,
) -> DoriParameterRanges:
    """Ranges of camera parameters that achieve the DORI target.

    Fixed inputs are omitted from the result, except that with FOV and
    focal length both fixed the sensor width is always recomputed and
    reported. When pixel width is fixed alongside a pair that already
    determines the geometry, no pixel-width requirement range is emitted.

    Raises:
        NoDoriTargetError: if *targets* carries no distance at all.
    """
    target = select_target(targets)
    key = case_key(constraints)
    handler = _CASES[key]
    logger.debug(
        "DORI solve: %s=%.3f m (%.1f px/m), fixed=%s, case=%s",
        target.category,
        target.distance_m,
        target.px_per_m,
        constraints.fixed_fields(),
        handler.__name__.lstrip("_"),
    )

    ranges = handler(target, constraints)
    if constraints.horizontal_fov_deg is None:
        _derive_fov_range(ranges, constraints)
    _derive_heights(ranges, constraints)

    for name, value in ranges.items():
        if math.isnan(value.min) or math.isnan(value.max):
            logger.warning(
                "Undefined %s for %s at %.3f m (degenerate input)",
                name, target.category, target.distance_m,
            )
        elif not value.is_feasible:
            logger.warning(
                "No feasible %s for %s at %.3f m: minimum %.4g exceeds maximum %.4g",
                name, target.category, target.distance_m, value.min, value.max,
            )

    return DoriParameterRanges(**ranges)
