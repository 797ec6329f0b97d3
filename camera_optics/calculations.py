"""Closed-form optics formulas: FOV, DORI distances, hyperfocal, depth of field.

All functions are pure. Degenerate inputs (zero focal length, zero sensor
width) produce IEEE infinities or NaN rather than raising, so callers can
render them as "∞" instead of handling an exception.
"""

from __future__ import annotations

import math
import logging
from collections.abc import Iterable

import numpy as np

from . import constants
from .types import CameraSystem, CameraWithResult, DoriDistances, FovResult

logger = logging.getLogger(__name__)


def ieee_div(num: float, den: float) -> float:
    """Divide with IEEE semantics: x/0 -> ±inf, 0/0 -> nan."""
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.copysign(math.inf, num) * math.copysign(1.0, den)
    return num / den


def angular_fov_deg(sensor_size_mm: float, focal_length_mm: float) -> float:
    """Angular FOV in degrees: 2 * atan(sensor / (2 * focal))."""
    return math.degrees(2.0 * math.atan(ieee_div(sensor_size_mm, 2.0 * focal_length_mm)))


# ---------------------------------------------------------------------------
# Field of view
# ---------------------------------------------------------------------------

def calculate_fov(camera: CameraSystem, distance_mm: float) -> FovResult:
    """Field of view and spatial resolution of *camera* at *distance_mm*.

    Linear FOV is ``2 * distance * tan(angular / 2)``, pixel density is the
    pixel count divided by the linear FOV in metres. DORI distances for the
    same camera are embedded in the result.
    """
    h_fov_rad = 2.0 * math.atan(ieee_div(camera.sensor_width_mm, 2.0 * camera.focal_length_mm))
    v_fov_rad = 2.0 * math.atan(ieee_div(camera.sensor_height_mm, 2.0 * camera.focal_length_mm))

    h_fov_m = 2.0 * distance_mm * math.tan(h_fov_rad / 2.0) / 1000.0
    v_fov_m = 2.0 * distance_mm * math.tan(v_fov_rad / 2.0) / 1000.0

    return FovResult(
        horizontal_fov_deg=math.degrees(h_fov_rad),
        vertical_fov_deg=math.degrees(v_fov_rad),
        horizontal_fov_m=h_fov_m,
        vertical_fov_m=v_fov_m,
        horizontal_ppm=ieee_div(camera.pixel_width, h_fov_m),
        vertical_ppm=ieee_div(camera.pixel_height, v_fov_m),
        distance_m=distance_mm / 1000.0,
        dori=calculate_dori_distances(camera),
    )


def calculate_multiple_fov(cameras: Iterable[CameraSystem], distance_mm: float) -> list[FovResult]:
    return [calculate_fov(camera, distance_mm) for camera in cameras]


def compare_camera_systems(
    cameras: Iterable[CameraSystem],
    distance_mm: float,
) -> list[CameraWithResult]:
    """Pair each camera with its FOV result at a common working distance."""
    cameras = list(cameras)
    pairs = [
        CameraWithResult(camera=camera, result=result)
        for camera, result in zip(cameras, calculate_multiple_fov(cameras, distance_mm))
    ]
    logger.debug("Compared %d camera systems at %.1f mm", len(pairs), distance_mm)
    return pairs


# ---------------------------------------------------------------------------
# DORI distances
# ---------------------------------------------------------------------------

def calculate_dori_distances(camera: CameraSystem) -> DoriDistances:
    """Maximum distance at which each DORI pixel density is still met.

    distance = (focal_length * pixel_width) / (sensor_width * px_per_m)
    """
    product = camera.focal_length_mm * camera.pixel_width

    def at(px_per_m: float) -> float:
        return ieee_div(product, camera.sensor_width_mm * px_per_m)

    return DoriDistances(
        detection_m=at(constants.DETECTION_PX_PER_M),
        observation_m=at(constants.OBSERVATION_PX_PER_M),
        recognition_m=at(constants.RECOGNITION_PX_PER_M),
        identification_m=at(constants.IDENTIFICATION_PX_PER_M),
    )


def calculate_dori_from_single(distance_m: float, dori_type: str) -> DoriDistances:
    """Back-fill all four DORI distances from one known distance.

    target = source * (source_px_per_m / target_px_per_m). Unknown
    *dori_type* strings fall back to identification, the most restrictive.
    """
    key = dori_type.strip().lower()
    if key not in constants.DORI_PX_PER_M:
        logger.warning("Unknown DORI type %r, using identification", dori_type)
    base_px_per_m = constants.DORI_PX_PER_M.get(key, constants.IDENTIFICATION_PX_PER_M)

    return DoriDistances(
        detection_m=distance_m * (base_px_per_m / constants.DETECTION_PX_PER_M),
        observation_m=distance_m * (base_px_per_m / constants.OBSERVATION_PX_PER_M),
        recognition_m=distance_m * (base_px_per_m / constants.RECOGNITION_PX_PER_M),
        identification_m=distance_m * (base_px_per_m / constants.IDENTIFICATION_PX_PER_M),
    )


# ---------------------------------------------------------------------------
# Hyperfocal distance / depth of field
# ---------------------------------------------------------------------------

def calculate_hyperfocal(focal_length_mm: float, f_number: float, coc_mm: float) -> float:
    """Hyperfocal distance in mm: H = f^2 / (N * c) + f."""
    return ieee_div(focal_length_mm * focal_length_mm, f_number * coc_mm) + focal_length_mm


def calculate_dof(
    object_distance_mm: float,
    focal_length_mm: float,
    f_number: float,
    coc_mm: float,
) -> tuple[float, float, float]:
    """Return (near_mm, far_mm, total_mm) acceptable-sharpness limits.

    near = H*s / (H + (s - f))
    far  = H*s / (H - (s - f)) when s < H, otherwise infinity
    """
    hyperfocal = calculate_hyperfocal(focal_length_mm, f_number, coc_mm)
    s = object_distance_mm

    near = ieee_div(hyperfocal * s, hyperfocal + (s - focal_length_mm))
    if s < hyperfocal:
        far = ieee_div(hyperfocal * s, hyperfocal - (s - focal_length_mm))
    else:
        far = math.inf

    return near, far, far - near


def dof_curve(
    focus_distances_mm,
    focal_length_mm: float,
    f_number: float,
    coc_mm: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorised :func:`calculate_dof` over an array of focus distances.

    Returns (near, far, total) arrays with the same shape as the input.
    """
    s = np.asarray(focus_distances_mm, dtype=np.float64)
    hyperfocal = calculate_hyperfocal(focal_length_mm, f_number, coc_mm)

    with np.errstate(divide="ignore", invalid="ignore"):
        near = (hyperfocal * s) / (hyperfocal + (s - focal_length_mm))
        far = np.where(
            s < hyperfocal,
            (hyperfocal * s) / (hyperfocal - (s - focal_length_mm)),
            np.inf,
        )
        total = far - near

    return near, far, total


# ---------------------------------------------------------------------------
# Focal length from FOV
# ---------------------------------------------------------------------------

def calculate_focal_length_from_fov(sensor_size_mm: float, fov_deg: float) -> float:
    """focal_length = (sensor_size / 2) / tan(fov / 2)."""
    return ieee_div(sensor_size_mm / 2.0, math.tan(math.radians(fov_deg) / 2.0))
