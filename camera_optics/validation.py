"""Plausibility checks for camera systems and FOV results.

Checks never raise: they return a list of warnings, each tagged ERROR
(physically implausible) or WARNING (unusual but possible).
"""

from __future__ import annotations

from . import constants
from .types import (
    CameraSystem,
    CameraWithResult,
    FovResult,
    ValidationSeverity,
    ValidationWarning,
)

ERROR = ValidationSeverity.ERROR
WARNING = ValidationSeverity.WARNING


def _check_bounds(
    warnings: list[ValidationWarning],
    value: float,
    low: float,
    high: float,
    too_low: str,
    too_high: str,
    low_severity: ValidationSeverity = ERROR,
    high_severity: ValidationSeverity = WARNING,
) -> None:
    if value < low:
        warnings.append(ValidationWarning(too_low, low_severity))
    if value > high:
        warnings.append(ValidationWarning(too_high, high_severity))


def validate_camera(camera: CameraSystem) -> list[ValidationWarning]:
    """Sensor size, focal length, resolution, pixel pitch and aspect consistency."""
    warnings: list[ValidationWarning] = []

    for label, size in (("width", camera.sensor_width_mm), ("height", camera.sensor_height_mm)):
        _check_bounds(
            warnings, size,
            constants.MIN_SENSOR_SIZE_MM, constants.MAX_SENSOR_SIZE_MM,
            f"Sensor {label} ({size:.2f} mm) is unrealistically small",
            f"Sensor {label} ({size:.2f} mm) is unrealistically large",
        )

    _check_bounds(
        warnings, camera.focal_length_mm,
        constants.MIN_FOCAL_MM, constants.MAX_FOCAL_MM,
        f"Focal length ({camera.focal_length_mm:.2f} mm) is unrealistically short",
        f"Focal length ({camera.focal_length_mm:.0f} mm) is extremely long",
    )

    for label, count in (("width", camera.pixel_width), ("height", camera.pixel_height)):
        _check_bounds(
            warnings, count,
            constants.MIN_PIXEL_COUNT, constants.MAX_PIXEL_COUNT,
            f"Pixel {label} ({count} px) is unrealistically low",
            f"Pixel {label} ({count} px) is unrealistically high",
        )

    # Ratios below are meaningless without positive dimensions
    if min(camera.sensor_width_mm, camera.sensor_height_mm) <= 0 or \
            min(camera.pixel_width, camera.pixel_height) <= 0:
        return warnings

    h_pitch, v_pitch = camera.pixel_pitch_um()
    for label, pitch in (("Horizontal", h_pitch), ("Vertical", v_pitch)):
        _check_bounds(
            warnings, pitch,
            constants.MIN_PIXEL_PITCH_UM, constants.MAX_PIXEL_PITCH_UM,
            f"{label} pixel pitch ({pitch:.2f} µm) is unrealistically small",
            f"{label} pixel pitch ({pitch:.2f} µm) is unusually large",
        )

    sensor_aspect, pixel_aspect = camera.aspect_ratio()
    aspect_diff = abs(sensor_aspect - pixel_aspect) / sensor_aspect
    if aspect_diff > constants.ASPECT_TOLERANCE:
        warnings.append(ValidationWarning(
            f"Sensor aspect ratio ({sensor_aspect:.3f}:1) doesn't match pixel aspect ratio "
            f"({pixel_aspect:.3f}:1) - difference: {aspect_diff * 100.0:.1f}%",
            ERROR,
        ))

    pitch_diff_percent = abs(h_pitch - v_pitch) / h_pitch * 100.0
    if pitch_diff_percent > constants.PITCH_TOLERANCE_PERCENT:
        warnings.append(ValidationWarning(
            f"Pixels are not square: horizontal pitch ({h_pitch:.2f} µm) differs from "
            f"vertical pitch ({v_pitch:.2f} µm) by {pitch_diff_percent:.1f}%",
            WARNING,
        ))

    return warnings


def validate_fov_result(result: FovResult) -> list[ValidationWarning]:
    """FOV angles, pixel density and DORI ordering."""
    warnings: list[ValidationWarning] = []

    for label, fov in (("Horizontal", result.horizontal_fov_deg), ("Vertical", result.vertical_fov_deg)):
        if fov > constants.MAX_FOV_DEG:
            warnings.append(ValidationWarning(
                f"{label} FOV ({fov:.1f}°) exceeds 180° - physically impossible", ERROR,
            ))
        if fov < constants.MIN_FOV_DEG:
            warnings.append(ValidationWarning(
                f"{label} FOV ({fov:.2f}°) is extremely narrow - may be unrealistic", WARNING,
            ))

    h_ppm, v_ppm = result.horizontal_ppm, result.vertical_ppm
    if h_ppm > constants.MAX_PPM or v_ppm > constants.MAX_PPM:
        warnings.append(ValidationWarning(
            f"Pixels per meter ({h_ppm:.1f} × {v_ppm:.1f} px/m) is unrealistically high", WARNING,
        ))
    if h_ppm < constants.MIN_PPM or v_ppm < constants.MIN_PPM:
        warnings.append(ValidationWarning(
            f"Pixels per meter ({h_ppm:.6f} × {v_ppm:.6f} px/m) is unrealistically low", WARNING,
        ))

    dori = result.dori
    if dori is not None:
        if not constants.MIN_DETECTION_M <= dori.detection_m <= constants.MAX_DETECTION_M:
            warnings.append(ValidationWarning(
                f"Detection distance ({dori.detection_m:.0f} m) seems unrealistic", WARNING,
            ))
        ordered = (
            ("Detection", dori.detection_m),
            ("Observation", dori.observation_m),
            ("Recognition", dori.recognition_m),
            ("Identification", dori.identification_m),
        )
        for (outer, outer_m), (inner, inner_m) in zip(ordered, ordered[1:]):
            if outer_m < inner_m:
                warnings.append(ValidationWarning(
                    f"{outer} distance should be greater than {inner} distance", ERROR,
                ))

    return warnings


def validate_camera_with_result(pair: CameraWithResult) -> list[ValidationWarning]:
    return validate_camera(pair.camera) + validate_fov_result(pair.result)


def has_errors(warnings: list[ValidationWarning]) -> bool:
    return any(w.severity is ERROR for w in warnings)
