"""Plain-text rendering of calculation results for the command line."""

from __future__ import annotations

import math
from dataclasses import fields

from .types import (
    CameraSystem,
    DoriDistances,
    DoriParameterRanges,
    FovResult,
    ParameterConstraint,
    ParameterRange,
    ValidationWarning,
)

INFINITY = "∞"

# Field -> (label, unit, decimals)
_RANGE_FIELDS = {
    "sensor_width_mm": ("Sensor width", "mm", 2),
    "sensor_height_mm": ("Sensor height", "mm", 2),
    "pixel_width": ("Pixel width", "px", 0),
    "pixel_height": ("Pixel height", "px", 0),
    "focal_length_mm": ("Focal length", "mm", 2),
    "horizontal_fov_deg": ("Horizontal FOV", "°", 2),
}


def format_number(value: float, decimals: int = 2) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return INFINITY if value > 0 else "-" + INFINITY
    return f"{value:.{decimals}f}"


def format_mm_and_m(value_mm: float) -> str:
    if math.isinf(value_mm):
        return f"{INFINITY} (infinity)"
    return f"{value_mm:.2f} mm ({value_mm / 1000.0:.2f} m)"


def format_range(value: ParameterRange | None, decimals: int = 2, fixed: bool = False) -> str:
    """Single value when determined, ``min – max`` otherwise.

    An absent range reads ``input`` when the field was fixed by the caller
    and ``unconstrained`` otherwise.
    """
    if value is None:
        return "input" if fixed else "unconstrained"
    if value.is_determined:
        return format_number(value.min, decimals)
    return f"{format_number(value.min, decimals)} – {format_number(value.max, decimals)}"


def _title(text: str) -> list[str]:
    return [text, "=" * len(text)]


def format_camera(camera: CameraSystem) -> str:
    return str(camera)


def format_fov_result(result: FovResult) -> str:
    lines = [
        f"FOV: {result.horizontal_fov_deg:.2f}° × {result.vertical_fov_deg:.2f}° "
        f"({result.horizontal_fov_m:.3f} × {result.vertical_fov_m:.3f} m @ {result.distance_m:.2f} m)",
        f"Resolution: {format_number(result.horizontal_ppm, 1)} × "
        f"{format_number(result.vertical_ppm, 1)} px/m "
        f"(GSD {format_number(result.gsd_mm(), 3)} mm/px)",
    ]
    if result.dori is not None:
        lines.append(format_dori(result.dori))
    return "\n".join(lines)


def format_dori(dori: DoriDistances) -> str:
    return "\n".join([
        "DORI distances:",
        f"  Detection (25 px/m):       {format_number(dori.detection_m)} m",
        f"  Observation (62.5 px/m):   {format_number(dori.observation_m)} m",
        f"  Recognition (125 px/m):    {format_number(dori.recognition_m)} m",
        f"  Identification (250 px/m): {format_number(dori.identification_m)} m",
    ])


def format_hyperfocal(hyperfocal_mm: float, focal_length_mm: float, f_number: float, coc_mm: float) -> str:
    return "\n".join([
        f"Hyperfocal Distance: {format_mm_and_m(hyperfocal_mm)}",
        f"Focal Length: {focal_length_mm:g} mm",
        f"F-number: f/{f_number:g}",
        f"Circle of Confusion: {coc_mm:g} mm",
    ])


def format_dof(
    distance_mm: float,
    focal_length_mm: float,
    f_number: float,
    coc_mm: float,
    near_mm: float,
    far_mm: float,
    total_mm: float,
) -> str:
    return "\n".join(_title("Depth of Field Calculation") + [
        f"Object Distance: {format_mm_and_m(distance_mm)}",
        f"Focal Length: {focal_length_mm:g} mm",
        f"F-number: f/{f_number:g}",
        f"Circle of Confusion: {coc_mm:g} mm",
        "",
        f"Near Limit: {format_mm_and_m(near_mm)}",
        f"Far Limit: {format_mm_and_m(far_mm)}",
        f"Total DOF: {format_mm_and_m(total_mm)}",
    ])


def format_focal_length(sensor_size_mm: float, fov_deg: float, focal_length_mm: float, vertical: bool) -> str:
    fov_type = "Vertical" if vertical else "Horizontal"
    return "\n".join(_title("Focal Length Calculation") + [
        f"Sensor Size: {sensor_size_mm:g} mm",
        f"{fov_type} FOV: {fov_deg:g}°",
        "",
        f"Calculated Focal Length: {format_number(focal_length_mm)} mm",
    ])


def format_parameter_ranges(ranges: DoriParameterRanges, constraints: ParameterConstraint) -> str:
    lines = _title("DORI Parameter Ranges")
    for f in fields(ranges):
        label, unit, decimals = _RANGE_FIELDS[f.name]
        fixed_value = getattr(constraints, f.name)
        text = format_range(getattr(ranges, f.name), decimals, fixed=fixed_value is not None)
        if text == "input":
            text = f"input ({fixed_value:g} {unit})"
        elif text != "unconstrained":
            text = f"{text} {unit}"
        lines.append(f"{label + ':':<17}{text}")
    return "\n".join(lines)


def format_warnings(warnings: list[ValidationWarning]) -> str:
    if not warnings:
        return "No validation warnings."
    return "\n".join(f"[{w.severity.name}] {w.message}" for w in warnings)


def format_dof_sweep(distances_mm, focal_length_mm, f_number, coc_mm, near_mm, far_mm, total_mm) -> str:
    """Table of near/far/total limits, one row per focus distance (all in m)."""
    lines = _title("Depth of Field Sweep") + [
        f"Focal Length: {focal_length_mm:g} mm, F-number: f/{f_number:g}, "
        f"Circle of Confusion: {coc_mm:g} mm",
        "",
        f"{'Focus (m)':>10}  {'Near (m)':>10}  {'Far (m)':>10}  {'Total (m)':>10}",
    ]
    for s, near, far, total in zip(distances_mm, near_mm, far_mm, total_mm):
        lines.append(
            f"{s / 1000.0:>10.2f}  {format_number(near / 1000.0):>10}  "
            f"{format_number(far / 1000.0):>10}  {format_number(total / 1000.0):>10}"
        )
    return "\n".join(lines)
