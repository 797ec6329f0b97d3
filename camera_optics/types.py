"""Value records passed between the formula bank, the DORI solver and the CLI.

Every record is a frozen dataclass. ``to_dict`` produces a JSON-ready dict
(optional fields that are ``None`` are left out); the input records also
provide ``from_dict`` for loading presets and request payloads.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any


def _check_keys(cls, data: dict) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} field(s): {', '.join(unknown)}")


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Forward calculation records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CameraSystem:
    """Sensor, resolution and lens of one camera."""

    sensor_width_mm: float
    sensor_height_mm: float
    pixel_width: int
    pixel_height: int
    focal_length_mm: float
    name: str | None = None

    def with_name(self, name: str) -> CameraSystem:
        return replace(self, name=name)

    def pixel_pitch_um(self) -> tuple[float, float]:
        """Return (horizontal, vertical) pixel pitch in micrometres."""
        h_pitch = (self.sensor_width_mm * 1000.0) / self.pixel_width
        v_pitch = (self.sensor_height_mm * 1000.0) / self.pixel_height
        return h_pitch, v_pitch

    def aspect_ratio(self) -> tuple[float, float]:
        """Return (sensor, pixel) aspect ratios as width / height."""
        sensor_aspect = self.sensor_width_mm / self.sensor_height_mm
        pixel_aspect = self.pixel_width / self.pixel_height
        return sensor_aspect, pixel_aspect

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "sensor_width_mm": self.sensor_width_mm,
            "sensor_height_mm": self.sensor_height_mm,
            "pixel_width": self.pixel_width,
            "pixel_height": self.pixel_height,
            "focal_length_mm": self.focal_length_mm,
            "name": self.name,
        })

    @classmethod
    def from_dict(cls, data: dict) -> CameraSystem:
        _check_keys(cls, data)
        missing = [
            f.name for f in fields(cls)
            if f.name != "name" and f.name not in data
        ]
        if missing:
            raise ValueError(f"Missing CameraSystem field(s): {', '.join(missing)}")
        return cls(
            sensor_width_mm=float(data["sensor_width_mm"]),
            sensor_height_mm=float(data["sensor_height_mm"]),
            pixel_width=int(data["pixel_width"]),
            pixel_height=int(data["pixel_height"]),
            focal_length_mm=float(data["focal_length_mm"]),
            name=data.get("name"),
        )

    def __str__(self) -> str:
        h_pitch, v_pitch = self.pixel_pitch_um()
        return (
            f"{self.name or 'Unnamed'}: "
            f"{self.sensor_width_mm:g}x{self.sensor_height_mm:g} mm sensor, "
            f"{self.pixel_width}x{self.pixel_height} px "
            f"({h_pitch:.2f}x{v_pitch:.2f} µm), "
            f"{self.focal_length_mm:g} mm lens"
        )


@dataclass(frozen=True)
class DoriDistances:
    """Maximum distances (m) for Detection, Observation, Recognition, Identification."""

    detection_m: float
    observation_m: float
    recognition_m: float
    identification_m: float

    def to_dict(self) -> dict[str, float]:
        return {
            "detection_m": self.detection_m,
            "observation_m": self.observation_m,
            "recognition_m": self.recognition_m,
            "identification_m": self.identification_m,
        }


@dataclass(frozen=True)
class FovResult:
    """Angular and linear field of view plus spatial resolution at a distance."""

    horizontal_fov_deg: float
    vertical_fov_deg: float
    horizontal_fov_m: float
    vertical_fov_m: float
    horizontal_ppm: float
    vertical_ppm: float
    distance_m: float
    dori: DoriDistances | None = None

    def gsd_mm(self) -> float:
        """Ground sample distance: millimetres of scene per horizontal pixel."""
        if self.horizontal_ppm == 0:
            return float("inf")
        return 1000.0 / self.horizontal_ppm

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "horizontal_fov_deg": self.horizontal_fov_deg,
            "vertical_fov_deg": self.vertical_fov_deg,
            "horizontal_fov_m": self.horizontal_fov_m,
            "vertical_fov_m": self.vertical_fov_m,
            "horizontal_ppm": self.horizontal_ppm,
            "vertical_ppm": self.vertical_ppm,
            "distance_m": self.distance_m,
            "dori": self.dori.to_dict() if self.dori is not None else None,
        })


@dataclass(frozen=True)
class CameraWithResult:
    camera: CameraSystem
    result: FovResult

    def to_dict(self) -> dict[str, Any]:
        return {"camera": self.camera.to_dict(), "result": self.result.to_dict()}


# ---------------------------------------------------------------------------
# Inverse (DORI designer) records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DoriTargets:
    """Target DORI distances in metres; at least one must be set for solving."""

    detection_m: float | None = None
    observation_m: float | None = None
    recognition_m: float | None = None
    identification_m: float | None = None

    def is_empty(self) -> bool:
        return all(
            getattr(self, f.name) is None for f in fields(self)
        )

    def to_dict(self) -> dict[str, float]:
        return _drop_none({f.name: getattr(self, f.name) for f in fields(self)})

    @classmethod
    def from_dict(cls, data: dict) -> DoriTargets:
        _check_keys(cls, data)
        return cls(**{k: _optional_float(v) for k, v in data.items()})


@dataclass(frozen=True)
class ParameterConstraint:
    """Camera parameters the caller has already fixed."""

    sensor_width_mm: float | None = None
    sensor_height_mm: float | None = None
    pixel_width: int | None = None
    pixel_height: int | None = None
    focal_length_mm: float | None = None
    horizontal_fov_deg: float | None = None

    def fixed_fields(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({f.name: getattr(self, f.name) for f in fields(self)})

    @classmethod
    def from_dict(cls, data: dict) -> ParameterConstraint:
        _check_keys(cls, data)
        return cls(
            sensor_width_mm=_optional_float(data.get("sensor_width_mm")),
            sensor_height_mm=_optional_float(data.get("sensor_height_mm")),
            pixel_width=_optional_int(data.get("pixel_width")),
            pixel_height=_optional_int(data.get("pixel_height")),
            focal_length_mm=_optional_float(data.get("focal_length_mm")),
            horizontal_fov_deg=_optional_float(data.get("horizontal_fov_deg")),
        )


@dataclass(frozen=True)
class ParameterRange:
    """Closed interval of feasible values. ``min == max`` means determined, not free."""

    min: float
    max: float

    @classmethod
    def point(cls, value: float) -> ParameterRange:
        return cls(min=value, max=value)

    @property
    def is_determined(self) -> bool:
        return self.min == self.max

    @property
    def is_feasible(self) -> bool:
        return self.min <= self.max

    def scaled(self, factor: float) -> ParameterRange:
        return ParameterRange(min=self.min * factor, max=self.max * factor)

    def to_dict(self) -> dict[str, float | None]:
        """JSON-safe: infinite or NaN bounds become ``None``."""
        return {"min": _finite_or_none(self.min), "max": _finite_or_none(self.max)}


@dataclass(frozen=True)
class DoriParameterRanges:
    """Solver output; a ``None`` field was a fixed input (or deliberately suppressed)."""

    sensor_width_mm: ParameterRange | None = None
    sensor_height_mm: ParameterRange | None = None
    pixel_width: ParameterRange | None = None
    pixel_height: ParameterRange | None = None
    focal_length_mm: ParameterRange | None = None
    horizontal_fov_deg: ParameterRange | None = None

    def to_dict(self) -> dict[str, dict[str, float | None]]:
        return {
            f.name: getattr(self, f.name).to_dict()
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationWarning:
    message: str
    severity: ValidationSeverity = field(default=ValidationSeverity.WARNING)

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "severity": self.severity.value}
