"""Bird's-eye coverage diagram: FOV cones and DORI zones drawn with OpenCV."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import cv2
import numpy as np

from .types import CameraWithResult

logger = logging.getLogger(__name__)

# Colours (BGR)
WHITE = (255, 255, 255)
GRID = (60, 60, 60)
BG_DARK = (30, 30, 30)
CAMERA = (0, 255, 255)
SYSTEM_COLORS = [
    (246, 130, 59),   # blue
    (129, 185, 16),   # green
    (11, 158, 245),   # amber
    (68, 68, 239),    # red
    (246, 92, 139),   # violet
    (153, 72, 236),   # pink
]
# Detection, Observation, Recognition, Identification
DORI_COLORS = [(180, 180, 180), (0, 200, 255), (0, 140, 255), (0, 0, 255)]
DORI_LABELS = ["D", "O", "R", "I"]

FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.5
FONT_THICKNESS = 1
LINE_HEIGHT = 20
PADDING = 60
CONE_ALPHA = 0.25


def draw_birds_eye_view(
    systems: list[CameraWithResult],
    size: tuple[int, int] = (800, 600),
) -> np.ndarray:
    """Render a top-down view of each system's horizontal FOV out to its distance.

    *size* is (width, height). DORI arcs are drawn for the first system.
    """
    width, height = size
    image = np.full((height, width, 3), BG_DARK, dtype=np.uint8)

    if not systems:
        _draw_centered_text(image, "No camera systems to display")
        return image

    cam_x, cam_y = width // 2, height - PADDING
    scale = _compute_scale(systems, width, height)

    _draw_grid(image, cam_x, cam_y, scale)

    for index, system in enumerate(systems):
        _draw_fov_cone(image, system, cam_x, cam_y, scale, SYSTEM_COLORS[index % len(SYSTEM_COLORS)])

    _draw_dori_arcs(image, systems[0], cam_x, cam_y, scale)

    cv2.circle(image, (cam_x, cam_y), 6, CAMERA, -1)
    _draw_legend(image, systems)
    return image


def save_image(path: Path, image: np.ndarray) -> None:
    """Write *image* to *path* (format from the extension)."""
    if not cv2.imwrite(str(path), image):
        raise ValueError(f"Could not write image to {path}")
    logger.info("Coverage diagram saved to %s (%dx%d)", path, image.shape[1], image.shape[0])


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _finite_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _compute_scale(systems: list[CameraWithResult], width: int, height: int) -> float:
    """Pixels per metre so every cone fits between the padding."""
    max_distance = max(
        (s.result.distance_m for s in systems if _finite_positive(s.result.distance_m)),
        default=1.0,
    )
    max_half_width = max(
        (s.result.horizontal_fov_m / 2.0 for s in systems if _finite_positive(s.result.horizontal_fov_m)),
        default=1.0,
    )
    scale_depth = (height - 2 * PADDING) / max_distance
    scale_width = (width / 2 - PADDING) / max_half_width
    return max(min(scale_depth, scale_width), 1e-6)


def _to_px(cam_x: int, cam_y: int, x_m: float, depth_m: float, scale: float) -> tuple[int, int]:
    return int(round(cam_x + x_m * scale)), int(round(cam_y - depth_m * scale))


def _draw_grid(image: np.ndarray, cam_x: int, cam_y: int, scale: float) -> None:
    """Range rings every 'nice' step, labelled in metres."""
    max_depth_m = cam_y / scale
    step = 10 ** math.floor(math.log10(max(max_depth_m / 4.0, 1e-9)))
    for multiple in (1, 2, 5):
        if max_depth_m / (step * multiple) <= 6:
            step *= multiple
            break

    ring = step
    while ring <= max_depth_m:
        radius = int(round(ring * scale))
        cv2.circle(image, (cam_x, cam_y), radius, GRID, 1)
        cv2.putText(
            image, f"{ring:g} m", (cam_x + 4, cam_y - radius - 4),
            FONT, FONT_SCALE * 0.8, GRID, FONT_THICKNESS,
        )
        ring += step


def _draw_fov_cone(
    image: np.ndarray,
    system: CameraWithResult,
    cam_x: int,
    cam_y: int,
    scale: float,
    color: tuple[int, int, int],
) -> None:
    result = system.result
    if not (_finite_positive(result.distance_m) and _finite_positive(result.horizontal_fov_m)):
        logger.warning("Skipping degenerate FOV cone for %s", system.camera.name or "camera")
        return

    half = result.horizontal_fov_m / 2.0
    pts = np.array([
        (cam_x, cam_y),
        _to_px(cam_x, cam_y, -half, result.distance_m, scale),
        _to_px(cam_x, cam_y, half, result.distance_m, scale),
    ], dtype=np.int32)

    overlay = image.copy()
    cv2.fillPoly(overlay, [pts], color)
    cv2.addWeighted(overlay, CONE_ALPHA, image, 1.0 - CONE_ALPHA, 0, image)
    cv2.polylines(image, [pts], isClosed=True, color=color, thickness=2)

    label = f"{result.horizontal_fov_m:.2f} m"
    lx, ly = _to_px(cam_x, cam_y, half, result.distance_m, scale)
    cv2.putText(image, label, (lx + 6, ly), FONT, FONT_SCALE, color, FONT_THICKNESS)


def _draw_dori_arcs(image: np.ndarray, system: CameraWithResult, cam_x: int, cam_y: int, scale: float) -> None:
    """DORI distance arcs clipped to the first system's horizontal FOV."""
    dori = system.result.dori
    fov = system.result.horizontal_fov_deg
    if dori is None or not _finite_positive(fov):
        return

    # OpenCV ellipse angles run clockwise from +x; straight ahead is 270°
    start, end = 270.0 - fov / 2.0, 270.0 + fov / 2.0
    distances = [dori.detection_m, dori.observation_m, dori.recognition_m, dori.identification_m]
    for distance, color, label in zip(distances, DORI_COLORS, DORI_LABELS):
        if not _finite_positive(distance):
            continue
        radius = int(round(distance * scale))
        if radius <= 0 or radius > 4 * cam_y:
            continue
        cv2.ellipse(image, (cam_x, cam_y), (radius, radius), 0.0, start, end, color, 1, cv2.LINE_AA)
        cv2.putText(
            image, label, (cam_x - 6, cam_y - radius - 4),
            FONT, FONT_SCALE, color, FONT_THICKNESS,
        )


def _draw_legend(image: np.ndarray, systems: list[CameraWithResult]) -> None:
    for i, system in enumerate(systems):
        color = SYSTEM_COLORS[i % len(SYSTEM_COLORS)]
        y = 20 + i * LINE_HEIGHT
        cv2.rectangle(image, (10, y - 10), (22, y + 2), color, -1)
        name = system.camera.name or f"Camera {i + 1}"
        text = f"{name}  {system.result.horizontal_fov_deg:.1f} deg @ {system.result.distance_m:g} m"
        cv2.putText(image, text, (30, y), FONT, FONT_SCALE, WHITE, FONT_THICKNESS)


def _draw_centered_text(image: np.ndarray, text: str) -> None:
    (text_w, text_h), _ = cv2.getTextSize(text, FONT, FONT_SCALE, FONT_THICKNESS)
    x = (image.shape[1] - text_w) // 2
    y = (image.shape[0] + text_h) // 2
    cv2.putText(image, text, (x, y), FONT, FONT_SCALE, WHITE, FONT_THICKNESS)
