"""Optics constants shared by the formula bank, the DORI solver and validation.

DORI pixel densities follow EN 62676-4 (pixels per metre of scene width).
"""

# DORI pixel density requirements (px/m)
DETECTION_PX_PER_M = 25.0
OBSERVATION_PX_PER_M = 62.5
RECOGNITION_PX_PER_M = 125.0
IDENTIFICATION_PX_PER_M = 250.0

# Category name -> px/m, in solver priority order (most restrictive first)
DORI_PX_PER_M = {
    "identification": IDENTIFICATION_PX_PER_M,
    "recognition": RECOGNITION_PX_PER_M,
    "observation": OBSERVATION_PX_PER_M,
    "detection": DETECTION_PX_PER_M,
}
DORI_CATEGORIES = tuple(DORI_PX_PER_M)

# Aspect ratio assumed when a height has to be derived from a width
STANDARD_ASPECT_RATIO = 4.0 / 3.0

# DORI solver physical bounds
MIN_PIXEL_WIDTH = 640
MAX_PIXEL_WIDTH = 8192
MIN_SENSOR_WIDTH_MM = 3.0
MAX_SENSOR_WIDTH_MM = 50.0
MIN_FOCAL_LENGTH_MM = 2.0
MAX_FOCAL_LENGTH_MM = 400.0

# Circle of confusion for full frame (mm)
DEFAULT_COC_MM = 0.03

# Camera validation limits
MIN_SENSOR_SIZE_MM = 1.0
MAX_SENSOR_SIZE_MM = 100.0
MIN_FOCAL_MM = 1.0
MAX_FOCAL_MM = 2000.0
MIN_PIXEL_COUNT = 100
MAX_PIXEL_COUNT = 50000
MIN_PIXEL_PITCH_UM = 0.5
MAX_PIXEL_PITCH_UM = 20.0
ASPECT_TOLERANCE = 0.05
PITCH_TOLERANCE_PERCENT = 5.0

# FOV result validation limits
MAX_FOV_DEG = 180.0
MIN_FOV_DEG = 0.1
MAX_PPM = 100000.0
MIN_PPM = 0.001
MIN_DETECTION_M = 0.1
MAX_DETECTION_M = 10000.0

# Built-in camera presets (sensor mm, pixels, lens mm)
CAMERA_PRESETS = {
    "full-frame": {
        "sensor_width_mm": 36.0,
        "sensor_height_mm": 24.0,
        "pixel_width": 6000,
        "pixel_height": 4000,
        "focal_length_mm": 50.0,
        "name": "Full Frame - 50mm",
    },
    "aps-c": {
        "sensor_width_mm": 23.5,
        "sensor_height_mm": 15.6,
        "pixel_width": 6000,
        "pixel_height": 4000,
        "focal_length_mm": 35.0,
        "name": "APS-C - 35mm",
    },
    "micro43": {
        "sensor_width_mm": 17.3,
        "sensor_height_mm": 13.0,
        "pixel_width": 5184,
        "pixel_height": 3888,
        "focal_length_mm": 25.0,
        "name": "Micro 4/3 - 25mm",
    },
}
