"""Read/write the camera-optics JSON config (default CoC and camera presets).

The config file is optional; without one the built-in presets and the
full-frame circle of confusion are used. Writing always leaves a
timestamped backup of the previous file next to it.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

from . import constants
from .types import CameraSystem

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CAMERA_OPTICS_CONFIG"


def default_config() -> dict:
    """Config equivalent to having no file at all."""
    return {"default_coc_mm": constants.DEFAULT_COC_MM, "presets": {}}


def load_config(path: Path | None) -> dict:
    """Load the config at *path*; ``None`` gives :func:`default_config`."""
    if path is None:
        return default_config()
    with open(path, "r") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"Config {path} must contain a JSON object")
    config = default_config()
    config.update(loaded)
    return config


def save_config(config: dict, path: Path) -> Path | None:
    """Write config to *path*, backing up any existing file first.

    Returns the backup path, or None when there was nothing to back up.
    """
    backup_path = _create_backup(path) if path.exists() else None
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config, f, indent=4)
        f.write("\n")
    logger.info("Config written to %s", path)
    return backup_path


def _create_backup(path: Path) -> Path:
    """Copy *path* to <path>_BACKUP_<timestamp>.json."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup = Path(f"{path}_BACKUP_{timestamp}.json")
    shutil.copy2(path, backup)
    return backup


def default_config_path() -> Path:
    return Path.home() / ".camera-optics" / "config.json"


def resolve_config_path(explicit: Path | None, must_exist: bool = True) -> Path | None:
    """Resolve the config file path.

    Priority: explicit argument > $CAMERA_OPTICS_CONFIG >
    ~/.camera-optics/config.json > None (built-in defaults).
    With *must_exist*, an explicit or environment path that does not
    exist is an error; otherwise it is returned as the file to create.
    """
    for candidate, origin in ((explicit, "Config file"), (_env_path(), f"Config file from ${CONFIG_ENV_VAR}")):
        if candidate is None:
            continue
        if candidate.exists():
            return candidate.resolve()
        if must_exist:
            raise FileNotFoundError(f"{origin} not found: {candidate}")
        return candidate

    candidate = default_config_path()
    if candidate.exists():
        return candidate.resolve()

    return None


def _env_path() -> Path | None:
    value = os.environ.get(CONFIG_ENV_VAR)
    return Path(value).expanduser() if value else None


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------

def get_default_coc(config: dict) -> float:
    value = float(config.get("default_coc_mm", constants.DEFAULT_COC_MM))
    if value <= 0:
        raise ValueError(f"default_coc_mm must be positive, got {value}")
    return value


def get_presets(config: dict) -> dict[str, CameraSystem]:
    """Built-in presets overlaid with the config's ``presets`` section."""
    raw: dict[str, Any] = dict(constants.CAMERA_PRESETS)
    raw.update(config.get("presets", {}))

    presets: dict[str, CameraSystem] = {}
    for key, entry in raw.items():
        try:
            camera = CameraSystem.from_dict(entry)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid camera preset {key!r}: {e}") from e
        presets[key] = camera if camera.name else camera.with_name(key)
    return presets


def get_preset_camera(config: dict, key: str) -> CameraSystem:
    presets = get_presets(config)
    if key not in presets:
        raise ValueError(
            f"Unknown camera preset {key!r} (available: {', '.join(sorted(presets))})"
        )
    return presets[key]


def set_preset(config: dict, key: str, camera: CameraSystem) -> None:
    """Store *camera* under ``presets[key]`` in the config dict."""
    config.setdefault("presets", {})[key] = camera.to_dict()


def set_default_coc(config: dict, coc_mm: float) -> None:
    if coc_mm <= 0:
        raise ValueError(f"Circle of confusion must be positive, got {coc_mm}")
    config["default_coc_mm"] = coc_mm
