"""camera-optics entry point.

Usage:
    python3 -m camera_optics fov -W 36 -H 24 -x 6000 -y 4000 -f 50 -d 5000
    python3 -m camera_optics dof -d 3000 -f 50 -a 8
    python3 -m camera_optics dof -d 1000 --to 20000 --steps 5 -f 50 -a 8
    python3 -m camera_optics compare -d 10000 --presets --image coverage.png
    python3 -m camera_optics dori-ranges --identification 10 --hfov 60 --focal-length 25
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

from . import (
    calculations,
    cli,
    config_manager,
    display,
    dori_solver,
    report,
    validation,
)
from .types import CameraSystem, DoriTargets, ParameterConstraint

logger = logging.getLogger("camera-optics")


def _camera_from_args(args: argparse.Namespace) -> CameraSystem:
    return CameraSystem(
        sensor_width_mm=args.sensor_width,
        sensor_height_mm=args.sensor_height,
        pixel_width=args.pixel_width,
        pixel_height=args.pixel_height,
        focal_length_mm=args.focal_length,
        name=args.name,
    )


def _coc(args: argparse.Namespace, config: dict) -> float:
    return args.coc if args.coc is not None else config_manager.get_default_coc(config)


def _log_warnings(warnings) -> None:
    for w in warnings:
        if w.severity is validation.ERROR:
            logger.error("%s", w.message)
        else:
            logger.warning("%s", w.message)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_fov(args: argparse.Namespace, config: dict) -> int:
    camera = _camera_from_args(args)
    _log_warnings(validation.validate_camera(camera))
    result = calculations.calculate_fov(camera, args.distance)
    print(report.format_camera(camera))
    print()
    print(report.format_fov_result(result))
    return 0


def cmd_hyperfocal(args: argparse.Namespace, config: dict) -> int:
    coc = _coc(args, config)
    hyperfocal = calculations.calculate_hyperfocal(args.focal_length, args.f_number, coc)
    print(report.format_hyperfocal(hyperfocal, args.focal_length, args.f_number, coc))
    return 0


def cmd_dof(args: argparse.Namespace, config: dict) -> int:
    coc = _coc(args, config)
    if args.to is not None:
        if args.steps < 2:
            raise ValueError(f"--steps must be at least 2, got {args.steps}")
        distances = np.linspace(args.distance, args.to, args.steps)
        near, far, total = calculations.dof_curve(distances, args.focal_length, args.f_number, coc)
        print(report.format_dof_sweep(distances, args.focal_length, args.f_number, coc, near, far, total))
        return 0

    near, far, total = calculations.calculate_dof(args.distance, args.focal_length, args.f_number, coc)
    print(report.format_dof(args.distance, args.focal_length, args.f_number, coc, near, far, total))
    return 0


def cmd_compare(args: argparse.Namespace, config: dict) -> int:
    presets = config_manager.get_presets(config)
    if args.presets:
        cameras = list(presets.values())
    elif args.preset:
        cameras = [config_manager.get_preset_camera(config, key) for key in args.preset]
    else:
        print("Use --presets or --preset NAME to choose camera systems to compare")
        return 1

    systems = calculations.compare_camera_systems(cameras, args.distance)
    print(f"Comparing camera systems at {args.distance:g} mm ({args.distance / 1000.0:g} m) distance:\n")
    for system in systems:
        print(report.format_camera(system.camera))
        print(report.format_fov_result(system.result))
        _log_warnings(validation.validate_camera_with_result(system))
        print("=" * 80)
        print()

    if args.image is not None:
        display.save_image(args.image, display.draw_birds_eye_view(systems))
    return 0


def cmd_focal_length(args: argparse.Namespace, config: dict) -> int:
    focal = calculations.calculate_focal_length_from_fov(args.sensor_size, args.fov)
    print(report.format_focal_length(args.sensor_size, args.fov, focal, args.vertical))
    return 0


def cmd_dori(args: argparse.Namespace, config: dict) -> int:
    dori = calculations.calculate_dori_from_single(args.distance, args.type)
    print(report.format_dori(dori))
    return 0


def cmd_dori_ranges(args: argparse.Namespace, config: dict) -> int:
    targets = DoriTargets(
        detection_m=args.detection,
        observation_m=args.observation,
        recognition_m=args.recognition,
        identification_m=args.identification,
    )
    constraints = ParameterConstraint(
        sensor_width_mm=args.sensor_width,
        sensor_height_mm=args.sensor_height,
        pixel_width=args.pixel_width,
        pixel_height=args.pixel_height,
        focal_length_mm=args.focal_length,
        horizontal_fov_deg=args.hfov,
    )
    ranges = dori_solver.calculate_dori_parameter_ranges(targets, constraints)
    if args.json:
        print(json.dumps(ranges.to_dict(), indent=2, allow_nan=False))
    else:
        print(report.format_parameter_ranges(ranges, constraints))
    return 0


def cmd_validate(args: argparse.Namespace, config: dict) -> int:
    camera = _camera_from_args(args)
    warnings = validation.validate_camera(camera)
    if args.distance is not None:
        warnings += validation.validate_fov_result(calculations.calculate_fov(camera, args.distance))
    print(report.format_camera(camera))
    print(report.format_warnings(warnings))
    return 1 if validation.has_errors(warnings) else 0


def cmd_presets(args: argparse.Namespace, config: dict) -> int:
    for key, camera in config_manager.get_presets(config).items():
        print(f"{key}: {camera}")
    return 0


def cmd_save_preset(args: argparse.Namespace, config: dict, config_path: Path | None) -> int:
    path = config_path or config_manager.default_config_path()
    camera = _camera_from_args(args)
    config_manager.set_preset(config, args.key, camera)
    backup = config_manager.save_config(config, path)
    if backup is not None:
        logger.info("Previous config backed up to %s", backup)
    print(f"Saved preset {args.key!r} to {path}")
    return 0


def cmd_set_coc(args: argparse.Namespace, config: dict, config_path: Path | None) -> int:
    path = config_path or config_manager.default_config_path()
    config_manager.set_default_coc(config, args.coc)
    backup = config_manager.save_config(config, path)
    if backup is not None:
        logger.info("Previous config backed up to %s", backup)
    print(f"Default circle of confusion set to {args.coc:g} mm in {path}")
    return 0


COMMANDS = {
    "fov": cmd_fov,
    "hyperfocal": cmd_hyperfocal,
    "dof": cmd_dof,
    "compare": cmd_compare,
    "focal-length": cmd_focal_length,
    "dori": cmd_dori,
    "dori-ranges": cmd_dori_ranges,
    "validate": cmd_validate,
    "presets": cmd_presets,
}

# Commands that write the config; the file may not exist yet
WRITE_COMMANDS = {
    "save-preset": cmd_save_preset,
    "set-coc": cmd_set_coc,
}


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    args = cli.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        saving = args.command in WRITE_COMMANDS
        config_path = config_manager.resolve_config_path(args.config, must_exist=not saving)
        if config_path is not None and config_path.exists():
            config = config_manager.load_config(config_path)
            logger.debug("Config loaded from %s", config_path)
        else:
            config = config_manager.default_config()

        if saving:
            return WRITE_COMMANDS[args.command](args, config, config_path)
        return COMMANDS[args.command](args, config)
    except (ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
