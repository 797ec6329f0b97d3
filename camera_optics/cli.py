"""Command-line argument parsing for camera-optics."""

import argparse
from pathlib import Path


def _add_camera_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-W", "--sensor-width", type=float, required=True, help="Sensor width in mm")
    parser.add_argument("-H", "--sensor-height", type=float, required=True, help="Sensor height in mm")
    parser.add_argument("-x", "--pixel-width", type=int, required=True, help="Horizontal pixel count")
    parser.add_argument("-y", "--pixel-height", type=int, required=True, help="Vertical pixel count")
    parser.add_argument("-f", "--focal-length", type=float, required=True, help="Focal length in mm")
    parser.add_argument("-n", "--name", default=None, help="Optional name for the camera system")


def _add_coc_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--coc",
        type=float,
        default=None,
        help="Circle of confusion in mm (default: config default_coc_mm, 0.03 for full frame)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="camera-optics",
        description="Camera optics calculator - FOV, resolution, depth of field and DORI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.json (default: $CAMERA_OPTICS_CONFIG or ~/.camera-optics/config.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    fov = sub.add_parser("fov", help="Calculate field of view and spatial resolution")
    _add_camera_args(fov)
    fov.add_argument("-d", "--distance", type=float, required=True, help="Working distance in mm")

    hyper = sub.add_parser("hyperfocal", help="Calculate hyperfocal distance")
    hyper.add_argument("-f", "--focal-length", type=float, required=True, help="Focal length in mm")
    hyper.add_argument("-a", "--f-number", type=float, required=True, help="F-number (aperture)")
    _add_coc_arg(hyper)

    dof = sub.add_parser("dof", help="Calculate depth of field")
    dof.add_argument("-d", "--distance", type=float, required=True, help="Object distance in mm")
    dof.add_argument("-f", "--focal-length", type=float, required=True, help="Focal length in mm")
    dof.add_argument("-a", "--f-number", type=float, required=True, help="F-number (aperture)")
    _add_coc_arg(dof)
    dof.add_argument(
        "--to",
        type=float,
        default=None,
        metavar="MM",
        help="Sweep focus distances from --distance up to this distance in mm",
    )
    dof.add_argument("--steps", type=int, default=10, help="Number of sweep points (default: 10)")

    compare = sub.add_parser("compare", help="Compare camera presets at a working distance")
    compare.add_argument("-d", "--distance", type=float, required=True, help="Working distance in mm")
    compare.add_argument(
        "--presets",
        action="store_true",
        help="Compare every configured preset (built-in: full-frame, aps-c, micro43)",
    )
    compare.add_argument(
        "-p",
        "--preset",
        action="append",
        default=[],
        metavar="NAME",
        help="Compare a named preset (repeatable)",
    )
    compare.add_argument(
        "--image",
        type=Path,
        default=None,
        metavar="OUTPUT.png",
        help="Also write a bird's-eye coverage diagram",
    )

    focal = sub.add_parser("focal-length", help="Calculate focal length from field of view")
    focal.add_argument("-s", "--sensor-size", type=float, required=True, help="Sensor size in mm")
    focal.add_argument("-f", "--fov", type=float, required=True, help="Field of view in degrees")
    focal.add_argument("-v", "--vertical", action="store_true", help="FOV is vertical (default horizontal)")

    dori = sub.add_parser("dori", help="Back-fill all DORI distances from one distance")
    dori.add_argument("-d", "--distance", type=float, required=True, help="Known distance in m")
    dori.add_argument(
        "-t",
        "--type",
        default="identification",
        help="DORI category of the distance (detection, observation, recognition, identification)",
    )

    ranges = sub.add_parser("dori-ranges", help="Parameter ranges that reach a DORI target")
    ranges.add_argument("--detection", type=float, default=None, help="Target detection distance in m")
    ranges.add_argument("--observation", type=float, default=None, help="Target observation distance in m")
    ranges.add_argument("--recognition", type=float, default=None, help="Target recognition distance in m")
    ranges.add_argument("--identification", type=float, default=None, help="Target identification distance in m")
    ranges.add_argument("--sensor-width", type=float, default=None, help="Fixed sensor width in mm")
    ranges.add_argument("--sensor-height", type=float, default=None, help="Fixed sensor height in mm")
    ranges.add_argument("--pixel-width", type=int, default=None, help="Fixed horizontal pixel count")
    ranges.add_argument("--pixel-height", type=int, default=None, help="Fixed vertical pixel count")
    ranges.add_argument("--focal-length", type=float, default=None, help="Fixed focal length in mm")
    ranges.add_argument("--hfov", type=float, default=None, help="Fixed horizontal FOV in degrees")
    ranges.add_argument("--json", action="store_true", help="Print the ranges as JSON")

    validate = sub.add_parser("validate", help="Check a camera system for implausible values")
    _add_camera_args(validate)
    validate.add_argument(
        "-d",
        "--distance",
        type=float,
        default=None,
        help="Also validate the FOV result at this distance in mm",
    )

    sub.add_parser("presets", help="List configured camera presets")

    coc = sub.add_parser("set-coc", help="Store the default circle of confusion in the config")
    coc.add_argument("coc", type=float, help="Circle of confusion in mm")

    save = sub.add_parser("save-preset", help="Store a camera system as a named preset in the config")
    save.add_argument("key", help="Preset name")
    _add_camera_args(save)

    return parser


def parse_args(argv=None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
