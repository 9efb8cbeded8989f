"""
Render the Mandelbrot set with an OpenCL kernel and write it as a binary PPM.

Usage examples:
  python main.py --width 512 --height 512 --max-iter 1000 --output mandelbrot.ppm

  python main.py --device-policy best --min-x -0.75 --max-x -0.73 --min-y 0.1 --max-y 0.12

  python main.py --list-devices
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from backend.errors import PipelineError
from devices.resolver import enumerate_devices
from fractals.base import Viewport, RenderSettings
from rendering.pipeline import PipelineConfig, render_to_file
from utils.enums import BackendType, DevicePolicy

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Render the Mandelbrot set on an OpenCL device.")
    p.add_argument("--width", type=int, default=512)
    p.add_argument("--height", type=int, default=512)
    p.add_argument("--max-iter", type=int, default=1000,
                   help="Iteration cap per pixel")
    p.add_argument("--min-x", type=float, default=-2.0)
    p.add_argument("--max-x", type=float, default=1.0)
    p.add_argument("--min-y", type=float, default=-1.5)
    p.add_argument("--max-y", type=float, default=1.5)
    p.add_argument("--kernel", type=str, default=None,
                   help="OpenCL source file (default: the bundled mandelbrot.cl)")
    p.add_argument("--output", "-o", type=str, default="mandelbrot.ppm")
    p.add_argument("--backend", type=str, default="opencl", choices=["opencl", "cpu"])
    p.add_argument("--device-policy", type=str, default="first", choices=["first", "best"],
                   help="first: first device of the first platform; best: most compute units")
    p.add_argument("--device", type=int, default=None,
                   help="Device ordinal as printed by --list-devices (overrides the policy)")
    p.add_argument("--build-option", dest="build_options", action="append", default=[],
                   metavar="OPT", help="Extra OpenCL compiler option, may be repeated")
    p.add_argument("--list-devices", action="store_true",
                   help="Print the available OpenCL devices and exit")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        viewport=Viewport(min_x=args.min_x, max_x=args.max_x,
                          min_y=args.min_y, max_y=args.max_y,
                          width=args.width, height=args.height),
        settings=RenderSettings(max_iter=args.max_iter),
        output=Path(args.output),
        kernel_path=Path(args.kernel) if args.kernel else None,
        backend=BackendType[args.backend.upper()],
        device_policy=DevicePolicy[args.device_policy.upper()],
        device=args.device,
        build_options=list(args.build_options),
    )


def list_devices() -> None:
    for d in enumerate_devices():
        mem = f"{d.memory_total_mb} MB" if d.memory_total_mb is not None else "n/a"
        print(f"{d.device_id}: {d.name} [{d.platform}] units={d.compute_units} "
              f"mem={mem} images={'yes' if d.image_support else 'no'}")
        print(f"    vendor={d.vendor or 'n/a'} version={d.version or 'n/a'} "
              f"driver={d.driver or 'n/a'}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s",
                        stream=sys.stderr)

    try:
        if args.list_devices:
            list_devices()
            return 0
        render_to_file(config_from_args(args))
    except PipelineError as e:
        logger.error("%s failed: %s", e.stage, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
