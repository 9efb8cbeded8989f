from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Any

import numpy as np

from backend.compiler import KernelCompiler
from backend.context import ComputeContext
from backend.dispatch import bind_arguments, launch
from backend.readback import read_surface
from backend.resources import ResourceStack
from backend.surface import allocate_surface
from devices.resolver import resolve_device
from devices.types import DeviceInfo
from fractals.base import Viewport, RenderSettings
from fractals.mandelbrot import MandelbrotFractal
from kernel_sources.loader import default_kernel_path, load_source
from rendering.encoder import write_ppm
from utils.enums import BackendType, DevicePolicy

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    viewport: Viewport = field(default_factory=Viewport)
    settings: RenderSettings = field(default_factory=RenderSettings)
    output: Path = Path("mandelbrot.ppm")
    kernel_path: Optional[Path] = None
    backend: BackendType = BackendType.OPENCL
    device_policy: DevicePolicy = DevicePolicy.FIRST
    device: Optional[int] = None
    build_options: List[str] = field(default_factory=list)

    def validate(self) -> None:
        self.viewport.validate()
        self.settings.validate()


@dataclass(frozen=True)
class RenderResult:
    pixels: np.ndarray      # flat RGBA uint8, width * height * 4
    width: int
    height: int
    device: Optional[DeviceInfo] = None
    timings: Dict[str, float] = field(default_factory=dict)


class RenderPipeline:
    """
    Linear OpenCL render:
      resolve device -> context/queue -> load + build kernel -> surface
      -> bind args -> launch + barrier -> readback.

    Every device resource is released newest-first before run() returns or
    raises, whichever stage failed.
    """

    def __init__(self, config: PipelineConfig,
                 on_release: Optional[Callable[[str, Any], None]] = None):
        self.config = config
        self.fractal = MandelbrotFractal()
        self._on_release = on_release
        self.resources: Optional[ResourceStack] = None

    def run(self) -> RenderResult:
        cfg = self.config
        cfg.validate()
        if cfg.backend == BackendType.CPU:
            return self._run_cpu()

        vp, st = cfg.viewport, cfg.settings
        self.resources = ResourceStack(on_release=self._on_release)
        with self.resources as resources:
            pixels, info, timings = self._render_on_device(resources)

        logger.info("Rendered %dx%d, max_iter=%d on %s (build %.3fs, dispatch %.3fs, readback %.3fs)",
                    vp.width, vp.height, st.max_iter, info.name,
                    timings["build"], timings["dispatch"], timings["readback"])
        return RenderResult(pixels=pixels, width=vp.width, height=vp.height,
                            device=info, timings=timings)

    def _render_on_device(self, resources: ResourceStack):
        # Device handles stay local to this frame; once it returns the stack
        # holds the only references.
        cfg = self.config
        vp, st = cfg.viewport, cfg.settings
        meta = self.fractal.kernel_meta("opencl")
        timings: Dict[str, float] = {}

        device, info = resolve_device(cfg.device_policy, cfg.device)
        compute = ComputeContext.create(device, resources)

        source = load_source(cfg.kernel_path or default_kernel_path(self.fractal.name))
        options = list(meta.get("build_options", [])) + list(cfg.build_options)
        compiler = KernelCompiler(compute, resources, build_options=options)
        t0 = time.perf_counter()
        kernel = compiler.compile(source, meta["kernel_name"])
        timings["build"] = time.perf_counter() - t0
        del source

        surface = allocate_surface(compute, resources, vp.width, vp.height)
        bind_arguments(kernel, meta["arg_order"],
                       self.fractal.build_arg_values(surface, vp, st))

        t0 = time.perf_counter()
        launch(compute.queue, kernel, vp.width, vp.height)
        timings["dispatch"] = time.perf_counter() - t0

        t0 = time.perf_counter()
        pixels = read_surface(compute.queue, surface, vp.width, vp.height)
        timings["readback"] = time.perf_counter() - t0
        del compiler, kernel, surface, compute
        return pixels, info, timings

    def _run_cpu(self) -> RenderResult:
        vp, st = self.config.viewport, self.config.settings
        render = self.fractal.kernel_meta("cpu")["func"]
        t0 = time.perf_counter()
        pixels = render(vp.width, vp.height, vp.min_x, vp.max_x, vp.min_y, vp.max_y, st.max_iter)
        elapsed = time.perf_counter() - t0
        logger.info("Rendered %dx%d, max_iter=%d on CPU in %.3fs",
                    vp.width, vp.height, st.max_iter, elapsed)
        return RenderResult(pixels=pixels, width=vp.width, height=vp.height,
                            timings={"dispatch": elapsed})


def render_to_file(config: PipelineConfig) -> RenderResult:
    """
    Render and, only once the pixels are on the host, write the PPM file.
    """
    result = RenderPipeline(config).run()
    write_ppm(config.output, result.pixels, result.width, result.height)
    return result
