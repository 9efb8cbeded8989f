from dataclasses import dataclass
from typing import Any, Dict, List

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings
from kernel_sources.registry import load_kernel
import kernel_sources.opencl.mandelbrot  # noqa: F401
import kernel_sources.cpu.mandelbrot  # noqa: F401


@dataclass
class MandelbrotFractal(Fractal):
    name: str = "mandelbrot"

    def kernel_meta(self, backend_name: str) -> Dict[str, Any]:
        return load_kernel(backend_name, self.name)

    def arg_names(self, backend_name: str = "opencl") -> List[str]:
        return list(self.kernel_meta(backend_name)["arg_order"])

    def build_arg_values(self, surface: Any, vp: Viewport, st: RenderSettings) -> List[Any]:
        """
        Kernel arguments in binding order: surface, width, height,
        min_x, max_x, min_y, max_y, max_iter.
        """
        return [
            surface,
            np.int32(vp.width),
            np.int32(vp.height),
            np.float32(vp.min_x),
            np.float32(vp.max_x),
            np.float32(vp.min_y),
            np.float32(vp.max_y),
            np.int32(st.max_iter),
        ]
