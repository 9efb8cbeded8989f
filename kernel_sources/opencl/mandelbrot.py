from pathlib import Path

from kernel_sources.registry import register_kernel

CL_PATH = Path(__file__).with_name("mandelbrot.cl")

KERNEL_NAME = "mandelbrot"

ARG_BUFFERS_OUT = ["surface"]
ARG_SCALARS = [
    "width", "height",
    "min_x", "max_x", "min_y", "max_y",
    "max_iter",
]

ARG_ORDER = ARG_BUFFERS_OUT + ARG_SCALARS

register_kernel(
    fractal="mandelbrot",
    backend="opencl",
    path=CL_PATH,
    kernel_name=KERNEL_NAME,
    arg_order=ARG_ORDER,
    build_options=[],
)
