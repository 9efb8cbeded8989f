import numpy as np
from numba import njit, prange

from kernel_sources.registry import register_kernel


ARG_BUFFERS_OUT = ["surface"]
ARG_SCALARS = [
    "width", "height",
    "min_x", "max_x", "min_y", "max_y",
    "max_iter",
]

ARG_ORDER = ARG_BUFFERS_OUT + ARG_SCALARS


@njit(cache=True, parallel=True)
def _mandelbrot_rgba(surface, width, height,
                     min_x, max_x, min_y, max_y,
                     max_iter):
    # Same indexing and palette as the OpenCL kernel: item i -> (i % width, i // width).
    for index in prange(width * height):
        x = index % width
        y = index // width
        cr = min_x + (x / width) * (max_x - min_x)
        ci = min_y + (y / height) * (max_y - min_y)

        zr = 0.0
        zi = 0.0
        n = 0
        while n < max_iter and zr*zr + zi*zi <= 4.0:
            t = zr*zr - zi*zi + cr
            zi = 2.0 * zr * zi + ci
            zr = t
            n += 1

        base = index * 4
        if n == max_iter:
            surface[base] = 0
            surface[base + 1] = 0
            surface[base + 2] = 0
        else:
            surface[base] = 255 - (n * 2) % 256
            surface[base + 1] = 255 - (n * 5) % 256
            surface[base + 2] = 255 - (n * 11) % 256
        surface[base + 3] = 255


def render_rgba(width: int, height: int,
                min_x: float, max_x: float, min_y: float, max_y: float,
                max_iter: int) -> np.ndarray:
    """
    Host-side rendition of the OpenCL kernel. Returns a flat RGBA uint8 array
    of width * height * 4 bytes.
    """
    surface = np.zeros(width * height * 4, dtype=np.uint8)
    _mandelbrot_rgba(surface, int(width), int(height),
                     float(min_x), float(max_x), float(min_y), float(max_y),
                     int(max_iter))
    return surface


register_kernel(
    fractal="mandelbrot",
    backend="CPU",
    func=render_rgba,
    arg_order=ARG_ORDER,
)
