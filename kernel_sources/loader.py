from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

from backend.errors import SourceLoadError
from kernel_sources.registry import load_kernel
import kernel_sources.opencl.mandelbrot  # noqa: F401  registers the shipped source

logger = logging.getLogger(__name__)


def default_kernel_path(fractal: str = "mandelbrot") -> Path:
    """
    Path of the OpenCL source shipped with the package for this fractal.
    """
    return Path(load_kernel("opencl", fractal)["path"])


def load_source(path: Union[str, Path]) -> str:
    """
    Read kernel source text. Any read failure, or an empty file, is fatal.
    """
    path = Path(path)
    try:
        src = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceLoadError(f"Failed to load kernel source '{path}': {e}") from e
    if not src.strip():
        raise SourceLoadError(f"Kernel source '{path}' is empty")
    logger.debug("Loaded %d bytes of kernel source from %s", len(src), path)
    return src
