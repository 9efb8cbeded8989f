from __future__ import annotations
from typing import Dict, Any

# [fractal][backend] -> meta
_REGISTRY: Dict[str, Dict[str, Dict[str, Any]]] = {}

def register_kernel(fractal: str, backend: str, **meta: Any) -> None:
    """
    Register kernel metadata for a given fractal and backend.
    Example:
        register_kernel("mandelbrot", "opencl", path=CL_PATH, kernel_name="mandelbrot", arg_order=[...])
    """
    _REGISTRY.setdefault(fractal, {})[backend.upper()] = meta

def load_kernel(backend: str, fractal: str) -> Dict[str, Any]:
    """
    Load kernel metadata from the registry.
    Raises KeyError if not found.
    """
    be = backend.upper()
    try:
        return _REGISTRY[fractal][be]
    except KeyError as e:
        raise KeyError(f"Kernel not found for fractal='{fractal}', backend='{be}'") from e
