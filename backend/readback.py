from __future__ import annotations
from typing import Any

import numpy as np
import pyopencl as cl

from backend.errors import ReadbackError
from backend.surface import CHANNELS


def read_surface(queue: Any, surface: Any, width: int, height: int) -> np.ndarray:
    """
    Blocking copy of the whole surface to host memory.
    Returns a flat uint8 array of width * height * 4 bytes, row-major from the top row.
    """
    host = np.empty((int(height), int(width), CHANNELS), dtype=np.uint8)
    try:
        cl.enqueue_copy(queue, host, surface,
                        origin=(0, 0, 0), region=(int(width), int(height), 1),
                        is_blocking=True)
    except Exception as e:
        raise ReadbackError(f"Reading back the surface failed: {e}") from e
    return host.reshape(-1)
