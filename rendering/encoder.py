from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Union

import numpy as np

from backend.errors import OutputWriteError

logger = logging.getLogger(__name__)


def ppm_header(width: int, height: int) -> bytes:
    return f"P6\n{int(width)} {int(height)}\n255\n".encode("ascii")


def encode_ppm(pixels: np.ndarray, width: int, height: int) -> bytes:
    """
    Binary PPM: the header followed by the RGB bytes of every RGBA pixel,
    row-major from the top row. Alpha is dropped.
    """
    data = np.asarray(pixels, dtype=np.uint8)
    expected = int(width) * int(height) * 4
    if data.size != expected:
        raise ValueError(f"Expected {expected} RGBA bytes for {width}x{height}, got {data.size}")
    rgb = data.reshape(int(height), int(width), 4)[:, :, :3]
    return ppm_header(width, height) + np.ascontiguousarray(rgb).tobytes()


def write_ppm(path: Union[str, Path], pixels: np.ndarray, width: int, height: int) -> Path:
    """
    Write the image next to path first and move it into place, so a failed
    write never leaves a truncated file under the final name.
    """
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    try:
        payload = encode_ppm(pixels, width, height)
        with open(tmp, "wb") as f:
            f.write(payload)
        os.replace(tmp, path)
    except (OSError, ValueError) as e:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("Could not remove temporary file %s", tmp)
        raise OutputWriteError(f"Failed to write '{path}': {e}") from e
    logger.info("Wrote %dx%d image to %s (%d bytes)", width, height, path, len(payload))
    return path
