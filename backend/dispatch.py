from __future__ import annotations
import logging
from typing import Any, List, Sequence, Tuple

import pyopencl as cl

from backend.errors import ArgumentBindingError, DispatchError

logger = logging.getLogger(__name__)


def bind_arguments(kernel: Any, names: Sequence[str], values: Sequence[Any]) -> None:
    """
    Set kernel arguments by index.

    Every argument is attempted; if any binding failed the first failing index
    is reported and nothing is launched.
    """
    if len(names) != len(values):
        raise ArgumentBindingError(
            f"Expected {len(names)} kernel arguments, got {len(values)}")

    failures: List[Tuple[int, str, Exception]] = []
    for idx, (name, value) in enumerate(zip(names, values)):
        try:
            kernel.set_arg(idx, value)
        except Exception as e:
            failures.append((idx, name, e))

    if failures:
        idx, name, err = failures[0]
        for f_idx, f_name, f_err in failures:
            logger.debug("Binding arg %d (%s) failed: %s", f_idx, f_name, f_err)
        raise ArgumentBindingError(
            f"Failed to bind argument {idx} ({name}): {err}"
            + (f" [{len(failures)} arguments failed]" if len(failures) > 1 else ""),
            index=idx, name=name)


def global_size(width: int, height: int) -> Tuple[int]:
    """
    One work item per pixel; item i is pixel (i % width, i // width).
    """
    return (int(width) * int(height),)


def launch(queue: Any, kernel: Any, width: int, height: int) -> None:
    """
    Enqueue the kernel over width * height items and wait for the queue to drain.
    The local size is left to the runtime.
    """
    try:
        cl.enqueue_nd_range_kernel(queue, kernel, global_size(width, height), None)
    except Exception as e:
        raise DispatchError(f"Kernel enqueue failed: {e}") from e

    try:
        queue.finish()
    except Exception as e:
        raise DispatchError(f"Kernel execution failed: {e}") from e
