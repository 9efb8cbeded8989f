from __future__ import annotations
import logging
from typing import Any

import pyopencl as cl

from backend.errors import ContextCreationError, QueueCreationError
from backend.resources import ResourceStack, drop_reference, finish_and_release

logger = logging.getLogger(__name__)


class ComputeContext:
    """
    One OpenCL context bound to exactly one device, and the single command
    queue every piece of work is submitted through.
    """

    def __init__(self, device: Any, ctx: Any, queue: Any):
        self.device = device
        self.ctx = ctx
        self.queue = queue

    @classmethod
    def create(cls, device: Any, resources: ResourceStack) -> "ComputeContext":
        try:
            ctx = cl.Context([device])
        except Exception as e:
            raise ContextCreationError(f"Could not create OpenCL context: {e}") from e
        resources.push("context", ctx, release=drop_reference)

        try:
            queue = cl.CommandQueue(ctx, device)
        except Exception as e:
            raise QueueCreationError(f"Could not create command queue: {e}") from e
        resources.push("queue", queue, release=finish_and_release)

        logger.debug("Context and queue ready on %s", getattr(device, "name", device))
        return cls(device, ctx, queue)
