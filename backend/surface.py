from __future__ import annotations
import logging
from typing import Any

import pyopencl as cl

from backend.context import ComputeContext
from backend.errors import SurfaceAllocationError
from backend.resources import ResourceStack, release_handle

logger = logging.getLogger(__name__)

CHANNELS = 4


def surface_format() -> Any:
    """
    RGBA, 8 bits per channel, normalized to [0, 1] inside the kernel.
    """
    return cl.ImageFormat(cl.channel_order.RGBA, cl.channel_type.UNORM_INT8)


def allocate_surface(compute: ComputeContext, resources: ResourceStack,
                     width: int, height: int) -> Any:
    """
    Allocate the write-only 2D image the kernel renders into.
    """
    if width <= 0 or height <= 0:
        raise SurfaceAllocationError(f"Invalid surface size {width}x{height}")
    if not getattr(compute.device, "image_support", True):
        raise SurfaceAllocationError(
            f"Device {getattr(compute.device, 'name', '<unknown>')} has no image support")

    try:
        image = cl.create_image(compute.ctx, cl.mem_flags.WRITE_ONLY, surface_format(),
                                shape=(int(width), int(height)))
    except Exception as e:
        raise SurfaceAllocationError(
            f"Could not allocate {width}x{height} RGBA surface: {e}") from e
    resources.push("surface", image, release=release_handle)
    logger.debug("Allocated %dx%d RGBA surface", width, height)
    return image
