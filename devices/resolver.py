from __future__ import annotations
import logging
from typing import List, Optional, Tuple

import pyopencl as cl

from backend.errors import NoDeviceError, NoPlatformError
from devices.types import DeviceInfo
from utils.enums import DevicePolicy

logger = logging.getLogger(__name__)


def _platforms() -> list:
    try:
        plats = cl.get_platforms()
    except Exception as e:
        # The ICD loader reports PLATFORM_NOT_FOUND_KHR instead of an empty list.
        raise NoPlatformError(f"No OpenCL platforms found ({e})") from e
    if not plats:
        raise NoPlatformError("No OpenCL platforms found")
    return list(plats)


def _devices_of(platform) -> list:
    try:
        return list(platform.get_devices(device_type=cl.device_type.ALL))
    except Exception as e:
        logger.debug("No devices on platform %s: %s",
                     getattr(platform, "name", "<unknown>"), e)
        return []


def describe_device(device, platform=None, ordinal: int = 0) -> DeviceInfo:
    """
    Snapshot the attributes of a pyopencl device that matter to the operator.
    """
    total_mb = getattr(device, "global_mem_size", None)
    return DeviceInfo(
        device_id=ordinal,
        name=(getattr(device, "name", None) or f"OpenCL Device {ordinal}").strip(),
        platform=getattr(platform, "name", None),
        vendor=getattr(device, "vendor", None),
        version=getattr(device, "version", None) or getattr(platform, "version", None),
        driver=getattr(device, "driver_version", None),
        compute_units=int(getattr(device, "max_compute_units", 0) or 0),
        memory_total_mb=int(total_mb // (1024 ** 2)) if total_mb else None,
        image_support=bool(getattr(device, "image_support", False)),
    )


def _all_devices() -> List[Tuple[int, object, object]]:
    out = []
    ordinal = 0
    for p in _platforms():
        for d in _devices_of(p):
            out.append((ordinal, p, d))
            ordinal += 1
    return out


def enumerate_devices() -> List[DeviceInfo]:
    """
    List every device of every platform with a running ordinal.
    """
    return [describe_device(d, p, ord_id) for ord_id, p, d in _all_devices()]


def resolve_device(policy: DevicePolicy = DevicePolicy.FIRST,
                   ordinal: Optional[int] = None) -> Tuple[object, DeviceInfo]:
    """
    Pick the single device used for the whole run.

    FIRST takes the first device of the first platform. BEST scans every
    platform and takes the device with the most compute units. An explicit
    ordinal overrides the policy.
    """
    if ordinal is not None:
        for ord_id, p, d in _all_devices():
            if ord_id == ordinal:
                info = describe_device(d, p, ord_id)
                logger.info("Using OpenCL device %d: %s (%s)", ord_id, info.name, info.platform)
                return d, info
        raise NoDeviceError(f"No OpenCL device with ordinal {ordinal} found")

    if policy == DevicePolicy.FIRST:
        platform = _platforms()[0]
        devs = _devices_of(platform)
        if not devs:
            raise NoDeviceError(
                f"No OpenCL devices found on platform {getattr(platform, 'name', '<unknown>')}")
        chosen = (0, platform, devs[0])
    else:
        candidates = _all_devices()
        if not candidates:
            raise NoDeviceError("No OpenCL devices found")
        chosen = candidates[0]
        best_units = int(getattr(chosen[2], "max_compute_units", 0) or 0)
        for cand in candidates[1:]:
            units = int(getattr(cand[2], "max_compute_units", 0) or 0)
            if units > best_units:
                chosen, best_units = cand, units

    ord_id, platform, device = chosen
    info = describe_device(device, platform, ord_id)
    logger.info("Using OpenCL device %d: %s (%s)", ord_id, info.name, info.platform)
    return device, info
