from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class DeviceInfo:
    device_id: int
    name: str
    platform: Optional[str] = None
    vendor: Optional[str] = None
    version: Optional[str] = None
    driver: Optional[str] = None
    compute_units: int = 0
    memory_total_mb: Optional[int] = None
    image_support: bool = False
