from enum import Enum, auto

class BackendType(Enum):
    OPENCL = auto()
    CPU = auto()

class DevicePolicy(Enum):
    FIRST = auto()
    BEST = auto()
