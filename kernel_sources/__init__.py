# Kernel sources package
from .registry import register_kernel, load_kernel

__all__ = [
    "register_kernel",
    "load_kernel",
]
