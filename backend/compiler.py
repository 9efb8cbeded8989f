from __future__ import annotations
import logging
from typing import Any, List, Optional, Sequence

import pyopencl as cl

from backend.context import ComputeContext
from backend.errors import EntryPointNotFoundError, KernelBuildError
from backend.resources import ResourceStack, drop_reference

logger = logging.getLogger(__name__)


def fetch_build_log(program: Any, device: Any, error: Optional[BaseException] = None) -> str:
    """
    Return the full build log of program for device.

    The runtime hands back the whole log as one string of whatever length it
    has. When it is empty (some drivers only put the log in the exception),
    the error text is returned instead so the operator always gets something.
    """
    log = ""
    try:
        log = program.get_build_info(device, cl.program_build_info.LOG) or ""
    except Exception as e:
        logger.debug("Build log query failed: %s", e)
    if isinstance(log, bytes):
        log = log.decode("utf-8", errors="replace")
    log = log.strip()
    if not log and error is not None:
        log = str(error).strip()
    return log


def _kernel_names(program: Any) -> List[str]:
    try:
        names = program.get_info(cl.program_info.KERNEL_NAMES)
    except Exception:
        return []
    return [n for n in str(names).split(";") if n]


class KernelCompiler:
    """
    Builds kernel source for the context's single device and resolves the
    named entry point. Program and kernel go onto the resource stack.
    """

    def __init__(self, compute: ComputeContext, resources: ResourceStack,
                 build_options: Optional[Sequence[str]] = None):
        self.compute = compute
        self.resources = resources
        self.build_options = list(build_options or [])

    def build(self, source: str) -> Any:
        device = self.compute.device
        try:
            program = cl.Program(self.compute.ctx, source)
        except Exception as e:
            raise KernelBuildError(f"Could not create program from source: {e}", build_log=str(e)) from e
        self.resources.push("program", program, release=drop_reference)

        try:
            program.build(options=self.build_options, devices=[device])
        except Exception as e:
            log = fetch_build_log(program, device, e)
            logger.error("Build log:\n%s", log)
            raise KernelBuildError("Kernel compilation failed; see build log", build_log=log) from e

        logger.debug("Program built for %s", getattr(device, "name", device))
        return program

    def entry_point(self, program: Any, kernel_name: str) -> Any:
        try:
            kernel = cl.Kernel(program, kernel_name)
        except Exception as e:
            available = _kernel_names(program)
            hint = f" (program exports: {', '.join(available)})" if available else ""
            raise EntryPointNotFoundError(f"Kernel '{kernel_name}' not found{hint}: {e}") from e
        self.resources.push("kernel", kernel, release=drop_reference)
        return kernel

    def compile(self, source: str, kernel_name: str) -> Any:
        program = self.build(source)
        return self.entry_point(program, kernel_name)
