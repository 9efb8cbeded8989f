from __future__ import annotations
from typing import Optional


class PipelineError(RuntimeError):
    """
    Base class for every fatal error raised by the render pipeline.
    Stage names the pipeline step that failed and is what the operator sees first.
    """
    stage: str = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ConfigurationError(PipelineError):
    stage = "configuration"


class NoPlatformError(PipelineError):
    stage = "device resolution"


class NoDeviceError(PipelineError):
    stage = "device resolution"


class ContextCreationError(PipelineError):
    stage = "context creation"


class QueueCreationError(PipelineError):
    stage = "queue creation"


class SourceLoadError(PipelineError):
    stage = "kernel source load"


class KernelBuildError(PipelineError):
    """
    Carries the complete build log so it can be shown to the operator.
    """
    stage = "kernel build"

    def __init__(self, message: str, build_log: str = ""):
        super().__init__(message)
        self.build_log = build_log


class EntryPointNotFoundError(PipelineError):
    stage = "kernel lookup"


class SurfaceAllocationError(PipelineError):
    stage = "surface allocation"


class ArgumentBindingError(PipelineError):
    stage = "argument binding"

    def __init__(self, message: str, index: Optional[int] = None, name: Optional[str] = None):
        super().__init__(message)
        self.index = index
        self.name = name


class DispatchError(PipelineError):
    stage = "dispatch"


class ReadbackError(PipelineError):
    stage = "readback"


class OutputWriteError(PipelineError):
    stage = "output write"
