"""
In-memory stand-in for the parts of pyopencl the pipeline touches.

Every device object records its creation and release in FakeCL.events so the
tests can check lifetimes. Launching the kernel runs the CPU reference
kernel into the fake image, so pixels coming back are real Mandelbrot pixels.
"""
import re
import weakref
from types import SimpleNamespace

import numpy as np
import pytest

from kernel_sources.cpu.mandelbrot import render_rgba


class FakeCLError(Exception):
    pass


_KERNEL_RE = re.compile(r"__kernel\s+void\s+(\w+)\s*\(([^)]*)\)", re.S)


class FakeHandle:
    """
    Like pyopencl, only memory objects have release(); everything else is
    freed when its last reference goes, which the finalizer records.
    """
    kind = "handle"

    def __init__(self, runtime):
        self.runtime = runtime
        runtime.events.append(("create", self.kind))
        self._finalizer = weakref.finalize(self, runtime.events.append, ("release", self.kind))


class FakeDevice:
    def __init__(self, name="Fake GPU", max_compute_units=8, image_support=True):
        self.name = name
        self.vendor = "Fake Vendor"
        self.version = "OpenCL 3.0 Fake"
        self.driver_version = "1.0"
        self.max_compute_units = max_compute_units
        self.global_mem_size = 2 * 1024 ** 3
        self.image_support = image_support


class FakePlatform:
    def __init__(self, name, devices):
        self.name = name
        self.version = "OpenCL 3.0"
        self.devices = list(devices)

    def get_devices(self, device_type=None):
        return list(self.devices)


class FakeContext(FakeHandle):
    kind = "context"

    def __init__(self, runtime, devices):
        super().__init__(runtime)
        self.devices = devices


class FakeQueue(FakeHandle):
    kind = "queue"

    def __init__(self, runtime, ctx, device):
        super().__init__(runtime)
        self.finish_count = 0

    def finish(self):
        self.finish_count += 1
        self.runtime.events.append(("finish", self.kind))
        self.runtime.maybe_fail("finish")

    def _finalize(self):
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()
        self._finalize()


class FakeProgram(FakeHandle):
    kind = "program"

    def __init__(self, runtime, ctx, source):
        super().__init__(runtime)
        self.source = source
        self.kernels = {m.group(1): len([a for a in m.group(2).split(",") if a.strip()])
                        for m in _KERNEL_RE.finditer(source)}
        self.log = ""
        self.built_with = None

    def build(self, options=None, devices=None):
        self.built_with = list(options or [])
        if "syntax_error" in self.source or not self.kernels:
            self.log = self.runtime.build_log
            raise FakeCLError("clBuildProgram failed: BUILD_PROGRAM_FAILURE")
        return self

    def get_build_info(self, device, param):
        assert param == FakeCL.program_build_info.LOG
        return self.log

    def get_info(self, param):
        assert param == FakeCL.program_info.KERNEL_NAMES
        return ";".join(self.kernels)


class FakeKernel(FakeHandle):
    kind = "kernel"

    def __init__(self, runtime, program, name):
        if name not in program.kernels:
            raise FakeCLError("clCreateKernel failed: INVALID_KERNEL_NAME")
        super().__init__(runtime)
        self.name = name
        self.num_args = program.kernels[name]
        self.args = {}

    def set_arg(self, index, value):
        if index in self.runtime.bad_args:
            raise FakeCLError(f"clSetKernelArg failed: INVALID_ARG_VALUE (arg {index})")
        if index >= self.num_args:
            raise FakeCLError(f"clSetKernelArg failed: INVALID_ARG_INDEX (arg {index})")
        self.args[index] = value


class FakeImage(FakeHandle):
    kind = "surface"

    def __init__(self, runtime, ctx, flags, fmt, shape):
        super().__init__(runtime)
        self.flags = flags
        self.format = fmt
        self.shape = shape
        width, height = shape
        self.data = np.zeros(width * height * 4, dtype=np.uint8)

    def release(self):
        self._finalizer()


class FakeCL:
    device_type = SimpleNamespace(ALL=0xFFFFFFFF, GPU=1 << 2)
    program_build_info = SimpleNamespace(LOG="LOG")
    program_info = SimpleNamespace(KERNEL_NAMES="KERNEL_NAMES")
    mem_flags = SimpleNamespace(WRITE_ONLY=1 << 1)
    channel_order = SimpleNamespace(RGBA="RGBA")
    channel_type = SimpleNamespace(UNORM_INT8="UNORM_INT8")

    def __init__(self, platforms=None):
        self.platforms = [FakePlatform("Fake Platform", [FakeDevice()])] if platforms is None else platforms
        self.events = []
        self.failures = set()
        self.bad_args = set()
        self.build_log = "<kernel>:3:5: error: use of undeclared identifier 'syntax_error'"
        self.launches = []
        self.copies = []

    def maybe_fail(self, what):
        if what in self.failures:
            raise FakeCLError(f"{what} failed: OUT_OF_RESOURCES")

    def created(self):
        return [k for ev, k in self.events if ev == "create"]

    def released(self):
        return [k for ev, k in self.events if ev == "release"]

    def get_platforms(self):
        self.maybe_fail("platforms")
        return list(self.platforms)

    def Context(self, devices):
        self.maybe_fail("context")
        return FakeContext(self, devices)

    def CommandQueue(self, ctx, device):
        self.maybe_fail("queue")
        return FakeQueue(self, ctx, device)

    def Program(self, ctx, source):
        return FakeProgram(self, ctx, source)

    def Kernel(self, program, name):
        return FakeKernel(self, program, name)

    def ImageFormat(self, order, dtype):
        return (order, dtype)

    def create_image(self, ctx, flags, fmt, shape=None):
        self.maybe_fail("image")
        return FakeImage(self, ctx, flags, fmt, shape)

    def enqueue_nd_range_kernel(self, queue, kernel, global_size, local_size):
        self.maybe_fail("enqueue")
        self.launches.append((tuple(global_size), local_size))
        image = kernel.args[0]
        width, height = int(kernel.args[1]), int(kernel.args[2])
        assert global_size[0] == width * height
        image.data[:] = render_rgba(width, height,
                                    kernel.args[3], kernel.args[4],
                                    kernel.args[5], kernel.args[6],
                                    int(kernel.args[7]))

    def enqueue_copy(self, queue, dest, src, origin=None, region=None, is_blocking=True):
        self.maybe_fail("copy")
        self.copies.append((origin, region, is_blocking))
        dest[...] = src.data.reshape(dest.shape)


OPENCL_MODULES = (
    "devices.resolver",
    "backend.context",
    "backend.compiler",
    "backend.surface",
    "backend.dispatch",
    "backend.readback",
)


@pytest.fixture
def fake_cl(monkeypatch):
    fake = FakeCL()
    for mod in OPENCL_MODULES:
        monkeypatch.setattr(f"{mod}.cl", fake)
    return fake


@pytest.fixture
def good_source():
    from kernel_sources.loader import default_kernel_path
    return default_kernel_path().read_text()
