"""End-to-end benchmark run: generate, select, build, transfer, dispatch, compare."""

import dataclasses
import logging
from typing import Optional, Tuple

import numpy as np
import pyopencl as cl

from .builder import build_kernel
from .config import BenchmarkConfig, device_type_flag
from .context import ExecutionContext
from .device import SelectedDevice, select_device
from .dispatch import DispatchTiming, LaunchDescriptor, dispatch
from .errors import VerificationError
from .inputs import generate_inputs
from .kernels import CUBOID_AREA_ENTRY, CUBOID_AREA_SOURCE
from .reference import timed_reference
from .transfer import AccessMode, allocate, download, upload

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class BenchmarkResult:
    device: SelectedDevice
    inputs: Tuple[np.ndarray, np.ndarray, np.ndarray]
    accelerator: np.ndarray
    reference: np.ndarray
    timing: DispatchTiming
    reference_seconds: float

    @property
    def accelerator_seconds(self):
        return self.timing.seconds

    @property
    def device_seconds(self) -> Optional[float]:
        return self.timing.device_seconds

    @property
    def speedup(self):
        return self.reference_seconds / self.accelerator_seconds

    @property
    def mismatches(self):
        return int(np.count_nonzero(self.accelerator != self.reference))

    def verify(self):
        """Raise VerificationError unless both paths agree on every element."""
        mismatches = self.mismatches
        if mismatches:
            raise VerificationError(
                f"{mismatches} of {self.accelerator.size} results differ between "
                "the OpenCL and sequential code"
            )
        return self


def run_on_device(ctx, inputs, source=CUBOID_AREA_SOURCE, entry_name=CUBOID_AREA_ENTRY,
                  local_size=None, warmup=0, repeat=1):
    """Build the kernel, move the inputs over, run it, and read the result back."""
    built = build_kernel(ctx, source, entry_name)

    d_inputs = [
        allocate(ctx, host.nbytes, AccessMode.READ_ONLY, f"d_{name}")
        for name, host in zip("abc", inputs)
    ]
    result = np.empty_like(inputs[0])
    d_result = allocate(ctx, result.nbytes, AccessMode.WRITE_ONLY, "d_result")

    for buffer, host in zip(d_inputs, inputs):
        upload(ctx, buffer, host)

    descriptor = LaunchDescriptor(
        kernel=built,
        buffers=(*d_inputs, d_result),
        global_size=result.size,
        local_size=local_size,
    )
    timing = dispatch(ctx, descriptor, warmup=warmup, repeat=repeat)

    download(ctx, d_result, result)
    return result, timing


def run_benchmark(config=None, runtime=cl, reporter=None):
    """Run the whole benchmark and return a BenchmarkResult.

    ``reporter`` is told about the device as soon as it is selected, so
    device details are printed even if a later stage fails.
    """
    config = (config or BenchmarkConfig()).validate()
    inputs = generate_inputs(config.length, config.low, config.high, config.seed)

    device = select_device(
        device_type_flag(config.device_type, runtime), runtime, type_name=config.device_type
    )
    if reporter is not None:
        reporter.device(device)

    with ExecutionContext(device, runtime, profiling=config.profile) as ctx:
        accelerator, timing = run_on_device(
            ctx, inputs,
            local_size=config.local_size,
            warmup=config.warmup,
            repeat=config.repeat,
        )
    logger.debug("Device resources released")

    reference, reference_seconds = timed_reference(*inputs)
    logger.info("Sequential code ran in %.6f seconds", reference_seconds)

    return BenchmarkResult(
        device=device,
        inputs=inputs,
        accelerator=accelerator,
        reference=reference,
        timing=timing,
        reference_seconds=reference_seconds,
    )
