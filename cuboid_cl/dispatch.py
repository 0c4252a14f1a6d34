"""Kernel argument binding, N-range launch and launch-to-completion timing."""

import dataclasses
import logging
import time
from typing import Optional, Tuple

from .errors import ArgBindError, LaunchError, WaitError

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class LaunchDescriptor:
    """One launch: kernel, buffers in argument order, and the 1-D range."""

    kernel: object
    buffers: Tuple
    global_size: int
    # None leaves the work-group size to the runtime
    local_size: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class DispatchTiming:
    seconds: float
    runs: Tuple[float, ...]
    device_seconds: Optional[float] = None


def bind_arguments(kernel, buffers, runtime):
    """Bind buffers positionally; every kernel argument must be bound."""
    try:
        num_args = kernel.get_info(runtime.kernel_info.NUM_ARGS)
    except runtime.Error as e:
        raise ArgBindError.from_cl("Querying kernel arguments", e) from e
    if num_args != len(buffers):
        raise ArgBindError(
            f"Setting kernel arguments: kernel takes {num_args}, got {len(buffers)}"
        )
    for index, buffer in enumerate(buffers):
        try:
            kernel.set_arg(index, buffer.handle)
        except runtime.Error as e:
            raise ArgBindError.from_cl(f"Setting kernel argument {index}", e) from e


def launch(ctx, descriptor):
    """Enqueue one launch over the whole range and return its event."""
    runtime = ctx.runtime
    global_size = (descriptor.global_size,)
    local_size = None if descriptor.local_size is None else (descriptor.local_size,)
    try:
        return runtime.enqueue_nd_range_kernel(
            ctx.queue, descriptor.kernel.kernel, global_size, local_size
        )
    except runtime.Error as e:
        raise LaunchError.from_cl("Enqueueing kernel", e) from e


def await_completion(ctx):
    """Block until every command enqueued so far has retired."""
    try:
        ctx.queue.finish()
    except ctx.runtime.Error as e:
        raise WaitError.from_cl("Waiting for kernel to finish", e) from e


def _event_seconds(event, runtime):
    try:
        return (event.profile.end - event.profile.start) * 1e-9
    except runtime.Error as e:
        raise WaitError.from_cl("Reading kernel profiling info", e) from e


def dispatch(ctx, descriptor, warmup=0, repeat=1):
    """Bind, launch and time the kernel.

    Each timed interval runs from just before the enqueue to just after the
    queue drains, so compilation and transfers never count. With ``repeat``
    above one the mean of the runs is reported.
    """
    runtime = ctx.runtime
    bind_arguments(descriptor.kernel.kernel, descriptor.buffers, runtime)

    for _ in range(warmup):
        launch(ctx, descriptor)
        await_completion(ctx)

    runs = []
    device_runs = []
    for _ in range(repeat):
        start = time.perf_counter()
        event = launch(ctx, descriptor)
        await_completion(ctx)
        runs.append(time.perf_counter() - start)
        if ctx.profiling:
            device_runs.append(_event_seconds(event, runtime))

    seconds = sum(runs) / len(runs)
    device_seconds = sum(device_runs) / len(device_runs) if device_runs else None
    logger.info("Kernel ran in %.6f seconds (mean of %d)", seconds, len(runs))
    return DispatchTiming(seconds=seconds, runs=tuple(runs), device_seconds=device_seconds)
