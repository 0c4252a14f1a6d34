import time

import numpy as np
import pytest

from cuboid_cl.builder import build_kernel
from cuboid_cl.context import ExecutionContext
from cuboid_cl.dispatch import LaunchDescriptor, await_completion, bind_arguments, dispatch, launch
from cuboid_cl.errors import ArgBindError, LaunchError, WaitError
from cuboid_cl.kernels import CUBOID_AREA_ENTRY, CUBOID_AREA_SOURCE
from cuboid_cl.transfer import AccessMode, allocate, download, upload


def prepare(ctx, inputs, local_size=None):
    built = build_kernel(ctx, CUBOID_AREA_SOURCE, CUBOID_AREA_ENTRY)
    d_inputs = [allocate(ctx, x.nbytes, AccessMode.READ_ONLY) for x in inputs]
    d_result = allocate(ctx, inputs[0].nbytes, AccessMode.WRITE_ONLY)
    for buf, host in zip(d_inputs, inputs):
        upload(ctx, buf, host)
    return LaunchDescriptor(built, (*d_inputs, d_result), inputs[0].size, local_size), d_result


def test_scenario_on_device(ctx, scenario):
    inputs, expected = scenario
    descriptor, d_result = prepare(ctx, inputs)

    timing = dispatch(ctx, descriptor)

    result = np.empty_like(expected)
    download(ctx, d_result, result)
    np.testing.assert_array_equal(result, expected)
    assert timing.seconds > 0
    assert timing.runs == (timing.seconds,)
    assert timing.device_seconds is None


def test_binds_inputs_then_output_in_order(ctx, scenario):
    inputs, _ = scenario
    descriptor, d_result = prepare(ctx, inputs)
    bind_arguments(descriptor.kernel.kernel, descriptor.buffers, ctx.runtime)
    args = descriptor.kernel.kernel.args
    assert [args[i] for i in range(4)] == [b.handle for b in descriptor.buffers]
    assert args[3] is d_result.handle


def test_argument_count_mismatch(ctx, scenario, runtime):
    inputs, _ = scenario
    descriptor, _ = prepare(ctx, inputs)
    with pytest.raises(ArgBindError):
        bind_arguments(descriptor.kernel.kernel, descriptor.buffers[:3], runtime)
    assert "launch" not in runtime.log


def test_bind_failure_aborts_before_launch(ctx, scenario, runtime):
    inputs, _ = scenario
    descriptor, _ = prepare(ctx, inputs)
    runtime.fail_on("set_arg", code=-38)
    with pytest.raises(ArgBindError) as excinfo:
        dispatch(ctx, descriptor)
    assert excinfo.value.code == -38
    assert "launch" not in runtime.log


def test_launch_uses_full_range_and_default_local_size(ctx, scenario, runtime, monkeypatch):
    inputs, _ = scenario
    descriptor, _ = prepare(ctx, inputs)
    calls = []
    original = runtime.enqueue_nd_range_kernel

    def spy(queue, kernel, global_size, local_size):
        calls.append((global_size, local_size))
        return original(queue, kernel, global_size, local_size)

    monkeypatch.setattr(runtime, "enqueue_nd_range_kernel", spy)
    dispatch(ctx, descriptor)
    assert calls == [((4,), None)]


def test_explicit_local_size(ctx, scenario, runtime):
    inputs, expected = scenario
    descriptor, d_result = prepare(ctx, inputs, local_size=2)
    dispatch(ctx, descriptor)
    result = np.empty_like(expected)
    download(ctx, d_result, result)
    np.testing.assert_array_equal(result, expected)


def test_launch_failure(ctx, scenario, runtime):
    inputs, _ = scenario
    descriptor, _ = prepare(ctx, inputs)
    runtime.fail_on("launch", code=-54)
    with pytest.raises(LaunchError):
        dispatch(ctx, descriptor)


def test_wait_failure(ctx, scenario, runtime):
    inputs, _ = scenario
    descriptor, _ = prepare(ctx, inputs)
    bind_arguments(descriptor.kernel.kernel, descriptor.buffers, runtime)
    launch(ctx, descriptor)
    runtime.fail_on("finish", code=-5)
    with pytest.raises(WaitError):
        await_completion(ctx)
    del runtime.failures["finish"]


def test_await_completion_drains_whole_queue(ctx, scenario):
    inputs, _ = scenario
    descriptor, _ = prepare(ctx, inputs)
    bind_arguments(descriptor.kernel.kernel, descriptor.buffers, ctx.runtime)
    launch(ctx, descriptor)
    launch(ctx, descriptor)
    assert len(ctx.queue.pending) == 2
    await_completion(ctx)
    assert ctx.queue.pending == []


def test_timed_interval_excludes_build_and_upload(runtime, device, scenario):
    runtime.build_delay = 0.2
    runtime.copy_delay = 0.2
    runtime.kernel_delay = 0.01
    inputs, _ = scenario

    with ExecutionContext(device, runtime) as ctx:
        started = time.perf_counter()
        descriptor, _ = prepare(ctx, inputs)
        timing = dispatch(ctx, descriptor)
        total = time.perf_counter() - started

    assert total >= 0.8
    assert 0.01 <= timing.seconds < 0.2


def test_warmup_and_repeat(ctx, scenario, runtime):
    inputs, _ = scenario
    descriptor, _ = prepare(ctx, inputs)
    timing = dispatch(ctx, descriptor, warmup=2, repeat=3)
    assert runtime.log.count("launch") == 5
    assert len(timing.runs) == 3
    assert timing.seconds == pytest.approx(sum(timing.runs) / 3)


def test_profiling_reports_device_time(runtime, device, scenario):
    runtime.kernel_delay = 0.01
    inputs, _ = scenario
    with ExecutionContext(device, runtime, profiling=True) as ctx:
        descriptor, _ = prepare(ctx, inputs)
        timing = dispatch(ctx, descriptor)
    assert timing.device_seconds >= 0.01
