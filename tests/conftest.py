import numpy as np
import pytest

from cuboid_cl.context import ExecutionContext
from cuboid_cl.device import select_device
from fake_runtime import DeviceType, FakeRuntime


@pytest.fixture
def runtime():
    return FakeRuntime()


@pytest.fixture
def device(runtime):
    return select_device(DeviceType.GPU, runtime)


@pytest.fixture
def ctx(runtime, device):
    with ExecutionContext(device, runtime) as ctx:
        yield ctx


@pytest.fixture
def scenario():
    """The four-cuboid example with a known answer."""
    a = np.array([1, 2, 3, 4], dtype=np.int32)
    b = np.array([1, 1, 1, 1], dtype=np.int32)
    c = np.array([2, 2, 2, 2], dtype=np.int32)
    expected = np.array([10, 16, 22, 28], dtype=np.int32)
    return (a, b, c), expected
