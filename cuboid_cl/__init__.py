"""Cuboid surface-area benchmark: OpenCL kernel versus sequential host code."""

__version__ = "0.1.0"

from .config import BenchmarkConfig
from .device import DeviceKind, DeviceSelector, SelectedDevice, select_device
from .pipeline import BenchmarkResult, run_benchmark

__all__ = [
    "BenchmarkConfig",
    "BenchmarkResult",
    "DeviceKind",
    "DeviceSelector",
    "SelectedDevice",
    "run_benchmark",
    "select_device",
]
