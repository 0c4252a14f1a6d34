import dataclasses
from typing import Optional

import pyopencl as cl

from .errors import ConfigError

# 75 Mi cuboids
DEFAULT_LENGTH = 1024 * 1024 * 75
DEFAULT_LOW = 1
DEFAULT_HIGH = 9
DEFAULT_SAMPLE = 100

INT32_MAX = 2**31 - 1

DEVICE_TYPES = ("gpu", "cpu", "accelerator", "default", "all")


def device_type_flag(name, runtime=cl):
    """Map a device type name to the runtime's ``device_type`` bit."""
    try:
        return getattr(runtime.device_type, name.upper())
    except AttributeError:
        raise ConfigError(f"Unknown device type {name!r}") from None


@dataclasses.dataclass(frozen=True)
class BenchmarkConfig:
    length: int = DEFAULT_LENGTH
    low: int = DEFAULT_LOW
    high: int = DEFAULT_HIGH
    seed: Optional[int] = None
    device_type: str = "gpu"
    # None lets the OpenCL runtime pick the work-group size
    local_size: Optional[int] = None
    sample: int = DEFAULT_SAMPLE
    warmup: int = 0
    repeat: int = 1
    profile: bool = False

    def validate(self):
        """Reject configurations the pipeline cannot run correctly."""
        if self.length < 1:
            raise ConfigError(f"length must be positive, got {self.length}")
        if self.low < 1 or self.high < self.low:
            raise ConfigError(
                f"value range must satisfy 1 <= low <= high, got [{self.low}, {self.high}]"
            )
        # largest surface area is 2 * 3 * high * high
        if 6 * self.high * self.high > INT32_MAX:
            raise ConfigError(f"high={self.high} overflows a 32-bit int result")
        if self.device_type not in DEVICE_TYPES:
            raise ConfigError(
                f"device type must be one of {', '.join(DEVICE_TYPES)}, got {self.device_type!r}"
            )
        if self.local_size is not None:
            if self.local_size < 1:
                raise ConfigError(f"local size must be positive, got {self.local_size}")
            if self.length % self.local_size:
                raise ConfigError(
                    f"length {self.length} is not a multiple of local size {self.local_size}"
                )
        if self.sample < 0:
            raise ConfigError(f"sample must not be negative, got {self.sample}")
        if self.warmup < 0:
            raise ConfigError(f"warmup must not be negative, got {self.warmup}")
        if self.repeat < 1:
            raise ConfigError(f"repeat must be at least 1, got {self.repeat}")
        return self
