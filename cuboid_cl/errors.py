"""Failures raised by the benchmark pipeline.

Every OpenCL call is checked where it is made and translated into one of
these. ``code`` carries the underlying OpenCL status code when there is one.
"""


class BenchmarkError(Exception):
    """Base class for everything that aborts a benchmark run."""

    def __init__(self, description, code=None):
        super().__init__(description)
        self.description = description
        self.code = code

    def __str__(self):
        if self.code is None:
            return self.description
        return f"{self.description} (status {self.code})"

    @classmethod
    def from_cl(cls, description, exc, **kwargs):
        """Wrap a pyopencl error, keeping its status code and message."""
        return cls(f"{description}: {exc}", code=status_code(exc), **kwargs)


class ConfigError(BenchmarkError):
    pass


class DiscoveryError(BenchmarkError):
    pass


class NoPlatformError(DiscoveryError):
    pass


class NoMatchingDeviceError(DiscoveryError):
    pass


class DeviceQueryError(BenchmarkError):
    pass


class ContextError(BenchmarkError):
    pass


class ContextCreationError(ContextError):
    pass


class QueueCreationError(ContextError):
    pass


class CompileError(BenchmarkError):
    """Kernel source failed to build. ``diagnostic_log`` is the compiler output."""

    def __init__(self, description, code=None, diagnostic_log=""):
        super().__init__(description, code)
        self.diagnostic_log = diagnostic_log


class EntryPointNotFound(BenchmarkError):
    pass


class AllocationError(BenchmarkError):
    pass


class TransferError(BenchmarkError):
    pass


class ReadbackError(TransferError):
    pass


class ArgBindError(BenchmarkError):
    pass


class LaunchError(BenchmarkError):
    pass


class WaitError(BenchmarkError):
    pass


class VerificationError(BenchmarkError):
    pass


def status_code(exc):
    """Return the OpenCL status code attached to a pyopencl error, if any."""
    code = getattr(exc, "code", None)
    if callable(code):
        code = code()
    return code
