"""Device buffers and blocking host<->device copies.

Host arrays and device buffers are only consistent at the explicit
``upload``/``download`` points. Both copies block until the queue reports
the transfer complete, and always move the whole buffer.
"""

import dataclasses
import enum
import logging

from .errors import AllocationError, ReadbackError, TransferError

logger = logging.getLogger(__name__)


class AccessMode(enum.Enum):
    READ_ONLY = "READ_ONLY"
    WRITE_ONLY = "WRITE_ONLY"

    def flags(self, runtime):
        return getattr(runtime.mem_flags, self.value)


@dataclasses.dataclass(frozen=True)
class DeviceBuffer:
    handle: object
    nbytes: int
    access: AccessMode
    label: str = "buffer"


def allocate(ctx, nbytes, access, label="buffer"):
    runtime = ctx.runtime
    try:
        handle = runtime.Buffer(ctx.context, access.flags(runtime), size=nbytes)
    except runtime.Error as e:
        raise AllocationError.from_cl(f"Creating buffer {label}", e) from e
    logger.debug("Allocated %s: %d bytes, %s", label, nbytes, access.value)
    return DeviceBuffer(ctx.own(handle, label), nbytes, access, label)


def _check_size(buffer, host_array, error_cls, action):
    if host_array.nbytes != buffer.nbytes:
        raise error_cls(
            f"{action} {buffer.label}: host array is {host_array.nbytes} bytes, "
            f"buffer is {buffer.nbytes} bytes"
        )


def upload(ctx, buffer, host_array):
    """Copy ``host_array`` into ``buffer``; returns once the copy has completed."""
    runtime = ctx.runtime
    _check_size(buffer, host_array, TransferError, "Copying to")
    try:
        runtime.enqueue_copy(ctx.queue, buffer.handle, host_array, is_blocking=True)
    except runtime.Error as e:
        raise TransferError.from_cl(f"Copying to device at {buffer.label}", e) from e
    logger.debug("Uploaded %s", buffer.label)


def download(ctx, buffer, host_array):
    """Copy ``buffer`` into ``host_array``; returns once the copy has completed."""
    runtime = ctx.runtime
    _check_size(buffer, host_array, ReadbackError, "Reading")
    try:
        runtime.enqueue_copy(ctx.queue, host_array, buffer.handle, is_blocking=True)
    except runtime.Error as e:
        raise ReadbackError.from_cl(f"Failed to read {buffer.label}", e) from e
    logger.debug("Downloaded %s", buffer.label)
