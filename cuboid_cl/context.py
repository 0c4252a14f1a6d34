"""Compute context and in-order command queue for one benchmark run."""

import logging

import pyopencl as cl

from .errors import ContextCreationError, QueueCreationError, WaitError

logger = logging.getLogger(__name__)


def create_context(device, runtime=cl):
    try:
        return runtime.Context([device])
    except runtime.Error as e:
        raise ContextCreationError.from_cl("Creating context", e) from e


def create_queue(context, device, profiling=False, runtime=cl):
    """Create an in-order queue; profiling only adds event timestamps."""
    properties = runtime.command_queue_properties.PROFILING_ENABLE if profiling else 0
    try:
        return runtime.CommandQueue(context, device, properties=properties)
    except runtime.Error as e:
        raise QueueCreationError.from_cl("Creating command queue", e) from e


def _release(handle, label):
    # looked up on the type: pyopencl.Program turns unknown attributes into kernels
    release = getattr(type(handle), "release", None)
    if release is not None:
        logger.debug("Releasing %s", label)
        release(handle)
    else:
        logger.debug("Dropping %s", label)


class ExecutionContext:
    """Owns the context, the queue and every device object created for a run.

    Objects registered with :meth:`own` are let go last-in first-out when
    the ``with`` block exits, so buffers go before the kernel, the kernel
    before its program, and the program before the queue and context.
    Buffers are released explicitly; pyopencl frees the other objects when
    their last reference is dropped.
    """

    def __init__(self, device, runtime=cl, profiling=False):
        self.device = device
        self.runtime = runtime
        self.profiling = profiling
        self.context = None
        self.queue = None
        self._owned = []

    def __enter__(self):
        try:
            self.context = self.own(create_context(self.device.handle, self.runtime), "context")
            self.queue = self.own(
                create_queue(self.context, self.device.handle, self.profiling, self.runtime),
                "queue",
            )
        except BaseException:
            self.close(unwinding=True)
            raise
        logger.debug("Context and queue ready on %s", self.device.name)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close(unwinding=exc_type is not None)
        return False

    def own(self, handle, label):
        """Register a device object for teardown and return it."""
        self._owned.append((label, handle))
        return handle

    def close(self, unwinding=False):
        """Let go of every owned object, newest first.

        A queue that fails to drain raises WaitError once everything has
        been dropped, unless another error is already propagating.
        """
        drain_error = None
        while self._owned:
            label, handle = self._owned.pop()
            if handle is self.queue:
                self.queue = None
                try:
                    handle.finish()
                except self.runtime.Error as e:
                    if unwinding:
                        logger.warning("Could not drain command queue during teardown: %s", e)
                    else:
                        drain_error = e
            elif handle is self.context:
                self.context = None
            _release(handle, label)
            del handle
        if drain_error is not None:
            raise WaitError.from_cl("Finishing command queue", drain_error) from drain_error
