import dataclasses
import logging

from .errors import CompileError, EntryPointNotFound, status_code

logger = logging.getLogger(__name__)

# bytes of compiler output surfaced with a CompileError
BUILD_LOG_LIMIT = 2048


@dataclasses.dataclass(frozen=True)
class BuiltKernel:
    program: object
    kernel: object
    entry_name: str


def _bounded(log):
    return log.encode("utf-8")[:BUILD_LOG_LIMIT].decode("utf-8", "ignore")


def build_kernel(ctx, source, entry_name):
    """Compile ``source`` for the context's device and derive ``entry_name``.

    Compilation is two steps, program creation then build. A failed build
    raises CompileError carrying the compiler log; a missing entry point
    raises EntryPointNotFound.
    """
    runtime = ctx.runtime
    device = ctx.device.handle

    try:
        program = ctx.own(runtime.Program(ctx.context, source), "program")
    except runtime.Error as e:
        raise CompileError.from_cl(
            "Creating program", e, diagnostic_log=_bounded(str(e))
        ) from e

    try:
        # bypass pyopencl's on-disk binary cache; every run compiles from source
        program.build(devices=[device], cache_dir=False)
    except runtime.Error as e:
        log = _bounded(str(e).strip())
        logger.debug("Build failed for %s:\n%s", entry_name, log)
        raise CompileError(
            "Failed to build program executable",
            code=status_code(e),
            diagnostic_log=log,
        ) from e
    logger.debug("Program built for %s", ctx.device.name)

    try:
        kernel = ctx.own(runtime.Kernel(program, entry_name), "kernel")
    except runtime.Error as e:
        raise EntryPointNotFound.from_cl(f"Creating kernel {entry_name!r}", e) from e

    return BuiltKernel(program=program, kernel=kernel, entry_name=entry_name)
