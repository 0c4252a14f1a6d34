"""Command line entry point: ``cuboid-cl`` / ``python -m cuboid_cl``."""

import argparse
import logging
import sys

import pyopencl as cl

from .config import (
    DEFAULT_HIGH,
    DEFAULT_LENGTH,
    DEFAULT_LOW,
    DEFAULT_SAMPLE,
    DEVICE_TYPES,
    BenchmarkConfig,
)
from .device import list_devices
from .errors import BenchmarkError, CompileError
from .pipeline import run_benchmark
from .report import Reporter, format_device_listing

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_parser():
    parser = argparse.ArgumentParser(
        prog="cuboid-cl",
        description="Compute cuboid surface areas with OpenCL and compare "
                    "against sequential host code.",
    )
    parser.add_argument("-n", "--length", type=int, default=DEFAULT_LENGTH,
                        help="number of cuboids (default: %(default)s)")
    parser.add_argument("--low", type=int, default=DEFAULT_LOW,
                        help="smallest edge length (default: %(default)s)")
    parser.add_argument("--high", type=int, default=DEFAULT_HIGH,
                        help="largest edge length, inclusive (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=None,
                        help="random seed for the input arrays")
    parser.add_argument("--device-type", choices=DEVICE_TYPES, default="gpu",
                        help="device class to look for (default: %(default)s)")
    parser.add_argument("--local-size", type=int, default=None,
                        help="work-group size; the runtime picks one when omitted")
    parser.add_argument("--sample", type=int, default=DEFAULT_SAMPLE,
                        help="result rows to print (default: %(default)s)")
    parser.add_argument("--warmup", type=int, default=0,
                        help="untimed launches before timing (default: %(default)s)")
    parser.add_argument("--repeat", type=int, default=1,
                        help="timed launches to average (default: %(default)s)")
    parser.add_argument("--profile", action="store_true",
                        help="also report device-side time from profiling events")
    parser.add_argument("--list-devices", action="store_true",
                        help="list OpenCL platforms and devices, then exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log pipeline stages to stderr")
    return parser


def config_from_args(args):
    return BenchmarkConfig(
        length=args.length,
        low=args.low,
        high=args.high,
        seed=args.seed,
        device_type=args.device_type,
        local_size=args.local_size,
        sample=args.sample,
        warmup=args.warmup,
        repeat=args.repeat,
        profile=args.profile,
    )


def setup_logging(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None, runtime=cl, stdout=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    stdout = stdout if stdout is not None else sys.stdout

    try:
        if args.list_devices:
            print(format_device_listing(list_devices(runtime)), file=stdout)
            return EXIT_SUCCESS

        reporter = Reporter(stdout, sample=args.sample)
        result = run_benchmark(config_from_args(args), runtime=runtime, reporter=reporter)
        reporter.report(result)
        result.verify()
    except CompileError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(e.diagnostic_log, file=stdout)
        logger.debug("Kernel build failed", exc_info=True)
        return EXIT_FAILURE
    except BenchmarkError as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.debug("Benchmark aborted", exc_info=True)
        return EXIT_FAILURE
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
