import sys

from .config import DEFAULT_SAMPLE


class Reporter:
    """Prints the benchmark report to ``stream``."""

    def __init__(self, stream=None, sample=DEFAULT_SAMPLE):
        self.stream = stream if stream is not None else sys.stdout
        self.sample = sample

    def _print(self, *args):
        print(*args, file=self.stream)

    def device(self, device):
        self._print(f"Device type: {device.kind.value}")
        self._print(f"Total compute units: {device.compute_units} compute units")
        self._print(f"Using device: {device.name} ({device.platform_name})")

    def timings(self, result):
        self._print()
        self._print(f"The OpenCL kernel ran in {result.accelerator_seconds:.6f} seconds")
        if result.device_seconds is not None:
            self._print(f"Device-side kernel time: {result.device_seconds:.6f} seconds")
        self._print(f"The sequential code ran in {result.reference_seconds:.6f} seconds")
        self._print()
        self._print(f"The sequential time is {result.speedup:.6f}X of the OpenCL time")
        self._print(f"Results match: {result.mismatches == 0}")
        self._print()

    def samples(self, result):
        a, b, c = result.inputs
        shown = min(self.sample, result.accelerator.size)
        for i in range(shown):
            self._print(
                f"a={a[i]}\tb={b[i]}\tc={c[i]}\t\t"
                f"opencl={result.accelerator[i]}\t\tseq={result.reference[i]}"
            )
        self._print(f"... {result.accelerator.size - shown} more items")

    def report(self, result):
        self.timings(result)
        self.samples(result)


def format_device_listing(entries):
    lines = []
    current = None
    for platform_name, device_name, type_name, compute_units in entries:
        if platform_name != current:
            lines.append(f"Platform: {platform_name}")
            current = platform_name
        lines.append(f"  Device: {device_name} ({type_name}, {compute_units} compute units)")
    return "\n".join(lines)
