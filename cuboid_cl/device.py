"""Platform enumeration and first-match device selection."""

import dataclasses
import enum
import logging

import pyopencl as cl

from .errors import (
    DeviceQueryError,
    DiscoveryError,
    NoMatchingDeviceError,
    NoPlatformError,
    status_code,
)

logger = logging.getLogger(__name__)

# cl_khr_icd status for "no installed platform"
PLATFORM_NOT_FOUND_KHR = -1001


class DeviceKind(enum.Enum):
    GPU = "GPU"
    CPU = "CPU"
    OTHER = "Not CPU nor GPU"


@dataclasses.dataclass(frozen=True)
class SelectedDevice:
    handle: object
    name: str
    platform_name: str
    kind: DeviceKind
    compute_units: int


def classify(type_bits, runtime=cl):
    if type_bits & runtime.device_type.GPU:
        return DeviceKind.GPU
    if type_bits & runtime.device_type.CPU:
        return DeviceKind.CPU
    return DeviceKind.OTHER


def get_platforms(runtime=cl):
    """Enumerate installed platforms, failing when there are none."""
    try:
        platforms = runtime.get_platforms()
    except runtime.Error as e:
        if status_code(e) == PLATFORM_NOT_FOUND_KHR:
            raise NoPlatformError("Found 0 platforms", code=status_code(e)) from e
        raise DiscoveryError.from_cl("Finding platforms", e) from e
    if not platforms:
        raise NoPlatformError("Found 0 platforms")
    return platforms


def describe_device(handle, platform_name, runtime=cl):
    """Read the type and compute-unit count of a device handle."""
    try:
        type_bits = handle.get_info(runtime.device_info.TYPE)
    except runtime.Error as e:
        raise DeviceQueryError.from_cl("Failed to access device type information", e) from e
    try:
        compute_units = handle.get_info(runtime.device_info.MAX_COMPUTE_UNITS)
    except runtime.Error as e:
        raise DeviceQueryError.from_cl(
            "Failed to access device number of compute units", e
        ) from e
    return SelectedDevice(
        handle=handle,
        name=handle.name.strip(),
        platform_name=platform_name.strip(),
        kind=classify(type_bits, runtime),
        compute_units=int(compute_units),
    )


class DeviceSelector:
    """Picks the first device of a requested type across all platforms.

    The policy is first match in platform enumeration order, not best match.
    Selection only acquires a handle; nothing is allocated on the device.
    """

    def __init__(self, runtime=cl):
        self.runtime = runtime

    def select(self, preferred_type, type_name=None):
        runtime = self.runtime
        platforms = get_platforms(runtime)
        logger.debug("Found %d platform(s)", len(platforms))

        for platform in platforms:
            try:
                devices = platform.get_devices(device_type=preferred_type)
            except runtime.Error as e:
                logger.debug(
                    "Platform %s has no matching device (status %s)",
                    platform.name, status_code(e),
                )
                continue
            if devices:
                device = describe_device(devices[0], platform.name, runtime)
                logger.info(
                    "Selected %s on %s (%s, %d compute units)",
                    device.name, device.platform_name, device.kind.value,
                    device.compute_units,
                )
                return device

        if type_name is None:
            type_name = runtime.device_type.to_string(preferred_type, "type %d")
        raise NoMatchingDeviceError(
            f"Finding a device: no {type_name} device on {len(platforms)} platform(s)"
        )


def select_device(preferred_type, runtime=cl, type_name=None):
    return DeviceSelector(runtime).select(preferred_type, type_name)


def list_devices(runtime=cl):
    """Return (platform name, device name, device kind, compute units) for every device."""
    entries = []
    for platform in get_platforms(runtime):
        try:
            devices = platform.get_devices()
        except runtime.Error as e:
            logger.debug("Skipping platform %s (status %s)", platform.name, status_code(e))
            continue
        for dev in devices:
            entries.append((
                platform.name.strip(),
                dev.name.strip(),
                classify(dev.type, runtime).value,
                dev.max_compute_units,
            ))
    return entries
