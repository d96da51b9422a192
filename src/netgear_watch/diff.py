"""Compare attached device snapshots."""

from collections.abc import Sequence

from .models import AttachedDevice, ChangedDevice, DeviceChange


def _by_mac(devices: Sequence[AttachedDevice]) -> dict[str, AttachedDevice]:
    """Key a snapshot by MAC address; a repeated MAC keeps its last record."""
    return {device.mac: device for device in devices}


def get_changed_devices(
    old_devices: Sequence[AttachedDevice], new_devices: Sequence[AttachedDevice]
) -> list[ChangedDevice]:
    """Determine which devices were added or removed between two snapshots.

    Devices are matched by MAC address only; a device whose name, IP or
    signal changed is not reported. A MAC listed more than once in a snapshot
    yields at most one event, carrying the last record for that MAC.
    Additions come first, in the order of ``new_devices``, followed by
    removals in the order of ``old_devices``.
    """
    old = _by_mac(old_devices)
    new = _by_mac(new_devices)

    changes = [
        ChangedDevice(device, DeviceChange.ADDED)
        for mac, device in new.items()
        if mac not in old
    ]
    changes.extend(
        ChangedDevice(device, DeviceChange.REMOVED)
        for mac, device in old.items()
        if mac not in new
    )
    return changes
