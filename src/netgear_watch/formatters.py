"""Formatting functions for attached devices and change events."""

from .config import KnownDevices
from .display import colorize
from .models import AttachedDevice, ChangedDevice, DeviceChange

# Header and cell renderer for each column of the devices table
DEVICE_COLUMNS = [
    ("MAC Address", lambda d: d.mac),
    ("IP Address", lambda d: str(d.ip) if d.ip is not None else "-"),
    ("Type", lambda d: d.type),
    ("Signal", lambda d: str(d.signal)),
    ("Link Rate", lambda d: str(d.link_rate)),
]
COLUMN_GAP = "  "


def device_to_dict(device: AttachedDevice) -> dict:
    """Convert a device to a JSON-serializable dictionary."""
    return {
        "ip": str(device.ip) if device.ip is not None else None,
        "name": device.name,
        "mac": device.mac,
        "type": device.type,
        "link_rate": device.link_rate,
        "signal": device.signal,
    }


def change_to_dict(change: ChangedDevice) -> dict:
    """Convert a change event to a JSON-serializable dictionary."""
    return {"change": change.change.value, "device": device_to_dict(change.device)}


def _alias(device: AttachedDevice, known_devices: KnownDevices | None) -> str | None:
    if known_devices is None:
        return None
    return known_devices.get_alias(device.mac, device.name)


def device_label(
    device: AttachedDevice, known_devices: KnownDevices | None = None
) -> str:
    """Name shown for a device in the table.

    Known devices show their alias, followed by the router-reported name in
    parentheses when the two differ. Unnamed devices fall back to the MAC.
    """
    alias = _alias(device, known_devices)
    if alias is None:
        return device.name or device.mac
    if device.name and device.name != alias:
        return f"{alias} ({device.name})"
    return alias


def format_devices(
    devices: list[AttachedDevice], known_devices: KnownDevices | None = None
) -> str:
    """Format attached devices as a table, known devices green, others red."""
    if not devices:
        return "No attached devices."

    headers = ["Device"] + [header for header, _ in DEVICE_COLUMNS]
    rows = [
        [device_label(device, known_devices)]
        + [render(device) for _, render in DEVICE_COLUMNS]
        for device in devices
    ]
    widths = [
        max(len(cell) for cell in column) for column in zip(headers, *rows)
    ]

    def line(cells: list[str]) -> str:
        return COLUMN_GAP.join(
            cell.ljust(width) for cell, width in zip(cells, widths)
        ).rstrip()

    lines = [line(headers), line(["-" * width for width in widths])]
    for device, row in zip(devices, rows):
        known = _alias(device, known_devices) is not None
        lines.append(colorize(line(row), "green" if known else "red"))
    return "\n".join(lines)


def format_change(
    change: ChangedDevice, known_devices: KnownDevices | None = None
) -> str:
    """Format a single change event as one line."""
    device = change.device
    alias = _alias(device, known_devices)
    label = f"{device.mac} ({alias})" if alias else device.mac

    if change.change is DeviceChange.ADDED:
        return colorize(f"New device added: {label}", "green")
    return colorize(f"Device removed: {label}", "red")
