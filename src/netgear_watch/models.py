"""Data models for the Netgear device watcher."""

from dataclasses import dataclass
from enum import Enum
from ipaddress import IPv4Address, IPv6Address


class RouterError(Exception):
    """Base exception for router errors."""

    pass


class TransportError(RouterError):
    """Raised when the router cannot be reached.

    The underlying socket or URL error is chained as ``__cause__``.
    """

    pass


class DecodeError(RouterError):
    """Raised when a SOAP response envelope cannot be decoded."""

    pass


class ResponseCodeError(RouterError):
    """Raised when the router answers with a nonzero ResponseCode."""

    def __init__(self, message: str, code: int):
        super().__init__(message)
        self.code = code


class AuthFailedError(ResponseCodeError):
    """Raised when the router rejects a login request."""

    def __init__(self, code: int):
        super().__init__(f"Unable to login, got status code {code}", code)


class FetchFailedError(ResponseCodeError):
    """Raised when the router rejects an attached devices request."""

    def __init__(self, code: int):
        super().__init__(f"Unable to get devices, got status code {code}", code)


class RecordError(RouterError):
    """Base exception for errors in the attached devices payload."""

    pass


class MalformedRecordError(RecordError):
    """Raised when a device record does not have the expected fields."""

    def __init__(self, record: str):
        super().__init__(f"Device string does not contain enough parts: {record!r}")
        self.record = record


class InvalidAddressError(RecordError):
    """Raised when a device record carries an unparsable MAC address."""

    def __init__(self, value: str):
        super().__init__(f"Invalid MAC address: {value!r}")
        self.value = value


class InvalidNumberError(RecordError):
    """Raised when a numeric device field is neither empty nor an integer."""

    def __init__(self, value: str):
        super().__init__(f"Invalid number: {value!r}")
        self.value = value


@dataclass(frozen=True)
class AttachedDevice:
    """A device attached to the router."""

    ip: IPv4Address | IPv6Address | None
    name: str
    mac: str
    type: str
    link_rate: int = 0
    signal: int = 0


class DeviceChange(Enum):
    """The change in a device's attached status."""

    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangedDevice:
    """A device that was added to or removed from the network."""

    device: AttachedDevice
    change: DeviceChange
