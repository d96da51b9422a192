"""Parsing utilities for router SOAP responses.

The router answers every SOAP action with an envelope holding a numeric
``ResponseCode``. The attached devices action additionally returns the device
list as a flat string rather than structured XML::

    <count>@<device>@<device>...

where each device is eight ``;`` separated positional fields::

    0       1   2     3    4     5       6          7
    <idx>;<ip>;<name>;<mac>;<type>;<signal>;<link rate>;<access control>
"""

import ipaddress
import re
import xml.etree.ElementTree as ET
from ipaddress import IPv4Address, IPv6Address

from .models import (
    AttachedDevice,
    DecodeError,
    InvalidAddressError,
    InvalidNumberError,
    MalformedRecordError,
)

DEVICE_SEPARATOR = "@"
FIELD_SEPARATOR = ";"
FIELD_COUNT = 8

# Length of the "<count>@" prefix in front of the device list
_COUNT_PREFIX_LENGTH = 2

# Hardware addresses may be EUI-48, EUI-64 or 20 octet InfiniBand
_MAC_OCTET_COUNTS = (6, 8, 20)

_HEX_PAIR = re.compile(r"[0-9A-Fa-f]{2}")
_HEX_QUAD = re.compile(r"[0-9A-Fa-f]{4}")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_mac(value: str) -> str:
    """Parse a hardware address into lowercase colon separated form.

    Accepts ``aa:bb:cc:dd:ee:ff``, ``aa-bb-cc-dd-ee-ff`` and
    ``aabb.ccdd.eeff`` notations.

    Raises:
        InvalidAddressError: If the value is not a hardware address
    """
    if "." in value:
        groups = value.split(".")
        if not all(_HEX_QUAD.fullmatch(group) for group in groups):
            raise InvalidAddressError(value)
        octets = [group[i : i + 2] for group in groups for i in (0, 2)]
    else:
        separator = "-" if "-" in value else ":"
        octets = value.split(separator)
        if not all(_HEX_PAIR.fullmatch(octet) for octet in octets):
            raise InvalidAddressError(value)

    if len(octets) not in _MAC_OCTET_COUNTS:
        raise InvalidAddressError(value)

    return ":".join(octets).lower()


def parse_ip(value: str) -> IPv4Address | IPv6Address | None:
    """Parse an IP address, returning None when it is empty or invalid."""
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return None


def parse_int(value: str) -> int:
    """Parse a signed integer field where an empty field means 0.

    Raises:
        InvalidNumberError: If the value is non-empty and not an integer
    """
    if value == "":
        return 0
    if not _INTEGER.fullmatch(value):
        raise InvalidNumberError(value)
    return int(value)


def parse_device(record: str) -> AttachedDevice:
    """Parse a single ``;`` separated device record."""
    parts = record.split(FIELD_SEPARATOR)
    if len(parts) != FIELD_COUNT:
        raise MalformedRecordError(record)

    mac = parse_mac(parts[3])
    signal = parse_int(parts[5])
    link_rate = parse_int(parts[6])

    return AttachedDevice(
        ip=parse_ip(parts[1]),
        name=parts[2],
        mac=mac,
        type=parts[4],
        link_rate=link_rate,
        signal=signal,
    )


def parse_devices(devices: str) -> list[AttachedDevice]:
    """Parse the router's attached devices string.

    The first two characters (the device count and its ``@``) are dropped,
    the rest is split into one record per device. Any malformed record fails
    the whole list, including the single empty record left when nothing
    follows the prefix.

    Args:
        devices: The raw ``NewAttachDevice`` value

    Returns:
        Attached devices in the order the router listed them

    Raises:
        MalformedRecordError: If a record does not have eight fields
        InvalidAddressError: If a record's MAC address is unparsable
        InvalidNumberError: If a signal or link rate field is not numeric
    """
    remainder = devices[_COUNT_PREFIX_LENGTH:]
    return [parse_device(record) for record in remainder.split(DEVICE_SEPARATOR)]


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` part of an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


def _find_child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _find_descendant(element: ET.Element, name: str) -> ET.Element | None:
    for child in element.iter():
        if child is not element and _local_name(child.tag) == name:
            return child
    return None


def parse_envelope(content: bytes) -> ET.Element:
    """Parse a SOAP response and return its Body element.

    Raises:
        DecodeError: If the content is not XML or has no Body
    """
    # The router emits whitespace ahead of the XML declaration. expat raises
    # LookupError for an unknown declared encoding and ValueError for
    # multi-byte encodings it does not support.
    try:
        root = ET.fromstring(content.strip())
    except (ET.ParseError, LookupError, ValueError) as e:
        raise DecodeError(f"Invalid SOAP response: {e}") from e

    body = _find_child(root, "Body")
    if body is None:
        raise DecodeError("SOAP response has no Body element")
    return body


def parse_response_code(body: ET.Element) -> int:
    """Extract the numeric ResponseCode from a SOAP Body element.

    An envelope without a ResponseCode is rejected rather than read as 0,
    so a truncated or foreign response is never mistaken for success.

    Raises:
        DecodeError: If the code is missing or not an integer
    """
    element = _find_child(body, "ResponseCode")
    if element is None:
        element = _find_descendant(body, "ResponseCode")
    if element is None:
        raise DecodeError("SOAP response has no ResponseCode")

    text = (element.text or "").strip()
    try:
        return int(text)
    except ValueError as e:
        raise DecodeError(f"Invalid ResponseCode: {text!r}") from e


def parse_attached_devices_payload(body: ET.Element) -> str:
    """Extract the raw device list string from a GetAttachDevice response.

    Raises:
        DecodeError: If the response element is missing
    """
    response = _find_child(body, "GetAttachDeviceResponse")
    if response is None:
        raise DecodeError("SOAP response has no GetAttachDeviceResponse")

    devices = _find_child(response, "NewAttachDevice")
    if devices is None:
        raise DecodeError("SOAP response has no NewAttachDevice")

    return devices.text or ""
