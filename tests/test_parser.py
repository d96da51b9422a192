"""Tests for attached device and SOAP envelope parsing."""

from ipaddress import IPv4Address, IPv6Address

import pytest

from conftest import devices_response, login_response, soap_envelope
from netgear_watch.models import (
    AttachedDevice,
    DecodeError,
    InvalidAddressError,
    InvalidNumberError,
    MalformedRecordError,
)
from netgear_watch.parser import (
    parse_attached_devices_payload,
    parse_devices,
    parse_envelope,
    parse_int,
    parse_ip,
    parse_mac,
    parse_response_code,
)


def encode_devices(devices: list[AttachedDevice]) -> str:
    """Encode devices the way the router does."""
    records = [
        ";".join(
            [
                str(i),
                str(d.ip) if d.ip is not None else "",
                d.name,
                d.mac,
                d.type,
                str(d.signal),
                str(d.link_rate),
                "Allow",
            ]
        )
        for i, d in enumerate(devices, 1)
    ]
    return f"{len(devices)}@" + "@".join(records)


class TestParseDevices:
    """Tests for the device list decoder."""

    def test_parse_two_devices(self, devices_string: str):
        """Test both devices are parsed in order."""
        devices = parse_devices(devices_string)
        assert len(devices) == 2
        assert [d.mac for d in devices] == ["aa:aa:aa:aa:aa:aa", "bb:bb:bb:bb:bb:bb"]

    def test_device_fields(self, devices_string: str):
        """Test positional fields map to the right attributes."""
        first = parse_devices(devices_string)[0]
        assert first == AttachedDevice(
            ip=IPv4Address("10.0.0.2"),
            name="phone",
            mac="aa:aa:aa:aa:aa:aa",
            type="wifi",
            link_rate=100,
            signal=-50,
        )

    def test_empty_numeric_fields_default_to_zero(self, devices_string: str):
        """Test empty signal and link rate become 0."""
        second = parse_devices(devices_string)[1]
        assert second.signal == 0
        assert second.link_rate == 0
        assert second.name == "tv"
        assert second.type == "eth"

    def test_matches_reference_encoding(self):
        """Test decoding what the router would send gives back the devices."""
        devices = [
            AttachedDevice(IPv4Address("192.168.1.10"), "laptop", "00:11:22:33:44:55", "wireless", 144, 72),
            AttachedDevice(None, "", "66:77:88:99:aa:bb", "wired", 1000, -3),
        ]
        assert parse_devices(encode_devices(devices)) == devices

    def test_invalid_ip_is_none(self):
        """Test an unparsable IP does not fail the decode."""
        devices = parse_devices("1@1;<unknown>;printer;aa:bb:cc:dd:ee:ff;wired;;;Allow")
        assert devices[0].ip is None
        assert devices[0].mac == "aa:bb:cc:dd:ee:ff"

    def test_empty_ip_is_none(self):
        """Test an empty IP field gives no address."""
        devices = parse_devices("1@1;;printer;aa:bb:cc:dd:ee:ff;wired;;;Allow")
        assert devices[0].ip is None

    def test_ipv6_address(self):
        """Test IPv6 addresses are accepted."""
        devices = parse_devices("1@1;fe80::1;nas;aa:bb:cc:dd:ee:ff;wired;;;Allow")
        assert devices[0].ip == IPv6Address("fe80::1")

    def test_mac_is_normalized(self):
        """Test MAC addresses come out lowercase and colon separated."""
        devices = parse_devices("1@1;10.0.0.5;tv;AA-BB-CC-DD-EE-FF;wired;;;Allow")
        assert devices[0].mac == "aa:bb:cc:dd:ee:ff"

    def test_too_few_fields(self):
        """Test a record with fewer than eight fields is rejected."""
        record = "0;10.0.0.2;phone;aa:aa:aa:aa:aa:aa;wifi;-50;100"
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_devices(f"1@{record}")
        assert exc_info.value.record == record

    def test_too_many_fields(self):
        """Test a record with more than eight fields is rejected."""
        with pytest.raises(MalformedRecordError):
            parse_devices("1@0;10.0.0.2;phone;aa:aa:aa:aa:aa:aa;wifi;-50;100;x;y")

    def test_malformed_record_fails_whole_list(self, devices_string: str):
        """Test one bad record discards the good ones."""
        with pytest.raises(MalformedRecordError):
            parse_devices(devices_string + "@garbage")

    def test_invalid_mac_aborts(self):
        """Test an unparsable MAC fails the whole decode."""
        text = (
            "2@0;10.0.0.2;phone;aa:aa:aa:aa:aa:aa;wifi;-50;100;x"
            "@0;10.0.0.3;tv;not-a-mac;eth;;;x"
        )
        with pytest.raises(InvalidAddressError) as exc_info:
            parse_devices(text)
        assert exc_info.value.value == "not-a-mac"

    def test_invalid_signal(self):
        """Test a non-numeric signal is an error."""
        with pytest.raises(InvalidNumberError) as exc_info:
            parse_devices("1@0;10.0.0.2;phone;aa:aa:aa:aa:aa:aa;wifi;strong;100;x")
        assert exc_info.value.value == "strong"

    def test_invalid_link_rate(self):
        """Test a non-numeric link rate is an error."""
        with pytest.raises(InvalidNumberError):
            parse_devices("1@0;10.0.0.2;phone;aa:aa:aa:aa:aa:aa;wifi;-50;1.5;x")

    def test_no_devices(self):
        """Test a bare count prefix leaves one empty, malformed record."""
        with pytest.raises(MalformedRecordError):
            parse_devices("0@")
        with pytest.raises(MalformedRecordError):
            parse_devices("0")

    def test_prefix_is_fixed_width(self):
        """Test exactly two leading characters are dropped."""
        # The prefix is not validated, only skipped
        devices = parse_devices("X;0;10.0.0.2;phone;aa:aa:aa:aa:aa:aa;wifi;;;x")
        assert len(devices) == 1
        assert devices[0].name == "phone"

    def test_duplicate_macs_are_kept(self):
        """Test the decoder does not enforce MAC uniqueness."""
        text = (
            "2@0;10.0.0.2;a;aa:aa:aa:aa:aa:aa;wifi;;;x"
            "@0;10.0.0.3;b;aa:aa:aa:aa:aa:aa;wifi;;;x"
        )
        assert len(parse_devices(text)) == 2


class TestParseMac:
    """Tests for hardware address parsing."""

    def test_colon_separated(self):
        assert parse_mac("00:1A:2b:3C:4d:5E") == "00:1a:2b:3c:4d:5e"

    def test_hyphen_separated(self):
        assert parse_mac("00-1a-2b-3c-4d-5e") == "00:1a:2b:3c:4d:5e"

    def test_dot_separated(self):
        assert parse_mac("001a.2b3c.4d5e") == "00:1a:2b:3c:4d:5e"

    def test_eui64(self):
        assert parse_mac("00:1a:2b:3c:4d:5e:6f:70") == "00:1a:2b:3c:4d:5e:6f:70"

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "aa:aa",
            "00:1a:2b:3c:4d",
            "00:1a:2b:3c:4d:5g",
            "00:1a:2b-3c:4d:5e",
            "0:1a:2b:3c:4d:5e",
            "001a.2b3c",
            "001a2b3c4d5e",
        ],
    )
    def test_invalid(self, value: str):
        with pytest.raises(InvalidAddressError):
            parse_mac(value)


class TestParseInt:
    """Tests for numeric field parsing."""

    def test_empty_is_zero(self):
        assert parse_int("") == 0

    def test_signed_values(self):
        assert parse_int("-50") == -50
        assert parse_int("+7") == 7
        assert parse_int("0") == 0

    @pytest.mark.parametrize("value", [" ", "12 ", "1_000", "abc", "1.5", "-"])
    def test_rejects_non_integers(self, value: str):
        with pytest.raises(InvalidNumberError):
            parse_int(value)


class TestParseIp:
    """Tests for best-effort IP parsing."""

    def test_ipv4(self):
        assert parse_ip("192.168.1.2") == IPv4Address("192.168.1.2")

    def test_invalid(self):
        assert parse_ip("999.1.1.1") is None
        assert parse_ip("") is None


class TestEnvelopeParsing:
    """Tests for SOAP envelope decoding."""

    def test_response_code_zero(self):
        """Test a zero padded success code."""
        assert parse_response_code(parse_envelope(login_response())) == 0

    def test_response_code_nonzero(self):
        """Test a failure code is returned as an int."""
        assert parse_response_code(parse_envelope(login_response("401"))) == 401

    def test_response_code_nested(self):
        """Test a code inside the action response element is found."""
        body = parse_envelope(
            soap_envelope(
                "<AuthenticateResponse><ResponseCode>0</ResponseCode></AuthenticateResponse>"
            )
        )
        assert parse_response_code(body) == 0

    def test_missing_response_code(self):
        """Test a Body without ResponseCode is a decode error."""
        body = parse_envelope(soap_envelope("<AuthenticateResponse/>"))
        with pytest.raises(DecodeError, match="no ResponseCode"):
            parse_response_code(body)

    def test_non_numeric_response_code(self):
        """Test a garbage ResponseCode is a decode error."""
        body = parse_envelope(soap_envelope("<ResponseCode>oops</ResponseCode>"))
        with pytest.raises(DecodeError, match="Invalid ResponseCode"):
            parse_response_code(body)

    def test_invalid_xml(self):
        """Test a non-XML response is a decode error."""
        with pytest.raises(DecodeError, match="Invalid SOAP response"):
            parse_envelope(b"<html><body>Not Found</body>")

    def test_unknown_encoding(self):
        """Test an unknown declared encoding is a decode error."""
        content = (
            b'\n<?xml version="1.0" encoding="bogus-enc"?>'
            b"<Envelope><Body/></Envelope>"
        )
        with pytest.raises(DecodeError, match="Invalid SOAP response"):
            parse_envelope(content)

    def test_missing_body(self):
        """Test an envelope with no Body is a decode error."""
        with pytest.raises(DecodeError, match="no Body"):
            parse_envelope(b"<Envelope><Header/></Envelope>")

    def test_devices_payload(self, devices_string: str):
        """Test the device list text is extracted."""
        body = parse_envelope(devices_response())
        assert parse_attached_devices_payload(body) == devices_string

    def test_missing_devices_payload(self):
        """Test a success response without a device list is a decode error."""
        body = parse_envelope(soap_envelope("<ResponseCode>000</ResponseCode>"))
        with pytest.raises(DecodeError, match="GetAttachDeviceResponse"):
            parse_attached_devices_payload(body)
