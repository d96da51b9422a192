"""Pytest configuration and fixtures."""

import io

import pytest

from netgear_watch.models import AttachedDevice


DEVICES_STRING = (
    "2@0;10.0.0.2;phone;aa:aa:aa:aa:aa:aa;wifi;-50;100;x"
    "@0;10.0.0.3;tv;bb:bb:bb:bb:bb:bb;eth;;;x"
)


def soap_envelope(body: str) -> bytes:
    """Wrap body XML the way the router formats its responses."""
    return f"""
<?xml version="1.0" encoding="UTF-8"?>
<soap-env:Envelope
  xmlns:soap-env="http://schemas.xmlsoap.org/soap/envelope/"
  soap-env:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
<soap-env:Body>
{body}
</soap-env:Body>
</soap-env:Envelope>
""".encode("utf-8")


def login_response(code: str = "000") -> bytes:
    return soap_envelope(
        '<m:AuthenticateResponse xmlns:m="urn:NETGEAR-ROUTER:service:ParentalControl:1">'
        "</m:AuthenticateResponse>\n"
        f"<ResponseCode>{code}</ResponseCode>"
    )


def devices_response(devices: str = DEVICES_STRING, code: str = "000") -> bytes:
    return soap_envelope(
        '<m:GetAttachDeviceResponse xmlns:m="urn:NETGEAR-ROUTER:service:DeviceInfo:1">\n'
        f"<NewAttachDevice>{devices}</NewAttachDevice>\n"
        "</m:GetAttachDeviceResponse>\n"
        f"<ResponseCode>{code}</ResponseCode>"
    )


def make_device(mac: str, name: str = "", **kwargs) -> AttachedDevice:
    """Build a device with sensible defaults for tests."""
    kwargs.setdefault("ip", None)
    kwargs.setdefault("type", "wireless")
    return AttachedDevice(name=name, mac=mac, **kwargs)


class FakeOpener:
    """Records requests and replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.kwargs = []

    def open(self, request, **kwargs):
        self.requests.append(request)
        self.kwargs.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return io.BytesIO(response)


def use_opener(client, *responses) -> FakeOpener:
    """Point a RouterClient at a FakeOpener replaying ``responses``."""
    opener = FakeOpener(*responses)
    client.opener = opener
    return opener


class FakeClient:
    """Stand-in for RouterClient that replays scripted poll results.

    Each entry in ``results`` is either a list of devices or an exception
    raised by fetch_devices(). The last entry repeats once exhausted.
    """

    host = "192.0.2.1"

    def __init__(self, results, login_error=None):
        self.results = list(results)
        self.login_error = login_error
        self.login_calls = 0
        self.fetch_calls = 0

    def login(self):
        self.login_calls += 1
        if self.login_error is not None:
            raise self.login_error

    def fetch_devices(self):
        self.fetch_calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def devices_string() -> str:
    """Raw NewAttachDevice value holding two devices."""
    return DEVICES_STRING
