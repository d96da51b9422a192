"""SOAP client for Netgear routers."""

import http.client
import logging
import urllib.error
import urllib.request
from enum import Enum
from xml.sax.saxutils import escape

from .listener import DeviceHandler, DeviceListener
from .models import (
    AttachedDevice,
    AuthFailedError,
    ChangedDevice,
    DecodeError,
    DeviceChange,
    FetchFailedError,
    InvalidAddressError,
    InvalidNumberError,
    MalformedRecordError,
    RecordError,
    ResponseCodeError,
    RouterError,
    TransportError,
)
from .parser import (
    parse_attached_devices_payload,
    parse_devices,
    parse_envelope,
    parse_response_code,
)

# Re-export models so callers only need the client module
__all__ = [
    "AttachedDevice",
    "AuthFailedError",
    "ChangedDevice",
    "DEFAULT_PORT",
    "DEFAULT_SESSION_ID",
    "DecodeError",
    "DeviceChange",
    "DeviceListener",
    "FetchFailedError",
    "InvalidAddressError",
    "InvalidNumberError",
    "MalformedRecordError",
    "RecordError",
    "ResponseCodeError",
    "RouterClient",
    "RouterError",
    "SoapAction",
    "TransportError",
]

logger = logging.getLogger(__name__)

# Well-known session ID shared by Netgear's own tooling. Routers accept it
# without negotiating a fresh one.
DEFAULT_SESSION_ID = "A7D88AE69687E58D9A00"
DEFAULT_PORT = 5000

SOAP_PATH = "/soap/server_sa"

_SOAP_LOGIN = """\
<?xml version="1.0" encoding="utf-8" ?>
<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/">
<SOAP-ENV:Header>
<SessionID xsi:type="xsd:string"
  xmlns:xsi="http://www.w3.org/1999/XMLSchema-instance">{session_id}</SessionID>
</SOAP-ENV:Header>
<SOAP-ENV:Body>
<Authenticate>
  <NewUsername>{username}</NewUsername>
  <NewPassword>{password}</NewPassword>
</Authenticate>
</SOAP-ENV:Body>
</SOAP-ENV:Envelope>"""

_SOAP_ATTACHED_DEVICES = """\
<?xml version="1.0" encoding="utf-8" standalone="no"?>
<SOAP-ENV:Envelope xmlns:SOAPSDK1="http://www.w3.org/2001/XMLSchema"
  xmlns:SOAPSDK2="http://www.w3.org/2001/XMLSchema-instance"
  xmlns:SOAPSDK3="http://schemas.xmlsoap.org/soap/encoding/"
  xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/">
<SOAP-ENV:Header>
<SessionID>{session_id}</SessionID>
</SOAP-ENV:Header>
<SOAP-ENV:Body>
<M1:GetAttachDevice xmlns:M1="urn:NETGEAR-ROUTER:service:DeviceInfo:1">
</M1:GetAttachDevice>
</SOAP-ENV:Body>
</SOAP-ENV:Envelope>"""


class SoapAction(Enum):
    """SOAP actions understood by the router and the request they render."""

    LOGIN = ("urn:NETGEAR-ROUTER:service:ParentalControl:1#Authenticate", _SOAP_LOGIN)
    ATTACHED_DEVICES = (
        "urn:NETGEAR-ROUTER:service:DeviceInfo:1#GetAttachDevice",
        _SOAP_ATTACHED_DEVICES,
    )

    def __init__(self, urn: str, template: str):
        self.urn = urn
        self.template = template

    def render(self, params: dict[str, str]) -> bytes:
        """Render the request body with XML-escaped parameters."""
        values = {key: escape(value) for key, value in params.items()}
        return self.template.format(**values).encode("utf-8")


class RouterClient:
    """Client for the SOAP API of Netgear routers."""

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = DEFAULT_PORT,
        session_id: str = DEFAULT_SESSION_ID,
        timeout: float | None = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.session_id = session_id
        self.timeout = timeout
        self.url = f"http://{host}:{port}{SOAP_PATH}"
        self.opener = urllib.request.build_opener()

    def _soap(self, action: SoapAction, params: dict[str, str]) -> bytes:
        """POST a SOAP action to the router and return the response body.

        HTTP error statuses are not treated as failures here: the router
        reports errors through the envelope's ResponseCode.

        Raises:
            TransportError: If the router cannot be reached
        """
        request = urllib.request.Request(
            self.url,
            data=action.render(params),
            headers={
                "SOAPAction": action.urn,
                "Content-Type": "text/xml; charset=utf-8",
            },
            method="POST",
        )
        kwargs = {} if self.timeout is None else {"timeout": self.timeout}

        logger.debug("POST %s (%s)", self.url, action.name)
        try:
            with self.opener.open(request, **kwargs) as response:
                return response.read()
        except urllib.error.HTTPError as e:
            logger.debug("Router answered %s with HTTP %d", action.name, e.code)
            try:
                return e.read()
            except (OSError, http.client.HTTPException) as read_error:
                raise TransportError(
                    f"Failed to read HTTP {e.code} response from router at "
                    f"{self.host}:{self.port}: {read_error}"
                ) from read_error
        except urllib.error.URLError as e:
            raise TransportError(
                f"Failed to connect to router at {self.host}:{self.port}: {e.reason}"
            ) from e
        except (OSError, http.client.HTTPException) as e:
            raise TransportError(
                f"Request to router at {self.host}:{self.port} failed: {e}"
            ) from e

    def login(self) -> None:
        """Authenticate the session with the router.

        Raises:
            TransportError: If the router cannot be reached
            DecodeError: If the response is not a valid SOAP envelope
            AuthFailedError: If the router rejects the credentials
        """
        content = self._soap(
            SoapAction.LOGIN,
            {
                "session_id": self.session_id,
                "username": self.username,
                "password": self.password,
            },
        )
        code = parse_response_code(parse_envelope(content))
        if code != 0:
            raise AuthFailedError(code)
        logger.debug("Logged in to %s as %s", self.host, self.username)

    def fetch_devices(self) -> list[AttachedDevice]:
        """Fetch the devices currently attached to the router.

        Raises:
            TransportError: If the router cannot be reached
            DecodeError: If the response is not a valid SOAP envelope
            FetchFailedError: If the router rejects the request
            RecordError: If the device list is malformed
        """
        content = self._soap(
            SoapAction.ATTACHED_DEVICES, {"session_id": self.session_id}
        )
        body = parse_envelope(content)
        code = parse_response_code(body)
        if code != 0:
            raise FetchFailedError(code)

        devices = parse_devices(parse_attached_devices_payload(body))
        logger.debug("Router %s reports %d attached devices", self.host, len(devices))
        return devices

    def on_device_changed(
        self,
        interval: float,
        handler: DeviceHandler,
    ) -> DeviceListener:
        """Poll the router every ``interval`` seconds and report changes.

        Returns the started listener; call its ``stop()`` to stop polling.
        """
        return DeviceListener(self, interval, handler).start()
