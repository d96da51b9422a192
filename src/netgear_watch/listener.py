"""Background polling of attached devices."""

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from .diff import get_changed_devices
from .models import AttachedDevice, ChangedDevice, RouterError

if TYPE_CHECKING:
    from .client import RouterClient

logger = logging.getLogger(__name__)

# Called with (change, None) per added/removed device, or (None, error)
# once for a failed poll.
DeviceHandler = Callable[[ChangedDevice | None, RouterError | None], None]


class DeviceListener:
    """Poll a router on a background thread and report device changes.

    Each poll logs in, fetches the attached devices and compares them with
    the last successful poll. The first successful poll reports every
    attached device as added. Polls never overlap: the next one is scheduled
    ``interval`` seconds after the previous one (including its handler
    calls) has finished.
    """

    def __init__(
        self, client: "RouterClient", interval: float, handler: DeviceHandler
    ):
        if interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval}")
        self.client = client
        self.interval = interval
        self.handler = handler
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> "DeviceListener":
        """Start polling. Returns the listener so it can be stopped later."""
        if self._thread is not None:
            raise RuntimeError("Listener has already been started")

        self._thread = threading.Thread(
            target=self._run,
            name=f"device-listener-{self.client.host}",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "Polling %s for device changes every %ss", self.client.host, self.interval
        )
        return self

    def stop(self) -> None:
        """Stop scheduling polls. A poll already in progress runs to completion."""
        self._stop_event.set()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the polling thread to exit."""
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        # The baseline only ever lives on this thread
        devices: list[AttachedDevice] = []
        while not self._stop_event.wait(self.interval):
            devices = self._tick(devices)
        logger.info("Stopped polling %s", self.client.host)

    def _tick(self, devices: list[AttachedDevice]) -> list[AttachedDevice]:
        """Run one poll against ``devices`` and return the new baseline."""
        try:
            self.client.login()
            updated = self.client.fetch_devices()
        except RouterError as e:
            logger.warning("Polling %s failed: %s", self.client.host, e)
            self._notify(None, e)
            return devices

        for change in get_changed_devices(devices, updated):
            self._notify(change, None)

        return updated

    def _notify(self, change: ChangedDevice | None, error: RouterError | None) -> None:
        try:
            self.handler(change, error)
        except Exception:
            logger.exception("Device change handler raised")
