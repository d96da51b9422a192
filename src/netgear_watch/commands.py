"""Command handlers for the netgear-watch CLI."""

import json
import sys

from .client import (
    AuthFailedError,
    ChangedDevice,
    RouterClient,
    RouterError,
    TransportError,
)
from .config import KnownDevices
from .display import spinner
from .formatters import change_to_dict, device_to_dict, format_change, format_devices


def _error_info(e: Exception) -> dict:
    """Describe an exception for display, including the exit code to use."""
    error_info = {"error": str(e), "type": type(e).__name__}

    if isinstance(e, AuthFailedError):
        error_info["hint"] = "Check your username/password in the config file."
        error_info["response_code"] = e.code
        error_info["code"] = 2
    elif isinstance(e, TransportError):
        error_info["hint"] = "Ensure the router is reachable and the host/port are correct."
        error_info["code"] = 3
    elif isinstance(e, RouterError):
        error_info["code"] = 4
    else:
        error_info["code"] = 1

    return error_info


def _handle_error(e: Exception, json_output: bool = False) -> int:
    """Print a user-friendly error message.

    Returns the exit code to use.
    """
    error_info = _error_info(e)

    if json_output:
        print(json.dumps(error_info), file=sys.stderr, flush=True)
    else:
        if isinstance(e, AuthFailedError):
            print(f"Authentication error: {e}", file=sys.stderr)
        elif isinstance(e, TransportError):
            print(f"Connection error: {e}", file=sys.stderr)
        elif isinstance(e, RouterError):
            print(f"Router error: {e}", file=sys.stderr)
        else:
            print(f"Unexpected error ({type(e).__name__}): {e}", file=sys.stderr)
        if "hint" in error_info:
            print(f"  Hint: {error_info['hint']}", file=sys.stderr)
        sys.stderr.flush()

    return error_info["code"]


def cmd_devices(
    client: RouterClient, known_devices: KnownDevices, json_output: bool = False
) -> int:
    """Execute devices command."""
    try:
        with spinner("Fetching attached devices..."):
            client.login()
            devices = client.fetch_devices()
        if json_output:
            print(json.dumps([device_to_dict(d) for d in devices], indent=2))
        else:
            print(format_devices(devices, known_devices))
        return 0
    except RouterError as e:
        return _handle_error(e, json_output)


def cmd_watch(
    client: RouterClient,
    interval: float,
    known_devices: KnownDevices,
    json_output: bool = False,
) -> int:
    """Execute watch command. Runs until interrupted."""

    def on_change(change: ChangedDevice | None, error: RouterError | None) -> None:
        if error is not None:
            _handle_error(error, json_output)
            return
        if json_output:
            print(json.dumps(change_to_dict(change)), flush=True)
        else:
            print(format_change(change, known_devices), flush=True)

    listener = client.on_device_changed(interval, on_change)
    try:
        while listener.is_running:
            listener.join(timeout=1.0)
    except KeyboardInterrupt:
        listener.stop()
    return 0
