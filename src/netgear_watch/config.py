"""Configuration loading for netgear-watch."""

import os
import re
import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# Default configuration values
DEFAULT_HOST = "192.168.1.1"
DEFAULT_USERNAME = "admin"
DEFAULT_PORT = 5000
DEFAULT_INTERVAL = 10

_MAC_PATTERN = re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$")


def get_config_paths() -> list[Path]:
    """Return list of config file paths in order of priority."""
    return [
        Path.cwd() / "config.toml",
        Path.home() / ".config" / "netgear-watch" / "config.toml",
        Path("/etc/netgear-watch/config.toml"),
    ]


def _load_config_file() -> dict | None:
    """Load the raw config file if it exists."""
    for config_path in get_config_paths():
        if config_path.exists():
            with open(config_path, "rb") as f:
                return tomllib.load(f)
    return None


def _to_int(value, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {name}: {value!r} is not an integer")


def load_config(
    cli_host: str | None = None,
    cli_user: str | None = None,
    cli_pass: str | None = None,
    cli_port: int | None = None,
    cli_interval: int | None = None,
) -> dict:
    """Load configuration with priority: CLI args > env vars > config file > defaults.

    Args:
        cli_host: Router address from CLI argument (highest priority)
        cli_user: Username from CLI argument
        cli_pass: Password from CLI argument
        cli_port: SOAP port from CLI argument
        cli_interval: Poll interval in seconds from CLI argument

    Environment variables:
        NETGEAR_HOST: Router address
        NETGEAR_USER: Username for authentication
        NETGEAR_PASS: Password for authentication
        NETGEAR_PORT: SOAP port
        NETGEAR_INTERVAL: Poll interval in seconds

    Config file locations (in order of priority):
        1. ./config.toml (current directory)
        2. ~/.config/netgear-watch/config.toml
        3. /etc/netgear-watch/config.toml
    """
    # Start with defaults
    config: dict = {
        "host": DEFAULT_HOST,
        "username": DEFAULT_USERNAME,
        "password": "",
        "port": DEFAULT_PORT,
        "interval": DEFAULT_INTERVAL,
    }

    # Layer 1: Config file
    file_config = _load_config_file()
    if file_config is not None:
        config.update(file_config.get("router", {}))

    # Layer 2: Environment variables
    if os.environ.get("NETGEAR_HOST"):
        config["host"] = os.environ["NETGEAR_HOST"]
    if os.environ.get("NETGEAR_USER"):
        config["username"] = os.environ["NETGEAR_USER"]
    if os.environ.get("NETGEAR_PASS"):
        config["password"] = os.environ["NETGEAR_PASS"]
    if os.environ.get("NETGEAR_PORT"):
        config["port"] = os.environ["NETGEAR_PORT"]
    if os.environ.get("NETGEAR_INTERVAL"):
        config["interval"] = os.environ["NETGEAR_INTERVAL"]

    # Layer 3: CLI arguments (highest priority)
    if cli_host:
        config["host"] = cli_host
    if cli_user:
        config["username"] = cli_user
    if cli_pass:
        config["password"] = cli_pass
    if cli_port:
        config["port"] = cli_port
    if cli_interval:
        config["interval"] = cli_interval

    config["port"] = _to_int(config["port"], "port")
    config["interval"] = _to_int(config["interval"], "poll interval")
    if config["interval"] <= 0:
        raise ValueError(
            f"Invalid poll interval: {config['interval']} (must be positive)"
        )

    # Require password from some source
    if not config.get("password"):
        raise FileNotFoundError(
            "No password configured. Either:\n"
            "  1. Create ~/.config/netgear-watch/config.toml with:\n"
            "     [router]\n"
            '     host = "192.168.1.1"\n'
            '     username = "admin"\n'
            '     password = "your_password"\n'
            "\n"
            "  2. Set environment variables:\n"
            "     export NETGEAR_PASS=your_password\n"
            "\n"
            "  3. Use CLI flags:\n"
            "     netgear-watch --pass your_password watch"
        )

    return config


def _is_mac_address(identifier: str) -> bool:
    """Check if a string looks like a MAC address (XX:XX:XX:XX:XX:XX)."""
    return bool(_MAC_PATTERN.match(identifier))


class KnownDevices:
    """Container for known devices, supporting lookup by MAC or device name.

    Name lookup covers devices that use random MAC addresses.
    """

    def __init__(
        self,
        by_mac: dict[str, str] | None = None,
        by_name: dict[str, str] | None = None,
    ):
        self.by_mac: dict[str, str] = by_mac or {}
        self.by_name: dict[str, str] = by_name or {}

    def get_alias(self, mac: str, name: str = "") -> str | None:
        """Get alias for a device by MAC or name.

        MAC lookup takes priority. Returns None if device is not known.
        """
        alias = self.by_mac.get(mac.lower())
        if alias:
            return alias

        if name:
            alias = self.by_name.get(name.lower())
            if alias:
                return alias

        return None

    def is_known(self, mac: str, name: str = "") -> bool:
        """Check if a device is known by MAC or name."""
        return self.get_alias(mac, name) is not None


def load_known_devices() -> KnownDevices:
    """Load known devices from config file.

    Config format:
        [known_devices]
        "aa:bb:cc:dd:ee:ff" = "My Phone"      # MAC-based (for stable MACs)
        "android-abc123" = "John's Pixel"     # Name-based (for random MACs)

    MAC addresses are identified by format; any other identifier is treated
    as a device name.
    """
    config = _load_config_file()
    if config is None:
        return KnownDevices()

    by_mac: dict[str, str] = {}
    by_name: dict[str, str] = {}

    for identifier, alias in config.get("known_devices", {}).items():
        if _is_mac_address(identifier):
            # Same canonical form the parser produces
            by_mac[identifier.lower().replace("-", ":")] = alias
        else:
            by_name[identifier.lower()] = alias

    return KnownDevices(by_mac=by_mac, by_name=by_name)
