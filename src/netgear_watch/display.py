"""Terminal helpers: colored text and a progress spinner."""

import sys
import threading
from contextlib import contextmanager
from typing import TextIO

_ANSI_CODES = {"green": 32, "red": 31, "yellow": 33}

_SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
_SPINNER_DELAY = 0.08


def colorize(text: str, color: str, stream: TextIO | None = None) -> str:
    """Wrap text in an ANSI color when ``stream`` (stdout by default) is a TTY."""
    stream = stream or sys.stdout
    code = _ANSI_CODES.get(color)
    if code is None or not stream.isatty():
        return text
    return f"\033[{code}m{text}\033[0m"


def _spin(stream: TextIO, message: str, done: threading.Event) -> None:
    stream.write("\033[?25l")
    frame = 0
    while True:
        stream.write(f"\r{_SPINNER_FRAMES[frame % len(_SPINNER_FRAMES)]} {message}")
        stream.flush()
        frame += 1
        if done.wait(_SPINNER_DELAY):
            break
    # Blank out the line and restore the cursor
    stream.write("\r\033[K\033[?25h")
    stream.flush()


@contextmanager
def spinner(message: str, stream: TextIO | None = None):
    """Animate ``message`` on a TTY while a router request is in flight.

    Does nothing when the stream is not a terminal, so piped and JSON output
    stay clean.
    """
    stream = stream or sys.stdout
    if not stream.isatty():
        yield
        return

    done = threading.Event()
    thread = threading.Thread(
        target=_spin, args=(stream, message, done), name="spinner", daemon=True
    )
    thread.start()
    try:
        yield
    finally:
        done.set()
        thread.join(timeout=0.5)
