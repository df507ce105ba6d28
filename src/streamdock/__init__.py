"""
StreamDock Linux - USB button panel driver

Drives the StreamDock key panel (VID 0x5500, PID 0x1001): 15 keys with
100x100 displays plus an 800x480 boot logo screen.

Features:
- Key icon upload (any Pillow-readable image, sent as JPEG)
- Boot logo upload
- Brightness, wake, clear and refresh commands
- Key press/release events
- Firmware version query

Usage:
    # As a library
    from streamdock import open_device
    with open_device() as dock:
        dock.set_key_image(1, "icon.png")

    # Command line
    streamdock version          # Show firmware version
    streamdock icon 1 icon.png  # Set key 1 icon
    streamdock listen           # Print key events
"""

from streamdock.__version__ import __version__

from streamdock.device import FIRMWARE_UNAVAILABLE, StreamDock, open_device
from streamdock.errors import (
    ProtocolError,
    ResourceError,
    StreamDockError,
    TransportError,
)
from streamdock.key_events import KEY_MAP, KeyEvent, KeyState, decode_report
from streamdock.usb_transport import PyUsbTransport, TransportBackend

__all__ = [
    # Version
    "__version__",
    # Device
    "StreamDock",
    "open_device",
    "FIRMWARE_UNAVAILABLE",
    # Transport
    "TransportBackend",
    "PyUsbTransport",
    # Key events
    "KEY_MAP",
    "KeyEvent",
    "KeyState",
    "decode_report",
    # Errors
    "StreamDockError",
    "TransportError",
    "ResourceError",
    "ProtocolError",
]
