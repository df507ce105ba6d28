"""StreamDock device facade.

Composes the command encoder, transfer serializer, image pipeline and key
decoder into the operations an application calls.

Usage:
    from streamdock import open_device

    with open_device() as dock:
        print(dock.get_firmware_version())
        dock.wake_screen()
        dock.clear_screen()
        dock.set_brightness(0x19)
        dock.set_key_image(1, "icon.png")
        event = dock.receive_key_event()
"""
from __future__ import annotations

import logging
from typing import Iterator, Optional

from . import commands, conf
from .conf import Settings
from .errors import TransportError
from .image_pipeline import ImageAsset, ImagePipeline
from .key_events import KeyEvent, decode_report
from .transfer import TransferSerializer
from .usb_transport import DEFAULT_READ_SIZE, PyUsbTransport, TransportBackend

log = logging.getLogger(__name__)

# Firmware query: class IN request on endpoint 0
FIRMWARE_REQUEST_TYPE = 0xA1
FIRMWARE_REQUEST = 0x01
FIRMWARE_VALUE = 0x0100
FIRMWARE_INDEX = 0
FIRMWARE_LENGTH = 512

FIRMWARE_UNAVAILABLE = 'unavailable'


class StreamDock:
    """High-level API for one StreamDock panel."""

    def __init__(self, transport: TransportBackend, read_size: int = DEFAULT_READ_SIZE):
        self.transport = transport
        self.read_size = read_size
        self.serializer = TransferSerializer(transport)
        self.images = ImagePipeline(self.serializer)

    # ── Info ─────────────────────────────────────────────────────────

    def get_firmware_version(self) -> str:
        """Query the firmware version string.

        Returns ``FIRMWARE_UNAVAILABLE`` when the device answers with
        something other than UTF-8 text.  Transport failures still raise.
        """
        data = self.transport.control_transfer(
            FIRMWARE_REQUEST_TYPE, FIRMWARE_REQUEST,
            FIRMWARE_VALUE, FIRMWARE_INDEX, FIRMWARE_LENGTH,
        )
        if not isinstance(data, (bytes, bytearray, memoryview)):
            log.warning("Invalid firmware version data: %r", data)
            return FIRMWARE_UNAVAILABLE
        try:
            return bytes(data).rstrip(b'\x00').decode('utf-8')
        except UnicodeDecodeError:
            log.warning("Firmware version is not UTF-8: %s", bytes(data[:32]).hex())
            return FIRMWARE_UNAVAILABLE

    # ── Display commands ─────────────────────────────────────────────

    def wake_screen(self) -> None:
        self.serializer.send(commands.wake_display())

    def clear_screen(self) -> None:
        """Clear every key display."""
        self.serializer.send(commands.clear_key(commands.ALL_KEYS))

    def refresh(self) -> None:
        self.serializer.send(commands.commit())

    def set_brightness(self, value: int) -> None:
        self.serializer.send(commands.set_brightness(value))

    def clear_key_image(self, key: int) -> None:
        self.serializer.send(commands.clear_key(key))

    # ── Images ───────────────────────────────────────────────────────

    def set_key_image(self, key: int, image: ImageAsset) -> None:
        """Show *image* (path or encoded bytes) on logical key *key*."""
        self.images.set_key_icon(key, image)

    def set_boot_image(self, image: ImageAsset) -> None:
        """Replace the 800x480 boot logo."""
        self.images.set_boot_image(image)

    # ── Input ────────────────────────────────────────────────────────

    def receive(self) -> bytes:
        """Block until the panel sends a report and return it raw."""
        return self.transport.receive(self.read_size)

    def receive_key_event(self) -> KeyEvent:
        """Block until the next key report and decode it."""
        event = decode_report(self.receive())
        log.debug("Key event: %s", event)
        return event

    def key_events(self) -> Iterator[KeyEvent]:
        """Yield key events forever; ends by raising the transport's error."""
        while True:
            yield self.receive_key_event()

    # ── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        close = getattr(self.transport, 'close', None)
        if callable(close):
            close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def open_device(settings: Optional[Settings] = None) -> StreamDock:
    """Open the StreamDock described by *settings* (default: ``conf.settings``).

    Raises:
        TransportError: Device not found or could not be claimed.
    """
    if settings is None:
        settings = conf.settings

    try:
        transport = PyUsbTransport(
            vid=settings.vid,
            pid=settings.pid,
            interface=settings.interface,
            write_timeout_ms=settings.write_timeout_ms,
            read_timeout_ms=settings.read_timeout_ms,
        )
    except ImportError as e:
        raise TransportError(str(e)) from e
    transport.open()
    return StreamDock(transport, read_size=settings.read_size)
