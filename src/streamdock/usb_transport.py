#!/usr/bin/env python3
"""
USB transport layer for the StreamDock button panel.

The protocol code only needs three primitives, described by the
``TransportBackend`` protocol:

  • ``send(data)``            interrupt/bulk write to the OUT endpoint
  • ``receive(max_bytes)``    blocking read of one report from the IN endpoint
  • ``control_transfer(...)`` vendor/class control request on endpoint 0

Any object with those methods works; tests inject a ``MagicMock``.
``PyUsbTransport`` is the real implementation on top of pyusb (libusb).

Linux dependencies:
  • pyusb:  ``pip install pyusb``  (needs libusb1: ``apt install libusb-1.0-0``)
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Union, runtime_checkable

from .errors import TransportError

# Optional USB backend, graceful import
try:
    import usb.core
    import usb.util
    PYUSB_AVAILABLE = True
except ImportError:
    PYUSB_AVAILABLE = False

log = logging.getLogger(__name__)


# =========================================================================
# Constants
# =========================================================================

STREAMDOCK_VID = 0x5500
STREAMDOCK_PID = 0x1001

USB_INTERFACE = 0

# Reports from the key panel fit in one 512-byte transfer
DEFAULT_READ_SIZE = 512

# libusb: 0 means wait forever
DEFAULT_WRITE_TIMEOUT_MS = 1000
DEFAULT_READ_TIMEOUT_MS = 0


# =========================================================================
# Capability interface
# =========================================================================

@runtime_checkable
class TransportBackend(Protocol):
    """Raw USB I/O needed by ``StreamDock``.

    Implementations raise ``TransportError`` when a transfer fails.
    """

    def send(self, data: bytes) -> None:
        """Write one packet to the device."""
        ...

    def receive(self, max_bytes: int = DEFAULT_READ_SIZE) -> bytes:
        """Block until one report arrives and return it."""
        ...

    def control_transfer(
        self,
        request_type: int,
        request: int,
        value: int,
        index: int,
        length: int,
    ) -> Union[bytes, int, None]:
        """Issue a control request.  IN requests return the data read."""
        ...


# =========================================================================
# Real transport: PyUSB  (libusb backend)
# =========================================================================

class PyUsbTransport:
    """USB transport using pyusb.

    Open sequence:
    1. Find device by VID/PID
    2. Detach the kernel driver from the interface if one is bound
    3. Set the configuration and claim the interface
    4. Locate the IN and OUT endpoints of the interface

    Requires: ``pip install pyusb`` + ``apt install libusb-1.0-0``
    """

    def __init__(
        self,
        vid: int = STREAMDOCK_VID,
        pid: int = STREAMDOCK_PID,
        interface: int = USB_INTERFACE,
        write_timeout_ms: int = DEFAULT_WRITE_TIMEOUT_MS,
        read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS,
    ):
        if not PYUSB_AVAILABLE:
            raise ImportError(
                "pyusb is not installed. Install with: pip install pyusb\n"
                "Also need libusb: apt install libusb-1.0-0 (Debian/Ubuntu) "
                "or dnf install libusb1 (Fedora)"
            )
        self.vid = vid
        self.pid = pid
        self.interface = interface
        self.write_timeout_ms = write_timeout_ms
        self.read_timeout_ms = read_timeout_ms
        self._device = None
        self._ep_out = None
        self._ep_in = None

    def open(self) -> None:
        """Find the USB device, claim its interface and locate endpoints.

        Raises:
            TransportError: Device missing, endpoints missing, or libusb error.
        """
        device = usb.core.find(idVendor=self.vid, idProduct=self.pid)
        if device is None:
            raise TransportError(
                f"USB device not found: VID={self.vid:#06x} PID={self.pid:#06x}"
            )

        try:
            if device.is_kernel_driver_active(self.interface):
                device.detach_kernel_driver(self.interface)
                log.debug("Detached kernel driver from interface %d", self.interface)

            device.set_configuration()
            usb.util.claim_interface(device, self.interface)

            intf = device.get_active_configuration()[(self.interface, 0)]
            ep_out = usb.util.find_descriptor(
                intf,
                custom_match=lambda e: usb.util.endpoint_direction(
                    e.bEndpointAddress
                ) == usb.util.ENDPOINT_OUT,
            )
            ep_in = usb.util.find_descriptor(
                intf,
                custom_match=lambda e: usb.util.endpoint_direction(
                    e.bEndpointAddress
                ) == usb.util.ENDPOINT_IN,
            )
        except usb.core.USBError as e:
            usb.util.dispose_resources(device)
            raise TransportError(f"Failed to open USB device: {e}") from e

        if ep_out is None or ep_in is None:
            usb.util.dispose_resources(device)
            raise TransportError("Could not find IN/OUT endpoints")

        self._device = device
        self._ep_out = ep_out
        self._ep_in = ep_in
        log.info("Opened StreamDock %04x:%04x (EP OUT=0x%02x, EP IN=0x%02x)",
                 self.vid, self.pid,
                 ep_out.bEndpointAddress, ep_in.bEndpointAddress)

    def close(self) -> None:
        """Release interface and free libusb resources."""
        if self._device is None:
            return
        try:
            usb.util.release_interface(self._device, self.interface)
        except usb.core.USBError as e:
            log.debug("release_interface failed: %s", e)
        usb.util.dispose_resources(self._device)
        self._device = None
        self._ep_out = None
        self._ep_in = None
        log.info("StreamDock transport closed")

    @property
    def is_open(self) -> bool:
        return self._device is not None

    def _require_open(self) -> None:
        if self._device is None:
            raise TransportError("Transport not open")

    def send(self, data: bytes) -> None:
        self._require_open()
        try:
            self._ep_out.write(data, timeout=self.write_timeout_ms)
        except usb.core.USBError as e:
            raise TransportError(f"USB write failed ({len(data)} bytes): {e}") from e

    def receive(self, max_bytes: int = DEFAULT_READ_SIZE) -> bytes:
        self._require_open()
        try:
            data = self._ep_in.read(max_bytes, timeout=self.read_timeout_ms)
        except usb.core.USBError as e:
            raise TransportError(f"USB read failed: {e}") from e
        return bytes(data)

    def control_transfer(
        self,
        request_type: int,
        request: int,
        value: int,
        index: int,
        length: int,
    ) -> Optional[Union[bytes, int]]:
        """Control transfer on endpoint 0.

        Device-to-host requests return the bytes read; host-to-device
        requests return the number of bytes written.
        """
        self._require_open()
        try:
            result = self._device.ctrl_transfer(request_type, request, value, index, length)
        except usb.core.USBError as e:
            raise TransportError(f"USB control transfer failed: {e}") from e
        if isinstance(result, int):
            return result
        return bytes(result)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()
