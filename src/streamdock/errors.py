"""Exception hierarchy for the StreamDock driver.

All errors raised by the package derive from ``StreamDockError`` so
callers can catch everything device-related with one ``except`` clause::

    StreamDockError
    ├── TransportError   USB send/receive/control transfer failed
    ├── ResourceError    source image unreadable or undecodable
    └── ProtocolError    device sent data we cannot interpret

``ProtocolError`` conditions that happen during normal operation (an
unknown key code, a non-text firmware string) are reported through the
return value instead of being raised; see ``StreamDock.get_firmware_version``
and ``KeyEvent.is_mapped``.
"""


class StreamDockError(Exception):
    """Base exception for all StreamDock errors."""


class TransportError(StreamDockError):
    """The transport backend failed to complete a transfer.

    Aborts the current operation. The transfer lock is always released,
    so later sends are unaffected.
    """


class ResourceError(StreamDockError):
    """An image asset could not be read or decoded.

    Raised before any bytes of the affected operation reach the device.
    """


class ProtocolError(StreamDockError):
    """Data received from the device does not match the expected format."""
