"""
StreamDock command encoder.

Every control command is a short ASCII tag followed by a few argument
bytes.  The serializer pads each command to a 512-byte payload and puts
the ``CRT`` prefix in front of it, so the builders here only produce the
logical content.

Command layouts (hex, size fields big-endian)::

    LIG  4C 49 47 00 00 <value>             set brightness
    CLE  43 4C 45 00 00 00 <target>         clear one key, 0xFF = all
    DIS  44 49 53 00 00                     wake display
    STP  53 54 50 00 00                     commit / refresh
    BAT  42 41 54 <size:4> <key>            begin key icon transfer
    LOG  4C 4F 47 00 11 94 00 01            begin boot logo transfer
"""

import struct

# =========================================================================
# Constants
# =========================================================================

# Prefix for every control command packet ("CRT\0\0")
CMD_PREFIX = bytes([0x43, 0x52, 0x54, 0x00, 0x00])

# Prefix for raw continuation chunks of a bulk transfer
CHUNK_PREFIX = b''

# Payload size of one packet (prefix not included)
PACKET_SIZE = 512

# Target byte for CLE that clears every key
ALL_KEYS = 0xFF

_TAG_LIG = b'LIG'
_TAG_CLE = b'CLE'
_TAG_DIS = b'DIS'
_TAG_STP = b'STP'
_TAG_BAT = b'BAT'
_TAG_LOG = b'LOG'

# 0x00119400 = 800 * 480 * 3, followed by a 0x01 flag
_LOG_ARGS = bytes([0x00, 0x11, 0x94, 0x00, 0x01])


def _u8(name: str, value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be in 0..255, got {value}")
    return value


# =========================================================================
# Builders
# =========================================================================

def set_brightness(value: int) -> bytes:
    """Build the LIG (brightness) command."""
    return _TAG_LIG + b'\x00\x00' + bytes([_u8('brightness', value)])


def clear_key(target: int = ALL_KEYS) -> bytes:
    """Build the CLE command for one key, or all keys with ``ALL_KEYS``."""
    return _TAG_CLE + b'\x00\x00\x00' + bytes([_u8('target', target)])


def wake_display() -> bytes:
    """Build the DIS (wake screen) command."""
    return _TAG_DIS + b'\x00\x00'


def commit() -> bytes:
    """Build the STP command that makes pending image data visible."""
    return _TAG_STP + b'\x00\x00'


def begin_icon_transfer(size: int, key_id: int) -> bytes:
    """Build the BAT header announcing *size* bytes of JPEG for *key_id*.

    The size is a big-endian uint32.
    """
    if not 0 <= size <= 0xFFFFFFFF:
        raise ValueError(f"size must fit in 32 bits, got {size}")
    return _TAG_BAT + struct.pack('>I', size) + bytes([_u8('key_id', key_id)])


def begin_boot_transfer() -> bytes:
    """Build the LOG header for an 800x480 BGR boot logo."""
    return _TAG_LOG + _LOG_ARGS
