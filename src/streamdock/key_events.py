"""Key press report decoding.

The panel sends one report per key transition.  Byte 9 holds the
physical key code and byte 10 the state flag.  The panel numbers its
three rows of five keys bottom row first; logical key ids 1..15 count
from the top row, matching the ids used by the BAT and CLE commands.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import ProtocolError

log = logging.getLogger(__name__)

KEY_CODE_OFFSET = 9
KEY_STATE_OFFSET = 10

KEY_COUNT = 15

# Physical key code → logical key id
KEY_MAP: Mapping[int, int] = MappingProxyType({
    0x01: 11,
    0x02: 12,
    0x03: 13,
    0x04: 14,
    0x05: 15,
    0x06: 6,
    0x07: 7,
    0x08: 8,
    0x09: 9,
    0x0A: 10,
    0x0B: 1,
    0x0C: 2,
    0x0D: 3,
    0x0E: 4,
    0x0F: 5,
})


class KeyState(Enum):
    RELEASED = 'released'
    PRESSED = 'pressed'


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key report.

    ``key_id`` is None when the physical code is not in ``KEY_MAP``;
    check ``is_mapped`` before using it.  ``raw_state`` is the untouched
    flag byte (0 = released, anything else = pressed).
    """
    key_id: Optional[int]
    state: KeyState
    physical_code: Optional[int] = None
    raw_state: int = 0

    @property
    def is_mapped(self) -> bool:
        return self.key_id is not None

    @property
    def pressed(self) -> bool:
        return self.state is KeyState.PRESSED

    def require_key_id(self) -> int:
        """Return ``key_id``, raising ``ProtocolError`` for unmapped codes."""
        if self.key_id is None:
            code = 'none' if self.physical_code is None else f'0x{self.physical_code:02x}'
            raise ProtocolError(f"Unmapped key code: {code}")
        return self.key_id


def decode_report(report: bytes) -> KeyEvent:
    """Decode an inbound report into a ``KeyEvent``.

    Never raises: unknown codes and short reports come back unmapped.
    """
    if len(report) <= KEY_STATE_OFFSET:
        log.debug("Short key report (%d bytes): %s", len(report), bytes(report).hex())
        return KeyEvent(key_id=None, state=KeyState.RELEASED)

    code = report[KEY_CODE_OFFSET]
    flag = report[KEY_STATE_OFFSET]
    state = KeyState.PRESSED if flag else KeyState.RELEASED

    key_id = KEY_MAP.get(code)
    if key_id is None:
        log.debug("Unmapped key code 0x%02x (state=0x%02x)", code, flag)

    return KeyEvent(key_id=key_id, state=state, physical_code=code, raw_state=flag)
