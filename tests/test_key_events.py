"""Tests for key report decoding."""

import pytest

from streamdock.errors import ProtocolError
from streamdock.key_events import (
    KEY_CODE_OFFSET,
    KEY_COUNT,
    KEY_MAP,
    KEY_STATE_OFFSET,
    KeyEvent,
    KeyState,
    decode_report,
)


def _report(code: int, state: int, length: int = 512) -> bytes:
    """Build a fake inbound report with the key code at [9] and state at [10]."""
    resp = bytearray(length)
    resp[KEY_CODE_OFFSET] = code
    resp[KEY_STATE_OFFSET] = state
    return bytes(resp)


class TestKeyMap:

    def test_covers_all_keys_once(self):
        assert sorted(KEY_MAP.values()) == list(range(1, KEY_COUNT + 1))

    def test_top_and_bottom_rows_swapped(self):
        assert KEY_MAP[0x0B] == 1
        assert KEY_MAP[0x0F] == 5
        assert KEY_MAP[0x01] == 11
        assert KEY_MAP[0x05] == 15

    def test_middle_row_identity(self):
        for code in range(0x06, 0x0B):
            assert KEY_MAP[code] == code

    def test_immutable(self):
        with pytest.raises(TypeError):
            KEY_MAP[0x10] = 16  # type: ignore[index]


class TestDecodeReport:

    def test_pressed(self):
        event = decode_report(_report(0x0B, 0x01))
        assert event.key_id == 1
        assert event.state is KeyState.PRESSED
        assert event.pressed
        assert event.is_mapped
        assert event.physical_code == 0x0B
        assert event.raw_state == 0x01

    def test_released(self):
        event = decode_report(_report(0x0B, 0x00))
        assert event.key_id == 1
        assert event.state is KeyState.RELEASED
        assert not event.pressed

    def test_any_nonzero_flag_is_pressed(self):
        event = decode_report(_report(0x07, 0x80))
        assert event.pressed
        assert event.raw_state == 0x80

    def test_unmapped_code(self):
        event = decode_report(_report(0x00, 0x01))
        assert event.key_id is None
        assert not event.is_mapped
        assert event.physical_code == 0x00
        assert event.pressed

    def test_unmapped_high_code(self):
        assert not decode_report(_report(0x42, 0x00)).is_mapped

    def test_minimal_length_report(self):
        event = decode_report(_report(0x0C, 0x01, length=11))
        assert event.key_id == 2

    def test_short_report(self):
        event = decode_report(b'\x00' * 10)
        assert not event.is_mapped
        assert event.physical_code is None
        assert event.state is KeyState.RELEASED

    def test_empty_report(self):
        assert not decode_report(b'').is_mapped

    def test_accepts_bytearray(self):
        assert decode_report(bytearray(_report(0x0E, 1))).key_id == 4

    @pytest.mark.parametrize("code,key", sorted(KEY_MAP.items()))
    def test_every_mapped_code(self, code, key):
        assert decode_report(_report(code, 1)).key_id == key


class TestKeyEvent:

    def test_frozen(self):
        event = KeyEvent(key_id=1, state=KeyState.PRESSED)
        with pytest.raises(AttributeError):
            event.key_id = 2  # type: ignore[misc]

    def test_require_key_id(self):
        assert KeyEvent(key_id=3, state=KeyState.RELEASED).require_key_id() == 3

    def test_require_key_id_unmapped(self):
        event = KeyEvent(key_id=None, state=KeyState.PRESSED, physical_code=0x20)
        with pytest.raises(ProtocolError, match="0x20"):
            event.require_key_id()
