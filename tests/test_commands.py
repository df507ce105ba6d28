"""Exact byte layouts of every StreamDock command."""

import pytest

from streamdock import commands
from streamdock.commands import (
    ALL_KEYS,
    CHUNK_PREFIX,
    CMD_PREFIX,
    PACKET_SIZE,
)


class TestConstants:

    def test_cmd_prefix_is_crt(self):
        assert CMD_PREFIX == bytes([0x43, 0x52, 0x54, 0x00, 0x00])
        assert CMD_PREFIX[:3] == b'CRT'

    def test_chunk_prefix_empty(self):
        assert CHUNK_PREFIX == b''

    def test_packet_size(self):
        assert PACKET_SIZE == 512

    def test_all_keys(self):
        assert ALL_KEYS == 0xFF


class TestBrightness:

    def test_layout(self):
        assert commands.set_brightness(0x19) == bytes([0x4C, 0x49, 0x47, 0x00, 0x00, 0x19])

    def test_bounds(self):
        assert commands.set_brightness(0)[-1] == 0
        assert commands.set_brightness(255)[-1] == 255

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            commands.set_brightness(256)
        with pytest.raises(ValueError):
            commands.set_brightness(-1)


class TestClearKey:

    def test_all_keys_layout(self):
        assert commands.clear_key() == bytes([0x43, 0x4C, 0x45, 0x00, 0x00, 0x00, 0xFF])

    def test_single_key_differs_only_in_target(self):
        all_keys = commands.clear_key(ALL_KEYS)
        one_key = commands.clear_key(3)
        assert len(all_keys) == len(one_key) == 7
        assert all_keys[:-1] == one_key[:-1]
        assert one_key[-1] == 3

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            commands.clear_key(0x100)


class TestSimpleCommands:

    def test_wake_display(self):
        assert commands.wake_display() == bytes([0x44, 0x49, 0x53, 0x00, 0x00])

    def test_commit(self):
        assert commands.commit() == bytes([0x53, 0x54, 0x50, 0x00, 0x00])


class TestBeginIconTransfer:

    def test_layout(self):
        cmd = commands.begin_icon_transfer(0x1234, 7)
        assert cmd == bytes([0x42, 0x41, 0x54, 0x00, 0x00, 0x12, 0x34, 0x07])

    def test_size_is_big_endian_uint32(self):
        cmd = commands.begin_icon_transfer(0x01020304, 1)
        assert cmd[3:7] == bytes([0x01, 0x02, 0x03, 0x04])

    def test_zero_size(self):
        assert commands.begin_icon_transfer(0, 1)[3:7] == b'\x00\x00\x00\x00'

    def test_size_too_large(self):
        with pytest.raises(ValueError):
            commands.begin_icon_transfer(1 << 32, 1)

    def test_key_out_of_range(self):
        with pytest.raises(ValueError):
            commands.begin_icon_transfer(100, 256)


class TestBeginBootTransfer:

    def test_layout(self):
        assert commands.begin_boot_transfer() == bytes(
            [0x4C, 0x4F, 0x47, 0x00, 0x11, 0x94, 0x00, 0x01])

    def test_size_field_matches_800x480_bgr(self):
        cmd = commands.begin_boot_transfer()
        assert int.from_bytes(cmd[3:7], 'big') == 800 * 480 * 3
