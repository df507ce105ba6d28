"""Shared fixtures: mock transport and in-memory test images."""
import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from streamdock.usb_transport import TransportBackend


def make_image_bytes(size=(64, 64), color=(255, 0, 0), fmt='PNG') -> bytes:
    """Encode a solid-color image."""
    buf = io.BytesIO()
    Image.new('RGB', size, color).save(buf, format=fmt)
    return buf.getvalue()


def make_mock_transport() -> MagicMock:
    """Create a MagicMock that satisfies the TransportBackend protocol."""
    return MagicMock(spec=TransportBackend)


def sent_packets(transport: MagicMock) -> list:
    """Return every packet written through transport.send, in order."""
    return [c.args[0] for c in transport.send.call_args_list]


@pytest.fixture
def transport():
    return make_mock_transport()


@pytest.fixture
def png_bytes():
    return make_image_bytes()
