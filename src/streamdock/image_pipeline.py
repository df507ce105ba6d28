"""Image rendering and bulk transfer for key icons and the boot logo.

Pure Python (PIL + numpy).  Rendering happens completely before the first
packet is sent, so a bad image never leaves a half-finished transfer on
the device.
"""
from __future__ import annotations

import io
import logging
import os
from typing import Union

import numpy as np
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from . import commands
from .errors import ResourceError
from .transfer import TransferSerializer

log = logging.getLogger(__name__)

ICON_SIZE = (100, 100)
BOOT_SIZE = (800, 480)
BOOT_IMAGE_BYTES = BOOT_SIZE[0] * BOOT_SIZE[1] * 3
JPEG_QUALITY = 100

ImageAsset = Union[str, os.PathLike, bytes, bytearray, memoryview]


# =========================================================================
# Rendering
# =========================================================================

def resolve_asset(asset: ImageAsset) -> bytes:
    """Return the raw bytes of a file path or in-memory buffer."""
    if isinstance(asset, (bytes, bytearray, memoryview)):
        return bytes(asset)
    if not isinstance(asset, (str, os.PathLike)):
        raise TypeError(f"image asset must be a path or bytes, not {type(asset).__name__}")
    try:
        with open(asset, 'rb') as f:
            return f.read()
    except OSError as e:
        raise ResourceError(f"Cannot read image {asset}: {e}") from e


def _decode(data: bytes, size: tuple[int, int]) -> PILImage.Image:
    """Decode, resize and rotate 180 degrees.

    Both the key displays and the logo panel are mounted upside down.
    """
    try:
        with PILImage.open(io.BytesIO(data)) as src:
            img = src.convert('RGB')
    except (UnidentifiedImageError, OSError, ValueError,
            PILImage.DecompressionBombError) as e:
        raise ResourceError(f"Cannot decode image: {e}") from e
    img = img.resize(size, PILImage.Resampling.LANCZOS)
    return img.transpose(PILImage.Transpose.ROTATE_180)


def render_key_icon(data: bytes) -> bytes:
    """Render image bytes as a 100x100 JPEG, rotated for the key display."""
    img = _decode(data, ICON_SIZE)
    buf = io.BytesIO()
    img.save(buf, format='JPEG', quality=JPEG_QUALITY)
    return buf.getvalue()


def render_boot_image(data: bytes) -> bytes:
    """Render image bytes as raw 800x480 BGR triples, rotated 180 degrees."""
    img = _decode(data, BOOT_SIZE)
    arr = np.asarray(img, dtype=np.uint8)
    return np.ascontiguousarray(arr[:, :, ::-1]).tobytes()


# =========================================================================
# Transfer
# =========================================================================

class ImagePipeline:
    """Turns image assets into device transfers."""

    def __init__(self, serializer: TransferSerializer):
        self.serializer = serializer

    def set_key_icon(self, key: int, asset: ImageAsset) -> int:
        """Upload *asset* as the icon of logical key *key*.

        Sends BAT (size + key), the JPEG in 512-byte chunks, then STP.

        Returns:
            Size of the encoded JPEG in bytes.

        Raises:
            ResourceError: Image unreadable; nothing was sent.
            TypeError: *asset* is neither a path nor a buffer.
            TransportError: USB failure mid-transfer.
        """
        if not 0 <= key <= 0xFF:
            raise ValueError(f"key must be in 0..255, got {key}")
        jpeg = render_key_icon(resolve_asset(asset))
        header = commands.begin_icon_transfer(len(jpeg), key)
        log.debug("set_key_icon: key=%d jpeg=%d bytes", key, len(jpeg))

        self.serializer.send(header)
        self.serializer.send_chunks(jpeg)
        self.serializer.send(commands.commit())
        return len(jpeg)

    def set_boot_image(self, asset: ImageAsset) -> int:
        """Upload *asset* as the boot logo.

        Sends LOG, the raw BGR buffer in 512-byte chunks, then STP.

        Returns:
            Number of image bytes sent (always 800*480*3).
        """
        raw = render_boot_image(resolve_asset(asset))
        log.debug("set_boot_image: %d bytes", len(raw))

        self.serializer.send(commands.begin_boot_transfer())
        self.serializer.send_chunks(raw)
        self.serializer.send(commands.commit())
        return len(raw)
