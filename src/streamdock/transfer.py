"""Packet framing and exclusive transmission.

All outbound traffic goes through one ``TransferSerializer`` so that
packets from different threads never interleave on the OUT endpoint.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Iterator

from .commands import CHUNK_PREFIX, CMD_PREFIX, PACKET_SIZE
from .usb_transport import TransportBackend

log = logging.getLogger(__name__)


class FifoLock:
    """Mutex that hands ownership to waiters in arrival order.

    ``threading.Lock`` makes no fairness promise, so each caller takes a
    ticket and waits until its ticket reaches the head of the queue.
    Use it as a context manager so release happens on every exit path.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._queue: deque[object] = deque()

    def acquire(self) -> None:
        ticket = object()
        with self._cond:
            self._queue.append(ticket)
            try:
                while self._queue[0] is not ticket:
                    self._cond.wait()
            except BaseException:
                # Interrupted waiter must not leave its ticket behind
                self._queue.remove(ticket)
                self._cond.notify_all()
                raise

    def release(self) -> None:
        with self._cond:
            if not self._queue:
                raise RuntimeError("release() called on an unlocked FifoLock")
            self._queue.popleft()
            self._cond.notify_all()

    def locked(self) -> bool:
        with self._cond:
            return bool(self._queue)

    def __enter__(self) -> FifoLock:
        self.acquire()
        return self

    def __exit__(self, *exc) -> None:
        self.release()


def build_packet(payload: bytes, prefix: bytes = CMD_PREFIX) -> bytes:
    """Return ``prefix + payload`` with the payload zero-padded to 512 bytes.

    Payloads already 512 bytes or longer are not touched.
    """
    payload = bytes(payload)
    if len(payload) < PACKET_SIZE:
        payload = payload.ljust(PACKET_SIZE, b'\x00')
    return bytes(prefix) + payload


def iter_chunks(data: bytes, chunk_size: int = PACKET_SIZE) -> Iterator[bytes]:
    """Yield *data* in order as pieces of at most *chunk_size* bytes.

    The last piece is not padded; the serializer does that when it frames
    the packet.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    view = memoryview(data)
    for offset in range(0, len(view), chunk_size):
        yield bytes(view[offset:offset + chunk_size])


class TransferSerializer:
    """Frames payloads into packets and writes them one at a time."""

    def __init__(self, transport: TransportBackend):
        self.transport = transport
        self._lock = FifoLock()

    def send(self, payload: bytes, prefix: bytes = CMD_PREFIX) -> None:
        """Send one packet.

        Blocks until any in-flight packet has been written, then writes
        this one.  A ``TransportError`` from the backend propagates to the
        caller after the lock is released.
        """
        with self._lock:
            packet = build_packet(payload, prefix)
            log.debug("send: %d bytes (prefix=%s)", len(packet), bytes(prefix).hex() or '-')
            self.transport.send(packet)

    def send_chunks(self, data: bytes, chunk_size: int = PACKET_SIZE) -> int:
        """Send *data* as consecutive prefix-less packets.

        Each chunk takes the lock separately, so short control commands
        from other threads may slip in between chunks of a large transfer.

        Returns:
            Number of chunk packets written.
        """
        count = 0
        for chunk in iter_chunks(data, chunk_size):
            self.send(chunk, CHUNK_PREFIX)
            count += 1
        log.debug("send_chunks: %d bytes in %d packet(s)", len(data), count)
        return count
