"""Leader-side replication batching and replica health tracking."""

from __future__ import annotations

import struct
import threading
from typing import Callable, Iterable, Tuple

# Largest payload sent to a follower in one replication response; this
# matches the default maximum message size of the message bus.
REPLICATION_MAX_SIZE = 1024 * 1024

# Non-data prefix of every replication response: the leader epoch followed by
# the high watermark, eight bytes each.
REPLICATION_OVERHEAD = 16

# Size of the per-message header block carried in replication batches.
MESSAGE_HEADERS_SIZE = 28

_UINT64 = struct.Struct(">Q")

Entry = Tuple[int, bytes, bytes]


class ReplicationWriter:
    """Builds replication responses: epoch, high watermark, then messages.

    The high watermark slot is reserved when the batch starts and filled with
    the value returned by ``high_watermark`` at the moment of flushing.
    """

    def __init__(self, epoch: int, high_watermark: Callable[[], int]) -> None:
        self.epoch = epoch
        self._high_watermark = high_watermark
        self._buf = bytearray()
        self.last_offset = -1
        self.reset()

    def write(self, offset: int, headers: bytes, message: bytes) -> None:
        """Append one message and its headers to the batch."""
        self._buf += headers
        self._buf += message
        self.last_offset = offset

    def flush(self, send: Callable[[bytes], object]) -> None:
        """Stamp the current high watermark and hand the batch to ``send``.

        The batch is reset afterwards whether or not ``send`` succeeds.
        """
        _UINT64.pack_into(self._buf, 8, self._high_watermark() & 0xFFFFFFFFFFFFFFFF)
        data = bytes(self._buf)
        try:
            send(data)
        finally:
            self.reset()

    def reset(self) -> None:
        """Discard buffered messages and start a fresh batch."""
        self._buf = bytearray(_UINT64.pack(self.epoch & 0xFFFFFFFFFFFFFFFF))
        self._buf += bytes(8)
        self.last_offset = -1

    def __len__(self) -> int:
        return len(self._buf)


def fill_batch(
    writer: ReplicationWriter,
    entries: Iterable[Entry],
    newest_offset: int,
    offset: int,
) -> int:
    """Write messages from ``entries`` into ``writer`` until the batch is full.

    ``entries`` yields ``(offset, headers, message)`` tuples starting after
    ``offset``. Reading stops once ``newest_offset`` is reached, the entries
    run out, or the next message would push the batch past
    ``REPLICATION_MAX_SIZE``. Returns the offset of the last message written,
    or -1 if none was.
    """
    iterator = iter(entries)
    while offset < newest_offset and len(writer) < REPLICATION_MAX_SIZE:
        try:
            offset, headers, message = next(iterator)
        except StopIteration:
            break
        if len(message) + len(headers) + len(writer) > REPLICATION_MAX_SIZE:
            break
        writer.write(offset, headers, message)
    return writer.last_offset


class ReplicaLagTracker:
    """Tracks when a replica was last seen and last caught up with the leader."""

    def __init__(self, max_lag_time: float, now: float) -> None:
        self.max_lag_time = max_lag_time
        self._lock = threading.Lock()
        self._last_seen = now
        self._last_caught_up = now

    @property
    def last_seen(self) -> float:
        with self._lock:
            return self._last_seen

    @property
    def last_caught_up(self) -> float:
        with self._lock:
            return self._last_caught_up

    def record_seen(self, when: float) -> None:
        """Note that the replica sent a request at ``when``."""
        with self._lock:
            self._last_seen = when

    def record_caught_up(self, when: float) -> None:
        """Note that the replica reached the end of the leader's log at ``when``."""
        with self._lock:
            self._last_caught_up = when

    def is_out_of_sync(self, now: float) -> bool:
        """True if the replica has been silent or behind for over the lag time."""
        with self._lock:
            seen_elapsed = now - self._last_seen
            caught_up_elapsed = now - self._last_caught_up
        return seen_elapsed > self.max_lag_time or caught_up_elapsed > self.max_lag_time