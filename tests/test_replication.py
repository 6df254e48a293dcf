import struct

import pytest

from liftstream.replication import (
    MESSAGE_HEADERS_SIZE,
    REPLICATION_MAX_SIZE,
    REPLICATION_OVERHEAD,
    ReplicaLagTracker,
    ReplicationWriter,
    fill_batch,
)


HEADERS = bytes(MESSAGE_HEADERS_SIZE)


def _broken_entries():
    yield (0, HEADERS, b"ok")
    raise IOError("corrupt segment")


def test_fresh_writer_has_only_overhead():
    writer = ReplicationWriter(1, lambda: 0)
    assert len(writer) == REPLICATION_OVERHEAD
    assert writer.last_offset == -1


def test_flush_of_empty_batch_carries_epoch_and_hw():
    writer = ReplicationWriter(7, lambda: 3)
    sent = []
    writer.flush(sent.append)
    assert sent == [struct.pack(">Q", 7) + struct.pack(">Q", 3)]
    assert len(writer) == REPLICATION_OVERHEAD


def test_negative_hw_is_written_as_unsigned():
    writer = ReplicationWriter(0, lambda: -1)
    sent = []
    writer.flush(sent.append)
    assert sent[0][8:16] == b"\xff" * 8
    assert len(writer) == REPLICATION_OVERHEAD


def test_write_appends_headers_then_message():
    writer = ReplicationWriter(2, lambda: 0)
    writer.write(5, b"HH", b"body")
    assert writer.last_offset == 5
    assert len(writer) == REPLICATION_OVERHEAD + len(b"HH") + len(b"body")
    sent = []
    writer.flush(sent.append)
    assert sent[0][REPLICATION_OVERHEAD:] == b"HHbody"


def test_hw_is_read_at_flush_time():
    hw = {"value": 1}
    writer = ReplicationWriter(0, lambda: hw["value"])
    writer.write(0, b"", b"x")
    assert len(writer) == REPLICATION_OVERHEAD + 1
    hw["value"] = 9
    sent = []
    writer.flush(sent.append)
    assert struct.unpack(">Q", sent[0][8:16])[0] == 9


def test_flush_resets_batch():
    writer = ReplicationWriter(4, lambda: 0)
    writer.write(1, b"h", b"m")
    writer.flush(lambda data: None)
    assert len(writer) == REPLICATION_OVERHEAD
    assert writer.last_offset == -1


def test_flush_resets_and_raises_when_send_fails():
    writer = ReplicationWriter(4, lambda: 0)
    writer.write(1, b"h", b"m")

    def failing(data):
        raise OSError("closed")

    with pytest.raises(OSError):
        writer.flush(failing)
    assert len(writer) == REPLICATION_OVERHEAD
    assert writer.last_offset == -1


def test_reset_discards_messages():
    writer = ReplicationWriter(3, lambda: 0)
    writer.write(0, HEADERS, b"abc")
    writer.reset()
    assert len(writer) == REPLICATION_OVERHEAD
    assert writer.last_offset == -1
    sent = []
    writer.flush(sent.append)
    assert sent[0][:8] == struct.pack(">Q", 3)
    assert len(sent[0]) == REPLICATION_OVERHEAD


def test_fill_batch_stops_at_newest_offset():
    writer = ReplicationWriter(1, lambda: 0)
    entries = [(i, HEADERS, b"m%d" % i) for i in range(10)]
    last = fill_batch(writer, entries, 3, -1)
    assert last == 3
    sent = []
    writer.flush(sent.append)
    body = sent[0][REPLICATION_OVERHEAD:]
    assert body == b"".join(HEADERS + b"m%d" % i for i in range(4))


def test_fill_batch_nothing_when_caught_up():
    writer = ReplicationWriter(1, lambda: 0)
    last = fill_batch(writer, [(0, HEADERS, b"x")], 0, 0)
    assert last == -1
    assert len(writer) == REPLICATION_OVERHEAD


def test_fill_batch_stops_when_entries_run_out():
    writer = ReplicationWriter(1, lambda: 0)
    entries = [(0, HEADERS, b"a"), (1, HEADERS, b"b")]
    last = fill_batch(writer, entries, 100, -1)
    assert last == 1
    assert len(writer) == REPLICATION_OVERHEAD + 2 * (MESSAGE_HEADERS_SIZE + 1)


def test_fill_batch_message_exactly_at_limit_fits():
    writer = ReplicationWriter(1, lambda: 0)
    size = REPLICATION_MAX_SIZE - REPLICATION_OVERHEAD - MESSAGE_HEADERS_SIZE
    entries = [(0, HEADERS, bytes(size)), (1, HEADERS, b"next")]
    last = fill_batch(writer, entries, 10, -1)
    assert last == 0
    assert len(writer) == REPLICATION_MAX_SIZE


def test_fill_batch_skips_message_over_limit():
    writer = ReplicationWriter(1, lambda: 0)
    size = REPLICATION_MAX_SIZE - REPLICATION_OVERHEAD - MESSAGE_HEADERS_SIZE + 1
    entries = [(0, HEADERS, bytes(size))]
    last = fill_batch(writer, entries, 10, -1)
    assert last == -1
    assert len(writer) == REPLICATION_OVERHEAD


def test_fill_batch_propagates_read_errors():
    writer = ReplicationWriter(1, lambda: 0)
    with pytest.raises(IOError, match="corrupt segment"):
        fill_batch(writer, _broken_entries(), 10, -1)


def test_tracker_in_sync_within_lag_time():
    tracker = ReplicaLagTracker(1.0, 0.0)
    assert tracker.is_out_of_sync(1.0) is False


def test_tracker_out_of_sync_after_lag_time():
    tracker = ReplicaLagTracker(1.0, 0.0)
    assert tracker.is_out_of_sync(1.5) is True


def test_tracker_seen_but_not_caught_up_is_out_of_sync():
    tracker = ReplicaLagTracker(1.0, 0.0)
    tracker.record_seen(1.4)
    assert tracker.last_seen == 1.4
    assert tracker.is_out_of_sync(1.5) is True


def test_tracker_recovers_after_catching_up():
    tracker = ReplicaLagTracker(1.0, 0.0)
    assert tracker.is_out_of_sync(2.0) is True
    tracker.record_seen(2.0)
    tracker.record_caught_up(2.0)
    assert tracker.last_caught_up == 2.0
    assert tracker.is_out_of_sync(2.5) is False