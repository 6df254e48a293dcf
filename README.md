# liftstream

Building blocks for a replicated, partitioned message-stream server. It has no
dependencies outside the standard library.

## What is in the package

- **Wire encoding** (`liftstream.encoder`, `liftstream.decoder`): a big-endian
  binary format with length-prefixed bytes, strings and arrays.
  `encode(obj)` calls `obj.encode(...)` twice. The first call uses a
  `LenEncoder` to measure the size. The second uses a `ByteEncoder` to write
  into a buffer of exactly that size. `ByteDecoder` reads the values back. On
  truncated or malformed data it raises `DecodeError` subclasses:
  `InsufficientDataError`, `InvalidStringLengthError`,
  `InvalidArrayLengthError` and `InvalidByteSliceLengthError`.
  `decode(data, target, version)` calls `target.decode(ByteDecoder(data),
  version)` and returns `target`.
- **Checked fields** (`liftstream.fields`): each field reserves four bytes when
  it is pushed onto an encoder or decoder.
  - `CRCField` holds a CRC-32 (IEEE) of the bytes written after it.
  - `SizeField` holds the number of those bytes.
  - On `pop()`, an encoder fills the field in and a decoder checks it. A failed
    check raises `ChecksumMismatchError` or `LengthFieldError`.
- **Messages** (`liftstream.message`): `Message` is a dataclass with a magic
  byte, attributes, key, value and string-keyed headers, framed by a CRC. Use
  `Message.to_bytes()` and `Message.from_bytes(data)`. Its transient fields
  (`timestamp`, `leader_epoch`, `ack_inbox`, `correlation_id`, `ack_policy`)
  are not written to the wire.
- **Replication** (`liftstream.replication`):
  - `ReplicationWriter(epoch, high_watermark)` builds a response in this order:
    the 8-byte leader epoch, an 8-byte high-watermark slot, then the headers
    and body of each message. `flush(send)` calls `high_watermark()`, writes
    its value into the slot, and passes the bytes to `send`. The batch is then
    reset, even when `send` raises.
  - `fill_batch(writer, entries, newest_offset, offset)` writes
    `(offset, headers, message)` entries until one of these happens:
    `newest_offset` is reached, the entries run out, or the next message would
    take the batch past `REPLICATION_MAX_SIZE` (1 MiB). It returns the offset
    of the last message written, or -1 if none was written.
  - `ReplicaLagTracker` records when a replica was last seen and when it last
    caught up. `is_out_of_sync(now)` is true once either time is more than
    `max_lag_time` ago.
- **Raft helpers** (`liftstream.raft`):
  - `RaftLogForwarder` is a writable sink that passes lines tagged `[DEBUG]`,
    `[INFO]`, `[WARN]` or `[ERR]` to the matching method of a logger (`debug`,
    `info`, `warning`, `error`), with the tag removed.
  - `metadata_raft_subject(namespace)` returns the base subject for metadata
    Raft traffic in a namespace.
  - `bootstrap_servers(server_id, peers)` returns the initial
    `(id, address)` pairs, with this server first.
- **Subjects** (`liftstream.subjects`): `ClusterSubjects(namespace)` builds the
  subjects for join, bootstrap, propagate, server info, partition status and
  partition notification.
- **Start-up settings** (`liftstream.settings`):
  - `filter_bootstrap_peers` removes the server's own ID from the peer list.
  - `nats_connection_name` returns a connection name of the form
    `LIFT.<namespace>.<server_id>.<name>`.
  - `clamp_log_roll_time` raises a nonzero roll time below one second to one
    second.
  - `default_data_dir` returns `/tmp/liftstream/<namespace>`.
- **Streams** (`liftstream.stream`): `Stream` holds a name, a subject and a
  dict of partitions. `close()` closes each partition in turn and stops at the
  first one that raises.
- **Background tasks** (`liftstream.tasks`): `TaskGroup.start(func)` runs
  `func` in a daemon thread. After `shutdown()` it starts nothing and returns
  None. `wait(timeout)` blocks until every started task has returned.

## Example

```python
from liftstream.message import Message
from liftstream.replication import ReplicationWriter

msg = Message(key=b"bar", value=b"hello", headers={"h": b"v"})
data = msg.to_bytes()
assert Message.from_bytes(data).value == b"hello"

sent = []
writer = ReplicationWriter(epoch=3, high_watermark=lambda: 7)
writer.write(0, bytes(28), data)
writer.flush(sent.append)
assert sent[0][:16] == (3).to_bytes(8, "big") + (7).to_bytes(8, "big")
```

## What the package does not do

This package is a set of parts, not a running server. It does not include:

- network listeners, a client API or message-bus connections;
- a Raft consensus implementation;
- a commit log or any other on-disk storage for partitions;
- partition objects. `Stream` only closes whatever partitions the caller gives
  it.

## Running the tests

```
pip install -e ".[test]"
pytest
```