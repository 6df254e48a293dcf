import pytest

from liftstream.decoder import ByteDecoder, InsufficientDataError
from liftstream.encoder import LenEncoder
from liftstream.fields import ChecksumMismatchError
from liftstream.message import Message


def test_round_trip():
    msg = Message(
        magic_byte=1,
        attributes=2,
        key=b"bar",
        value=b"hello",
        headers={"a": b"1", "b": b"", "c": None},
    )
    decoded = Message.from_bytes(msg.to_bytes())
    assert decoded.magic_byte == 1
    assert decoded.attributes == 2
    assert decoded.key == b"bar"
    assert decoded.value == b"hello"
    assert decoded.headers == {"a": b"1", "b": b"", "c": None}


def test_null_and_empty_key_are_distinct():
    assert Message.from_bytes(Message(key=None).to_bytes()).key is None
    assert Message.from_bytes(Message(key=b"").to_bytes()).key == b""


def test_length_pass_matches_encoded_size():
    msg = Message(key=b"k", value=b"v" * 10, headers={"h": b"x"})
    counter = LenEncoder()
    msg.encode(counter)
    assert counter.length == len(msg.to_bytes())


def test_transient_fields_not_encoded():
    plain = Message(value=b"v").to_bytes()
    rich = Message(
        value=b"v",
        timestamp=99,
        leader_epoch=4,
        ack_inbox="inbox",
        correlation_id="cid",
        ack_policy=1,
    ).to_bytes()
    assert plain == rich


def test_corruption_detected():
    data = bytearray(Message(key=b"bar", value=b"hello").to_bytes())
    data[-3] ^= 0xFF
    with pytest.raises(ChecksumMismatchError):
        Message.from_bytes(data)


def test_truncated_message():
    data = Message(key=b"bar", value=b"hello").to_bytes()
    with pytest.raises(InsufficientDataError):
        Message.from_bytes(data[:-4])


def test_decode_into_existing_message_consumes_all():
    data = Message(value=b"payload", headers={"x": b"y"}).to_bytes()
    d = ByteDecoder(data)
    msg = Message(key=b"old")
    msg.decode(d)
    assert msg.key is None
    assert msg.value == b"payload"
    assert d.remaining == 0