import pytest

from liftstream.decoder import DecodeError
from liftstream.fields import ChecksumMismatchError, CRCField, LengthFieldError, SizeField


def test_crc_fill_writes_standard_check_value():
    buf = bytearray(4) + bytearray(b"123456789")
    field = CRCField()
    field.save_offset(0)
    field.fill(len(buf), buf)
    assert bytes(buf[:4]) == (0xCBF43926).to_bytes(4, "big")
    assert bytes(buf[4:]) == b"123456789"


def test_crc_check_detects_corruption():
    buf = bytearray(b"xx") + bytearray(4) + bytearray(b"payload")
    field = CRCField()
    field.save_offset(2)
    assert field.reserve_size() == 4
    field.fill(len(buf), buf)
    field.check(len(buf), bytes(buf))
    buf[8] ^= 0x01
    with pytest.raises(ChecksumMismatchError):
        field.check(len(buf), buf)


def test_crc_covers_only_up_to_current_offset():
    buf = bytearray(4) + bytearray(b"abc") + bytearray(b"tail")
    field = CRCField()
    field.fill(7, buf)
    buf[-1] ^= 0xFF
    field.check(7, buf)
    with pytest.raises(ChecksumMismatchError):
        field.check(len(buf), buf)


def test_size_fill_records_following_length():
    payload = b"hello"
    buf = bytearray(b"ab") + bytearray(4) + bytearray(payload)
    field = SizeField()
    field.save_offset(2)
    field.fill(len(buf), buf)
    assert int.from_bytes(buf[2:6], "big") == len(payload)
    field.check(len(buf), buf)


def test_size_check_rejects_wrong_length():
    buf = bytearray(4) + bytearray(b"data")
    field = SizeField()
    assert field.reserve_size() == 4
    field.fill(len(buf), buf)
    with pytest.raises(LengthFieldError):
        field.check(len(buf) - 1, buf)


def test_field_errors_are_decode_errors():
    buf = bytearray(8)
    with pytest.raises(DecodeError):
        SizeField().check(8, buf)