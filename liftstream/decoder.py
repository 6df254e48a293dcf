"""Big-endian packet decoding with support for pushed check fields."""

from __future__ import annotations

import struct
from typing import Any, Protocol

_INT8 = struct.Struct(">b")
_INT16 = struct.Struct(">h")
_INT32 = struct.Struct(">i")
_INT64 = struct.Struct(">q")
_UINT32 = struct.Struct(">I")

_MAX_ARRAY_LENGTH = 2 * 0xFFFF


class DecodeError(Exception):
    """Base class for errors raised while decoding a packet."""

    default_message = "failed to decode packet"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InsufficientDataError(DecodeError):
    """The buffer ended before the value being read."""

    default_message = "insufficient data to decode packet, more bytes expected"


class InvalidStringLengthError(DecodeError):
    """A string carried a length that is not allowed."""

    default_message = "invalid string length"


class InvalidArrayLengthError(DecodeError):
    """An array carried a length that is not allowed."""

    default_message = "invalid array length"


class InvalidByteSliceLengthError(DecodeError):
    """A byte string carried a length that is not allowed."""

    default_message = "invalid byteslice length"


class CheckField(Protocol):
    """A reserved region of a packet verified once decoding passes over it."""

    def save_offset(self, offset: int) -> None: ...

    def reserve_size(self) -> int: ...

    def check(self, current_offset: int, buf: bytes | bytearray) -> None: ...


def decode_text(raw: bytes) -> str:
    """Turn raw string bytes into text without losing undecodable bytes."""
    return raw.decode("utf-8", "surrogateescape")


class ByteDecoder:
    """Reads big-endian values from a byte buffer, advancing an offset."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._off = 0
        self._stack: list[CheckField] = []

    @property
    def offset(self) -> int:
        """Position of the next byte to read."""
        return self._off

    @property
    def remaining(self) -> int:
        """Number of bytes left to read."""
        return len(self._data) - self._off

    def _exhaust(self) -> InsufficientDataError:
        self._off = len(self._data)
        return InsufficientDataError()

    def _take(self, size: int) -> bytes:
        if self.remaining < size:
            raise self._exhaust()
        chunk = self._data[self._off:self._off + size]
        self._off += size
        return chunk

    def read_bool(self) -> bool:
        return self.read_int8() == 1

    def read_int8(self) -> int:
        return _INT8.unpack(self._take(1))[0]

    def read_int16(self) -> int:
        return _INT16.unpack(self._take(2))[0]

    def read_int32(self) -> int:
        return _INT32.unpack(self._take(4))[0]

    def read_int64(self) -> int:
        return _INT64.unpack(self._take(8))[0]

    def _read_count(self) -> int:
        return _UINT32.unpack(self._take(4))[0]

    def read_array_length(self) -> int:
        length = self._read_count()
        if length > self.remaining:
            raise self._exhaust()
        if length > _MAX_ARRAY_LENGTH:
            raise InvalidArrayLengthError()
        return length

    def read_bytes(self) -> bytes | None:
        """Read a length-prefixed byte string; a length of -1 means None."""
        length = self.read_int32()
        if length < -1:
            raise InvalidByteSliceLengthError()
        if length == -1:
            return None
        if length == 0:
            return b""
        return self._take(length)

    def read_string(self) -> str:
        """Read a length-prefixed string; null and empty both give ''."""
        length = self.read_int16()
        if length < -1:
            raise InvalidStringLengthError()
        if length <= 0:
            return ""
        return decode_text(self._take(length))

    def read_nullable_string(self) -> str | None:
        """Read a length-prefixed string; a length of -1 means None."""
        length = self.read_int16()
        if length < -1:
            raise InvalidStringLengthError()
        if length > self.remaining:
            raise self._exhaust()
        if length == -1:
            return None
        return decode_text(self._take(length))

    def _read_fixed_array(self, item: struct.Struct) -> list[int]:
        count = self._read_count()
        if self.remaining < item.size * count:
            raise self._exhaust()
        raw = self._take(item.size * count)
        return [value for (value,) in item.iter_unpack(raw)]

    def read_int32_array(self) -> list[int]:
        return self._read_fixed_array(_INT32)

    def read_int64_array(self) -> list[int]:
        return self._read_fixed_array(_INT64)

    def read_string_array(self) -> list[str]:
        count = self._read_count()
        return [self.read_string() for _ in range(count)]

    def push(self, field: CheckField) -> None:
        """Reserve space for a check field at the current offset."""
        field.save_offset(self._off)
        reserved = field.reserve_size()
        if self.remaining < reserved:
            raise self._exhaust()
        self._stack.append(field)
        self._off += reserved

    def pop(self) -> None:
        """Verify the most recently pushed field against the bytes read since."""
        if not self._stack:
            raise DecodeError("no field pushed")
        field = self._stack.pop()
        field.check(self._off, self._data)


def decode(data: bytes | bytearray | memoryview, target: Any, version: int) -> Any:
    """Decode ``data`` into ``target`` using its versioned ``decode`` method."""
    target.decode(ByteDecoder(data), version)
    return target