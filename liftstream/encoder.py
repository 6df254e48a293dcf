"""Big-endian packet encoding: a length pass followed by a write pass."""

from __future__ import annotations

import struct
from typing import Any, Iterable, Protocol

from liftstream.decoder import (
    InvalidArrayLengthError,
    InvalidByteSliceLengthError,
    InvalidStringLengthError,
)

_MAX_INT16 = 0x7FFF
_MAX_INT32 = 0x7FFFFFFF

_INT8 = struct.Struct(">B")
_INT16 = struct.Struct(">H")
_INT32 = struct.Struct(">I")
_INT64 = struct.Struct(">Q")


class FillField(Protocol):
    """A reserved region of a packet filled in once its contents are written."""

    def save_offset(self, offset: int) -> None: ...

    def reserve_size(self) -> int: ...

    def fill(self, current_offset: int, buf: bytearray) -> None: ...


def encode_text(value: str) -> bytes:
    """Turn text into the bytes written for a string."""
    return value.encode("utf-8", "surrogateescape")


class LenEncoder:
    """Counts the bytes an object would take when encoded."""

    def __init__(self) -> None:
        self.length = 0

    def put_bool(self, value: bool) -> None:
        self.length += 1

    def put_int8(self, value: int) -> None:
        self.length += 1

    def put_int16(self, value: int) -> None:
        self.length += 2

    def put_int32(self, value: int) -> None:
        self.length += 4

    def put_int64(self, value: int) -> None:
        self.length += 8

    def put_array_length(self, length: int) -> None:
        if length > _MAX_INT32:
            raise InvalidArrayLengthError()
        self.length += 4

    def put_raw_bytes(self, data: bytes) -> None:
        if len(data) > _MAX_INT32:
            raise InvalidByteSliceLengthError()
        self.length += len(data)

    def put_bytes(self, data: bytes | None) -> None:
        self.length += 4
        if data is None:
            return
        if len(data) > _MAX_INT32:
            raise InvalidByteSliceLengthError()
        self.length += len(data)

    def put_string(self, value: str) -> None:
        self.length += 2
        raw = encode_text(value)
        if len(raw) > _MAX_INT16:
            raise InvalidStringLengthError()
        self.length += len(raw)

    def put_nullable_string(self, value: str | None) -> None:
        if value is None:
            self.length += 2
            return
        self.put_string(value)

    def put_string_array(self, values: Iterable[str]) -> None:
        values = list(values)
        self.put_array_length(len(values))
        for value in values:
            self.put_string(value)

    def put_int32_array(self, values: Iterable[int]) -> None:
        values = list(values)
        self.put_array_length(len(values))
        self.length += 4 * len(values)

    def put_int64_array(self, values: Iterable[int]) -> None:
        values = list(values)
        self.put_array_length(len(values))
        self.length += 8 * len(values)

    def push(self, field: FillField) -> None:
        self.length += field.reserve_size()

    def pop(self) -> None:
        pass


class ByteEncoder:
    """Writes big-endian values into a preallocated buffer."""

    def __init__(self, buf: bytearray) -> None:
        self._buf = buf
        self._off = 0
        self._stack: list[FillField] = []

    def getvalue(self) -> bytes:
        """Return the whole buffer."""
        return bytes(self._buf)

    def _write(self, data: bytes) -> None:
        end = self._off + len(data)
        if end > len(self._buf):
            raise ValueError("encode buffer too small")
        self._buf[self._off:end] = data
        self._off = end

    def put_bool(self, value: bool) -> None:
        self._write(_INT8.pack(1 if value else 0))

    def put_int8(self, value: int) -> None:
        self._write(_INT8.pack(value & 0xFF))

    def put_int16(self, value: int) -> None:
        self._write(_INT16.pack(value & 0xFFFF))

    def put_int32(self, value: int) -> None:
        self._write(_INT32.pack(value & 0xFFFFFFFF))

    def put_int64(self, value: int) -> None:
        self._write(_INT64.pack(value & 0xFFFFFFFFFFFFFFFF))

    def put_array_length(self, length: int) -> None:
        self.put_int32(length)

    def put_raw_bytes(self, data: bytes) -> None:
        self._write(bytes(data))

    def put_bytes(self, data: bytes | None) -> None:
        if data is None:
            self.put_int32(-1)
            return
        self.put_int32(len(data))
        self._write(bytes(data))

    def put_string(self, value: str) -> None:
        raw = encode_text(value)
        self.put_int16(len(raw))
        self._write(raw)

    def put_nullable_string(self, value: str | None) -> None:
        if value is None:
            self.put_int16(-1)
            return
        self.put_string(value)

    def put_string_array(self, values: Iterable[str]) -> None:
        values = list(values)
        self.put_array_length(len(values))
        for value in values:
            self.put_string(value)

    def put_int32_array(self, values: Iterable[int]) -> None:
        values = list(values)
        self.put_array_length(len(values))
        for value in values:
            self.put_int32(value)

    def put_int64_array(self, values: Iterable[int]) -> None:
        values = list(values)
        self.put_array_length(len(values))
        for value in values:
            self.put_int64(value)

    def push(self, field: FillField) -> None:
        """Reserve space for a field to be filled on the matching pop."""
        field.save_offset(self._off)
        self._off += field.reserve_size()
        self._stack.append(field)

    def pop(self) -> None:
        """Fill the most recently pushed field over the bytes written since."""
        field = self._stack.pop()
        field.fill(self._off, self._buf)


def encode(obj: Any) -> bytes:
    """Encode an object exposing ``encode(encoder)`` into exactly sized bytes."""
    counter = LenEncoder()
    obj.encode(counter)
    buf = bytearray(counter.length)
    obj.encode(ByteEncoder(buf))
    return bytes(buf)