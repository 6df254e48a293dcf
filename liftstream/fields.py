"""Reserved packet fields filled in or checked after their contents."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass

from liftstream.decoder import DecodeError

_UINT32 = struct.Struct(">I")


class ChecksumMismatchError(DecodeError):
    """A CRC field did not match the bytes it covers."""

    default_message = "crc didn't match"


class LengthFieldError(DecodeError):
    """A size field did not match the number of bytes that follow it."""

    default_message = "length field invalid"


@dataclass
class CRCField:
    """A four-byte CRC-32 (IEEE) over the bytes following the field."""

    start_offset: int = 0

    def save_offset(self, offset: int) -> None:
        self.start_offset = offset

    def reserve_size(self) -> int:
        return 4

    def _checksum(self, current_offset: int, buf: bytes | bytearray) -> int:
        return zlib.crc32(buf[self.start_offset + 4:current_offset]) & 0xFFFFFFFF

    def fill(self, current_offset: int, buf: bytearray) -> None:
        _UINT32.pack_into(buf, self.start_offset, self._checksum(current_offset, buf))

    def check(self, current_offset: int, buf: bytes | bytearray) -> None:
        stored = _UINT32.unpack_from(buf, self.start_offset)[0]
        if stored != self._checksum(current_offset, buf):
            raise ChecksumMismatchError()


@dataclass
class SizeField:
    """A four-byte count of the bytes following the field."""

    start_offset: int = 0

    def save_offset(self, offset: int) -> None:
        self.start_offset = offset

    def reserve_size(self) -> int:
        return 4

    def _size(self, current_offset: int) -> int:
        return (current_offset - self.start_offset - 4) & 0xFFFFFFFF

    def fill(self, current_offset: int, buf: bytearray) -> None:
        _UINT32.pack_into(buf, self.start_offset, self._size(current_offset))

    def check(self, current_offset: int, buf: bytes | bytearray) -> None:
        if self._size(current_offset) != _UINT32.unpack_from(buf, self.start_offset)[0]:
            raise LengthFieldError()