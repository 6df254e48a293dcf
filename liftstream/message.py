"""The message record stored in partition logs."""

from __future__ import annotations

from dataclasses import dataclass, field

from liftstream.decoder import ByteDecoder
from liftstream.encoder import ByteEncoder, LenEncoder, encode
from liftstream.fields import CRCField


@dataclass
class Message:
    """A keyed message with headers, framed by a CRC over its contents."""

    crc: int = 0
    magic_byte: int = 0
    attributes: int = 0
    key: bytes | None = None
    value: bytes | None = None
    headers: dict[str, bytes | None] = field(default_factory=dict)

    # Transient fields, never written to the wire.
    timestamp: int = 0
    leader_epoch: int = 0
    ack_inbox: str = ""
    correlation_id: str = ""
    ack_policy: int = 0

    def encode(self, encoder: LenEncoder | ByteEncoder) -> None:
        encoder.push(CRCField())
        encoder.put_int8(self.magic_byte)
        encoder.put_int8(self.attributes)
        encoder.put_bytes(self.key)
        encoder.put_bytes(self.value)
        encoder.put_int16(len(self.headers))
        for name, header in self.headers.items():
            encoder.put_string(name)
            encoder.put_bytes(header)
        encoder.pop()

    def decode(self, decoder: ByteDecoder) -> Message:
        decoder.push(CRCField())
        self.magic_byte = decoder.read_int8()
        self.attributes = decoder.read_int8()
        self.key = decoder.read_bytes()
        self.value = decoder.read_bytes()
        count = decoder.read_int16()
        headers: dict[str, bytes | None] = {}
        for _ in range(count):
            name = decoder.read_string()
            headers[name] = decoder.read_bytes()
        self.headers = headers
        decoder.pop()
        return self

    def to_bytes(self) -> bytes:
        """Encode the message into its wire form."""
        return encode(self)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> Message:
        """Decode a message from its wire form, verifying its CRC."""
        return cls().decode(ByteDecoder(data))