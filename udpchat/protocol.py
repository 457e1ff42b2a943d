"""Datagram message framing and a small UDP socket wrapper."""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass
from enum import IntEnum

MAX_PAYLOAD = 1024

_HEADER = struct.Struct("<ii")
HEADER_SIZE = _HEADER.size
MAX_DATAGRAM = HEADER_SIZE + MAX_PAYLOAD


class MessageType(IntEnum):
    """Kinds of message carried in the header."""

    DNS_TYPE_1 = 0
    DNS_TYPE_2 = 1
    DNS_TYPE_3 = 2
    MYCHAT_TYPE_1 = 3
    MYCHAT_TYPE_2 = 4


@dataclass(frozen=True)
class Message:
    """A framed datagram: an 8-byte header followed by the payload.

    ``msg_type`` is a plain ``int`` when the received type is not a known
    :class:`MessageType`.
    """

    msg_type: MessageType | int
    payload: bytes = b""

    def __post_init__(self) -> None:
        if len(self.payload) > MAX_PAYLOAD:
            raise ValueError(
                f"payload of {len(self.payload)} bytes exceeds {MAX_PAYLOAD}"
            )

    def encode(self) -> bytes:
        """Return the wire form of the message."""
        return _HEADER.pack(int(self.msg_type), len(self.payload)) + bytes(self.payload)

    @classmethod
    def decode(cls, data: bytes) -> Message:
        """Parse a datagram; raise ValueError if it is malformed."""
        if len(data) < HEADER_SIZE:
            raise ValueError("datagram shorter than the message header")
        raw_type, length = _HEADER.unpack_from(data)
        if not 0 <= length <= MAX_PAYLOAD:
            raise ValueError(f"invalid payload length {length}")
        body = bytes(data[HEADER_SIZE:HEADER_SIZE + length])
        if len(body) < length:
            raise ValueError("datagram shorter than its declared payload")
        try:
            msg_type: MessageType | int = MessageType(raw_type)
        except ValueError:
            msg_type = raw_type
        return cls(msg_type, body)


class UdpSocket:
    """An IPv4 UDP socket that sends and receives :class:`Message` objects."""

    def __init__(self) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def bind(self, port: int) -> int:
        """Bind to ``port`` on all interfaces and return the bound port."""
        self._sock.bind(("", port))
        return self._sock.getsockname()[1]

    def send_message(self, ip: str, port: int, message: Message) -> int:
        """Send ``message`` to ``ip:port`` and return the number of bytes sent."""
        return self._sock.sendto(message.encode(), (ip, port))

    def recv_message(self) -> tuple[str, int, Message]:
        """Wait for a datagram and return ``(source_ip, source_port, message)``."""
        data, (ip, port) = self._sock.recvfrom(MAX_DATAGRAM)
        return ip, port, Message.decode(data)

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> UdpSocket:
        return self

    def __exit__(self, *args) -> None:
        self.close()