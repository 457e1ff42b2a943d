"""Name-service payloads, the user table and the client that queries it."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from udpchat.protocol import Message, MessageType, UdpSocket

logger = logging.getLogger(__name__)

FIELD_SIZE = 20
RESPONSE_SIZE = 50
MAX_USERS = 100


def _pack_text(text: str, size: int, name: str) -> bytes:
    raw = text.encode("utf-8")
    if len(raw) >= size:
        raise ValueError(f"{name} must be shorter than {size} bytes: {text!r}")
    if b"\x00" in raw:
        raise ValueError(f"{name} must not contain NUL bytes")
    return raw


def _unpack_text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def _check_length(data: bytes, layout: struct.Struct, name: str) -> None:
    if len(data) < layout.size:
        raise ValueError(f"{name} needs {layout.size} bytes, got {len(data)}")


@dataclass(frozen=True)
class RegisterRequest:
    """Registration or lookup request.

    When ``port`` is None the server uses the port the request came from.
    """

    user_id: str
    port: str | None = None

    _LAYOUT = struct.Struct(f"<i{FIELD_SIZE}s{FIELD_SIZE}s")

    def encode(self) -> bytes:
        user_id = _pack_text(self.user_id, FIELD_SIZE, "user id")
        if self.port is None:
            return self._LAYOUT.pack(0, user_id, b"")
        return self._LAYOUT.pack(1, user_id, _pack_text(self.port, FIELD_SIZE, "port"))

    @classmethod
    def decode(cls, data: bytes) -> RegisterRequest:
        _check_length(data, cls._LAYOUT, "register request")
        flag, user_id, port = cls._LAYOUT.unpack_from(data)
        return cls(_unpack_text(user_id), _unpack_text(port) if flag else None)


@dataclass(frozen=True)
class RegisterResponse:
    """Text reply to a registration."""

    response: str

    _LAYOUT = struct.Struct(f"<{RESPONSE_SIZE}s")

    def encode(self) -> bytes:
        return self._LAYOUT.pack(_pack_text(self.response, RESPONSE_SIZE, "response"))

    @classmethod
    def decode(cls, data: bytes) -> RegisterResponse:
        _check_length(data, cls._LAYOUT, "register response")
        (response,) = cls._LAYOUT.unpack_from(data)
        return cls(_unpack_text(response))


@dataclass(frozen=True)
class AddressResponse:
    """Reply to an address lookup; ``ip`` and ``port`` are None when not found."""

    ip: str | None = None
    port: str | None = None

    _LAYOUT = struct.Struct(f"<i{FIELD_SIZE}s{FIELD_SIZE}s")

    @property
    def found(self) -> bool:
        return self.ip is not None

    def encode(self) -> bytes:
        if not self.found:
            return self._LAYOUT.pack(-1, b"", b"")
        return self._LAYOUT.pack(
            1,
            _pack_text(self.ip, FIELD_SIZE, "ip"),
            _pack_text(self.port or "", FIELD_SIZE, "port"),
        )

    @classmethod
    def decode(cls, data: bytes) -> AddressResponse:
        _check_length(data, cls._LAYOUT, "address response")
        flag, ip, port = cls._LAYOUT.unpack_from(data)
        if flag < 0:
            return cls()
        return cls(_unpack_text(ip), _unpack_text(port))


@dataclass
class UserRecord:
    """A registered user's address."""

    user_id: str
    ip: str
    port: str

    def __str__(self) -> str:
        return f"ID= {self.user_id}, IP= {self.ip}, Port= {self.port}"


class UserDB:
    """Table of registered users, holding at most ``MAX_USERS`` entries."""

    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}

    def __len__(self) -> int:
        return len(self._users)

    def register_user(self, user_id: str, ip: str, port: str) -> bool:
        """Store the address for ``user_id``; return True if the user is new."""
        is_new = user_id not in self._users
        if is_new and len(self._users) >= MAX_USERS:
            raise OverflowError(f"user table is full ({MAX_USERS} users)")
        logger.info("Registering ID = %s IP = %s Port = %s", user_id, ip, port)
        self._users[user_id] = UserRecord(user_id, ip, port)
        return is_new

    def get_address(self, user_id: str) -> UserRecord | None:
        """Return the record for ``user_id`` or None if it is unknown."""
        return self._users.get(user_id)


class DnsClient:
    """Registers with and queries a name server over a UDP socket."""

    def __init__(self, ip: str, port: int, sock: UdpSocket) -> None:
        self.ip = ip
        self.port = port
        self._sock = sock

    def _exchange(self, msg_type: MessageType, payload: bytes) -> Message:
        self._sock.send_message(self.ip, self.port, Message(msg_type, payload))
        _, _, reply = self._sock.recv_message()
        return reply

    def register(self, user_id: str, port: str | None = None) -> str:
        """Register ``user_id``, optionally at ``port``; return the server's reply."""
        reply = self._exchange(
            MessageType.DNS_TYPE_1, RegisterRequest(user_id, port).encode()
        )
        return RegisterResponse.decode(reply.payload).response

    def get_address(self, peer_id: str) -> AddressResponse:
        """Look up the address registered for ``peer_id``."""
        reply = self._exchange(MessageType.DNS_TYPE_2, RegisterRequest(peer_id).encode())
        return AddressResponse.decode(reply.payload)