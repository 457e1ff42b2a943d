"""Peer-to-peer chat client that finds peers through the name server."""

from __future__ import annotations

import logging
import struct
import sys
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from udpchat.dns import FIELD_SIZE, DnsClient
from udpchat.protocol import Message, MessageType, UdpSocket

logger = logging.getLogger(__name__)

TEXT_SIZE = 50


def _pack_text(text: str, size: int, name: str) -> bytes:
    raw = text.encode("utf-8")
    if len(raw) >= size:
        raise ValueError(f"{name} must be shorter than {size} bytes: {text!r}")
    if b"\x00" in raw:
        raise ValueError(f"{name} must not contain NUL bytes")
    return raw


def _unpack_text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ChatPayload:
    """A chat line and the ID of the user who sent it."""

    sender_id: str
    text: str

    _LAYOUT = struct.Struct(f"<{FIELD_SIZE}s{TEXT_SIZE}s")

    def encode(self) -> bytes:
        return self._LAYOUT.pack(
            _pack_text(self.sender_id, FIELD_SIZE, "sender id"),
            _pack_text(self.text, TEXT_SIZE, "chat message"),
        )

    @classmethod
    def decode(cls, data: bytes) -> ChatPayload:
        if len(data) < cls._LAYOUT.size:
            raise ValueError(f"chat payload needs {cls._LAYOUT.size} bytes, got {len(data)}")
        sender_id, text = cls._LAYOUT.unpack_from(data)
        return cls(_unpack_text(sender_id), _unpack_text(text))


class ChatClient:
    """Sends chat lines to peers and turns received ones into display text."""

    def __init__(self, user_id: str, chat_sock: UdpSocket, dns: DnsClient) -> None:
        self.user_id = user_id
        self._sock = chat_sock
        self._dns = dns

    def send(self, peer_id: str, text: str) -> bool:
        """Send ``text`` to ``peer_id``; return False if the peer is unknown."""
        message = Message(MessageType.MYCHAT_TYPE_1, ChatPayload(self.user_id, text).encode())
        address = self._dns.get_address(peer_id)
        if not address.found:
            return False
        self._sock.send_message(address.ip, int(address.port), message)
        return True

    def handle(self, source_ip: str, source_port: int, message: Message) -> str | None:
        """Return the line to display for ``message``, or None if there is none."""
        if message.msg_type == MessageType.MYCHAT_TYPE_1:
            payload = ChatPayload.decode(message.payload)
            return f"{payload.sender_id} says: {payload.text}"
        if message.msg_type == MessageType.MYCHAT_TYPE_2:
            return None
        logger.error("Error! Undefined Message Type Received !!!")
        return None

    def listen(self) -> None:
        """Print incoming chat lines until an exception other than ValueError."""
        while True:
            try:
                source_ip, source_port, message = self._sock.recv_message()
                line = self.handle(source_ip, source_port, message)
            except ValueError as exc:
                logger.error("Discarding malformed message: %s", exc)
                continue
            if line is not None:
                print(line, flush=True)


def _tokens(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        yield from line.split()


def main(argv: list[str] | None = None) -> int:
    """Run the chat client: ``<user id> <chat port>``, then read from stdin."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print("Error! Mention my ID/Name and Port No.", file=sys.stderr)
        return 1
    user_id, chat_port = args[0], args[1]
    try:
        port = int(chat_port)
    except ValueError:
        print(f"Error! Invalid port no.: {chat_port}", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    tokens = _tokens(sys.stdin)
    with UdpSocket() as chat_sock, UdpSocket() as dns_sock:
        try:
            chat_sock.bind(port)
        except OSError as exc:
            print(f"bind failed: {exc}", file=sys.stderr)
            return 1

        print("Enter the IP, and Port no. of the DNS Server, seperated by a space")
        try:
            dns_ip = next(tokens)
            dns_port = int(next(tokens))
        except StopIteration:
            return 0
        except ValueError:
            print("Error! Invalid DNS Server port no.", file=sys.stderr)
            return 1

        dns = DnsClient(dns_ip, dns_port, dns_sock)
        try:
            print(dns.register(user_id, chat_port))
        except ValueError as exc:
            print(f"Error! {exc}", file=sys.stderr)
            return 1

        client = ChatClient(user_id, chat_sock, dns)
        threading.Thread(target=client.listen, daemon=True).start()

        print(
            "When You Wish to Send a Message, Enter the ID/Name and your "
            "Message Seperate by a Space:- "
        )
        try:
            for peer_id in tokens:
                text = next(tokens, None)
                if text is None:
                    break
                try:
                    if not client.send(peer_id, text):
                        print("No Such ID Exists!!!")
                except ValueError as exc:
                    print(f"Error! {exc}")
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())