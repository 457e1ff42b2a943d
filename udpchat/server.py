"""Name server that maps chat user IDs to their network addresses."""

from __future__ import annotations

import logging
import sys

from udpchat.dns import AddressResponse, RegisterRequest, RegisterResponse, UserDB
from udpchat.protocol import Message, MessageType, UdpSocket

logger = logging.getLogger(__name__)

NEW_USER_RESPONSE = "New User Registered."
UPDATED_USER_RESPONSE = "User Details Updated."


class DnsServer:
    """Answers registration and lookup requests arriving on a socket."""

    def __init__(self, sock: UdpSocket, db: UserDB | None = None) -> None:
        self._sock = sock
        self.db = db if db is not None else UserDB()

    def handle(self, source_ip: str, source_port: int, message: Message) -> Message | None:
        """Process one request, send the reply to its sender and return it.

        Messages of a type the server does not serve are logged and get no reply.
        """
        if message.msg_type == MessageType.DNS_TYPE_1:
            logger.info("DNS_TYPE_1 Message received from %s::%s", source_ip, source_port)
            reply = self._register(source_ip, source_port, message)
        elif message.msg_type == MessageType.DNS_TYPE_2:
            logger.info("DNS_TYPE_2 Message received from %s::%s", source_ip, source_port)
            reply = self._lookup(message)
        else:
            logger.error("Error! Undefined Message Type Received !!!")
            return None
        self._sock.send_message(source_ip, source_port, reply)
        return reply

    def _register(self, source_ip: str, source_port: int, message: Message) -> Message:
        request = RegisterRequest.decode(message.payload)
        port = request.port if request.port is not None else str(source_port)
        is_new = self.db.register_user(request.user_id, source_ip, port)
        text = NEW_USER_RESPONSE if is_new else UPDATED_USER_RESPONSE
        return Message(MessageType.DNS_TYPE_2, RegisterResponse(text).encode())

    def _lookup(self, message: Message) -> Message:
        request = RegisterRequest.decode(message.payload)
        record = self.db.get_address(request.user_id)
        if record is None:
            answer = AddressResponse()
        else:
            answer = AddressResponse(record.ip, record.port)
        return Message(MessageType.DNS_TYPE_3, answer.encode())

    def serve_forever(self) -> None:
        """Receive and answer requests until an exception other than ValueError."""
        while True:
            try:
                source_ip, source_port, message = self._sock.recv_message()
                self.handle(source_ip, source_port, message)
            except ValueError as exc:
                logger.error("Discarding malformed message: %s", exc)


def main(argv: list[str] | None = None) -> int:
    """Run the name server on the port given as the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Error! Mention my port no.", file=sys.stderr)
        return 1
    try:
        port = int(args[0])
    except ValueError:
        print(f"Error! Invalid port no.: {args[0]}", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stdout)
    with UdpSocket() as sock:
        try:
            sock.bind(port)
        except OSError as exc:
            print(f"bind failed: {exc}", file=sys.stderr)
            return 1
        try:
            DnsServer(sock, UserDB()).serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())