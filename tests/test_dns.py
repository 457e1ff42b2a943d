import pytest

from udpchat.dns import (
    MAX_USERS,
    AddressResponse,
    DnsClient,
    RegisterRequest,
    RegisterResponse,
    UserDB,
    UserRecord,
)
from udpchat.protocol import Message, MessageType


class _FakeSocket:
    def __init__(self, replies):
        self.sent = []
        self._replies = list(replies)

    def send_message(self, ip, port, message):
        self.sent.append((ip, port, message))
        return len(message.encode())

    def recv_message(self):
        return ("10.0.0.1", 5000, self._replies.pop(0))


def test_register_request_round_trip_with_port():
    req = RegisterRequest("alice", "6000")
    assert RegisterRequest.decode(req.encode()) == req


def test_register_request_round_trip_without_port():
    req = RegisterRequest("bob")
    decoded = RegisterRequest.decode(req.encode())
    assert decoded.user_id == "bob"
    assert decoded.port is None


def test_register_request_wire_prefix():
    assert RegisterRequest("bob").encode().startswith(b"\x00\x00\x00\x00bob\x00")
    assert RegisterRequest("bob", "7").encode().startswith(b"\x01\x00\x00\x00bob\x00")


def test_register_request_id_too_long():
    with pytest.raises(ValueError):
        RegisterRequest("x" * 20).encode()


def test_register_request_decode_short():
    with pytest.raises(ValueError):
        RegisterRequest.decode(b"\x00" * 10)


def test_register_response_round_trip():
    resp = RegisterResponse("New User Registered.")
    assert RegisterResponse.decode(resp.encode()) == resp


def test_register_response_too_long():
    with pytest.raises(ValueError):
        RegisterResponse("y" * 50).encode()


def test_address_response_found_round_trip():
    resp = AddressResponse("192.168.1.5", "6001")
    decoded = AddressResponse.decode(resp.encode())
    assert decoded == resp
    assert decoded.found


def test_address_response_not_found_round_trip():
    decoded = AddressResponse.decode(AddressResponse().encode())
    assert not decoded.found
    assert decoded.ip is None and decoded.port is None


def test_user_db_register_new_then_update():
    db = UserDB()
    assert db.register_user("alice", "1.2.3.4", "6000") is True
    assert db.register_user("alice", "5.6.7.8", "7000") is False
    assert len(db) == 1
    assert db.get_address("alice") == UserRecord("alice", "5.6.7.8", "7000")


def test_user_db_unknown_user():
    db = UserDB()
    db.register_user("alice", "1.2.3.4", "6000")
    assert db.get_address("carol") is None


def test_user_db_capacity():
    db = UserDB()
    for n in range(MAX_USERS):
        db.register_user(f"user{n}", "1.1.1.1", "1")
    with pytest.raises(OverflowError):
        db.register_user("extra", "1.1.1.1", "1")
    assert db.register_user("user0", "2.2.2.2", "2") is False
    assert db.get_address("user0").ip == "2.2.2.2"


def test_user_record_str():
    record = UserRecord("alice", "1.2.3.4", "6000")
    assert str(record) == "ID= alice, IP= 1.2.3.4, Port= 6000"


def test_client_register_sends_request_and_returns_reply():
    reply = Message(MessageType.DNS_TYPE_2, RegisterResponse("User Details Updated.").encode())
    sock = _FakeSocket([reply])
    client = DnsClient("127.0.0.1", 5353, sock)
    assert client.register("alice", "6000") == "User Details Updated."
    ip, port, sent = sock.sent[0]
    assert (ip, port) == ("127.0.0.1", 5353)
    assert sent.msg_type == MessageType.DNS_TYPE_1
    assert RegisterRequest.decode(sent.payload) == RegisterRequest("alice", "6000")


def test_client_register_without_port():
    reply = Message(MessageType.DNS_TYPE_2, RegisterResponse("New User Registered.").encode())
    sock = _FakeSocket([reply])
    client = DnsClient("127.0.0.1", 5353, sock)
    assert client.register("bob") == "New User Registered."
    assert RegisterRequest.decode(sock.sent[0][2].payload).port is None


def test_client_get_address():
    answer = AddressResponse("10.1.1.1", "6500")
    sock = _FakeSocket([Message(MessageType.DNS_TYPE_3, answer.encode())])
    client = DnsClient("127.0.0.1", 5353, sock)
    assert client.get_address("bob") == answer
    sent = sock.sent[0][2]
    assert sent.msg_type == MessageType.DNS_TYPE_2
    assert RegisterRequest.decode(sent.payload).user_id == "bob"


def test_client_get_address_not_found():
    sock = _FakeSocket([Message(MessageType.DNS_TYPE_3, AddressResponse().encode())])
    client = DnsClient("127.0.0.1", 5353, sock)
    assert not client.get_address("nobody").found