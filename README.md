# udpchat

A minimal peer-to-peer chat over UDP. A small lookup server maps user
IDs to the IP address and port number each user listens on. Chat
clients register with it and then look peers up to send them messages
directly.

## Installation

```
pip install .
```

## Running the lookup server

Start the server, giving the UDP port number it should listen on:

```
udpchat-server 5000
```

It logs each request it receives to standard output and answers two
kinds of request:

- **register**: stores the sender's ID together with its IP address and
  chat port number. The reply says either `New User Registered.` or
  `User Details Updated.`.
- **lookup**: returns the IP address and port number stored for an ID,
  or a "not found" answer.

The table is held in memory only and holds at most 100 users; it is
lost when the server stops. Malformed datagrams are logged and dropped.

## Chatting

Each user starts a client with their ID and the port number to listen
on:

```
udpchat alice 6000
```

The client asks for the IP address and port number of the lookup
server, separated by a space:

```
127.0.0.1 5000
```

After registering, type a peer's ID and a one-word message, separated
by whitespace:

```
bob hello
```

If the peer is registered, the message goes straight to them, and they
see:

```
alice says: hello
```

If the ID is not known, the client prints `No Such ID Exists!!!`.

User IDs must be shorter than 20 bytes and messages shorter than 50
bytes (UTF-8); longer ones are refused with an error message.

## Using it as a library

- `udpchat.protocol`: `MessageType`, `Message` (an 8-byte header and a
  payload of at most 1024 bytes, with `encode` and `decode`) and
  `UdpSocket`, a context-managed IPv4 datagram socket with `bind`,
  `send_message`, `recv_message` and `close`.
- `udpchat.dns`: the request and response payloads
  (`RegisterRequest`, `RegisterResponse`, `AddressResponse`), the
  in-memory `UserDB` of `UserRecord` entries and the `DnsClient`, whose
  `register` and `get_address` talk to the server.
- `udpchat.server`: `DnsServer`, whose `handle` answers one request and
  `serve_forever` answers requests on a bound socket; `main` runs the
  `udpchat-server` command.
- `udpchat.chat`: `ChatPayload` and `ChatClient`, whose `send` delivers a
  message to a peer, `handle` turns a received message into a display
  line and `listen` prints incoming lines; `main` runs the `udpchat`
  command.

## Running the tests

```
pip install .[test]
pytest
```