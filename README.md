# netlab

Small networking exercises, usable as a library and as console commands:

- `netlab.ipv4`: the class of an IPv4 address from its first octet, and for a
  full dotted quad the network ID, broadcast ID and default mask.
- `netlab.coding`: HDLC-style bit stuffing and de-stuffing, CRC codewords,
  even and odd parity bits.
- `netlab.numbers`: `atoi`-style parsing, binary/octal/hexadecimal
  conversions, an even/odd word and integer sorting.
- `netlab.msgqueue`: a thread-safe in-process queue whose messages are chosen
  by type on receipt, and the messages the exercises exchange over it.
- `netlab.tcp_services`: TCP request/response services (bit stuffing, name
  length, CRC, roll number sorting).
- `netlab.chat`: a one-to-one TCP chat and a multi-client chat room.
- `netlab.local_services`: UNIX-domain socket services (number conversion,
  even/odd, odd parity, sorted array) and a UDP even-parity service.

No third-party libraries are needed.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Library use

```python
from netlab.ipv4 import first_octet_class, analyze_address, InvalidAddressError
from netlab.coding import bit_stuff, bit_destuff, crc_codeword, even_parity, odd_parity
from netlab.numbers import to_binary, to_octal, to_hex, conversion_report

first_octet_class("10.0.0.1")           # IPClass.A
info = analyze_address("192.168.1.20")
print(info.describe())                  # class, network ID, broadcast ID, mask

stuffed = bit_stuff("0111111")          # "01111101"
assert bit_destuff(stuffed) == "0111111"

even_parity("1011")                     # "10111"
odd_parity("1011")                      # "10110"
crc_codeword("1001", "1011")            # dataword followed by its CRC remainder

print(conversion_report(10))            # Binary / Octal / Hexadecimal lines
```

An invalid address raises `InvalidAddressError` (a `ValueError`).

The message queue:

```python
from netlab.msgqueue import MessageQueue, conversion_messages, receive_until_end, evenodd_lines

queue = MessageQueue()
queue.send(1, "7\n")
queue.send(1, "end\n")
for line in receive_until_end(queue, 0, evenodd_lines):
    print(line)                         # "Received number: 7", "It is an ODD number."
```

`MessageQueue.receive(msg_type, timeout)` takes the oldest message for type 0,
the oldest of exactly that type for a positive type, and the lowest type not
above its absolute value for a negative type; it raises `TimeoutError` when the
timeout runs out.

## Commands

Start the server side first, then the client in a second terminal.

- `netlab-ipv4 [ADDRESS] [--class-only]`: reports the class, network ID,
  broadcast ID and default mask of an address, or with `--class-only` just the
  class from the first octet. Without an address it asks for one.
- `netlab-tcp SERVICE {server,client} [--host HOST] [--port PORT]`, where
  `SERVICE` is `bitstuff` (default port 9734 on 127.0.0.1), `name-length`,
  `crc` or `roll` (default port 8080). The `name-length` and `crc` servers
  handle each client in its own thread; the `roll` server answers one client
  and exits.
- `netlab-chat {room-server,room-client,server,client} [--host HOST] [--port PORT] [--max-clients N]`:
  `server`/`client` is a one-to-one chat that ends when either side sends a
  line starting with `bye`; `room-server` accepts up to `--max-clients`
  clients (default 3) and broadcasts each line typed at it, stopping on
  `!DISCONNECT`. The default address is 127.0.0.1:8760.
- `netlab-local SERVICE {server,client} [--path PATH] [--host HOST] [--port PORT]`,
  where `SERVICE` is `conversion`, `even-odd`, `odd-parity` or `sort` (UNIX
  socket, one client per server run; the `sort` server reads the integers from
  its own standard input) or `even-parity` (UDP, port 8080 by default,
  answering datagrams until interrupted).

## What it does not do

The message queue lives inside one Python process; it is not a system message
queue shared between separate programs, and there is no command for the
message-queue exercises. None of the services authenticate or encrypt
anything; they are meant for the local machine.