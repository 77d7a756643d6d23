# rfbkit

A toolkit for the RFB protocol spoken by VNC servers and viewers. It provides:

- `rfbkit.pixel_format`: the 16-byte `PixelFormat` structure, with `marshal` (validating),
  `to_bytes`, `unmarshal` and `read`, plus `new_pixel_format(bpp)` and
  `new_pixel_format_aten()`
- `rfbkit.keys`: the `Key` enumeration of X11 keysyms and `int_to_keys(value)`
- `rfbkit.connection`: `Connection`, big-endian typed reads and writes over any binary
  stream together with the session state (pixel format, colour map, size, desktop name,
  encodings); `ServerConn` and `ServerConfig` for the server side
- `rfbkit.image`: `Color`, `Rectangle`, `new_color_map()` and `colors_to_image()`
- `rfbkit.messages`: the standard client and server messages (`FramebufferUpdate`,
  `SetColorMapEntries`, `Bell`, `ServerCutText`, `SetPixelFormat`, `SetEncodings`,
  `FramebufferUpdateRequest`, `KeyEvent`, `PointerEvent`, `ClientCutText`) and `ServerInit`
- `rfbkit.messages_aten`: the Aten iKVM message layouts (readable; their `write` sends nothing)
- `rfbkit.security`: `ClientAuthNone`, `ServerAuthNone`, `ClientAuthVNC`, `ServerAuthVNC`,
  `ClientAuthATEN`, `ClientAuthVeNCrypt02Plain`, `auth_vnc_encode()` and the Tight
  capability readers; failures raise `AuthError`
- `rfbkit.handlers`: the version, security and init steps of the handshake for both the
  client and the server side, and `parse_proto_version()`; failures raise `HandshakeError`
- `rfbkit.server`: `serve()`, which accepts TCP clients one at a time and runs the
  configured handlers on each, and `DefaultServerMessageHandler`, which relays messages
  between a client and the `ServerConfig` queues
- `rfbkit.fbs_reader` and `rfbkit.fbs_connection`: reading FBS session recordings and
  replaying their server messages, optionally at the recorded pace
- `rfbkit.rgb_image`: `RGBImage`, a 3-bytes-per-pixel image buffer with `Bounds` and `RGBColor`

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

Encrypt a VNC authentication challenge:

```python
from rfbkit.security import auth_vnc_encode

password = b"password"
response = auth_vnc_encode(password, bytes(16))
assert len(response) == 16
```

Encode and decode messages over an in-memory stream:

```python
import io

from rfbkit.connection import Connection
from rfbkit.messages import FramebufferUpdateRequest

buffer = io.BytesIO()
FramebufferUpdateRequest(inc=1, width=800, height=600).write(Connection(buffer))

conn = Connection(io.BytesIO(buffer.getvalue()))
assert conn.read_u8() == FramebufferUpdateRequest.type
request = FramebufferUpdateRequest.read(conn)
```

Run a server until a stop event is set; parsed client messages arrive on
`config.client_message_queue`, messages put on `config.server_message_queue` are sent
to the client, and handler errors go to `config.error_queue`:

```python
import socket
import threading

from rfbkit.connection import ServerConfig
from rfbkit.messages import DEFAULT_CLIENT_MESSAGES
from rfbkit.pixel_format import PIXEL_FORMAT_32BIT
from rfbkit.security import ServerAuthNone
from rfbkit.server import default_server_handlers, serve

config = ServerConfig(
    handlers=default_server_handlers(),
    security_handlers=[ServerAuthNone()],
    pixel_format=PIXEL_FORMAT_32BIT,
    messages=list(DEFAULT_CLIENT_MESSAGES),
    desktop_name=b"demo",
    width=800,
    height=600,
)
listener = socket.create_server(("127.0.0.1", 5900))
stop = threading.Event()
threading.Thread(target=serve, args=(listener, config, stop), daemon=True).start()
```

Read the session header of an FBS recording:

```python
from rfbkit.fbs_reader import FbsReader

with FbsReader.open("session.fbs") as reader:
    init = reader.read_start_session()
    print(init)
```

Replay the server messages of a recording (without waiting for recorded timestamps):

```python
from rfbkit.fbs_connection import FbsConn, FBSPlayHelper

with FbsConn.open("session.fbs", []) as conn:
    player = FBSPlayHelper(conn)
    message = player.read_fbs_message(False, 1.0)
```

Build the key presses that type a number:

```python
from rfbkit.keys import int_to_keys

keys = int_to_keys(-42)
```

Logging goes through `rfbkit.logger`, which prints to standard output at level `WARN`
and above by default; change the threshold with
`rfbkit.logger.set_log_level(rfbkit.logger.LogLevel.DEBUG)`.

## What it does not do

- It contains no framebuffer encodings (raw, copy-rect, tight, ZRLE and so on). A
  `Rectangle` is decoded by an encoding object you supply in `Connection.encodings`:
  anything with a `type` attribute and `read(conn, rect)` / `write(conn, rect)` methods.
  Without one, reading a rectangle raises `UnsupportedEncodingError`.
- It has no client that connects to a VNC server on its own; the client-side handshake
  steps in `rfbkit.handlers` must be run by your code over a `Connection`.
- It does not render screens or produce video files, and it has no command-line program.