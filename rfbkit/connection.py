"""Byte-stream connections carrying RFB sessions."""

from __future__ import annotations

import queue
import struct
import threading
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Iterable

from .pixel_format import PixelFormat

COLOR_MAP_SIZE = 256


class ConnectionClosedError(EOFError):
    """The peer closed the stream before the expected data arrived."""


class Connection:
    """Session state and typed big-endian I/O over a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.config: Any = None
        self.protocol = ""
        self.pixel_format = PixelFormat()
        self.color_map: list[Any] = [None] * COLOR_MAP_SIZE
        self.desktop_name = b""
        self.width = 0
        self.height = 0
        self.encodings: list[Any] = []
        self.security_handler: Any = None

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def read(self, size: int) -> bytes:
        """Read exactly ``size`` bytes."""
        if size < 0:
            raise ValueError("size must not be negative")
        chunks = []
        remaining = size
        while remaining:
            chunk = self.stream.read(remaining)
            if not chunk:
                raise ConnectionClosedError(
                    f"expected {size} bytes, got {size - remaining}"
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def read_u8(self) -> int:
        return self.read(1)[0]

    def read_u16(self) -> int:
        return struct.unpack(">H", self.read(2))[0]

    def read_u32(self) -> int:
        return struct.unpack(">I", self.read(4))[0]

    def read_s32(self) -> int:
        return struct.unpack(">i", self.read(4))[0]

    def write(self, data: bytes) -> int:
        """Queue bytes for the peer; call flush to send them."""
        data = bytes(data)
        self.stream.write(data)
        return len(data)

    def write_u8(self, value: int) -> None:
        self.write(struct.pack(">B", value))

    def write_u16(self, value: int) -> None:
        self.write(struct.pack(">H", value))

    def write_u32(self, value: int) -> None:
        self.write(struct.pack(">I", value))

    def flush(self) -> None:
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()

    def close(self) -> None:
        self.stream.close()

    def get_enc_instance(self, enc_type: int) -> Any:
        """The first negotiated encoding of the given type, or None."""
        return next((enc for enc in self.encodings if enc.type == enc_type), None)


@dataclass
class ServerConfig:
    """Settings shared by every connection a server accepts."""

    handlers: list[Any] = field(default_factory=list)
    security_handlers: list[Any] = field(default_factory=list)
    encodings: list[Any] = field(default_factory=list)
    pixel_format: PixelFormat = field(default_factory=PixelFormat)
    color_map: list[Any] = field(default_factory=lambda: [None] * COLOR_MAP_SIZE)
    client_message_queue: queue.Queue = field(default_factory=queue.Queue)
    server_message_queue: queue.Queue = field(default_factory=queue.Queue)
    messages: list[Any] = field(default_factory=list)
    desktop_name: bytes = b""
    height: int = 0
    width: int = 0
    error_queue: queue.Queue | None = field(default_factory=queue.Queue)


class ServerConn(Connection):
    """The server side of one accepted client connection."""

    def __init__(self, stream: BinaryIO, config: ServerConfig) -> None:
        super().__init__(stream)
        self.config = config
        self.desktop_name = config.desktop_name
        self.encodings = list(config.encodings)
        self.pixel_format = config.pixel_format
        self.width = config.width
        self.height = config.height
        self._quit = threading.Event()

    def set_encodings(self, enc_types: Iterable[int]) -> None:
        """Add the configured encodings whose types the client asked for."""
        available = {enc.type: enc for enc in self.config.encodings}
        self.encodings.extend(available[t] for t in enc_types if t in available)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the connection is closed; False on timeout."""
        return self._quit.wait(timeout)

    def close(self) -> None:
        self._quit.set()
        super().close()