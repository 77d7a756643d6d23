"""Reader for FBS session recordings.

An FBS file starts with a 12-byte version line; after it comes a series of
segments, each a big-endian length, the data padded to four bytes, and a
big-endian timestamp in milliseconds since the recording began.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO

from . import logger
from .messages import ServerInit
from .pixel_format import PIXEL_FORMAT_LEN, PixelFormat

_VERSION_LEN = 12


@dataclass(frozen=True)
class FbsSegment:
    """One recorded block of server data."""

    data: bytes
    timestamp: int


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise EOFError(f"expected {size} bytes, got {size - remaining}")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class FbsReader:
    """Reads recorded RFB server data as one continuous byte stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._buffer = bytearray()
        self.current_timestamp = 0

    @classmethod
    def open(cls, path: str) -> FbsReader:
        """Open a recording file for reading."""
        try:
            stream = open(path, "rb")
        except OSError:
            logger.error("NewFbsReader: can't open fbs file: ", path)
            raise
        return cls(stream)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> FbsReader:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def read(self, size: int) -> bytes:
        """Return up to ``size`` bytes, pulling in one more segment if needed."""
        if len(self._buffer) < size:
            try:
                seg = self.read_segment()
            except EOFError as exc:
                logger.error("FBSReader.Read: error reading FBSsegment: ", exc)
                raise
            self._buffer += seg.data
            self.current_timestamp = seg.timestamp
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def _read_all(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining:
            chunk = self.read(remaining)
            if not chunk:
                raise EOFError(f"expected {size} bytes, got {size - remaining}")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def read_segment(self) -> FbsSegment:
        """Read the next segment straight from the file."""
        try:
            (length,) = struct.unpack(">I", _read_exact(self._stream, 4))
            padded = (length + 3) & 0x7FFFFFFC
            data = _read_exact(self._stream, padded)[:length]
            (timestamp,) = struct.unpack(">I", _read_exact(self._stream, 4))
        except EOFError as exc:
            logger.error("FbsReader.ReadSegment: error reading rbs file: ", exc)
            raise
        return FbsSegment(data=data, timestamp=timestamp)

    def read_start_session(self) -> ServerInit:
        """Read the file header and the recorded handshake up to ServerInit."""
        try:
            _read_exact(self._stream, _VERSION_LEN)  # FBS file version
            self._read_all(_VERSION_LEN)  # RFB protocol version
            self._read_all(4)  # security type
            width, height = struct.unpack(">HH", self._read_all(4))
            pixel_format = PixelFormat.unmarshal(self._read_all(PIXEL_FORMAT_LEN))
            (name_length,) = struct.unpack(">I", self._read_all(4))
            name = self._read_all(name_length)
        except EOFError as exc:
            logger.error("FbsReader.ReadStartSession: error reading rbs init message: ", exc)
            raise
        return ServerInit(
            fb_width=width,
            fb_height=height,
            pixel_format=pixel_format,
            name_length=name_length,
            name_text=name,
        )