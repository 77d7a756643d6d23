"""Playback of FBS recordings as a read-only RFB connection."""

from __future__ import annotations

import time
from typing import Any, Iterable

from . import logger
from .connection import Connection
from .fbs_reader import FbsReader
from .messages import Bell, FramebufferUpdate, ServerCutText, SetColorMapEntries

FBS_PROTOCOL = "RFB 003.008"

# How far behind the recording's timeline playback may fall before it is reported.
_LAG_WARNING_MS = -400


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


class FbsConn(Connection):
    """A connection whose incoming data comes from a recording.

    Anything written to it is discarded.
    """

    def __init__(self, reader: FbsReader, encodings: Iterable[Any] = ()) -> None:
        super().__init__(reader)
        self.reader = reader
        self.encodings = list(encodings)
        self.protocol = FBS_PROTOCOL

    @classmethod
    def open(cls, filename: str, encodings: Iterable[Any] = ()) -> FbsConn:
        """Open a recording and read its session header."""
        reader = FbsReader.open(filename)
        try:
            init = reader.read_start_session()
        except Exception as exc:
            logger.error("failed to open read fbs start session:", exc)
            reader.close()
            raise
        conn = cls(reader, encodings)
        conn.pixel_format = init.pixel_format
        conn.height = init.fb_height
        conn.width = init.fb_width
        conn.desktop_name = bytes(init.name_text)
        return conn

    @property
    def current_timestamp(self) -> int:
        """Timestamp in milliseconds of the most recently loaded segment."""
        return self.reader.current_timestamp

    def write(self, data: bytes) -> int:
        """Discard the data; a recording cannot be written to."""
        return len(data)

    def flush(self) -> None:
        """Nothing is ever buffered for sending."""

    def close(self) -> None:
        self.reader.close()

    def __enter__(self) -> FbsConn:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_enc_instance(self, enc_type: int) -> Any:
        """The configured encoding of the given type, or None."""
        return next((enc for enc in self.encodings if enc.type == enc_type), None)


class FBSPlayHelper:
    """Reads server messages from a recording, optionally at recorded pace."""

    def __init__(self, conn: FbsConn) -> None:
        self.conn = conn
        self.start_time = _now_ms()
        self.server_message_map = {
            int(message.type): message
            for message in (FramebufferUpdate, SetColorMapEntries, Bell, ServerCutText)
        }

    def read_fbs_message(
        self, sync_with_timestamps: bool = True, speed_factor: float = 1.0
    ) -> Any:
        """Read the next server message.

        With ``sync_with_timestamps`` set, sleeps until the message's recorded
        time, scaled down by ``speed_factor``, has been reached.
        """
        if speed_factor <= 0:
            raise ValueError("speed factor must be positive")
        conn = self.conn
        try:
            message_type = conn.read_u8()
        except Exception as exc:
            logger.error("FBSConn.NewConnHandler: Error in reading FBS: ", exc)
            raise
        handling_started = _now_ms()

        message_class = self.server_message_map.get(message_type)
        if message_class is None:
            logger.error("FBSConn.NewConnHandler: Error unknown message type: ", message_type)
            raise ValueError(f"unknown message type: {message_type}")

        try:
            parsed = message_class.read(conn)
        except Exception as exc:
            logger.error("FBSConn.NewConnHandler: Error in reading FBS message: ", exc)
            raise

        millis_since_start = handling_started - self.start_time
        adjusted_timestamp = conn.current_timestamp / speed_factor
        millis_to_sleep = adjusted_timestamp - millis_since_start

        if millis_to_sleep > 0 and sync_with_timestamps:
            time.sleep(int(millis_to_sleep) / 1000)
        elif millis_to_sleep < _LAG_WARNING_MS:
            logger.errorf(
                "rendering time is noticeably off, change speedup factor: "
                "videoTimeLine: %f, currentTime:%d, offset: %f",
                adjusted_timestamp,
                millis_since_start,
                millis_to_sleep,
            )
        return parsed