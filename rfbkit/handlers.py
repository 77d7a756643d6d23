"""Handshake steps of an RFB session, for both the client and server side."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any

from . import logger
from .connection import Connection
from .logger import LogLevel
from .messages import SetPixelFormat
from .pixel_format import PIXEL_FORMAT_32BIT, PixelFormat, new_pixel_format_aten
from .security import AuthError

PROTO_VERSION_LENGTH = 12

PROTO_VERSION_UNKNOWN = ""
PROTO_VERSION_33 = "RFB 003.003\n"
PROTO_VERSION_38 = "RFB 003.008\n"
PROTO_VERSION_37 = "RFB 003.007\n"

_VERSION_RE = re.compile(rb"RFB (\d+)\.(\d+)\n")


class HandshakeError(Exception):
    """The peer sent something the handshake cannot accept."""


class Handler(ABC):
    """One step of the connection handshake."""

    @abstractmethod
    def handle(self, conn: Connection) -> None:
        """Run the step on the connection; raise on failure."""


def parse_proto_version(pv: bytes) -> tuple[int, int]:
    """Parse a ProtocolVersion message into (major, minor)."""
    if len(pv) < PROTO_VERSION_LENGTH:
        raise HandshakeError(
            f"ProtocolVersion message too short ({len(pv)} < {PROTO_VERSION_LENGTH})"
        )
    match = _VERSION_RE.match(bytes(pv))
    if match is None:
        raise HandshakeError("error parsing protocol version")
    return int(match.group(1)), int(match.group(2))


def _unsupported(version: bytes) -> HandshakeError:
    text = version.decode("latin-1")
    return HandshakeError(f"ProtocolVersion handshake failed; unsupported version '{text}'")


class DefaultClientVersionHandler(Handler):
    """Client side of the version exchange."""

    def handle(self, conn: Connection) -> None:
        version = conn.read(PROTO_VERSION_LENGTH)
        major, minor = parse_proto_version(version)
        pv = PROTO_VERSION_UNKNOWN
        if major == 3 and minor >= 3:
            pv = PROTO_VERSION_38
        if pv == PROTO_VERSION_UNKNOWN:
            raise _unsupported(version)
        conn.protocol = version.decode("latin-1")
        conn.write(pv.encode("ascii"))
        conn.flush()


class DefaultServerVersionHandler(Handler):
    """Server side of the version exchange."""

    def handle(self, conn: Connection) -> None:
        conn.write(PROTO_VERSION_38.encode("ascii"))
        conn.flush()
        version = conn.read(PROTO_VERSION_LENGTH)
        major, minor = parse_proto_version(version)
        pv = PROTO_VERSION_UNKNOWN
        if major == 3:
            if minor >= 8:
                pv = PROTO_VERSION_38
            elif minor >= 3:
                pv = PROTO_VERSION_33
        if pv == PROTO_VERSION_UNKNOWN:
            raise _unsupported(version)
        conn.protocol = pv


class DefaultClientSecurityHandler(Handler):
    """Client side of security negotiation and authentication."""

    def handle(self, conn: Connection) -> None:
        handlers: list[Any] = list(getattr(conn.config, "security_handlers", []))
        count = conn.read_u8()
        offered = set(conn.read(count))

        matches = [h for h in handlers if h.type in offered]
        chosen = matches[-1] if matches else None

        if not handlers:
            raise HandshakeError("no security handlers configured")
        conn.write_u8(handlers[0].type)
        conn.flush()

        if chosen is None:
            raise HandshakeError("no supported security type offered by server")
        try:
            chosen.auth(conn)
        except Exception as exc:
            logger.error("Authentication error: ", exc)
            raise

        auth_code = conn.read_u32()
        logger.tracef(
            "authenticating, secType: %d, auth code(0=success): %d", int(chosen.type), auth_code
        )
        if auth_code == 1:
            reason_length = conn.read_u32()
            reason = conn.read(reason_length)
            raise AuthError(reason.decode("utf-8", errors="replace"))
        conn.security_handler = chosen


class DefaultServerSecurityHandler(Handler):
    """Server side of security negotiation and authentication."""

    def handle(self, conn: Connection) -> None:
        handlers: list[Any] = list(conn.config.security_handlers)
        sec_type = 0
        if conn.protocol in (PROTO_VERSION_37, PROTO_VERSION_38):
            conn.write_u8(len(handlers))
            for handler in handlers:
                conn.write_u8(handler.type)
        else:
            highest = 0
            for handler in handlers:
                if int(handler.type) > highest:
                    highest = int(handler.type)
                    sec_type = highest
            conn.write_u32(highest)
        conn.flush()

        if conn.protocol == PROTO_VERSION_38:
            sec_type = conn.read_u8()

        by_type = {int(h.type): h for h in handlers}
        handler = by_type.get(sec_type)
        if handler is None:
            raise HandshakeError(f"security type {sec_type} not implemented")

        auth_error: Exception | None = None
        try:
            handler.auth(conn)
        except Exception as exc:
            auth_error = exc

        conn.write_u32(0 if auth_error is None else 1)

        if auth_error is None:
            conn.flush()
            conn.security_handler = handler
            return

        if conn.protocol == PROTO_VERSION_38:
            reason = str(auth_error).encode("utf-8")
            conn.write_u32(len(reason))
            conn.write(reason)
            conn.flush()
        raise auth_error


class DefaultClientServerInitHandler(Handler):
    """Client side: read ServerInit and settle the pixel format."""

    def handle(self, conn: Connection) -> None:
        logger.get_logger().log(LogLevel.TRACE, "starting DefaultClientServerInitHandler")
        width = conn.read_u16()
        height = conn.read_u16()
        pixel_format = PixelFormat.unmarshal(conn.read(16))
        name_length = conn.read_u32()
        name = conn.read(name_length)
        logger.tracef(
            "DefaultClientServerInitHandler got serverInit: %dx%d %s %s",
            width, height, pixel_format, name,
        )
        conn.desktop_name = name
        if conn.protocol == "aten1":
            conn.width = 800
            conn.height = 600
            conn.pixel_format = new_pixel_format_aten()
            # iKVM video, keyboard/mouse, kick and virtual-USB flags after 8 bytes of padding.
            conn.read(12)
        else:
            conn.width = width
            conn.height = height
            SetPixelFormat(pf=PIXEL_FORMAT_32BIT).write(conn)
            conn.pixel_format = PIXEL_FORMAT_32BIT


class DefaultServerServerInitHandler(Handler):
    """Server side: send ServerInit."""

    def handle(self, conn: Connection) -> None:
        conn.write_u16(conn.width)
        conn.write_u16(conn.height)
        conn.write(conn.pixel_format.to_bytes())
        name = bytes(conn.desktop_name)
        conn.write_u32(len(name))
        conn.write(name)
        conn.flush()


class DefaultClientClientInitHandler(Handler):
    """Client side: send ClientInit with the shared flag."""

    def handle(self, conn: Connection) -> None:
        logger.get_logger().log(LogLevel.TRACE, "starting DefaultClientClientInitHandler")
        shared = 0 if getattr(conn.config, "exclusive", False) else 1
        conn.write_u8(shared)
        logger.tracef("DefaultClientClientInitHandler sending: shared=%d", shared)
        conn.flush()


class DefaultServerClientInitHandler(Handler):
    """Server side: read ClientInit."""

    def handle(self, conn: Connection) -> None:
        conn.read_u8()