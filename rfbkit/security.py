"""RFB security types and the authentication handlers that implement them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from Crypto.Cipher import DES

from .connection import Connection


class AuthError(Exception):
    """Authentication with the peer failed."""


class SecurityType(IntEnum):
    """Security types offered during the handshake."""

    UNKNOWN = 0
    NONE = 1
    VNC = 2
    TIGHT = 16
    ATEN = 16
    VENCRYPT = 19


class SecuritySubType(IntEnum):
    """VeNCrypt sub-types."""

    UNKNOWN = 0
    VENCRYPT01_UNKNOWN = 0
    VENCRYPT01_PLAIN = 19
    VENCRYPT01_TLS_NONE = 20
    VENCRYPT01_TLS_VNC = 21
    VENCRYPT01_TLS_PLAIN = 22
    VENCRYPT01_X509_NONE = 23
    VENCRYPT01_X509_VNC = 24
    VENCRYPT01_X509_PLAIN = 25
    VENCRYPT02_UNKNOWN = 0
    VENCRYPT02_PLAIN = 256
    VENCRYPT02_TLS_NONE = 257
    VENCRYPT02_TLS_VNC = 258
    VENCRYPT02_TLS_PLAIN = 259
    VENCRYPT02_X509_NONE = 260
    VENCRYPT02_X509_VNC = 261
    VENCRYPT02_X509_PLAIN = 262


class SecurityHandler(ABC):
    """One side of an authentication scheme."""

    type: ClassVar[SecurityType] = SecurityType.UNKNOWN
    sub_type: ClassVar[SecuritySubType] = SecuritySubType.UNKNOWN

    @abstractmethod
    def auth(self, conn: Connection) -> None:
        """Run the exchange; raise AuthError on failure."""


class ClientAuthNone(SecurityHandler):
    """Client side of the "None" security type."""

    type = SecurityType.NONE

    def auth(self, conn: Connection) -> None:
        """No exchange is needed."""


class ServerAuthNone(SecurityHandler):
    """Server side of the "None" security type."""

    type = SecurityType.NONE

    def auth(self, conn: Connection) -> None:
        """No exchange is needed."""


_BIT_REVERSED = bytes(int(f"{i:08b}"[::-1], 2) for i in range(256))
_CHALLENGE_LEN = 16


def auth_vnc_encode(password: bytes, challenge: bytes) -> bytes:
    """Encrypt a 16-byte challenge with the VNC password scheme."""
    if len(challenge) != _CHALLENGE_LEN:
        raise ValueError("challenge size not 16 byte long")
    # Each key byte is bit-reversed, as VNC clients and servers expect.
    key = bytes(password[:8]).ljust(8, b"\x00").translate(_BIT_REVERSED)
    return DES.new(key, DES.MODE_ECB).encrypt(bytes(challenge))


@dataclass
class ServerAuthVNC(SecurityHandler):
    """Server side of VNC password authentication."""

    type: ClassVar[SecurityType] = SecurityType.VNC

    challenge: bytes = b""
    password: bytes = b""
    crypted: bytes = b""

    def write_challenge(self, conn: Connection) -> None:
        conn.write(self.challenge)
        conn.flush()

    def read_challenge(self, conn: Connection) -> None:
        self.crypted = conn.read(_CHALLENGE_LEN)

    def auth(self, conn: Connection) -> None:
        self.write_challenge(conn)
        self.read_challenge(conn)
        if auth_vnc_encode(self.password, self.challenge) != self.crypted:
            raise AuthError("password invalid")


@dataclass
class ClientAuthVNC(SecurityHandler):
    """Client side of VNC password authentication."""

    type: ClassVar[SecurityType] = SecurityType.VNC

    challenge: bytes = b""
    password: bytes = b""

    def auth(self, conn: Connection) -> None:
        if not self.password:
            raise AuthError("Security Handshake failed; no password provided for VNCAuth.")
        challenge = conn.read(_CHALLENGE_LEN)
        conn.write(auth_vnc_encode(self.password, challenge))
        conn.flush()


def read_tight_tunnels(conn: Connection) -> int:
    """Read the number of tunnel capabilities offered by a Tight server."""
    return conn.read_u32()


def read_tight_caps(conn: Connection) -> tuple[int, bytes, bytes]:
    """Read one Tight capability: code, 4-byte vendor and 8-byte signature."""
    code = conn.read_s32()
    vendor = conn.read(4)
    signature = conn.read(8)
    return code, vendor, signature


_ATEN_FIELD_LEN = 24


@dataclass
class ClientAuthATEN(SecurityHandler):
    """Client side of Aten iKVM authentication."""

    type: ClassVar[SecurityType] = SecurityType.ATEN

    username: bytes = b""
    password: bytes = b""

    def auth(self, conn: Connection) -> None:
        if len(self.username) > _ATEN_FIELD_LEN or len(self.password) > _ATEN_FIELD_LEN:
            raise AuthError("username/password is too long, allowed 0-23")

        tunnels = read_tight_tunnels(conn)
        if (tunnels & 0xFFFF0FF0) == 0xAFF90FB0 or tunnels == 0 or tunnels > 0x1000000:
            conn.protocol = "aten1"
            conn.read(20)

        conn.write(
            bytes(self.username).ljust(_ATEN_FIELD_LEN, b"\x00")
            + bytes(self.password).ljust(_ATEN_FIELD_LEN, b"\x00")
        )
        conn.flush()


@dataclass
class ClientAuthVeNCrypt02Plain(SecurityHandler):
    """Client side of VeNCrypt 0.2 plain authentication."""

    type: ClassVar[SecurityType] = SecurityType.VENCRYPT
    sub_type: ClassVar[SecuritySubType] = SecuritySubType.VENCRYPT02_PLAIN

    username: bytes = b""
    password: bytes = b""

    def auth(self, conn: Connection) -> None:
        conn.write(bytes([0, 2]))
        conn.flush()

        major = conn.read_u8()
        minor = conn.read_u8()
        conn.write_u8(0 if (major, minor) == (0, 2) else 1)
        conn.flush()

        conn.write_u8(1)
        conn.write_u32(self.sub_type)
        conn.flush()

        if conn.read_u32() != self.sub_type:
            conn.write_u8(1)
            conn.flush()
            raise AuthError("invalid sectype")

        if not self.password or not self.username:
            raise AuthError(
                "Security Handshake failed; no username and/or password "
                "provided for VeNCryptAuth."
            )

        user_len = conn.read_u32()
        pass_len = conn.read_u32()
        username = conn.read(user_len)
        received = conn.read(pass_len)
        if bytes(self.username) != username or bytes(self.password) != received:
            raise AuthError("invalid username/password")