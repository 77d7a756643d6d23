"""Accepting RFB clients and relaying their messages."""

from __future__ import annotations

import queue
import socket
import threading
from typing import Any

from . import logger
from .connection import Connection, ServerConfig, ServerConn
from .handlers import (
    DefaultServerClientInitHandler,
    DefaultServerSecurityHandler,
    DefaultServerServerInitHandler,
    DefaultServerVersionHandler,
    Handler,
)

_POLL_INTERVAL = 0.05


def _report(config: Any, exc: BaseException) -> None:
    errors = getattr(config, "error_queue", None)
    if errors is not None:
        errors.put(exc)


class DefaultServerMessageHandler(Handler):
    """Relays client messages to the config's queue and queued server messages to the client.

    Returns once both directions have stopped, closing the connection.
    """

    def handle(self, conn: Connection) -> None:
        cfg = conn.config
        client_messages = {int(m.type): m for m in cfg.messages}
        quit_event = threading.Event()

        def fail(exc: BaseException) -> None:
            _report(cfg, exc)
            quit_event.set()

        def send_server_messages() -> None:
            while not quit_event.is_set():
                try:
                    msg = cfg.server_message_queue.get(timeout=_POLL_INTERVAL)
                except queue.Empty:
                    continue
                try:
                    msg.write(conn)
                except Exception as exc:
                    fail(exc)
                    return

        def receive_client_messages() -> None:
            while not quit_event.is_set():
                try:
                    message_type = conn.read_u8()
                except Exception as exc:
                    fail(exc)
                    return
                message_class = client_messages.get(message_type)
                if message_class is None:
                    fail(ValueError(f"unsupported message-type: {message_type}"))
                    return
                try:
                    parsed = message_class.read(conn)
                except Exception as exc:
                    fail(exc)
                    return
                cfg.client_message_queue.put(parsed)

        workers = [
            threading.Thread(target=send_server_messages, daemon=True),
            threading.Thread(target=receive_client_messages, daemon=True),
        ]
        try:
            for worker in workers:
                worker.start()
            for worker in workers:
                worker.join()
        finally:
            conn.close()


def default_server_handlers() -> list[Handler]:
    """The standard server handshake followed by message relaying."""
    return [
        DefaultServerVersionHandler(),
        DefaultServerSecurityHandler(),
        DefaultServerClientInitHandler(),
        DefaultServerServerInitHandler(),
        DefaultServerMessageHandler(),
    ]


class _SocketStream:
    """A socket with buffered writes that are sent on flush."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._pending = bytearray()
        self._lock = threading.Lock()

    def read(self, size: int) -> bytes:
        return self._sock.recv(size)

    def write(self, data: bytes) -> int:
        with self._lock:
            self._pending += data
        return len(data)

    def flush(self) -> None:
        with self._lock:
            data = bytes(self._pending)
            self._pending.clear()
        if data:
            self._sock.sendall(data)

    def close(self) -> None:
        self._sock.close()


def serve(
    listener: socket.socket,
    config: ServerConfig,
    stop_event: threading.Event | None = None,
) -> None:
    """Accept clients one at a time and run the configured handlers on each.

    Runs until ``stop_event`` is set; without one it runs forever.
    """
    if stop_event is not None:
        listener.settimeout(_POLL_INTERVAL * 4)
    while stop_event is None or not stop_event.is_set():
        try:
            sock, _ = listener.accept()
        except socket.timeout:
            continue
        except OSError as exc:
            if listener.fileno() == -1:
                return
            logger.error("serve: accept failed: ", exc)
            continue
        sock.settimeout(None)
        conn = ServerConn(_SocketStream(sock), config)

        if not config.handlers:
            config.handlers = default_server_handlers()

        for handler in config.handlers:
            try:
                handler.handle(conn)
            except Exception as exc:
                _report(config, exc)
                conn.close()
                break