"""Threaded WSGI server lifecycle for the greeting service.

The listening socket is bound before the logging runtime is composed, so a
bind failure leaves no worker threads behind, and configuration has already
been validated by the time :func:`run` is reached.
"""

from __future__ import annotations

import signal
import socket
import threading
from typing import Any, Callable

from flask import Flask
from werkzeug.serving import BaseWSGIServer, make_server

from . import runtime as runtime_module
from .config import Settings
from .runtime import LoggingRuntime
from .web import create_app


class ServerBindError(OSError):
    """Raised when the listener cannot bind its address."""


def bind_socket(host: str, port: int) -> socket.socket:
    """Return a listening socket for ``host:port``.

    Raises
    ------
    ServerBindError
        When the address is in use or cannot be assigned.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    try:
        return socket.create_server((host, port), family=family, backlog=128)
    except OSError as exc:
        raise ServerBindError(exc.errno, f"could not listen on {host}:{port}: {exc.strerror or exc}") from exc


def create_server(app: Flask, sock: socket.socket) -> BaseWSGIServer:
    """Wrap ``app`` in a threaded Werkzeug server using the bound ``sock``."""
    host, port = sock.getsockname()[:2]
    return make_server(host, port, app, threaded=True, fd=sock.fileno())


def run(
    settings: Settings,
    *,
    runtime_overrides: dict[str, Any] | None = None,
    on_ready: Callable[[BaseWSGIServer, LoggingRuntime], None] | None = None,
) -> None:
    """Serve until interrupted, then shut the logging runtime down.

    Parameters
    ----------
    settings:
        Fully validated settings.
    runtime_overrides:
        Collaborators forwarded to :func:`greeting_service.runtime.init`.
    on_ready:
        Called with the server and runtime once the listener is up; tests use
        it to learn the ephemeral port and to stop the server.

    Raises
    ------
    ServerBindError
        When the listener cannot be bound.
    """

    sock = bind_socket(settings.server.host, settings.server.port)
    try:
        runtime = runtime_module.init(settings.runtime, **(runtime_overrides or {}))
        try:
            server = create_server(create_app(runtime), sock)
        except BaseException:
            runtime.shutdown()
            raise
    finally:
        sock.close()

    log = runtime.get("greeting_service.server")
    previous = _install_sigterm(server)
    try:
        log.info(
            "Starting greeting service",
            extra={"host": settings.server.host, "port": server.port, "dev": settings.dev},
        )
        if on_ready is not None:
            on_ready(server, runtime)
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        _restore_sigterm(previous)
        server.server_close()
        log.info("Greeting service stopped", extra=runtime.stats())
        runtime.shutdown()


def _install_sigterm(server: BaseWSGIServer) -> Any:
    if threading.current_thread() is not threading.main_thread():
        return None

    def _handle(_signum: int, _frame: Any) -> None:
        # shutdown() blocks until serve_forever returns, so it cannot run on this thread
        threading.Thread(target=server.shutdown, daemon=True).start()

    return signal.signal(signal.SIGTERM, _handle)


def _restore_sigterm(previous: Any) -> None:
    if previous is not None:
        signal.signal(signal.SIGTERM, previous)


__all__ = ["ServerBindError", "bind_socket", "create_server", "run"]
