"""Flask application exposing the greeting endpoint.

The application is built around an injected :class:`LoggingRuntime`; the
handler only enqueues log records and never waits on the log backend.
"""

from __future__ import annotations

from uuid import uuid4

from flask import Flask, Response, abort, current_app, request

from .runtime import LoggingRuntime

GREETING = "Hello, World!"
RUNTIME_EXTENSION = "greeting_service.runtime"
REQUEST_ID_HEADER = "X-Request-ID"


def get_runtime(app: Flask | None = None) -> LoggingRuntime:
    """Return the runtime injected into ``app`` (the current app by default)."""
    target = app if app is not None else current_app
    return target.extensions[RUNTIME_EXTENSION]


def create_app(runtime: LoggingRuntime) -> Flask:
    """Build the Flask application with ``runtime`` injected by reference."""

    app = Flask(__name__)
    app.extensions[RUNTIME_EXTENSION] = runtime
    log = runtime.get("greeting_service.web")

    # HEAD is added implicitly for GET rules; only GET may return the greeting
    @app.route("/", methods=["GET"], provide_automatic_options=False)
    def hello_world() -> Response:
        if request.method != "GET":
            abort(405, valid_methods=["GET"])
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        with runtime.bind(request_id=request_id):
            log.info("Saying hello")
            log.debug("Saying hello for debug level only")
        return Response(GREETING, status=200, mimetype="text/plain")

    return app


__all__ = ["GREETING", "REQUEST_ID_HEADER", "RUNTIME_EXTENSION", "create_app", "get_runtime"]
