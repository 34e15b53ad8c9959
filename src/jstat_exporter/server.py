"""HTTP surface of the exporter: metrics endpoint and landing page."""

import html
import logging
import os
import threading
from typing import Callable, Iterable, Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, Counter, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from .collectors import JstatError
from .config import ExporterConfig, parse_listen_address
from .exporter import build_registry

logger = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>jstat Exporter</title></head>
<body>
<h1>jstat Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def _exit_process(status: int) -> None:
    """Flush logs and terminate immediately, from any thread."""
    logging.shutdown()
    os._exit(status)


class ExporterApp:
    """WSGI application routing scrapes to the metrics registry."""

    def __init__(
        self,
        registry: CollectorRegistry,
        metrics_path: str = "/metrics",
        max_requests: int = 40,
        exit_on_error: bool = True,
        errors: Optional[Counter] = None,
        exit_func: Callable[[int], None] = _exit_process,
    ):
        self.metrics_path = metrics_path
        self.max_requests = max_requests
        self.exit_on_error = exit_on_error
        self.errors = errors
        self.exit_func = exit_func
        self._metrics_app = make_wsgi_app(registry)
        self._in_flight = threading.BoundedSemaphore(max_requests) if max_requests > 0 else None
        self._landing = LANDING_PAGE.format(path=html.escape(metrics_path, quote=True)).encode("utf-8")

    def __call__(self, environ, start_response) -> Iterable[bytes]:
        path = environ.get("PATH_INFO") or "/"

        if path == self.metrics_path:
            return self._serve_metrics(environ, start_response)
        # only the landing page and metrics path are served
        if path == "/":
            return self._respond(start_response, "200 OK", self._landing, "text/html; charset=utf-8")

        return self._respond(start_response, "404 Not Found", b"Not Found\n")

    def _serve_metrics(self, environ, start_response) -> Iterable[bytes]:
        if self._in_flight is not None and not self._in_flight.acquire(blocking=False):
            message = f"Limit of concurrent requests reached ({self.max_requests}), try again later.\n"
            return self._respond(start_response, "503 Service Unavailable", message.encode("utf-8"))

        try:
            return self._metrics_app(environ, start_response)
        except JstatError as e:
            return self._scrape_failed(e, start_response)
        finally:
            if self._in_flight is not None:
                self._in_flight.release()

    def _scrape_failed(self, error: JstatError, start_response) -> Iterable[bytes]:
        if self.exit_on_error:
            logger.critical(f"Scrape failed, exiting: {error}")
            self.exit_func(1)
        else:
            logger.error(f"Scrape failed: {error}")
            if self.errors is not None:
                self.errors.inc()

        body = f"An error has occurred while serving metrics:\n\n{error}\n"
        return self._respond(start_response, "500 Internal Server Error", body.encode("utf-8"))

    @staticmethod
    def _respond(start_response, status: str, body: bytes, content_type: str = "text/plain; charset=utf-8"):
        start_response(status, [
            ("Content-Type", content_type),
            ("Content-Length", str(len(body))),
        ])
        return [body]


class _LoggingHandler(WSGIRequestHandler):
    """Request handler that logs through the logging module instead of stderr."""

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")


def create_app(config: ExporterConfig) -> ExporterApp:
    """Build the registry and WSGI application for a configuration."""
    registry, errors = build_registry(config)
    return ExporterApp(
        registry,
        metrics_path=config.metrics_path,
        max_requests=config.max_requests,
        exit_on_error=config.exit_on_error,
        errors=errors,
    )


def create_server(config: ExporterConfig, app: ExporterApp) -> WSGIServer:
    """
    Bind a thread-per-request server to the configured listen address.

    Raises:
        OSError: If the address cannot be bound
    """
    host, port = parse_listen_address(config.listen_address)
    return make_server(host, port, app, server_class=ThreadingWSGIServer, handler_class=_LoggingHandler)


def serve(config: ExporterConfig) -> None:
    """Serve metrics until interrupted."""
    app = create_app(config)
    server = create_server(config, app)

    logger.info(f"Listening on {config.listen_address}, metrics at {config.metrics_path}")
    try:
        server.serve_forever()
    finally:
        server.server_close()
