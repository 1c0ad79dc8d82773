"""
Date: 2026-10-18
Description:
Prometheus exposition for the exporter.

Builds the registry, the build-info metric, and the HTTP server that serves
the registry on the telemetry path and a landing page everywhere else.
"""

import logging
import platform
import socket
import threading
from typing import Iterator, Tuple
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.registry import Collector

from pushstream_exporter import __version__

logger = logging.getLogger(__name__)

EXPORTER_NAME = "nginx_push_stream_exporter"

LANDING_PAGE = """<html>
<head><title>Nginx PushStream Exporter</title></head>
<body>
<h1>Nginx PushStream Exporter</h1>
<p><a href='{path}'>Metrics</a></p>
</body>
</html>
"""


class BuildInfoCollector(Collector):
    """Constant gauge describing the running exporter build."""

    def __init__(self, program: str = EXPORTER_NAME, version: str = __version__):
        self.program = program
        self.version = version

    def collect(self) -> Iterator[Metric]:
        family = GaugeMetricFamily(
            f"{self.program}_build_info",
            f"A metric with a constant '1' value labeled by version and pythonversion from which {self.program} was built.",
            labels=["version", "pythonversion"],
        )
        family.add_metric([self.version, platform.python_version()], 1)
        yield family


def build_registry(*collectors: Collector) -> CollectorRegistry:
    """Create a fresh registry holding the build info and the given collectors."""
    registry = CollectorRegistry(auto_describe=True)
    registry.register(BuildInfoCollector())
    for c in collectors:
        registry.register(c)
    return registry


def make_app(registry: CollectorRegistry, telemetry_path: str = "/metrics"):
    """
    WSGI app serving *registry* on *telemetry_path* and the landing page elsewhere.
    """
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(path=telemetry_path).encode("utf-8")

    def app(environ, start_response):
        if environ.get("PATH_INFO", "/") == telemetry_path:
            return metrics_app(environ, start_response)
        start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
        return [landing]

    return app


class _ThreadingWSGIServerV6(ThreadingWSGIServer):
    address_family = socket.AF_INET6


class _DualStackWSGIServer(_ThreadingWSGIServerV6):
    def server_bind(self):
        self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
        super().server_bind()


def _server_class(host: str):
    """An empty host listens on every IPv4 and IPv6 address where the OS allows it."""
    if not host:
        return _DualStackWSGIServer if socket.has_dualstack_ipv6() else ThreadingWSGIServer
    return _ThreadingWSGIServerV6 if ":" in host else ThreadingWSGIServer


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


def start_metrics_server(
        registry: CollectorRegistry,
        host: str = "",
        port: int = 9101,
        telemetry_path: str = "/metrics",
) -> Tuple[ThreadingWSGIServer, threading.Thread]:
    """Start the Prometheus metrics HTTP server in a daemon thread."""
    httpd = make_server(
        host, port, make_app(registry, telemetry_path),
        server_class=_server_class(host),
        handler_class=_QuietHandler,
    )
    t = threading.Thread(target=httpd.serve_forever, name="metrics-server", daemon=True)
    t.start()
    logger.info("Listening on %s:%d, metrics at %s", host, port, telemetry_path)
    return httpd, t
