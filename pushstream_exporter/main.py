"""
Date: 2026-10-18
Description:
Main entry point for the Nginx PushStream exporter.

Handles configuration loading, logging setup, collector wiring and the metrics server.
"""

import logging
import sys
import threading

from pushstream_exporter import __version__
from pushstream_exporter.collector import PushStreamCollector
from pushstream_exporter.config import get_config
from pushstream_exporter.exceptions import ConfigurationError
from pushstream_exporter.fetcher import get_fetcher
from pushstream_exporter.metric_filter import filter_metrics
from pushstream_exporter.metrics import build_registry, start_metrics_server


def setup_logging(level: str):
    root = logging.getLogger()
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    # Remove default handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)-5s %(name)s: %(message)s"))
    root.addHandler(ch)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def main(argv=None):
    try:
        cfg = get_config(argv)
    except (FileNotFoundError, ValueError) as e:
        setup_logging("ERROR")
        logging.error("Could not load configuration: %s", e)
        sys.exit(1)

    setup_logging(cfg.logging.level)
    logging.info("Starting nginx_pushstream_exporter (version=%s)", __version__)

    selected = filter_metrics(cfg.nginx.metric_fields)
    logging.info("Exporting metrics: %s", ",".join(d.key for d in selected) or "<none>")

    try:
        fetcher = get_fetcher(cfg.nginx.scrape_uri, cfg.nginx.timeout)
    except ConfigurationError:
        logging.exception("Fatal error in exporter")
        sys.exit(1)

    registry = build_registry(PushStreamCollector(fetcher, selected))
    host, port = cfg.web.host_port()
    try:
        httpd, _ = start_metrics_server(registry, host, port, cfg.web.telemetry_path)
    except OSError:
        logging.exception("Could not listen on %s", cfg.web.listen_address)
        fetcher.close()
        sys.exit(1)

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logging.info("Exporter interrupted by user, shutting down")
    finally:
        httpd.shutdown()
        fetcher.close()


if __name__ == '__main__':
    main()
