import argparse
import logging
import os
from typing import Any, Dict, List, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

from pushstream_exporter.catalog import DEFAULT_CATALOG

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config/exporter-config.yaml")


class ScrapeSettings(BaseModel):
    """
    Configuration for scraping the push stream module.
    This class defines the status page URI, which metrics to export, and the fetch timeout.
    """
    scrape_uri: str = Field(
        "http://localhost:8080/channels-stats?id=ALL",
        description="URI on which to scrape Nginx PushStream channel stats",
    )
    metric_fields: str = Field(
        DEFAULT_CATALOG.default_selection(),
        description="Comma-separated list of exported server metrics",
    )
    timeout: float = Field(
        5.0, gt=0, description="Timeout (seconds) for trying to get stats from nginx"
    )

    def __init__(self, **data):
        logger.debug(f"Initializing ScrapeSettings with data: {data}")
        super().__init__(**data)


class WebSettings(BaseModel):
    """
    Configuration for the exporter's own HTTP listener.
    This class defines the listen address and the path metrics are served on.
    """
    listen_address: str = Field(
        ":9101", description="Address to listen on for web interface and telemetry"
    )
    telemetry_path: str = Field(
        "/metrics", description="Path under which to expose metrics"
    )

    @field_validator("listen_address")
    @classmethod
    def check_listen_address(cls, v: str) -> str:
        _, sep, port = v.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            logger.error("Invalid listen address '%s'", v)
            raise ValueError(f"listen address must look like 'host:port' or ':port', got '{v}'")
        return v

    @field_validator("telemetry_path")
    @classmethod
    def check_telemetry_path(cls, v: str) -> str:
        if not v.startswith("/") or v == "/":
            raise ValueError(f"telemetry path must start with '/' and not be the root, got '{v}'")
        return v

    def host_port(self) -> Tuple[str, int]:
        """Split the listen address; an empty host binds every interface."""
        host, _, port = self.listen_address.rpartition(":")
        return host.strip("[]"), int(port)


class LoggingConfig(BaseModel):
    """
    Configuration for logging settings.
    This class defines the logging level for the application.
    """
    level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = Field(
        "INFO", description="Logging level"
    )


class ExporterConfig(BaseModel):
    """
    Configuration for the exporter application.
    This class encapsulates the scrape, web listener and logging settings.
    """
    nginx: ScrapeSettings = Field(default_factory=ScrapeSettings)
    web: WebSettings = Field(default_factory=WebSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: str = CONFIG_PATH, required: bool = True) -> "ExporterConfig":
        """
        Load and validate the exporter configuration from YAML.
        Raises a clear exception if the file is missing or invalid.
        Args:
            path (str): Location of the YAML file.
            required (bool): If False a missing file yields the defaults.
        Returns:
            ExporterConfig: The validated configuration object.
        Raises:
            FileNotFoundError: If a required configuration file does not exist.
            ValueError: If the configuration is invalid.
        """
        logger.info(f"Loading configuration from {path}")
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
                logger.debug(f"Raw config data: {data}")
        except FileNotFoundError as e:
            if not required:
                logger.info("No configuration file at %s, using defaults", path)
                return cls()
            logger.exception(f"Configuration file not found at {path}")
            raise FileNotFoundError(f"Configuration file not found at {path}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExporterConfig":
        try:
            config = cls(**data)
            logger.info("Configuration loaded and validated successfully")
            logger.debug(f"Final config object: {config}")
            return config
        except Exception as e:
            logger.exception("Invalid configuration provided")
            raise ValueError(f"Invalid configuration: {e}") from e


# (section, option) for every flag that may override the YAML file
_FLAG_TARGETS = {
    "web_listen_address": ("web", "listen_address"),
    "web_telemetry_path": ("web", "telemetry_path"),
    "nginx_scrape_uri": ("nginx", "scrape_uri"),
    "nginx_metric_fields": ("nginx", "metric_fields"),
    "nginx_timeout": ("nginx", "timeout"),
    "log_level": ("logging", "level"),
}


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Nginx PushStream Exporter")
    parser.add_argument("--config", default=None,
                        help=f"Path to the YAML config file (default: $CONFIG_PATH or {CONFIG_PATH})")
    parser.add_argument("--web.listen-address", dest="web_listen_address",
                        help="Address to listen on for web interface and telemetry.")
    parser.add_argument("--web.telemetry-path", dest="web_telemetry_path",
                        help="Path under which to expose metrics.")
    parser.add_argument("--nginx.scrape-uri", dest="nginx_scrape_uri",
                        help="URI on which to scrape Nginx PushStream channel stats.")
    parser.add_argument("--nginx.metric-fields", dest="nginx_metric_fields",
                        help="Comma-separated list of exported server metrics "
                             f"(default: {DEFAULT_CATALOG.default_selection()}).")
    parser.add_argument("--nginx.timeout", dest="nginx_timeout", type=float,
                        help="Timeout in seconds for trying to get stats from nginx.")
    parser.add_argument("--log.level", dest="log_level", type=str.upper,
                        help="Logging level (DEBUG, INFO, WARN, ERROR).")
    return parser


def get_config(argv: Optional[List[str]] = None) -> ExporterConfig:
    """
    Retrieve the exporter configuration.

    The YAML file is read first, then every flag given on the command line
    overrides the matching option. A missing file is only an error when it
    was asked for explicitly.
    Args:
        argv (Optional[List[str]]): Command line arguments, sys.argv if None.
    Returns:
        ExporterConfig: The validated configuration object.
    """
    logger.info("Retrieving exporter configuration")
    args = build_arg_parser().parse_args(argv)

    explicit = args.config is not None or "CONFIG_PATH" in os.environ
    path = args.config or os.getenv("CONFIG_PATH", CONFIG_PATH)
    base = ExporterConfig.load(path, required=explicit)

    data = base.model_dump()
    for dest, (section, option) in _FLAG_TARGETS.items():
        value = getattr(args, dest)
        if value is not None:
            data[section][option] = value

    config = ExporterConfig.from_dict(data)
    logger.debug(f"Parsed configuration object: {config}")
    return config
