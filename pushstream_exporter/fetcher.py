"""
Date: 2026-10-18
Description:
Fetchers for retrieving the push stream channels-stats document.

Defines an abstract fetcher and concrete fetchers for http(s) and file URIs.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type
from urllib.parse import unquote, urlparse

import httpx

from pushstream_exporter.exceptions import ConfigurationError, FetchError

logger = logging.getLogger(__name__)


class BaseFetcher(ABC):
    """
    Abstract base class for fetchers.
    A fetcher makes one attempt to read the status document and returns its raw body.
    """

    def __init__(self, uri: str, timeout: float):
        """
        Initialize the fetcher with the URI to scrape and a timeout.

        Args:
            uri (str): Location of the channels-stats document.
            timeout (float): Seconds to wait before giving up.
        """
        self.uri = uri
        self.timeout = timeout
        logger.debug("%s initialized for %s (timeout %.1fs)", type(self).__name__, uri, timeout)

    @abstractmethod
    def fetch(self) -> bytes:
        """
        Return the raw body of the status document.

        Raises:
            FetchError: If the document could not be read.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release any held resources."""


class HTTPFetcher(BaseFetcher):
    """
    Fetcher for http and https URIs.
    Keeps one httpx client for the lifetime of the exporter.

    httpx applies its timeout to each connect, read and write separately, so
    the body is streamed and the whole request is held to one deadline.
    """

    max_redirects = 10

    def __init__(self, uri: str, timeout: float, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(uri, timeout)
        self.client = httpx.Client(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            max_redirects=self.max_redirects,
        )

    def fetch(self) -> bytes:
        """
        GET the status page.

        Returns:
            bytes: The response body.

        Raises:
            FetchError: On timeouts, transport errors, too many redirects and
                non-2xx responses.
        """
        deadline = time.monotonic() + self.timeout
        try:
            with self.client.stream("GET", self.uri) as resp:
                if not resp.is_success:
                    raise FetchError(f"HTTP status {resp.status_code}")
                chunks = []
                for chunk in resp.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        raise FetchError(f"Timed out after {self.timeout}s fetching {self.uri}")
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out after {self.timeout}s fetching {self.uri}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Error fetching {self.uri}: {e}") from e
        return b"".join(chunks)

    def close(self) -> None:
        logger.debug("Closing HTTP client")
        self.client.close()


class FileFetcher(BaseFetcher):
    """
    Fetcher for file URIs, reads a saved status document from disk.
    """

    def __init__(self, uri: str, timeout: float):
        super().__init__(uri, timeout)
        self.path = unquote(urlparse(uri).path)

    def fetch(self) -> bytes:
        try:
            with open(self.path, "rb") as f:
                return f.read()
        except OSError as e:
            raise FetchError(f"Error reading {self.path}: {e}") from e


_fetchers_map: Dict[str, Type[BaseFetcher]] = {
    "http": HTTPFetcher,
    "https": HTTPFetcher,
    "file": FileFetcher,
}


def get_fetcher(uri: str, timeout: float, **kwargs) -> BaseFetcher:
    """
    Factory function to get the fetcher matching the scheme of *uri*.

    Args:
        uri (str): Location of the channels-stats document.
        timeout (float): Seconds to wait for a response.
        **kwargs: Extra arguments passed to the fetcher, e.g. an httpx transport.

    Returns:
        BaseFetcher: The fetcher instance.

    Raises:
        ConfigurationError: If the scheme is unsupported.
    """
    scheme = urlparse(uri).scheme
    fetcher_cls = _fetchers_map.get(scheme)
    if not fetcher_cls:
        logger.error("Unsupported scheme: %r", scheme)
        raise ConfigurationError(f"unsupported scheme: {scheme!r}")
    logger.info("Fetcher %s selected for %s", fetcher_cls.__name__, uri)
    return fetcher_cls(uri, timeout, **kwargs)
