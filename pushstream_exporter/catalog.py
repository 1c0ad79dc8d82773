"""
Date: 2026-10-18
Description:
Registry of the push stream metrics the exporter knows how to produce.

The catalog is built once at import time and handed to the filter, the
extraction engine and the collector. It is never mutated afterwards.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Tuple

NAMESPACE = "nginx"
SUBSYSTEM = "push_stream"
LABEL_NAMES: Tuple[str, ...] = ("channel",)

ALL_CHANNELS = "all"


def build_fq_name(*parts: str) -> str:
    """Join non-empty name parts with underscores, like the Go client does."""
    return "_".join(p for p in parts if p)


@dataclass(frozen=True)
class MetricDescriptor:
    key: str
    description: str
    label_names: Tuple[str, ...] = LABEL_NAMES

    @property
    def name(self) -> str:
        return build_fq_name(NAMESPACE, SUBSYSTEM, self.key)


class MetricCatalog:
    """
    Read-only lookup of metric descriptors by key.
    """

    def __init__(self, descriptors: Iterable[MetricDescriptor]):
        entries = {}
        for d in descriptors:
            if d.key in entries:
                raise ValueError(f"Duplicate metric key '{d.key}'")
            entries[d.key] = d
        self._entries: Mapping[str, MetricDescriptor] = MappingProxyType(
            {k: entries[k] for k in sorted(entries)}
        )

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def get(self, key: str) -> MetricDescriptor:
        """Return the descriptor for *key*; unknown keys raise KeyError."""
        return self._entries[key]

    def default_selection(self) -> str:
        """All keys, sorted and comma-joined; the default metric-fields value."""
        return ",".join(self.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[MetricDescriptor]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MetricCatalog({self.default_selection()})"


DEFAULT_CATALOG = MetricCatalog([
    MetricDescriptor("channels", "Current number of existing channels on this server."),
    MetricDescriptor("subscribers", "Current number of connected subscribers on channels on this server."),
    MetricDescriptor("published_messages", "Number of messages published to channels on this server."),
    MetricDescriptor("stored_messages", "Number of messages stored in channels on this server."),
    MetricDescriptor("subscribers_total", "Total current number of connected subscribers on this server."),
])
