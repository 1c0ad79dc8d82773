"""
Date: 2026-10-18
Description:
Turn a decoded PushStreamStatus into labelled metric samples.

Each catalog key maps to a typed accessor in one of two tables: server-wide
values labelled channel="all", and per-channel values labelled with the
channel name. The subscribers_total rollup is derived here and is always
emitted, whether or not it was selected.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from pushstream_exporter.catalog import ALL_CHANNELS, MetricDescriptor
from pushstream_exporter.decoder import ChannelRecord, PushStreamStatus
from pushstream_exporter.exceptions import FieldCoercionWarning

logger = logging.getLogger(__name__)

AGGREGATE_KEY = "subscribers_total"


@dataclass(frozen=True)
class Sample:
    metric_key: str
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


_SERVER_ACCESSORS: Dict[str, Callable[[PushStreamStatus], int]] = {
    "channels": lambda status: status.total_channels,
}

_CHANNEL_ACCESSORS: Dict[str, Callable[[ChannelRecord], Optional[int]]] = {
    "subscribers": lambda ch: ch.subscribers,
    "published_messages": lambda ch: ch.published_messages,
    "stored_messages": lambda ch: ch.stored_messages,
}


def _warn_uncoercible(channel: str, key: str, outcome: str) -> None:
    logger.warning(
        "%s: channel '%s' has a non-numeric %s, %s",
        FieldCoercionWarning.__name__, channel, key, outcome,
    )


def _channel_samples(key: str, status: PushStreamStatus) -> List[Sample]:
    accessor = _CHANNEL_ACCESSORS[key]
    samples = []
    for ch in status.channels:
        value = accessor(ch)
        if value is None:
            if key == "subscribers":
                # warned once by subscribers_total
                logger.debug("No %s sample for channel '%s'", key, ch.name)
            else:
                _warn_uncoercible(ch.name, key, "skipping the sample")
            continue
        samples.append(Sample(key, float(value), {"channel": ch.name}))
    return samples


def subscribers_total(status: PushStreamStatus) -> int:
    """
    Sum subscribers across every channel.
    A channel whose count could not be coerced contributes zero.
    """
    total = 0
    for ch in status.channels:
        if ch.subscribers is None:
            _warn_uncoercible(ch.name, "subscribers", "counting it as 0")
            continue
        total += ch.subscribers
    return total


def extract_samples(
        status: PushStreamStatus,
        selected: Iterable[MetricDescriptor],
) -> List[Sample]:
    """
    Produce the samples of one scrape.
    Args:
        status (PushStreamStatus): The decoded status document.
        selected (Iterable[MetricDescriptor]): Catalog entries to emit.
    Returns:
        List[Sample]: Samples in selection order, then channel order, with the
            subscribers_total rollup last.
    """
    samples: List[Sample] = []
    for descriptor in selected:
        key = descriptor.key
        if key in _SERVER_ACCESSORS:
            value = _SERVER_ACCESSORS[key](status)
            samples.append(Sample(key, float(value), {"channel": ALL_CHANNELS}))
        elif key in _CHANNEL_ACCESSORS:
            samples.extend(_channel_samples(key, status))
        elif key != AGGREGATE_KEY:
            logger.debug("No accessor for metric '%s', skipping", key)

    # emitted unconditionally, see DESIGN.md
    samples.append(Sample(AGGREGATE_KEY, float(subscribers_total(status)), {"channel": ALL_CHANNELS}))
    return samples
