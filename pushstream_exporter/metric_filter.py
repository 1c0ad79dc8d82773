"""
Date: 2026-10-18
Description:
Resolve the --nginx.metric-fields selection string into catalog entries.
"""

import logging
from typing import Tuple

from pushstream_exporter.catalog import DEFAULT_CATALOG, MetricCatalog, MetricDescriptor

logger = logging.getLogger(__name__)


def filter_metrics(
        selection: str,
        catalog: MetricCatalog = DEFAULT_CATALOG,
) -> Tuple[MetricDescriptor, ...]:
    """
    Return the catalog entries named in a comma separated *selection*.

    Matching is exact and case-sensitive; names are not stripped. Unknown
    names are ignored so the same flag value works across exporter versions.
    An empty selection selects nothing.
    Args:
        selection (str): Comma separated metric keys.
        catalog (MetricCatalog): The catalog to select from.
    Returns:
        Tuple[MetricDescriptor, ...]: Selected descriptors in catalog order.
    """
    if not selection:
        return ()

    wanted = set(selection.split(","))
    unknown = sorted(k for k in wanted if k not in catalog)
    if unknown:
        logger.debug("Ignoring unknown metric fields: %s", ", ".join(unknown))

    return tuple(d for d in catalog if d.key in wanted)
