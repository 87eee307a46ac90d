#!/usr/bin/env python3
"""
Builds the querier stack described by the configuration
"""

import logging
from typing import Optional

from .cached_querier import CachedQuerier
from .config import CacheConfig, LookupConfig
from .lookup_cache import LookupCache
from .querier import Querier
from .remote_querier import RemoteQuerier

logger = logging.getLogger(__name__)


def create_querier(lookup: Optional[LookupConfig] = None, cache: Optional[CacheConfig] = None) -> Querier:
    """Remote querier, wrapped in the cache when one is configured"""
    querier: Querier = RemoteQuerier(lookup or LookupConfig())
    if cache is not None and cache.enabled:
        logger.info(f"Caching lookups in {cache.database}")
        querier = CachedQuerier(querier, LookupCache(cache.database))
    return querier
