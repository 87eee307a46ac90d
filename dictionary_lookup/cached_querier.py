#!/usr/bin/env python3
"""
Caching decorator over any Querier
"""

import logging
import sqlite3
from typing import List

from .errors import ParseError, ProtocolError
from .lemma import Lemma
from .lookup_cache import LookupCache
from .querier import Querier, SearchResult

logger = logging.getLogger(__name__)


class CachedQuerier:
    """Memoizes searches by query string and entries by lemma id.

    Parse and protocol failures are cached (with a TTL) like results;
    transport failures and cancellations are not, so they can be retried.
    """

    def __init__(self, querier: Querier, cache: LookupCache):
        self.querier = querier
        self.cache = cache

    async def search(self, query: str) -> SearchResult:
        try:
            cached = self.cache.get_query(query)
        except sqlite3.Error as e:
            logger.error(f"Cache read error for query '{query}': {e}")
            cached = None
        if cached is not None:
            logger.debug(f"Cache hit for query '{query}'")
            return cached.unwrap()

        try:
            result = await self.querier.search(query)
        except (ParseError, ProtocolError) as e:
            self._store(self.cache.put_query, query, error=e)
            raise
        self._store(self.cache.put_query, query, result=result)
        return result

    async def get_lemma(self, lemma_id: str) -> List[Lemma]:
        try:
            cached = self.cache.get_lemma(lemma_id)
        except sqlite3.Error as e:
            logger.error(f"Cache read error for lemma '{lemma_id}': {e}")
            cached = None
        if cached is not None:
            logger.debug(f"Cache hit for lemma '{lemma_id}'")
            return cached.unwrap()

        try:
            lemmas = await self.querier.get_lemma(lemma_id)
        except (ParseError, ProtocolError) as e:
            self._store(self.cache.put_lemma, lemma_id, error=e)
            raise
        self._store(self.cache.put_lemma, lemma_id, lemmas=lemmas)
        return lemmas

    async def close(self):
        reasons = []
        try:
            await self.querier.close()
        except Exception as e:
            reasons.append(f"querier close failed: {e}")
        try:
            self.cache.close()
        except sqlite3.Error as e:
            reasons.append(f"cache close failed: {e}")
        if reasons:
            raise RuntimeError(f"close failed because: {' AND '.join(reasons)}")

    def _store(self, put, key: str, **values):
        try:
            put(key, **values)
        except sqlite3.Error as e:
            logger.error(f"Cache write error for '{key}': {e}")
