#!/usr/bin/env python3
"""
SQLite-based cache for search and lemma lookups
Successful lookups are kept indefinitely, failed lookups expire after a day
"""

import json
import logging
import sqlite3
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import (
    DictionaryLookupError,
    ParseError,
    ParseErrorKind,
    ProtocolError,
    ProtocolErrorKind,
)
from .lemma import Lemma
from .querier import Resolved, SearchResult, Suggestions

logger = logging.getLogger(__name__)

CACHE_SCHEMA_VERSION = 1
ERROR_TTL_SECONDS = 24 * 60 * 60

# Raised while rebuilding results from a damaged row
CORRUPT_VALUE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)

QUERY_KIND = 'query'
LEMMA_KIND = 'lemma'


@dataclass
class CachedQuery:
    """Stored outcome of a search"""
    lemma_id: str = ''
    suggestions: Tuple[str, ...] = ()
    error: Optional[DictionaryLookupError] = None
    cached_at: float = 0.0

    def unwrap(self) -> SearchResult:
        """Return the stored result or raise the stored error"""
        if self.error is not None:
            raise self.error
        if self.lemma_id:
            return Resolved(self.lemma_id)
        return Suggestions(self.suggestions)


@dataclass
class CachedLemma:
    """Stored outcome of a lemma fetch"""
    lemmas: Tuple[Lemma, ...] = ()
    error: Optional[DictionaryLookupError] = None
    cached_at: float = 0.0

    def unwrap(self) -> List[Lemma]:
        if self.error is not None:
            raise self.error
        return list(self.lemmas)


class LookupCache:
    """Key/value store over a single SQLite table.

    ``database`` is a file path or ``":memory:"``. One connection is shared by
    all callers and guarded by a lock.
    """

    def __init__(self, database: str = 'lookup_cache.db'):
        self.database = database
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(database, check_same_thread=False)
        self._init_cache()

    def _init_cache(self):
        """Initialize the cache table"""
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS lookup_cache (
                    kind TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value_json TEXT NOT NULL,
                    cached_at REAL NOT NULL,
                    expires_at REAL,
                    PRIMARY KEY (kind, key)
                )
            """)
            self._conn.commit()

    def get_query(self, query: str) -> Optional[CachedQuery]:
        data = self._get(QUERY_KIND, query)
        if data is None:
            return None
        try:
            return CachedQuery(
                lemma_id=data.get('lemma_id', ''),
                suggestions=tuple(data.get('suggestions') or ()),
                error=_error_from_dict(data.get('error')),
                cached_at=data['cached_at'],
            )
        except CORRUPT_VALUE_ERRORS as e:
            self._discard(QUERY_KIND, query, e)
            return None

    def put_query(self, query: str, result: Optional[SearchResult] = None,
                  error: Optional[DictionaryLookupError] = None):
        value: Dict[str, Any] = {'lemma_id': '', 'suggestions': [], 'error': _error_to_dict(error)}
        if isinstance(result, Resolved):
            value['lemma_id'] = result.lemma_id
        elif isinstance(result, Suggestions):
            value['suggestions'] = list(result.candidates)
        self._put(QUERY_KIND, query, value, expires=error is not None)

    def get_lemma(self, lemma_id: str) -> Optional[CachedLemma]:
        data = self._get(LEMMA_KIND, lemma_id)
        if data is None:
            return None
        try:
            return CachedLemma(
                lemmas=tuple(Lemma.from_dict(item) for item in data.get('lemmas') or ()),
                error=_error_from_dict(data.get('error')),
                cached_at=data['cached_at'],
            )
        except CORRUPT_VALUE_ERRORS as e:
            self._discard(LEMMA_KIND, lemma_id, e)
            return None

    def put_lemma(self, lemma_id: str, lemmas: Optional[List[Lemma]] = None,
                  error: Optional[DictionaryLookupError] = None):
        value = {
            'lemmas': [lemma.to_dict() for lemma in lemmas or ()],
            'error': _error_to_dict(error),
        }
        self._put(LEMMA_KIND, lemma_id, value, expires=error is not None)

    def close(self):
        with self._lock:
            self._conn.close()

    def _get(self, kind: str, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._conn.execute(
                "SELECT value_json, cached_at, expires_at FROM lookup_cache WHERE kind = ? AND key = ?",
                (kind, key),
            ).fetchone()
            if row is None:
                return None

            value_json, cached_at, expires_at = row
            try:
                data = json.loads(value_json)
            except ValueError as e:
                logger.warning(f"Cached {kind} '{key}' is not valid JSON ({e}); discarding")
                self._delete(kind, key)
                return None
            if not isinstance(data, dict):
                logger.warning(f"Cached {kind} '{key}' is not a JSON object; discarding")
                self._delete(kind, key)
                return None
            if expires_at is not None and expires_at <= time.time():
                logger.debug(f"Cached {kind} '{key}' expired")
                self._delete(kind, key)
                return None
            if data.get('schema_version') != CACHE_SCHEMA_VERSION:
                logger.info(
                    "Cached %s '%s' uses schema %s (expected %s); refreshing",
                    kind, key, data.get('schema_version'), CACHE_SCHEMA_VERSION,
                )
                self._delete(kind, key)
                return None

        data['cached_at'] = cached_at
        return data

    def _put(self, kind: str, key: str, value: Dict[str, Any], expires: bool):
        value = dict(value, schema_version=CACHE_SCHEMA_VERSION)
        now = time.time()
        expires_at = now + ERROR_TTL_SECONDS if expires else None
        with self._lock:
            self._conn.execute("""
                INSERT OR REPLACE INTO lookup_cache (kind, key, value_json, cached_at, expires_at)
                VALUES (?, ?, ?, ?, ?)
            """, (kind, key, json.dumps(value), now, expires_at))
            self._conn.commit()

    def _discard(self, kind: str, key: str, error: Exception):
        logger.warning(f"Cached {kind} '{key}' could not be decoded ({error!r}); discarding")
        with self._lock:
            self._delete(kind, key)

    def _delete(self, kind: str, key: str):
        self._conn.execute("DELETE FROM lookup_cache WHERE kind = ? AND key = ?", (kind, key))
        self._conn.commit()


def _error_to_dict(error: Optional[DictionaryLookupError]) -> Optional[Dict[str, Any]]:
    if error is None:
        return None
    if isinstance(error, ParseError):
        return {'type': 'parse', 'kind': error.kind.value, 'detail': error.detail}
    if isinstance(error, ProtocolError):
        return {'type': 'protocol', 'kind': error.kind.value, 'detail': error.detail, 'status': error.status}
    raise TypeError(f"Only parse and protocol errors can be cached, got {type(error).__name__}")


def _error_from_dict(data: Optional[Dict[str, Any]]) -> Optional[DictionaryLookupError]:
    if not data:
        return None
    if data['type'] == 'parse':
        return ParseError(ParseErrorKind(data['kind']), data.get('detail', ''))
    if data['type'] != 'protocol':
        raise ValueError(f"Unknown cached error type: {data['type']}")
    return ProtocolError(ProtocolErrorKind(data['kind']), data.get('detail', ''), status=data.get('status'))
