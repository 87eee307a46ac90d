"""
Cambridge Dictionary lookup client.

This package contains the building blocks of the lookup client:
- Entry and spellcheck page parsers
- Remote querier speaking the site's search redirect protocol
- SQLite-backed caching decorator
- Configuration and logging setup
"""

from .config import LookupConfig, CacheConfig, ServerConfig, load_config
from .errors import (
    DictionaryLookupError,
    ParseError,
    ParseErrorKind,
    ProtocolError,
    ProtocolErrorKind,
    TransportError,
)
from .lemma import Lemma
from .lemma_parser import extract_lemmas, clean_definition, ipa_superscript
from .suggestion_parser import extract_suggestions
from .querier import Querier, Resolved, Suggestions, SearchResult
from .remote_querier import RemoteQuerier
from .cached_querier import CachedQuerier
from .lookup_cache import LookupCache
from .factory import create_querier

__version__ = '0.1.0'

__all__ = [
    'LookupConfig',
    'CacheConfig',
    'ServerConfig',
    'load_config',
    'DictionaryLookupError',
    'ParseError',
    'ParseErrorKind',
    'ProtocolError',
    'ProtocolErrorKind',
    'TransportError',
    'Lemma',
    'extract_lemmas',
    'clean_definition',
    'ipa_superscript',
    'extract_suggestions',
    'Querier',
    'Resolved',
    'Suggestions',
    'SearchResult',
    'RemoteQuerier',
    'CachedQuerier',
    'LookupCache',
    'create_querier',
]
