#!/usr/bin/env python3
"""
Error Taxonomy for Dictionary Lookups
Markup mismatches, remote protocol violations and transport failures
"""

from enum import Enum
from typing import Optional


class ParseErrorKind(Enum):
    """Ways an entry or suggestion page can fail to match the expected markup"""
    MISSING_HEADWORD = "missing_headword"
    MISSING_DEFINITION = "missing_definition"
    UNKNOWN_ENTRY_SHAPE = "unknown_entry_shape"
    UNKNOWN_SENSE_SHAPE = "unknown_sense_shape"
    UNKNOWN_DICTIONARY_ID = "unknown_dictionary_id"
    NO_SUGGESTIONS = "no_suggestions"


class ProtocolErrorKind(Enum):
    """Ways the remote site can break the search/redirect protocol"""
    UNEXPECTED_STATUS = "unexpected_status"
    EMPTY_LEMMA_ID = "empty_lemma_id"
    UNKNOWN_REDIRECT = "unknown_redirect"
    NO_SUGGESTIONS = "no_suggestions"


class DictionaryLookupError(Exception):
    """Base class for every error raised by the lookup client"""
    pass


class ParseError(DictionaryLookupError):
    """The markup does not match any expected shape at some node"""

    def __init__(self, kind: ParseErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        message = f"parse error ({kind.value})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ProtocolError(DictionaryLookupError):
    """The remote interaction did not follow the redirect/status protocol"""

    def __init__(self, kind: ProtocolErrorKind, detail: str = "", status: Optional[int] = None):
        self.kind = kind
        self.detail = detail
        self.status = status
        message = f"protocol error ({kind.value})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class TransportError(DictionaryLookupError):
    """Network failure or timeout while talking to the remote site"""
    pass
