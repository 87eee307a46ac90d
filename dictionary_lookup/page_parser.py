#!/usr/bin/env python3
"""
Page parser seam between the remote querier and the markup extractors
"""

from typing import List, Protocol

from .lemma import Lemma
from .lemma_parser import extract_lemmas
from .suggestion_parser import extract_suggestions


class PageParser(Protocol):
    """Turns downloaded pages into lemmas or suggestions"""

    def parse_lemmas(self, page: str) -> List[Lemma]:
        ...

    def parse_suggestions(self, page: str) -> List[str]:
        ...


class HTMLPageParser:
    """Default parser for the dictionary's HTML pages"""

    def parse_lemmas(self, page: str) -> List[Lemma]:
        return extract_lemmas(page)

    def parse_suggestions(self, page: str) -> List[str]:
        return extract_suggestions(page)
