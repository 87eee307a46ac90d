#!/usr/bin/env python3
"""
Spellcheck Page Parser
Extracts the "did you mean" suggestions listed under the page heading
"""

import logging
from typing import List

import soupsieve as sv

from .errors import ParseError, ParseErrorKind
from .lemma_parser import Document, make_soup

logger = logging.getLogger(__name__)

SUGGESTION_LIST = sv.compile('h1 ~ ul.hul-u')
SUGGESTION = sv.compile('li')


def extract_suggestions(document: Document) -> List[str]:
    """Return the suggested headwords in page order.

    A spellcheck page without any suggestion is malformed and raises
    ParseError(NO_SUGGESTIONS).
    """
    soup = make_soup(document)
    suggestions = [
        item.get_text().strip()
        for suggestion_list in SUGGESTION_LIST.select(soup)
        for item in suggestion_list.find_all(recursive=False)
        if SUGGESTION.match(item)
    ]
    if not suggestions:
        raise ParseError(ParseErrorKind.NO_SUGGESTIONS, "no suggestions found")

    logger.debug(f"Extracted {len(suggestions)} suggestions")
    return suggestions
