"""Tests for the spellcheck page parser."""

import textwrap

import pytest

from dictionary_lookup.errors import ParseError, ParseErrorKind
from dictionary_lookup.page_parser import HTMLPageParser
from dictionary_lookup.suggestion_parser import extract_suggestions
from pages import HELLO_ENTRY, SPELLCHECK_PAGE


def test_suggestions_in_page_order():
    assert extract_suggestions(SPELLCHECK_PAGE) == ["hello", "hell"]


def test_lists_before_the_heading_are_ignored():
    page = textwrap.dedent(
        """
        <div>
          <ul class="hul-u"><li>navigation</li></ul>
          <h1>Search suggestions for wrd</h1>
          <ul class="hul-u"><li>word</li><li>ward</li></ul>
          <ul class="hul-u"><li>world</li></ul>
        </div>
        """
    )
    assert extract_suggestions(page) == ["word", "ward", "world"]


def test_empty_list_is_an_error():
    page = '<div><h1>Search suggestions</h1><ul class="hul-u"></ul></div>'
    with pytest.raises(ParseError) as excinfo:
        extract_suggestions(page)
    assert excinfo.value.kind is ParseErrorKind.NO_SUGGESTIONS


def test_entry_page_has_no_suggestions():
    with pytest.raises(ParseError):
        extract_suggestions(HELLO_ENTRY)


def test_html_page_parser_delegates():
    parser = HTMLPageParser()
    assert parser.parse_suggestions(SPELLCHECK_PAGE) == ["hello", "hell"]
    assert len(parser.parse_lemmas(HELLO_ENTRY)) == 4
