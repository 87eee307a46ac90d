#!/usr/bin/env python3
"""
Cambridge Dictionary Entry Page Parser
Walks the entry markup and turns every definition block into a Lemma

The page is organised as nested blocks:

    div.dictionary[data-id]            -> language
      pos-header | pv-block | idiom-block  -> headword, part of speech, IPA
        div.dsense                     -> guide word
          def-block | phrase-block     -> definition, grammar, examples

Every level only refines the Lemma snapshot it received and hands the new
snapshot down to its children; a Lemma is emitted at each def-block.
"""

import logging
import re
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Tuple, Union

import soupsieve as sv
from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from .errors import ParseError, ParseErrorKind
from .lemma import DATA_ID_TO_LANGUAGE, Lemma, Transcriptions

logger = logging.getLogger(__name__)

Document = Union[str, bytes, BeautifulSoup]

# Selectors are compiled once and shared by every extraction
DICTIONARY = sv.compile('div[class*="dictionary"][data-id]')
DICTIONARY_ENTRY = sv.compile(', '.join([
    'div[class*="entry-body__el"] > div[class*="pos-header"]',
    'div[class="pv-block"]',
    'div[class^="idiom-block"]',
]))

HEADWORD = sv.compile('span[class^=headword]')
POSGRAM = sv.compile('div[class^=posgram]')
PART_OF_SPEECH = sv.compile('span[class^=pos]')
GRAMMAR_BLOCK = sv.compile('span[class^=gram]')
GRAMMAR_CODE = sv.compile('span[class^=gc]')

PRONUNCIATION = sv.compile('span[class*="dpron-i"]')
REGION = sv.compile('span[class^="region"]')
IPA = sv.compile('span[class^="ipa"]')

DSENSE = sv.compile('div.dsense')
DSENSE_HEADER = sv.compile('h3.dsense_h')
GUIDEWORD = sv.compile('span.guideword')
DSENSE_ENTRY = sv.compile('div.def-block, div.phrase-block')

DEF_HEADER = sv.compile('div.ddef_h')
DEF = sv.compile('div.def')
DEF_INFO = sv.compile('span.def-info')
DEF_BODY = sv.compile('div.def-body')
ALTERNATIVE = sv.compile('span.v')
EXAMPLE = sv.compile('div.examp')

PHRASE_HEAD = sv.compile('div.phrase-head')
PHRASE_TITLE = sv.compile('span.phrase-title')
PHRASE_BODY = sv.compile('div.phrase-body')
DEF_BLOCK = sv.compile('div.def-block')

DI_TITLE = sv.compile('div.di-title')
DI_INFO = sv.compile('span.di-info')
POS_HEADER = sv.compile('div.pos-header')
ANC_INFO_HEAD = sv.compile('span.anc-info-head')
PV_BODY = sv.compile('span.pv-body')
IDIOM_BODY = sv.compile('span.idiom-body')

MULTIPLE_WHITESPACE = re.compile(r'\s\s+')

# Baseline characters rendered as superscripts inside IPA transcriptions
IPA_SUPERSCRIPTS = str.maketrans({
    'a': 'ᵃ', 'b': 'ᵇ', 'c': 'ᶜ', 'd': 'ᵈ', 'e': 'ᵉ', 'f': 'ᶠ', 'g': 'ᵍ',
    'h': 'ʰ', 'i': 'ⁱ', 'j': 'ʲ', 'k': 'ᵏ', 'l': 'ˡ', 'm': 'ᵐ', 'n': 'ⁿ',
    'o': 'ᵒ', 'p': 'ᵖ', 'r': 'ʳ', 's': 'ˢ', 't': 'ᵗ', 'u': 'ᵘ', 'v': 'ᵛ',
    'w': 'ʷ', 'x': 'ˣ', 'y': 'ʸ', 'z': 'ᶻ',
    'ə': 'ᵊ', 'ɪ': 'ᶦ', 'ʊ': 'ᶷ', 'ŋ': 'ᵑ', 'ʃ': 'ᶴ', 'ʒ': 'ᶾ', 'θ': 'ᶿ',
    'ɹ': 'ʴ', 'ɛ': 'ᵋ', 'ɔ': 'ᵓ', 'æ': 'ᵆ', 'ʌ': 'ᶺ',
})

Extractor = Callable[[Lemma, Tag], List[Lemma]]


def extract_lemmas(document: Document) -> List[Lemma]:
    """Extract every lemma of an entry page, in document order.

    Raises ParseError on the first block that does not match the expected
    markup; no partial result is returned.
    """
    soup = make_soup(document)
    dictionaries = DICTIONARY.select(soup)
    logger.debug(f"Found {len(dictionaries)} dictionary blocks")

    lemmas = _enrich(Lemma(), dictionaries, _parse_dictionary)
    logger.debug(f"Extracted {len(lemmas)} lemmas")
    return lemmas


def clean_definition(text: str) -> str:
    """Collapse whitespace runs and strip surrounding whitespace and colons"""
    return MULTIPLE_WHITESPACE.sub(' ', text).strip(' \n\t:')


def ipa_superscript(text: str) -> str:
    """Render a superscripted IPA fragment with Unicode modifier letters"""
    return text.translate(IPA_SUPERSCRIPTS)


def make_soup(document: Document) -> BeautifulSoup:
    if isinstance(document, BeautifulSoup):
        return document
    return BeautifulSoup(document, 'html.parser')


def _enrich(context: Lemma, nodes: Iterable[Tag], extract: Extractor) -> List[Lemma]:
    # Every sibling starts from the same snapshot; the first error aborts the walk
    lemmas: List[Lemma] = []
    for node in nodes:
        lemmas.extend(extract(context, node))
    return lemmas


def _children(tags: Union[Tag, Iterable[Tag]], matcher: sv.SoupSieve) -> List[Tag]:
    if isinstance(tags, Tag):
        tags = [tags]
    return [
        child
        for tag in tags
        for child in tag.find_all(recursive=False)
        if matcher.match(child)
    ]


def _descendants(tags: Iterable[Tag], matcher: sv.SoupSieve) -> List[Tag]:
    return [found for tag in tags for found in matcher.select(tag)]


def _text(tags: Iterable[Tag]) -> str:
    return ''.join(tag.get_text() for tag in tags)


def _has_class(tag: Tag, name: str) -> bool:
    return name in (tag.get('class') or [])


def _class_name(tag: Tag) -> str:
    return ' '.join(tag.get('class') or [])


def _parse_dictionary(context: Lemma, dictionary: Tag) -> List[Lemma]:
    data_id = dictionary.get('data-id', 'unknown')
    language = DATA_ID_TO_LANGUAGE.get(data_id)
    if language is None:
        raise ParseError(
            ParseErrorKind.UNKNOWN_DICTIONARY_ID,
            f"div.dictionary has unknown data-id attr: {data_id}",
        )
    context = replace(context, language=language)

    entries = DICTIONARY_ENTRY.select(dictionary)
    return _enrich(context, entries, _parse_dictionary_entry)


def _parse_dictionary_entry(context: Lemma, entry: Tag) -> List[Lemma]:
    # A dictionary holds plain headwords, phrasal verbs and idioms
    if _has_class(entry, 'pos-header'):
        return _parse_pos_header(context, entry)
    if _has_class(entry, 'pv-block'):
        return _parse_pv_block(context, entry)
    if _has_class(entry, 'idiom-block'):
        return _parse_idiom_block(context, entry)
    raise ParseError(ParseErrorKind.UNKNOWN_ENTRY_SHAPE, _class_name(entry))


def _parse_pos_header(context: Lemma, pos_header: Tag) -> List[Lemma]:
    headwords = HEADWORD.select(pos_header)
    if not headwords:
        raise ParseError(
            ParseErrorKind.MISSING_HEADWORD,
            f".pos-header has no .headword elements ({_class_name(pos_header)})",
        )
    context = replace(context, headword=headwords[0].get_text().strip())
    context = _with_posgram(context, _children(pos_header, POSGRAM))
    context = replace(context, transcriptions=_get_transcriptions([pos_header]))

    body = pos_header.find_next_sibling()
    dsenses = _children(body, DSENSE) if body is not None else []
    return _enrich(context, dsenses, _parse_dsense)


def _parse_pv_block(context: Lemma, pv_block: Tag) -> List[Lemma]:
    headword = _text(_children(pv_block, DI_TITLE)).strip()
    if not headword:
        raise ParseError(ParseErrorKind.MISSING_HEADWORD, ".pv-block has no .di-title text")
    context = replace(context, headword=headword)

    header = _children(_children(pv_block, DI_INFO), POS_HEADER)
    context = _with_posgram(context, _children(header, ANC_INFO_HEAD))
    context = replace(context, transcriptions=_get_transcriptions(header))

    dsenses = _children(_children(pv_block, PV_BODY), DSENSE)
    return _enrich(context, dsenses, _parse_dsense)


def _parse_idiom_block(context: Lemma, idiom_block: Tag) -> List[Lemma]:
    headword = _text(_children(idiom_block, DI_TITLE)).strip()
    if not headword:
        raise ParseError(ParseErrorKind.MISSING_HEADWORD, ".idiom-block has no .di-title text")
    context = replace(context, headword=headword, part_of_speech=('idiom',))

    dsenses = _children(_children(idiom_block, IDIOM_BODY), DSENSE)
    return _enrich(context, dsenses, _parse_dsense)


def _with_posgram(context: Lemma, posgram: List[Tag]) -> Lemma:
    return replace(
        context,
        part_of_speech=_get_part_of_speech(posgram),
        grammar=_get_grammar(posgram),
    )


def _get_part_of_speech(tags: List[Tag]) -> Tuple[str, ...]:
    return tuple(sorted(pos.get_text() for pos in _children(tags, PART_OF_SPEECH)))


def _get_grammar(tags: List[Tag]) -> Tuple[str, ...]:
    codes = _descendants(_children(tags, GRAMMAR_BLOCK), GRAMMAR_CODE)
    return tuple(sorted(code.get_text() for code in codes))


def _get_transcriptions(headers: List[Tag]) -> Transcriptions:
    transcriptions: Dict[str, Tuple[str, ...]] = {}
    for pronunciation in _children(headers, PRONUNCIATION):
        regions = _children(pronunciation, REGION)
        region = regions[0].get_text().strip() if regions else ''
        transcriptions[region] = tuple(
            _ipa_to_string(ipa) for ipa in IPA.select(pronunciation)
        )
    return tuple(transcriptions.items())


def _ipa_to_string(ipa: Tag) -> str:
    parts = []
    for node in ipa.contents:
        if isinstance(node, Tag):
            if node.name == 'span':
                parts.append(ipa_superscript(node.get_text()))
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            parts.append(str(node))
    return ''.join(parts)


def _parse_dsense(context: Lemma, dsense: Tag) -> List[Lemma]:
    context = replace(context, guide_word=_get_guide_word(_children(dsense, DSENSE_HEADER)))

    entries = [
        entry for entry in DSENSE_ENTRY.select(dsense)
        if not _inside_phrase_block(entry, dsense)
    ]
    return _enrich(context, entries, _parse_dsense_entry)


def _parse_dsense_entry(context: Lemma, entry: Tag) -> List[Lemma]:
    if _has_class(entry, 'def-block'):
        return _parse_def_block(context, entry)
    if _has_class(entry, 'phrase-block'):
        return _parse_phrase_block(context, entry)
    raise ParseError(ParseErrorKind.UNKNOWN_SENSE_SHAPE, _class_name(entry))


def _inside_phrase_block(entry: Tag, dsense: Tag) -> bool:
    # def-blocks of a phrase-block are emitted through the phrase-block
    for parent in entry.parents:
        if parent is dsense:
            return False
        if _has_class(parent, 'phrase-block'):
            return True
    return False


def _get_guide_word(dsense_headers: List[Tag]) -> str:
    guidewords = _descendants(dsense_headers, GUIDEWORD)
    text = ''.join(
        child.get_text()
        for guideword in guidewords
        for child in guideword.find_all(recursive=False)
    )
    return text.strip().lower()


def _parse_def_block(context: Lemma, def_block: Tag) -> List[Lemma]:
    def_header = _children(def_block, DEF_HEADER)
    definitions = _children(def_header, DEF)
    if not definitions:
        raise ParseError(
            ParseErrorKind.MISSING_DEFINITION,
            f"div.ddef_h has no div.def ({_class_name(def_block)})",
        )
    context = replace(context, definition=clean_definition(_text(definitions)))

    def_info = _children(def_header, DEF_INFO)
    grammar = _get_grammar(def_info)
    if grammar:
        context = replace(context, grammar=grammar)

    alternatives = _descendants(def_info, ALTERNATIVE)
    if alternatives:
        context = replace(context, alternative=_text(alternatives).strip())

    examples = _children(_children(def_block, DEF_BODY), EXAMPLE)
    context = replace(context, examples=tuple(example.get_text().strip() for example in examples))
    return [context]


def _parse_phrase_block(context: Lemma, phrase_block: Tag) -> List[Lemma]:
    title = _children(_children(phrase_block, PHRASE_HEAD), PHRASE_TITLE)
    context = replace(context, alternative=_text(title).strip())

    def_blocks = _children(_children(phrase_block, PHRASE_BODY), DEF_BLOCK)
    return _enrich(context, def_blocks, _parse_def_block)
