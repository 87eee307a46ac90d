"""Tests for the entry page parser."""

import pytest
from bs4 import BeautifulSoup

from dictionary_lookup.errors import ParseError, ParseErrorKind
from dictionary_lookup.lemma import Lemma
from dictionary_lookup.lemma_parser import (
    _parse_dsense_entry,
    clean_definition,
    extract_lemmas,
    ipa_superscript,
)
from pages import GIVE_UP_ENTRY, HELLO_ENTRY, def_block, dsense, entry_page, pos_entry


class TestHeadwordEntries:
    """Plain headword entries (pos-header)"""

    @pytest.fixture
    def lemmas(self):
        return extract_lemmas(HELLO_ENTRY)

    def test_one_lemma_per_definition_block(self, lemmas):
        assert len(lemmas) == 4
        assert all(lemma.definition for lemma in lemmas)

    def test_header_fields_are_inherited(self, lemmas):
        for lemma in lemmas:
            assert lemma.headword == "hello"
            assert lemma.language == "british"
            assert lemma.part_of_speech == ("exclamation", "noun")

    def test_transcriptions_by_region(self, lemmas):
        assert lemmas[0].transcription_map() == {
            "uk": ("heˈlᵊʊ",),
            "us": ("heˈloʊ", "həˈloʊ"),
        }

    def test_first_definition_block(self, lemmas):
        first = lemmas[0]
        assert first.definition == "used when meeting or greeting someone"
        assert first.guide_word == "greeting"
        assert first.grammar == ("S",)
        assert first.examples == ("Hello, Paul.", "I said hello to him.")
        assert first.alternative == ""

    def test_grammar_override_does_not_leak_to_siblings(self, lemmas):
        second = lemmas[1]
        assert second.guide_word == "greeting"
        assert second.grammar == ("C", "U")
        assert second.examples == ()

    def test_alternative_form(self, lemmas):
        third = lemmas[2]
        assert third.guide_word == "surprise"
        assert third.alternative == "hallo"
        assert third.definition == "used to express surprise"

    def test_phrase_block_sets_alternative(self, lemmas):
        phrase = lemmas[3]
        assert phrase.alternative == "hello there"
        assert phrase.definition == "a friendly greeting"
        assert phrase.guide_word == "surprise"

    def test_accepts_parsed_documents(self, lemmas):
        assert extract_lemmas(BeautifulSoup(HELLO_ENTRY, "html.parser")) == lemmas

    def test_extraction_is_idempotent(self, lemmas):
        again = extract_lemmas(HELLO_ENTRY)
        assert again == lemmas
        assert [lemma.to_dict() for lemma in again] == [lemma.to_dict() for lemma in lemmas]


class TestPhrasalVerbsAndIdioms:
    """pv-block and idiom-block entries"""

    @pytest.fixture
    def lemmas(self):
        return extract_lemmas(GIVE_UP_ENTRY)

    def test_phrasal_verb(self, lemmas):
        phrasal = lemmas[0]
        assert phrasal == Lemma(
            headword="give up",
            part_of_speech=("phrasal verb",),
            language="american-english",
            transcriptions={"us": ("ɡɪv ˈʌp",)},
            definition="to stop trying to do something",
            guide_word="",
            alternative="",
            grammar=("I", "T"),
            examples=("I give up. What's the answer?",),
        )

    def test_idiom(self, lemmas):
        assert len(lemmas) == 2
        idiom = lemmas[1]
        assert idiom.headword == "give up the ghost"
        assert idiom.part_of_speech == ("idiom",)
        assert idiom.language == "business-english"
        assert idiom.transcriptions == ()
        assert idiom.definition == "to stop working"


class TestContextIsolation:

    def test_second_sense_does_not_see_first_sense(self):
        senses = (
            dsense(def_block("first meaning", examples=["an example"], grammar=["C"]), guideword="ONE")
            + dsense(def_block("second meaning"))
        )
        page = entry_page(pos_entry("word", senses, posgram='<span class="pos dpos">noun</span>'))

        first, second = extract_lemmas(page)

        assert first.guide_word == "one"
        assert first.grammar == ("C",)
        assert first.examples == ("an example",)
        assert second.guide_word == ""
        assert second.grammar == ()
        assert second.examples == ()
        assert second.definition == "second meaning"

    def test_sibling_definition_blocks_each_produce_a_lemma(self):
        blocks = "".join(def_block(f"meaning {i}") for i in range(5))
        page = entry_page(pos_entry("word", dsense(blocks)))

        lemmas = extract_lemmas(page)

        assert [lemma.definition for lemma in lemmas] == [f"meaning {i}" for i in range(5)]

    def test_transcriptions_are_not_shared_mutable_state(self):
        first, second = extract_lemmas(HELLO_ENTRY)[:2]

        with pytest.raises(TypeError):
            first.transcriptions["uk"] = ("changed",)
        copy = first.transcription_map()
        copy["uk"] = ("changed",)

        assert second.transcription_map()["uk"] == ("heˈlᵊʊ",)
        assert first.transcription_map()["uk"] == ("heˈlᵊʊ",)

    def test_lemmas_are_hashable(self):
        lemmas = extract_lemmas(HELLO_ENTRY)
        assert all(isinstance(hash(lemma), int) for lemma in lemmas)
        assert len(set(lemmas + extract_lemmas(HELLO_ENTRY))) == len(lemmas)


class TestSorting:

    def test_grammar_and_part_of_speech_are_sorted(self):
        posgram = (
            '<span class="pos dpos">verb</span><span class="pos dpos">adjective</span>'
            '<span class="gram dgram"><span class="gc dgc">singular</span>'
            '<span class="gc dgc">plural</span></span>'
        )
        page = entry_page(pos_entry("word", dsense(def_block("meaning")), posgram=posgram))

        lemma, = extract_lemmas(page)

        assert lemma.part_of_speech == ("adjective", "verb")
        assert lemma.grammar == ("plural", "singular")


class TestEmptyContainers:

    def test_page_without_dictionaries_has_no_lemmas(self):
        assert extract_lemmas("<html><body><p>nothing here</p></body></html>") == []

    def test_missing_optional_parts_are_empty(self):
        lemma, = extract_lemmas(entry_page(pos_entry("word", dsense(def_block("meaning")))))
        assert lemma.part_of_speech == ()
        assert lemma.grammar == ()
        assert lemma.transcriptions == ()
        assert lemma.examples == ()
        assert lemma.guide_word == ""


class TestParseErrors:

    def test_unknown_dictionary_id(self):
        page = HELLO_ENTRY.replace('data-id="cald4"', 'data-id="xyz1"')
        with pytest.raises(ParseError) as excinfo:
            extract_lemmas(page)
        assert excinfo.value.kind is ParseErrorKind.UNKNOWN_DICTIONARY_ID
        assert "xyz1" in str(excinfo.value)

    def test_unknown_dictionary_id_fails_whole_page(self):
        page = GIVE_UP_ENTRY.replace('data-id="cbed"', 'data-id="oald"')
        with pytest.raises(ParseError) as excinfo:
            extract_lemmas(page)
        assert excinfo.value.kind is ParseErrorKind.UNKNOWN_DICTIONARY_ID

    def test_missing_headword(self):
        page = HELLO_ENTRY.replace('<span class="headword hw dhw">hello</span>', "")
        with pytest.raises(ParseError) as excinfo:
            extract_lemmas(page)
        assert excinfo.value.kind is ParseErrorKind.MISSING_HEADWORD

    def test_missing_pv_block_title(self):
        page = GIVE_UP_ENTRY.replace('<h2 class="headword">give up</h2>', "")
        with pytest.raises(ParseError) as excinfo:
            extract_lemmas(page)
        assert excinfo.value.kind is ParseErrorKind.MISSING_HEADWORD

    def test_missing_idiom_title(self):
        page = GIVE_UP_ENTRY.replace('<span class="headword">give up the ghost</span>', "")
        with pytest.raises(ParseError) as excinfo:
            extract_lemmas(page)
        assert excinfo.value.kind is ParseErrorKind.MISSING_HEADWORD

    def test_missing_definition(self):
        broken = '<div class="def-block ddef_block"><div class="ddef_h"></div></div>'
        page = entry_page(pos_entry("word", dsense(def_block("fine") + broken)))
        with pytest.raises(ParseError) as excinfo:
            extract_lemmas(page)
        assert excinfo.value.kind is ParseErrorKind.MISSING_DEFINITION

    def test_unknown_entry_shape(self):
        page = entry_page('<div class="idiom-block-preview"><div class="di-title">x</div></div>')
        with pytest.raises(ParseError) as excinfo:
            extract_lemmas(page)
        assert excinfo.value.kind is ParseErrorKind.UNKNOWN_ENTRY_SHAPE
        assert excinfo.value.detail == "idiom-block-preview"

    def test_unknown_sense_shape(self):
        soup = BeautifulSoup('<div class="sense-note">note</div>', "html.parser")
        with pytest.raises(ParseError) as excinfo:
            _parse_dsense_entry(Lemma(), soup.div)
        assert excinfo.value.kind is ParseErrorKind.UNKNOWN_SENSE_SHAPE
        assert excinfo.value.detail == "sense-note"


class TestHelpers:

    def test_clean_definition(self):
        assert clean_definition("a   \n  b:") == "a b"
        assert clean_definition("  \tto greet: ") == "to greet"

    def test_ipa_superscript(self):
        assert ipa_superscript("ə") == "ᵊ"
        assert ipa_superscript("r") == "ʳ"
        assert ipa_superscript("ˈ") == "ˈ"
