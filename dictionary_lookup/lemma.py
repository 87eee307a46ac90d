#!/usr/bin/env python3
"""
Lemma data model
One dictionary sense as extracted from an entry page
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Tuple, Union

# data-id attribute of a div.dictionary block -> language of that dictionary
DATA_ID_TO_LANGUAGE = {
    'unknown': 'unknown',
    'cald4': 'british',
    'cacd': 'american-english',
    'cbed': 'business-english',
}

LANGUAGES = frozenset(DATA_ID_TO_LANGUAGE.values())

# (region, IPA strings) pairs in document order
Transcriptions = Tuple[Tuple[str, Tuple[str, ...]], ...]


@dataclass(frozen=True)
class Lemma:
    """A single dictionary sense.

    Instances are immutable snapshots: the extraction walk derives a new
    snapshot for every subtree with ``dataclasses.replace`` instead of
    mutating a shared record. Transcriptions are stored as a tuple of
    (region, IPA strings) pairs so every field is immutable and hashable;
    a mapping given to the constructor is converted.
    """
    headword: str = ''
    part_of_speech: Tuple[str, ...] = ()
    language: str = ''
    transcriptions: Transcriptions = ()
    definition: str = ''
    guide_word: str = ''
    alternative: str = ''
    grammar: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'transcriptions', _freeze_transcriptions(self.transcriptions))

    def transcription_map(self) -> Dict[str, Tuple[str, ...]]:
        """Fresh region -> IPA strings dictionary"""
        return dict(self.transcriptions)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        data = asdict(self)
        data['part_of_speech'] = list(self.part_of_speech)
        data['transcriptions'] = {
            region: list(ipas) for region, ipas in self.transcriptions
        }
        data['grammar'] = list(self.grammar)
        data['examples'] = list(self.examples)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Lemma':
        return cls(
            headword=data.get('headword', ''),
            part_of_speech=tuple(data.get('part_of_speech') or ()),
            language=data.get('language', ''),
            transcriptions={
                region: tuple(ipas)
                for region, ipas in (data.get('transcriptions') or {}).items()
            },
            definition=data.get('definition', ''),
            guide_word=data.get('guide_word', ''),
            alternative=data.get('alternative', ''),
            grammar=tuple(data.get('grammar') or ()),
            examples=tuple(data.get('examples') or ()),
        )


def _freeze_transcriptions(
    transcriptions: Union[Mapping[str, Any], Transcriptions, None],
) -> Transcriptions:
    if not transcriptions:
        return ()
    pairs = transcriptions.items() if isinstance(transcriptions, Mapping) else transcriptions
    return tuple((region, tuple(ipas)) for region, ipas in pairs)
