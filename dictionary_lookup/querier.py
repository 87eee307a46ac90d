#!/usr/bin/env python3
"""
Querier interface and search outcomes
"""

from dataclasses import dataclass
from typing import List, Protocol, Tuple, Union

from .lemma import Lemma


@dataclass(frozen=True)
class Resolved:
    """The query matched an entry"""
    lemma_id: str


@dataclass(frozen=True)
class Suggestions:
    """No exact match; headwords the dictionary thinks were meant"""
    candidates: Tuple[str, ...]


SearchResult = Union[Resolved, Suggestions]


class Querier(Protocol):
    """Capability set shared by the remote and the cached queriers"""

    async def search(self, query: str) -> SearchResult:
        ...

    async def get_lemma(self, lemma_id: str) -> List[Lemma]:
        ...

    async def close(self) -> None:
        ...
