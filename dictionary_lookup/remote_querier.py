#!/usr/bin/env python3
"""
Remote Cambridge Dictionary Querier
Resolves search terms through the site's redirect protocol and fetches entries

A search request is always answered with a 302 redirect and the redirect
target is the answer:

    /dictionary/english/<id>     -> the query resolved to an entry
    /spellcheck/english/?q=...   -> no match, the target lists suggestions

Redirects are therefore never followed automatically.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import quote

import aiohttp
from multidict import CIMultiDictProxy
from yarl import URL

from .config import LookupConfig
from .errors import ParseError, ProtocolError, ProtocolErrorKind, TransportError
from .lemma import Lemma
from .page_parser import HTMLPageParser, PageParser
from .querier import Resolved, SearchResult, Suggestions
from .worker_pool import ExtractionPool

logger = logging.getLogger(__name__)

LEMMA_PATH = '/dictionary/english/'
SUGGESTION_PATH = '/spellcheck/english/'
SEARCH_PATH = '/search/english/direct/'
SEARCH_DATASET = 'english'

HTTP_OK = 200
HTTP_FOUND = 302


@dataclass
class Page:
    """A response that passed the status check"""
    url: URL
    status: int
    headers: CIMultiDictProxy
    text: str


class RemoteQuerier:
    """Queries the dictionary website directly.

    Usable as an async context manager; parsing runs on a bounded pool shared
    by every request made through this querier.
    """

    def __init__(
        self,
        config: Optional[LookupConfig] = None,
        parser: Optional[PageParser] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or LookupConfig()
        self.parser = parser or HTMLPageParser()
        self.pool = ExtractionPool(self.config.max_workers)
        self.session = session
        self._owns_session = session is None
        self._closed = False

    async def __aenter__(self):
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def search(self, query: str) -> SearchResult:
        """Resolve a query to a lemma id or to a list of suggestions"""
        logger.info(f"Searching for '{query}'")
        redirect = await self._get_search_redirect(self.search_url(query))
        path = redirect.path

        if path.startswith(LEMMA_PATH):
            lemma_id = path[len(LEMMA_PATH):].strip('/')
            if not lemma_id:
                logger.warning(f"Search for '{query}' redirected to an empty lemma id")
                raise ProtocolError(ProtocolErrorKind.EMPTY_LEMMA_ID, str(redirect))
            lemma_id = lemma_id.rsplit('/', 1)[-1]
            logger.info(f"Query '{query}' resolved to lemma '{lemma_id}'")
            return Resolved(lemma_id)

        if path.startswith(SUGGESTION_PATH):
            suggestions = await self._get_suggestions(redirect)
            logger.info(f"Query '{query}' has {len(suggestions)} suggestions")
            return Suggestions(tuple(suggestions))

        logger.warning(f"Search for '{query}' redirected to unknown location {redirect}")
        raise ProtocolError(ProtocolErrorKind.UNKNOWN_REDIRECT, str(redirect))

    async def get_lemma(self, lemma_id: str) -> List[Lemma]:
        """Fetch an entry page and extract its lemmas"""
        logger.info(f"Fetching lemma '{lemma_id}'")
        page = await self._get(self.lemma_url(lemma_id), HTTP_OK)
        # Parsing is the expensive part, so it runs on the pool
        lemmas = await self.pool.submit_wait(self.parser.parse_lemmas, page.text)
        logger.info(f"Lemma '{lemma_id}' has {len(lemmas)} senses")
        return lemmas

    async def close(self):
        """Drain the parsing pool and release idle connections"""
        if self._closed:
            return
        self._closed = True

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.pool.shutdown)
        if self.session is not None and self._owns_session:
            await self.session.close()
        logger.debug("Remote querier closed")

    def search_url(self, query: str) -> URL:
        return URL.build(
            scheme=self.config.protocol,
            authority=self.config.host,
            path=SEARCH_PATH,
            query={'q': query, 'datasetsearch': SEARCH_DATASET},
        )

    def lemma_url(self, lemma_id: str) -> URL:
        return URL.build(
            scheme=self.config.protocol,
            authority=self.config.host,
            path=LEMMA_PATH + quote(lemma_id, safe=''),
            encoded=True,
        )

    async def _get_search_redirect(self, url: URL) -> URL:
        page = await self._get(url, HTTP_FOUND, read_body=False)
        location = page.headers.get('Location')
        if not location:
            raise ProtocolError(ProtocolErrorKind.UNKNOWN_REDIRECT, f"redirect from {url} has no Location header")
        return page.url.join(URL(location))

    async def _get_suggestions(self, url: URL) -> List[str]:
        page = await self._get(url, HTTP_OK)
        try:
            return await self.pool.submit_wait(self.parser.parse_suggestions, page.text)
        except ParseError as e:
            raise ProtocolError(ProtocolErrorKind.NO_SUGGESTIONS, f"{url}: {e}") from e

    async def _get(self, url: URL, expected_status: int, read_body: bool = True) -> Page:
        session = self._get_session()
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        try:
            async with session.get(
                url,
                headers=self.config.extra_headers,
                allow_redirects=False,
                timeout=timeout,
            ) as response:
                logger.debug(f"GET {url} -> {response.status}")
                if response.status != expected_status:
                    raise ProtocolError(
                        ProtocolErrorKind.UNEXPECTED_STATUS,
                        f"expected {expected_status}, got {response.status} from {url}",
                        status=response.status,
                    )
                text = await response.text(errors='replace') if read_body else ''
                return Page(url=response.url, status=response.status, headers=response.headers, text=text)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"request to {url} failed: {e!r}") from e

    def _get_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise RuntimeError("remote querier is closed")
        if self.session is None:
            self.session = aiohttp.ClientSession()
        return self.session
