#!/usr/bin/env python3
"""
FastAPI Dictionary Lookup Service
JSON API over the querier: resolve search terms and fetch dictionary entries
"""

import logging
from contextlib import asynccontextmanager
from enum import IntEnum
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from dictionary_lookup import __version__
from dictionary_lookup.config import ServerConfig, load_config
from dictionary_lookup.factory import create_querier
from dictionary_lookup.querier import Querier, Resolved

logger = logging.getLogger(__name__)


class ResponseStatus(IntEnum):
    OK = 0
    SUGGESTIONS = 1
    BAD_REQUEST = 2
    ERROR = 3


def bad_request() -> JSONResponse:
    return JSONResponse({"status": ResponseStatus.BAD_REQUEST}, status_code=400)


def internal_error() -> JSONResponse:
    return JSONResponse({"status": ResponseStatus.ERROR, "error": "internal error"}, status_code=500)


def get_querier(request: Request) -> Querier:
    return request.app.state.querier


def create_app(config: Optional[ServerConfig] = None, querier: Optional[Querier] = None) -> FastAPI:
    """Build the application; the querier is created on startup unless given"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if querier is not None:
            app.state.querier = querier
        else:
            server_config = config or load_config()
            app.state.querier = create_querier(server_config.lookup, server_config.cache)
        logger.info("Dictionary lookup service started")
        yield
        try:
            await app.state.querier.close()
        except Exception as e:
            logger.error(f"Querier shutdown error: {e}")
        logger.info("Dictionary lookup service stopped")

    app = FastAPI(title="Dictionary Lookup", description="Cambridge Dictionary lookup API", lifespan=lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client = request.client.host if request.client else "-"
        logger.info(
            f"request path={request.url.path} query={request.url.query} "
            f"client={client} method={request.method}"
        )
        return await call_next(request)

    @app.get("/")
    async def root():
        return {"name": "Dictionary Lookup", "version": __version__}

    @app.get("/query")
    async def search(request: Request, q: Optional[str] = Query(None, description="Search term")):
        """Resolve a search term to a lemma id, or list suggestions"""
        if not q or not q.strip():
            return bad_request()

        try:
            result = await get_querier(request).search(q)
        except Exception as e:
            logger.error(f"Querier search failed for '{q}': {e}")
            return internal_error()

        if isinstance(result, Resolved):
            return {"status": ResponseStatus.OK, "lemma_id": result.lemma_id}
        return {"status": ResponseStatus.SUGGESTIONS, "suggestions": list(result.candidates)}

    @app.get("/lemma")
    async def lemma(request: Request, lemma_id: Optional[str] = Query(None, alias="id", description="Lemma id")):
        """Fetch every sense of an entry"""
        if not lemma_id or not lemma_id.strip():
            return bad_request()

        try:
            lemmas = await get_querier(request).get_lemma(lemma_id)
        except Exception as e:
            logger.error(f"Querier lemma fetch failed for '{lemma_id}': {e}")
            return internal_error()

        return {"status": ResponseStatus.OK, "lemmas": [item.to_dict() for item in lemmas]}

    return app


def run_server(config: Optional[ServerConfig] = None):
    import uvicorn

    config = config or load_config()
    logger.info(f"Listening on http://{config.host}:{config.port}")
    uvicorn.run(create_app(config), host=config.host, port=config.port)


app = create_app()

if __name__ == "__main__":
    from dictionary_lookup.logging_setup import setup_logging

    setup_logging()
    run_server()
