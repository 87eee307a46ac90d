#!/usr/bin/env python3
"""
Main CLI Entry Point
Search the dictionary, fetch entries, parse saved pages or run the API server
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

import requests

from dictionary_lookup.config import CacheConfig, ServerConfig, load_config
from dictionary_lookup.errors import DictionaryLookupError
from dictionary_lookup.factory import create_querier
from dictionary_lookup.lemma import Lemma
from dictionary_lookup.lemma_parser import extract_lemmas
from dictionary_lookup.logging_setup import setup_logging
from dictionary_lookup.querier import Resolved

logger = logging.getLogger(__name__)

EXIT_BAD_ARGS = 1
EXIT_INTERNAL_ERROR = 2

ENTRY_URL = 'https://dictionary.cambridge.org/dictionary/english/{word}'


def print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def lemmas_to_json(lemmas: List[Lemma]) -> list:
    return [lemma.to_dict() for lemma in lemmas]


async def run_search(config: ServerConfig, query: str) -> dict:
    querier = create_querier(config.lookup, config.cache)
    try:
        result = await querier.search(query)
    finally:
        await querier.close()
    if isinstance(result, Resolved):
        return {'lemma_id': result.lemma_id}
    return {'suggestions': list(result.candidates)}


async def run_lemma(config: ServerConfig, lemma_id: str) -> list:
    querier = create_querier(config.lookup, config.cache)
    try:
        return lemmas_to_json(await querier.get_lemma(lemma_id))
    finally:
        await querier.close()


async def run_lookup(config: ServerConfig, query: str) -> dict:
    """Search and, when the query resolves, fetch the entry"""
    querier = create_querier(config.lookup, config.cache)
    try:
        result = await querier.search(query)
        if not isinstance(result, Resolved):
            return {'suggestions': list(result.candidates)}
        lemmas = await querier.get_lemma(result.lemma_id)
        return {'lemma_id': result.lemma_id, 'lemmas': lemmas_to_json(lemmas)}
    finally:
        await querier.close()


def download_entry_page(word: str, user_agent: str, timeout: float) -> bytes:
    response = requests.get(
        ENTRY_URL.format(word=quote(word, safe="")),
        headers={'User-Agent': user_agent},
        timeout=timeout,
    )
    response.raise_for_status()
    return response.content


def parse_page(args, config: ServerConfig) -> list:
    if args.word:
        page = download_entry_page(
            args.word,
            config.lookup.extra_headers.get('User-Agent', ''),
            config.lookup.timeout,
        )
        if args.save:
            Path(args.save).write_bytes(page)
            logger.info(f"Saved entry page to {args.save}")
    else:
        page = Path(args.file).read_bytes()
    # Entry pages are served as UTF-8
    return lemmas_to_json(extract_lemmas(page.decode('utf-8', errors='replace')))


class CLIArgumentParser(argparse.ArgumentParser):
    """Reports usage errors with the bad-arguments exit code"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_BAD_ARGS, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = CLIArgumentParser(description='Cambridge Dictionary lookup CLI')
    parser.add_argument('-c', '--config', help='Path to a JSON config file')
    parser.add_argument('--log-level', default=None, help='Logging level (default: INFO)')
    parser.add_argument('--cache-path', default=None, help='SQLite file used to cache lookups')

    commands = parser.add_subparsers(dest='command', required=True)

    search = commands.add_parser('search', help='Resolve a search term to a lemma id or suggestions')
    search.add_argument('query')

    lemma = commands.add_parser('lemma', help='Fetch every sense of a lemma id')
    lemma.add_argument('lemma_id')

    lookup = commands.add_parser('lookup', help='Search and fetch the entry when the term resolves')
    lookup.add_argument('query')

    parse = commands.add_parser('parse', help='Parse an entry page from disk or from the web')
    source = parse.add_mutually_exclusive_group(required=True)
    source.add_argument('-f', '--file', help='Local HTML file to parse')
    source.add_argument('-w', '--word', help='Word whose entry page is downloaded and parsed')
    parse.add_argument('-s', '--save', help='Save the downloaded page to this path')

    serve = commands.add_parser('serve', help='Run the JSON API server')
    serve.add_argument('--host', default=None)
    serve.add_argument('--port', type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_level)
        config = load_config(args.config)
    except ValueError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_BAD_ARGS

    if args.cache_path:
        config.cache = CacheConfig(path=args.cache_path)
    if args.command == 'parse' and args.save and not args.word:
        print("[ERROR] --save can only be used with --word", file=sys.stderr)
        return EXIT_BAD_ARGS

    try:
        if args.command == 'search':
            print_json(asyncio.run(run_search(config, args.query)))
        elif args.command == 'lemma':
            print_json(asyncio.run(run_lemma(config, args.lemma_id)))
        elif args.command == 'lookup':
            print_json(asyncio.run(run_lookup(config, args.query)))
        elif args.command == 'parse':
            print_json(parse_page(args, config))
        elif args.command == 'serve':
            from web_apps.lookup_web_app import run_server

            if args.host:
                config.host = args.host
            if args.port:
                config.port = args.port
            run_server(config)
    except (DictionaryLookupError, requests.RequestException) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    except OSError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_BAD_ARGS

    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
