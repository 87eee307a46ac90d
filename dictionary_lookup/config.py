#!/usr/bin/env python3
"""
Configuration Management for the Dictionary Lookup Client
Supports a JSON config file with environment variable overrides
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_HOST = 'dictionary.cambridge.org'
DEFAULT_PROTOCOL = 'https'
DEFAULT_TIMEOUT = 30.0

# The dictionary rejects bot-like agents on some endpoints
DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

DEFAULT_CONFIG_FILE = Path(__file__).parent / 'config.json'

ENV_PREFIX = 'CAMDICT_'


def _default_headers() -> Dict[str, str]:
    return {'User-Agent': DEFAULT_USER_AGENT}


@dataclass
class LookupConfig:
    """Settings of the remote querier"""
    extra_headers: Dict[str, str] = field(default_factory=_default_headers)
    timeout: float = DEFAULT_TIMEOUT
    host: str = DEFAULT_HOST
    protocol: str = DEFAULT_PROTOCOL
    # Zero or None means one worker per logical CPU
    max_workers: Optional[int] = None

    def __post_init__(self):
        """Validate configuration after initialization"""
        if not self.host:
            raise ValueError("Remote host is required")
        if self.protocol not in ('http', 'https'):
            raise ValueError(f"Remote protocol must be http or https, got: {self.protocol}")
        if self.timeout <= 0:
            raise ValueError("Request timeout must be positive")
        if self.max_workers is not None and self.max_workers < 0:
            raise ValueError("Worker count cannot be negative")


@dataclass
class CacheConfig:
    """Settings of the lookup cache"""
    path: Optional[str] = None
    in_memory: bool = False

    @property
    def enabled(self) -> bool:
        return bool(self.path) or self.in_memory

    @property
    def database(self) -> str:
        return ':memory:' if self.in_memory else str(self.path)


@dataclass
class ServerConfig:
    """Settings of the HTTP front-end"""
    host: str = 'localhost'
    port: int = 8080
    lookup: LookupConfig = field(default_factory=LookupConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    def __post_init__(self):
        if not (1 <= self.port <= 65535):
            raise ValueError("Server port must be between 1 and 65535")


def load_config(config_file: Optional[str] = None) -> ServerConfig:
    """
    Build the configuration from multiple sources in priority order:
    1. Environment variables (CAMDICT_*)
    2. JSON configuration file
    3. Defaults
    """
    file_data = _load_file(Path(config_file) if config_file else DEFAULT_CONFIG_FILE,
                           required=config_file is not None)

    remote = dict(file_data.get('remote', {}))
    cache = dict(file_data.get('cache', {}))
    server = dict(file_data.get('server', {}))

    if os.getenv(f'{ENV_PREFIX}REMOTE_HOST'):
        remote['host'] = os.getenv(f'{ENV_PREFIX}REMOTE_HOST')
    if os.getenv(f'{ENV_PREFIX}REMOTE_PROTOCOL'):
        remote['protocol'] = os.getenv(f'{ENV_PREFIX}REMOTE_PROTOCOL')
    if os.getenv(f'{ENV_PREFIX}TIMEOUT'):
        remote['timeout'] = _parse_number(f'{ENV_PREFIX}TIMEOUT', float)
    if os.getenv(f'{ENV_PREFIX}MAX_WORKERS'):
        remote['max_workers'] = _parse_number(f'{ENV_PREFIX}MAX_WORKERS', int)

    headers = dict(remote.pop('extra_headers', None) or _default_headers())
    if os.getenv(f'{ENV_PREFIX}USER_AGENT'):
        headers['User-Agent'] = os.getenv(f'{ENV_PREFIX}USER_AGENT')

    if os.getenv(f'{ENV_PREFIX}CACHE_PATH'):
        cache['path'] = os.getenv(f'{ENV_PREFIX}CACHE_PATH')
    if os.getenv(f'{ENV_PREFIX}CACHE_INMEMORY'):
        cache['in_memory'] = os.getenv(f'{ENV_PREFIX}CACHE_INMEMORY').lower() in ('1', 'true', 'yes')

    if os.getenv(f'{ENV_PREFIX}HOST'):
        server['host'] = os.getenv(f'{ENV_PREFIX}HOST')
    if os.getenv(f'{ENV_PREFIX}PORT'):
        server['port'] = _parse_number(f'{ENV_PREFIX}PORT', int)

    try:
        return ServerConfig(
            lookup=LookupConfig(extra_headers=headers, **remote),
            cache=CacheConfig(**cache),
            **server,
        )
    except TypeError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def _load_file(path: Path, required: bool) -> Dict[str, Any]:
    if not path.exists():
        if required:
            raise ValueError(f"Config file does not exist: {path}")
        return {}

    logger.info(f"Loading config from {path}")
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Config file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return data


def _parse_number(name: str, kind):
    value = os.getenv(name)
    try:
        return kind(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} is not a valid {kind.__name__}: {value}")
