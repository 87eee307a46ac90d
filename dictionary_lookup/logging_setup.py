#!/usr/bin/env python3
"""
Logging configuration shared by the CLI and the web front-end
"""

import logging
import os
from typing import Optional

LOGGING = {
    'level': 'INFO',
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'file_handler': False,
    'console_handler': True,
}


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """Configure the root logger.

    The level comes from the argument, then CAMDICT_LOG_LEVEL, then LOGGING.
    A file handler is added when ``log_file`` is given.
    """
    level_name = (level or os.getenv('CAMDICT_LOG_LEVEL') or LOGGING['level']).upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level_name}")

    handlers = []
    if LOGGING['console_handler']:
        handlers.append(logging.StreamHandler())
    if log_file or LOGGING['file_handler']:
        handlers.append(logging.FileHandler(log_file or 'dictionary_lookup.log'))

    logging.basicConfig(
        level=numeric_level,
        format=LOGGING['format'],
        handlers=handlers,
        force=True,
    )
