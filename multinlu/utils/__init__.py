"""
multinlu utilities

- Logging configuration
- Locale and text normalization
"""

from .logging import setup_logging, get_logger
from .text import get_truncated_locale, normalize_text, tokenize

__all__ = [
    'setup_logging',
    'get_logger',
    'get_truncated_locale',
    'normalize_text',
    'tokenize',
]
