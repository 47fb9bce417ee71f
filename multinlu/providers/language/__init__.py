"""
Language Guesser Providers
"""

from .base import LanguageGuesserProvider, LanguageInfo
from .guesser import LanguageGuesser

__all__ = [
    'LanguageGuesserProvider',
    'LanguageInfo',
    'LanguageGuesser',
]
