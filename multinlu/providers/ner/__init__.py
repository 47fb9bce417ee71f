"""
NER Providers

Named entity recognition and entity-aware utterance rewriting.
"""

from .base import EntityExtractorProvider
from .entities import NamedEntity, EnumNamedEntity, RegexNamedEntity, TrimNamedEntity
from .manager import NerManager

__all__ = [
    'EntityExtractorProvider',
    'NamedEntity',
    'EnumNamedEntity',
    'RegexNamedEntity',
    'TrimNamedEntity',
    'NerManager',
]
