"""
multinlu Providers - pluggable building blocks of the NLU pipeline

Package Structure:
- base.py: Common provider status handling and base class
- classifier/: Per-locale intent classifiers
- ner/: Named entity extraction
- sentiment/: Sentiment analysis
- language/: Language guessing
"""

from .base import ProviderBase, ProviderStatus

__all__ = ["ProviderBase", "ProviderStatus"]
