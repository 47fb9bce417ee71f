"""
Sentiment Providers
"""

from .base import SentimentProvider
from .lexicon import LexiconSentimentAnalyzer
from .vader import VaderSentimentAnalyzer

__all__ = [
    'SentimentProvider',
    'LexiconSentimentAnalyzer',
    'VaderSentimentAnalyzer',
]
