"""
Sentiment Provider Base Classes
"""

from abc import abstractmethod
from typing import Optional

from ..base import ProviderBase
from ...core.models import SentimentResult


class SentimentProvider(ProviderBase):
    """
    Abstract base class for per-locale sentiment scoring.
    """

    @abstractmethod
    async def process(self, locale: Optional[str], utterance: str) -> SentimentResult:
        """Score the sentiment of an utterance in the given locale"""
        pass
