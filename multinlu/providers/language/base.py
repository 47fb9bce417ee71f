"""
Language Guesser Provider Base Classes
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..base import ProviderBase
from ...core.models import LanguageGuess


@dataclass
class LanguageInfo:
    """Static description of a supported language."""

    alpha2: str
    alpha3: str
    name: str


class LanguageGuesserProvider(ProviderBase):
    """
    Abstract base class for ranking candidate languages of a text.
    """

    @property
    @abstractmethod
    def languages_alpha2(self) -> Dict[str, LanguageInfo]:
        """Known languages keyed by ISO 639-1 code"""
        pass

    @abstractmethod
    def guess(
        self,
        utterance: str,
        candidates: Optional[Iterable[str]] = None,
        limit: Optional[int] = None
    ) -> List[LanguageGuess]:
        """Rank candidate languages for an utterance, best first

        Args:
            utterance: Text to analyze
            candidates: ISO 639-1 codes allowed in the answer (all known when None)
            limit: Maximum number of guesses returned

        Returns:
            Guesses with a positive score, best first
        """
        pass

    def get_language_name(self, alpha2: Optional[str]) -> Optional[str]:
        info = self.languages_alpha2.get(alpha2 or "")
        return info.name if info else None
