"""
Lexicon Sentiment Analyzer

AFINN-style scoring for the locales VADER does not cover: every word
found in the locale lexicon adds its valence (-5..5) to the utterance
score. A preceding negation word flips the valence of the next hit.
"""

import logging
from typing import Dict, Any, List, Optional

from .base import SentimentProvider
from ...core.models import SentimentResult
from ...utils.text import tokenize

logger = logging.getLogger(__name__)

LEXICONS: Dict[str, Dict[str, int]] = {
    "es": {
        "bueno": 3, "buena": 3, "genial": 3, "excelente": 3, "increible": 4, "encanta": 3,
        "gusta": 2, "feliz": 3, "bonito": 3, "maravilloso": 4, "fantastico": 4, "mejor": 3,
        "gracias": 2, "contento": 3, "divertido": 3, "perfecto": 3, "amor": 3,
        "malo": -3, "mala": -3, "terrible": -3, "horrible": -3, "odio": -3, "triste": -2,
        "enfadado": -3, "peor": -3, "pobre": -2, "aburrido": -3, "molesto": -2,
        "problema": -2, "roto": -1, "decepcionado": -2, "feo": -3, "lento": -2,
        "error": -2, "fallo": -2,
    },
}

NEGATIONS: Dict[str, List[str]] = {
    "es": ["no", "nunca", "jamas", "nada", "tampoco"],
}


class LexiconSentimentAnalyzer(SentimentProvider):
    """Sentiment analyzer backed by in-memory valence lexicons."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.lexicons: Dict[str, Dict[str, int]] = {
            locale: dict(words) for locale, words in LEXICONS.items()
        }
        self.negations: Dict[str, List[str]] = {
            locale: list(words) for locale, words in NEGATIONS.items()
        }

    def get_provider_name(self) -> str:
        return "lexicon_sentiment"

    def add_words(self, locale: str, words: Dict[str, int]) -> None:
        """Extend or override a locale lexicon"""
        self.lexicons.setdefault(locale, {}).update(words)

    async def process(self, locale: Optional[str], utterance: str) -> SentimentResult:
        tokens = tokenize(utterance)
        lexicon = self.lexicons.get(locale or "")
        if lexicon is None:
            logger.debug(f"No sentiment lexicon for locale {locale}")
            return SentimentResult(
                score=0, comparative=0, vote="neutral",
                num_words=len(tokens), num_hits=0, type="none", language=locale,
            )

        negations = set(self.negations.get(locale, []))
        score = 0
        hits = 0
        negate = False
        for token in tokens:
            if token in negations:
                negate = True
                continue
            valence = lexicon.get(token)
            if valence is None:
                continue
            score += -valence if negate else valence
            hits += 1
            negate = False

        comparative = score / len(tokens) if tokens else 0
        if score > 0:
            vote = "positive"
        elif score < 0:
            vote = "negative"
        else:
            vote = "neutral"

        return SentimentResult(
            score=score, comparative=comparative, vote=vote,
            num_words=len(tokens), num_hits=hits, type="afinn", language=locale,
        )
