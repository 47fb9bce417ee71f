"""
VADER Sentiment Analyzer

English utterances are scored with NLTK's VADER SentimentIntensityAnalyzer.
The compound polarity becomes the score, the positive minus negative share
becomes the comparative and the vote follows the usual +/-0.05 compound
thresholds. Other locales are delegated to the lexicon analyzer.

Requires: nltk>=3.8 (the vader_lexicon resource is downloaded on first use)
"""

import asyncio
import logging
import threading
from typing import Dict, Any, Optional

import nltk  # type: ignore
from nltk.sentiment import SentimentIntensityAnalyzer  # type: ignore

from .base import SentimentProvider
from .lexicon import LexiconSentimentAnalyzer
from ..base import ProviderStatus
from ...core.models import SentimentResult
from ...utils.text import tokenize

logger = logging.getLogger(__name__)

VADER_LOCALES = ("en",)
VADER_RESOURCE = "vader_lexicon"
COMPOUND_THRESHOLD = 0.05


def vote_for(compound: float) -> str:
    if compound >= COMPOUND_THRESHOLD:
        return "positive"
    if compound <= -COMPOUND_THRESHOLD:
        return "negative"
    return "neutral"


class VaderSentimentAnalyzer(SentimentProvider):
    """
    Sentiment analyzer backed by NLTK VADER for English.

    The analyzer is built lazily in a worker thread because loading the
    VADER lexicon reads (and may first download) an NLTK data package.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        analyzer: Optional[Any] = None,
        lexicon_analyzer: Optional[SentimentProvider] = None
    ):
        """
        Args:
            config: Provider configuration
            analyzer: Prebuilt object with polarity_scores(text)
            lexicon_analyzer: Provider for the non-English locales
        """
        super().__init__(config)
        self._analyzer = analyzer
        self._analyzer_lock = threading.Lock()
        self.lexicon_analyzer = lexicon_analyzer or LexiconSentimentAnalyzer(config)
        if analyzer is not None:
            self._set_status(ProviderStatus.AVAILABLE)

    def get_provider_name(self) -> str:
        return "vader_sentiment"

    def _get_analyzer(self) -> Any:
        with self._analyzer_lock:
            if self._analyzer is not None:
                return self._analyzer

            self._set_status(ProviderStatus.INITIALIZING)
            try:
                analyzer = SentimentIntensityAnalyzer()
            except LookupError:
                logger.info(f"NLTK resource '{VADER_RESOURCE}' not found, downloading it")
                nltk.download(VADER_RESOURCE, quiet=True)
                try:
                    analyzer = SentimentIntensityAnalyzer()
                except LookupError:
                    self._set_status(ProviderStatus.ERROR, f"NLTK resource '{VADER_RESOURCE}' unavailable")
                    raise

            self._analyzer = analyzer
            self._set_status(ProviderStatus.AVAILABLE)
            return analyzer

    def _score(self, utterance: str) -> Dict[str, float]:
        return self._get_analyzer().polarity_scores(utterance)

    async def process(self, locale: Optional[str], utterance: str) -> SentimentResult:
        if locale not in VADER_LOCALES:
            return await self.lexicon_analyzer.process(locale, utterance)

        scores = await asyncio.to_thread(self._score, utterance)
        tokens = tokenize(utterance)
        lexicon = getattr(self._analyzer, "lexicon", {})
        compound = scores.get("compound", 0.0)

        return SentimentResult(
            score=compound,
            comparative=scores.get("pos", 0.0) - scores.get("neg", 0.0),
            vote=vote_for(compound),
            num_words=len(tokens),
            num_hits=sum(1 for token in tokens if token in lexicon),
            type="vader",
            language=locale,
        )
