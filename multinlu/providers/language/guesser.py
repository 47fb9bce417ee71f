"""
Language Guesser

Lightweight language identification combining two signals per language:
- stopword hits (weight 2)
- hits of characteristic word-boundary trigrams
Ties keep the order of the candidate list.
"""

import logging
from typing import Dict, Any, Iterable, List, Optional, Set

from .base import LanguageGuesserProvider, LanguageInfo
from ...core.models import LanguageGuess
from ...utils.text import tokenize

logger = logging.getLogger(__name__)


LANGUAGES: Dict[str, LanguageInfo] = {
    "en": LanguageInfo("en", "eng", "English"),
    "es": LanguageInfo("es", "spa", "Spanish"),
    "fr": LanguageInfo("fr", "fra", "French"),
    "de": LanguageInfo("de", "deu", "German"),
    "it": LanguageInfo("it", "ita", "Italian"),
    "pt": LanguageInfo("pt", "por", "Portuguese"),
    "ca": LanguageInfo("ca", "cat", "Catalan"),
    "nl": LanguageInfo("nl", "nld", "Dutch"),
}

STOPWORDS: Dict[str, Set[str]] = {
    "en": {"the", "a", "an", "and", "is", "are", "to", "of", "in", "on", "for", "you", "i", "me",
           "my", "what", "how", "with", "it", "this", "that", "please", "can", "do", "who", "your"},
    "es": {"el", "la", "los", "las", "un", "una", "y", "es", "de", "en", "que", "por", "para",
           "con", "yo", "mi", "tu", "como", "quiero", "favor", "se", "del", "al", "a"},
    "fr": {"le", "la", "les", "un", "une", "et", "est", "de", "des", "du", "en", "que", "pour",
           "avec", "je", "tu", "vous", "mon", "ma", "comment", "quoi", "ne", "pas", "au"},
    "de": {"der", "die", "das", "ein", "eine", "und", "ist", "zu", "von", "mit", "ich", "du",
           "sie", "wie", "was", "nicht", "bitte", "mein", "den", "dem", "auf", "fur"},
    "it": {"il", "lo", "la", "gli", "le", "un", "una", "e", "di", "che", "per", "con", "io",
           "tu", "mio", "come", "cosa", "non", "sono", "del", "della", "al"},
    "pt": {"o", "os", "as", "um", "uma", "e", "de", "do", "da", "em", "que", "para", "com",
           "eu", "voce", "meu", "minha", "como", "nao", "por", "favor", "no", "na"},
    "ca": {"el", "els", "les", "un", "una", "i", "es", "de", "que", "per", "amb", "jo", "meu",
           "com", "vull", "si", "plau", "del", "al", "aixo"},
    "nl": {"de", "het", "een", "en", "is", "van", "in", "op", "voor", "met", "ik", "jij", "je",
           "mijn", "hoe", "wat", "niet", "alsjeblieft", "dat", "zijn"},
}

TRIGRAMS: Dict[str, Set[str]] = {
    "en": {" th", "the", "he ", "ing", "ng ", "and", "nd ", "ion", "tio", "ed ", "er ", " wh",
           "wha", "hat", "igh", "ght", "ht ", "ook", " yo", "you", "ou ", "ly ", "all",
           " an", "ent", "ee "},
    "es": {" de", "de ", "os ", "as ", "ar ", "ara", "el ", " el", "la ", " la", "que", "ue ",
           "ion", "cio", "ent", "con", "ado", "ada", "er ", "ien", "nte", " es", "esa", "ero"},
    "fr": {" de", "de ", "es ", "le ", " le", "ent", "ion", "que", "ue ", "ous", "our", "eau",
           "ais", "ait", " qu", "re ", "ell", "tte", "ez ", "eur", " je"},
    "de": {"ch ", "sch", "ich", "cht", "en ", "er ", "ein", "der", "die", "und", " un", "nd ",
           "ung", "gen", "ie ", "st ", "aus", " zu"},
    "it": {" di", "di ", "che", "he ", "la ", " la", "zio", "ion", "one", "re ", "are", "ere",
           "ire", "gli", "lla", "per", "to ", "ta ", "no ", "cos", "tto"},
    "pt": {" de", "de ", "os ", "as ", "ao ", "cao", "oes", "que", "ue ", "com",
           "ar ", "do ", "da ", "em ", "ent", "eu ", "ado", "ada"},
    "ca": {" de", "de ", "es ", "els", "ls ", "que", "ue ", "ent", "ar ", "aix",
           "amb", "per", "io ", "tat", "at "},
    "nl": {" de", "de ", "en ", "het", "et ", "sch", "cht", "ijk",
           "van", "an ", "eid", "ng "},
}


def _trigrams(token: str) -> List[str]:
    padded = f" {token} "
    return [padded[i:i + 3] for i in range(len(padded) - 2)]


class LanguageGuesser(LanguageGuesserProvider):
    """Stopword and trigram based language identification."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._languages = dict(LANGUAGES)

    def get_provider_name(self) -> str:
        return "stopword_trigram_guesser"

    @property
    def languages_alpha2(self) -> Dict[str, LanguageInfo]:
        return self._languages

    def guess(
        self,
        utterance: str,
        candidates: Optional[Iterable[str]] = None,
        limit: Optional[int] = None
    ) -> List[LanguageGuess]:
        tokens = tokenize(utterance or "")
        if not tokens:
            return []

        codes = list(candidates) if candidates is not None else list(self._languages)
        grams = [gram for token in tokens for gram in _trigrams(token)]

        guesses = []
        for code in codes:
            info = self._languages.get(code)
            if info is None:
                continue
            stopwords = STOPWORDS.get(code, set())
            profile = TRIGRAMS.get(code, set())
            stop_hits = sum(1 for token in tokens if token in stopwords)
            gram_hits = sum(1 for gram in grams if gram in profile)
            score = (2 * stop_hits + gram_hits) / (2 * len(tokens) + len(grams))
            if score > 0:
                guesses.append(LanguageGuess(info.alpha2, info.alpha3, info.name, score))

        guesses.sort(key=lambda g: g.score, reverse=True)
        if limit is not None:
            guesses = guesses[:limit]
        logger.debug(f"Language guesses for '{utterance}': {[(g.alpha2, round(g.score, 3)) for g in guesses]}")
        return guesses
