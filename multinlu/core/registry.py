"""
Locale Registry - active locales and their bound classifiers

Every registered locale owns exactly one classifier instance. Locales are
stored truncated to their language part ("en-US" -> "en").
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..providers.classifier.base import ClassifierProvider
from ..providers.language.base import LanguageGuesserProvider
from ..utils.text import get_truncated_locale

logger = logging.getLogger(__name__)

ClassifierFactory = Callable[[str], ClassifierProvider]

class LocaleRegistry:
    """
    Ordered set of locales, each bound to one classifier.
    """

    def __init__(self, classifier_factory: ClassifierFactory):
        self._classifier_factory = classifier_factory
        self.languages: List[str] = []
        self.classifiers: Dict[str, ClassifierProvider] = {}

    def add_locales(self, codes: Union[str, Iterable[str]]) -> List[str]:
        """
        Register locales, creating a classifier for each unseen one.

        Returns:
            The locales that were newly registered
        """
        if isinstance(codes, str):
            codes = [codes]

        added = []
        for code in codes:
            locale = get_truncated_locale(code)
            if not locale:
                continue
            if locale not in self.languages:
                self.languages.append(locale)
                added.append(locale)
            if locale not in self.classifiers:
                self.classifiers[locale] = self._classifier_factory(locale)
                logger.debug(f"Bound new classifier to locale '{locale}'")
        return added

    def resolve_locale(
        self,
        raw_locale: Optional[str],
        utterance: str,
        guesser: LanguageGuesserProvider
    ) -> Optional[str]:
        """
        Return the registered locale for raw_locale, or guess it.

        Never raises: None means no locale could be guessed.
        """
        locale = get_truncated_locale(raw_locale)
        if locale and locale in self.languages:
            return locale
        return self.guess(utterance, guesser)

    def guess(self, utterance: str, guesser: LanguageGuesserProvider) -> Optional[str]:
        guesses = guesser.guess(utterance, self.languages, 1)
        return guesses[0].alpha2 if guesses else None

    def spawn(self) -> "LocaleRegistry":
        """Empty registry building classifiers with the same factory"""
        return LocaleRegistry(self._classifier_factory)

    def get_classifier(self, locale: Optional[str]) -> Optional[ClassifierProvider]:
        return self.classifiers.get(get_truncated_locale(locale) or "")

    def __contains__(self, locale: object) -> bool:
        return isinstance(locale, str) and get_truncated_locale(locale) in self.languages

    def clear(self) -> None:
        self.languages = []
        self.classifiers = {}
