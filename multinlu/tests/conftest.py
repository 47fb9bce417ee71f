"""
Shared fixtures and stub providers for the multinlu tests.
"""

from typing import Dict, Iterable, List, Optional

import nltk
import pytest

from multinlu.config.models import NluSettings
from multinlu.core.manager import NluManager
from multinlu.core.models import Classification, LanguageGuess
from multinlu.providers.classifier.base import ClassifierProvider, ClassifierState
from multinlu.providers.language.base import LanguageGuesserProvider, LanguageInfo
from multinlu.providers.sentiment import vader


class StubClassifier(ClassifierProvider):
    """Classifier returning canned rankings per utterance"""

    def __init__(self, language: str, responses: Optional[Dict[str, List[Classification]]] = None,
                 should_fail: bool = False):
        super().__init__(language, {})
        self.responses = responses or {}
        self.should_fail = should_fail
        self.docs: List[Dict[str, str]] = []
        self.train_count = 0

    def get_provider_name(self) -> str:
        return "stub"

    def add(self, utterance: str, label: str) -> None:
        self.docs.append({"utterance": utterance, "intent": label})

    def remove(self, utterance: str, label: str) -> None:
        doc = {"utterance": utterance, "intent": label}
        if doc in self.docs:
            self.docs.remove(doc)

    async def train(self) -> None:
        self.train_count += 1
        if self.should_fail:
            raise RuntimeError(f"Stub classifier {self.language} failed")

    def classify(self, utterance: str) -> List[Classification]:
        return list(self.responses.get(utterance, []))

    def export_state(self) -> ClassifierState:
        return ClassifierState(language=self.language, docs=list(self.docs))

    def import_state(self, state: ClassifierState) -> None:
        self.docs = list(state.docs)


class StubGuesser(LanguageGuesserProvider):
    """Guesser always answering the same language, or nothing"""

    def __init__(self, alpha2: Optional[str] = None):
        super().__init__({})
        self.alpha2 = alpha2
        self.calls = 0

    def get_provider_name(self) -> str:
        return "stub_guesser"

    @property
    def languages_alpha2(self) -> Dict[str, LanguageInfo]:
        return {
            "en": LanguageInfo("en", "eng", "English"),
            "es": LanguageInfo("es", "spa", "Spanish"),
        }

    def guess(self, utterance: str, candidates: Optional[Iterable[str]] = None,
              limit: Optional[int] = None) -> List[LanguageGuess]:
        self.calls += 1
        if self.alpha2 is None:
            return []
        if candidates is not None and self.alpha2 not in list(candidates):
            return []
        return [LanguageGuess(self.alpha2, "xxx", self.alpha2, 1.0)]


def ranking(*pairs) -> List[Classification]:
    """Classification list from (label, value) pairs"""
    return [Classification(label, value) for label, value in pairs]


@pytest.fixture
def settings():
    """Settings independent of the environment"""
    return NluSettings.model_validate({"classifier": {"iterations": 300}})


@pytest.fixture
def manager(settings):
    """Manager with en and es registered and real providers"""
    nlu = NluManager(settings)
    nlu.add_language(["en", "es"])
    return nlu


@pytest.fixture
def stub_classifiers():
    """Classifier registry filled by stub_factory, keyed by locale"""
    return {}


@pytest.fixture
def stub_factory(stub_classifiers):
    def factory(locale: str) -> StubClassifier:
        classifier = StubClassifier(locale)
        stub_classifiers[locale] = classifier
        return classifier
    return factory


VADER_LEXICON_PATH = "sentiment/vader_lexicon.zip/vader_lexicon/vader_lexicon.txt"


def vader_lexicon_installed() -> bool:
    try:
        nltk.data.find(VADER_LEXICON_PATH)
    except LookupError:
        return False
    return True


class StubIntensityAnalyzer:
    """Word-list polarity scorer standing in for VADER without its data package"""

    lexicon = {
        "love": 3.2, "great": 3.1, "good": 1.9, "happy": 2.7,
        "bad": -2.5, "horrible": -2.5, "terrible": -2.1, "hate": -2.7,
    }

    def polarity_scores(self, text: str) -> Dict[str, float]:
        words = [word.strip(".,!?") for word in text.lower().split()]
        valence = sum(self.lexicon.get(word, 0.0) for word in words)
        if "not" in words:
            valence = -valence
        compound = max(-1.0, min(1.0, valence / 4))
        pos, neg = max(compound, 0.0), max(-compound, 0.0)
        return {"neg": neg, "neu": 1.0 - pos - neg, "pos": pos, "compound": compound}


@pytest.fixture(autouse=True)
def vader_analyzer(monkeypatch):
    """Keep English sentiment offline when the VADER lexicon is not installed"""
    if not vader_lexicon_installed():
        monkeypatch.setattr(vader, "SentimentIntensityAnalyzer", StubIntensityAnalyzer)
