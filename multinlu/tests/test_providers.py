"""
Test capability providers

Logistic regression classifier, language guesser and sentiment analyzer.
"""

from unittest.mock import MagicMock

import pytest

from multinlu.core.models import Classification
from multinlu.providers.base import ProviderStatus
from multinlu.providers.classifier.logistic import LogisticRegressionClassifier
from multinlu.providers.language.guesser import LanguageGuesser
from multinlu.providers.sentiment import vader
from multinlu.providers.sentiment.lexicon import LexiconSentimentAnalyzer
from multinlu.providers.sentiment.vader import VaderSentimentAnalyzer, vote_for

from .conftest import vader_lexicon_installed


@pytest.fixture
def classifier():
    clf = LogisticRegressionClassifier("en", {"iterations": 300})
    clf.add("hello there", "greet")
    clf.add("good morning", "greet")
    clf.add("goodbye for now", "farewell")
    clf.add("see you later", "farewell")
    return clf


class TestLogisticRegressionClassifier:
    """Bag-of-words one-vs-rest classifier"""

    def test_no_labels_classifies_empty(self):
        assert LogisticRegressionClassifier("en").classify("hello") == []

    def test_untrained_scores_are_uniform(self, classifier):
        result = classifier.classify("hello")

        assert [c.value for c in result] == [0.5, 0.5]
        assert classifier.status == ProviderStatus.UNKNOWN

    def test_duplicate_documents_are_ignored(self, classifier):
        classifier.add("hello there", "greet")

        assert len(classifier.docs) == 4

    @pytest.mark.asyncio
    async def test_training_ranks_labels(self, classifier):
        await classifier.train()

        result = classifier.classify("good morning")

        assert classifier.status == ProviderStatus.AVAILABLE
        assert all(isinstance(c, Classification) for c in result)
        assert result[0].label == "greet"
        assert result[0].value > 0.5 > result[1].value

    @pytest.mark.asyncio
    async def test_unknown_words_score_one_half(self, classifier):
        await classifier.train()

        assert {c.value for c in classifier.classify("zebra")} == {0.5}

    @pytest.mark.asyncio
    async def test_single_label_trains(self):
        clf = LogisticRegressionClassifier("en", {"iterations": 300})
        clf.add("hello there", "greet")

        await clf.train()

        assert clf.classify("hello")[0].value > 0.5
        assert clf.classify("zebra")[0].value == 0.5
        assert all(weight > 0 for weight in clf.theta[0])

    @pytest.mark.asyncio
    async def test_entity_placeholder_is_its_own_feature(self):
        clf = LogisticRegressionClassifier("en", {"iterations": 300})
        clf.add("I want %food%", "order")
        clf.add("the food was cold", "complaint")

        await clf.train()

        assert "%food%" in clf.features
        assert "food" in clf.features
        assert clf.classify("I want %food%")[0].label == "order"
        assert clf.classify("the food")[0].label == "complaint"

    @pytest.mark.asyncio
    async def test_training_state(self, classifier):
        await classifier.train()
        state = classifier.export_state()

        assert state.labels == ["greet", "farewell"]
        assert state.features[:2] == ["hello", "there"]
        assert state.observation_count == 4
        assert state.classifications == ["greet", "greet", "farewell", "farewell"]
        assert state.observations["greet"][0][:3] == [1, 1, 0]
        assert len(state.theta) == 2 and len(state.theta[0]) == len(state.features)

    @pytest.mark.asyncio
    async def test_removed_document_is_forgotten(self, classifier):
        classifier.remove("see you later", "farewell")
        classifier.remove("not there", "farewell")
        await classifier.train()

        assert "later" not in classifier.features
        assert classifier.observation_count == 3

    @pytest.mark.asyncio
    async def test_import_state_restores_scores(self, classifier):
        await classifier.train()

        copy = LogisticRegressionClassifier("en")
        copy.import_state(classifier.export_state())

        assert copy.status == ProviderStatus.AVAILABLE
        assert copy.classify("hello") == classifier.classify("hello")


class TestLanguageGuesser:
    """Stopword and trigram language identification"""

    @pytest.mark.parametrize("utterance, expected", [
        ("book a flight", "en"),
        ("what is the weather like", "en"),
        ("quiero reservar un vuelo para el lunes", "es"),
        ("je voudrais une table pour deux", "fr"),
        ("ich möchte einen Tisch für zwei", "de"),
    ])
    def test_best_guess(self, utterance, expected):
        assert LanguageGuesser().guess(utterance)[0].alpha2 == expected

    def test_candidates_and_limit(self):
        guesses = LanguageGuesser().guess("the table is in the house", candidates=["es", "en"], limit=1)

        assert [g.alpha2 for g in guesses] == ["en"]
        assert guesses[0].alpha3 == "eng"
        assert guesses[0].language == "English"

    def test_empty_utterance_has_no_guess(self):
        assert LanguageGuesser().guess("   ") == []

    def test_language_name(self):
        guesser = LanguageGuesser()

        assert guesser.get_language_name("es") == "Spanish"
        assert guesser.get_language_name("xx") is None
        assert guesser.get_language_name(None) is None


class TestLexiconSentiment:
    """AFINN-style valence scoring"""

    @pytest.mark.asyncio
    async def test_positive(self):
        result = await LexiconSentimentAnalyzer().process("es", "me encanta este producto genial")

        assert result.vote == "positive"
        assert result.score == 6
        assert result.num_hits == 2
        assert result.num_words == 5
        assert result.comparative == pytest.approx(1.2)
        assert result.type == "afinn"

    @pytest.mark.asyncio
    async def test_negation_flips_valence(self):
        result = await LexiconSentimentAnalyzer().process("es", "esto no es bueno")

        assert result.score == -3
        assert result.vote == "negative"

    @pytest.mark.asyncio
    async def test_unsupported_locale_is_neutral(self):
        result = await LexiconSentimentAnalyzer().process("ja", "something")

        assert result.vote == "neutral"
        assert result.type == "none"
        assert result.language == "ja"

    @pytest.mark.asyncio
    async def test_custom_words(self):
        analyzer = LexiconSentimentAnalyzer()
        analyzer.add_words("fr", {"bof": -1})

        result = await analyzer.process("fr", "bof")

        assert result.score == -1


class TestVaderSentiment:
    """NLTK VADER scoring for English, lexicon scoring elsewhere"""

    @pytest.mark.asyncio
    async def test_maps_polarity_scores(self):
        analyzer = MagicMock()
        analyzer.polarity_scores.return_value = {"neg": 0.1, "neu": 0.3, "pos": 0.6, "compound": 0.8}
        analyzer.lexicon = {"love": 3.2}
        provider = VaderSentimentAnalyzer(analyzer=analyzer)

        result = await provider.process("en", "I love it")

        analyzer.polarity_scores.assert_called_once_with("I love it")
        assert result.score == 0.8
        assert result.comparative == pytest.approx(0.5)
        assert result.vote == "positive"
        assert result.num_words == 3
        assert result.num_hits == 1
        assert result.type == "vader"
        assert result.language == "en"

    @pytest.mark.parametrize("compound, vote", [
        (0.05, "positive"),
        (0.04, "neutral"),
        (-0.04, "neutral"),
        (-0.05, "negative"),
    ])
    def test_vote_thresholds(self, compound, vote):
        assert vote_for(compound) == vote

    @pytest.mark.asyncio
    async def test_other_locales_use_lexicon(self):
        analyzer = MagicMock()
        provider = VaderSentimentAnalyzer(analyzer=analyzer)

        result = await provider.process("es", "el servicio es muy malo")

        analyzer.polarity_scores.assert_not_called()
        assert result.vote == "negative"
        assert result.type == "afinn"

    @pytest.mark.asyncio
    async def test_builds_analyzer_lazily(self):
        provider = VaderSentimentAnalyzer()
        assert provider.status == ProviderStatus.UNKNOWN

        result = await provider.process("en", "I love this great product")

        assert provider.status == ProviderStatus.AVAILABLE
        assert result.vote == "positive"

    @pytest.mark.asyncio
    async def test_missing_lexicon_is_downloaded_once(self, monkeypatch):
        built = []

        def build():
            if not built:
                built.append("missing")
                raise LookupError("vader_lexicon")
            return MagicMock(polarity_scores=MagicMock(return_value={"compound": -0.6, "pos": 0.0, "neg": 0.7}))

        download = MagicMock(return_value=True)
        monkeypatch.setattr(vader, "SentimentIntensityAnalyzer", build)
        monkeypatch.setattr(vader.nltk, "download", download)

        result = await VaderSentimentAnalyzer().process("en", "awful")

        download.assert_called_once_with("vader_lexicon", quiet=True)
        assert result.vote == "negative"

    @pytest.mark.asyncio
    async def test_unavailable_lexicon_raises(self, monkeypatch):
        monkeypatch.setattr(vader, "SentimentIntensityAnalyzer", MagicMock(side_effect=LookupError("vader_lexicon")))
        monkeypatch.setattr(vader.nltk, "download", MagicMock(return_value=False))
        provider = VaderSentimentAnalyzer()

        with pytest.raises(LookupError):
            await provider.process("en", "fine")

        assert provider.status == ProviderStatus.ERROR

    @pytest.mark.skipif(not vader_lexicon_installed(), reason="NLTK vader_lexicon not installed")
    @pytest.mark.asyncio
    async def test_real_lexicon(self):
        provider = VaderSentimentAnalyzer()

        positive = await provider.process("en", "I love this great product")
        negated = await provider.process("en", "this is not good")

        assert positive.vote == "positive"
        assert negated.vote == "negative"
