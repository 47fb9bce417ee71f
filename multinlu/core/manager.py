"""
NLU Manager - multi-locale natural language understanding pipeline

Manages one classifier per locale, the named entities, sentiment, answers
and slot filling, and combines them in process():

    locale resolution -> classification arbitration -> entities + sentiment
    -> answer rendering -> slot filling -> result transform

Understanding entities:

    Entity   Option    English              Spanish
    food     burger    Burger, Hamburger    Hamburguesa
    food     salad     Salad                Ensalada

Training utterances may reference entities as %food%; matched entities
are replaced by the same placeholder before the entity-aware
reclassification.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .codec import ModelCodec
from .errors import LocaleResolutionError, ClassifierNotFoundError, TrainingError
from .models import (
    Classification, Entity, ProcessResult, SentimentResult, IntentDomainMap,
    DEFAULT_DOMAIN, NONE_INTENT,
)
from .registry import LocaleRegistry, ClassifierFactory
from ..config.models import NluSettings, DEFAULT_EXCEL_FILE
from ..dialog.answers import NlgManager
from ..dialog.slots import SlotManager
from ..providers.classifier.base import ClassifierProvider
from ..providers.classifier.logistic import LogisticRegressionClassifier
from ..providers.language.base import LanguageGuesserProvider
from ..providers.language.guesser import LanguageGuesser
from ..providers.ner.entities import NamedEntity, RegexNamedEntity, TrimNamedEntity
from ..providers.ner.manager import NerManager
from ..providers.sentiment.base import SentimentProvider
from ..providers.sentiment.vader import VaderSentimentAnalyzer
from ..utils.text import get_truncated_locale

logger = logging.getLogger(__name__)

ProcessTransformer = Callable[[ProcessResult], Any]


def _identity(result: ProcessResult) -> ProcessResult:
    return result


class NluManager:
    """
    Multi-locale NLU orchestrator.

    All registry, domain and collaborator state is owned by the instance;
    two managers never share state.
    """

    def __init__(
        self,
        settings: Optional[Union[NluSettings, Dict[str, Any]]] = None,
        *,
        process_transformer: Optional[ProcessTransformer] = None,
        classifier_factory: Optional[ClassifierFactory] = None,
        ner: Optional[NerManager] = None,
        sentiment: Optional[SentimentProvider] = None,
        guesser: Optional[LanguageGuesserProvider] = None,
        slot_manager: Optional[SlotManager] = None,
        nlg: Optional[NlgManager] = None,
    ):
        """
        Args:
            settings: Manager settings (defaults plus environment overrides when None)
            process_transformer: Applied once to every process() result
            classifier_factory: Builds the classifier bound to a new locale
            ner, sentiment, guesser, slot_manager, nlg: Collaborator overrides
        """
        if isinstance(settings, dict):
            settings = NluSettings.model_validate(settings)
        self.settings = settings or NluSettings()

        self.registry = LocaleRegistry(classifier_factory or self._create_classifier)
        self.guesser = guesser or LanguageGuesser()
        self.ner = ner or NerManager(self.settings.ner.model_dump())
        self.sentiment = sentiment or VaderSentimentAnalyzer()
        self.slot_manager = slot_manager or SlotManager()
        self.nlg = nlg or NlgManager()
        self.intent_domains: IntentDomainMap = {}
        self.process_transformer = process_transformer or _identity

        if self.settings.languages:
            self.add_language(self.settings.languages)

    def _create_classifier(self, locale: str) -> ClassifierProvider:
        return LogisticRegressionClassifier(locale, self.settings.classifier.model_dump())

    def _codec(self) -> ModelCodec:
        return ModelCodec(drop_zero_index=self.settings.sparse_zero_index_compat)

    # ------------------------------------------------------------------
    # Locales
    # ------------------------------------------------------------------

    @property
    def languages(self) -> List[str]:
        return self.registry.languages

    @property
    def classifiers(self) -> Dict[str, ClassifierProvider]:
        return self.registry.classifiers

    def add_language(self, locales: Union[str, Iterable[str]]) -> List[str]:
        """Register one or several locales"""
        return self.registry.add_locales(locales)

    def guess_language(self, utterance: str) -> Optional[str]:
        """ISO2 code of the most likely registered language, or None"""
        return self.registry.guess(utterance, self.guesser)

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def add_named_entity_text(self, entity_name: str, option_name: str,
                              languages: Union[str, Iterable[str]],
                              texts: Union[str, Iterable[str]]) -> NamedEntity:
        return self.ner.add_named_entity_text(entity_name, option_name, languages, texts)

    def remove_named_entity_text(self, entity_name: str, option_name: str,
                                 languages: Union[str, Iterable[str]],
                                 texts: Union[str, Iterable[str]]) -> None:
        self.ner.remove_named_entity_text(entity_name, option_name, languages, texts)

    def add_regex_entity(self, entity_name: str, languages: Union[str, Iterable[str]],
                         regex: str) -> RegexNamedEntity:
        return self.ner.add_regex_entity(entity_name, languages, regex)

    def add_trim_entity(self, entity_name: str) -> TrimNamedEntity:
        return self.ner.add_trim_entity(entity_name)

    async def extract_entities(self, locale: Optional[str], utterance: Optional[str] = None,
                               whitelist: Optional[Iterable[str]] = None) -> List[Entity]:
        if utterance is None:
            utterance, locale = locale, None
        resolved = self.registry.resolve_locale(locale, utterance, self.guesser)
        return await self.ner.find_entities(utterance, resolved, whitelist)

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    def assign_domain(self, intent: str, domain: str) -> None:
        self.intent_domains[intent] = domain

    def get_intent_domain(self, intent: str) -> Optional[str]:
        return self.intent_domains.get(intent)

    def get_domains(self) -> Dict[str, List[str]]:
        """Intents grouped by domain"""
        domains: Dict[str, List[str]] = {}
        for intent, domain in self.intent_domains.items():
            domains.setdefault(domain, []).append(intent)
        return domains

    # ------------------------------------------------------------------
    # Training data
    # ------------------------------------------------------------------

    def _training_classifier(self, locale: Optional[str], utterance: str) -> ClassifierProvider:
        resolved = get_truncated_locale(locale) or self.guess_language(utterance)
        if not resolved:
            raise LocaleResolutionError("Locale must be defined")
        classifier = self.registry.get_classifier(resolved)
        if classifier is None:
            raise ClassifierNotFoundError(resolved)
        return classifier

    def add_document(self, locale: Optional[str], utterance: str, intent: str) -> None:
        """
        Add a training utterance for an intent.

        Raises:
            LocaleResolutionError: no locale given and none could be guessed
            ClassifierNotFoundError: the locale is not registered
        """
        classifier = self._training_classifier(locale, utterance)
        classifier.add(utterance, intent)
        if self.get_intent_domain(intent) is None:
            self.assign_domain(intent, DEFAULT_DOMAIN)
        self.slot_manager.add_batch(intent, self.ner.get_entities_from_utterance(utterance))

    def remove_document(self, locale: Optional[str], utterance: str, intent: str) -> None:
        """Remove a training utterance; raises like add_document()"""
        classifier = self._training_classifier(locale, utterance)
        classifier.remove(utterance, intent)

    def add_answer(self, locale: str, intent: str, answer: str, condition: Optional[str] = None) -> None:
        self.nlg.add_answer(get_truncated_locale(locale), intent, answer, condition)

    def remove_answer(self, locale: str, intent: str, answer: str, condition: Optional[str] = None) -> None:
        self.nlg.remove_answer(get_truncated_locale(locale), intent, answer, condition)

    def get_answer(self, locale: Optional[str], intent: str, context: Dict[str, Any]) -> Optional[str]:
        answer = self.nlg.find_answer(get_truncated_locale(locale), intent, context)
        return answer.response if answer else None

    async def train(self, locales: Optional[Union[str, Iterable[str]]] = None) -> None:
        """
        Train the classifiers of the given locales, or of every locale.

        Trainings run concurrently and all of them settle before a failure
        is reported; there is no rollback of the locales that succeeded.

        Raises:
            ClassifierNotFoundError: a requested locale is not registered
            TrainingError: one or more classifiers failed to train
        """
        if locales is None:
            targets = list(self.registry.languages)
        else:
            if isinstance(locales, str):
                locales = [locales]
            targets = []
            for locale in locales:
                truncated = get_truncated_locale(locale)
                if truncated and truncated not in targets:
                    targets.append(truncated)

        classifiers: Dict[str, ClassifierProvider] = {}
        for locale in targets:
            classifier = self.registry.get_classifier(locale)
            if classifier is None:
                raise ClassifierNotFoundError(locale)
            classifiers[locale] = classifier

        results = await asyncio.gather(
            *(classifier.train() for classifier in classifiers.values()),
            return_exceptions=True,
        )
        failures = {
            locale: outcome
            for locale, outcome in zip(classifiers, results)
            if isinstance(outcome, BaseException)
        }
        if failures:
            for locale, error in failures.items():
                logger.error(f"Training failed for locale '{locale}': {error}")
            raise TrainingError(failures)
        logger.info(f"Trained {len(classifiers)} classifier(s): {list(classifiers)}")

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def classify(self, locale: Optional[str], utterance: Optional[str] = None) -> Optional[List[Classification]]:
        """
        Classify an utterance with the classifier of a locale.

        Returns None when the locale has no classifier.
        """
        if utterance is None:
            utterance = locale
            locale = self.guess_language(utterance)
        classifier = self.registry.get_classifier(locale)
        if classifier is None:
            logger.debug(f"No classifier for locale {locale}")
            return None
        return classifier.classify(utterance)

    async def get_sentiment(self, locale: Optional[str], utterance: Optional[str] = None) -> SentimentResult:
        if utterance is None:
            utterance = locale
            locale = self.guess_language(utterance)
        return await self.sentiment.process(get_truncated_locale(locale), utterance)

    @staticmethod
    def is_equal_classification(classifications: List[Classification]) -> bool:
        """True when every score is exactly 0.5, i.e. no discriminating signal"""
        return all(classification.value == 0.5 for classification in classifications)

    def _best_across_locales(
        self,
        utterance: str,
        best: Optional[List[Classification]]
    ) -> Optional[List[Classification]]:
        for language in self.registry.languages:
            classification = self.classify(language, utterance)
            if not classification:
                continue
            if best is None or classification[0].value > best[0].value:
                logger.debug(f"Full search: '{language}' leads with {classification[0].label} "
                             f"({classification[0].value:.3f})")
                best = classification
        return best

    async def _arbitrate(self, utterance: str, locale: Optional[str],
                         locale_guessed: bool) -> Optional[List[Classification]]:
        if locale_guessed and self.settings.full_search_when_guessed:
            best = self._best_across_locales(utterance, None)
            entity_utterance = await self.ner.generate_entity_utterance(utterance, locale)
            return self._best_across_locales(entity_utterance, best)

        classification = self.classify(locale, utterance)
        entity_utterance = await self.ner.generate_entity_utterance(utterance, locale)
        if entity_utterance != utterance:
            alternative = self.classify(locale, entity_utterance)
            if alternative and (not classification or alternative[0].value > classification[0].value):
                logger.debug(f"Entity utterance '{entity_utterance}' wins with {alternative[0].label}")
                classification = alternative
        return classification

    @staticmethod
    def _merge_entities(entities: List[Entity], context: Dict[str, Any]) -> None:
        for entity in entities:
            context[entity.entity] = entity.context_value

    async def process(
        self,
        locale: Optional[str] = None,
        utterance: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Classify and analyze an utterance.

        The locale is guessed when missing or not registered; when even
        guessing fails the first registered locale is used.

        Args:
            locale: Locale of the utterance. process("text") guesses it.
            utterance: Text to process
            context: Answer/slot context, updated in place with entity values

        Returns:
            The ProcessResult passed through the process transformer
        """
        if utterance is None:
            utterance, locale = locale, None
        if utterance is None:
            raise ValueError("An utterance is required")

        explicit = get_truncated_locale(locale)
        locale_guessed = explicit is None or explicit not in self.registry.languages
        resolved = self.registry.resolve_locale(locale, utterance, self.guesser)
        if resolved is None and self.registry.languages:
            resolved = self.registry.languages[0]

        result = ProcessResult(
            locale=resolved if locale_guessed else locale,
            locale_iso2=resolved,
            language=self.guesser.get_language_name(resolved),
            utterance=utterance,
        )

        result.classification = await self._arbitrate(utterance, resolved, locale_guessed)
        if not result.classification or self.is_equal_classification(result.classification):
            result.intent = NONE_INTENT
            result.domain = DEFAULT_DOMAIN
            result.score = 1.0
        else:
            top = result.classification[0]
            result.intent = top.label
            result.domain = self.get_intent_domain(top.label) or DEFAULT_DOMAIN
            result.score = top.value

        whitelist = self.slot_manager.get_intent_entity_names(result.intent)
        entities, result.sentiment = await asyncio.gather(
            self.ner.find_entities(utterance, resolved, whitelist),
            self.sentiment.process(resolved, utterance),
        )
        result.entities = list(entities)

        context = context if context is not None else {}
        self._merge_entities(result.entities, context)

        if self.settings.use_nlg:
            answer = self.nlg.find_answer(resolved, result.intent, context)
            if answer:
                result.src_answer = answer.response
                result.answer = self.nlg.render(answer.response, context)

        classified_intent = result.intent
        if self.slot_manager.process(result, context):
            self._merge_entities(result.entities, context)
            if result.src_answer:
                result.answer = self.nlg.render(result.src_answer, context)
            if result.intent != classified_intent:
                result.domain = self.get_intent_domain(result.intent) or DEFAULT_DOMAIN

        return self.process_transformer(result)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop every locale, classifier, entity, slot, answer and domain; keep settings"""
        self.ner.clear()
        self.registry.clear()
        self.slot_manager.clear()
        self.nlg.clear()
        self.intent_domains = {}

    def export(self, minified: bool = False) -> str:
        """Serialize the manager as JSON, indented unless minified"""
        return self._codec().dumps(self, minified)

    def import_model(self, data: Union[str, Dict[str, Any]]) -> None:
        """Restore the manager from export() output (string or parsed object)"""
        codec = self._codec()
        if isinstance(data, str):
            codec.loads(data, self)
        else:
            codec.decode(data, self)

    def save(self, filename: Optional[Union[str, Path]] = None, minified: bool = False) -> Path:
        path = Path(filename or self.settings.model_file)
        path.write_text(self.export(minified), encoding='utf-8')
        logger.info(f"Saved model to: {path}")
        return path

    def load(self, filename: Optional[Union[str, Path]] = None) -> None:
        path = Path(filename or self.settings.model_file)
        self.import_model(path.read_text(encoding='utf-8'))
        logger.info(f"Loaded model from: {path}")

    def load_excel(self, filename: Optional[Union[str, Path]] = None) -> None:
        """Clear the manager and bulk-import a spreadsheet corpus"""
        from ..loaders.excel_reader import ExcelReader

        self.clear()
        ExcelReader(self).load(filename or DEFAULT_EXCEL_FILE)
