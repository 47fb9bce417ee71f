"""
Logistic Regression Classifier

Bag-of-words intent classifier: every training utterance becomes a binary
feature vector over the vocabulary and one scikit-learn LogisticRegression
is fitted per label (one-vs-rest). No intercept is fitted, so an utterance
sharing no token with the vocabulary scores exactly 0.5 for every label.
The fitted coefficients are kept as theta; classification only needs them.
"""

import asyncio
import logging
from typing import Dict, Any, List, Optional

import numpy as np
from sklearn.linear_model import LogisticRegression  # type: ignore

from .base import ClassifierProvider, ClassifierState
from ..base import ProviderStatus
from ...core.models import Classification
from ...utils.text import tokenize

logger = logging.getLogger(__name__)


def _sigmoid(z: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-np.clip(z, -500, 500)))


class LogisticRegressionClassifier(ClassifierProvider):
    """
    Per-locale logistic regression classifier.

    Training runs in a worker thread; a per-instance lock guarantees that
    the same classifier is never fitted by two trainings at once.
    """

    def __init__(self, language: str, config: Optional[Dict[str, Any]] = None):
        super().__init__(language, config)
        self.iterations = self.get_config_value('iterations', 1000)
        self.regularization = self.get_config_value('regularization', 1e-4)

        self.docs: List[Dict[str, str]] = []
        self.features: List[str] = []
        self.observations: Dict[str, List[List[int]]] = {}
        self.labels: List[str] = []
        self.classifications: List[str] = []
        self.observation_count = 0
        self.theta: List[List[float]] = []

        self._feature_index: Dict[str, int] = {}
        self._train_lock = asyncio.Lock()

    def get_provider_name(self) -> str:
        return "logistic_regression"

    def add(self, utterance: str, label: str) -> None:
        doc = {"utterance": utterance, "intent": label}
        if doc not in self.docs:
            self.docs.append(doc)
        if label not in self.labels:
            self.labels.append(label)
            # Weights of the previous training do not cover the new label
            self.theta = []

    def remove(self, utterance: str, label: str) -> None:
        doc = {"utterance": utterance, "intent": label}
        if doc in self.docs:
            self.docs.remove(doc)
        else:
            self.logger.debug(f"No document '{utterance}' for label '{label}' in locale {self.language}")

    async def train(self) -> None:
        async with self._train_lock:
            self._set_status(ProviderStatus.INITIALIZING)
            try:
                await asyncio.to_thread(self._fit)
            except Exception as e:
                self._set_status(ProviderStatus.ERROR, str(e))
                raise
            self._set_status(ProviderStatus.AVAILABLE)
            logger.info(
                f"Trained classifier for '{self.language}': {len(self.labels)} labels, "
                f"{len(self.features)} features, {self.observation_count} observations"
            )

    def _create_model(self, samples: int) -> LogisticRegression:
        # C scales the summed loss, regularization the mean loss
        return LogisticRegression(
            C=1.0 / (self.regularization * samples),
            fit_intercept=False,
            max_iter=self.iterations,
        )

    def _fit(self) -> None:
        labels: List[str] = []
        features: List[str] = []
        feature_index: Dict[str, int] = {}
        tokenized = []

        for doc in self.docs:
            tokens = tokenize(doc["utterance"])
            tokenized.append((tokens, doc["intent"]))
            if doc["intent"] not in labels:
                labels.append(doc["intent"])
            for token in tokens:
                if token not in feature_index:
                    feature_index[token] = len(features)
                    features.append(token)

        rows = []
        observations: Dict[str, List[List[int]]] = {label: [] for label in labels}
        classifications: List[str] = []
        for tokens, label in tokenized:
            row = [0] * len(features)
            for token in tokens:
                row[feature_index[token]] = 1
            rows.append(row)
            observations[label].append(row)
            classifications.append(label)

        theta = np.zeros((len(labels), len(features)))
        if rows and features:
            # The empty row gives every label a negative sample; without an
            # intercept it adds no gradient.
            x = np.array(rows + [[0] * len(features)], dtype=float)
            for position, label in enumerate(labels):
                y = np.array([1 if c == label else 0 for c in classifications] + [0])
                model = self._create_model(len(rows))
                model.fit(x, y)
                theta[position] = model.coef_[0]

        self.labels = labels
        self.features = features
        self._feature_index = feature_index
        self.observations = observations
        self.classifications = classifications
        self.observation_count = len(rows)
        self.theta = theta.tolist()

    def _vectorize(self, utterance: str) -> np.ndarray:
        vector = np.zeros(len(self.features))
        for token in tokenize(utterance):
            position = self._feature_index.get(token)
            if position is not None:
                vector[position] = 1.0
        return vector

    def _is_trained(self) -> bool:
        if len(self.theta) != len(self.labels) or not self.features:
            return False
        return all(len(row) == len(self.features) for row in self.theta)

    def classify(self, utterance: str) -> List[Classification]:
        if not self.labels:
            return []
        if not self._is_trained():
            return [Classification(label, 0.5) for label in self.labels]

        scores = _sigmoid(np.array(self.theta) @ self._vectorize(utterance))
        result = [Classification(label, float(score)) for label, score in zip(self.labels, scores)]
        result.sort(key=lambda c: c.value, reverse=True)
        return result

    def export_state(self) -> ClassifierState:
        return ClassifierState(
            language=self.language,
            docs=[dict(doc) for doc in self.docs],
            features=list(self.features),
            observations={label: [list(row) for row in rows] for label, rows in self.observations.items()},
            labels=list(self.labels),
            classifications=list(self.classifications),
            observation_count=self.observation_count,
            theta=[list(row) for row in self.theta],
        )

    def import_state(self, state: ClassifierState) -> None:
        self.docs = [dict(doc) for doc in state.docs]
        self.features = list(state.features)
        self._feature_index = {feature: i for i, feature in enumerate(self.features)}
        self.observations = {label: [list(row) for row in rows] for label, rows in state.observations.items()}
        self.labels = list(state.labels)
        self.classifications = list(state.classifications)
        self.observation_count = state.observation_count
        self.theta = [list(row) for row in state.theta]
        if self._is_trained():
            self._set_status(ProviderStatus.AVAILABLE)
