"""
Model Codec - persisted model encoding and decoding

The persisted model is a JSON document:

    {
      "settings": {...},
      "languages": ["en", "es"],
      "intentDomains": {"reserve.flight": "travel"},
      "nerState": {...},
      "slotState": {...},
      "responses": {...},
      "classifiers": [
        {"language": "en", "docs": [...], "features": [...],
         "sparseObservations": {"label": [[0, 3, 7], ...]},
         "labels": [...], "classifications": [...],
         "observationCount": 3, "theta": [[...], ...]}
      ]
    }

Observation rows are dense 0/1 vectors over the feature vocabulary; they
are stored sparse as the list of column indices holding 1.
"""

import copy
import json
import logging
import re
from typing import TYPE_CHECKING, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ModelFormatError
from .registry import LocaleRegistry
from ..config.models import NluSettings
from ..providers.classifier.base import ClassifierState
from ..utils.text import get_truncated_locale

if TYPE_CHECKING:
    from .manager import NluManager

logger = logging.getLogger(__name__)


class PersistedClassifier(BaseModel):
    """Encoded snapshot of one locale classifier"""
    model_config = ConfigDict(populate_by_name=True)

    language: str
    docs: List[Dict[str, str]]
    features: List[str]
    sparse_observations: Dict[str, List[List[int]]] = Field(alias="sparseObservations")
    labels: List[str]
    classifications: List[str]
    observation_count: int = Field(alias="observationCount", ge=0)
    theta: List[List[float]]

    @field_validator('language')
    @classmethod
    def validate_language(cls, v):
        if not get_truncated_locale(v.strip()):
            raise ValueError(f"Classifier language '{v}' is not a locale code")
        return v

    @model_validator(mode='after')
    def validate_theta(self):
        # An untrained classifier has no weights
        if not self.theta:
            return self
        size = len(self.features)
        if len(self.theta) != len(self.labels) or any(len(row) != size for row in self.theta):
            raise ValueError(
                f"theta of '{self.language}' must be {len(self.labels)} rows of {size} weights"
            )
        return self

    @model_validator(mode='after')
    def validate_indices(self):
        size = len(self.features)
        for label, rows in self.sparse_observations.items():
            for row in rows:
                for index in row:
                    if index < 0 or index >= size:
                        raise ValueError(
                            f"Observation index {index} of label '{label}' outside "
                            f"feature vocabulary of size {size}"
                        )
        return self


class PersistedModel(BaseModel):
    """Whole persisted NLU manager"""
    model_config = ConfigDict(populate_by_name=True)

    settings: Dict[str, Any]
    languages: List[str]
    intent_domains: Dict[str, str] = Field(alias="intentDomains")
    ner_state: Dict[str, Any] = Field(alias="nerState")
    slot_state: Dict[str, Any] = Field(alias="slotState")
    responses: Dict[str, Any]
    classifiers: List[PersistedClassifier]


def encode_row(row: List[int], drop_zero_index: bool = False) -> List[int]:
    """
    Sparse encoding of a dense 0/1 row.

    drop_zero_index reproduces the encoding of older model files, which
    lost column 0 because the index was filtered out as a falsy value.
    """
    indices = [index for index, value in enumerate(row) if value == 1]
    if drop_zero_index:
        indices = [index for index in indices if index]
    return indices


def decode_row(indices: List[int], size: int) -> List[int]:
    """Dense 0/1 row of the given size with the listed columns set"""
    row = [0] * size
    for index in indices:
        row[index] = 1
    return row


class ModelCodec:
    """
    Encodes and decodes the full state of an NluManager.
    """

    def __init__(self, drop_zero_index: bool = False):
        self.drop_zero_index = drop_zero_index

    def encode(self, manager: "NluManager") -> Dict[str, Any]:
        classifiers = []
        for language in manager.registry.languages:
            classifier = manager.registry.get_classifier(language)
            if classifier is None:
                continue
            state = classifier.export_state()
            classifiers.append({
                "language": state.language,
                "docs": state.docs,
                "features": state.features,
                "sparseObservations": {
                    label: [encode_row(row, self.drop_zero_index) for row in rows]
                    for label, rows in state.observations.items()
                },
                "labels": state.labels,
                "classifications": state.classifications,
                "observationCount": state.observation_count,
                "theta": state.theta,
            })

        return {
            "settings": manager.settings.model_dump(mode="json"),
            "languages": list(manager.registry.languages),
            "intentDomains": dict(manager.intent_domains),
            "nerState": manager.ner.save(),
            "slotState": manager.slot_manager.save(),
            "responses": manager.nlg.responses,
            "classifiers": classifiers,
        }

    def decode(self, data: Dict[str, Any], manager: "NluManager") -> None:
        """
        Restore a manager from an encoded model.

        Every section is validated and loaded into staged copies of the
        manager collaborators first; the manager only changes once the whole
        document loaded.

        Raises:
            ModelFormatError: missing fields, bad indices or sections the
                collaborators reject
        """
        if not isinstance(data, dict):
            raise ModelFormatError("Model document must be a JSON object")

        try:
            model = PersistedModel.model_validate(data)
            settings = NluSettings.model_validate(model.settings)
        except ValidationError as e:
            raise ModelFormatError(f"Invalid model document: {e}") from e

        ner = copy.deepcopy(manager.ner)
        slot_manager = copy.deepcopy(manager.slot_manager)
        nlg = copy.deepcopy(manager.nlg)
        registry = manager.registry.spawn()

        # New classifiers are built from the incoming settings
        previous_settings, manager.settings = manager.settings, settings
        try:
            ner.load(model.ner_state)
            slot_manager.load(model.slot_state)
            nlg.load(model.responses)
            registry.add_locales(model.languages)
            for encoded in model.classifiers:
                self._import_classifier(registry, encoded)
        except (AttributeError, KeyError, TypeError, ValueError, re.error) as e:
            raise ModelFormatError(f"Invalid model content: {e}") from e
        finally:
            manager.settings = previous_settings

        manager.settings = settings
        manager.registry = registry
        manager.intent_domains = dict(model.intent_domains)
        manager.ner = ner
        manager.slot_manager = slot_manager
        manager.nlg = nlg
        logger.info(f"Decoded model with {len(model.classifiers)} classifier(s): {model.languages}")

    def _import_classifier(self, registry: LocaleRegistry, encoded: PersistedClassifier) -> None:
        registry.add_locales(encoded.language)
        classifier = registry.get_classifier(encoded.language)
        size = len(encoded.features)
        classifier.import_state(ClassifierState(
            language=encoded.language,
            docs=encoded.docs,
            features=encoded.features,
            observations={
                label: [decode_row(row, size) for row in rows]
                for label, rows in encoded.sparse_observations.items()
            },
            labels=encoded.labels,
            classifications=encoded.classifications,
            observation_count=encoded.observation_count,
            theta=encoded.theta,
        ))

    def dumps(self, manager: "NluManager", minified: bool = False) -> str:
        data = self.encode(manager)
        if minified:
            return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        return json.dumps(data, ensure_ascii=False, indent=2)

    def loads(self, text: str, manager: "NluManager") -> None:
        """Parse a JSON model and decode it into the manager"""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ModelFormatError(f"Invalid model JSON: {e}") from e
        self.decode(data, manager)
