"""
Classifier Provider Base Classes

Abstract base class for the per-locale intent classifiers. The NLU manager
only talks to a classifier through add/remove/train/classify plus the
state snapshot used by the model codec.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from ..base import ProviderBase
from ...core.models import Classification


@dataclass
class ClassifierState:
    """Dense snapshot of everything a trained classifier knows."""

    language: str
    docs: List[Dict[str, str]] = field(default_factory=list)
    features: List[str] = field(default_factory=list)
    observations: Dict[str, List[List[int]]] = field(default_factory=dict)  # label -> dense 0/1 rows
    labels: List[str] = field(default_factory=list)
    classifications: List[str] = field(default_factory=list)
    observation_count: int = 0
    theta: List[List[float]] = field(default_factory=list)


class ClassifierProvider(ProviderBase):
    """
    Abstract base class for locale-bound text classifiers.

    One instance is bound to exactly one locale; its training state is
    owned exclusively by the instance.
    """

    def __init__(self, language: str, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.language = language

    @abstractmethod
    def add(self, utterance: str, label: str) -> None:
        """Record a training example"""
        pass

    @abstractmethod
    def remove(self, utterance: str, label: str) -> None:
        """Remove a matching training example"""
        pass

    @abstractmethod
    async def train(self) -> None:
        """(Re)fit the model from the recorded examples"""
        pass

    @abstractmethod
    def classify(self, utterance: str) -> List[Classification]:
        """Return (label, score) pairs sorted by descending score, possibly empty"""
        pass

    @abstractmethod
    def export_state(self) -> ClassifierState:
        """Snapshot the training state"""
        pass

    @abstractmethod
    def import_state(self, state: ClassifierState) -> None:
        """Restore a snapshot produced by export_state()"""
        pass
