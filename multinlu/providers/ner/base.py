"""
Entity Extractor Provider Base Classes

Abstract base class for named entity recognition used by the NLU manager.
"""

from abc import abstractmethod
from typing import Dict, Any, List, Optional, Iterable

from ..base import ProviderBase
from ...core.models import Entity


class EntityExtractorProvider(ProviderBase):
    """
    Abstract base class for entity extraction and utterance rewriting.
    """

    @abstractmethod
    async def find_entities(
        self,
        utterance: str,
        locale: Optional[str],
        whitelist: Optional[Iterable[str]] = None
    ) -> List[Entity]:
        """Find entities in an utterance

        Args:
            utterance: Text to analyze
            locale: Truncated locale of the text
            whitelist: Only these entity names are searched when given

        Returns:
            Entities sorted by start position
        """
        pass

    @abstractmethod
    async def generate_entity_utterance(self, utterance: str, locale: Optional[str]) -> str:
        """Return the utterance with every found entity replaced by %entityName%"""
        pass

    @abstractmethod
    def get_entities_from_utterance(self, utterance: str) -> List[str]:
        """Entity names referenced as %entityName% placeholders in a training utterance"""
        pass

    @abstractmethod
    def save(self) -> Dict[str, Any]:
        """Serializable state"""
        pass

    @abstractmethod
    def load(self, data: Optional[Dict[str, Any]]) -> None:
        """Restore state produced by save()"""
        pass
