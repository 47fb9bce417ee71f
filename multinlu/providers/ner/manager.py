"""
NER Manager - declared entity registry and matcher

Holds every declared named entity and finds their occurrences inside
utterances. Overlapping matches are resolved keeping the most accurate
and then the longest span.
"""

import logging
import re
from typing import Dict, Any, List, Optional, Iterable, Union

from .base import EntityExtractorProvider
from .entities import (
    NamedEntity, EnumNamedEntity, RegexNamedEntity, TrimNamedEntity, ENTITY_TYPES
)
from ...core.models import Entity
from ...utils.text import get_truncated_locale

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"%([^%\s]+)%")


def _as_list(value: Union[str, Iterable[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class NerManager(EntityExtractorProvider):
    """
    Named entity manager supporting enum, regex and trim entities.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.threshold = self.get_config_value('threshold', 0.8)
        self.named_entities: Dict[str, NamedEntity] = {}

    def get_provider_name(self) -> str:
        return "ner_manager"

    def add_named_entity(self, entity_name: str, entity_type: str = EnumNamedEntity.type) -> NamedEntity:
        """Get or create a declared entity of the given type"""
        entity = self.named_entities.get(entity_name)
        if entity is not None:
            if entity.type != entity_type:
                raise ValueError(
                    f"Entity '{entity_name}' already declared as {entity.type}, not {entity_type}"
                )
            return entity
        entity_cls = ENTITY_TYPES.get(entity_type)
        if entity_cls is None:
            raise ValueError(f"Unknown entity type: {entity_type}")
        entity = entity_cls(entity_name)
        self.named_entities[entity_name] = entity
        logger.debug(f"Declared {entity_type} entity '{entity_name}'")
        return entity

    def get_named_entity(self, entity_name: str) -> Optional[NamedEntity]:
        return self.named_entities.get(entity_name)

    def add_named_entity_text(
        self,
        entity_name: str,
        option_name: str,
        languages: Union[str, Iterable[str]],
        texts: Union[str, Iterable[str]]
    ) -> EnumNamedEntity:
        entity = self.add_named_entity(entity_name, EnumNamedEntity.type)
        locales = [get_truncated_locale(l) if l != "*" else "*" for l in _as_list(languages)]
        entity.add_texts(option_name, locales, _as_list(texts))
        return entity

    def remove_named_entity_text(
        self,
        entity_name: str,
        option_name: str,
        languages: Union[str, Iterable[str]],
        texts: Union[str, Iterable[str]]
    ) -> None:
        entity = self.named_entities.get(entity_name)
        if not isinstance(entity, EnumNamedEntity):
            return
        locales = [get_truncated_locale(l) if l != "*" else "*" for l in _as_list(languages)]
        entity.remove_texts(option_name, locales, _as_list(texts))

    def add_regex_entity(
        self,
        entity_name: str,
        languages: Union[str, Iterable[str]],
        regex: str
    ) -> RegexNamedEntity:
        entity = self.add_named_entity(entity_name, RegexNamedEntity.type)
        locales = [get_truncated_locale(l) if l != "*" else "*" for l in _as_list(languages)]
        entity.add_regex(locales, regex)
        return entity

    def add_trim_entity(self, entity_name: str) -> TrimNamedEntity:
        return self.add_named_entity(entity_name, TrimNamedEntity.type)

    async def find_entities(
        self,
        utterance: str,
        locale: Optional[str],
        whitelist: Optional[Iterable[str]] = None
    ) -> List[Entity]:
        allowed = set(whitelist) if whitelist is not None else None
        candidates: List[Entity] = []
        for name, entity in self.named_entities.items():
            if allowed is not None and name not in allowed:
                continue
            candidates.extend(entity.extract(utterance, locale, self.threshold))
        return self._resolve_overlaps(candidates)

    def _resolve_overlaps(self, candidates: List[Entity]) -> List[Entity]:
        ranked = sorted(candidates, key=lambda e: (-e.accuracy, -e.len, e.start))
        kept: List[Entity] = []
        for candidate in ranked:
            if any(candidate.start <= other.end and other.start <= candidate.end for other in kept):
                continue
            kept.append(candidate)
        kept.sort(key=lambda e: e.start)
        return kept

    async def generate_entity_utterance(self, utterance: str, locale: Optional[str]) -> str:
        entities = await self.find_entities(utterance, locale)
        result = utterance
        for entity in sorted(entities, key=lambda e: e.start, reverse=True):
            result = f"{result[:entity.start]}%{entity.entity}%{result[entity.end + 1:]}"
        return result

    def get_entities_from_utterance(self, utterance: str) -> List[str]:
        names = []
        for name in _PLACEHOLDER_RE.findall(utterance):
            if name not in names:
                names.append(name)
        return names

    def save(self) -> Dict[str, Any]:
        return {
            "threshold": self.threshold,
            "namedEntities": {name: entity.to_dict() for name, entity in self.named_entities.items()},
        }

    def load(self, data: Optional[Dict[str, Any]]) -> None:
        data = data or {}
        self.threshold = data.get("threshold", self.threshold)
        self.named_entities = {
            name: NamedEntity.from_dict({"name": name, **entity})
            for name, entity in data.get("namedEntities", {}).items()
        }

    def clear(self) -> None:
        self.named_entities = {}
