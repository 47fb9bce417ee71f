"""
Slot Manager - required entities per intent and slot-filling turns

Each intent can declare slots (entities). Mandatory slots that are missing
from a processed utterance make the manager ask for them: the question of
the first missing slot replaces the answer template and the partial state
is stored in the caller's context under "slotFill" so the next turn can
complete it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Iterable

from ..core.models import Entity, ProcessResult

logger = logging.getLogger(__name__)

SLOT_FILL_KEY = "slotFill"


@dataclass
class Slot:
    """Entity slot of an intent."""

    intent: str
    entity: str
    mandatory: bool = False
    locales: Dict[str, str] = field(default_factory=dict)  # locale -> question

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "entity": self.entity,
            "mandatory": self.mandatory,
            "locales": dict(self.locales),
        }


class SlotManager:
    """
    Tracks the slots of every intent and drives slot completion.
    """

    def __init__(self):
        self.intents: Dict[str, Dict[str, Slot]] = {}

    def add_slot(
        self,
        intent: str,
        entity: str,
        mandatory: bool = False,
        questions: Optional[Dict[str, str]] = None
    ) -> Slot:
        slots = self.intents.setdefault(intent, {})
        slot = slots.get(entity)
        if slot is None:
            slot = Slot(intent=intent, entity=entity)
            slots[entity] = slot
        slot.mandatory = mandatory
        if questions:
            slot.locales.update(questions)
        return slot

    def remove_slot(self, intent: str, entity: str) -> None:
        slots = self.intents.get(intent)
        if slots and entity in slots:
            del slots[entity]
            if not slots:
                del self.intents[intent]

    def add_batch(self, intent: str, entities: Iterable[str]) -> List[Slot]:
        """Register optional slots for entities an intent was trained with"""
        added = []
        for entity in entities:
            if self.get_slot(intent, entity) is None:
                added.append(self.add_slot(intent, entity))
        return added

    def get_slot(self, intent: str, entity: str) -> Optional[Slot]:
        return self.intents.get(intent, {}).get(entity)

    def get_intent_entity_names(self, intent: str) -> Optional[List[str]]:
        """Entity names of an intent; None when the intent declares no slots"""
        slots = self.intents.get(intent)
        if not slots:
            return None
        return list(slots)

    def get_mandatory_slots(self, intent: str) -> List[Slot]:
        return [slot for slot in self.intents.get(intent, {}).values() if slot.mandatory]

    def process(self, result: ProcessResult, context: Dict[str, Any]) -> bool:
        """
        Complete or request slots for a processed utterance.

        Mutates result in place and returns True when the outcome changed.
        """
        slot_fill = context.get(SLOT_FILL_KEY)
        if slot_fill:
            self._continue_slot_fill(result, slot_fill)

        mandatory = self.get_mandatory_slots(result.intent)
        found = {entity.entity for entity in result.entities}
        missing = [slot for slot in mandatory if slot.entity not in found]

        if missing:
            current = missing[0]
            result.slot_fill = {
                "localeIso2": result.locale_iso2,
                "intent": result.intent,
                "entities": list(result.entities),
                "answer": result.answer,
                "srcAnswer": result.src_answer,
                "currentSlot": current.entity,
            }
            question = current.locales.get(result.locale_iso2 or "")
            if question:
                result.src_answer = question
            context[SLOT_FILL_KEY] = result.slot_fill
            logger.debug(f"Intent '{result.intent}' waits for slot '{current.entity}'")
            return True

        if slot_fill:
            del context[SLOT_FILL_KEY]
            return True
        return False

    def _continue_slot_fill(self, result: ProcessResult, slot_fill: Dict[str, Any]) -> None:
        result.intent = slot_fill["intent"]
        result.score = 1.0
        result.src_answer = slot_fill.get("srcAnswer")
        result.answer = slot_fill.get("answer")

        current = slot_fill.get("currentSlot")
        slot = self.get_slot(result.intent, current) if current else None
        if slot and not any(entity.entity == slot.entity for entity in result.entities):
            result.entities.append(Entity(
                entity=slot.entity,
                utterance_text=result.utterance,
                source_text=result.utterance,
                accuracy=0.95,
                start=0,
                end=len(result.utterance) - 1,
                type="slot",
            ))

        for previous in slot_fill.get("entities", []):
            # Contexts kept as JSON between turns hold to_dict() entities
            if isinstance(previous, dict):
                previous = Entity.from_dict(previous)
            if not any(entity.entity == previous.entity for entity in result.entities):
                result.entities.append(previous)

    def save(self) -> Dict[str, Any]:
        return {
            intent: {entity: slot.to_dict() for entity, slot in slots.items()}
            for intent, slots in self.intents.items()
        }

    def load(self, data: Optional[Dict[str, Any]]) -> None:
        self.intents = {}
        for intent, slots in (data or {}).items():
            for entity, slot in slots.items():
                self.add_slot(
                    intent,
                    entity,
                    mandatory=slot.get("mandatory", False),
                    questions=slot.get("locales"),
                )

    def clear(self) -> None:
        self.intents = {}
