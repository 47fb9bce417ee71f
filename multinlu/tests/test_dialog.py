"""
Test Dialog Helpers

Answer templates and conditions, and slot filling state.
"""

import random

import pytest

from multinlu.core.models import Entity, ProcessResult
from multinlu.dialog.answers import NlgManager, evaluate_condition, render_template
from multinlu.dialog.slots import SLOT_FILL_KEY, SlotManager


class TestTemplates:
    """{name} placeholder rendering"""

    def test_placeholders_are_filled(self):
        assert render_template("Hi {name}, {count} new", {"name": "Ana", "count": 3}) == "Hi Ana, 3 new"

    def test_missing_values_render_empty(self):
        assert render_template("Hi {name}!", {}) == "Hi !"

    def test_malformed_template_is_returned_unchanged(self):
        assert render_template("Hi {name", {"name": "Ana"}) == "Hi {name"


class TestConditions:
    """Boolean expressions over the context"""

    @pytest.mark.parametrize("condition, expected", [
        (None, True),
        ("", True),
        ('hero == "spiderman"', True),
        ('hero === "spiderman" && age > 18', True),
        ('hero == "batman" || age < 18', False),
        ("not missing", True),
        ("age >= 21", True),
        ('hero in ["spiderman", "ironman"]', True),
        ("villain == null", True),
        ("age > ", False),
        ("__import__('os')", False),
    ])
    def test_evaluate(self, condition, expected):
        context = {"hero": "spiderman", "age": 21}

        assert evaluate_condition(condition, context) is expected


class TestNlgManager:
    """Answer storage and selection"""

    def test_find_answer_respects_conditions(self):
        nlg = NlgManager()
        nlg.add_answer("en", "greet", "Hello adult", "age >= 18")
        nlg.add_answer("en", "greet", "Hello kid", "age < 18")

        assert nlg.find_answer("en", "greet", {"age": 30}).response == "Hello adult"
        assert nlg.find_answer("en", "greet", {"age": 8}).response == "Hello kid"

    def test_find_answer_picks_among_candidates(self):
        nlg = NlgManager(rng=random.Random(7))
        nlg.add_answer("en", "greet", "Hi")
        nlg.add_answer("en", "greet", "Hello")

        picked = {nlg.find_answer("en", "greet", {}).response for _ in range(30)}

        assert picked == {"Hi", "Hello"}

    def test_unknown_intent_or_locale_has_no_answer(self):
        nlg = NlgManager()
        nlg.add_answer("en", "greet", "Hi")

        assert nlg.find_answer("es", "greet", {}) is None
        assert nlg.find_answer("en", "farewell", {}) is None
        assert nlg.find_answer(None, "greet", {}) is None

    def test_duplicates_and_removal(self):
        nlg = NlgManager()
        nlg.add_answer("en", "greet", "Hi")
        nlg.add_answer("en", "greet", "Hi")

        assert nlg.responses == {"en": {"greet": [{"response": "Hi", "condition": None}]}}

        nlg.remove_answer("en", "greet", "Hi")

        assert nlg.responses == {"en": {}}


def make_result(intent="book", entities=None, utterance="book a table"):
    return ProcessResult(
        locale="en", locale_iso2="en", language="English", utterance=utterance,
        intent=intent, score=0.9, entities=entities or [],
        src_answer="Table for {people}", answer="Table for ",
    )


class TestSlotManager:
    """Slot declaration and slot-filling turns"""

    def test_intent_entity_names(self):
        slots = SlotManager()
        slots.add_batch("book", ["people", "time"])
        slots.add_batch("book", ["people"])

        assert slots.get_intent_entity_names("book") == ["people", "time"]
        assert slots.get_intent_entity_names("greet") is None

    def test_add_slot_updates_existing(self):
        slots = SlotManager()
        slots.add_batch("book", ["people"])
        slots.add_slot("book", "people", mandatory=True, questions={"en": "How many?"})

        slot = slots.get_slot("book", "people")
        assert slot.mandatory is True
        assert slot.locales == {"en": "How many?"}

    def test_remove_slot(self):
        slots = SlotManager()
        slots.add_slot("book", "people")
        slots.remove_slot("book", "people")

        assert slots.get_intent_entity_names("book") is None

    def test_nothing_to_do_without_mandatory_slots(self):
        slots = SlotManager()
        slots.add_slot("book", "people")
        context = {}

        assert slots.process(make_result(), context) is False
        assert context == {}

    def test_missing_mandatory_slot_asks_question(self):
        slots = SlotManager()
        slots.add_slot("book", "people", mandatory=True, questions={"en": "For how many people?"})
        result = make_result()
        context = {}

        assert slots.process(result, context) is True

        assert result.src_answer == "For how many people?"
        assert result.slot_fill["currentSlot"] == "people"
        assert result.slot_fill["srcAnswer"] == "Table for {people}"
        assert context[SLOT_FILL_KEY] is result.slot_fill

    def test_present_mandatory_slot(self):
        slots = SlotManager()
        slots.add_slot("book", "people", mandatory=True)
        result = make_result(entities=[Entity("people", "four", option="4")])

        assert slots.process(result, {}) is False
        assert result.slot_fill is None

    def test_continuation_fills_current_slot(self):
        slots = SlotManager()
        slots.add_slot("book", "people", mandatory=True, questions={"en": "How many?"})
        slots.add_slot("book", "time", mandatory=True, questions={"en": "At what time?"})
        context = {}
        slots.process(make_result(), context)

        answer_turn = make_result(intent="None", utterance="four")
        assert slots.process(answer_turn, context) is True

        assert answer_turn.intent == "book"
        assert answer_turn.score == 1.0
        assert [(e.entity, e.utterance_text, e.type) for e in answer_turn.entities] == [("people", "four", "slot")]
        assert answer_turn.src_answer == "At what time?"
        assert context[SLOT_FILL_KEY]["currentSlot"] == "time"

        last_turn = make_result(intent="None", utterance="at nine")
        assert slots.process(last_turn, context) is True

        assert {e.entity for e in last_turn.entities} == {"people", "time"}
        assert last_turn.src_answer == "Table for {people}"
        assert SLOT_FILL_KEY not in context

    def test_save_and_load(self):
        slots = SlotManager()
        slots.add_slot("book", "people", mandatory=True, questions={"en": "How many?"})
        slots.add_batch("order", ["food"])

        restored = SlotManager()
        restored.load(slots.save())

        assert restored.save() == slots.save()
        assert restored.get_mandatory_slots("book")[0].locales == {"en": "How many?"}
