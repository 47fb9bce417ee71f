"""
Named entity definitions

Three kinds of entities can be declared:
- enum: options with per-locale texts, matched exactly or fuzzily
- regex: per-locale regular expressions
- trim: text found after, before or between literal words
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Iterable, Tuple

from rapidfuzz import fuzz

from ...core.models import Entity
from ...utils.text import normalize_text

ANY_LOCALE = "*"

_WORD_RE = re.compile(r"[^\W_]+", re.UNICODE)


def _locales_for(locale: Optional[str]) -> List[str]:
    return [locale, ANY_LOCALE] if locale else [ANY_LOCALE]


def _word_spans(utterance: str) -> List[Tuple[int, int]]:
    """(start, end-exclusive) spans of the words of an utterance"""
    return [(m.start(), m.end()) for m in _WORD_RE.finditer(utterance)]


class NamedEntity(ABC):
    """Base class of a declared entity."""

    type = "entity"

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def extract(self, utterance: str, locale: Optional[str], threshold: float) -> List[Entity]:
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NamedEntity":
        kind = data.get("type", EnumNamedEntity.type)
        entity_cls = ENTITY_TYPES.get(kind)
        if entity_cls is None:
            raise ValueError(f"Unknown entity type: {kind}")
        entity = entity_cls(data["name"])
        entity._load(data)
        return entity

    @abstractmethod
    def _load(self, data: Dict[str, Any]) -> None:
        pass


class EnumNamedEntity(NamedEntity):
    """Entity with canonical options, each one having texts per locale."""

    type = "enum"

    def __init__(self, name: str):
        super().__init__(name)
        self.options: Dict[str, Dict[str, List[str]]] = {}  # option -> locale -> texts

    def add_texts(self, option: str, locales: Iterable[str], texts: Iterable[str]) -> None:
        by_locale = self.options.setdefault(option, {})
        for locale in locales:
            locale_texts = by_locale.setdefault(locale, [])
            for text in texts:
                if text not in locale_texts:
                    locale_texts.append(text)

    def remove_texts(self, option: str, locales: Iterable[str], texts: Iterable[str]) -> None:
        by_locale = self.options.get(option)
        if not by_locale:
            return
        for locale in locales:
            locale_texts = by_locale.get(locale, [])
            for text in texts:
                if text in locale_texts:
                    locale_texts.remove(text)
            if locale in by_locale and not locale_texts:
                del by_locale[locale]
        if not by_locale:
            del self.options[option]

    def extract(self, utterance: str, locale: Optional[str], threshold: float) -> List[Entity]:
        spans = _word_spans(utterance)
        found: List[Entity] = []
        for option, by_locale in self.options.items():
            for key in _locales_for(locale):
                for text in by_locale.get(key, []):
                    found.extend(self._match_text(utterance, spans, option, text, threshold))
        return found

    def _match_text(
        self,
        utterance: str,
        spans: List[Tuple[int, int]],
        option: str,
        text: str,
        threshold: float
    ) -> List[Entity]:
        target = normalize_text(text)
        size = len(_WORD_RE.findall(target))
        if size == 0 or size > len(spans):
            return []

        matches = []
        for i in range(len(spans) - size + 1):
            start = spans[i][0]
            end = spans[i + size - 1][1]
            candidate = utterance[start:end]
            normalized = normalize_text(candidate)
            if normalized == target:
                accuracy = 1.0
            else:
                accuracy = fuzz.ratio(normalized, target) / 100.0
                if accuracy < threshold:
                    continue
            matches.append(Entity(
                entity=self.name,
                option=option,
                utterance_text=candidate,
                source_text=text,
                accuracy=accuracy,
                start=start,
                end=end - 1,
                type=self.type,
            ))
        return matches

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "options": self.options}

    def _load(self, data: Dict[str, Any]) -> None:
        self.options = {
            option: {locale: list(texts) for locale, texts in by_locale.items()}
            for option, by_locale in data.get("options", {}).items()
        }


class RegexNamedEntity(NamedEntity):
    """Entity recognized with regular expressions per locale."""

    type = "regex"

    def __init__(self, name: str):
        super().__init__(name)
        self.regexes: Dict[str, List[str]] = {}  # locale -> patterns

    def add_regex(self, locales: Iterable[str], regex: str) -> None:
        re.compile(regex)
        for locale in locales:
            patterns = self.regexes.setdefault(locale, [])
            if regex not in patterns:
                patterns.append(regex)

    def extract(self, utterance: str, locale: Optional[str], threshold: float) -> List[Entity]:
        found = []
        for key in _locales_for(locale):
            for pattern in self.regexes.get(key, []):
                for match in re.finditer(pattern, utterance, re.IGNORECASE):
                    if not match.group(0):
                        continue
                    found.append(Entity(
                        entity=self.name,
                        utterance_text=match.group(0),
                        source_text=match.group(0),
                        accuracy=1.0,
                        start=match.start(),
                        end=match.end() - 1,
                        type=self.type,
                    ))
        return found

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "regexes": self.regexes}

    def _load(self, data: Dict[str, Any]) -> None:
        self.regexes = {locale: list(patterns) for locale, patterns in data.get("regexes", {}).items()}


class TrimNamedEntity(NamedEntity):
    """
    Entity whose value is the text surrounding literal words.

    Rules:
        after:   text after the word up to the end of the utterance
        before:  text before the word from the start of the utterance
        between: text between a left and a right word
    """

    type = "trim"
    RULE_TYPES = ("after", "before", "between")

    def __init__(self, name: str):
        super().__init__(name)
        self.rules: List[Dict[str, Any]] = []

    def _add_rule(self, rule_type: str, words: List[str], locales: Optional[Iterable[str]],
                  right_words: Optional[List[str]] = None) -> None:
        self.rules.append({
            "type": rule_type,
            "words": list(words),
            "rightWords": list(right_words or []),
            "locales": list(locales) if locales else [ANY_LOCALE],
        })

    def add_after_condition(self, words: List[str], locales: Optional[Iterable[str]] = None) -> None:
        self._add_rule("after", words, locales)

    def add_before_condition(self, words: List[str], locales: Optional[Iterable[str]] = None) -> None:
        self._add_rule("before", words, locales)

    def add_between_condition(self, left_words: List[str], right_words: List[str],
                              locales: Optional[Iterable[str]] = None) -> None:
        self._add_rule("between", left_words, locales, right_words)

    def extract(self, utterance: str, locale: Optional[str], threshold: float) -> List[Entity]:
        found = []
        keys = _locales_for(locale)
        for rule in self.rules:
            if not any(key in rule["locales"] for key in keys):
                continue
            for word in rule["words"]:
                for match in re.finditer(rf"\b{re.escape(word)}\b", utterance, re.IGNORECASE):
                    span = self._span_for(rule, utterance, match)
                    if span is None:
                        continue
                    start, end = span
                    text = utterance[start:end]
                    stripped = text.strip()
                    if not stripped:
                        continue
                    start += len(text) - len(text.lstrip())
                    found.append(Entity(
                        entity=self.name,
                        utterance_text=stripped,
                        source_text=stripped,
                        accuracy=1.0,
                        start=start,
                        end=start + len(stripped) - 1,
                        type=self.type,
                    ))
        return found

    def _span_for(self, rule: Dict[str, Any], utterance: str, match: "re.Match") -> Optional[Tuple[int, int]]:
        if rule["type"] == "after":
            return match.end(), len(utterance)
        if rule["type"] == "before":
            return 0, match.start()
        for right in rule["rightWords"]:
            right_match = re.search(rf"\b{re.escape(right)}\b", utterance[match.end():], re.IGNORECASE)
            if right_match:
                return match.end(), match.end() + right_match.start()
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "rules": self.rules}

    def _load(self, data: Dict[str, Any]) -> None:
        self.rules = [dict(rule) for rule in data.get("rules", [])]


ENTITY_TYPES = {
    EnumNamedEntity.type: EnumNamedEntity,
    RegexNamedEntity.type: RegexNamedEntity,
    TrimNamedEntity.type: TrimNamedEntity,
}
