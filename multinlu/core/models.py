"""Core data models for the NLU pipeline."""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional


DEFAULT_DOMAIN = "default"
NONE_INTENT = "None"

# intent name -> domain name
IntentDomainMap = Dict[str, str]


@dataclass
class Classification:
    """One (label, score) pair of a ranked classification."""

    label: str
    value: float                       # 0.0 - 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "value": self.value}


@dataclass
class Entity:
    """Entity occurrence found inside an utterance."""

    entity: str                        # "food"
    utterance_text: str                # text as it appears in the utterance
    start: int = 0
    end: int = 0                       # inclusive end position
    option: Optional[str] = None       # canonical option, "burger"
    source_text: Optional[str] = None  # entity text that matched
    accuracy: float = 1.0
    type: str = "enum"

    @property
    def len(self) -> int:
        return self.end - self.start + 1

    @property
    def context_value(self) -> str:
        """Value stored into the answer context for this entity"""
        return self.option if self.option else self.utterance_text

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "entity": self.entity,
            "utteranceText": self.utterance_text,
            "sourceText": self.source_text,
            "accuracy": self.accuracy,
            "start": self.start,
            "end": self.end,
            "len": self.len,
            "type": self.type,
        }
        if self.option is not None:
            data["option"] = self.option
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entity":
        """Rebuild an entity from its to_dict() form"""
        return cls(
            entity=data["entity"],
            utterance_text=data.get("utteranceText", ""),
            start=data.get("start", 0),
            end=data.get("end", 0),
            option=data.get("option"),
            source_text=data.get("sourceText"),
            accuracy=data.get("accuracy", 1.0),
            type=data.get("type", "enum"),
        )


@dataclass
class SentimentResult:
    """Sentiment score of an utterance."""

    score: float
    comparative: float
    vote: str                          # "positive", "negative", "neutral"
    num_words: int
    num_hits: int
    type: str                          # lexicon name, "none" when unsupported
    language: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "comparative": self.comparative,
            "vote": self.vote,
            "numWords": self.num_words,
            "numHits": self.num_hits,
            "type": self.type,
            "language": self.language,
        }


@dataclass
class LanguageGuess:
    """A ranked candidate language for an utterance."""

    alpha2: str
    alpha3: str
    language: str
    score: float


@dataclass
class ProcessResult:
    """
    Unified result of NluManager.process().

    Created fresh for every call and mutated through the pipeline steps.
    """

    locale: Optional[str]
    locale_iso2: Optional[str]
    language: Optional[str]
    utterance: str
    classification: Optional[List[Classification]] = None
    intent: str = NONE_INTENT
    domain: Optional[str] = DEFAULT_DOMAIN
    score: float = 1.0
    entities: List[Entity] = field(default_factory=list)
    sentiment: Optional[SentimentResult] = None
    src_answer: Optional[str] = None
    answer: Optional[str] = None
    slot_fill: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used by callers and model files"""
        data: Dict[str, Any] = {
            "locale": self.locale,
            "localeIso2": self.locale_iso2,
            "language": self.language,
            "utterance": self.utterance,
            "classification": [c.to_dict() for c in self.classification or []],
            "intent": self.intent,
            "domain": self.domain,
            "score": self.score,
            "entities": [e.to_dict() for e in self.entities],
            "sentiment": self.sentiment.to_dict() if self.sentiment else None,
        }
        if self.src_answer is not None:
            data["srcAnswer"] = self.src_answer
        if self.answer is not None:
            data["answer"] = self.answer
        if self.slot_fill is not None:
            slot_fill = dict(self.slot_fill)
            slot_fill["entities"] = [
                e.to_dict() if isinstance(e, Entity) else e for e in slot_fill.get("entities", [])
            ]
            data["slotFill"] = slot_fill
        return data
