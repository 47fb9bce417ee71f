"""
multinlu Core Module - NLU manager, locale registry and model codec
"""

from .manager import NluManager
from .registry import LocaleRegistry
from .codec import ModelCodec
from .errors import (
    NluError,
    LocaleResolutionError,
    ClassifierNotFoundError,
    TrainingError,
    ModelFormatError,
)
from .models import Classification, Entity, SentimentResult, LanguageGuess, ProcessResult

__all__ = [
    "NluManager",
    "LocaleRegistry",
    "ModelCodec",
    "NluError",
    "LocaleResolutionError",
    "ClassifierNotFoundError",
    "TrainingError",
    "ModelFormatError",
    "Classification",
    "Entity",
    "SentimentResult",
    "LanguageGuess",
    "ProcessResult",
]
