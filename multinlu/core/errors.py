"""Exceptions raised by the NLU manager and its persistence layer."""

from typing import Dict, Optional


class NluError(Exception):
    """Base class for all multinlu errors"""
    pass


class LocaleResolutionError(NluError):
    """No locale could be determined for a training mutation"""
    pass


class ClassifierNotFoundError(NluError):
    """Resolved locale has no bound classifier"""

    def __init__(self, locale: Optional[str]):
        super().__init__(f"Classifier not found for locale {locale}")
        self.locale = locale


class ModelFormatError(NluError):
    """Persisted model is malformed or cannot be read"""
    pass


class TrainingError(NluError):
    """One or more locale classifiers failed to train"""

    def __init__(self, failures: Dict[str, BaseException]):
        locales = ", ".join(sorted(failures))
        super().__init__(f"Training failed for locale(s): {locales}")
        self.failures = failures
