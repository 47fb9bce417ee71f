"""
Classifier Providers

Per-locale intent classifiers.
"""

from .base import ClassifierProvider, ClassifierState
from .logistic import LogisticRegressionClassifier

__all__ = [
    'ClassifierProvider',
    'ClassifierState',
    'LogisticRegressionClassifier',
]
