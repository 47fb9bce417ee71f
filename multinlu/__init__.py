"""
multinlu - multi-locale natural language understanding

Intent classification per locale with language guessing, named entities,
sentiment, answer templates and slot filling.
"""

from .__version__ import __version__, __version_info__, VERSION

from .core.manager import NluManager
from .core.models import ProcessResult
from .config.models import NluSettings

__all__ = [
    "__version__",
    "__version_info__",
    "VERSION",
    "NluManager",
    "ProcessResult",
    "NluSettings",
]
