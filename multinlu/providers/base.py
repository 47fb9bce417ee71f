"""
Provider Base Classes

Every capability the NLU manager depends on (classifiers, entity
extraction, sentiment and language guessing) is a provider: a plain class
with a config dict, a logger and a status that reflects its last
lifecycle transition.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

class ProviderStatus(Enum):
    """Lifecycle state of a provider"""
    UNKNOWN = "unknown"            # constructed, nothing loaded or trained yet
    INITIALIZING = "initializing"  # training or loading in progress
    AVAILABLE = "available"
    ERROR = "error"

class ProviderBase(ABC):
    """
    Base class for all providers.

    Subclasses name themselves through get_provider_name() and report
    progress with _set_status(); an error status keeps the message of the
    failure in last_error until the next transition.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config: Dict[str, Any] = dict(config or {})
        self._status = ProviderStatus.UNKNOWN
        self._last_error: Optional[str] = None
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def status(self) -> ProviderStatus:
        return self._status

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def is_available(self) -> bool:
        return self._status == ProviderStatus.AVAILABLE

    def _set_status(self, status: ProviderStatus, error: Optional[str] = None) -> None:
        previous, self._status = self._status, status
        self._last_error = error
        if error:
            self.logger.error(f"{self.get_provider_name()}: {previous.value} -> {status.value}: {error}")
        else:
            self.logger.debug(f"{self.get_provider_name()}: {previous.value} -> {status.value}")

    @abstractmethod
    def get_provider_name(self) -> str:
        """Unique provider identifier"""
        pass

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """Configuration value, or default when the key is absent"""
        return self.config.get(key, default)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.get_provider_name()} {self._status.value}>"
