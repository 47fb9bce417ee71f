"""
Configuration Models - Pydantic models for type-safe configuration

Settings of the NLU manager:
- Registered languages and locale-guessing policy
- Classifier training hyperparameters
- Named entity matching thresholds
- Persistence defaults

Requires: pydantic>=2.0.0, pydantic-settings>=2.0.0
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_MODEL_FILE = "model.nlp"
DEFAULT_EXCEL_FILE = "model.xls"

class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class ClassifierSettings(BaseModel):
    """Logistic regression training configuration"""
    iterations: int = Field(default=1000, ge=1, description="Maximum solver iterations per label")
    regularization: float = Field(default=1e-4, gt=0, description="L2 regularization strength of the mean loss")

class NerSettings(BaseModel):
    """Named entity recognition configuration"""
    threshold: float = Field(default=0.8, description="Minimum similarity for fuzzy enum entity matches")

    @field_validator('threshold')
    @classmethod
    def validate_threshold(cls, v):
        if v < 0.0 or v > 1.0:
            raise ValueError("NER threshold must be between 0.0 and 1.0")
        return v

class NluSettings(BaseSettings):
    """Main configuration of the multi-locale NLU manager"""

    languages: List[str] = Field(default_factory=list, description="Locales registered at construction")
    full_search_when_guessed: bool = Field(
        default=True,
        description="Classify against every locale when the locale had to be guessed"
    )
    use_nlg: bool = Field(default=True, description="Resolve and render answers during process()")
    model_file: str = Field(default=DEFAULT_MODEL_FILE, description="Default persisted model filename")
    sparse_zero_index_compat: bool = Field(
        default=False,
        description="Drop feature column 0 when encoding sparse observations (legacy model files)"
    )
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings, description="Classifier configuration")
    ner: NerSettings = Field(default_factory=NerSettings, description="Named entity configuration")

    model_config = {
        "env_prefix": "MULTINLU_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "protected_namespaces": (),
    }

    @field_validator('languages', mode='before')
    @classmethod
    def validate_languages(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

def create_default_settings(languages: Optional[List[str]] = None) -> NluSettings:
    """Create default settings, optionally registering some languages"""
    settings = NluSettings()
    if languages:
        settings.languages = list(languages)
    return settings
