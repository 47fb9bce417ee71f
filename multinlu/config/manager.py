"""
Configuration Manager - settings files for the NLU manager

Settings live in TOML (preferred) or JSON files. Values missing from the
file fall back to the model defaults; environment variables with the
MULTINLU_ prefix apply only when no file is found.

Requires: pydantic>=2.0.0, tomli-w>=1.0.0
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import tomllib

import tomli_w  # type: ignore
from pydantic import ValidationError  # type: ignore

from .models import NluSettings

logger = logging.getLogger(__name__)

SEARCH_PATHS = (
    Path("multinlu.toml"),
    Path("multinlu.json"),
    Path.home() / ".config" / "multinlu" / "config.toml",
)

_PARSERS: Dict[str, Callable[[str], Dict[str, Any]]] = {
    ".toml": tomllib.loads,
    ".json": json.loads,
}

_FORMATTERS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    ".toml": tomli_w.dumps,
    ".json": lambda data: json.dumps(data, indent=2, ensure_ascii=False),
}


class ConfigValidationError(Exception):
    """Raised when a settings file cannot be parsed or validated"""
    pass


class ConfigManager:
    """
    Loads and saves NluSettings.

    File parsing and writing run in a worker thread; loaded and saved
    settings are remembered per path.
    """

    def __init__(self):
        self._cache: Dict[str, NluSettings] = {}

    async def load_config(self, config_path: Optional[Path] = None) -> NluSettings:
        """
        Load settings from a file, auto-detecting it when no path is given.

        Raises:
            ConfigValidationError: unsupported suffix, syntax error or
                invalid values
        """
        path = Path(config_path) if config_path is not None else self._find_config_file()

        if not path.exists():
            logger.warning(f"No settings file at {path}, using defaults and environment")
            return self._from_environment()

        parser = _PARSERS.get(path.suffix.lower())
        if parser is None:
            raise ConfigValidationError(f"Unsupported settings format '{path.suffix}' ({path})")

        text = await asyncio.to_thread(path.read_text, encoding='utf-8')
        try:
            data = await asyncio.to_thread(parser, text)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
            raise ConfigValidationError(f"Could not parse {path}: {e}") from e

        settings = self._validate(data, path)
        self._cache[str(path)] = settings
        logger.info(f"Loaded settings from: {path}")
        return settings

    async def save_config(self, config: NluSettings, config_path: Optional[Path] = None) -> bool:
        """
        Write settings to a file, creating parent directories.

        Returns:
            True on success; failures are logged and reported as False
        """
        path = Path(config_path) if config_path is not None else self._find_config_file()

        formatter = _FORMATTERS.get(path.suffix.lower())
        if formatter is None:
            logger.error(f"Cannot save settings to {path}: unsupported format '{path.suffix}'")
            return False

        try:
            text = await asyncio.to_thread(formatter, config.model_dump(mode="json"))
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_text, text, encoding='utf-8')
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save settings to {path}: {e}")
            return False

        self._cache[str(path)] = config
        logger.info(f"Saved settings to: {path}")
        return True

    def get_cached(self, config_path: Path) -> Optional[NluSettings]:
        """Settings last loaded from or saved to a path"""
        return self._cache.get(str(config_path))

    def _find_config_file(self) -> Path:
        for path in SEARCH_PATHS:
            if path.exists():
                return path
        return SEARCH_PATHS[0]

    def _from_environment(self) -> NluSettings:
        try:
            return NluSettings()
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid MULTINLU_* environment settings: {e}") from e

    def _validate(self, data: Dict[str, Any], path: Path) -> NluSettings:
        try:
            return NluSettings.model_validate(data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid settings in {path}: {e}") from e
