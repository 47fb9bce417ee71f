"""
Excel Reader - bulk import of languages, entities, intents and answers

Workbook layout, one sheet per concern:

    Languages       language
    Named Entities  entity | option | language | text
    Intents         language | intent | utterance
    Responses       language | intent | response | condition

Texts and languages of a named entity row may hold several comma
separated values. Missing sheets are skipped.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Union

import pandas as pd

if TYPE_CHECKING:
    from ..core.manager import NluManager

logger = logging.getLogger(__name__)

LANGUAGES_SHEET = "Languages"
NAMED_ENTITIES_SHEET = "Named Entities"
INTENTS_SHEET = "Intents"
RESPONSES_SHEET = "Responses"


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class ExcelReader:
    """Populates an NluManager from a spreadsheet through its public methods"""

    def __init__(self, manager: "NluManager"):
        self.manager = manager

    def load(self, filename: Union[str, Path]) -> None:
        sheets = pd.read_excel(filename, sheet_name=None, dtype=str)
        logger.info(f"Loaded workbook {filename} with sheets: {list(sheets)}")
        self.load_sheets(sheets)

    def load_sheets(self, sheets: Dict[str, pd.DataFrame]) -> None:
        """Import already parsed sheets, keyed by sheet name"""
        frames = {name: frame.fillna("") for name, frame in sheets.items()}

        # Languages first: the other sheets need registered locales
        if LANGUAGES_SHEET in frames:
            self.load_languages(frames[LANGUAGES_SHEET])
        if NAMED_ENTITIES_SHEET in frames:
            self.load_named_entities(frames[NAMED_ENTITIES_SHEET])
        if INTENTS_SHEET in frames:
            self.load_intents(frames[INTENTS_SHEET])
        if RESPONSES_SHEET in frames:
            self.load_responses(frames[RESPONSES_SHEET])

    def load_languages(self, frame: pd.DataFrame) -> None:
        languages = [str(value).strip() for value in frame["language"] if str(value).strip()]
        self.manager.add_language(languages)

    def load_named_entities(self, frame: pd.DataFrame) -> None:
        count = 0
        for _, row in frame.iterrows():
            entity = str(row["entity"]).strip()
            option = str(row["option"]).strip()
            texts = _split(str(row["text"]))
            if not entity or not option or not texts:
                continue
            self.manager.add_named_entity_text(entity, option, _split(str(row["language"])), texts)
            count += 1
        logger.debug(f"Imported {count} named entity row(s)")

    def load_intents(self, frame: pd.DataFrame) -> None:
        count = 0
        for _, row in frame.iterrows():
            utterance = str(row["utterance"]).strip()
            intent = str(row["intent"]).strip()
            if not utterance or not intent:
                continue
            self.manager.add_document(str(row["language"]).strip() or None, utterance, intent)
            count += 1
        logger.debug(f"Imported {count} utterance(s)")

    def load_responses(self, frame: pd.DataFrame) -> None:
        count = 0
        for _, row in frame.iterrows():
            response = str(row["response"]).strip()
            if not response:
                continue
            condition = str(row.get("condition", "")).strip() or None
            self.manager.add_answer(str(row["language"]).strip(), str(row["intent"]).strip(), response, condition)
            count += 1
        logger.debug(f"Imported {count} response(s)")
