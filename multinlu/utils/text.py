"""
Text helpers shared by the classifier, entity matcher and language guesser.
"""

import re
import unicodedata
from typing import List, Optional

# %name% placeholders are single tokens, distinct from the plain word
_TOKEN_RE = re.compile(r"%[^%\s]+%|[^\W_]+", re.UNICODE)


def get_truncated_locale(locale: Optional[str]) -> Optional[str]:
    """
    Normalize a locale code to its two-letter language part.

    "en-US" -> "en", "ES" -> "es". Empty or missing locales stay None.
    """
    if not locale:
        return None
    return locale[:2].lower()


def normalize_text(text: str) -> str:
    """Casefold, strip combining marks and collapse whitespace"""
    text = unicodedata.normalize('NFKD', text.casefold())
    text = ''.join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r'\s+', ' ', text.strip())


def tokenize(text: str) -> List[str]:
    """Split normalized text into word tokens and %entity% placeholders"""
    return _TOKEN_RE.findall(normalize_text(text))
