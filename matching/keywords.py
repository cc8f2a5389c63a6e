"""Ordered keyword tables mapping document phrases to canonical names."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from catalog.product_keywords import PRODUCT_KEYWORDS, SUBTYPE_KEYWORDS

logger = logging.getLogger(__name__)


@dataclass
class KeywordEntry:
    """Canonical name with the lowercase phrases that identify it."""
    canonical: str
    keywords: list[str] = field(default_factory=list)


class KeywordTable:
    """First-match keyword lookup over normalized text.

    Entry order is significant: the first entry with any keyword contained
    in the text wins.
    """

    def __init__(self, entries: list[KeywordEntry]) -> None:
        self.entries = entries

    @classmethod
    def from_config(cls, rows: list[dict]) -> KeywordTable:
        """Build a table from ``catalog.product_keywords`` style rows."""
        entries = [
            KeywordEntry(
                canonical=row["canonical"],
                keywords=[k.lower() for k in row.get("keywords", [])],
            )
            for row in rows
        ]
        return cls(entries)

    def lookup(self, text: str) -> str | None:
        """Return the canonical name of the first entry found in ``text``."""
        if not text:
            return None

        text_lower = text.lower()
        for entry in self.entries:
            for keyword in entry.keywords:
                if keyword in text_lower:
                    logger.debug(f"Keyword '{keyword}' matched '{entry.canonical}'")
                    return entry.canonical
        return None


PRODUCT_TABLE = KeywordTable.from_config(PRODUCT_KEYWORDS)
SUBTYPE_TABLE = KeywordTable.from_config(SUBTYPE_KEYWORDS)
