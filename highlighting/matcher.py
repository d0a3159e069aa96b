"""
Keyword matching over a single line of text.
"""

import re
from enum import Enum
from typing import Iterable, Optional

import structlog

from config import settings
from highlighting.exceptions import InvalidKeywordError
from highlighting.models import Match

logger = structlog.get_logger()


class MatchMode(str, Enum):
    """How keywords are interpreted."""
    PATTERN = "pattern"  # keyword is a regular expression
    LITERAL = "literal"  # keyword is plain text


class KeywordMatcher:
    """
    Case-insensitive search for several keywords at once.

    Each keyword is scanned independently from left to right; its own
    matches never overlap, but matches of different keywords may, and all
    of them are kept.

    In PATTERN mode the keyword is compiled as-is, so "a.c" matches "abc".
    LITERAL mode escapes it first.
    """

    def __init__(self, keywords: Iterable[str], mode: Optional[MatchMode] = None):
        self.mode = MatchMode(mode or settings.MATCH_MODE)
        self.keywords = [keyword for keyword in keywords if keyword]
        self._patterns = [(keyword, self._compile(keyword)) for keyword in self.keywords]

    def _compile(self, keyword: str) -> re.Pattern:
        source = re.escape(keyword) if self.mode == MatchMode.LITERAL else keyword
        try:
            return re.compile(source, re.IGNORECASE)
        except re.error as e:
            logger.warning("Invalid keyword pattern", keyword=keyword, error=str(e))
            raise InvalidKeywordError(f"Invalid keyword pattern {keyword!r}: {e}") from e

    def find_matches(self, text: str) -> list[Match]:
        """
        Find all keyword matches in text.

        Returns:
            Matches grouped by keyword in input order, each group left to right
        """
        matches = []
        for keyword, pattern in self._patterns:
            matches.extend(self.find_keyword(keyword, pattern, text))
        return matches

    @staticmethod
    def find_keyword(keyword: str, pattern: re.Pattern, text: str) -> list[Match]:
        # Zero-length matches have nothing to highlight
        return [
            Match(
                keyword=keyword,
                start_offset=found.start(),
                end_offset=found.end(),
                matched_text=found.group(0),
            )
            for found in pattern.finditer(text)
            if found.end() > found.start()
        ]

    @property
    def patterns(self) -> list[tuple[str, re.Pattern]]:
        return list(self._patterns)
