"""Fuzzy matching of query tokens against known entity names.

Similarity is normalized Levenshtein:
    (max(len(a), len(b)) - distance(a, b)) / max(len(a), len(b))
computed case-insensitively, so it is symmetric and lies in [0, 1].
"""

import logging
from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

from tracker.domain.entities import EntityMatch, MatchType

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.6
# At or above this similarity the match is not second-guessed with a suggestion.
SUGGESTION_CEILING = 0.9


class FuzzyMatcher:
    """Finds the closest known name to a candidate token.

    Degrades to ``None`` (no match) on any failure.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        suggestion_ceiling: float = SUGGESTION_CEILING,
    ):
        self._threshold = threshold
        self._suggestion_ceiling = suggestion_ceiling

    @staticmethod
    def similarity(a: str, b: str) -> float:
        """Normalized, case-insensitive Levenshtein similarity."""
        left, right = a.lower(), b.lower()
        longest = max(len(left), len(right))
        if longest == 0:
            return 1.0
        return (longest - Levenshtein.distance(left, right)) / longest

    def match(self, candidate: str, pool: Iterable[str]) -> EntityMatch | None:
        """Return the best pool member at or above the threshold, else None.

        Ties keep the first member encountered in pool order.
        """
        try:
            best_value: str | None = None
            best_score = 0.0
            for value in pool:
                score = self.similarity(candidate, value)
                if score >= self._threshold and score > best_score:
                    best_value, best_score = value, score

            if best_value is None:
                return None

            if best_score >= 1.0:
                return EntityMatch(
                    matched_value=best_value,
                    confidence=1.0,
                    match_type=MatchType.EXACT,
                )

            suggestion = None
            if best_score < self._suggestion_ceiling:
                suggestion = f"Did you mean '{best_value}'?"
            return EntityMatch(
                matched_value=best_value,
                confidence=round(best_score, 4),
                match_type=MatchType.FUZZY,
                suggestion=suggestion,
            )
        except Exception as exc:
            logger.warning("Fuzzy match failed for %r: %s", candidate, exc)
            return None
