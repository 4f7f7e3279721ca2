"""Entity discovery — recognizes known people and projects in a query.

Matching runs in three passes per entity kind:
  1. Direct containment of a known name (exact, confidence 1.0).
  2. A textual pattern ("bob's tasks", "project apollo") resolved against the
     known names with the fuzzy matcher.
  3. "assigned to <name>" (people only), resolved the same way.

Whatever looks like a name but was not recognized is reported back as an
unknown entity together with spelling suggestions.
"""

import asyncio
import logging
import re
from dataclasses import replace

from tracker.application.services.entity_directory_cache import EntityDirectoryCache
from tracker.application.services.fuzzy_matcher import FuzzyMatcher
from tracker.domain.entities import (
    DiscoveredEntities,
    EntityMatch,
    MatchType,
    ProjectSummary,
)

logger = logging.getLogger(__name__)

POSSESSIVE_PATTERN = re.compile(r"([a-z]+)'s\s+(tasks|workload|projects|work)", re.IGNORECASE)
ASSIGNED_PATTERN = re.compile(r"assigned\s+to\s+([a-z]+)", re.IGNORECASE)
PROJECT_PATTERN = re.compile(r"project\s+([a-z\s]+)", re.IGNORECASE)
_CAPITALIZED_WORD = re.compile(r"\b[A-Z][a-z]+\b")
_NAME_SHAPE = re.compile(r"^[A-Z][a-z]+$")

# Pattern-derived matches at or above this similarity count as PATTERN, not FUZZY.
PATTERN_CONFIDENCE = 0.9
_MAX_UNKNOWN = 3
_PEOPLE_SAMPLE = 5

# Capitalized words that open commands rather than name someone.
_COMMAND_WORDS = frozenset({
    "show", "find", "list", "get", "what", "query", "analyze", "analyse",
    "assess", "how", "give", "display", "tell", "please", "check", "is", "are",
})

FAILURE_SUGGESTION = (
    "Unable to process query. Please try rephrasing or check network connectivity."
)


def contains_name(text: str, name: str) -> bool:
    """Whole-name substring, or whole-word match of a 3+ letter name component."""
    lowered_text = text.lower()
    lowered_name = name.lower().strip()
    if not lowered_name:
        return False
    if lowered_name in lowered_text:
        return True
    for word in lowered_name.split():
        if len(word) >= 3 and re.search(rf"\b{re.escape(word)}\b", lowered_text):
            return True
    return False


class EntityDiscovery:
    """Finds known people and projects mentioned in free text.

    Degrades to empty collections plus a generic rephrasing suggestion when
    anything goes wrong.
    """

    def __init__(self, directory_cache: EntityDirectoryCache, matcher: FuzzyMatcher):
        self._directory_cache = directory_cache
        self._matcher = matcher

    async def discover(self, query: str) -> DiscoveredEntities:
        try:
            people_pool, project_pool = await asyncio.gather(
                self._directory_cache.get_people(),
                self._directory_cache.get_projects(),
            )
            people = self.match_people(query, people_pool)
            projects = self.match_projects(query, project_pool)

            unknown = self._unknown_entities(query, people, projects)
            suggestions = self._suggestions(unknown, people, projects, people_pool)

            logger.debug(
                "Discovered people=%s projects=%s unknown=%s",
                [m.matched_value for m in people],
                [m.matched_value for m in projects],
                unknown,
            )
            return DiscoveredEntities(
                people=people,
                projects=projects,
                unknown_entities=unknown,
                suggestions=suggestions,
            )
        except Exception as exc:
            logger.warning("Entity discovery failed for %r: %s", query, exc)
            return DiscoveredEntities(suggestions=[FAILURE_SUGGESTION])

    # ── People ──────────────────────────────────────────────────────

    def match_people(self, query: str, pool: list[str]) -> list[EntityMatch]:
        try:
            text = query.lower()
            matches = [
                EntityMatch(
                    matched_value=person,
                    confidence=1.0,
                    match_type=MatchType.EXACT,
                    metadata={"source": "directory", "pattern": "direct_match"},
                )
                for person in pool
                if contains_name(text, person)
            ]

            for pattern, pattern_name in (
                (POSSESSIVE_PATTERN, "possessive"),
                (ASSIGNED_PATTERN, "assigned_to"),
            ):
                found = pattern.search(text)
                if not found:
                    continue
                match = self._pattern_match(found.group(1), pool, pattern_name, found.group(0))
                if match and not _already_matched(matches, match.matched_value):
                    matches.append(match)
            return matches
        except Exception as exc:
            logger.warning("People discovery failed: %s", exc)
            return []

    # ── Projects ────────────────────────────────────────────────────

    def match_projects(self, query: str, pool: list[ProjectSummary]) -> list[EntityMatch]:
        try:
            text = query.lower()
            matches = [
                EntityMatch(
                    matched_value=project.name,
                    confidence=1.0,
                    match_type=MatchType.EXACT,
                    metadata=_project_metadata(project, "direct_match"),
                )
                for project in pool
                if contains_name(text, project.name)
            ]

            found = PROJECT_PATTERN.search(text)
            if found:
                candidate = found.group(1).strip()
                match = self._pattern_match(
                    candidate, [p.name for p in pool], "project_keyword", found.group(0)
                )
                if match and not _already_matched(matches, match.matched_value):
                    project = next(p for p in pool if p.name == match.matched_value)
                    metadata = {**match.metadata, **_project_metadata(project, "project_keyword")}
                    matches.append(replace(match, metadata=metadata))
            return matches
        except Exception as exc:
            logger.warning("Project discovery failed: %s", exc)
            return []

    # ── Helpers ─────────────────────────────────────────────────────

    def _pattern_match(
        self, candidate: str, pool: list[str], pattern_name: str, original_text: str
    ) -> EntityMatch | None:
        match = self._matcher.match(candidate, pool)
        if match is None:
            return None

        match_type = match.match_type
        if match_type == MatchType.FUZZY and match.confidence >= PATTERN_CONFIDENCE:
            match_type = MatchType.PATTERN
        return replace(
            match,
            match_type=match_type,
            metadata={
                "source": "directory",
                "pattern": pattern_name,
                "original_text": original_text.strip(),
            },
        )

    @staticmethod
    def _unknown_entities(
        query: str, people: list[EntityMatch], projects: list[EntityMatch]
    ) -> list[str]:
        known: set[str] = set()
        for match in (*people, *projects):
            value = match.matched_value.lower()
            known.add(value)
            known.update(value.split())

        # The sentence-initial word is capitalized by convention, not because it is a name.
        candidates = [
            token.group(0)
            for token in _CAPITALIZED_WORD.finditer(query)
            if token.start() > 0 and token.group(0).lower() not in _COMMAND_WORDS
        ]
        possessive = POSSESSIVE_PATTERN.search(query)
        if possessive:
            candidates.append(possessive.group(1))

        unknown: list[str] = []
        for word in candidates:
            lowered = word.lower()
            if lowered in known or len(word) <= 2:
                continue
            if lowered in (u.lower() for u in unknown):
                continue
            unknown.append(word)
        return unknown[:_MAX_UNKNOWN]

    @staticmethod
    def _suggestions(
        unknown: list[str],
        people: list[EntityMatch],
        projects: list[EntityMatch],
        people_pool: list[str],
    ) -> list[str]:
        suggestions: list[str] = []
        if unknown:
            suggestions.append(
                f"I don't recognize: {', '.join(unknown)}. Please check the spelling."
            )
            if people_pool and any(_NAME_SHAPE.match(word) for word in unknown):
                suggestions.append(available_people_hint(people_pool))

        suggestions.extend(m.suggestion for m in (*people, *projects) if m.suggestion)
        return suggestions


def available_people_hint(people: list[str], limit: int = _PEOPLE_SAMPLE) -> str:
    """``Available people: a, b, c`` with a trailing ellipsis when truncated."""
    more = "..." if len(people) > limit else ""
    return f"Available people: {', '.join(people[:limit])}{more}"


def _already_matched(matches: list[EntityMatch], value: str) -> bool:
    return any(m.matched_value == value for m in matches)


def _project_metadata(project: ProjectSummary, pattern_name: str) -> dict[str, str]:
    return {
        "source": "directory",
        "pattern": pattern_name,
        "project_id": project.id,
        "status": project.status,
    }
