import re
from typing import Iterable, Mapping, Optional

MAX_DEPARTMENT_WORDS = 6
MAX_DEPARTMENT_CHARS = 40
MIN_PARTIAL_MATCH_CHARS = 3

SKIP_DEPARTMENT_PHRASES = {"skip", "none", "n/a", "na", "no team", "prefer not to say"}

QUESTION_STARTERS = {
    "how",
    "what",
    "why",
    "when",
    "where",
    "which",
    "who",
    "can",
    "could",
    "should",
    "would",
    "is",
    "are",
    "do",
    "does",
    "any",
    "i",
    "i'm",
    "im",
    "we",
    "we're",
    "my",
    "our",
    "need",
    "looking",
    "trying",
    "help",
}

QUESTION_PHRASES = (
    "i need",
    "i want",
    "looking for",
    "trying to",
    "help me",
    "is there",
    "how do",
    "how can",
    "automate",
)

_WHITESPACE_RE = re.compile(r"\s+")
_EDGE_PUNCT_RE = re.compile(r"^[^\w]+|[^\w?]+$")


def normalize_department_text(text: str | None) -> str:
    collapsed = _WHITESPACE_RE.sub(" ", (text or "").strip().lower())
    collapsed = _EDGE_PUNCT_RE.sub("", collapsed)
    for suffix in (" team", " department", " dept"):
        if collapsed.endswith(suffix):
            collapsed = collapsed[: -len(suffix)].strip()
    return collapsed


def _canonical_team(name: str, teams: Iterable[str]) -> str:
    for team in teams:
        if team.lower() == name.lower():
            return team
    return name


def _contains(haystack: str, needle: str) -> bool:
    # Short names like "hr" or "cs" only count as whole words.
    if len(needle) < MIN_PARTIAL_MATCH_CHARS:
        return re.search(rf"(?<!\w){re.escape(needle)}(?!\w)", haystack) is not None
    return needle in haystack


def resolve_department(
    text: str | None,
    teams: Iterable[str],
    aliases: Mapping[str, str] | None = None,
) -> Optional[str]:
    """Resolve free text to a canonical team name.

    Tiers, first match wins: exact team name, exact alias, then substring
    containment in either direction against team names and aliases.
    """
    teams = list(teams)
    aliases = {k.strip().lower(): v for k, v in (aliases or {}).items()}
    normalized = normalize_department_text(text)
    if not normalized:
        return None

    for team in teams:
        if team.lower() == normalized:
            return team

    if normalized in aliases:
        return _canonical_team(aliases[normalized], teams)

    allow_partial = len(normalized) >= MIN_PARTIAL_MATCH_CHARS
    for team in teams:
        lowered = team.lower()
        if _contains(normalized, lowered) or (allow_partial and normalized in lowered):
            return team

    for alias, target in aliases.items():
        if _contains(normalized, alias) or (allow_partial and normalized in alias):
            return _canonical_team(target, teams)

    return None


def is_skip_department(text: str | None) -> bool:
    return normalize_department_text(text) in SKIP_DEPARTMENT_PHRASES


def looks_like_question(text: str | None) -> bool:
    """Heuristic: does this read like a problem statement rather than a team name?"""
    stripped = (text or "").strip()
    if not stripped:
        return False
    if "?" in stripped:
        return True

    lowered = stripped.lower()
    words = lowered.split()
    if len(words) > MAX_DEPARTMENT_WORDS or len(stripped) > MAX_DEPARTMENT_CHARS:
        return True
    if words[0].strip(",.!") in QUESTION_STARTERS and len(words) > 1:
        return True
    return any(phrase in lowered for phrase in QUESTION_PHRASES)


def example_teams(teams: list[str], limit: int = 5) -> str:
    return ", ".join(teams[:limit])
