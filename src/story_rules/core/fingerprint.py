"""Structural fingerprints for template-similarity risk."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from story_rules.core.ruleset_schema import EngineProfile, Lane

_WORD_TOKEN = re.compile(r"[A-Za-z']+")
_STOPWORDS: Final[frozenset[str]] = frozenset(
    {
        "about",
        "after",
        "again",
        "because",
        "before",
        "being",
        "could",
        "from",
        "have",
        "into",
        "just",
        "more",
        "only",
        "over",
        "said",
        "says",
        "should",
        "that",
        "their",
        "them",
        "then",
        "there",
        "they",
        "this",
        "through",
        "were",
        "what",
        "when",
        "where",
        "which",
        "while",
        "with",
        "would",
        "your",
    }
)
_OPENING_CUES: Final[dict[str, frozenset[str]]] = {
    "death": frozenset({"dies", "died", "death", "funeral", "killed", "body"}),
    "arrival": frozenset({"arrives", "arrived", "returns", "moves", "lands", "stranger"}),
    "discovery": frozenset({"finds", "found", "discovers", "uncovers", "letter", "notices"}),
    "betrayal": frozenset({"betrays", "betrayed", "lies", "cheats", "steals", "framed"}),
    "accident": frozenset({"crash", "accident", "fire", "collapse", "falls", "flood"}),
}
KEYWORD_LIMIT: Final[int] = 8


@dataclass(frozen=True)
class RulesetFingerprint:
    """Coarse structural signature of one candidate text."""

    lane: Lane
    story_engine: str
    causal_grammar: str
    conflict_mode: str
    opening_device: str
    keywords: tuple[str, ...] = ()


def _tokens(text: str) -> list[str]:
    return [token.lower() for token in _WORD_TOKEN.findall(text)]


def _opening_device(text: str) -> str:
    opening = set(_tokens(text[: max(1, int(len(text) * 0.2))]))
    best = "none"
    best_hits = 0
    for device in sorted(_OPENING_CUES):
        hits = len(opening & _OPENING_CUES[device])
        if hits > best_hits:
            best, best_hits = device, hits
    return best


def _top_keywords(text: str) -> tuple[str, ...]:
    counts = Counter(
        token for token in _tokens(text) if len(token) >= 4 and token not in _STOPWORDS
    )
    ranked = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
    return tuple(token for token, _ in ranked[:KEYWORD_LIMIT])


def compute_ruleset_fingerprint(text: str, profile: EngineProfile) -> RulesetFingerprint:
    return RulesetFingerprint(
        lane=profile.lane,
        story_engine=profile.engine.story_engine,
        causal_grammar=profile.engine.causal_grammar,
        conflict_mode=profile.engine.conflict_mode,
        opening_device=_opening_device(text),
        keywords=_top_keywords(text),
    )


def _jaccard(left: tuple[str, ...], right: tuple[str, ...]) -> float:
    left_set, right_set = set(left), set(right)
    if not left_set and not right_set:
        return 1.0
    return len(left_set & right_set) / len(left_set | right_set)


def _pair_similarity(left: RulesetFingerprint, right: RulesetFingerprint) -> float:
    return (
        0.2 * (left.story_engine == right.story_engine)
        + 0.15 * (left.causal_grammar == right.causal_grammar)
        + 0.2 * (left.conflict_mode == right.conflict_mode)
        + 0.15 * (left.opening_device == right.opening_device)
        + 0.3 * _jaccard(left.keywords, right.keywords)
    )


def compute_ruleset_similarity_risk(
    fingerprint: RulesetFingerprint,
    recent: Sequence[RulesetFingerprint],
) -> float:
    """Highest structural overlap with any recent fingerprint, in [0, 1]."""
    if not recent:
        return 0.0
    risk = max(_pair_similarity(fingerprint, other) for other in recent)
    return max(0.0, min(1.0, risk))
