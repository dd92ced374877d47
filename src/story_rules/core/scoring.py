"""Pattern-based craft metrics and melodrama/nuance heuristics."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Final

from story_rules.core.ruleset_schema import RulesetMetrics

EARLY_WINDOW_FRACTION: Final[float] = 0.2
SPEECH_MIN_CHARS: Final[int] = 150

ABSOLUTE_WORDS = re.compile(
    r"\b(?:always|never|everything|nothing|everyone|no one|nobody|forever|"
    r"completely|totally|absolutely|the entire world)\b",
    flags=re.IGNORECASE,
)
TWIST_KEYWORDS = re.compile(
    r"\b(?:twists?|reveal(?:s|ed|ing)?|turns out|secretly|all along|"
    r"betray(?:s|ed|al)?|unmask(?:s|ed)?|the truth is)\b",
    flags=re.IGNORECASE,
)
CONSPIRACY_MARKERS = re.compile(
    r"\b(?:conspiracy|conspirators?|cover[- ]up|cabal|puppet ?masters?|"
    r"pull(?:s|ed|ing)? (?:the )?strings|shadow (?:government|council)|"
    r"(?:in|from) the shadows|they(?:'re| are) watching)\b",
    flags=re.IGNORECASE,
)
SHOCK_WORDS = re.compile(
    r"\b(?:explosions?|explodes?|exploded|murder(?:s|ed)?|killed|massacre|"
    r"gunshots?|shot dead|bomb(?:s|ed|ing)?|stabbed|blood|corpse|dead body)\b",
    flags=re.IGNORECASE,
)
LONG_SPEECH = re.compile(
    r"[\"“]([^\"“”]+)[\"”]"
    r"|(?<!\w)['‘]((?:[^'‘’]|(?<=\w)['’](?=\w))+)['’](?!\w)"
)
NAMED_FACTIONS = re.compile(
    r"\b[Tt]he (?:[A-Z][\w'-]+ )*(?:Council|Cartel|Syndicate|Agency|Order|Brotherhood|"
    r"Guild|Clan|Federation|Coalition|Militia|Cult|Directorate|Consortium)\b"
)
PLOT_THREAD_MARKERS = re.compile(
    r"\b(?:meanwhile|subplot|at the same time|elsewhere|across town|back at the)\b",
    flags=re.IGNORECASE,
)
NEW_CHARACTER_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(
        r"\b(?:we meet|introducing|enters for the first time|"
        r"a (?:man|woman|stranger|newcomer|girl|boy|kid) named|"
        r"(?:new|newly arrived) (?:neighbou?r|hire|recruit|partner|student))\b",
        flags=re.IGNORECASE,
    ),
    re.compile(r"\b[A-Z][A-Z'-]+(?: [A-Z][A-Z'-]+)? \((?:\d0s|\d{2}|early \d0s|late \d0s)\)"),
)
SUBTEXT_MARKERS = re.compile(
    r"\b(?:doesn't say|does not say|unspoken|changes the subject|says nothing|"
    r"looks away|almost says|hesitates|avoids (?:his|her|their|the) (?:eyes|gaze|question)|"
    r"leaves (?:it|the question) unanswered)\b",
    flags=re.IGNORECASE,
)
QUIET_BEAT_MARKERS = re.compile(
    r"\b(?:silence|silent|quietly|stillness|sits with|lingers|"
    r"breathes|alone with|the hum of|rain against)\b",
    flags=re.IGNORECASE,
)
MEANING_SHIFT_MARKERS = re.compile(
    r"\b(?:realizes|realises|realized|understands now|for the first time|"
    r"sees (?:it|him|her|them) differently|it was never about|what (?:it|this) really meant)\b",
    flags=re.IGNORECASE,
)
LEGITIMACY_MARKERS = re.compile(
    r"\b(?:has a point|isn't wrong|is not wrong|had no choice|to protect (?:his|her|their)|"
    r"for (?:his|her|their) (?:family|people|daughter|son)|from (?:his|her|their) side)\b",
    flags=re.IGNORECASE,
)
COST_OF_ACTION_MARKERS = re.compile(
    r"\b(?:cost (?:him|her|them|us|me)|at the price of|gives up|gave up|"
    r"sacrific(?:e|es|ed|ing)|consequences?|pays? the price|paid the price|"
    r"lost (?:his|her|their) job)\b",
    flags=re.IGNORECASE,
)


def word_count(text: str) -> int:
    """Count whitespace-separated tokens in any script."""
    return len(text.split())


def _count(pattern: re.Pattern[str], text: str) -> int:
    return sum(1 for _ in pattern.finditer(text))


def _count_all(patterns: Iterable[re.Pattern[str]], text: str) -> int:
    return sum(_count(pattern, text) for pattern in patterns)


def _per_thousand(count: int, words: int) -> float:
    return count * 1000 / words


def _long_speeches(text: str) -> int:
    return sum(
        1
        for match in LONG_SPEECH.finditer(text)
        if len(match.group(1) or match.group(2)) > SPEECH_MIN_CHARS
    )


def compute_ruleset_metrics(text: str) -> RulesetMetrics:
    """Extract frequency-based craft signals from raw candidate text."""
    words = word_count(text)
    if words == 0:
        return RulesetMetrics()

    early_window = text[: int(len(text) * EARLY_WINDOW_FRACTION)]
    # short texts report the raw introduction count
    introductions = _count_all(NEW_CHARACTER_PATTERNS, text) / max(1.0, words / 1000)
    return RulesetMetrics(
        absolute_words_rate=_per_thousand(_count(ABSOLUTE_WORDS, text), words),
        twist_keyword_rate=_per_thousand(_count(TWIST_KEYWORDS, text), words),
        conspiracy_markers=_count(CONSPIRACY_MARKERS, text),
        shock_events_early=_count(SHOCK_WORDS, early_window),
        speech_length_proxy=_long_speeches(text),
        named_factions=_count(NAMED_FACTIONS, text),
        plot_thread_count=_count(PLOT_THREAD_MARKERS, text),
        new_character_density=introductions,
        subtext_scene_count=_count(SUBTEXT_MARKERS, text),
        quiet_beats_count=_count(QUIET_BEAT_MARKERS, text),
        meaning_shift_count=_count(MEANING_SHIFT_MARKERS, text),
        antagonist_legitimacy=LEGITIMACY_MARKERS.search(text) is not None,
        cost_of_action_markers=_count(COST_OF_ACTION_MARKERS, text),
    )


def _capped(value: float, scale: float) -> float:
    return min(1.0, value / scale)


def compute_ruleset_melodrama_score(metrics: RulesetMetrics) -> float:
    """Weighted 0-1 estimate of sensational excess."""
    score = (
        _capped(metrics.absolute_words_rate, 10) * 0.2
        + _capped(metrics.twist_keyword_rate, 8) * 0.2
        + _capped(metrics.conspiracy_markers, 5) * 0.15
        + _capped(metrics.shock_events_early, 3) * 0.2
        + _capped(metrics.speech_length_proxy, 4) * 0.1
        + _capped(metrics.named_factions, 8) * 0.15
    )
    return max(0.0, min(1.0, score))


def compute_ruleset_nuance_score(metrics: RulesetMetrics) -> float:
    """Weighted 0-1 estimate of craft restraint."""
    restraint = 1.0 - min(1.0, (metrics.twist_keyword_rate + metrics.conspiracy_markers) / 10)
    score = (
        _capped(metrics.subtext_scene_count, 3) * 0.25
        + _capped(metrics.quiet_beats_count, 2) * 0.2
        + (0.2 if metrics.meaning_shift_count > 0 else 0.0)
        + (0.15 if metrics.antagonist_legitimacy else 0.0)
        + _capped(metrics.cost_of_action_markers, 2) * 0.1
        + restraint * 0.1
    )
    return max(0.0, min(1.0, score))


def forbidden_move_pattern(move: str) -> re.Pattern[str]:
    """Case-insensitive, separator-tolerant pattern for one move name."""
    body = re.escape(move.strip()).replace("_", "[_ ]?")
    return re.compile(rf"\b{body}\b", flags=re.IGNORECASE)


def detect_forbidden_moves(text: str, forbidden: Sequence[str]) -> list[str]:
    """Return the forbidden move names that appear in ``text``."""
    found: list[str] = []
    for move in forbidden:
        if not move.strip():
            continue
        if forbidden_move_pattern(move).search(text):
            found.append(move)
    return found
