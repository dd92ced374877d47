"""Style benchmark pacing presets by lane and pacing feel.

Comps may suggest a benchmark or feel, but raw beats-per-minute values only
ever come from these tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from story_rules.core.ruleset_schema import BeatsPerMinute, EngineProfile

PacingFeel = Literal["calm", "standard", "punchy", "frenetic"]
StyleBenchmark = Literal[
    "glossy_comedy",
    "romantic_banter",
    "kdrama_romance",
    "workplace_power_games",
    "thriller_mystery",
    "prestige_intimate",
    "soap_melodrama",
    "youth_aspirational",
    "satire_systems",
    "action_pulse",
]

PACING_FEEL_LABELS: Final[dict[PacingFeel, str]] = {
    "calm": "Calm",
    "standard": "Standard",
    "punchy": "Punchy",
    "frenetic": "Frenetic",
}
STYLE_BENCHMARK_LABELS: Final[dict[StyleBenchmark, tuple[str, str]]] = {
    "glossy_comedy": ("Glossy Comedy", "Light, fast, aspirational comedy energy"),
    "romantic_banter": ("Romantic Banter", "Dialogue-driven romance with verbal sparring"),
    "kdrama_romance": ("K-Drama Romance", "Yearning, misalignment and emotional beats"),
    "workplace_power_games": (
        "Workplace Power Games",
        "Leverage, status moves and subtext-heavy scenes",
    ),
    "thriller_mystery": ("Thriller / Mystery", "Controlled reveals and suspense architecture"),
    "prestige_intimate": ("Prestige Intimate", "Restrained, character-driven, high subtext"),
    "soap_melodrama": ("Soap / Melodrama", "High emotion turns, cliffhangers, fast reversals"),
    "youth_aspirational": ("Youth Aspirational", "Glossy coming-of-age, micro-turns, identity"),
    "satire_systems": ("Satire / Systems", "Institutional antagonists, dark comedy, irony"),
    "action_pulse": ("Action Pulse", "Obstacle/solution cadence, physical tension"),
}


@dataclass(frozen=True)
class DialoguePreset:
    subtext_ratio_target: float
    monologue_max_lines: int


@dataclass(frozen=True)
class BenchmarkResult:
    """Pacing minimums resolved for one lane, feel and benchmark."""

    bpm_min: float
    bpm_target: float
    bpm_max: float
    quiet_beats_min: int
    subtext_scenes_min: int
    meaning_shifts_min_per_act: int
    dialogue: DialoguePreset | None = None


@dataclass(frozen=True)
class _FeelBaseline:
    bpm: tuple[float, float, float]
    quiet: int
    subtext: int
    meaning: int


@dataclass(frozen=True)
class _BenchmarkModifier:
    # target delta per lane group: vertical, feature, other
    target_delta: tuple[float, float, float]
    quiet_delta: int = 0
    subtext_delta: int = 0
    meaning_min: int | None = None
    dialogue: DialoguePreset | None = None


_LANE_BASELINES: Final[dict[str, dict[PacingFeel, _FeelBaseline]]] = {
    "vertical_drama": {
        "calm": _FeelBaseline((2.5, 3.0, 4.0), 2, 3, 1),
        "standard": _FeelBaseline((2.8, 3.6, 4.8), 1, 2, 1),
        "punchy": _FeelBaseline((3.2, 4.2, 5.5), 1, 2, 1),
        "frenetic": _FeelBaseline((4.0, 5.2, 6.2), 0, 1, 1),
    },
    "feature_film": {
        "calm": _FeelBaseline((0.8, 1.4, 2.4), 4, 5, 1),
        "standard": _FeelBaseline((1.0, 2.0, 3.2), 3, 4, 1),
        "punchy": _FeelBaseline((1.6, 2.6, 4.0), 2, 3, 1),
        "frenetic": _FeelBaseline((2.0, 3.2, 4.8), 1, 2, 1),
    },
    "series": {
        "calm": _FeelBaseline((1.0, 2.0, 3.0), 3, 4, 1),
        "standard": _FeelBaseline((1.5, 2.5, 3.8), 2, 3, 1),
        "punchy": _FeelBaseline((2.0, 3.0, 4.5), 1, 2, 1),
        "frenetic": _FeelBaseline((2.5, 3.8, 5.5), 1, 1, 1),
    },
    "documentary": {
        "calm": _FeelBaseline((0.5, 1.0, 1.8), 4, 3, 1),
        "standard": _FeelBaseline((0.8, 1.4, 2.2), 3, 2, 1),
        "punchy": _FeelBaseline((1.0, 1.8, 3.0), 2, 2, 1),
        "frenetic": _FeelBaseline((1.2, 2.2, 3.5), 1, 1, 1),
    },
}

_BENCHMARK_MODIFIERS: Final[dict[StyleBenchmark, _BenchmarkModifier]] = {
    "glossy_comedy": _BenchmarkModifier(
        (0.3, 0.2, 0.2), dialogue=DialoguePreset(0.40, 4)
    ),
    "romantic_banter": _BenchmarkModifier(
        (0.1, 0.1, 0.1), subtext_delta=1, dialogue=DialoguePreset(0.60, 4)
    ),
    "kdrama_romance": _BenchmarkModifier(
        (0.0, 0.0, 0.0),
        quiet_delta=1,
        subtext_delta=1,
        meaning_min=1,
        dialogue=DialoguePreset(0.55, 5),
    ),
    "workplace_power_games": _BenchmarkModifier(
        (0.0, 0.0, 0.0), subtext_delta=1, dialogue=DialoguePreset(0.65, 5)
    ),
    "thriller_mystery": _BenchmarkModifier(
        (0.0, 0.0, 0.0), meaning_min=1, dialogue=DialoguePreset(0.50, 6)
    ),
    "prestige_intimate": _BenchmarkModifier(
        (-0.4, -0.4, -0.3), quiet_delta=1, subtext_delta=1, dialogue=DialoguePreset(0.70, 8)
    ),
    "soap_melodrama": _BenchmarkModifier(
        (0.6, 0.4, 0.5), dialogue=DialoguePreset(0.35, 5)
    ),
    "youth_aspirational": _BenchmarkModifier(
        (0.0, 0.0, 0.0), subtext_delta=1, dialogue=DialoguePreset(0.45, 4)
    ),
    "satire_systems": _BenchmarkModifier(
        (0.0, 0.0, 0.0), subtext_delta=1, meaning_min=2, dialogue=DialoguePreset(0.55, 6)
    ),
    "action_pulse": _BenchmarkModifier(
        (0.4, 0.4, 0.3), quiet_delta=-1, dialogue=DialoguePreset(0.30, 3)
    ),
}


def _delta_slot(lane: str) -> int:
    if lane == "vertical_drama":
        return 0
    if lane == "feature_film":
        return 1
    return 2


def get_benchmark_defaults(
    lane: str,
    benchmark: StyleBenchmark | None,
    feel: PacingFeel,
) -> BenchmarkResult:
    """Resolve pacing defaults for a lane and feel, adjusted by an optional benchmark."""
    lane_table = _LANE_BASELINES.get(lane, _LANE_BASELINES["feature_film"])
    base = lane_table[feel]
    bpm_min, bpm_target, bpm_max = base.bpm
    if benchmark is None:
        return BenchmarkResult(
            bpm_min=bpm_min,
            bpm_target=bpm_target,
            bpm_max=bpm_max,
            quiet_beats_min=base.quiet,
            subtext_scenes_min=base.subtext,
            meaning_shifts_min_per_act=base.meaning,
        )

    modifier = _BENCHMARK_MODIFIERS[benchmark]
    delta = modifier.target_delta[_delta_slot(lane)]
    meaning = base.meaning
    if modifier.meaning_min is not None:
        meaning = max(meaning, modifier.meaning_min)
    return BenchmarkResult(
        bpm_min=round(bpm_min + delta * 0.5, 1),
        bpm_target=round(bpm_target + delta, 1),
        bpm_max=round(bpm_max + delta * 0.5, 1),
        quiet_beats_min=max(0, base.quiet + modifier.quiet_delta),
        subtext_scenes_min=max(0, base.subtext + modifier.subtext_delta),
        meaning_shifts_min_per_act=meaning,
        dialogue=modifier.dialogue,
    )


def get_default_feel(lane: str) -> PacingFeel:
    if lane == "vertical_drama":
        return "punchy"
    if lane == "documentary":
        return "calm"
    return "standard"


def get_default_benchmark(lane: str) -> StyleBenchmark:
    if lane == "vertical_drama":
        return "workplace_power_games"
    if lane == "documentary":
        return "prestige_intimate"
    return "thriller_mystery"


def apply_benchmark(
    profile: EngineProfile,
    benchmark: StyleBenchmark | None,
    feel: PacingFeel,
) -> EngineProfile:
    """Return a copy of ``profile`` with benchmark pacing and dialogue presets applied."""
    result = get_benchmark_defaults(profile.lane, benchmark, feel)
    updated = profile.model_copy(deep=True)
    pacing = updated.pacing_profile
    pacing.beats_per_minute = BeatsPerMinute(
        min=max(0.0, result.bpm_min),
        target=max(0.0, result.bpm_target),
        max=max(0.0, result.bpm_max),
    )
    pacing.quiet_beats_min = result.quiet_beats_min
    pacing.subtext_scenes_min = result.subtext_scenes_min
    pacing.meaning_shifts_min_per_act = result.meaning_shifts_min_per_act
    if result.dialogue is not None:
        updated.dialogue_rules.subtext_ratio_target = result.dialogue.subtext_ratio_target
        updated.dialogue_rules.monologue_max_lines = result.dialogue.monologue_max_lines
    return updated
