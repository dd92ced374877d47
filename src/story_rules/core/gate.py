"""Deterministic pass/fail gate for scored candidate text."""

from __future__ import annotations

from story_rules.core.ruleset_schema import EngineProfile, GateAttempt, GateFailure, RulesetMetrics
from story_rules.core.scoring import (
    compute_ruleset_melodrama_score,
    compute_ruleset_nuance_score,
    detect_forbidden_moves,
)

EARLY_SHOCK_LIMIT = 2
TWIST_RATE_PER_CAP = 3


def run_ruleset_gate(
    metrics: RulesetMetrics,
    text: str,
    profile: EngineProfile,
    similarity_risk: float,
    diversify_enabled: bool,
) -> GateAttempt:
    """Evaluate every gate condition and collect all failures in a fixed order."""
    thresholds = profile.gate_thresholds
    pacing = profile.pacing_profile
    melodrama_score = compute_ruleset_melodrama_score(metrics)
    nuance_score = compute_ruleset_nuance_score(metrics)
    failures: list[GateFailure] = []

    if melodrama_score > thresholds.melodrama_max:
        failures.append("MELODRAMA")
    if (
        metrics.plot_thread_count > thresholds.complexity_threads_max * 2
        or metrics.named_factions > thresholds.complexity_factions_max * 2
        or metrics.new_character_density > thresholds.complexity_core_chars_max
    ):
        failures.append("OVERCOMPLEXITY")
    if diversify_enabled and similarity_risk > thresholds.similarity_max:
        failures.append("TEMPLATE_SIMILARITY")
    if metrics.shock_events_early > EARLY_SHOCK_LIMIT:
        failures.append("STAKES_TOO_BIG_TOO_EARLY")
    if metrics.twist_keyword_rate > (profile.budgets.twist_cap + 1) * TWIST_RATE_PER_CAP:
        failures.append("TWIST_OVERUSE")
    if metrics.subtext_scene_count < pacing.subtext_scenes_min:
        failures.append("SUBTEXT_MISSING")
    if metrics.quiet_beats_count < pacing.quiet_beats_min:
        failures.append("QUIET_BEATS_MISSING")
    if metrics.meaning_shift_count < pacing.meaning_shifts_min_per_act:
        failures.append("MEANING_SHIFT_MISSING")
    if detect_forbidden_moves(text, profile.forbidden_moves):
        failures.append("FORBIDDEN_MOVE_PRESENT")

    return GateAttempt(
        passed=not failures,
        failures=tuple(failures),
        melodrama_score=melodrama_score,
        nuance_score=nuance_score,
        metrics=metrics,
    )
