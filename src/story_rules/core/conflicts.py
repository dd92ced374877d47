"""Flag derived profiles that drift from their lane norms."""

from __future__ import annotations

from story_rules.core.defaults import get_default_engine_profile
from story_rules.core.ruleset_schema import EngineProfile, RuleConflict

TWIST_HEADROOM = 1
GLOBAL_STAKES_TOLERANCE = 0.05
MELODRAMA_TOLERANCE = 0.1


def detect_conflicts(profile: EngineProfile) -> list[RuleConflict]:
    """Compare a profile to its lane defaults and return review findings.

    Checks always run in the same order: twist budget, global stakes timing,
    forbidden moves, core cast size, melodrama threshold.
    """
    defaults = get_default_engine_profile(profile.lane)
    conflicts: list[RuleConflict] = []

    if profile.budgets.twist_cap > defaults.budgets.twist_cap + TWIST_HEADROOM:
        conflicts.append(
            RuleConflict(
                id="twist_vs_restraint",
                severity="warn",
                dimension="twist_budget",
                message=(
                    f"Twist cap {profile.budgets.twist_cap} exceeds the {profile.lane} "
                    f"default of {defaults.budgets.twist_cap} by more than {TWIST_HEADROOM}."
                ),
                inferred_value=str(profile.budgets.twist_cap),
                expected_value=str(defaults.budgets.twist_cap),
                suggested_actions=("honor_overrides", "blend"),
            )
        )

    derived_pct = profile.stakes_ladder.no_global_before_pct
    default_pct = defaults.stakes_ladder.no_global_before_pct
    if derived_pct < default_pct - GLOBAL_STAKES_TOLERANCE:
        conflicts.append(
            RuleConflict(
                id="early_global_stakes",
                severity="warn",
                dimension="stakes_ladder",
                message=(
                    f"Global stakes allowed from {derived_pct:.0%} of runtime; "
                    f"lane norm holds them until {default_pct:.0%}."
                ),
                inferred_value=f"{derived_pct:.2f}",
                expected_value=f"{default_pct:.2f}",
                suggested_actions=("honor_overrides", "blend"),
            )
        )

    for move in defaults.forbidden_moves:
        if move in profile.forbidden_moves:
            continue
        conflicts.append(
            RuleConflict(
                id=f"missing_forbidden_{move}",
                severity="hard",
                dimension="forbidden_moves",
                message=f"Lane forbidden move '{move}' was dropped from the profile.",
                inferred_value="absent",
                expected_value=move,
                suggested_actions=("honor_overrides",),
            )
        )

    core_cap = profile.budgets.core_character_cap
    core_max = defaults.gate_thresholds.complexity_core_chars_max
    if core_cap > core_max:
        conflicts.append(
            RuleConflict(
                id="char_overcomplexity",
                severity="warn",
                dimension="budgets",
                message=(
                    f"Core character cap {core_cap} is above the {profile.lane} "
                    f"complexity ceiling of {core_max}."
                ),
                inferred_value=str(core_cap),
                expected_value=str(core_max),
                suggested_actions=("honor_overrides", "blend"),
            )
        )

    derived_melodrama = profile.gate_thresholds.melodrama_max
    default_melodrama = defaults.gate_thresholds.melodrama_max
    if derived_melodrama > default_melodrama + MELODRAMA_TOLERANCE:
        conflicts.append(
            RuleConflict(
                id="melodrama_permissive",
                severity="warn",
                dimension="gate_thresholds",
                message=(
                    f"Melodrama ceiling {derived_melodrama:.2f} is looser than the "
                    f"lane default {default_melodrama:.2f}."
                ),
                inferred_value=f"{derived_melodrama:.2f}",
                expected_value=f"{default_melodrama:.2f}",
                suggested_actions=("honor_comps", "honor_overrides", "blend"),
            )
        )

    return conflicts
