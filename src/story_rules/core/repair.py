"""Repair instruction text for candidates that failed the ruleset gate."""

from __future__ import annotations

from collections.abc import Sequence

from story_rules.core.ruleset_schema import GATE_FAILURE_CODES, EngineProfile, GateFailure

_LANE_PRIORITIES: dict[str, tuple[str, ...]] = {
    "feature_film": (
        "FEATURE FILM PRIORITIES:",
        "- Protect quiet beats; let scenes breathe before each turn.",
        "- Carry meaning through subtext and specific behaviour, not speeches.",
        "- Escalate by consequence; keep systemic stakes out of the first act.",
    ),
    "vertical_drama": (
        "VERTICAL DRAMA PRIORITIES:",
        "- Every scene turns on leverage: who holds it, who loses it.",
        "- Keep the cast small and the stakes social and personal.",
        "- End on a question, not on a shock.",
    ),
    "series": (
        "SERIES PRIORITIES:",
        "- Serve the engine of return; resolve the episode, not the season.",
        "- Hold thread count to the cap; park extra threads for later episodes.",
    ),
    "documentary": (
        "DOCUMENTARY PRIORITIES:",
        "- Stay with observed evidence; no invented twists or reveals.",
        "- Let the subject's own words and silences carry the meaning.",
    ),
}


def _directive(failure: GateFailure, profile: EngineProfile) -> str:
    budgets = profile.budgets
    pacing = profile.pacing_profile
    thresholds = profile.gate_thresholds
    if failure == "MELODRAMA":
        return (
            "Reduce melodrama: cut absolute language, conspiracy framing and "
            f"speechifying (ceiling {thresholds.melodrama_max:.2f})."
        )
    if failure == "OVERCOMPLEXITY":
        return (
            f"Simplify: at most {budgets.plot_thread_cap} plot threads, "
            f"{budgets.core_character_cap} core characters and "
            f"{budgets.faction_cap} named factions."
        )
    if failure == "TEMPLATE_SIMILARITY":
        return "Diversify structure: change the opening device and the engine of the central conflict."
    if failure == "STAKES_TOO_BIG_TOO_EARLY":
        early = ", ".join(profile.stakes_ladder.early_allowed) or "personal"
        return (
            f"Open on {early} stakes only; no shock events or global stakes before "
            f"{profile.stakes_ladder.no_global_before_pct:.0%} of runtime."
        )
    if failure == "TWIST_OVERUSE":
        return f"Limit twists to {budgets.twist_cap}; replace reveals with consequences."
    if failure == "SUBTEXT_MISSING":
        return f"Add at least {pacing.subtext_scenes_min} scenes where characters avoid saying what they mean."
    if failure == "QUIET_BEATS_MISSING":
        return f"Add at least {pacing.quiet_beats_min} quiet beats with no new plot information."
    if failure == "MEANING_SHIFT_MISSING":
        return (
            f"Include at least {pacing.meaning_shifts_min_per_act} meaning shift per act "
            "where a character sees the situation differently."
        )
    return "Remove every forbidden move listed below."


def build_ruleset_repair_instruction(
    failures: Sequence[GateFailure],
    profile: EngineProfile,
    forbidden_found: Sequence[str] = (),
) -> str:
    """Render revision guidance for a failed gate attempt."""
    ordered = [code for code in GATE_FAILURE_CODES if code in set(failures)]
    lines = ["REPAIR INSTRUCTIONS:"]
    lines.extend(f"- {_directive(failure, profile)}" for failure in ordered)
    if forbidden_found:
        names = ", ".join(move.replace("_", " ") for move in forbidden_found)
        lines.append(f"Remove these forbidden moves: {names}.")
    lines.append("")
    lines.extend(_LANE_PRIORITIES[profile.lane])
    return "\n".join(lines)
