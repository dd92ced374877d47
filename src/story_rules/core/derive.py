"""Blend lane defaults with weighted influencer comps."""

from __future__ import annotations

import math
from collections.abc import Sequence

from story_rules.core.defaults import (
    NO_GLOBAL_BEFORE_FLOOR,
    SUBTEXT_RATIO_CEILING,
    TWIST_CAP_CEILING,
    get_default_engine_profile,
)
from story_rules.core.ruleset_schema import (
    INFLUENCE_DIMENSIONS,
    CompsBlock,
    CompsInfluencer,
    CompsReference,
    EngineProfile,
    InfluenceDimension,
    Lane,
    dedupe_tags,
)


def _half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _influence_vector(
    influencers: Sequence[CompsInfluencer],
) -> tuple[dict[InfluenceDimension, float], float]:
    weights: dict[InfluenceDimension, float] = {dimension: 0.0 for dimension in INFLUENCE_DIMENSIONS}
    total_weight = 0.0
    for influencer in influencers:
        total_weight += influencer.weight
        for dimension in influencer.dimensions:
            weights[dimension] += influencer.weight
    return weights, total_weight


def derive_engine_profile(
    lane: Lane,
    influencers: Sequence[CompsInfluencer],
) -> EngineProfile:
    """Derive a lane profile nudged by influencer comps.

    Nudges are bounded and one-directional: forbidden moves only grow, and
    every numeric shift is clamped to the lane ceilings/floors.
    """
    profile = get_default_engine_profile(lane)
    if not influencers:
        return profile

    profile.comps = CompsBlock(
        influencers=[
            CompsReference(
                title=influencer.title,
                year=influencer.year,
                format=influencer.format,
                weight=influencer.weight,
                dimensions=list(influencer.dimensions),
            )
            for influencer in influencers
        ],
        tags=dedupe_tags(tag for influencer in influencers for tag in influencer.emulate_tags),
    )
    for influencer in influencers:
        for tag in influencer.avoid_tags:
            if tag not in profile.forbidden_moves:
                profile.forbidden_moves.append(tag)

    weights, total_weight = _influence_vector(influencers)
    if total_weight <= 0:
        return profile

    def strength(dimension: InfluenceDimension) -> float:
        return min(1.0, weights[dimension] / total_weight)

    bpm = profile.pacing_profile.beats_per_minute
    bpm.target = min(bpm.max, bpm.target + _half_up(strength("pacing")))

    stakes_strength = strength("stakes_ladder")
    stakes = profile.stakes_ladder
    if stakes_strength > 0.5 and "social" not in stakes.early_allowed:
        stakes.early_allowed.append("social")
    stakes.no_global_before_pct = max(
        NO_GLOBAL_BEFORE_FLOOR,
        stakes.no_global_before_pct - stakes_strength * 0.05,
    )

    if strength("twist_budget") > 0.6:
        profile.budgets.twist_cap = min(TWIST_CAP_CEILING, profile.budgets.twist_cap + 1)

    dialogue = profile.dialogue_rules
    dialogue.subtext_ratio_target = min(
        SUBTEXT_RATIO_CEILING,
        dialogue.subtext_ratio_target + strength("dialogue_style") * 0.1,
    )

    if strength("antagonism_model") > 0:
        profile.antagonism_model.legitimacy_required = True

    return profile


def _join(values: Sequence[str]) -> str:
    return ", ".join(values) if values else "none"


def generate_rules_summary(profile: EngineProfile) -> str:
    """Render a deterministic, human-readable digest of one profile."""
    engine = profile.engine
    budgets = profile.budgets
    pacing = profile.pacing_profile
    bpm = pacing.beats_per_minute
    stakes = profile.stakes_ladder
    lines = [
        f"Lane: {profile.lane} ({profile.version})",
        f"Engine: {engine.story_engine} / {engine.causal_grammar} / {engine.conflict_mode}",
        (
            f"Budgets: drama={budgets.drama_budget} twist={budgets.twist_cap} "
            f"big_reveal={budgets.big_reveal_cap} threads={budgets.plot_thread_cap} "
            f"core_chars={budgets.core_character_cap} factions={budgets.faction_cap} "
            f"coincidence={budgets.coincidence_cap}"
        ),
        (
            f"Pacing: {bpm.min:g}-{bpm.max:g} beats/min (target {bpm.target:g}); "
            f"quiet_beats>={pacing.quiet_beats_min} "
            f"subtext_scenes>={pacing.subtext_scenes_min} "
            f"meaning_shifts>={pacing.meaning_shifts_min_per_act}/act"
        ),
        (
            f"Stakes: early={_join(stakes.early_allowed)}; "
            f"no global before {stakes.no_global_before_pct:.0%}; "
            f"late={_join(stakes.late_allowed)}"
        ),
        f"Melodrama max: {profile.gate_thresholds.melodrama_max:.2f}",
    ]
    if profile.comps.influencers:
        lines.append("Comps:")
        for influencer in profile.comps.influencers:
            year = f", {influencer.year}" if influencer.year is not None else ""
            lines.append(
                f"  - {influencer.title} ({influencer.format}{year}) "
                f"weight={influencer.weight:g} [{_join(influencer.dimensions)}]"
            )
    else:
        lines.append("Comps: none")
    if profile.comps.tags:
        lines.append(f"Emulate: {_join(profile.comps.tags)}")
    lines.append(f"Forbidden: {_join(profile.forbidden_moves)}")
    return "\n".join(lines)
