"""Lane default engine profiles."""

from __future__ import annotations

from typing import Final

from story_rules.core.ruleset_schema import (
    LANES,
    AntagonismModel,
    BeatsPerMinute,
    Budgets,
    CliffhangerRate,
    DialogueRules,
    EngineBlock,
    EngineProfile,
    GateThresholds,
    Lane,
    PacingProfile,
    StakesLadder,
    TextureRules,
)

DEFAULT_FORBIDDEN_MOVES: Final[tuple[str, ...]] = (
    "secret_organization",
    "villain_monologue",
    "helicopter_extraction",
    "sudden_amnesia",
    "evil_twin",
    "last_second_rescue",
    "chosen_one_prophecy",
    "deus_ex_machina",
)
DEFAULT_SIGNATURE_DEVICES: Final[tuple[str, ...]] = (
    "subtext_over_statement",
    "cost_of_action",
    "quiet_before_turn",
    "specific_detail_anchor",
)
STAKES_CATEGORIES: Final[tuple[str, ...]] = (
    "personal",
    "relational",
    "social",
    "institutional",
    "global",
)

# Hard ceilings/floors applied by derivation on top of the model field bounds.
TWIST_CAP_CEILING: Final[int] = 3
SUBTEXT_RATIO_CEILING: Final[float] = 0.8
NO_GLOBAL_BEFORE_FLOOR: Final[float] = 0.15


def _base_profile(lane: Lane) -> EngineProfile:
    return EngineProfile(
        lane=lane,
        engine=EngineBlock(
            story_engine="pressure_cooker",
            causal_grammar="accumulation",
            conflict_mode="moral_trap",
        ),
        pacing_profile=PacingProfile(
            beats_per_minute=BeatsPerMinute(min=1.0, target=2.0, max=3.2),
            cliffhanger_rate=CliffhangerRate(target=0.2, max=0.4),
            quiet_beats_min=3,
            subtext_scenes_min=4,
            meaning_shifts_min_per_act=1,
        ),
        stakes_ladder=StakesLadder(
            early_allowed=["personal", "relational"],
            no_global_before_pct=0.4,
            late_allowed=list(STAKES_CATEGORIES),
            notes="Escalate by consequence; systemic stakes only after the middle build.",
        ),
        budgets=Budgets(
            drama_budget=2,
            twist_cap=1,
            big_reveal_cap=1,
            plot_thread_cap=3,
            core_character_cap=5,
            faction_cap=2,
            coincidence_cap=1,
        ),
        dialogue_rules=DialogueRules(
            subtext_ratio_target=0.6,
            monologue_max_lines=6,
            no_speeches=True,
            absolute_words_penalty=True,
        ),
        texture_rules=TextureRules(),
        antagonism_model=AntagonismModel(),
        forbidden_moves=list(DEFAULT_FORBIDDEN_MOVES),
        signature_devices=list(DEFAULT_SIGNATURE_DEVICES),
        gate_thresholds=GateThresholds(
            melodrama_max=0.50,
            similarity_max=0.60,
            complexity_threads_max=3,
            complexity_factions_max=2,
            complexity_core_chars_max=5,
        ),
    )


def _apply_vertical_drama(profile: EngineProfile) -> None:
    profile.engine.conflict_mode = "status_reputation"
    pacing = profile.pacing_profile
    pacing.beats_per_minute = BeatsPerMinute(min=3.2, target=4.2, max=5.5)
    pacing.cliffhanger_rate = CliffhangerRate(target=0.8, max=1.0)
    pacing.quiet_beats_min = 1
    pacing.subtext_scenes_min = 2
    profile.stakes_ladder.early_allowed = ["personal", "relational", "social"]
    profile.stakes_ladder.no_global_before_pct = 0.25
    profile.stakes_ladder.notes = "Social stakes may open the story; keep the world small."
    budgets = profile.budgets
    budgets.drama_budget = 3
    budgets.twist_cap = 2
    budgets.big_reveal_cap = 2
    budgets.plot_thread_cap = 2
    budgets.core_character_cap = 4
    budgets.faction_cap = 1
    profile.dialogue_rules.subtext_ratio_target = 0.5
    profile.dialogue_rules.monologue_max_lines = 4
    profile.antagonism_model.legitimacy_required = False
    profile.antagonism_model.antagonist_kind = "personal"
    profile.signature_devices.extend(["leverage_shift", "status_reversal", "end_on_question"])
    profile.gate_thresholds = GateThresholds(
        melodrama_max=0.62,
        similarity_max=0.70,
        complexity_threads_max=2,
        complexity_factions_max=1,
        complexity_core_chars_max=4,
    )


def _apply_series(profile: EngineProfile) -> None:
    profile.engine.story_engine = "engine_of_return"
    pacing = profile.pacing_profile
    pacing.beats_per_minute = BeatsPerMinute(min=1.5, target=2.5, max=3.8)
    pacing.cliffhanger_rate = CliffhangerRate(target=0.5, max=0.8)
    pacing.quiet_beats_min = 2
    pacing.subtext_scenes_min = 3
    profile.stakes_ladder.no_global_before_pct = 0.35
    budgets = profile.budgets
    budgets.twist_cap = 2
    budgets.plot_thread_cap = 4
    budgets.core_character_cap = 6
    budgets.faction_cap = 3
    profile.signature_devices.append("season_question")
    profile.gate_thresholds = GateThresholds(
        melodrama_max=0.55,
        similarity_max=0.65,
        complexity_threads_max=4,
        complexity_factions_max=3,
        complexity_core_chars_max=6,
    )


def _apply_documentary(profile: EngineProfile) -> None:
    profile.engine = EngineBlock(
        story_engine="observational",
        causal_grammar="evidence_chain",
        conflict_mode="competing_truths",
    )
    pacing = profile.pacing_profile
    pacing.beats_per_minute = BeatsPerMinute(min=0.5, target=1.0, max=1.8)
    pacing.cliffhanger_rate = CliffhangerRate(target=0.0, max=0.1)
    pacing.quiet_beats_min = 4
    pacing.subtext_scenes_min = 3
    profile.stakes_ladder.early_allowed = ["personal"]
    profile.stakes_ladder.no_global_before_pct = 0.5
    profile.stakes_ladder.notes = "Let evidence widen the frame; never assert scale up front."
    budgets = profile.budgets
    budgets.drama_budget = 1
    budgets.twist_cap = 0
    budgets.big_reveal_cap = 0
    budgets.plot_thread_cap = 2
    budgets.core_character_cap = 4
    budgets.coincidence_cap = 0
    profile.texture_rules.realism_level = "verite"
    profile.antagonism_model.antagonist_kind = "institutional"
    profile.forbidden_moves.extend(["fabricated_quote", "staged_reenactment"])
    profile.gate_thresholds = GateThresholds(
        melodrama_max=0.15,
        similarity_max=0.60,
        complexity_threads_max=2,
        complexity_factions_max=2,
        complexity_core_chars_max=4,
    )


_LANE_OVERLAYS = {
    "vertical_drama": _apply_vertical_drama,
    "series": _apply_series,
    "documentary": _apply_documentary,
}


def get_default_engine_profile(lane: Lane) -> EngineProfile:
    """Return a fresh baseline profile for one lane.

    Every call builds new lists and sub-models, so mutating one result never
    leaks into another lane or a later call. Unknown lane strings raise
    ``ValueError`` instead of silently resolving to feature film defaults.
    """
    if lane not in LANES:
        raise ValueError(f"Unknown lane '{lane}'; expected one of: {', '.join(LANES)}.")
    profile = _base_profile(lane)
    overlay = _LANE_OVERLAYS.get(lane)
    if overlay is not None:
        overlay(profile)
    return profile
