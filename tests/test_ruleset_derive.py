from __future__ import annotations

import pytest

from story_rules.core.conflicts import detect_conflicts
from story_rules.core.defaults import get_default_engine_profile
from story_rules.core.derive import derive_engine_profile, generate_rules_summary
from story_rules.core.ruleset_schema import INFLUENCE_DIMENSIONS, LANES, CompsInfluencer


def _comp(
    title: str = "Test",
    *,
    weight: float = 1.0,
    dimensions: list[str] | None = None,
    emulate_tags: list[str] | None = None,
    avoid_tags: list[str] | None = None,
) -> CompsInfluencer:
    return CompsInfluencer.model_validate(
        {
            "title": title,
            "format": "film",
            "weight": weight,
            "dimensions": dimensions or [],
            "emulate_tags": emulate_tags or [],
            "avoid_tags": avoid_tags or [],
        }
    )


@pytest.mark.parametrize("lane", LANES)
def test_empty_comps_returns_lane_defaults(lane: str) -> None:
    assert derive_engine_profile(lane, []) == get_default_engine_profile(lane)  # type: ignore[arg-type]


def test_strong_twist_influence_raises_twist_cap() -> None:
    profile = derive_engine_profile("feature_film", [_comp(weight=10, dimensions=["twist_budget"])])
    assert profile.budgets.twist_cap == 2


def test_twist_cap_never_exceeds_ceiling() -> None:
    profile = derive_engine_profile(
        "vertical_drama",
        [
            _comp("A", weight=3, dimensions=["twist_budget"]),
            _comp("B", weight=3, dimensions=["twist_budget"]),
        ],
    )
    assert profile.budgets.twist_cap == 3


def test_weak_twist_influence_leaves_cap() -> None:
    profile = derive_engine_profile(
        "feature_film",
        [_comp("A", weight=1, dimensions=["twist_budget"]), _comp("B", weight=1)],
    )
    assert profile.budgets.twist_cap == 1


def test_avoid_tags_extend_forbidden_moves() -> None:
    defaults = get_default_engine_profile("feature_film")
    profile = derive_engine_profile(
        "feature_film",
        [
            _comp("A", dimensions=["pacing"], avoid_tags=["car_chase", "Evil Twin"]),
            _comp("B", avoid_tags=["car-chase"]),
        ],
    )
    assert set(defaults.forbidden_moves).issubset(profile.forbidden_moves)
    assert profile.forbidden_moves.count("car_chase") == 1
    assert profile.forbidden_moves.count("evil_twin") == 1
    assert profile.forbidden_moves[-1] == "car_chase"


def test_comps_block_keeps_references_and_emulate_union() -> None:
    profile = derive_engine_profile(
        "series",
        [
            _comp("A", weight=2, dimensions=["pacing"], emulate_tags=["Slow Burn", "ensemble"]),
            _comp("B", weight=1, emulate_tags=["ensemble", "workplace"]),
        ],
    )
    assert [item.title for item in profile.comps.influencers] == ["A", "B"]
    assert profile.comps.influencers[0].dimensions == ["pacing"]
    assert profile.comps.tags == ["slow_burn", "ensemble", "workplace"]


def test_zero_weight_comps_only_populate_comps() -> None:
    defaults = get_default_engine_profile("feature_film")
    profile = derive_engine_profile(
        "feature_film",
        [_comp(weight=0, dimensions=list(INFLUENCE_DIMENSIONS))],
    )
    assert len(profile.comps.influencers) == 1
    assert profile.model_dump(exclude={"comps"}) == defaults.model_dump(exclude={"comps"})


def test_pacing_nudge_rounds_half_up_and_clamps() -> None:
    feature = derive_engine_profile(
        "feature_film",
        [_comp("A", dimensions=["pacing"]), _comp("B")],
    )
    assert feature.pacing_profile.beats_per_minute.target == 3.0

    documentary = derive_engine_profile("documentary", [_comp(dimensions=["pacing"])])
    assert documentary.pacing_profile.beats_per_minute.target == 1.8


def test_stakes_influence_opens_social_and_lowers_global_threshold() -> None:
    feature = derive_engine_profile("feature_film", [_comp(dimensions=["stakes_ladder"])])
    assert feature.stakes_ladder.early_allowed == ["personal", "relational", "social"]
    assert feature.stakes_ladder.no_global_before_pct == pytest.approx(0.35)

    vertical = derive_engine_profile("vertical_drama", [_comp(dimensions=["stakes_ladder"])])
    assert vertical.stakes_ladder.early_allowed.count("social") == 1
    assert vertical.stakes_ladder.no_global_before_pct == pytest.approx(0.2)


def test_dialogue_and_antagonism_nudges() -> None:
    profile = derive_engine_profile(
        "vertical_drama",
        [_comp(dimensions=["dialogue_style", "antagonism_model"])],
    )
    assert profile.dialogue_rules.subtext_ratio_target == pytest.approx(0.6)
    assert profile.antagonism_model.legitimacy_required is True


@pytest.mark.parametrize("lane", LANES)
def test_maximal_derivation_stays_conflict_free(lane: str) -> None:
    profile = derive_engine_profile(
        lane,  # type: ignore[arg-type]
        [_comp(weight=5, dimensions=list(INFLUENCE_DIMENSIONS))],
    )
    assert detect_conflicts(profile) == []
    assert profile.budgets.twist_cap <= 3
    assert profile.dialogue_rules.subtext_ratio_target <= 0.8
    assert profile.stakes_ladder.no_global_before_pct >= 0.15


def test_rules_summary_is_deterministic_and_complete() -> None:
    profile = derive_engine_profile(
        "feature_film",
        [_comp("Heat", weight=2, dimensions=["pacing"], avoid_tags=["car_chase"])],
    )
    summary = generate_rules_summary(profile)
    assert summary == generate_rules_summary(profile)
    assert "Lane: feature_film" in summary
    assert "pressure_cooker" in summary
    assert "moral_trap" in summary
    assert "no global before 40%" in summary
    assert "Melodrama max: 0.50" in summary
    assert "  - Heat (film) weight=2 [pacing]" in summary
    assert summary.splitlines()[-1].startswith("Forbidden: secret_organization")
    assert "car_chase" in summary


def test_rules_summary_without_comps() -> None:
    summary = generate_rules_summary(get_default_engine_profile("documentary"))
    assert "Comps: none" in summary
    assert "observational / evidence_chain / competing_truths" in summary


def test_heavy_weights_are_bounded_by_strength() -> None:
    influencer = CompsInfluencer(
        title="Heat", format="film", weight=250, dimensions=["twist_budget", "pacing"]
    )
    profile = derive_engine_profile("feature_film", [influencer])
    assert profile.budgets.twist_cap == 2
    assert profile.pacing_profile.beats_per_minute.target == 3.0
    assert profile.comps.influencers[0].weight == 250


def test_non_finite_weight_is_rejected() -> None:
    with pytest.raises(ValueError):
        CompsInfluencer(title="Heat", format="film", weight=float("inf"))
