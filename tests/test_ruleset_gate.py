from __future__ import annotations

import pytest

from story_rules.core.defaults import get_default_engine_profile
from story_rules.core.gate import run_ruleset_gate
from story_rules.core.ruleset_schema import GATE_FAILURE_CODES, RulesetMetrics
from story_rules.core.scoring import compute_ruleset_metrics

PASSING_SCENE = (
    "Mara sits at the kitchen table. She doesn't say what the letter means. "
    "Her brother looks away and changes the subject. The silence stretches. "
    "Rain against the window. She hesitates before answering, then says nothing. "
    "Later she sits with the empty chair for a long time. The landlord has a point "
    "about the rent, and it will cost her the apartment. She realizes the house was "
    "never the thing she was keeping."
)


def _meeting_minimums() -> RulesetMetrics:
    return RulesetMetrics(subtext_scene_count=4, quiet_beats_count=3, meaning_shift_count=1)


def test_full_pass_from_metrics() -> None:
    profile = get_default_engine_profile("feature_film")
    attempt = run_ruleset_gate(_meeting_minimums(), "", profile, 0.0, False)
    assert attempt.passed is True
    assert attempt.failures == ()
    assert attempt.melodrama_score <= profile.gate_thresholds.melodrama_max


def test_full_pass_from_text() -> None:
    profile = get_default_engine_profile("feature_film")
    metrics = compute_ruleset_metrics(PASSING_SCENE)
    attempt = run_ruleset_gate(metrics, PASSING_SCENE, profile, 0.2, True)
    assert attempt.failures == ()
    assert attempt.passed is True
    assert attempt.metrics == metrics
    assert attempt.model_dump(by_alias=True)["pass"] is True


def test_quiet_beat_minimum_failure() -> None:
    profile = get_default_engine_profile("feature_film")
    profile.pacing_profile.quiet_beats_min = 3
    metrics = RulesetMetrics(subtext_scene_count=4, quiet_beats_count=0, meaning_shift_count=1)
    attempt = run_ruleset_gate(metrics, "", profile, 0.0, False)
    assert attempt.failures == ("QUIET_BEATS_MISSING",)
    assert attempt.passed is False


def test_empty_text_fails_only_minimum_counts() -> None:
    profile = get_default_engine_profile("feature_film")
    attempt = run_ruleset_gate(compute_ruleset_metrics(""), "", profile, 0.0, False)
    assert attempt.failures == (
        "SUBTEXT_MISSING",
        "QUIET_BEATS_MISSING",
        "MEANING_SHIFT_MISSING",
    )
    assert attempt.nuance_score == 0.1


def test_every_failure_is_collected_in_order() -> None:
    profile = get_default_engine_profile("feature_film")
    metrics = RulesetMetrics(
        absolute_words_rate=40.0,
        twist_keyword_rate=8.0,
        conspiracy_markers=6,
        shock_events_early=3,
        speech_length_proxy=5,
        named_factions=9,
        plot_thread_count=7,
    )
    attempt = run_ruleset_gate(metrics, "Then an evil twin appears.", profile, 0.9, True)
    assert attempt.failures == GATE_FAILURE_CODES
    assert attempt.melodrama_score == 1.0


def test_template_similarity_requires_diversify_flag() -> None:
    profile = get_default_engine_profile("vertical_drama")
    metrics = RulesetMetrics(subtext_scene_count=2, quiet_beats_count=1, meaning_shift_count=1)
    assert run_ruleset_gate(metrics, "", profile, 0.95, False).passed is True
    attempt = run_ruleset_gate(metrics, "", profile, 0.95, True)
    assert attempt.failures == ("TEMPLATE_SIMILARITY",)
    assert run_ruleset_gate(metrics, "", profile, 0.70, True).passed is True


def test_overcomplexity_branches() -> None:
    profile = get_default_engine_profile("feature_film")
    base = _meeting_minimums()
    at_limit = base.model_copy(update={"plot_thread_count": 6, "named_factions": 4})
    assert run_ruleset_gate(at_limit, "", profile, 0.0, False).passed is True
    dense = base.model_copy(update={"new_character_density": 5.5})
    assert run_ruleset_gate(dense, "", profile, 0.0, False).failures == ("OVERCOMPLEXITY",)
    factions = base.model_copy(update={"named_factions": 5})
    assert run_ruleset_gate(factions, "", profile, 0.0, False).failures == ("OVERCOMPLEXITY",)


def test_documentary_twist_boundary() -> None:
    profile = get_default_engine_profile("documentary")
    metrics = RulesetMetrics(subtext_scene_count=3, quiet_beats_count=4, meaning_shift_count=1)
    at_limit = metrics.model_copy(update={"twist_keyword_rate": 3.0})
    assert "TWIST_OVERUSE" not in run_ruleset_gate(at_limit, "", profile, 0.0, False).failures
    over = metrics.model_copy(update={"twist_keyword_rate": 3.001})
    assert "TWIST_OVERUSE" in run_ruleset_gate(over, "", profile, 0.0, False).failures


def test_forbidden_move_in_text() -> None:
    profile = get_default_engine_profile("feature_film")
    text = "The secret organization pulled the strings from the shadows."
    attempt = run_ruleset_gate(compute_ruleset_metrics(text), text, profile, 0, False)
    assert "FORBIDDEN_MOVE_PRESENT" in attempt.failures
    assert attempt.metrics.conspiracy_markers == 2


def test_twist_heavy_text_overuses_twists() -> None:
    profile = get_default_engine_profile("feature_film")
    text = " ".join(["It reveals a twist. Turns out secretly all along."] * 20)
    attempt = run_ruleset_gate(compute_ruleset_metrics(text), text, profile, 0, False)
    assert "TWIST_OVERUSE" in attempt.failures
    assert "MELODRAMA" not in attempt.failures


def test_single_introduction_in_short_scene_is_not_overcomplex() -> None:
    profile = get_default_engine_profile("feature_film")
    text = "We meet Dana at the bus stop. " + "She waits quietly in silence and looks away. " * 5
    metrics = compute_ruleset_metrics(text)
    assert metrics.new_character_density == 1.0
    attempt = run_ruleset_gate(metrics, text, profile, 0.0, False)
    assert "OVERCOMPLEXITY" not in attempt.failures


def test_melodrama_just_over_threshold_fails() -> None:
    profile = get_default_engine_profile("feature_film")
    metrics = _meeting_minimums().model_copy(
        update={
            "absolute_words_rate": 7.52,
            "twist_keyword_rate": 4.0,
            "conspiracy_markers": 5,
            "speech_length_proxy": 4,
        }
    )
    attempt = run_ruleset_gate(metrics, "", profile, 0.0, False)
    assert attempt.melodrama_score == pytest.approx(0.5004)
    assert attempt.failures == ("MELODRAMA",)
