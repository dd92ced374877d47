from __future__ import annotations

import pytest

from story_rules.core.ruleset_schema import RulesetMetrics
from story_rules.core.scoring import (
    compute_ruleset_melodrama_score,
    compute_ruleset_metrics,
    compute_ruleset_nuance_score,
    detect_forbidden_moves,
    word_count,
)

RESTRAINED_SCENE = (
    "Mara sits at the kitchen table. She doesn't say what the letter means. "
    "Her brother looks away and changes the subject. The silence stretches. "
    "Rain against the window. She hesitates before answering, then says nothing. "
    "Later she sits with the empty chair for a long time. The landlord has a point "
    "about the rent, and it will cost her the apartment. She realizes the house was "
    "never the thing she was keeping."
)


@pytest.mark.parametrize("text", ["", "   \n\t", "--- ... !!!"])
def test_empty_text_yields_zero_metrics(text: str) -> None:
    metrics = compute_ruleset_metrics(text)
    assert metrics == RulesetMetrics()
    assert metrics.absolute_words_rate == 0
    assert metrics.new_character_density == 0
    assert metrics.antagonist_legitimacy is False


def test_restrained_scene_counts_craft_signals() -> None:
    metrics = compute_ruleset_metrics(RESTRAINED_SCENE)
    assert metrics.subtext_scene_count == 5
    assert metrics.quiet_beats_count == 3
    assert metrics.meaning_shift_count == 1
    assert metrics.cost_of_action_markers == 1
    assert metrics.antagonist_legitimacy is True
    assert metrics.twist_keyword_rate == 0
    # "never" and "says nothing"
    assert metrics.absolute_words_rate == pytest.approx(2000 / word_count(RESTRAINED_SCENE))


def test_twist_rate_is_per_thousand_words() -> None:
    text = " ".join(["It reveals a twist. Turns out secretly all along."] * 20)
    metrics = compute_ruleset_metrics(text)
    assert metrics.twist_keyword_rate == pytest.approx(5 / 9 * 1000, abs=0.001)


def test_shock_events_only_count_in_opening_fifth() -> None:
    shocks = "The explosion woke the street. Blood on the stairs. A murder nobody reported. "
    filler = "She walks home slowly. " * 60
    assert compute_ruleset_metrics(shocks + filler).shock_events_early == 3
    assert compute_ruleset_metrics(filler + shocks).shock_events_early == 0


def test_long_quotes_factions_and_threads() -> None:
    speech = '"' + "I have always known what this town wanted from me. " * 4 + '"'
    text = (
        f"{speech} The Iron Council met at dawn while the Cartel waited. "
        "Meanwhile, across town, a second plan moved."
    )
    metrics = compute_ruleset_metrics(text)
    assert metrics.speech_length_proxy == 1
    assert metrics.named_factions == 2
    assert metrics.plot_thread_count == 2
    assert metrics.conspiracy_markers == 0


def test_short_quotes_are_not_speeches() -> None:
    assert compute_ruleset_metrics('"Go home," she says.').speech_length_proxy == 0


def test_short_scene_reports_raw_introduction_count() -> None:
    metrics = compute_ruleset_metrics("INT. KITCHEN - NIGHT. MARA (30s) pours coffee.")
    assert metrics.new_character_density == 1.0


def test_long_text_normalises_introductions_per_thousand_words() -> None:
    intro = "We meet Dana at the bus stop. "
    filler = "She waits by the window and counts the cars. " * 220
    text = intro * 4 + filler
    words = word_count(text)
    assert words > 2000
    assert compute_ruleset_metrics(text).new_character_density == pytest.approx(
        4 / (words / 1000)
    )


def test_melodrama_score_caps_and_weights() -> None:
    assert compute_ruleset_melodrama_score(RulesetMetrics()) == 0.0
    assert compute_ruleset_melodrama_score(RulesetMetrics(absolute_words_rate=5.0)) == 0.1
    saturated = RulesetMetrics(
        absolute_words_rate=50.0,
        twist_keyword_rate=80.0,
        conspiracy_markers=20,
        shock_events_early=9,
        speech_length_proxy=12,
        named_factions=30,
    )
    assert compute_ruleset_melodrama_score(saturated) == 1.0


def test_nuance_score_rewards_restraint() -> None:
    assert compute_ruleset_nuance_score(RulesetMetrics()) == 0.1
    metrics = compute_ruleset_metrics(RESTRAINED_SCENE)
    assert compute_ruleset_nuance_score(metrics) == pytest.approx(0.95)
    noisy = RulesetMetrics(twist_keyword_rate=8.0, conspiracy_markers=4)
    assert compute_ruleset_nuance_score(noisy) == 0.0


def test_detect_forbidden_moves_finds_moves_in_text() -> None:
    found = detect_forbidden_moves(
        "The secret organization planned a villain monologue.",
        ["secret_organization", "villain_monologue", "helicopter_extraction"],
    )
    assert found == ["secret_organization", "villain_monologue"]


@pytest.mark.parametrize(
    "text",
    [
        "There was a secret organization pulling strings",
        "There was a Secret Organization pulling strings",
        "logged as SECRET_ORGANIZATION in the notes",
    ],
)
def test_forbidden_moves_tolerate_case_and_separators(text: str) -> None:
    assert detect_forbidden_moves(text, ["secret_organization"]) == ["secret_organization"]


def test_forbidden_moves_keep_loose_separator_matching() -> None:
    assert detect_forbidden_moves("a secretorganization", ["secret_organization"]) == [
        "secret_organization"
    ]
    assert detect_forbidden_moves("twinkle", ["twin"]) == []
    assert detect_forbidden_moves("anything", ["", "  "]) == []


def test_word_count_splits_on_whitespace_in_any_script() -> None:
    assert word_count("Она молчит. Тишина.") == 3
    assert word_count("Zoë runs the café-bar\non Rue Saint-Denis") == 7
    assert word_count("  \n ") == 0


def test_non_latin_text_keeps_word_based_rates() -> None:
    text = "Она молчит. " * 50 + "Тишина. " * 10 + "She says nothing."
    metrics = compute_ruleset_metrics(text)
    assert metrics != RulesetMetrics()
    assert metrics.absolute_words_rate == pytest.approx(1000 / 113)
    assert metrics.subtext_scene_count == 1


def test_rates_keep_full_precision() -> None:
    metrics = compute_ruleset_metrics("She never called.")
    assert metrics.absolute_words_rate == 1000 / 3


def test_melodrama_score_is_not_rounded() -> None:
    metrics = RulesetMetrics(absolute_words_rate=7.52, twist_keyword_rate=8.0, named_factions=8)
    assert compute_ruleset_melodrama_score(metrics) == pytest.approx(0.5004)
    assert compute_ruleset_melodrama_score(metrics) > 0.5


def test_single_quoted_speeches_count() -> None:
    speech = "'" + "I have always known what this town wanted from me. " * 4 + "'"
    assert compute_ruleset_metrics(f"He stands. {speech} Nobody answers.").speech_length_proxy == 1


def test_contractions_do_not_open_speeches() -> None:
    text = "She doesn't look up. " + "The kettle ticks on the stove. " * 8 + "It's late."
    assert compute_ruleset_metrics(text).speech_length_proxy == 0
