"""End-to-end ruleset evaluation for one candidate text."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from story_rules.core.conflicts import detect_conflicts
from story_rules.core.derive import derive_engine_profile
from story_rules.core.fingerprint import (
    RulesetFingerprint,
    compute_ruleset_fingerprint,
    compute_ruleset_similarity_risk,
)
from story_rules.core.gate import run_ruleset_gate
from story_rules.core.repair import build_ruleset_repair_instruction
from story_rules.core.ruleset_schema import (
    CompsInfluencer,
    EngineProfile,
    GateAttempt,
    Lane,
    RuleConflict,
    RulesetMetrics,
)
from story_rules.core.scoring import compute_ruleset_metrics, detect_forbidden_moves

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RulesetEvaluation:
    """Everything one evaluation produced, for the orchestrator to act on."""

    profile: EngineProfile
    conflicts: tuple[RuleConflict, ...]
    metrics: RulesetMetrics
    attempt: GateAttempt
    forbidden_found: tuple[str, ...]
    fingerprint: RulesetFingerprint
    similarity_risk: float
    repair_instruction: str | None
    timing: dict[str, float]


def evaluate_candidate_text(
    *,
    lane: Lane,
    text: str,
    influencers: Sequence[CompsInfluencer] = (),
    similarity_risk: float = 0.0,
    diversify_enabled: bool = False,
    recent_fingerprints: Sequence[RulesetFingerprint] | None = None,
) -> RulesetEvaluation:
    """Derive a profile, score ``text`` and run the gate in one pass."""
    timings: dict[str, float] = {}
    started = time.perf_counter()
    logger.info(
        "ruleset.evaluate.start lane=%s influencers=%s chars=%s diversify=%s",
        lane,
        len(influencers),
        len(text),
        diversify_enabled,
    )
    step_start = time.perf_counter()
    profile = derive_engine_profile(lane, influencers)
    conflicts = detect_conflicts(profile)
    timings["derive_seconds"] = time.perf_counter() - step_start
    if conflicts:
        logger.warning(
            "ruleset.conflicts lane=%s ids=%s",
            lane,
            ",".join(conflict.id for conflict in conflicts),
        )

    step_start = time.perf_counter()
    metrics = compute_ruleset_metrics(text)
    fingerprint = compute_ruleset_fingerprint(text, profile)
    if recent_fingerprints is not None:
        similarity_risk = compute_ruleset_similarity_risk(fingerprint, recent_fingerprints)
    timings["scoring_seconds"] = time.perf_counter() - step_start

    step_start = time.perf_counter()
    attempt = run_ruleset_gate(metrics, text, profile, similarity_risk, diversify_enabled)
    forbidden_found = tuple(detect_forbidden_moves(text, profile.forbidden_moves))
    timings["gate_seconds"] = time.perf_counter() - step_start

    repair_instruction = None
    if not attempt.passed:
        repair_instruction = build_ruleset_repair_instruction(
            attempt.failures, profile, forbidden_found
        )
    timings["total_seconds"] = time.perf_counter() - started
    logger.info(
        "ruleset.evaluate.complete lane=%s passed=%s failures=%s melodrama=%s nuance=%s",
        lane,
        attempt.passed,
        ",".join(attempt.failures) or "none",
        attempt.melodrama_score,
        attempt.nuance_score,
    )
    return RulesetEvaluation(
        profile=profile,
        conflicts=tuple(conflicts),
        metrics=metrics,
        attempt=attempt,
        forbidden_found=forbidden_found,
        fingerprint=fingerprint,
        similarity_risk=similarity_risk,
        repair_instruction=repair_instruction,
        timing=timings,
    )
