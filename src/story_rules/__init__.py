"""Deterministic ruleset engine for lane-constrained narrative drafts."""

from story_rules.core.conflicts import detect_conflicts
from story_rules.core.defaults import get_default_engine_profile
from story_rules.core.derive import derive_engine_profile, generate_rules_summary
from story_rules.core.gate import run_ruleset_gate
from story_rules.core.ruleset_schema import (
    CompsInfluencer,
    EngineProfile,
    GateAttempt,
    RuleConflict,
    RulesetMetrics,
)
from story_rules.core.scoring import (
    compute_ruleset_melodrama_score,
    compute_ruleset_metrics,
    compute_ruleset_nuance_score,
    detect_forbidden_moves,
)

__all__ = [
    "CompsInfluencer",
    "EngineProfile",
    "GateAttempt",
    "RuleConflict",
    "RulesetMetrics",
    "compute_ruleset_melodrama_score",
    "compute_ruleset_metrics",
    "compute_ruleset_nuance_score",
    "derive_engine_profile",
    "detect_conflicts",
    "detect_forbidden_moves",
    "generate_rules_summary",
    "get_default_engine_profile",
    "run_ruleset_gate",
]
