"""Typed contracts shared by API handlers and CLI entrypoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from story_rules.core.benchmarks import PacingFeel, StyleBenchmark
from story_rules.core.fingerprint import RulesetFingerprint
from story_rules.core.merge import OverridePatch
from story_rules.core.ruleset_schema import (
    CompsInfluencer,
    EngineProfile,
    GateAttempt,
    GateFailure,
    Lane,
    RuleConflict,
    RulesetMetrics,
)


class ContractModel(BaseModel):
    """Base model config used by all API contracts."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class FingerprintBlock(ContractModel):
    """Wire form of a structural fingerprint."""

    lane: Lane
    story_engine: str = Field(min_length=1, max_length=80)
    causal_grammar: str = Field(min_length=1, max_length=80)
    conflict_mode: str = Field(min_length=1, max_length=80)
    opening_device: str = Field(min_length=1, max_length=40)
    keywords: list[str] = Field(default_factory=list, max_length=32)

    @classmethod
    def from_fingerprint(cls, fingerprint: RulesetFingerprint) -> FingerprintBlock:
        return cls(
            lane=fingerprint.lane,
            story_engine=fingerprint.story_engine,
            causal_grammar=fingerprint.causal_grammar,
            conflict_mode=fingerprint.conflict_mode,
            opening_device=fingerprint.opening_device,
            keywords=list(fingerprint.keywords),
        )

    def to_fingerprint(self) -> RulesetFingerprint:
        return RulesetFingerprint(
            lane=self.lane,
            story_engine=self.story_engine,
            causal_grammar=self.causal_grammar,
            conflict_mode=self.conflict_mode,
            opening_device=self.opening_device,
            keywords=tuple(self.keywords),
        )


class LanesResponse(ContractModel):
    lanes: list[Lane]


class DeriveRequest(ContractModel):
    """Lane plus the influencer comps that should nudge its defaults."""

    lane: Lane
    influencers: list[CompsInfluencer] = Field(default_factory=list, max_length=50)


class ProfileRequest(ContractModel):
    profile: EngineProfile


class SummaryResponse(ContractModel):
    lane: Lane
    summary: str


class ConflictsResponse(ContractModel):
    conflicts: list[RuleConflict]
    hard_count: int = Field(ge=0)


class TextRequest(ContractModel):
    text: str


class GateRequest(ContractModel):
    """Candidate text scored against an explicit profile."""

    profile: EngineProfile
    text: str
    similarity_risk: float = Field(default=0.0, ge=0.0, le=1.0)
    diversify_enabled: bool = False


class GateResponse(ContractModel):
    attempt: GateAttempt
    forbidden_found: list[str]


class EvaluateRequest(ContractModel):
    """Derive, score, and gate in one call."""

    lane: Lane
    text: str
    influencers: list[CompsInfluencer] = Field(default_factory=list, max_length=50)
    similarity_risk: float = Field(default=0.0, ge=0.0, le=1.0)
    diversify_enabled: bool = False
    recent_fingerprints: list[FingerprintBlock] | None = Field(default=None, max_length=200)


class EvaluateResponse(ContractModel):
    profile: EngineProfile
    summary: str
    conflicts: list[RuleConflict]
    metrics: RulesetMetrics
    attempt: GateAttempt
    forbidden_found: list[str]
    fingerprint: FingerprintBlock
    similarity_risk: float = Field(ge=0.0, le=1.0)
    repair_instruction: str | None = None


class OverridesRequest(ContractModel):
    """Base profile, optional engine profile, and layered override patches."""

    profile: EngineProfile
    engine_profile: EngineProfile | None = None
    project_overrides: list[OverridePatch] = Field(default_factory=list)
    run_overrides: list[OverridePatch] = Field(default_factory=list)


class RepairRequest(ContractModel):
    profile: EngineProfile
    failures: list[GateFailure]
    forbidden_found: list[str] = Field(default_factory=list)


class RepairResponse(ContractModel):
    instruction: str


class BenchmarkResponse(ContractModel):
    """Resolved pacing preset for one lane, feel and benchmark."""

    lane: Lane
    feel: PacingFeel
    feel_label: str
    benchmark: StyleBenchmark | None
    benchmark_label: str | None = None
    benchmark_description: str | None = None
    bpm_min: float
    bpm_target: float
    bpm_max: float
    quiet_beats_min: int
    subtext_scenes_min: int
    meaning_shifts_min_per_act: int
    subtext_ratio_target: float | None = None
    monologue_max_lines: int | None = None
