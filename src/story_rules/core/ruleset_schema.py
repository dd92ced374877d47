"""Canonical ruleset schema shared by derivation, scoring, and gate stages."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Final, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

RULESET_SCHEMA_VERSION: Final[Literal["ruleset.v1"]] = "ruleset.v1"

Lane = Literal["feature_film", "vertical_drama", "series", "documentary"]
InfluenceDimension = Literal[
    "pacing",
    "stakes_ladder",
    "dialogue_style",
    "twist_budget",
    "texture_realism",
    "antagonism_model",
]
ConflictSeverity = Literal["warn", "hard"]
SuggestedAction = Literal["honor_comps", "honor_overrides", "blend"]
GateFailure = Literal[
    "MELODRAMA",
    "OVERCOMPLEXITY",
    "TEMPLATE_SIMILARITY",
    "STAKES_TOO_BIG_TOO_EARLY",
    "TWIST_OVERUSE",
    "SUBTEXT_MISSING",
    "QUIET_BEATS_MISSING",
    "MEANING_SHIFT_MISSING",
    "FORBIDDEN_MOVE_PRESENT",
]

LANES: Final[tuple[Lane, ...]] = get_args(Lane)
INFLUENCE_DIMENSIONS: Final[tuple[InfluenceDimension, ...]] = get_args(InfluenceDimension)
GATE_FAILURE_CODES: Final[tuple[GateFailure, ...]] = get_args(GateFailure)

_TAG_SEPARATORS = re.compile(r"[\s\-]+")


def normalize_tag(value: str) -> str:
    """Collapse a device/tag label to its lowercase underscore form."""
    return _TAG_SEPARATORS.sub("_", value.strip().lower()).strip("_")


def dedupe_tags(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    deduped: list[str] = []
    for value in values:
        tag = normalize_tag(value)
        if not tag or tag in seen:
            continue
        seen.add(tag)
        deduped.append(tag)
    return deduped


class SchemaModel(BaseModel):
    """Strict model configuration for ruleset artifacts."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class FrozenSchemaModel(SchemaModel):
    """Read-only artifact emitted by scoring and gate stages."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)


class CompsInfluencer(SchemaModel):
    """One reference title that nudges lane defaults along declared dimensions."""

    title: str = Field(min_length=1, max_length=300)
    year: int | None = Field(default=None, ge=1880, le=2100)
    format: str = Field(min_length=1, max_length=60)
    weight: float = Field(ge=0.0, allow_inf_nan=False)
    dimensions: list[InfluenceDimension] = Field(default_factory=list)
    emulate_tags: list[str] = Field(default_factory=list)
    avoid_tags: list[str] = Field(default_factory=list)

    @field_validator("dimensions")
    @classmethod
    def _dedupe_dimensions(cls, values: list[InfluenceDimension]) -> list[InfluenceDimension]:
        return list(dict.fromkeys(values))

    @field_validator("emulate_tags", "avoid_tags")
    @classmethod
    def _normalize_tags(cls, values: list[str]) -> list[str]:
        return dedupe_tags(values)


class CompsReference(SchemaModel):
    """Influencer summary stored on a profile; tags are aggregated separately."""

    title: str = Field(min_length=1, max_length=300)
    year: int | None = None
    format: str = Field(min_length=1, max_length=60)
    weight: float = Field(ge=0.0, allow_inf_nan=False)
    dimensions: list[InfluenceDimension] = Field(default_factory=list)


class CompsBlock(SchemaModel):
    influencers: list[CompsReference] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class EngineBlock(SchemaModel):
    """Categorical tags describing the narrative machinery."""

    story_engine: str = Field(min_length=1, max_length=80)
    causal_grammar: str = Field(min_length=1, max_length=80)
    conflict_mode: str = Field(min_length=1, max_length=80)


class BeatsPerMinute(SchemaModel):
    min: float = Field(ge=0.0, le=10.0)
    target: float = Field(ge=0.0, le=10.0)
    max: float = Field(ge=0.0, le=10.0)


class CliffhangerRate(SchemaModel):
    target: float = Field(ge=0.0, le=1.0)
    max: float = Field(ge=0.0, le=1.0)


class PacingProfile(SchemaModel):
    beats_per_minute: BeatsPerMinute
    cliffhanger_rate: CliffhangerRate
    quiet_beats_min: int = Field(ge=0, le=10)
    subtext_scenes_min: int = Field(ge=0, le=10)
    meaning_shifts_min_per_act: int = Field(ge=0, le=10)


class StakesLadder(SchemaModel):
    """When each stakes category may enter the story."""

    early_allowed: list[str] = Field(default_factory=list)
    no_global_before_pct: float = Field(ge=0.0, le=1.0)
    late_allowed: list[str] = Field(default_factory=list)
    notes: str = ""


class Budgets(SchemaModel):
    drama_budget: int = Field(ge=0, le=10)
    twist_cap: int = Field(ge=0, le=10)
    big_reveal_cap: int = Field(ge=0, le=10)
    plot_thread_cap: int = Field(ge=0, le=10)
    core_character_cap: int = Field(ge=0, le=10)
    faction_cap: int = Field(ge=0, le=10)
    coincidence_cap: int = Field(ge=0, le=10)


class DialogueRules(SchemaModel):
    subtext_ratio_target: float = Field(ge=0.0, le=1.0)
    monologue_max_lines: int = Field(ge=0, le=40)
    no_speeches: bool = True
    absolute_words_penalty: bool = True


class TextureRules(SchemaModel):
    realism_level: Literal["grounded", "heightened", "verite"] = "grounded"
    specificity_required: bool = True
    genre_heightening_allowed: bool = False


class AntagonismModel(SchemaModel):
    legitimacy_required: bool = True
    antagonist_kind: Literal["personal", "institutional", "systemic", "none"] = "systemic"
    cartoon_villains_allowed: bool = False


class GateThresholds(SchemaModel):
    melodrama_max: float = Field(ge=0.0, le=1.0)
    similarity_max: float = Field(ge=0.0, le=1.0)
    complexity_threads_max: int = Field(ge=0, le=20)
    complexity_factions_max: int = Field(ge=0, le=20)
    complexity_core_chars_max: int = Field(ge=0, le=20)


class EngineProfile(SchemaModel):
    """Full set of creative constraints and thresholds for one generation session."""

    version: str = Field(default=RULESET_SCHEMA_VERSION, min_length=1, max_length=40)
    lane: Lane
    comps: CompsBlock = Field(default_factory=CompsBlock)
    engine: EngineBlock
    pacing_profile: PacingProfile
    stakes_ladder: StakesLadder
    budgets: Budgets
    dialogue_rules: DialogueRules
    texture_rules: TextureRules = Field(default_factory=TextureRules)
    antagonism_model: AntagonismModel = Field(default_factory=AntagonismModel)
    forbidden_moves: list[str] = Field(default_factory=list)
    signature_devices: list[str] = Field(default_factory=list)
    gate_thresholds: GateThresholds


class RuleConflict(FrozenSchemaModel):
    """Divergence between a derived profile and its lane defaults."""

    id: str = Field(min_length=1, max_length=160)
    severity: ConflictSeverity
    dimension: str = Field(min_length=1, max_length=80)
    message: str = Field(min_length=1)
    inferred_value: str
    expected_value: str
    suggested_actions: tuple[SuggestedAction, ...] = ()


class RulesetMetrics(FrozenSchemaModel):
    """Frequency-based craft signals; rates are per 1000 words."""

    absolute_words_rate: float = Field(default=0.0, ge=0.0)
    twist_keyword_rate: float = Field(default=0.0, ge=0.0)
    conspiracy_markers: int = Field(default=0, ge=0)
    shock_events_early: int = Field(default=0, ge=0)
    speech_length_proxy: int = Field(default=0, ge=0)
    named_factions: int = Field(default=0, ge=0)
    plot_thread_count: int = Field(default=0, ge=0)
    new_character_density: float = Field(default=0.0, ge=0.0)
    subtext_scene_count: int = Field(default=0, ge=0)
    quiet_beats_count: int = Field(default=0, ge=0)
    meaning_shift_count: int = Field(default=0, ge=0)
    antagonist_legitimacy: bool = False
    cost_of_action_markers: int = Field(default=0, ge=0)


class GateAttempt(FrozenSchemaModel):
    """One gate verdict; serialized with a ``pass`` key."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    passed: bool = Field(alias="pass")
    failures: tuple[GateFailure, ...] = ()
    melodrama_score: float = Field(ge=0.0, le=1.0)
    nuance_score: float = Field(ge=0.0, le=1.0)
    metrics: RulesetMetrics
