"""FastAPI application exposing the ruleset engine."""

from __future__ import annotations

import logging
import os
from typing import Literal

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from story_rules.adapters.observability import int_env
from story_rules.api.contracts import (
    BenchmarkResponse,
    ConflictsResponse,
    DeriveRequest,
    EvaluateRequest,
    EvaluateResponse,
    FingerprintBlock,
    GateRequest,
    GateResponse,
    LanesResponse,
    OverridesRequest,
    ProfileRequest,
    RepairRequest,
    RepairResponse,
    SummaryResponse,
    TextRequest,
)
from story_rules.core.benchmarks import (
    PACING_FEEL_LABELS,
    STYLE_BENCHMARK_LABELS,
    PacingFeel,
    StyleBenchmark,
    get_benchmark_defaults,
    get_default_benchmark,
    get_default_feel,
)
from story_rules.core.conflicts import detect_conflicts
from story_rules.core.defaults import get_default_engine_profile
from story_rules.core.derive import derive_engine_profile, generate_rules_summary
from story_rules.core.gate import run_ruleset_gate
from story_rules.core.merge import RulesetOverrideError, merge_ruleset
from story_rules.core.repair import build_ruleset_repair_instruction
from story_rules.core.ruleset_pipeline import evaluate_candidate_text
from story_rules.core.ruleset_schema import LANES, EngineProfile, Lane, RulesetMetrics
from story_rules.core.scoring import compute_ruleset_metrics, detect_forbidden_moves

DEFAULT_MAX_TEXT_CHARS = 2_000_000

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Simple health payload used by liveness checks."""

    status: Literal["ok"] = "ok"
    service: str = "story_rules"


class ApiRootResponse(BaseModel):
    """Describes currently available API capabilities."""

    name: str = "story_rules"
    stage: Literal["local-preview"] = "local-preview"
    endpoints: list[str] = Field(
        default_factory=lambda: [
            "/healthz",
            "/api/v1",
            "/api/v1/rulesets/lanes",
            "/api/v1/rulesets/defaults/{lane}",
            "/api/v1/rulesets/derive",
            "/api/v1/rulesets/conflicts",
            "/api/v1/rulesets/summary",
            "/api/v1/rulesets/metrics",
            "/api/v1/rulesets/gate",
            "/api/v1/rulesets/evaluate",
            "/api/v1/rulesets/overrides",
            "/api/v1/rulesets/repair",
            "/api/v1/rulesets/benchmarks/{lane}",
        ]
    )


def _cors_origins() -> list[str]:
    raw = os.environ.get("STORY_RULES_CORS_ORIGINS", "").strip()
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]


def create_app() -> FastAPI:
    """Create the API application."""
    max_text_chars = int_env(
        "STORY_RULES_MAX_TEXT_CHARS",
        DEFAULT_MAX_TEXT_CHARS,
        minimum=1_000,
        maximum=50_000_000,
    )

    app = FastAPI(
        title="story_rules API",
        version="0.1.0",
        description=(
            "Deterministic ruleset engine: lane defaults, comps derivation, "
            "conflict review, craft metrics and the pass/fail gate."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {"name": "system", "description": "Service health and runtime metadata."},
            {"name": "api", "description": "API discovery and root-level capability listing."},
            {"name": "profiles", "description": "Lane defaults, derivation and overrides."},
            {"name": "scoring", "description": "Craft metrics and gate verdicts."},
        ],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info("api.start max_text_chars=%s", max_text_chars)

    def checked_text(text: str) -> str:
        if len(text) > max_text_chars:
            logger.warning("api.text_rejected chars=%s limit=%s", len(text), max_text_chars)
            raise HTTPException(
                status_code=413,
                detail=f"Text exceeds {max_text_chars} characters",
            )
        return text

    @app.get("/healthz", response_model=HealthResponse, tags=["system"])
    def healthz() -> HealthResponse:
        return HealthResponse()

    @app.get("/api/v1", response_model=ApiRootResponse, tags=["api"])
    def api_v1_root() -> ApiRootResponse:
        return ApiRootResponse()

    @app.get("/api/v1/rulesets/lanes", response_model=LanesResponse, tags=["profiles"])
    def list_lanes() -> LanesResponse:
        return LanesResponse(lanes=list(LANES))

    @app.get(
        "/api/v1/rulesets/defaults/{lane}",
        response_model=EngineProfile,
        tags=["profiles"],
    )
    def lane_defaults(lane: Lane) -> EngineProfile:
        return get_default_engine_profile(lane)

    @app.post("/api/v1/rulesets/derive", response_model=EngineProfile, tags=["profiles"])
    def derive(payload: DeriveRequest) -> EngineProfile:
        profile = derive_engine_profile(payload.lane, payload.influencers)
        logger.info(
            "ruleset.derive lane=%s influencers=%s forbidden=%s",
            payload.lane,
            len(payload.influencers),
            len(profile.forbidden_moves),
        )
        return profile

    @app.post(
        "/api/v1/rulesets/conflicts",
        response_model=ConflictsResponse,
        tags=["profiles"],
    )
    def conflicts(payload: ProfileRequest) -> ConflictsResponse:
        found = detect_conflicts(payload.profile)
        return ConflictsResponse(
            conflicts=found,
            hard_count=sum(1 for conflict in found if conflict.severity == "hard"),
        )

    @app.post("/api/v1/rulesets/summary", response_model=SummaryResponse, tags=["profiles"])
    def summary(payload: ProfileRequest) -> SummaryResponse:
        return SummaryResponse(
            lane=payload.profile.lane,
            summary=generate_rules_summary(payload.profile),
        )

    @app.post("/api/v1/rulesets/overrides", response_model=EngineProfile, tags=["profiles"])
    def overrides(payload: OverridesRequest) -> EngineProfile:
        try:
            return merge_ruleset(
                payload.profile,
                payload.engine_profile,
                payload.project_overrides,
                payload.run_overrides,
            )
        except RulesetOverrideError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @app.get(
        "/api/v1/rulesets/benchmarks/{lane}",
        response_model=BenchmarkResponse,
        tags=["profiles"],
    )
    def benchmark_defaults(
        lane: Lane,
        feel: PacingFeel | None = Query(default=None),
        benchmark: StyleBenchmark | None = Query(default=None),
    ) -> BenchmarkResponse:
        effective_feel = feel or get_default_feel(lane)
        effective_benchmark = benchmark or get_default_benchmark(lane)
        result = get_benchmark_defaults(lane, effective_benchmark, effective_feel)
        label, description = STYLE_BENCHMARK_LABELS[effective_benchmark]
        return BenchmarkResponse(
            lane=lane,
            feel=effective_feel,
            feel_label=PACING_FEEL_LABELS[effective_feel],
            benchmark=effective_benchmark,
            benchmark_label=label,
            benchmark_description=description,
            bpm_min=result.bpm_min,
            bpm_target=result.bpm_target,
            bpm_max=result.bpm_max,
            quiet_beats_min=result.quiet_beats_min,
            subtext_scenes_min=result.subtext_scenes_min,
            meaning_shifts_min_per_act=result.meaning_shifts_min_per_act,
            subtext_ratio_target=(
                result.dialogue.subtext_ratio_target if result.dialogue is not None else None
            ),
            monologue_max_lines=(
                result.dialogue.monologue_max_lines if result.dialogue is not None else None
            ),
        )

    @app.post("/api/v1/rulesets/metrics", response_model=RulesetMetrics, tags=["scoring"])
    def metrics(payload: TextRequest) -> RulesetMetrics:
        return compute_ruleset_metrics(checked_text(payload.text))

    @app.post("/api/v1/rulesets/gate", response_model=GateResponse, tags=["scoring"])
    def gate(payload: GateRequest) -> GateResponse:
        text = checked_text(payload.text)
        attempt = run_ruleset_gate(
            compute_ruleset_metrics(text),
            text,
            payload.profile,
            payload.similarity_risk,
            payload.diversify_enabled,
        )
        return GateResponse(
            attempt=attempt,
            forbidden_found=detect_forbidden_moves(text, payload.profile.forbidden_moves),
        )

    @app.post("/api/v1/rulesets/evaluate", response_model=EvaluateResponse, tags=["scoring"])
    def evaluate(payload: EvaluateRequest) -> EvaluateResponse:
        recent = None
        if payload.recent_fingerprints is not None:
            recent = [block.to_fingerprint() for block in payload.recent_fingerprints]
        result = evaluate_candidate_text(
            lane=payload.lane,
            text=checked_text(payload.text),
            influencers=payload.influencers,
            similarity_risk=payload.similarity_risk,
            diversify_enabled=payload.diversify_enabled,
            recent_fingerprints=recent,
        )
        return EvaluateResponse(
            profile=result.profile,
            summary=generate_rules_summary(result.profile),
            conflicts=list(result.conflicts),
            metrics=result.metrics,
            attempt=result.attempt,
            forbidden_found=list(result.forbidden_found),
            fingerprint=FingerprintBlock.from_fingerprint(result.fingerprint),
            similarity_risk=result.similarity_risk,
            repair_instruction=result.repair_instruction,
        )

    @app.post("/api/v1/rulesets/repair", response_model=RepairResponse, tags=["scoring"])
    def repair(payload: RepairRequest) -> RepairResponse:
        return RepairResponse(
            instruction=build_ruleset_repair_instruction(
                payload.failures,
                payload.profile,
                payload.forbidden_found,
            )
        )

    return app


app = create_app()
