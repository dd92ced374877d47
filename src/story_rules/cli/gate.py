"""CLI for running the ruleset gate over one candidate text file."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from story_rules.adapters.observability import bool_env, configure_runtime_logging
from story_rules.cli.comps import load_influencers
from story_rules.core.ruleset_pipeline import evaluate_candidate_text
from story_rules.core.ruleset_schema import LANES


def build_arg_parser() -> argparse.ArgumentParser:
    """Define CLI flags for one gate evaluation."""
    parser = argparse.ArgumentParser(description="Score a draft and run the ruleset gate.")
    parser.add_argument("--text-file", required=True)
    parser.add_argument("--lane", choices=list(LANES), default="feature_film")
    parser.add_argument("--comps", default="", help="JSON file with an array of influencers.")
    parser.add_argument("--similarity-risk", type=float, default=0.0)
    parser.add_argument(
        "--diversify",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable the template-similarity check (default: STORY_RULES_DIVERSIFY).",
    )
    parser.add_argument("--json", action="store_true", help="Emit the gate attempt as JSON.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Evaluate one text file; exits non-zero when the gate fails."""
    configure_runtime_logging()
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)

    text_path = Path(str(parsed.text_file))
    if not text_path.is_file():
        raise SystemExit(f"Text file not found: {text_path}")
    similarity_risk = float(parsed.similarity_risk)
    if not 0.0 <= similarity_risk <= 1.0:
        raise SystemExit("--similarity-risk must be between 0 and 1.")
    diversify = parsed.diversify
    if diversify is None:
        diversify = bool_env("STORY_RULES_DIVERSIFY")

    result = evaluate_candidate_text(
        lane=parsed.lane,
        text=text_path.read_text(encoding="utf-8"),
        influencers=load_influencers(str(parsed.comps)),
        similarity_risk=similarity_risk,
        diversify_enabled=bool(diversify),
    )
    attempt = result.attempt
    if parsed.json:
        payload = attempt.model_dump(mode="json", by_alias=True)
        payload["forbidden_found"] = list(result.forbidden_found)
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(f"Lane: {result.profile.lane}")
        print(f"Verdict: {'PASS' if attempt.passed else 'FAIL'}")
        print(f"Melodrama score: {attempt.melodrama_score:.3f}")
        print(f"Nuance score: {attempt.nuance_score:.3f}")
        print(f"Failures: {', '.join(attempt.failures) if attempt.failures else 'none'}")
        if result.forbidden_found:
            print(f"Forbidden moves: {', '.join(result.forbidden_found)}")
        if result.repair_instruction:
            print()
            print(result.repair_instruction)
    if not attempt.passed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
