"""CLI for printing a lane profile, optionally derived from comps."""

from __future__ import annotations

import argparse

from story_rules.cli.comps import load_influencers
from story_rules.core.conflicts import detect_conflicts
from story_rules.core.derive import derive_engine_profile, generate_rules_summary
from story_rules.core.ruleset_schema import LANES


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print a derived engine profile.")
    parser.add_argument("--lane", choices=list(LANES), default="feature_film")
    parser.add_argument("--comps", default="", help="JSON file with an array of influencers.")
    parser.add_argument("--json", action="store_true", help="Emit the full profile as JSON.")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    profile = derive_engine_profile(parsed.lane, load_influencers(str(parsed.comps)))
    if parsed.json:
        print(profile.model_dump_json(indent=2))
        return
    print(generate_rules_summary(profile))
    conflicts = detect_conflicts(profile)
    if conflicts:
        print("Conflicts:")
        for conflict in conflicts:
            print(f"  [{conflict.severity}] {conflict.id}: {conflict.message}")


if __name__ == "__main__":
    main()
