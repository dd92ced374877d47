"""Shared loading helpers for CLI entrypoints."""

from __future__ import annotations

from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from story_rules.core.ruleset_schema import CompsInfluencer

_INFLUENCER_LIST = TypeAdapter(list[CompsInfluencer])


def load_influencers(path: str) -> list[CompsInfluencer]:
    """Read a JSON array of influencer comps; empty path means no comps."""
    if not path:
        return []
    comps_path = Path(path)
    if not comps_path.is_file():
        raise SystemExit(f"Comps file not found: {comps_path}")
    try:
        return _INFLUENCER_LIST.validate_json(comps_path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise SystemExit(f"Invalid comps file {comps_path}: {exc}") from exc
