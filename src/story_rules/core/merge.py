"""Layer project and run overrides onto an engine profile."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal

from pydantic import Field, ValidationError

from story_rules.core.ruleset_schema import EngineProfile, SchemaModel


class RulesetOverrideError(ValueError):
    """Raised when an override patch cannot be applied to a profile."""


class OverridePatch(SchemaModel):
    """One JSON-Patch style operation against a profile document."""

    op: Literal["add", "replace", "remove"]
    path: str = Field(min_length=1, max_length=300, pattern=r"^/")
    value: Any = None


def _pointer_tokens(path: str) -> list[str]:
    return [token.replace("~1", "/").replace("~0", "~") for token in path.split("/")[1:]]


def _list_index(container: list[Any], token: str, *, path: str, allow_end: bool) -> int:
    if token == "-" and allow_end:
        return len(container)
    if not token.isdigit():
        raise RulesetOverrideError(f"Invalid list index '{token}' in {path}.")
    index = int(token)
    limit = len(container) if allow_end else len(container) - 1
    if index > limit:
        raise RulesetOverrideError(f"List index {index} out of range in {path}.")
    return index


def _apply_patch(document: dict[str, Any], patch: OverridePatch) -> None:
    tokens = _pointer_tokens(patch.path)
    if not tokens or tokens == [""]:
        raise RulesetOverrideError("Overrides cannot replace the whole profile.")
    parent: Any = document
    for token in tokens[:-1]:
        if isinstance(parent, dict) and token in parent:
            parent = parent[token]
        elif isinstance(parent, list):
            parent = parent[_list_index(parent, token, path=patch.path, allow_end=False)]
        else:
            raise RulesetOverrideError(f"Path {patch.path} does not resolve.")

    leaf = tokens[-1]
    if isinstance(parent, dict):
        if patch.op != "add" and leaf not in parent:
            raise RulesetOverrideError(f"Path {patch.path} does not resolve.")
        if patch.op == "remove":
            del parent[leaf]
        else:
            parent[leaf] = patch.value
        return
    if isinstance(parent, list):
        index = _list_index(parent, leaf, path=patch.path, allow_end=patch.op == "add")
        if patch.op == "add":
            parent.insert(index, patch.value)
        elif patch.op == "replace":
            parent[index] = patch.value
        else:
            del parent[index]
        return
    raise RulesetOverrideError(f"Path {patch.path} does not resolve.")


def apply_overrides(
    profile: EngineProfile,
    patches: Sequence[OverridePatch],
) -> EngineProfile:
    """Return a new profile with patches applied in order; the input is untouched."""
    document = profile.model_dump(mode="python")
    for patch in patches:
        _apply_patch(document, patch)
    try:
        return EngineProfile.model_validate(document)
    except ValidationError as exc:
        raise RulesetOverrideError(f"Overrides produced an invalid profile: {exc}") from exc


def merge_ruleset(
    base: EngineProfile,
    engine_profile: EngineProfile | None,
    project_overrides: Sequence[OverridePatch],
    run_overrides: Sequence[OverridePatch],
) -> EngineProfile:
    """Resolve the effective profile; run overrides win over project overrides."""
    start = engine_profile if engine_profile is not None else base
    merged = apply_overrides(start, project_overrides)
    return apply_overrides(merged, run_overrides)
