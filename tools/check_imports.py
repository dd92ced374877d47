"""Validate Python layer import boundaries for story_rules."""

from __future__ import annotations

import ast
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE_ROOT = PROJECT_ROOT / "src" / "story_rules"
PACKAGE = "story_rules"
KNOWN_LAYERS = {"api", "core", "adapters", "cli"}
RULES: dict[str, set[str]] = {
    "core": {"api", "adapters", "cli"},
    "adapters": {"api", "cli"},
    "api": {"cli"},
}


def _layer_for_path(path: Path, source_root: Path) -> str | None:
    try:
        parts = path.relative_to(source_root).parts
    except ValueError:
        return None
    return parts[0] if len(parts) > 1 else None


def _module_parts(node: ast.ImportFrom, path: Path, source_root: Path) -> list[str]:
    if node.level == 0:
        return node.module.split(".") if node.module else []
    package = [PACKAGE, *path.relative_to(source_root).with_suffix("").parts[:-1]]
    if node.level - 1 > len(package):
        return []
    base = package[: len(package) - (node.level - 1)]
    return [*base, *node.module.split(".")] if node.module else base


def _layers_for(parts: list[str], names: list[str]) -> set[str]:
    if not parts or parts[0] != PACKAGE:
        return set()
    if len(parts) >= 2:
        return {parts[1]} & KNOWN_LAYERS
    return set(names) & KNOWN_LAYERS


def _imported_layers(node: ast.Import | ast.ImportFrom, path: Path, source_root: Path) -> set[str]:
    if isinstance(node, ast.Import):
        layers: set[str] = set()
        for alias in node.names:
            layers |= _layers_for(alias.name.split("."), [])
        return layers
    names = [alias.name for alias in node.names]
    return _layers_for(_module_parts(node, path, source_root), names)


def check_file(path: Path, source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    layer = _layer_for_path(path, source_root)
    banned_layers = RULES.get(layer or "", set())
    if not banned_layers:
        return []

    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    violations: list[str] = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        for imported_layer in sorted(_imported_layers(node, path, source_root)):
            if imported_layer in banned_layers:
                violations.append(f"{path}: {layer} must not import {PACKAGE}.{imported_layer}")
    return violations


def check_import_boundaries(source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    violations: list[str] = []
    for path in sorted(source_root.rglob("*.py")):
        violations.extend(check_file(path, source_root))
    return violations


def main() -> None:
    violations = check_import_boundaries()
    if violations:
        raise SystemExit("\n".join(violations))
    print("import boundary checks passed")


if __name__ == "__main__":
    main()
