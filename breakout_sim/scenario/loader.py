"""
Scenario YAML loading.

Scenarios are looked up by name among the built-in presets first, then as
<name>.yml / <name>.yaml in the scenario directory (recursively), and
finally as a direct file path.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from .spec import PRESETS, ScenarioSpec


def load_scenario(name_or_path: str, base_dir: Path | str | None = None) -> ScenarioSpec:
    """
    Load a scenario by preset name, scenario id or file path.

    Args:
        name_or_path: Preset name, file stem in base_dir, or a path to a YAML file
        base_dir: Scenario directory (defaults to the configured scenario_dir)

    Returns:
        Validated ScenarioSpec
    """
    if name_or_path in PRESETS:
        return PRESETS[name_or_path]()

    direct = Path(name_or_path)
    if direct.is_file():
        return _load_file(direct)

    search_dir = Path(base_dir) if base_dir is not None else _default_dir()
    path = None
    if search_dir.exists():
        for ext in (".yml", ".yaml"):
            candidate = search_dir / f"{name_or_path}{ext}"
            if candidate.exists():
                path = candidate
                break
            matches = sorted(search_dir.rglob(f"{name_or_path}{ext}"))
            if matches:
                path = matches[0]
                break

    if not path:
        available = list_scenarios(search_dir)
        raise FileNotFoundError(
            f"Scenario '{name_or_path}' not found in {search_dir}. Available: {available[:20]}"
        )

    return _load_file(path)


def _load_file(path: Path) -> ScenarioSpec:
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not raw:
        raise ValueError(f"Empty or invalid YAML in {path}")
    if not isinstance(raw, dict):
        raise ValueError(
            f"Scenario file {path} must hold a mapping, got {type(raw).__name__}\n"
            f"\n"
            f"Fix:\n"
            f"  start_price: 100.0\n"
            f"  duration: 60"
        )

    raw.setdefault("name", path.stem)
    return ScenarioSpec.from_dict(raw)


def list_scenarios(base_dir: Path | str | None = None) -> list[str]:
    """List preset names plus scenario files found in base_dir."""
    search_dir = Path(base_dir) if base_dir is not None else _default_dir()
    names = set(PRESETS)
    if search_dir.exists():
        for ext in ("*.yml", "*.yaml"):
            for path in search_dir.rglob(ext):
                if path.stem.startswith("_"):
                    continue
                names.add(path.stem)
    return sorted(names)


def save_scenario(spec: ScenarioSpec, path: Path | str) -> Path:
    """Write a scenario to YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        yaml.safe_dump(spec.to_dict(), f, sort_keys=False)
    return path


def _default_dir() -> Path:
    from ..config.config import get_config
    return Path(get_config().scenario.scenario_dir)
