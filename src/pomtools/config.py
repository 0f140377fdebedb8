# pomtools/config.py

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from pomtools.operations.change_plugin import PluginChangeSpec, PomChangePlugin
from pomtools.pom.model import Dependency, Goals, GoalsTree, PluginExecution, RawGoals

_SPEC_KEYS = set(PluginChangeSpec.model_fields)


# ---------------------------------------------------------------------------
# Value parsers (shared with the CLI)
# ---------------------------------------------------------------------------

def _scalar(v: Any) -> str:
    # YAML booleans must reach the POM as Maven spells them
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def _fields(value: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in value.items():
        if v is None:
            continue
        if k == "extra":
            if isinstance(v, str):
                v = [v]
            if not isinstance(v, (list, tuple)):
                raise ValueError(f"extra must be a list of XML fragments, got: {type(v).__name__}")
            out[k] = tuple(str(x) for x in v)
        else:
            out[k] = _scalar(v)
    return out


def parse_coords(value: str) -> Tuple[str, str]:
    """'groupId:artifactId' -> (groupId, artifactId)"""
    parts = str(value).split(":")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise ValueError(f"Expected groupId:artifactId, got: {value!r}")
    return parts[0].strip(), parts[1].strip()


def parse_dependency(value: Any) -> Dependency:
    """
    Accepts 'g:a[:version[:scope]]' or a mapping:

      {group_id: g, artifact_id: a, version: v, scope: s, type: t, classifier: c}
    """
    if isinstance(value, dict):
        try:
            return Dependency(**_fields(value))
        except TypeError as e:
            raise ValueError(f"Invalid dependency {value!r}: {e}") from None

    parts = [p.strip() for p in str(value).split(":")]
    if len(parts) < 2 or len(parts) > 4 or not parts[0] or not parts[1]:
        raise ValueError(f"Expected groupId:artifactId[:version[:scope]], got: {value!r}")
    return Dependency(
        group_id=parts[0],
        artifact_id=parts[1],
        version=parts[2] if len(parts) > 2 and parts[2] else None,
        scope=parts[3] if len(parts) > 3 and parts[3] else None,
    )


def parse_execution(value: Any) -> PluginExecution:
    """
    Accepts 'id[:phase[:goal,goal]]' or a mapping with id, phase, goals,
    inherited and configuration (raw XML).
    """
    if isinstance(value, dict):
        cfg = dict(value)
        goals = cfg.pop("goals", None) or []
        if isinstance(goals, str):
            goals = [goals]
        try:
            return PluginExecution(goals=tuple(str(g) for g in goals), **_fields(cfg))
        except TypeError as e:
            raise ValueError(f"Invalid execution {value!r}: {e}") from None

    parts = str(value).split(":")
    if len(parts) > 3:
        raise ValueError(f"Expected id[:phase[:goal,goal]], got: {value!r}")
    goals = tuple(g.strip() for g in parts[2].split(",") if g.strip()) if len(parts) > 2 else ()
    return PluginExecution(
        id=parts[0].strip() or None,
        phase=(parts[1].strip() or None) if len(parts) > 1 else None,
        goals=goals,
    )


def goals_from_config(value: Any) -> Goals:
    """
    A list becomes a goal list. A string starting with "<" is taken as raw
    <goals> markup; any other string is a single goal.
    """
    if isinstance(value, str):
        if value.lstrip().startswith("<"):
            return RawGoals(markup=value)
        return GoalsTree(goals=(value.strip(),))
    if isinstance(value, (list, tuple)):
        return GoalsTree(goals=tuple(str(g) for g in value))
    raise ValueError(f"goals must be a list or raw XML string, got: {type(value).__name__}")


# ---------------------------------------------------------------------------
# Change entries
# ---------------------------------------------------------------------------

def spec_from_config(cfg: Dict[str, Any]) -> PluginChangeSpec:
    """
    Build a PluginChangeSpec from one YAML change entry (without 'plugin').
    """
    cfg = dict(cfg)

    unknown = set(cfg) - _SPEC_KEYS
    if unknown:
        raise ValueError(f"Unknown change keys: {', '.join(sorted(unknown))}")

    if cfg.get("executions") is not None:
        cfg["executions"] = [parse_execution(e) for e in cfg["executions"]]
    if cfg.get("dependencies") is not None:
        cfg["dependencies"] = [parse_dependency(d) for d in cfg["dependencies"]]
    if cfg.get("goals") is not None:
        cfg["goals"] = goals_from_config(cfg["goals"])
    if "version" in cfg and cfg["version"] is not None:
        cfg["version"] = str(cfg["version"])

    return PluginChangeSpec(**cfg)


def operation_from_config(cfg: Dict[str, Any], relative_path: str = "pom.xml") -> PomChangePlugin:
    """
    Build one PomChangePlugin from a change entry:

      plugin: org.apache.maven.plugins:maven-compiler-plugin
      version: "3.11.0"
      remove_goals: true
      if_not_present: warn
    """
    if not isinstance(cfg, dict):
        raise ValueError("Change entry must be a mapping")
    cfg = dict(cfg)
    if "plugin" not in cfg:
        raise ValueError("Change entry is missing 'plugin'")

    group_id, artifact_id = parse_coords(cfg.pop("plugin"))
    return PomChangePlugin(group_id, artifact_id, spec_from_config(cfg), relative_path=relative_path)


def load_change_file(path: str | Path) -> List[PomChangePlugin]:
    """
    Load a YAML change file:

      pom: pom.xml
      changes:
        - plugin: g:a
          ...
    """
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise FileNotFoundError(path)

    doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(doc, dict):
        raise ValueError(f"{path}: change file must be a mapping")

    relative_path = str(doc.get("pom", "pom.xml"))
    changes = doc.get("changes") or []
    if not isinstance(changes, list):
        raise ValueError(f"{path}: 'changes' must be a list")

    ops: List[PomChangePlugin] = []
    for i, entry in enumerate(changes):
        try:
            ops.append(operation_from_config(entry, relative_path))
        except ValueError as e:
            raise ValueError(f"{path}: changes[{i}]: {e}") from e
    return ops
