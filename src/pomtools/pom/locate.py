from __future__ import annotations

from typing import Optional

from pomtools.pom.model import Plugin, PomModel


def find_plugin(model: PomModel, group_id: str, artifact_id: str) -> Optional[Plugin]:
    """
    Return the build plugin matching (group_id, artifact_id), or None.

    Matching is exact and case-sensitive. The model is never mutated.
    """
    for plugin in model.plugins:
        if plugin.group_id == group_id and plugin.artifact_id == artifact_id:
            return plugin
    return None
