# pomtools/operations/change_plugin.py

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pomtools.operations.base import ArtifactPomOperation, IfNotPresent
from pomtools.operations.result import ExecutionResult, TransformationOperationException
from pomtools.pom.io import check_fragment
from pomtools.pom.locate import find_plugin
from pomtools.pom.model import Dependency, GoalsTree, PluginExecution, PomModel, RawGoals

logger = logging.getLogger("pomtools.change_plugin")


class PluginChangeSpec(BaseModel):
    """
    The edits to apply to one build plugin.

    Each of the five fields is tri-state: left unspecified (None / False),
    set to a value, or removed via its ``remove_*`` flag. When both a value
    and the remove flag are given, removal wins.

    Validation runs at construction; an invalid spec never reaches a POM.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Optional[str] = None
    extensions: Optional[bool] = None
    executions: Optional[Tuple[PluginExecution, ...]] = None
    dependencies: Optional[Tuple[Dependency, ...]] = None
    goals: Optional[Union[GoalsTree, RawGoals]] = None

    remove_version: bool = False
    remove_extensions: bool = False
    remove_executions: bool = False
    remove_dependencies: bool = False
    remove_goals: bool = False

    if_not_present: IfNotPresent = Field(default=IfNotPresent.FAIL)

    @field_validator("version")
    @classmethod
    def _version_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Version cannot be blank")
        return v

    @field_validator("executions")
    @classmethod
    def _unique_execution_ids(cls, v: Optional[Tuple[PluginExecution, ...]]):
        if v is None:
            return v
        seen = set()
        for ex in v:
            # a missing id and an empty id are the same key
            key = ex.id or ""
            if key in seen:
                raise ValueError(
                    "You cannot have two plugin executions with the same (or missing) <id/> elements. "
                    f"Offending execution id: '{key}'"
                )
            seen.add(key)
            if ex.configuration is not None:
                check_fragment(ex.configuration, root="configuration")
        return v

    @field_validator("dependencies")
    @classmethod
    def _dependency_markup(cls, v: Optional[Tuple[Dependency, ...]]):
        for dep in v or ():
            for raw in dep.extra:
                check_fragment(raw)
        return v

    @field_validator("goals")
    @classmethod
    def _goals_markup(cls, v: Optional[Union[GoalsTree, RawGoals]]):
        if isinstance(v, RawGoals):
            check_fragment(v.markup, root="goals")
        return v


# ===============================================================
class PomChangePlugin(ArtifactPomOperation):
    """
    Changes a build plugin in a Maven POM file.

    Anything but group id and artifact id can be changed. Specific
    settings can also be removed, letting them take default values or be
    managed elsewhere.

    No check is done for changes that would break the build, e.g. removing
    the version of an unmanaged plugin.
    """

    DESCRIPTION = "Change Plugin %s:%s in POM file %s"

    def __init__(
        self,
        group_id: str,
        artifact_id: str,
        spec: Optional[PluginChangeSpec] = None,
        relative_path: str = "pom.xml",
        **changes: Any,
    ) -> None:
        super().__init__(group_id, artifact_id, relative_path)
        if spec is not None and changes:
            raise TypeError("Pass either a PluginChangeSpec or keyword changes, not both")
        self.spec = spec if spec is not None else PluginChangeSpec(**changes)

    def pom_execution(self, relative_pom_file: str, model: PomModel) -> ExecutionResult:
        plugin = find_plugin(model, self.group_id, self.artifact_id)

        if plugin is None:
            message = f"Plugin {self.group_id}:{self.artifact_id} is not present in {relative_pom_file}"
            policy = self.spec.if_not_present
            if policy is IfNotPresent.WARN:
                return ExecutionResult.warning(self.description, TransformationOperationException(message))
            if policy is IfNotPresent.NO_OP:
                return ExecutionResult.no_op(self.description, message)
            return ExecutionResult.error(self.description, TransformationOperationException(message))

        spec = self.spec
        index = model.build.remove_plugin(plugin)

        if spec.remove_version:
            plugin.version = None
        elif spec.version is not None:
            plugin.version = spec.version

        if spec.remove_extensions:
            plugin.extensions = None
        elif spec.extensions is not None:
            plugin.extensions = spec.extensions

        if spec.remove_executions:
            plugin.executions = []
        elif spec.executions is not None:
            plugin.executions = list(spec.executions)

        if spec.remove_dependencies:
            plugin.dependencies = []
        elif spec.dependencies is not None:
            plugin.dependencies = list(spec.dependencies)

        if spec.remove_goals:
            plugin.goals = None
        elif spec.goals is not None:
            plugin.goals = spec.goals

        # every changed plugin is declared with extensions enabled
        plugin.extensions = True

        model.build.add_plugin(plugin, index)

        details = f"Plugin {self.group_id}:{self.artifact_id} has been changed in {relative_pom_file}"
        logger.debug(details)
        return ExecutionResult.success(self.description, details)


def change_plugin(
    model: PomModel,
    group_id: str,
    artifact_id: str,
    spec: PluginChangeSpec,
    relative_path: str = "pom.xml",
) -> ExecutionResult:
    """Apply ``spec`` to the plugin group_id:artifact_id of an in-memory POM."""
    return PomChangePlugin(group_id, artifact_id, spec, relative_path).pom_execution(relative_path, model)
