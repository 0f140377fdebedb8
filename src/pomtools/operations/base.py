# pomtools/operations/base.py

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pomtools.operations.result import ExecutionResult, ResultType, TransformationOperationException
from pomtools.pom.io import PomReadError, read_pom, write_pom
from pomtools.pom.model import PomModel

logger = logging.getLogger("pomtools")


class IfNotPresent(str, Enum):
    """What an operation does when its target element is absent."""

    FAIL = "fail"
    WARN = "warn"
    NO_OP = "no_op"


def _check_blank(name: str, value: str) -> None:
    if value is None or not str(value).strip():
        raise ValueError(f"{name} cannot be blank")


# ===============================================================
class ArtifactPomOperation:
    """
    Base class for operations targeting one artifact (groupId:artifactId)
    inside a POM file.

    Subclasses implement ``pom_execution``, which works purely on the
    in-memory model. ``execute`` adds the file plumbing around it:
    read, run, and write back on success.
    """

    DESCRIPTION = "Change artifact %s:%s in POM file %s"

    def __init__(self, group_id: str, artifact_id: str, relative_path: str = "pom.xml") -> None:
        _check_blank("Group id", group_id)
        _check_blank("Artifact id", artifact_id)
        self.group_id = group_id
        self.artifact_id = artifact_id
        self.relative_path = relative_path

    @property
    def description(self) -> str:
        return self.DESCRIPTION % (self.group_id, self.artifact_id, self.relative_path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.group_id}:{self.artifact_id}, {self.relative_path!r})"

    # ---------------------------------------------------------------
    # Execution
    # ---------------------------------------------------------------
    def pom_execution(self, relative_pom_file: str, model: PomModel) -> ExecutionResult:
        raise NotImplementedError

    def execute(self, app_folder: Path) -> ExecutionResult:
        """Run against ``app_folder / relative_path`` and persist on SUCCESS."""
        pom_file = Path(app_folder) / self.relative_path

        try:
            model = read_pom(pom_file)
        except (OSError, PomReadError) as e:
            msg = f"There was an error when reading POM file {self.relative_path}"
            logger.error("%s: %s", msg, e)
            exc = TransformationOperationException(msg)
            exc.__cause__ = e
            return ExecutionResult.error(self.description, exc)

        result = self.pom_execution(self.relative_path, model)

        if result.type is ResultType.SUCCESS:
            try:
                write_pom(model, pom_file)
            except (OSError, PomReadError) as e:
                msg = f"There was an error when writing POM file {self.relative_path}"
                logger.error("%s: %s", msg, e)
                exc = TransformationOperationException(msg)
                exc.__cause__ = e
                return ExecutionResult.error(self.description, exc)

        _log_result(result)
        return result


def _log_result(result: ExecutionResult) -> None:
    if result.type is ResultType.SUCCESS:
        logger.info(result.message)
    elif result.type is ResultType.WARNING:
        logger.warning(result.message)
    elif result.type is ResultType.ERROR:
        logger.error(result.message)
    else:
        logger.debug(result.message)
