from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from pomtools.config import load_change_file, parse_coords, parse_dependency, parse_execution
from pomtools.operations.base import IfNotPresent
from pomtools.operations.change_plugin import PluginChangeSpec, PomChangePlugin
from pomtools.operations.result import ExecutionResult, ResultType
from pomtools.pom.io import PomReadError, read_pom
from pomtools.pom.model import GoalsTree
from pomtools.report import jsonl_append, result_record

app = typer.Typer(help="pom-tools CLI")

_COLORS = {
    ResultType.SUCCESS: typer.colors.GREEN,
    ResultType.WARNING: typer.colors.YELLOW,
    ResultType.NO_OP: typer.colors.BLUE,
    ResultType.ERROR: typer.colors.RED,
}


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("pomtools")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[pomtools] %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _echo_result(result: ExecutionResult) -> None:
    typer.secho(f"{result.type.value}: {result.message}", fg=_COLORS[result.type])


def _run(ops: List[PomChangePlugin], root: Path, report: Optional[Path]) -> int:
    n_errors = 0
    for op in ops:
        result = op.execute(root)
        _echo_result(result)
        if report is not None:
            jsonl_append(str(report), result_record(result, op.relative_path))
        if result.is_error:
            n_errors += 1
    return n_errors


# -----------------------------
# plugins
# -----------------------------
@app.command()
def plugins(pom: Path = typer.Argument(..., help="Path to pom.xml")):
    """List build plugins as groupId:artifactId:version."""
    try:
        model = read_pom(pom)
    except (FileNotFoundError, PomReadError) as e:
        raise typer.BadParameter(str(e))
    for p in model.plugins:
        typer.echo(f"{p.coords}:{p.version or ''}")


# -----------------------------
# change-plugin
# -----------------------------
@app.command("change-plugin")
def change_plugin_cmd(
    pom: Path = typer.Argument(..., help="Path to pom.xml"),
    coords: str = typer.Argument(..., help="Plugin groupId:artifactId"),
    version: Optional[str] = typer.Option(None, "--version", help="New plugin version"),
    remove_version: bool = typer.Option(False, "--remove-version"),
    extensions: Optional[bool] = typer.Option(None, "--extensions/--no-extensions"),
    remove_extensions: bool = typer.Option(False, "--remove-extensions"),
    execution: List[str] = typer.Option(None, "--execution", "-e", help="id[:phase[:goal,goal]] (repeatable)"),
    remove_executions: bool = typer.Option(False, "--remove-executions"),
    dependency: List[str] = typer.Option(None, "--dependency", "-d", help="g:a[:version[:scope]] (repeatable)"),
    remove_dependencies: bool = typer.Option(False, "--remove-dependencies"),
    goal: List[str] = typer.Option(None, "--goal", "-g", help="Plugin-level goal (repeatable)"),
    remove_goals: bool = typer.Option(False, "--remove-goals"),
    if_not_present: IfNotPresent = typer.Option(IfNotPresent.FAIL, "--if-not-present", case_sensitive=False),
    report: Optional[Path] = typer.Option(None, "--report", help="Append result record to this JSONL"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Change (or clear) fields of one build plugin in a POM file."""
    _configure_logging(verbose)

    try:
        group_id, artifact_id = parse_coords(coords)
        spec = PluginChangeSpec(
            version=version,
            extensions=extensions,
            executions=[parse_execution(e) for e in execution] if execution else None,
            dependencies=[parse_dependency(d) for d in dependency] if dependency else None,
            goals=GoalsTree(goals=tuple(goal)) if goal else None,
            remove_version=remove_version,
            remove_extensions=remove_extensions,
            remove_executions=remove_executions,
            remove_dependencies=remove_dependencies,
            remove_goals=remove_goals,
            if_not_present=if_not_present,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))

    pom = pom.expanduser().resolve()
    op = PomChangePlugin(group_id, artifact_id, spec, relative_path=pom.name)
    if _run([op], pom.parent, report):
        raise typer.Exit(code=1)


# -----------------------------
# apply
# -----------------------------
@app.command()
def apply(
    changes: Path = typer.Argument(..., help="YAML change file"),
    root: Path = typer.Option(Path("."), "--root", "-r", help="Application folder the 'pom' path is relative to"),
    report: Optional[Path] = typer.Option(None, "--report", help="Append result records to this JSONL"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Run every change listed in a YAML change file, in order."""
    _configure_logging(verbose)

    try:
        ops = load_change_file(changes)
    except (FileNotFoundError, ValueError) as e:
        raise typer.BadParameter(str(e))

    n_errors = _run(ops, root, report)
    typer.echo(f"Done. {len(ops)} change(s), {n_errors} error(s)")
    if n_errors:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
