import copy
from pathlib import Path

import pytest

from pomtools.operations.base import IfNotPresent
from pomtools.operations.change_plugin import PluginChangeSpec, PomChangePlugin, change_plugin
from pomtools.operations.result import ResultType, TransformationOperationException
from pomtools.pom.io import PomReadError, parse_pom, read_pom
from pomtools.pom.locate import find_plugin
from pomtools.pom.model import Dependency, GoalsTree, PluginExecution

POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
    <modelVersion>4.0.0</modelVersion>
    <groupId>com.example</groupId>
    <artifactId>app</artifactId>
    <version>1.0</version>
    <build>
        <plugins>
            <plugin>
                <groupId>org.plugin</groupId>
                <artifactId>compiler</artifactId>
                <version>1.0</version>
                <dependencies>
                    <dependency>
                        <groupId>org.ow2.asm</groupId>
                        <artifactId>asm</artifactId>
                        <version>9.6</version>
                    </dependency>
                </dependencies>
                <goals>
                    <goal>compile</goal>
                </goals>
                <configuration>
                    <source>11</source>
                </configuration>
            </plugin>
            <plugin>
                <artifactId>maven-surefire-plugin</artifactId>
                <version>3.2.5</version>
            </plugin>
        </plugins>
    </build>
</project>
"""


def _model():
    return parse_pom(POM)


def _compiler(model):
    return find_plugin(model, "org.plugin", "compiler")


# -------------------------------------------------------
# Found: field rules
# -------------------------------------------------------

def test_end_to_end_remove_version_and_set_executions():
    model = _model()
    before = copy.deepcopy(_compiler(model))

    spec = PluginChangeSpec(remove_version=True, executions=[PluginExecution(id="e1")])
    result = change_plugin(model, "org.plugin", "compiler", spec)

    assert result.type is ResultType.SUCCESS
    assert result.details == "Plugin org.plugin:compiler has been changed in pom.xml"

    plugin = _compiler(model)
    assert plugin.version is None
    assert plugin.executions == [PluginExecution(id="e1")]
    assert plugin.extensions is True
    assert plugin.dependencies == before.dependencies
    assert plugin.goals == before.goals


def test_remove_is_idempotent():
    model = _model()
    op = PomChangePlugin("org.plugin", "compiler", remove_version=True)

    first = op.pom_execution("pom.xml", model)
    assert _compiler(model).version is None

    second = op.pom_execution("pom.xml", model)
    assert _compiler(model).version is None
    assert first.type is second.type is ResultType.SUCCESS


@pytest.mark.parametrize(
    "changes, attr, cleared",
    [
        ({"remove_version": True, "version": "2.0"}, "version", None),
        ({"remove_executions": True, "executions": [PluginExecution(id="x")]}, "executions", []),
        ({"remove_dependencies": True, "dependencies": [Dependency("g", "a", "1")]}, "dependencies", []),
        ({"remove_goals": True, "goals": GoalsTree(goals=("test",))}, "goals", None),
    ],
)
def test_remove_wins_over_set(changes, attr, cleared):
    model = _model()
    result = PomChangePlugin("org.plugin", "compiler", **changes).pom_execution("pom.xml", model)

    assert result.type is ResultType.SUCCESS
    assert getattr(_compiler(model), attr) == cleared


def test_set_values_replace_fields():
    model = _model()
    deps = [Dependency("org.ow2.asm", "asm", "9.7")]
    op = PomChangePlugin(
        "org.plugin",
        "compiler",
        version="2.0",
        dependencies=deps,
        goals=GoalsTree(goals=("testCompile",)),
    )
    op.pom_execution("pom.xml", model)

    plugin = _compiler(model)
    assert plugin.version == "2.0"
    assert plugin.dependencies == deps
    assert plugin.goals == GoalsTree(goals=("testCompile",))


def test_unspecified_fields_are_left_alone():
    model = _model()
    before = copy.deepcopy(_compiler(model))

    PomChangePlugin("org.plugin", "compiler").pom_execution("pom.xml", model)

    after = _compiler(model)
    assert after.version == before.version == "1.0"
    assert after.executions == before.executions
    assert after.dependencies == before.dependencies
    assert after.goals == before.goals
    assert after.extra == before.extra


@pytest.mark.parametrize(
    "changes",
    [
        {},
        {"extensions": False},
        {"remove_extensions": True},
        {"remove_extensions": True, "extensions": False},
    ],
)
def test_extensions_forced_true_on_success(changes):
    model = _model()
    result = PomChangePlugin("org.plugin", "compiler", **changes).pom_execution("pom.xml", model)

    assert result.type is ResultType.SUCCESS
    assert _compiler(model).extensions is True


def test_identity_and_other_plugins_preserved():
    model = _model()
    surefire_before = copy.deepcopy(model.plugins[1])

    PomChangePlugin("org.plugin", "compiler", version="2.0").pom_execution("pom.xml", model)

    assert [p.key for p in model.plugins] == [
        ("org.plugin", "compiler"),
        ("org.apache.maven.plugins", "maven-surefire-plugin"),
    ]
    assert model.plugins[1] == surefire_before


def test_plugin_without_group_uses_default_group():
    model = _model()
    result = PomChangePlugin("org.apache.maven.plugins", "maven-surefire-plugin", version="3.3.0") \
        .pom_execution("pom.xml", model)

    assert result.type is ResultType.SUCCESS
    assert model.plugins[1].version == "3.3.0"


# -------------------------------------------------------
# Not present
# -------------------------------------------------------

@pytest.mark.parametrize(
    "policy, expected",
    [
        (None, ResultType.ERROR),
        (IfNotPresent.FAIL, ResultType.ERROR),
        (IfNotPresent.WARN, ResultType.WARNING),
        (IfNotPresent.NO_OP, ResultType.NO_OP),
    ],
)
def test_not_present_policy(policy, expected):
    model = _model()
    before = copy.deepcopy(model.plugins)

    changes = {"version": "2.0"}
    if policy is not None:
        changes["if_not_present"] = policy
    result = PomChangePlugin("g", "x", **changes).pom_execution("pom.xml", model)

    assert result.type is expected
    assert result.message == "Plugin g:x is not present in pom.xml"
    if expected is ResultType.NO_OP:
        assert result.exception is None
    else:
        assert isinstance(result.exception, TransformationOperationException)
    assert model.plugins == before


def test_matching_is_case_sensitive():
    model = _model()
    result = PomChangePlugin("org.plugin", "Compiler", version="2.0").pom_execution("pom.xml", model)
    assert result.type is ResultType.ERROR


def test_description():
    op = PomChangePlugin("org.plugin", "compiler", relative_path="module/pom.xml")
    assert op.description == "Change Plugin org.plugin:compiler in POM file module/pom.xml"


def test_blank_identity_rejected():
    with pytest.raises(ValueError, match="Artifact id cannot be blank"):
        PomChangePlugin("org.plugin", "  ")


# -------------------------------------------------------
# File-level execution
# -------------------------------------------------------

def test_execute_writes_pom_on_success(tmp_path: Path):
    (tmp_path / "pom.xml").write_text(POM, encoding="utf-8")

    result = PomChangePlugin("org.plugin", "compiler", remove_version=True).execute(tmp_path)
    assert result.type is ResultType.SUCCESS

    text = (tmp_path / "pom.xml").read_text(encoding="utf-8")
    assert "<extensions>true</extensions>" in text
    assert "<source>11</source>" in text

    plugin = find_plugin(read_pom(tmp_path / "pom.xml"), "org.plugin", "compiler")
    assert plugin.version is None
    assert plugin.extensions is True


def test_execute_leaves_file_alone_when_not_present(tmp_path: Path):
    pom = tmp_path / "pom.xml"
    pom.write_text(POM, encoding="utf-8")

    result = PomChangePlugin("g", "x", if_not_present="warn").execute(tmp_path)

    assert result.type is ResultType.WARNING
    assert pom.read_text(encoding="utf-8") == POM


def test_execute_missing_pom_is_error(tmp_path: Path):
    result = PomChangePlugin("org.plugin", "compiler", version="2.0").execute(tmp_path)

    assert result.type is ResultType.ERROR
    assert isinstance(result.exception, TransformationOperationException)
    assert isinstance(result.exception.__cause__, FileNotFoundError)


@pytest.mark.parametrize("exc", [PomReadError("Invalid XML fragment: 'x'"), OSError("disk full")])
def test_execute_write_failure_is_error(tmp_path: Path, monkeypatch, exc):
    pom = tmp_path / "pom.xml"
    pom.write_text(POM, encoding="utf-8")

    def _failing_write(model, path):
        raise exc

    monkeypatch.setattr("pomtools.operations.base.write_pom", _failing_write)

    result = PomChangePlugin("org.plugin", "compiler", version="2.0").execute(tmp_path)

    assert result.type is ResultType.ERROR
    assert result.message == "There was an error when writing POM file pom.xml"
    assert result.exception.__cause__ is exc
    assert pom.read_text(encoding="utf-8") == POM
