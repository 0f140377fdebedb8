# pomtools/pom/io.py

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pomtools.pom.model import (
    DEFAULT_PLUGIN_GROUP,
    Build,
    Dependency,
    Goals,
    GoalsTree,
    Plugin,
    PluginExecution,
    PomModel,
    RawGoals,
)

_PLUGIN_FIELDS = {"groupId", "artifactId", "version", "extensions", "executions", "dependencies", "goals"}
_DEPENDENCY_FIELDS = {"groupId", "artifactId", "version", "type", "scope", "classifier", "optional"}


class PomReadError(ValueError):
    """Raised when a POM cannot be parsed into a PomModel."""


# ---------------------------------------------------------------------------
# Element helpers
# ---------------------------------------------------------------------------

def _namespace_of(tag: str) -> str:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def _q(ns: str, name: str) -> str:
    return f"{{{ns}}}{name}" if ns else name


def _local(tag) -> Optional[str]:
    # comments and processing instructions have non-string tags
    if not isinstance(tag, str):
        return None
    return tag.split("}", 1)[-1]


def _text(el: ET.Element, ns: str, name: str) -> Optional[str]:
    child = el.find(_q(ns, name))
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _sub(parent: ET.Element, ns: str, name: str, text: Optional[str]) -> None:
    if text is None:
        return
    ET.SubElement(parent, _q(ns, name)).text = text


def _parser() -> ET.XMLParser:
    return ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))


def _raw(el: ET.Element) -> str:
    """Serialize one element (without its tail) to standalone markup."""
    if el.tag is ET.Comment:
        return f"<!--{el.text or ''}-->"
    c = copy.deepcopy(el)
    c.tail = None
    return ET.tostring(c, encoding="unicode")


def _unraw(markup: str) -> ET.Element:
    s = markup.strip()
    if s.startswith("<!--") and s.endswith("-->"):
        return ET.Comment(s[4:-3])
    try:
        return ET.fromstring(s, parser=_parser())
    except ET.ParseError as e:
        raise PomReadError(f"Invalid XML fragment: {s[:60]!r}") from e


def check_fragment(markup: str, root: Optional[str] = None) -> None:
    """
    Raise PomReadError unless ``markup`` is one well-formed element (or a
    comment), optionally with the given root element name.
    """
    el = _unraw(markup)
    if el.tag is ET.Comment:
        if root is not None:
            raise PomReadError(f"Expected <{root}> markup, got a comment")
        return
    if root is not None and _local(el.tag) != root:
        raise PomReadError(f"Expected <{root}> markup, got <{_local(el.tag)}>")


def _to_bool(text: Optional[str]) -> Optional[bool]:
    if text is None:
        return None
    t = text.lower()
    if t == "true":
        return True
    if t == "false":
        return False
    return None


def _indent_unit(root: ET.Element) -> str:
    text = root.text or ""
    if "\n" in text and not text.strip():
        unit = text.rsplit("\n", 1)[1]
        if unit:
            return unit
    return "    "


def _register(ns: str) -> None:
    if ns:
        ET.register_namespace("", ns)


# ---------------------------------------------------------------------------
# Element -> model
# ---------------------------------------------------------------------------

def _dependency_from_element(el: ET.Element, ns: str) -> Dependency:
    gid = _text(el, ns, "groupId")
    aid = _text(el, ns, "artifactId")
    if not gid or not aid:
        raise PomReadError("Plugin dependency without groupId/artifactId")
    extra = tuple(_raw(c) for c in el if _local(c.tag) not in _DEPENDENCY_FIELDS)
    return Dependency(
        group_id=gid,
        artifact_id=aid,
        version=_text(el, ns, "version"),
        type=_text(el, ns, "type"),
        scope=_text(el, ns, "scope"),
        classifier=_text(el, ns, "classifier"),
        optional=_text(el, ns, "optional"),
        extra=extra,
    )


def _goal_list(el: Optional[ET.Element], ns: str) -> Tuple[str, ...]:
    if el is None:
        return ()
    return tuple((g.text or "").strip() for g in el.findall(_q(ns, "goal")))


def _execution_from_element(el: ET.Element, ns: str) -> PluginExecution:
    cfg = el.find(_q(ns, "configuration"))
    return PluginExecution(
        id=_text(el, ns, "id"),
        phase=_text(el, ns, "phase"),
        goals=_goal_list(el.find(_q(ns, "goals")), ns),
        inherited=_text(el, ns, "inherited"),
        configuration=_raw(cfg) if cfg is not None else None,
    )


def _goals_from_element(el: ET.Element, ns: str) -> Goals:
    children = list(el)
    if all(_local(c.tag) == "goal" and len(c) == 0 for c in children):
        return GoalsTree(goals=_goal_list(el, ns))
    return RawGoals(markup=_raw(el))


def _plugin_from_element(el: ET.Element, ns: str) -> Plugin:
    aid = _text(el, ns, "artifactId")
    if not aid:
        raise PomReadError("Build plugin without artifactId")

    executions_el = el.find(_q(ns, "executions"))
    dependencies_el = el.find(_q(ns, "dependencies"))
    goals_el = el.find(_q(ns, "goals"))

    return Plugin(
        group_id=_text(el, ns, "groupId") or DEFAULT_PLUGIN_GROUP,
        artifact_id=aid,
        version=_text(el, ns, "version"),
        extensions=_to_bool(_text(el, ns, "extensions")),
        executions=[
            _execution_from_element(e, ns)
            for e in (executions_el.findall(_q(ns, "execution")) if executions_el is not None else [])
        ],
        dependencies=[
            _dependency_from_element(d, ns)
            for d in (dependencies_el.findall(_q(ns, "dependency")) if dependencies_el is not None else [])
        ],
        goals=_goals_from_element(goals_el, ns) if goals_el is not None else None,
        extra=[_raw(c) for c in el if _local(c.tag) not in _PLUGIN_FIELDS],
    )


# ---------------------------------------------------------------------------
# Model -> element
# ---------------------------------------------------------------------------

def _dependency_to_element(dep: Dependency, ns: str) -> ET.Element:
    el = ET.Element(_q(ns, "dependency"))
    _sub(el, ns, "groupId", dep.group_id)
    _sub(el, ns, "artifactId", dep.artifact_id)
    _sub(el, ns, "version", dep.version)
    _sub(el, ns, "type", dep.type)
    _sub(el, ns, "scope", dep.scope)
    _sub(el, ns, "classifier", dep.classifier)
    _sub(el, ns, "optional", dep.optional)
    for raw in dep.extra:
        el.append(_unraw(raw))
    return el


def _goals_to_element(goals: Tuple[str, ...], ns: str) -> ET.Element:
    el = ET.Element(_q(ns, "goals"))
    for g in goals:
        _sub(el, ns, "goal", g)
    return el


def _execution_to_element(ex: PluginExecution, ns: str) -> ET.Element:
    el = ET.Element(_q(ns, "execution"))
    _sub(el, ns, "id", ex.id)
    _sub(el, ns, "phase", ex.phase)
    if ex.goals:
        el.append(_goals_to_element(ex.goals, ns))
    _sub(el, ns, "inherited", ex.inherited)
    if ex.configuration is not None:
        el.append(_unraw(ex.configuration))
    return el


def _plugin_to_element(plugin: Plugin, ns: str) -> ET.Element:
    el = ET.Element(_q(ns, "plugin"))
    _sub(el, ns, "groupId", plugin.group_id)
    _sub(el, ns, "artifactId", plugin.artifact_id)
    _sub(el, ns, "version", plugin.version)
    if plugin.extensions is not None:
        _sub(el, ns, "extensions", "true" if plugin.extensions else "false")

    if plugin.executions:
        executions_el = ET.SubElement(el, _q(ns, "executions"))
        for ex in plugin.executions:
            executions_el.append(_execution_to_element(ex, ns))

    if plugin.dependencies:
        dependencies_el = ET.SubElement(el, _q(ns, "dependencies"))
        for dep in plugin.dependencies:
            dependencies_el.append(_dependency_to_element(dep, ns))

    if isinstance(plugin.goals, GoalsTree):
        el.append(_goals_to_element(plugin.goals.goals, ns))
    elif isinstance(plugin.goals, RawGoals):
        el.append(_unraw(plugin.goals.markup))

    for raw in plugin.extra:
        el.append(_unraw(raw))
    return el


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _model_from_tree(tree: ET.ElementTree) -> PomModel:
    root = tree.getroot()
    if _local(root.tag) != "project":
        raise PomReadError(f"Not a POM: root element is <{_local(root.tag)}>")

    ns = _namespace_of(root.tag)
    _register(ns)

    model = PomModel(tree=tree, namespace=ns)
    build_el = root.find(_q(ns, "build"))
    if build_el is None:
        return model

    plugins: List[Plugin] = []
    plugins_el = build_el.find(_q(ns, "plugins"))
    originals: Dict[Tuple[str, str], Tuple[Plugin, ET.Element]] = {}
    if plugins_el is not None:
        for el in plugins_el.findall(_q(ns, "plugin")):
            plugin = _plugin_from_element(el, ns)
            plugins.append(plugin)
            originals[plugin.key] = (copy.deepcopy(plugin), el)

    model.build = Build(plugins=plugins)
    model.originals = originals
    return model


def parse_pom(text: str) -> PomModel:
    try:
        root = ET.fromstring(text, parser=_parser())
    except ET.ParseError as e:
        raise PomReadError(f"Invalid POM XML: {e}") from e
    return _model_from_tree(ET.ElementTree(root))


def read_pom(path: str | Path) -> PomModel:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(path)
    try:
        tree = ET.parse(path, parser=_parser())
    except ET.ParseError as e:
        raise PomReadError(f"{path}: invalid POM XML: {e}") from e
    return _model_from_tree(tree)


def _sync_plugins(model: PomModel) -> None:
    """Write model.build.plugins back into the XML tree."""
    if model.build is None:
        return

    ns = model.namespace
    root = model.tree.getroot()
    unit = _indent_unit(root)

    build_el = root.find(_q(ns, "build"))
    plugins_el = build_el.find(_q(ns, "plugins"))
    if plugins_el is None:
        if not model.build.plugins:
            return
        plugins_el = ET.SubElement(build_el, _q(ns, "plugins"))

    rendered: List[ET.Element] = []
    for plugin in model.build.plugins:
        orig = model.originals.get(plugin.key)
        if orig is not None and orig[0] == plugin:
            rendered.append(orig[1])
            continue
        el = _plugin_to_element(plugin, ns)
        ET.indent(el, space=unit, level=3)
        rendered.append(el)

    # comments keep their slot; plugins fill the old plugin slots in model order
    children: List[ET.Element] = []
    pending = iter(rendered)
    for c in list(plugins_el):
        if c.tag is ET.Comment:
            children.append(c)
        elif _local(c.tag) == "plugin":
            nxt = next(pending, None)
            if nxt is not None:
                children.append(nxt)
    children.extend(pending)
    plugins_el[:] = children

    if len(plugins_el):
        plugins_el.text = "\n" + unit * 3
        for c in plugins_el:
            c.tail = "\n" + unit * 3
        plugins_el[-1].tail = "\n" + unit * 2
    else:
        plugins_el.text = None


def dump_pom(model: PomModel) -> str:
    _sync_plugins(model)
    _register(model.namespace)
    body = ET.tostring(model.tree.getroot(), encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"


def write_pom(model: PomModel, path: str | Path) -> None:
    path = Path(path)
    path.write_text(dump_pom(model), encoding="utf-8")
