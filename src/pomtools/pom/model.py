from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

# Maven resolves plugins without <groupId> to this group
DEFAULT_PLUGIN_GROUP = "org.apache.maven.plugins"


@dataclass(frozen=True)
class Dependency:
    """A <dependency> entry declared inside a plugin."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    type: Optional[str] = None
    scope: Optional[str] = None
    classifier: Optional[str] = None
    optional: Optional[str] = None

    # unmodelled children (exclusions, ...) kept as raw markup
    extra: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PluginExecution:
    """
    A plugin <execution>.

    ``configuration`` is the raw <configuration> markup; it is passed
    through untouched and never interpreted.
    """

    id: Optional[str] = None
    phase: Optional[str] = None
    goals: Tuple[str, ...] = ()
    inherited: Optional[str] = None
    configuration: Optional[str] = None


@dataclass(frozen=True)
class GoalsTree:
    """Structured plugin-level goals: <goals><goal>...</goal></goals>."""

    goals: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RawGoals:
    """Plugin-level goals content that is not a plain goal list (opaque)."""

    markup: str


Goals = Union[GoalsTree, RawGoals]


@dataclass
class Plugin:
    """
    A build plugin declaration.

    Identity is (group_id, artifact_id). Everything else may be changed
    by patch operations.
    """

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    extensions: Optional[bool] = None
    executions: List[PluginExecution] = field(default_factory=list)
    dependencies: List[Dependency] = field(default_factory=list)
    goals: Optional[Goals] = None

    # unmodelled children (<configuration>, <inherited>, ...) as raw markup
    extra: List[str] = field(default_factory=list)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.group_id, self.artifact_id)

    @property
    def coords(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


@dataclass
class Build:
    """The <build> section, reduced to its ordered plugin list."""

    plugins: List[Plugin] = field(default_factory=list)

    def remove_plugin(self, plugin: Plugin) -> int:
        """Remove the plugin with the same identity; return its former index."""
        for i, p in enumerate(self.plugins):
            if p.key == plugin.key:
                del self.plugins[i]
                return i
        raise KeyError(f"Plugin {plugin.coords} is not registered")

    def add_plugin(self, plugin: Plugin, index: Optional[int] = None) -> None:
        if any(p.key == plugin.key for p in self.plugins):
            raise ValueError(f"Plugin {plugin.coords} is already registered")
        if index is None:
            self.plugins.append(plugin)
        else:
            self.plugins.insert(index, plugin)


@dataclass
class PomModel:
    """
    In-memory POM document.

    ``tree`` is the parsed XML document. Only ``build.plugins`` is
    modelled; on write it replaces the <build><plugins> element and the
    rest of the tree is serialized as parsed.
    """

    tree: ET.ElementTree
    namespace: str = ""
    build: Optional[Build] = None

    # plugin key -> (snapshot as parsed, original element); unchanged
    # plugins are written back from their original element
    originals: Dict[Tuple[str, str], Tuple["Plugin", ET.Element]] = field(default_factory=dict, repr=False)

    @property
    def plugins(self) -> List[Plugin]:
        return self.build.plugins if self.build is not None else []
