"""
POM document model and XML I/O.

Exports the public API:
- PomModel, Build, Plugin, PluginExecution, Dependency
- GoalsTree, RawGoals
- read_pom, parse_pom, write_pom, dump_pom
- find_plugin
"""
from .model import (
    DEFAULT_PLUGIN_GROUP,
    Build,
    Dependency,
    GoalsTree,
    Plugin,
    PluginExecution,
    PomModel,
    RawGoals,
)
from .io import PomReadError, dump_pom, parse_pom, read_pom, write_pom
from .locate import find_plugin
