"""
POM patch operations.

Exports the public API:
- PomChangePlugin, PluginChangeSpec, change_plugin
- IfNotPresent
- ExecutionResult, ResultType, TransformationOperationException
"""
from .result import ExecutionResult, ResultType, TransformationOperationException
from .base import ArtifactPomOperation, IfNotPresent
from .change_plugin import PluginChangeSpec, PomChangePlugin, change_plugin
