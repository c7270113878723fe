"""
Application layer: provider registry, resolver, lifecycle orchestration and
process supervision.
"""

from .app import App
from .container import Container, IContainer
from .lifecycle import HookRegistry, Lifecycle
from .options import Annotation, Invoke, Module, Option, Provide, StartTimeout, StopTimeout, Supply, WithEventSink, annotate
from .registry import Dependency, Provider, ProviderRegistry
from .sinks import NullEventSink, RecordingEventSink
from .startup import Application, AppState
from .supervisor import Supervisor, run_app

__all__ = [
    "App",
    "Container",
    "IContainer",
    "HookRegistry",
    "Lifecycle",
    "Annotation",
    "Invoke",
    "Module",
    "Option",
    "Provide",
    "StartTimeout",
    "StopTimeout",
    "Supply",
    "WithEventSink",
    "annotate",
    "Dependency",
    "Provider",
    "ProviderRegistry",
    "NullEventSink",
    "RecordingEventSink",
    "Application",
    "AppState",
    "Supervisor",
    "run_app",
]
