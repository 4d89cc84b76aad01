"""Actions: the registry, the executor and the collaborators behind them."""

from doce.actions.catalog import Collaborators, build_default_registry, build_registry
from doce.actions.executor import ActionExecutor, ExecutionEnvelope
from doce.actions.registry import ActionDescriptor, ActionRegistry, ActionSummary

__all__ = [
    "ActionDescriptor",
    "ActionExecutor",
    "ActionRegistry",
    "ActionSummary",
    "Collaborators",
    "ExecutionEnvelope",
    "build_default_registry",
    "build_registry",
]
