"""Action executor: the blanket error boundary around handlers."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from doce.actions.registry import ActionRegistry


@dataclass(frozen=True, slots=True)
class ExecutionEnvelope:
    """Uniform outcome of one action run.

    Exactly one of ``result`` / ``error`` is meaningful, selected by ``success``.
    """

    success: bool
    action: str
    result: Any = None
    error: str | None = None
    available_actions: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, action: str, result: Any) -> ExecutionEnvelope:
        return cls(success=True, action=action, result=result)

    @classmethod
    def failed(cls, action: str, error: str, available_actions: list[str] | None = None) -> ExecutionEnvelope:
        return cls(success=False, action=action, error=error, available_actions=available_actions or [])

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "action": self.action}
        if self.success:
            data["result"] = self.result
        else:
            data["error"] = self.error
            if self.available_actions:
                data["available_actions"] = self.available_actions
        return data


class ActionExecutor:
    """Looks up an action and runs its handler with params exactly as given."""

    def __init__(self, registry: ActionRegistry):
        self.registry = registry

    async def execute(self, name: str, params: dict[str, Any] | None = None) -> ExecutionEnvelope:
        params = {} if params is None else params
        descriptor = self.registry.lookup(name)
        if descriptor is None:
            return ExecutionEnvelope.failed(
                name,
                f'Ação "{name}" não encontrada',
                available_actions=self.registry.names,
            )

        try:
            logger.info(f"Executing action: {name} params={params}")
        except Exception:
            # Logging must never change the outcome.
            pass

        try:
            result = descriptor.handler(params)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.error(f"Action {name} failed: {exc}")
            return ExecutionEnvelope.failed(name, str(exc))

        return ExecutionEnvelope.ok(name, result)
