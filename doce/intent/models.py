"""Intent data model shared by both classifier tiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

FREE_CONVERSATION = "conversa_livre"

METHOD_LOCAL = "local"
METHOD_REMOTE = "remote"


@dataclass(frozen=True, slots=True)
class IntentResult:
    """The classifier's resolved guess for one utterance.

    Built fresh by whichever tier resolves the utterance and never mutated;
    the orchestrator consumes it immediately.
    """

    action: str
    params: dict[str, Any] = field(default_factory=dict)
    missing_params: list[str] = field(default_factory=list)
    confidence: float = 0.0
    message: str | None = None
    method: str = METHOD_LOCAL
    from_cache: bool = False

    @property
    def is_free_conversation(self) -> bool:
        return self.action == FREE_CONVERSATION

    @classmethod
    def from_payload(cls, payload: Any, *, method: str = METHOD_REMOTE) -> IntentResult:
        """Build from a model-produced JSON object.

        Raises ``ValueError`` when the object does not have the expected shape.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"intent payload must be an object, got {type(payload).__name__}")

        action = payload.get("action")
        if not isinstance(action, str) or not action.strip():
            raise ValueError("intent payload has no action")

        params = payload.get("params") or {}
        if not isinstance(params, dict):
            raise ValueError("intent params must be an object")

        missing = payload.get("missing_params") or []
        if not isinstance(missing, list):
            raise ValueError("missing_params must be a list")

        try:
            confidence = float(payload.get("confidence", 0.0))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid confidence: {payload.get('confidence')!r}") from exc
        confidence = min(max(confidence, 0.0), 1.0)

        message = payload.get("message")
        return cls(
            action=action.strip(),
            params=dict(params),
            missing_params=[str(p) for p in missing],
            confidence=confidence,
            message=str(message) if message else None,
            method=method,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "params": self.params,
            "missing_params": self.missing_params,
            "confidence": self.confidence,
            "message": self.message,
            "method": self.method,
            "from_cache": self.from_cache,
        }
