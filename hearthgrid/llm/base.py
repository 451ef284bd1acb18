"""Decision service interface shared by every LLM backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from hearthgrid.llm.conversation import Conversation, Decision
from hearthgrid.sim.contracts import ActionSpec

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class DecisionServiceError(RuntimeError):
    """Raised when the service cannot be reached or replies with garbage."""


class DecisionService(Protocol):
    def is_configured(self) -> bool:
        """Return True when the service has the credentials it needs."""

    def decide(
        self,
        *,
        conversation: Conversation,
        actions: list[ActionSpec],
    ) -> Decision:
        """Return the next requested actions for the conversation so far."""

    def close(self) -> None:
        """Release any transport the service holds."""


@dataclass(frozen=True)
class LLMConfig:
    model_id: str
    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
