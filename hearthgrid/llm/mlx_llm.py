"""mlx-lm adapter for real local runs."""

from __future__ import annotations

from dataclasses import dataclass

from hearthgrid.llm.base import DecisionService, DecisionServiceError, LLMConfig
from hearthgrid.llm.conversation import Conversation, Decision
from hearthgrid.llm.prompts import parse_decision, render_transcript
from hearthgrid.sim.contracts import ActionSpec


@dataclass
class MlxLLM(DecisionService):
    config: LLMConfig
    max_tokens: int = 512

    def __post_init__(self) -> None:
        from mlx_lm import load

        self._model, self._tokenizer = load(self.config.model_id)

    def is_configured(self) -> bool:
        return True

    def decide(
        self,
        *,
        conversation: Conversation,
        actions: list[ActionSpec],
    ) -> Decision:
        prompt = render_transcript(conversation, actions)
        response = _generate(self._model, self._tokenizer, prompt, self.max_tokens)
        decision = parse_decision(response)
        if decision is None:
            raise DecisionServiceError("Local model reply did not contain a decision")
        return decision

    def close(self) -> None:
        """Weights stay loaded for the life of the process."""


def _generate(model, tokenizer, prompt: str, max_tokens: int) -> str:
    from mlx_lm import generate

    return generate(model, tokenizer, prompt=prompt, max_tokens=max_tokens)
