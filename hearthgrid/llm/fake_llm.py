"""Deterministic scripted decision service for tests and offline demos."""

from __future__ import annotations

from typing import Iterable, Union

from hearthgrid.llm.base import DecisionService
from hearthgrid.llm.conversation import CallPart, Conversation, Decision
from hearthgrid.sim.contracts import ActionSpec

ScriptStep = Union[Decision, Exception]


def default_script() -> list[ScriptStep]:
    return [
        Decision(calls=[CallPart(name="look")]),
        Decision(
            calls=[
                CallPart(name="gather", args={"resource": "food"}),
                CallPart(name="move", args={"direction": "north"}),
            ]
        ),
        Decision(calls=[CallPart(name="look")]),
        Decision(calls=[CallPart(name="inspect_inventory")]),
        Decision(text="I surveyed the area and checked my inventory."),
    ]


class FakeLLM(DecisionService):
    """Replays a fixed script; a final empty decision ends every run.

    Steps that are exceptions are raised instead of returned so transport
    failures can be scripted too.
    """

    def __init__(
        self,
        script: Iterable[ScriptStep] | None = None,
        *,
        repeat_last: bool = False,
        configured: bool = True,
    ) -> None:
        self._script = list(script) if script is not None else default_script()
        self._repeat_last = repeat_last
        self._configured = configured
        self._cursor = 0
        self.requests: list[Conversation] = []
        self.closed = False

    def is_configured(self) -> bool:
        return self._configured

    def decide(
        self,
        *,
        conversation: Conversation,
        actions: list[ActionSpec],
    ) -> Decision:
        _ = actions
        self.requests.append(conversation.model_copy(deep=True))
        step = self._next_step()
        if isinstance(step, Exception):
            raise step
        return step.model_copy(deep=True)

    def close(self) -> None:
        self.closed = True

    def _next_step(self) -> ScriptStep:
        if self._cursor < len(self._script):
            step = self._script[self._cursor]
            self._cursor += 1
            return step
        if self._repeat_last and self._script:
            return self._script[-1]
        return Decision(text="Nothing left to do.")
