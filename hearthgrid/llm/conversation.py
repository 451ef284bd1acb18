"""Conversation turns exchanged with the decision service."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hearthgrid.sim.contracts import ActionResult


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


class TextPart(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["text"] = "text"
    text: str


class CallPart(BaseModel):
    """An action the model asked for, recorded exactly as issued."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["call"] = "call"
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class ResultPart(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["result"] = "result"
    name: str
    result: ActionResult


Part = Annotated[Union[TextPart, CallPart, ResultPart], Field(discriminator="kind")]


class Turn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: Role
    parts: list[Part] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_parts(self) -> "Turn":
        for part in self.parts:
            if self.role == Role.MODEL and isinstance(part, ResultPart):
                raise ValueError("model turns cannot carry action results")
            if self.role == Role.USER and isinstance(part, CallPart):
                raise ValueError("user turns cannot carry action calls")
        return self


class Conversation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    turns: list[Turn] = Field(default_factory=list)

    def add_instruction(self, text: str) -> Turn:
        return self._append(Turn(role=Role.USER, parts=[TextPart(text=text)]))

    def add_calls(self, calls: list[CallPart]) -> Turn:
        return self._append(Turn(role=Role.MODEL, parts=list(calls)))

    def add_results(self, results: list[ResultPart]) -> Turn:
        return self._append(Turn(role=Role.USER, parts=list(results)))

    def _append(self, turn: Turn) -> Turn:
        self.turns.append(turn)
        return turn


class Decision(BaseModel):
    """Decoded service reply: zero calls means the task is finished."""

    model_config = ConfigDict(extra="forbid")

    calls: list[CallPart] = Field(default_factory=list)
    text: str | None = None

    @property
    def is_final(self) -> bool:
        return not self.calls
