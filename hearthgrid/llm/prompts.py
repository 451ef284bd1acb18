"""Prompt templates and parsing helpers."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hearthgrid.llm.conversation import (
    CallPart,
    Conversation,
    Decision,
    ResultPart,
    TextPart,
)
from hearthgrid.sim.contracts import ActionSpec

TERRAIN_LEGEND = (
    "- Grass: open terrain, may have food\n"
    "- Forest: contains wood (gather with 'gather')\n"
    "- Mountain: contains stone (gather with 'gather')\n"
    "- Desert: contains sand (gather with 'gather')\n"
    "- Water: cannot walk through"
)


def render_instruction(goal: str, actions: list[ActionSpec]) -> str:
    vocabulary = "\n".join(f"- {spec.name}: {spec.description}" for spec in actions)
    return (
        "You are an AI agent in a grid-based resource world. "
        f"Your goal is: {goal}\n\n"
        "You have tools to interact with the world. Use them strategically "
        "to accomplish your goal.\n\n"
        f"The world consists of:\n{TERRAIN_LEGEND}\n\n"
        f"Available actions:\n{vocabulary}\n\n"
        "Start by using 'look' to understand your surroundings, then plan your "
        "actions to achieve the goal. Be efficient. When the goal is "
        "accomplished, stop calling tools and explain what you did."
    )


class CallSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class DecisionOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    calls: list[CallSpec] = Field(default_factory=list)
    text: str | None = None


def render_transcript(conversation: Conversation, actions: list[ActionSpec]) -> str:
    """Flatten a conversation for text-only models without native tool calls."""
    schema = [
        {
            "name": spec.name,
            "description": spec.description,
            "parameters": spec.to_json_schema(),
        }
        for spec in actions
    ]
    lines = [
        "Reply with exactly one JSON object: "
        '{"calls": [{"name": "...", "args": {...}}], "text": "..."}. '
        "Use an empty calls list when the goal is complete.",
        "Actions JSON:",
        json.dumps(schema, indent=2, ensure_ascii=True),
        "Conversation:",
    ]
    for turn in conversation.turns:
        for part in turn.parts:
            lines.append(f"[{turn.role.value}] {_describe_part(part)}")
    lines.append("Output JSON:")
    return "\n".join(lines)


def parse_decision(text: str) -> Decision | None:
    data = extract_json(text)
    if data is None:
        return None
    try:
        output = DecisionOutput.model_validate(data)
    except ValidationError:
        return None
    return Decision(
        calls=[CallPart(name=call.name, args=call.args) for call in output.calls],
        text=output.text,
    )


def extract_json(text: str) -> dict[str, Any] | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    snippet = text[start : end + 1]
    try:
        loaded = json.loads(snippet)
    except json.JSONDecodeError:
        return None
    if isinstance(loaded, dict):
        return loaded
    return None


def _describe_part(part: TextPart | CallPart | ResultPart) -> str:
    if isinstance(part, TextPart):
        return part.text
    if isinstance(part, CallPart):
        return f"call {part.name} {json.dumps(part.args, sort_keys=True)}"
    return f"result {part.name} {part.result.model_dump_json(exclude_none=True)}"
