"""Gemini function-calling adapter over the REST generateContent endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from hearthgrid.llm.base import DecisionService, DecisionServiceError, LLMConfig
from hearthgrid.llm.conversation import (
    CallPart,
    Conversation,
    Decision,
    ResultPart,
    TextPart,
    Turn,
)
from hearthgrid.sim.contracts import ActionSpec

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "gemini-2.0-flash"


class GeminiService(DecisionService):
    def __init__(
        self, config: LLMConfig, *, client: httpx.Client | None = None
    ) -> None:
        self.config = config
        self._client = client or httpx.Client(timeout=config.timeout)

    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    def decide(
        self,
        *,
        conversation: Conversation,
        actions: list[ActionSpec],
    ) -> Decision:
        if not self.is_configured():
            raise DecisionServiceError("Gemini API key is not configured")
        url = f"{self.config.base_url}/models/{self.config.model_id}:generateContent"
        body = build_request(conversation, actions)
        try:
            response = self._client.post(
                url,
                json=body,
                headers={"x-goog-api-key": self.config.api_key or ""},
            )
        except httpx.HTTPError as exc:
            raise DecisionServiceError(f"Gemini request failed: {exc}") from exc

        if response.is_error:
            raise DecisionServiceError(
                f"Gemini API error: {response.status_code} - {response.text[:500]}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecisionServiceError("Gemini returned a non-JSON body") from exc
        decision = parse_response(payload)
        logger.debug(
            "Gemini returned %s call(s), text=%s",
            len(decision.calls),
            bool(decision.text),
        )
        return decision

    def close(self) -> None:
        self._client.close()


def build_request(
    conversation: Conversation, actions: list[ActionSpec]
) -> dict[str, Any]:
    return {
        "contents": [_encode_turn(turn) for turn in conversation.turns],
        "tools": [
            {
                "functionDeclarations": [
                    {
                        "name": spec.name,
                        "description": spec.description,
                        "parameters": spec.to_json_schema(),
                    }
                    for spec in actions
                ]
            }
        ],
    }


def parse_response(payload: Any) -> Decision:
    if not isinstance(payload, dict):
        raise DecisionServiceError("Gemini response is not an object")
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise DecisionServiceError("Gemini response has no candidates")
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        raise DecisionServiceError("Gemini candidate has no content")

    calls: list[CallPart] = []
    texts: list[str] = []
    for part in content.get("parts") or []:
        if not isinstance(part, dict):
            raise DecisionServiceError("Gemini content part is not an object")
        if "functionCall" in part:
            calls.append(_decode_call(part["functionCall"]))
        elif part.get("text"):
            texts.append(str(part["text"]))
    return Decision(calls=calls, text="\n".join(texts) or None)


def _decode_call(raw: Any) -> CallPart:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise DecisionServiceError("Gemini function call is missing a name")
    args = raw.get("args") or {}
    if not isinstance(args, dict):
        raise DecisionServiceError("Gemini function call args must be an object")
    return CallPart(name=str(raw["name"]), args=args)


def _encode_turn(turn: Turn) -> dict[str, Any]:
    return {
        "role": turn.role.value,
        "parts": [_encode_part(part) for part in turn.parts],
    }


def _encode_part(part: TextPart | CallPart | ResultPart) -> dict[str, Any]:
    if isinstance(part, TextPart):
        return {"text": part.text}
    if isinstance(part, CallPart):
        return {"functionCall": {"name": part.name, "args": part.args}}
    return {
        "functionResponse": {
            "name": part.name,
            "response": part.result.model_dump(mode="json", exclude_none=True),
        }
    }
