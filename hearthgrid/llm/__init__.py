"""Decision service adapters and interfaces."""

from hearthgrid.llm.base import DecisionService, DecisionServiceError, LLMConfig
from hearthgrid.llm.conversation import (
    CallPart,
    Conversation,
    Decision,
    ResultPart,
    Role,
    TextPart,
    Turn,
)
from hearthgrid.llm.fake_llm import FakeLLM
from hearthgrid.llm.gemini import GeminiService
from hearthgrid.llm.mlx_llm import MlxLLM
from hearthgrid.llm.prompts import parse_decision, render_instruction, render_transcript

__all__ = [
    "CallPart",
    "Conversation",
    "Decision",
    "DecisionService",
    "DecisionServiceError",
    "FakeLLM",
    "GeminiService",
    "LLMConfig",
    "MlxLLM",
    "ResultPart",
    "Role",
    "TextPart",
    "Turn",
    "parse_decision",
    "render_instruction",
    "render_transcript",
]
