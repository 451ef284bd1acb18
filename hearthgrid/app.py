"""Application entry for running the agent against a world."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from hearthgrid.db.run_log import (
    append_log_entry,
    append_snapshot,
    create_run_folder,
    write_header,
)
from hearthgrid.llm.base import DecisionService, LLMConfig
from hearthgrid.llm.fake_llm import FakeLLM
from hearthgrid.llm.gemini import DEFAULT_MODEL_ID, GeminiService
from hearthgrid.llm.mlx_llm import MlxLLM
from hearthgrid.sim.activity import ActivityLog
from hearthgrid.sim.agent_loop import AgentLoop, LoopConfig, RunResult
from hearthgrid.sim.contracts import RunStatus, Severity, WorldSnapshot
from hearthgrid.sim.world_state import World

logger = logging.getLogger(__name__)

DEFAULT_LLM_BACKEND = "fake"
DEFAULT_MLX_MODEL_ID = "mlx-community/Qwen3-4B-4bit"
DEFAULT_GOAL = "Gather some food and report what is around you."


class Host:
    """Start, stop and reset entry points shared by the CLI and the viewer."""

    def __init__(
        self,
        world: World,
        service: DecisionService,
        *,
        config: LoopConfig | None = None,
        activity: ActivityLog | None = None,
    ) -> None:
        self.world = world
        self.activity = activity or ActivityLog()
        self.loop = AgentLoop(world, service, sink=self.activity, config=config)
        self.last_result: RunResult | None = None
        self._worker: threading.Thread | None = None
        self._resetter: threading.Thread | None = None
        self.activity.emit("Welcome to Hearthgrid!", Severity.INFO)
        self.activity.emit("Enter a goal, then start the agent.", Severity.INFO)

    @property
    def status(self) -> RunStatus:
        return self.loop.status

    def snapshot(self) -> WorldSnapshot:
        return self.world.snapshot()

    def start(self, goal: str) -> RunResult:
        self.last_result = self.loop.start(goal)
        return self.last_result

    def start_in_background(self, goal: str) -> bool:
        if _alive(self._resetter):
            self.activity.emit("Error: the world is being reset", Severity.ERROR)
            return False
        if _alive(self._worker):
            self.activity.emit(
                "Error: an agent run is already in progress", Severity.ERROR
            )
            return False
        self._worker = threading.Thread(target=self.start, args=(goal,), daemon=True)
        self._worker.start()
        return True

    def stop(self) -> bool:
        return self.loop.stop()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for a background run; returns True once no run is alive."""
        if self._worker is None:
            return True
        self._worker.join(timeout)
        return not self._worker.is_alive()

    def reset(self) -> None:
        self.stop()
        self.wait()
        self.world.reset()
        self.activity.clear()
        self.activity.emit("World reset!", Severity.INFO)

    def reset_in_background(self) -> threading.Thread:
        """Reset without blocking the caller on an in-flight decision request."""
        if _alive(self._resetter):
            return self._resetter
        self.stop()
        self._resetter = threading.Thread(target=self.reset, daemon=True)
        self._resetter.start()
        return self._resetter

    def close(self) -> None:
        self.stop()
        self.loop.service.close()


def build_host(
    *,
    llm_backend: str | None = None,
    model_id: str | None = None,
    api_key: str | None = None,
    seed: int | None = None,
    config: LoopConfig | None = None,
) -> Host:
    world = World(seed=_resolve_seed(seed))
    service = _resolve_service(llm_backend, model_id, api_key)
    return Host(world, service, config=config)


def run_agent(
    goal: str,
    base_dir: Path,
    *,
    llm_backend: str | None = None,
    model_id: str | None = None,
    api_key: str | None = None,
    seed: int | None = None,
    config: LoopConfig | None = None,
) -> tuple[RunResult, Path]:
    host = build_host(
        llm_backend=llm_backend,
        model_id=model_id,
        api_key=api_key,
        seed=seed,
        config=config,
    )
    try:
        run_dir, log_path = create_run_folder(base_dir)
        write_header(
            log_path,
            metadata={
                "run_id": run_dir.name,
                "goal": goal,
                "seed": host.world.seed,
                "size": host.world.size,
            },
        )
        host.activity.subscribe(lambda entry: append_log_entry(log_path, entry))
        result = host.start(goal)
        append_snapshot(log_path, host.snapshot(), status=result.status.value)
    finally:
        host.close()
    return result, run_dir


def run_agent_with_viewer(
    goal: str | None = None,
    *,
    llm_backend: str | None = None,
    model_id: str | None = None,
    api_key: str | None = None,
    seed: int | None = None,
    config: LoopConfig | None = None,
) -> None:
    from hearthgrid.render.live_view import run_live_view

    host = build_host(
        llm_backend=llm_backend,
        model_id=model_id,
        api_key=api_key,
        seed=seed,
        config=config,
    )
    run_live_view(host, goal=goal or DEFAULT_GOAL)


def _alive(worker: threading.Thread | None) -> bool:
    return worker is not None and worker.is_alive()


def _resolve_service(
    llm_backend: str | None, model_id: str | None, api_key: str | None
) -> DecisionService:
    backend = (
        llm_backend or os.getenv("HEARTHGRID_LLM") or DEFAULT_LLM_BACKEND
    ).lower()
    if backend == "gemini":
        key = api_key or os.getenv("HEARTHGRID_API_KEY") or os.getenv("GEMINI_API_KEY")
        model = model_id or os.getenv("HEARTHGRID_MODEL_ID") or DEFAULT_MODEL_ID
        return GeminiService(LLMConfig(model_id=model, api_key=key))
    if backend == "mlx":
        model = model_id or os.getenv("HEARTHGRID_MODEL_ID") or DEFAULT_MLX_MODEL_ID
        return MlxLLM(config=LLMConfig(model_id=model))
    if backend != "fake":
        logger.warning("Unknown LLM backend %r, using the scripted fake", backend)
    return FakeLLM()


def _resolve_seed(seed: int | None) -> int:
    if seed is not None:
        return seed
    raw = os.getenv("HEARTHGRID_SEED")
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer HEARTHGRID_SEED=%r", raw)
        return 0
