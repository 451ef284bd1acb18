"""Bounded decide-then-act loop between the decision service and the world."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass

from hearthgrid.llm.base import DecisionService, DecisionServiceError
from hearthgrid.llm.conversation import Conversation, Decision, ResultPart
from hearthgrid.llm.prompts import render_instruction
from hearthgrid.sim.actions import ActionCatalog
from hearthgrid.sim.activity import ActivityLog, LogSink
from hearthgrid.sim.contracts import RunStatus, Severity
from hearthgrid.sim.world_state import World

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 30
ROUND_DELAY_SECONDS = 1.0


@dataclass(frozen=True)
class LoopConfig:
    max_iterations: int = MAX_ITERATIONS
    round_delay: float = ROUND_DELAY_SECONDS


@dataclass(frozen=True)
class RunResult:
    status: RunStatus
    iterations: int = 0
    conversation: Conversation | None = None
    reason: str | None = None

    @property
    def rejected(self) -> bool:
        return self.reason is not None


class AgentLoop:
    """Owns one world for the duration of a run.

    `start` blocks until the run reaches a terminal status; `stop` may be
    called from any other thread and is observed right after the service
    call and during the pause between rounds.
    """

    def __init__(
        self,
        world: World,
        service: DecisionService,
        *,
        sink: LogSink | None = None,
        config: LoopConfig | None = None,
    ) -> None:
        self._world = world
        self._catalog = ActionCatalog(world)
        self._service = service
        self._sink = sink or ActivityLog()
        self._config = config or LoopConfig()
        self._status = RunStatus.IDLE
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._iterations = 0

    @property
    def status(self) -> RunStatus:
        with self._lock:
            return self._status

    @property
    def is_running(self) -> bool:
        return self.status.is_active

    @property
    def catalog(self) -> ActionCatalog:
        return self._catalog

    @property
    def service(self) -> DecisionService:
        return self._service

    def start(self, goal: str) -> RunResult:
        goal = goal.strip()
        with self._lock:
            reason = self._rejection(goal)
            if reason is None:
                self._status = RunStatus.STARTING
                self._stop_event.clear()
            current = self._status
        if reason is not None:
            logger.warning("Rejected start: %s", reason)
            self._sink.emit(f"Error: {reason}", Severity.ERROR)
            return RunResult(status=current, reason=reason)

        conversation = Conversation()
        conversation.add_instruction(render_instruction(goal, self._catalog.specs))
        self._iterations = 0
        status = RunStatus.STOPPED
        try:
            self._sink.emit(f"Starting agent with goal: {goal}", Severity.INFO)
            self._set_status(RunStatus.RUNNING)
            self._world.set_active(True)
            status = self._run(conversation)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Agent run failed")
            self._report_failure(exc)
        finally:
            self._world.set_active(False)
            self._set_status(status)
        logger.info(
            "Run finished with %s after %s round(s)", status.value, self._iterations
        )
        return RunResult(
            status=status, iterations=self._iterations, conversation=conversation
        )

    def stop(self) -> bool:
        """Request the active run to stop; returns False when nothing is running."""
        if not self.is_running:
            return False
        self._stop_event.set()
        return True

    def _rejection(self, goal: str) -> str | None:
        if self._status.is_active:
            return "an agent run is already in progress"
        if not goal:
            return "please enter a goal for the agent"
        if not self._service.is_configured():
            return "API key not provided"
        return None

    def _run(self, conversation: Conversation) -> RunStatus:
        while self._iterations < self._config.max_iterations:
            if self._stop_event.is_set():
                return self._stopped()
            self._iterations += 1
            self._sink.emit(f"--- Iteration {self._iterations} ---", Severity.INFO)

            decision = self._request_decision(conversation)
            if decision is None:
                return RunStatus.STOPPED
            if self._stop_event.is_set():
                return self._stopped()

            if decision.is_final:
                if decision.text:
                    self._sink.emit(f"Agent: {decision.text}", Severity.SUCCESS)
                self._sink.emit("Agent completed its task", Severity.SUCCESS)
                return RunStatus.COMPLETED

            self._execute_round(conversation, decision)

            if self._stop_event.wait(self._config.round_delay):
                return self._stopped()

        self._sink.emit("Reached maximum iterations", Severity.INFO)
        return RunStatus.MAX_ITERATIONS

    def _request_decision(self, conversation: Conversation) -> Decision | None:
        try:
            return self._service.decide(
                conversation=conversation, actions=self._catalog.specs
            )
        except DecisionServiceError as exc:
            logger.warning("Decision service failed: %s", exc)
            self._sink.emit(f"Error: {exc}", Severity.ERROR)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Decision service raised unexpectedly")
            self._sink.emit(f"Error: {exc}", Severity.ERROR)
        return None

    def _execute_round(self, conversation: Conversation, decision: Decision) -> None:
        results: list[ResultPart] = []
        for call in decision.calls:
            result = self._catalog.dispatch(call.name, call.args)
            results.append(ResultPart(name=call.name, result=result))
            args = json.dumps(call.args, sort_keys=True, default=str)
            self._sink.emit(
                f"{call.name}({args}): {result.message}",
                Severity.SUCCESS if result.success else Severity.ERROR,
            )
        conversation.add_calls(decision.calls)
        conversation.add_results(results)

    def _report_failure(self, exc: Exception) -> None:
        try:
            self._sink.emit(f"Error: {exc}", Severity.ERROR)
        except Exception:  # noqa: BLE001
            logger.exception("Activity sink failed while reporting a run failure")

    def _stopped(self) -> RunStatus:
        self._sink.emit("Agent stopped", Severity.INFO)
        return RunStatus.STOPPED

    def _set_status(self, status: RunStatus) -> None:
        with self._lock:
            self._status = status
