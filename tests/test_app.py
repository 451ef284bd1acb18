import threading
from pathlib import Path

import httpx
import pytest

from hearthgrid import app
from hearthgrid.app import Host, build_host, run_agent
from hearthgrid.db.run_log import RUN_LOG_NAME, read_final_snapshot, read_log_entries
from hearthgrid.llm.base import LLMConfig
from hearthgrid.llm.conversation import CallPart, Decision
from hearthgrid.llm.fake_llm import FakeLLM
from hearthgrid.llm.gemini import GeminiService
from hearthgrid.sim.agent_loop import LoopConfig
from hearthgrid.sim.contracts import Position, RunStatus, Severity
from hearthgrid.sim.world_state import World


def test_host_greets_on_creation() -> None:
    host = Host(World(), FakeLLM())
    messages = [entry.message for entry in host.activity.entries()]
    assert messages == ["Welcome to Hearthgrid!", "Enter a goal, then start the agent."]
    assert host.status == RunStatus.IDLE


def test_reset_stops_run_and_restores_world() -> None:
    service = FakeLLM(
        [Decision(calls=[CallPart(name="move", args={"direction": "east"})])],
        repeat_last=True,
    )
    host = Host(World(), service, config=LoopConfig(round_delay=30))
    moved = threading.Event()
    host.activity.subscribe(
        lambda entry: moved.set() if entry.message.startswith("move(") else None
    )

    assert host.start_in_background("Walk east") is True
    assert moved.wait(5)
    assert host.start_in_background("Again") is False

    host.reset()

    assert host.wait(5) is True
    assert host.last_result is not None
    assert host.last_result.status == RunStatus.STOPPED
    assert host.world.agent.position == Position(x=10, y=10)
    assert host.world.agent.inventory == {}
    entries = host.activity.entries()
    assert [entry.message for entry in entries] == ["World reset!"]
    assert entries[0].severity == Severity.INFO


def test_build_host_resolves_backend_from_env(monkeypatch) -> None:
    monkeypatch.setenv("HEARTHGRID_LLM", "gemini")
    monkeypatch.delenv("HEARTHGRID_API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    monkeypatch.setenv("HEARTHGRID_SEED", "9")

    host = build_host()

    service = host.loop.service
    assert isinstance(service, GeminiService)
    assert service.config.api_key == "from-env"
    assert service.config.model_id == "gemini-2.0-flash"
    assert host.world.seed == 9


def test_build_host_defaults_to_fake(monkeypatch) -> None:
    monkeypatch.delenv("HEARTHGRID_LLM", raising=False)
    monkeypatch.setenv("HEARTHGRID_SEED", "not-a-number")
    host = build_host()
    assert isinstance(host.loop.service, FakeLLM)
    assert host.world.seed == 0


def test_gemini_without_key_is_rejected(monkeypatch) -> None:
    monkeypatch.delenv("HEARTHGRID_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    host = build_host(llm_backend="gemini")
    result = host.start("Explore")
    assert result.rejected is True
    assert result.reason == "API key not provided"
    assert host.activity.entries()[-1].message == "Error: API key not provided"


def test_run_agent_writes_run_log(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("HEARTHGRID_SEED", raising=False)
    result, run_dir = run_agent(
        "Survey the area",
        tmp_path,
        llm_backend="fake",
        seed=2,
        config=LoopConfig(round_delay=0),
    )

    assert result.status == RunStatus.COMPLETED
    log_path = run_dir / RUN_LOG_NAME
    assert log_path.exists()
    messages = [entry.message for entry in read_log_entries(log_path)]
    assert "Starting agent with goal: Survey the area" in messages
    assert messages[-1] == "Agent completed its task"
    snapshot = read_final_snapshot(log_path)
    assert snapshot is not None
    assert snapshot.agent.active is False


@pytest.mark.parametrize("backend", ["fake", "FAKE", "unknown"])
def test_fake_backend_names(backend: str) -> None:
    host = build_host(llm_backend=backend, seed=1)
    assert isinstance(host.loop.service, FakeLLM)


def test_background_reset_does_not_wait_for_pending_decision() -> None:
    service = _GatedService()
    host = Host(World(), service, config=LoopConfig(round_delay=0))
    assert host.start_in_background("Explore") is True
    assert service.entered.wait(5)

    resetter = host.reset_in_background()

    assert resetter.is_alive()
    assert host.start_in_background("Again") is False
    service.release.set()
    resetter.join(5)
    assert not resetter.is_alive()
    assert host.last_result is not None
    assert host.last_result.status == RunStatus.STOPPED
    assert [entry.message for entry in host.activity.entries()] == ["World reset!"]


def test_close_releases_the_http_client() -> None:
    client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    )
    service = GeminiService(LLMConfig(model_id="gemini-2.0-flash"), client=client)
    host = Host(World(), service)
    host.close()
    assert client.is_closed


def test_run_agent_closes_the_service(tmp_path: Path, monkeypatch) -> None:
    service = FakeLLM([Decision(text="done")])
    monkeypatch.setattr(app, "_resolve_service", lambda *args: service)

    result, _ = run_agent("Explore", tmp_path, config=LoopConfig(round_delay=0))

    assert result.status == RunStatus.COMPLETED
    assert service.closed is True


class _GatedService(FakeLLM):
    def __init__(self) -> None:
        super().__init__([Decision(text="done")])
        self.entered = threading.Event()
        self.release = threading.Event()

    def decide(self, *, conversation, actions) -> Decision:
        self.entered.set()
        self.release.wait(5)
        return super().decide(conversation=conversation, actions=actions)
