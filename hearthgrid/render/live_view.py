"""Live Textual viewer: world map, agent status, goal entry and activity log."""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Input, Static

from hearthgrid.app import Host
from hearthgrid.render.world_view import (
    render_activity,
    render_agent_panel,
    render_legend,
    render_map_lines,
)

RENDER_INTERVAL_SECONDS = 0.1
ACTIVITY_LINES = 14


class LiveViewScreen(Screen):
    CSS = """
    Screen {
        layout: vertical;
    }
    #main {
        layout: horizontal;
        height: auto;
    }
    #world-map {
        width: auto;
    }
    #side-pane {
        width: 40;
    }
    #activity {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("escape", "stop_agent", "Stop"),
        ("ctrl+r", "reset_world", "Reset"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, host: Host, *, goal: str = "") -> None:
        super().__init__()
        self._host = host
        self._goal = goal
        self._map: Static | None = None
        self._agent: Static | None = None
        self._activity: Static | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            with Horizontal(id="main"):
                yield Static(id="world-map")
                with Vertical(id="side-pane"):
                    yield Static(id="agent")
                    yield Static(render_legend(), id="legend")
            yield Input(
                value=self._goal, placeholder="Goal for the agent", id="goal"
            )
            yield Static(id="activity")
        yield Footer()

    def on_mount(self) -> None:
        self._map = self.query_one("#world-map", Static)
        self._agent = self.query_one("#agent", Static)
        self._activity = self.query_one("#activity", Static)
        self._refresh_view()
        self.set_interval(RENDER_INTERVAL_SECONDS, self._refresh_view)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._host.start_in_background(event.value)

    def action_stop_agent(self) -> None:
        self._host.stop()

    def action_reset_world(self) -> None:
        self._host.reset_in_background()

    def action_quit(self) -> None:
        self._host.stop()
        self.app.exit()

    def _refresh_view(self) -> None:
        snapshot = self._host.snapshot()
        if self._map:
            lines = render_map_lines(snapshot)
            self._map.update(Panel(Text("\n").join(lines), title="World"))
        if self._agent:
            self._agent.update(render_agent_panel(snapshot, status=self._host.status))
        if self._activity:
            self._activity.update(
                render_activity(
                    self._host.activity.entries(), max_entries=ACTIVITY_LINES
                )
            )


class HearthgridApp(App):
    """Hosts the live screen and stops any run still going when it exits."""

    def __init__(self, host: Host, *, goal: str = "") -> None:
        super().__init__()
        self._host = host
        self._goal = goal
        self.title = "Hearthgrid"
        self.sub_title = f"seed {host.world.seed}"

    def on_mount(self) -> None:
        self.push_screen(LiveViewScreen(self._host, goal=self._goal))

    def on_unmount(self) -> None:
        self._host.stop()
        self._host.wait(timeout=2.0)
        self._host.close()


def run_live_view(host: Host, *, goal: str = "") -> None:
    HearthgridApp(host, goal=goal).run()
