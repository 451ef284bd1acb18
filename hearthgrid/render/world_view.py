"""Rich rendering for world snapshots and the activity log."""

from __future__ import annotations

from typing import Iterable

from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hearthgrid.sim.contracts import (
    LogEntry,
    RunStatus,
    Severity,
    StructureKind,
    TerrainKind,
    TileSnapshot,
    WorldSnapshot,
)

TERRAIN_GLYPHS = {
    TerrainKind.OPEN: ".",
    TerrainKind.WOODED: "T",
    TerrainKind.ROCKY: "^",
    TerrainKind.LIQUID: "~",
    TerrainKind.ARID: ":",
}

TERRAIN_STYLES = {
    TerrainKind.OPEN: "green3",
    TerrainKind.WOODED: "dark_green",
    TerrainKind.ROCKY: "grey70",
    TerrainKind.LIQUID: "blue",
    TerrainKind.ARID: "yellow",
}

STRUCTURE_GLYPHS = {
    StructureKind.SHELTER: "H",
    StructureKind.CAMPFIRE: "*",
}

STRUCTURE_STYLE = "bold bright_magenta"
FOOD_STYLE = "bold red"
AGENT_STYLE = "bold bright_cyan"
ACTIVE_AGENT_STYLE = "bold bright_green"

SEVERITY_STYLES = {
    Severity.INFO: "grey70",
    Severity.SUCCESS: "green",
    Severity.ERROR: "red",
}

STATUS_LABELS = {
    RunStatus.IDLE: "Idle",
    RunStatus.STARTING: "Starting",
    RunStatus.RUNNING: "Running",
    RunStatus.STOPPED: "Stopped",
    RunStatus.COMPLETED: "Completed",
    RunStatus.MAX_ITERATIONS: "Max iterations",
}


def render_world_view(
    snapshot: WorldSnapshot,
    *,
    status: RunStatus = RunStatus.IDLE,
    entries: Iterable[LogEntry] = (),
    max_entries: int = 12,
) -> RenderableType:
    world = Panel(Group(*render_map_lines(snapshot)), title="World")
    side = Group(
        render_agent_panel(snapshot, status=status),
        render_legend(),
    )
    layout = Columns([world, side])
    return Group(layout, render_activity(entries, max_entries=max_entries))


def render_map_lines(snapshot: WorldSnapshot) -> list[Text]:
    agent = snapshot.agent
    lines: list[Text] = []
    for y, row in enumerate(snapshot.rows):
        line = Text()
        for x, tile in enumerate(row):
            if agent.position.x == x and agent.position.y == y:
                style = ACTIVE_AGENT_STYLE if agent.active else AGENT_STYLE
                line.append("@", style=style)
                continue
            glyph, style = _tile_glyph(tile)
            line.append(glyph, style=style)
        lines.append(line)
    return lines


def render_agent_panel(
    snapshot: WorldSnapshot, *, status: RunStatus = RunStatus.IDLE
) -> RenderableType:
    position = snapshot.agent.position
    table = Table(show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Position", f"({position.x}, {position.y})")
    table.add_row("Inventory", inventory_summary(snapshot.agent.inventory))
    table.add_row("State", STATUS_LABELS[status])
    return Panel(table, title="Agent")


def render_legend() -> RenderableType:
    table = Table(show_header=False)
    table.add_column("Glyph")
    table.add_column("Meaning")
    for terrain, glyph in TERRAIN_GLYPHS.items():
        table.add_row(Text(glyph, style=TERRAIN_STYLES[terrain]), terrain.value)
    for structure, glyph in STRUCTURE_GLYPHS.items():
        table.add_row(Text(glyph, style=STRUCTURE_STYLE), structure.value)
    table.add_row(Text(",", style=FOOD_STYLE), "grass with food")
    table.add_row(Text("@", style=AGENT_STYLE), "agent")
    return Panel(table, title="Legend")


def render_activity(
    entries: Iterable[LogEntry], *, max_entries: int = 12
) -> RenderableType:
    recent = list(entries)[-max_entries:]
    if not recent:
        return Panel(Text("No activity yet."), title="Activity")
    text = Text()
    for index, entry in enumerate(recent):
        if index:
            text.append("\n")
        stamp = entry.created_at.astimezone().strftime("%H:%M:%S")
        text.append(f"[{stamp}] ", style="dim")
        text.append(entry.message, style=SEVERITY_STYLES[entry.severity])
    return Panel(text, title="Activity")


def inventory_summary(inventory: dict[str, int]) -> str:
    if not inventory:
        return "Empty"
    return ", ".join(f"{item}: {amount}" for item, amount in inventory.items())


def _tile_glyph(tile: TileSnapshot) -> tuple[str, str]:
    if tile.structure is not None:
        return STRUCTURE_GLYPHS[tile.structure], STRUCTURE_STYLE
    glyph = TERRAIN_GLYPHS[tile.terrain]
    if tile.resource is not None and tile.terrain == TerrainKind.OPEN:
        return ",", FOOD_STYLE
    return glyph, TERRAIN_STYLES[tile.terrain]
