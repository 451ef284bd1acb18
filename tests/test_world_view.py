from rich.console import Console

from hearthgrid.render.world_view import (
    inventory_summary,
    render_activity,
    render_map_lines,
    render_world_view,
)
from hearthgrid.sim.contracts import (
    LogEntry,
    Position,
    ResourceKind,
    RunStatus,
    StructureKind,
    TerrainKind,
)
from hearthgrid.sim.world_gen import TileSeed
from hearthgrid.sim.world_state import World


def test_map_lines_mark_agent_structures_and_food() -> None:
    world = _build_world()
    world.place_structure(Position(x=0, y=0), StructureKind.SHELTER)
    lines = [line.plain for line in render_map_lines(world.snapshot())]
    assert lines == [
        "H..",
        "~@.",
        "..,",
    ]


def test_world_view_renders_panels() -> None:
    world = _build_world()
    world.credit_inventory("wood", 3)
    renderable = render_world_view(
        world.snapshot(),
        status=RunStatus.RUNNING,
        entries=[LogEntry(message="Moved north")],
    )

    output = _render(renderable)
    assert "World" in output
    assert "Agent" in output
    assert "Position" in output
    assert "(1, 1)" in output
    assert "wood: 3" in output
    assert "Running" in output
    assert "Legend" in output
    assert "Moved north" in output


def test_activity_panel_empty_and_trimmed() -> None:
    assert "No activity yet." in _render(render_activity([]))
    entries = [LogEntry(message=f"line {index}") for index in range(5)]
    output = _render(render_activity(entries, max_entries=2))
    assert "line 4" in output
    assert "line 3" in output
    assert "line 2" not in output


def test_inventory_summary() -> None:
    assert inventory_summary({}) == "Empty"
    assert inventory_summary({"wood": 2, "axe": 1}) == "wood: 2, axe: 1"


def _render(renderable) -> str:
    console = Console(width=100, record=True)
    console.print(renderable)
    return console.export_text()


def _build_world() -> World:
    tiles = {
        (0, 1): TileSeed(terrain=TerrainKind.LIQUID),
        (2, 2): TileSeed(
            terrain=TerrainKind.OPEN,
            resource=ResourceKind.FOOD,
            resource_amount=3,
        ),
    }
    return World(
        3,
        tile_source=lambda x, y, size: tiles.get(
            (x, y), TileSeed(terrain=TerrainKind.OPEN)
        ),
    )
