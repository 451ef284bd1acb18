"""Simulation core and world model."""

from hearthgrid.sim.actions import (
    ACTION_SPECS,
    BUILD_REQUIREMENTS,
    RECIPES,
    ActionCatalog,
)
from hearthgrid.sim.activity import ActivityLog, LogSink
from hearthgrid.sim.contracts import (
    ActionResult,
    ActionSpec,
    Direction,
    ItemKind,
    LogEntry,
    Position,
    ResourceKind,
    RunStatus,
    Severity,
    StructureKind,
    TerrainKind,
    TileInfo,
    WorldSnapshot,
)
from hearthgrid.sim.world_gen import GenerationPolicy, generate_tile
from hearthgrid.sim.world_state import AgentState, Tile, World

__all__ = [
    "ACTION_SPECS",
    "ActionCatalog",
    "ActionResult",
    "ActionSpec",
    "ActivityLog",
    "AgentState",
    "BUILD_REQUIREMENTS",
    "Direction",
    "GenerationPolicy",
    "ItemKind",
    "LogEntry",
    "LogSink",
    "Position",
    "RECIPES",
    "ResourceKind",
    "RunStatus",
    "Severity",
    "StructureKind",
    "TerrainKind",
    "Tile",
    "TileInfo",
    "World",
    "WorldSnapshot",
    "generate_tile",
]
