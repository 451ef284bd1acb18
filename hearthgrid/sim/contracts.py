"""Core data contracts shared by the world, the catalog and the loop."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TerrainKind(str, Enum):
    OPEN = "grass"
    WOODED = "forest"
    ROCKY = "mountain"
    LIQUID = "water"
    ARID = "desert"


class ResourceKind(str, Enum):
    WOOD = "wood"
    STONE = "stone"
    SAND = "sand"
    FOOD = "food"


class ItemKind(str, Enum):
    AXE = "axe"
    PICKAXE = "pickaxe"
    CAMPFIRE = "campfire"


class StructureKind(str, Enum):
    SHELTER = "shelter"
    CAMPFIRE = "campfire"


class Direction(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class RunStatus(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"
    MAX_ITERATIONS = "max_iterations"

    @property
    def is_terminal(self) -> bool:
        return self in {
            RunStatus.STOPPED,
            RunStatus.COMPLETED,
            RunStatus.MAX_ITERATIONS,
        }

    @property
    def is_active(self) -> bool:
        return self in {RunStatus.STARTING, RunStatus.RUNNING}


class Position(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(x=self.x + dx, y=self.y + dy)


class TileInfo(BaseModel):
    """One visible tile as reported by `look`."""

    model_config = ConfigDict(extra="forbid")

    position: Position
    relative_position: Position
    terrain: TerrainKind
    resource: ResourceKind | None = None
    resource_amount: int | None = None
    structure: StructureKind | None = None


class ActionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    success: bool
    message: str
    data: dict[str, Any] | None = None


class ArgumentSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    description: str
    allowed: list[str]


class ActionSpec(BaseModel):
    """Schema entry the decision service must honor when requesting an action."""

    model_config = ConfigDict(extra="forbid")

    name: str
    description: str
    arguments: list[ArgumentSpec] = Field(default_factory=list)

    def to_json_schema(self) -> dict[str, Any]:
        properties = {
            arg.name: {
                "type": "string",
                "enum": list(arg.allowed),
                "description": arg.description,
            }
            for arg in self.arguments
        }
        schema: dict[str, Any] = {"type": "object", "properties": properties}
        if self.arguments:
            schema["required"] = [arg.name for arg in self.arguments]
        return schema


class TileSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    terrain: TerrainKind
    resource: ResourceKind | None = None
    resource_amount: int | None = None
    structure: StructureKind | None = None


class AgentSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    position: Position
    inventory: dict[str, int] = Field(default_factory=dict)
    active: bool = False


class WorldSnapshot(BaseModel):
    """Read-only copy of the world handed to renderers."""

    model_config = ConfigDict(extra="forbid")

    size: int
    rows: list[list[TileSnapshot]]
    agent: AgentSnapshot

    def tile(self, x: int, y: int) -> TileSnapshot:
        return self.rows[y][x]


class LogEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    severity: Severity = Severity.INFO
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
