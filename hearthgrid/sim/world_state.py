"""World and agent runtime state with legality-checked mutations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from hearthgrid.sim.contracts import (
    AgentSnapshot,
    Position,
    ResourceKind,
    StructureKind,
    TerrainKind,
    TileSnapshot,
    WorldSnapshot,
)
from hearthgrid.sim.world_gen import TileSeed, generate_tile

DEFAULT_GRID_SIZE = 20

TileSource = Callable[[int, int, int], TileSeed]


@dataclass
class Tile:
    terrain: TerrainKind
    resource: ResourceKind | None = None
    resource_amount: int | None = None
    structure: StructureKind | None = None

    def __post_init__(self) -> None:
        if (self.resource is None) != (self.resource_amount is None):
            raise ValueError("resource and resource_amount must be set together")
        if self.resource_amount is not None and self.resource_amount <= 0:
            raise ValueError("resource_amount must be positive")

    @property
    def walkable(self) -> bool:
        return self.terrain != TerrainKind.LIQUID

    @classmethod
    def from_seed(cls, seed: TileSeed) -> "Tile":
        return cls(
            terrain=seed.terrain,
            resource=seed.resource,
            resource_amount=seed.resource_amount,
        )


@dataclass
class AgentState:
    position: Position
    inventory: dict[str, int] = field(default_factory=dict)
    active: bool = False


class World:
    """Sole owner of the grid and the agent; every mutation is checked here."""

    def __init__(
        self,
        size: int = DEFAULT_GRID_SIZE,
        *,
        seed: int = 0,
        start: Position | None = None,
        tile_source: TileSource | None = None,
    ) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self._size = size
        self._seed = seed
        self._start = start or Position(x=size // 2, y=size // 2)
        self._tile_source = tile_source or self._generated_tile
        self._grid, self._agent = self._create()

    @property
    def size(self) -> int:
        return self._size

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def start(self) -> Position:
        return self._start

    @property
    def agent(self) -> AgentState:
        return self._agent

    def is_valid_position(self, pos: Position) -> bool:
        return 0 <= pos.x < self._size and 0 <= pos.y < self._size

    def tile_at(self, pos: Position) -> Tile | None:
        if not self.is_valid_position(pos):
            return None
        return self._grid[pos.y][pos.x]

    def move_agent_to(self, pos: Position) -> bool:
        tile = self.tile_at(pos)
        if tile is None or not tile.walkable:
            return False
        self._agent.position = pos
        return True

    def deplete_resource(self, pos: Position, amount: int) -> bool:
        tile = self.tile_at(pos)
        if tile is None or tile.resource is None or tile.resource_amount is None:
            return False
        if amount <= 0 or tile.resource_amount < amount:
            return False
        remaining = tile.resource_amount - amount
        if remaining == 0:
            tile.resource = None
            tile.resource_amount = None
        else:
            tile.resource_amount = remaining
        return True

    def count(self, item: str) -> int:
        return self._agent.inventory.get(item, 0)

    def has_in_inventory(self, item: str, amount: int) -> bool:
        return self.count(item) >= amount

    def credit_inventory(self, item: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("credit amount must be positive")
        inventory = self._agent.inventory
        inventory[item] = inventory.get(item, 0) + amount

    def debit_inventory(self, item: str, amount: int) -> bool:
        if amount <= 0 or not self.has_in_inventory(item, amount):
            return False
        remaining = self._agent.inventory[item] - amount
        if remaining == 0:
            del self._agent.inventory[item]
        else:
            self._agent.inventory[item] = remaining
        return True

    def place_structure(self, pos: Position, kind: StructureKind) -> bool:
        tile = self.tile_at(pos)
        if tile is None or tile.structure is not None or not tile.walkable:
            return False
        tile.structure = kind
        return True

    def set_active(self, active: bool) -> None:
        self._agent.active = active

    def reset(self) -> None:
        self._grid, self._agent = self._create()

    def snapshot(self) -> WorldSnapshot:
        rows = [
            [
                TileSnapshot(
                    terrain=tile.terrain,
                    resource=tile.resource,
                    resource_amount=tile.resource_amount,
                    structure=tile.structure,
                )
                for tile in row
            ]
            for row in self._grid
        ]
        agent = AgentSnapshot(
            position=self._agent.position,
            inventory=dict(self._agent.inventory),
            active=self._agent.active,
        )
        return WorldSnapshot(size=self._size, rows=rows, agent=agent)

    def _create(self) -> tuple[list[list[Tile]], AgentState]:
        if not self.is_valid_position(self._start):
            raise ValueError(f"start position {self._start} is outside the grid")
        grid = [
            [
                Tile.from_seed(self._tile_source(x, y, self._size))
                for x in range(self._size)
            ]
            for y in range(self._size)
        ]
        if not grid[self._start.y][self._start.x].walkable:
            raise ValueError(f"start position {self._start} is not walkable")
        return grid, AgentState(position=self._start)

    def _generated_tile(self, x: int, y: int, size: int) -> TileSeed:
        return generate_tile(x, y, size, seed=self._seed)
