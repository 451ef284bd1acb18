"""Action catalog: schema-described operations applied to the world."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from hearthgrid.sim.contracts import (
    ActionResult,
    ActionSpec,
    ArgumentSpec,
    Direction,
    ItemKind,
    Position,
    ResourceKind,
    StructureKind,
    TileInfo,
)
from hearthgrid.sim.world_state import World

logger = logging.getLogger(__name__)

VIEW_RADIUS = 2
GATHER_LIMIT = 5

RECIPES: dict[ItemKind, dict[ResourceKind, int]] = {
    ItemKind.AXE: {ResourceKind.WOOD: 3, ResourceKind.STONE: 2},
    ItemKind.PICKAXE: {ResourceKind.WOOD: 2, ResourceKind.STONE: 3},
    ItemKind.CAMPFIRE: {ResourceKind.WOOD: 5, ResourceKind.STONE: 3},
}

BUILD_REQUIREMENTS: dict[StructureKind, dict[ResourceKind, int]] = {
    StructureKind.SHELTER: {ResourceKind.WOOD: 10, ResourceKind.STONE: 5},
    StructureKind.CAMPFIRE: {ResourceKind.WOOD: 3, ResourceKind.STONE: 2},
}

_STEPS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}


def _format_requirements(requirements: Mapping[ResourceKind, int]) -> str:
    return ", ".join(f"{amount} {kind.value}" for kind, amount in requirements.items())


def _format_table(table: Mapping[Any, Mapping[ResourceKind, int]]) -> str:
    return ", ".join(
        f"{kind.value} ({_format_requirements(requirements)})"
        for kind, requirements in table.items()
    )


ACTION_SPECS: list[ActionSpec] = [
    ActionSpec(
        name="move",
        description=(
            "Move the agent one tile in a direction (north, south, east, west). "
            "Cannot move through water or beyond the world boundary."
        ),
        arguments=[
            ArgumentSpec(
                name="direction",
                description="The direction to move",
                allowed=[direction.value for direction in Direction],
            )
        ],
    ),
    ActionSpec(
        name="look",
        description=(
            f"Observe the surrounding area within a {VIEW_RADIUS}-tile radius. "
            "Returns terrain, resources and structures with absolute and "
            "relative positions."
        ),
    ),
    ActionSpec(
        name="gather",
        description=(
            "Gather a resource from the current tile. Resources: wood (forest), "
            "stone (mountain), sand (desert), food (grass). Gathers up to "
            f"{GATHER_LIMIT} units at a time."
        ),
        arguments=[
            ArgumentSpec(
                name="resource",
                description="The resource to gather",
                allowed=[kind.value for kind in ResourceKind],
            )
        ],
    ),
    ActionSpec(
        name="craft",
        description=(
            "Craft an item from resources in the inventory. Recipes: "
            f"{_format_table(RECIPES)}."
        ),
        arguments=[
            ArgumentSpec(
                name="item",
                description="The item to craft",
                allowed=[kind.value for kind in RECIPES],
            )
        ],
    ),
    ActionSpec(
        name="build",
        description=(
            "Build a structure on the current tile. Requirements: "
            f"{_format_table(BUILD_REQUIREMENTS)}. Cannot build on water or "
            "on a tile that already holds a structure."
        ),
        arguments=[
            ArgumentSpec(
                name="structure",
                description="The structure to build",
                allowed=[kind.value for kind in BUILD_REQUIREMENTS],
            )
        ],
    ),
    ActionSpec(
        name="inspect_inventory",
        description="Check which items and resources the agent is carrying.",
    ),
]


@dataclass(frozen=True)
class Shortfall:
    item: str
    required: int
    available: int


@dataclass(frozen=True)
class Transaction:
    committed: bool
    shortfall: Shortfall | None = None


class ActionCatalog:
    """Validated, all-or-nothing operations against a single world."""

    def __init__(self, world: World) -> None:
        self._world = world
        self._handlers: dict[str, Callable[[Mapping[str, Any]], ActionResult]] = {
            "move": lambda args: self.move(_arg(args, "direction")),
            "look": lambda args: self.look(),
            "gather": lambda args: self.gather(_arg(args, "resource")),
            "craft": lambda args: self.craft(_arg(args, "item")),
            "build": lambda args: self.build(_arg(args, "structure")),
            "inspect_inventory": lambda args: self.inspect_inventory(),
        }

    @property
    def specs(self) -> list[ActionSpec]:
        return list(ACTION_SPECS)

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    def dispatch(
        self, name: str, args: Mapping[str, Any] | None = None
    ) -> ActionResult:
        handler = self._handlers.get(name)
        if handler is None:
            return ActionResult(
                success=False,
                message=(
                    f"Unknown action: {name}. "
                    f"Available actions: {', '.join(self._handlers)}"
                ),
            )
        try:
            return handler(args or {})
        except Exception as exc:  # noqa: BLE001
            logger.exception("Action %s failed unexpectedly", name)
            return ActionResult(success=False, message=f"{name} failed: {exc}")

    def move(self, direction: str) -> ActionResult:
        try:
            parsed = Direction(direction)
        except ValueError:
            valid = ", ".join(item.value for item in Direction)
            return ActionResult(
                success=False,
                message=f"Invalid direction: {direction}. Must be one of: {valid}",
            )
        dx, dy = _STEPS[parsed]
        target = self._world.agent.position.offset(dx, dy)
        if not self._world.move_agent_to(target):
            return ActionResult(
                success=False,
                message=(
                    f"Cannot move {parsed.value}: blocked by water or the "
                    "world boundary"
                ),
            )
        return ActionResult(
            success=True,
            message=f"Moved {parsed.value} to position ({target.x}, {target.y})",
            data={"position": target.model_dump()},
        )

    def look(self) -> ActionResult:
        pos = self._world.agent.position
        visible: list[dict[str, Any]] = []
        for dy in range(-VIEW_RADIUS, VIEW_RADIUS + 1):
            for dx in range(-VIEW_RADIUS, VIEW_RADIUS + 1):
                check = pos.offset(dx, dy)
                tile = self._world.tile_at(check)
                if tile is None:
                    continue
                info = TileInfo(
                    position=check,
                    relative_position=Position(x=dx, y=dy),
                    terrain=tile.terrain,
                    resource=tile.resource,
                    resource_amount=tile.resource_amount,
                    structure=tile.structure,
                )
                visible.append(info.model_dump(mode="json", exclude_none=True))
        return ActionResult(
            success=True,
            message=f"Looking around position ({pos.x}, {pos.y})",
            data={"tiles": visible, "current_position": pos.model_dump()},
        )

    def gather(self, resource: str) -> ActionResult:
        pos = self._world.agent.position
        tile = self._world.tile_at(pos)
        if (
            tile is None
            or tile.resource is None
            or tile.resource.value != resource
            or not tile.resource_amount
        ):
            return ActionResult(
                success=False,
                message=f"No {resource} available at current position",
            )
        amount = min(GATHER_LIMIT, tile.resource_amount)
        if not self._world.deplete_resource(pos, amount):
            return ActionResult(
                success=False,
                message=f"Could not gather {amount} {resource} here",
            )
        self._world.credit_inventory(resource, amount)
        return ActionResult(
            success=True,
            message=f"Gathered {amount} {resource}",
            data={"resource": resource, "amount": amount},
        )

    def craft(self, item: str) -> ActionResult:
        recipe = _lookup(RECIPES, item)
        if recipe is None:
            return ActionResult(
                success=False,
                message=(
                    f"Unknown item: {item}. Available items: "
                    f"{', '.join(kind.value for kind in RECIPES)}"
                ),
            )
        outcome = self._transact(recipe)
        if outcome.shortfall is not None:
            short = outcome.shortfall
            return ActionResult(
                success=False,
                message=(
                    f"Need {short.required} {short.item} to craft {item}, "
                    f"but only have {short.available}"
                ),
            )
        self._world.credit_inventory(item, 1)
        return ActionResult(
            success=True, message=f"Crafted {item}", data={"item": item}
        )

    def build(self, structure: str) -> ActionResult:
        requirements = _lookup(BUILD_REQUIREMENTS, structure)
        if requirements is None:
            return ActionResult(
                success=False,
                message=(
                    f"Unknown structure: {structure}. Available: "
                    f"{', '.join(kind.value for kind in BUILD_REQUIREMENTS)}"
                ),
            )
        pos = self._world.agent.position
        kind = StructureKind(structure)
        outcome = self._transact(
            requirements, effect=lambda: self._world.place_structure(pos, kind)
        )
        if outcome.shortfall is not None:
            short = outcome.shortfall
            return ActionResult(
                success=False,
                message=(
                    f"Need {short.required} {short.item} to build {structure}, "
                    f"but only have {short.available}"
                ),
            )
        if not outcome.committed:
            return ActionResult(
                success=False,
                message="Cannot build here: location occupied or invalid",
            )
        return ActionResult(
            success=True,
            message=f"Built {structure} at position ({pos.x}, {pos.y})",
            data={"structure": structure, "position": pos.model_dump()},
        )

    def inspect_inventory(self) -> ActionResult:
        items = [
            {"item": item, "amount": amount}
            for item, amount in sorted(self._world.agent.inventory.items())
        ]
        message = (
            f"Inventory contains {len(items)} item types"
            if items
            else "Inventory is empty"
        )
        return ActionResult(success=True, message=message, data={"inventory": items})

    def _transact(
        self,
        requirements: Mapping[ResourceKind, int],
        *,
        effect: Callable[[], bool] | None = None,
    ) -> Transaction:
        """Check every requirement, run the effect, then debit everything."""
        for kind, amount in requirements.items():
            available = self._world.count(kind.value)
            if available < amount:
                return Transaction(
                    committed=False,
                    shortfall=Shortfall(
                        item=kind.value, required=amount, available=available
                    ),
                )
        if effect is not None and not effect():
            return Transaction(committed=False)
        for kind, amount in requirements.items():
            self._world.debit_inventory(kind.value, amount)
        return Transaction(committed=True)


def _lookup(table: Mapping[Any, dict[ResourceKind, int]], name: str):
    for kind, requirements in table.items():
        if kind.value == name:
            return requirements
    return None


def _arg(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    if value is None:
        return ""
    return str(value)
