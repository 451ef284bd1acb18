from hearthgrid.sim.actions import ACTION_SPECS, ActionCatalog
from hearthgrid.sim.contracts import (
    Position,
    ResourceKind,
    StructureKind,
    TerrainKind,
)
from hearthgrid.sim.world_gen import TileSeed
from hearthgrid.sim.world_state import World


def test_catalog_exposes_six_actions() -> None:
    catalog = ActionCatalog(_build_world())
    assert catalog.names == [
        "move",
        "look",
        "gather",
        "craft",
        "build",
        "inspect_inventory",
    ]
    assert [spec.name for spec in catalog.specs] == catalog.names
    move = ACTION_SPECS[0].to_json_schema()
    assert move["required"] == ["direction"]
    assert move["properties"]["direction"]["enum"] == [
        "north",
        "south",
        "east",
        "west",
    ]
    assert "required" not in ACTION_SPECS[1].to_json_schema()


def test_gather_caps_at_five_and_depletes_tile() -> None:
    world = _build_world({(2, 2): _seed(TerrainKind.WOODED, ResourceKind.WOOD, 8)})
    catalog = ActionCatalog(world)

    result = catalog.gather("wood")

    assert result.success is True
    assert result.message == "Gathered 5 wood"
    assert result.data == {"resource": "wood", "amount": 5}
    assert world.agent.inventory == {"wood": 5}
    tile = world.tile_at(Position(x=2, y=2))
    assert tile is not None
    assert tile.resource_amount == 3

    second = catalog.gather("wood")
    assert second.message == "Gathered 3 wood"
    assert world.agent.inventory == {"wood": 8}
    assert tile.resource is None
    assert tile.resource_amount is None


def test_failed_gather_leaves_world_unchanged() -> None:
    world = _build_world({(2, 2): _seed(TerrainKind.WOODED, ResourceKind.WOOD, 8)})
    catalog = ActionCatalog(world)
    before = world.snapshot()

    result = catalog.gather("stone")

    assert result.success is False
    assert result.message == "No stone available at current position"
    assert world.snapshot() == before


def test_craft_shortfall_reports_first_missing_resource() -> None:
    world = _build_world()
    world.credit_inventory("wood", 2)
    world.credit_inventory("stone", 2)
    catalog = ActionCatalog(world)

    result = catalog.craft("axe")

    assert result.success is False
    assert result.message == "Need 3 wood to craft axe, but only have 2"
    assert world.agent.inventory == {"wood": 2, "stone": 2}


def test_craft_consumes_recipe_and_credits_item() -> None:
    world = _build_world()
    world.credit_inventory("wood", 4)
    world.credit_inventory("stone", 3)
    catalog = ActionCatalog(world)

    result = catalog.craft("pickaxe")

    assert result.success is True
    assert result.message == "Crafted pickaxe"
    assert world.agent.inventory == {"wood": 2, "pickaxe": 1}


def test_craft_unknown_item() -> None:
    catalog = ActionCatalog(_build_world())
    result = catalog.craft("sword")
    assert result.success is False
    assert result.message == (
        "Unknown item: sword. Available items: axe, pickaxe, campfire"
    )


def test_build_places_structure_and_debits() -> None:
    world = _build_world()
    world.credit_inventory("wood", 3)
    world.credit_inventory("stone", 2)
    catalog = ActionCatalog(world)

    result = catalog.build("campfire")

    assert result.success is True
    assert result.message == "Built campfire at position (2, 2)"
    assert world.agent.inventory == {}
    tile = world.tile_at(Position(x=2, y=2))
    assert tile is not None
    assert tile.structure == StructureKind.CAMPFIRE


def test_build_on_occupied_tile_keeps_resources() -> None:
    world = _build_world()
    world.place_structure(Position(x=2, y=2), StructureKind.SHELTER)
    world.credit_inventory("wood", 5)
    world.credit_inventory("stone", 5)
    catalog = ActionCatalog(world)

    result = catalog.build("campfire")

    assert result.success is False
    assert result.message == "Cannot build here: location occupied or invalid"
    assert world.agent.inventory == {"wood": 5, "stone": 5}
    assert _structure_at(world, 2, 2) == StructureKind.SHELTER


def test_build_shortfall_and_unknown_structure() -> None:
    world = _build_world()
    world.credit_inventory("wood", 10)
    catalog = ActionCatalog(world)

    short = catalog.build("shelter")
    assert short.success is False
    assert short.message == "Need 5 stone to build shelter, but only have 0"
    assert world.agent.inventory == {"wood": 10}
    assert _structure_at(world, 2, 2) is None

    unknown = catalog.build("tower")
    assert unknown.success is False
    assert unknown.message == "Unknown structure: tower. Available: shelter, campfire"
    assert world.agent.inventory == {"wood": 10}
    assert _structure_at(world, 2, 2) is None


def test_move_into_water_is_blocked() -> None:
    world = _build_world({(2, 1): _seed(TerrainKind.LIQUID)})
    catalog = ActionCatalog(world)

    blocked = catalog.move("north")
    assert blocked.success is False
    assert blocked.message == (
        "Cannot move north: blocked by water or the world boundary"
    )
    assert world.agent.position == Position(x=2, y=2)

    moved = catalog.move("east")
    assert moved.success is True
    assert moved.message == "Moved east to position (3, 2)"
    assert moved.data == {"position": {"x": 3, "y": 2}}


def test_move_off_the_edge_is_blocked() -> None:
    world = World(3, start=Position(x=0, y=0), tile_source=_source({}))
    catalog = ActionCatalog(world)
    assert catalog.move("west").success is False
    assert catalog.move("north").success is False
    assert world.agent.position == Position(x=0, y=0)


def test_move_invalid_direction() -> None:
    catalog = ActionCatalog(_build_world())
    result = catalog.move("up")
    assert result.success is False
    assert result.message == (
        "Invalid direction: up. Must be one of: north, south, east, west"
    )


def test_look_clips_to_grid_near_edge() -> None:
    world = World(
        5,
        start=Position(x=0, y=0),
        tile_source=_source({(1, 1): _seed(TerrainKind.ROCKY, ResourceKind.STONE, 6)}),
    )
    catalog = ActionCatalog(world)

    result = catalog.look()

    assert result.success is True
    assert result.data is not None
    tiles = result.data["tiles"]
    assert len(tiles) == 9
    assert result.data["current_position"] == {"x": 0, "y": 0}
    rocky = [tile for tile in tiles if tile["terrain"] == "mountain"]
    assert rocky == [
        {
            "position": {"x": 1, "y": 1},
            "relative_position": {"x": 1, "y": 1},
            "terrain": "mountain",
            "resource": "stone",
            "resource_amount": 6,
        }
    ]


def test_look_sees_full_window_in_the_middle() -> None:
    world = World(7, tile_source=_source({}))
    result = ActionCatalog(world).look()
    assert result.data is not None
    assert len(result.data["tiles"]) == 25


def test_inspect_inventory_lists_sorted_items() -> None:
    world = _build_world()
    catalog = ActionCatalog(world)
    empty = catalog.inspect_inventory()
    assert empty.message == "Inventory is empty"
    assert empty.data == {"inventory": []}

    world.credit_inventory("wood", 3)
    world.credit_inventory("food", 1)
    result = catalog.inspect_inventory()
    assert result.message == "Inventory contains 2 item types"
    assert result.data == {
        "inventory": [
            {"item": "food", "amount": 1},
            {"item": "wood", "amount": 3},
        ]
    }


def test_dispatch_routes_and_rejects_unknown() -> None:
    world = _build_world({(2, 2): _seed(TerrainKind.OPEN, ResourceKind.FOOD, 2)})
    catalog = ActionCatalog(world)

    gathered = catalog.dispatch("gather", {"resource": "food"})
    assert gathered.success is True
    assert world.agent.inventory == {"food": 2}

    unknown = catalog.dispatch("fly", {})
    assert unknown.success is False
    assert unknown.message.startswith("Unknown action: fly. Available actions: move")

    missing = catalog.dispatch("move", None)
    assert missing.success is False
    assert missing.message.startswith("Invalid direction: .")


def _structure_at(world: World, x: int, y: int) -> StructureKind | None:
    tile = world.tile_at(Position(x=x, y=y))
    assert tile is not None
    return tile.structure


def _seed(
    terrain: TerrainKind,
    resource: ResourceKind | None = None,
    amount: int | None = None,
) -> TileSeed:
    return TileSeed(terrain=terrain, resource=resource, resource_amount=amount)


def _source(overrides: dict[tuple[int, int], TileSeed]):
    def tile_source(x: int, y: int, size: int) -> TileSeed:
        return overrides.get((x, y), TileSeed(terrain=TerrainKind.OPEN))

    return tile_source


def _build_world(overrides: dict[tuple[int, int], TileSeed] | None = None) -> World:
    return World(5, tile_source=_source(overrides or {}))
