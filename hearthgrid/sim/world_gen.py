"""Deterministic per-coordinate tile generation."""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass

from hearthgrid.sim.contracts import ResourceKind, TerrainKind


@dataclass(frozen=True)
class TileSeed:
    terrain: TerrainKind
    resource: ResourceKind | None = None
    resource_amount: int | None = None


@dataclass(frozen=True)
class GenerationPolicy:
    """Terrain thresholds; tunable, but fixed for the lifetime of a world."""

    border_width: int = 2
    border_liquid_below: float = 0.3
    wooded_below: float = 0.2
    rocky_below: float = 0.35
    arid_below: float = 0.45
    food_above: float = 0.8


DEFAULT_POLICY = GenerationPolicy()


def coordinate_noise(x: int, y: int, *, seed: int = 0) -> float:
    """Return a reproducible value in [0, 1) for the coordinate pair."""
    digest = hashlib.sha256(f"{seed}:{x}:{y}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") / 2**64


def generate_tile(
    x: int,
    y: int,
    size: int,
    *,
    seed: int = 0,
    policy: GenerationPolicy = DEFAULT_POLICY,
) -> TileSeed:
    value = coordinate_noise(x, y, seed=seed)

    if _in_border(x, y, size, policy.border_width):
        if value < policy.border_liquid_below:
            return TileSeed(terrain=TerrainKind.LIQUID)
        return TileSeed(terrain=TerrainKind.OPEN)

    if value < policy.wooded_below:
        return TileSeed(
            terrain=TerrainKind.WOODED,
            resource=ResourceKind.WOOD,
            resource_amount=math.floor(value * 20) + 5,
        )
    if value < policy.rocky_below:
        return TileSeed(
            terrain=TerrainKind.ROCKY,
            resource=ResourceKind.STONE,
            resource_amount=math.floor(value * 15) + 3,
        )
    if value < policy.arid_below:
        return TileSeed(
            terrain=TerrainKind.ARID,
            resource=ResourceKind.SAND,
            resource_amount=math.floor(value * 10) + 2,
        )
    if value > policy.food_above:
        return TileSeed(
            terrain=TerrainKind.OPEN,
            resource=ResourceKind.FOOD,
            resource_amount=math.floor(value * 5) + 1,
        )
    return TileSeed(terrain=TerrainKind.OPEN)


def _in_border(x: int, y: int, size: int, width: int) -> bool:
    return x < width or y < width or x >= size - width or y >= size - width
