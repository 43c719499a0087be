"""
Neighborhood synthesis.

Every claimed master-grid cell owns a private sub-grid of buildings. Once
the district layout is final, each sub-grid is filled in three steps:

1. Full-length horizontal and vertical roads are laid across it
2. A palette of distinct colors is drawn, sized inversely to the road count
3. Every non-road cell is given a building type and a palette color

Cells are independent of each other, so synthesis runs one sub-grid at a
time in row-major order over the master grid.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, List, NamedTuple, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field, model_validator

from .alea_prng import AleaPRNG

if TYPE_CHECKING:
    from .expansion import DistrictCell, DistrictGrid

logger = structlog.get_logger()

RGB = Tuple[int, int, int]

# Keeps the per-channel step (255 // levels) at 1 or more
MAX_PALETTE_SIZE = 127


class BuildingType(IntEnum):
    """What occupies one cell of a neighborhood."""

    UNCLASSIFIED = 0
    ROAD = 1
    RESIDENCE = 2
    SHOP = 3


BUILDING_NAMES = {
    BuildingType.UNCLASSIFIED: "Empty",
    BuildingType.ROAD: "Road",
    BuildingType.RESIDENCE: "Residence",
    BuildingType.SHOP: "Shop",
}


class Building(NamedTuple):
    """Read-only view of one sub-grid cell."""

    type: BuildingType
    color: RGB

    def __str__(self) -> str:
        return BUILDING_NAMES[self.type]


def _default_type_buckets() -> List[BuildingType]:
    # 1/10 road, 5/10 residence, 3/10 shop, 1/10 empty
    return (
        [BuildingType.ROAD]
        + [BuildingType.RESIDENCE] * 5
        + [BuildingType.SHOP] * 3
        + [BuildingType.UNCLASSIFIED]
    )


class NeighborhoodOptions(BaseModel):
    """Ratios and colors used when synthesizing a neighborhood."""

    min_road_ratio: float = Field(
        default=0.15, ge=0, description="Lower bound of roads per (rows + cols)"
    )
    max_road_ratio: float = Field(
        default=0.4, ge=0, description="Exclusive upper bound of roads per (rows + cols)"
    )
    max_horizontal_ratio: float = Field(
        default=0.7, ge=0, le=1, description="Largest share of roads that run horizontally"
    )
    road_color: RGB = Field(default=(55, 55, 55), description="Color of laid roads")
    min_palette_size: int = Field(default=3, ge=1, description="Smallest palette")
    min_channel_levels: int = Field(
        default=42,
        ge=3,
        le=255,
        description="Minimum distinct levels per color channel",
    )
    type_buckets: List[BuildingType] = Field(
        default_factory=_default_type_buckets,
        min_length=1,
        description="Uniformly drawn bucket -> building type",
    )

    @model_validator(mode="after")
    def check_road_range(self) -> "NeighborhoodOptions":
        if self.max_road_ratio < self.min_road_ratio:
            raise ValueError("max_road_ratio must not be below min_road_ratio")
        return self


@dataclass
class Neighborhood:
    """Sub-grid of buildings stored as parallel numpy arrays."""

    building_types: np.ndarray  # (rows, cols) int8 of BuildingType
    colors: np.ndarray  # (rows, cols, 3) uint8

    @classmethod
    def empty(cls, rows: int, cols: int) -> Neighborhood:
        """All cells unclassified and black."""
        return cls(
            building_types=np.full(
                (rows, cols), BuildingType.UNCLASSIFIED, dtype=np.int8
            ),
            colors=np.zeros((rows, cols, 3), dtype=np.uint8),
        )

    @property
    def rows(self) -> int:
        return self.building_types.shape[0]

    @property
    def cols(self) -> int:
        return self.building_types.shape[1]

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"Building ({row}, {col}) outside {self.rows}x{self.cols} neighborhood"
            )

    def building(self, row: int, col: int) -> Building:
        self._check(row, col)
        r, g, b = (int(v) for v in self.colors[row, col])
        return Building(BuildingType(int(self.building_types[row, col])), (r, g, b))

    def set_building(self, row: int, col: int, build_type: BuildingType, color: RGB) -> None:
        self._check(row, col)
        self.building_types[row, col] = build_type
        self.colors[row, col] = color

    def is_road(self, row: int, col: int) -> bool:
        self._check(row, col)
        return self.building_types[row, col] == BuildingType.ROAD

    def type_counts(self) -> Dict[BuildingType, int]:
        """Number of cells per building type."""
        values, counts = np.unique(self.building_types, return_counts=True)
        totals = {build_type: 0 for build_type in BuildingType}
        for value, count in zip(values, counts):
            totals[BuildingType(int(value))] = int(count)
        return totals

    def to_dict(self) -> dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "building_types": self.building_types.tolist(),
            "colors": self.colors.tolist(),
        }


def _road_count_bounds(span: int, options: NeighborhoodOptions) -> Tuple[int, int]:
    return (
        math.ceil(span * options.min_road_ratio),
        math.ceil(span * options.max_road_ratio),
    )


class NeighborhoodGenerator:
    """Lays roads and classifies buildings inside one sub-grid at a time."""

    def __init__(self, prng: AleaPRNG, options: Optional[NeighborhoodOptions] = None):
        self.prng = prng
        self.options = options or NeighborhoodOptions()

    def _pick_indices(self, wanted: int, limit: int) -> List[int]:
        """Draw ``wanted`` distinct indices from ``range(limit)``."""
        picked: List[int] = []
        while len(picked) < wanted:
            index = self.prng.randrange(0, limit)
            if index not in picked:
                picked.append(index)
        return picked

    def add_roads(self, nhood: Neighborhood) -> int:
        """
        Lay full-length roads across the neighborhood.

        The road total is drawn from ``[ceil(0.15 * span), ceil(0.4 * span))``
        where span is rows + cols; an empty range lays no roads. Up to 70%
        of the total runs horizontally.

        Returns:
            Recommended palette size: fewer roads leave room for more colors
        """
        rows, cols = nhood.rows, nhood.cols
        low, high = _road_count_bounds(rows + cols, self.options)
        total = self.prng.randrange(low, high) if high > low else 0

        h_low = min(1, total // 2)
        h_high = min(total, math.ceil(total * self.options.max_horizontal_ratio))
        horizontal = self.prng.randrange(h_low, h_high) if h_high > h_low else h_low
        vertical = total - horizontal

        num_colors = max(self.options.min_palette_size, high - total)

        road_rows = self._pick_indices(min(horizontal, rows), rows)
        road_cols = self._pick_indices(min(vertical, cols), cols)

        road = self.options.road_color
        for row in road_rows:
            nhood.building_types[row, :] = BuildingType.ROAD
            nhood.colors[row, :] = road
        for col in road_cols:
            nhood.building_types[:, col] = BuildingType.ROAD
            nhood.colors[:, col] = road

        logger.debug(
            "Roads laid",
            total=total,
            horizontal=len(road_rows),
            vertical=len(road_cols),
        )
        return min(num_colors, MAX_PALETTE_SIZE)

    def generate_palette(self, num_colors: int) -> List[RGB]:
        """
        Draw ``num_colors`` distinct colors from a quantized RGB cube.

        Each channel is one of ``levels`` evenly spaced values where
        ``levels = max(42, 2 * num_colors)``; the darkest and brightest
        levels are never used.
        """
        if num_colors < 1 or num_colors > MAX_PALETTE_SIZE:
            raise ValueError(
                f"Palette size must be within 1..{MAX_PALETTE_SIZE}, got {num_colors}"
            )
        levels = max(self.options.min_channel_levels, num_colors * 2)
        step = 255 // levels

        palette: List[RGB] = []
        while len(palette) < num_colors:
            rgb = (
                self.prng.randrange(1, levels - 1) * step,
                self.prng.randrange(1, levels - 1) * step,
                self.prng.randrange(1, levels - 1) * step,
            )
            if rgb not in palette:
                palette.append(rgb)
        return palette

    def pick_building(self, palette: List[RGB]) -> Tuple[BuildingType, RGB]:
        """Random building type and palette color for one cell."""
        buckets = self.options.type_buckets
        build_type = buckets[self.prng.randrange(0, len(buckets))]
        color = palette[self.prng.randrange(0, len(palette))]
        return build_type, color

    def classify_buildings(self, nhood: Neighborhood, palette: List[RGB]) -> None:
        """Assign a type and color to every cell that is not already a road."""
        for row in range(nhood.rows):
            for col in range(nhood.cols):
                if nhood.is_road(row, col):
                    continue
                build_type, color = self.pick_building(palette)
                nhood.set_building(row, col, build_type, color)

    def populate(self, nhood: Neighborhood) -> List[RGB]:
        """Fill a neighborhood in place and return the palette used."""
        num_colors = self.add_roads(nhood)
        palette = self.generate_palette(num_colors)
        self.classify_buildings(nhood, palette)
        return palette


def synthesize_neighborhood(
    cell: DistrictCell, prng: AleaPRNG, options: Optional[NeighborhoodOptions] = None
) -> List[RGB]:
    """Fill one claimed cell's sub-grid in place."""
    return NeighborhoodGenerator(prng, options).populate(cell.neighborhood)


def generate_neighborhoods(
    grid: DistrictGrid, prng: AleaPRNG, options: Optional[NeighborhoodOptions] = None
) -> int:
    """
    Synthesize the neighborhood of every claimed cell, row-major.

    Returns:
        Number of neighborhoods generated
    """
    logger.info("Starting neighborhood generation", rows=grid.rows, cols=grid.cols)
    generator = NeighborhoodGenerator(prng, options)

    generated = 0
    for cell in grid.iter_cells():
        if not cell.claimed:
            continue
        generator.populate(cell.neighborhood)
        generated += 1

    logger.info("Finished neighborhood generation", neighborhoods=generated)
    return generated
