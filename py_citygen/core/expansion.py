"""
District expansion over the master grid.

Generation runs in two phases:

1. Priming: every district claims one random free cell as its seed
2. Growth: in rounds, every district claims one open neighbor chosen by
   ``pick_weighted``; a district with no open neighbor is enclosed for that
   round. Growth stops once every district is enclosed in the same round.

Cells store the owning district's id (0 while unclaimed) and resolve the
district itself against the registry when read, so recoloring or renaming a
district between runs is reflected everywhere.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, Field

from .adjacency import adjacent_coords
from .alea_prng import AleaPRNG
from .districts import Coord, District, DistrictRegistry
from .neighborhoods import Neighborhood
from .selection import pick_weighted

logger = structlog.get_logger()

UNCLAIMED = 0


class GridConfigurationError(ValueError):
    """Generation requested with dimensions that cannot hold every district."""


class GenerationOptions(BaseModel):
    """Master grid and neighborhood dimensions for one generation run."""

    district_rows: int = Field(default=10, ge=1, description="Master grid rows")
    district_cols: int = Field(default=10, ge=1, description="Master grid columns")
    neighborhood_rows: int = Field(default=10, ge=1, description="Sub-grid rows")
    neighborhood_cols: int = Field(default=10, ge=1, description="Sub-grid columns")
    allow_diagonal: bool = Field(
        default=False, description="Let districts grow into diagonal neighbors"
    )
    max_prime_attempts: int = Field(
        default=1000,
        ge=1,
        description="Random draws per seed before picking among the free cells",
    )


def validate_capacity(district_count: int, rows: int, cols: int) -> None:
    """
    Reject a run that could never seed every district.

    Raises:
        GridConfigurationError: no districts, or more districts than cells
    """
    if district_count < 1:
        raise GridConfigurationError("At least one district is required")
    if district_count > rows * cols:
        raise GridConfigurationError(
            f"{district_count} districts do not fit in a {rows}x{cols} grid "
            f"({rows * cols} cells)"
        )


@dataclass
class DistrictCell:
    """One master-grid cell: its owner, address and neighborhood."""

    registry: DistrictRegistry = field(repr=False)
    district_id: int = UNCLAIMED
    coord: Optional[Coord] = None
    neighborhood: Neighborhood = field(default_factory=lambda: Neighborhood.empty(0, 0))

    @property
    def claimed(self) -> bool:
        return self.district_id != UNCLAIMED

    @property
    def owner(self) -> Optional[District]:
        """Owning district, resolved against the registry at read time."""
        if not self.claimed:
            return None
        return self.registry.get(self.district_id)


class DistrictGrid:
    """Fixed-size master grid of district cells."""

    def __init__(self, registry: DistrictRegistry, rows: int, cols: int):
        if rows < 1 or cols < 1:
            raise GridConfigurationError(f"Invalid grid dimensions {rows}x{cols}")
        self.registry = registry
        self.rows = rows
        self.cols = cols
        self.cell_districts = np.full((rows, cols), UNCLAIMED, dtype=np.int32)
        self._cells: List[List[DistrictCell]] = [
            [DistrictCell(registry) for _ in range(cols)] for _ in range(rows)
        ]

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"Cell ({row}, {col}) outside {self.rows}x{self.cols} district grid"
            )

    def cell(self, row: int, col: int) -> DistrictCell:
        self._check(row, col)
        return self._cells[row][col]

    def __getitem__(self, coord: Coord) -> DistrictCell:
        return self.cell(coord.row, coord.col)

    def iter_cells(self) -> Iterator[DistrictCell]:
        """All cells, row-major."""
        for row in self._cells:
            yield from row

    def is_claimed(self, coord: Coord) -> bool:
        self._check(coord.row, coord.col)
        return self.cell_districts[coord.row, coord.col] != UNCLAIMED

    def claim(
        self, coord: Coord, district: District, inner_rows: int, inner_cols: int
    ) -> DistrictCell:
        """
        Give an unclaimed cell to ``district`` with a fresh neighborhood.

        Raises:
            ValueError: if the cell already has an owner
        """
        if self.is_claimed(coord):
            raise ValueError(f"Cell {coord} is already claimed")
        cell = self._cells[coord.row][coord.col]
        cell.district_id = district.id
        cell.coord = coord
        cell.neighborhood = Neighborhood.empty(inner_rows, inner_cols)
        self.cell_districts[coord.row, coord.col] = district.id
        district.locations.append(coord)
        return cell

    def free_coords(self) -> List[Coord]:
        rows, cols = np.nonzero(self.cell_districts == UNCLAIMED)
        return [Coord(int(r), int(c)) for r, c in zip(rows, cols)]

    def claimed_count(self) -> int:
        return int(np.count_nonzero(self.cell_districts))

    def district_cell_counts(self) -> Dict[int, int]:
        """Number of claimed cells per district id."""
        ids, counts = np.unique(self.cell_districts, return_counts=True)
        return {
            int(district_id): int(count)
            for district_id, count in zip(ids, counts)
            if district_id != UNCLAIMED
        }


class DistrictGenerator:
    """Primes and grows districts until every one is enclosed."""

    def __init__(
        self,
        registry: DistrictRegistry,
        options: Optional[GenerationOptions] = None,
        prng: Optional[AleaPRNG] = None,
    ):
        """
        Initialize district generator.

        Args:
            registry: Districts to place; their locations are rewritten
            options: Grid dimensions and growth settings
            prng: Random number generator for reproducible results
        """
        self.registry = registry
        self.options = options or GenerationOptions()
        self.prng = prng or AleaPRNG("districts")
        self.rounds = 0
        self.grid: Optional[DistrictGrid] = None

    def generate(self) -> DistrictGrid:
        """
        Run priming then growth to completion.

        Returns:
            The finished grid; every reachable cell is claimed
        """
        opts = self.options
        validate_capacity(len(self.registry), opts.district_rows, opts.district_cols)

        start = time.perf_counter()
        with self.registry.generation_in_progress():
            self.grid = DistrictGrid(self.registry, opts.district_rows, opts.district_cols)
            self.rounds = 0
            self.registry.clear_locations()
            logger.info(
                "Starting grid priming",
                districts=len(self.registry),
                rows=opts.district_rows,
                cols=opts.district_cols,
            )
            self._prime_grid()
            logger.info("Grid is primed")

            logger.info("Starting district growth")
            while True:
                enclosed = self._advance_expansion()
                self.rounds += 1
                logger.debug("Expansion round", round=self.rounds, enclosed=enclosed)
                if enclosed == len(self.registry):
                    break

        logger.info(
            "Finished generating districts",
            rounds=self.rounds,
            claimed=self.grid.claimed_count(),
            seconds=round(time.perf_counter() - start, 3),
        )
        return self.grid

    def _prime_grid(self) -> None:
        """Claim one free cell per district as its seed."""
        opts = self.options
        for district in self.registry:
            coord = self._random_free_coord()
            self.grid.claim(
                coord, district, opts.neighborhood_rows, opts.neighborhood_cols
            )
            logger.debug("Seeded district", district=district.name, seed=str(coord))

    def _random_free_coord(self) -> Coord:
        """Uniform random unclaimed cell, by rejection sampling with a bound."""
        grid = self.grid
        for _ in range(self.options.max_prime_attempts):
            coord = Coord(
                self.prng.randrange(0, grid.rows), self.prng.randrange(0, grid.cols)
            )
            if not grid.is_claimed(coord):
                return coord

        free = grid.free_coords()
        logger.warning(
            "Seed placement fell back to free-cell pick",
            attempts=self.options.max_prime_attempts,
            free_cells=len(free),
        )
        return self.prng.choice(free)

    def _advance_expansion(self) -> int:
        """
        Grow every district by at most one cell.

        Returns:
            Number of districts with no open neighbor this round
        """
        grid = self.grid
        opts = self.options
        enclosed = 0

        for district in self.registry:
            candidates = adjacent_coords(
                district, grid.rows - 1, grid.cols - 1, opts.allow_diagonal
            )
            open_coords = [c for c in candidates if not grid.is_claimed(c)]
            if not open_coords:
                enclosed += 1
                continue

            coord = pick_weighted(self.prng, open_coords, district)
            grid.claim(coord, district, opts.neighborhood_rows, opts.neighborhood_cols)

        return enclosed


def generate_districts(
    registry: DistrictRegistry,
    options: Optional[GenerationOptions] = None,
    prng: Optional[AleaPRNG] = None,
) -> DistrictGrid:
    """Convenience wrapper around ``DistrictGenerator.generate``."""
    return DistrictGenerator(registry, options, prng).generate()
