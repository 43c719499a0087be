"""
District data model.

A district is a named, colored partition of the master grid. It starts
empty, receives its seed cell during priming and then grows one cell per
expansion round. The registry is the canonical id -> District table that
grid cells resolve their owner against.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = structlog.get_logger()

RGB = Tuple[int, int, int]

# Label shown for unclaimed cells
RESERVED_NAME = "empty"

DEFAULT_DISTRICTS: Tuple[Tuple[str, Tuple[int, int, int]], ...] = (
    ("slum", (222, 42, 195)),
    ("suburb", (114, 222, 42)),
    ("adventuring", (227, 0, 0)),
    ("financial", (255, 250, 105)),
    ("business", (74, 132, 232)),
)


class Coord(NamedTuple):
    """Row/column address of a cell in the master grid or a sub-grid."""

    row: int
    col: int

    def __str__(self) -> str:
        return f"row: {self.row}, col: {self.col}"


class District(BaseModel):
    """A named region of the master grid and its claimed cells."""

    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(description="Registry-assigned identifier, never 0")
    name: str = Field(description="District name")
    color: RGB = Field(default=(0, 0, 0), description="Display color as RGB")
    locations: List[Coord] = Field(
        default_factory=list,
        description="Claimed cells in growth order; locations[0] is the seed",
    )

    @field_validator("color")
    @classmethod
    def _check_channels(cls, value: RGB) -> RGB:
        if any(channel < 0 or channel > 255 for channel in value):
            raise ValueError(f"RGB channels must be within 0..255, got {value}")
        return value

    @property
    def center(self) -> Optional[Coord]:
        """The seed cell, or None before priming."""
        return self.locations[0] if self.locations else None


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("District name cannot be empty")
    if cleaned.lower() == RESERVED_NAME:
        raise ValueError(f"'{RESERVED_NAME}' is reserved for unclaimed cells")
    return cleaned


class DistrictRegistry:
    """
    Ordered list of districts plus the id table cells resolve against.

    Mutators are only allowed between generation runs; while a run holds
    the registry they raise RuntimeError.
    """

    def __init__(self, names: Optional[List[str]] = None):
        self._districts: List[District] = []
        self._by_id: Dict[int, District] = {}
        self._next_id = 1
        self._locked = False

        for name in names or []:
            self.add(name)

    @classmethod
    def with_defaults(cls) -> DistrictRegistry:
        """Registry holding the five stock districts."""
        registry = cls()
        for name, color in DEFAULT_DISTRICTS:
            registry.add(name, color)
        return registry

    def __len__(self) -> int:
        return len(self._districts)

    def __iter__(self) -> Iterator[District]:
        return iter(self._districts)

    def __getitem__(self, index: int) -> District:
        return self._districts[index]

    @property
    def districts(self) -> List[District]:
        """Snapshot of the ordered district list."""
        return list(self._districts)

    @contextmanager
    def generation_in_progress(self) -> Iterator[DistrictRegistry]:
        """Hold the registry for a generation run."""
        if self._locked:
            raise RuntimeError("A generation run is already in progress")
        self._locked = True
        try:
            yield self
        finally:
            self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    def _ensure_unlocked(self, operation: str) -> None:
        if self._locked:
            raise RuntimeError(
                f"Cannot {operation} while a generation run is in progress"
            )

    def add(self, name: str, color: RGB = (0, 0, 0)) -> District:
        """Append a new district and return it."""
        self._ensure_unlocked("add a district")
        district = District(id=self._next_id, name=_clean_name(name), color=color)
        self._districts.append(district)
        self._by_id[district.id] = district
        self._next_id += 1
        logger.info("Added district", district=district.name, id=district.id)
        return district

    def remove(self, index: int) -> District:
        """Remove the district at ``index`` and return it."""
        self._ensure_unlocked("remove a district")
        removed = self._districts.pop(index)
        del self._by_id[removed.id]
        logger.info("Removed district", district=removed.name, id=removed.id)
        return removed

    def set_color(self, index: int, color: RGB) -> District:
        self._ensure_unlocked("recolor a district")
        district = self._districts[index]
        district.color = tuple(color)
        return district

    def rename(self, index: int, name: str) -> District:
        self._ensure_unlocked("rename a district")
        district = self._districts[index]
        district.name = _clean_name(name)
        return district

    def find(self, name: str) -> Optional[int]:
        """Index of the district with ``name`` (case-insensitive), if any."""
        wanted = name.strip().lower()
        for index, district in enumerate(self._districts):
            if district.name.lower() == wanted:
                return index
        return None

    def get(self, district_id: int) -> Optional[District]:
        """Resolve a district id against the canonical table."""
        return self._by_id.get(district_id)

    def clear_locations(self) -> None:
        """Forget every claimed cell, keeping id, name and color."""
        for district in self._districts:
            district.locations.clear()
