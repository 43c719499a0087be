"""Neighbor candidates for district growth."""

from typing import List, Tuple

from .districts import Coord, District

# (row, col, diagonal) offsets scanned around every claimed cell, in order:
# top left, top, top right, left, right, bottom left, bottom, bottom right
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int, bool], ...] = (
    (-1, -1, True),
    (-1, 0, False),
    (-1, 1, True),
    (0, -1, False),
    (0, 1, False),
    (1, -1, True),
    (1, 0, False),
    (1, 1, True),
)


def adjacent_coords(
    district: District, max_row: int, max_col: int, allow_diagonal: bool = False
) -> List[Coord]:
    """
    List the cells bordering a district.

    Coordinates outside ``[0, max_row] x [0, max_col]`` and cells the district
    already owns are excluded. Each coordinate appears once, in the order it
    was first discovered while walking ``district.locations``.

    Args:
        district: District whose border is wanted
        max_row: Highest valid row index
        max_col: Highest valid column index
        allow_diagonal: Also consider the four diagonal neighbors

    Returns:
        Deduplicated list of adjacent coordinates, possibly empty
    """
    owned = set(district.locations)
    seen = set()
    adjacents: List[Coord] = []

    for location in district.locations:
        for d_row, d_col, diagonal in NEIGHBOR_OFFSETS:
            if diagonal and not allow_diagonal:
                continue
            row = location.row + d_row
            col = location.col + d_col
            if row < 0 or col < 0 or row > max_row or col > max_col:
                continue
            candidate = Coord(row, col)
            if candidate in owned or candidate in seen:
                continue
            seen.add(candidate)
            adjacents.append(candidate)

    return adjacents
