"""
Distance-weighted candidate selection.

Each candidate gets ``ceil(distance from the district seed)`` units of
selection mass, with a floor of one unit. Farther cells are therefore picked
proportionally more often, which stretches districts away from their seed
instead of growing uniform blobs.
"""

import math
from typing import List, Sequence

import structlog

from .alea_prng import AleaPRNG
from .districts import Coord, District

logger = structlog.get_logger()


def dist_from_center(district: District, coord: Coord) -> float:
    """Euclidean distance from the district's seed cell to ``coord``."""
    center = district.center
    if center is None:
        raise ValueError(f"District '{district.name}' has no seed cell yet")
    return math.hypot(center.row - coord.row, center.col - coord.col)


def candidate_weights(district: District, candidates: Sequence[Coord]) -> List[int]:
    """Integer selection weight for each candidate, never below 1."""
    return [max(1, math.ceil(dist_from_center(district, c))) for c in candidates]


def pick_weighted(
    prng: AleaPRNG, candidates: Sequence[Coord], district: District
) -> Coord:
    """
    Pick one candidate, biased toward cells far from the district seed.

    A single candidate is returned without drawing from ``prng``.

    Args:
        prng: Generator for the current run
        candidates: Non-empty list of open cells
        district: District being grown

    Returns:
        The chosen coordinate
    """
    if not candidates:
        raise ValueError("pick_weighted needs at least one candidate")
    if len(candidates) == 1:
        return candidates[0]

    weights = candidate_weights(district, candidates)
    draw = prng.randrange(0, sum(weights))
    for candidate, weight in zip(candidates, weights):
        if draw < weight:
            return candidate
        draw -= weight

    # Unreachable while draw < sum(weights)
    logger.warning(
        "Weighted pick exhausted, using uniform pick",
        district=district.name,
        candidates=len(candidates),
    )
    return prng.choice(candidates)
