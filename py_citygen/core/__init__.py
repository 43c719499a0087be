"""
Core city generation functionality.
"""

from .alea_prng import AleaPRNG
from .districts import Coord, District, DistrictRegistry
from .adjacency import adjacent_coords
from .selection import dist_from_center, pick_weighted
from .expansion import (
    DistrictCell,
    DistrictGenerator,
    DistrictGrid,
    GenerationOptions,
    GridConfigurationError,
    generate_districts,
    validate_capacity,
)
from .neighborhoods import (
    Building,
    BuildingType,
    Neighborhood,
    NeighborhoodGenerator,
    NeighborhoodOptions,
    generate_neighborhoods,
    synthesize_neighborhood,
)

__all__ = ['AleaPRNG', 'Coord', 'District', 'DistrictRegistry', 'adjacent_coords',
           'dist_from_center', 'pick_weighted', 'DistrictCell', 'DistrictGenerator',
           'DistrictGrid', 'GenerationOptions', 'GridConfigurationError',
           'generate_districts', 'validate_capacity', 'Building', 'BuildingType',
           'Neighborhood', 'NeighborhoodGenerator', 'NeighborhoodOptions',
           'generate_neighborhoods', 'synthesize_neighborhood']
