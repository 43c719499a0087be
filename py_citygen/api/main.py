"""FastAPI main application."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError
from typing import List, Optional, Tuple
import logging
import structlog
import time
import uuid

from .. import __version__
from ..config import settings, generation_settings
from ..core.alea_prng import AleaPRNG
from ..core.districts import District, DistrictRegistry
from ..core.expansion import (
    DistrictGenerator,
    DistrictGrid,
    GenerationOptions,
    GridConfigurationError,
)
from ..core.neighborhoods import BUILDING_NAMES, BuildingType, generate_neighborhoods

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="City Generator API",
    description="Procedural city districts and neighborhoods",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CitySession:
    """In-memory state shared by the endpoints: districts and the last city."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.registry = DistrictRegistry.with_defaults()
        self.grid: Optional[DistrictGrid] = None
        self.seed: Optional[str] = None
        self.rounds = 0
        self.generation_time_seconds: Optional[float] = None


session = CitySession()


# Request/Response models
class DistrictCreateRequest(BaseModel):
    """Request to add a district."""

    name: str = Field(..., min_length=1, max_length=generation_settings.districts.max_name_length)
    color: Tuple[int, int, int] = Field((0, 0, 0), description="RGB display color")


class DistrictColorRequest(BaseModel):
    color: Tuple[int, int, int] = Field(..., description="RGB display color")


class DistrictNameRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=generation_settings.districts.max_name_length)


class DistrictResponse(BaseModel):
    """One entry of the district list."""

    index: int
    id: int
    name: str
    color: Tuple[int, int, int]
    cell_count: int
    center: Optional[Tuple[int, int]] = None


class CityGenerationRequest(BaseModel):
    """Request to generate a new city."""

    seed: Optional[str] = Field(None, description="Random seed for reproducible generation")
    district_rows: int = Field(settings.default_district_rows, ge=1, le=settings.max_grid_rows)
    district_cols: int = Field(settings.default_district_cols, ge=1, le=settings.max_grid_cols)
    neighborhood_rows: int = Field(
        settings.default_neighborhood_rows,
        ge=generation_settings.neighborhoods.min_rows,
        le=generation_settings.neighborhoods.max_rows,
    )
    neighborhood_cols: int = Field(
        settings.default_neighborhood_cols,
        ge=generation_settings.neighborhoods.min_cols,
        le=generation_settings.neighborhoods.max_cols,
    )
    allow_diagonal: bool = Field(False, description="Grow districts diagonally too")


class CitySummary(BaseModel):
    """Summary of the generated city."""

    seed: str
    district_rows: int
    district_cols: int
    rounds: int
    neighborhoods: int
    generation_time_seconds: Optional[float]
    districts: List[DistrictResponse]


class CityGridResponse(BaseModel):
    """District id per master-grid cell plus a legend."""

    rows: int
    cols: int
    district_ids: List[List[int]]
    districts: List[DistrictResponse]


class NeighborhoodResponse(BaseModel):
    rows: int
    cols: int
    building_types: List[List[str]]
    colors: List[List[Tuple[int, int, int]]]


class CellResponse(BaseModel):
    """One master-grid cell and its neighborhood."""

    row: int
    col: int
    district_id: int
    district_name: Optional[str]
    color: Optional[Tuple[int, int, int]]
    neighborhood: NeighborhoodResponse


def _district_response(index: int, district: District) -> DistrictResponse:
    center = district.center
    return DistrictResponse(
        index=index,
        id=district.id,
        name=district.name,
        color=district.color,
        cell_count=len(district.locations),
        center=tuple(center) if center is not None else None,
    )


def _district_list() -> List[DistrictResponse]:
    return [_district_response(i, d) for i, d in enumerate(session.registry)]


def _require_grid() -> DistrictGrid:
    if session.grid is None:
        raise HTTPException(status_code=404, detail="No city has been generated yet")
    return session.grid


def _edit_district(index: int, edit) -> DistrictResponse:
    """Apply a registry mutation, mapping failures to HTTP errors."""
    if index < 0 or index >= len(session.registry):
        raise HTTPException(status_code=404, detail="District not found")
    try:
        edit()
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _district_response(index, session.registry[index])


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "City Generator API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "generating": session.registry.locked}


@app.get("/districts", response_model=List[DistrictResponse])
async def list_districts(name: Optional[str] = None):
    """List the districts used for generation, or the one called ``name``."""
    if name is None:
        return _district_list()
    index = session.registry.find(name)
    if index is None:
        raise HTTPException(status_code=404, detail="District not found")
    return [_district_response(index, session.registry[index])]


@app.post("/districts", response_model=DistrictResponse, status_code=201)
async def add_district(request: DistrictCreateRequest):
    """Add a district to the end of the list."""
    if len(session.registry) >= generation_settings.districts.max_districts:
        raise HTTPException(status_code=400, detail="Too many districts")
    try:
        district = session.registry.add(request.name, request.color)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _district_response(len(session.registry) - 1, district)


@app.delete("/districts/{index}", response_model=DistrictResponse)
async def remove_district(index: int):
    """Remove a district by list position."""
    if index < 0 or index >= len(session.registry):
        raise HTTPException(status_code=404, detail="District not found")
    try:
        removed = session.registry.remove(index)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _district_response(index, removed)


@app.put("/districts/{index}/color", response_model=DistrictResponse)
async def set_district_color(index: int, request: DistrictColorRequest):
    """Change a district's display color."""
    return _edit_district(index, lambda: session.registry.set_color(index, request.color))


@app.put("/districts/{index}/name", response_model=DistrictResponse)
async def rename_district(index: int, request: DistrictNameRequest):
    """Rename a district."""
    return _edit_district(index, lambda: session.registry.rename(index, request.name))


@app.post("/city/generate", response_model=CitySummary)
def generate_city(request: CityGenerationRequest):
    """
    Generate districts and every neighborhood.

    Declared sync so it runs in the threadpool; the district list cannot
    change until the district layout is finished.
    """
    logger.info("City generation requested", request=request.model_dump())

    total_buildings = (
        request.district_rows
        * request.district_cols
        * request.neighborhood_rows
        * request.neighborhood_cols
    )
    max_buildings = generation_settings.max_total_buildings
    if total_buildings > max_buildings:
        logger.warning("Rejected city generation", buildings=total_buildings, limit=max_buildings)
        raise HTTPException(
            status_code=400,
            detail=f"City would hold {total_buildings} buildings, limit is {max_buildings}",
        )

    seed = request.seed or settings.default_seed or str(uuid.uuid4())[:8]
    prng = AleaPRNG(seed)
    options = GenerationOptions(
        district_rows=request.district_rows,
        district_cols=request.district_cols,
        neighborhood_rows=request.neighborhood_rows,
        neighborhood_cols=request.neighborhood_cols,
        allow_diagonal=request.allow_diagonal,
        max_prime_attempts=settings.max_prime_attempts,
    )

    start = time.perf_counter()
    generator = DistrictGenerator(session.registry, options, prng)
    try:
        grid = generator.generate()
    except GridConfigurationError as e:
        logger.warning("Rejected city generation", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))

    neighborhoods = generate_neighborhoods(grid, prng)
    elapsed = round(time.perf_counter() - start, 3)

    session.grid = grid
    session.seed = seed
    session.rounds = generator.rounds
    session.generation_time_seconds = elapsed

    logger.info("City generation completed", seed=seed, rounds=generator.rounds, seconds=elapsed)

    return CitySummary(
        seed=seed,
        district_rows=grid.rows,
        district_cols=grid.cols,
        rounds=generator.rounds,
        neighborhoods=neighborhoods,
        generation_time_seconds=elapsed,
        districts=_district_list(),
    )


@app.get("/city", response_model=CityGridResponse)
async def get_city():
    """District layout of the last generated city."""
    grid = _require_grid()
    return CityGridResponse(
        rows=grid.rows,
        cols=grid.cols,
        district_ids=grid.cell_districts.tolist(),
        districts=_district_list(),
    )


@app.get("/city/cells/{row}/{col}", response_model=CellResponse)
async def get_city_cell(row: int, col: int):
    """One district cell with its neighborhood."""
    grid = _require_grid()
    try:
        cell = grid.cell(row, col)
    except IndexError:
        raise HTTPException(status_code=404, detail="Cell not found")

    owner = cell.owner
    nhood = cell.neighborhood
    type_names = [
        [BUILDING_NAMES[BuildingType(int(t))] for t in type_row]
        for type_row in nhood.building_types
    ]
    return CellResponse(
        row=row,
        col=col,
        district_id=cell.district_id,
        district_name=owner.name if owner else None,
        color=owner.color if owner else None,
        neighborhood=NeighborhoodResponse(
            rows=nhood.rows,
            cols=nhood.cols,
            building_types=type_names,
            colors=nhood.colors.tolist(),
        ),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
