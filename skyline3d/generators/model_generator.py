"""
Model assembler for the Skyline 3D generator.

Computes the model footprint, runs the four geometry producers (base
slab, columns, caption text, emblem) concurrently, and concatenates
their meshes in a fixed order.

Base and columns are required: a failure in either aborts the run.
Caption and emblem are decorative: a failure is downgraded to a warning
and the producer contributes nothing.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional
import logging

from ..config import (
    BASE_HEIGHT,
    CELL_SIZE,
    DAYS_PER_WEEK,
    GRID_SIZE,
)
from ..errors import (
    InvalidDimensions,
    InvalidInput,
    ProducerFailed,
    SkylineError,
)
from ..io.assets import FontType, load_font
from ..io.stl_exporter import ExportStats, export_stl
from ..models.activity import YearGrid, find_max_count_across_years
from ..models.mesh import Mesh, create_empty_mesh, merge_meshes
from .columns import create_columns_for_years
from .primitives import create_cuboid_base
from .voxels import create_3d_text, format_year_label, generate_image_geometry

logger = logging.getLogger(__name__)


# Concatenation order of producer output in the final mesh
PRODUCER_ORDER = ("base", "columns", "text", "emblem")
REQUIRED_PRODUCERS = frozenset(("base", "columns"))


@dataclass(frozen=True)
class ModelDimensions:
    """Footprint of the assembled model."""
    inner_width: float
    inner_depth: float
    year_count: int

    def __str__(self) -> str:
        return (
            f"{self.inner_width:g} x {self.inner_depth:g} mm, "
            f"{self.year_count} year(s)"
        )


def calculate_dimensions(year_count: int) -> ModelDimensions:
    """
    Compute the base footprint for a number of stacked years.

    One cell of margin is left on every side of the column lattice.

    Args:
        year_count: Number of stacked years

    Returns:
        ModelDimensions

    Raises:
        InvalidDimensions: If year_count <= 0
    """
    if year_count <= 0:
        raise InvalidDimensions(f"year count must be positive, got {year_count}")

    width = GRID_SIZE * CELL_SIZE + 2 * CELL_SIZE
    depth = DAYS_PER_WEEK * year_count * CELL_SIZE + 2 * CELL_SIZE

    return ModelDimensions(inner_width=width, inner_depth=depth, year_count=year_count)


# =============================================================================
# PRODUCER RESULTS
# =============================================================================

class ProducerStatus(Enum):
    """Outcome of one geometry producer."""
    OK = "ok"
    WARN = "warn"
    FATAL = "fatal"


@dataclass
class ProducerResult:
    """
    Tagged outcome of a producer.

    OK carries the mesh, WARN carries an empty mesh and the reason it was
    degraded, FATAL carries the error.
    """
    name: str
    status: ProducerStatus
    mesh: Mesh
    reason: str = ""
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, name: str, mesh: Mesh) -> 'ProducerResult':
        return cls(name=name, status=ProducerStatus.OK, mesh=mesh)

    @classmethod
    def warn(cls, name: str, reason: str,
             error: Optional[BaseException] = None) -> 'ProducerResult':
        return cls(
            name=name,
            status=ProducerStatus.WARN,
            mesh=create_empty_mesh(name),
            reason=reason,
            error=error,
        )

    @classmethod
    def fatal(cls, name: str, error: BaseException) -> 'ProducerResult':
        return cls(
            name=name,
            status=ProducerStatus.FATAL,
            mesh=create_empty_mesh(name),
            reason=str(error),
            error=error,
        )

    @property
    def is_fatal(self) -> bool:
        return self.status is ProducerStatus.FATAL


@dataclass
class AssemblyResult:
    """Result of model assembly."""
    mesh: Mesh
    dimensions: ModelDimensions
    producers: Dict[str, ProducerResult] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def triangles_by_producer(self) -> Dict[str, int]:
        """Triangle count contributed by each producer, in concatenation order."""
        return {
            name: self.producers[name].mesh.triangle_count()
            for name in PRODUCER_ORDER
            if name in self.producers
        }


def run_producer(
    name: str,
    build: Callable[[], Mesh],
    required: bool,
    log: logging.Logger,
) -> ProducerResult:
    """
    Run one producer and wrap its outcome.

    A required producer's error becomes FATAL; an optional producer's
    error becomes WARN. Failures are always reported back, never raised
    out of the worker thread.
    """
    try:
        mesh = build()
    except Exception as e:
        reason = str(e) if isinstance(e, SkylineError) else f"{type(e).__name__}: {e}"
        if required:
            log.error(f"Producer '{name}' failed: {reason}")
            return ProducerResult.fatal(name, e)
        log.warning(f"Producer '{name}' degraded, contributing no geometry: {reason}")
        return ProducerResult.warn(name, reason, e)

    mesh.name = name
    log.debug(f"Producer '{name}': {mesh.triangle_count()} triangles")
    return ProducerResult.ok(name, mesh)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_input(years: List[YearGrid], output_path: str, subject: str) -> None:
    """
    Check input before any geometry is built.

    Raises:
        InvalidInput: On an empty grid, too many years/weeks/days, an
            invalid day, or an empty output path or subject
    """
    if not years:
        raise InvalidInput("activity data cannot be empty")
    if len(years) > GRID_SIZE:
        raise InvalidInput(
            f"too many years: {len(years)} (maximum {GRID_SIZE})"
        )
    if not output_path:
        raise InvalidInput("output path cannot be empty")
    if not subject:
        raise InvalidInput("subject identifier cannot be empty")

    for year_idx, year in enumerate(years):
        if not year:
            raise InvalidInput(f"year {year_idx} has no weeks")
        if not any(week for week in year):
            raise InvalidInput(f"year {year_idx} has no days")
        if len(year) > GRID_SIZE:
            raise InvalidInput(
                f"year {year_idx} has {len(year)} weeks (maximum {GRID_SIZE})"
            )
        for week_idx, week in enumerate(year):
            if len(week) > DAYS_PER_WEEK:
                raise InvalidInput(
                    f"year {year_idx}, week {week_idx} has {len(week)} days "
                    f"(maximum {DAYS_PER_WEEK})"
                )
            for day in week:
                day.validate()


# =============================================================================
# ASSEMBLY
# =============================================================================

def generate_model_geometry(
    years: List[YearGrid],
    subject: str,
    start_year: int,
    end_year: int,
    include_text: bool = True,
    include_emblem: bool = True,
    shared_height_scale: bool = False,
    font_loader: Callable[[float], FontType] = load_font,
    emblem_path: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> AssemblyResult:
    """
    Build the complete model mesh.

    The four producers run in a thread pool, one task each. Results are
    joined and concatenated as base, columns, text, emblem regardless of
    completion order.

    Args:
        years: Year grids, oldest first
        subject: Caption subject identifier
        start_year, end_year: Year range for the caption label
        include_text: Generate the caption
        include_emblem: Generate the emblem
        shared_height_scale: Scale every year by the overall max count
        font_loader: Callable returning a caption font for a point size
        emblem_path: Emblem image override
        log: Logger threaded into every producer

    Returns:
        AssemblyResult with the frozen model mesh

    Raises:
        InvalidDimensions: If there are no years
        ProducerFailed: If the base or columns producer fails
    """
    log = log or logger
    dims = calculate_dimensions(len(years))
    year_label = format_year_label(start_year, end_year)

    shared_max = find_max_count_across_years(years) if shared_height_scale else None

    log.info(f"Assembling model: {dims}")

    builders: Dict[str, Callable[[], Mesh]] = {
        "base": lambda: Mesh(triangles=create_cuboid_base(dims.inner_width, dims.inner_depth)),
        "columns": lambda: create_columns_for_years(years, shared_max, log=log),
    }
    if include_text:
        builders["text"] = lambda: create_3d_text(
            subject, year_label, dims.inner_width, BASE_HEIGHT,
            font_loader=font_loader, log=log,
        )
    if include_emblem:
        builders["emblem"] = lambda: generate_image_geometry(
            dims.inner_width, BASE_HEIGHT, image_path=emblem_path, log=log,
        )

    with ThreadPoolExecutor(max_workers=len(PRODUCER_ORDER)) as executor:
        futures = {
            name: executor.submit(
                run_producer, name, build, name in REQUIRED_PRODUCERS, log,
            )
            for name, build in builders.items()
        }
        results = {name: futures[name].result() for name in PRODUCER_ORDER if name in futures}

    result = AssemblyResult(mesh=create_empty_mesh("model"), dimensions=dims, producers=results)

    for name in PRODUCER_ORDER:
        producer = results.get(name)
        if producer is None:
            log.debug(f"Producer '{name}' disabled")
            continue
        if producer.is_fatal:
            raise ProducerFailed(name, producer.reason, dims) from producer.error
        if producer.status is ProducerStatus.WARN:
            result.warnings.append(f"{name}: {producer.reason}")

    result.mesh = merge_meshes(
        [results[name].mesh for name in PRODUCER_ORDER if name in results],
        name="model",
    ).freeze()

    log.info(
        f"Model assembled: {result.mesh.triangle_count()} triangles "
        f"({', '.join(f'{k}={v}' for k, v in result.triangles_by_producer().items())})"
    )

    return result


# =============================================================================
# ENTRY POINTS
# =============================================================================

@dataclass
class GenerationResult:
    """Assembly plus export outcome of one STL generation."""
    assembly: AssemblyResult
    export: ExportStats

    @property
    def warnings(self) -> List[str]:
        return self.assembly.warnings


def generate_stl_range(
    years: List[YearGrid],
    output_path: str,
    subject: str,
    start_year: int,
    end_year: int,
    header: Optional[str] = None,
    include_text: bool = True,
    include_emblem: bool = True,
    shared_height_scale: bool = False,
    font_loader: Callable[[float], FontType] = load_font,
    emblem_path: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> GenerationResult:
    """
    Generate an STL file for one or more stacked years.

    Nothing is written unless assembly succeeds.

    Args:
        years: Year grids, oldest first
        output_path: Destination file (.stl appended if missing)
        subject: Subject identifier for the caption
        start_year, end_year: Year range of the data
        header: STL header text
        include_text, include_emblem: Decorations on/off
        shared_height_scale: Scale every year by the overall max count
        font_loader: Caption font loader
        emblem_path: Emblem image override
        log: Logger for diagnostics

    Returns:
        GenerationResult

    Raises:
        InvalidInput: If the input fails validation
        ProducerFailed: If a required producer fails
    """
    log = log or logger
    validate_input(years, output_path, subject)

    if end_year < start_year:
        raise InvalidInput(f"end year {end_year} is before start year {start_year}")

    assembly = generate_model_geometry(
        years,
        subject,
        start_year,
        end_year,
        include_text=include_text,
        include_emblem=include_emblem,
        shared_height_scale=shared_height_scale,
        font_loader=font_loader,
        emblem_path=emblem_path,
        log=log,
    )

    export = export_stl(assembly.mesh, output_path, header=header)
    return GenerationResult(assembly=assembly, export=export)


def generate_stl(
    grid: YearGrid,
    output_path: str,
    subject: str,
    year: int,
    **kwargs,
) -> GenerationResult:
    """
    Generate an STL file for a single year.

    Args:
        grid: One year of activity
        output_path: Destination file
        subject: Subject identifier for the caption
        year: Calendar year of the data
        **kwargs: Passed through to generate_stl_range()

    Returns:
        GenerationResult
    """
    return generate_stl_range([grid], output_path, subject, year, year, **kwargs)
