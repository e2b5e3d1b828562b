"""
Skyline 3D Generator - Main CLI

Generates a 3D-printable skyline (binary STL) from daily activity counts.

Usage:
    python -m skyline3d.main --input <activity.json> --user <id> [--year 2024]

Example:
    python -m skyline3d.main --input ./octocat.json --user octocat --year 2014-2024
"""

import argparse
import json
import logging
import os
import sys
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple

from . import __version__
from .config import SkylineConfig
from .errors import InvalidInput, SkylineError
from .generators.model_generator import generate_model_geometry, validate_input
from .io.contributions_loader import infer_year_range, load_contributions
from .io.stl_exporter import export_stl, output_filename, validate_stl_file
from .models.activity import (
    YearGrid,
    count_active_days,
    find_max_count_across_years,
)
from .models.mesh import Mesh


@dataclass
class PipelineStats:
    """Statistics from the pipeline run."""
    years: int = 0
    weeks: int = 0
    active_days: int = 0
    max_count: int = 0
    triangles_by_producer: Dict[str, int] = field(default_factory=dict)
    total_triangles: int = 0
    file_size_bytes: int = 0
    processing_time_ms: int = 0
    warnings: List[str] = field(default_factory=list)


@dataclass
class PipelineReport:
    """Report from pipeline run."""
    subject: str
    start_year: int
    end_year: int
    version: str
    success: bool
    stats: PipelineStats
    output_files: List[str]
    errors: List[str] = field(default_factory=list)
    config_used: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineResult:
    """
    Complete result of pipeline execution.

    Supports two output modes:
    - 'file': Writes the STL (and optional report) to disk (CLI mode)
    - 'memory': Returns the assembled mesh without writing anything

    Attributes:
        success: Whether pipeline completed without errors
        report: Detailed statistics and metadata
        stl_path: Path to the STL file (file mode only)
        mesh: Assembled model mesh (None on failure)
    """
    success: bool
    report: PipelineReport
    stl_path: Optional[str] = None
    mesh: Optional[Mesh] = None


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Configure logging to console and optionally to file.

    Args:
        verbose: If True, use DEBUG level; otherwise INFO
        log_file: Optional path to log file. If provided, logs will be written to file.
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)


def parse_year_range(value: str) -> Tuple[int, int]:
    """
    Parse a --year argument.

    Args:
        value: "2024" or "2014-2024"

    Returns:
        (start_year, end_year)

    Raises:
        InvalidInput: If the value is malformed or the range is reversed
    """
    parts = value.strip().split('-')
    if len(parts) not in (1, 2) or not all(p.strip().isdigit() for p in parts):
        raise InvalidInput(f"invalid year range {value!r}, expected YYYY or YYYY-YYYY")

    start = int(parts[0])
    end = int(parts[-1])

    if end < start:
        raise InvalidInput(f"end year {end} is before start year {start}")

    return start, end


def _failure(config: SkylineConfig, start_year: int, end_year: int,
             stats: PipelineStats, errors: List[str]) -> PipelineResult:
    report = PipelineReport(
        subject=config.subject,
        start_year=start_year,
        end_year=end_year,
        version=__version__,
        success=False,
        stats=stats,
        output_files=[],
        errors=errors,
    )
    return PipelineResult(success=False, report=report)


def run_pipeline(
    config: SkylineConfig,
    years: Optional[List[YearGrid]] = None,
    output_mode: str = "file",
    log: Optional[logging.Logger] = None,
    **generator_options,
) -> PipelineResult:
    """
    Run the complete skyline generation pipeline.

    Steps:
    1. Load activity data (unless passed in)
    2. Resolve the year range
    3. Validate input
    4. Assemble the model (producers run concurrently)
    5. Export and check the STL file (file mode)
    6. Generate report

    Args:
        config: Run configuration
        years: Year grids, oldest first (loaded from config.input_path if None)
        output_mode: "file" to write the STL (default), "memory" to return the mesh
        log: Logger threaded into every producer (defaults to the module logger)
        **generator_options: Extra arguments for generate_model_geometry
            (font_loader, emblem_path)

    Returns:
        PipelineResult with report and either file path or mesh
    """
    logger = log or logging.getLogger(__name__)

    start_time = time.time()
    stats = PipelineStats()
    errors: List[str] = []
    output_files: List[str] = []
    start_year, end_year = config.start_year, config.end_year

    # Step 1: Load activity data
    if years is None:
        try:
            years = load_contributions(config.input_path)
        except (SkylineError, OSError) as e:
            errors.append(f"Failed to load activity data: {e}")
            return _failure(config, start_year, end_year, stats, errors)

    # Step 2: Resolve year range
    try:
        if not start_year or not end_year:
            start_year, end_year = infer_year_range(years)
            logger.info(f"Year range from data: {start_year}-{end_year}")

        expected_years = end_year - start_year + 1
        if expected_years != len(years):
            raise InvalidInput(
                f"year range {start_year}-{end_year} covers "
                f"{expected_years} year(s) but the data has {len(years)}"
            )
    except InvalidInput as e:
        errors.append(f"Invalid year range: {e}")
        return _failure(config, start_year, end_year, stats, errors)

    if output_mode == "file":
        stl_path = config.output_path or os.path.join(
            config.output_dir,
            output_filename(config.subject, start_year, end_year),
        )
    else:
        stl_path = "<memory>"

    # Step 3: Validate input
    try:
        validate_input(years, stl_path, config.subject)
    except InvalidInput as e:
        errors.append(f"Invalid input: {e}")
        return _failure(config, start_year, end_year, stats, errors)

    stats.years = len(years)
    stats.weeks = sum(len(year) for year in years)
    stats.active_days = sum(count_active_days(year) for year in years)
    stats.max_count = find_max_count_across_years(years)

    logger.info(
        f"{config.subject}: {stats.years} year(s), {stats.weeks} weeks, "
        f"{stats.active_days} active days, max count {stats.max_count}"
    )

    # Step 4: Assemble
    try:
        assembly = generate_model_geometry(
            years,
            config.subject,
            start_year,
            end_year,
            include_text=config.include_text,
            include_emblem=config.include_emblem,
            shared_height_scale=config.shared_height_scale,
            log=logger,
            **generator_options,
        )
    except SkylineError as e:
        errors.append(str(e))
        return _failure(config, start_year, end_year, stats, errors)

    stats.triangles_by_producer = assembly.triangles_by_producer()
    stats.total_triangles = assembly.mesh.triangle_count()
    stats.warnings.extend(assembly.warnings)

    # Step 5: Export
    result_stl_path = None

    if output_mode == "file":
        logger.info("Exporting STL file")
        try:
            export = export_stl(assembly.mesh, stl_path, header=config.stl_header)
            result_stl_path = export.filepath
            stats.file_size_bytes = export.file_size_bytes
            output_files.append(result_stl_path)

            stl_errors = validate_stl_file(result_stl_path)
            if stl_errors:
                stats.warnings.extend([f"STL: {e}" for e in stl_errors])

        except (SkylineError, OSError) as e:
            errors.append(f"Failed to export STL: {e}")
    else:
        logger.info(f"Memory mode: {stats.total_triangles} triangles")

    # Step 6: Generate report
    elapsed_ms = int((time.time() - start_time) * 1000)
    stats.processing_time_ms = elapsed_ms

    config_used = {
        'include_text': config.include_text,
        'include_emblem': config.include_emblem,
        'shared_height_scale': config.shared_height_scale,
        'stl_header': config.stl_header,
    }

    report = PipelineReport(
        subject=config.subject,
        start_year=start_year,
        end_year=end_year,
        version=__version__,
        success=len(errors) == 0,
        stats=stats,
        output_files=output_files,
        errors=errors,
        config_used=config_used,
    )

    if output_mode == "file" and config.write_report and report.success:
        report_path = os.path.splitext(result_stl_path)[0] + "_report.json"
        with open(report_path, 'w', encoding='utf-8') as f:
            json.dump(asdict(report), f, indent=2)
        output_files.append(report_path)
        logger.info(f"Report saved to {report_path}")

    logger.info(f"Pipeline completed in {elapsed_ms}ms")

    return PipelineResult(
        success=report.success,
        report=report,
        stl_path=result_stl_path,
        mesh=assembly.mesh,
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Skyline 3D Generator - Generate a printable activity skyline (STL)'
    )

    parser.add_argument(
        '--input', '-i',
        required=True,
        help='JSON file with activity data (nested lists or a GitHub calendar response)'
    )

    parser.add_argument(
        '--user', '-u',
        required=True,
        help='Subject identifier shown on the caption and used in the file name'
    )

    parser.add_argument(
        '--year', '-y',
        default=None,
        help='Year or year range, e.g. 2024 or 2014-2024 (default: from data)'
    )

    parser.add_argument(
        '--output', '-o',
        default=None,
        help='Output STL path (default: <user>-<year>.stl in the output directory)'
    )

    parser.add_argument(
        '--output-dir',
        default='./output',
        help='Output directory for generated files (default: ./output)'
    )

    parser.add_argument(
        '--header',
        default=None,
        help='Text for the 80-byte STL header'
    )

    parser.add_argument(
        '--no-text',
        action='store_true',
        help='Skip the embossed caption'
    )

    parser.add_argument(
        '--no-emblem',
        action='store_true',
        help='Skip the emblem'
    )

    parser.add_argument(
        '--shared-scale',
        action='store_true',
        help='Scale column heights by the maximum over all years'
    )

    parser.add_argument(
        '--report',
        action='store_true',
        help='Write a JSON report next to the STL file'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Disable log file output (only console)'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    args = parser.parse_args(argv)

    start_year = end_year = 0
    if args.year:
        try:
            start_year, end_year = parse_year_range(args.year)
        except InvalidInput as e:
            parser.error(str(e))

    # Create output directory early so we can put log file there
    os.makedirs(args.output_dir, exist_ok=True)

    log_file = None
    if not args.no_log_file:
        log_file = os.path.join(args.output_dir, f"{args.user}.log")

    setup_logging(args.verbose, log_file)

    try:
        config_kwargs = {}
        if args.header is not None:
            config_kwargs['stl_header'] = args.header

        config = SkylineConfig(
            subject=args.user,
            start_year=start_year,
            end_year=end_year,
            input_path=args.input,
            output_path=args.output,
            output_dir=args.output_dir,
            write_report=args.report,
            include_text=not args.no_text,
            include_emblem=not args.no_emblem,
            shared_height_scale=args.shared_scale,
            verbose=args.verbose,
            **config_kwargs,
        )
    except InvalidInput as e:
        parser.error(str(e))

    result = run_pipeline(config, output_mode="file")
    report = result.report

    if result.success:
        print(f"\nSuccess! Generated skyline for {report.subject} "
              f"({report.start_year}-{report.end_year})")
        print(f"Years: {report.stats.years}, weeks: {report.stats.weeks}, "
              f"active days: {report.stats.active_days}")
        print(f"Triangles: {report.stats.total_triangles}")
        for name, count in report.stats.triangles_by_producer.items():
            print(f"  {name}: {count}")

        if report.stats.warnings:
            print("\nWarnings:")
            for warning in report.stats.warnings:
                print(f"  - {warning}")

        print(f"Output files: {', '.join(report.output_files)}")
        if log_file:
            print(f"Log file: {log_file}")
        return 0
    else:
        print("\nPipeline failed with errors:")
        for error in report.errors:
            print(f"  - {error}")
        if log_file:
            print(f"See log file for details: {log_file}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
