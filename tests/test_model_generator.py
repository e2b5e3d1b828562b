"""Tests for model assembly and the STL generation entry points."""

import logging
import os

import pytest

from skyline3d.config import BASE_HEIGHT, CELL_SIZE, GRID_SIZE
from skyline3d.errors import (
    DegenerateGeometry,
    InvalidDimensions,
    InvalidInput,
    ProducerFailed,
)
from skyline3d.generators import model_generator
from skyline3d.generators.model_generator import (
    PRODUCER_ORDER,
    ProducerResult,
    ProducerStatus,
    calculate_dimensions,
    generate_model_geometry,
    generate_stl,
    generate_stl_range,
    run_producer,
    validate_input,
)
from skyline3d.io.stl_exporter import expected_file_size
from skyline3d.models.activity import ActivityDay
from skyline3d.models.mesh import Mesh

NO_DECORATIONS = {"include_text": False, "include_emblem": False}


class TestDimensions:
    def test_single_year(self):
        dims = calculate_dimensions(1)
        assert dims.inner_width == GRID_SIZE * CELL_SIZE + 2 * CELL_SIZE
        assert dims.inner_depth == 7 * CELL_SIZE + 2 * CELL_SIZE

    def test_depth_grows_with_years(self):
        assert calculate_dimensions(3).inner_depth == 21 * CELL_SIZE + 2 * CELL_SIZE

    @pytest.mark.parametrize("count", [0, -1])
    def test_non_positive_year_count(self, count):
        with pytest.raises(InvalidDimensions):
            calculate_dimensions(count)


class TestProducerResult:
    def test_ok(self):
        mesh = Mesh()
        result = ProducerResult.ok("base", mesh)
        assert result.status is ProducerStatus.OK
        assert result.mesh is mesh

    def test_warn_has_empty_mesh(self):
        result = ProducerResult.warn("text", "font missing")
        assert result.status is ProducerStatus.WARN
        assert result.mesh.is_empty()
        assert result.reason == "font missing"

    def test_required_failure_is_fatal(self):
        def boom():
            raise DegenerateGeometry("zero area")
        result = run_producer("base", boom, required=True, log=logging.getLogger("t"))
        assert result.is_fatal
        assert isinstance(result.error, DegenerateGeometry)

    def test_optional_failure_is_warning(self):
        def boom():
            raise RuntimeError("renderer crashed")
        result = run_producer("emblem", boom, required=False, log=logging.getLogger("t"))
        assert result.status is ProducerStatus.WARN
        assert "renderer crashed" in result.reason


class TestValidateInput:
    def test_valid(self, small_year):
        validate_input([small_year], "out.stl", "octocat")

    @pytest.mark.parametrize("years", [None, []])
    def test_empty(self, years):
        with pytest.raises(InvalidInput):
            validate_input(years, "out.stl", "octocat")

    def test_empty_year(self):
        with pytest.raises(InvalidInput):
            validate_input([[]], "out.stl", "octocat")

    @pytest.mark.parametrize("year", [[[]], [[], []]])
    def test_year_of_empty_weeks(self, year):
        with pytest.raises(InvalidInput, match="has no days"):
            validate_input([year], "out.stl", "octocat")

    def test_too_many_years(self, single_day_year):
        with pytest.raises(InvalidInput):
            validate_input([single_day_year] * (GRID_SIZE + 1), "out.stl", "octocat")

    def test_too_many_weeks(self, year_factory):
        year = year_factory([[0] * 7] * (GRID_SIZE + 1))
        with pytest.raises(InvalidInput):
            validate_input([year], "out.stl", "octocat")

    def test_too_many_days(self, year_factory):
        with pytest.raises(InvalidInput):
            validate_input([year_factory([[0] * 8])], "out.stl", "octocat")

    def test_partial_week_accepted(self, year_factory):
        validate_input([year_factory([[1, 2, 3]])], "out.stl", "octocat")

    def test_negative_count(self):
        year = [[ActivityDay(date="2024-01-01", count=-1)]]
        with pytest.raises(InvalidInput):
            validate_input([year], "out.stl", "octocat")

    def test_bad_date(self):
        year = [[ActivityDay(date="2024-13-01", count=1)]]
        with pytest.raises(InvalidInput):
            validate_input([year], "out.stl", "octocat")

    @pytest.mark.parametrize("path,subject", [("", "octocat"), ("out.stl", "")])
    def test_empty_path_or_subject(self, small_year, path, subject):
        with pytest.raises(InvalidInput):
            validate_input([small_year], path, subject)


class TestAssembly:
    def test_order_base_then_columns(self, small_year):
        result = generate_model_geometry([small_year], "octocat", 2024, 2024, **NO_DECORATIONS)

        assert result.mesh.frozen
        assert result.mesh.triangle_count() == 12 + 6 * 12
        assert result.triangles_by_producer() == {"base": 12, "columns": 72}

        base = result.mesh.triangles[:12]
        assert all(p.z <= 0.0 for tri in base for p in tri.vertices)
        assert min(p.z for tri in base for p in tri.vertices) == -BASE_HEIGHT

    def test_full_model_order(self, small_year):
        result = generate_model_geometry([small_year], "octocat", 2024, 2024)
        counts = result.triangles_by_producer()

        assert list(counts) == list(PRODUCER_ORDER)
        assert counts["text"] > 0
        assert counts["emblem"] > 0
        assert result.warnings == []

        text_start = counts["base"] + counts["columns"]
        first_text = result.mesh.triangles[text_start]
        assert first_text.v1.y == pytest.approx(-1.0)

    def test_order_independent_of_completion(self, small_year, monkeypatch):
        # Make the base finish last; it must still come first.
        import time
        real_base = model_generator.create_cuboid_base

        def slow_base(width, depth):
            time.sleep(0.05)
            return real_base(width, depth)

        monkeypatch.setattr(model_generator, "create_cuboid_base", slow_base)
        result = generate_model_geometry([small_year], "octocat", 2024, 2024, **NO_DECORATIONS)
        assert all(p.z <= 0.0 for tri in result.mesh.triangles[:12] for p in tri.vertices)

    def test_required_failure_aborts(self, small_year, monkeypatch):
        def broken_base(width, depth):
            raise DegenerateGeometry("zero-area triangle")

        monkeypatch.setattr(model_generator, "create_cuboid_base", broken_base)

        with pytest.raises(ProducerFailed) as exc_info:
            generate_model_geometry([small_year], "octocat", 2024, 2024, **NO_DECORATIONS)

        assert exc_info.value.producer == "base"
        assert exc_info.value.dimensions.year_count == 1
        assert isinstance(exc_info.value.__cause__, DegenerateGeometry)
        assert "base" in str(exc_info.value)

    def test_columns_failure_aborts(self, small_year, monkeypatch):
        def broken_columns(years, shared_max, log=None):
            raise InvalidDimensions("bad lattice")

        monkeypatch.setattr(model_generator, "create_columns_for_years", broken_columns)

        with pytest.raises(ProducerFailed) as exc_info:
            generate_model_geometry([small_year], "octocat", 2024, 2024, **NO_DECORATIONS)
        assert exc_info.value.producer == "columns"

    def test_optional_failures_degrade(self, small_year, failing_font_loader,
                                       missing_emblem, caplog):
        with caplog.at_level(logging.WARNING):
            result = generate_model_geometry(
                [small_year], "octocat", 2024, 2024,
                font_loader=failing_font_loader,
                emblem_path=missing_emblem,
            )

        assert result.mesh.triangle_count() == 12 + 6 * 12
        assert result.producers["text"].status is ProducerStatus.WARN
        assert result.producers["emblem"].status is ProducerStatus.WARN
        assert len(result.warnings) == 2
        assert result.warnings[0].startswith("text:")
        assert result.warnings[1].startswith("emblem:")
        assert "degraded" in caplog.text

    def test_explicit_logger_receives_warnings(self, small_year, missing_emblem, caplog):
        run_logger = logging.getLogger("skyline3d.test.run")
        with caplog.at_level(logging.WARNING, logger="skyline3d.test.run"):
            generate_model_geometry(
                [small_year], "octocat", 2024, 2024,
                include_text=False,
                emblem_path=missing_emblem,
                log=run_logger,
            )
        assert any(r.name == "skyline3d.test.run" for r in caplog.records)

    def test_empty_years_invalid_dimensions(self):
        with pytest.raises(InvalidDimensions):
            generate_model_geometry([], "octocat", 2024, 2024)


class TestGenerateStl:
    def test_single_year_file(self, single_day_year, tmp_path):
        out = tmp_path / "octocat-2024"
        result = generate_stl(single_day_year, str(out), "octocat", 2024, **NO_DECORATIONS)

        assert result.export.filepath == str(out) + ".stl"
        assert result.export.total_triangles == 24
        assert os.path.getsize(result.export.filepath) == expected_file_size(24)

    def test_degraded_run_still_writes(self, small_year, tmp_path,
                                       failing_font_loader, missing_emblem):
        out = tmp_path / "degraded.stl"
        result = generate_stl(
            small_year, str(out), "octocat", 2024,
            font_loader=failing_font_loader,
            emblem_path=missing_emblem,
        )
        assert out.exists()
        assert len(result.warnings) == 2
        assert os.path.getsize(out) == expected_file_size(84)

    def test_failed_run_writes_nothing(self, small_year, tmp_path, monkeypatch):
        def broken_base(width, depth):
            raise DegenerateGeometry("zero-area triangle")

        monkeypatch.setattr(model_generator, "create_cuboid_base", broken_base)
        out = tmp_path / "failed.stl"

        with pytest.raises(ProducerFailed):
            generate_stl(small_year, str(out), "octocat", 2024, **NO_DECORATIONS)
        assert not out.exists()

    def test_range_is_deterministic(self, small_year, single_day_year, tmp_path):
        years = [single_day_year, small_year]
        first = tmp_path / "a.stl"
        second = tmp_path / "b.stl"

        generate_stl_range(years, str(first), "octocat", 2023, 2024)
        generate_stl_range(years, str(second), "octocat", 2023, 2024)

        assert first.read_bytes() == second.read_bytes()

    def test_reversed_range_rejected(self, small_year, tmp_path):
        with pytest.raises(InvalidInput):
            generate_stl_range([small_year], str(tmp_path / "x.stl"), "octocat", 2024, 2023)

    def test_invalid_input_writes_nothing(self, tmp_path):
        out = tmp_path / "empty.stl"
        with pytest.raises(InvalidInput):
            generate_stl_range([], str(out), "octocat", 2024, 2024)
        assert not out.exists()

    @pytest.mark.parametrize("year", [[[]], [[], []]])
    def test_year_without_days_writes_nothing(self, year, tmp_path):
        out = tmp_path / "no-days.stl"
        with pytest.raises(InvalidInput):
            generate_stl_range([year], str(out), "octocat", 2024, 2024, **NO_DECORATIONS)
        assert not out.exists()
