"""Tests for the binary STL writer, reader and validator."""

import struct

import pytest

from skyline3d.errors import InvalidInput
from skyline3d.generators.primitives import make_box
from skyline3d.io.stl_exporter import (
    build_header,
    ensure_extension,
    expected_file_size,
    export_stl,
    output_filename,
    read_stl,
    validate_stl_file,
)
from skyline3d.models.geometry import Point3D, to_float32
from skyline3d.models.mesh import FrozenMeshError, Mesh


@pytest.fixture
def box_mesh():
    """A single box with coordinates that are not exact in float32."""
    return Mesh(triangles=make_box(Point3D(0.1, 0.2, 0.3), 1.1, 2.2, 3.3), name="box")


class TestFileNames:
    @pytest.mark.parametrize("path,expected", [
        ("model", "model.stl"),
        ("model.stl", "model.stl"),
        ("model.STL", "model.STL"),
        ("dir/model.obj", "dir/model.obj.stl"),
    ])
    def test_ensure_extension(self, path, expected):
        assert ensure_extension(path) == expected

    def test_ensure_extension_empty(self):
        with pytest.raises(InvalidInput):
            ensure_extension("")

    def test_single_year_name(self):
        assert output_filename("octocat", 2024, 2024) == "octocat-2024.stl"

    def test_range_name(self):
        assert output_filename("octocat", 2014, 2024) == "octocat-14-24.stl"

    def test_range_name_across_century(self):
        assert output_filename("octocat", 1999, 2005) == "octocat-99-05.stl"


class TestHeader:
    def test_default_is_zero_filled(self):
        assert build_header() == bytes(80)

    def test_text_is_padded(self):
        header = build_header("hello")
        assert len(header) == 80
        assert header.startswith(b"hello\0")

    def test_long_text_is_truncated(self):
        assert build_header("x" * 100) == b"x" * 80

    def test_non_ascii_replaced(self):
        assert build_header("café")[:4] == b"caf?"


class TestExport:
    def test_file_size(self, box_mesh, tmp_path):
        stats = export_stl(box_mesh, str(tmp_path / "box.stl"))
        assert stats.total_triangles == 12
        assert stats.file_size_bytes == 84 + 50 * 12 == expected_file_size(12)

    def test_layout(self, box_mesh, tmp_path):
        path = tmp_path / "box.stl"
        export_stl(box_mesh, str(path))
        data = path.read_bytes()

        assert data[:80] == bytes(80)
        assert struct.unpack_from("<I", data, 80)[0] == 12

        # Attribute byte count of every record is zero
        for i in range(12):
            offset = 84 + 50 * i
            assert struct.unpack_from("<H", data, offset + 48)[0] == 0

    def test_values_rounded_to_float32(self, box_mesh, tmp_path):
        path = tmp_path / "box.stl"
        export_stl(box_mesh, str(path))
        _, triangles = read_stl(path)

        for source, written in zip(box_mesh, triangles):
            for src_point, out_point in zip(
                (source.normal,) + source.vertices,
                (written.normal, written.v1, written.v2, written.v3),
            ):
                assert out_point.x == to_float32(src_point.x)
                assert out_point.y == to_float32(src_point.y)
                assert out_point.z == to_float32(src_point.z)
                assert out_point.x == pytest.approx(src_point.x, rel=1e-6)

    def test_custom_header(self, box_mesh, tmp_path):
        path = tmp_path / "box.stl"
        export_stl(box_mesh, str(path), header="skyline test")
        header, _ = read_stl(path)
        assert header.rstrip(b"\0") == b"skyline test"

    def test_empty_mesh(self, tmp_path):
        path = tmp_path / "empty.stl"
        stats = export_stl(Mesh(), str(path))
        assert stats.file_size_bytes == 84
        assert read_stl(path)[1] == []

    def test_extension_and_directories(self, box_mesh, tmp_path):
        stats = export_stl(box_mesh, str(tmp_path / "nested" / "dir" / "box"))
        assert stats.filepath.endswith("box.stl")
        assert (tmp_path / "nested" / "dir" / "box.stl").exists()

    def test_mesh_frozen_after_export(self, box_mesh, tmp_path):
        export_stl(box_mesh, str(tmp_path / "box.stl"))
        with pytest.raises(FrozenMeshError):
            box_mesh.extend(make_box(Point3D(0, 0, 0), 1, 1, 1))


class TestReadAndValidate:
    def test_truncated_file(self, box_mesh, tmp_path):
        path = tmp_path / "box.stl"
        export_stl(box_mesh, str(path))
        path.write_bytes(path.read_bytes()[:-10])

        with pytest.raises(ValueError):
            read_stl(path)
        assert any("does not match" in e for e in validate_stl_file(str(path)))

    def test_trailing_data(self, box_mesh, tmp_path):
        path = tmp_path / "box.stl"
        export_stl(box_mesh, str(path))
        path.write_bytes(path.read_bytes() + b"\0")

        with pytest.raises(ValueError):
            read_stl(path)

    def test_valid_file(self, box_mesh, tmp_path):
        path = tmp_path / "box.stl"
        export_stl(box_mesh, str(path))
        assert validate_stl_file(str(path)) == []

    def test_missing_file(self, tmp_path):
        errors = validate_stl_file(str(tmp_path / "nope.stl"))
        assert errors and "does not exist" in errors[0]

    def test_header_only_file(self, tmp_path):
        path = tmp_path / "short.stl"
        path.write_bytes(bytes(40))
        assert "smaller than an STL header" in validate_stl_file(str(path))[0]
