"""
Tests for shape construction and the workspace shape table
"""
import numpy as np
import pytest

from paper3d import Workspace
from paper3d.exceptions import GeometryError
from paper3d.geometry import triangulate
from paper3d.schema.project import OutlineGeometry, ShapeEntry, Transform, TriangleGeometry


def triangle_area_sum(points, triangles):
    pts = np.asarray(points, dtype=float)
    total = 0.0
    for a, b, c in triangles:
        ab = pts[b] - pts[a]
        ac = pts[c] - pts[a]
        total += abs(ab[0] * ac[1] - ab[1] * ac[0]) / 2
    return total


L_SHAPE = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]


class TestTriangulate:

    def test_convex(self):
        square = [(0, 0), (1, 0), (1, 1), (0, 1)]
        tris = triangulate(np.array(square))
        assert len(tris) == 2
        assert triangle_area_sum(square, tris) == pytest.approx(1.0)

    def test_concave(self):
        tris = triangulate(np.array(L_SHAPE))
        assert len(tris) == 4
        assert triangle_area_sum(L_SHAPE, tris) == pytest.approx(3.0)

    def test_clockwise(self):
        clockwise = list(reversed(L_SHAPE))
        tris = triangulate(np.array(clockwise))
        assert len(tris) == 4
        assert triangle_area_sum(clockwise, tris) == pytest.approx(3.0)

    def test_too_few_points(self):
        assert triangulate(np.array([(0, 0), (1, 0)])) == []


class TestOutlineShape:

    def test_bbox_and_island(self):
        ws = Workspace()
        shape = ws.add_outline([(0, 0, 0), (2, 0, 0), (2, 0, 1), (0, 0, 1)])

        assert shape.kind == 'outline'
        assert (shape.bbox.min_x, shape.bbox.min_y, shape.bbox.width, shape.bbox.height) == (0, 0, 2, 1)
        assert (shape.island.x, shape.island.y, shape.island.width, shape.island.height) == (8, 8, 64, 32)

    def test_laid_flat_and_centered(self):
        ws = Workspace()
        points = [(0, 0, 0), (2, 0, 0), (2, 0, 1), (0, 0, 1)]
        shape = ws.add_outline(points)

        assert shape.transform.position == pytest.approx((1.0, 0.05, 0.5))
        assert np.allclose(shape.positions[:, 1], 0.0)
        expected = np.array([(x, 0.05, z) for x, _, z in points])
        assert np.allclose(shape.world_vertices(), expected)

    def test_uv_outline_is_normalized(self):
        ws = Workspace()
        shape = ws.add_outline([(0, 0, 0), (2, 0, 0), (2, 0, 1), (0, 0, 1)])
        assert [(p.u, p.v) for p in shape.uv_outline] == [(1, 0), (0, 0), (0, 1), (1, 1)]

    def test_concave_outline(self):
        ws = Workspace()
        shape = ws.add_outline([(x, 0, z) for x, z in L_SHAPE])
        assert len(shape.triangles) == 4
        assert shape.uvs.shape == (6, 2)

    def test_zero_extent_rejected(self):
        ws = Workspace()
        with pytest.raises(GeometryError):
            ws.add_outline([(0, 0, 0), (1, 0, 0), (2, 0, 0)])
        assert len(ws) == 0

    def test_too_few_points_rejected(self):
        ws = Workspace()
        with pytest.raises(GeometryError):
            ws.add_outline([(0, 0, 0), (1, 0, 1)])
        assert len(ws) == 0

    def test_malformed_point_rejected(self):
        with pytest.raises(GeometryError):
            Workspace().add_outline([(0, 0), (1, 0, 0), (1, 0, 1)])


class TestTriangleShape:

    def test_world_vertices_match_points(self):
        ws = Workspace()
        points = [(0, 0, 0), (2, 0, 0), (0, 0, 2)]
        shape = ws.add_triangle(*points)

        assert shape.kind == 'triangle'
        assert shape.transform.position == pytest.approx((2 / 3, 0, 2 / 3))
        assert np.allclose(shape.positions[:, 2], 0.0)
        assert np.allclose(shape.world_vertices(), np.array(points, dtype=float))

    def test_tilted_triangle(self):
        ws = Workspace()
        points = [(1, 2, 3), (4, 0, 1), (2, 5, -1)]
        shape = ws.add_triangle(*points)
        assert np.allclose(shape.world_vertices(), np.array(points, dtype=float))
        assert shape.uvs.shape == (3, 2)
        assert np.all((shape.uvs >= 0) & (shape.uvs <= 1))

    def test_collinear_rejected(self):
        ws = Workspace()
        with pytest.raises(GeometryError):
            ws.add_triangle((0, 0, 0), (1, 1, 1), (2, 2, 2))


class TestWorkspace:

    def test_islands_do_not_collide(self):
        ws = Workspace()
        a = ws.add_outline([(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)])
        b = ws.add_outline([(3, 0, 0), (4, 0, 0), (4, 0, 1), (3, 0, 1)])
        assert (a.island.x, a.island.y) == (8, 8)
        assert (b.island.x, b.island.y) == (48, 8)

    def test_remove_frees_island(self):
        ws = Workspace()
        a = ws.add_outline([(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)])
        ws.remove(a.id)
        assert a.id not in ws
        b = ws.add_outline([(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)])
        assert (b.island.x, b.island.y) == (8, 8)

    def test_remove_unknown(self):
        assert Workspace().remove("missing") is None

    def test_duplicate(self):
        ws = Workspace()
        a = ws.add_triangle((0, 0, 0), (2, 0, 0), (0, 0, 2))
        a.transform = a.transform.model_copy(update={'scale': (2.0, 2.0, 2.0)})

        clone = ws.duplicate(a.id)

        assert clone.id != a.id
        assert clone.geometry == a.geometry
        assert clone.island != a.island
        assert clone.transform.position == pytest.approx(tuple(c + 1 for c in a.transform.position))
        assert clone.transform.scale == (2.0, 2.0, 2.0)
        assert len(ws) == 2


class TestSchema:

    def test_legacy_kinds(self):
        entry = ShapeEntry.model_validate({
            'geometryConfig': {'type': 'cardboard', 'points': [{'x': 0, 'y': 0, 'z': 0}] * 3},
        })
        assert isinstance(entry.geometry, OutlineGeometry)

        entry = ShapeEntry.model_validate({
            'geometryConfig': {'type': 'fill', 'points': [[0, 0, 0], [1, 0, 0], [0, 0, 1]]},
        })
        assert isinstance(entry.geometry, TriangleGeometry)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            ShapeEntry.model_validate({'geometryConfig': {'type': 'circle', 'points': []}})

    def test_legacy_euler_rotation(self):
        assert Transform(rotation=[0, 0, 0, 'XYZ']).rotation == pytest.approx((1, 0, 0, 0))
        quat = Transform(rotation=[np.pi / 2, 0, 0, 'XYZ']).rotation
        assert quat == pytest.approx((np.sqrt(0.5), np.sqrt(0.5), 0, 0))
