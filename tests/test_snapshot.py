"""
Tests for snapshot capture/restore and undo/redo history
"""
import json

import numpy as np
import pytest
from pydantic import ValidationError

from paper3d import Workspace
from paper3d.exceptions import SnapshotError
from paper3d.history import History, capture, parse_snapshot, restore
from paper3d.schema.project import Island, UVPoint

SQUARE = [(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)]
RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def outline_entry(points, **extra):
    entry = {'geometryConfig': {'type': 'outline', 'points': [list(p) for p in points]}}
    entry.update(extra)
    return entry


@pytest.fixture
def ws():
    workspace = Workspace()
    workspace.add_outline([(0, 0, 0), (2, 0, 0), (2, 0, 1), (1, 0, 2), (0, 0, 1)])
    workspace.add_triangle((1, 2, 3), (4, 0, 1), (2, 5, -1))
    workspace.raster.write_rect(10, 10, 20, 5, RED)
    return workspace


class TestRoundTrip:

    def test_restore_into_fresh_workspace(self, ws):
        snapshot = capture(ws)
        other = restore(Workspace(), snapshot)

        assert len(other) == len(ws)
        for original, restored in zip(ws, other):
            assert restored.id == original.id
            assert restored.kind == original.kind
            assert restored.island == original.island
            assert restored.transform == original.transform
            assert restored.uv_outline == original.uv_outline
            assert np.allclose(restored.uvs, original.uvs)
            assert np.allclose(restored.world_vertices(), original.world_vertices())
        assert np.array_equal(other.raster.to_array(), ws.raster.to_array())

    def test_moved_island_survives(self, ws):
        shape = next(iter(ws))
        shape.island = shape.island.moved_to(304, 208)
        other = restore(Workspace(), capture(ws))
        assert other.get(shape.id).island == Island(x=304, y=208, width=shape.island.width, height=shape.island.height)

    def test_json_payload(self, ws):
        payload = json.loads(json.dumps(capture(ws).to_payload()))

        assert set(payload) == {'objects', 'atlasData'}
        entry = payload['objects'][0]
        assert {'id', 'transform', 'geometryConfig', 'uvBounds', 'uvShape', 'snapPoints'} <= set(entry)
        assert payload['atlasData'].startswith('data:image/png;base64,')

        other = restore(Workspace(), payload)
        assert [s.id for s in other] == [s.id for s in ws]
        assert np.array_equal(other.raster.to_array(), ws.raster.to_array())


class TestImmutability:

    def test_snapshot_is_frozen(self, ws):
        snapshot = capture(ws)
        with pytest.raises(ValidationError):
            snapshot.shapes[0].island.x = 100
        with pytest.raises(ValidationError):
            snapshot.raster = None

    def test_later_edits_do_not_leak(self, ws):
        snapshot = capture(ws)
        shape = next(iter(ws))
        before = snapshot.shapes[0].island

        shape.island = shape.island.moved_to(400, 400)
        ws.raster.clear()

        assert snapshot.shapes[0].island == before
        restore(ws, snapshot)
        assert ws.get(shape.id).island == before
        assert ws.raster.read_pixel(12, 12) == RED

    def test_live_transform_edits_do_not_leak(self, ws):
        snapshot = capture(ws)
        shape = next(iter(ws))
        before = snapshot.shapes[0].transform

        with pytest.raises(TypeError):
            shape.transform.position[0] = 99.0
        with pytest.raises(TypeError):
            shape.transform.scale[1] = 2.0
        shape.transform = shape.transform.model_copy(update={'position': (99.0, 0.0, 0.0)})

        assert snapshot.shapes[0].transform == before
        assert snapshot.shapes[0].transform.position == pytest.approx((1.0, 0.05, 1.0))
        restore(ws, snapshot)
        assert ws.get(shape.id).transform == before


class TestCompatibility:

    def test_bare_list_with_legacy_fields(self):
        ws = Workspace()
        ws.raster.write_rect(0, 0, 4, 4, RED)
        legacy = [{
            'geometryConfig': {'type': 'cardboard', 'points': [list(p) for p in SQUARE]},
            'transform': {'position': [1, 2, 3], 'rotation': [0, 0, 0, 'XYZ'], 'scale': [1, 1, 1]},
        }]

        restore(ws, legacy)

        shape = next(iter(ws))
        assert shape.kind == 'outline'
        assert shape.transform.position == (1, 2, 3)
        assert shape.transform.rotation == pytest.approx((1, 0, 0, 0))
        assert (shape.island.x, shape.island.y) == (8, 8)
        # No atlas in the file: the raster is left as it was
        assert ws.raster.read_pixel(0, 0) == RED

    def test_missing_islands_are_allocated(self):
        ws = restore(Workspace(), {'objects': [
            outline_entry(SQUARE),
            outline_entry([(x + 5, y, z) for x, y, z in SQUARE]),
        ]})
        assert [(s.island.x, s.island.y) for s in ws] == [(8, 8), (48, 8)]

    def test_missing_transform_keeps_layout(self):
        ws = restore(Workspace(), [outline_entry(SQUARE)])
        assert next(iter(ws)).transform.position == pytest.approx((0.5, 0.05, 0.5))

    def test_stored_uv_outline_is_kept(self):
        stored = [{'u': 0.5, 'v': 0.5}, {'u': 1.0, 'v': 0.0}, {'u': 0.0, 'v': 1.0}]
        ws = restore(Workspace(), [outline_entry(SQUARE, uvShape=stored)])
        assert next(iter(ws)).uv_outline == [UVPoint(**p) for p in stored]

    def test_duplicate_ids_regenerated(self):
        ws = restore(Workspace(), [
            outline_entry(SQUARE, id='panel'),
            outline_entry(SQUARE, id='panel'),
        ])
        ids = [s.id for s in ws]
        assert len(ws) == 2
        assert ids[0] == 'panel'
        assert ids[1] != 'panel'


class TestFailures:

    @pytest.mark.parametrize("data", [
        {'objects': [{'geometryConfig': {'type': 'circle', 'points': []}}]},
        {'objects': [{'transform': {}}]},
        {'objects': 'nope'},
        42,
    ])
    def test_malformed_rejected(self, data):
        with pytest.raises(SnapshotError):
            parse_snapshot(data)

    def test_corrupt_raster_leaves_workspace(self, ws):
        ids = [s.id for s in ws]
        before = ws.raster.to_array()

        with pytest.raises(SnapshotError):
            restore(ws, {'objects': [], 'atlasData': 'data:image/png;base64,AAAA'})

        assert [s.id for s in ws] == ids
        assert np.array_equal(ws.raster.to_array(), before)

    def test_bad_geometry_leaves_workspace(self, ws):
        ids = [s.id for s in ws]
        flat = [(0, 0, 0), (1, 0, 0), (2, 0, 0)]

        with pytest.raises(SnapshotError):
            restore(ws, [outline_entry(SQUARE), outline_entry(flat)])

        assert [s.id for s in ws] == ids


class TestHistory:

    def test_undo_redo(self):
        ws = Workspace()
        history = History()
        history.record(ws)
        first = ws.add_outline(SQUARE)
        history.record(ws)
        ws.add_triangle((0, 0, 0), (2, 0, 0), (0, 0, 2))
        history.record(ws)

        assert history.undo(ws)
        assert [s.id for s in ws] == [first.id]
        assert history.undo(ws)
        assert len(ws) == 0
        assert not history.can_undo()
        assert not history.undo(ws)

        assert history.redo(ws)
        assert [s.id for s in ws] == [first.id]

    def test_undo_restores_paint(self):
        ws = Workspace()
        history = History()
        history.record(ws)
        ws.raster.write_rect(0, 0, 8, 8, RED)
        history.record(ws)

        history.undo(ws)
        assert ws.raster.read_pixel(0, 0) == WHITE
        history.redo(ws)
        assert ws.raster.read_pixel(0, 0) == RED

    def test_record_discards_redo_branch(self):
        ws = Workspace()
        history = History()
        history.record(ws)
        ws.add_outline(SQUARE)
        history.record(ws)

        history.undo(ws)
        ws.add_triangle((0, 0, 0), (2, 0, 0), (0, 0, 2))
        history.record(ws)

        assert len(history) == 2
        assert not history.can_redo()
        assert not history.redo(ws)

    def test_trims_oldest(self):
        ws = Workspace()
        history = History(max_history=3)
        for _ in range(6):
            ws.add_outline(SQUARE)
            history.record(ws)

        assert len(history) == 4
        assert history.index == 3
        for _ in range(3):
            assert history.undo(ws)
        assert not history.can_undo()
        assert len(ws) == 3

    def test_clear(self):
        ws = Workspace()
        history = History()
        history.record(ws)
        history.clear()
        assert len(history) == 0
        assert history.current is None
