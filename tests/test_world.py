"""Tests for latticecraft.world — coordinates, field, overrides, world state."""

import pytest

from latticecraft.world.coords import (
    CellCoord,
    GeoPoint,
    cell_bounds,
    chebyshev,
    latlng_to_cell,
)
from latticecraft.world.field import DeterministicField
from latticecraft.world.overrides import OverrideStore, StateLoadError, is_valid_content
from latticecraft.world.state import WorldState


class TestCellCoord:
    """Tests for the CellCoord key and distance helpers."""

    def test_equality_by_components(self) -> None:
        assert CellCoord(3, -2) == CellCoord(3, -2)
        assert CellCoord(3, -2) != CellCoord(-2, 3)
        assert len({CellCoord(1, 2), CellCoord(1, 2)}) == 1

    def test_key_format(self) -> None:
        assert CellCoord(-12, 7).key == "-12,7"

    def test_keys_do_not_collide(self) -> None:
        # "1,23" vs "12,3" must stay distinct.
        assert CellCoord(1, 23).key != CellCoord(12, 3).key

    def test_chebyshev(self) -> None:
        assert chebyshev(CellCoord(0, 0), CellCoord(3, -5)) == 5
        assert chebyshev(CellCoord(2, 2), CellCoord(2, 2)) == 0


class TestGeoConversion:
    """Tests for lat/lng <-> cell conversion."""

    def test_latlng_to_cell(self) -> None:
        origin = GeoPoint(lat=0.0, lng=0.0)
        assert latlng_to_cell(GeoPoint(1.25, 0.75), origin, 0.5) == CellCoord(2, 1)

    def test_negative_positions_floor(self) -> None:
        origin = GeoPoint(lat=0.0, lng=0.0)
        assert latlng_to_cell(GeoPoint(-0.25, -1.0), origin, 0.5) == CellCoord(-1, -2)

    def test_cell_bounds(self) -> None:
        origin = GeoPoint(lat=10.0, lng=20.0)
        south_west, north_east = cell_bounds(CellCoord(2, -1), origin, 0.5)
        assert south_west == GeoPoint(lat=11.0, lng=19.5)
        assert north_east == GeoPoint(lat=11.5, lng=20.0)


class TestDeterministicField:
    """Tests for the pure key -> [0, 1) function."""

    def test_known_draw_is_pinned(self) -> None:
        # First 53 bits of sha256("0,0").
        assert DeterministicField().value("0,0") == 4053419451299122 / 2**53

    def test_known_cell_content_is_pinned(self) -> None:
        field = DeterministicField()
        # Presence draw is ~0.45; the value draw is >= 0.5.
        assert field.natural_content(CellCoord(0, 0), 0.3) is None
        assert field.natural_content(CellCoord(0, 0), 0.5) == 2

    def test_same_key_same_value(self) -> None:
        assert DeterministicField().value("4,2") == DeterministicField().value("4,2")

    def test_values_in_unit_interval(self) -> None:
        field = DeterministicField()
        for i in range(50):
            v = field.value(f"{i},{-i}")
            assert 0.0 <= v < 1.0

    def test_different_keys_differ(self) -> None:
        field = DeterministicField()
        assert field.value("0,0") != field.value("0,1")

    def test_seed_changes_world(self) -> None:
        assert DeterministicField(seed=1).value("0,0") != DeterministicField(seed=2).value("0,0")

    def test_spawn_rate_matches_probability(self) -> None:
        field = DeterministicField()
        cells = [CellCoord(i, j) for i in range(-20, 20) for j in range(-20, 20)]
        contents = [field.natural_content(c, 0.3) for c in cells]
        spawned = [c for c in contents if c is not None]
        assert 0.24 < len(spawned) / len(cells) < 0.36
        assert set(spawned) == {1, 2}

    def test_probability_bounds(self) -> None:
        field = DeterministicField()
        cells = [CellCoord(i, 0) for i in range(30)]
        assert all(field.natural_content(c, 0.0) is None for c in cells)
        assert all(field.natural_content(c, 1.0) in (1, 2) for c in cells)


class TestOverrideStore:
    """Tests for the sparse override record."""

    def test_untouched_cell_not_overridden(self) -> None:
        store = OverrideStore()
        assert not store.is_overridden(CellCoord(0, 0))
        with pytest.raises(KeyError):
            store.get(CellCoord(0, 0))

    def test_set_records_none(self) -> None:
        store = OverrideStore()
        store.set(CellCoord(1, 1), None)
        assert store.is_overridden(CellCoord(1, 1))
        assert store.get(CellCoord(1, 1)) is None

    def test_set_is_idempotent(self) -> None:
        store = OverrideStore()
        store.set(CellCoord(1, 1), 4)
        store.set(CellCoord(1, 1), 4)
        assert len(store) == 1
        assert store.get(CellCoord(1, 1)) == 4

    def test_serialize_contains_only_overrides(self) -> None:
        store = OverrideStore()
        store.set(CellCoord(2, 0), None)
        store.set(CellCoord(-1, 5), 8)
        assert store.serialize() == [(CellCoord(-1, 5), 8), (CellCoord(2, 0), None)]

    def test_deserialize_replaces_contents(self) -> None:
        store = OverrideStore()
        store.set(CellCoord(9, 9), 2)
        store.deserialize([(CellCoord(0, 1), 16)])
        assert not store.is_overridden(CellCoord(9, 9))
        assert store.get(CellCoord(0, 1)) == 16

    @pytest.mark.parametrize(
        "entries",
        [
            [(CellCoord(0, 0), 3)],
            [(CellCoord(0, 0), 0)],
            [("0,0", 2)],
            [(CellCoord(0, 0),)],
        ],
    )
    def test_deserialize_rejects_bad_entries(self, entries: list) -> None:
        store = OverrideStore()
        store.set(CellCoord(5, 5), 2)
        with pytest.raises(StateLoadError):
            store.deserialize(entries)
        assert store.serialize() == [(CellCoord(5, 5), 2)]

    def test_valid_content(self) -> None:
        assert is_valid_content(None)
        assert is_valid_content(1)
        assert is_valid_content(1024)
        assert not is_valid_content(6)
        assert not is_valid_content(-2)
        assert not is_valid_content(True)
        assert not is_valid_content(2.0)


class TestWorldState:
    """Tests for the resolve/mutate facade."""

    def test_resolve_untouched_uses_field(self, fixed_world: WorldState) -> None:
        assert fixed_world.resolve(CellCoord(2, 2)) == 1
        assert fixed_world.resolve(CellCoord(5, 5)) is None
        assert fixed_world.override_count == 0

    def test_resolve_is_stable(self) -> None:
        world = WorldState(source=DeterministicField(seed=7))
        cells = [CellCoord(i, j) for i in range(-5, 5) for j in range(-5, 5)]
        first = [world.resolve(c) for c in cells]
        second = [world.resolve(c) for c in cells]
        assert first == second
        assert world.override_count == 0

    def test_mutate_overrides_field(self, fixed_world: WorldState) -> None:
        fixed_world.mutate(CellCoord(2, 2), None)
        assert fixed_world.resolve(CellCoord(2, 2)) is None
        assert fixed_world.is_modified(CellCoord(2, 2))

    def test_override_stays_pinned_when_equal_to_natural(
        self,
        fixed_world: WorldState,
    ) -> None:
        fixed_world.mutate(CellCoord(2, 2), None)
        fixed_world.mutate(CellCoord(2, 2), 1)
        assert fixed_world.is_modified(CellCoord(2, 2))
        assert fixed_world.export_overrides() == [(CellCoord(2, 2), 1)]

    def test_mutate_rejects_non_tokens(self, fixed_world: WorldState) -> None:
        with pytest.raises(ValueError):
            fixed_world.mutate(CellCoord(0, 0), 3)
        assert fixed_world.override_count == 0
