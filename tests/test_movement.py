"""Tests for latticecraft.movement — sources and switching."""

import threading
from pathlib import Path

import pytest

from latticecraft.movement.sources import (
    Direction,
    GeolocationMovementSource,
    MovementController,
    StepMovementSource,
    read_track,
)
from latticecraft.world.coords import CellCoord, GeoPoint

_ORIGIN = GeoPoint(lat=0.0, lng=0.0)


class TestStepMovement:
    """Tests for the direction-driven source."""

    def test_step_emits_new_position(self) -> None:
        seen: list[CellCoord] = []
        source = StepMovementSource()
        source.start_tracking(seen.append)
        source.step(Direction.NORTH)
        source.step(Direction.EAST)
        assert seen == [CellCoord(1, 0), CellCoord(1, 1)]
        assert source.get_current_position() == CellCoord(1, 1)

    def test_no_events_after_stop(self) -> None:
        seen: list[CellCoord] = []
        source = StepMovementSource(start=CellCoord(5, 5))
        source.start_tracking(seen.append)
        source.stop_tracking()
        source.step(Direction.SOUTH)
        assert seen == []
        assert source.get_current_position() == CellCoord(4, 5)


class TestGeolocationMovement:
    """Tests for the external-fix source."""

    def test_fix_converted_to_cell(self) -> None:
        seen: list[CellCoord] = []
        source = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=0.5)
        source.start_tracking(seen.append)
        assert source.push_fix(GeoPoint(1.25, -0.25)) == CellCoord(2, -1)
        assert seen == [CellCoord(2, -1)]
        assert source.get_current_position() == CellCoord(2, -1)

    def test_stop_before_any_fix(self) -> None:
        source = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=0.5)
        source.stop_tracking()
        assert not source.is_tracking

    def test_fixes_ignored_when_not_tracking(self) -> None:
        seen: list[CellCoord] = []
        source = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=0.5)
        source.start_tracking(seen.append)
        source.stop_tracking()
        assert source.push_fix(GeoPoint(3.0, 3.0)) is None
        assert seen == []
        assert source.get_current_position() == CellCoord(0, 0)

    def test_replay_counts_accepted_fixes(self) -> None:
        seen: list[CellCoord] = []
        source = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=1.0)
        source.start_tracking(seen.append)
        accepted = source.replay([GeoPoint(0.5, 0.5), GeoPoint(1.5, 0.5), GeoPoint(1.5, 2.5)])
        assert accepted == 3
        assert seen == [CellCoord(0, 0), CellCoord(1, 0), CellCoord(1, 2)]

    def test_fixes_from_another_thread(self) -> None:
        seen: list[CellCoord] = []
        source = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=1.0)
        source.start_tracking(seen.append)
        worker = threading.Thread(
            target=source.replay,
            args=([GeoPoint(float(k), 0.5) for k in range(20)],),
        )
        worker.start()
        worker.join()
        source.stop_tracking()
        source.push_fix(GeoPoint(99.0, 0.5))
        assert seen == [CellCoord(k, 0) for k in range(20)]


class TestMovementController:
    """Tests for switching between sources."""

    def test_switch_preserves_position(self) -> None:
        seen: list[CellCoord] = []
        step = StepMovementSource()
        controller = MovementController(step, seen.append)
        step.step(Direction.EAST)
        step.step(Direction.EAST)

        geo = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=1.0)
        controller.switch_to(geo)
        assert controller.position == CellCoord(0, 2)
        assert geo.is_tracking

    def test_switch_stops_previous_source(self) -> None:
        seen: list[CellCoord] = []
        step = StepMovementSource()
        controller = MovementController(step, seen.append)
        geo = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=1.0)
        controller.switch_to(geo)

        step.step(Direction.NORTH)
        assert seen == []
        geo.push_fix(GeoPoint(4.5, 4.5))
        assert seen == [CellCoord(4, 4)]

    def test_switch_back_carries_position(self) -> None:
        step = StepMovementSource()
        controller = MovementController(step, lambda coord: None)
        geo = GeolocationMovementSource(origin=_ORIGIN, tile_degrees=1.0)
        controller.switch_to(geo)
        geo.push_fix(GeoPoint(-2.5, 7.5))
        controller.switch_to(step)
        assert not geo.is_tracking
        assert step.get_current_position() == CellCoord(-3, 7)

    def test_teleport_notifies(self) -> None:
        seen: list[CellCoord] = []
        controller = MovementController(StepMovementSource(), seen.append)
        controller.teleport(CellCoord(9, -9))
        assert controller.position == CellCoord(9, -9)
        assert seen == [CellCoord(9, -9)]


class TestReadTrack:
    """Tests for loading recorded fixes."""

    def test_read_track(self, tmp_path: Path) -> None:
        track = tmp_path / "walk.csv"
        track.write_text("# lat,lng\n36.9979,-122.0570\n\n36.9980,-122.0571\n")
        points = read_track(track)
        assert points == [GeoPoint(36.9979, -122.0570), GeoPoint(36.9980, -122.0571)]

    def test_read_track_rejects_bad_rows(self, tmp_path: Path) -> None:
        track = tmp_path / "bad.csv"
        track.write_text("1.0,2.0,3.0\n")
        with pytest.raises(ValueError):
            read_track(track)
