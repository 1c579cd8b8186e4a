import pytest

from core.events.topics import OverlayTopic
from modules.cover.system import SimpleCoverModel
from modules.los.results import NOT_VISIBLE, LOSMode, OverlayDirection
from modules.los.system import LineOfSightSystem
from modules.maps.components import BattleGrid
from modules.maps.terrain_types import OBJECT_CATALOG, FillCategory, ObjectCategory, OccludingObject
from tests.helpers.events import RecordingBus

WALL = OBJECT_CATALOG["wall"]
SANDBAGS = OBJECT_CATALOG["sandbags"]


@pytest.fixture
def los(open_grid, simple_model):
    return LineOfSightSystem(open_grid, simple_model)


def test_open_map_everything_visible_without_cover(los):
    results = los.scan((0, 0), LOSMode.STATIC, 30)
    assert len(results) == 99
    assert (0, 0) not in results
    assert all(result.visible and result.cover_value == 0.0 for result in results.values())


def test_off_mode_returns_nothing(los):
    assert los.scan((0, 0), LOSMode.OFF, 30) == {}


@pytest.mark.parametrize("range_", [0, -3])
def test_non_positive_range_returns_nothing(los, range_):
    assert los.scan((5, 5), LOSMode.STATIC, range_) == {}


def test_observer_off_map_returns_nothing(los):
    assert los.scan((-1, -1), LOSMode.STATIC, 30) == {}
    assert los.scan((10, 3), LOSMode.LEANING, 30) == {}


def test_footprint_is_circular(los):
    results = los.scan((5, 5), LOSMode.STATIC, 2)
    assert len(results) == 12
    assert (5, 7) in results
    assert (7, 5) in results
    assert (6, 6) in results
    assert (7, 7) not in results
    assert (6, 7) not in results


def test_footprint_is_clipped_to_the_map(los):
    results = los.scan((0, 0), LOSMode.STATIC, 2)
    assert set(results) == {(1, 0), (2, 0), (0, 1), (0, 2), (1, 1)}


def test_real_wall_hides_cells_behind_it(open_grid, simple_model):
    open_grid.place((3, 0), WALL)
    los = LineOfSightSystem(open_grid, simple_model)
    results = los.scan((0, 0), LOSMode.STATIC, 30)
    assert (3, 0) not in results
    assert results[(4, 0)] == NOT_VISIBLE
    assert results[(5, 0)] == NOT_VISIBLE
    assert results[(2, 0)].visible


def test_hypothetical_wall_matches_real_wall(open_grid, simple_model, overlay):
    real = BattleGrid(10, 10)
    real.place((3, 0), WALL)
    expected = LineOfSightSystem(real, simple_model).scan((0, 0), LOSMode.STATIC, 30)

    overlay.set_wall((3, 0))
    planned = LineOfSightSystem(open_grid, simple_model).scan(
        (0, 0), LOSMode.STATIC, 30, overlay=overlay
    )
    assert planned == expected


def test_open_designation_removes_a_real_wall(open_grid, simple_model, overlay):
    open_grid.place((3, 0), WALL)
    overlay.set_open((3, 0))
    results = LineOfSightSystem(open_grid, simple_model).scan((0, 0), LOSMode.STATIC, 30, overlay=overlay)
    assert results[(3, 0)].visible
    assert results[(4, 0)].visible


def test_unexplored_cells_are_not_targets_and_block_sight(open_grid, simple_model, overlay):
    open_grid.set_unexplored((2, 0))
    los = LineOfSightSystem(open_grid, simple_model)
    results = los.scan((0, 0), LOSMode.STATIC, 30)
    assert (2, 0) not in results
    assert results[(3, 0)] == NOT_VISIBLE

    overlay.set_cover((2, 0))
    results = los.scan((0, 0), LOSMode.STATIC, 30, overlay=overlay)
    assert results[(2, 0)].visible
    assert results[(3, 0)].visible


def test_legal_targets(open_grid, simple_model, overlay):
    door = OBJECT_CATALOG["door"]
    open_grid.place((1, 1), door)
    open_grid.place((2, 2), door.with_door_state(True))
    open_grid.place((3, 3), SANDBAGS)
    los = LineOfSightSystem(open_grid, simple_model)
    assert not los.is_legal_target((1, 1))
    assert los.is_legal_target((2, 2))
    assert los.is_legal_target((3, 3))
    assert not los.is_legal_target((10, 0))

    overlay.set_open((1, 1))
    overlay.set_wall((3, 3))
    assert los.is_legal_target((1, 1), overlay)
    assert not los.is_legal_target((3, 3), overlay)


def test_direct_sight_endpoints_never_block(open_grid, simple_model):
    open_grid.place((0, 0), WALL)
    open_grid.place((3, 0), WALL)
    los = LineOfSightSystem(open_grid, simple_model)
    assert los.has_direct_sight((0, 0), (3, 0))
    assert not los.has_direct_sight((0, 0), (4, 0))
    assert los.has_direct_sight((2, 2), (2, 2))


def test_leaning_peeks_around_a_corner(open_grid, simple_model):
    open_grid.place((5, 6), WALL)
    los = LineOfSightSystem(open_grid, simple_model)
    assert not los.scan((5, 5), LOSMode.STATIC, 30)[(5, 9)].visible
    assert los.scan((5, 5), LOSMode.LEANING, 30)[(5, 9)].visible
    assert los.shooting_positions((5, 5), (5, 9), LOSMode.LEANING) == [(6, 5), (4, 5)]


def test_leaning_sees_at_least_what_static_sees():
    grid = BattleGrid(12, 12)
    grid.place_many([(4, 6), (5, 6), (6, 6), (8, 3), (8, 4), (2, 9)], WALL)
    grid.place_many([(3, 3), (7, 8)], SANDBAGS)
    los = LineOfSightSystem(grid, SimpleCoverModel())
    static = los.scan((5, 5), LOSMode.STATIC, 8)
    leaning = los.scan((5, 5), LOSMode.LEANING, 8)
    assert set(static) == set(leaning)
    for cell, result in static.items():
        if result.visible:
            assert leaning[cell].visible


def test_simple_model_does_not_peek_when_direct_sight_is_clear(open_grid, simple_model):
    open_grid.place((5, 6), SANDBAGS)
    los = LineOfSightSystem(open_grid, simple_model)
    assert los.shooting_positions((5, 5), (5, 9), LOSMode.LEANING) == [(5, 5)]


def test_height_model_peeks_over_cover(open_grid, height_model):
    open_grid.place((5, 6), SANDBAGS)
    los = LineOfSightSystem(open_grid, height_model)
    assert los.shooting_positions((5, 5), (5, 9), LOSMode.STATIC) == [(5, 5)]
    assert los.shooting_positions((5, 5), (5, 9), LOSMode.LEANING) == [(5, 5), (5, 6)]


def test_height_model_direction_selects_cover(open_grid, height_model):
    open_grid.place((5, 6), SANDBAGS)
    los = LineOfSightSystem(open_grid, height_model)
    offensive = los.evaluate_cell((5, 5), (5, 9), LOSMode.LEANING, OverlayDirection.OFFENSIVE)
    defensive = los.evaluate_cell((5, 5), (5, 9), LOSMode.LEANING, OverlayDirection.DEFENSIVE)
    assert offensive.cover_value == 0.0
    assert defensive.cover_value == pytest.approx(0.55)
    assert defensive.normalized_cover == pytest.approx(0.275)


def test_direction_swaps_whose_cover_is_reported(open_grid, simple_model):
    open_grid.place((5, 7), SANDBAGS)
    los = LineOfSightSystem(open_grid, simple_model)
    offensive = los.scan((5, 5), LOSMode.STATIC, 5, OverlayDirection.OFFENSIVE)
    defensive = los.scan((5, 5), LOSMode.STATIC, 5, OverlayDirection.DEFENSIVE)
    assert offensive[(5, 8)].cover_value == pytest.approx(0.55 * 0.66666)
    assert defensive[(5, 8)].cover_value == 0.0

    open_grid.remove((5, 7))
    open_grid.place((5, 6), SANDBAGS)
    offensive = los.scan((5, 5), LOSMode.STATIC, 5, OverlayDirection.OFFENSIVE)
    defensive = los.scan((5, 5), LOSMode.STATIC, 5, OverlayDirection.DEFENSIVE)
    assert offensive[(5, 8)].cover_value == 0.0
    assert defensive[(5, 8)].cover_value == pytest.approx(0.55 * 0.66666)


def test_evaluate_cell_skips_illegal_targets(open_grid, simple_model):
    open_grid.place((2, 2), WALL)
    los = LineOfSightSystem(open_grid, simple_model)
    assert los.evaluate_cell((0, 0), (2, 2), LOSMode.STATIC) is None


def test_scan_accepts_positions_and_plain_strings(los):
    class Pos:
        x, z = 4, 4

    results = los.scan(Pos(), "static", 1, "defensive")
    assert set(results) == {(4, 5), (5, 4), (4, 3), (3, 4)}


def test_scan_publishes_completion(open_grid, simple_model):
    bus = RecordingBus()
    los = LineOfSightSystem(open_grid, simple_model, event_bus=bus)
    los.scan((5, 5), LOSMode.STATIC, 1)
    assert bus.payloads(OverlayTopic.SCAN_COMPLETED) == [{"observers": ((5, 5),), "cell_count": 4}]


def test_stats_are_tracked(los):
    los.scan((5, 5), LOSMode.STATIC, 1)
    stats = los.get_stats()
    assert stats["scans"] == 1
    assert stats["cells_evaluated"] == 4
    assert stats["sight_tests"] == 4
    los.reset_stats()
    assert set(los.get_stats().values()) == {0}


def test_scans_leave_inputs_untouched(open_grid, simple_model, overlay):
    open_grid.place((3, 3), WALL)
    overlay.set_cover((4, 4))
    overlay.clear_dirty()
    mask = open_grid.blocks_sight_mask.copy()
    los = LineOfSightSystem(open_grid, simple_model)
    first = los.scan((1, 1), LOSMode.LEANING, 8, overlay=overlay)
    second = los.scan((1, 1), LOSMode.LEANING, 8, overlay=overlay)
    assert first == second
    assert (open_grid.blocks_sight_mask == mask).all()
    assert not overlay.dirty
    assert overlay.cover == {(4, 4)}


class _CorridorGrid:
    """Minimal host adapter: a corridor with a wall halfway along it."""

    width = 6
    height = 1

    def in_bounds(self, cell):
        return 0 <= cell[0] < self.width and 0 <= cell[1] < self.height

    def is_unexplored(self, cell):
        return not self.in_bounds(cell)

    def occluding_object_at(self, cell):
        return WALL if cell == (3, 0) else None

    def objects_at(self, cell):
        return (WALL,) if cell == (3, 0) else ()

    def can_see_over_fast(self, cell):
        return self.in_bounds(cell) and cell != (3, 0)


def test_works_against_any_grid_query():
    los = LineOfSightSystem(_CorridorGrid(), SimpleCoverModel())
    results = los.scan((0, 0), LOSMode.STATIC, 10)
    assert set(results) == {(1, 0), (2, 0), (4, 0), (5, 0)}
    assert results[(2, 0)].visible
    assert not results[(4, 0)].visible


def test_full_fill_item_neither_blocks_nor_hides(open_grid, simple_model):
    stacked_crates = OccludingObject(
        name="stacked_crates",
        category=ObjectCategory.ITEM,
        fill=FillCategory.FULL,
        fill_percent=1.0,
    )
    open_grid.place((2, 0), stacked_crates)
    results = LineOfSightSystem(open_grid, simple_model).scan((0, 0), LOSMode.STATIC, 5)
    assert results[(2, 0)].visible
    assert results[(3, 0)].visible
    assert results[(4, 0)].visible
