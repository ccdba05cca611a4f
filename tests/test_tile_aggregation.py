"""Tests for tile aggregation and label placement."""

import pytest

from internal_data_classes import BoundingBox, FrameResult, Tile
from tile_aggregation import (
    build_frame_result,
    format_frame_result,
    label_box,
    summarize_tiles,
    tile_bounding_box,
)
from tests.helpers import dots


def test_bounding_box_covers_circles_plus_padding():
    tile = Tile(members=dots((0, 0), (5, 0)) + [dots((20, 30), r=8)[0]])

    assert tile_bounding_box(tile) == BoundingBox(min_x=-15, min_y=-15, max_x=38, max_y=48)
    assert tile_bounding_box(tile, pad=0) == BoundingBox(min_x=-5, min_y=-5, max_x=28, max_y=38)


def test_bounding_box_of_empty_tile_is_an_error():
    with pytest.raises(ValueError):
        tile_bounding_box(Tile(members=[]))


def test_summaries_keep_tile_order():
    tiles = [Tile(members=dots((0, 0), (5, 0))), Tile(members=dots((100, 100)))]

    summaries = summarize_tiles(tiles)

    assert [summary.pip_count for summary in summaries] == [2, 1]
    assert summaries[1].bounding_box == BoundingBox(85, 85, 115, 115)


def test_frame_result_counts():
    observations = dots((0, 0), (5, 0), (100, 100))
    tiles = [Tile(members=observations[:2]), Tile(members=observations[2:])]

    result = build_frame_result(observations, tiles, elapsed_ms=4.2)

    assert result == FrameResult(total_dots=3, tile_counts=[2, 1], elapsed_ms=4.2)


def test_frame_result_of_empty_frame():
    assert build_frame_result([], [], 0.0) == FrameResult(0, [], 0.0)


def test_label_sits_above_the_box():
    label = label_box(BoundingBox(100, 200, 180, 260), text_width=14, text_height=16)

    assert (label.x, label.y, label.width, label.height) == (100, 172, 26, 28)


def test_label_grows_with_tall_text():
    label = label_box(BoundingBox(100, 200, 180, 260), text_width=14, text_height=30)

    assert label.height == 38
    assert label.y == 162


def test_label_moves_inside_box_at_top_of_frame():
    label = label_box(BoundingBox(40, 10, 120, 90), text_width=14, text_height=16)

    assert label.y == 10


def test_label_stays_inside_frame_horizontally():
    left = label_box(BoundingBox(-8, 100, 50, 150), text_width=14, text_height=16)
    right = label_box(
        BoundingBox(630, 100, 660, 150), text_width=14, text_height=16, frame_width=640
    )

    assert left.x == 0
    assert right.x == 640 - 26


def test_label_box_clamps_top_when_box_starts_above_frame():
    label = label_box(BoundingBox(40, -12, 120, 50), text_width=14, text_height=16)

    assert label.y == 0


def test_format_frame_result():
    result = FrameResult(total_dots=7, tile_counts=[4, 3], elapsed_ms=12.4)

    assert format_frame_result(result) == "Pips: 7  |  Tiles: [4, 3]  -  12 ms"


def test_format_empty_frame_result():
    assert format_frame_result(FrameResult(0, [], 0.0)) == "Pips: 0  |  Tiles: []  -  0 ms"


def test_format_rounds_half_milliseconds_up():
    assert format_frame_result(FrameResult(1, [1], 12.5)) == "Pips: 1  |  Tiles: [1]  -  13 ms"
    assert format_frame_result(FrameResult(1, [1], 13.5)) == "Pips: 1  |  Tiles: [1]  -  14 ms"
