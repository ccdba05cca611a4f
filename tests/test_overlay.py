"""Tests for the overlay drawing."""

import numpy as np

from internal_data_classes import FrameGeometry, Tile
from overlay import DOT_COLOR, overlay_info
from tile_aggregation import summarize_tiles
from tests.helpers import dots


def geometry_for(tiles):
    members = [member for tile in tiles for member in tile.members]
    return FrameGeometry(dots=members, tiles=tiles, summaries=summarize_tiles(tiles))


def test_empty_geometry_leaves_frame_untouched():
    frame = np.zeros((200, 200, 3), np.uint8)

    overlay_info(frame, FrameGeometry())

    assert not frame.any()


def test_rings_and_boxes_are_drawn():
    frame = np.zeros((240, 320, 3), np.uint8)
    tiles = [Tile(members=dots((100, 120), (120, 120), r=6))]

    overlay_info(frame, geometry_for(tiles))

    # Ring on the right edge of the first pip
    assert tuple(frame[120, 106]) == DOT_COLOR
    # Tile box: min_x = 100 - 6 - 10 = 84, drawn 3 px thick
    assert frame[120, 84].any()
    # Far corner of the frame stays untouched
    assert not frame[235, 315].any()


def test_label_is_drawn_above_the_box():
    frame = np.zeros((240, 320, 3), np.uint8)
    tiles = [Tile(members=dots((150, 150), r=6))]

    overlay_info(frame, geometry_for(tiles))

    # Box top is at 150 - 6 - 10 = 134, label occupies the rows above it
    assert frame[110:132, 134:160].any()
