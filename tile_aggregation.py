"""Tile aggregation: pip counts and box geometry per tile.

Turns clustered tiles into what the reporting and overlay sides consume: the
padded bounding box and pip count of each tile, the frame summary, and where
the pip count label of a tile is placed.
"""

from typing import List, Optional, Sequence

import settings
from config import round_half_up
from internal_data_classes import (
    BoundingBox,
    DotObservation,
    FrameResult,
    LabelBox,
    Tile,
    TileSummary,
)


def tile_bounding_box(tile: Tile, pad: float = settings.TILE_PADDING) -> BoundingBox:
    """Compute the padded box enclosing every pip circle of a tile.

    Args:
        tile (Tile): Tile with at least one member
        pad (float): Extra margin in pixels on every side

    Returns:
        BoundingBox: Box covering x - r .. x + r and y - r .. y + r of all members
    """
    if not tile.members:
        raise ValueError("cannot compute the bounding box of an empty tile")

    return BoundingBox(
        min_x=min(dot.x - dot.r for dot in tile.members) - pad,
        min_y=min(dot.y - dot.r for dot in tile.members) - pad,
        max_x=max(dot.x + dot.r for dot in tile.members) + pad,
        max_y=max(dot.y + dot.r for dot in tile.members) + pad,
    )


def summarize_tiles(
    tiles: Sequence[Tile], pad: float = settings.TILE_PADDING
) -> List[TileSummary]:
    """Summaries for the given tiles, in the same order."""
    return [
        TileSummary(bounding_box=tile_bounding_box(tile, pad), pip_count=tile.pip_count)
        for tile in tiles
    ]


def build_frame_result(
    observations: Sequence[DotObservation], tiles: Sequence[Tile], elapsed_ms: float
) -> FrameResult:
    return FrameResult(
        total_dots=len(observations),
        tile_counts=[tile.pip_count for tile in tiles],
        elapsed_ms=elapsed_ms,
    )


def label_box(
    bounding_box: BoundingBox,
    text_width: float,
    text_height: float,
    frame_width: Optional[float] = None,
) -> LabelBox:
    """Place the pip count label of a tile.

    The label sits on top of the box, aligned with its left edge. When the box
    touches the top of the frame there is no room above it, so the label is
    moved just inside the box instead. With a known frame width the label is
    also kept between the left and right frame edges.

    Args:
        bounding_box (BoundingBox): Padded box of the tile
        text_width (float): Rendered width of the label text
        text_height (float): Rendered height of the label text
        frame_width (float, optional): Width of the frame the label is drawn on

    Returns:
        LabelBox: Rectangle of the label background
    """
    width = text_width + 2 * settings.LABEL_PADDING_X
    height = max(text_height + 2 * settings.LABEL_PADDING_Y, settings.LABEL_HEIGHT)

    x = bounding_box.min_x
    y = bounding_box.min_y - height
    if y < 0:
        y = max(bounding_box.min_y, 0)

    if frame_width is not None and x + width > frame_width:
        x = frame_width - width
    x = max(x, 0)

    return LabelBox(x=x, y=y, width=width, height=height)


def format_frame_result(result: FrameResult) -> str:
    """One line report, e.g. 'Pips: 7  |  Tiles: [4, 3]  -  12 ms'."""
    tiles = ", ".join(str(count) for count in result.tile_counts)
    elapsed = round_half_up(result.elapsed_ms)
    return f"Pips: {result.total_dots}  |  Tiles: [{tiles}]  -  {elapsed} ms"
