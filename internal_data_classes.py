"""Domino Recognition Data Classes Module

This module defines the core data structures used in the domino pip counter.
It contains dataclasses that represent contour candidates, detected pips (dots),
the tiles they are grouped into and the results reported for one frame.

Dependencies:
    - dataclasses: For the @dataclass decorator
    - typing: For type annotations
    - cv2: For converting OpenCV contours into candidates
"""

from dataclasses import dataclass, field
from typing import Tuple, List
import cv2
import numpy as np


@dataclass
class Candidate:
    """Represents a raw contour produced by the segmentation step.

    A candidate is everything the image processing knows about a blob before it
    is accepted or rejected as a pip.

    Attributes:
        area: Contour area in pixels
        width: Width of the axis-aligned bounding rectangle
        height: Height of the axis-aligned bounding rectangle
        center: (x, y) center of the minimum enclosing circle
        enclosing_radius: Radius of the minimum enclosing circle
    """

    area: float
    width: float
    height: float
    center: Tuple[float, float]
    enclosing_radius: float

    @classmethod
    def from_contour(cls, contour: np.ndarray) -> "Candidate":
        """Create a Candidate from an OpenCV contour.

        Args:
            contour: Contour points as returned by cv2.findContours

        Returns:
            A new Candidate instance describing the contour
        """
        _, _, width, height = cv2.boundingRect(contour)
        (center_x, center_y), radius = cv2.minEnclosingCircle(contour)
        return cls(
            area=float(cv2.contourArea(contour)),
            width=float(width),
            height=float(height),
            center=(float(center_x), float(center_y)),
            enclosing_radius=float(radius),
        )


@dataclass(frozen=True)
class DotObservation:
    """Represents a detected pip (dot) on a domino.

    Attributes:
        x: x coordinate of the pip center in the frame
        y: y coordinate of the pip center in the frame
        r: Radius of the pip in pixels
    """

    x: float
    y: float
    r: float

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in pixel coordinates."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass
class Tile:
    """Represents a domino tile as the group of pips clustered together.

    Attributes:
        members: Pips (dots) assigned to this tile, never empty
    """

    members: List[DotObservation]

    @property
    def pip_count(self) -> int:
        """Get the number of pips on the tile.

        Returns:
            The number of dots grouped into this tile
        """
        return len(self.members)


@dataclass(frozen=True)
class TileSummary:
    """Padded bounding box and pip count of one tile."""

    bounding_box: BoundingBox
    pip_count: int


@dataclass(frozen=True)
class LabelBox:
    """Rectangle where the pip count of a tile is drawn."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class FrameResult:
    """Summary of one analysis cycle, as reported to the user.

    Attributes:
        total_dots: Number of accepted pips in the frame
        tile_counts: Pip count of every tile, in tile order
        elapsed_ms: Wall time spent analyzing the frame
    """

    total_dots: int
    tile_counts: List[int]
    elapsed_ms: float


@dataclass
class FrameGeometry:
    """Everything an overlay needs to draw one analyzed frame.

    Attributes:
        dots: Every accepted pip, in detection order
        tiles: Tiles with their member pips
        summaries: Padded bounding box per tile, same order as tiles
    """

    dots: List[DotObservation] = field(default_factory=list)
    tiles: List[Tile] = field(default_factory=list)
    summaries: List[TileSummary] = field(default_factory=list)


@dataclass
class FrameAnalysis:
    """Both result facets of one analysis cycle."""

    result: FrameResult
    geometry: FrameGeometry
