"""Detection configuration for the domino pip counter.

The tunables (area range, clustering radius and minimum cluster size) are read
as an immutable snapshot at the start of every analysis. Invalid values are
rejected when the snapshot is built, so a running analysis never sees them.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

import settings

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a detection parameter is outside its valid range."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (6.5 -> 7, not 6)."""
    return int(math.floor(value + 0.5))


def auto_eps(frame_width: float, frame_height: float) -> int:
    """Derive the clustering radius from the frame size.

    The radius is AUTO_EPS_FRACTION of the larger frame dimension, rounded half
    up to whole pixels (1280x720 gives 83).

    Args:
        frame_width (float): Width of the analyzed frame in pixels
        frame_height (float): Height of the analyzed frame in pixels

    Returns:
        int: Neighborhood radius in pixels
    """
    if not (frame_width > 0 and frame_height > 0):
        raise ConfigurationError(
            f"frame size must be positive to derive eps, got {frame_width}x{frame_height}"
        )
    return round_half_up(settings.AUTO_EPS_FRACTION * max(frame_width, frame_height))


@dataclass(frozen=True)
class DetectionConfig:
    """Read-only snapshot of the detection tunables.

    Attributes:
        min_area: Smallest contour area accepted as a pip
        max_area: Largest contour area accepted as a pip
        eps: Clustering radius in pixels, None to derive it from the frame size
        min_pts: Minimum neighborhood size for a point to seed a cluster
    """

    min_area: float = settings.MIN_AREA
    max_area: float = settings.MAX_AREA
    eps: Optional[float] = settings.EPS
    min_pts: int = settings.MIN_PTS

    def __post_init__(self):
        if not (math.isfinite(self.min_area) and self.min_area > 0):
            raise ConfigurationError(f"min_area must be > 0, got {self.min_area}")
        if not math.isfinite(self.max_area):
            raise ConfigurationError(f"max_area must be finite, got {self.max_area}")
        if self.min_area > self.max_area:
            raise ConfigurationError(
                f"min_area ({self.min_area}) must not exceed max_area ({self.max_area})"
            )
        if self.eps is not None and not (math.isfinite(self.eps) and self.eps >= 0):
            raise ConfigurationError(f"eps must be >= 0, got {self.eps}")
        if self.min_pts < 1:
            # A tile always has at least one pip, so anything lower means 1
            logger.warning("min_pts=%s is below 1, using 1", self.min_pts)
            object.__setattr__(self, "min_pts", 1)

    @classmethod
    def from_settings(cls) -> "DetectionConfig":
        """Build the default snapshot from the settings module."""
        return cls(
            min_area=settings.MIN_AREA,
            max_area=settings.MAX_AREA,
            eps=settings.EPS,
            min_pts=settings.MIN_PTS,
        )

    def with_changes(self, **changes) -> "DetectionConfig":
        """Return a new validated snapshot with some values replaced."""
        return replace(self, **changes)

    @property
    def is_auto_eps(self) -> bool:
        return self.eps is None

    def resolve_eps(self, frame_width: float, frame_height: float) -> float:
        """Return the explicit eps, or the one derived from the frame size."""
        if self.eps is None:
            return auto_eps(frame_width, frame_height)
        return self.eps
