"""Observation filter: turns contour candidates into pip observations.

Candidates whose area falls outside the configured range, or whose bounding
rectangle is far from square, are dropped. This is a best-effort heuristic, so
rejected and malformed candidates are skipped silently rather than failing the
frame.
"""

import logging
import math
from typing import Iterable, List

import settings
from config import DetectionConfig
from internal_data_classes import Candidate, DotObservation

logger = logging.getLogger(__name__)


def _is_well_formed(candidate: Candidate) -> bool:
    values = (
        candidate.area,
        candidate.width,
        candidate.height,
        candidate.center[0],
        candidate.center[1],
        candidate.enclosing_radius,
    )
    if not all(math.isfinite(value) for value in values):
        return False
    return candidate.height > 0 and candidate.enclosing_radius >= 0


def is_plausible_dot(candidate: Candidate, min_area: float, max_area: float) -> bool:
    """Check whether a candidate looks like a pip.

    A pip has an area inside [min_area, max_area] (both ends inclusive) and a
    near-square bounding rectangle, 0.5 < width/height < 2.0 (both ends
    exclusive), which serves as a cheap roundness test.

    Args:
        candidate (Candidate): Contour candidate to check
        min_area (float): Smallest accepted area in pixels
        max_area (float): Largest accepted area in pixels

    Returns:
        bool: True if the candidate should be kept as a pip
    """
    if not _is_well_formed(candidate):
        return False

    if not (min_area <= candidate.area <= max_area):
        return False

    aspect_ratio = candidate.width / candidate.height
    return settings.MIN_ASPECT_RATIO < aspect_ratio < settings.MAX_ASPECT_RATIO


def filter_candidates(
    candidates: Iterable[Candidate], config: DetectionConfig
) -> List[DotObservation]:
    """Keep the candidates that look like pips, in input order.

    Args:
        candidates (Iterable[Candidate]): Candidates from the segmentation step
        config (DetectionConfig): Snapshot holding the area range

    Returns:
        List[DotObservation]: One observation per accepted candidate
    """
    observations = []
    rejected = 0
    for candidate in candidates:
        if is_plausible_dot(candidate, config.min_area, config.max_area):
            observations.append(
                DotObservation(
                    x=candidate.center[0],
                    y=candidate.center[1],
                    r=candidate.enclosing_radius,
                )
            )
        else:
            rejected += 1

    logger.debug("Kept %d candidates as dots, rejected %d", len(observations), rejected)
    return observations
