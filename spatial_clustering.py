"""Spatial clustering of pips into domino tiles.

Pips are grouped with a DBSCAN-style density clustering: points within eps of a
core point (a point with at least min_pts neighbors, itself included) end up in
the same cluster. Neither the number of tiles nor their shape is known in
advance.

Unlike plain DBSCAN, points left as noise are not discarded. A domino half can
carry a single pip, so every noise point is promoted to a tile of its own. The
resulting tiles are ordered as clusters in creation order followed by the
promoted singletons in input order.

Neighbor queries are brute force over a pairwise squared distance matrix. The
number of pips per frame is small, so O(N^2) is fine.
"""

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
from scipy.spatial.distance import pdist, squareform

from config import ConfigurationError
from internal_data_classes import DotObservation, Tile

logger = logging.getLogger(__name__)


class LabelKind(enum.Enum):
    UNASSIGNED = "unassigned"
    NOISE = "noise"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class PointLabel:
    """Clustering label of one point: unassigned, noise or a cluster id."""

    kind: LabelKind
    cluster_id: Optional[int] = None

    @classmethod
    def cluster(cls, cluster_id: int) -> "PointLabel":
        return cls(LabelKind.CLUSTER, cluster_id)

    @property
    def is_cluster(self) -> bool:
        return self.kind is LabelKind.CLUSTER


UNASSIGNED = PointLabel(LabelKind.UNASSIGNED)
NOISE = PointLabel(LabelKind.NOISE)


@dataclass
class ClusteringState:
    """Scratch state of a single clustering run, indexed by point index."""

    size: int
    visited: List[bool] = field(init=False)
    labels: List[PointLabel] = field(init=False)
    cluster_count: int = 0

    def __post_init__(self):
        self.visited = [False] * self.size
        self.labels = [UNASSIGNED] * self.size

    def new_cluster(self) -> int:
        cluster_id = self.cluster_count
        self.cluster_count += 1
        return cluster_id


def _squared_distances(observations: Sequence[DotObservation]) -> np.ndarray:
    """Pairwise squared distances between pip centers as an N x N matrix."""
    positions = np.array([obs.position for obs in observations], dtype=float)
    if len(positions) == 1:
        return np.zeros((1, 1))
    return squareform(pdist(positions, metric="sqeuclidean"))


def _validate_parameters(eps: float, min_pts: int):
    if not (math.isfinite(eps) and eps >= 0):
        raise ConfigurationError(f"eps must be >= 0, got {eps}")
    if min_pts < 1:
        raise ConfigurationError(f"min_pts must be >= 1, got {min_pts}")


def run_dbscan(
    observations: Sequence[DotObservation], eps: float, min_pts: int
) -> ClusteringState:
    """Run DBSCAN over the pip centers.

    Points are processed in input order, and the frontier of an expanding
    cluster is processed in insertion order, so the labels only depend on the
    input order, eps and min_pts.

    Args:
        observations (Sequence[DotObservation]): Pips to cluster
        eps (float): Neighborhood radius in pixels, boundary inclusive
        min_pts (int): Minimum neighborhood size of a core point, itself included

    Returns:
        ClusteringState: NOISE or a cluster label for every point and the
        number of clusters created
    """
    _validate_parameters(eps, min_pts)

    state = ClusteringState(len(observations))
    if state.size == 0:
        return state

    squared_distances = _squared_distances(observations)
    eps_squared = eps * eps

    def region_query(index: int) -> List[int]:
        return np.flatnonzero(squared_distances[index] <= eps_squared).tolist()

    for point_index in range(state.size):
        if state.visited[point_index]:
            continue
        state.visited[point_index] = True

        neighbors = region_query(point_index)
        if len(neighbors) < min_pts:
            state.labels[point_index] = NOISE
            continue

        cluster_label = PointLabel.cluster(state.new_cluster())
        state.labels[point_index] = cluster_label

        # Frontier grows while it is walked; queued keeps each point in it once
        frontier = [n for n in neighbors if n != point_index]
        queued = set(frontier)
        queued.add(point_index)

        position = 0
        while position < len(frontier):
            neighbor_index = frontier[position]
            position += 1

            if not state.visited[neighbor_index]:
                state.visited[neighbor_index] = True
                neighbor_neighbors = region_query(neighbor_index)
                if len(neighbor_neighbors) >= min_pts:
                    for candidate_index in neighbor_neighbors:
                        if candidate_index not in queued:
                            queued.add(candidate_index)
                            frontier.append(candidate_index)

            if not state.labels[neighbor_index].is_cluster:
                state.labels[neighbor_index] = cluster_label

    return state


def label_points(
    observations: Sequence[DotObservation], eps: float, min_pts: int
) -> List[PointLabel]:
    """One label per point, NOISE or the cluster it belongs to."""
    return run_dbscan(observations, eps, min_pts).labels


def cluster_observations(
    observations: Sequence[DotObservation], eps: float, min_pts: int = 1
) -> List[Tile]:
    """Group pips into tiles.

    Every observation ends up in exactly one tile. Clusters come first, in the
    order they were created, followed by one single-pip tile per noise point in
    input order.

    Args:
        observations (Sequence[DotObservation]): Pips to group
        eps (float): Neighborhood radius in pixels
        min_pts (int): Minimum neighborhood size of a core point

    Returns:
        List[Tile]: Non-empty tiles covering all observations
    """
    state = run_dbscan(observations, eps, min_pts)

    clustered_members = [[] for _ in range(state.cluster_count)]
    singletons = []

    for observation, label in zip(observations, state.labels):
        if label.is_cluster:
            clustered_members[label.cluster_id].append(observation)
        else:
            singletons.append(Tile(members=[observation]))

    tiles = [Tile(members=members) for members in clustered_members if members]
    tiles.extend(singletons)

    logger.debug(
        "Clustered %d dots into %d tiles (%d singletons, eps=%s, min_pts=%d)",
        len(observations),
        len(tiles),
        len(singletons),
        eps,
        min_pts,
    )
    return tiles
