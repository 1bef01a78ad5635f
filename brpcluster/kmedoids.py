"""K-medoids clustering of stations over a composite distance matrix."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

from .station import Station

_log = logging.getLogger(__name__)

DEFAULT_CONVERGENCE_THRESHOLD = 1e-6
DEFAULT_MAX_ITERATIONS = 1000


class KMedoids:
    """Partition stations into ``k`` clusters around medoid stations.

    Index 0 of ``stations`` is the depot; it is never assigned to a cluster.
    ``composite_distance`` is a square matrix indexed like ``stations``.
    Out-of-range or negative indices into the matrix are skipped, never raised.
    """

    def __init__(
        self,
        stations: Sequence[Station],
        k: int,
        composite_distance: Sequence[Sequence[float]] | None = None,
    ) -> None:
        self.stations = stations
        self.k = k
        self.composite_distance: list[list[float]] = [
            list(row) for row in composite_distance or []
        ]
        _log.debug(
            "KMedoids created with %d stations and k=%d", len(stations), k
        )

    def _has_matrix(self) -> bool:
        return bool(self.composite_distance) and bool(self.composite_distance[0])

    def _distance(self, i: int, j: int) -> float | None:
        """Matrix entry ``[i][j]``, or ``None`` when it does not exist."""
        if i < 0 or j < 0 or i >= len(self.composite_distance):
            return None
        row = self.composite_distance[i]
        if j >= len(row):
            return None
        return row[j]

    def _index_of_coordinate(self, station: Station) -> int | None:
        return next(
            (
                index
                for index, candidate in enumerate(self.stations)
                if candidate.coordinate == station.coordinate
            ),
            None,
        )

    def _medoids_by(
        self, key: Callable[[Station], float], reverse: bool
    ) -> list[int]:
        ranked = sorted(self.stations, key=key, reverse=reverse)
        medoids = []
        for station in ranked[: max(self.k, 0)]:
            index = self._index_of_coordinate(station)
            if index is not None:
                medoids.append(index)
        return medoids

    def init_medoids_bcrf(self) -> list[int]:
        """The ``k`` stations with the highest benefit-cost ratio."""
        return self._medoids_by(lambda s: s.bcrf, reverse=True)

    def init_medoids_balanced(self) -> list[int]:
        """The ``k`` stations whose benefit-cost ratio is closest to zero."""
        return self._medoids_by(lambda s: abs(s.bcrf), reverse=False)

    def init_medoids_dispersion(self) -> list[int]:
        """Start from the highest-ratio station, then add far-apart ones.

        Each further medoid is the station whose nearest existing medoid is
        farthest away. Fewer than ``k`` medoids may be returned.
        """
        if not self._has_matrix() or not self.stations:
            _log.debug("Empty composite distance matrix")
            return []

        best = max(self.stations, key=lambda s: s.bcrf)
        medoids: list[int] = []
        first = self._index_of_coordinate(best)
        if first is not None:
            medoids.append(first)
            _log.debug("First medoid added at index %d", first)

        for number in range(1, self.k):
            max_min_distance = -1.0
            chosen = -1
            for j in range(len(self.stations)):
                if j in medoids:
                    continue
                distances = [self._distance(j, m) for m in medoids]
                if any(d is None for d in distances):
                    continue
                min_distance = min(distances, default=math.inf)
                if min_distance > max_min_distance:
                    max_min_distance = min_distance
                    chosen = j
            if chosen == -1:
                _log.debug("Could not find a valid medoid for cluster %d", number)
                continue
            medoids.append(chosen)
            _log.debug("Added medoid at index %d", chosen)

        if len(medoids) != self.k:
            _log.debug(
                "Only %d medoids initialised out of %d requested",
                len(medoids),
                self.k,
            )
        return medoids

    def assign_to_clusters(self, medoids: Sequence[int]) -> list[list[int]]:
        """Put every non-depot station in the cluster of its nearest medoid.

        Clusters are listed in the order of ``medoids``.
        """
        clusters: list[list[int]] = [[] for _ in medoids]
        if not self._has_matrix():
            _log.debug("Empty composite distance matrix")
            return clusters

        for i in range(1, len(self.stations)):
            min_distance = math.inf
            closest = -1
            for cluster, medoid in enumerate(medoids):
                distance = self._distance(i, medoid)
                if distance is None:
                    continue
                if distance < min_distance:
                    min_distance = distance
                    closest = cluster
            if closest != -1:
                clusters[closest].append(i)
            else:
                _log.debug("No valid medoid found for station %d", i)
        return clusters

    def update_medoids(self, clusters: Sequence[Sequence[int]]) -> list[int]:
        """The member of each cluster with the least total distance to the rest.

        A cluster with no valid member gets -1.
        """
        new_medoids = [-1] * len(clusters)
        for number, members in enumerate(clusters):
            min_centrality = math.inf
            best = -1
            for station in members:
                if not 0 <= station < len(self.stations):
                    _log.debug("Invalid station index %d", station)
                    continue
                total = 0.0
                for other in members:
                    if other == station:
                        continue
                    distance = self._distance(station, other)
                    if distance is not None:
                        total += distance
                if total < min_centrality:
                    min_centrality = total
                    best = station
            if best == -1:
                _log.debug("No valid medoid found for cluster %d", number)
                continue
            new_medoids[number] = best
        return new_medoids

    def run(
        self,
        lam: float,
        convergence_threshold: float = DEFAULT_CONVERGENCE_THRESHOLD,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> list[list[int]]:
        """Cluster from dispersion-initialised medoids until they settle.

        Stops when no medoid moves by ``convergence_threshold`` or more in
        composite distance, or after ``max_iterations`` rounds. ``lam`` is
        accepted for interface compatibility and does not affect the result.
        """
        _log.debug(
            "Starting k-medoids with lambda=%s, threshold=%s, max_iterations=%d",
            lam,
            convergence_threshold,
            max_iterations,
        )
        current = self.init_medoids_dispersion()
        clusters: list[list[int]] = []
        iteration = 0
        converged = False

        while not converged and iteration < max_iterations:
            clusters = self.assign_to_clusters(current)
            new_medoids = self.update_medoids(clusters)

            max_change = 0.0
            for index, old in enumerate(current):
                if index >= len(new_medoids):
                    continue
                change = self._distance(old, new_medoids[index])
                if change is None:
                    continue
                max_change = max(max_change, change)

            converged = max_change < convergence_threshold
            _log.debug(
                "Iteration %d: max change %s, converged %s",
                iteration + 1,
                max_change,
                converged,
            )
            current = new_medoids
            iteration += 1

        return clusters