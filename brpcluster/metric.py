"""Station metrics: benefit-cost ratio and composite clustering distance."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .param import Param
from .station import Station

_log = logging.getLogger(__name__)

DEPOT_ID = 0


def compute_bcrf(stations: Iterable[Station], param: Param) -> None:
    """Set each non-depot station's benefit-cost ratio in place.

    The ratio is the UDF difference between current and optimal inventory,
    divided by the loading time needed to move the imbalance.
    """
    for station in stations:
        if station.station_id == DEPOT_ID:
            continue
        current = station.current_inventory
        optimal = station.optimal_inventory
        current_udf = station.udf_values[current]
        optimal_udf = station.udf_values[optimal]
        cost = param.t_load * abs(current - optimal)
        station.bcrf = (current_udf - optimal_udf) / cost if cost > 0 else 0.0


def composite_distance(
    travel_time: float,
    max_travel_time: float,
    complementarity: float,
    max_complementarity: float,
    alpha: float,
    beta: float,
) -> float:
    """Weighted normalised travel time minus weighted normalised complementarity."""
    norm_travel = travel_time / max_travel_time
    norm_udf = complementarity / max_complementarity
    return alpha * norm_travel - beta * norm_udf


def composite_distance_matrix(
    stations: Sequence[Station],
    travel_time_matrix: Sequence[Sequence[float]],
    alpha: float,
    beta: float,
) -> list[list[float]]:
    """Composite distance between every pair of stations.

    Index 0 is the depot; its row and column are left at -1.0. Each row is
    normalised by its own largest travel time and complementarity.
    """
    n = len(stations)
    result = [[-1.0] * n for _ in range(n)]
    real = range(1, n)

    complementarity = {
        i: [udf_reduction_sum(stations[i], stations[j]) for j in real] for i in real
    }
    _log.debug("Complementarity matrix computed")

    for i in real:
        travel_row = [travel_time_matrix[i][j] for j in real]
        comp_row = complementarity[i]
        max_travel = max((t for t in travel_row if t > 0.0), default=0.0) or 1.0
        max_comp = max((c for c in comp_row if c > 0.0), default=0.0) or 1.0
        for j, travel, comp in zip(real, travel_row, comp_row):
            result[i][j] = composite_distance(
                travel, max_travel, comp, max_comp, alpha, beta
            )
    return result


def udf_reduction_sum(s1: Station, s2: Station) -> float:
    """UDF reduction from moving bikes between a surplus and a deficit station.

    Returns 0.0 unless exactly one of the stations is in surplus and the
    other in deficit.
    """
    cur1, opt1 = s1.current_inventory, s1.optimal_inventory
    cur2, opt2 = s2.current_inventory, s2.optimal_inventory
    surplus1 = cur1 > opt1
    surplus2 = cur2 > opt2
    if cur1 == opt1 or cur2 == opt2 or surplus1 == surplus2:
        return 0.0
    u1, u2 = s1.udf_values, s2.udf_values
    if surplus1:
        moved = min(cur1 - opt1, opt2 - cur2)
        return (u1[cur1] - u1[cur1 - moved]) + (u2[cur2] - u2[cur2 + moved])
    moved = min(opt1 - cur1, cur2 - opt2)
    return (u1[cur1] - u1[cur1 + moved]) + (u2[cur2] - u2[cur2 - moved])


def format_matrix(matrix: Sequence[Sequence[float]], num_stations: int) -> str:
    """Render the leading ``num_stations`` square of a matrix as text."""
    rows = (
        "".join(f"{matrix[i][j]:g} " for j in range(num_stations)) + "\n"
        for i in range(num_stations)
    )
    return "".join(rows) + "\n"