"""Grouping surplus and deficit stations of a cluster into bike transfers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import combinations

from .station import Station, StationStatus
from .transfer_tuple import TransferTuple

_log = logging.getLogger(__name__)


@dataclass
class ClusterEvaluationResult:
    """Transfer tuples found in a cluster and their summed UDF reduction."""

    assigned_tuples: list[TransferTuple] = field(default_factory=list)
    total_delta_udf: float = 0.0


class TupleClusterEvaluator:
    """Find transfers of up to ``max_surplus`` to ``max_deficit`` stations.

    For example ``TupleClusterEvaluator(3, 3)`` considers every pattern from
    1-to-1 up to 3-to-3.
    """

    def __init__(self, max_surplus: int, max_deficit: int) -> None:
        self.max_surplus = max_surplus
        self.max_deficit = max_deficit

    def evaluate_cluster(
        self, station_indices: Iterable[int], stations: Sequence[Station]
    ) -> ClusterEvaluationResult:
        """Generate the cluster's tuples and add up their UDF reductions.

        Balanced stations take no part.
        """
        surplus: list[int] = []
        deficit: list[int] = []
        for index in station_indices:
            status = stations[index].status()
            if status is StationStatus.SURPLUS:
                surplus.append(index)
            elif status is StationStatus.DEFICIT:
                deficit.append(index)

        tuples = self.generate_tuples(surplus, deficit, stations)
        return ClusterEvaluationResult(
            assigned_tuples=tuples,
            total_delta_udf=sum((t.delta_udf for t in tuples), 0.0),
        )

    def generate_tuples(
        self,
        surplus_indices: Sequence[int],
        deficit_indices: Sequence[int],
        stations: Sequence[Station],
    ) -> list[TransferTuple]:
        """Every beneficial tuple not already covered by an earlier one.

        Combinations are tried from the largest pattern down. A tuple is kept
        when its UDF reduction is positive and the stations it actually uses
        are not a subset of those of a tuple kept before.
        """
        tuples: list[TransferTuple] = []
        accepted: list[tuple[frozenset[int], frozenset[int]]] = []

        for s in range(min(self.max_surplus, len(surplus_indices)), 0, -1):
            _log.debug("Generating tuples with %d surplus stations", s)
            for d in range(min(self.max_deficit, len(deficit_indices)), 0, -1):
                _log.debug("Generating tuples with %d deficit stations", d)
                for sur_combo in combinations(surplus_indices, s):
                    for def_combo in combinations(deficit_indices, d):
                        candidate = self.evaluate_tuple(
                            sur_combo, def_combo, stations
                        )
                        if candidate.delta_udf <= 0:
                            continue
                        used_sur = frozenset(candidate.surplus_station_indices)
                        used_def = frozenset(candidate.deficit_station_indices)
                        covered = any(
                            used_sur <= prev_sur and used_def <= prev_def
                            for prev_sur, prev_def in accepted
                        )
                        if not covered:
                            tuples.append(candidate)
                            accepted.append((used_sur, used_def))
        return tuples

    def evaluate_tuple(
        self,
        surplus_indices: Iterable[int],
        deficit_indices: Iterable[int],
        stations: Sequence[Station],
    ) -> TransferTuple:
        """Move bikes greedily from surplus to deficit stations.

        Both sides are served in order of decreasing benefit-cost ratio. Only
        stations that actually send or receive bikes appear in the result.
        """
        surplus = sorted(
            surplus_indices, key=lambda i: stations[i].bcrf, reverse=True
        )
        deficit = sorted(
            deficit_indices, key=lambda i: stations[i].bcrf, reverse=True
        )
        inventory = {i: stations[i].current_inventory for i in (*surplus, *deficit)}
        moved: dict[int, int] = {}
        allocations: dict[tuple[int, int], int] = {}
        delta_udf = 0.0

        for s_idx in surplus:
            s_udf = stations[s_idx].udf_values
            available = inventory[s_idx] - stations[s_idx].optimal_inventory
            if available <= 0:
                continue
            for d_idx in deficit:
                d_udf = stations[d_idx].udf_values
                needed = stations[d_idx].optimal_inventory - inventory[d_idx]
                if needed <= 0:
                    continue
                transfer = min(available, needed)
                if transfer <= 0:
                    continue

                s_cur = inventory[s_idx]
                d_cur = inventory[d_idx]
                sur_delta = sum(
                    s_udf[s_cur - k] - s_udf[s_cur - k - 1] for k in range(transfer)
                )
                def_delta = sum(
                    d_udf[d_cur + k] - d_udf[d_cur + k + 1] for k in range(transfer)
                )
                delta_udf += sur_delta + def_delta
                moved[s_idx] = moved.get(s_idx, 0) + transfer
                moved[d_idx] = moved.get(d_idx, 0) + transfer
                inventory[s_idx] -= transfer
                inventory[d_idx] += transfer
                allocations[(s_idx, d_idx)] = transfer

                available -= transfer
                if available <= 0:
                    break

        return TransferTuple(
            surplus_station_indices=[i for i in surplus if moved.get(i, 0) > 0],
            deficit_station_indices=[i for i in deficit if moved.get(i, 0) > 0],
            bike_allocations=allocations,
            delta_udf=delta_udf,
        )

    def greedy_select_exclusive_tuples(
        self, tuples: Iterable[TransferTuple]
    ) -> list[TransferTuple]:
        """Pick tuples by decreasing gain, then size, sharing no station."""
        ranked = sorted(tuples, key=lambda t: (-t.delta_udf, -t.size()))
        selected: list[TransferTuple] = []
        used: set[int] = set()
        for candidate in ranked:
            members = candidate.stations()
            if members & used:
                continue
            selected.append(candidate)
            used |= members
        return selected