"""Tuning parameters of a rebalancing problem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Param:
    """Loading time per bike, distance weights and problem dimensions."""

    t_load: float
    alpha: float
    beta: float
    num_of_stations: int
    num_of_clusters: int
    num_of_vehicles: int