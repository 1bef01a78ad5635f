"""Bike-sharing stations and their rebalancing status."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    """A geographic position in decimal degrees."""

    latitude: float
    longitude: float


class StationStatus(Enum):
    """Whether a station holds more, fewer, or exactly its optimal bikes."""

    SURPLUS = "surplus"
    DEFICIT = "deficit"
    BALANCED = "balanced"


@dataclass
class Station:
    """A station with its inventory and user-dissatisfaction values.

    ``udf_values[n]`` is the expected user dissatisfaction when the
    station starts the period holding ``n`` bikes.
    """

    sys_id: str
    station_id: int
    coordinate: Coordinate = field(default_factory=lambda: Coordinate(0.0, 0.0))
    capacity: int = 0
    current_inventory: int = 0
    optimal_inventory: int = 0
    udf_values: list[float] = field(default_factory=list)
    bcrf: float = 0.0

    def status(self) -> StationStatus:
        """Classify the station by comparing current and optimal inventory."""
        if self.current_inventory > self.optimal_inventory:
            return StationStatus.SURPLUS
        if self.current_inventory < self.optimal_inventory:
            return StationStatus.DEFICIT
        return StationStatus.BALANCED