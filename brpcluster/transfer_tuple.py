"""A group of surplus and deficit stations that exchange bikes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TransferTuple:
    """Stations taking part in one transfer, how many bikes move, and the gain.

    ``bike_allocations`` maps ``(from_station, to_station)`` to a number of
    bikes; ``delta_udf`` is the total reduction in user dissatisfaction.
    """

    surplus_station_indices: list[int] = field(default_factory=list)
    deficit_station_indices: list[int] = field(default_factory=list)
    bike_allocations: dict[tuple[int, int], int] = field(default_factory=dict)
    delta_udf: float = 0.0

    def stations(self) -> frozenset[int]:
        """All station indices involved, surplus and deficit alike."""
        return frozenset(self.surplus_station_indices) | frozenset(
            self.deficit_station_indices
        )

    def size(self) -> int:
        """Number of surplus plus deficit stations in the tuple."""
        return len(self.surplus_station_indices) + len(self.deficit_station_indices)

    def describe(self) -> str:
        """One ``from -> to: bikes`` line per allocation, ordered by station pair."""
        return "\n".join(
            f"{src} -> {dst}: {count}"
            for (src, dst), count in sorted(self.bike_allocations.items())
        )