"""Loading a rebalancing problem: stations, depot and travel-time matrix."""

from __future__ import annotations

import argparse
import json
import logging
import math
from collections.abc import Sequence
from pathlib import Path

from .station import Coordinate, Station
from .transfer_tuple import TransferTuple

_log = logging.getLogger(__name__)

DEFAULT_STATIONS_PATH = "../data/results.csv"
DEFAULT_MATRIX_PATH = "time_matrix.csv"
DEFAULT_SPEED = 25.2
DEPOT_SYS_ID = "depot"
UNLIMITED = 2**31 - 1

_FIXED_FIELDS = 8


def _parse_station(line: str, station_id: int) -> Station:
    fields = [field.strip() for field in line.split(",")]
    if len(fields) < _FIXED_FIELDS:
        raise ValueError(f"station record has too few fields: {line!r}")
    sys_id = fields[0]
    latitude = float(fields[2])
    longitude = float(fields[3])
    capacity = int(fields[4])
    current = int(fields[5])
    optimal = int(fields[6])
    float(fields[7])  # minimum UDF, validated but not kept
    udf_fields = fields[_FIXED_FIELDS:_FIXED_FIELDS + capacity]
    if len(udf_fields) < capacity:
        raise ValueError(
            f"station {sys_id!r} expects {capacity} UDF values, "
            f"found {len(udf_fields)}"
        )
    return Station(
        sys_id=sys_id,
        station_id=station_id,
        coordinate=Coordinate(latitude, longitude),
        capacity=capacity,
        current_inventory=current,
        optimal_inventory=optimal,
        udf_values=[float(value) for value in udf_fields],
    )


def load_stations(path: str | Path) -> list[Station]:
    """Read stations from a CSV file with a header line.

    Columns are: system id, name, latitude, longitude, capacity, current
    inventory, optimal inventory, minimum UDF, then ``capacity`` UDF values.
    Stations are numbered from 1 in file order.
    """
    with open(path, encoding="utf-8") as handle:
        lines = handle.read().splitlines()
    records = (line for line in lines[1:] if line.strip())
    return [_parse_station(line, number) for number, line in enumerate(records, 1)]


def make_depot(stations: Sequence[Station]) -> Station:
    """A depot station at the centroid of the given stations, with no limits."""
    if not stations:
        raise ValueError("cannot place a depot without stations")
    count = len(stations)
    latitude = sum(s.coordinate.latitude for s in stations) / count
    longitude = sum(s.coordinate.longitude for s in stations) / count
    return Station(
        sys_id=DEPOT_SYS_ID,
        station_id=0,
        coordinate=Coordinate(latitude, longitude),
        capacity=UNLIMITED,
        current_inventory=UNLIMITED,
        optimal_inventory=UNLIMITED,
        udf_values=[],
    )


def euclidean_distance(a: Coordinate, b: Coordinate) -> float:
    """Straight-line distance between two coordinates, in degrees."""
    return math.hypot(a.longitude - b.longitude, a.latitude - b.latitude)


def compute_time_matrix(
    stations: Sequence[Station], speed: float = DEFAULT_SPEED
) -> list[list[float]]:
    """Travel time between every pair of stations: distance over speed."""
    return [
        [euclidean_distance(a.coordinate, b.coordinate) / speed for b in stations]
        for a in stations
    ]


def save_time_matrix(
    path: str | Path,
    stations: Sequence[Station],
    matrix: Sequence[Sequence[float]],
) -> None:
    """Write the matrix as CSV, labelled by station system ids."""
    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Failed to open {path} for writing") from exc
    with handle:
        handle.write("From/To" + "".join(f",{s.sys_id}" for s in stations) + "\n")
        for station, row in zip(stations, matrix):
            values = "".join(f",{row[j]:g}" for j in range(len(stations)))
            handle.write(f"{station.sys_id}{values}\n")
    _log.info("Progress saved")


def load_time_matrix(path: str | Path, size: int) -> list[list[float]]:
    """Read a ``size`` by ``size`` matrix written by :func:`save_time_matrix`.

    Missing rows or empty cells are left at 0.0.
    """
    matrix = [[0.0] * size for _ in range(size)]
    with open(path, encoding="utf-8") as handle:
        lines = handle.read().splitlines()[1:]
    for row, line in zip(matrix, lines[:size]):
        cells = line.split(",")[1:size + 1]
        for j, cell in enumerate(cells):
            if cell:
                row[j] = float(cell)
    return matrix


def parse_durations(response: str, size: int) -> list[list[float]]:
    """Extract the ``durations`` table of a routing response into a square matrix."""
    durations = json.loads(response).get("durations") or []
    if len(durations) > size or any(len(row) > size for row in durations):
        raise ValueError(f"durations table exceeds {size}x{size}")
    matrix = [[0.0] * size for _ in range(size)]
    for target, row in zip(matrix, durations):
        target[: len(row)] = [float(value) for value in row]
    return matrix


class ProblemInstance:
    """Stations of a network with a depot at index 0, and their travel times.

    Without a file name the instance is empty. Otherwise stations are read
    from ``filename``; the travel-time matrix is loaded from ``matrix_path``
    when that file exists, or computed and saved there when it does not.
    """

    def __init__(
        self,
        filename: str | Path | None = None,
        matrix_path: str | Path = DEFAULT_MATRIX_PATH,
    ) -> None:
        self.stations: list[Station] = []
        self.time_matrix: list[list[float]] = []
        self.transfers: list[TransferTuple] = []
        if filename is None:
            return

        _log.info("Loading station information...")
        stations = load_stations(filename)

        _log.info("Computing Station Centroid...")
        self.stations = [make_depot(stations), *stations]

        _log.info("Computing Duration Matrix...")
        matrix_file = Path(matrix_path)
        if matrix_file.is_file():
            _log.info("Loading existing time matrix...")
            self.time_matrix = load_time_matrix(matrix_file, len(self.stations))
            _log.info("Existing matrix loaded")
        else:
            self.time_matrix = compute_time_matrix(self.stations)
            save_time_matrix(matrix_file, self.stations, self.time_matrix)


def main(argv: Sequence[str] | None = None) -> int:
    """Load a problem instance and report how many stations it holds."""
    parser = argparse.ArgumentParser(description="Load a bike rebalancing problem.")
    parser.add_argument("stations", nargs="?", default=DEFAULT_STATIONS_PATH)
    parser.add_argument("--matrix", default=DEFAULT_MATRIX_PATH)
    args = parser.parse_args(argv)
    instance = ProblemInstance(args.stations, args.matrix)
    print(f"Stations loaded: {len(instance.stations)}")
    return 0