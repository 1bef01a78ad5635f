# brpcluster

Tools for the static bike-sharing rebalancing problem: loading a station
network, scoring stations by how much rebalancing them is worth, grouping
them into clusters with k-medoids, and finding which bike transfers inside a
cluster reduce user dissatisfaction (UDF) the most.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Input data

Stations are read from a CSV file with a header line followed by one row per
station:

```
sys_id,name,latitude,longitude,capacity,current_inventory,optimal_inventory,min_udf,udf_0,udf_1,...
```

After the eight fixed columns come `capacity` UDF values, indexed by the
number of bikes present. The name is read but not kept, and the minimum UDF
is checked to be a number but not kept. Fields are split on every comma, so
names must not contain commas. Blank lines are skipped; a row with too few
fields or too few UDF values raises `ValueError`. Stations are numbered from
1 in file order.

When a `ProblemInstance` is created from a file, a depot is placed at the
centroid of all stations and inserted as station 0 (system id `depot`, with
capacity and inventories set to `2**31 - 1` and no UDF values). Travel times
between every pair of stations, depot included, are read from the matrix
file (`time_matrix.csv` in the current directory by default) if it exists;
otherwise they are computed as straight-line distance in degrees divided by
a speed of 25.2, and written to that file for later runs.

## Command line

```
brpcluster path/to/results.csv
brpcluster path/to/results.csv --matrix path/to/time_matrix.csv
```

This loads the stations, adds the depot, loads or computes and saves the
travel-time matrix, and prints `Stations loaded: N` (the depot included).
Without a path it reads `../data/results.csv`.

## Library overview

- `brpcluster.station` — `Coordinate`, `StationStatus` (`SURPLUS`, `DEFICIT`
  or `BALANCED`) and the `Station` dataclass, whose `status()` compares
  current and optimal inventory.
- `brpcluster.param` — `Param`: loading time per bike (`t_load`), the
  composite-distance weights `alpha` and `beta`, and the numbers of stations,
  clusters and vehicles.
- `brpcluster.metric`
  - `compute_bcrf(stations, param)` sets each non-depot station's `bcrf`:
    the UDF difference between current and optimal inventory divided by
    `t_load` times the imbalance (0.0 when balanced).
  - `udf_reduction_sum(s1, s2)` is the UDF gain from moving bikes between a
    surplus and a deficit station, and 0.0 for any other pair.
  - `composite_distance(...)` is `alpha * travel/max_travel - beta *
    complementarity/max_complementarity`.
  - `composite_distance_matrix(stations, travel_time_matrix, alpha, beta)`
    applies it to every pair, normalising each row by its own maxima; the
    depot's row and column stay at -1.0.
  - `format_matrix(matrix, num_stations)` renders a matrix as text.
- `brpcluster.problem` — `ProblemInstance` (attributes `stations`,
  `time_matrix`, `transfers`) and the helpers `load_stations`, `make_depot`,
  `euclidean_distance`, `compute_time_matrix`, `save_time_matrix`,
  `load_time_matrix` and `parse_durations` (turns the `durations` table of a
  JSON routing response into a square matrix), plus `main` for the command.
- `brpcluster.kmedoids` — `KMedoids(stations, k, composite_distance)`, with
  `init_medoids_bcrf`, `init_medoids_balanced` and `init_medoids_dispersion`,
  `assign_to_clusters`, `update_medoids`, and `run(lam,
  convergence_threshold=1e-6, max_iterations=1000)`, which starts from the
  dispersion medoids and iterates until no medoid moves. The depot (index 0)
  is never assigned to a cluster. `lam` does not affect the result.
- `brpcluster.transfer_tuple` — `TransferTuple`: surplus and deficit station
  indices, `bike_allocations` mapping `(from, to)` to a number of bikes, and
  `delta_udf`; `stations()`, `size()` and `describe()`.
- `brpcluster.tuple_evaluator` — `TupleClusterEvaluator(max_surplus,
  max_deficit)`:
  - `evaluate_tuple` moves bikes greedily from surplus to deficit stations in
    order of decreasing `bcrf`;
  - `generate_tuples` tries every combination from the largest pattern down
    and keeps those with positive gain that are not covered by one kept
    earlier;
  - `evaluate_cluster` splits a cluster into surplus and deficit stations and
    returns a `ClusterEvaluationResult` with the generated tuples and their
    summed gain;
  - `greedy_select_exclusive_tuples` picks tuples by decreasing gain, then
    size, so that no station is used twice.

## Example

```python
from brpcluster.kmedoids import KMedoids
from brpcluster.metric import compute_bcrf, composite_distance_matrix
from brpcluster.param import Param
from brpcluster.problem import ProblemInstance
from brpcluster.tuple_evaluator import TupleClusterEvaluator

instance = ProblemInstance("results.csv")
stations = instance.stations

param = Param(60, 2, 0.5, 10, 10, 10)
compute_bcrf(stations, param)
matrix = composite_distance_matrix(stations, instance.time_matrix, param.alpha, param.beta)

clusters = KMedoids(stations, 3, matrix).run(0.5)

evaluator = TupleClusterEvaluator(3, 3)
for cluster in clusters:
    result = evaluator.evaluate_cluster(cluster, stations)
    chosen = evaluator.greedy_select_exclusive_tuples(result.assigned_tuples)
    for transfer in chosen:
        print(transfer.describe())
```

Progress messages are sent to the standard `logging` module.

## What the package does not do

- It does not query a routing service: travel times are straight-line
  estimates or read from a file. `parse_durations` only parses a response
  that has already been fetched.
- It does not plan vehicle routes or assign clusters to vehicles; the
  vehicle count in `Param` is carried but not used.