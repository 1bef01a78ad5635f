import random

import pytest

from brpcluster.station import Coordinate, Station
from brpcluster.transfer_tuple import TransferTuple
from brpcluster.tuple_evaluator import ClusterEvaluationResult, TupleClusterEvaluator

SURPLUS_UDF = [9.0, 7.0, 5.0, 4.0, 5.0, 6.0, 8.0]
DEFICIT_UDF = [8.0, 6.0, 4.0, 3.0, 4.0, 5.0, 6.0]


def _station(idx, current, optimal, udf, bcrf=0.0):
    return Station(
        sys_id=f"s{idx}",
        station_id=idx,
        coordinate=Coordinate(float(idx), float(idx)),
        capacity=len(udf),
        current_inventory=current,
        optimal_inventory=optimal,
        udf_values=list(udf),
        bcrf=bcrf,
    )


@pytest.fixture
def stations():
    return [
        _station(0, 3, 3, SURPLUS_UDF),  # balanced
        _station(1, 5, 3, SURPLUS_UDF, bcrf=0.5),  # surplus
        _station(2, 1, 3, DEFICIT_UDF, bcrf=0.2),  # deficit
        _station(3, 5, 3, SURPLUS_UDF, bcrf=0.9),  # surplus
    ]


def test_evaluate_tuple_one_to_one(stations):
    result = TupleClusterEvaluator(3, 3).evaluate_tuple([1], [2], stations)
    assert result.surplus_station_indices == [1]
    assert result.deficit_station_indices == [2]
    assert result.bike_allocations == {(1, 2): 2}
    assert result.delta_udf == pytest.approx(5.0)


def test_evaluate_tuple_prefers_higher_bcrf_surplus(stations):
    result = TupleClusterEvaluator(3, 3).evaluate_tuple([1, 3], [2], stations)
    assert result.surplus_station_indices == [3]
    assert result.deficit_station_indices == [2]
    assert result.bike_allocations == {(3, 2): 2}
    assert result.delta_udf == pytest.approx(5.0)


def test_evaluate_tuple_does_not_mutate_stations(stations):
    TupleClusterEvaluator(3, 3).evaluate_tuple([1], [2], stations)
    assert stations[1].current_inventory == 5
    assert stations[2].current_inventory == 1


def test_evaluate_tuple_splits_surplus_over_deficits():
    stations = [
        _station(0, 3, 3, SURPLUS_UDF),
        _station(1, 6, 3, SURPLUS_UDF, bcrf=1.0),
        _station(2, 2, 3, DEFICIT_UDF, bcrf=0.8),
        _station(3, 1, 3, DEFICIT_UDF, bcrf=0.3),
    ]
    result = TupleClusterEvaluator(3, 3).evaluate_tuple([1], [2, 3], stations)
    assert result.bike_allocations == {(1, 2): 1, (1, 3): 2}
    assert result.surplus_station_indices == [1]
    assert result.deficit_station_indices == [2, 3]


def test_evaluate_tuple_without_partner_is_empty(stations):
    result = TupleClusterEvaluator(3, 3).evaluate_tuple([1], [], stations)
    assert result.bike_allocations == {}
    assert result.delta_udf == 0.0
    assert result.size() == 0


def test_generate_tuples_skips_covered_subsets(stations):
    tuples = TupleClusterEvaluator(3, 3).generate_tuples([1, 3], [2], stations)
    assert [(t.surplus_station_indices, t.deficit_station_indices) for t in tuples] == [
        ([3], [2]),
        ([1], [2]),
    ]
    assert all(t.delta_udf > 0 for t in tuples)


def test_generate_tuples_respects_pattern_limit(stations):
    tuples = TupleClusterEvaluator(1, 1).generate_tuples([1, 3], [2], stations)
    assert [t.surplus_station_indices for t in tuples] == [[1], [3]]


def test_generate_tuples_needs_both_sides(stations):
    assert TupleClusterEvaluator(3, 3).generate_tuples([1, 3], [], stations) == []


def test_greedy_select_orders_by_gain_then_size():
    small = TransferTuple([1], [2], {(1, 2): 1}, 4.0)
    large = TransferTuple([1, 3], [2], {(1, 2): 1, (3, 2): 1}, 4.0)
    best = TransferTuple([5], [6], {(5, 6): 1}, 9.0)
    selected = TupleClusterEvaluator(3, 3).greedy_select_exclusive_tuples(
        [small, large, best]
    )
    assert selected == [best, large]


def test_greedy_select_keeps_disjoint_tuples():
    a = TransferTuple([1], [2], {(1, 2): 1}, 3.0)
    b = TransferTuple([3], [4], {(3, 4): 1}, 2.0)
    c = TransferTuple([3], [2], {(3, 2): 1}, 1.0)
    selected = TupleClusterEvaluator(3, 3).greedy_select_exclusive_tuples([c, b, a])
    assert selected == [a, b]


def test_greedy_select_on_generated_tuples(stations):
    evaluator = TupleClusterEvaluator(3, 3)
    tuples = evaluator.generate_tuples([1, 3], [2], stations)
    selected = evaluator.greedy_select_exclusive_tuples(tuples)
    assert len(selected) == 1
    assert selected[0].surplus_station_indices == [3]


def test_evaluate_cluster_ignores_balanced_and_sums(stations):
    result = TupleClusterEvaluator(3, 3).evaluate_cluster([0, 1, 2, 3], stations)
    assert isinstance(result, ClusterEvaluationResult)
    assert len(result.assigned_tuples) == 2
    assert 0 not in set().union(*(t.stations() for t in result.assigned_tuples))
    assert result.total_delta_udf == pytest.approx(10.0)


def test_evaluate_cluster_balanced_only(stations):
    result = TupleClusterEvaluator(3, 3).evaluate_cluster([0], stations)
    assert result.assigned_tuples == []
    assert result.total_delta_udf == 0.0


def _random_stations(count, seed):
    rng = random.Random(seed)
    result = [_station(0, 5, 5, [0.0] * 10)]
    for idx in range(1, count + 1):
        udf = [rng.uniform(0.0, 20.0) for _ in range(10)]
        result.append(
            _station(
                idx,
                rng.randint(0, 9),
                rng.randint(0, 9),
                udf,
                bcrf=rng.uniform(-1.0, 1.0),
            )
        )
    return result


@pytest.mark.parametrize("seed", [42, 7, 2024])
def test_selected_tuples_are_positive_and_exclusive(seed):
    stations = _random_stations(30, seed)
    rng = random.Random(seed)
    chosen = rng.sample(range(1, len(stations)), 10)
    surplus = [i for i in chosen if stations[i].current_inventory > stations[i].optimal_inventory]
    deficit = [i for i in chosen if stations[i].current_inventory < stations[i].optimal_inventory]

    evaluator = TupleClusterEvaluator(3, 3)
    tuples = evaluator.generate_tuples(surplus, deficit, stations)
    selected = evaluator.greedy_select_exclusive_tuples(tuples)

    assert all(t.delta_udf > 0 for t in selected)
    seen: set[int] = set()
    for t in selected:
        assert not (t.stations() & seen)
        seen |= t.stations()
    for t in selected:
        assert set(t.surplus_station_indices) <= set(surplus)
        assert set(t.deficit_station_indices) <= set(deficit)