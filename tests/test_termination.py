import pytest

from Seed_Frontier.engine.frontier import FrontierState
from Seed_Frontier.engine.result import OverlapEvent
from Seed_Frontier.engine.termination import (
    CommonConvergence,
    CoverageThreshold,
    Exhaustion,
    FullPairwise,
    TransitiveConnectivity,
    overlap_graph,
)
from Seed_Frontier.errors import InvalidConfigurationError


def _frontiers(*visited_sets):
    out = []
    for i, visited in enumerate(visited_sets):
        f = FrontierState(index=i, seed=f"s{i}")
        f.visited.update(visited)
        out.append(f)
    return out


ALL = [CommonConvergence, FullPairwise, TransitiveConnectivity, Exhaustion]


@pytest.mark.parametrize("cls", ALL)
def test_single_frontier_is_immediately_terminal(cls):
    assert cls().should_terminate(_frontiers({"s0"}), [], 1)


def test_common_convergence_needs_global_intersection():
    strategy = CommonConvergence()
    assert not strategy.should_terminate(_frontiers({"a", "x"}, {"b", "x"}, {"c"}), [], 3)
    assert strategy.should_terminate(
        _frontiers({"a", "x"}, {"b", "x"}, {"c", "x"}), [], 3
    )


def test_full_pairwise_needs_every_pair():
    frontiers = _frontiers(set(), set(), set())
    strategy = FullPairwise()
    events = [OverlapEvent(1, 0, 1, "m"), OverlapEvent(2, 2, 1, "n")]
    assert not strategy.should_terminate(frontiers, events, 2)
    events.append(OverlapEvent(3, 2, 0, "k"))
    assert strategy.should_terminate(frontiers, events, 3)


def test_transitive_connectivity_accepts_chains():
    frontiers = _frontiers(set(), set(), set())
    strategy = TransitiveConnectivity()
    events = [OverlapEvent(1, 0, 1, "m")]
    assert not strategy.should_terminate(frontiers, events, 1)
    events.append(OverlapEvent(2, 1, 2, "n"))
    assert strategy.should_terminate(frontiers, events, 2)
    # the stricter rule is not yet satisfied
    assert not FullPairwise().should_terminate(frontiers, events, 2)


def test_pair_tracking_resets_between_runs():
    frontiers = _frontiers(set(), set())
    strategy = FullPairwise()
    assert strategy.should_terminate(frontiers, [OverlapEvent(1, 0, 1, "m")], 1)
    strategy.reset()
    assert not strategy.should_terminate(frontiers, [], 1)


def test_exhaustion_never_stops_on_overlap():
    frontiers = _frontiers({"x"}, {"x"})
    assert not Exhaustion().should_terminate(frontiers, [OverlapEvent(1, 0, 1, "x")], 1)


def test_overlap_graph_has_node_per_frontier():
    g = overlap_graph(4, [OverlapEvent(1, 0, 1, "m"), OverlapEvent(2, 1, 0, "n")])
    assert sorted(g.nodes) == [0, 1, 2, 3]
    assert sorted(g.edges) == [(0, 1)]


def test_coverage_threshold():
    handler = CoverageThreshold(total_nodes=10, coverage=0.3)
    f = _frontiers({"a", "b"})[0]
    assert handler.required == 3
    assert not handler.satisfied(f)
    f.visited.add("c")
    assert handler.satisfied(f)
    assert handler.achieved(f) == pytest.approx(0.3)


@pytest.mark.parametrize("total, coverage", [(0, 0.5), (10, 0.0), (10, 1.2)])
def test_coverage_threshold_validation(total, coverage):
    with pytest.raises(InvalidConfigurationError):
        CoverageThreshold(total, coverage)
