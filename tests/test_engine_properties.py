"""Behavioural properties of complete runs across graphs and strategies."""

import networkx as nx
import pytest

from invariants import checks
from Seed_Frontier.config import ExpansionConfig
from Seed_Frontier.engine.overlap import PhysicalMeeting, SphereIntersection, ThresholdSharing
from Seed_Frontier.engine.policies import (
    DegreeAscending,
    Fifo,
    PathPotential,
    RandomPriority,
    RetrospectiveSalience,
)
from Seed_Frontier.engine.result import TerminationReason
from Seed_Frontier.engine.schedulers import (
    GlobalLowestPriority,
    RoundRobin,
    SmallestFrontierFirst,
)
from Seed_Frontier.engine.termination import (
    CommonConvergence,
    CoverageThreshold,
    Exhaustion,
    FullPairwise,
    TransitiveConnectivity,
)
from Seed_Frontier.graph.generators import (
    barbell_graph,
    chain_graph,
    grid_graph,
    grid_node,
    hub_graph,
    star_graph,
)

POLICIES = [
    DegreeAscending,
    Fifo,
    lambda: RandomPriority(seed=5),
    PathPotential,
    RetrospectiveSalience,
]
SCHEDULERS = [RoundRobin, SmallestFrontierFirst, GlobalLowestPriority]


def _small_world():
    g = nx.connected_watts_strogatz_graph(30, 4, 0.3, seed=1)
    return nx.relabel_nodes(g, {i: f"W{i}" for i in g.nodes})


CONNECTED = [
    pytest.param(grid_graph(5, 5), [grid_node(0, 0), grid_node(4, 4), grid_node(0, 4)], id="grid"),
    pytest.param(hub_graph(3, 4), ["L0_0", "L1_1", "L2_3"], id="hubs"),
    pytest.param(barbell_graph(4, 3), ["A3", "B3"], id="barbell"),
    pytest.param(_small_world(), ["W0", "W10", "W20"], id="small-world"),
]


@pytest.mark.parametrize("graph, seeds", CONNECTED)
@pytest.mark.parametrize("termination", [CommonConvergence, FullPairwise, TransitiveConnectivity])
@pytest.mark.parametrize("overlap", [PhysicalMeeting, ThresholdSharing, SphereIntersection])
def test_connected_graphs_always_terminate(make_engine, graph, seeds, termination, overlap):
    cfg = ExpansionConfig(overlap_strategy=overlap(), termination_strategy=termination())
    result = make_engine(graph, seeds, cfg).run()

    assert result.termination_reason in {
        TerminationReason.OVERLAP_SATISFIED,
        TerminationReason.EXHAUSTION,
    }
    assert result.overlap_metadata.iterations <= len(seeds) * graph.number_of_nodes()
    assert checks.stats_consistent(result)


@pytest.mark.parametrize("graph, seeds", CONNECTED)
@pytest.mark.parametrize("termination", [FullPairwise, Exhaustion])
def test_physical_overlap_count_equals_intersection(make_engine, graph, seeds, termination):
    cfg = ExpansionConfig(termination_strategy=termination())
    result = make_engine(graph, seeds, cfg).run()

    assert checks.overlap_matches_intersection(result)


@pytest.mark.parametrize("graph, seeds", CONNECTED)
@pytest.mark.parametrize("policy", POLICIES)
@pytest.mark.parametrize("scheduler", SCHEDULERS)
def test_paths_lie_in_sample_along_traversed_edges(make_engine, graph, seeds, policy, scheduler):
    cfg = ExpansionConfig(
        priority_policy=policy(),
        scheduler=scheduler(),
        termination_strategy=Exhaustion(),
        target_paths_per_pair=5,
    )
    result = make_engine(graph, seeds, cfg).run()

    assert result.paths
    assert checks.paths_within_sample(result)
    assert checks.paths_follow_edges(result)
    for path in result.paths:
        assert path.nodes[0] == result.seeds[path.from_seed]
        assert path.nodes[-1] == result.seeds[path.to_seed]
        assert len(set(path.nodes)) == len(path.nodes)
        for u, v in path.edges:
            assert graph.has_edge(u, v)


@pytest.mark.parametrize("policy", POLICIES)
@pytest.mark.parametrize("scheduler", SCHEDULERS)
def test_star_hub_is_always_sampled(make_engine, policy, scheduler):
    cfg = ExpansionConfig(priority_policy=policy(), scheduler=scheduler())
    result = make_engine(star_graph(10), ["S0", "S5"], cfg).run()

    assert "H" in result.sampled_nodes
    assert all("H" in p.nodes for p in result.paths)


@pytest.mark.parametrize("graph, seeds", [
    (grid_graph(4, 4), [grid_node(0, 0), grid_node(3, 3)]),
    (chain_graph(9), ["N0", "N8"]),
    (barbell_graph(3, 2), ["A2", "B2"]),
])
def test_full_pairwise_runs_at_least_as_long_as_convergence(make_engine, graph, seeds):
    def iterations(termination):
        cfg = ExpansionConfig(termination_strategy=termination)
        return make_engine(graph, seeds, cfg).run().overlap_metadata.iterations

    assert iterations(FullPairwise()) >= iterations(CommonConvergence())


def test_transitive_is_between_convergence_and_full_pairwise(make_engine):
    graph = grid_graph(6, 6)
    seeds = [grid_node(0, 0), grid_node(0, 5), grid_node(5, 0), grid_node(5, 5)]

    def result(termination):
        cfg = ExpansionConfig(
            priority_policy=Fifo(), termination_strategy=termination
        )
        return make_engine(graph, seeds, cfg).run()

    transitive = result(TransitiveConnectivity())
    full = result(FullPairwise())
    assert transitive.overlap_metadata.iterations <= full.overlap_metadata.iterations
    assert len(full.overlap_metadata.overlap_matrix) == 6
    assert len(transitive.overlap_metadata.overlap_matrix) >= 3


def test_degree_ascending_pops_lowest_degree_candidate(make_engine):
    graph = hub_graph(3, 5)
    graph.add_edge("L0_0", "L1_0")
    cfg = ExpansionConfig(
        priority_policy=DegreeAscending(),
        n1_handling=CoverageThreshold(graph.number_of_nodes(), 1.0),
    )
    engine = make_engine(graph, ["L0_1"], cfg)
    frontier = engine.frontiers[0]
    assert engine.step()
    while frontier.queue:
        queued = [graph.degree(n) for n in frontier.queue]
        running = engine.step()
        assert graph.degree(frontier.expansion_order[-1]) == min(queued)
        if not running:
            break
    assert len(frontier.visited) == graph.number_of_nodes()


def test_degree_ascending_defers_hubs(make_engine):
    graph = hub_graph(2, 6)
    cfg = ExpansionConfig(
        priority_policy=DegreeAscending(),
        n1_handling=CoverageThreshold(graph.number_of_nodes(), 1.0),
    )
    engine = make_engine(graph, ["L0_0"], cfg)
    engine.run()
    order = engine.frontiers[0].expansion_order
    # the leaf's own hub is its only way in; the second hub comes last
    assert order[:2] == ["L0_0", "H0"]
    assert order.index("H1") > max(order.index(f"L0_{i}") for i in range(6))
