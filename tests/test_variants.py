import pytest

from Seed_Frontier.engine.overlap import PhysicalMeeting, SphereIntersection
from Seed_Frontier.engine.policies import DegreeAscending, Fifo, RandomPriority
from Seed_Frontier.engine.result import TerminationReason
from Seed_Frontier.engine.schedulers import GlobalLowestPriority, RoundRobin, SmallestFrontierFirst
from Seed_Frontier.engine.termination import Exhaustion, TransitiveConnectivity
from Seed_Frontier.engine.variants import VARIANTS, variant_config, variant_names
from Seed_Frontier.errors import InvalidConfigurationError
from Seed_Frontier.graph.generators import grid_graph, grid_node, hub_graph, star_graph


def test_variant_catalogue():
    names = variant_names()
    assert names[:6] == (
        "degree-prioritised",
        "path-preserving",
        "retrospective-salience",
        "standard-bfs",
        "random-priority",
        "frontier-balanced",
    )
    assert len([n for n in names if n.startswith("overlap-")]) == 9


def test_standard_bfs_is_fifo_round_robin():
    cfg = variant_config("standard-bfs")
    assert isinstance(cfg.priority_policy, Fifo)
    assert isinstance(cfg.scheduler, RoundRobin)
    assert isinstance(cfg.overlap_strategy, PhysicalMeeting)
    assert isinstance(cfg.termination_strategy, Exhaustion)


def test_frontier_balanced_uses_smallest_frontier():
    assert isinstance(variant_config("frontier-balanced").scheduler, SmallestFrontierFirst)


def test_random_priority_takes_rng_seed():
    cfg = variant_config("random-priority", rng_seed=9)
    assert isinstance(cfg.priority_policy, RandomPriority)
    assert cfg.priority_policy.seed == 9


def test_overlap_variant_combines_strategies():
    cfg = variant_config("overlap-sphere-transitive")
    assert isinstance(cfg.priority_policy, DegreeAscending)
    assert isinstance(cfg.scheduler, GlobalLowestPriority)
    assert isinstance(cfg.overlap_strategy, SphereIntersection)
    assert isinstance(cfg.termination_strategy, TransitiveConnectivity)


def test_each_call_builds_fresh_strategies():
    a = variant_config("retrospective-salience")
    b = variant_config("retrospective-salience")
    assert a.priority_policy is not b.priority_policy


def test_overrides_and_unknown_names():
    cfg = variant_config("degree-prioritised", max_iterations=7)
    assert cfg.max_iterations == 7
    with pytest.raises(InvalidConfigurationError):
        variant_config("no-such-variant")
    with pytest.raises(InvalidConfigurationError):
        variant_config("standard-bfs", colour="blue")


@pytest.mark.parametrize("name", sorted(VARIANTS))
def test_every_variant_runs(make_engine, name):
    result = make_engine(
        hub_graph(3, 4), ["L0_0", "L1_0", "L2_0"], variant_config(name)
    ).run()
    assert result.termination_reason in {
        TerminationReason.OVERLAP_SATISFIED,
        TerminationReason.EXHAUSTION,
    }
    assert {"L0_0", "L1_0", "L2_0"} <= result.sampled_nodes


def test_retrospective_salience_switches_during_run(make_engine):
    cfg = variant_config("retrospective-salience")
    engine = make_engine(star_graph(6), ["S0", "S3"], cfg)
    engine.run()
    assert engine.config.priority_policy.salience_active
    assert not cfg.priority_policy.salience_active


def test_reused_salience_config_starts_in_degree_phase(make_engine):
    cfg = variant_config("retrospective-salience", target_paths_per_pair=3)
    seeds = [grid_node(0, 0), grid_node(4, 4)]

    first = make_engine(grid_graph(5, 5), seeds, cfg)
    first.run()
    second = make_engine(grid_graph(5, 5), seeds, cfg)
    assert not second.config.priority_policy.salience_active
    second.run()

    assert [f.expansion_order for f in first.frontiers] == [
        f.expansion_order for f in second.frontiers
    ]


def test_variant_table_is_read_only():
    with pytest.raises(TypeError):
        VARIANTS["custom"] = lambda seed: {}
    assert len(variant_names()) == 15
