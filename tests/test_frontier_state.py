import pytest

from Seed_Frontier.engine.frontier import (
    FrontierState,
    OwnershipRegistry,
    ParentEntry,
    ParentTable,
    edge_key,
)


def _entry(parent, child):
    return ParentEntry(parent, edge_key(parent, child))


def test_visit_records_parent_distance_and_iteration():
    f = FrontierState(index=0, seed="s")
    f.visit("s", None, 1)
    f.visit("a", _entry("s", "a"), 2)
    f.visit("b", _entry("a", "b"), 3)

    assert f.visited == {"s", "a", "b"}
    assert f.distances == {"s": 0, "a": 1, "b": 2}
    assert f.discovered_at["b"] == 3
    assert f.expansion_order == ["s", "a", "b"]
    assert f.radius == 2
    assert f.parents.get("s") is None
    assert f.parents.get("b") == ParentEntry("a", "a->b")
    assert f.parents.chain("b") == ["b", "a", "s"]


def test_seed_is_the_only_parentless_visit():
    f = FrontierState(index=0, seed="s")
    with pytest.raises(ValueError):
        f.visit("x", None, 1)


def test_node_gets_parent_entry_once():
    f = FrontierState(index=0, seed="s")
    f.visit("s", None, 1)
    f.visit("a", _entry("s", "a"), 2)
    with pytest.raises(ValueError):
        f.visit("a", _entry("s", "a"), 3)


def test_frozen_frontier_rejects_visits():
    f = FrontierState(index=0, seed="s")
    f.visit("s", None, 1)
    f.freeze()
    assert f.exhausted
    with pytest.raises(RuntimeError):
        f.visit("a", _entry("s", "a"), 2)


def test_parent_table_rejects_unknown_parent():
    table = ParentTable()
    table.add_root("s")
    with pytest.raises(KeyError):
        table.add("a", _entry("zz", "a"))
    table.add("a", _entry("s", "a"))
    assert table.as_dict() == {"a": ParentEntry("s", "s->a")}
    assert "a" in table and len(table) == 2


def test_ownership_first_claimant_stays_owner():
    reg = OwnershipRegistry()
    assert reg.claim("v", 2) == []
    assert reg.claim("v", 0) == [2]
    assert reg.claim("v", 1) == [2, 0]

    assert reg.owner("v") == 2
    assert reg.claimants("v") == (2, 0, 1)
    assert reg.owner("w") is None
    assert "v" in reg and len(reg) == 1
