import sys
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from Seed_Frontier.engine.engine import ExpansionEngine
from Seed_Frontier.graph.expander import NetworkXExpander


@pytest.fixture
def make_engine():
    """Build an engine over a networkx graph."""

    def _make(graph, seeds, config=None):
        return ExpansionEngine(NetworkXExpander(graph), seeds, config)

    return _make
