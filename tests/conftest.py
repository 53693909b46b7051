"""
atomgraph Test Configuration

Shared fixtures and utilities for test suite.
"""

import itertools
import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure atomgraph package is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from atomgraph.data.structure import Structure  # noqa: E402


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def simple_cubic_supercell():
    """3x3x3 supercell of simple cubic Po (a = 1 Å), 27 sites."""
    frac = [np.array(p) / 3.0 for p in itertools.product(range(3), repeat=3)]
    return Structure.from_fractional(["Po"] * 27, frac, np.eye(3) * 3.0)


@pytest.fixture
def cscl_structure():
    """CsCl (B2), a = 4.12 Å."""
    return Structure.from_fractional(
        ["Cs", "Cl"], [[0, 0, 0], [0.5, 0.5, 0.5]], np.eye(3) * 4.12
    )


@pytest.fixture
def fcc_conventional():
    """Conventional FCC Cu cell (4 sites), a = 3.6 Å."""
    frac = [[0, 0, 0], [0.5, 0.5, 0], [0.5, 0, 0.5], [0, 0.5, 0.5]]
    return Structure.from_fractional(["Cu"] * 4, frac, np.eye(3) * 3.6)


@pytest.fixture
def methane():
    """CH4 with tetrahedral H around C, no lattice."""
    positions = [
        [0.0, 0.0, 0.0],
        [0.63, 0.63, 0.63],
        [-0.63, -0.63, 0.63],
        [-0.63, 0.63, -0.63],
        [0.63, -0.63, -0.63],
    ]
    return Structure(["C", "H", "H", "H", "H"], positions)


@pytest.fixture
def hydrogen_chain():
    """Four H atoms on a line, 1 Å apart, no lattice."""
    positions = [[float(x), 0.0, 0.0] for x in range(4)]
    return Structure(["H"] * 4, positions)


@pytest.fixture
def coincident_molecule():
    """Two H atoms at the same position plus an O."""
    return Structure(["H", "H", "O"], [[0, 0, 0], [0, 0, 0], [1.0, 0, 0]])


def pytest_collection_modifyitems(items):
    """
    Auto-classify tests by folder:
    - tests/integration/** -> integration
    - others -> unit
    """
    for item in items:
        node = item.nodeid.replace("\\", "/")
        if "tests/integration/" in node:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
