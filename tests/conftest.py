"""
conftest.py — Shared pytest fixtures for the safepath test suite

Provides seeded random generators, a random protein factory and a
factory for fully connected lattice graphs (every diagonal, horizontal
and vertical unit move present, with random probabilities).
"""

import pytest
import numpy as np

from safepath.graph import AlignmentGraph, Edge


AMINO_ACIDS = np.array(list("ACDEFGHIKLMNPQRSTVWY"))


# ---------------------------------------------------------------------------
# Random number generator fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def rng():
    """Seeded random generator for reproducible tests."""
    return np.random.default_rng(888)


@pytest.fixture
def rng_alt():
    """Alternative seed for diversity in randomized tests."""
    return np.random.default_rng(123)


# ---------------------------------------------------------------------------
# Sequence and graph generation helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def random_protein_factory():
    """Factory fixture returning a function to generate random protein strings."""
    def _random_protein(length: int, rng: np.random.Generator) -> str:
        return "".join(rng.choice(AMINO_ACIDS, size=length))
    return _random_protein


def lattice_edges(n: int, m: int, rng: np.random.Generator):
    """All unit moves on an (n+1) x (m+1) grid, diagonal first."""
    edges = []
    for i in range(n + 1):
        for j in range(m + 1):
            if i < n and j < m:
                edges.append(Edge((i, j), (i + 1, j + 1), float(rng.uniform(0.05, 1.0))))
            if i < n:
                edges.append(Edge((i, j), (i + 1, j), float(rng.uniform(0.05, 1.0))))
            if j < m:
                edges.append(Edge((i, j), (i, j + 1), float(rng.uniform(0.05, 1.0))))
    return edges


@pytest.fixture
def lattice_graph_factory(random_protein_factory):
    """Factory fixture returning a function that builds a lattice AlignmentGraph."""
    def _lattice(n: int, m: int, rng: np.random.Generator, **kwargs) -> AlignmentGraph:
        return AlignmentGraph(
            representative=random_protein_factory(n, rng),
            member=random_protein_factory(m, rng),
            edges=tuple(lattice_edges(n, m, rng)),
            **kwargs,
        )
    return _lattice


@pytest.fixture
def scenario_a_edges():
    """ABCD vs ABXD along the main diagonal."""
    return [
        Edge((0, 0), (1, 1), 0.9),
        Edge((1, 1), (2, 2), 0.9),
        Edge((2, 2), (3, 3), 0.5),
        Edge((3, 3), (4, 4), 0.9),
    ]
