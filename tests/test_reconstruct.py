"""
test_reconstruct.py — Tests for alignment reconstruction from paths
"""

import pytest

from safepath.graph import Edge
from safepath.path_builder import SelectedPath, extend_from_edge
from safepath.reconstruct import (
    AlignmentResult,
    InvalidPathError,
    align_point_path,
    reconstruct_alignment,
)
from safepath.validation import check_alignment_strings


# (edges, representative, member, expected aligned rep, expected aligned mem)
FIXED_CASES = [
    # gap in member, then gap in representative
    ([Edge((0, 0), (1, 0)), Edge((1, 0), (1, 1))], "A", "B", "A-", "-B"),
    # multi-unit jump: representative columns first, then member columns
    ([Edge((0, 0), (2, 1))], "AB", "C", "AB-", "--C"),
    # path starting mid-matrix
    ([Edge((1, 1), (2, 2)), Edge((2, 2), (3, 2))], "ABC", "XYZ", "BC", "Y-"),
]


class TestScenarios:
    def test_diagonal_path(self, scenario_a_edges):
        path = SelectedPath(scenario_a_edges, is_valid=True)
        result = reconstruct_alignment(path, "ABCD", "ABXD", available_edges=scenario_a_edges)
        assert result.aligned_representative == "ABCD"
        assert result.aligned_member == "ABXD"
        assert result.score == pytest.approx(0.8)
        assert result.path_length == 4
        assert result.rep_range == (0, 4)
        assert result.mem_range == (0, 4)
        assert result.identity == pytest.approx(0.75)

    @pytest.mark.parametrize("edges, rep, mem, exp_rep, exp_mem", FIXED_CASES)
    def test_fixed_cases(self, edges, rep, mem, exp_rep, exp_mem):
        result = reconstruct_alignment(SelectedPath(edges, is_valid=True), rep, mem)
        assert result.aligned_representative == exp_rep
        assert result.aligned_member == exp_mem


class TestProperties:
    def test_random_paths(self, lattice_graph_factory, rng):
        """Equal lengths, no double gaps, and ungapped strings are substrings."""
        graph = lattice_graph_factory(8, 6, rng)
        rep, mem = graph.representative, graph.member
        for idx in rng.choice(len(graph.edges), size=25, replace=False):
            path = extend_from_edge(graph.edges[idx], graph)
            result = reconstruct_alignment(path, rep, mem, available_edges=graph)
            assert len(result.aligned_representative) == len(result.aligned_member)
            ok, msg = check_alignment_strings(result.aligned_representative, result.aligned_member)
            assert ok, msg
            ungapped_rep, ungapped_mem = result.ungapped()
            assert ungapped_rep == rep[slice(*result.rep_range)]
            assert ungapped_mem == mem[slice(*result.mem_range)]
            assert 0.0 <= result.score <= 1.0

    def test_reference_distance(self, scenario_a_edges):
        path = SelectedPath(scenario_a_edges, is_valid=True)
        same = reconstruct_alignment(path, "ABCD", "ABXD", reference_path=scenario_a_edges)
        assert same.distance_from_reference == 0.0

        half = reconstruct_alignment(path, "ABCD", "ABXD", reference_path=scenario_a_edges[:2])
        assert half.distance_from_reference == pytest.approx(50.0)

        none = reconstruct_alignment(path, "ABCD", "ABXD")
        assert none.distance_from_reference == 0.0


class TestInvalidPaths:
    def test_flagged_invalid(self, scenario_a_edges):
        with pytest.raises(InvalidPathError):
            reconstruct_alignment(SelectedPath(scenario_a_edges, is_valid=False), "ABCD", "ABXD")

    def test_empty(self):
        with pytest.raises(InvalidPathError):
            reconstruct_alignment(SelectedPath.empty(), "ABCD", "ABXD")

    def test_discontinuous(self, scenario_a_edges):
        edges = [scenario_a_edges[0], scenario_a_edges[2]]
        with pytest.raises(InvalidPathError, match="not continuous"):
            reconstruct_alignment(SelectedPath(edges, is_valid=True), "ABCD", "ABXD")

    def test_foreign_edge(self, scenario_a_edges):
        path = SelectedPath([Edge((0, 0), (1, 0))], is_valid=True)
        with pytest.raises(InvalidPathError, match="does not exist"):
            reconstruct_alignment(path, "ABCD", "ABXD", available_edges=scenario_a_edges)

    def test_out_of_bounds(self, scenario_a_edges):
        path = SelectedPath(scenario_a_edges, is_valid=True)
        with pytest.raises(InvalidPathError, match="outside"):
            reconstruct_alignment(path, "ABC", "ABX")

    def test_invalid_path_error_is_value_error(self):
        assert issubclass(InvalidPathError, ValueError)


class TestAlignmentResult:
    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            AlignmentResult("AB", "A", score=1.0, path_length=1)

    def test_identity_empty(self):
        assert AlignmentResult("", "", score=0.0, path_length=0).identity == 0.0


class TestAlignPointPath:
    def test_points(self):
        rep, mem = align_point_path([(0, 0), (1, 1), (2, 1), (2, 2)], "AB", "CD")
        assert rep == "AB-"
        assert mem == "C-D"

    def test_repeated_points_ignored(self):
        rep, mem = align_point_path([[0, 0], [0, 0], [1, 1]], "A", "A")
        assert (rep, mem) == ("A", "A")

    def test_backwards_step(self):
        with pytest.raises(InvalidPathError):
            align_point_path([(0, 0), (1, 1), (0, 2)], "AB", "AB")
