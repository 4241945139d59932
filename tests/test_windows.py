"""
test_windows.py — Tests for safety-window projection onto alignments
"""

import numpy as np
import pytest

from safepath.graph import SafetyWindow
from safepath.path_builder import extend_from_edge
from safepath.reconstruct import reconstruct_alignment
from safepath.windows import (
    merge_windows,
    position_windows,
    project,
    project_windows,
    to_sequence_windows,
    traversal_points,
)


class TestTraversalPoints:
    def test_skips_gap_columns(self):
        points = traversal_points("A-BC", "AXB-")
        np.testing.assert_array_equal(points, [[1, 1], [2, 3]])

    def test_all_gaps_on_one_side(self):
        assert traversal_points("AB", "--").shape == (0, 2)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            traversal_points("AB", "A")

    def test_origin_offsets_positions(self):
        points = traversal_points("CD", "C-", origin=(2, 3))
        np.testing.assert_array_equal(points, [[3, 4]])


class TestProject:
    def test_window_on_identity_path(self):
        rep, mem = project("ABC", "ABC", [(1, 3)], [(1, 3)])
        assert rep == [(1, 3)]
        assert mem == [(1, 3)]

    def test_clipped_to_alignment(self):
        rep, mem = project("ABC", "ABC", [(1, 5)], [(1, 5)])
        assert rep == [(1, 3)]
        assert mem == [(1, 3)]

    def test_off_diagonal_window_dropped(self):
        rep, mem = project("ABC", "ABC", [(1, 3)], [(2, 4)])
        assert rep == [] and mem == []

    def test_gapped_alignment(self):
        # traversal points (1,1), (3,3), (4,4)
        windows = [SafetyWindow(1, 4, 1, 4), SafetyWindow(2, 2, 2, 2)]
        kept = project_windows("AB-CD", "A-XCD", windows)
        assert kept == [(0, SafetyWindow(1, 4, 1, 4))]

    def test_indices_point_at_input(self):
        windows = [SafetyWindow(5, 6, 1, 2), SafetyWindow(2, 3, 2, 3)]
        kept = project_windows("ABCD", "ABCD", windows)
        assert [idx for idx, _ in kept] == [1]
        assert kept[0][1] == SafetyWindow(2, 3, 2, 3)

    def test_alignment_starting_mid_matrix(self):
        """Windows are matched against absolute residue numbers."""
        windows = [SafetyWindow(1, 2, 1, 2), SafetyWindow(3, 5, 3, 5)]
        assert project_windows("CD", "CD", windows, origin=(2, 2)) == [
            (1, SafetyWindow(3, 4, 3, 4)),
        ]

    def test_lists_must_pair(self):
        with pytest.raises(ValueError):
            project("ABC", "ABC", [(1, 3)], [])

    def test_idempotent(self, lattice_graph_factory, rng):
        graph = lattice_graph_factory(9, 9, rng)
        path = extend_from_edge(graph.outgoing((0, 0))[0], graph)
        res = reconstruct_alignment(path, graph.representative, graph.member, graph)
        for _ in range(10):
            starts = rng.integers(1, 9, size=(4, 2))
            lengths = rng.integers(0, 5, size=4)
            rep_w = [(int(s), int(s + n)) for (s, _), n in zip(starts, lengths)]
            mem_w = [(int(t), int(t + n)) for (_, t), n in zip(starts, lengths)]
            once = project(res.aligned_representative, res.aligned_member, rep_w, mem_w)
            twice = project(res.aligned_representative, res.aligned_member, *once)
            assert twice == once
            for (rs, re_), (ms, me) in zip(*once):
                assert ms - rs == me - re_


class TestCoordinateConversion:
    def test_position_windows(self):
        windows = [SafetyWindow(0, 3, 0, 3), SafetyWindow(4, 4, 4, 4), SafetyWindow(5, 7, 6, 8)]
        converted = position_windows(windows)
        assert converted == [
            (0, SafetyWindow(1, 3, 1, 3)),
            (2, SafetyWindow(6, 7, 7, 8)),
        ]

    def test_to_sequence_windows(self):
        windows = [SafetyWindow(0, 3, 2, 2), SafetyWindow(4, 4, 1, 5)]
        rep, mem = to_sequence_windows(windows)
        assert rep == [(1, 3)]
        assert mem == [(2, 5)]


class TestMergeWindows:
    def test_overlapping_and_adjacent(self):
        assert merge_windows([(5, 7), (1, 3), (4, 4), (10, 12)]) == [(1, 7), (10, 12)]

    def test_nested(self):
        assert merge_windows([(1, 10), (3, 4)]) == [(1, 10)]

    def test_empty(self):
        assert merge_windows([]) == []
