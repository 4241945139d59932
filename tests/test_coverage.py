"""
test_coverage.py — Tests for per-position safety coverage
"""

import numpy as np
import pytest

from safepath.coverage import CoverageTable, coverage_counts, gap_regions
from safepath.graph import GraphInputError, SafetyWindow


class TestCoverageCounts:
    def test_two_runs(self):
        coverage = coverage_counts([[(0, 4)], [(2, 6)]], 8)
        np.testing.assert_array_equal(coverage, [1, 1, 2, 2, 1, 1, 0, 0])
        assert gap_regions(coverage) == [(6, 8)]

    def test_overlap_within_run_counts_once(self):
        coverage = coverage_counts([[(0, 4), (2, 6)]], 8)
        np.testing.assert_array_equal(coverage, [1, 1, 1, 1, 1, 1, 0, 0])

    def test_clamped(self):
        coverage = coverage_counts([[(-2, 3)], [(6, 20)]], 8)
        np.testing.assert_array_equal(coverage, [1, 1, 1, 0, 0, 0, 1, 1])

    def test_no_runs(self):
        coverage = coverage_counts([], 5)
        np.testing.assert_array_equal(coverage, np.zeros(5))
        assert gap_regions(coverage) == [(0, 5)]

    def test_nonpositive_length(self):
        with pytest.raises(GraphInputError):
            coverage_counts([[(0, 1)]], 0)

    def test_partition_law(self, rng):
        """Gap regions are exactly the zero-coverage positions."""
        length = 60
        for _ in range(20):
            runs = []
            for _ in range(rng.integers(1, 5)):
                starts = rng.integers(0, length, size=3)
                runs.append([(int(s), int(s + w)) for s, w in zip(starts, rng.integers(1, 10, size=3))])
            coverage = coverage_counts(runs, length)
            assert coverage.max() <= len(runs)
            in_gap = np.zeros(length, dtype=bool)
            for s, e in gap_regions(coverage):
                assert s < e
                assert not in_gap[s:e].any()
                in_gap[s:e] = True
            np.testing.assert_array_equal(in_gap, coverage == 0)


class TestGapRegions:
    @pytest.mark.parametrize("coverage, expected", [
        ([1, 1, 1], []),
        ([0, 0, 0], [(0, 3)]),
        ([0, 1, 0, 0, 2], [(0, 1), (2, 4)]),
        ([2, 0], [(1, 2)]),
    ])
    def test_cases(self, coverage, expected):
        assert gap_regions(np.array(coverage)) == expected


class TestCoverageTable:
    def test_summary(self):
        table = CoverageTable.from_windows([[(0, 4)], [(2, 6)]], 8)
        assert table.length == 8
        assert table.n_alignments == 2
        assert table.gaps == [(6, 8)]
        assert table.covered_positions == 6
        assert table.safe_fraction == pytest.approx(0.75)
        assert table.max_coverage == 2
        np.testing.assert_allclose(table.fractions, [0.5, 0.5, 1, 1, 0.5, 0.5, 0, 0])

    def test_fractions_without_runs(self):
        table = CoverageTable.from_windows([], 4)
        np.testing.assert_array_equal(table.fractions, np.zeros(4))

    def test_from_safety_windows(self):
        runs = [[SafetyWindow(0, 4, 3, 7)], [SafetyWindow(2, 6, 0, 4)]]
        table = CoverageTable.from_safety_windows(runs, 8)
        np.testing.assert_array_equal(table.counts, [1, 1, 2, 2, 1, 1, 0, 0])

    def test_alignments_overlapping(self):
        table = CoverageTable.from_windows([[(0, 4)], [(2, 6)], [(7, 8)]], 8)
        assert table.alignments_overlapping(4, 5) == [1]
        assert table.alignments_overlapping(3, 3) == [0, 1]
        assert table.alignments_overlapping(7, 1) == [0, 1, 2]
        assert table.alignments_overlapping(6, 6) == []
