"""Tests for saccadic.core.thresholds — severity bands and grades."""

import pytest
from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Band, Thresholds
from saccadic.core.types import Severity


class TestBand:
    def test_exclusive_edges(self) -> None:
        band = Band(1.0, 2.0)
        assert band.classify(0.99) == Severity.PASS
        assert band.classify(1.0) == Severity.WARN
        assert band.classify(2.0) == Severity.FAIL

    def test_inclusive_edges(self) -> None:
        band = Band(1.0, 2.0)
        assert band.classify(1.0, inclusive=True) == Severity.PASS
        assert band.classify(2.0, inclusive=True) == Severity.WARN


class TestSeverities:
    def test_size_fail(self) -> None:
        # 33% off is well past the 5% fail edge
        assert DEFAULT_THRESHOLDS.size_severity(300, 200) == Severity.FAIL

    def test_size_warn(self) -> None:
        assert DEFAULT_THRESHOLDS.size_severity(100, 104) == Severity.WARN

    def test_size_zero_expected_passes(self) -> None:
        assert DEFAULT_THRESHOLDS.size_severity(0, 10) == Severity.PASS

    def test_position_small_reference_is_floored(self) -> None:
        # 2px off a 10px reference would be 20%, but the floor makes it 2/100
        assert DEFAULT_THRESHOLDS.position_severity(10, 12, 10) == Severity.PASS
        assert DEFAULT_THRESHOLDS.position_severity(10, 14, 10) == Severity.WARN
        assert DEFAULT_THRESHOLDS.position_severity(10, 15, 10) == Severity.FAIL

    def test_position_large_reference(self) -> None:
        assert DEFAULT_THRESHOLDS.position_severity(1000, 1010, 1000) == Severity.PASS
        assert DEFAULT_THRESHOLDS.position_severity(1000, 1030, 1000) == Severity.WARN
        assert DEFAULT_THRESHOLDS.position_severity(1000, 1050, 1000) == Severity.FAIL

    def test_pixel(self) -> None:
        assert DEFAULT_THRESHOLDS.pixel_severity(0.005) == Severity.PASS
        assert DEFAULT_THRESHOLDS.pixel_severity(0.02) == Severity.WARN
        assert DEFAULT_THRESHOLDS.pixel_severity(0.5) == Severity.FAIL


class TestGrades:
    @pytest.mark.parametrize(
        'score, grade',
        [(1.0, 'A'), (0.96, 'A'), (0.95, 'B'), (0.86, 'B'), (0.85, 'C'), (0.71, 'C'), (0.51, 'D'), (0.5, 'F'), (0.0, 'F')],
    )
    def test_cut_points(self, score: float, grade: str) -> None:
        assert DEFAULT_THRESHOLDS.grade(score) == grade

    def test_monotone(self) -> None:
        order = 'FDCBA'
        scores = [i / 100 for i in range(101)]
        ranks = [order.index(DEFAULT_THRESHOLDS.grade(s)) for s in scores]
        assert ranks == sorted(ranks)


class TestOverrides:
    def test_with_pixel_fraction(self) -> None:
        assert Thresholds.with_pixel_fraction(0.1).pixel_channel == 26
        assert Thresholds.with_pixel_fraction(0.0).pixel_channel == 0

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_THRESHOLDS.pixel_channel = 1  # type: ignore[misc]
