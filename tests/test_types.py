"""Tests for saccadic.core.types — geometry and element labels."""

import pytest
from saccadic.core.types import Bounds, Element, Severity, Spacing, Viewport


class TestBounds:
    def test_edges_and_area(self) -> None:
        b = Bounds(10, 20, 30, 40)
        assert b.right == 40
        assert b.bottom == 60
        assert b.area == 1200

    def test_iou_identical(self) -> None:
        b = Bounds(0, 0, 10, 10)
        assert b.iou(b) == 1.0

    def test_iou_disjoint(self) -> None:
        assert Bounds(0, 0, 10, 10).iou(Bounds(50, 50, 10, 10)) == 0.0

    def test_iou_half_overlap(self) -> None:
        assert Bounds(0, 0, 10, 10).iou(Bounds(5, 0, 10, 10)) == pytest.approx(1 / 3)

    def test_iou_symmetric_and_bounded(self) -> None:
        pairs = [
            (Bounds(0, 0, 10, 10), Bounds(3, 4, 20, 5)),
            (Bounds(0, 0, 100, 50), Bounds(90, 40, 30, 30)),
            (Bounds(5, 5, 1, 1), Bounds(0, 0, 10, 10)),
        ]
        for a, b in pairs:
            assert a.iou(b) == pytest.approx(b.iou(a))
            assert 0.0 <= a.iou(b) <= 1.0

    def test_zero_area_boxes(self) -> None:
        assert Bounds(0, 0, 0, 0).iou(Bounds(0, 0, 0, 0)) == 0.0

    def test_contains_touching_edges(self) -> None:
        outer = Bounds(0, 0, 100, 100)
        assert outer.contains(Bounds(0, 0, 100, 100))
        assert outer.contains(Bounds(10, 10, 20, 20))
        assert not outer.contains(Bounds(90, 90, 20, 20))

    def test_overlaps(self) -> None:
        assert Bounds(0, 0, 10, 10).overlaps(Bounds(5, 5, 10, 10))
        assert not Bounds(0, 0, 10, 10).overlaps(Bounds(20, 20, 5, 5))


class TestElementLabel:
    def test_keyed(self) -> None:
        e = Element(category='Text', bounds=Bounds(1, 2, 3, 4), key='heroTitle')
        assert e.label == "Key('heroTitle')"

    def test_unkeyed_uses_rounded_position(self) -> None:
        e = Element(category='Container', bounds=Bounds(10.4, 20.6, 3, 4))
        assert e.label == 'Container(10,21)'

    def test_display_name_prefers_description(self) -> None:
        e = Element(category='Text', bounds=Bounds(0, 0, 1, 1), description='Hero title')
        assert e.display_name == 'Hero title'


class TestSmallTypes:
    def test_severity_rank_order(self) -> None:
        assert Severity.FAIL.rank > Severity.WARN.rank > Severity.PASS.rank

    def test_spacing(self) -> None:
        s = Spacing(1, 2, 3, 4)
        assert s.horizontal == 6
        assert s.vertical == 4
        assert Spacing.all(0).is_zero

    def test_viewport_area(self) -> None:
        assert Viewport(1280, 800).area == 1_024_000
