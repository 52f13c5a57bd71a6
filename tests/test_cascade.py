"""Tests for saccadic.comparison.cascade — dropping derivative feedback."""

from saccadic.comparison.cascade import suppress_cascades
from saccadic.comparison.feedback import categorize_property
from saccadic.core.types import Bounds, Element, FeedbackCategory, FeedbackItem, Mismatch, Severity, StructuralDiff


def _mismatch(label: str, prop: str, severity: Severity = Severity.FAIL) -> Mismatch:
    return Mismatch(label, prop, '1', '2', severity)


def _item(label: str | None, prop: str, severity: Severity = Severity.FAIL) -> FeedbackItem:
    return FeedbackItem(severity, categorize_property(prop), f'{label} {prop}', element=label, property=prop)


def _run(mismatches, items=None, elements=None, missing=(), extra=()):
    structural = StructuralDiff(mismatches=list(mismatches), missing=list(missing), extra=list(extra))
    if items is None:
        items = [_item(m.element, m.property, m.severity) for m in mismatches]
    return suppress_cascades(items, structural, elements)


def _kept(items) -> list[tuple[str | None, str | None]]:
    return [(i.element, i.property) for i in items]


class TestSameElement:
    def test_height_explained_by_font_size(self) -> None:
        kept = _run([_mismatch('E', 'fontSize'), _mismatch('E', 'height')])
        assert _kept(kept) == [('E', 'fontSize')]

    def test_width_explained_by_padding(self) -> None:
        kept = _run([_mismatch('E', 'paddingleft'), _mismatch('E', 'width')])
        assert _kept(kept) == [('E', 'paddingleft')]

    def test_unexplained_height_kept(self) -> None:
        kept = _run([_mismatch('E', 'backgroundColor'), _mismatch('E', 'height')])
        assert len(kept) == 2


class TestAncestors:
    ELEMENTS = [
        Element(category='Column', bounds=Bounds(0, 0, 400, 400), key='parent'),
        Element(category='Text', bounds=Bounds(20, 20, 100, 20), key='child', parent="Key('parent')"),
    ]
    PARENT = "Key('parent')"
    CHILD = "Key('child')"

    def test_child_x_explained_by_parent_padding(self) -> None:
        kept = _run([_mismatch(self.PARENT, 'paddingleft'), _mismatch(self.CHILD, 'x')], elements=self.ELEMENTS)
        assert _kept(kept) == [(self.PARENT, 'paddingleft')]

    def test_child_y_explained_by_parent_height(self) -> None:
        kept = _run([_mismatch(self.PARENT, 'height'), _mismatch(self.CHILD, 'y')], elements=self.ELEMENTS)
        assert _kept(kept) == [(self.PARENT, 'height')]

    def test_height_never_inherited(self) -> None:
        kept = _run([_mismatch(self.PARENT, 'height'), _mismatch(self.CHILD, 'height')], elements=self.ELEMENTS)
        assert len(kept) == 2

    def test_containment_counts_as_ancestor(self) -> None:
        elements = [
            Element(category='Container', bounds=Bounds(0, 0, 400, 400), key='outer'),
            Element(category='Text', bounds=Bounds(20, 20, 100, 20), key='inner'),
        ]
        kept = _run([_mismatch("Key('outer')", 'width'), _mismatch("Key('inner')", 'width')], elements=elements)
        assert _kept(kept) == [("Key('outer')", 'width')]


class TestReflow:
    def test_layout_dropped_spacing_kept_when_missing(self) -> None:
        kept = _run([_mismatch('E', 'x'), _mismatch('E', 'paddingtop'), _mismatch('F', 'width')], missing=['Footer'])
        assert _kept(kept) == [('E', 'paddingtop'), ('F', 'width')]

    def test_container_height_dropped_on_reflow(self) -> None:
        elements = [
            Element(category='Column', bounds=Bounds(0, 0, 400, 400), key='col'),
            Element(category='Text', bounds=Bounds(10, 10, 50, 20), key='t'),
        ]
        kept = _run([_mismatch("Key('col')", 'height')], elements=elements, extra=['Text(500,500)'])
        assert kept == []

    def test_container_height_kept_with_other_mismatches(self) -> None:
        elements = [
            Element(category='Column', bounds=Bounds(0, 0, 400, 400), key='col'),
            Element(category='Text', bounds=Bounds(10, 10, 50, 20), key='t'),
        ]
        col = "Key('col')"
        mismatches = [_mismatch(col, 'height'), _mismatch(col, 'backgroundColor'), _mismatch(col, 'borderRadius')]
        kept = _run(mismatches, elements=elements, extra=['Text(500,500)'])
        assert (col, 'height') in _kept(kept)


class TestGeneral:
    def test_items_without_element_kept(self) -> None:
        item = FeedbackItem(Severity.FAIL, FeedbackCategory.LAYOUT, 'region', element=None)
        assert _run([], items=[item], missing=['X']) == [item]

    def test_missing_and_color_always_kept(self) -> None:
        items = [
            FeedbackItem(Severity.FAIL, FeedbackCategory.MISSING, 'Missing element: X', element='X'),
            _item('E', 'color'),
        ]
        kept = _run([_mismatch('E', 'color')], items=items, missing=['X'])
        assert kept == items

    def test_idempotent(self) -> None:
        elements = TestAncestors.ELEMENTS
        mismatches = [
            _mismatch(TestAncestors.PARENT, 'paddingleft'),
            _mismatch(TestAncestors.CHILD, 'x'),
            _mismatch(TestAncestors.CHILD, 'fontSize'),
            _mismatch(TestAncestors.CHILD, 'height'),
            _mismatch(TestAncestors.CHILD, 'paddingtop'),
        ]
        structural = StructuralDiff(mismatches=mismatches, missing=['Gone'])
        items = [_item(m.element, m.property) for m in mismatches]
        once = suppress_cascades(items, structural, elements)
        twice = suppress_cascades(once, structural, elements)
        assert once == twice
