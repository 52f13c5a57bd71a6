"""Cascade suppression: drop feedback that is a consequence of another mismatch.

Rule 1, same element
    height is explained by a lineHeight / fontSize / paddingtop / paddingbottom
    mismatch on the same element; width by paddingleft / paddingright / gap.

Rule 2, ancestors
    x and width are explained by an ancestor's paddingleft / paddingright / width
    mismatch; y by an ancestor's paddingtop / paddingbottom / height. Height is
    never inherited. An ancestor is any element on the parent chain or any
    element whose bounds contain this one.

Rule 3, reflow
    once anything is missing or extra, layout items go, size items go unless
    rule 1 does not explain them, spacing items stay. A container's height
    stays only when it has at least two other mismatched properties.

Items without an element, and missing / extra / colour / typography items,
are always kept. The filter reads only the structural diff and the element
list, never the feedback being filtered, so applying it twice changes nothing.
"""

import logging

from saccadic.core.types import Bounds, Element, FeedbackCategory, FeedbackItem, StructuralDiff

logger = logging.getLogger(__name__)

_HEIGHT_CAUSES = frozenset({'lineHeight', 'fontSize', 'paddingtop', 'paddingbottom'})
_WIDTH_CAUSES = frozenset({'paddingleft', 'paddingright', 'gap'})
_ANCESTOR_X_CAUSES = frozenset({'paddingleft', 'paddingright', 'width'})
_ANCESTOR_Y_CAUSES = frozenset({'paddingtop', 'paddingbottom', 'height'})

_ALWAYS_KEEP = frozenset(
    {FeedbackCategory.MISSING, FeedbackCategory.EXTRA, FeedbackCategory.COLOR, FeedbackCategory.TYPOGRAPHY}
)
_REFLOW = frozenset({FeedbackCategory.LAYOUT, FeedbackCategory.SIZE, FeedbackCategory.SPACING})


class CascadeFilter:
    """Precomputed per-element mismatch sets and geometry for one comparison."""

    def __init__(self, structural: StructuralDiff, elements: list[Element] | None = None):
        self.props: dict[str, set[str]] = {}
        for m in structural.mismatches:
            self.props.setdefault(m.element, set()).add(m.property)

        self.bounds: dict[str, Bounds] = {}
        self.parents: dict[str, str] = {}
        for e in elements or ():
            self.bounds.setdefault(e.label, e.bounds)
            if e.parent is not None:
                self.parents.setdefault(e.label, e.parent)

        self.reflow = bool(structural.missing or structural.extra)

    def _ancestors(self, label: str) -> set[str]:
        found = set()
        seen = {label}
        current = self.parents.get(label)
        while current is not None and current not in seen:
            found.add(current)
            seen.add(current)
            current = self.parents.get(current)

        child = self.bounds.get(label)
        if child is not None:
            for other, other_bounds in self.bounds.items():
                if other != label and other_bounds.contains(child):
                    found.add(other)
        return found

    def _ancestor_explains(self, label: str, causes: frozenset[str]) -> bool:
        return any(self.props.get(a, set()) & causes for a in self._ancestors(label))

    def _is_container(self, label: str) -> bool:
        own = self.bounds.get(label)
        if own is None:
            return False
        if any(parent == label for parent in self.parents.values()):
            return True
        return any(other != label and own.contains(b) for other, b in self.bounds.items())

    def keep(self, item: FeedbackItem) -> bool:
        if item.element is None or item.category in _ALWAYS_KEEP:
            return True

        prop = item.property
        props = self.props.get(item.element, set())
        is_height = item.category == FeedbackCategory.SIZE and prop == 'height'
        is_width = item.category == FeedbackCategory.SIZE and prop == 'width'
        is_x = item.category == FeedbackCategory.LAYOUT and prop == 'x'
        is_y = item.category == FeedbackCategory.LAYOUT and prop == 'y'

        # Rule 1
        explained = (is_height and bool(props & _HEIGHT_CAUSES)) or (is_width and bool(props & _WIDTH_CAUSES))
        if explained:
            return False

        # Rule 2
        if (is_x or is_width) and self._ancestor_explains(item.element, _ANCESTOR_X_CAUSES):
            return False
        if is_y and self._ancestor_explains(item.element, _ANCESTOR_Y_CAUSES):
            return False

        # Rule 3
        if self.reflow and item.category in _REFLOW:
            if item.category == FeedbackCategory.LAYOUT:
                return False
            if is_height and self._is_container(item.element) and len(props - {'height'}) < 2:
                return False
        return True


def suppress_cascades(
    feedback: list[FeedbackItem],
    structural: StructuralDiff,
    elements: list[Element] | None = None,
) -> list[FeedbackItem]:
    """Feedback with derivative items removed, order preserved."""
    cascade = CascadeFilter(structural, elements)
    kept = [item for item in feedback if cascade.keep(item)]
    if len(kept) != len(feedback):
        logger.debug('cascade suppression dropped %d item(s)', len(feedback) - len(kept))
    return kept
