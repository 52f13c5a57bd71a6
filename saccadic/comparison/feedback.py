"""Feedback generation: turn diffs into ranked, actionable items and a summary line."""

import logging
from collections import Counter
from dataclasses import replace

from saccadic.comparison.cascade import suppress_cascades
from saccadic.core.types import (
    DiffRegion,
    Element,
    FeedbackCategory,
    FeedbackItem,
    OverallScore,
    RegionCategory,
    Severity,
    StructuralDiff,
)

logger = logging.getLogger(__name__)

MAX_SUGGESTION_ITEMS = 10

_COLOR_PROPS = frozenset({'color', 'backgroundcolor', 'bordercolor', 'fill', 'stroke'})
_TYPOGRAPHY_PROPS = frozenset({'fontfamily', 'fontsize', 'fontweight', 'lineheight', 'letterspacing', 'textalign'})
_SIZE_PROPS = frozenset({'width', 'height'})
_LAYOUT_PROPS = frozenset({'x', 'y', 'left', 'top', 'right', 'bottom'})

_REGION_CATEGORIES = {
    RegionCategory.COLOR: FeedbackCategory.COLOR,
    RegionCategory.POSITION: FeedbackCategory.LAYOUT,
    RegionCategory.SIZE: FeedbackCategory.SIZE,
    RegionCategory.MISSING: FeedbackCategory.MISSING,
    RegionCategory.EXTRA: FeedbackCategory.EXTRA,
    RegionCategory.TYPOGRAPHY: FeedbackCategory.TYPOGRAPHY,
    RegionCategory.RENDERING: FeedbackCategory.RENDERING,
}


def categorize_property(prop: str) -> FeedbackCategory:
    p = prop.lower()
    if p in _COLOR_PROPS:
        return FeedbackCategory.COLOR
    if p.startswith('padding') or p.startswith('margin') or p == 'gap':
        return FeedbackCategory.SPACING
    if p in _TYPOGRAPHY_PROPS:
        return FeedbackCategory.TYPOGRAPHY
    if p in _SIZE_PROPS:
        return FeedbackCategory.SIZE
    if p in _LAYOUT_PROPS:
        return FeedbackCategory.LAYOUT
    return FeedbackCategory.RENDERING


def map_region_to_element(region: DiffRegion, elements: list[Element]) -> str | None:
    """Label of the smallest element whose bounds contain the region."""
    best, smallest = None, float('inf')
    for element in elements:
        if element.bounds.contains(region.bounds) and element.bounds.area < smallest:
            best, smallest = element, element.bounds.area
    return best.label if best is not None else None


def attach_regions(regions: list[DiffRegion], elements: list[Element] | None) -> list[DiffRegion]:
    if not elements:
        return list(regions)
    return [replace(r, element=map_region_to_element(r, elements)) for r in regions]


def _truncate(text: str | None, limit: int) -> str:
    if text is None:
        return ''
    return text if len(text) <= limit else text[: limit - 3] + '...'


def _zero_match_items(structural: StructuralDiff, element_count: int) -> list[FeedbackItem]:
    coverage = ''
    if structural.key_coverage is not None:
        coverage = f' Key coverage: {round(structural.key_coverage.coverage * 100)}%.'
    items = [
        FeedbackItem(
            severity=Severity.FAIL,
            category=FeedbackCategory.MISSING,
            message=(
                f'Structural comparison found 0 matches between {len(structural.missing)} design nodes '
                f'and {element_count} elements.{coverage}'
            ),
        )
    ]
    if structural.suggestions:
        for s in structural.suggestions[:MAX_SUGGESTION_ITEMS]:
            items.append(
                FeedbackItem(
                    severity=Severity.FAIL,
                    category=FeedbackCategory.MISSING,
                    message=f"{s.element_category}('{_truncate(s.element_text, 30)}') likely matches node \"{s.node_name}\"",
                    element=s.element,
                    fix=s.suggestion,
                )
            )
    else:
        items.append(
            FeedbackItem(
                severity=Severity.FAIL,
                category=FeedbackCategory.MISSING,
                message='Add identifiers to your elements matching the design node ids.',
            )
        )
    return items


def _structural_items(structural: StructuralDiff) -> list[FeedbackItem]:
    items = []
    for m in structural.mismatches:
        items.append(
            FeedbackItem(
                severity=m.severity,
                category=categorize_property(m.property),
                message=f'{m.element}: {m.property} mismatch. Expected "{m.expected}", got "{m.actual}".',
                element=m.element,
                fix=m.fix,
                property=m.property,
            )
        )
    for name in structural.missing:
        items.append(
            FeedbackItem(
                severity=Severity.FAIL,
                category=FeedbackCategory.MISSING,
                message=f'Missing element: {name}',
                element=name,
            )
        )
    for label in structural.extra:
        items.append(
            FeedbackItem(
                severity=Severity.WARN,
                category=FeedbackCategory.EXTRA,
                message=f'Extra element found: {label}',
                element=label,
            )
        )
    return items


def generate_feedback(
    structural: StructuralDiff,
    regions: list[DiffRegion],
    elements: list[Element] | None = None,
) -> list[FeedbackItem]:
    """Ranked feedback: fail before warn before pass, cascades removed.

    Regions should already carry their owning element (see attach_regions).
    """
    zero_match = structural.match_count == 0 and bool(structural.missing)
    if zero_match:
        element_count = len(elements) if elements is not None else len(structural.extra)
        feedback = _zero_match_items(structural, element_count)
    else:
        feedback = _structural_items(structural)

    has_feedback = bool(feedback)
    reported = {f.element for f in feedback if f.element is not None}
    for region in regions:
        if region.element is not None and region.element in reported:
            continue
        if has_feedback and region.severity != Severity.FAIL:
            continue
        feedback.append(
            FeedbackItem(
                severity=region.severity,
                category=_REGION_CATEGORIES[region.category],
                message=region.description,
                element=region.element,
            )
        )

    feedback = suppress_cascades(feedback, structural, elements)
    feedback.sort(key=lambda item: item.severity.rank, reverse=True)
    logger.debug('%d feedback item(s)', len(feedback))
    return feedback


def summarize(score: OverallScore, feedback: list[FeedbackItem]) -> str:
    """One line: `Match: 87% (Grade B). 3 issues found: 2 spacing issues, 1 color issue.`"""
    percentage = round(score.match_percentage * 100)
    issues = [f for f in feedback if f.severity in (Severity.FAIL, Severity.WARN)]
    summary = f'Match: {percentage}% (Grade {score.grade}).'

    if not issues:
        return summary + (' Perfect match!' if score.grade == 'A' else ' Some discrepancies detected.')

    total = len(issues)
    summary += f' {total} issue{"" if total == 1 else "s"} found'
    counts = Counter(f.category.value for f in issues)
    top = counts.most_common(3)
    if top:
        summary += ': ' + ', '.join(f'{n} {name} {"issue" if n == 1 else "issues"}' for name, n in top)
    return summary + '.'
