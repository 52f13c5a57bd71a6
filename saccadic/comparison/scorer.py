"""Scorer: overall match percentage and letter grade.

  structural = matches / (matches + missing)        1.0 when both are 0
  pixel      = 1 - diff% / 100                      only when the pixel pass ran
  combined   = 0.7 * structural + 0.3 * pixel       (structural alone otherwise)

Each distinct element with a failing (or warning) mismatch adds a salience
multiplier clamp(max(0.1, area / viewport area) * 10, 0.5, 2.0) to the fail
(or warn) bucket. Missing nodes and failing pixel regions add 1 to the fail
bucket, warning pixel regions 1 to the warn bucket. Both buckets are divided
by max(1, matches + missing).

  final = max(0, combined * (1 - 0.3 * fail - 0.1 * warn))
"""

from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from saccadic.core.types import (
    DEFAULT_VIEWPORT,
    DiffRegion,
    Element,
    OverallScore,
    PixelDiff,
    Severity,
    StructuralDiff,
    Viewport,
)

STRUCTURAL_WEIGHT = 0.7
PIXEL_WEIGHT = 0.3
FAIL_PENALTY = 0.3
WARN_PENALTY = 0.1


def salience_multiplier(area: float | None, viewport_area: float) -> float:
    salience = max(0.1, area / viewport_area) if area is not None and viewport_area > 0 else 0.1
    return min(2.0, max(0.5, salience * 10))


def compute_score(
    structural: StructuralDiff,
    pixels: PixelDiff,
    regions: list[DiffRegion],
    viewport: Viewport | None = None,
    elements: list[Element] | None = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> OverallScore:
    """Score in [0, 1] plus grade. The summary is filled in by the feedback stage."""
    viewport = viewport or DEFAULT_VIEWPORT
    areas = {e.label: e.bounds.area for e in elements or ()}

    matches = structural.match_count
    missing = len(structural.missing)
    total = matches + missing
    structural_rate = matches / total if total > 0 else 1.0

    if pixels.ran:
        pixel_rate = 1.0 - pixels.diff_percentage / 100.0
        combined = structural_rate * STRUCTURAL_WEIGHT + pixel_rate * PIXEL_WEIGHT
    else:
        combined = structural_rate

    failing = {m.element for m in structural.mismatches if m.severity == Severity.FAIL}
    warning = {m.element for m in structural.mismatches if m.severity == Severity.WARN}

    fail_bucket = sum(salience_multiplier(areas.get(label), viewport.area) for label in failing)
    fail_bucket += missing
    fail_bucket += sum(1 for r in regions if r.severity == Severity.FAIL)

    warn_bucket = sum(salience_multiplier(areas.get(label), viewport.area) for label in warning)
    warn_bucket += sum(1 for r in regions if r.severity == Severity.WARN)

    denominator = max(1, total)
    penalty = (fail_bucket / denominator) * FAIL_PENALTY + (warn_bucket / denominator) * WARN_PENALTY
    final = max(0.0, combined * (1.0 - penalty))

    return OverallScore(match_percentage=final, grade=thresholds.grade(final))
