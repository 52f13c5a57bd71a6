"""Comparison engine: one pure run from (design, elements, optional bitmaps) to a result.

Stages, in order:
  1. structural diff   match elements to design nodes, compare properties
  2. pixel diff        only when both reference and actual bitmaps are given
  3. regions           connected diff components, mapped to their owning element
  4. feedback          ranked items with cascades removed
  5. score             percentage, grade and a one-line summary
"""

import logging
import time
from dataclasses import replace

import numpy as np

from saccadic.comparison.feedback import attach_regions, generate_feedback, summarize
from saccadic.comparison.matcher import diff_structure
from saccadic.comparison.pixels import compare_bitmaps, diff_mask, find_diff_regions
from saccadic.comparison.scorer import compute_score
from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from saccadic.core.types import (
    ComparisonResult,
    DesignNode,
    DesignState,
    DiffRegion,
    Element,
    PixelDiff,
    Viewport,
)

logger = logging.getLogger(__name__)


def compare(
    design: DesignState | list[DesignNode] | tuple[DesignNode, ...],
    elements: list[Element],
    reference: np.ndarray | None = None,
    actual: np.ndarray | None = None,
    viewport: Viewport | None = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> ComparisonResult:
    """Compare a laid-out design against rendered elements.

    `design` is either a DesignState from the layout engine or a bare node
    tree. The viewport used for salience comes from the argument, else the
    DesignState, else the 1280x800 default.
    """
    if isinstance(design, DesignState):
        nodes = list(design.nodes)
        viewport = viewport or design.viewport
    else:
        nodes = list(design)

    structural = diff_structure(elements, nodes, thresholds)

    pixels = PixelDiff()
    regions: list[DiffRegion] = []
    if reference is not None and actual is not None:
        mask = diff_mask(reference, actual, thresholds.pixel_channel)
        pixels = compare_bitmaps(reference, actual, thresholds, mask=mask)
        regions = attach_regions(find_diff_regions(mask, thresholds, reference, actual), elements)
    elif reference is not None or actual is not None:
        logger.debug('only one bitmap given, skipping pixel comparison')

    feedback = generate_feedback(structural, regions, elements)
    score = compute_score(structural, pixels, regions, viewport, elements, thresholds)
    score = replace(score, summary=summarize(score, feedback))

    logger.debug('comparison finished: %s', score.summary)
    return ComparisonResult(
        overall=score,
        structural=structural,
        pixels=pixels,
        regions=regions,
        feedback=feedback,
        timestamp=int(time.time() * 1000),
    )
