"""Pixel comparator: per-pixel diff of two RGBA bitmaps plus region extraction.

A pixel differs when any of its R, G, B channels differs by more than the
channel threshold (26 by default, about 10%). Alpha is not compared.

The overlay is an RGBA bitmap of the same size: diff colour at full alpha
where pixels differ, fully transparent elsewhere.

Regions are 4-connected components of differing pixels, found with an
explicit-stack flood fill. A component is kept when its bounding box covers
at least `min_region_pixels`. Severity bands the box area as a fraction of
the whole image.
"""

import logging
from dataclasses import replace

import numpy as np

from saccadic.core.color import ciede2000, rgb_to_lab
from saccadic.core.errors import BitmapError, DimensionMismatchError
from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from saccadic.core.types import Bounds, DiffRegion, PixelDiff, RegionCategory, Severity

logger = logging.getLogger(__name__)


def _check_bitmap(bitmap: np.ndarray, label: str) -> None:
    if not isinstance(bitmap, np.ndarray):
        raise BitmapError(f'{label} bitmap must be a numpy array, got {type(bitmap).__name__}')
    if bitmap.ndim != 3 or bitmap.shape[2] != 4:
        raise BitmapError(f'{label} bitmap must be H x W x 4 (RGBA), got shape {bitmap.shape}')
    if bitmap.dtype != np.uint8:
        raise BitmapError(f'{label} bitmap must be uint8, got {bitmap.dtype}')
    if bitmap.shape[0] == 0 or bitmap.shape[1] == 0:
        raise BitmapError(f'{label} bitmap is empty')


def diff_mask(reference: np.ndarray, actual: np.ndarray, channel_threshold: int) -> np.ndarray:
    """Boolean H x W mask of pixels whose RGB channels differ beyond the threshold."""
    _check_bitmap(reference, 'reference')
    _check_bitmap(actual, 'actual')
    if reference.shape != actual.shape:
        raise DimensionMismatchError(
            f'Bitmap dimensions do not match: reference {reference.shape[1]}x{reference.shape[0]} '
            f'vs actual {actual.shape[1]}x{actual.shape[0]}'
        )
    delta = np.abs(reference[..., :3].astype(np.int16) - actual[..., :3].astype(np.int16))
    return np.any(delta > channel_threshold, axis=-1)


def compare_bitmaps(
    reference: np.ndarray,
    actual: np.ndarray,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    mask: np.ndarray | None = None,
) -> PixelDiff:
    """Count differing pixels and build the overlay bitmap.

    `mask` is a diff_mask of the same pair, when the caller already has one.
    """
    if mask is None:
        mask = diff_mask(reference, actual, thresholds.pixel_channel)
    h, w = mask.shape
    total = h * w
    diff_pixels = int(mask.sum())

    overlay = np.zeros((h, w, 4), dtype=np.uint8)
    overlay[mask] = (*thresholds.diff_color, 255)

    logger.debug('pixel diff: %d / %d pixels differ', diff_pixels, total)
    return PixelDiff(
        total_pixels=total,
        diff_pixels=diff_pixels,
        diff_percentage=diff_pixels / total * 100.0,
        overlay=overlay,
        ran=True,
    )


def _flood_fill(mask: np.ndarray, visited: np.ndarray, start_y: int, start_x: int) -> tuple[list[int], list[int]]:
    h, w = mask.shape
    ys: list[int] = []
    xs: list[int] = []
    stack = [(start_y, start_x)]
    visited[start_y, start_x] = True
    while stack:
        y, x = stack.pop()
        ys.append(y)
        xs.append(x)
        for ny, nx in ((y, x + 1), (y, x - 1), (y + 1, x), (y - 1, x)):
            if 0 <= ny < h and 0 <= nx < w and mask[ny, nx] and not visited[ny, nx]:
                visited[ny, nx] = True
                stack.append((ny, nx))
    return ys, xs


def _mean_delta_e(reference: np.ndarray, actual: np.ndarray, ys: list[int], xs: list[int]) -> float:
    ref_mean = reference[ys, xs, :3].mean(axis=0)
    act_mean = actual[ys, xs, :3].mean(axis=0)
    ref_rgb = tuple(int(round(c)) for c in ref_mean)
    act_rgb = tuple(int(round(c)) for c in act_mean)
    return ciede2000(rgb_to_lab(ref_rgb), rgb_to_lab(act_rgb))


def classify_region(region: DiffRegion, total_area: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> DiffRegion:
    """Re-band a region's severity by its box area relative to the image."""
    fraction = region.bounds.area / total_area if total_area > 0 else 0.0
    severity = thresholds.pixel_severity(fraction)
    return replace(region, severity=severity)


def find_diff_regions(
    mask: np.ndarray,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    reference: np.ndarray | None = None,
    actual: np.ndarray | None = None,
) -> list[DiffRegion]:
    """Connected components of a diff mask, in scan order (top-to-bottom, left-to-right).

    When both source bitmaps are given, each region carries the ΔE00 between
    the mean reference colour and the mean actual colour over its pixels.
    """
    if mask.ndim != 2:
        raise BitmapError(f'Diff mask must be 2-D, got shape {mask.shape}')
    h, w = mask.shape
    total_area = float(h * w)
    visited = np.zeros_like(mask, dtype=bool)
    regions = []

    for start_y, start_x in np.argwhere(mask):
        if visited[start_y, start_x]:
            continue
        ys, xs = _flood_fill(mask, visited, int(start_y), int(start_x))
        bounds = Bounds(
            x=float(min(xs)),
            y=float(min(ys)),
            width=float(max(xs) - min(xs) + 1),
            height=float(max(ys) - min(ys) + 1),
        )
        if bounds.area < thresholds.min_region_pixels:
            continue
        delta = None
        if reference is not None and actual is not None:
            delta = _mean_delta_e(reference, actual, ys, xs)
        region = DiffRegion(
            bounds=bounds,
            severity=Severity.WARN,
            category=RegionCategory.RENDERING,
            description=f'Diff region of {len(ys)} pixels',
            delta_e=delta,
            pixel_count=len(ys),
        )
        regions.append(classify_region(region, total_area, thresholds))

    logger.debug('found %d diff region(s)', len(regions))
    return regions
