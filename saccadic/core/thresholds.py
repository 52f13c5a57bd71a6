"""Perceptual thresholds: when is a difference imperceptible, noticeable, or wrong.

Every comparison stage takes a Thresholds value instead of reading module
constants.

  color     CIEDE2000 ΔE00       < 1.0 pass, < 2.0 warn, else fail
  position  Weber fraction       < 0.02 pass, < 0.04 warn, else fail
  size      Weber fraction       < 0.029 pass, < 0.05 warn, else fail
  pixel     diff-pixel fraction  < 0.01 pass, < 0.05 warn, else fail

Grades: score > 0.95 A, > 0.85 B, > 0.70 C, > 0.50 D, else F.

Position fractions use a reference floored at `position_floor` (100). When
the floor applies the band edges are inclusive.
"""

from __future__ import annotations

from dataclasses import dataclass

from saccadic.core.types import Severity


@dataclass(frozen=True)
class Band:
    """Two cut points splitting a non-negative measure into pass / warn / fail."""

    pass_below: float
    warn_below: float

    def classify(self, value: float, inclusive: bool = False) -> Severity:
        if inclusive:
            if value <= self.pass_below:
                return Severity.PASS
            if value <= self.warn_below:
                return Severity.WARN
            return Severity.FAIL
        if value < self.pass_below:
            return Severity.PASS
        if value < self.warn_below:
            return Severity.WARN
        return Severity.FAIL


@dataclass(frozen=True)
class Thresholds:
    color: Band = Band(1.0, 2.0)
    position: Band = Band(0.02, 0.04)
    size: Band = Band(0.029, 0.05)
    pixel: Band = Band(0.01, 0.05)
    position_floor: float = 100.0
    pixel_channel: int = 26  # ~0.1 * 255
    min_region_pixels: int = 4
    diff_color: tuple[int, int, int] = (255, 0, 255)
    # (exclusive lower bound, grade), best first; anything below the last is F
    grades: tuple[tuple[float, str], ...] = ((0.95, 'A'), (0.85, 'B'), (0.70, 'C'), (0.50, 'D'))

    def color_severity(self, delta_e: float) -> Severity:
        return self.color.classify(delta_e)

    def position_severity(self, expected: float, actual: float, reference: float) -> Severity:
        abs_ref = abs(reference)
        floored = abs_ref < self.position_floor
        effective = self.position_floor if floored else abs_ref
        return self.position.classify(abs(expected - actual) / effective, inclusive=floored)

    def size_severity(self, expected: float, actual: float) -> Severity:
        if expected == 0:
            return Severity.PASS
        return self.size.classify(abs(expected - actual) / abs(expected))

    def pixel_severity(self, fraction: float) -> Severity:
        return self.pixel.classify(fraction)

    def grade(self, score: float) -> str:
        for floor, letter in self.grades:
            if score > floor:
                return letter
        return 'F'

    @classmethod
    def with_pixel_fraction(cls, fraction: float, **overrides) -> Thresholds:
        """Build thresholds from a 0..1 per-channel tolerance, as the CLI flag expresses it."""
        return cls(pixel_channel=round(fraction * 255), **overrides)


DEFAULT_THRESHOLDS = Thresholds()
