"""Shared types for saccadic: geometry, design nodes, elements, diff results, Command."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np


class Severity(str, Enum):
    PASS = 'pass'
    WARN = 'warn'
    FAIL = 'fail'

    @property
    def rank(self) -> int:
        """0 for pass, 1 for warn, 2 for fail."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.PASS: 0, Severity.WARN: 1, Severity.FAIL: 2}


class NodeType(str, Enum):
    FRAME = 'frame'
    GROUP = 'group'
    TEXT = 'text'
    RECTANGLE = 'rectangle'
    ELLIPSE = 'ellipse'
    IMAGE = 'image'
    BUTTON = 'button'
    INPUT = 'input'
    COMPONENT = 'component'
    INSTANCE = 'instance'
    VECTOR = 'vector'


class LayoutAxis(str, Enum):
    HORIZONTAL = 'horizontal'
    VERTICAL = 'vertical'
    NONE = 'none'


class RegionCategory(str, Enum):
    COLOR = 'color'
    POSITION = 'position'
    SIZE = 'size'
    MISSING = 'missing'
    EXTRA = 'extra'
    TYPOGRAPHY = 'typography'
    RENDERING = 'rendering'


class FeedbackCategory(str, Enum):
    COLOR = 'color'
    SPACING = 'spacing'
    TYPOGRAPHY = 'typography'
    LAYOUT = 'layout'
    SIZE = 'size'
    MISSING = 'missing'
    EXTRA = 'extra'
    RENDERING = 'rendering'


# ── Geometry ──


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box: (x, y) is the top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, other: Bounds) -> bool:
        """True if `other` lies fully inside this box (edges may touch)."""
        return self.x <= other.x and self.y <= other.y and self.right >= other.right and self.bottom >= other.bottom

    def overlaps(self, other: Bounds) -> bool:
        return not (
            self.right < other.x or other.right < self.x or self.bottom < other.y or other.bottom < self.y
        )

    def iou(self, other: Bounds) -> float:
        """Intersection over union. 0.0 when the boxes don't overlap."""
        ix1 = max(self.x, other.x)
        iy1 = max(self.y, other.y)
        ix2 = min(self.right, other.right)
        iy2 = min(self.bottom, other.bottom)
        if ix2 < ix1 or iy2 < iy1:
            return 0.0
        intersection = (ix2 - ix1) * (iy2 - iy1)
        union = self.area + other.area - intersection
        return intersection / union if union > 0 else 0.0

    def to_dict(self) -> dict[str, float]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


STANDARD_VIEWPORTS: dict[str, Viewport] = {
    'mobile-sm': Viewport(320, 568),
    'mobile': Viewport(375, 812),
    'tablet': Viewport(768, 1024),
    'desktop-sm': Viewport(1024, 768),
    'desktop': Viewport(1280, 800),
    'desktop-lg': Viewport(1440, 900),
}

DEFAULT_VIEWPORT = STANDARD_VIEWPORTS['desktop']


# ── Design side ──


@dataclass(frozen=True)
class Spacing:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def all(cls, value: float) -> Spacing:
        return cls(value, value, value, value)

    @property
    def is_zero(self) -> bool:
        return self.top == 0 and self.right == 0 and self.bottom == 0 and self.left == 0

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


@dataclass(frozen=True)
class Fill:
    color: str | None
    kind: str = 'solid'


@dataclass(frozen=True)
class Typography:
    font_family: str
    font_size: float
    font_weight: int
    line_height: float | None = None  # px
    letter_spacing: float | None = None
    color: str | None = None


@dataclass(frozen=True)
class DesignNode:
    """One node of the intended-UI tree. Immutable; derive variants with dataclasses.replace."""

    id: str
    name: str
    type: NodeType
    bounds: Bounds
    fills: tuple[Fill, ...] | None = None
    typography: Typography | None = None
    padding: Spacing | None = None
    gap: float | None = None
    corner_radius: float | None = None
    layout: LayoutAxis | None = None
    text: str | None = None
    children: tuple[DesignNode, ...] = ()

    @property
    def primary_color(self) -> str | None:
        """First fill colour, else the text colour."""
        if self.fills and self.fills[0].color is not None:
            return self.fills[0].color
        if self.typography is not None:
            return self.typography.color
        return None


@dataclass(frozen=True)
class DesignTokens:
    colors: dict[str, str] = field(default_factory=dict)
    spacing: dict[str, str] = field(default_factory=dict)
    radii: dict[str, str] = field(default_factory=dict)
    fonts: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DesignState:
    """Laid-out design: top-level nodes plus the viewport enclosing them."""

    name: str
    viewport: Viewport
    nodes: tuple[DesignNode, ...]
    tokens: DesignTokens | None = None


# ── Implementation side ──


@dataclass(frozen=True)
class Element:
    """One rendered UI element as reported by an external inspector.

    `parent` holds the parent element's label; the list is flat.
    """

    category: str
    bounds: Bounds
    key: str | None = None
    background_color: str | None = None
    text_color: str | None = None
    font_size: float | None = None
    font_weight: int | None = None
    font_family: str | None = None
    line_height: float | None = None
    letter_spacing: float | None = None
    text: str | None = None
    padding: Spacing | None = None
    gap: float | None = None
    corner_radius: float | None = None
    child_count: int = 0
    parent: str | None = None
    description: str | None = None

    @property
    def label(self) -> str:
        """Concise identifier for reports: Key('x') when keyed, else Category(x,y)."""
        if self.key is not None:
            return f"Key('{self.key}')"
        return f'{self.category}({round(self.bounds.x)},{round(self.bounds.y)})'

    @property
    def display_name(self) -> str:
        return self.description or self.label


# ── Results ──


@dataclass(frozen=True)
class Match:
    element: Element
    node: DesignNode
    confidence: float


@dataclass(frozen=True)
class Mismatch:
    element: str  # Element.label
    property: str
    expected: str
    actual: str
    severity: Severity
    fix: str | None = None


@dataclass(frozen=True)
class KeyCoverage:
    expected_keys: int
    found_keys: int
    element_count: int
    coverage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            'expectedKeys': self.expected_keys,
            'foundKeys': self.found_keys,
            'elementCount': self.element_count,
            'coverage': f'{round(self.coverage * 100)}%',
        }


@dataclass(frozen=True)
class KeySuggestion:
    node_id: str
    node_name: str
    node_type: NodeType
    node_text: str | None
    element: str  # Element.label
    element_category: str
    element_text: str | None
    confidence: float
    reason: str

    @property
    def suggestion(self) -> str:
        return f"Add identifier '{self.node_id}' to {self.element}"


@dataclass
class StructuralDiff:
    matches: list[Match] = field(default_factory=list)
    mismatches: list[Mismatch] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)
    key_coverage: KeyCoverage | None = None
    suggestions: list[KeySuggestion] | None = None

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass
class PixelDiff:
    total_pixels: int = 0
    diff_pixels: int = 0
    diff_percentage: float = 0.0
    overlay: np.ndarray | None = None
    ran: bool = False


@dataclass(frozen=True)
class DiffRegion:
    bounds: Bounds
    severity: Severity
    category: RegionCategory
    description: str
    delta_e: float | None = None
    element: str | None = None
    pixel_count: int = 0


@dataclass(frozen=True)
class FeedbackItem:
    severity: Severity
    category: FeedbackCategory
    message: str
    element: str | None = None
    fix: str | None = None
    property: str | None = None


@dataclass(frozen=True)
class OverallScore:
    match_percentage: float
    grade: str
    summary: str = ''


@dataclass
class ComparisonResult:
    overall: OverallScore
    structural: StructuralDiff
    pixels: PixelDiff
    regions: list[DiffRegion]
    feedback: list[FeedbackItem]
    timestamp: int


# ── CLI plumbing ──


class Command:
    """A self-registering CLI command.

    Usage in a command module:

        command = Command(name='tree', help='Print the laid-out design tree')

        @command.arguments
        def arguments(parser):
            parser.add_argument('design')

        @command.run
        def run(args):
            ...
            return 0
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._run_fn: Callable | None = None
        self._args_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def arguments(self, fn: Callable) -> Callable:
        """Decorator to register the argparse setup function."""
        self._args_fn = fn
        return fn

    def configure(self, parser: Any) -> None:
        if self._args_fn is not None:
            self._args_fn(parser)

    def execute(self, args: Any) -> int:
        """Execute the command's run function, returning the process exit code."""
        if self._run_fn is None:
            raise RuntimeError(f'Command {self.name} has no run function')
        code = self._run_fn(args)
        return 0 if code is None else int(code)
