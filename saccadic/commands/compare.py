"""Compare a design against an implementation snapshot.

Lays out the design, matches the snapshot's elements to design nodes,
compares their properties, and (with --reference and --actual) diffs the
two screenshots pixel by pixel. Prints a ranked report with a score and
letter grade.

The element snapshot is a JSON list of objects (or {"elements": [...]})
with camelCase keys: key, category, bounds{x,y,width,height},
backgroundColor, textColor, fontSize, fontWeight, fontFamily, lineHeight,
letterSpacing, text, padding, gap, cornerRadius, childCount, parent.

--threshold is the per-channel pixel tolerance as a 0..1 fraction
(default 0.1, or $SACCADIC_PIXEL_THRESHOLD). --viewport takes a preset
name (mobile, tablet, desktop, ...) or WIDTHxHEIGHT and sets the area
used to weigh how visible a failing element is.

Exit code is 1 when the match percentage is below --fail-under.

Examples:
    saccadic compare app.pen elements.json
    saccadic compare app.pen elements.json --reference design.png --actual build.png --overlay diff.png
    saccadic compare app.pen elements.json --json --fail-under 85
"""

import re
import sys

from saccadic.commands._common import add_design_arguments, load_design
from saccadic.comparison.engine import compare
from saccadic.core.env import default_pixel_threshold
from saccadic.core.errors import SaccadicError
from saccadic.core.report import format_json, format_text
from saccadic.core.snapshot import load_bitmap, load_elements, save_bitmap
from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from saccadic.core.types import STANDARD_VIEWPORTS, Command, Viewport

command = Command(name='compare', help='Compare a design against an implementation snapshot')

_VIEWPORT_RE = re.compile(r'^(\d+)[x×](\d+)$')


def parse_viewport(value: str) -> Viewport:
    """Preset name or WIDTHxHEIGHT."""
    if value in STANDARD_VIEWPORTS:
        return STANDARD_VIEWPORTS[value]
    m = _VIEWPORT_RE.match(value.strip())
    if not m:
        presets = ', '.join(STANDARD_VIEWPORTS)
        raise SaccadicError(f'Invalid viewport {value!r}: use WIDTHxHEIGHT or one of {presets}')
    return Viewport(int(m.group(1)), int(m.group(2)))


def _thresholds(args) -> Thresholds:
    fraction = args.threshold if args.threshold is not None else default_pixel_threshold()
    if fraction is None:
        return DEFAULT_THRESHOLDS
    if not 0.0 <= fraction <= 1.0:
        raise SaccadicError(f'--threshold must be between 0 and 1, got {fraction}')
    return Thresholds.with_pixel_fraction(fraction)


@command.arguments
def arguments(parser) -> None:
    add_design_arguments(parser)
    parser.add_argument('elements', help='Path to the element snapshot JSON')
    parser.add_argument('-r', '--reference', help='Reference screenshot (the design render)')
    parser.add_argument('-a', '--actual', help='Actual screenshot (the implementation render)')
    parser.add_argument('--threshold', type=float, default=None, metavar='F', help='Pixel tolerance 0..1')
    parser.add_argument('--viewport', default=None, help='Viewport preset or WIDTHxHEIGHT')
    parser.add_argument('-o', '--overlay', metavar='PATH', help='Write the pixel diff overlay PNG here')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
    parser.add_argument(
        '--fail-under',
        type=float,
        default=None,
        metavar='PCT',
        help='Exit 1 if the match percentage is below PCT (CI gating)',
    )


@command.run
def run(args) -> int:
    if (args.reference is None) != (args.actual is None):
        raise SaccadicError('--reference and --actual must be given together')

    state = load_design(args)
    elements = load_elements(args.elements)
    reference = load_bitmap(args.reference) if args.reference else None
    actual = load_bitmap(args.actual) if args.actual else None
    viewport = parse_viewport(args.viewport) if args.viewport else None

    result = compare(state, elements, reference, actual, viewport=viewport, thresholds=_thresholds(args))

    if args.overlay:
        if result.pixels.overlay is None:
            print('saccadic: no overlay written (pixel comparison did not run)', file=sys.stderr)
        else:
            save_bitmap(result.pixels.overlay, args.overlay)
            print(f'saccadic: overlay written to {args.overlay}', file=sys.stderr)

    if args.json:
        print(format_json(result))
    else:
        print(format_text(result, design_path=args.design))

    # CI gate, after output so the report is visible even on failure
    if args.fail_under is not None:
        percentage = result.overall.match_percentage * 100
        if percentage < args.fail_under:
            print(f'\nFAIL: match {percentage:.1f}% is below {args.fail_under:g}%', file=sys.stderr)
            return 1
    return 0
