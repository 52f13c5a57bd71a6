"""Property comparator: per-property mismatches for one matched (node, element) pair.

Colours are judged by ΔE00, positions and spacing by the floored Weber
fraction, sizes and font metrics by the plain Weber fraction. Font weight
and family have no continuous distance and are reported as warn.
Properties that land in the pass band produce nothing.
"""

import logging

from saccadic.core.color import delta_e
from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from saccadic.core.types import DesignNode, Element, Mismatch, NodeType, Severity

logger = logging.getLogger(__name__)


def _fmt(value: float) -> str:
    return f'{value:g}'


def _px(value: float) -> str:
    return f'{value:g}px'


def _is_token(color: str) -> bool:
    return color.startswith('$')


def _compare_color(
    element: Element,
    prop: str,
    expected: str | None,
    actual: str | None,
    fix: str,
    thresholds: Thresholds,
) -> Mismatch | None:
    if expected is None or actual is None:
        return None
    if _is_token(expected):
        logger.debug('%s: %s is an unresolved token %s, skipped', element.label, prop, expected)
        return None
    severity = thresholds.color_severity(delta_e(expected, actual))
    if severity == Severity.PASS:
        return None
    return Mismatch(element.label, prop, expected, actual, severity, fix)


def compare_properties(
    node: DesignNode,
    element: Element,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[Mismatch]:
    """All non-passing property differences between a design node and its element."""
    mismatches: list[Mismatch] = []
    label = element.label
    where = element.display_name

    def add(prop: str, expected: str, actual: str, severity: Severity, fix: str | None = None) -> None:
        if severity != Severity.PASS:
            mismatches.append(Mismatch(label, prop, expected, actual, severity, fix))

    # Background: first fill only, never for text nodes (their fill is the text colour)
    if node.fills and node.type != NodeType.TEXT:
        fill = node.fills[0]
        if fill.kind == 'solid':
            m = _compare_color(
                element,
                'backgroundColor',
                fill.color,
                element.background_color,
                f'Change background color to {fill.color} on {where}',
                thresholds,
            )
            if m:
                mismatches.append(m)

    typo = node.typography
    if typo is not None:
        m = _compare_color(
            element,
            'color',
            typo.color,
            element.text_color,
            f'Change text color to {typo.color} on {where}',
            thresholds,
        )
        if m:
            mismatches.append(m)

        if element.font_size is not None and element.font_size != typo.font_size:
            add(
                'fontSize',
                _fmt(typo.font_size),
                _fmt(element.font_size),
                thresholds.size_severity(typo.font_size, element.font_size),
                f'Change fontSize from {_fmt(element.font_size)} to {_fmt(typo.font_size)} on {where}',
            )

        if element.font_weight is not None and element.font_weight != typo.font_weight:
            add(
                'fontWeight',
                str(typo.font_weight),
                str(element.font_weight),
                Severity.WARN,
                f'Change fontWeight to {typo.font_weight} on {where}',
            )

        if (
            element.font_family is not None
            and typo.font_family
            and element.font_family.lower() != typo.font_family.lower()
        ):
            add(
                'fontFamily',
                typo.font_family,
                element.font_family,
                Severity.WARN,
                f"Change fontFamily to '{typo.font_family}' on {where}",
            )

        if typo.line_height is not None and element.line_height is not None:
            if element.line_height != typo.line_height:
                multiplier = typo.line_height / typo.font_size if typo.font_size else typo.line_height
                add(
                    'lineHeight',
                    _fmt(typo.line_height),
                    _fmt(element.line_height),
                    thresholds.size_severity(typo.line_height, element.line_height),
                    f'Change line height to {multiplier:.2f} ({_px(typo.line_height)}) on {where}',
                )

        if typo.letter_spacing is not None and element.letter_spacing is not None:
            if element.letter_spacing != typo.letter_spacing:
                reference = max(abs(typo.letter_spacing), 1.0)
                fraction = abs(typo.letter_spacing - element.letter_spacing) / reference
                add(
                    'letterSpacing',
                    _fmt(typo.letter_spacing),
                    _fmt(element.letter_spacing),
                    thresholds.size.classify(fraction),
                    f'Change letterSpacing to {_fmt(typo.letter_spacing)} on {where}',
                )

    if node.padding is not None and element.padding is not None:
        for side in ('top', 'right', 'bottom', 'left'):
            expected = getattr(node.padding, side)
            actual = getattr(element.padding, side)
            if expected != actual:
                add(
                    f'padding{side}',
                    _px(expected),
                    _px(actual),
                    thresholds.position_severity(expected, actual, expected),
                    f'Change padding {side} from {_fmt(actual)} to {_fmt(expected)} on {where}',
                )

    if node.gap is not None and element.gap is not None and element.gap != node.gap:
        add(
            'gap',
            _px(node.gap),
            _px(element.gap),
            thresholds.position_severity(node.gap, element.gap, node.gap),
            f'Change gap from {_fmt(element.gap)} to {_fmt(node.gap)} on {where}',
        )

    expected_b, actual_b = node.bounds, element.bounds
    if actual_b.x != expected_b.x:
        add(
            'x',
            _px(expected_b.x),
            _px(actual_b.x),
            thresholds.position_severity(expected_b.x, actual_b.x, max(expected_b.x, expected_b.width)),
            f'Move {where} horizontally from x={_fmt(actual_b.x)} to x={_fmt(expected_b.x)}',
        )
    if actual_b.y != expected_b.y:
        add(
            'y',
            _px(expected_b.y),
            _px(actual_b.y),
            thresholds.position_severity(expected_b.y, actual_b.y, max(expected_b.y, expected_b.height)),
            f'Move {where} vertically from y={_fmt(actual_b.y)} to y={_fmt(expected_b.y)}',
        )

    if expected_b.width > 0 and actual_b.width != expected_b.width:
        add(
            'width',
            _px(expected_b.width),
            _px(actual_b.width),
            thresholds.size_severity(expected_b.width, actual_b.width),
            f'Change width from {_fmt(actual_b.width)} to {_fmt(expected_b.width)} on {where}',
        )
    if expected_b.height > 0 and actual_b.height != expected_b.height:
        add(
            'height',
            _px(expected_b.height),
            _px(actual_b.height),
            thresholds.size_severity(expected_b.height, actual_b.height),
            f'Change height from {_fmt(actual_b.height)} to {_fmt(expected_b.height)} on {where}',
        )

    if node.corner_radius is not None and element.corner_radius is not None:
        if element.corner_radius != node.corner_radius:
            add(
                'borderRadius',
                _px(node.corner_radius),
                _px(element.corner_radius),
                thresholds.size_severity(node.corner_radius, element.corner_radius),
                f'Change corner radius from {_fmt(element.corner_radius)} to {_fmt(node.corner_radius)} on {where}',
            )

    return mismatches
