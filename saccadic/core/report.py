"""Report builder — text and JSON output for comparison results."""

import json
from typing import Any

from saccadic.core.types import ComparisonResult, FeedbackItem, Severity

_MARKS = {Severity.FAIL: '✗', Severity.WARN: '!', Severity.PASS: '✓'}


def _feedback_line(item: FeedbackItem) -> str:
    line = f'  {_MARKS[item.severity]} [{item.severity.value}] {item.category.value}: {item.message}'
    if item.fix:
        line += f'\n      fix: {item.fix}'
    return line


def format_text(result: ComparisonResult, design_path: str | None = None) -> str:
    """Format a comparison result as human-readable text."""
    lines = []
    header = 'saccadic'
    if design_path:
        header += f': {design_path}'
    lines.append(header)
    lines.append(result.overall.summary)
    lines.append('')

    s = result.structural
    lines.append(
        f'── structure: {s.match_count} matched, {len(s.missing)} missing, '
        f'{len(s.extra)} extra, {len(s.mismatches)} mismatches'
    )
    if s.key_coverage is not None:
        kc = s.key_coverage
        lines.append(f'  key coverage: {kc.found_keys}/{kc.expected_keys} ({round(kc.coverage * 100)}%)')

    if result.pixels.ran:
        p = result.pixels
        lines.append(
            f'── pixels: {p.diff_pixels}/{p.total_pixels} differ '
            f'({p.diff_percentage:.2f}%), {len(result.regions)} region(s)'
        )
    lines.append('')

    if result.feedback:
        lines.append('── feedback')
        lines.extend(_feedback_line(item) for item in result.feedback)
    else:
        lines.append('No issues.')
    return '\n'.join(lines)


def result_to_dict(result: ComparisonResult) -> dict[str, Any]:
    """JSON-ready dict with camelCase keys. The overlay bitmap is not included."""
    s = result.structural
    obj: dict[str, Any] = {
        'overall': {
            'matchPercentage': round(result.overall.match_percentage * 100, 2),
            'grade': result.overall.grade,
            'summary': result.overall.summary,
        },
        'structural': {
            'matches': [
                {'element': m.element.label, 'node': m.node.id, 'confidence': round(m.confidence, 3)}
                for m in s.matches
            ],
            'mismatches': [
                {
                    'element': m.element,
                    'property': m.property,
                    'expected': m.expected,
                    'actual': m.actual,
                    'severity': m.severity.value,
                    'fix': m.fix,
                }
                for m in s.mismatches
            ],
            'missing': list(s.missing),
            'extra': list(s.extra),
        },
        'pixels': {
            'ran': result.pixels.ran,
            'totalPixels': result.pixels.total_pixels,
            'diffPixels': result.pixels.diff_pixels,
            'diffPercentage': round(result.pixels.diff_percentage, 4),
        },
        'regions': [
            {
                'bounds': r.bounds.to_dict(),
                'severity': r.severity.value,
                'category': r.category.value,
                'description': r.description,
                'deltaE': None if r.delta_e is None else round(r.delta_e, 3),
                'element': r.element,
                'pixelCount': r.pixel_count,
            }
            for r in result.regions
        ],
        'feedback': [
            {
                'severity': f.severity.value,
                'category': f.category.value,
                'message': f.message,
                'element': f.element,
                'fix': f.fix,
            }
            for f in result.feedback
        ],
        'timestamp': result.timestamp,
    }
    if s.key_coverage is not None:
        obj['structural']['keyCoverage'] = s.key_coverage.to_dict()
    if s.suggestions is not None:
        obj['structural']['suggestions'] = [
            {
                'nodeId': k.node_id,
                'nodeName': k.node_name,
                'element': k.element,
                'confidence': round(k.confidence, 3),
                'reason': k.reason,
                'suggestion': k.suggestion,
            }
            for k in s.suggestions
        ]
    return obj


def format_json(result: ComparisonResult) -> str:
    """Format a comparison result as JSON."""
    return json.dumps(result_to_dict(result), indent=2)
