"""Element matcher: pair design nodes with implementation elements.

Five passes run in a fixed order over the flattened design tree. A node or
element claimed by one pass is invisible to every later pass.

  identifier    element key == node id or name              confidence 1.0
  fingerprint   nodes with children; 0.6*fp + 0.4*min(2*IoU, 1) > 0.55
  overlap       IoU > 0.5                                   confidence = IoU
  text          text nodes; normalised exact / substring / Levenshtein >= 0.8,
                best IoU wins                               confidence 0.85
  type+visual   0.3*type + 0.25*colour + 0.25*size + 0.2*min(2*IoU, 1) > 0.4, IoU > 0

Every pass is a `Pass` handed to one greedy primitive: for each unclaimed
node, scan unclaimed elements and keep the best score strictly above the
running best (which starts at the threshold). Strict `>` means the first
element seen wins a tie. Input order is the only tie-break.

When fewer than 20% of design nodes are matched by identifier, a second
set of passes proposes identifiers for keyless elements (`suggest_keys`).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from saccadic.comparison.categories import child_kind, is_scaffolding, is_text, type_compatibility
from saccadic.comparison.properties import compare_properties
from saccadic.comparison.text import levenshtein_similarity, normalize_text, text_similarity
from saccadic.core.color import delta_e
from saccadic.core.errors import ColorParseError
from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from saccadic.core.types import (
    Bounds,
    DesignNode,
    Element,
    KeyCoverage,
    KeySuggestion,
    Match,
    NodeType,
    StructuralDiff,
)
from saccadic.design.tree import flatten_nodes

logger = logging.getLogger(__name__)

KEY_COVERAGE_THRESHOLD = 0.2
TEXT_CONFIDENCE = 0.85


@dataclass(frozen=True)
class Fingerprint:
    child_count: int
    child_types: tuple[str, ...]
    has_text: bool
    has_background: bool
    aspect_ratio: float
    area: float


def node_fingerprint(node: DesignNode) -> Fingerprint:
    b = node.bounds
    return Fingerprint(
        child_count=len(node.children),
        child_types=tuple(sorted(c.type.value for c in node.children)),
        has_text=node.type == NodeType.TEXT or any(c.type == NodeType.TEXT for c in node.children),
        has_background=bool(node.fills) and node.fills[0].color is not None,
        aspect_ratio=b.width / b.height if b.height > 0 else 1.0,
        area=b.area,
    )


def element_fingerprint(index: int, elements: list[Element]) -> Fingerprint:
    """Children are inferred by bounds containment over every other element.

    Overlapping siblings can be misattributed; this is a known approximation.
    """
    element = elements[index]
    b = element.bounds
    contained = [e for i, e in enumerate(elements) if i != index and b.contains(e.bounds)]
    return Fingerprint(
        child_count=element.child_count,
        child_types=tuple(sorted(child_kind(e) for e in contained)),
        has_text=is_text(element) or element.text is not None,
        has_background=element.background_color is not None,
        aspect_ratio=b.width / b.height if b.height > 0 else 1.0,
        area=b.area,
    )


def _overlap(a: tuple[str, ...], b: tuple[str, ...]) -> float:
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    kinds = set(a)
    return sum(1 for t in b if t in kinds) / max(len(a), len(b))


def fingerprint_similarity(a: Fingerprint, b: Fingerprint) -> float:
    max_children = max(a.child_count, b.child_count, 1)
    score = 0.3 * (1 - abs(a.child_count - b.child_count) / max_children)
    score += 0.25 * _overlap(a.child_types, b.child_types)
    score += 0.15 * (1.0 if a.has_text == b.has_text else 0.0)
    score += 0.1 * (1.0 if a.has_background == b.has_background else 0.0)
    ar_a, ar_b = max(a.aspect_ratio, 0.1), max(b.aspect_ratio, 0.1)
    score += 0.2 * (min(ar_a, ar_b) / max(ar_a, ar_b))
    return score


def color_similarity(node: DesignNode, element: Element) -> float:
    """Best of max(0, 1 - ΔE00/50) over the element's background and text colour."""
    design = node.primary_color
    if design is None or design.startswith('$'):
        return 0.5
    best = 0.0
    for actual in (element.background_color, element.text_color):
        if actual is not None:
            best = max(best, 1.0 - delta_e(design, actual) / 50.0)
    return best


def size_similarity(design: Bounds, actual: Bounds) -> float:
    if design.width == 0 or design.height == 0:
        return 0.0
    wr = min(design.width, actual.width) / max(design.width, actual.width)
    hr = min(design.height, actual.height) / max(design.height, actual.height)
    return (wr + hr) / 2


def _texts_match(design: str, actual: str) -> bool:
    d, a = normalize_text(design), normalize_text(actual)
    if not d or not a:
        return False
    if d == a or d in a or a in d:
        return True
    return levenshtein_similarity(d, a) >= 0.8


# ── Greedy primitive ──

Scorer = Callable[[DesignNode, int], float | None]


@dataclass(frozen=True)
class Pass:
    """One matching pass: which nodes take part, how a candidate scores, where acceptance starts.

    `score` returns None for an ineligible candidate. A candidate wins when its
    score is strictly greater than the running best, which starts at `threshold`.
    `confidence` maps the winning score to the reported confidence.
    """

    name: str
    score: Scorer
    threshold: float
    nodes: Callable[[DesignNode], bool] = lambda node: True
    confidence: Callable[[float], float] = lambda score: score


def greedy_assign(
    nodes: list[DesignNode],
    candidates: list[int],
    claimed_nodes: set[int],
    claimed_elements: set[int],
    p: Pass,
) -> list[tuple[DesignNode, int, float]]:
    """Run one pass, claiming what it assigns. Returns (node, element index, confidence).

    Nodes are claimed by their position in `nodes`, so the same list must be
    passed to every pass that shares the claim sets.
    """
    assigned = []
    for position, node in enumerate(nodes):
        if position in claimed_nodes or not p.nodes(node):
            continue
        best_index, best_score = None, p.threshold
        for index in candidates:
            if index in claimed_elements:
                continue
            score = p.score(node, index)
            if score is None or math.isnan(score):
                continue
            if score > best_score:
                best_index, best_score = index, score
        if best_index is not None:
            claimed_nodes.add(position)
            claimed_elements.add(best_index)
            assigned.append((node, best_index, p.confidence(best_score)))
    logger.debug('pass %s: %d assignment(s)', p.name, len(assigned))
    return assigned


class _Context:
    """Per-call caches shared by the pass scorers."""

    def __init__(self, elements: list[Element]):
        self.elements = elements
        self._fingerprints: dict[int, Fingerprint] = {}

    def fingerprint(self, index: int) -> Fingerprint:
        if index not in self._fingerprints:
            self._fingerprints[index] = element_fingerprint(index, self.elements)
        return self._fingerprints[index]

    def safe_color_similarity(self, node: DesignNode, element: Element) -> float:
        try:
            return color_similarity(node, element)
        except ColorParseError:
            logger.debug('unparseable colour on %s / %s, using neutral colour score', node.id, element.label)
            return 0.5


def _matching_passes(ctx: _Context) -> list[Pass]:
    elements = ctx.elements

    def identifier(node: DesignNode, i: int) -> float | None:
        key = elements[i].key
        return 1.0 if key is not None and (key == node.id or key == node.name) else None

    def fingerprint(node: DesignNode, i: int) -> float:
        fp = fingerprint_similarity(node_fingerprint(node), ctx.fingerprint(i))
        return 0.6 * fp + 0.4 * min(2 * elements[i].bounds.iou(node.bounds), 1.0)

    def overlap(node: DesignNode, i: int) -> float:
        return elements[i].bounds.iou(node.bounds)

    def text(node: DesignNode, i: int) -> float | None:
        element = elements[i]
        if element.text is None or not _texts_match(node.text, element.text):
            return None
        return element.bounds.iou(node.bounds)

    def type_visual(node: DesignNode, i: int) -> float | None:
        element = elements[i]
        iou = element.bounds.iou(node.bounds)
        if iou == 0:
            return None
        return (
            0.3 * type_compatibility(node.type, element.category)
            + 0.25 * ctx.safe_color_similarity(node, element)
            + 0.25 * size_similarity(node.bounds, element.bounds)
            + 0.2 * min(2 * iou, 1.0)
        )

    return [
        Pass('identifier', identifier, 0.0),
        Pass('fingerprint', fingerprint, 0.55, nodes=lambda n: bool(n.children)),
        Pass('overlap', overlap, 0.5),
        Pass(
            'text',
            text,
            -1.0,
            nodes=lambda n: n.type == NodeType.TEXT and n.text is not None,
            confidence=lambda _score: TEXT_CONFIDENCE,
        ),
        Pass('type+visual', type_visual, 0.4),
    ]


def match_elements(elements: list[Element], nodes: list[DesignNode]) -> list[Match]:
    """Run the five passes over an already-flattened node list."""
    ctx = _Context(elements)
    claimed_nodes: set[int] = set()
    claimed_elements: set[int] = set()
    candidates = list(range(len(elements)))

    matches = []
    for p in _matching_passes(ctx):
        for node, index, confidence in greedy_assign(nodes, candidates, claimed_nodes, claimed_elements, p):
            matches.append(Match(element=elements[index], node=node, confidence=confidence))
    return matches


def _truncate(text: str, limit: int = 40) -> str:
    return text if len(text) <= limit else text[: limit - 3] + '...'


def suggest_keys(elements: list[Element], nodes: list[DesignNode]) -> list[KeySuggestion]:
    """Propose identifiers for keyless, non-scaffolding elements, best first."""
    ctx = _Context(elements)
    candidates = [i for i, e in enumerate(elements) if e.key is None and not is_scaffolding(e)]

    def text(node: DesignNode, i: int) -> float | None:
        element_text = elements[i].text
        if not element_text:
            return None
        similarity = text_similarity(node.text, element_text)
        return similarity if similarity >= 0.7 else None

    def fingerprint(node: DesignNode, i: int) -> float:
        return fingerprint_similarity(node_fingerprint(node), ctx.fingerprint(i))

    def type_visual(node: DesignNode, i: int) -> float:
        element = elements[i]
        return (
            0.5 * type_compatibility(node.type, element.category)
            + 0.3 * ctx.safe_color_similarity(node, element)
            + 0.2 * size_similarity(node.bounds, element.bounds)
        )

    passes = [
        (
            Pass('suggest-text', text, 0.0, nodes=lambda n: bool(n.text) and bool(normalize_text(n.text))),
            lambda node, _el: f'Text match: "{_truncate(node.text)}"',
        ),
        (
            Pass('suggest-fingerprint', fingerprint, 0.4, nodes=lambda n: bool(n.children), confidence=lambda s: s * 0.8),
            lambda node, _el: f'Structural match: {len(node.children)} children, {node.type.value} type',
        ),
        (
            Pass('suggest-type+visual', type_visual, 0.4, confidence=lambda s: s * 0.6),
            lambda node, el: f'Type+visual match: {node.type.value} ↔ {el.category}',
        ),
    ]

    claimed_nodes: set[int] = set()
    claimed_elements: set[int] = set()
    suggestions = []
    for p, reason in passes:
        for node, index, confidence in greedy_assign(nodes, candidates, claimed_nodes, claimed_elements, p):
            element = elements[index]
            suggestions.append(
                KeySuggestion(
                    node_id=node.id,
                    node_name=node.name,
                    node_type=node.type,
                    node_text=node.text,
                    element=element.label,
                    element_category=element.category,
                    element_text=element.text,
                    confidence=confidence,
                    reason=reason(node, element),
                )
            )
    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions


def diff_structure(
    elements: list[Element],
    design_nodes: list[DesignNode] | tuple[DesignNode, ...],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> StructuralDiff:
    """Match, compare properties, and collect missing / extra / key coverage."""
    flat = flatten_nodes(design_nodes)
    matches = match_elements(elements, flat)

    mismatches = []
    for match in matches:
        mismatches.extend(compare_properties(match.node, match.element, thresholds))

    matched_nodes = {id(m.node) for m in matches}
    matched_elements = {id(m.element) for m in matches}
    missing = [n.name for n in flat if id(n) not in matched_nodes]
    extra = [e.label for e in elements if id(e) not in matched_elements and not is_scaffolding(e)]

    found_keys = sum(1 for m in matches if m.element.key is not None and m.element.key in (m.node.id, m.node.name))
    coverage = KeyCoverage(
        expected_keys=len(flat),
        found_keys=found_keys,
        element_count=len(elements),
        coverage=found_keys / len(flat) if flat else 0.0,
    )
    suggestions = None
    if coverage.coverage < KEY_COVERAGE_THRESHOLD:
        suggestions = suggest_keys(elements, flat)

    logger.debug(
        '%d matches, %d mismatches, %d missing, %d extra', len(matches), len(mismatches), len(missing), len(extra)
    )
    return StructuralDiff(
        matches=matches,
        mismatches=mismatches,
        missing=missing,
        extra=extra,
        key_coverage=coverage,
        suggestions=suggestions,
    )
