"""Layout engine: PenDocument -> absolutely positioned DesignNode tree.

Five phases, run in order on every call:

  1. Variable resolution   pick the themed value for the requested theme, else the first
  2. Component registry    index `reusable` nodes by id (at any depth)
  3. Ref expansion         clone the prototype, apply instance + descendant overrides;
                           an in-progress set of ref ids stops self-referential loops
  4. Substitution          replace `$--token` refs in fill, font and corner-radius fields
  5. Layout                measure bottom-up (fit containers after their children),
                           place top-down with a running main-axis cursor

Degradations never raise: an unresolved token stays literal, a circular or
dangling ref stays unexpanded, an unknown sizing token resolves to 0. Each
is logged at debug level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from saccadic.core.types import (
    DEFAULT_VIEWPORT,
    Bounds,
    DesignNode,
    DesignState,
    DesignTokens,
    Fill,
    LayoutAxis,
    NodeType,
    Spacing,
    Typography,
    Viewport,
)
from saccadic.design.document import (
    FillSize,
    FitSize,
    FixedSize,
    PenDocument,
    PenFill,
    PenNode,
    PenVariable,
    Size,
    VarRef,
)

logger = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 16.0
DEFAULT_LINE_HEIGHT = 1.2  # multiplier
DEFAULT_FONT_FAMILY = 'Inter'
DEFAULT_FONT_WEIGHT = 400

_NODE_TYPES = {
    'frame': NodeType.FRAME,
    'text': NodeType.TEXT,
    'rectangle': NodeType.RECTANGLE,
    'ellipse': NodeType.ELLIPSE,
    'ref': NodeType.INSTANCE,
    'image': NodeType.IMAGE,
    'icon_font': NodeType.VECTOR,
    'path': NodeType.VECTOR,
    'line': NodeType.VECTOR,
}


@dataclass
class _Box:
    """A measured node. Child offsets are relative to this box's top-left."""

    node: PenNode
    width: float
    height: float
    children: list[tuple[float, float, _Box]] = field(default_factory=list)


def _resolve_size(size: Size | None, available: float | None) -> float:
    if isinstance(size, FixedSize):
        return size.value
    if isinstance(size, FillSize):
        if available is None:
            return size.cap or 0.0
        return min(size.cap, available) if size.cap is not None else available
    # FitSize is settled after the children; UnknownSize and None are 0
    return 0.0


def _literal(value: Any) -> Any:
    return value.token if isinstance(value, VarRef) else value


class LayoutEngine:
    """Turns a design document into a DesignState.

    The engine keeps per-run tables (variables, components, refs being
    expanded) and resets them on every `layout` call.
    """

    def __init__(self) -> None:
        self._variables: dict[str, Any] = {}
        self._components: dict[str, PenNode] = {}
        self._expanding: set[str] = set()

    def layout(self, document: PenDocument, frame: str | None = None, theme: str | None = None) -> DesignState:
        self._variables = self._resolve_variables(document.variables, theme)
        self._components = {}
        self._expanding = set()

        self._register_components(document.children)
        nodes = [self._substitute(self._expand(n)) for n in document.children]

        if frame is not None and nodes:
            selected = next((n for n in nodes if n.name == frame or n.id == frame), None)
            if selected is None:
                logger.debug('frame %r not found, using %r', frame, nodes[0].id)
                selected = nodes[0]
            nodes = [selected]

        boxes = [self._measure(n, None, None) for n in nodes]
        design_nodes = tuple(self._to_design_node(box, box.node.x or 0.0, box.node.y or 0.0) for box in boxes)

        max_w = max((n.bounds.right for n in design_nodes), default=0.0)
        max_h = max((n.bounds.bottom for n in design_nodes), default=0.0)
        viewport = Viewport(
            width=round(max_w) if max_w > 0 else DEFAULT_VIEWPORT.width,
            height=round(max_h) if max_h > 0 else DEFAULT_VIEWPORT.height,
        )
        return DesignState(
            name=frame or document.version,
            viewport=viewport,
            nodes=design_nodes,
            tokens=self._extract_tokens(document.variables),
        )

    # ── Phase 1: variables ──

    @staticmethod
    def _resolve_variables(variables: dict[str, PenVariable], theme: str | None) -> dict[str, Any]:
        resolved = {}
        for name, variable in variables.items():
            value = variable.value
            if isinstance(value, tuple):
                match = None
                if theme is not None:
                    match = next((tv for tv in value if theme in tv.theme.values()), None)
                if match is None and value:
                    match = value[0]
                value = match.value if match is not None else ''
            resolved[name] = value
        return resolved

    def _lookup(self, ref: VarRef) -> Any:
        value = self._variables.get(ref.name)
        if value is None:
            logger.debug('unresolved variable %s left literal', ref.token)
        return value

    # ── Phase 2: components ──

    def _register_components(self, nodes: tuple[PenNode, ...]) -> None:
        for node in nodes:
            if node.reusable:
                self._components[node.id] = node
            if node.children:
                self._register_components(node.children)

    # ── Phase 3: ref expansion ──

    def _expand(self, node: PenNode) -> PenNode:
        if node.type == 'ref' and node.ref is not None:
            if node.ref in self._expanding:
                logger.debug('circular ref %r in %r left unexpanded', node.ref, node.id)
                return node
            prototype = self._components.get(node.ref)
            if prototype is None:
                logger.debug('ref %r in %r has no component', node.ref, node.id)
                return node

            self._expanding.add(node.ref)
            try:
                overrides = {
                    attr: getattr(node, attr)
                    for attr in ('x', 'y', 'width', 'height', 'fill', 'name')
                    if getattr(node, attr) is not None
                }
                clone = replace(prototype, type='ref', id=node.id, **overrides)
                if node.descendants and clone.children:
                    clone = replace(clone, children=_apply_descendants(clone.children, node.descendants))
                if clone.children:
                    children = _prefix_ids(clone.children, node.id)
                    clone = replace(clone, children=tuple(self._expand(c) for c in children))
                return clone
            finally:
                self._expanding.discard(node.ref)

        if node.children:
            return replace(node, children=tuple(self._expand(c) for c in node.children))
        return node

    # ── Phase 4: substitution ──

    def _substitute(self, node: PenNode) -> PenNode:
        changes: dict[str, Any] = {}

        if isinstance(node.fill, VarRef):
            value = self._lookup(node.fill)
            if value is not None:
                changes['fill'] = str(value)
        elif isinstance(node.fill, PenFill) and isinstance(node.fill.color, VarRef):
            value = self._lookup(node.fill.color)
            if value is not None:
                changes['fill'] = replace(node.fill, color=str(value))

        if isinstance(node.font_family, VarRef):
            value = self._lookup(node.font_family)
            if value is not None:
                changes['font_family'] = str(value)

        for attr, cast in (('font_size', float), ('font_weight', int), ('corner_radius', float)):
            ref = getattr(node, attr)
            if isinstance(ref, VarRef):
                value = self._lookup(ref)
                number = _to_number(value, cast)
                if number is not None:
                    changes[attr] = number

        if node.children:
            changes['children'] = tuple(self._substitute(c) for c in node.children)
        return replace(node, **changes) if changes else node

    # ── Phase 5: layout ──

    def _measure(self, node: PenNode, avail_w: float | None, avail_h: float | None) -> _Box:
        padding = node.padding or Spacing()
        gap = node.gap or 0.0

        width = _resolve_size(node.width, avail_w)
        height = _resolve_size(node.height, avail_h)

        if node.type == 'text' and height == 0:
            font_size = node.font_size if isinstance(node.font_size, float) else DEFAULT_FONT_SIZE
            height = font_size * (node.line_height or DEFAULT_LINE_HEIGHT)

        box = _Box(node=node, width=width, height=height)
        children = node.children or ()
        if not children:
            return box

        content_w = max(0.0, width - padding.horizontal)
        content_h = max(0.0, height - padding.vertical)

        if node.layout == 'none':
            for child in children:
                measured = self._measure(child, content_w, content_h)
                box.children.append((padding.left + (child.x or 0.0), padding.top + (child.y or 0.0), measured))
            fit_w = max((dx + c.width for dx, _, c in box.children), default=padding.left) - padding.left
            fit_h = max((dy + c.height for _, dy, c in box.children), default=padding.top) - padding.top
        else:
            vertical = node.layout == 'vertical'
            main_avail = content_h if vertical else content_w

            # Fixed and fit children first: fill children share what is left
            measured: dict[int, _Box] = {}
            for i, child in enumerate(children):
                if not isinstance(child.height if vertical else child.width, FillSize):
                    measured[i] = self._measure(child, content_w, content_h)
            fill_count = len(children) - len(measured)
            if fill_count:
                used = sum(c.height if vertical else c.width for c in measured.values())
                used += gap * (len(children) - 1)
                share = max(0.0, main_avail - used) / fill_count
                for i, child in enumerate(children):
                    if i not in measured:
                        if vertical:
                            measured[i] = self._measure(child, content_w, share)
                        else:
                            measured[i] = self._measure(child, share, content_h)

            cursor = 0.0
            for i, child in enumerate(children):
                c = measured[i]
                if vertical:
                    offset = (padding.left + (child.x or 0.0), padding.top + cursor + (child.y or 0.0))
                    extent = c.height
                else:
                    offset = (padding.left + cursor + (child.x or 0.0), padding.top + (child.y or 0.0))
                    extent = c.width
                box.children.append((offset[0], offset[1], c))
                cursor += extent + (gap if i < len(children) - 1 else 0.0)

            main_extent = cursor
            cross_w = max((c.width for _, _, c in box.children), default=0.0)
            cross_h = max((c.height for _, _, c in box.children), default=0.0)
            fit_w = cross_w if vertical else main_extent
            fit_h = main_extent if vertical else cross_h

        if isinstance(node.width, FitSize):
            fit = fit_w + padding.horizontal
            box.width = min(node.width.cap, fit) if node.width.cap is not None else fit
        if isinstance(node.height, FitSize):
            fit = fit_h + padding.vertical
            box.height = min(node.height.cap, fit) if node.height.cap is not None else fit
        return box

    def _to_design_node(self, box: _Box, abs_x: float, abs_y: float) -> DesignNode:
        source = box.node
        children = tuple(self._to_design_node(c, abs_x + dx, abs_y + dy) for dx, dy, c in box.children)

        if source.layout == 'vertical':
            layout = LayoutAxis.VERTICAL
        elif source.layout == 'none':
            layout = LayoutAxis.NONE
        elif source.children:
            layout = LayoutAxis.HORIZONTAL
        else:
            layout = None

        padding = source.padding
        return DesignNode(
            id=source.id,
            name=source.name or source.id,
            type=_NODE_TYPES.get(source.type, NodeType.FRAME),
            bounds=Bounds(abs_x, abs_y, box.width, box.height),
            fills=_fills(source.fill),
            typography=_typography(source),
            padding=None if padding is None or padding.is_zero else padding,
            gap=source.gap,
            corner_radius=source.corner_radius if isinstance(source.corner_radius, float) else None,
            layout=layout,
            text=source.content,
            children=children,
        )

    # ── Tokens ──

    def _extract_tokens(self, variables: dict[str, PenVariable]) -> DesignTokens | None:
        if not variables:
            return None
        colors: dict[str, str] = {}
        spacing: dict[str, str] = {}
        radii: dict[str, str] = {}
        fonts: dict[str, str] = {}
        for name, variable in variables.items():
            value = self._variables.get(name)
            if value is None:
                continue
            lower = name.lower()
            if variable.type == 'color':
                colors[name] = str(value)
            elif variable.type == 'number':
                bucket = radii if 'radius' in lower or 'round' in lower else spacing
                bucket[name] = _format_number(value)
            elif variable.type == 'string' and 'font' in lower:
                fonts[name] = str(value)
        return DesignTokens(colors=colors, spacing=spacing, radii=radii, fonts=fonts)


def _apply_descendants(children: tuple[PenNode, ...], descendants: dict[str, dict[str, Any]]) -> tuple[PenNode, ...]:
    result = []
    for child in children:
        override = descendants.get(child.id)
        if override is not None:
            child = child.with_overrides(override)
        if child.children:
            child = replace(child, children=_apply_descendants(child.children, descendants))
        result.append(child)
    return tuple(result)


def _prefix_ids(children: tuple[PenNode, ...], prefix: str) -> tuple[PenNode, ...]:
    """Instance descendants get ids scoped to the instance: `<instance>/<original>`.

    The original id stays on as the name when the node has none.
    """
    return tuple(
        replace(
            child,
            id=f'{prefix}/{child.id}',
            name=child.name if child.name is not None else child.id,
            children=_prefix_ids(child.children, prefix) if child.children else child.children,
        )
        for child in children
    )


def _to_number(value: Any, cast) -> Any:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return cast(value)
    if isinstance(value, str):
        try:
            return cast(float(value))
        except ValueError:
            return None
    return None


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _fills(fill: Any) -> tuple[Fill, ...] | None:
    if isinstance(fill, PenFill):
        if not fill.enabled:
            return None
        return (Fill(color=_literal(fill.color)),)
    if isinstance(fill, VarRef):
        return (Fill(color=fill.token),)
    if isinstance(fill, str):
        if not fill or fill == 'transparent':
            return None
        return (Fill(color=fill),)
    return None


def _text_color(node: PenNode) -> str | None:
    if node.type != 'text' or node.fill is None:
        return None
    fills = _fills(node.fill)
    return fills[0].color if fills else None


def _typography(node: PenNode) -> Typography | None:
    if node.font_family is None and node.font_size is None:
        return None
    font_size = node.font_size if isinstance(node.font_size, float) else DEFAULT_FONT_SIZE
    family = node.font_family
    if isinstance(family, VarRef):
        family = family.token
    return Typography(
        font_family=family if isinstance(family, str) else DEFAULT_FONT_FAMILY,
        font_size=font_size,
        font_weight=node.font_weight if isinstance(node.font_weight, int) else DEFAULT_FONT_WEIGHT,
        line_height=(node.line_height or DEFAULT_LINE_HEIGHT) * font_size,
        letter_spacing=node.letter_spacing,
        color=_text_color(node),
    )


def layout_document(document: PenDocument, frame: str | None = None, theme: str | None = None) -> DesignState:
    """Convenience wrapper: one-shot LayoutEngine().layout(...)."""
    return LayoutEngine().layout(document, frame=frame, theme=theme)
