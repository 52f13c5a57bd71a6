"""Helpers over laid-out design trees: flattening, tree description, frame listing."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from saccadic.core.types import DesignNode, LayoutAxis
from saccadic.design.document import FixedSize, PenDocument


@dataclass(frozen=True)
class NodeId:
    id: str
    name: str
    type: str
    text: str | None


@dataclass(frozen=True)
class FrameInfo:
    id: str
    name: str
    width: int
    height: int


def iter_nodes(nodes: Iterable[DesignNode]) -> Iterator[DesignNode]:
    """Pre-order walk: every node once, parent before children."""
    for node in nodes:
        yield node
        yield from iter_nodes(node.children)


def flatten_nodes(nodes: Iterable[DesignNode]) -> list[DesignNode]:
    return list(iter_nodes(nodes))


def flatten_node_ids(nodes: Iterable[DesignNode]) -> list[NodeId]:
    return [NodeId(id=n.id, name=n.name, type=n.type.value, text=n.text) for n in iter_nodes(nodes)]


def _fmt(value: float) -> str:
    return f'{value:g}'


def _describe(node: DesignNode) -> str:
    props = [f'{round(node.bounds.width)}×{round(node.bounds.height)}']
    if node.fills:
        solid = next((f for f in node.fills if f.kind == 'solid' and f.color is not None), None)
        if solid is not None:
            props.append(f'bg: {solid.color}')
    if node.typography is not None:
        props.append(f'fontSize: {_fmt(node.typography.font_size)}')
        if node.typography.font_weight != 400:
            props.append(f'fontWeight: {node.typography.font_weight}')
        if node.typography.color is not None:
            props.append(f'color: {node.typography.color}')
    if node.corner_radius:
        props.append(f'borderRadius: {_fmt(node.corner_radius)}')
    if node.layout is not None and node.layout != LayoutAxis.NONE:
        props.append(f'layout: {node.layout.value}')
    if node.gap is not None:
        props.append(f'gap: {_fmt(node.gap)}')

    snippet = ''
    if node.text is not None:
        text = node.text if len(node.text) <= 50 else node.text[:47] + '...'
        snippet = f' "{text}"'
    return f'{node.type.value.upper()} "{node.name}" #{node.id}{snippet} ({", ".join(props)})'


def describe_tree(nodes: Iterable[DesignNode]) -> str:
    """Indented box-drawing tree, one line per node.

    FRAME "Page" #page (375×812, bg: #FFFFFF, layout: vertical)
    ├── TEXT "Title" #title "Hello" (100×19, fontSize: 16)
    └── RECTANGLE "Divider" #divider (375×1)
    """
    lines: list[str] = []

    def walk(node: DesignNode, prefix: str, is_last: bool, top: bool) -> None:
        connector = '' if top else ('└── ' if is_last else '├── ')
        lines.append(f'{prefix}{connector}{_describe(node)}')
        child_prefix = '' if top else prefix + ('    ' if is_last else '│   ')
        for i, child in enumerate(node.children):
            walk(child, child_prefix, i == len(node.children) - 1, False)

    roots = list(nodes)
    for i, root in enumerate(roots):
        walk(root, '', i == len(roots) - 1, True)
    return '\n'.join(lines)


def list_frames(document: PenDocument) -> list[FrameInfo]:
    """Top-level named frames (pages) of a document."""
    frames = []
    for node in document.children:
        if node.type != 'frame' or node.name is None:
            continue
        width = round(node.width.value) if isinstance(node.width, FixedSize) else 0
        height = round(node.height.value) if isinstance(node.height, FixedSize) else 0
        frames.append(FrameInfo(id=node.id, name=node.name, width=width, height=height))
    return frames
