"""Design-source document model (.pen-style JSON).

A document is {"version": ..., "children": [...], "variables": {...}}.
Nodes are parsed once into frozen PenNode values: sizing strings become
FixedSize / FillSize / FitSize / UnknownSize, `$--token` strings become
VarRef, padding becomes Spacing. Everything downstream pattern-matches on
those types instead of re-inspecting raw JSON.

Sizing grammar:
  320                   fixed
  "fill_container"      take the space the parent leaves free
  "fill_container(480)" same, capped at 480
  "fit_content"         shrink to the laid-out children
  "fit_content(600)"    same, capped at 600
  anything else         unknown, resolves to 0
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from saccadic.core.errors import DocumentError
from saccadic.core.types import Spacing

logger = logging.getLogger(__name__)

_FILL_RE = re.compile(r'^fill_container(?:\((\d+(?:\.\d+)?)\))?$')
_FIT_RE = re.compile(r'^fit_content(?:\((\d+(?:\.\d+)?)\))?$')
TOKEN_PREFIX = '$--'


# ── Tagged unions ──


@dataclass(frozen=True)
class FixedSize:
    value: float


@dataclass(frozen=True)
class FillSize:
    cap: float | None = None


@dataclass(frozen=True)
class FitSize:
    cap: float | None = None


@dataclass(frozen=True)
class UnknownSize:
    raw: Any = None


Size = FixedSize | FillSize | FitSize | UnknownSize


@dataclass(frozen=True)
class VarRef:
    """A `$--name` reference to a document variable. `name` keeps the leading '--'."""

    name: str

    @property
    def token(self) -> str:
        return f'${self.name}'


@dataclass(frozen=True)
class PenFill:
    color: str | VarRef | None
    enabled: bool = True


@dataclass(frozen=True)
class ThemedValue:
    value: Any
    theme: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PenVariable:
    type: str
    value: Any  # scalar, or tuple[ThemedValue, ...]


@dataclass(frozen=True)
class PenNode:
    type: str
    id: str
    name: str | None = None
    x: float | None = None
    y: float | None = None
    width: Size | None = None
    height: Size | None = None
    layout: str | None = None
    gap: float | None = None
    padding: Spacing | None = None
    fill: PenFill | VarRef | str | None = None
    corner_radius: float | VarRef | None = None
    font_family: str | VarRef | None = None
    font_size: float | VarRef | None = None
    font_weight: int | VarRef | None = None
    line_height: float | None = None
    letter_spacing: float | None = None
    content: str | None = None
    reusable: bool = False
    ref: str | None = None
    descendants: dict[str, dict[str, Any]] | None = None
    children: tuple[PenNode, ...] | None = None

    def with_overrides(self, overrides: dict[str, Any]) -> PenNode:
        """Derive a node with raw JSON overrides applied (keys in OVERRIDABLE only)."""
        changes = {}
        for key, value in overrides.items():
            if key in OVERRIDABLE:
                attr, parse = _FIELDS[key]
                changes[attr] = parse(value)
        return replace(self, **changes) if changes else self


# ── Field parsers ──


def parse_size(raw: Any) -> Size | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return UnknownSize(raw)
    if isinstance(raw, (int, float)):
        return FixedSize(float(raw))
    if isinstance(raw, str):
        m = _FILL_RE.match(raw)
        if m:
            return FillSize(float(m.group(1)) if m.group(1) else None)
        m = _FIT_RE.match(raw)
        if m:
            return FitSize(float(m.group(1)) if m.group(1) else None)
    logger.debug('unrecognised sizing token %r, resolving to 0', raw)
    return UnknownSize(raw)


def parse_padding(raw: Any) -> Spacing | None:
    """Number, [vertical, horizontal] or [top, right, bottom, left]."""
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return Spacing.all(float(raw))
    if isinstance(raw, list) and all(isinstance(v, (int, float)) for v in raw):
        values = [float(v) for v in raw]
        if len(values) == 2:
            return Spacing(values[0], values[1], values[0], values[1])
        if len(values) == 4:
            return Spacing(*values)
    logger.debug('unsupported padding %r, treating as zero', raw)
    return Spacing()


def _token_or(raw: Any) -> Any:
    if isinstance(raw, str) and raw.startswith(TOKEN_PREFIX):
        return VarRef(raw[1:])
    return raw


def parse_fill(raw: Any) -> PenFill | VarRef | str | None:
    if isinstance(raw, dict):
        return PenFill(color=_token_or(raw.get('color')), enabled=raw.get('enabled', True) is not False)
    if isinstance(raw, str):
        return _token_or(raw)
    return None


def _number_or_token(cast):
    def parse(raw: Any):
        if raw is None:
            return None
        if isinstance(raw, str):
            return _token_or(raw) if raw.startswith(TOKEN_PREFIX) else _try_cast(cast, raw)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return cast(raw)
        return None

    return parse


def _try_cast(cast, raw: str):
    try:
        return cast(float(raw))
    except ValueError:
        logger.debug('non-numeric value %r ignored', raw)
        return None


def _optional_float(raw: Any) -> float | None:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    return None


def _optional_str(raw: Any) -> str | None:
    return raw if isinstance(raw, str) else None


def _font_family(raw: Any) -> str | VarRef | None:
    return _token_or(raw) if isinstance(raw, str) else None


# JSON key -> (PenNode attribute, parser)
_FIELDS = {
    'x': ('x', _optional_float),
    'y': ('y', _optional_float),
    'width': ('width', parse_size),
    'height': ('height', parse_size),
    'layout': ('layout', _optional_str),
    'gap': ('gap', _optional_float),
    'padding': ('padding', parse_padding),
    'fill': ('fill', parse_fill),
    'cornerRadius': ('corner_radius', _number_or_token(float)),
    'fontFamily': ('font_family', _font_family),
    'fontSize': ('font_size', _number_or_token(float)),
    'fontWeight': ('font_weight', _number_or_token(int)),
    'lineHeight': ('line_height', _optional_float),
    'letterSpacing': ('letter_spacing', _optional_float),
    'content': ('content', _optional_str),
    'name': ('name', _optional_str),
}

OVERRIDABLE = frozenset(
    {
        'x',
        'y',
        'width',
        'height',
        'fill',
        'name',
        'content',
        'fontSize',
        'fontWeight',
        'fontFamily',
        'cornerRadius',
        'padding',
        'gap',
        'layout',
    }
)


def parse_node(data: Any) -> PenNode:
    if not isinstance(data, dict):
        raise DocumentError(f'Design node must be an object, got {type(data).__name__}')
    kwargs = {attr: parse(data.get(key)) for key, (attr, parse) in _FIELDS.items()}

    children = data.get('children')
    if children is not None and not isinstance(children, list):
        raise DocumentError(f'Node {data.get("id")!r}: children must be a list')

    descendants = data.get('descendants')
    if descendants is not None and not isinstance(descendants, dict):
        raise DocumentError(f'Node {data.get("id")!r}: descendants must be an object')

    return PenNode(
        type=str(data.get('type') or 'frame'),
        id=str(data.get('id') or ''),
        reusable=data.get('reusable') is True,
        ref=_optional_str(data.get('ref')),
        descendants={k: dict(v) for k, v in descendants.items() if isinstance(v, dict)} if descendants else None,
        children=tuple(parse_node(c) for c in children) if children is not None else None,
        **kwargs,
    )


def _parse_variable(data: Any) -> PenVariable:
    if not isinstance(data, dict):
        return PenVariable(type='string', value=data)
    value = data.get('value')
    if isinstance(value, list):
        value = tuple(
            ThemedValue(
                value=item.get('value'),
                theme={str(k): str(v) for k, v in (item.get('theme') or {}).items()},
            )
            for item in value
            if isinstance(item, dict)
        )
    return PenVariable(type=str(data.get('type', 'string')), value=value)


@dataclass(frozen=True)
class PenDocument:
    version: str
    children: tuple[PenNode, ...]
    variables: dict[str, PenVariable] = field(default_factory=dict)


def parse_document(data: Any) -> PenDocument:
    """Parse a decoded .pen JSON object."""
    if not isinstance(data, dict):
        raise DocumentError('Design document must be a JSON object')
    children = data.get('children') or []
    if not isinstance(children, list):
        raise DocumentError('Design document "children" must be a list')
    variables = data.get('variables') or {}
    if not isinstance(variables, dict):
        raise DocumentError('Design document "variables" must be an object')
    return PenDocument(
        version=str(data.get('version', '')),
        children=tuple(parse_node(c) for c in children),
        variables={name: _parse_variable(v) for name, v in variables.items()},
    )


def load_document(path: str | Path) -> PenDocument:
    """Read and parse a .pen file."""
    with open(path, encoding='utf-8') as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise DocumentError(f'{path}: not valid JSON ({exc})') from exc
    return parse_document(data)
