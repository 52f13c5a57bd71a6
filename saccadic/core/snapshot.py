"""Snapshot I/O: element lists from JSON, bitmaps from image files.

The comparison core only sees Element tuples and H x W x 4 uint8 arrays.
This module turns an inspector's JSON dump and PNG/JPEG screenshots into
those shapes.

Element JSON is a list of objects with camelCase keys:

    [{"key": "heroTitle", "category": "Text",
      "bounds": {"x": 16, "y": 40, "width": 343, "height": 32},
      "textColor": "#111827", "fontSize": 28, "text": "Welcome"}]

`padding` may be a number, a [vertical, horizontal] pair, a
[top, right, bottom, left] list or an object with those four keys.
Colours may be hex or CSS rgb()/rgba() and are normalised to uppercase hex.
"""

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image

from saccadic.core.color import parse_color_to_hex
from saccadic.core.errors import BitmapError, SaccadicError
from saccadic.core.types import Bounds, Element, Spacing

logger = logging.getLogger(__name__)


def _parse_spacing(raw: Any) -> Spacing | None:
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return Spacing.all(float(raw))
    if isinstance(raw, dict):
        return Spacing(
            top=float(raw.get('top', 0)),
            right=float(raw.get('right', 0)),
            bottom=float(raw.get('bottom', 0)),
            left=float(raw.get('left', 0)),
        )
    if isinstance(raw, list):
        values = [float(v) for v in raw]
        if len(values) == 2:
            return Spacing(values[0], values[1], values[0], values[1])
        if len(values) == 4:
            return Spacing(*values)
    raise SaccadicError(f'Unsupported padding value: {raw!r}')


def _optional_float(raw: Any) -> float | None:
    return None if raw is None else float(raw)


def element_from_dict(data: dict[str, Any]) -> Element:
    """Build one Element from its JSON object."""
    bounds = data.get('bounds') or {}
    font_weight = data.get('fontWeight')
    return Element(
        category=str(data.get('category', 'Unknown')),
        bounds=Bounds(
            x=float(bounds.get('x', 0)),
            y=float(bounds.get('y', 0)),
            width=float(bounds.get('width', 0)),
            height=float(bounds.get('height', 0)),
        ),
        key=data.get('key'),
        background_color=parse_color_to_hex(data.get('backgroundColor')),
        text_color=parse_color_to_hex(data.get('textColor')),
        font_size=_optional_float(data.get('fontSize')),
        font_weight=None if font_weight is None else int(font_weight),
        font_family=data.get('fontFamily'),
        line_height=_optional_float(data.get('lineHeight')),
        letter_spacing=_optional_float(data.get('letterSpacing')),
        text=data.get('text'),
        padding=_parse_spacing(data.get('padding')),
        gap=_optional_float(data.get('gap')),
        corner_radius=_optional_float(data.get('cornerRadius')),
        child_count=int(data.get('childCount', 0)),
        parent=data.get('parent'),
        description=data.get('description'),
    )


def elements_from_json(data: Any) -> list[Element]:
    """Accept either a bare list or an object with an `elements` list."""
    if isinstance(data, dict):
        data = data.get('elements')
    if not isinstance(data, list):
        raise SaccadicError('Element snapshot must be a JSON list (or an object with an "elements" list)')
    return [element_from_dict(item) for item in data]


def load_elements(path: str | Path) -> list[Element]:
    """Read an element snapshot JSON file."""
    with open(path, encoding='utf-8') as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise SaccadicError(f'{path}: not valid JSON ({exc})') from exc
    elements = elements_from_json(data)
    logger.debug('loaded %d elements from %s', len(elements), path)
    return elements


def load_bitmap(path: str | Path) -> np.ndarray:
    """Decode an image file to an H x W x 4 uint8 RGBA array."""
    with Image.open(path) as img:
        arr = np.array(img.convert('RGBA'), dtype=np.uint8)
    logger.debug('loaded bitmap %s (%dx%d)', path, arr.shape[1], arr.shape[0])
    return arr


def save_bitmap(bitmap: np.ndarray, path: str | Path) -> None:
    """Encode an H x W x 4 uint8 array as PNG (or whatever the suffix says)."""
    if bitmap.ndim != 3 or bitmap.shape[2] != 4 or bitmap.dtype != np.uint8:
        raise BitmapError(f'Expected H x W x 4 uint8 array, got shape {bitmap.shape} dtype {bitmap.dtype}')
    Image.fromarray(bitmap).save(path)
