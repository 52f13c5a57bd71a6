"""Tests for saccadic.core.snapshot — element JSON and bitmap I/O."""

import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from saccadic.core.errors import BitmapError, SaccadicError
from saccadic.core.snapshot import element_from_dict, elements_from_json, load_bitmap, load_elements, save_bitmap
from saccadic.core.types import Bounds, Spacing


class TestElementFromDict:
    def test_camel_case_fields(self) -> None:
        e = element_from_dict(
            {
                'key': 'heroTitle',
                'category': 'Text',
                'bounds': {'x': 16, 'y': 40, 'width': 343, 'height': 32},
                'textColor': 'rgb(17, 24, 39)',
                'fontSize': 28,
                'fontWeight': 700,
                'text': 'Welcome',
                'childCount': 0,
                'parent': "Key('page')",
            }
        )
        assert e.key == 'heroTitle'
        assert e.bounds == Bounds(16, 40, 343, 32)
        assert e.text_color == '#111827'
        assert e.font_size == 28.0
        assert e.font_weight == 700
        assert e.parent == "Key('page')"

    @pytest.mark.parametrize(
        'raw, expected',
        [
            (8, Spacing(8, 8, 8, 8)),
            ([4, 8], Spacing(4, 8, 4, 8)),
            ([1, 2, 3, 4], Spacing(1, 2, 3, 4)),
            ({'top': 1, 'left': 4}, Spacing(1, 0, 0, 4)),
        ],
    )
    def test_padding_forms(self, raw, expected: Spacing) -> None:
        assert element_from_dict({'category': 'Container', 'padding': raw}).padding == expected

    def test_bad_padding(self) -> None:
        with pytest.raises(SaccadicError):
            element_from_dict({'category': 'Container', 'padding': [1, 2, 3]})


class TestElementsFromJson:
    def test_wrapped_list(self) -> None:
        elements = elements_from_json({'elements': [{'category': 'Text'}, {'category': 'Row'}]})
        assert [e.category for e in elements] == ['Text', 'Row']

    def test_not_a_list(self) -> None:
        with pytest.raises(SaccadicError):
            elements_from_json({'nodes': []})

    def test_load_file(self, tmp_path: Path) -> None:
        f = tmp_path / 'elements.json'
        f.write_text(json.dumps([{'category': 'Text', 'key': 'a'}]))
        assert load_elements(f)[0].key == 'a'

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        f = tmp_path / 'elements.json'
        f.write_text('[oops')
        with pytest.raises(SaccadicError):
            load_elements(f)


class TestBitmaps:
    def test_load_rgb_png_as_rgba(self, tmp_path: Path) -> None:
        f = tmp_path / 'shot.png'
        Image.new('RGB', (7, 5), (10, 20, 30)).save(f)
        bitmap = load_bitmap(f)
        assert bitmap.shape == (5, 7, 4)
        assert bitmap.dtype == np.uint8
        assert tuple(bitmap[0, 0]) == (10, 20, 30, 255)

    def test_save_and_reload(self, tmp_path: Path) -> None:
        bitmap = np.zeros((3, 4, 4), dtype=np.uint8)
        bitmap[1, 2] = (255, 0, 255, 255)
        f = tmp_path / 'overlay.png'
        save_bitmap(bitmap, f)
        assert np.array_equal(load_bitmap(f), bitmap)

    def test_save_rejects_rgb(self, tmp_path: Path) -> None:
        with pytest.raises(BitmapError):
            save_bitmap(np.zeros((3, 3, 3), dtype=np.uint8), tmp_path / 'x.png')
