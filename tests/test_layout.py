"""Tests for saccadic.design — document parsing, layout engine and tree helpers."""

import json
from pathlib import Path

import pytest
from saccadic.core.errors import DocumentError
from saccadic.core.types import LayoutAxis, NodeType
from saccadic.design.document import FillSize, FitSize, FixedSize, UnknownSize, load_document, parse_document, parse_size
from saccadic.design.layout import layout_document
from saccadic.design.tree import describe_tree, flatten_node_ids, flatten_nodes, list_frames


def _layout(doc: dict, **kwargs):
    return layout_document(parse_document(doc), **kwargs)


def _by_id(state, node_id: str):
    return next(n for n in flatten_nodes(state.nodes) if n.id == node_id)


class TestParseSize:
    def test_grammar(self) -> None:
        assert parse_size(320) == FixedSize(320.0)
        assert parse_size('fill_container') == FillSize()
        assert parse_size('fill_container(480)') == FillSize(480.0)
        assert parse_size('fit_content') == FitSize()
        assert parse_size('fit_content(600)') == FitSize(600.0)
        assert parse_size(None) is None

    def test_unknown_token(self) -> None:
        assert isinstance(parse_size('auto'), UnknownSize)


class TestParseDocument:
    def test_not_an_object(self) -> None:
        with pytest.raises(DocumentError):
            parse_document([1, 2, 3])

    def test_children_not_a_list(self) -> None:
        with pytest.raises(DocumentError):
            parse_document({'children': {'id': 'x'}})

    def test_node_children_not_a_list(self) -> None:
        with pytest.raises(DocumentError):
            parse_document({'children': [{'id': 'x', 'children': 'nope'}]})

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        f = tmp_path / 'broken.pen'
        f.write_text('{not json')
        with pytest.raises(DocumentError):
            load_document(f)

    def test_load_roundtrip(self, tmp_path: Path) -> None:
        f = tmp_path / 'page.pen'
        f.write_text(json.dumps({'version': '2.1', 'children': [{'type': 'frame', 'id': 'root', 'width': 10}]}))
        doc = load_document(f)
        assert doc.version == '2.1'
        assert doc.children[0].width == FixedSize(10.0)


class TestSizing:
    def test_fill_takes_parent_width(self) -> None:
        state = _layout(
            {
                'children': [
                    {
                        'type': 'frame',
                        'id': 'root',
                        'width': 375,
                        'height': 812,
                        'layout': 'vertical',
                        'children': [{'type': 'frame', 'id': 'bar', 'width': 'fill_container', 'height': 56}],
                    }
                ]
            }
        )
        assert _by_id(state, 'bar').bounds.width == 375

    def test_fill_shares_remaining_main_axis(self) -> None:
        state = _layout(
            {
                'children': [
                    {
                        'type': 'frame',
                        'id': 'row',
                        'width': 400,
                        'height': 50,
                        'layout': 'horizontal',
                        'gap': 10,
                        'children': [
                            {'type': 'frame', 'id': 'icon', 'width': 100, 'height': 50},
                            {'type': 'frame', 'id': 'body', 'width': 'fill_container', 'height': 50},
                        ],
                    }
                ]
            }
        )
        body = _by_id(state, 'body')
        assert body.bounds.width == 290
        assert body.bounds.x == 110

    def test_fill_cap(self) -> None:
        state = _layout(
            {
                'children': [
                    {
                        'type': 'frame',
                        'id': 'root',
                        'width': 1000,
                        'height': 100,
                        'layout': 'vertical',
                        'children': [{'type': 'frame', 'id': 'card', 'width': 'fill_container(480)', 'height': 40}],
                    }
                ]
            }
        )
        assert _by_id(state, 'card').bounds.width == 480

    def test_fit_content_after_children(self) -> None:
        state = _layout(
            {
                'children': [
                    {
                        'type': 'frame',
                        'id': 'stack',
                        'width': 200,
                        'height': 'fit_content',
                        'layout': 'vertical',
                        'padding': 16,
                        'gap': 8,
                        'children': [
                            {'type': 'frame', 'id': 'a', 'width': 100, 'height': 40},
                            {'type': 'frame', 'id': 'b', 'width': 100, 'height': 40},
                        ],
                    }
                ]
            }
        )
        assert _by_id(state, 'stack').bounds.height == 120
        b = _by_id(state, 'b')
        assert (b.bounds.x, b.bounds.y) == (16, 64)

    def test_fit_content_cap(self) -> None:
        state = _layout(
            {
                'children': [
                    {
                        'type': 'frame',
                        'id': 'row',
                        'width': 'fit_content(100)',
                        'height': 20,
                        'layout': 'horizontal',
                        'children': [
                            {'type': 'frame', 'id': 'a', 'width': 80, 'height': 20},
                            {'type': 'frame', 'id': 'b', 'width': 60, 'height': 20},
                        ],
                    }
                ]
            }
        )
        assert _by_id(state, 'row').bounds.width == 100

    def test_unknown_sizing_resolves_to_zero(self) -> None:
        state = _layout({'children': [{'type': 'frame', 'id': 'x', 'width': 'auto', 'height': 10}]})
        assert _by_id(state, 'x').bounds.width == 0

    def test_text_height_from_font_size(self) -> None:
        state = _layout({'children': [{'type': 'text', 'id': 't', 'content': 'Hi', 'fontSize': 20, 'width': 50}]})
        t = _by_id(state, 't')
        assert t.bounds.height == pytest.approx(24.0)
        assert t.type == NodeType.TEXT
        assert t.typography.font_size == 20

    def test_free_layout_uses_child_offsets(self) -> None:
        state = _layout(
            {
                'children': [
                    {
                        'type': 'frame',
                        'id': 'canvas',
                        'x': 100,
                        'y': 50,
                        'width': 300,
                        'height': 300,
                        'layout': 'none',
                        'children': [{'type': 'rectangle', 'id': 'r', 'x': 20, 'y': 30, 'width': 10, 'height': 10}],
                    }
                ]
            }
        )
        r = _by_id(state, 'r')
        assert (r.bounds.x, r.bounds.y) == (120, 80)
        assert _by_id(state, 'canvas').layout == LayoutAxis.NONE


class TestComponents:
    DOC = {
        'children': [
            {
                'type': 'frame',
                'id': 'btn',
                'name': 'Button',
                'reusable': True,
                'width': 120,
                'height': 40,
                'fill': '#FF0000',
                'children': [{'type': 'text', 'id': 'label', 'content': 'OK', 'fontSize': 14}],
            },
            {
                'type': 'ref',
                'id': 'cta',
                'ref': 'btn',
                'y': 100,
                'fill': '#00FF00',
                'descendants': {'label': {'content': 'Go'}},
            },
        ]
    }

    def test_ref_expands_with_overrides(self) -> None:
        state = _layout(self.DOC)
        cta = state.nodes[1]
        assert cta.id == 'cta'
        assert cta.type == NodeType.INSTANCE
        assert cta.bounds.width == 120
        assert cta.bounds.y == 100
        assert cta.fills[0].color == '#00FF00'
        assert cta.children[0].text == 'Go'

    def test_prototype_untouched(self) -> None:
        state = _layout(self.DOC)
        btn = state.nodes[0]
        assert btn.fills[0].color == '#FF0000'
        assert btn.children[0].text == 'OK'

    def test_instances_get_scoped_ids(self) -> None:
        doc = {
            'children': [
                {
                    'type': 'frame',
                    'id': 'card',
                    'reusable': True,
                    'width': 100,
                    'height': 50,
                    'children': [{'type': 'text', 'id': 'title', 'content': 'Hi', 'fontSize': 10}],
                },
                {'type': 'ref', 'id': 'a', 'ref': 'card', 'y': 100},
                {'type': 'ref', 'id': 'b', 'ref': 'card', 'y': 200, 'descendants': {'title': {'content': 'Bye'}}},
            ]
        }
        state = _layout(doc)
        ids = [n.id for n in flatten_node_ids(state.nodes)]
        assert ids == ['card', 'title', 'a', 'a/title', 'b', 'b/title']
        assert _by_id(state, 'a/title').name == 'title'
        assert _by_id(state, 'a/title').text == 'Hi'
        assert _by_id(state, 'b/title').text == 'Bye'
        assert _by_id(state, 'b/title').bounds.y == 200

    def test_circular_ref_terminates(self) -> None:
        doc = {
            'children': [
                {
                    'type': 'frame',
                    'id': 'loop',
                    'reusable': True,
                    'width': 10,
                    'height': 10,
                    'children': [{'type': 'ref', 'id': 'inner', 'ref': 'loop'}],
                },
                {'type': 'ref', 'id': 'use', 'ref': 'loop'},
            ]
        }
        state = _layout(doc)
        use = state.nodes[1]
        assert use.children[0].id == 'use/inner'
        assert use.children[0].children == ()

    def test_dangling_ref_left_alone(self) -> None:
        state = _layout({'children': [{'type': 'ref', 'id': 'ghost', 'ref': 'missing', 'width': 5, 'height': 5}]})
        assert state.nodes[0].id == 'ghost'


class TestVariables:
    DOC = {
        'variables': {
            '--primary': {
                'type': 'color',
                'value': [
                    {'value': '#111111', 'theme': {'mode': 'light'}},
                    {'value': '#EEEEEE', 'theme': {'mode': 'dark'}},
                ],
            },
            '--radius-md': {'type': 'number', 'value': 8},
            '--font-body': {'type': 'string', 'value': 'Roboto'},
        },
        'children': [
            {
                'type': 'frame',
                'id': 'card',
                'width': 100,
                'height': 100,
                'fill': '$--primary',
                'cornerRadius': '$--radius-md',
                'children': [{'type': 'text', 'id': 'body', 'content': 'x', 'fontFamily': '$--font-body'}],
            }
        ],
    }

    def test_first_theme_by_default(self) -> None:
        state = _layout(self.DOC)
        assert _by_id(state, 'card').fills[0].color == '#111111'

    def test_theme_selection(self) -> None:
        state = _layout(self.DOC, theme='dark')
        assert _by_id(state, 'card').fills[0].color == '#EEEEEE'

    def test_numeric_and_font_substitution(self) -> None:
        state = _layout(self.DOC)
        assert _by_id(state, 'card').corner_radius == 8.0
        assert _by_id(state, 'body').typography.font_family == 'Roboto'

    def test_unresolved_token_left_literal(self) -> None:
        state = _layout({'children': [{'type': 'frame', 'id': 'x', 'width': 1, 'height': 1, 'fill': '$--nope'}]})
        assert state.nodes[0].fills[0].color == '$--nope'

    def test_tokens_extracted(self) -> None:
        tokens = _layout(self.DOC, theme='dark').tokens
        assert tokens.colors == {'--primary': '#EEEEEE'}
        assert tokens.radii == {'--radius-md': '8'}
        assert tokens.fonts == {'--font-body': 'Roboto'}

    def test_tokens_sorted_into_groups(self) -> None:
        doc = {
            'variables': {
                '--gap': {'type': 'number', 'value': 12.0},
                '--rounded-lg': {'type': 'number', 'value': 16},
                '--brand': {'type': 'string', 'value': 'Acme'},
            },
            'children': [],
        }
        tokens = _layout(doc).tokens
        assert tokens.spacing == {'--gap': '12'}
        assert tokens.radii == {'--rounded-lg': '16'}
        assert tokens.colors == {}
        assert tokens.fonts == {}
        assert _layout({'children': []}).tokens is None


class TestFramesAndViewport:
    DOC = {
        'children': [
            {'type': 'frame', 'id': 'home', 'name': 'Home', 'width': 375, 'height': 812},
            {'type': 'frame', 'id': 'settings', 'name': 'Settings', 'x': 400, 'width': 375, 'height': 700},
        ]
    }

    def test_viewport_encloses_nodes(self) -> None:
        state = _layout(self.DOC)
        assert (state.viewport.width, state.viewport.height) == (775, 812)

    def test_empty_document_uses_default_viewport(self) -> None:
        state = _layout({'children': []})
        assert (state.viewport.width, state.viewport.height) == (1280, 800)

    def test_frame_selection(self) -> None:
        state = _layout(self.DOC, frame='Settings')
        assert [n.id for n in state.nodes] == ['settings']

    def test_unknown_frame_falls_back_to_first(self) -> None:
        state = _layout(self.DOC, frame='Nowhere')
        assert [n.id for n in state.nodes] == ['home']

    def test_list_frames(self) -> None:
        frames = list_frames(parse_document(self.DOC))
        assert [(f.id, f.name, f.width, f.height) for f in frames] == [
            ('home', 'Home', 375, 812),
            ('settings', 'Settings', 375, 700),
        ]


class TestTreeHelpers:
    DOC = {
        'children': [
            {
                'type': 'frame',
                'id': 'page',
                'name': 'Page',
                'width': 375,
                'height': 812,
                'fill': '#FFFFFF',
                'layout': 'vertical',
                'children': [
                    {'type': 'text', 'id': 'title', 'name': 'Title', 'content': 'Hello', 'fontSize': 16, 'width': 100},
                    {'type': 'rectangle', 'id': 'divider', 'name': 'Divider', 'width': 375, 'height': 1},
                ],
            }
        ]
    }

    def test_flatten_ids_pre_order(self) -> None:
        ids = flatten_node_ids(_layout(self.DOC).nodes)
        assert [n.id for n in ids] == ['page', 'title', 'divider']
        assert ids[1].text == 'Hello'

    def test_describe_tree(self) -> None:
        text = describe_tree(_layout(self.DOC).nodes)
        lines = text.splitlines()
        assert lines[0].startswith('FRAME "Page" #page (')
        assert 'bg: #FFFFFF' in lines[0]
        assert 'layout: vertical' in lines[0]
        assert lines[1].startswith('├── TEXT "Title" #title "Hello"')
        assert lines[2].startswith('└── RECTANGLE "Divider" #divider')

    def test_describe_truncates_long_text(self) -> None:
        doc = {'children': [{'type': 'text', 'id': 't', 'content': 'x' * 80, 'width': 10}]}
        line = describe_tree(_layout(doc).nodes)
        assert '"' + 'x' * 47 + '..."' in line
