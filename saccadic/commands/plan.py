"""Print a per-page build plan for a design document.

For every top-level frame (or just the one named with --frame) the plan
lists the frame size, the node tree and every node id the matcher will
look for. Key each implementation element with the node id (or name) so
compare can match it exactly. Design tokens of the document follow the
pages, resolved for the selected theme.

Example:
    saccadic plan app.pen
    saccadic plan app.pen --frame Home --theme dark --json
"""

import json

from saccadic.core.env import default_theme
from saccadic.core.errors import SaccadicError
from saccadic.core.types import Command, DesignTokens
from saccadic.design.document import load_document
from saccadic.design.layout import LayoutEngine
from saccadic.design.tree import describe_tree, flatten_node_ids, list_frames

command = Command(name='plan', help='Print a per-page build plan with node ids and design tokens')


@command.arguments
def arguments(parser) -> None:
    parser.add_argument('design', help='Path to the .pen design document (JSON)')
    parser.add_argument('-f', '--frame', help='Plan only this top-level frame, by name or id (default: all)')
    parser.add_argument('-t', '--theme', help='Theme mode for themed variables (default: $SACCADIC_THEME)')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


def _tokens_dict(tokens: DesignTokens | None) -> dict[str, dict[str, str]] | None:
    if tokens is None:
        return None
    return {'colors': tokens.colors, 'spacing': tokens.spacing, 'radii': tokens.radii, 'fonts': tokens.fonts}


def build_plan(document, frame: str | None = None, theme: str | None = None) -> dict:
    """Lay out each frame and collect what an implementer needs to key elements."""
    frames = list_frames(document)
    if frame is not None:
        frames = [f for f in frames if frame in (f.name, f.id)]
        if not frames:
            available = ', '.join(f.name for f in list_frames(document)) or '(none)'
            raise SaccadicError(f'Frame {frame!r} not found. Available: {available}')

    engine = LayoutEngine()
    pages = []
    tokens = None
    for info in frames:
        state = engine.layout(document, frame=info.id, theme=theme)
        tokens = state.tokens
        pages.append(
            {
                'name': info.name,
                'frameId': info.id,
                'width': info.width,
                'height': info.height,
                'nodes': [
                    {'id': n.id, 'name': n.name, 'type': n.type, 'text': n.text} for n in flatten_node_ids(state.nodes)
                ],
                'tree': describe_tree(state.nodes),
            }
        )
    if not frames:
        tokens = engine.layout(document, theme=theme).tokens
    return {'pages': pages, 'tokens': _tokens_dict(tokens)}


def _print_tokens(tokens: dict[str, dict[str, str]]) -> None:
    print('Design tokens')
    for group, values in tokens.items():
        if not values:
            continue
        print(f'  {group}:')
        for name, value in values.items():
            print(f'    {name}: {value}')


@command.run
def run(args) -> int:
    theme = args.theme if args.theme is not None else default_theme()
    plan = build_plan(load_document(args.design), frame=args.frame, theme=theme)
    if args.json:
        print(json.dumps(plan, indent=2))
        return 0

    pages = plan['pages']
    print(f'Build plan ({len(pages)} page{"" if len(pages) == 1 else "s"})')
    print('Key each element with its node id (or name) so compare matches it exactly.')
    for i, page in enumerate(pages, 1):
        print(f'\n--- Page {i}: {page["name"]} ---')
        print(f'Frame: {page["frameId"]} ({page["width"]}×{page["height"]})')
        print(page['tree'])
        print(f'\nNodes ({len(page["nodes"])}):')
        for n in page['nodes']:
            line = f'  {n["id"]:<24} {n["type"]:<10} {n["name"]}'
            if n['text']:
                line += f'  "{n["text"]}"'
            print(line)
    if plan['tokens'] is not None:
        print()
        _print_tokens(plan['tokens'])
    return 0
