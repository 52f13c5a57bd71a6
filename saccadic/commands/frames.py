"""List the top-level frames (pages) of a design document.

Prints one line per frame: id, name and fixed size. Use a name or id from
this list with --frame on the other commands.

Example:
    saccadic frames app.pen
"""

import json

from saccadic.core.types import Command
from saccadic.design.document import load_document
from saccadic.design.tree import list_frames

command = Command(name='frames', help='List the top-level frames of a design document')


@command.arguments
def arguments(parser) -> None:
    parser.add_argument('design', help='Path to the .pen design document (JSON)')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


@command.run
def run(args) -> int:
    frames = list_frames(load_document(args.design))
    if args.json:
        print(json.dumps([{'id': f.id, 'name': f.name, 'width': f.width, 'height': f.height} for f in frames], indent=2))
        return 0
    if not frames:
        print('No top-level frames.')
        return 0
    for f in frames:
        print(f'{f.id:<20} {f.name}  {f.width}×{f.height}')
    return 0
