"""List every design node id in pre-order.

These are the identifiers the matcher looks for on implementation
elements. Give each element a key equal to the node id (or name) for an
exact match.

Example:
    saccadic ids app.pen --json
"""

import json

from saccadic.commands._common import add_design_arguments, load_design
from saccadic.core.types import Command
from saccadic.design.tree import flatten_node_ids

command = Command(name='ids', help='List every design node id in pre-order')


@command.arguments
def arguments(parser) -> None:
    add_design_arguments(parser)
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


@command.run
def run(args) -> int:
    ids = flatten_node_ids(load_design(args).nodes)
    if args.json:
        print(json.dumps([{'id': n.id, 'name': n.name, 'type': n.type, 'text': n.text} for n in ids], indent=2))
        return 0
    for n in ids:
        line = f'{n.id:<24} {n.type:<10} {n.name}'
        if n.text:
            line += f'  "{n.text}"'
        print(line)
    return 0
