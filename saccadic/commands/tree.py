"""Print the laid-out design as an indented node tree.

Each line shows the node type, name and #id, then its size and the visual
properties the comparison looks at: background, font size and weight, text
colour, corner radius, layout axis and gap. Text content is quoted and
truncated at 50 characters.

Example:
    saccadic tree app.pen --frame Home --theme dark
"""

from saccadic.commands._common import add_design_arguments, load_design
from saccadic.core.types import Command
from saccadic.design.tree import describe_tree

command = Command(name='tree', help='Print the laid-out design as an indented node tree')


@command.arguments
def arguments(parser) -> None:
    add_design_arguments(parser)


@command.run
def run(args) -> int:
    state = load_design(args)
    print(f'{state.name} ({state.viewport.width}×{state.viewport.height})')
    print(describe_tree(state.nodes))
    return 0
