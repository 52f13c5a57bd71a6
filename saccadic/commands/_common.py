"""Argument helpers shared by the design-reading commands."""

from saccadic.core.env import default_theme
from saccadic.core.types import DesignState
from saccadic.design.document import load_document
from saccadic.design.layout import layout_document


def add_design_arguments(parser) -> None:
    parser.add_argument('design', help='Path to the .pen design document (JSON)')
    parser.add_argument('-f', '--frame', help='Top-level frame to lay out, by name or id (default: first)')
    parser.add_argument('-t', '--theme', help='Theme mode for themed variables (default: $SACCADIC_THEME)')


def load_design(args) -> DesignState:
    """Parse and lay out the design named on the command line."""
    theme = args.theme if args.theme is not None else default_theme()
    return layout_document(load_document(args.design), frame=args.frame, theme=theme)
