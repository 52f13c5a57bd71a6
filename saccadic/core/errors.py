"""Exception hierarchy for saccadic.

Everything raised on purpose by the core derives from SaccadicError so callers
(the CLI, an orchestrating service) can catch one type. The value-shaped
errors also derive from ValueError.
"""


class SaccadicError(Exception):
    """Base class for all saccadic errors."""


class ColorParseError(SaccadicError, ValueError):
    """A colour string could not be parsed as hex / rgb() / rgba()."""


class BitmapError(SaccadicError, ValueError):
    """A bitmap is not a usable H x W x 4 uint8 array."""


class DimensionMismatchError(BitmapError):
    """The two bitmaps handed to the pixel comparator differ in size."""


class DocumentError(SaccadicError, ValueError):
    """A design document is structurally invalid (not a JSON object, bad children)."""
