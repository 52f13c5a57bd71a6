"""Implementation category tables: type compatibility and framework scaffolding.

Element categories are widget class names as an inspector reports them
(Text, Container, ElevatedButton, ...). A design NodeType is compatible with
a family of categories; anything outside the family scores a partial or
zero weight in the type+visual matching pass.
"""

from saccadic.core.types import Element, NodeType

TEXT_CATEGORIES = frozenset({'Text', 'RichText', 'SelectableText', 'EditableText'})

CONTAINER_CATEGORIES = frozenset(
    {
        'Container',
        'DecoratedBox',
        'Card',
        'Material',
        'Scaffold',
        'Column',
        'Row',
        'Stack',
        'Flex',
        'Wrap',
        'Padding',
        'Center',
        'Align',
        'SizedBox',
        'ConstrainedBox',
        'AspectRatio',
    }
)

CONTROL_CATEGORIES = frozenset({'TextField', 'TextFormField', 'ElevatedButton', 'TextButton', 'IconButton'})

IMAGE_CATEGORIES = frozenset({'Image', 'Icon', 'SvgPicture', 'FadeInImage'})

VECTOR_CATEGORIES = frozenset({'Icon', 'SvgPicture'})

ELLIPSE_CATEGORIES = frozenset({'ClipOval'})

# App shells, providers, routing and inherited-theme plumbing. Never reported
# as `extra` and never offered as an identifier suggestion.
SCAFFOLDING_CATEGORIES = frozenset(
    {
        'MaterialApp',
        'CupertinoApp',
        'WidgetsApp',
        'MyApp',
        'RootWidget',
        'RootRestorationScope',
        'ProviderScope',
        'UncontrolledProviderScope',
        'MultiProvider',
        'ChangeNotifierProvider',
        'BlocProvider',
        'MultiBlocProvider',
        'InheritedWidget',
        'InheritedElement',
        'Navigator',
        'Router',
        'GoRouter',
        'MaterialPageRoute',
        'PageRoute',
        'MediaQuery',
        'Theme',
        'AnimatedTheme',
        'Directionality',
        'Localizations',
        'DefaultTextStyle',
        'DefaultTextHeightBehavior',
        'IconTheme',
        'ScrollConfiguration',
        'Overlay',
        'OverlayEntry',
        'FocusScope',
        'FocusTraversalGroup',
        'Actions',
        'Shortcuts',
        'Semantics',
        'MergeSemantics',
        'RepaintBoundary',
        'CustomPaint',
        'RenderObjectToWidgetAdapter',
        'LayoutBuilder',
        'Builder',
        'StatefulBuilder',
    }
)

_CONTAINER_TYPES = frozenset({NodeType.FRAME, NodeType.GROUP, NodeType.COMPONENT, NodeType.INSTANCE})
_CONTROL_TYPES = frozenset({NodeType.INPUT, NodeType.BUTTON})


def is_text(element: Element) -> bool:
    return element.category in TEXT_CATEGORIES


def is_scaffolding(element: Element) -> bool:
    return element.category in SCAFFOLDING_CATEGORIES


def type_compatibility(node_type: NodeType, category: str) -> float:
    """1.0 for the same family, a partial weight for near families, else 0."""
    if node_type == NodeType.TEXT:
        return 1.0 if category in TEXT_CATEGORIES else 0.0
    if node_type in _CONTAINER_TYPES:
        return 1.0 if category in CONTAINER_CATEGORIES else 0.3
    if node_type in _CONTROL_TYPES:
        return 1.0 if category in CONTROL_CATEGORIES else 0.0
    if node_type == NodeType.IMAGE:
        return 1.0 if category in IMAGE_CATEGORIES else 0.0
    if node_type == NodeType.VECTOR:
        return 1.0 if category in VECTOR_CATEGORIES else 0.0
    if node_type == NodeType.RECTANGLE:
        return 0.5 if category in CONTAINER_CATEGORIES else 0.2
    if node_type == NodeType.ELLIPSE:
        return 1.0 if category in ELLIPSE_CATEGORIES else 0.2
    return 0.0


def child_kind(element: Element) -> str:
    """Coarse kind used by structural fingerprints: text, image or frame."""
    if is_text(element):
        return 'text'
    if element.category in ('Image', 'Icon'):
        return 'image'
    return 'frame'
