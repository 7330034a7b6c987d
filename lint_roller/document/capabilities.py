"""Node capability resolution.

A node's capabilities are resolved once from its kind and present fields, and
consumers query them by capability type instead of probing node attributes.
"""

from dataclasses import dataclass
from typing import TypeVar, Union

from .models import Node

# Property name -> variable-bindable field
BINDABLE_NUMBER_FIELDS: dict[str, str] = {
    "itemSpacing": "itemSpacing",
    "counterAxisSpacing": "counterAxisSpacing",
    "paddingTop": "paddingTop",
    "paddingRight": "paddingRight",
    "paddingBottom": "paddingBottom",
    "paddingLeft": "paddingLeft",
    "cornerRadius": "topLeftRadius",
    "topLeftRadius": "topLeftRadius",
    "topRightRadius": "topRightRadius",
    "bottomLeftRadius": "bottomLeftRadius",
    "bottomRightRadius": "bottomRightRadius",
    "strokeWeight": "strokeWeight",
    "strokeTopWeight": "strokeTopWeight",
    "strokeRightWeight": "strokeRightWeight",
    "strokeBottomWeight": "strokeBottomWeight",
    "strokeLeftWeight": "strokeLeftWeight",
    "width": "width",
    "height": "height",
    "minWidth": "minWidth",
    "maxWidth": "maxWidth",
    "minHeight": "minHeight",
    "maxHeight": "maxHeight",
}

CORNER_FIELDS = ("topLeftRadius", "topRightRadius", "bottomLeftRadius", "bottomRightRadius")

TYPOGRAPHY_PROPERTIES = frozenset({"fontSize", "lineHeight", "letterSpacing", "paragraphSpacing"})
BINDABLE_TYPOGRAPHY_PROPERTIES = frozenset({"paragraphSpacing"})

# Every numeric field a binding can live on, typography included
NUMBER_BINDING_FIELDS = tuple(
    dict.fromkeys(
        [f for f in BINDABLE_NUMBER_FIELDS if f != "cornerRadius"]
        + sorted(TYPOGRAPHY_PROPERTIES)
    )
)

STYLE_PROPERTIES = ("fillStyle", "strokeStyle", "textStyle", "effectStyle")

ICON_NODE_TYPES = frozenset(
    {"VECTOR", "BOOLEAN_OPERATION", "STAR", "LINE", "ELLIPSE", "POLYGON"}
)


@dataclass(frozen=True)
class HasFills:
    count: int


@dataclass(frozen=True)
class HasStrokes:
    count: int


@dataclass(frozen=True)
class HasCornerRadius:
    uniform: bool


@dataclass(frozen=True)
class HasBindableNumber:
    field: str


@dataclass(frozen=True)
class IsText:
    pass


@dataclass(frozen=True)
class HasStyle:
    property: str


Capability = Union[HasFills, HasStrokes, HasCornerRadius, HasBindableNumber, IsText, HasStyle]

C = TypeVar("C", HasFills, HasStrokes, HasCornerRadius, HasBindableNumber, IsText, HasStyle)


@dataclass(frozen=True)
class NodeCapabilities:
    """The resolved capability set of one node."""

    node_type: str
    items: tuple[Capability, ...]

    def of(self, kind: type[C]) -> list[C]:
        return [item for item in self.items if isinstance(item, kind)]

    def has(self, kind: type[C]) -> bool:
        return any(isinstance(item, kind) for item in self.items)

    @property
    def is_text(self) -> bool:
        return self.has(IsText)

    def paint_count(self, kind: str) -> int | None:
        """Number of paints in "fills" or "strokes", None when the slot is absent."""
        target = HasFills if kind == "fills" else HasStrokes
        for item in self.items:
            if isinstance(item, target):
                return item.count
        return None

    def bindable_fields(self) -> frozenset[str]:
        return frozenset(item.field for item in self.of(HasBindableNumber))

    def supports_number(self, field: str) -> bool:
        return field in self.bindable_fields()

    def has_uniform_radius(self) -> bool:
        return any(item.uniform for item in self.of(HasCornerRadius))

    def style_slots(self) -> frozenset[str]:
        return frozenset(item.property for item in self.of(HasStyle))


def resolve_capabilities(node: Node) -> NodeCapabilities:
    """Resolve which bindings and styles a node supports."""
    items: list[Capability] = []

    if node.fills is not None:
        items.append(HasFills(len(node.fills)))
    if node.strokes is not None:
        items.append(HasStrokes(len(node.strokes)))

    is_text = node.type == "TEXT"
    if is_text:
        items.append(IsText())

    present = set(node.numbers) | set(node.bound_variables)
    if "cornerRadius" in present or any(f in present for f in CORNER_FIELDS):
        items.append(HasCornerRadius(uniform="cornerRadius" in node.numbers))
        # A uniform radius exposes all four corner fields
        if "cornerRadius" in node.numbers:
            present.update(CORNER_FIELDS)

    for field in BINDABLE_NUMBER_FIELDS.values():
        if field in present:
            items.append(HasBindableNumber(field))
    if is_text:
        for field in sorted(BINDABLE_TYPOGRAPHY_PROPERTIES):
            if field in present:
                items.append(HasBindableNumber(field))

    for style_property in STYLE_PROPERTIES:
        if style_property in node.styles:
            items.append(HasStyle(style_property))

    # De-duplicate while keeping first-seen order
    return NodeCapabilities(node_type=node.type, items=tuple(dict.fromkeys(items)))
