"""Reading literal values and variable bindings off nodes."""

import re
from dataclasses import dataclass

from ..color import rgb_to_hex
from ..matching.models import CurrentValue
from .capabilities import NUMBER_BINDING_FIELDS
from .models import RGBA, Node, Paint

_PAINT_PROPERTY = re.compile(r"^(fills|strokes)\[(\d+)\]$")


@dataclass(frozen=True)
class PaintRef:
    """A parsed "fills[i]" / "strokes[i]" property."""

    kind: str
    index: int

    @property
    def property(self) -> str:
        return f"{self.kind}[{self.index}]"


@dataclass(frozen=True)
class BindingRef:
    """One variable binding found on a node."""

    node_id: str
    node_type: str
    property: str
    variable_id: str


def parse_paint_property(prop: str) -> PaintRef | None:
    """Parse a paint property, None for anything else.

    Example:
        >>> parse_paint_property("strokes[1]")
        PaintRef(kind='strokes', index=1)
    """
    match = _PAINT_PROPERTY.match(prop)
    if not match:
        return None
    return PaintRef(kind=match.group(1), index=int(match.group(2)))


def get_paints(node: Node, kind: str) -> list[Paint] | None:
    return node.fills if kind == "fills" else node.strokes


def get_paint(node: Node, ref: PaintRef) -> Paint | None:
    paints = get_paints(node, ref.kind)
    if paints is None or ref.index >= len(paints):
        return None
    return paints[ref.index]


def paint_hex(paint: Paint) -> str | None:
    """Rendered hex of a solid paint, the paint opacity as alpha."""
    if not paint.is_solid or paint.color is None:
        return None
    color = paint.color
    return rgb_to_hex(RGBA(color.r, color.g, color.b, paint.opacity))


def read_color_hex(node: Node, prop: str) -> str | None:
    ref = parse_paint_property(prop)
    if ref is None:
        return None
    paint = get_paint(node, ref)
    return paint_hex(paint) if paint else None


def read_number(node: Node, prop: str) -> float | None:
    value = node.numbers.get(prop)
    return float(value) if value is not None else None


def read_current_value(node: Node, prop: str) -> CurrentValue:
    """The literal value of a paint or numeric property, unknown when unreadable."""
    if parse_paint_property(prop) is not None:
        hex_color = read_color_hex(node, prop)
        return CurrentValue.color(hex_color) if hex_color else CurrentValue()
    number = read_number(node, prop)
    return CurrentValue.of_number(number) if number is not None else CurrentValue()


def extract_bindings(node: Node) -> list[BindingRef]:
    """Every paint and numeric variable binding on a node, paints first."""
    bindings: list[BindingRef] = []

    for kind in ("fills", "strokes"):
        for index, paint in enumerate(get_paints(node, kind) or []):
            if paint.bound_variable_id:
                bindings.append(
                    BindingRef(
                        node_id=node.id,
                        node_type=node.type,
                        property=f"{kind}[{index}]",
                        variable_id=paint.bound_variable_id,
                    )
                )

    for field in NUMBER_BINDING_FIELDS:
        variable_id = node.bound_variables.get(field)
        if variable_id:
            bindings.append(BindingRef(node.id, node.type, field, variable_id))

    return bindings
