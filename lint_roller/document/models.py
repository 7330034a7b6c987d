"""Data models for the design document: variables, paints, styles and nodes.

These mirror the host application's object model closely enough for the
engine to read current values and write bindings, and serialize to the
camelCase JSON used by document snapshots.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class ResolvedType(Enum):
    """Type of a variable's terminal value."""

    COLOR = "COLOR"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"


class ScanScope(Enum):
    """Which part of the document a scan covers."""

    SELECTION = "selection"
    CURRENT_PAGE = "current_page"
    FULL_DOCUMENT = "full_document"


@dataclass(frozen=True)
class RGBA:
    """Color with 0..1 channels."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def to_dict(self) -> dict[str, float]:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RGBA:
        return cls(
            r=float(data["r"]),
            g=float(data["g"]),
            b=float(data["b"]),
            a=float(data.get("a", 1.0)),
        )


@dataclass(frozen=True)
class VariableAlias:
    """A variable value that points at another variable."""

    id: str

    def to_dict(self) -> dict[str, str]:
        return {"type": "VARIABLE_ALIAS", "id": self.id}


VariableValue = Union[RGBA, float, str, bool, VariableAlias]


def value_to_dict(value: VariableValue) -> Any:
    if isinstance(value, (RGBA, VariableAlias)):
        return value.to_dict()
    return value


def value_from_dict(data: Any) -> VariableValue:
    """Parse a serialized variable value."""
    if isinstance(data, dict):
        if data.get("type") == "VARIABLE_ALIAS":
            return VariableAlias(id=str(data["id"]))
        return RGBA.from_dict(data)
    if isinstance(data, bool):
        return data
    if isinstance(data, (int, float)):
        return float(data)
    return str(data)


@dataclass
class Variable:
    """A document variable.

    Attributes:
        id: Document-unique id.
        name: Slash-separated display name, e.g. "system/background/surface".
        collection_id: Owning collection.
        resolved_type: Type of the terminal value.
        values_by_mode: Mode id -> literal value or alias.
        key: Library key, set for publishable or imported variables.
    """

    id: str
    name: str
    collection_id: str
    resolved_type: ResolvedType
    values_by_mode: dict[str, VariableValue] = field(default_factory=dict)
    key: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "collectionId": self.collection_id,
            "resolvedType": self.resolved_type.value,
            "valuesByMode": {
                mode: value_to_dict(value) for mode, value in self.values_by_mode.items()
            },
            "key": self.key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Variable:
        return cls(
            id=data["id"],
            name=data["name"],
            collection_id=data.get("collectionId", ""),
            resolved_type=ResolvedType(data.get("resolvedType", "COLOR")),
            values_by_mode={
                mode: value_from_dict(value)
                for mode, value in data.get("valuesByMode", {}).items()
            },
            key=data.get("key", ""),
        )


@dataclass
class VariableCollection:
    """A group of variables sharing modes."""

    id: str
    name: str
    default_mode_id: str
    modes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "defaultModeId": self.default_mode_id,
            "modes": list(self.modes),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VariableCollection:
        default_mode = data.get("defaultModeId", "")
        return cls(
            id=data["id"],
            name=data["name"],
            default_mode_id=default_mode,
            modes=data.get("modes", [default_mode] if default_mode else []),
        )


@dataclass(frozen=True)
class LibraryCollection:
    """A variable collection published by a team library."""

    key: str
    name: str
    library_name: str = ""


@dataclass(frozen=True)
class LibraryVariable:
    """A variable available for import from a team library."""

    key: str
    name: str
    resolved_type: ResolvedType
    collection_name: str


@dataclass
class Paint:
    """A fill or stroke entry.

    The paint's alpha lives in `opacity`; `color` alpha is ignored for
    rendering.
    """

    type: str = "SOLID"
    color: RGBA | None = None
    opacity: float = 1.0
    visible: bool = True
    blend_mode: str = "NORMAL"
    bound_variable_id: str | None = None

    @property
    def is_solid(self) -> bool:
        return self.type == "SOLID" and self.color is not None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type,
            "opacity": self.opacity,
            "visible": self.visible,
            "blendMode": self.blend_mode,
        }
        if self.color is not None:
            result["color"] = self.color.to_dict()
        if self.bound_variable_id:
            result["boundVariables"] = {
                "color": VariableAlias(self.bound_variable_id).to_dict()
            }
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Paint:
        bound = data.get("boundVariables", {}).get("color")
        return cls(
            type=data.get("type", "SOLID"),
            color=RGBA.from_dict(data["color"]) if "color" in data else None,
            opacity=float(data.get("opacity", 1.0)),
            visible=data.get("visible", True),
            blend_mode=data.get("blendMode", "NORMAL"),
            bound_variable_id=bound["id"] if bound else None,
        )


@dataclass
class Style:
    """A shared style (paint, text, effect or grid)."""

    id: str
    name: str
    type: str = "PAINT"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Style:
        return cls(id=data["id"], name=data["name"], type=data.get("type", "PAINT"))


@dataclass
class Node:
    """A scene node.

    Attributes:
        fills: Paint list, or None when the node kind has no fills.
        strokes: Paint list, or None when the node kind has no strokes.
        numbers: Literal numeric fields (paddingTop, cornerRadius, fontSize...).
        bound_variables: Numeric field -> bound variable id.
        styles: Style slot (fillStyle, strokeStyle, textStyle, effectStyle) -> style id.
    """

    id: str
    name: str
    type: str
    fills: list[Paint] | None = None
    strokes: list[Paint] | None = None
    numbers: dict[str, float] = field(default_factory=dict)
    bound_variables: dict[str, str] = field(default_factory=dict)
    styles: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    locked: bool = False

    def walk(self) -> Iterator[Node]:
        """Yield this node and all descendants, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "name": self.name, "type": self.type}
        if self.fills is not None:
            result["fills"] = [p.to_dict() for p in self.fills]
        if self.strokes is not None:
            result["strokes"] = [p.to_dict() for p in self.strokes]
        if self.numbers:
            result["numbers"] = dict(self.numbers)
        if self.bound_variables:
            result["boundVariables"] = {
                prop: VariableAlias(var_id).to_dict()
                for prop, var_id in self.bound_variables.items()
            }
        if self.styles:
            result["styles"] = dict(self.styles)
        if self.locked:
            result["locked"] = True
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        fills = data.get("fills")
        strokes = data.get("strokes")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=data.get("type", "FRAME"),
            fills=[Paint.from_dict(p) for p in fills] if fills is not None else None,
            strokes=(
                [Paint.from_dict(p) for p in strokes] if strokes is not None else None
            ),
            numbers={k: float(v) for k, v in data.get("numbers", {}).items()},
            bound_variables={
                prop: alias["id"]
                for prop, alias in data.get("boundVariables", {}).items()
            },
            styles=dict(data.get("styles", {})),
            children=[cls.from_dict(child) for child in data.get("children", [])],
            locked=data.get("locked", False),
        )
