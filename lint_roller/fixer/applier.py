"""Committing matches to the document.

Every public coroutine returns a FixResult; failures are reported, never
raised. Bindings keep the rendered value: paints keep their opacity,
visibility and blend mode, and numeric fields keep their literal value when
unbound.
"""

from __future__ import annotations

from dataclasses import replace

from ..color import rgb_to_hex
from ..document.capabilities import (
    BINDABLE_NUMBER_FIELDS,
    BINDABLE_TYPOGRAPHY_PROPERTIES,
    CORNER_FIELDS,
    STYLE_PROPERTIES,
    TYPOGRAPHY_PROPERTIES,
    resolve_capabilities,
)
from ..document.models import RGBA, Node, Paint, ResolvedType, Variable
from ..document.store import DocumentStore
from ..document.values import get_paint, get_paints, parse_paint_property, read_current_value
from ..errors import StoreWriteError
from ..lint_logging import LogCategory, get_category_logger
from ..matching.engine import MatchingEngine
from ..matching.models import MatchContext
from ..tokens.models import TokenCatalog
from .models import ActionType, FixFailure, FixResult, LintRuleId

logger = get_category_logger(LogCategory.FIXER)

STYLE_LABELS = {
    "fillStyle": "Fill style",
    "strokeStyle": "Stroke style",
    "textStyle": "Text style",
    "effectStyle": "Effect style",
}


def describe_paint(paint: Paint) -> str:
    """Before/after descriptor of a paint: var(id), #rrggbb or gradient/image."""
    if paint.bound_variable_id:
        return f"var({paint.bound_variable_id})"
    if paint.is_solid and paint.color is not None:
        return rgb_to_hex(RGBA(paint.color.r, paint.color.g, paint.color.b))
    return "gradient/image"


def describe_number(node: Node, prop: str) -> str:
    bound = node.bound_variables.get(prop) or node.bound_variables.get(
        BINDABLE_NUMBER_FIELDS.get(prop, prop)
    )
    if bound:
        return f"var({bound})"
    value = node.numbers.get(prop)
    return f"{value:g}" if value is not None else "unknown"


def supports_style(node: Node, style_property: str) -> bool:
    """Whether the node kind has the given style slot."""
    if style_property in node.styles:
        return True
    if style_property == "fillStyle":
        return node.fills is not None
    if style_property == "strokeStyle":
        return node.strokes is not None
    if style_property == "textStyle":
        return node.type == "TEXT"
    return False


class FixApplier:
    """Apply, remove and replace variable bindings and styles on nodes."""

    def __init__(self, store: DocumentStore, engine: MatchingEngine):
        self.store = store
        self.engine = engine

    async def apply_fix(
        self,
        node_id: str,
        property: str,
        token_path: str,
        rule_id: str | LintRuleId,
        tokens: TokenCatalog | None = None,
    ) -> FixResult:
        """Bind the variable for `token_path` to a node property.

        Args:
            node_id: Target node.
            property: "fills[i]", "strokes[i]", a numeric field or a style slot.
            token_path: Suggested token for the literal value.
            rule_id: Lint rule that flagged the property.
            tokens: Token catalog, for alias chains during library import.

        Returns:
            FixResult describing the change or why none was made.
        """
        logger.debug(f"apply_fix: {node_id} {property} -> {token_path} ({rule_id})")
        try:
            rule = LintRuleId(rule_id)
        except ValueError:
            return FixResult.failed(
                FixFailure.UNSUPPORTED_RULE, f"Auto-fix not supported for: {rule_id}"
            )

        try:
            node = await self.store.get_node(node_id)
            if node is None:
                return FixResult.failed(FixFailure.NODE_NOT_FOUND, f"Node not found: {node_id}")

            if rule is LintRuleId.NO_UNKNOWN_STYLES:
                if property in ("fillStyle", "strokeStyle"):
                    return await self.detach_and_rebind(node, property, token_path, tokens)
                return await self.detach_style(node_id, property)

            if (
                rule is LintRuleId.NO_HARDCODED_TYPOGRAPHY
                and property not in BINDABLE_TYPOGRAPHY_PROPERTIES
            ):
                return self._requires_text_style(property)

            current_value = read_current_value(node, property)
            match = await self.engine.find_match(
                token_path,
                rule.expected_type,
                current_value,
                MatchContext(property=property, node_type=node.type),
                tokens,
            )
            if match is None:
                detail = f" (value: {current_value.display()})" if current_value.is_known else ""
                return FixResult.failed(
                    FixFailure.NO_MATCH,
                    f"No variable found for token: {token_path}{detail}. "
                    "Ensure variables are synced from the token source or available "
                    "in a team library.",
                )

            logger.info(f'Binding "{match.variable.name}" -> {property} on "{node.name}"')
            return await self._apply_variable(node, property, rule, match.variable)
        except Exception as e:
            logger.error(f"Fix error on {node_id}: {e}")
            return FixResult.failed(FixFailure.ERROR, f"Fix error: {e}")

    async def _apply_variable(
        self, node: Node, property: str, rule: LintRuleId, variable: Variable
    ) -> FixResult:
        if rule is LintRuleId.NO_HARDCODED_COLORS:
            return await self.apply_color_binding(node, property, variable)
        if rule.binds_number:
            return await self.apply_number_binding(node, property, variable)
        if rule is LintRuleId.NO_HARDCODED_TYPOGRAPHY:
            return await self.apply_typography_binding(node, property, variable)

        # Orphaned and prefer-semantic fixes follow the variable's own type
        if variable.resolved_type is ResolvedType.COLOR:
            return await self.apply_color_binding(node, property, variable)
        if variable.resolved_type is ResolvedType.FLOAT:
            if property in TYPOGRAPHY_PROPERTIES:
                return await self.apply_typography_binding(node, property, variable)
            return await self.apply_number_binding(node, property, variable)
        return FixResult.failed(
            FixFailure.UNSUPPORTED_PROPERTY,
            f"Cannot rebind variable type: {variable.resolved_type.value}",
        )

    async def apply_color_binding(
        self, node: Node, property: str, variable: Variable
    ) -> FixResult:
        """Bind a color variable to fills[i] or strokes[i]."""
        ref = parse_paint_property(property)
        if ref is None or get_paints(node, ref.kind) is None:
            return FixResult.failed(
                FixFailure.UNSUPPORTED_PROPERTY, f"Unknown color property: {property}"
            )

        label = "Fill" if ref.kind == "fills" else "Stroke"
        paint = get_paint(node, ref)
        if paint is None:
            return FixResult.failed(
                FixFailure.UNSUPPORTED_PROPERTY, f"{label} not found at index {ref.index}"
            )

        before_value = describe_paint(paint)
        paints = [replace(p) for p in get_paints(node, ref.kind) or []]
        paints[ref.index] = replace(paint, bound_variable_id=variable.id)
        try:
            await self.store.set_paints(node.id, ref.kind, paints)
        except StoreWriteError as e:
            return FixResult.failed(FixFailure.WRITE_REJECTED, f"{label} bind failed: {e}")

        return FixResult(
            success=True,
            before_value=before_value,
            after_value=variable.name,
            action_type=ActionType.REBIND,
        )

    async def apply_number_binding(
        self, node: Node, property: str, variable: Variable
    ) -> FixResult:
        """Bind a number variable to a bindable numeric field.

        A uniform cornerRadius is bound on all four corner fields.
        """
        field = BINDABLE_NUMBER_FIELDS.get(property)
        if field is None:
            return FixResult.failed(
                FixFailure.NOT_BINDABLE, f"Property is not bindable: {property}"
            )

        capabilities = resolve_capabilities(node)
        if property == "cornerRadius" and capabilities.has_uniform_radius():
            fields = list(CORNER_FIELDS)
        else:
            fields = [field]

        unsupported = [f for f in fields if not capabilities.supports_number(f)]
        if unsupported:
            return FixResult.failed(
                FixFailure.NOT_BINDABLE,
                f"{node.type} node does not support binding {', '.join(unsupported)}",
            )

        before_value = describe_number(node, property)
        try:
            for target in fields:
                await self.store.set_bound_variable(node.id, target, variable.id)
        except StoreWriteError as e:
            return FixResult.failed(FixFailure.WRITE_REJECTED, f"Number bind failed: {e}")

        return FixResult(
            success=True,
            before_value=before_value,
            after_value=variable.name,
            action_type=ActionType.REBIND,
        )

    async def apply_typography_binding(
        self, node: Node, property: str, variable: Variable
    ) -> FixResult:
        """Bind paragraphSpacing; other typography needs a text style."""
        if node.type != "TEXT":
            return FixResult.failed(FixFailure.NOT_BINDABLE, "Node is not a text node")

        if property not in BINDABLE_TYPOGRAPHY_PROPERTIES:
            return self._requires_text_style(property)

        before_value = describe_number(node, property)
        try:
            await self.store.set_bound_variable(node.id, property, variable.id)
        except StoreWriteError as e:
            return FixResult.failed(FixFailure.WRITE_REJECTED, f"Typography bind failed: {e}")

        return FixResult(
            success=True,
            before_value=before_value,
            after_value=variable.name,
            action_type=ActionType.REBIND,
        )

    @staticmethod
    def _requires_text_style(property: str) -> FixResult:
        return FixResult.failed(
            FixFailure.REQUIRES_TEXT_STYLE,
            f'{property} cannot be bound to variables. Use "Apply Style" with an '
            "existing text style instead.",
        )

    async def unbind(self, node_id: str, property: str) -> FixResult:
        """Remove a variable binding, keeping the current literal value."""
        logger.debug(f"unbind: {node_id} {property}")
        try:
            node = await self.store.get_node(node_id)
            if node is None:
                return FixResult.failed(FixFailure.NODE_NOT_FOUND, f"Node not found: {node_id}")
            return await self._unbind(node, property)
        except StoreWriteError as e:
            return FixResult.failed(FixFailure.WRITE_REJECTED, f"Unbind error: {e}")
        except Exception as e:
            logger.error(f"Unbind error on {node_id}: {e}")
            return FixResult.failed(FixFailure.ERROR, f"Unbind error: {e}")

    async def _unbind(self, node: Node, property: str) -> FixResult:
        ref = parse_paint_property(property)
        if ref is not None:
            paint = get_paint(node, ref)
            if paint is not None and paint.is_solid:
                before_value = describe_paint(paint)
                literal = replace(paint, bound_variable_id=None)
                paints = [replace(p) for p in get_paints(node, ref.kind) or []]
                paints[ref.index] = literal
                await self.store.set_paints(node.id, ref.kind, paints)
                return FixResult(
                    success=True,
                    before_value=before_value,
                    after_value=describe_paint(literal),
                    action_type=ActionType.UNBIND,
                )
            return FixResult.failed(
                FixFailure.UNSUPPORTED_PROPERTY, f"Cannot unbind property: {property}"
            )

        capabilities = resolve_capabilities(node)
        if property in BINDABLE_TYPOGRAPHY_PROPERTIES and capabilities.is_text:
            fields = [property]
        elif property == "cornerRadius":
            fields = [f for f in CORNER_FIELDS if capabilities.supports_number(f)]
        elif property in BINDABLE_NUMBER_FIELDS:
            fields = [BINDABLE_NUMBER_FIELDS[property]]
        else:
            fields = []

        if not fields or not all(capabilities.supports_number(f) for f in fields):
            return FixResult.failed(
                FixFailure.UNSUPPORTED_PROPERTY, f"Cannot unbind property: {property}"
            )

        before_value = describe_number(node, property)
        after_value = describe_number(replace(node, bound_variables={}), property)
        for target in fields:
            await self.store.set_bound_variable(node.id, target, None)
        return FixResult(
            success=True,
            before_value=before_value,
            after_value=after_value,
            action_type=ActionType.UNBIND,
        )

    async def detach_style(self, node_id: str, style_property: str) -> FixResult:
        """Remove a style reference, keeping the node's appearance."""
        logger.debug(f"detach_style: {node_id} {style_property}")
        try:
            node = await self.store.get_node(node_id)
            if node is None:
                return FixResult.failed(FixFailure.NODE_NOT_FOUND, f"Node not found: {node_id}")
            if style_property not in STYLE_PROPERTIES:
                return FixResult.failed(
                    FixFailure.UNSUPPORTED_PROPERTY, f"Unknown style property: {style_property}"
                )
            if not supports_style(node, style_property):
                return FixResult.failed(
                    FixFailure.UNSUPPORTED_PROPERTY,
                    f"Node does not support style: {style_property}",
                )

            before_value = node.styles.get(style_property) or "none"
            await self.store.set_style(node.id, style_property, "")
            return FixResult(
                success=True,
                message=f"{STYLE_LABELS[style_property]} detached",
                before_value=before_value,
                after_value="detached",
                action_type=ActionType.DETACH,
            )
        except StoreWriteError as e:
            return FixResult.failed(FixFailure.WRITE_REJECTED, f"Detach style error: {e}")
        except Exception as e:
            logger.error(f"Detach style error on {node_id}: {e}")
            return FixResult.failed(FixFailure.ERROR, f"Detach style error: {e}")

    async def detach_and_rebind(
        self,
        node: Node,
        style_property: str,
        token_path: str,
        tokens: TokenCatalog | None = None,
    ) -> FixResult:
        """Detach a fill/stroke style, then bind the exposed paint to a variable.

        Once the detach succeeds the result is a success; a missing match or a
        failed rebind only qualifies the message.
        """
        paint_property = "fills[0]" if style_property == "fillStyle" else "strokes[0]"
        if style_property not in ("fillStyle", "strokeStyle") or not supports_style(
            node, style_property
        ):
            return FixResult.failed(
                FixFailure.UNSUPPORTED_PROPERTY, f"Node does not support style: {style_property}"
            )

        try:
            await self.store.set_style(node.id, style_property, "")
        except StoreWriteError as e:
            return FixResult.failed(FixFailure.WRITE_REJECTED, f"Detach style error: {e}")

        node = await self.store.get_node(node.id) or node
        current_value = read_current_value(node, paint_property)
        if current_value.hex is None:
            return FixResult(
                success=True,
                message="Style detached (no solid paint to rebind)",
                action_type=ActionType.DETACH,
            )

        match = await self.engine.find_match(
            token_path,
            ResolvedType.COLOR,
            current_value,
            MatchContext(property=paint_property, node_type=node.type),
            tokens,
        )
        if match is None:
            return FixResult(
                success=True,
                message="Style detached (no matching variable found for rebind)",
                action_type=ActionType.DETACH,
            )

        logger.info(
            f'Detach+rebind: binding "{match.variable.name}" -> {paint_property} on "{node.name}"'
        )
        bound = await self.apply_color_binding(node, paint_property, match.variable)
        if bound.success:
            return FixResult(
                success=True,
                before_value="style",
                after_value=match.variable.name,
                action_type=ActionType.REBIND,
            )

        logger.warning(f"Rebind after detach failed on {node.id}: {bound.message}")
        return FixResult(
            success=True,
            message=f"Style detached but rebind failed: {bound.message}",
            action_type=ActionType.DETACH,
        )

    async def apply_text_style(self, node_id: str, style_id: str) -> FixResult:
        """Apply an existing text style to a text node."""
        logger.debug(f"apply_text_style: {node_id} {style_id}")
        try:
            node = await self.store.get_node(node_id)
            if node is None or node.type != "TEXT":
                return FixResult.failed(
                    FixFailure.NODE_NOT_FOUND, f"Node not found or not a text node: {node_id}"
                )

            style = await self.store.get_style(style_id)
            if style is None or style.type != "TEXT":
                return FixResult.failed(
                    FixFailure.STYLE_NOT_FOUND, f"Text style not found: {style_id}"
                )

            before_value = node.styles.get("textStyle") or "no style"
            await self.store.set_style(node.id, "textStyle", style_id)
            return FixResult(
                success=True,
                before_value=before_value,
                after_value=style.name,
                action_type=ActionType.APPLY_STYLE,
            )
        except StoreWriteError as e:
            return FixResult.failed(FixFailure.WRITE_REJECTED, f"Apply text style error: {e}")
        except Exception as e:
            logger.error(f"Apply text style error on {node_id}: {e}")
            return FixResult.failed(FixFailure.ERROR, f"Apply text style error: {e}")
