"""Session facade over the matching, fixing and remapping engine.

A LintSession owns the caches and components for one document. Its public
coroutines never raise: failures come back as result values, and `dispatch`
turns UI message dicts into calls and response dicts.
"""

from collections.abc import Callable
from typing import Any, Protocol

from .bulk import BulkOrchestrator, BulkProgress, CancellationToken
from .config.models import EngineConfig
from .document.models import Node, ScanScope
from .document.store import DocumentStore
from .fixer.applier import FixApplier
from .fixer.models import (
    ActionType,
    BulkDetachSummary,
    BulkFixSummary,
    DetachRequest,
    FixActionDetail,
    FixFailure,
    FixRequest,
    FixResult,
    LintRuleId,
)
from .lint_logging import LogCategory, get_category_logger
from .matching.engine import MatchingEngine
from .remap.models import RemapApplyResult, RemapPair, RemapScanResult
from .remap.scanner import ProgressCallback, RemapScanner
from .tokens.models import TokenCatalog
from .utils.ttl import Clock
from .variables.index import VariableIndexCache
from .variables.library import LibraryVariableCache

logger = get_category_logger(LogCategory.SESSION)

Message = dict[str, Any]


class FixProgressCallback(Protocol):
    """Protocol for bulk fix progress callbacks."""

    def __call__(self, current: int, total: int, action: FixActionDetail) -> None:
        """Called after each fix with its audit record."""
        ...


class LintSession:
    """Everything needed to fix and remap bindings in one document."""

    def __init__(
        self,
        store: DocumentStore,
        tokens: TokenCatalog | None = None,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.tokens = tokens
        self.config = config or EngineConfig()
        self.index_cache = VariableIndexCache(
            store, clock=clock, ttl_seconds=self.config.index_ttl_seconds
        )
        self.library_cache = LibraryVariableCache(
            store, clock=clock, ttl_seconds=self.config.library_ttl_seconds
        )
        self.engine = MatchingEngine(store, self.index_cache, self.library_cache, self.config)
        self.applier = FixApplier(store, self.engine)
        self.scanner = RemapScanner(
            store, self.index_cache, self.engine, self.applier, self.config
        )
        self.orchestrator = BulkOrchestrator()

    async def apply_fix(
        self,
        node_id: str,
        property: str,
        token_path: str,
        rule_id: str | LintRuleId,
        tokens: TokenCatalog | None = None,
    ) -> FixResult:
        return await self.applier.apply_fix(
            node_id, property, token_path, rule_id, tokens or self.tokens
        )

    async def apply_bulk_fix(
        self,
        items: list[FixRequest],
        on_progress: FixProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BulkFixSummary:
        """Apply fixes one by one; every item gets an audit record."""
        logger.info(f"Bulk fix of {len(items)} items")

        async def handle(item: FixRequest) -> tuple[FixResult, FixActionDetail]:
            node_name = "Unknown"
            try:
                node = await self.store.get_node(item.node_id)
            except Exception as e:
                logger.debug(f"Name lookup for {item.node_id} failed: {e}")
                node = None
            if node is not None:
                node_name = node.name

            result = await self.apply_fix(
                item.node_id, item.property, item.token_path, item.rule_id
            )
            action = FixActionDetail(
                node_id=item.node_id,
                node_name=node_name,
                property=item.property,
                action_type=result.action_type or ActionType.REBIND,
                before_value=result.before_value or "unknown",
                after_value=result.after_value or item.token_path,
                status="success" if result.success else "failed",
                error_message=result.message,
            )
            return result, action

        def progress(update: BulkProgress) -> None:
            if on_progress is not None and update.outcome.result is not None:
                on_progress(update.current, update.total, update.outcome.result[1])

        run = await self.orchestrator.run(items, handle, progress, cancel_token)

        summary = BulkFixSummary(cancelled=run.cancelled)
        for outcome in run.outcomes:
            item = outcome.item
            if outcome.result is None:
                result = FixResult.failed(FixFailure.ERROR, outcome.error or "Fix error")
                action = FixActionDetail(
                    node_id=item.node_id,
                    node_name="Unknown",
                    property=item.property,
                    action_type=ActionType.REBIND,
                    before_value="unknown",
                    after_value=item.token_path,
                    status="failed",
                    error_message=result.message,
                )
            else:
                result, action = outcome.result

            summary.actions.append(action)
            if result.success:
                summary.successful += 1
            else:
                summary.failed += 1
                if result.message:
                    summary.errors.append(f"{item.node_id}: {result.message}")

        logger.info(f"Bulk fix complete: {summary.successful} fixed, {summary.failed} failed")
        return summary

    async def unbind_variable(self, node_id: str, property: str) -> FixResult:
        return await self.applier.unbind(node_id, property)

    async def detach_style(self, node_id: str, property: str) -> FixResult:
        return await self.applier.detach_style(node_id, property)

    async def bulk_detach_styles(
        self,
        items: list[DetachRequest],
        cancel_token: CancellationToken | None = None,
    ) -> BulkDetachSummary:
        run = await self.orchestrator.run(
            items,
            lambda item: self.applier.detach_style(item.node_id, item.property),
            cancel_token=cancel_token,
        )

        summary = BulkDetachSummary(cancelled=run.cancelled)
        for outcome in run.outcomes:
            result = outcome.result or FixResult.failed(
                FixFailure.ERROR, outcome.error or "Detach style error"
            )
            if result.success:
                summary.successful += 1
            else:
                summary.failed += 1
                if result.message:
                    summary.errors.append(f"{outcome.item.node_id}: {result.message}")
        return summary

    async def apply_text_style(self, node_id: str, style_id: str) -> FixResult:
        return await self.applier.apply_text_style(node_id, style_id)

    async def scan_for_broken_bindings(
        self,
        scope: ScanScope | str = ScanScope.FULL_DOCUMENT,
        on_progress: ProgressCallback | None = None,
    ) -> RemapScanResult:
        try:
            return await self.scanner.scan(ScanScope(scope), on_progress)
        except Exception as e:
            logger.error(f"Remap scan failed: {e}")
            return RemapScanResult(error=str(e))

    async def apply_remaps(
        self,
        pairs: list[RemapPair],
        on_progress: ProgressCallback | None = None,
    ) -> RemapApplyResult:
        try:
            return await self.scanner.apply(pairs, on_progress)
        except Exception as e:
            logger.error(f"Applying remaps failed: {e}")
            return RemapApplyResult(failed=len(pairs), errors=[str(e)])

    async def select_node(self, node_id: str) -> Node | None:
        try:
            return await self.store.select_node(node_id)
        except Exception as e:
            logger.warning(f"Could not select {node_id}: {e}")
            return None

    # Message dispatch

    async def dispatch(
        self, message: Message, emit: Callable[[Message], None] | None = None
    ) -> Message:
        """Handle one UI message and return the response message.

        Args:
            message: Request dict with a "type" key and camelCase fields.
            emit: Receives intermediate progress messages, if given.
        """
        message_type = message.get("type")
        logger.debug(f"Dispatching {message_type}")
        try:
            handler = self._handlers().get(message_type)
            if handler is None:
                return {"type": "ERROR", "message": f"Unknown message type: {message_type}"}
            return await handler(message, emit)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Malformed {message_type} message: {e}")
            return {"type": "ERROR", "message": f"Malformed {message_type} message: {e}"}

    def _handlers(self):
        return {
            "APPLY_FIX": self._on_apply_fix,
            "APPLY_BULK_FIX": self._on_apply_bulk_fix,
            "UNBIND_VARIABLE": self._on_unbind_variable,
            "DETACH_STYLE": self._on_detach_style,
            "BULK_DETACH_STYLES": self._on_bulk_detach_styles,
            "APPLY_TEXT_STYLE": self._on_apply_text_style,
            "SCAN_BROKEN_BINDINGS": self._on_scan_broken_bindings,
            "APPLY_REMAPS": self._on_apply_remaps,
            "SELECT_NODE": self._on_select_node,
        }

    @staticmethod
    def _fix_applied(message: Message, result: FixResult) -> Message:
        return {
            "type": "FIX_APPLIED",
            "nodeId": message["nodeId"],
            "property": message.get("property", ""),
            **result.to_dict(),
        }

    async def _on_apply_fix(self, message: Message, emit) -> Message:
        result = await self.apply_fix(
            message["nodeId"], message["property"], message["tokenPath"], message["ruleId"]
        )
        return self._fix_applied(message, result)

    async def _on_apply_bulk_fix(self, message: Message, emit) -> Message:
        def progress(current: int, total: int, action: FixActionDetail) -> None:
            if emit is not None:
                emit(
                    {
                        "type": "FIX_PROGRESS",
                        "current": current,
                        "total": total,
                        "currentAction": action.to_dict(),
                    }
                )

        items = [FixRequest.from_dict(fix) for fix in message["fixes"]]
        summary = await self.apply_bulk_fix(items, progress)
        return {"type": "BULK_FIX_COMPLETE", **summary.to_dict()}

    async def _on_unbind_variable(self, message: Message, emit) -> Message:
        result = await self.unbind_variable(message["nodeId"], message["property"])
        return self._fix_applied(message, result)

    async def _on_detach_style(self, message: Message, emit) -> Message:
        result = await self.detach_style(message["nodeId"], message["property"])
        return self._fix_applied(message, result)

    async def _on_bulk_detach_styles(self, message: Message, emit) -> Message:
        items = [DetachRequest.from_dict(detach) for detach in message["detaches"]]
        summary = await self.bulk_detach_styles(items)
        return {"type": "BULK_DETACH_COMPLETE", **summary.to_dict()}

    async def _on_apply_text_style(self, message: Message, emit) -> Message:
        result = await self.apply_text_style(message["nodeId"], message["textStyleId"])
        return self._fix_applied(message, result)

    async def _on_scan_broken_bindings(self, message: Message, emit) -> Message:
        def progress(processed: int, total: int) -> None:
            if emit is not None:
                emit({"type": "REMAP_SCAN_PROGRESS", "processed": processed, "total": total})

        scope = message.get("scope", ScanScope.FULL_DOCUMENT.value)
        if isinstance(scope, dict):
            scope = scope["type"]
        result = await self.scan_for_broken_bindings(ScanScope(scope), progress)
        return {"type": "REMAP_SCAN_COMPLETE", "result": result.to_dict()}

    async def _on_apply_remaps(self, message: Message, emit) -> Message:
        def progress(current: int, total: int) -> None:
            if emit is not None:
                emit({"type": "REMAP_PROGRESS", "current": current, "total": total})

        pairs = [RemapPair.from_dict(pair) for pair in message["remaps"]]
        result = await self.apply_remaps(pairs, progress)
        return {"type": "REMAP_COMPLETE", **result.to_dict()}

    async def _on_select_node(self, message: Message, emit) -> Message:
        node = await self.select_node(message["nodeId"])
        return {"type": "NODE_SELECTED", "nodeId": message["nodeId"], "success": node is not None}
