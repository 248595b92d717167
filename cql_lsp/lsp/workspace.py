"""Workspace level state for the CQL language server."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from lsprotocol.types import (
    CompletionList,
    DocumentFormattingParams,
    TextDocumentContentChangeEvent,
    TextDocumentItem,
    TextDocumentPositionParams,
    TextEdit,
)

from ..formatting import CqlFormatter, FormattingOptions
from ..schema.provider import NullSchemaProvider, SchemaProvider
from .classifier import classify
from .completion import CompletionProvider
from .protocol import CompletionRequest
from .state import DocumentRegistry


class CqlWorkspace:
    """Open documents plus the completion and formatting engines behind them."""

    def __init__(
        self,
        schema: Optional[SchemaProvider] = None,
        *,
        formatting: Optional[FormattingOptions] = None,
    ) -> None:
        self.logger = logging.getLogger("cql_lsp.lsp.workspace")
        self.documents = DocumentRegistry()
        self.schema = schema or NullSchemaProvider()
        self.completions = CompletionProvider(self.schema)
        self.formatter = CqlFormatter(formatting)

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------
    async def did_open(self, item: TextDocumentItem) -> None:
        self.logger.info("Opened %s", item.uri)
        await self.documents.open(item.uri, item.text)

    async def did_change(self, uri: str, changes: Sequence[TextDocumentContentChangeEvent]) -> bool:
        """Apply the last full-text change; ranged changes are ignored."""
        text = _last_full_text(changes)
        if text is None:
            self.logger.debug("Ignoring change without full text for %s", uri)
            return False
        changed = await self.documents.change(uri, text)
        if not changed:
            self.logger.debug("Change for unknown document %s", uri)
        return changed

    async def did_close(self, uri: str) -> None:
        self.logger.info("Closed %s", uri)
        await self.documents.close(uri)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------
    async def completion(self, params: TextDocumentPositionParams) -> CompletionList:
        uri = params.text_document.uri
        position = params.position
        snapshot = await self.documents.snapshot(uri)
        if snapshot is None or not 0 <= position.line < len(snapshot[1]):
            return CompletionList(is_incomplete=False, items=[])
        _, lines = snapshot

        context = classify(lines, position.line, position.character)
        self.logger.debug("Completion at %s:%d:%d -> %s", uri, position.line, position.character, context.kind.name)

        active = await self.documents.active_snapshot()
        request = CompletionRequest(
            uri=uri,
            lines=lines,
            line_index=position.line,
            character=position.character,
            context=context,
            active_lines=active[1] if active is not None else lines,
        )
        items = await self.completions.complete(request)
        return CompletionList(is_incomplete=False, items=items)

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------
    async def format_document(self, params: DocumentFormattingParams) -> List[TextEdit]:
        uri = params.text_document.uri
        snapshot = await self.documents.snapshot(uri)
        if snapshot is None:
            self.logger.debug("Formatting requested for unknown document %s", uri)
            return []
        _, lines = snapshot
        return [edit.to_text_edit() for edit in self.formatter.compute_edits(lines)]


def _last_full_text(changes: Sequence[TextDocumentContentChangeEvent]) -> Optional[str]:
    for change in reversed(list(changes)):
        if getattr(change, "range", None) is None:
            return change.text
    return None


__all__ = ["CqlWorkspace"]
