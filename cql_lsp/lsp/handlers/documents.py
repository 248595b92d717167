"""Text document lifecycle handlers."""

from __future__ import annotations

from lsprotocol.types import (
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
)

from ..workspace import CqlWorkspace


def register(server) -> None:
    workspace: CqlWorkspace = server.cql_workspace

    @server.feature("textDocument/didOpen")
    async def _did_open(ls, params: DidOpenTextDocumentParams) -> None:
        await workspace.did_open(params.text_document)

    @server.feature("textDocument/didChange")
    async def _did_change(ls, params: DidChangeTextDocumentParams) -> None:
        if not params.content_changes:
            return
        await workspace.did_change(params.text_document.uri, params.content_changes)

    @server.feature("textDocument/didClose")
    async def _did_close(ls, params: DidCloseTextDocumentParams) -> None:
        await workspace.did_close(params.text_document.uri)
