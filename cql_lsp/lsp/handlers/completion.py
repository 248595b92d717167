"""Completion handlers."""

from __future__ import annotations

from lsprotocol.types import CompletionOptions, CompletionParams

TRIGGER_CHARACTERS = [".", '"', "'", " "]


def register(server) -> None:
    workspace = server.cql_workspace

    @server.feature("textDocument/completion", CompletionOptions(trigger_characters=TRIGGER_CHARACTERS))
    async def _completion(ls, params: CompletionParams):
        return await workspace.completion(params)
