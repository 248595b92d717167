"""Handler registration helpers."""

from __future__ import annotations

from . import completion, documents, formatting


def register_all(server) -> None:
    documents.register(server)
    completion.register(server)
    formatting.register(server)


__all__ = ["register_all"]
