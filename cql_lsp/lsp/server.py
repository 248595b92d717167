"""pygls based Language Server entrypoint."""

from __future__ import annotations

import logging
import os
from typing import Optional

from lsprotocol.types import InitializedParams, MessageType, TextDocumentSyncKind
from pygls.server import LanguageServer

from cql_lsp import __version__

from ..config import ServerSettings, load_settings
from ..formatting import DefaultFormattingRules
from ..observability import configure_logging
from ..schema.provider import CassandraSchemaProvider, NullSchemaProvider, SchemaProvider
from .handlers import register_all
from .workspace import CqlWorkspace

logger = logging.getLogger(__name__)


class CqlLanguageServer(LanguageServer):
    """Concrete LanguageServer holding the CQL workspace."""

    def __init__(self, settings: ServerSettings, schema: SchemaProvider) -> None:
        super().__init__(
            name="cql-lsp",
            version=__version__,
            text_document_sync_kind=TextDocumentSyncKind.Full,
        )
        self.settings = settings
        self.cql_workspace = CqlWorkspace(
            schema,
            formatting=DefaultFormattingRules.with_indent(settings.indent_size),
        )
        register_all(self)
        self._register_lifecycle_handlers()

    def _register_lifecycle_handlers(self) -> None:
        workspace = self.cql_workspace

        @self.feature("initialized")
        async def _on_initialized(ls: "CqlLanguageServer", params: InitializedParams) -> None:  # noqa: ARG001
            ls.show_message_log("cql-lsp initialized", MessageType.Info)
            if await workspace.schema.check_connection():
                logger.info("Connected to database at %s", ls.settings.db_url)
            else:
                logger.warning("Database at %s is unavailable; schema completions are disabled", ls.settings.db_url)


def create_server(
    settings: Optional[ServerSettings] = None,
    schema: Optional[SchemaProvider] = None,
    *,
    offline: bool = False,
) -> CqlLanguageServer:
    settings = settings or load_settings()
    if schema is None:
        schema = NullSchemaProvider() if offline else CassandraSchemaProvider(settings)
    return CqlLanguageServer(settings, schema)


def main(settings: Optional[ServerSettings] = None, *, offline: bool = False) -> None:
    settings = settings or load_settings()
    configure_logging(settings)
    server = create_server(settings, offline=offline)
    logger.info("Starting cql-lsp %s (pid=%s)", __version__, os.getpid())
    server.start_io()


if __name__ == "__main__":  # pragma: no cover
    main()
