"""Language Server Protocol implementation for CQL."""

from .server import CqlLanguageServer, create_server
from .workspace import CqlWorkspace

__all__ = [
    "CqlLanguageServer",
    "CqlWorkspace",
    "create_server",
]
