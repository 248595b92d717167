"""
CQL language server.

Context-aware completion and whole-document formatting for the Cassandra
Query Language, served over the Language Server Protocol.

The code is organised into several modules:

* ``lang`` – the static CQL vocabulary and the line scanning primitives
  (quotes, comments, bracket blocks) everything else is built on.
* ``lsp`` – the position classifier, the active-scope resolver, the
  completion dispatcher, the document registry and the pygls server.
* ``formatting`` – the deterministic line-rewrite pipeline behind
  ``textDocument/formatting``.
* ``schema`` – read-only keyspace/table/column lookups against the
  database's ``system_schema``.
* ``cli`` – the ``cql-lsp`` command line.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
