from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cql_lsp.config import ServerSettings, default_log_file, load_settings, parse_db_url
from cql_lsp.errors import ConfigurationError
from cql_lsp.observability import configure_logging


def test_defaults():
    settings = load_settings(environ={"XDG_DATA_HOME": "/data"})

    assert settings.db_url == "127.0.0.1:9042"
    assert settings.db_user == "cassandra"
    assert settings.db_password == "cassandra"
    assert settings.connect_timeout == 3.0
    assert settings.log_level == "INFO"
    assert settings.log_file == Path("/data/cql-lsp/output.log")
    assert settings.indent_size == 4


def test_environment_overrides_defaults():
    settings = load_settings(
        environ={
            "CQL_LSP_DB_URL": "db.local:9142",
            "CQL_LSP_DB_USER": "reader",
            "CQL_LSP_DB_PASSWD": "secret",
            "CQL_LSP_DB_TIMEOUT": "1.5",
            "CQL_LSP_LOG_LEVEL": "debug",
            "CQL_LSP_INDENT_SIZE": "2",
        }
    )

    assert settings.contact_point == ("db.local", 9142)
    assert settings.db_user == "reader"
    assert settings.db_password == "secret"
    assert settings.connect_timeout == 1.5
    assert settings.log_level == "DEBUG"
    assert settings.indent_size == 2


def test_toml_section_below_environment(tmp_path):
    config = tmp_path / "cql-lsp.toml"
    config.write_text('[cql-lsp]\ndb_url = "toml.local"\nindent_size = 2\nunknown = 1\n', encoding="utf-8")

    from_file = load_settings(environ={}, config_path=config)
    assert from_file.db_url == "toml.local"
    assert from_file.contact_point == ("toml.local", 9042)
    assert from_file.indent_size == 2

    with_env = load_settings(environ={"CQL_LSP_DB_URL": "env.local"}, config_path=config)
    assert with_env.db_url == "env.local"


def test_missing_or_invalid_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(environ={}, config_path=tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("[cql-lsp\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        load_settings(environ={}, config_path=broken)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("127.0.0.1:9042", ("127.0.0.1", 9042)),
        ("db.local", ("db.local", 9042)),
        ("[::1]:9043", ("::1", 9043)),
    ],
)
def test_parse_db_url(url, expected):
    assert parse_db_url(url) == expected


@pytest.mark.parametrize("url", ["", "db.local:port"])
def test_parse_db_url_rejects(url):
    with pytest.raises(ConfigurationError) as info:
        parse_db_url(url)
    assert info.value.hint


def test_invalid_numbers():
    with pytest.raises(ConfigurationError):
        load_settings(environ={"CQL_LSP_DB_TIMEOUT": "soon"})
    with pytest.raises(ConfigurationError):
        load_settings(environ={"CQL_LSP_DB_TIMEOUT": "0"})
    with pytest.raises(ConfigurationError):
        load_settings(environ={"CQL_LSP_INDENT_SIZE": "-1"})


def test_with_overrides_ignores_none():
    settings = ServerSettings()

    assert settings.with_overrides(db_url=None) is settings
    updated = settings.with_overrides(log_level="warning", log_file="~/cql.log")
    assert updated.log_level == "WARNING"
    assert updated.log_file == Path("~/cql.log").expanduser()


def test_default_log_file_without_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_log_file({}) == tmp_path / ".local" / "share" / "cql-lsp" / "output.log"


@pytest.fixture()
def restore_package_logger():
    logger = logging.getLogger("cql_lsp")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


def test_configure_logging_writes_file(tmp_path, restore_package_logger):
    log_file = tmp_path / "logs" / "output.log"
    settings = ServerSettings(log_level="DEBUG", log_file=log_file)

    logger = configure_logging(settings)
    logging.getLogger("cql_lsp.lsp.workspace").debug("hello %s", "world")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert not logger.propagate
    assert "hello world" in log_file.read_text(encoding="utf-8")


def test_configure_logging_replaces_handlers(tmp_path, restore_package_logger):
    settings = ServerSettings(log_file=tmp_path / "output.log")

    configure_logging(settings)
    logger = configure_logging(settings)

    marked = [handler for handler in logger.handlers if getattr(handler, "_cql_lsp_handler", False)]
    assert len(marked) == 2
