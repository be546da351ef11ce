"""
Unit tests for configuration and logging setup.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from ambient_db.adapters import (
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    create_document_store,
)
from ambient_db.config import Settings, StoreBackend
from ambient_db.logging_setup import setup_logging


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("BACKEND", "PROJECT_ID", "DATABASE", "EMULATOR_HOST", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"AMBIENT_DB_{name}", raising=False)
    return monkeypatch


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, clean_env):
        settings = Settings()
        assert settings.backend == StoreBackend.MEMORY
        assert settings.project_id is None
        assert settings.database == "(default)"
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"

    def test_from_env(self, clean_env):
        clean_env.setenv("AMBIENT_DB_BACKEND", "firestore")
        clean_env.setenv("AMBIENT_DB_PROJECT_ID", "ambient-dev")
        clean_env.setenv("AMBIENT_DB_EMULATOR_HOST", "localhost:8080")

        settings = Settings()

        assert settings.backend == StoreBackend.FIRESTORE
        assert settings.project_id == "ambient-dev"
        assert settings.emulator_host == "localhost:8080"

    def test_invalid_backend(self, clean_env):
        clean_env.setenv("AMBIENT_DB_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            Settings()


class TestCreateDocumentStore:
    """Tests for create_document_store."""

    def test_memory(self, clean_env):
        assert isinstance(create_document_store(Settings()), InMemoryDocumentStore)

    def test_firestore(self, clean_env):
        store = create_document_store(Settings(backend=StoreBackend.FIRESTORE))
        assert isinstance(store, FirestoreDocumentStore)
        assert not store.is_connected


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_level_and_single_handler(self, clean_env):
        setup_logging(Settings(log_level="debug"))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_json_lines_escape_quotes_and_newlines(self, clean_env, capsys):
        """Each record is one valid JSON object, whatever the message holds."""
        setup_logging(Settings(log_format="json"))

        logging.getLogger("ambient_db.test").warning('decode failed: "name" missing\nnext')

        lines = capsys.readouterr().err.strip().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["message"] == 'decode failed: "name" missing\nnext'

    def test_unknown_level_falls_back_to_info(self, clean_env):
        setup_logging(Settings(log_level="chatty"))
        assert logging.getLogger().level == logging.INFO
