"""
Unit tests for the schema CLI.
"""

import json
import logging

import pytest

from ambient_db.ids import hash_api_key
from ambient_db.registry import get_registry
from ambient_db.tools.schema_cli import main


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestSchemaCLI:
    """Tests for the ambient-db command."""

    def test_collections_text(self, capsys):
        assert main(["collections"]) == 0
        out = capsys.readouterr().out
        assert "running_servers" in out
        assert "server_logs" in out and "child of servers" in out

    def test_collections_json(self, capsys):
        assert main(["collections", "--format", "json"]) == 0
        rows = json.loads(capsys.readouterr().out)
        by_name = {row["collection"]: row for row in rows}
        assert by_name["api_keys"]["type"] == "DbApiKey"
        assert by_name["sharded_servers"]["parent"] == "running_servers"

    def test_snapshot(self, capsys):
        assert main(["snapshot"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["fingerprint"] == get_registry().fingerprint
        assert len(data["schema"]["collections"]) == 10

    def test_snapshot_to_file(self, tmp_path, capsys):
        target = tmp_path / "schema.lock.json"
        assert main(["snapshot", "-o", str(target)]) == 0
        assert json.loads(target.read_text())["version"] == 1

    def test_hash_api_key(self, capsys):
        assert main(["hash-api-key", "secret"]) == 0
        assert capsys.readouterr().out.strip() == hash_api_key("secret")

    def test_running_server_id(self, capsys):
        args = [
            "running-server-id",
            "--region",
            "EU",
            "--fleet",
            "canary",
            "--deploy-url",
            "https://assets.ambient.run/somedeployment",
            "--context",
            "context",
        ]
        assert main(args) == 0
        assert capsys.readouterr().out.strip() == "EU-canary-somedeployment-context"

    def test_running_server_id_bad_fleet(self, capsys):
        args = ["running-server-id", "--region", "EU", "--fleet", "a-b", "--deploy-url", "u"]
        assert main(args) == 2
        assert "fleet" in capsys.readouterr().err

    def test_running_server_id_non_ascii_fleet(self, capsys):
        args = ["running-server-id", "--region", "EU", "--fleet", "flöte", "--deploy-url", "u"]
        assert main(args) == 2
        assert "fleet" in capsys.readouterr().err

    def test_migrate_content_yaml(self, tmp_path, capsys):
        doc = tmp_path / "package.yaml"
        doc.write_text("owner_id: u1\ncontent:\n  asset: true\n  models: true\n")

        assert main(["migrate-content", str(doc)]) == 0
        assert json.loads(capsys.readouterr().out) == ["Asset", "Models"]

    def test_migrate_content_json_all_false(self, tmp_path, capsys):
        doc = tmp_path / "package.json"
        doc.write_text(json.dumps({"content": {"playable": False}}))

        assert main(["migrate-content", str(doc)]) == 0
        assert json.loads(capsys.readouterr().out) == ["Other"]

    def test_migrate_content_bad_tag(self, tmp_path, capsys):
        doc = tmp_path / "package.json"
        doc.write_text(json.dumps({"content": ["Spaceship"]}))

        assert main(["migrate-content", str(doc)]) == 1
        assert "Invalid content tag" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["migrate-content", str(tmp_path / "missing.json")]) == 1
