"""
Schema CLI tool for ambient-db.

Commands:
- collections: List collection bindings
- snapshot: Export the frozen registry with its fingerprint
- hash-api-key: Print the stored hash of a raw API key
- running-server-id: Print the document id of a running server
- migrate-content: Print the content tags of a stored package document

Usage:
    ambient-db collections --format json
    ambient-db snapshot > schema.lock.json
    ambient-db running-server-id --region EU --fleet canary --deploy-url URL
    ambient-db migrate-content package.yaml

Invariants:
    - Snapshot output is deterministic (sorted JSON)
    - Errors exit non-zero with a message on stderr
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Optional

import yaml

from ..config import Settings
from ..content import normalize_content
from ..errors import AmbientDbError
from ..ids import Region, derive_running_server_id, hash_api_key
from ..logging_setup import setup_logging
from ..registry import CollectionRegistry, get_registry

logger = logging.getLogger(__name__)


class SchemaCLI:
    """CLI tool for schema inspection.

    Example:
        >>> cli = SchemaCLI()
        >>> print(cli.snapshot(get_registry()))
    """

    def collections(self, registry: CollectionRegistry, fmt: str = "text") -> str:
        """Describe every collection binding."""
        rows = [
            {
                "collection": binding.collection.value,
                "type": binding.model.__name__,
                "parent": binding.parent.value if binding.parent else None,
            }
            for binding in registry.bindings()
        ]
        if fmt == "json":
            return json.dumps(rows, indent=2)

        lines = []
        for row in rows:
            line = f"{row['collection']:<18} {row['type']}"
            if row["parent"]:
                line += f" (child of {row['parent']})"
            lines.append(line)
        return "\n".join(lines)

    def snapshot(self, registry: CollectionRegistry) -> str:
        """Export registry to JSON."""
        output = {
            "version": 1,
            "fingerprint": registry.fingerprint or "unfrozen",
            "schema": registry.to_dict(),
        }
        return json.dumps(output, indent=2, sort_keys=True)

    def migrate_content(self, path: str) -> list[str]:
        """Content tags of a package document stored in a JSON or YAML file.

        The file may hold a whole package document or just its content value.
        """
        with open(path) as f:
            data = yaml.safe_load(f)

        if isinstance(data, dict) and "content" in data:
            data = data["content"]
        return [tag.value for tag in normalize_content(data)]


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(description="ambient-db schema tool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    collections_parser = subparsers.add_parser("collections", help="List collection bindings")
    collections_parser.add_argument(
        "--format", choices=["text", "json"], default="text", help="Output format"
    )

    snapshot_parser = subparsers.add_parser("snapshot", help="Export schema to JSON")
    snapshot_parser.add_argument("--output", "-o", help="Output file (default: stdout)")

    hash_parser = subparsers.add_parser("hash-api-key", help="Hash a raw API key")
    hash_parser.add_argument("api_key", help="Raw API key")

    running_parser = subparsers.add_parser(
        "running-server-id", help="Derive a running server document id"
    )
    running_parser.add_argument(
        "--region", required=True, choices=[r.value for r in Region], help="Region"
    )
    running_parser.add_argument("--fleet", help="Fleet label (ASCII alphanumeric)")
    running_parser.add_argument("--deploy-url", required=True, help="Deployment URL")
    running_parser.add_argument("--context", default="", help="Server context")

    migrate_parser = subparsers.add_parser(
        "migrate-content", help="Print normalized content tags of a package document"
    )
    migrate_parser.add_argument("file", help="JSON or YAML file")

    args = parser.parse_args(argv)
    setup_logging(Settings())
    cli = SchemaCLI()

    try:
        return _run(cli, args)
    except (AmbientDbError, ValueError, OSError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


def _run(cli: SchemaCLI, args: Any) -> int:
    if args.command == "collections":
        print(cli.collections(get_registry(), args.format))

    elif args.command == "snapshot":
        output = cli.snapshot(get_registry())
        if args.output:
            with open(args.output, "w") as f:
                f.write(output)
            print(f"Schema exported to {args.output}", file=sys.stderr)
        else:
            print(output)

    elif args.command == "hash-api-key":
        print(hash_api_key(args.api_key))

    elif args.command == "running-server-id":
        try:
            server_id = derive_running_server_id(
                args.region, args.fleet, args.deploy_url, args.context
            )
        except AssertionError as e:
            print(f"error: {e}", file=sys.stderr)
            return 2
        print(server_id)

    elif args.command == "migrate-content":
        print(json.dumps(cli.migrate_content(args.file)))

    return 0


if __name__ == "__main__":
    sys.exit(main())
