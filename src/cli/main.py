"""Symstore CLI entry points.

This module maps argparse commands onto storage engine calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
from pathlib import Path
import sys
from typing import Any, Sequence

from cli.key_arguments import parse_key_options
from core.config import SymstoreConfig
from core.errors import DocumentNotFoundError, SymstoreError
from core.types import Document
from store.storage_engine import StorageEngine


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="symstore", description="Symlink-indexed document store")
    parser.add_argument("--data-root", help="Override SYMSTORE_DATA_ROOT for this command")
    parser.add_argument("--schemas", help="Override SYMSTORE_SCHEMA_CATALOG for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_put_command(subparsers)
    _add_get_command(subparsers)
    _add_delete_command(subparsers)
    subparsers.add_parser("prune", help="Remove key links whose data file is gone")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the symstore CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        engine = _build_engine(args.data_root, args.schemas)
        if args.command == "put":
            return _run_put_command(engine, args)
        if args.command == "get":
            return _run_get_command(engine, args)
        if args.command == "delete":
            return _run_delete_command(engine, args)
        if args.command == "prune":
            return _run_prune_command(engine)
    except argparse.ArgumentTypeError as error:
        parser.error(str(error))
    except DocumentNotFoundError as error:
        print(f"not_found={error}", file=sys.stderr)
        return 1
    except SymstoreError as error:
        print(f"error={error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_engine(data_root: str | None, schemas: str | None) -> StorageEngine:
    """Build an engine with optional config overrides.

    Args:
        data_root: Optional data root override.
        schemas: Optional schema catalog override.

    Returns:
        Configured storage engine.
    """
    config = SymstoreConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    if schemas:
        config = replace(config, schema_catalog=Path(schemas).expanduser().resolve())
    logging.basicConfig(level=config.log_level, format="%(message)s")
    return StorageEngine(config)


def _add_put_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("put", help="Insert or update a document from a JSON file")
    parser.add_argument("schema", help="Document schema URI")
    parser.add_argument("content", help="Path to a JSON object file")
    parser.add_argument(
        "--key",
        action="append",
        default=[],
        help="KEY_SCHEMA=VALUE; defaults to the catalog's declared key slots",
    )


def _add_get_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("get", help="Print a stored document")
    parser.add_argument("schema", help="Document schema URI")
    parser.add_argument("--key", action="append", required=True, help="KEY_SCHEMA=VALUE")


def _add_delete_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("delete", help="Delete a stored document")
    parser.add_argument("--key", action="append", required=True, help="KEY_SCHEMA=VALUE")


def _run_put_command(engine: StorageEngine, args: argparse.Namespace) -> int:
    """Handle put command.

    Args:
        engine: Storage engine.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    content_path = Path(args.content)
    try:
        content = json.loads(content_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        print(f"error=Failed to load {content_path}: {error}", file=sys.stderr)
        return 1
    if not isinstance(content, dict):
        print(f"error={content_path} must hold a JSON object", file=sys.stderr)
        return 1
    if args.key:
        keys = parse_key_options(args.key, engine.registry)
    else:
        keys = engine.registry.build_keys(args.schema, content)
    saved = engine.save(Document(schema_uri=args.schema, keys=keys, content=content))
    print(saved.file_handle)
    return 0


def _run_get_command(engine: StorageEngine, args: argparse.Namespace) -> int:
    keys = parse_key_options(args.key, engine.registry)
    document = engine.get(keys, args.schema)
    print(json.dumps(dict(document.content), indent=2, sort_keys=True))
    return 0


def _run_delete_command(engine: StorageEngine, args: argparse.Namespace) -> int:
    keys = parse_key_options(args.key, engine.registry)
    deleted = engine.delete(keys)
    print("deleted" if deleted else "absent")
    return 0


def _run_prune_command(engine: StorageEngine) -> int:
    for link_path in engine.prune_dangling_links():
        print(link_path)
    return 0
