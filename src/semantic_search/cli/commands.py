"""
CLI commands - operator entry point for the semantic search service.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Open the service (or the database, for init-db)
4. Print the result as JSON
5. Return exit code

Document and search commands go through the OperationRegistry, so the
CLI validates and reports errors exactly like every other transport.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from semantic_search.config import Settings
from semantic_search.core.errors import SemanticSearchError
from semantic_search.search import open_search_service
from semantic_search.storage import PostgresDatabase
from semantic_search.tools import OperationResult, build_registry

logger = logging.getLogger(__name__)


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _parse_metadata(raw: str | None) -> dict | None:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"--metadata must be a JSON object: {e}") from e


def _report(result: OperationResult) -> int:
    _print_json(result.to_dict())
    return 0 if result.success else 1


# ---------------------------------------------------------------------------
# COMMANDS
# ---------------------------------------------------------------------------


async def _init_db(settings: Settings, args: argparse.Namespace) -> int:
    db = PostgresDatabase(settings.database)
    await db.initialize_schema(settings.embeddings.dimensions)
    await db.connect()
    try:
        info = await db.version_info()
    finally:
        await db.close()
    _print_json({"success": True, "data": {"dimensions": settings.embeddings.dimensions, **info}})
    return 0


async def _seed(settings: Settings, args: argparse.Namespace) -> int:
    from semantic_search.seeds import seed_documents

    async with open_search_service(settings) as service:
        documents = await seed_documents(service)
    _print_json({"success": True, "data": {"created": [d.id for d in documents]}})
    return 0


async def _reindex(settings: Settings, args: argparse.Namespace) -> int:
    async with open_search_service(settings) as service:
        count = await service.reindex_missing(batch_size=args.batch_size)
    _print_json({"success": True, "data": {"reindexed": count}})
    return 0


def _without_none(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset options so the configured defaults apply."""
    return {key: value for key, value in params.items() if value is not None}


def _operation_call(args: argparse.Namespace) -> tuple[str, dict[str, Any]]:
    """Map a parsed command line onto an operation name and its params."""
    if args.command == "add":
        params = {"title": args.title, "content": args.content}
        if args.metadata is not None:
            params["metadata"] = args.metadata
        return "createDocument", params
    if args.command == "get":
        return "getDocument", {"id": args.id}
    if args.command == "list":
        return "getDocuments", _without_none(
            {"page": args.page, "pageSize": args.page_size}
        )
    if args.command == "update":
        params = {"id": args.id}
        for name in ("title", "content", "metadata"):
            value = getattr(args, name)
            if value is not None:
                params[name] = value
        return "updateDocument", params
    if args.command == "delete":
        return "deleteDocument", {"id": args.id}
    if args.command == "search":
        return "semanticSearch", _without_none(
            {
                "query": args.query,
                "similarityThreshold": args.threshold,
                "maxResults": args.max_results,
            }
        )
    if args.command == "info":
        return "getDatabaseInfo", {}
    raise ValueError(f"Unknown command: {args.command}")


async def _run_operation(settings: Settings, args: argparse.Namespace) -> int:
    name, params = _operation_call(args)
    async with open_search_service(settings) as service:
        result = await build_registry(service).invoke(name, params)
    return _report(result)


COMMANDS = {
    "init-db": _init_db,
    "seed": _seed,
    "reindex": _reindex,
}


# ---------------------------------------------------------------------------
# ARGUMENT PARSING
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semantic-search",
        description="Semantic document search over PostgreSQL + pgvector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  semantic-search init-db                      # Create extension, tables and index
  semantic-search seed                         # Load the sample corpus
  semantic-search search "vector similarity" --threshold 0.5
  semantic-search update 3 --metadata '{"category": "ai"}'
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use in-memory stores instead of PostgreSQL",
    )
    parser.add_argument(
        "--mock-embeddings",
        action="store_true",
        help="Use deterministic mock embeddings instead of OpenAI",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the database schema")
    sub.add_parser("seed", help="Add the sample documents")
    sub.add_parser("info", help="Show database version and vector index support")

    reindex = sub.add_parser("reindex", help="Embed documents that have no embedding")
    reindex.add_argument("--batch-size", type=int, default=100)

    add = sub.add_parser("add", help="Add a document and embed it")
    add.add_argument("title")
    add.add_argument("content")
    add.add_argument("--metadata", type=_parse_metadata, help="JSON object")

    get = sub.add_parser("get", help="Show one document")
    get.add_argument("id", type=int)

    listing = sub.add_parser("list", help="List documents, newest first")
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--page-size", type=int)

    update = sub.add_parser("update", help="Update a document")
    update.add_argument("id", type=int)
    update.add_argument("--title")
    update.add_argument("--content")
    update.add_argument("--metadata", type=_parse_metadata, help="JSON object")

    delete = sub.add_parser("delete", help="Delete a document and its embeddings")
    delete.add_argument("id", type=int)

    search = sub.add_parser("search", help="Semantic search")
    search.add_argument("query")
    search.add_argument("--threshold", type=float)
    search.add_argument("--max-results", type=int)

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        semantic-search init-db
        semantic-search add TITLE CONTENT [--metadata JSON]
        semantic-search search QUERY [--threshold T] [--max-results N]
    """
    _load_env()

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_env()
    if args.memory:
        settings.use_postgres = False
    if args.mock_embeddings:
        settings.embeddings.use_mock = True

    handler = COMMANDS.get(args.command, _run_operation)
    try:
        return asyncio.run(handler(settings, args))
    except SemanticSearchError as e:
        logger.error(f"{args.command} failed: {e.message}")
        _print_json({"success": False, **e.to_dict()})
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
