"""
Unit Tests for CLI Commands

Drives ``main(argv)`` end to end against in-memory stores and mock
embeddings (``--memory --mock-embeddings``). The PostgreSQL-only command
is tested with a mocked PostgresDatabase.

PATTERNS:
---------
1. Test CLI argument parsing
2. Verify exit codes
3. Verify JSON output
4. Test error handling
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from semantic_search.cli import commands

OFFLINE = ["--memory", "--mock-embeddings"]


def run(capsys, *argv):
    code = commands.main([*OFFLINE, *argv])
    return code, json.loads(capsys.readouterr().out)


# ---------------------------------------------------------------------------
# LOAD_ENV TESTS
# ---------------------------------------------------------------------------


class TestLoadEnv:
    """Test environment loading."""

    def test_load_env_does_not_raise(self):
        """Should not raise when there is no .env file."""
        commands._load_env()


# ---------------------------------------------------------------------------
# ARGUMENT PARSING TESTS
# ---------------------------------------------------------------------------


class TestParser:
    """Test build_parser."""

    def test_search_defaults(self):
        args = commands.build_parser().parse_args(["search", "vectors"])
        assert args.query == "vectors"
        assert args.threshold is None
        assert args.max_results is None

    def test_update_metadata_parsed_as_json(self):
        args = commands.build_parser().parse_args(["update", "3", "--metadata", '{"a": 1}'])
        assert args.id == 3
        assert args.metadata == {"a": 1}
        assert args.title is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            commands.build_parser().parse_args([])

    def test_invalid_metadata_exits(self):
        with pytest.raises(SystemExit):
            commands.build_parser().parse_args(["add", "T", "C", "--metadata", "{not json"])

    def test_operation_mapping(self):
        args = commands.build_parser().parse_args(
            ["search", "q", "--threshold", "0.3", "--max-results", "5"]
        )
        assert commands._operation_call(args) == (
            "semanticSearch",
            {"query": "q", "similarityThreshold": 0.3, "maxResults": 5},
        )

    def test_operation_mapping_omits_unset_options(self):
        search = commands.build_parser().parse_args(["search", "q"])
        listing = commands.build_parser().parse_args(["list"])

        assert commands._operation_call(search) == ("semanticSearch", {"query": "q"})
        assert commands._operation_call(listing) == ("getDocuments", {"page": 1})


# ---------------------------------------------------------------------------
# COMMAND TESTS
# ---------------------------------------------------------------------------


class TestCommands:
    """Test commands against in-memory stores."""

    def test_add(self, capsys):
        code, output = run(capsys, "add", "Title", "Content", "--metadata", '{"k": "v"}')

        assert code == 0
        assert output["success"] is True
        assert output["data"]["title"] == "Title"
        assert output["data"]["metadata"] == {"k": "v"}

    def test_add_validation_error(self, capsys):
        code, output = run(capsys, "add", "", "Content")

        assert code == 1
        assert output["success"] is False
        assert output["error"] == "validation_error"

    def test_get_missing(self, capsys):
        code, output = run(capsys, "get", "99")

        assert code == 1
        assert output["error"] == "not_found"

    def test_list_empty(self, capsys):
        code, output = run(capsys, "list")

        assert code == 0
        assert output["data"]["total"] == 0

    def test_search_empty_store(self, capsys):
        code, output = run(capsys, "search", "anything")

        assert code == 0
        assert output["data"] == {"results": []}

    def test_info(self, capsys):
        code, output = run(capsys, "info")
        assert output["data"]["version"] == "in-memory"

    def test_seed(self, capsys):
        code, output = run(capsys, "seed")

        assert code == 0
        assert len(output["data"]["created"]) == 7

    def test_reindex(self, capsys):
        code, output = run(capsys, "reindex")

        assert code == 0
        assert output["data"] == {"reindexed": 0}

    def test_init_db(self, capsys):
        db = MagicMock()
        db.initialize_schema = AsyncMock()
        db.connect = AsyncMock()
        db.close = AsyncMock()
        db.version_info = AsyncMock(return_value={"version": "PostgreSQL 16", "vector_index": True})

        with patch.object(commands, "PostgresDatabase", return_value=db):
            code = commands.main(["init-db"])
        output = json.loads(capsys.readouterr().out)

        assert code == 0
        assert output["data"]["vector_index"] is True
        db.initialize_schema.assert_awaited_once_with(1536)
        db.close.assert_awaited_once()


# ---------------------------------------------------------------------------
# ERROR HANDLING TESTS
# ---------------------------------------------------------------------------


class TestErrorHandling:
    """Test exit codes for failures."""

    def test_missing_api_key_is_reported(self, capsys):
        with patch.object(commands, "_load_env"):
            with patch.dict("os.environ", {}, clear=True):
                code = commands.main(["--memory", "search", "query"])
        output = json.loads(capsys.readouterr().out)

        assert code == 1
        assert output["error"] == "external_service_error"

    def test_keyboard_interrupt(self, capsys):
        with patch.object(commands, "_run_operation", side_effect=KeyboardInterrupt):
            code = commands.main([*OFFLINE, "list"])

        assert code == 130
