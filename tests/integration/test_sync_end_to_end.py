"""End-to-end sync tests.

Runs the real client, scoring, reconciliation and pipeline against an
in-memory NocoDB served from tests/fixtures/nocodb_tables.yaml:

- Live sync updates matched employers and creates new ones
- Re-running a sync never duplicates employer rows
- Dry-run sends no mutating request
- v1-only servers are handled through the fallback
- One failing employer write only fails that employer
- CLI exit codes for a full run
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from ghostscore.config.models import AppConfig
from ghostscore.main import main
from ghostscore.nocodb.client import NocoDBClient
from ghostscore.pipeline import SyncPipeline
from tests.helpers.fake_nocodb import FakeNocoDBSession

FIXTURE_PATH = Path(__file__).parent.parent / "fixtures" / "nocodb_tables.yaml"
BASE_URL = "https://noco.example.com"


def make_app_config(dry_run=False):
    return AppConfig.model_validate(
        {
            "tables": {"source": "GL701", "target": "GL101"},
            "sync": {
                "dry_run": dry_run,
                "page_size": 2,
                "write_delay_ms": 0,
                "page_delay_ms": 0,
            },
        }
    )


def make_client(session, page_size=2):
    return NocoDBClient(
        base_url=BASE_URL,
        api_token="token",
        page_size=page_size,
        page_delay=0,
        session=session,
    )


def target_by_key(session):
    return {row.get("Company Key"): row for row in session.tables["GL101"]}


@pytest.fixture
def session():
    return FakeNocoDBSession.from_fixture(FIXTURE_PATH)


class TestLiveSync:
    """Live runs against the fake server."""

    def test_first_run(self, session):
        result = SyncPipeline(make_app_config(), make_client(session)).run_once()

        assert result.total_reports == 5
        assert result.total_target_rows == 2
        assert result.total_employers == 4
        assert result.updated_count == 2
        assert result.created_count == 2
        assert result.had_errors is False

        rows = target_by_key(session)
        assert set(rows) == {"acme", "globex-corporation", "cafe-muller", "initech"}
        assert len(session.tables["GL101"]) == 4

        acme = rows["acme"]
        assert acme["Id"] == 1
        assert acme["Company Name"] == "Acme Inc."
        assert acme["Reports Count"] == 2
        assert acme["Sum Increments"] == 280
        assert acme["Avg Report Increment"] == 140.0
        assert acme["GhostScore"] == 687
        assert acme["Ghosted After Offer %"] == 50.0
        assert acme["Ghosted After Assignment %"] == 50.0
        assert acme["Unpaid Assignment %"] == 50.0
        assert acme["Official Rejection %"] == 0.0
        assert acme["Top 3 Roles"] == "Backend Engineer"
        assert acme["Top 3 Recruiters"] == "jane****"
        assert acme["Top 3 Locations"] == "Berlin"
        assert acme["Common Impact"] == "Stress"
        assert acme["First Report Date"] == "2024-01-02T09:00:00.000Z"
        assert acme["Last Report Date"] == "2024-02-10T18:30:00.000Z"
        assert acme["Data Quality Flag"] == "ok"
        assert acme["Confidence Score"] == 0.458

        # Matched through its display name, accents and casing aside
        assert rows["cafe-muller"]["Id"] == 2
        assert rows["cafe-muller"]["GhostScore"] == 510

        assert rows["globex-corporation"]["GhostScore"] == 510
        assert rows["globex-corporation"]["Data Quality Flag"] == "low-evidence"
        assert rows["initech"]["GhostScore"] == 525

    def test_second_run_only_updates(self, session):
        SyncPipeline(make_app_config(), make_client(session)).run_once()
        first_ids = {key: row["Id"] for key, row in target_by_key(session).items()}

        result = SyncPipeline(make_app_config(), make_client(session)).run_once()

        assert result.created_count == 0
        assert result.updated_count == 4
        assert len(session.tables["GL101"]) == 4
        assert {key: row["Id"] for key, row in target_by_key(session).items()} == first_ids

    def test_listing_is_paginated(self, session):
        SyncPipeline(make_app_config(), make_client(session)).run_once()

        source_pages = [
            call[2] for call in session.calls
            if call[0] == "GET" and call[1] == "/api/v2/tables/GL701/rows"
        ]
        assert [p["offset"] for p in source_pages] == [0, 2, 4]

    def test_v1_only_server(self):
        session = FakeNocoDBSession.from_fixture(FIXTURE_PATH, versions=("v1",))

        result = SyncPipeline(make_app_config(), make_client(session)).run_once()

        assert result.total_reports == 5
        assert result.had_errors is False
        assert len(session.tables["GL101"]) == 4
        assert any(call[1].startswith("/api/v1/") and call[0] == "POST" for call in session.calls)

    def test_failed_employer_is_isolated(self, session):
        session.fail_writes_for = {"globex-corporation"}

        result = SyncPipeline(make_app_config(), make_client(session)).run_once()

        assert result.error_count == 1
        assert result.created_count == 1
        assert result.updated_count == 2
        assert "globex-corporation" not in target_by_key(session)
        assert "initech" in target_by_key(session)


class TestDryRunSync:
    """Dry runs against the fake server."""

    def test_no_mutating_requests(self, session):
        before = [dict(row) for row in session.tables["GL101"]]

        result = SyncPipeline(make_app_config(dry_run=True), make_client(session)).run_once()

        assert session.mutating_calls == []
        assert session.tables["GL101"] == before
        assert result.total_employers == 4
        assert {s.company_key: s.action for s in result.employer_stats} == {
            "acme": "updated",
            "globex-corporation": "created",
            "cafe-muller": "updated",
            "initech": "created",
        }


class TestCommandLine:
    """main() against the fake server."""

    @pytest.fixture
    def cli_env(self, monkeypatch, tmp_path, session):
        monkeypatch.setenv("NOCODB_URL", BASE_URL)
        monkeypatch.setenv("NOCODB_API_KEY", "token")
        for name in ("SOURCE_TABLE", "TARGET_TABLE", "PAGE_SIZE", "DRY_RUN", "RATE_LIMIT_MS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        (tmp_path / "config.yaml").write_text(
            "sync:\n  page_size: 2\n  write_delay_ms: 0\n  page_delay_ms: 0\n"
        )
        monkeypatch.chdir(tmp_path)

        def build_client(app_config, env_config):
            return make_client(session, page_size=app_config.sync.page_size)

        with patch.object(NocoDBClient, "from_config", side_effect=build_client), \
             patch("ghostscore.main.configure_logging"):
            yield session

    def test_default_is_dry_run(self, cli_env):
        assert main([]) == 0
        assert cli_env.mutating_calls == []
        assert cli_env.closed is True

    def test_live_run(self, cli_env):
        assert main(["--live"]) == 0
        assert len(cli_env.tables["GL101"]) == 4

    def test_live_run_with_failed_write_exits_one(self, cli_env):
        cli_env.fail_writes_for = {"initech"}
        assert main(["--live"]) == 1

    def test_unreadable_source_exits_one(self, cli_env):
        del cli_env.tables["GL701"]
        assert main(["--live"]) == 1
        assert cli_env.mutating_calls == []


class TestCommandLineDefaults:
    """main() with no config file and the real logging setup."""

    @pytest.fixture
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        urllib3_level = logging.getLogger("urllib3").level
        yield root
        root.handlers[:] = handlers
        root.setLevel(level)
        logging.getLogger("urllib3").setLevel(urllib3_level)

    @pytest.fixture
    def bare_env(self, monkeypatch, tmp_path, session, restore_root_logger):
        monkeypatch.setenv("NOCODB_URL", BASE_URL)
        monkeypatch.setenv("NOCODB_API_KEY", "token")
        for name in ("SOURCE_TABLE", "TARGET_TABLE", "PAGE_SIZE", "DRY_RUN", "RATE_LIMIT_MS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)

        def build_client(app_config, env_config):
            return make_client(session, page_size=app_config.sync.page_size)

        with patch.object(NocoDBClient, "from_config", side_effect=build_client):
            yield session

    def test_zero_config_dry_run_exits_zero(self, bare_env, restore_root_logger, capsys):
        assert main([]) == 0

        assert restore_root_logger.level == logging.INFO
        out = capsys.readouterr().out
        assert "Sync run completed" in out
        assert bare_env.mutating_calls == []

    def test_zero_config_live_run_exits_zero(self, bare_env, monkeypatch, capsys):
        monkeypatch.setenv("RATE_LIMIT_MS", "0")

        assert main(["--live"]) == 0

        assert "Sync run completed" in capsys.readouterr().out
        assert len(bare_env.tables["GL101"]) == 4
