"""
Unit tests for the command-line entry point.
"""

import json
import re

import pytest

from shortlink.app_shell.cli import main, parse_limit, parse_status
from shortlink.domain.entities import LinkStatus


@pytest.fixture
def cli(tmp_path):
    """Run the CLI against a private rules file, data dir and identity."""
    base = [
        "--rules",
        str(tmp_path / "rules.yaml"),
        "--data-dir",
        str(tmp_path / "data"),
        "--identity",
        str(tmp_path / ".local" / "user.uuid"),
        "--no-browser",
    ]

    def _run(*args: str) -> int:
        return main([*base, *args])

    return _run


def created_code(out: str) -> str:
    match = re.search(r"Short link: cli://(\w+)", out)
    assert match, out
    return match.group(1)


def test_parse_limit():
    assert parse_limit("unlimited") is None
    assert parse_limit("12") == 12


def test_parse_status():
    assert parse_status("all") is None
    assert parse_status("limit_reached") == LinkStatus.LIMIT_REACHED


def test_first_run_writes_rules_and_identity(cli, tmp_path, capsys):
    assert cli("whoami") == 0

    uuid = capsys.readouterr().out.strip()
    assert (tmp_path / "rules.yaml").exists()
    assert (tmp_path / ".local" / "user.uuid").read_text(encoding="utf-8").strip() == uuid
    assert json.loads((tmp_path / "data" / "users.json").read_text(encoding="utf-8"))[0][
        "uuid"
    ] == uuid


def test_create_open_edit_delete_flow(cli, capsys):
    assert cli("create", "https://example.com/docs", "--limit", "2") == 0
    code = created_code(capsys.readouterr().out)

    assert cli("open", f"cli://{code}") == 0
    assert "Copy and open manually: https://example.com/docs" in capsys.readouterr().out

    assert cli("show", code) == 0
    assert "Clicks:      1/2" in capsys.readouterr().out

    assert cli("edit-limit", code, "unlimited") == 0
    assert "Limit updated: unlimited" in capsys.readouterr().out

    assert cli("list", "--query", "docs") == 0
    assert code in capsys.readouterr().out

    assert cli("delete", code) == 1
    assert "--yes" in capsys.readouterr().err

    assert cli("delete", code, "--yes") == 0
    assert cli("open", code) == 1
    assert "Link not found" in capsys.readouterr().err


def test_create_refusal_exits_nonzero(cli, capsys):
    assert cli("create", "ftp://example.com") == 1
    assert "url_invalid" in capsys.readouterr().err

    assert cli("create", "https://example.com", "--limit", "0") == 1
    assert "limit_not_positive" in capsys.readouterr().err


def test_limit_reached_open_exits_nonzero(cli, capsys, tmp_path):
    (tmp_path / "rules.yaml").write_text("cleanup:\n  on_each_op: false\n", encoding="utf-8")
    cli("create", "https://example.com", "--limit", "1")
    code = created_code(capsys.readouterr().out)

    assert cli("open", code) == 0
    assert cli("open", code) == 1
    assert "Click limit reached (1/1)" in capsys.readouterr().err


def test_edit_limit_below_clicks_reports_reason(cli, capsys):
    cli("create", "https://example.com")
    code = created_code(capsys.readouterr().out)
    cli("open", code)
    cli("open", code)
    capsys.readouterr()

    assert cli("edit-limit", code, "1") == 1
    assert "New limit must be >= current clicks (2)." in capsys.readouterr().err


def test_users_new_and_switch(cli, capsys):
    cli("whoami")
    first = capsys.readouterr().out.strip()

    assert cli("users", "new") == 0
    capsys.readouterr()
    cli("whoami")
    second = capsys.readouterr().out.strip()
    assert second != first

    assert cli("users", "switch", first) == 0
    capsys.readouterr()
    cli("whoami")
    assert capsys.readouterr().out.strip() == first

    cli("users", "list")
    listing = capsys.readouterr().out
    assert first in listing and second in listing


def test_other_user_cannot_delete(cli, capsys):
    cli("create", "https://example.com")
    code = created_code(capsys.readouterr().out)
    cli("users", "new")
    capsys.readouterr()

    assert cli("delete", code, "--yes") == 1
    assert "not_owner" in capsys.readouterr().err


def test_stats_export_validate_events(cli, capsys, tmp_path):
    cli("create", "https://example.com/a")
    code = created_code(capsys.readouterr().out)
    cli("open", code)
    capsys.readouterr()

    assert cli("stats") == 0
    out = capsys.readouterr().out
    assert "Total: 1" in out and "Total clicks: 1" in out

    assert cli("export") == 0
    out = capsys.readouterr().out
    exports = list((tmp_path / "data").glob("export_*.json"))
    assert len(exports) == 1
    assert str(exports[0]) in out

    assert cli("validate") == 0
    assert "issues: 0" in capsys.readouterr().out

    assert cli("events", "--limit", "2") == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert "EXPORT 1" in lines[0]


def test_cleanup_and_bulk_delete_commands(cli, capsys):
    assert cli("cleanup") == 0
    assert "Expired: 0, limit reached: 0" in capsys.readouterr().out

    assert cli("bulk-delete", "--expired") == 0
    assert "Deleted expired: 0" in capsys.readouterr().out


def test_settings_prints_rules(cli, capsys):
    assert cli("settings") == 0
    out = capsys.readouterr().out
    assert "base_url:" in out and "cli://" in out


def test_validate_reports_null_fields_in_store(cli, capsys, tmp_path):
    data = tmp_path / "data"
    data.mkdir()
    record = {
        "id": "L-000001",
        "ownerUuid": None,
        "longUrl": None,
        "shortCode": None,
        "createdAt": "2025-01-01T12:00:00",
        "expiresAt": "2999-01-01T12:00:00",
        "clickLimit": 10,
        "clickCount": 0,
        "status": "ACTIVE",
    }
    (data / "links.json").write_text(json.dumps([record]), encoding="utf-8")

    assert cli("validate") == 1

    out = capsys.readouterr().out
    assert "Missing shortCode for id=L-000001" in out
    assert "Orphan link: id=L-000001 shortCode=- ownerUuid missing/unknown" in out
    assert "Invalid URL for shortCode=-: None" in out


def test_corrupt_store_exits_nonzero(cli, tmp_path):
    data = tmp_path / "data"
    data.mkdir()
    (data / "links.json").write_text("{broken", encoding="utf-8")

    assert cli("list") == 1
    assert (data / "links.json").read_text(encoding="utf-8") == "{broken"


def test_invalid_rules_exit_nonzero(cli, tmp_path):
    (tmp_path / "rules.yaml").write_text("links: [oops", encoding="utf-8")

    assert cli("list") == 1
