import json
from unittest import mock

import pytest

from service import cli

from conftest import FakeClient


@pytest.fixture
def patched_http(fake_pages):
    """Route every HttpClient built by the engine through FakeClient."""
    with mock.patch(
        "modules.devops_watch.lib.engine.HttpClient",
        side_effect=lambda **kw: FakeClient(fake_pages),
    ) as m:
        yield m


def test_run_without_slack_env_exits_2(capsys):
    rc = cli.main(["run", "--dry-run"])
    assert rc == 2
    assert "SLACK_BOT_TOKEN or SLACK_CHANNEL_ID not set" in capsys.readouterr().err


def test_run_dry_run_end_to_end(slack_env, write_sites, html_fixtures, fake_pages, patched_http, tmp_path, capsys):
    sites = write_sites([html_fixtures.ACME_SITE])
    fake_pages[html_fixtures.ACME_URL] = html_fixtures.ACME_HTML
    history = tmp_path / "state" / "history.json"

    rc = cli.main(["run", "--dry-run", "--sites", str(sites), "--history", str(history)])

    assert rc == 0
    assert "1 new alerts" in capsys.readouterr().out
    assert not history.exists()
    assert patched_http.call_count == 1


def test_run_with_failing_sites_still_exits_0(slack_env, write_sites, patched_http, capsys):
    sites = write_sites([{"name": "Down", "url": "https://down.example/jobs"}])

    rc = cli.main(["run", "--dry-run", "--sites", str(sites)])

    assert rc == 0
    assert "1 failed" in capsys.readouterr().out


def test_list_sites_builtin(capsys):
    assert cli.main(["list-sites"]) == 0
    out = capsys.readouterr().out
    assert "RBC" in out and "structured_listing" in out
    assert "Lockheed Martin" in out


def test_list_sites_bad_file(tmp_path, capsys):
    assert cli.main(["list-sites", "--sites", str(tmp_path / "missing.json")]) == 2


def test_validate_config(slack_env, capsys):
    assert cli.main(["validate-config"]) == 0
    assert "28 sites" in capsys.readouterr().out


def test_validate_config_missing_env(capsys):
    assert cli.main(["validate-config"]) == 2


def test_history_command(tmp_path, capsys):
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"a" * 40: 1_700_000_000, "b" * 40: 1_700_000_500, "note": "x"}), encoding="utf-8")

    assert cli.main(["history", "--history", str(path), "--limit", "1"]) == 0

    out = capsys.readouterr().out
    assert "b" * 40 in out
    assert "a" * 40 not in out
    assert "3 entries" in out


def test_history_command_empty(tmp_path, capsys):
    assert cli.main(["history", "--history", str(tmp_path / "none.json")]) == 0
    assert "No entries" in capsys.readouterr().out


def test_history_command_uses_store_timestamp_rules(tmp_path, capsys):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps({"f" * 40: 1_700_000_900.5, "t" * 40: True, "a" * 40: 1_700_000_000}),
        encoding="utf-8",
    )

    assert cli.main(["history", "--history", str(path)]) == 0

    out = capsys.readouterr().out
    assert "f" * 40 in out
    assert "t" * 40 not in out
    assert out.index("f" * 40) < out.index("a" * 40)
    assert "showing newest 2" in out
