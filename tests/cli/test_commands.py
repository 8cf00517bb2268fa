"""Tests for the libraryview CLI commands.

Runs each command through Typer's CliRunner against a respx-mocked server.
"""

import json
from pathlib import Path

import httpx
import pytest
import respx
from typer.testing import CliRunner

from libraryview.cli.commands import app
from libraryview.utils import config as cfg
from tests.helpers.fake_transport import envelope, make_item

BASE = "http://library.test"

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the CLI at the mocked server with plain output and no real config."""
    monkeypatch.setenv("LIBRARYVIEW_SERVER_URL", BASE)
    monkeypatch.setenv("LIBRARYVIEW_NO_RICH", "1")
    monkeypatch.setattr(cfg, "CONFIG_DIR", tmp_path / "cfg")
    monkeypatch.setattr(cfg, "CONFIG_FILE", tmp_path / "cfg" / "config.toml")


def test_list_movies_renders_one_card(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.get(f"{BASE}/api/library/movies").mock(
        return_value=httpx.Response(
            200, json=envelope({"items": [make_item(7, "Dune")], "total": 1})
        )
    )

    result = runner.invoke(
        app,
        ["list", "--kind", "movies", "--sort", "title", "--order", "asc", "--search", "dune"],
    )

    assert result.exit_code == 0, result.output
    assert "Dune" in result.output
    assert "Showing 1 of 1" in result.output
    assert dict(route.calls.last.request.url.params) == {
        "sort": "title",
        "order": "asc",
        "search": "dune",
    }


def test_list_json_output(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{BASE}/api/library").mock(
        return_value=httpx.Response(
            200, json=envelope({"items": [make_item(1, "Alien")], "total": 1})
        )
    )

    result = runner.invoke(app, ["list", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["total"] == 1
    assert payload["items"][0]["title"] == "Alien"


def test_list_empty(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{BASE}/api/library/tv").mock(
        return_value=httpx.Response(200, json=envelope({"items": [], "total": 0}))
    )
    result = runner.invoke(app, ["list", "--kind", "tv", "--search", "zzz"])
    assert result.exit_code == 0
    assert "No items match" in result.output


def test_list_error_exit_code(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{BASE}/api/library").mock(
        return_value=httpx.Response(500, json=envelope(code=500, message="Database error"))
    )
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "Database error" in result.output


def test_show_item_with_placeholder_poster(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{BASE}/api/library/items/7").mock(
        return_value=httpx.Response(
            200,
            json=envelope(make_item(7, "Dune", metadata={"runtime": 155, "release_date": "2021-09-15"})),
        )
    )
    result = runner.invoke(app, ["show", "7"])
    assert result.exit_code == 0, result.output
    assert "2h 35m" in result.output
    assert "[no image]" in result.output


def test_batch_refresh_reports_failures(respx_mock: respx.MockRouter) -> None:
    respx_mock.post(f"{BASE}/api/library/batch/refresh").mock(
        return_value=httpx.Response(
            200,
            json=envelope({"success": [1, 3], "failed": [{"id": 2, "error": "not found"}]}),
        )
    )

    result = runner.invoke(app, ["refresh", "1", "2", "3"])

    assert result.exit_code == 1
    assert "not found" in result.output
    assert "Refreshed: 2 | Failed: 1" in result.output
    assert "Batch refresh answered for 3 items." in result.output


def test_single_refresh(respx_mock: respx.MockRouter) -> None:
    respx_mock.post(f"{BASE}/api/library/items/4/refresh").mock(
        return_value=httpx.Response(200, json=envelope("Metadata updated"))
    )
    result = runner.invoke(app, ["refresh", "4"])
    assert result.exit_code == 0, result.output
    assert "Metadata updated" in result.output
    assert "Batch refresh answered" not in result.output


def test_identify_lists_candidates(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{BASE}/api/library/items/7").mock(
        return_value=httpx.Response(200, json=envelope(make_item(7, "Dune")))
    )
    respx_mock.get(f"{BASE}/api/library/items/7/candidates").mock(
        return_value=httpx.Response(200, json=envelope([]))
    )
    result = runner.invoke(app, ["identify", "7"])
    assert result.exit_code == 0, result.output
    assert "No candidates found" in result.output
    assert "Found 0 candidates for item 7." in result.output


def test_identify_pick_applies_and_reloads(respx_mock: respx.MockRouter) -> None:
    item_route = respx_mock.get(f"{BASE}/api/library/items/7").mock(
        return_value=httpx.Response(200, json=envelope(make_item(7, "Dune")))
    )
    respx_mock.get(f"{BASE}/api/library/items/7/candidates").mock(
        return_value=httpx.Response(
            200,
            json=envelope(
                [{"id": "438631", "title": "Dune", "media_type": "movie", "provider": "tmdb"}]
            ),
        )
    )
    identify_route = respx_mock.post(f"{BASE}/api/library/items/7/identify").mock(
        return_value=httpx.Response(200, json=envelope("Identified as: Dune"))
    )

    result = runner.invoke(app, ["identify", "7", "--pick", "1"])

    assert result.exit_code == 0, result.output
    assert "Identified as: Dune" in result.output
    assert identify_route.call_count == 1
    assert item_route.call_count == 2  # mount + reload after apply


def test_config_set_server_and_show() -> None:
    result = runner.invoke(app, ["config", "set-server", "http://nas.local:3000/"])
    assert result.exit_code == 0, result.output
    assert cfg.read_config() == {"server": {"url": "http://nas.local:3000"}}

    result = runner.invoke(app, ["--server", "http://other:1", "config", "show"])
    assert "http://other:1" in result.output


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "libraryview version" in result.output
