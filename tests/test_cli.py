"""Tests for the mackerel-plugin-redash command line."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Callable

import pytest

from redash_metrics.cli import build_parser, main, resolve_config
from redash_metrics.client import STATUS_PATH, TASKS_PATH


def _routes(status_json: str, tasks_json: str) -> dict:
    return {STATUS_PATH: status_json, TASKS_PATH: tasks_json}


def test_missing_api_key_exits_before_any_request(
    fake_redash: Callable, capsys: pytest.CaptureFixture
) -> None:
    server = fake_redash()
    with server.client() as client:
        code = main(["--url", "http://httpmock"], client=client, stream=io.StringIO())

    assert code == 1
    assert server.requests == []
    assert "API Key is required" in capsys.readouterr().err


def test_prints_metric_lines(
    fake_redash: Callable, status_json: str, tasks_json: str
) -> None:
    server = fake_redash(_routes(status_json, tasks_json))
    out = io.StringIO()
    with server.client() as client:
        code = main(["--url", "http://httpmock", "--api-key", "test"], client=client, stream=out)

    assert code == 0
    lines = out.getvalue().splitlines()
    assert len(lines) == 10
    name, value, timestamp = lines[0].split("\t")
    assert (name, value) == ("redash.general.dashboards_count", "30")
    assert timestamp.isdigit()
    assert any(line.startswith("redash.tasks.in_progress\t1\t") for line in lines)
    assert all(request.url.params["api_key"] == "test" for request in server.requests)


def test_custom_prefix(fake_redash: Callable, status_json: str, tasks_json: str) -> None:
    server = fake_redash(_routes(status_json, tasks_json))
    out = io.StringIO()
    with server.client() as client:
        main(
            ["--url", "http://httpmock", "--api-key", "test", "--metric-key-prefix", "bi"],
            client=client,
            stream=out,
        )

    assert all(line.startswith("bi.") for line in out.getvalue().splitlines())


def test_fetch_failure_exits_nonzero_without_output(
    fake_redash: Callable, tasks_json: str, caplog: pytest.LogCaptureFixture
) -> None:
    server = fake_redash({STATUS_PATH: 500, TASKS_PATH: tasks_json})
    out = io.StringIO()
    with server.client() as client:
        code = main(["--url", "http://httpmock", "--api-key", "test"], client=client, stream=out)

    assert code == 1
    assert out.getvalue() == ""
    assert "failed to fetch status: HTTP response code is not 200" in caplog.text


def test_meta_mode_prints_graph_definitions(
    fake_redash: Callable, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("MACKEREL_AGENT_PLUGIN_META", "1")
    server = fake_redash()
    out = io.StringIO()
    with server.client() as client:
        code = main(["--api-key", "test"], client=client, stream=out)

    assert code == 0
    assert server.requests == []
    header, body = out.getvalue().splitlines()
    assert header == "# mackerel-agent-plugin"
    assert "redash.queues" in json.loads(body)["graphs"]


def test_flags_override_config_file(tmp_path: Path) -> None:
    path = tmp_path / "redash.yaml"
    path.write_text("url: http://yaml.local\napi_key: yaml-key\nprefix: fromyaml\n", encoding="utf-8")
    args = build_parser().parse_args(["--config", str(path), "--metric-key-prefix", "flag", "--timeout", "9"])
    cfg = resolve_config(args)

    assert cfg.url == "http://yaml.local"
    assert cfg.api_key == "yaml-key"
    assert cfg.prefix == "flag"
    assert cfg.timeout == 9.0


def test_defaults_come_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDASH_API_KEY", "env-key")
    cfg = resolve_config(build_parser().parse_args([]))
    assert cfg.api_key == "env-key"
    assert cfg.url == "http://localhost:5000"
    assert cfg.tempfile_path == Path("/tmp/mackerel-plugin-redash")


def test_invalid_config_file_exits_before_any_request(
    fake_redash: Callable, tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    path = tmp_path / "redash.yaml"
    path.write_text("url: http://httpmock\napi_key: [unclosed\n", encoding="utf-8")
    server = fake_redash()
    with server.client() as client:
        code = main(["--config", str(path)], client=client, stream=io.StringIO())

    assert code == 1
    assert server.requests == []
    assert "Invalid config YAML" in capsys.readouterr().err
