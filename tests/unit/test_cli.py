"""Tests for the command-line interface."""

from __future__ import annotations

import json
import os

import pytest

from recordsift.api.app import CONFIG_ENV_VAR
from recordsift.cli import _output, _pairs, main


class TestArgumentHelpers:
    def test_pairs(self) -> None:
        assert _pairs(["name=Dark*", "owner.email="], "--filter") == {"name": "Dark*", "owner.email": ""}

    def test_pairs_keep_later_equals_signs(self) -> None:
        assert _pairs(["title=a=b"], "--filter") == {"title": "a=b"}

    def test_pairs_rejects_missing_separator(self) -> None:
        with pytest.raises(ValueError, match="--operator"):
            _pairs(["name"], "--operator")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, None),
            ("summary", "summary"),
            ("ids-only", "ids-only"),
            ("id, name,owner.email", ["id", "name", "owner.email"]),
            ('["id"]', '["id"]'),
        ],
    )
    def test_output(self, raw, expected) -> None:
        assert _output(raw) == expected


class TestSearchCommand:
    @pytest.fixture
    def config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("recordsift.observability.logging.setup_logging", lambda settings: None)
        path = tmp_path / "recordsift.yaml"
        path.write_text(
            "observability:\n"
            "  log_level: warning\n"
            "sources:\n"
            "  products:\n"
            "    kind: memory\n"
            "    records:\n"
            "      - {id: p1, name: Web app}\n"
            "      - {id: p2, name: Mobile app}\n"
        )
        return path

    def test_prints_response(self, config, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(config), "search", "products", "-f", "name=*app", "--output", "ids-only"])

        assert exc_info.value.code == 0
        body = json.loads(capsys.readouterr().out)
        assert body["data"] == ["p1", "p2"]

    def test_validation_error_exit_code(self, config, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(config), "search", "products", "-f", "colour=red"])

        assert exc_info.value.code == 1
        error = json.loads(capsys.readouterr().err)
        assert error["field"] == "filters"

    def test_bad_filter_argument(self, config, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(config), "search", "products", "-f", "name"])

        assert exc_info.value.code == 2
        assert "FIELD=VALUE" in capsys.readouterr().err


class TestServeCommand:
    @pytest.fixture
    def uvicorn_calls(self, tmp_path, monkeypatch) -> list[tuple]:
        calls: list[tuple] = []
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("recordsift.observability.logging.setup_logging", lambda settings: None)
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))
        monkeypatch.setenv(CONFIG_ENV_VAR, "")
        return calls

    def test_reload_hands_config_to_workers(self, tmp_path, uvicorn_calls) -> None:
        config = tmp_path / "custom.yaml"
        config.write_text("server:\n  port: 9100\n")

        main(["--config", str(config), "serve", "--reload", "--host", "127.0.0.1"])

        app, kwargs = uvicorn_calls[0]
        assert app == "recordsift.api.app:create_app"
        assert kwargs["factory"] is True
        assert kwargs["reload"] is True
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9100
        assert os.environ[CONFIG_ENV_VAR] == str(config.resolve())

    def test_single_process_runs_app_instance(self, uvicorn_calls) -> None:
        main(["serve", "--port", "9200"])

        app, kwargs = uvicorn_calls[0]
        assert not isinstance(app, str)
        assert kwargs["port"] == 9200
        assert os.environ[CONFIG_ENV_VAR] == ""
