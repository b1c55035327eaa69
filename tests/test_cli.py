"""Tests for the command-line interface."""

from __future__ import annotations

import logging

import pytest
from typer.testing import CliRunner

from conftest import FakeOctomind, make_page, make_report
from octoallure.cli import app as cli_app
from octoallure.core.types import Case

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OCTOMIND_API_KEY", raising=False)
    monkeypatch.delenv("OCTOMIND_API_URL", raising=False)


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    httpx_logger = logging.getLogger("httpx")
    saved = (root.handlers[:], root.level, httpx_logger.level)
    yield
    root.handlers[:], root.level = saved[0], saved[1]
    httpx_logger.setLevel(saved[2])


@pytest.fixture
def no_remote(monkeypatch):
    def _boom(*args, **kwargs):
        raise AssertionError("no remote call expected")

    monkeypatch.setattr(cli_app, "_make_client", _boom)


@pytest.mark.parametrize(
    "args, message",
    [
        (["convert", "-t", "target", "-r", "report"], "--api-key"),
        (["convert", "-k", "key", "-r", "report"], "--test-target-id"),
        (["convert", "-k", "key", "-t", "target", "-b", "-r", "report"], "Cannot specify both"),
        (["convert", "-k", "key", "-t", "target"], "--test-report-id is required"),
    ],
)
def test_invalid_invocations_exit_before_remote_calls(no_remote, args, message):
    result = runner.invoke(cli_app.app, args)
    assert result.exit_code == 1
    assert message in result.output


def test_help():
    result = runner.invoke(cli_app.app, ["convert", "--help"])
    assert result.exit_code == 0
    assert "--batch" in result.output


def test_single_report_conversion(monkeypatch, tmp_path):
    fake = FakeOctomind(reports={"report-1": make_report("report-1")},
                        cases={"case-1": Case(id="case-1", name="login")})
    monkeypatch.setattr(cli_app, "_make_client", lambda config, api_key: fake)

    result = runner.invoke(cli_app.app, ["convert", "-k", "key", "-t", "target", "-r", "report-1",
                                         "-o", str(tmp_path / "out")])

    assert result.exit_code == 0, result.output
    assert len(list((tmp_path / "out").glob("*-result.json"))) == 1
    assert len(list((tmp_path / "out").glob("*-container.json"))) == 1


def test_api_key_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("OCTOMIND_API_KEY", "env-key")
    seen = {}
    fake = FakeOctomind(reports={"report-1": make_report("report-1")})

    def _client(config, api_key):
        seen["api_key"] = api_key
        return fake

    monkeypatch.setattr(cli_app, "_make_client", _client)

    result = runner.invoke(cli_app.app, ["convert", "-t", "target", "-r", "report-1", "-o", str(tmp_path / "out")])

    assert result.exit_code == 0, result.output
    assert seen["api_key"] == "env-key"


def test_batch_without_generate(monkeypatch, tmp_path):
    fake = FakeOctomind(pages=[make_page(0, 3, has_next_page=False)])
    monkeypatch.setattr(cli_app, "_make_client", lambda config, api_key: fake)

    result = runner.invoke(cli_app.app, ["convert", "-k", "key", "-t", "target", "--batch", "-m", "2",
                                         "--no-generate", "-o", str(tmp_path / "out")])

    assert result.exit_code == 0, result.output
    assert "Conversion Summary" in result.output
    assert len(list((tmp_path / "out").glob("*-container.json"))) == 2


def test_fatal_api_error_exits_non_zero(monkeypatch, tmp_path):
    monkeypatch.setattr(cli_app, "_make_client", lambda config, api_key: FakeOctomind())

    result = runner.invoke(cli_app.app, ["convert", "-k", "key", "-t", "target", "-r", "missing",
                                         "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "404" in result.output


def test_reports_lists_table(monkeypatch):
    fake = FakeOctomind(pages=[make_page(0, 2, has_next_page=False)])
    monkeypatch.setattr(cli_app, "_make_client", lambda config, api_key: fake)

    result = runner.invoke(cli_app.app, ["reports", "-k", "key", "-t", "target"])

    assert result.exit_code == 0, result.output
    assert "report-0" in result.output
    assert "report-1" in result.output


def test_debug_flag_enables_debug_logging(monkeypatch, tmp_path):
    fake = FakeOctomind(reports={"report-1": make_report("report-1")})
    monkeypatch.setattr(cli_app, "_make_client", lambda config, api_key: fake)

    result = runner.invoke(cli_app.app, ["convert", "-k", "key", "-t", "target", "-r", "report-1",
                                         "-o", str(tmp_path / "out"), "--debug"])

    assert result.exit_code == 0, result.output
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG
    assert "DEBUG" in result.output


def test_info_logging_by_default(monkeypatch, tmp_path):
    fake = FakeOctomind(reports={"report-1": make_report("report-1")})
    monkeypatch.setattr(cli_app, "_make_client", lambda config, api_key: fake)

    result = runner.invoke(cli_app.app, ["convert", "-k", "key", "-t", "target", "-r", "report-1",
                                         "-o", str(tmp_path / "out")])

    assert result.exit_code == 0, result.output
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
    assert "DEBUG" not in result.output


def test_unwritable_output_dir_is_reported(monkeypatch, tmp_path):
    fake = FakeOctomind(reports={"report-1": make_report("report-1")})
    monkeypatch.setattr(cli_app, "_make_client", lambda config, api_key: fake)
    blocker = tmp_path / "out"
    blocker.write_text("not a directory")

    result = runner.invoke(cli_app.app, ["convert", "-k", "key", "-t", "target", "-r", "report-1",
                                         "-o", str(blocker)])

    assert result.exit_code == 1
    assert "Error writing Allure files" in result.output
    assert not isinstance(result.exception, OSError)
