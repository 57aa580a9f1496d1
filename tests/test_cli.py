"""Tests for safe-upload CLI helpers."""
import logging
import os

import pytest

from safe_uploader.cli import (
    CLIError,
    _load_env_file,
    _parse_payload,
    _setup_logging,
    run_cli,
)
from safe_uploader.cli_render import build_result_table
from safe_uploader.errors import SizeError, ThumbnailFailedError
from safe_uploader.models import RunResult, RunStatus


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logging.disable(logging.NOTSET)


def test_parse_payload():
    assert _parse_payload(None) == {}
    assert _parse_payload(["user=42", "category = 'avatars'", "note=a=b"]) == {
        "user": "42",
        "category": "avatars",
        "note": "a=b",
    }


@pytest.mark.parametrize("item", ["user", "=42"])
def test_parse_payload_rejects_bad_entries(item):
    with pytest.raises(CLIError):
        _parse_payload([item])


def test_load_env_file(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# uploads",
                "SAFE_UPLOADER_CONFIG=/etc/uploads.yml",
                "UPLOAD_ROOT='/srv/uploads'",
                "export UPLOAD_OWNER=www-data",
            ]
        ),
        encoding="utf-8",
    )

    monkeypatch.delenv("SAFE_UPLOADER_CONFIG", raising=False)
    monkeypatch.delenv("UPLOAD_ROOT", raising=False)
    monkeypatch.setenv("UPLOAD_OWNER", "kept")

    _load_env_file(env_path)

    assert os.environ["SAFE_UPLOADER_CONFIG"] == "/etc/uploads.yml"
    assert os.environ["UPLOAD_ROOT"] == "/srv/uploads"
    assert os.environ["UPLOAD_OWNER"] == "kept"


def test_load_env_file_missing(tmp_path):
    with pytest.raises(CLIError, match="env file not found"):
        _load_env_file(tmp_path / "missing.env")


def test_setup_logging_defaults_to_silent():
    mode = _setup_logging(debug=False, silent=False, log_level=None)
    assert mode == "silent"
    assert logging.getLogger().isEnabledFor(logging.CRITICAL) is False


def test_setup_logging_debug_mode():
    mode = _setup_logging(debug=True, silent=False, log_level=None)
    assert mode == "DEBUG"
    assert logging.getLogger().isEnabledFor(logging.DEBUG) is True


def test_setup_logging_explicit_level():
    assert _setup_logging(debug=False, silent=False, log_level="warning") == "WARNING"


def test_result_table_lists_paths_and_failures():
    result = RunResult(
        status=RunStatus.PARTIAL,
        uploaded_file_path="/srv/pic.png",
        uploaded_file_paths=("/srv/pic.png", "/srv/pic-50x.png"),
        failures=(ThumbnailFailedError("thumb failed"),),
    )
    table = build_result_table(result)
    assert table.row_count == 3
    assert "PARTIAL" in str(table.title)


def test_run_cli_without_arguments_prints_help(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert run_cli([]) == 0
    assert "safe-upload" in capsys.readouterr().out


def test_run_cli_requires_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SAFE_UPLOADER_CONFIG", raising=False)
    source = tmp_path / "a.txt"
    source.write_text("hello")
    assert run_cli(["docs", str(source)]) == 1


def _config(tmp_path, max_size="1M"):
    dest = tmp_path / "dest"
    config = tmp_path / "uploads.yml"
    config.write_text(
        f"profiles:\n  docs:\n    dir: {dest}/{{category}}\n    maxSize: {max_size}\n",
        encoding="utf-8",
    )
    return config, dest


def test_run_cli_uploads_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config, dest = _config(tmp_path)
    source = tmp_path / "a.txt"
    source.write_text("hello")

    code = run_cli(["docs", str(source), "--config", str(config), "-p", "category=reports"])

    assert code == 0
    assert (dest / "reports" / "a.txt").read_text() == "hello"
    assert not source.exists()


def test_run_cli_reads_config_from_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config, dest = _config(tmp_path)
    monkeypatch.setenv("SAFE_UPLOADER_CONFIG", str(config))
    source = tmp_path / "a.txt"
    source.write_text("hello")

    assert run_cli(["docs", str(source)]) == 0
    assert (dest / "a.txt").exists()


@pytest.mark.parametrize("extra", [[], ["--collect"]])
def test_run_cli_reports_rejected_file(tmp_path, monkeypatch, capsys, extra):
    monkeypatch.chdir(tmp_path)
    config, dest = _config(tmp_path, max_size="1")
    source = tmp_path / "a.txt"
    source.write_text("too big")

    assert run_cli(["docs", str(source), "--config", str(config), *extra]) == 1
    assert source.exists()
    assert not dest.exists()
    assert SizeError.__name__ in capsys.readouterr().err
