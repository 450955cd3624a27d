"""
Contract tests for the liveness CLI exit codes
"""

from pathlib import Path

from typer.testing import CliRunner

from liveness.cli import app
from liveness.model import heartbeat_file, module_key


def test_check_on_empty_dir_is_healthy(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["check", "--data-dir", str(tmp_path)])

    assert result.exit_code == 0


def test_beat_then_stale_check_exits_one(tmp_path: Path) -> None:
    """
    First check observes the token; with a zero stale interval the second fails
    """
    runner = CliRunner()
    data_dir = str(tmp_path)

    assert runner.invoke(app, ["beat", "--module", "etl", "--data-dir", data_dir]).exit_code == 0
    assert (tmp_path / heartbeat_file(module_key("etl"))).exists()

    first = runner.invoke(app, ["check", "--stale-interval", "0", "--data-dir", data_dir])
    second = runner.invoke(app, ["check", "--stale-interval", "0", "--data-dir", data_dir])

    assert first.exit_code == 0
    assert second.exit_code == 1


def test_stop_untracks_module(tmp_path: Path) -> None:
    runner = CliRunner()
    data_dir = str(tmp_path)

    runner.invoke(app, ["beat", "--module", "etl", "--data-dir", data_dir])
    runner.invoke(app, ["check", "--data-dir", data_dir])
    result = runner.invoke(app, ["stop", "--module", "etl", "--data-dir", data_dir])

    assert result.exit_code == 0
    assert list(tmp_path.iterdir()) == []


def test_check_uses_env_data_dir(tmp_path: Path) -> None:
    runner = CliRunner()
    env = {"LIVENESS_DATA_DIR": str(tmp_path)}

    runner.invoke(app, ["beat"], env=env)

    assert (tmp_path / heartbeat_file(module_key("app"))).exists()
    assert runner.invoke(app, ["check"], env=env).exit_code == 0


def test_check_store_error_is_not_a_verdict(tmp_path: Path) -> None:
    """
    Unreadable records must not map to 0 or 1
    """
    (tmp_path / heartbeat_file(module_key("etl"))).write_text("{broken", encoding="utf-8")

    result = CliRunner().invoke(app, ["check", "--data-dir", str(tmp_path)])

    assert result.exit_code == 2
    assert "healthcheck_failed" in result.output


def test_no_command_prints_hint() -> None:
    result = CliRunner().invoke(app, [])

    assert result.exit_code == 0
    assert "No command provided" in result.output
