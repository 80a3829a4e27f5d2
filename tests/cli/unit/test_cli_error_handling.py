"""CLI error-handling tests."""

from __future__ import annotations

from node_bootstrap.cli import main


def test_unknown_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["generate-config", "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "No such option: --bogus" in captured.err
    assert "Traceback" not in captured.err


def test_invalid_log_level_returns_clean_click_error(capsys) -> None:
    exit_code = main(["start", "--log-level", "LOUD"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "--log-level" in captured.err
    assert "Traceback" not in captured.err


def test_missing_configuration_file_returns_error(tmp_path, capsys) -> None:
    exit_code = main(["show-artifacts", "--config", str(tmp_path / "missing.yaml")])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "missing.yaml" in captured.err
    assert "Traceback" not in captured.err
