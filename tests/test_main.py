"""Tests for the __main__.py module entry point."""

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch


def test_main_module_execution():
    """Test that python -m claude_switch works correctly."""
    result = subprocess.run(
        [sys.executable, "-m", "claude_switch", "--help"],
        capture_output=True,
        text=True,
        cwd=Path(__file__).parent.parent
    )

    assert result.returncode == 0
    assert "Usage:" in result.stdout
    assert "Commands:" in result.stdout


def test_main_module_with_invalid_command():
    result = subprocess.run(
        [sys.executable, "-m", "claude_switch", "invalid_command"],
        capture_output=True,
        text=True,
        cwd=Path(__file__).parent.parent
    )

    assert result.returncode != 0
    assert "No such command" in result.stderr


@patch('claude_switch.cli.cli')
def test_main_handles_keyboard_interrupt(mock_cli, capsys):
    from claude_switch.cli import main

    mock_cli.side_effect = KeyboardInterrupt
    try:
        main()
    except SystemExit as e:
        assert e.code == 1
    else:
        raise AssertionError("main() should exit on KeyboardInterrupt")
    assert "Operation cancelled by user" in capsys.readouterr().err
