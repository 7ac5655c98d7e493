# tests/test_rails_commands.py
"""
Tests for querying Rails for its translation load paths.
"""
import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from railsi18n.errors import LoadPathsUnavailable
from railsi18n.models import WorkspaceUnit
from railsi18n.rails_commands import RUNNER_SCRIPT, RailsCommands


def make_process(stdout=b"", stderr=b"", returncode=0):
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.wait = AsyncMock(return_value=returncode)
    process.returncode = returncode
    return process


@pytest.fixture
def unit(tmp_path):
    return WorkspaceUnit("shop", tmp_path)


def test_runner_command_prefers_binstub(tmp_path):
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / "rails").write_text("#!/usr/bin/env ruby\n")

    assert RailsCommands.runner_command(tmp_path) == [str(tmp_path / "bin" / "rails"), "runner", RUNNER_SCRIPT]


def test_runner_command_falls_back_to_bundler(tmp_path):
    assert RailsCommands.runner_command(tmp_path)[:4] == ["bundle", "exec", "rails", "runner"]


@pytest.mark.asyncio
async def test_load_paths_are_made_absolute(unit, config):
    output = b"/gems/devise/config/locales/en.yml\nconfig/locales/en.yml\n\n"
    with patch("railsi18n.rails_commands.asyncio.create_subprocess_exec",
               AsyncMock(return_value=make_process(stdout=output))) as spawn:
        paths = await RailsCommands(config=config).get_load_paths(unit)

    assert paths == [
        str(Path("/gems/devise/config/locales/en.yml")),
        str(unit.root / "config" / "locales" / "en.yml"),
    ]
    assert spawn.call_args.kwargs["cwd"] == str(unit.root)


@pytest.mark.asyncio
async def test_non_zero_exit(unit, config):
    process = make_process(stderr=b"Could not find gem 'rails'", returncode=1)
    with patch("railsi18n.rails_commands.asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
        with pytest.raises(LoadPathsUnavailable, match="Could not find gem"):
            await RailsCommands(config=config).get_load_paths(unit)


@pytest.mark.asyncio
async def test_missing_executable(unit, config):
    with patch("railsi18n.rails_commands.asyncio.create_subprocess_exec",
               AsyncMock(side_effect=FileNotFoundError("bundle"))):
        with pytest.raises(LoadPathsUnavailable, match="Cannot start rails"):
            await RailsCommands(config=config).get_load_paths(unit)


@pytest.mark.asyncio
async def test_binstub_that_cannot_execute(unit, config):
    binstub = unit.root / "bin" / "rails"
    binstub.parent.mkdir()
    binstub.write_text("")
    binstub.chmod(0o755)

    with pytest.raises(LoadPathsUnavailable, match="Cannot start rails"):
        await RailsCommands(config=config).get_load_paths(unit)


@pytest.mark.asyncio
async def test_other_os_errors_become_unavailable(unit, config):
    with patch("railsi18n.rails_commands.asyncio.create_subprocess_exec",
               AsyncMock(side_effect=NotADirectoryError(20, "Not a directory"))):
        with pytest.raises(LoadPathsUnavailable):
            await RailsCommands(config=config).get_load_paths(unit)


@pytest.mark.asyncio
async def test_timeout_kills_the_process(unit, config):
    config.set("resolver", "load_paths_timeout_seconds", 0.01)

    async def hang():
        await asyncio.sleep(10)

    process = make_process()
    process.communicate = hang
    with patch("railsi18n.rails_commands.asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
        with pytest.raises(LoadPathsUnavailable, match="timed out"):
            await RailsCommands(config=config).get_load_paths(unit)

    process.kill.assert_called_once()
    process.wait.assert_awaited_once()
