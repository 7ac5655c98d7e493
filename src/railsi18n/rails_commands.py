# src/railsi18n/rails_commands.py
"""
Declared translation load paths, as reported by the Rails application.

Rails may load locale files from engines, gems and custom directories that
the ``config/locales`` glob never sees.  :class:`RailsCommands` asks the
application itself by running ``I18n.load_path`` through ``rails runner``.
"""
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from .config import Config, config as default_config
from .errors import LoadPathsUnavailable
from .models import WorkspaceUnit

logger = logging.getLogger(__name__)

RUNNER_SCRIPT = "puts I18n.load_path.map(&:to_s)"


class RailsCommands:
    """
    Runs Rails commands inside a workspace unit.

    Args:
        config: Configuration providing ``load_paths_timeout_seconds``.
    """

    def __init__(self, *, config: Optional[Config] = None) -> None:
        self.config = config or default_config

    @staticmethod
    def runner_command(root: Path) -> List[str]:
        """``bin/rails runner`` when the binstub exists, else ``bundle exec rails runner``."""
        if (root / "bin" / "rails").is_file():
            return [str(root / "bin" / "rails"), "runner", RUNNER_SCRIPT]
        return ["bundle", "exec", "rails", "runner", RUNNER_SCRIPT]

    async def get_load_paths(self, unit: WorkspaceUnit) -> List[str]:
        """
        Return the absolute paths of every file in ``I18n.load_path``.

        Raises:
            LoadPathsUnavailable: If Rails cannot be started, exits with an error or times out
        """
        cmd = self.runner_command(unit.root)
        timeout = self.config.get("resolver", "load_paths_timeout_seconds", 30.0)
        logger.debug("running %s in %s", " ".join(cmd), unit.root)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(unit.root),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise LoadPathsUnavailable(f"Cannot start rails in {unit.root}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise LoadPathsUnavailable(f"rails runner timed out after {timeout}s in {unit.root}") from e

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise LoadPathsUnavailable(
                f"rails runner exited with {process.returncode} in {unit.root}: {message}"
            )

        paths = []
        for line in stdout.decode("utf-8", errors="replace").splitlines():
            line = line.strip()
            if not line:
                continue
            path = Path(line)
            if not path.is_absolute():
                path = unit.root / path
            paths.append(str(path))
        return paths
