# src/railsi18n/workspace.py
"""
Filesystem-backed workspace for running the resolver outside an editor.

Classes:
    LocalWorkspace: Project roots on the local disk, file search and reads
    PollingFileWatcher: mtime-polling change notifications on an asyncio task
"""
import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .config import Config, config as default_config
from .errors import DocumentUnreadable
from .interfaces import ChangeListener, PathLike
from .models import FileChangeEvent, WorkspaceUnit
from .scanner import find_locale_files

logger = logging.getLogger(__name__)


class PollingFileWatcher:
    """
    Watches files matching a glob pattern in every folder of a workspace.

    The first scan happens when the watcher task starts and only records the
    current state; later scans report created, changed and deleted files.
    Must be created while an event loop is running.
    """

    def __init__(self, workspace: "LocalWorkspace", pattern: str, interval: float = 1.0):
        self.workspace = workspace
        self.pattern = pattern
        self.interval = interval
        self.disposed = False
        self._listeners: List[ChangeListener] = []
        self._snapshot: Optional[Dict[Path, int]] = None
        self._task = asyncio.get_running_loop().create_task(self._run())

    def on_did_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._listeners.clear()
        self._task.cancel()

    def _scan(self) -> Dict[Path, int]:
        state = {}
        for unit in self.workspace.folders:
            for path in find_locale_files(unit.root, self.pattern):
                try:
                    state[path] = path.stat().st_mtime_ns
                except OSError:
                    # deleted between listing and stat
                    continue
        return state

    async def poll(self) -> List[FileChangeEvent]:
        """Scan once and dispatch the differences to the listeners."""
        current = await asyncio.to_thread(self._scan)
        previous, self._snapshot = self._snapshot, current
        if previous is None:
            return []

        events = []
        for path, mtime in current.items():
            if path not in previous:
                events.append(FileChangeEvent(path, "created"))
            elif previous[path] != mtime:
                events.append(FileChangeEvent(path, "changed"))
        for path in previous.keys() - current.keys():
            events.append(FileChangeEvent(path, "deleted"))

        for event in sorted(events, key=lambda e: e.path):
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception("file watcher listener failed for %s", event.path)
        return events

    async def _run(self) -> None:
        while not self.disposed:
            try:
                await self.poll()
            except OSError as e:
                logger.warning("file watcher scan failed: %s", e)
            await asyncio.sleep(self.interval)


class LocalWorkspace:
    """
    A set of project roots on the local filesystem.

    Args:
        folders: Project root directories; each becomes a :class:`WorkspaceUnit`.
        config: Configuration providing the watcher poll interval.
    """

    def __init__(self, folders: Iterable[PathLike] = (), *, config: Optional[Config] = None) -> None:
        self.config = config or default_config
        self._folders: List[WorkspaceUnit] = []
        self._active: Optional[Path] = None
        for folder in folders:
            self.add_folder(folder)

    @property
    def folders(self) -> Sequence[WorkspaceUnit]:
        return tuple(self._folders)

    def add_folder(self, path: PathLike) -> WorkspaceUnit:
        root = Path(path).resolve()
        for unit in self._folders:
            if unit.root == root:
                return unit
        unit = WorkspaceUnit(name=root.name, root=root)
        self._folders.append(unit)
        return unit

    def remove_folder(self, path: PathLike) -> Optional[WorkspaceUnit]:
        root = Path(path).resolve()
        for unit in self._folders:
            if unit.root == root:
                self._folders.remove(unit)
                return unit
        return None

    def get_workspace_folder(self, path: PathLike) -> Optional[WorkspaceUnit]:
        """Return the innermost folder containing *path*, or None."""
        candidate = Path(path).resolve()
        owners = [unit for unit in self._folders if unit.contains(candidate)]
        if not owners:
            return None
        return max(owners, key=lambda unit: len(unit.root.parts))

    async def find_files(self, pattern: str, folder: Optional[WorkspaceUnit] = None) -> List[Path]:
        units = [folder] if folder is not None else list(self._folders)
        found: List[Path] = []
        for unit in units:
            found.extend(await asyncio.to_thread(find_locale_files, unit.root, pattern))
        return found

    async def open_document(self, path: PathLike) -> str:
        try:
            return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentUnreadable(str(path), e) from e

    def create_file_watcher(self, pattern: str) -> PollingFileWatcher:
        interval = self.config.get("watcher", "poll_interval_seconds", 1.0)
        return PollingFileWatcher(self, pattern, interval)

    def active_document(self) -> Optional[Path]:
        return self._active

    def set_active_document(self, path: Optional[PathLike]) -> None:
        self._active = Path(path).resolve() if path is not None else None
