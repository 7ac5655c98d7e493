"""Pytest configuration and shared fixtures."""
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from railsi18n.config import Config
from railsi18n.errors import DocumentUnreadable
from railsi18n.models import FileChangeEvent, WorkspaceUnit
from railsi18n.scanner import matches_pattern
from railsi18n.tree import TranslationTreeStore


class FakeWatcher:
    """In-memory file watcher; tests call :meth:`emit` to simulate changes."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.listeners = []
        self.disposed = False

    def on_did_change(self, listener):
        self.listeners.append(listener)

    def dispose(self):
        self.disposed = True

    def emit(self, path, kind="changed"):
        for listener in list(self.listeners):
            listener(FileChangeEvent(Path(path), kind))


class FakeWorkspace:
    """In-memory workspace: folders plus a dict of file contents."""

    def __init__(self, *roots: str):
        self._folders = [WorkspaceUnit(Path(root).name, Path(root)) for root in roots]
        self.files: Dict[Path, str] = {}
        self.unreadable: Set[Path] = set()
        self.watchers: List[FakeWatcher] = []
        self.active: Optional[Path] = None

    @property
    def folders(self):
        return tuple(self._folders)

    def unit(self, name: str) -> WorkspaceUnit:
        return next(unit for unit in self._folders if unit.name == name)

    def write(self, path, text: str) -> Path:
        path = Path(path)
        self.files[path] = text
        return path

    def delete(self, path) -> None:
        self.files.pop(Path(path), None)

    def get_workspace_folder(self, path):
        owners = [unit for unit in self._folders if unit.contains(path)]
        if not owners:
            return None
        return max(owners, key=lambda unit: len(unit.root.parts))

    async def find_files(self, pattern, folder=None):
        units = [folder] if folder is not None else self._folders
        return [
            path for path in sorted(self.files)
            for unit in units
            if unit.contains(path) and matches_pattern(path.relative_to(unit.root), pattern)
        ]

    async def open_document(self, path):
        path = Path(path)
        if path in self.unreadable:
            raise DocumentUnreadable(str(path), PermissionError(str(path)))
        if path not in self.files:
            raise DocumentUnreadable(str(path), FileNotFoundError(str(path)))
        return self.files[path]

    def create_file_watcher(self, pattern):
        watcher = FakeWatcher(pattern)
        self.watchers.append(watcher)
        return watcher

    def active_document(self):
        return self.active


@pytest.fixture
def config(tmp_path):
    """Fresh configuration with defaults only."""
    return Config(tmp_path / "missing.ini")


@pytest.fixture
def store():
    return TranslationTreeStore()


@pytest.fixture
def workspace():
    return FakeWorkspace("/ws/alpha", "/ws/beta")
