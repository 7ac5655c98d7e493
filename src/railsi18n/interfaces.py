# src/railsi18n/interfaces.py
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence, Union

from .models import FileChangeEvent, WorkspaceUnit

PathLike = Union[str, Path]
ChangeListener = Callable[[FileChangeEvent], None]


class FileWatcher(Protocol):
    def on_did_change(self, listener: ChangeListener) -> None:
        ...

    def dispose(self) -> None:
        ...


class Workspace(Protocol):
    @property
    def folders(self) -> Sequence[WorkspaceUnit]:
        ...

    def get_workspace_folder(self, path: PathLike) -> Optional[WorkspaceUnit]:
        ...

    async def find_files(self, pattern: str, folder: Optional[WorkspaceUnit] = None) -> List[Path]:
        ...

    async def open_document(self, path: PathLike) -> str:
        ...

    def create_file_watcher(self, pattern: str) -> FileWatcher:
        ...

    def active_document(self) -> Optional[Path]:
        ...


class LoadPathProvider(Protocol):
    async def get_load_paths(self, unit: WorkspaceUnit) -> List[str]:
        ...
