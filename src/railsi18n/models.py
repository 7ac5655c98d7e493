# src/railsi18n/models.py
"""
Data models for RailsI18n.

This module defines the core data structures shared by the document model,
the translation tree store and the resolver.

Classes:
    WorkspaceUnit: One opened project root, the isolation boundary for translations
    SourceSpan: Location of a leaf value inside its YAML document
    TranslationLeaf: A value in the tree together with its owning document
    Translation: Flattened content of one locale document
    DetectionMethod: How a default locale was decided
    LocaleDefaults: The resolved default locale of one workspace unit
    FileChangeEvent: A change notification emitted by a file watcher
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class WorkspaceUnit:
    """
    One project root whose translations never mix with another's.

    Attributes:
        name (str): Display name (usually the directory name)
        root (Path): Absolute root directory of the project
    """
    name: str
    root: Path

    @property
    def key(self) -> str:
        """Partition key used by the translation store."""
        return self.root.as_posix()

    def contains(self, path: Union[str, Path]) -> bool:
        """Return True if *path* lies inside this unit's root."""
        candidate = Path(path)
        return candidate == self.root or self.root in candidate.parents


@dataclass(frozen=True)
class SourceSpan:
    """0-based line/column range of a value in its source document."""
    line: int
    column: int
    end_line: int
    end_column: int


@dataclass(frozen=True)
class TranslationLeaf:
    """
    A terminal (key path, value) entry of a translation tree.

    Attributes:
        value (str): Text of the translation
        document_id (str): Identifier of the document that defined it
        span (Optional[SourceSpan]): Where the value is written in that document
    """
    value: str
    document_id: str
    span: Optional[SourceSpan] = None


@dataclass
class Translation:
    """Flattened content of a locale document: dotted key -> value."""
    locale: str
    entries: Dict[str, str] = field(default_factory=dict)
    spans: Dict[str, SourceSpan] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)


class DetectionMethod(Enum):
    CONFIGURATION = "configuration"
    CONVENTION = "convention"
    FALLBACK = "fallback"
    DEFAULT = "default"


@dataclass(frozen=True)
class LocaleDefaults:
    """Default locale of a workspace unit and how it was found."""
    unit_name: str
    locale: str
    method: DetectionMethod


@dataclass(frozen=True)
class FileChangeEvent:
    """
    A change notification for one file.

    Attributes:
        path (Path): Absolute path of the file
        kind (str): 'created', 'changed' or 'deleted'
    """
    path: Path
    kind: str = "changed"
