# src/railsi18n/resolver.py
"""
Load and watch lifecycle for translations, and the public query surface.

:class:`I18nResolver` fills the translation store from every workspace unit,
keeps it in sync with a file watcher and answers lookups::

    resolver = I18nResolver(LocalWorkspace(["/path/to/app"]))
    await resolver.load()
    resolver.get_translation_for_key("hello.world", source_uri="/path/to/app/app/views/x.erb")
"""
import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set

from .config import Config, config as default_config
from .document import YAMLDocument
from .errors import DocumentUnreadable, LoadPathsUnavailable, MalformedDocument, ShapeError, UnresolvedUnit
from .interfaces import FileWatcher, LoadPathProvider, PathLike, Workspace
from .locale_detector import DefaultLocaleDetector
from .models import FileChangeEvent, LocaleDefaults, TranslationLeaf, WorkspaceUnit
from .performance import PerformanceMonitor
from .rails_commands import RailsCommands
from .tree import TranslationTreeStore, i18n_tree

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "config/locales/**/*.yml"
LOCALE_FILE_SUFFIXES = (".yml", ".yaml")

DidLoadListener = Callable[[], Any]


class ResolverState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    WATCHING = "watching"


def locale_fallbacks(locale: str, fallback_to_base: bool = True) -> List[str]:
    """Locales to try for *locale*, most specific first (``de-AT`` -> ``de-AT``, ``de``)."""
    chain = [locale]
    if fallback_to_base:
        for separator in ("-", "_"):
            if separator in locale:
                base = locale.split(separator, 1)[0]
                if base and base not in chain:
                    chain.append(base)
                break
    return chain


def document_id(path: PathLike) -> str:
    return Path(path).resolve().as_posix()


class I18nResolver:
    """
    Keeps the translation store in sync with the locale files of a workspace.

    Args:
        workspace: Host workspace providing folders, file search, reads and watching.
        store: Translation store (default: the shared :data:`i18n_tree`).
        load_path_provider: Source of declared load paths (default: :class:`RailsCommands`).
        config: Configuration (default: the global config).
    """

    def __init__(
        self,
        workspace: Workspace,
        *,
        store: Optional[TranslationTreeStore] = None,
        load_path_provider: Optional[LoadPathProvider] = None,
        config: Optional[Config] = None,
    ) -> None:
        self.workspace = workspace
        self.store = store if store is not None else i18n_tree
        self.config = config or default_config
        self.load_path_provider = load_path_provider or RailsCommands(config=self.config)
        self.performance_monitor = PerformanceMonitor(self.config)
        self.locale_detector = DefaultLocaleDetector(workspace, self.store, config=self.config)
        self.state = ResolverState.UNINITIALIZED
        # bumped by every load and dispose; a load that sees it change stops
        self._generation = 0
        self._file_watcher: Optional[FileWatcher] = None
        self._did_load_listeners: List[DidLoadListener] = []
        self._pending: Set["asyncio.Task[bool]"] = set()

    @property
    def pattern(self) -> str:
        return self.config.get("resolver", "locale_pattern", DEFAULT_PATTERN)

    @property
    def is_loaded(self) -> bool:
        """True once a load completed; lets late listeners detect a missed did-load signal."""
        return self.state is ResolverState.WATCHING

    # ── lifecycle ──────────────────────────────────────────────────────

    async def load(self) -> Dict[str, LocaleDefaults]:
        """
        Load every locale file of every workspace unit, start watching, detect default locales.

        Returns:
            Dict[str, LocaleDefaults]: Detected defaults keyed by unit key; empty if
            :meth:`dispose` or another load interrupted this one
        """
        self._generation += 1
        generation = self._generation
        self._init()
        self.state = ResolverState.LOADING

        with self.performance_monitor.track_operation("load_translations"):
            await self._load_yaml_files()
        logger.debug("yaml files loaded")
        if generation != self._generation:
            logger.debug("load abandoned after dispose or a newer load")
            return {}

        self._register_file_watcher()
        defaults = await self._load_default_locale()
        if generation != self._generation:
            logger.debug("load abandoned after dispose or a newer load")
            return {}
        self.state = ResolverState.WATCHING
        logger.debug("finished loading.")
        self._emit_did_load()
        return defaults

    def on_did_load(self, listener: DidLoadListener) -> Callable[[], None]:
        """
        Call *listener* every time a load completes from now on.

        A load that already completed is not replayed; check :attr:`is_loaded`.

        Returns:
            Callable[[], None]: Unregisters the listener
        """
        self._did_load_listeners.append(listener)

        def remove() -> None:
            if listener in self._did_load_listeners:
                self._did_load_listeners.remove(listener)

        return remove

    def dispose(self) -> None:
        """Release the file watcher, cancel pending reloads and abandon a load in flight."""
        self._generation += 1
        self.state = ResolverState.UNINITIALIZED
        if self._file_watcher is not None:
            self._file_watcher.dispose()
            self._file_watcher = None
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

    async def flush(self) -> None:
        """Wait until every reload triggered by the watcher has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _init(self) -> None:
        logger.debug("init")
        self.store.init()

    def _emit_did_load(self) -> None:
        for listener in list(self._did_load_listeners):
            try:
                listener()
            except Exception:
                logger.exception("did-load listener failed")

    # ── initial load ───────────────────────────────────────────────────

    async def _load_yaml_files(self) -> None:
        await asyncio.gather(*(self._load_workspace_folder(unit) for unit in self.workspace.folders))
        # join barrier: index is rebuilt once, after every unit has merged
        self.store.update_lookup_maps()

    async def _load_workspace_folder(self, unit: WorkspaceUnit) -> None:
        logger.debug("loading yaml files for workspace dir: %s", unit.name)
        files = sorted(set(await self.get_yaml_files_for_workspace_folder(unit)))

        # read concurrently, merge in path order so overrides are deterministic
        texts = await asyncio.gather(*(self._read_document(file) for file in files))
        for file, text in zip(files, texts):
            if text is None:
                continue
            logger.debug("loading locale file: %s", file)
            self._merge_text(file, text, unit, rebuild_index_immediately=False)

    async def get_yaml_files_for_workspace_folder(self, unit: WorkspaceUnit) -> List[Path]:
        """
        Locale files of one unit.

        Uses the glob pattern; with ``load_all_translations`` enabled the
        declared Rails load paths replace the glob result, unless Rails
        cannot be queried.
        """
        load_all = self.config.get("resolver", "load_all_translations", False)
        logger.debug("loadAllFiles: %s workspace dir: %s", load_all, unit.name)

        files = [
            Path(file) for file in await self.workspace.find_files(self.pattern, unit)
            if self.workspace.get_workspace_folder(file) == unit
        ]
        if not files:
            logger.warning("no locale files in project dir found, %s is probably not a rails project.", unit.root)
            return files

        if not load_all:
            return files

        try:
            load_paths = await self.load_path_provider.get_load_paths(unit)
        except LoadPathsUnavailable as e:
            logger.warning("loading translation file paths failed, using file pattern: %s", e)
            return files
        return [Path(path) for path in load_paths if Path(path).suffix in LOCALE_FILE_SUFFIXES]

    async def _read_document(self, path: PathLike) -> Optional[str]:
        try:
            return await self.workspace.open_document(path)
        except DocumentUnreadable as e:
            logger.error("skipping unreadable locale file %s: %s", path, e)
            return None

    def _merge_text(self, path: PathLike, text: str, unit: WorkspaceUnit, *,
                    rebuild_index_immediately: bool) -> bool:
        try:
            document = YAMLDocument.parse(text)
            translation = document.to_translation()
        except (MalformedDocument, ShapeError) as e:
            logger.error("skipping locale file %s: %s", path, e)
            return False
        except Exception as e:
            logger.error("error loading locale file %s: %s", path, e)
            return False

        self.store.merge_document(
            translation, document, unit, document_id(path),
            rebuild_index_immediately=rebuild_index_immediately,
        )
        return True

    async def _load_default_locale(self) -> Dict[str, LocaleDefaults]:
        defaults = await self.locale_detector.detect_default_locale_with_fallback()
        logger.info("default locales: %s", {d.unit_name: d.locale for d in defaults.values()})
        return defaults

    async def reload_default_locale(self) -> Dict[str, LocaleDefaults]:
        """Run default locale detection again, e.g. after locales were added."""
        return await self._load_default_locale()

    # ── watching ───────────────────────────────────────────────────────

    def _register_file_watcher(self) -> None:
        if self._file_watcher is not None:
            self._file_watcher.dispose()
            self._file_watcher = None

        if not self.config.get("watcher", "enabled", True):
            return
        self._file_watcher = self.workspace.create_file_watcher(self.pattern)
        self._file_watcher.on_did_change(self._on_file_change)

    def _on_file_change(self, event: FileChangeEvent) -> None:
        task = asyncio.ensure_future(self.reload_file(event.path, event.kind))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def reload_file(self, path: PathLike, kind: str = "changed") -> bool:
        """
        Apply a change notification for one file and rebuild the index right away.

        Returns:
            bool: True if the store changed
        """
        path = Path(path).resolve()
        if kind == "deleted":
            logger.debug("removing locale file: %s", path)
            return self.store.remove_document(document_id(path), rebuild_index_immediately=True)

        unit = self.workspace.get_workspace_folder(path)
        if unit is None:
            logger.warning("ignoring change outside of every workspace folder: %s", path)
            return False

        logger.debug("reloading locale file: %s", path)
        text = await self._read_document(path)
        if text is None:
            return False
        return self._merge_text(path, text, unit, rebuild_index_immediately=True)

    def remove_workspace_folder(self, unit: WorkspaceUnit) -> None:
        """Forget every translation of a workspace unit that was closed."""
        self.store.remove_unit(unit)
        self.locale_detector.forget(unit)

    # ── queries ────────────────────────────────────────────────────────

    def get_default_locale_key(self, uri: PathLike) -> str:
        return self.locale_detector.get_default_locale_for_uri(uri)

    def _resolve_context(self, locale: Optional[str], source_uri: Optional[PathLike]):
        if source_uri is None:
            source_uri = self.workspace.active_document()
            if source_uri is None:
                raise UnresolvedUnit(None)

        unit = self.workspace.get_workspace_folder(source_uri)
        if unit is None:
            raise UnresolvedUnit(str(source_uri))

        if not locale:
            locale = self.locale_detector.get_default_locale_for_uri(source_uri)
        return locale, unit

    def get_translation_for_key(self, key: str, locale: Optional[str] = None,
                                source_uri: Optional[PathLike] = None) -> Optional[str]:
        """
        Resolve the text of an i18n key.

        Args:
            key: i18n key (e.g. ``"hello.world"``)
            locale: Locale to look in; defaults to the default locale of the source's unit
            source_uri: File the key is used in; defaults to the active document

        Returns:
            Optional[str]: The translation, or None if the key is not defined

        Raises:
            UnresolvedUnit: If the source belongs to no workspace unit
        """
        locale, unit = self._resolve_context(locale, source_uri)
        fallback_to_base = self.config.get("resolver", "fallback_to_base_locale", True)
        for candidate in locale_fallbacks(locale, fallback_to_base):
            value = self.store.get_translation(key, candidate, unit)
            if value is not None:
                return value
        return None

    def get_definition(self, key: str, locale: Optional[str] = None,
                       source_uri: Optional[PathLike] = None) -> Optional[TranslationLeaf]:
        """The visible leaf for *key* with its owning document and source span."""
        locale, unit = self._resolve_context(locale, source_uri)
        return self.store.get_leaf(key, locale, unit)
