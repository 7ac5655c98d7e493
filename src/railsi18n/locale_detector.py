# src/railsi18n/locale_detector.py
"""
Default locale detection per workspace unit.

Detection tries, in order:

1. configuration: the ``[resolver] default_locale`` option, or
   ``config.i18n.default_locale`` in the unit's ``config/application.rb``;
   accepted only if the unit has translations for it
2. convention: the Rails framework default ``en``, if present
3. fallback: the alphabetically first locale of the unit, or ``en`` when
   the unit has no translations at all

Detection always produces a :class:`LocaleDefaults`; it never raises.
"""
import asyncio
import logging
import re
from typing import Dict, Optional

from .config import Config, config as default_config
from .errors import DetectionFailed, DocumentUnreadable, UnresolvedUnit
from .interfaces import PathLike, Workspace
from .models import DetectionMethod, LocaleDefaults, WorkspaceUnit
from .tree import TranslationTreeStore

logger = logging.getLogger(__name__)

CONVENTION_LOCALE = "en"
FALLBACK_LOCALE = "en"
APPLICATION_CONFIG = "config/application.rb"

_DEFAULT_LOCALE_RE = re.compile(
    r"""^\s*config\.i18n\.default_locale\s*=\s*(?::["']?(?P<symbol>[\w-]+)["']?|["'](?P<string>[\w-]+)["'])""",
    re.MULTILINE,
)


def parse_application_default_locale(source: str) -> Optional[str]:
    """Extract ``config.i18n.default_locale`` from Ruby source, ignoring commented lines."""
    match = _DEFAULT_LOCALE_RE.search(source)
    if match is None:
        return None
    return match.group("symbol") or match.group("string")


class DefaultLocaleDetector:
    """
    Decides the default locale of every workspace unit.

    Args:
        workspace: Host workspace (folders and document access).
        store: Populated translation store to validate candidates against.
        config: Configuration providing an explicit ``default_locale``.
    """

    def __init__(self, workspace: Workspace, store: TranslationTreeStore, *,
                 config: Optional[Config] = None) -> None:
        self.workspace = workspace
        self.store = store
        self.config = config or default_config
        self._defaults: Dict[str, LocaleDefaults] = {}

    @property
    def defaults(self) -> Dict[str, LocaleDefaults]:
        """Detection results keyed by workspace unit key."""
        return dict(self._defaults)

    async def detect_default_locale_with_fallback(self) -> Dict[str, LocaleDefaults]:
        """Detect the default locale of every unit and replace the previous results."""
        units = list(self.workspace.folders)
        results = await asyncio.gather(*(self.detect_for_unit(unit) for unit in units))
        self._defaults = {unit.key: defaults for unit, defaults in zip(units, results)}
        return self.defaults

    async def detect_for_unit(self, unit: WorkspaceUnit) -> LocaleDefaults:
        configured = await self.configured_locale(unit)
        if configured:
            if self.store.has_locale(unit, configured):
                return LocaleDefaults(unit.name, configured, DetectionMethod.CONFIGURATION)
            logger.warning("configured default locale '%s' has no translations in %s", configured, unit.name)

        if self.store.has_locale(unit, CONVENTION_LOCALE):
            return LocaleDefaults(unit.name, CONVENTION_LOCALE, DetectionMethod.CONVENTION)

        try:
            locale = self._fallback_locale(unit)
        except DetectionFailed as e:
            logger.warning("%s, using '%s'", e, FALLBACK_LOCALE)
            return LocaleDefaults(unit.name, FALLBACK_LOCALE, DetectionMethod.DEFAULT)

        logger.info("no configured or conventional default locale in %s, falling back to '%s'",
                    unit.name, locale)
        return LocaleDefaults(unit.name, locale, DetectionMethod.FALLBACK)

    async def configured_locale(self, unit: WorkspaceUnit) -> Optional[str]:
        """The explicitly configured default locale of *unit*, if any."""
        locale = self.config.get("resolver", "default_locale")
        if locale:
            return locale

        try:
            source = await self.workspace.open_document(unit.root / APPLICATION_CONFIG)
        except DocumentUnreadable as e:
            logger.debug("no application config for %s: %s", unit.name, e)
            return None
        return parse_application_default_locale(source)

    def _fallback_locale(self, unit: WorkspaceUnit) -> str:
        locales = self.store.locales(unit)
        if not locales:
            raise DetectionFailed(unit.name)
        return locales[0]

    def forget(self, unit: WorkspaceUnit) -> None:
        self._defaults.pop(unit.key, None)

    def get_default_locale_for_uri(self, uri: PathLike) -> str:
        """
        Default locale of the unit that owns *uri*.

        Raises:
            UnresolvedUnit: If *uri* is outside every workspace unit
        """
        unit = self.workspace.get_workspace_folder(uri)
        if unit is None:
            raise UnresolvedUnit(str(uri))
        defaults = self._defaults.get(unit.key)
        return defaults.locale if defaults is not None else FALLBACK_LOCALE
