# src/railsi18n/main.py
"""
Command-line entry point for RailsI18n.

Loads the locale files of one or more Rails projects and resolves a key,
or lists the known locales or keys.

Examples::

    railsi18n hello.world
    railsi18n --workspace ~/app --locale de activerecord.errors.messages.blank
    railsi18n --list-locales
    railsi18n --list-keys date.formats
    railsi18n --watch 60 hello.world
"""
import argparse
import asyncio
import logging
import os
import sys
import time
from typing import List, Optional

from .config import Config
from .errors import UnresolvedUnit
from .resolver import I18nResolver
from .tree import TranslationTreeStore
from .workspace import LocalWorkspace

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="railsi18n",
        description="RailsI18n - resolve Rails i18n keys from config/locales YAML files",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("key", nargs="?", help="i18n key to resolve (e.g. hello.world)")
    parser.add_argument("--workspace", action="append", metavar="DIR",
                        help="Project root; repeat for several projects (default: current directory)")
    parser.add_argument("--locale", metavar="LOCALE",
                        help="Locale to resolve in (default: detected default locale)")
    parser.add_argument("--source", metavar="FILE",
                        help="File the key is used in; selects the project (default: first workspace)")
    parser.add_argument("--config", metavar="FILE", help="Path to a config.ini file")
    parser.add_argument("--list-locales", action="store_true",
                        help="List the locales of every project with its default locale")
    parser.add_argument("--list-keys", metavar="PREFIX", nargs="?", const="",
                        help="List keys below PREFIX (all keys when PREFIX is omitted)")
    parser.add_argument("--watch", metavar="SECONDS", type=float,
                        help="Keep watching locale files and print the value again whenever it changes;\n"
                             "stop after SECONDS (0 = until interrupted)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _print_translation(resolver: I18nResolver, key: str, locale: Optional[str], source: str) -> int:
    value = resolver.get_translation_for_key(key, locale, source)
    if value is None:
        print(f"translation missing: {key} ({locale or resolver.get_default_locale_key(source)})",
              file=sys.stderr)
        return 1
    print(value)
    return 0


async def _watch(resolver: I18nResolver, args: argparse.Namespace, source: str, interval: float) -> int:
    deadline = time.monotonic() + args.watch if args.watch else None
    last = resolver.get_translation_for_key(args.key, args.locale, source)
    status = 0 if last is not None else 1
    while deadline is None or time.monotonic() < deadline:
        await asyncio.sleep(interval)
        await resolver.flush()
        value = resolver.get_translation_for_key(args.key, args.locale, source)
        if value != last:
            last = value
            status = _print_translation(resolver, args.key, args.locale, source)
    return status


async def run(args: argparse.Namespace, cfg: Config) -> int:
    workspace = LocalWorkspace(args.workspace or [os.getcwd()], config=cfg)
    if args.watch is None:
        cfg.set("watcher", "enabled", False)
    logger.debug("workspace folders: %s", [str(unit.root) for unit in workspace.folders])

    resolver = I18nResolver(workspace, store=TranslationTreeStore(), config=cfg)
    try:
        await resolver.load()
        source = args.source or str(workspace.folders[0].root)

        if args.list_locales:
            for unit in workspace.folders:
                locales = ", ".join(resolver.store.locales(unit)) or "-"
                print(f"{unit.name}: {locales} (default: {resolver.get_default_locale_key(unit.root)})")
            return 0

        if args.list_keys is not None:
            unit = workspace.get_workspace_folder(source)
            if unit is None:
                raise UnresolvedUnit(source)
            locale = args.locale or resolver.get_default_locale_key(source)
            for key in resolver.store.keys(unit, locale, args.list_keys):
                print(key)
            return 0

        status = _print_translation(resolver, args.key, args.locale, source)
        if args.watch is not None:
            interval = cfg.get("watcher", "poll_interval_seconds", 1.0)
            status = await _watch(resolver, args, source, interval)
        return status
    except UnresolvedUnit as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        resolver.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for RailsI18n.

    Returns:
        int: 0 on success, 1 when the key is missing, 2 on usage errors
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.key and not args.list_locales and args.list_keys is None:
        parser.error("key is required unless --list-locales or --list-keys is given")
    if args.watch is not None and not args.key:
        parser.error("--watch requires a key")
    if args.watch is not None and args.watch < 0:
        parser.error("--watch SECONDS must not be negative")

    cfg = Config(args.config)
    level = logging.DEBUG if args.verbose else getattr(logging, str(cfg.get("logging", "log_level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        return asyncio.run(run(args, cfg))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
