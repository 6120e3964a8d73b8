#!/usr/bin/env python3
"""
lara-sync - Incremental localization file translator

Keeps target-locale files in sync with a source locale. Only keys that are
new or changed since the last run are sent for translation; everything
else is kept as it is in the target file.

Supported Formats:
    - JSON (i18next, react-intl, vue-i18n)
    - PO/POT (gettext)
    - Android XML (strings.xml)
    - TypeScript/JavaScript message objects
    - Vue single-file components (<i18n> block)
    - Markdown

Commands:
    translate - Translate every file listed in lara.yaml
    formats   - List supported formats
    locales   - List locale paths and locales found in the project

Example Workflow:
    1. lara-sync locales
       → Returns: localization paths found, e.g. src/i18n/[locale].json

    2. [Write lara.yaml with the source/target locales and include paths]

    3. lara-sync translate
       → Returns: files written + translated/copied/kept counts

    4. [Edit source strings]

    5. lara-sync translate
       → Only the changed keys are translated again
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import CONFIG_FILE, load_config
from .engine import run_translation
from .errors import FatalProviderError
from .format_handlers import FormatRegistry
from .ledger import LEDGER_FILE, ChecksumLedger
from .paths import extract_all_locales, search_locale_paths
from .providers import load_provider

logger = logging.getLogger(__name__)


def cmd_translate(args) -> dict:
    """Run translation for the whole project."""
    root = Path(args.root)
    config_path = Path(args.config) if Path(args.config).is_absolute() else root / args.config
    config = load_config(config_path)
    logger.debug("Loaded %d file type(s) from %s", len(config.files), config_path)

    translator = load_provider(args.provider or config.provider)
    ledger = ChecksumLedger(root / LEDGER_FILE)

    report = run_translation(config, ledger, translator, force=args.force, root=root)
    result = report.to_dict()
    result["status"] = "ok" if report.ok else "partial"
    result["summary"] = (
        f"{len(report.written)} file(s) written, {result['translated']} translated, "
        f"{result['copied']} copied, {result['kept']} kept, {len(report.failures)} error(s)"
    )
    return result


def cmd_formats(args) -> dict:
    """List supported formats."""
    formats = FormatRegistry.list_formats()
    return {
        "status": "ok",
        "formats": formats,
        "summary": f"{len(formats)} formats supported: {', '.join(f['name'] for f in formats)}",
    }


def cmd_locales(args) -> dict:
    """List localization paths and locales found under the project root."""
    paths = search_locale_paths(args.root)
    locales = extract_all_locales(args.root)
    return {
        "status": "ok",
        "paths": paths,
        "locales": locales,
        "summary": f"{len(paths)} path(s), {len(locales)} locale(s) found",
    }


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="lara-sync",
        description="lara-sync - Incremental localization file translator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Supported Formats:
  json        - i18next/react-intl/vue-i18n nested JSON
  po          - GNU gettext .po/.pot files
  android     - Android strings.xml
  typescript  - TS/JS files exporting a messages object
  vue         - Vue SFC <i18n> blocks
  markdown    - Markdown documents

Examples:
  # Translate everything listed in lara.yaml
  lara-sync translate

  # Retranslate every key, ignoring the ledger
  lara-sync translate --force

  # Use a custom provider (factory returning a TranslationProvider)
  lara-sync translate --provider mypkg.providers:create

  # Find localization files in a project
  lara-sync locales --root ./frontend

  # List supported formats
  lara-sync formats
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # translate command
    translate_parser = subparsers.add_parser("translate", help="Translate files listed in the config")
    translate_parser.add_argument("--config", "-c", default=CONFIG_FILE,
                                  help=f"Config file, relative to --root (default: {CONFIG_FILE})")
    translate_parser.add_argument("--root", "-r", default=".", help="Project root (default: .)")
    translate_parser.add_argument("--force", "-f", action="store_true",
                                  help="Retranslate every key, not only changed ones")
    translate_parser.add_argument("--provider", "-p",
                                  help="Provider as 'package.module:factory' or 'pseudo' (default: config or pseudo)")

    # formats command
    subparsers.add_parser("formats", help="List supported formats")

    # locales command
    locales_parser = subparsers.add_parser("locales", help="List localization paths and locales")
    locales_parser.add_argument("--root", "-r", default=".", help="Project root (default: .)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "translate":
            result = cmd_translate(args)
        elif args.command == "formats":
            result = cmd_formats(args)
        elif args.command == "locales":
            result = cmd_locales(args)
        print(json.dumps(result, indent=2, ensure_ascii=False))
    except FatalProviderError as e:
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
            "hint": e.hint,
        }), file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }), file=sys.stderr)
        sys.exit(1)

    if args.command == "translate" and result["status"] != "ok":
        sys.exit(1)


if __name__ == "__main__":
    main()
