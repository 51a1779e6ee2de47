"""Command-line inspector for key-value settings files."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .errors import SettingsError
from .keyvalue import BasicSettingsFile
from .paths import Paths

log = logging.getLogger(__name__)


def _parse_value(raw: str) -> Any:
    """Read *raw* as JSON, falling back to the plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _open(args: argparse.Namespace, create_dir: bool = False) -> BasicSettingsFile:
    """Open FILE, or the named file in the config dir when --data-dir is set."""
    if args.data_dir is None:
        return BasicSettingsFile(Path(args.file))
    paths = Paths(root=args.data_dir)
    if create_dir:
        paths.ensure_config_dir()
    return BasicSettingsFile(paths.file(args.file))


def _show(args: argparse.Namespace) -> int:
    settings = _open(args)
    settings.load(throw_on_fail=True)
    sys.stdout.write(settings.document.to_text())
    return 0


def _get(args: argparse.Namespace) -> int:
    settings = _open(args)
    settings.load(throw_on_fail=True)
    if not settings.contains_key(args.key):
        log.error("no entry with key %s in %s", args.key, settings.file_location)
        return 1
    print(json.dumps(settings.get(args.key), indent=2, ensure_ascii=False))
    return 0


def _set(args: argparse.Namespace) -> int:
    settings = _open(args, create_dir=True)
    settings.load()
    settings.set(args.key, _parse_value(args.value))
    settings.save()
    log.info("set %s in %s", args.key, settings.file_location)
    return 0


def _unset(args: argparse.Namespace) -> int:
    settings = _open(args)
    settings.load(throw_on_fail=True)
    if not settings.document.remove(args.key):
        log.error("no entry with key %s in %s", args.key, settings.file_location)
        return 1
    settings.save()
    log.info("removed %s from %s", args.key, settings.file_location)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonsettings", description="Inspect and edit JSON settings files",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--data-dir", default=None,
        help="Resolve FILE as a settings name under DATA_DIR/config",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print a settings file")
    show.add_argument("file")
    show.set_defaults(func=_show)

    get = sub.add_parser("get", help="Print one setting as JSON")
    get.add_argument("file")
    get.add_argument("key")
    get.set_defaults(func=_get)

    set_ = sub.add_parser("set", help="Store a setting (VALUE is parsed as JSON if possible)")
    set_.add_argument("file")
    set_.add_argument("key")
    set_.add_argument("value")
    set_.set_defaults(func=_set)

    unset = sub.add_parser("unset", help="Remove a setting")
    unset.add_argument("file")
    unset.add_argument("key")
    unset.set_defaults(func=_unset)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except SettingsError as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
