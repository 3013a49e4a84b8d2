"""CLI entrypoints for romshelf."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from romshelf.core.consoles import register_console
from romshelf.core.dat.importer import DatImporter
from romshelf.db.session import SessionLocal, init_db
from romshelf.errors import DatImportError


def cmd_init_db(_args: argparse.Namespace) -> int:
    init_db()
    print("Initialized database schema.")
    return 0


def cmd_add_console(args: argparse.Namespace) -> int:
    session = SessionLocal()
    try:
        console = register_console(
            session,
            name=args.name,
            abbreviation=args.abbreviation,
            manufacturer=args.manufacturer,
            in_library=args.in_library,
        )
        print(f"Console: id={console.id} name={console.name}")
        return 0
    finally:
        session.close()


def cmd_import_dat(args: argparse.Namespace) -> int:
    session = SessionLocal()
    try:
        importer = DatImporter(session, chunk_size=args.chunk_size)
        try:
            stats = importer.import_path(args.path)
        except DatImportError as exc:
            print(f"Import failed: {exc}", file=sys.stderr)
            return 1
        print(
            "Imported: "
            f"files={stats.files} "
            f"games={stats.games} "
            f"releases={stats.releases} "
            f"release_regions={stats.release_regions} "
            f"roms={stats.roms}"
        )
        return 0
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="romshelf")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create database tables.")
    init_parser.set_defaults(func=cmd_init_db)

    console_parser = subparsers.add_parser("add-console", help="Register a console.")
    console_parser.add_argument("name", help="Console name as written in DAT headers.")
    console_parser.add_argument("--abbreviation", required=True, help="Short console name, e.g. SNES.")
    console_parser.add_argument("--manufacturer", required=True, help="Console manufacturer.")
    console_parser.add_argument("--in-library", action="store_true", help="Mark the console as part of the library.")
    console_parser.set_defaults(func=cmd_add_console)

    import_parser = subparsers.add_parser("import-dat", help="Import DAT catalog files.")
    import_parser.add_argument("path", help="Path to a .dat file or directory.")
    import_parser.add_argument("--chunk-size", type=int, default=500, help="Rows per insert batch.")
    import_parser.set_defaults(func=cmd_import_dat)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
