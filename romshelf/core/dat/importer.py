"""Import DAT catalog files into the database."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from romshelf.core.consoles import get_console_by_name
from romshelf.core.dat.aggregate import aggregate
from romshelf.core.dat.entries import ParsedRelease, parse_entries
from romshelf.core.dat.scanner import HeaderInfo, parse_header
from romshelf.core.dat.writer import CatalogWriter
from romshelf.db.models import Console
from romshelf.errors import DatImportError, UnknownConsole


logger = logging.getLogger(__name__)

DAT_EXTENSIONS = (".dat",)

ConsoleLookup = Callable[[Session, str], Optional[Console]]


@dataclass
class ParsedCatalog:
    header: HeaderInfo
    releases: List[ParsedRelease]


@dataclass
class ImportStats:
    files: int = 0
    games: int = 0
    releases: int = 0
    release_regions: int = 0
    roms: int = 0


def parse_text(text: str) -> ParsedCatalog:
    header = parse_header(text)
    return ParsedCatalog(header=header, releases=parse_entries(text))


class DatImporter:
    def __init__(
        self,
        session: Session,
        console_lookup: ConsoleLookup = get_console_by_name,
        chunk_size: int = 500,
    ):
        self.session = session
        self.console_lookup = console_lookup
        self.chunk_size = chunk_size

    def import_path(self, path: str) -> ImportStats:
        stats = ImportStats()
        if os.path.isdir(path):
            entries = [e for e in sorted(os.listdir(path)) if e.lower().endswith(DAT_EXTENSIONS)]
            for idx, entry in enumerate(entries, start=1):
                logger.info("[import] %d/%d %s", idx, len(entries), entry)
                stats = self._merge_stats(stats, self.import_file(os.path.join(path, entry)))
        else:
            stats = self.import_file(path)
        return stats

    def parse_file(self, path: str) -> ParsedCatalog:
        with open(path, "r", encoding="utf-8") as handle:
            text = handle.read()
        try:
            return parse_text(text)
        except DatImportError as exc:
            exc.path = path
            raise

    def import_file(self, path: str) -> ImportStats:
        logger.info("[import] loading %s", path)
        parsed = self.parse_file(path)
        logger.debug("[import] %s: parsed %d game entries", path, len(parsed.releases))

        try:
            console_name = parsed.header.console_name
            console = self.console_lookup(self.session, console_name)
            if console is None:
                raise UnknownConsole(console_name)

            catalog = aggregate(parsed.releases)
            written = CatalogWriter(self.session, chunk_size=self.chunk_size).write(console, catalog)
        except DatImportError as exc:
            exc.path = path
            raise

        return ImportStats(
            files=1,
            games=written.games,
            releases=written.releases,
            release_regions=written.release_regions,
            roms=written.roms,
        )

    @staticmethod
    def _merge_stats(base: ImportStats, extra: ImportStats) -> ImportStats:
        base.files += extra.files
        base.games += extra.games
        base.releases += extra.releases
        base.release_regions += extra.release_regions
        base.roms += extra.roms
        return base
