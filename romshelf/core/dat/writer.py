"""Write an aggregated catalog to the database in a single transaction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from sqlalchemy import Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from romshelf.core.dat.aggregate import Catalog
from romshelf.core.dat.entries import ParsedRelease, regions_hash
from romshelf.db.models import Console, Game, Release, ReleaseRegion, Rom
from romshelf.errors import StorageError


logger = logging.getLogger(__name__)

INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

RELEASE_KEY_COLUMNS = (
    "title_non_null",
    "game_id",
    "revision",
    "parent_id_non_null",
    "regions_hash",
    "release_type",
    "type_misc",
)

ReleaseKey = Tuple[str, int, int, int, str, int, str]


@dataclass
class WriteStats:
    games: int = 0
    releases: int = 0
    release_regions: int = 0
    roms: int = 0


def _chunks(items: Sequence[Any], size: int) -> Iterable[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _release_key(row: Dict[str, Any]) -> ReleaseKey:
    return tuple(row[column] for column in RELEASE_KEY_COLUMNS)  # type: ignore[return-value]


class CatalogWriter:
    """Upserts games, releases, release regions and roms for one console.

    Every upsert is keyed on the table's natural key so importing the same
    catalog again converges on the same rows. Ids of existing and new rows
    are resolved with a select on the natural key after each upsert.
    """

    def __init__(self, session: Session, chunk_size: int = 500):
        self.session = session
        self.chunk_size = chunk_size

    def write(self, console: Console, catalog: Catalog) -> WriteStats:
        stats = WriteStats()
        try:
            game_ids = self._upsert_games(console.id, catalog, stats)
            release_ids = self._upsert_releases(catalog, game_ids, stats)
            self._insert_release_regions(catalog, release_ids, stats)
            self._upsert_roms(catalog, release_ids, stats)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(exc) from exc
        except Exception:
            self.session.rollback()
            raise
        logger.info(
            "wrote console=%s games=%d releases=%d release_regions=%d roms=%d",
            console.name,
            stats.games,
            stats.releases,
            stats.release_regions,
            stats.roms,
        )
        return stats

    def _insert(self, table: Table):
        dialect = self.session.get_bind().dialect.name
        insert = INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise StorageError(NotImplementedError(f"upserts are not supported on {dialect!r}"))
        return insert(table)

    def _execute_rows(self, statement, rows: List[Dict[str, Any]]) -> None:
        for chunk in _chunks(rows, self.chunk_size):
            self.session.execute(statement, list(chunk))

    def _upsert_games(self, console_id: int, catalog: Catalog, stats: WriteStats) -> Dict[str, int]:
        rows = [{"title": game.title, "console_id": console_id} for game in catalog.games.values()]
        statement = self._insert(Game.__table__)
        # The no-op update makes existing rows part of the upsert instead of skipping them.
        statement = statement.on_conflict_do_update(
            index_elements=["title", "console_id"],
            set_={"title": statement.excluded.title},
        )
        self._execute_rows(statement, rows)
        stats.games = len(rows)

        ids_by_title: Dict[str, int] = {}
        titles = [row["title"] for row in rows]
        for chunk in _chunks(titles, self.chunk_size):
            result = self.session.execute(
                select(Game.id, Game.title).where(
                    Game.console_id == console_id,
                    Game.title.in_(chunk),
                )
            )
            for game_id, title in result:
                ids_by_title[title] = game_id
        return {key: ids_by_title[game.title] for key, game in catalog.games.items()}

    def _upsert_releases(
        self,
        catalog: Catalog,
        game_ids: Dict[str, int],
        stats: WriteStats,
    ) -> Dict[int, int]:
        rows_by_key: Dict[ReleaseKey, Dict[str, Any]] = {}
        keys_by_insert_id: Dict[int, ReleaseKey] = {}
        for game_key, releases in catalog.releases.items():
            for release in releases:
                row = self._release_row(release, game_ids[game_key], catalog)
                key = _release_key(row)
                # Identical entries collapse into one row; the last one wins.
                rows_by_key[key] = row
                keys_by_insert_id[release.insert_id] = key

        statement = self._insert(Release.__table__)
        statement = statement.on_conflict_do_update(
            index_elements=list(RELEASE_KEY_COLUMNS),
            set_={
                "revision": statement.excluded.revision,
                "parent_id": statement.excluded.parent_id,
                "insert_id": statement.excluded.insert_id,
            },
        )
        rows = list(rows_by_key.values())
        self._execute_rows(statement, rows)
        stats.releases = len(rows)

        ids_by_key: Dict[ReleaseKey, int] = {}
        key_columns = [getattr(Release, column) for column in RELEASE_KEY_COLUMNS]
        for chunk in _chunks(sorted(set(game_ids.values())), self.chunk_size):
            result = self.session.execute(
                select(Release.id, *key_columns).where(Release.game_id.in_(chunk))
            )
            for release_id, *key in result:
                ids_by_key[tuple(key)] = release_id
        return {insert_id: ids_by_key[key] for insert_id, key in keys_by_insert_id.items()}

    @staticmethod
    def _release_row(release: ParsedRelease, game_id: int, catalog: Catalog) -> Dict[str, Any]:
        regions = catalog.regions.get(release.insert_id, release.regions)
        # title and parent_id stay nullable; the *_non_null copies form the unique key
        return {
            "title": release.title,
            "title_non_null": release.title,
            "game_id": game_id,
            "revision": release.revision,
            "parent_id": None,
            "parent_id_non_null": 0,
            "release_type": int(release.release_type),
            "type_misc": release.misc,
            "insert_id": release.insert_id,
            "regions_hash": regions_hash(regions),
        }

    def _insert_release_regions(
        self,
        catalog: Catalog,
        release_ids: Dict[int, int],
        stats: WriteStats,
    ) -> None:
        pairs = {
            (release_ids[insert_id], int(region))
            for insert_id, regions in catalog.regions.items()
            for region in regions
        }
        rows = [{"release_id": release_id, "region_id": region_id} for release_id, region_id in sorted(pairs)]
        statement = self._insert(ReleaseRegion.__table__)
        statement = statement.on_conflict_do_nothing(index_elements=["release_id", "region_id"])
        self._execute_rows(statement, rows)
        stats.release_regions = len(rows)

    def _upsert_roms(
        self,
        catalog: Catalog,
        release_ids: Dict[int, int],
        stats: WriteStats,
    ) -> None:
        rows_by_key: Dict[Tuple[str, int], Dict[str, Any]] = {}
        for insert_id, roms in catalog.roms.items():
            release_id = release_ids[insert_id]
            for rom in roms:
                rows_by_key[(rom.name, release_id)] = {
                    "title": rom.name,
                    "md5": rom.md5,
                    "crc": rom.crc,
                    "sha1": rom.sha1,
                    "size": rom.size,
                    "release_id": release_id,
                }

        statement = self._insert(Rom.__table__)
        statement = statement.on_conflict_do_update(
            index_elements=["title", "release_id"],
            set_={"title": statement.excluded.title},
        )
        rows = list(rows_by_key.values())
        self._execute_rows(statement, rows)
        stats.roms = len(rows)
