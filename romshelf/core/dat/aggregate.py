"""Group parsed releases into games and split off their side tables."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List

from romshelf.core.dat.entries import ParsedRelease, ParsedRomImage
from romshelf.db.models import Region


@dataclass(frozen=True)
class ParsedGame:
    title: str

    @property
    def key(self) -> str:
        return self.title.lower()


@dataclass
class Catalog:
    """Aggregated contents of one DAT file, ready for writing.

    ``releases`` is keyed by the game key; ``regions`` and ``roms`` are keyed
    by the release ``insert_id``, its position in parse order.
    """

    games: Dict[str, ParsedGame] = field(default_factory=dict)
    releases: Dict[str, List[ParsedRelease]] = field(default_factory=dict)
    regions: Dict[int, List[Region]] = field(default_factory=dict)
    roms: Dict[int, List[ParsedRomImage]] = field(default_factory=dict)

    def iter_releases(self) -> Iterable[ParsedRelease]:
        for releases in self.releases.values():
            yield from releases

    @property
    def release_count(self) -> int:
        return sum(len(releases) for releases in self.releases.values())


def aggregate(parsed: Iterable[ParsedRelease]) -> Catalog:
    catalog = Catalog()
    for insert_id, release in enumerate(parsed):
        catalog.roms[insert_id] = [
            replace(rom, release_insert_id=insert_id) for rom in release.roms
        ]
        catalog.regions[insert_id] = list(release.regions)
        stripped = replace(release, insert_id=insert_id, roms=[], regions=list(release.regions))

        key = release.title.lower()
        if key not in catalog.games:
            catalog.games[key] = ParsedGame(title=release.title)
        catalog.releases.setdefault(key, []).append(stripped)
    return catalog
