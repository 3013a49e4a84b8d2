"""Build release records from the ``<game>`` elements of a DAT file."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from romshelf.core.dat.names import analyze_name
from romshelf.core.dat.scanner import Element, Scanner
from romshelf.db.models import Region, ReleaseType
from romshelf.errors import EmptyReleaseImages, MalformedMarkup, MissingTitle


logger = logging.getLogger(__name__)

REGION_CODES = {
    "USA": Region.USA,
    "JPN": Region.JAPAN,
    "EUR": Region.EUROPE,
    "GER": Region.GERMANY,
    "AUS": Region.AUSTRALIA,
    "SPA": Region.SPAIN,
    "FRA": Region.FRANCE,
    "SWE": Region.SWEDEN,
    "ITA": Region.ITALIA,
    "SCA": Region.SCANDINAVIA,
}


@dataclass
class ParsedRomImage:
    name: str
    md5: str
    crc: str
    size: int
    sha1: Optional[str] = None
    release_insert_id: int = 0


@dataclass
class ParsedRelease:
    title: str
    regions: List[Region] = field(default_factory=list)
    revision: int = 0
    release_type: ReleaseType = ReleaseType.OFFICIAL
    misc: str = ""
    insert_id: int = 0
    roms: List[ParsedRomImage] = field(default_factory=list)

    @property
    def regions_hash(self) -> str:
        return regions_hash(self.regions)


def regions_hash(regions: Iterable[Region]) -> str:
    """Sorted, comma-joined region ids; independent of declaration order."""
    return ",".join(str(region_id) for region_id in sorted(int(region) for region in regions))


def region_from_code(code: str) -> Region:
    region = REGION_CODES.get(code)
    if region is None:
        logger.warning("unknown region code %r, falling back to World", code)
        return Region.WORLD
    return region


def build_rom(attributes: Dict[str, str]) -> ParsedRomImage:
    return ParsedRomImage(
        name=html.unescape(attributes.get("name", "")),
        md5=html.unescape(attributes.get("md5", "")),
        crc=html.unescape(attributes.get("crc", "")),
        size=_to_int(attributes.get("size")),
        sha1=html.unescape(attributes["sha1"]) if "sha1" in attributes else None,
    )


def build_release(
    game_attributes: Dict[str, str],
    region_codes: List[str],
    rom_attributes: List[Dict[str, str]],
    offset: int = 0,
) -> ParsedRelease:
    raw_name = game_attributes.get("name", "")
    if not raw_name.strip():
        raise MissingTitle(offset)
    name_info = analyze_name(raw_name)
    if not name_info.title:
        raise MissingTitle(offset)
    if not rom_attributes:
        raise EmptyReleaseImages(name_info.title, offset)

    # Explicit <release> regions win over regions found in the name.
    regions = [region_from_code(code) for code in region_codes]
    if not regions:
        regions = list(name_info.regions)

    return ParsedRelease(
        title=name_info.title,
        regions=regions,
        revision=name_info.revision,
        release_type=name_info.release_type,
        misc=name_info.misc,
        roms=[build_rom(attributes) for attributes in rom_attributes],
    )


def parse_entry(scanner: Scanner, element: Element) -> ParsedRelease:
    """Build the release for one ``<game>`` element located by ``scanner``."""
    first_rom = scanner.within(element).next_tag("rom")

    releases = Scanner(
        scanner.text,
        element.body_start,
        first_rom if first_rom is not None else element.body_end,
    )
    region_codes: List[str] = []
    while True:
        release = releases.read_element("release")
        if release is None:
            break
        code = release.attributes.get("region")
        if code is None:
            logger.warning("release tag without region at offset %d ignored", release.offset)
            continue
        region_codes.append(code)

    roms = scanner.within(element)
    rom_attributes: List[Dict[str, str]] = []
    while True:
        rom = roms.read_element("rom")
        if rom is None:
            break
        rom_attributes.append(rom.attributes)

    return build_release(element.attributes, region_codes, rom_attributes, element.offset)


def parse_entries(text: str, start: int = 0) -> List[ParsedRelease]:
    """Parse every ``<game>`` element in file order."""
    scanner = Scanner(text, start)
    releases: List[ParsedRelease] = []
    while True:
        element = scanner.read_element("game")
        if element is None:
            break
        releases.append(parse_entry(scanner, element))
    if not releases:
        raise MalformedMarkup(start, "no <game> entries found")
    return releases


def _to_int(value: Optional[str]) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
