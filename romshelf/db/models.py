"""Database models for romshelf."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    BigInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


class Region(enum.IntEnum):
    WORLD = 0
    JAPAN = 1
    USA = 2
    EUROPE = 3
    GERMANY = 4
    AUSTRALIA = 5
    SPAIN = 6
    FRANCE = 7
    SWEDEN = 8
    ITALIA = 9
    SCANDINAVIA = 10

    @property
    def display_name(self) -> str:
        return REGION_NAMES[self]

    @property
    def abbreviation(self) -> str:
        return REGION_ABBREVIATIONS[self]

    @classmethod
    def from_name(cls, value: str) -> "Region":
        """Case-insensitive lookup by display name, e.g. ``"europe"``."""
        try:
            return _REGIONS_BY_NAME[value.casefold()]
        except KeyError:
            raise ValueError(f"unknown region name: {value!r}") from None


REGION_NAMES = {
    Region.WORLD: "World",
    Region.JAPAN: "Japan",
    Region.USA: "USA",
    Region.EUROPE: "Europe",
    Region.GERMANY: "Germany",
    Region.AUSTRALIA: "Australia",
    Region.SPAIN: "Spain",
    Region.FRANCE: "France",
    Region.SWEDEN: "Sweden",
    Region.ITALIA: "Italia",
    Region.SCANDINAVIA: "Scandinavia",
}

REGION_ABBREVIATIONS = {
    Region.WORLD: "WOR",
    Region.JAPAN: "JPN",
    Region.USA: "USA",
    Region.EUROPE: "EUR",
    Region.GERMANY: "GER",
    Region.AUSTRALIA: "AUS",
    Region.SPAIN: "SPA",
    Region.FRANCE: "FRA",
    Region.SWEDEN: "SWE",
    Region.ITALIA: "ITA",
    Region.SCANDINAVIA: "SCA",
}

_REGIONS_BY_NAME = {name.casefold(): region for region, name in REGION_NAMES.items()}


class ReleaseType(enum.IntEnum):
    CUSTOM = 0
    OFFICIAL = 1
    ROMHACK = 2
    BETA = 3
    BOOTLEG = 4
    SAMPLE = 5
    VIRTUAL_CONSOLE = 6

    @property
    def display_name(self) -> str:
        return self.name.title().replace("_", "")

    @classmethod
    def from_name(cls, value: str) -> "ReleaseType":
        """Case-insensitive lookup, e.g. ``"beta"`` or ``"VirtualConsole"``."""
        for member in cls:
            if member.display_name.casefold() == value.casefold():
                return member
        raise ValueError(f"unknown release type: {value!r}")


class Console(Base):
    __tablename__ = "consoles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    abbreviation = Column(String, nullable=False)
    manufacturer = Column(String, nullable=False)
    in_library = Column(Boolean, nullable=False, default=False)

    games = relationship("Game", back_populates="console")


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    console_id = Column(Integer, ForeignKey("consoles.id"), nullable=False)

    console = relationship("Console", back_populates="games")
    releases = relationship("Release", back_populates="game")

    __table_args__ = (
        UniqueConstraint("title", "console_id", name="uq_games_title_console"),
    )


class RegionRow(Base):
    __tablename__ = "regions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    abbreviation = Column(String, nullable=False)


class ReleaseTypeRow(Base):
    __tablename__ = "release_types"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)


class Release(Base):
    __tablename__ = "releases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False)
    revision = Column(Integer, nullable=False, default=0)
    parent_id = Column(Integer, ForeignKey("releases.id"), nullable=True)
    release_type = Column(Integer, ForeignKey("release_types.id"), nullable=False)
    type_misc = Column(String, nullable=False, default="")
    insert_id = Column(Integer, nullable=False)
    # Non-null copies of title/parent_id; NULLs never collide in a unique index.
    title_non_null = Column(String, nullable=False)
    parent_id_non_null = Column(Integer, nullable=False, default=0)
    regions_hash = Column(String, nullable=False)

    game = relationship("Game", back_populates="releases")
    roms = relationship("Rom", back_populates="release")
    regions = relationship("ReleaseRegion", back_populates="release")

    __table_args__ = (
        UniqueConstraint(
            "title_non_null",
            "game_id",
            "revision",
            "parent_id_non_null",
            "regions_hash",
            "release_type",
            "type_misc",
            name="uq_releases_natural_key",
        ),
    )


class ReleaseRegion(Base):
    __tablename__ = "release_regions"

    release_id = Column(Integer, ForeignKey("releases.id"), primary_key=True)
    region_id = Column(Integer, ForeignKey("regions.id"), primary_key=True)

    release = relationship("Release", back_populates="regions")


class Rom(Base):
    __tablename__ = "roms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    md5 = Column(String, nullable=False)
    crc = Column(String, nullable=False)
    sha1 = Column(String, nullable=True)
    size = Column(BigInteger, nullable=False, default=0)
    release_id = Column(Integer, ForeignKey("releases.id"), nullable=False)

    release = relationship("Release", back_populates="roms")

    __table_args__ = (
        UniqueConstraint("title", "release_id", name="uq_roms_title_release"),
        Index("idx_roms_crc", "crc"),
        Index("idx_roms_md5", "md5"),
    )
