import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from romshelf.core.consoles import register_console  # noqa: E402
from romshelf.db.session import build_engine, init_db  # noqa: E402


SNES_DAT = """<?xml version="1.0"?>
<!DOCTYPE datafile PUBLIC "-//Logiqx//DTD ROM Management Datafile//EN" "http://www.logiqx.com/Dats/datafile.dtd">
<datafile>
\t<header>
\t\t<id>49</id>
\t\t<name>Nintendo - Super Nintendo Entertainment System (20251012-045317)</name>
\t\t<description>Nintendo - Super Nintendo Entertainment System (20251012-045317)</description>
\t\t<version>20251012-045317</version>
\t</header>
\t<game name="ActRaiser (Europe)" id="0002">
\t\t<description>ActRaiser (Europe)</description>
\t\t<release name="ActRaiser (Europe)" region="EUR"/>
\t\t<rom name="ActRaiser (Europe).sfc" size="1048576" crc="09097b2b" md5="9b36075b53dec1a506b1f9334e670c63" sha1="b76621e0b9d882c8b8463203f5423ca7d45cc5bf" status="verified"/>
\t</game>
\t<game name="ActRaiser (USA)" id="0003">
\t\t<description>ActRaiser (USA)</description>
\t\t<rom name="ActRaiser (USA).sfc" size="1048576" crc="4d8fe9a4" md5="5c0a0bb3e4d7a7f5ff8b5e9d8a6e1e3a" sha1="8e5cd1b3a1c8e0a5d8e8f0c7b5a9f2d1e3c4b5a6"/>
\t</game>
\t<game name="Mortal Kombat (Europe) (Rev 1)" id="1681">
\t\t<category>Games</category>
\t\t<description>Mortal Kombat (Europe) (Rev 1)</description>
\t\t<rom name="Mortal Kombat (Europe) (Rev 1).sfc" size="2097152" crc="047b3d88" md5="1d348d1af28db657195f926cc0207796" sha1="2b820cf5ea310db54cef4a1c0918023fec986ee4" status="verified"/>
\t\t<rom name="Mortal Kombat (Europe) (Rev 1) (Patch ROM).bin" size="32768" crc="ffdb34f7" md5="d4098651b6cc8ebd6e8ac2b38c0013ce" sha1="6526c6a75121fba961b6bdc4e4b0f76a81fc9995" status="verified"/>
\t</game>
\t<game name="Secret of Mana (Europe) (Rev 1)">
\t\t<description>Secret of Mana (Europe) (Rev 1)</description>
\t\t<release name="Secret of Mana (Europe) (Rev 1)" region="AUS"></release>
\t\t<release name="Secret of Mana (Europe) (Rev 1)" region="EUR"></release>
\t\t<rom name="Secret of Mana (Europe) (Rev 1).sfc" size="2097152" crc="de112322" md5="d273dd449b204a6eb90f611e5a72f80c" sha1="cf57dc4183c6e5aadba25019d82e61c44c0de113" status="verified"></rom>
\t</game>
\t<game name="Star Fox 2 (Japan) (Beta) (1994-05-13)" cloneof="Star Fox 2 (USA, Europe) (Classic Mini, Switch Online, Nintendo Leak)">
\t\t<description>Star Fox 2 (Japan) (Beta) (1994-05-13)</description>
\t\t<rom name="Star Fox 2 (Japan) (Beta) (1994-05-13).sfc" size="1048576" crc="d8b14e9d" md5="8286b46153f5fa21236cac29f21c7ec0" sha1="5c18b39171ace891b386345e06ff72e08b7862a1"></rom>
\t</game>
\t<game name="Pop&apos;n TwinBee (USA, Europe) (Switch Online)">
\t\t<description>Pop&apos;n TwinBee (USA, Europe) (Switch Online)</description>
\t\t<rom name="Pop&apos;n TwinBee (USA, Europe) (Switch Online).sfc" size="1048576" crc="6a1b2c3d" md5="0a1b2c3d4e5f60718293a4b5c6d7e8f9"/>
\t</game>
</datafile>
"""

EXTRA_GAME = """\t<game name="Uniracers (USA)">
\t\t<rom name="Uniracers (USA).sfc" size="1048576" crc="a1b2c3d4" md5="00112233445566778899aabbccddeeff"/>
\t</game>
</datafile>
"""


def grown_dat() -> str:
    return SNES_DAT.replace("</datafile>\n", EXTRA_GAME)


def count_rows(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(bind=engine, future=True, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def snes(session):
    return register_console(
        session,
        name="Super Nintendo Entertainment System",
        abbreviation="SNES",
        manufacturer="Nintendo",
    )


@pytest.fixture
def dat_file(tmp_path):
    path = tmp_path / "Nintendo - Super Nintendo Entertainment System.dat"
    path.write_text(SNES_DAT, encoding="utf-8")
    return path
