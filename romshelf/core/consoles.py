"""Console registry lookups."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from romshelf.db.models import Console


def get_console_by_name(session: Session, name: str) -> Optional[Console]:
    """Exact, case-sensitive lookup by console name."""
    return session.execute(
        select(Console).where(Console.name == name)
    ).scalar_one_or_none()


def register_console(
    session: Session,
    name: str,
    abbreviation: str,
    manufacturer: str,
    in_library: bool = False,
) -> Console:
    console = get_console_by_name(session, name)
    if console:
        return console
    console = Console(
        name=name,
        abbreviation=abbreviation,
        manufacturer=manufacturer,
        in_library=in_library,
    )
    session.add(console)
    session.commit()
    return console
