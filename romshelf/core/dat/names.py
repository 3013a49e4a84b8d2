"""Split DAT game names into a base title and their parenthesized tags.

``"Secret of Mana (Europe) (Rev 1)"`` becomes the title ``"Secret of Mana"``
plus the groups ``[["Europe"], ["Rev 1"]]``. Every token of every group is
classified into a region, a release type, a revision or a free-text misc tag.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field, replace
from functools import reduce
from typing import List, Tuple

from romshelf.db.models import Region, ReleaseType


@dataclass(frozen=True)
class DecomposedName:
    title: str
    groups: List[List[str]] = field(default_factory=list)

    @property
    def tokens(self) -> List[str]:
        return [token for group in self.groups for token in group]


@dataclass(frozen=True)
class NameInfo:
    title: str
    regions: Tuple[Region, ...] = ()
    revision: int = 0
    release_type: ReleaseType = ReleaseType.OFFICIAL
    misc: str = ""


def _split_group(content: str) -> List[str]:
    tokens = []
    for item in content.split(","):
        item = item.strip()
        if item:
            tokens.append(html.unescape(item))
    return tokens


def decompose_name(raw: str) -> DecomposedName:
    start = raw.find("(")
    head = raw if start < 0 else raw[:start]
    title = html.unescape(head.strip())

    groups: List[List[str]] = []
    while start >= 0:
        end = raw.find(")", start + 1)
        if end < 0:
            # unterminated trailing group
            break
        groups.append(_split_group(raw[start + 1:end]))
        start = raw.find("(", end + 1)
    return DecomposedName(title=title, groups=groups)


def _parse_int(value: str, default: int = 0) -> Tuple[int, bool]:
    try:
        return int(value.strip()), True
    except ValueError:
        return default, False


def classify_token(info: NameInfo, token: str) -> NameInfo:
    """Fold one annotation token into ``info``; the first matching rule wins."""
    try:
        region = Region.from_name(token)
    except ValueError:
        pass
    else:
        return replace(info, regions=info.regions + (region,))

    try:
        release_type = ReleaseType.from_name(token)
    except ValueError:
        pass
    else:
        return replace(info, release_type=release_type)

    if "Beta" in token:
        # Beta 1 -> revision 0, Beta 2 -> revision 1, ...
        number, parsed = _parse_int(token.split()[-1])
        return replace(info, release_type=ReleaseType.BETA, revision=number - 1 if parsed else 0)

    if "Rev " in token:
        revision, _ = _parse_int(token.split("Rev ")[1])
        return replace(info, revision=revision)

    # Only the last unrecognized token is kept.
    return replace(info, misc=token)


def analyze_name(raw: str) -> NameInfo:
    decomposed = decompose_name(raw)
    return reduce(classify_token, decomposed.tokens, NameInfo(title=decomposed.title))
