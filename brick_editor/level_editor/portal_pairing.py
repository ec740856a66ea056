"""
Portal pair id allocation.

Portals are linked by sharing an id: two portal bricks with the same id form
a teleport pair. Pairing is a relation between bricks rather than a
reference from one brick to the other, so the index from id to bricks is
rebuilt from the brick list whenever it is needed.
"""

from __future__ import annotations

import time
import uuid
from typing import Dict, Iterable, List

from .constants import PORTAL_ID_PREFIX
from .data_model import Brick, LevelDocument


def new_portal_id() -> str:
    """Mint a globally unique portal pair id."""
    return f"{PORTAL_ID_PREFIX}{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def portal_index(bricks: Iterable[Brick]) -> Dict[str, List[Brick]]:
    """Map each portal id to the portal bricks carrying it (first-seen order)."""
    index: Dict[str, List[Brick]] = {}
    for brick in bricks:
        if brick.is_portal and brick.id:
            index.setdefault(brick.id, []).append(brick)
    return index


def unpaired_portal_ids(bricks: Iterable[Brick]) -> List[str]:
    """Portal ids that occur on exactly one brick."""
    return [pid for pid, members in portal_index(bricks).items() if len(members) == 1]


def next_portal_id(document: LevelDocument) -> str:
    """Id for the next single placed portal.

    Completes the first unpaired portal if there is one, otherwise starts a
    new pair.
    """
    unpaired = unpaired_portal_ids(document.bricks)
    if unpaired:
        return unpaired[0]
    return new_portal_id()


def generate_pair_ids(count: int, document: LevelDocument) -> List[str]:
    """Ids for `count` portals placed together.

    Unpaired ids are consumed first; the remainder are minted two at a time so
    consecutive new portals pair with each other.
    """
    return generate_pair_ids_for_bricks(count, document.bricks)


def generate_pair_ids_for_bricks(count: int, bricks: Iterable[Brick]) -> List[str]:
    unpaired = unpaired_portal_ids(bricks)
    ids: List[str] = []

    for i in range(count):
        if i < len(unpaired):
            ids.append(unpaired[i])
        elif (i - len(unpaired)) % 2 == 0:
            ids.append(new_portal_id())
        else:
            ids.append(ids[-1])

    return ids


def portal_partners(bricks: Iterable[Brick], removed: Iterable[Brick]) -> List[Brick]:
    """Bricks sharing a portal id with any of the removed portal bricks."""
    removed_list = list(removed)
    ids = {b.id for b in removed_list if b.is_portal and b.id}
    if not ids:
        return []
    index = portal_index(bricks)
    partners: List[Brick] = []
    for pid in ids:
        for brick in index.get(pid, []):
            if not any(brick is r for r in removed_list):
                partners.append(brick)
    return partners
