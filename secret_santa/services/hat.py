"""Weighted hat used for repeated random draws.

Entries are kept in insertion order together with their running weight total,
so a draw is a binary search over ``cumulative_weight``. After each draw every
entry except the drawn one gains ``ceil(size / count)`` weight, which makes a
just-drawn entry comparatively less likely next time without removing it.
"""

from __future__ import annotations

import bisect
import math
import random
from dataclasses import dataclass, replace
from fractions import Fraction
from operator import attrgetter
from typing import Dict, List, Optional, Tuple, Union

from loguru import logger

from secret_santa.services.errors import DuplicateKeyError, EmptyHatError, NotFoundError

WEIGHT_CEILING = 9999
DOWNSCALE_FACTOR = Fraction(1, 10)


@dataclass
class HatEntry:
    id: str
    weight: int
    cumulative_weight: int


class Hat:
    def __init__(self, rng: Optional[random.Random] = None, strict: bool = True) -> None:
        self.rng = rng or random.Random()
        self.strict = strict
        self.size = 0
        self._entries: List[HatEntry] = []
        self._index: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, id: str) -> bool:
        return self.has(id)

    def __repr__(self) -> str:
        return f"<Hat(size={self.size}, entries={len(self._entries)})>"

    @property
    def entries(self) -> Tuple[HatEntry, ...]:
        return tuple(replace(entry) for entry in self._entries)

    def ids(self) -> List[str]:
        return [entry.id for entry in self._entries]

    def has(self, id: str) -> bool:
        return id in self._index

    def weight(self, id: str) -> int:
        if id not in self._index:
            raise NotFoundError(f"Id {id!r} is not in the hat.")
        return self._entries[self._index[id]].weight

    def insert(self, id: str, weight: int) -> "Hat":
        if self.has(id):
            if self.strict:
                raise DuplicateKeyError(f"Cannot insert id {id!r}: it already exists.")
            logger.debug("Ignoring duplicate hat entry {id}", id=id)
            return self
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
            raise ValueError(f"Weight for {id!r} must be a positive integer, got {weight!r}.")

        self.size += weight
        self._entries.append(HatEntry(id=id, weight=weight, cumulative_weight=self.size))
        self._index[id] = len(self._entries) - 1

        self._enforce_ceiling()
        return self

    def remove(self, id: str) -> "Hat":
        if not self.has(id):
            if self.strict:
                raise NotFoundError(f"Cannot remove id {id!r}: it does not exist.")
            logger.debug("Ignoring removal of missing hat entry {id}", id=id)
            return self

        if len(self._entries) == 1:
            self.size = 0
            self._entries.clear()
            self._index.clear()
            return self

        position = self._index.pop(id)
        del self._entries[position]

        cumulative = 0
        for i, entry in enumerate(self._entries):
            cumulative += entry.weight
            entry.cumulative_weight = cumulative
            # entries before the removed slot keep their positions
            if i >= position:
                self._index[entry.id] = i
        self.size = cumulative
        return self

    def draw(self) -> Optional[str]:
        if self.size == 0:
            if self.strict:
                raise EmptyHatError("Cannot draw from an empty hat.")
            logger.warning("Drawing from an empty hat, nothing to return")
            return None
        if self.size == 1:
            return self._entries[0].id

        target = self.rng.random() * self.size
        position = bisect.bisect_left(self._entries, target, key=attrgetter("cumulative_weight"))
        drawn = self._entries[position]

        count = len(self._entries)
        bump = -(-self.size // count)
        self.size += (count - 1) * bump
        for i, entry in enumerate(self._entries):
            if i != position:
                entry.weight += bump
            entry.cumulative_weight += (i + 1 if i < position else i) * bump

        self._enforce_ceiling()
        return drawn.id

    def rescale(self, factor: Union[int, float, Fraction]) -> "Hat":
        ratio = Fraction(factor).limit_denominator()
        cumulative = 0
        for entry in self._entries:
            entry.weight = math.ceil(entry.weight * ratio)
            cumulative += entry.weight
            entry.cumulative_weight = cumulative
        self.size = cumulative
        return self

    def _enforce_ceiling(self) -> None:
        if self.size <= WEIGHT_CEILING * len(self._entries):
            return
        logger.debug("Hat size {size} too large, downscaling", size=self.size)
        while self.size > WEIGHT_CEILING * len(self._entries):
            self.rescale(DOWNSCALE_FACTOR)
