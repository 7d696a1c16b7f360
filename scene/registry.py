from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from shapes import Shape

logger = logging.getLogger(__name__)

ItemRef = Union[Shape, str, int]


@dataclass(frozen=True)
class ItemRecord:
    identifier: Optional[str]
    drawable: Shape


class SceneRegistry:
    """
    Ordered item records; index 0 is painted first (bottom), the last
    index is on top.

    Lookups and reorders report absence by returning None. Mutators return
    the registry itself otherwise, so calls can be chained.
    """

    def __init__(self):
        self._records: List[ItemRecord] = []

    # ---- Queries ----
    @property
    def items(self) -> Tuple[ItemRecord, ...]:
        return tuple(self._records)

    def drawables(self) -> Tuple[Shape, ...]:
        return tuple(r.drawable for r in self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        # Chained results are tested with `is None`; an empty registry is
        # still a registry.
        return True

    def __iter__(self) -> Iterator[Shape]:
        return iter(self.drawables())

    def __contains__(self, item: ItemRef) -> bool:
        return self.index(item) is not None

    def get(self, identifier) -> Optional[Shape]:
        key = str(identifier)
        for record in self._records:
            if record.identifier == key:
                return record.drawable
        return None

    def index(self, item: ItemRef) -> Optional[int]:
        """
        Position of a drawable (matched by identity) or of an identifier
        (matched after str() normalization).
        """
        if isinstance(item, Shape):
            for i, record in enumerate(self._records):
                if record.drawable is item:
                    return i
            return None
        key = str(item)
        for i, record in enumerate(self._records):
            if record.identifier == key:
                return i
        return None

    # ---- Mutations ----
    def add(self, drawable: Shape, identifier=None) -> "SceneRegistry":
        """
        Append a record. An existing record with the same identifier is
        removed first, so the new one lands on top.
        """
        if identifier is None:
            self._records.append(ItemRecord(None, drawable))
            return self
        key = str(identifier)
        if self.remove(key) is not None:
            logger.debug("Replaced item %r; new record moved to top", key)
        self._records.append(ItemRecord(key, drawable))
        return self

    def remove(self, item: ItemRef) -> Optional["SceneRegistry"]:
        i = self.index(item)
        if i is None:
            return None
        del self._records[i]
        return self

    def up(self, item: ItemRef) -> Optional["SceneRegistry"]:
        i = self.index(item)
        if i is None:
            return None
        if i < len(self._records) - 1:
            recs = self._records
            recs[i], recs[i + 1] = recs[i + 1], recs[i]
        return self

    def down(self, item: ItemRef) -> Optional["SceneRegistry"]:
        i = self.index(item)
        if i is None:
            return None
        if i > 0:
            recs = self._records
            recs[i], recs[i - 1] = recs[i - 1], recs[i]
        return self

    def top(self, item: ItemRef) -> Optional["SceneRegistry"]:
        i = self.index(item)
        if i is None:
            return None
        self._records.append(self._records.pop(i))
        return self

    def bottom(self, item: ItemRef) -> Optional["SceneRegistry"]:
        i = self.index(item)
        if i is None:
            return None
        self._records.insert(0, self._records.pop(i))
        return self
