"""
Curve FN - Selection Module

Ordered set of selected (segment id, part) entries with insertion timestamps.
Entries reference segments by id, never by position.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, NamedTuple

from curve_fn import enums as enum
from curve_fn.enums import Part
from curve_fn.types import Milliseconds, Point, SegmentID

if TYPE_CHECKING: from curve_fn.path import Path


class ItemKey(NamedTuple):
    segment_id: SegmentID
    part: Part


@dataclass(slots=True)
class SelectedItem:
    segment_id: SegmentID
    part: Part
    added_at: Milliseconds
    frozen_point: Point | None = None

    @property
    def key(self) -> ItemKey:
        return ItemKey(self.segment_id, self.part)


class SelectionSet:
    def __init__(self) -> None:
        self._items: dict[ItemKey, SelectedItem] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SelectedItem]:
        return iter(list(self._items.values()))

    def __contains__(self, key: ItemKey) -> bool:
        return key in self._items

    def keys(self) -> list[ItemKey]:
        return list(self._items)

    def add(self, key: ItemKey, timestamp: Milliseconds) -> SelectedItem:
        """Add key if missing. Existing entries keep their original timestamp."""
        item = self._items.get(key)
        if item is None:
            item = SelectedItem(key.segment_id, key.part, timestamp)
            self._items[key] = item
        return item

    def remove(self, key: ItemKey) -> None:
        self._items.pop(key, None)

    def toggle(self, key: ItemKey, timestamp: Milliseconds) -> bool:
        """Returns True if the key is selected afterwards."""
        if key in self._items:
            self.remove(key)
            return False
        self.add(key, timestamp)
        return True

    def clear(self) -> None:
        self._items.clear()

    def select_only(self, key: ItemKey, timestamp: Milliseconds) -> SelectedItem:
        self.clear()
        return self.add(key, timestamp)

    def added_at(self, key: ItemKey) -> Milliseconds | None:
        item = self._items.get(key)
        return item.added_at if item is not None else None

    def recently_added(self, key: ItemKey, now: Milliseconds, window: Milliseconds = enum.DEBOUNCE_MS) -> bool:
        """Whether key was added less than `window` ms before `now`."""
        added_at = self.added_at(key)
        if added_at is None: return False
        return now - added_at < window

    def remove_segment(self, segment_id: SegmentID) -> None:
        """Drop every entry (anchor and handles) belonging to a segment."""
        for key in [k for k in self._items if k.segment_id == segment_id]:
            del self._items[key]

    def of_part(self, part: Part) -> list[SelectedItem]:
        return [item for item in self._items.values() if item.part is part]

    def freeze(self, path: Path) -> None:
        """Capture the absolute position of every selected item as its drag origin."""
        for item in self._items.values():
            segment = path.get(item.segment_id)
            item.frozen_point = segment.absolute(item.part) if segment is not None else None

    def unfreeze(self) -> None:
        for item in self._items.values():
            item.frozen_point = None
