# drapes/entries.py
"""Measured window units and the ordered collection an order keeps them in."""

import uuid
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Sequence, Tuple

from drapes.catalog import LINING_TYPES, STITCH_TYPES
from drapes.estimation import estimate
from drapes.numbers import non_negative, round2


def new_window_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class WindowEntry:
    """One window with its fabrication inputs and derived quantities.

    Instances are immutable.  Editing a window means building a new entry
    with ``WindowEntry.create`` and swapping it in, so the derived numbers
    always belong to the inputs stored next to them.
    """
    window_id: str
    window_name: str
    stitch_type: str
    lining_type: str
    width: float
    height: float
    panels: int
    quantity: float
    track: float
    sqft: float
    notes: str = ''
    images: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def create(
        cls,
        stitch_type: Optional[str] = None,
        width=0,
        height=0,
        lining_type: Optional[str] = None,
        window_name: Optional[str] = None,
        notes: Optional[str] = None,
        images: Sequence[str] = (),
        window_id: Optional[str] = None,
    ) -> 'WindowEntry':
        stitch_type = stitch_type or STITCH_TYPES[0]
        width = non_negative(width)
        height = non_negative(height)
        result = estimate(stitch_type, width, height)
        return cls(
            window_id=window_id or new_window_id(),
            window_name=window_name or 'Window',
            stitch_type=stitch_type,
            lining_type=lining_type or LINING_TYPES[0],
            width=width,
            height=height,
            panels=result.panels,
            quantity=result.quantity,
            track=result.track,
            sqft=result.sqft,
            notes=notes or '',
            images=tuple(images or ()),
        )

    def recomputed(self) -> 'WindowEntry':
        result = estimate(self.stitch_type, self.width, self.height)
        return replace(self, **result._asdict())

    def to_dict(self) -> dict:
        return {
            'window_id': self.window_id,
            'window_name': self.window_name,
            'stitch_type': self.stitch_type,
            'lining_type': self.lining_type,
            'width': self.width,
            'height': self.height,
            'panels': self.panels,
            'quantity': self.quantity,
            'track': self.track,
            'sqft': self.sqft,
            'notes': self.notes,
            'images': list(self.images),
        }


class WindowEntryRepository:
    """Ordered windows of one order, addressed by position."""

    def __init__(self, entries: Sequence[WindowEntry] = ()) -> None:
        self._entries: List[WindowEntry] = list(entries)

    @classmethod
    def from_entries(cls, entries: Sequence[WindowEntry]) -> 'WindowEntryRepository':
        return cls(entries)

    def __iter__(self) -> Iterator[WindowEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, position: int) -> WindowEntry:
        self._check(position)
        return self._entries[position]

    def add(self, **inputs) -> WindowEntry:
        inputs.pop('window_id', None)
        entry = WindowEntry.create(**inputs)
        self._entries.append(entry)
        return entry

    def update(self, position: int, **inputs) -> WindowEntry:
        """Replace the entry at ``position``; the window keeps its id."""
        self._check(position)
        inputs['window_id'] = self._entries[position].window_id
        entry = WindowEntry.create(**inputs)
        self._entries[position] = entry
        return entry

    def remove(self, position: int) -> WindowEntry:
        self._check(position)
        return self._entries.pop(position)

    def recompute(self) -> None:
        self._entries = [e.recomputed() for e in self._entries]

    def total_quantity(self) -> float:
        return round2(sum(e.quantity for e in self._entries))

    def total_sqft(self) -> float:
        return round2(sum(e.sqft for e in self._entries))

    def to_list(self) -> list:
        return [e.to_dict() for e in self._entries]

    def _check(self, position: int) -> None:
        if not 0 <= position < len(self._entries):
            raise IndexError(f'no window at position {position}')
