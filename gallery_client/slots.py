"""Session-scoped state of the "add design" form.

A FormSession holds the name, type and exactly three photo slots of one
open form. Each photo selection gets a ticket; a normalization result is only
written back while its ticket is still the one the slot is waiting for, so a
slow result can never bring back a photo the user removed or replaced.
"""
import itertools
from dataclasses import dataclass, replace
from typing import Optional

SLOT_COUNT = 3
SOURCES = ("take", "choose")


@dataclass(frozen=True)
class Slot:
    image: Optional[str] = None
    # ticket of the normalization this slot is waiting for
    ticket: Optional[int] = None
    source: Optional[str] = None
    error: Optional[str] = None

    @property
    def filled(self) -> bool:
        return self.image is not None

    @property
    def pending(self) -> bool:
        return self.ticket is not None


@dataclass(frozen=True)
class PendingPhoto:
    session: int
    slot: int
    ticket: int


class FormSession:
    def __init__(self, token: int):
        self.token = token
        self.name = ""
        self.type = ""
        self.slots: list[Slot] = [Slot() for _ in range(SLOT_COUNT)]
        self._tickets = itertools.count(1)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < SLOT_COUNT:
            raise IndexError(f"slot must be between 0 and {SLOT_COUNT - 1}, got {index}")

    def begin(self, index: int, source: str = "choose") -> PendingPhoto:
        """Mark a slot as waiting for a new photo; any earlier wait is superseded."""
        self._check_index(index)
        if source not in SOURCES:
            raise ValueError(f"unknown photo source: {source}")
        ticket = next(self._tickets)
        self.slots[index] = replace(self.slots[index], ticket=ticket, source=source, error=None)
        return PendingPhoto(self.token, index, ticket)

    def awaits(self, pending: PendingPhoto) -> bool:
        return pending.session == self.token and self.slots[pending.slot].ticket == pending.ticket

    def fill(self, pending: PendingPhoto, image: str) -> bool:
        if not self.awaits(pending):
            return False
        self.slots[pending.slot] = Slot(image=image, source=self.slots[pending.slot].source)
        return True

    def fail(self, pending: PendingPhoto, message: str) -> bool:
        """Record a failed photo; a photo already in the slot is kept."""
        if not self.awaits(pending):
            return False
        self.slots[pending.slot] = replace(self.slots[pending.slot], ticket=None, error=message)
        return True

    def reject(self, index: int, message: str) -> None:
        self._check_index(index)
        self.slots[index] = replace(self.slots[index], error=message)

    def clear(self, index: int) -> None:
        """Empty one slot. Other slots keep their positions."""
        self._check_index(index)
        self.slots[index] = Slot()

    @property
    def images(self) -> list[str]:
        """Filled images in slot order."""
        return [slot.image for slot in self.slots if slot.image is not None]

    @property
    def filled_count(self) -> int:
        return len(self.images)

    @property
    def pending_count(self) -> int:
        return sum(1 for slot in self.slots if slot.pending)
