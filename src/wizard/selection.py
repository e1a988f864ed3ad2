from __future__ import annotations

from shift_sync.models import ReviewShift


class SelectionState:
    """Reviewed shifts plus the user's include/exclude choice for each."""

    def __init__(self, shifts: list[ReviewShift] | None = None):
        self._shifts: list[ReviewShift] = list(shifts or [])

    def __len__(self) -> int:
        return len(self._shifts)

    def toggle(self, index: int) -> ReviewShift:
        if index < 0 or index >= len(self._shifts):
            raise IndexError(f"No shift at index {index}")
        current = self._shifts[index]
        updated = current.model_copy(update={"selected": not current.selected})
        self._shifts[index] = updated
        return updated

    def as_list(self) -> list[ReviewShift]:
        return list(self._shifts)

    def selected(self) -> list[ReviewShift]:
        return [s for s in self._shifts if s.selected]

    @property
    def can_write(self) -> bool:
        return any(s.selected for s in self._shifts)
