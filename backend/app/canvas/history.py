"""Undo history — a bounded, append-only snapshot log with a cursor."""

from __future__ import annotations

from PIL import Image


class SnapshotHistory:
    """Snapshots of the canvas; ``cursor`` points at the current state.

    Pushing after an undo discards the redo branch. When the log exceeds
    ``limit`` the oldest snapshots are dropped.
    """

    def __init__(self, limit: int = 30) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._log: list[Image.Image] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._log)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._log) - 1

    def current(self) -> Image.Image | None:
        if self._cursor < 0:
            return None
        return self._log[self._cursor].copy()

    def push(self, image: Image.Image) -> None:
        del self._log[self._cursor + 1:]
        self._log.append(image.copy())
        overflow = len(self._log) - self.limit
        if overflow > 0:
            del self._log[:overflow]
        self._cursor = len(self._log) - 1

    def undo(self) -> Image.Image | None:
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._log[self._cursor].copy()

    def redo(self) -> Image.Image | None:
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._log[self._cursor].copy()

    def clear(self) -> None:
        self._log.clear()
        self._cursor = -1
