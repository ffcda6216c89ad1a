"""Occupancy grid shared by the pathfinder and the placement validator."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from packetguard.core.geometry import Cell


class CellState(str, Enum):
    EMPTY = "empty"
    BLOCKED = "blocked"


@dataclass
class GridTransaction:
    """Handle yielded by ``Grid.speculative_block``; call ``commit`` to keep the mark."""

    committed: bool = False

    def commit(self) -> None:
        self.committed = True


class Grid:
    """Single-writer occupancy map. Start and end cells are never blocked."""

    def __init__(
        self,
        cols: int,
        rows: int,
        start: Cell,
        end: Cell,
        obstacles: Iterable[Cell] = (),
    ) -> None:
        if cols <= 0 or rows <= 0:
            raise ValueError("Grid dimensions must be positive")
        self.cols = cols
        self.rows = rows
        self.start = Cell(*start)
        self.end = Cell(*end)
        for endpoint in (self.start, self.end):
            if not self.in_bounds(endpoint):
                raise ValueError(f"Endpoint outside grid: {endpoint}")

        self._cells = [[CellState.EMPTY] * cols for _ in range(rows)]
        for cell in obstacles:
            cell = Cell(*cell)
            if cell in (self.start, self.end):
                raise ValueError(f"Obstacle on start/end cell: {cell}")
            self._set(cell, CellState.BLOCKED)

    def in_bounds(self, cell: Cell) -> bool:
        return 0 <= cell[0] < self.cols and 0 <= cell[1] < self.rows

    def is_blocked(self, cell: Cell) -> bool:
        if not self.in_bounds(cell):
            raise ValueError(f"Cell outside grid: {cell}")
        return self._cells[cell[1]][cell[0]] is CellState.BLOCKED

    def block(self, cell: Cell) -> None:
        if Cell(*cell) in (self.start, self.end):
            raise ValueError(f"Cannot block start/end cell: {cell}")
        self._set(cell, CellState.BLOCKED)

    def unblock(self, cell: Cell) -> None:
        self._set(cell, CellState.EMPTY)

    @contextmanager
    def speculative_block(self, cell: Cell) -> Iterator[GridTransaction]:
        """Block ``cell`` for the duration of the block, reverting unless committed."""
        if self.is_blocked(cell):
            raise ValueError(f"Cell already blocked: {cell}")
        self.block(cell)
        txn = GridTransaction()
        try:
            yield txn
        finally:
            if not txn.committed:
                self.unblock(cell)

    def occupancy(self) -> tuple[tuple[CellState, ...], ...]:
        return tuple(tuple(row) for row in self._cells)

    def _set(self, cell: Cell, state: CellState) -> None:
        if not self.in_bounds(cell):
            raise ValueError(f"Cell outside grid: {cell}")
        self._cells[cell[1]][cell[0]] = state
