"""Cell and continuous-position helpers shared by every system."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import NamedTuple


class Cell(NamedTuple):
    col: int
    row: int


@dataclass(frozen=True)
class Vector:
    x: float
    y: float

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> Vector:
        return Vector(self.x * factor, self.y * factor)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> Vector:
        length = self.length()
        if length == 0:
            return Vector(0.0, 0.0)
        return Vector(self.x / length, self.y / length)

    def distance_to(self, other: Vector) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


def cell_center(cell: Cell, tile_size: float) -> Vector:
    return Vector(cell.col * tile_size + tile_size / 2, cell.row * tile_size + tile_size / 2)


def cell_at(position: Vector, tile_size: float) -> Cell:
    return Cell(math.floor(position.x / tile_size), math.floor(position.y / tile_size))
