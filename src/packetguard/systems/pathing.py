"""Shortest-route search over the occupancy grid."""

from __future__ import annotations

from collections import deque

from packetguard.core.geometry import Cell
from packetguard.systems.grid import Grid


Route = tuple[Cell, ...]

# Visitation order doubles as the tie-break between equal-length routes.
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))


def find_path(source: Cell, destination: Cell, grid: Grid) -> Route | None:
    """Breadth-first search from ``source`` to ``destination``.

    Returns the cells of a shortest 4-connected route, both ends included, or
    ``None`` when the destination cannot be reached. The grid is only read.
    """
    source = Cell(*source)
    destination = Cell(*destination)
    if not (grid.in_bounds(source) and grid.in_bounds(destination)):
        return None
    if source == destination:
        return (source,)

    came_from: dict[Cell, Cell | None] = {source: None}
    frontier: deque[Cell] = deque([source])

    while frontier:
        current = frontier.popleft()
        if current == destination:
            break
        for dc, dr in NEIGHBOR_OFFSETS:
            neighbor = Cell(current.col + dc, current.row + dr)
            if neighbor in came_from or not grid.in_bounds(neighbor):
                continue
            if neighbor != destination and grid.is_blocked(neighbor):
                continue
            came_from[neighbor] = current
            frontier.append(neighbor)

    if destination not in came_from:
        return None

    route: list[Cell] = []
    step: Cell | None = destination
    while step is not None:
        route.append(step)
        step = came_from[step]
    route.reverse()
    return tuple(route)
