"""Threat entity: route following, slow status and damage intake."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from packetguard.core.geometry import Cell, Vector, cell_at, cell_center


SLOW_MULTIPLIER = 0.3


class ThreatVariant(str, Enum):
    STANDARD = "standard"
    RESISTANT = "resistant"
    BOSS = "boss"


class ThreatState(str, Enum):
    ACTIVE = "active"
    DEAD = "dead"
    REACHED = "reached"


@dataclass
class Threat:
    threat_id: str
    variant: ThreatVariant
    route: tuple[Cell, ...]
    tile_size: float
    max_hp: float
    hp: float
    speed: float
    reward: int
    life_cost: int = 1
    position: Vector | None = None
    route_index: int = 0
    slowed: bool = False
    state: ThreatState = ThreatState.ACTIVE

    def __post_init__(self) -> None:
        if not self.route:
            raise ValueError("Threat route must contain at least one cell")
        self.route = tuple(Cell(*cell) for cell in self.route)
        if self.position is None:
            self.position = cell_center(self.route[0], self.tile_size)

    @property
    def is_active(self) -> bool:
        return self.state is ThreatState.ACTIVE

    @property
    def current_cell(self) -> Cell:
        return cell_at(self.position, self.tile_size)

    @property
    def waypoint(self) -> Vector | None:
        """Centre of the cell the threat is heading to, if any."""
        if self.route_index + 1 >= len(self.route):
            return None
        return cell_center(self.route[self.route_index + 1], self.tile_size)

    def update(self) -> None:
        if not self.is_active:
            return

        target = self.waypoint
        if target is None:
            self.state = ThreatState.REACHED
            self.slowed = False
            return

        step = self.speed * (SLOW_MULTIPLIER if self.slowed else 1.0)
        direction = (target - self.position).normalized()
        self.position = self.position + direction.scaled(step)

        if self.position.distance_to(target) < self.speed:
            self.route_index += 1
            if self.route_index >= len(self.route) - 1:
                self.state = ThreatState.REACHED

        # Area-slow defenders re-flag the threat every tick it stays in range.
        self.slowed = False

    def take_damage(self, amount: float) -> bool:
        """Apply damage; returns True only for the hit that kills the threat."""
        if not self.is_active:
            return False
        self.hp -= max(amount, 0.0)
        if self.hp <= 0:
            self.hp = 0
            self.state = ThreatState.DEAD
            return True
        return False

    def set_route(self, route: tuple[Cell, ...]) -> None:
        """Swap in a new route, resuming from the waypoint nearest the current position."""
        if not route:
            raise ValueError("Threat route must contain at least one cell")
        self.route = tuple(Cell(*cell) for cell in route)
        self.route_index = min(
            range(len(self.route)),
            key=lambda idx: self.position.distance_to(cell_center(self.route[idx], self.tile_size)),
        )
        if self.is_active and self.route_index >= len(self.route) - 1:
            self.state = ThreatState.REACHED

    def snapshot(self) -> dict[str, Any]:
        return {
            "threat_id": self.threat_id,
            "variant": self.variant.value,
            "x": self.position.x,
            "y": self.position.y,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "slowed": self.slowed,
            "state": self.state.value,
        }
