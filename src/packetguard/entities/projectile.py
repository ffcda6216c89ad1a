"""Homing projectile fired by direct-damage defenders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from packetguard.core.geometry import Vector
from packetguard.entities.threat import Threat


@dataclass
class Projectile:
    position: Vector
    target_id: str
    damage: float
    speed: float
    alive: bool = True

    def update(self, threats: Mapping[str, Threat]) -> bool:
        """Advance one tick toward the target; returns True when it lands a hit.

        The target is looked up by id each tick, so a removed or dead target
        simply retires the projectile.
        """
        if not self.alive:
            return False

        target = threats.get(self.target_id)
        if target is None or not target.is_active:
            self.alive = False
            return False

        direction = (target.position - self.position).normalized()
        self.position = self.position + direction.scaled(self.speed)

        if self.position.distance_to(target.position) < self.speed:
            target.take_damage(self.damage)
            self.alive = False
            return True
        return False

    def snapshot(self) -> dict[str, Any]:
        return {"x": self.position.x, "y": self.position.y, "target_id": self.target_id}
