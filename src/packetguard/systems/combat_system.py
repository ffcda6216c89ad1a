"""Defender actions and projectile resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from packetguard.entities.defender import Defender
from packetguard.entities.projectile import Projectile
from packetguard.entities.threat import Threat


@dataclass
class CombatTickResult:
    credits_generated: int
    shots_fired: int


@dataclass
class ProjectileTickResult:
    hits: int


class CombatSystem:
    def __init__(self) -> None:
        self.projectiles: list[Projectile] = []

    def defenders_act(self, defenders: Sequence[Defender], threats: Sequence[Threat]) -> CombatTickResult:
        credits_generated = 0
        in_flight = len(self.projectiles)
        for defender in defenders:
            credits_generated += defender.act(threats, self.projectiles)
        return CombatTickResult(
            credits_generated=credits_generated,
            shots_fired=len(self.projectiles) - in_flight,
        )

    def update_projectiles(self, threats_by_id: Mapping[str, Threat]) -> ProjectileTickResult:
        hits = 0
        for projectile in self.projectiles:
            if projectile.update(threats_by_id):
                hits += 1
        self.projectiles = [p for p in self.projectiles if p.alive]
        return ProjectileTickResult(hits=hits)
