"""Defender entity, its per-tick behaviors and upgrade rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Any, Sequence

from packetguard.config import DefenderConfig
from packetguard.core.geometry import Cell, Vector
from packetguard.entities.projectile import Projectile
from packetguard.entities.threat import Threat
from packetguard.systems.economy_system import EconomySystem


MAX_LEVEL = 3
UPGRADE_DAMAGE_FACTOR = 1.5
UPGRADE_COST_FACTORS = {1: 2, 2: 6}


class UpgradeRejection(str, Enum):
    MAX_LEVEL = "max_level"
    NOT_UPGRADABLE = "not_upgradable"
    INSUFFICIENT_FUNDS = "insufficient_funds"


@dataclass
class Defender:
    defender_instance_id: str
    config: DefenderConfig
    cell: Cell
    position: Vector
    damage: int
    total_investment: int
    level: int = 1
    cooldown_left: int = 0

    @property
    def defender_id(self) -> str:
        return self.config.defender_id

    @property
    def range(self) -> float:
        return self.config.range

    @property
    def behavior(self) -> DefenderBehavior:
        return BEHAVIORS[self.config.behavior]

    @property
    def upgradable(self) -> bool:
        return self.behavior.upgradable

    @property
    def upgrade_cost(self) -> int | None:
        if not self.upgradable or self.level >= MAX_LEVEL:
            return None
        return self.config.cost * UPGRADE_COST_FACTORS[self.level]

    @property
    def refund_value(self) -> int:
        return self.total_investment // 2

    def act(self, threats: Sequence[Threat], projectiles: list[Projectile]) -> int:
        return self.behavior.act(self, threats, projectiles)

    def tick_cooldown(self) -> None:
        if self.cooldown_left > 0:
            self.cooldown_left -= 1

    def can_attack(self) -> bool:
        return self.cooldown_left <= 0

    def reset_cooldown(self) -> None:
        self.cooldown_left = self.config.cooldown

    def check_upgrade(self, economy: EconomySystem) -> UpgradeRejection | None:
        if not self.upgradable:
            return UpgradeRejection.NOT_UPGRADABLE
        if self.level >= MAX_LEVEL:
            return UpgradeRejection.MAX_LEVEL
        if not economy.can_afford(self.upgrade_cost):
            return UpgradeRejection.INSUFFICIENT_FUNDS
        return None

    def upgrade(self, economy: EconomySystem) -> int:
        """Charge ``economy``, raise the level by one and return what it cost."""
        cost = self.upgrade_cost
        if cost is None:
            raise ValueError(f"{self.defender_instance_id} cannot be upgraded")
        economy.spend(cost)
        self.level += 1
        self.damage = math.floor(self.damage * UPGRADE_DAMAGE_FACTOR)
        self.total_investment += cost
        return cost

    def snapshot(self) -> dict[str, Any]:
        return {
            "defender_instance_id": self.defender_instance_id,
            "defender_id": self.defender_id,
            "col": self.cell.col,
            "row": self.cell.row,
            "level": self.level,
            "damage": self.damage,
            "range": self.range,
        }


class DefenderBehavior:
    """Per-tick action for one kind of defender; returns credits produced."""

    upgradable = False

    def act(self, defender: Defender, threats: Sequence[Threat], projectiles: list[Projectile]) -> int:
        return 0


class PassiveBehavior(DefenderBehavior):
    pass


class AreaSlowBehavior(DefenderBehavior):
    def act(self, defender: Defender, threats: Sequence[Threat], projectiles: list[Projectile]) -> int:
        for threat in threats:
            if threat.is_active and defender.position.distance_to(threat.position) < defender.range:
                threat.slowed = True
        return 0


class ResourceGeneratorBehavior(DefenderBehavior):
    def act(self, defender: Defender, threats: Sequence[Threat], projectiles: list[Projectile]) -> int:
        defender.tick_cooldown()
        if not defender.can_attack():
            return 0
        defender.reset_cooldown()
        return defender.config.yield_amount


class DirectDamageBehavior(DefenderBehavior):
    upgradable = True

    def act(self, defender: Defender, threats: Sequence[Threat], projectiles: list[Projectile]) -> int:
        defender.tick_cooldown()
        if not defender.can_attack():
            return 0

        target = self._select_target(defender, threats)
        if target is None:
            return 0

        projectiles.append(
            Projectile(
                position=defender.position,
                target_id=target.threat_id,
                damage=defender.damage,
                speed=defender.config.bullet_speed,
            )
        )
        defender.reset_cooldown()
        return 0

    def _select_target(self, defender: Defender, threats: Sequence[Threat]) -> Threat | None:
        nearest: Threat | None = None
        nearest_dist = math.inf
        for threat in threats:
            if not threat.is_active:
                continue
            dist = defender.position.distance_to(threat.position)
            if dist < defender.range and dist < nearest_dist:
                nearest = threat
                nearest_dist = dist
        return nearest


BEHAVIORS: dict[str, DefenderBehavior] = {
    "passive": PassiveBehavior(),
    "area_slow": AreaSlowBehavior(),
    "resource_generator": ResourceGeneratorBehavior(),
    "direct_damage": DirectDamageBehavior(),
}
