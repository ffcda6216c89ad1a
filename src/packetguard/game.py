"""Main game orchestrator for PacketGuard."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from packetguard.config import GameContent, load_game_content
from packetguard.core.event_bus import EventBus
from packetguard.core.game_state import GameState
from packetguard.core.geometry import Cell
from packetguard.entities.defender import UpgradeRejection
from packetguard.entities.threat import Threat, ThreatState, ThreatVariant
from packetguard.systems.combat_system import CombatSystem
from packetguard.systems.economy_system import EconomySystem
from packetguard.systems.grid import Grid
from packetguard.systems.life_system import LifeSystem
from packetguard.systems.pathing import Route
from packetguard.systems.placement_system import PlacementOutcome, PlacementSystem
from packetguard.systems.wave_system import WaveSystem


MAX_GAME_SPEED = 10


@dataclass
class UpgradeOutcome:
    accepted: bool
    reason: UpgradeRejection | None = None
    cost: int = 0
    level: int = 0


class PacketGuardGame:
    """Engine-agnostic routing and simulation core."""

    def __init__(self, data_dir: Path | None = None, content: GameContent | None = None) -> None:
        self.content = content or load_game_content(base_data_dir=data_dir)
        self.events = EventBus()
        self.state = GameState.BOOT
        self.game_speed = 1
        self.reset()

    def reset(self) -> None:
        map_cfg = self.content.map_config
        self.grid = Grid(map_cfg.cols, map_cfg.rows, map_cfg.start, map_cfg.end, map_cfg.obstacles)
        self.placement = PlacementSystem(self.grid, map_cfg.tile_size)
        self.economy = EconomySystem(credits=map_cfg.starting_credits)
        self.life = LifeSystem(lives=map_cfg.starting_lives)
        self.wave_system = WaveSystem(self.content.waves)
        self.combat = CombatSystem()
        self.threats: list[Threat] = []
        self.ticks = 0
        self._threat_counter = 0

        self.state = GameState.RUNNING
        self.events.emit("game_reset", map_id=map_cfg.map_id)
        logger.debug("Session reset on {} ({} cell route)", map_cfg.map_id, len(self.route))

    @property
    def route(self) -> Route:
        return self.placement.route

    @property
    def credits(self) -> int:
        return self.economy.credits

    @property
    def lives(self) -> int:
        return self.life.lives

    @property
    def wave(self) -> int:
        return self.wave_system.wave

    @property
    def active_threat_count(self) -> int:
        """Threats still on the field; killed ones linger until the next threat pass."""
        return sum(1 for threat in self.threats if threat.is_active)

    def place_defender(self, cell: Cell, defender_id: str) -> PlacementOutcome:
        self._require_live_session()
        config = self.content.defender_configs.get(defender_id)
        if config is None:
            raise ValueError(f"Unknown defender_id: {defender_id}")

        outcome = self.placement.try_place(cell, config, self.threats, self.economy)
        if not outcome.accepted:
            self.events.emit("placement_rejected", defender_id=defender_id, cell=tuple(cell), reason=outcome.reason.value)
            return outcome

        defender = outcome.defender
        self.events.emit("credits_changed", delta=-config.cost, reason="defender_build", credits=self.credits)
        self.events.emit(
            "defender_placed",
            defender_instance_id=defender.defender_instance_id,
            defender_id=defender_id,
            cell=tuple(defender.cell),
        )
        self.events.emit("route_changed", length=len(outcome.route), rerouted=len(outcome.unit_routes))
        return outcome

    def sell_defender(self, cell: Cell) -> int:
        self._require_live_session()
        defender = self.placement.remove(cell)
        refund = defender.refund_value
        self.economy.reward(refund)
        self.events.emit("credits_changed", delta=refund, reason="defender_sale", credits=self.credits)
        self.events.emit(
            "defender_sold",
            defender_instance_id=defender.defender_instance_id,
            defender_id=defender.defender_id,
            cell=tuple(defender.cell),
        )
        self.events.emit("route_changed", length=len(self.route), rerouted=0)
        return refund

    def upgrade_defender(self, cell: Cell) -> UpgradeOutcome:
        self._require_live_session()
        defender = self.placement.get_defender(cell)
        if defender is None:
            raise ValueError(f"No defender at cell: {tuple(cell)}")

        rejection = defender.check_upgrade(self.economy)
        if rejection is not None:
            self.events.emit(
                "upgrade_rejected",
                defender_instance_id=defender.defender_instance_id,
                reason=rejection.value,
            )
            return UpgradeOutcome(accepted=False, reason=rejection, level=defender.level)

        cost = defender.upgrade(self.economy)
        self.events.emit("credits_changed", delta=-cost, reason="defender_upgrade", credits=self.credits)
        self.events.emit(
            "defender_upgraded",
            defender_instance_id=defender.defender_instance_id,
            level=defender.level,
            damage=defender.damage,
        )
        return UpgradeOutcome(accepted=True, cost=cost, level=defender.level)

    def start_next_wave(self) -> None:
        self._require_live_session()
        runtime = self.wave_system.start_next_wave()
        self.events.emit(
            "wave_start",
            wave=runtime.wave_number,
            planned_threats=runtime.remaining,
            boss=runtime.has_boss,
        )

    def spawn(self, variant: ThreatVariant, wave_level: int) -> Threat:
        """Create a threat on the current route, scaled for ``wave_level``."""
        threat_cfg = self.content.threat_configs[variant]
        scaling = self.content.threat_scaling
        max_hp = scaling.base_hp * scaling.hp_growth ** (wave_level - 1) * threat_cfg.hp_multiplier
        self._threat_counter += 1
        threat = Threat(
            threat_id=f"threat_{self._threat_counter:04d}",
            variant=variant,
            route=self.route,
            tile_size=self.content.map_config.tile_size,
            max_hp=max_hp,
            hp=max_hp,
            speed=(scaling.base_speed + wave_level * scaling.speed_per_level) * threat_cfg.speed_multiplier,
            reward=(scaling.base_reward + wave_level) * threat_cfg.reward_factor,
            life_cost=threat_cfg.life_cost,
        )
        self.threats.append(threat)
        self.events.emit("threat_spawned", threat_id=threat.threat_id, variant=variant.value, wave=wave_level)
        return threat

    def pause(self) -> None:
        if self.state == GameState.RUNNING:
            self.state = GameState.PAUSED

    def resume(self) -> None:
        if self.state == GameState.PAUSED:
            self.state = GameState.RUNNING

    def set_speed(self, speed: int) -> None:
        self.game_speed = max(1, min(MAX_GAME_SPEED, speed))

    def advance(self) -> None:
        """Run one frame's worth of ticks at the current game speed."""
        for _ in range(self.game_speed):
            self.tick()

    def tick(self) -> None:
        if self.state != GameState.RUNNING:
            return
        self.ticks += 1

        wave_before = self.wave_system.wave
        for variant in self.wave_system.tick(active_threats=self.active_threat_count):
            self.spawn(variant, self.wave_system.wave)
        if self.wave_system.wave != wave_before:
            self.events.emit(
                "wave_start",
                wave=self.wave_system.wave,
                planned_threats=self.wave_system.planned_count(self.wave_system.wave),
                boss=self.wave_system.is_boss_wave(self.wave_system.wave),
            )

        combat_outcome = self.combat.defenders_act(self.placement.all_defenders(), self.threats)
        if combat_outcome.credits_generated:
            self.economy.reward(combat_outcome.credits_generated)
            self.events.emit(
                "credits_changed",
                delta=combat_outcome.credits_generated,
                reason="generator_yield",
                credits=self.credits,
            )

        survivors: list[Threat] = []
        for threat in self.threats:
            threat.update()
            if threat.state == ThreatState.REACHED:
                self._on_threat_reached(threat)
            elif threat.state == ThreatState.DEAD:
                self._on_threat_killed(threat)
            else:
                survivors.append(threat)
        self.threats = survivors

        if self.life.is_depleted:
            self.state = GameState.GAME_OVER
            self.events.emit("game_over", wave=self.wave, ticks=self.ticks)
            logger.info("Game over at wave {} after {} ticks", self.wave, self.ticks)
            return

        projectile_outcome = self.combat.update_projectiles({t.threat_id: t for t in self.threats})
        if projectile_outcome.hits:
            self.events.emit("projectile_hits", hits=projectile_outcome.hits)

    def threats_remaining_current_wave(self) -> int:
        return self.active_threat_count + self.wave_system.threats_remaining_to_spawn()

    def snapshot(self) -> dict[str, int | str]:
        defenders = self.placement.all_defenders()
        return {
            "state": self.state.value,
            "credits": self.credits,
            "lives": self.lives,
            "wave": self.wave,
            "threats_alive": self.active_threat_count,
            "threats_remaining": self.threats_remaining_current_wave(),
            "defenders_built": len(defenders),
            "generators": sum(1 for d in defenders if d.config.behavior == "resource_generator"),
            "ticks": self.ticks,
        }

    def render_state(self) -> dict[str, Any]:
        return {
            "route": [tuple(cell) for cell in self.route],
            "threats": [threat.snapshot() for threat in self.threats],
            "defenders": [defender.snapshot() for defender in self.placement.all_defenders()],
            "projectiles": [projectile.snapshot() for projectile in self.combat.projectiles],
        }

    def _on_threat_reached(self, threat: Threat) -> None:
        if self.life.is_depleted:
            return
        self.life.lose(threat.life_cost)
        self.events.emit("threat_reached", threat_id=threat.threat_id, variant=threat.variant.value)
        self.events.emit("lives_changed", delta=-threat.life_cost, lives=self.lives)

    def _on_threat_killed(self, threat: Threat) -> None:
        self.economy.reward(threat.reward)
        self.events.emit("threat_killed", threat_id=threat.threat_id, variant=threat.variant.value)
        self.events.emit("credits_changed", delta=threat.reward, reason="threat_kill", credits=self.credits)

    def _require_live_session(self) -> None:
        if self.state == GameState.GAME_OVER:
            raise ValueError("Game is over; reset to continue")
