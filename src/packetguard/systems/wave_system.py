"""Tick-driven wave scheduling: IDLE -> SPAWNING -> BOSS_DELAY -> IDLE."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from loguru import logger

from packetguard.config import WaveConfig
from packetguard.entities.threat import ThreatVariant


class WavePhase(str, Enum):
    IDLE = "idle"
    SPAWNING = "spawning"
    BOSS_DELAY = "boss_delay"


@dataclass
class WaveRuntime:
    wave_number: int
    remaining: int
    has_boss: bool
    spawn_cooldown: int
    boss_delay_left: int = 0


class WaveSystem:
    def __init__(self, config: WaveConfig) -> None:
        self._config = config
        self.phase = WavePhase.IDLE
        self.wave = 0
        self.total_spawned = 0
        self._runtime: WaveRuntime | None = None
        self._idle_ticks = config.auto_start_interval

    def planned_count(self, wave_number: int) -> int:
        return self._config.base_count + wave_number * self._config.count_per_wave

    def is_boss_wave(self, wave_number: int) -> bool:
        return wave_number % self._config.boss_every == 0

    def has_active_wave(self) -> bool:
        return self._runtime is not None

    def start_next_wave(self) -> WaveRuntime:
        if self._runtime is not None:
            raise ValueError("Wave already running")
        self.wave += 1
        runtime = WaveRuntime(
            wave_number=self.wave,
            remaining=self.planned_count(self.wave),
            has_boss=self.is_boss_wave(self.wave),
            spawn_cooldown=self._config.spawn_interval,
        )
        self._runtime = runtime
        self.phase = WavePhase.SPAWNING
        logger.info("Wave {} started: {} threats, boss={}", runtime.wave_number, runtime.remaining, runtime.has_boss)
        return runtime

    def tick(self, active_threats: int) -> list[ThreatVariant]:
        """Advance one tick and return the variants to spawn this tick."""
        if self._runtime is None:
            self._idle_ticks -= 1
            if self._idle_ticks <= 0:
                self._idle_ticks = self._config.auto_start_interval
                if active_threats == 0:
                    self.start_next_wave()
            return []

        runtime = self._runtime
        if self.phase is WavePhase.BOSS_DELAY:
            runtime.boss_delay_left -= 1
            if runtime.boss_delay_left > 0:
                return []
            self._finish_wave()
            return [ThreatVariant.BOSS]

        runtime.spawn_cooldown -= 1
        if runtime.spawn_cooldown > 0:
            return []

        runtime.spawn_cooldown = self._config.spawn_interval
        runtime.remaining -= 1
        self.total_spawned += 1
        if self.total_spawned % self._config.resistant_every == 0:
            variant = ThreatVariant.RESISTANT
        else:
            variant = ThreatVariant.STANDARD

        if runtime.remaining <= 0:
            if runtime.has_boss:
                self.phase = WavePhase.BOSS_DELAY
                runtime.boss_delay_left = self._config.boss_delay
            else:
                self._finish_wave()
        return [variant]

    def threats_remaining_to_spawn(self) -> int:
        if self._runtime is None:
            return 0
        return self._runtime.remaining + (1 if self._runtime.has_boss else 0)

    def _finish_wave(self) -> None:
        logger.debug("Wave {} finished spawning", self.wave)
        self._runtime = None
        self.phase = WavePhase.IDLE
        self._idle_ticks = self._config.auto_start_interval
