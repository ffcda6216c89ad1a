from __future__ import annotations

import pytest

from packetguard.config import (
    DefenderConfig,
    GameContent,
    MapConfig,
    ThreatConfig,
    ThreatScaling,
    WaveConfig,
)
from packetguard.core.geometry import Cell
from packetguard.entities.threat import ThreatVariant


def _defenders() -> dict[str, DefenderConfig]:
    configs = [
        DefenderConfig(
            defender_id="packet_filter",
            display_name="Packet Filter",
            behavior="direct_damage",
            cost=100,
            range=120,
            damage=5,
            cooldown=30,
            bullet_speed=10,
        ),
        DefenderConfig(
            defender_id="striker",
            display_name="Striker",
            behavior="direct_damage",
            cost=100,
            range=200,
            damage=50,
            cooldown=5,
            bullet_speed=20,
        ),
        DefenderConfig(defender_id="firewall", display_name="Firewall", behavior="passive", cost=10),
        DefenderConfig(defender_id="jammer", display_name="Jammer", behavior="area_slow", cost=150, range=120),
        DefenderConfig(
            defender_id="ram_generator",
            display_name="RAM Generator",
            behavior="resource_generator",
            cost=300,
            cooldown=60,
            yield_amount=2,
            max_count=2,
        ),
    ]
    return {cfg.defender_id: cfg for cfg in configs}


def _threats() -> dict[ThreatVariant, ThreatConfig]:
    return {
        ThreatVariant.STANDARD: ThreatConfig(ThreatVariant.STANDARD, 1.0, 1.0, 3, 1),
        ThreatVariant.RESISTANT: ThreatConfig(ThreatVariant.RESISTANT, 1.5, 0.8, 6, 1),
        ThreatVariant.BOSS: ThreatConfig(ThreatVariant.BOSS, 5.0, 0.6, 15, 5),
    }


@pytest.fixture
def make_content():
    def _make(
        cols: int = 6,
        rows: int = 3,
        start: tuple[int, int] = (0, 1),
        end: tuple[int, int] = (5, 1),
        obstacles: tuple[tuple[int, int], ...] = (),
        credits: int = 500,
        lives: int = 3,
        waves: WaveConfig | None = None,
    ) -> GameContent:
        map_cfg = MapConfig(
            map_id="test_map",
            tile_size=40.0,
            cols=cols,
            rows=rows,
            start=Cell(*start),
            end=Cell(*end),
            obstacles=[Cell(*cell) for cell in obstacles],
            starting_credits=credits,
            starting_lives=lives,
        )
        return GameContent(
            map_config=map_cfg,
            defender_configs=_defenders(),
            threat_configs=_threats(),
            threat_scaling=ThreatScaling(),
            waves=waves
            or WaveConfig(
                auto_start_interval=100_000,
                spawn_interval=30,
                boss_delay=120,
                base_count=5,
                count_per_wave=2,
                boss_every=5,
                resistant_every=10,
            ),
        )

    return _make


@pytest.fixture
def defender_configs() -> dict[str, DefenderConfig]:
    return _defenders()
