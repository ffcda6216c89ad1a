"""Config loading and validation for PacketGuard."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import json

from packetguard.core.geometry import Cell
from packetguard.entities.threat import ThreatVariant


BEHAVIOR_KEYS = {"direct_damage", "area_slow", "resource_generator", "passive"}


@dataclass
class MapConfig:
    map_id: str
    tile_size: float
    cols: int
    rows: int
    start: Cell
    end: Cell
    obstacles: list[Cell]
    starting_credits: int
    starting_lives: int


@dataclass
class DefenderConfig:
    defender_id: str
    display_name: str
    behavior: str
    cost: int
    range: float = 0.0
    damage: int = 0
    cooldown: int = 0
    bullet_speed: float = 0.0
    yield_amount: int = 0
    max_count: int | None = None


@dataclass
class ThreatConfig:
    variant: ThreatVariant
    hp_multiplier: float
    speed_multiplier: float
    reward_factor: int
    life_cost: int


@dataclass
class ThreatScaling:
    base_hp: float = 40.0
    hp_growth: float = 1.2
    base_speed: float = 1.0
    speed_per_level: float = 0.2
    base_reward: int = 10


@dataclass
class WaveConfig:
    auto_start_interval: int
    spawn_interval: int
    boss_delay: int
    base_count: int
    count_per_wave: int
    boss_every: int
    resistant_every: int


@dataclass
class GameContent:
    map_config: MapConfig
    defender_configs: dict[str, DefenderConfig]
    threat_configs: dict[ThreatVariant, ThreatConfig]
    threat_scaling: ThreatScaling
    waves: WaveConfig


DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


def _load_json(path: Path) -> dict | list:
    if not path.exists():
        raise ValueError(f"Missing config file: {path}")
    return json.loads(path.read_text())


def _require_keys(data: dict, keys: set[str], context: str) -> None:
    missing = keys - set(data.keys())
    if missing:
        raise ValueError(f"{context}: missing keys {sorted(missing)}")


def _parse_obstacles(raw: list[dict]) -> list[Cell]:
    cells: list[Cell] = []
    for entry in raw:
        if "row_from" in entry:
            _require_keys(entry, {"col", "row_from", "row_to"}, f"obstacle {entry!r}")
            col = int(entry["col"])
            for row in range(int(entry["row_from"]), int(entry["row_to"]) + 1):
                cells.append(Cell(col, row))
        else:
            _require_keys(entry, {"col", "row"}, f"obstacle {entry!r}")
            cells.append(Cell(int(entry["col"]), int(entry["row"])))
    return cells


def _validate_map(map_config: MapConfig) -> None:
    if map_config.tile_size <= 0:
        raise ValueError("tile_size must be positive")
    if map_config.cols <= 0 or map_config.rows <= 0:
        raise ValueError("cols and rows must be positive")
    if map_config.starting_credits < 0:
        raise ValueError("starting_credits must be non-negative")
    if map_config.starting_lives <= 0:
        raise ValueError("starting_lives must be positive")
    for name, cell in (("start", map_config.start), ("end", map_config.end)):
        if not (0 <= cell.col < map_config.cols and 0 <= cell.row < map_config.rows):
            raise ValueError(f"{name} cell {tuple(cell)} is outside the grid")
        if cell in map_config.obstacles:
            raise ValueError(f"{name} cell {tuple(cell)} is covered by an obstacle")


def load_map_config(path: Path) -> MapConfig:
    map_raw = _load_json(path)
    _require_keys(
        map_raw,
        {
            "map_id",
            "tile_size",
            "cols",
            "rows",
            "start",
            "end",
            "obstacles",
            "starting_credits",
            "starting_lives",
        },
        path.stem,
    )
    map_config = MapConfig(
        map_id=map_raw["map_id"],
        tile_size=float(map_raw["tile_size"]),
        cols=int(map_raw["cols"]),
        rows=int(map_raw["rows"]),
        start=Cell(int(map_raw["start"]["col"]), int(map_raw["start"]["row"])),
        end=Cell(int(map_raw["end"]["col"]), int(map_raw["end"]["row"])),
        obstacles=_parse_obstacles(map_raw["obstacles"]),
        starting_credits=int(map_raw["starting_credits"]),
        starting_lives=int(map_raw["starting_lives"]),
    )
    _validate_map(map_config)
    return map_config


def load_game_content(base_data_dir: Path | None = None) -> GameContent:
    data_dir = base_data_dir or DEFAULT_DATA_DIR

    map_config = load_map_config(data_dir / "map.json")

    defenders_raw = _load_json(data_dir / "defenders.json")
    defender_configs: dict[str, DefenderConfig] = {}
    for defender in defenders_raw:
        _require_keys(defender, {"defender_id", "display_name", "behavior", "cost"}, f"defender {defender!r}")
        if defender["behavior"] not in BEHAVIOR_KEYS:
            raise ValueError(f"Unknown defender behavior: {defender['behavior']}")
        if "upgradable" in defender:
            raise ValueError(f"{defender['defender_id']}: upgradability follows the behavior, drop 'upgradable'")
        max_count = defender.get("max_count")
        cfg = DefenderConfig(
            defender_id=defender["defender_id"],
            display_name=defender["display_name"],
            behavior=defender["behavior"],
            cost=int(defender["cost"]),
            range=float(defender.get("range", 0.0)),
            damage=int(defender.get("damage", 0)),
            cooldown=int(defender.get("cooldown", 0)),
            bullet_speed=float(defender.get("bullet_speed", 0.0)),
            yield_amount=int(defender.get("yield_amount", 0)),
            max_count=None if max_count is None else int(max_count),
        )
        if cfg.cost < 0:
            raise ValueError(f"{cfg.defender_id}: cost must be non-negative")
        if cfg.behavior == "direct_damage" and cfg.bullet_speed <= 0:
            raise ValueError(f"{cfg.defender_id}: bullet_speed must be positive")
        defender_configs[cfg.defender_id] = cfg

    threats_raw = _load_json(data_dir / "threats.json")
    _require_keys(threats_raw, {"scaling", "variants"}, "threats")
    scaling_raw = threats_raw["scaling"]
    threat_scaling = ThreatScaling(
        base_hp=float(scaling_raw.get("base_hp", 40.0)),
        hp_growth=float(scaling_raw.get("hp_growth", 1.2)),
        base_speed=float(scaling_raw.get("base_speed", 1.0)),
        speed_per_level=float(scaling_raw.get("speed_per_level", 0.2)),
        base_reward=int(scaling_raw.get("base_reward", 10)),
    )
    threat_configs: dict[ThreatVariant, ThreatConfig] = {}
    for threat in threats_raw["variants"]:
        _require_keys(
            threat,
            {"variant", "hp_multiplier", "speed_multiplier", "reward_factor", "life_cost"},
            f"threat {threat!r}",
        )
        try:
            variant = ThreatVariant(threat["variant"])
        except ValueError:
            raise ValueError(f"Unknown threat variant: {threat['variant']}") from None
        threat_configs[variant] = ThreatConfig(
            variant=variant,
            hp_multiplier=float(threat["hp_multiplier"]),
            speed_multiplier=float(threat["speed_multiplier"]),
            reward_factor=int(threat["reward_factor"]),
            life_cost=int(threat["life_cost"]),
        )
    missing_variants = set(ThreatVariant) - set(threat_configs)
    if missing_variants:
        raise ValueError(f"threats: missing variants {sorted(v.value for v in missing_variants)}")

    waves_raw = _load_json(data_dir / "waves.json")
    wave_keys = {
        "auto_start_interval",
        "spawn_interval",
        "boss_delay",
        "base_count",
        "count_per_wave",
        "boss_every",
        "resistant_every",
    }
    _require_keys(waves_raw, wave_keys, "waves")
    waves = WaveConfig(**{key: int(waves_raw[key]) for key in wave_keys})
    if waves.spawn_interval <= 0 or waves.auto_start_interval <= 0:
        raise ValueError("wave intervals must be positive")
    if waves.boss_every <= 0 or waves.resistant_every <= 0:
        raise ValueError("boss_every and resistant_every must be positive")

    return GameContent(
        map_config=map_config,
        defender_configs=defender_configs,
        threat_configs=threat_configs,
        threat_scaling=threat_scaling,
        waves=waves,
    )
