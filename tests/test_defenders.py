import pytest

from packetguard.config import DefenderConfig
from packetguard.core.geometry import Cell, Vector, cell_center
from packetguard.entities.defender import Defender, UpgradeRejection
from packetguard.entities.projectile import Projectile
from packetguard.entities.threat import Threat, ThreatState, ThreatVariant
from packetguard.systems.combat_system import CombatSystem
from packetguard.systems.economy_system import EconomySystem, InsufficientCredits


def _defender(config, cell: Cell = Cell(0, 0)) -> Defender:
    return Defender(
        defender_instance_id="d1",
        config=config,
        cell=cell,
        position=cell_center(cell, 40.0),
        damage=config.damage,
        total_investment=config.cost,
    )


def _threat(cell: Cell, threat_id: str = "t1", hp: float = 40, speed: float = 1.0) -> Threat:
    return Threat(
        threat_id=threat_id,
        variant=ThreatVariant.STANDARD,
        route=(cell, Cell(cell.col + 1, cell.row)),
        tile_size=40.0,
        max_hp=hp,
        hp=hp,
        speed=speed,
        reward=33,
    )


def test_passive_defender_does_nothing(defender_configs) -> None:
    firewall = _defender(defender_configs["firewall"])
    projectiles: list[Projectile] = []
    assert firewall.act([_threat(Cell(1, 0))], projectiles) == 0
    assert projectiles == []


def test_jammer_slows_only_threats_in_range(defender_configs) -> None:
    jammer = _defender(defender_configs["jammer"])
    near = _threat(Cell(2, 0), "near")
    far = _threat(Cell(5, 0), "far")

    assert jammer.act([near, far], []) == 0
    assert near.slowed is True
    assert far.slowed is False


def test_generator_yields_on_its_interval(defender_configs) -> None:
    ram = _defender(defender_configs["ram_generator"])
    yields = [ram.act([], []) for _ in range(61)]
    assert yields == [2] + [0] * 59 + [2]


def test_direct_damage_targets_nearest_threat_in_range(defender_configs) -> None:
    tower = _defender(defender_configs["packet_filter"])
    far = _threat(Cell(2, 0), "far")
    near = _threat(Cell(1, 0), "near")
    projectiles: list[Projectile] = []

    tower.act([far, near], projectiles)

    assert len(projectiles) == 1
    assert projectiles[0].target_id == "near"
    assert projectiles[0].damage == 5
    assert tower.cooldown_left == 30


def test_direct_damage_ties_go_to_first_scanned(defender_configs) -> None:
    tower = _defender(defender_configs["packet_filter"], Cell(1, 1))
    left = _threat(Cell(0, 1), "left")
    right = _threat(Cell(2, 1), "right")
    projectiles: list[Projectile] = []

    tower.act([left, right], projectiles)
    assert projectiles[0].target_id == "left"


def test_direct_damage_holds_fire_without_target(defender_configs) -> None:
    tower = _defender(defender_configs["packet_filter"])
    edge = _threat(Cell(3, 0))  # exactly 120 away, range is exclusive
    projectiles: list[Projectile] = []

    tower.act([edge], projectiles)
    assert projectiles == []
    assert tower.cooldown_left == 0

    edge.position = Vector(139.0, 20.0)
    tower.act([edge], projectiles)
    assert len(projectiles) == 1


def test_direct_damage_ignores_dead_threats(defender_configs) -> None:
    tower = _defender(defender_configs["packet_filter"])
    corpse = _threat(Cell(1, 0))
    corpse.take_damage(1000)
    projectiles: list[Projectile] = []
    tower.act([corpse], projectiles)
    assert projectiles == []


def test_upgrade_path_and_refund(defender_configs) -> None:
    tower = _defender(defender_configs["packet_filter"])
    assert tower.upgrade_cost == 200
    assert tower.check_upgrade(EconomySystem(199)) == UpgradeRejection.INSUFFICIENT_FUNDS
    assert tower.check_upgrade(EconomySystem(200)) is None

    economy = EconomySystem(1000)
    assert tower.upgrade(economy) == 200
    assert (tower.level, tower.damage, tower.total_investment) == (2, 7, 300)
    assert economy.credits == 800
    assert tower.upgrade_cost == 600

    assert tower.upgrade(economy) == 600
    assert (tower.level, tower.damage, tower.total_investment) == (3, 10, 900)
    assert economy.credits == 200
    assert tower.upgrade_cost is None
    assert tower.check_upgrade(EconomySystem(10_000)) == UpgradeRejection.MAX_LEVEL
    assert tower.refund_value == 450


def test_upgrade_without_funds_leaves_defender_untouched(defender_configs) -> None:
    tower = _defender(defender_configs["packet_filter"])
    economy = EconomySystem(150)
    with pytest.raises(InsufficientCredits):
        tower.upgrade(economy)
    assert (tower.level, tower.damage, tower.total_investment) == (1, 5, 100)
    assert economy.credits == 150


def test_utility_defenders_are_not_upgradable(defender_configs) -> None:
    for defender_id in ("jammer", "firewall", "ram_generator"):
        defender = _defender(defender_configs[defender_id])
        assert not defender.upgradable
        assert defender.upgrade_cost is None
        assert defender.check_upgrade(EconomySystem(10_000)) == UpgradeRejection.NOT_UPGRADABLE


def test_upgradability_follows_behavior() -> None:
    plain_gun = DefenderConfig(
        defender_id="plain_gun",
        display_name="Plain Gun",
        behavior="direct_damage",
        cost=50,
        range=100,
        damage=4,
        cooldown=10,
        bullet_speed=8,
    )
    wall = DefenderConfig(defender_id="wall", display_name="Wall", behavior="passive", cost=10)

    assert _defender(plain_gun).upgradable
    assert _defender(plain_gun).upgrade_cost == 100
    assert not _defender(wall).upgradable
    assert _defender(wall).check_upgrade(EconomySystem(10_000)) == UpgradeRejection.NOT_UPGRADABLE
    with pytest.raises(ValueError):
        _defender(wall).upgrade(EconomySystem(10_000))

def test_projectile_homes_and_hits_only_its_target() -> None:
    target = _threat(Cell(2, 0), "target")
    bystander = _threat(Cell(1, 0), "bystander")
    projectile = Projectile(position=Vector(20.0, 20.0), target_id="target", damage=5, speed=10)
    threats = {"target": target, "bystander": bystander}

    hits = [projectile.update(threats) for _ in range(8)]

    assert hits.count(True) == 1
    assert target.hp == 35
    assert bystander.hp == 40
    assert projectile.alive is False


def test_projectile_fizzles_when_target_dead_or_gone() -> None:
    target = _threat(Cell(2, 0))
    target.take_damage(1000)
    projectile = Projectile(position=Vector(20.0, 20.0), target_id="t1", damage=5, speed=10)
    assert projectile.update({"t1": target}) is False
    assert projectile.alive is False

    orphan = Projectile(position=Vector(20.0, 20.0), target_id="t9", damage=5, speed=10)
    assert orphan.update({}) is False
    assert orphan.alive is False


def test_packet_filter_kills_standard_threat_in_eight_hits(defender_configs) -> None:
    tower = _defender(defender_configs["packet_filter"], Cell(1, 0))
    threat = _threat(Cell(2, 0), hp=40, speed=0.0)
    combat = CombatSystem()

    shots = 0
    hits = 0
    health_after_hit: list[float] = []
    for _ in range(1000):
        if threat.state != ThreatState.ACTIVE:
            break
        shots += combat.defenders_act([tower], [threat]).shots_fired
        result = combat.update_projectiles({threat.threat_id: threat})
        if result.hits:
            hits += result.hits
            health_after_hit.append(threat.hp)

    assert threat.state == ThreatState.DEAD
    assert hits == 8
    assert shots == 8
    assert health_after_hit == [35, 30, 25, 20, 15, 10, 5, 0]
    assert combat.projectiles == []
