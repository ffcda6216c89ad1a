"""Headless autoplay run of the PacketGuard simulation."""

from __future__ import annotations

import sys

from loguru import logger

from packetguard.core.game_state import GameState
from packetguard.game import PacketGuardGame


MAX_TICKS = 60 * 60 * 10


def _auto_build(game: PacketGuardGame) -> None:
    # Deterministic baseline layout along the first corridor.
    planned_builds = [
        ((2, 3), "packet_filter"),
        ((3, 6), "jammer"),
        ((5, 12), "packet_filter"),
        ((8, 2), "packet_filter"),
        ((1, 14), "ram_generator"),
    ]

    for cell, defender_id in planned_builds:
        outcome = game.place_defender(cell, defender_id)
        if not outcome.accepted:
            logger.debug("Skipped {} at {}: {}", defender_id, cell, outcome.reason.value)


def _auto_upgrade(game: PacketGuardGame) -> None:
    for defender in game.placement.all_defenders():
        if defender.upgrade_cost is None:
            continue
        if game.upgrade_defender(defender.cell).accepted:
            break


def main() -> None:
    logger.remove()
    logger.add(sys.stderr, level="INFO")

    game = PacketGuardGame()
    _auto_build(game)

    while game.state != GameState.GAME_OVER and game.ticks < MAX_TICKS:
        if game.ticks % 600 == 0:
            _auto_upgrade(game)
        game.tick()

    summary = game.snapshot()
    print("PacketGuard Autoplay Run")
    print(f"state={summary['state']}")
    print(f"credits={summary['credits']}")
    print(f"lives={summary['lives']}")
    print(f"wave={summary['wave']}")
    print(f"defenders_built={summary['defenders_built']}")
    print(f"ticks={summary['ticks']}")


if __name__ == "__main__":
    main()
