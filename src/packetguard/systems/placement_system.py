"""Defender placement, sale and route-preserving validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from loguru import logger

from packetguard.config import DefenderConfig
from packetguard.core.geometry import Cell, cell_center
from packetguard.entities.defender import Defender
from packetguard.entities.threat import Threat
from packetguard.systems.economy_system import EconomySystem
from packetguard.systems.grid import Grid
from packetguard.systems.pathing import Route, find_path


class PlacementRejection(str, Enum):
    OCCUPIED = "occupied"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNIT_IN_THE_WAY = "unit_in_the_way"
    ROUTE_SEVERED = "route_severed"
    UNIT_STRANDED = "unit_stranded"
    VARIANT_CAP_REACHED = "variant_cap_reached"


@dataclass
class PlacementOutcome:
    accepted: bool
    reason: PlacementRejection | None = None
    defender: Defender | None = None
    route: Route | None = None
    unit_routes: dict[str, Route] = field(default_factory=dict)

    @classmethod
    def rejected(cls, reason: PlacementRejection) -> "PlacementOutcome":
        return cls(accepted=False, reason=reason)


class PlacementSystem:
    """Owns the grid and the global route; never lets a placement strand a threat."""

    def __init__(self, grid: Grid, tile_size: float) -> None:
        self.grid = grid
        self.tile_size = tile_size
        self._defenders_by_cell: dict[Cell, Defender] = {}
        self._counter = 0
        route = find_path(grid.start, grid.end, grid)
        if route is None:
            raise ValueError("Map has no route from start to end")
        self.route: Route = route

    def is_cell_available(self, cell: Cell) -> bool:
        cell = Cell(*cell)
        return (
            self.grid.in_bounds(cell)
            and not self.grid.is_blocked(cell)
            and cell not in (self.grid.start, self.grid.end)
        )

    def count(self, defender_id: str) -> int:
        return sum(1 for d in self._defenders_by_cell.values() if d.defender_id == defender_id)

    def try_place(
        self,
        cell: Cell,
        config: DefenderConfig,
        threats: Sequence[Threat],
        economy: EconomySystem,
    ) -> PlacementOutcome:
        """Validate and commit a build at ``cell``, charging ``economy`` on success."""
        cell = Cell(*cell)
        if not self.grid.in_bounds(cell):
            raise ValueError(f"Cell outside grid: {tuple(cell)}")

        rejection = self._precheck(cell, config, threats, economy)
        if rejection is not None:
            logger.debug("Placement of {} at {} rejected: {}", config.defender_id, tuple(cell), rejection.value)
            return PlacementOutcome.rejected(rejection)

        live_threats = [t for t in threats if t.is_active]
        with self.grid.speculative_block(cell) as txn:
            route = find_path(self.grid.start, self.grid.end, self.grid)
            if route is None:
                logger.debug("Placement at {} would sever the route", tuple(cell))
                return PlacementOutcome.rejected(PlacementRejection.ROUTE_SEVERED)

            unit_routes: dict[str, Route] = {}
            for threat in live_threats:
                unit_route = find_path(threat.current_cell, self.grid.end, self.grid)
                if unit_route is None:
                    logger.debug("Placement at {} would strand {}", tuple(cell), threat.threat_id)
                    return PlacementOutcome.rejected(PlacementRejection.UNIT_STRANDED)
                unit_routes[threat.threat_id] = unit_route

            txn.commit()

        economy.spend(config.cost)
        self.route = route
        for threat in live_threats:
            threat.set_route(unit_routes[threat.threat_id])

        defender = self._build_defender(cell, config)
        self._defenders_by_cell[cell] = defender
        logger.debug("Placed {} at {}; route length {}", defender.defender_instance_id, tuple(cell), len(route))
        return PlacementOutcome(accepted=True, defender=defender, route=route, unit_routes=unit_routes)

    def remove(self, cell: Cell) -> Defender:
        """Free ``cell`` and refresh the global route. Threat routes stay as they are."""
        cell = Cell(*cell)
        defender = self._defenders_by_cell.pop(cell, None)
        if defender is None:
            raise ValueError(f"No defender at cell: {tuple(cell)}")
        self.grid.unblock(cell)
        route = find_path(self.grid.start, self.grid.end, self.grid)
        if route is None:
            raise ValueError("Route vanished after freeing a cell")
        self.route = route
        logger.debug("Removed {} from {}", defender.defender_instance_id, tuple(cell))
        return defender

    def get_defender(self, cell: Cell) -> Defender | None:
        return self._defenders_by_cell.get(Cell(*cell))

    def all_defenders(self) -> list[Defender]:
        return list(self._defenders_by_cell.values())

    def _precheck(
        self,
        cell: Cell,
        config: DefenderConfig,
        threats: Sequence[Threat],
        economy: EconomySystem,
    ) -> PlacementRejection | None:
        if not self.is_cell_available(cell):
            return PlacementRejection.OCCUPIED
        if any(t.is_active and t.current_cell == cell for t in threats):
            return PlacementRejection.UNIT_IN_THE_WAY
        if not economy.can_afford(config.cost):
            return PlacementRejection.INSUFFICIENT_FUNDS
        if config.max_count is not None and self.count(config.defender_id) >= config.max_count:
            return PlacementRejection.VARIANT_CAP_REACHED
        return None

    def _build_defender(self, cell: Cell, config: DefenderConfig) -> Defender:
        self._counter += 1
        return Defender(
            defender_instance_id=f"defender_{self._counter:03d}",
            config=config,
            cell=cell,
            position=cell_center(cell, self.tile_size),
            damage=config.damage,
            total_investment=config.cost,
        )
