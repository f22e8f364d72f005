"""
Turn Planner - Greedy per-ship move assignment.

For each ship, in priority order:
1. Pick a target: the shipyard when returning, otherwise the current cell
   or a richer neighbour if moving there clearly pays off.
2. Pick a direction with a one-step local search (no path search): the
   first free cardinal direction that gets closer to the target.
3. Claim the destination cell so later ships cannot end up on it.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from game.actions import ALL_CARDINALS, Direction, MoveCommand
from game.constants import GameConstants
from game.game_map import GameMap, Position
from game.game_state import GameState
from game.units import Ship
from halite_ai.config import PlannerConfig
from halite_ai.state_tracker import ShipStateTracker

logger = logging.getLogger(__name__)


class ClaimedCells:
    """Cells already promised to a ship this turn, by flat map index."""

    def __init__(self, game_map: GameMap):
        self._map = game_map
        self._cells: Set[int] = set()

    def claim(self, position: Position):
        self._cells.add(self._map.index(position))

    def is_claimed(self, position: Position) -> bool:
        return self._map.index(position) in self._cells

    def __contains__(self, position: Position) -> bool:
        return self.is_claimed(position)

    def __len__(self):
        return len(self._cells)


@dataclass
class ShipPlan:
    """The decision made for one ship this turn."""
    ship: Ship
    target: Position
    direction: Direction
    destination: Position

    @property
    def command(self) -> MoveCommand:
        if self.direction == Direction.STILL:
            return self.ship.stay_still()
        return self.ship.move(self.direction)


class TurnPlanner:
    """Assigns one move per ship, resolving conflicts by processing order."""

    def __init__(self, constants: GameConstants, config: PlannerConfig = None):
        self.constants = constants
        self.config = config or PlannerConfig()

    def move_cost(self, game_map: GameMap, ship: Ship) -> int:
        """Halite a ship pays to leave its current cell."""
        return game_map.halite_at(ship.position) // self.constants.move_cost_ratio

    def select_target(self, game_map: GameMap, ship: Ship, shipyard: Position,
                      returning: bool, can_move: bool) -> Position:
        if not can_move:
            return ship.position
        if returning:
            return shipyard

        move_cost = self.move_cost(game_map, ship)
        gain_stay = game_map.halite_at(ship.position) * self.config.extract_fraction

        best_gain = -1.0
        best_neighbor = ship.position
        for d in ALL_CARDINALS:
            p = game_map.neighbor(ship.position, d)
            # What we would mine there, minus what it costs to get there
            gain = game_map.halite_at(p) * self.config.extract_fraction - move_cost
            if gain > best_gain:
                best_gain = gain
                best_neighbor = p

        if best_gain > gain_stay * self.config.stay_bias:
            return best_neighbor
        return ship.position

    def _is_blocked(self, game_map: GameMap, position: Position,
                    claimed: ClaimedCells) -> bool:
        return claimed.is_claimed(position) or game_map.is_occupied(position)

    def _escape_shipyard(self, game_map: GameMap, ship: Ship,
                         claimed: ClaimedCells) -> Direction:
        """Step off the shipyard onto the richest free neighbour."""
        best = Direction.STILL
        best_halite = -1
        for d in ALL_CARDINALS:
            p = game_map.neighbor(ship.position, d)
            if self._is_blocked(game_map, p, claimed):
                continue
            halite = game_map.halite_at(p)
            if halite > best_halite:
                best_halite = halite
                best = d
        return best

    def _step_toward(self, game_map: GameMap, ship: Ship, target: Position,
                     returning: bool, claimed: ClaimedCells) -> Direction:
        """First free direction that reduces distance to the target."""
        target_dist = game_map.calculate_distance(ship.position, target)
        candidates = []
        for d in ALL_CARDINALS:
            p = game_map.neighbor(ship.position, d)
            if self._is_blocked(game_map, p, claimed):
                continue
            if game_map.calculate_distance(p, target) < target_dist:
                candidates.append(d)
            elif not returning and p == game_map.normalize(target):
                candidates.append(d)
        return candidates[0] if candidates else Direction.STILL

    def plan_ship(self, state: GameState, ship: Ship, returning: bool,
                  endgame: bool, claimed: ClaimedCells) -> ShipPlan:
        game_map = state.game_map
        shipyard = game_map.normalize(state.me.shipyard.position)
        move_cost = self.move_cost(game_map, ship)
        can_move = ship.halite >= move_cost

        target = self.select_target(game_map, ship, shipyard, returning, can_move)

        direction = Direction.STILL
        if target == ship.position:
            # Keep the shipyard clear for spawning and incoming traffic
            if ship.position == shipyard and not endgame and can_move:
                direction = self._escape_shipyard(game_map, ship, claimed)
        elif can_move:
            direction = self._step_toward(game_map, ship, target, returning, claimed)

        if direction != Direction.STILL and ship.halite < move_cost:
            direction = Direction.STILL

        destination = game_map.neighbor(ship.position, direction)
        if claimed.is_claimed(destination):
            direction = Direction.STILL
            destination = game_map.normalize(ship.position)
        claimed.claim(destination)

        logger.debug(f"Ship {ship.ship_id} at ({ship.position.x},{ship.position.y}) "
                     f"cargo={ship.halite} returning={returning} "
                     f"target=({target.x},{target.y}) -> {direction.name}")
        return ShipPlan(ship, target, direction, destination)

    def plan(self, state: GameState, tracker: ShipStateTracker, endgame: bool,
             claimed: Optional[ClaimedCells] = None) -> Tuple[List[ShipPlan], ClaimedCells]:
        """
        Plan every owned ship in priority order. Tracker states must already
        be updated for this turn.
        """
        if claimed is None:
            claimed = ClaimedCells(state.game_map)
        plans = []
        for ship in tracker.order_ships(state.me.get_ships()):
            plans.append(self.plan_ship(state, ship, tracker.is_returning(ship.ship_id),
                                        endgame, claimed))
        return plans, claimed
