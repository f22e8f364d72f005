"""
Spawn Gate - Decides whether the shipyard builds a ship this turn.

Runs after every ship has been planned, so it can see which cells are
already claimed for this turn.
"""

import logging

from game.constants import GameConstants
from game.game_state import GameState
from halite_ai.config import PlannerConfig
from halite_ai.planner import ClaimedCells
from halite_ai.state_tracker import ShipStateTracker

logger = logging.getLogger(__name__)


class SpawnGate:

    def __init__(self, constants: GameConstants, config: PlannerConfig = None):
        self.constants = constants
        self.config = config or PlannerConfig()

    def returning_nearby(self, state: GameState, tracker: ShipStateTracker) -> int:
        """Returning ships within congestion_radius of the shipyard."""
        gm = state.game_map
        shipyard = state.me.shipyard.position
        return sum(
            1 for s in state.me.get_ships()
            if tracker.is_returning(s.ship_id)
            and gm.calculate_distance(s.position, shipyard) < self.config.congestion_radius
        )

    def should_spawn(self, state: GameState, claimed: ClaimedCells,
                     tracker: ShipStateTracker) -> bool:
        me = state.me
        gm = state.game_map
        area = gm.area
        turn = state.turn_number

        ship_count = len(me.ships)
        if ship_count >= self.config.ship_cap(area):
            return False

        if turn > self.constants.max_turns - self.config.stop_buffer(area):
            return False

        if me.halite < self.constants.ship_cost + self.config.reserve(turn):
            return False

        # Shipyard must be free both on the map and in this turn's plan
        shipyard = me.shipyard.position
        if claimed.is_claimed(shipyard) or gm.is_occupied(shipyard):
            return False

        nearby = self.returning_nearby(state, tracker)
        if nearby > self.config.congestion_cap:
            logger.debug(f"Spawn held back: {nearby} ships returning near the shipyard")
            return False

        return True
