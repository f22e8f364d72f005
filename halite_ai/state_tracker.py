"""
Ship State Tracker - Remembers whether each ship is mining or heading home.

State survives across turns, keyed by ship id. New ids start out MINING;
entries for ships that no longer exist can be pruned against the roster.
"""

import logging
from enum import IntEnum
from typing import Dict, Iterable, List

from game.game_map import Position
from game.units import Ship
from halite_ai.config import PlannerConfig

logger = logging.getLogger(__name__)


class ShipState(IntEnum):
    MINING = 0
    RETURNING = 1


class ShipStateTracker:
    """Per-ship MINING/RETURNING flags owned by the bot for the whole game."""

    def __init__(self, max_halite: int, config: PlannerConfig = None):
        self.config = config or PlannerConfig()
        self.max_halite = max_halite
        self.states: Dict[int, ShipState] = {}

    def update(self, ship: Ship, shipyard_position: Position,
               endgame: bool) -> ShipState:
        """Advance one ship's state for this turn and return it."""
        state = self.states.setdefault(ship.ship_id, ShipState.MINING)

        if endgame:
            state = ShipState.RETURNING
        elif state == ShipState.RETURNING:
            # Delivery done once the ship stands on the shipyard
            if ship.position == shipyard_position:
                state = ShipState.MINING
        elif ship.halite >= self.max_halite * self.config.return_fraction:
            state = ShipState.RETURNING

        if state != self.states[ship.ship_id]:
            logger.debug(f"Ship {ship.ship_id} {self.states[ship.ship_id].name} "
                         f"-> {state.name} (cargo {ship.halite})")
        self.states[ship.ship_id] = state
        return state

    def update_all(self, ships: Iterable[Ship], shipyard_position: Position,
                   endgame: bool):
        for ship in ships:
            self.update(ship, shipyard_position, endgame)

    def is_returning(self, ship_id: int) -> bool:
        return self.states.get(ship_id, ShipState.MINING) == ShipState.RETURNING

    def prune(self, live_ids: Iterable[int]) -> int:
        """Forget ships that are gone. Returns how many entries were dropped."""
        live = set(live_ids)
        dead = [sid for sid in self.states if sid not in live]
        for sid in dead:
            del self.states[sid]
        return len(dead)

    def order_ships(self, ships: Iterable[Ship]) -> List[Ship]:
        """
        Processing order for this turn: returning ships before miners, and
        within each group the ships carrying more halite first. Earlier
        ships win contested cells.
        """
        return sorted(ships, key=lambda s: (not self.is_returning(s.ship_id), -s.halite))

    def __len__(self):
        return len(self.states)
