"""
Game State - One turn's snapshot of the whole game.

Bundles the map, every player's holdings and the rule constants, seen
from one player's perspective (`my_id`). The same structure is produced
by the engine protocol adapter and by the local simulator.
"""

from typing import Dict, List, Optional

from game.constants import GameConstants
from game.game_map import GameMap
from game.units import Player, Ship


class GameState:
    """
    Per-turn snapshot. `turn_number` starts at 1 on the first frame.
    """

    def __init__(self, game_map: GameMap, players: Dict[int, Player],
                 my_id: int, constants: Optional[GameConstants] = None,
                 turn_number: int = 0):
        self.game_map = game_map
        self.players = players
        self.my_id = my_id
        self.constants = constants or GameConstants()
        self.turn_number = turn_number
        self.done = False

    @property
    def me(self) -> Player:
        return self.players[self.my_id]

    @property
    def turns_remaining(self) -> int:
        return self.constants.max_turns - self.turn_number

    def all_ships(self) -> List[Ship]:
        return [s for p in self.players.values() for s in p.ships.values()]

    def view(self, player_id: int) -> 'GameState':
        """The same snapshot seen by another player (shares all objects)."""
        state = GameState(self.game_map, self.players, player_id,
                          self.constants, self.turn_number)
        state.done = self.done
        return state

    def rebuild_map_index(self):
        """Re-register every ship and structure on the map's spatial index."""
        self.game_map.clear_entities()
        for player in self.players.values():
            self.game_map.place_structure(player.shipyard)
            for dropoff in player.dropoffs.values():
                self.game_map.place_structure(dropoff)
            for ship in player.ships.values():
                self.game_map.place_ship(ship)

    def get_state_info(self) -> Dict:
        """Summary numbers for logging and simulator results."""
        return {
            'turn': self.turn_number,
            'halite': {pid: p.halite for pid, p in self.players.items()},
            'ships': {pid: len(p.ships) for pid, p in self.players.items()},
            'map_halite': self.game_map.total_halite(),
        }
