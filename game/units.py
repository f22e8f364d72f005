"""
Unit System - Ships, structures and players.

- Ship: mobile unit that mines halite and carries it home
- Shipyard: a player's starting structure; deposit point and spawn point
- Dropoff: additional deposit point built from a ship
- Player: owns one shipyard, any number of ships and dropoffs, and a
  halite bank
"""

from dataclasses import dataclass, field
from typing import Dict, List

from game.actions import Direction, MoveCommand
from game.game_map import Position


@dataclass
class Ship:
    """A ship instance. `halite` is the cargo it carries."""
    ship_id: int
    owner: int
    position: Position
    halite: int = 0

    def move(self, direction: Direction) -> MoveCommand:
        return MoveCommand(self.ship_id, direction)

    def stay_still(self) -> MoveCommand:
        return MoveCommand(self.ship_id, Direction.STILL)


@dataclass
class Shipyard:
    owner: int
    position: Position


@dataclass
class Dropoff:
    dropoff_id: int
    owner: int
    position: Position


@dataclass
class Player:
    """A player's holdings as of the current frame."""
    player_id: int
    shipyard: Shipyard
    halite: int = 0
    ships: Dict[int, Ship] = field(default_factory=dict)
    dropoffs: Dict[int, Dropoff] = field(default_factory=dict)

    def get_ships(self) -> List[Ship]:
        return list(self.ships.values())

    def has_ship(self, ship_id: int) -> bool:
        return ship_id in self.ships

    def deposit_points(self) -> List[Position]:
        """Shipyard first, then dropoffs."""
        return [self.shipyard.position] + [d.position for d in self.dropoffs.values()]
