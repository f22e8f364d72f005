"""
Game Map - Toroidal grid of halite cells with ships and structures.

Each cell holds:
- An amount of halite
- At most one ship
- Optionally a structure (shipyard or dropoff)

Coordinates wrap around both edges, so every cell has four neighbours.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from game.actions import Direction, DIR_OFFSETS


@dataclass(frozen=True)
class Position:
    """An (x, y) grid coordinate. Not normalized until passed through a map."""
    x: int
    y: int

    def directional_offset(self, direction: Direction) -> 'Position':
        dx, dy = DIR_OFFSETS[direction]
        return Position(self.x + dx, self.y + dy)

    def __repr__(self):
        return f"Position({self.x}, {self.y})"


class MapCell:
    """View of a single cell: halite amount plus whatever sits on it."""

    def __init__(self, game_map: 'GameMap', position: Position):
        self._map = game_map
        self.position = position

    @property
    def halite_amount(self) -> int:
        return int(self._map.halite[self.position.y, self.position.x])

    @property
    def ship(self):
        return self._map.ships.get(self.position)

    @property
    def structure(self):
        return self._map.structures.get(self.position)

    @property
    def is_empty(self) -> bool:
        return self.ship is None and self.structure is None

    @property
    def is_occupied(self) -> bool:
        return self.ship is not None

    @property
    def has_structure(self) -> bool:
        return self.structure is not None

    def __repr__(self):
        return f"MapCell({self.position}, halite={self.halite_amount})"


class GameMap:
    """Grid-based halite map with wrap-around edges."""

    def __init__(self, width: int, height: int,
                 halite: Optional[np.ndarray] = None):
        self.width = width
        self.height = height
        if halite is None:
            halite = np.zeros((height, width), dtype=np.int64)
        if halite.shape != (height, width):
            raise ValueError(f"Halite grid shape {halite.shape} does not "
                             f"match {width}x{height} map")
        self.halite = halite
        # Spatial indexes: normalized Position -> entity
        self.ships = {}
        self.structures = {}

    @property
    def area(self) -> int:
        return self.width * self.height

    def normalize(self, position: Position) -> Position:
        return Position(position.x % self.width, position.y % self.height)

    def index(self, position: Position) -> int:
        """Flat cell index (y * width + x) of a position."""
        p = self.normalize(position)
        return p.y * self.width + p.x

    def at(self, position) -> MapCell:
        """Cell at a position, or at an entity's position."""
        if not isinstance(position, Position):
            position = position.position
        return MapCell(self, self.normalize(position))

    def halite_at(self, position: Position) -> int:
        p = self.normalize(position)
        return int(self.halite[p.y, p.x])

    def set_halite(self, position: Position, amount: int):
        p = self.normalize(position)
        self.halite[p.y, p.x] = amount

    def is_occupied(self, position: Position) -> bool:
        return self.normalize(position) in self.ships

    def calculate_distance(self, source: Position, target: Position) -> int:
        """Manhattan distance on the torus."""
        s = self.normalize(source)
        t = self.normalize(target)
        dx = abs(s.x - t.x)
        dy = abs(s.y - t.y)
        return min(dx, self.width - dx) + min(dy, self.height - dy)

    def neighbor(self, position: Position, direction: Direction) -> Position:
        return self.normalize(position.directional_offset(direction))

    def total_halite(self) -> int:
        return int(self.halite.sum())

    def clear_entities(self):
        """Drop ship and structure indexes before a new frame is applied."""
        self.ships.clear()
        self.structures.clear()

    def place_ship(self, ship):
        self.ships[self.normalize(ship.position)] = ship

    def place_structure(self, structure):
        self.structures[self.normalize(structure.position)] = structure
