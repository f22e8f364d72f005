"""
Action System - Directions and the commands a bot sends to the engine.

Each ship can be given one command per turn:
  m <ship_id> <n|s|e|w|o>   move (o = stay still)
Each shipyard can be given one spawn command per turn:
  g

Commands are serialized as space-separated tokens on a single line.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import List, Tuple


class Direction(IntEnum):
    NORTH = 0
    SOUTH = 1
    EAST = 2
    WEST = 3
    STILL = 4


# Direction offsets: (dx, dy)
DIR_OFFSETS = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
    Direction.STILL: (0, 0),
}

DIR_CHARS = {
    Direction.NORTH: 'n',
    Direction.SOUTH: 's',
    Direction.EAST: 'e',
    Direction.WEST: 'w',
    Direction.STILL: 'o',
}

CHAR_DIRS = {c: d for d, c in DIR_CHARS.items()}

# Enumeration order matters: the planner takes the first acceptable one.
ALL_CARDINALS: Tuple[Direction, ...] = (
    Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST,
)

MOVE = 'm'
SPAWN = 'g'


@dataclass(frozen=True)
class MoveCommand:
    """Move a ship one cell (or keep it still)."""
    ship_id: int
    direction: Direction

    @property
    def is_still(self) -> bool:
        return self.direction == Direction.STILL

    def serialize(self) -> str:
        return f"{MOVE} {self.ship_id} {DIR_CHARS[self.direction]}"


@dataclass(frozen=True)
class SpawnCommand:
    """Build a new ship on the player's shipyard."""

    def serialize(self) -> str:
        return SPAWN


def serialize_commands(commands: List) -> str:
    """Join a command batch into the single line the engine expects."""
    return " ".join(c.serialize() for c in commands)


def parse_commands(line: str) -> List:
    """
    Parse a serialized command line back into command objects.
    Used by the local simulator; unknown tokens raise ValueError.
    """
    tokens = line.split()
    commands = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok == SPAWN:
            commands.append(SpawnCommand())
            i += 1
        elif tok == MOVE:
            if i + 2 >= len(tokens):
                raise ValueError(f"Truncated move command in {line!r}")
            ship_id = int(tokens[i + 1])
            if tokens[i + 2] not in CHAR_DIRS:
                raise ValueError(f"Unknown direction {tokens[i + 2]!r}")
            commands.append(MoveCommand(ship_id, CHAR_DIRS[tokens[i + 2]]))
            i += 3
        else:
            raise ValueError(f"Unknown command token {tok!r}")
    return commands
