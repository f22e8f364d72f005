"""
Halite Game Layer for the Greedy Mining Bot

Everything the decision code consumes but does not decide:

- Toroidal grid map with halite amounts, ships and structures
- Ships, shipyards, dropoffs and players
- Move / spawn commands and their wire format
- Engine protocol adapter (handshake, frames, command transmission)
- Local rules engine for offline games and tests
"""

from game.actions import Direction, ALL_CARDINALS, MoveCommand, SpawnCommand
from game.constants import GameConstants
from game.game_map import GameMap, MapCell, Position
from game.units import Ship, Shipyard, Dropoff, Player
from game.game_state import GameState
from game.networking import Game, ProtocolError
from game.engine import GameEngine
from game.renderer import GameRenderer

__all__ = [
    "Direction", "ALL_CARDINALS", "MoveCommand", "SpawnCommand",
    "GameConstants",
    "GameMap", "MapCell", "Position",
    "Ship", "Shipyard", "Dropoff", "Player",
    "GameState",
    "Game", "ProtocolError",
    "GameEngine",
    "GameRenderer",
]
