"""
Engine Protocol Adapter - Talks to the Halite game engine over text streams.

Handshake (engine -> bot):
  <constants JSON>
  <num_players> <my_id>
  <player_id> <shipyard_x> <shipyard_y>        (once per player)
  <width> <height>
  <halite row>                                 (height rows of width ints)
Handshake (bot -> engine):
  <bot name>

Each frame (engine -> bot):
  <turn_number>
  <player_id> <num_ships> <num_dropoffs> <halite>   (once per player)
  <ship_id> <x> <y> <halite>                        (num_ships lines)
  <dropoff_id> <x> <y>                              (num_dropoffs lines)
  <num_updated_cells>
  <x> <y> <halite>                                  (num_updated_cells lines)
Each frame (bot -> engine):
  one line of serialized commands

The engine closing its end is the normal way a game finishes.
"""

import logging
import sys
from typing import List, Optional, TextIO

import numpy as np

from game.actions import serialize_commands
from game.constants import GameConstants
from game.game_map import GameMap, Position
from game.game_state import GameState
from game.units import Dropoff, Player, Ship, Shipyard

logger = logging.getLogger(__name__)


class ProtocolError(ValueError):
    """The engine sent something that does not follow the protocol."""


class Game:
    """
    Bot side of the engine connection. Reads the handshake on creation,
    then alternates update_frame() / end_turn() until either returns False.
    """

    def __init__(self, input_stream: Optional[TextIO] = None,
                 output_stream: Optional[TextIO] = None):
        self._in = input_stream if input_stream is not None else sys.stdin
        self._out = output_stream if output_stream is not None else sys.stdout

        try:
            self.constants = GameConstants.from_json(self._read_line())
        except ValueError as e:
            raise ProtocolError(f"Bad constants line: {e}") from e

        num_players, self.my_id = self._read_ints(2)
        players = {}
        for _ in range(num_players):
            player_id, sx, sy = self._read_ints(3)
            players[player_id] = Player(
                player_id=player_id,
                shipyard=Shipyard(owner=player_id, position=Position(sx, sy)),
            )
        if self.my_id not in players:
            raise ProtocolError(f"Own id {self.my_id} not among players {sorted(players)}")

        width, height = self._read_ints(2)
        rows = [self._read_ints(width) for _ in range(height)]
        game_map = GameMap(width, height, np.array(rows, dtype=np.int64))

        self.state = GameState(game_map, players, self.my_id, self.constants)
        self.state.rebuild_map_index()
        logger.info(f"Handshake complete: player {self.my_id} of {num_players}, "
                    f"map {width}x{height}, {self.constants.max_turns} turns")

    @property
    def turn_number(self) -> int:
        return self.state.turn_number

    @property
    def me(self) -> Player:
        return self.state.me

    @property
    def game_map(self) -> GameMap:
        return self.state.game_map

    def ready(self, name: str):
        """Tell the engine initialization is finished."""
        self._write_line(name)
        logger.info(f"Bot {name!r} ready")

    def update_frame(self) -> bool:
        """
        Read the next frame into self.state.
        Returns False when the engine has closed the stream.
        """
        line = self._in.readline()
        if not line:
            logger.info("Engine closed the input stream")
            return False
        turn_number = self._parse_ints(line, 1)[0]

        for _ in range(len(self.state.players)):
            player_id, num_ships, num_dropoffs, halite = self._read_ints(4)
            player = self.state.players.get(player_id)
            if player is None:
                raise ProtocolError(f"Frame mentions unknown player {player_id}")
            player.halite = halite

            ships = {}
            for _ in range(num_ships):
                ship_id, x, y, cargo = self._read_ints(4)
                ships[ship_id] = Ship(ship_id, player_id, Position(x, y), cargo)
            player.ships = ships

            dropoffs = {}
            for _ in range(num_dropoffs):
                dropoff_id, x, y = self._read_ints(3)
                dropoffs[dropoff_id] = Dropoff(dropoff_id, player_id, Position(x, y))
            player.dropoffs = dropoffs

        num_cells = self._read_ints(1)[0]
        for _ in range(num_cells):
            x, y, amount = self._read_ints(3)
            self.state.game_map.set_halite(Position(x, y), amount)

        self.state.turn_number = turn_number
        self.state.rebuild_map_index()
        logger.debug(f"Frame {turn_number}: {len(self.me.ships)} ships, "
                     f"{self.me.halite} halite banked, {num_cells} cells updated")
        return True

    def end_turn(self, commands: List) -> bool:
        """
        Send this turn's commands.
        Returns False if the engine is gone and the game is over.
        """
        try:
            self._write_line(serialize_commands(commands))
        except (BrokenPipeError, OSError, ValueError) as e:
            logger.info(f"Could not send commands for turn {self.turn_number}: {e}")
            return False
        return True

    def _write_line(self, text: str):
        self._out.write(text + "\n")
        self._out.flush()

    def _read_line(self) -> str:
        line = self._in.readline()
        if not line:
            raise ProtocolError("Unexpected end of input from engine")
        return line

    def _read_ints(self, count: int) -> List[int]:
        return self._parse_ints(self._read_line(), count)

    @staticmethod
    def _parse_ints(line: str, count: int) -> List[int]:
        tokens = line.split()
        if len(tokens) != count:
            raise ProtocolError(f"Expected {count} integers, got {line.strip()!r}")
        try:
            return [int(t) for t in tokens]
        except ValueError as e:
            raise ProtocolError(f"Non-integer field in {line.strip()!r}") from e
