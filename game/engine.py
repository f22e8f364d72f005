"""
Game Engine - Local rules engine that plays out games without the official
Halite binary.

Handles, in order each turn:
- Spawning (cost deducted, new ship placed on the shipyard)
- Movement (move cost paid from cargo; unaffordable moves become stays)
- Collisions (every ship sharing a cell is destroyed, cargo dropped)
- Mining by ships that stayed still
- Deposits on shipyards and dropoffs
- End-of-game detection
"""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import numpy as np

from game.actions import Direction, MoveCommand, SpawnCommand
from game.constants import GameConstants
from game.game_map import GameMap, Position
from game.game_state import GameState
from game.units import Player, Ship, Shipyard

logger = logging.getLogger(__name__)

INITIAL_HALITE = 5000


class GameEngine:
    """
    The core game engine that applies every player's commands and advances
    the shared game state by one turn.
    """

    def __init__(self, map_size: int = 32, num_players: int = 2,
                 max_turns: Optional[int] = None, seed: Optional[int] = None,
                 constants: Optional[GameConstants] = None):
        if map_size < 8 or map_size % 2:
            raise ValueError(f"map_size must be an even number >= 8, got {map_size}")
        if num_players not in (1, 2, 4):
            raise ValueError(f"num_players must be 1, 2 or 4, got {num_players}")
        self.map_size = map_size
        self.num_players = num_players
        self.seed = seed
        if constants is None:
            constants = GameConstants.for_map_size(map_size)
        if max_turns is not None:
            constants = GameConstants(**{**constants.to_dict(), 'max_turns': max_turns})
        self.constants = constants
        self.state: Optional[GameState] = None
        self._next_ship_id = 0

    def reset(self) -> GameState:
        """Generate a fresh symmetric map and return the first frame."""
        rng = np.random.default_rng(self.seed)
        game_map = GameMap(self.map_size, self.map_size,
                           self._generate_halite(rng))

        players = {}
        for pid, pos in enumerate(self._shipyard_positions()):
            game_map.set_halite(pos, 0)
            players[pid] = Player(player_id=pid,
                                  shipyard=Shipyard(owner=pid, position=pos),
                                  halite=INITIAL_HALITE)

        self.state = GameState(game_map, players, my_id=0,
                               constants=self.constants, turn_number=1)
        self.state.rebuild_map_index()
        self._next_ship_id = 0
        return self.state

    def _generate_halite(self, rng: np.random.Generator) -> np.ndarray:
        """Mirror-symmetric halite field with a few rich patches."""
        size = self.map_size
        half = size // 2
        tile = rng.gamma(shape=2.0, scale=50.0, size=(size, half))

        for _ in range(max(1, size // 8)):
            cx, cy = int(rng.integers(0, half)), int(rng.integers(0, size))
            peak = rng.uniform(300, 900)
            ys, xs = np.ogrid[:size, :half]
            dist = np.abs(xs - cx) + np.abs(ys - cy)
            tile += peak * np.exp(-dist / 2.0)

        # Light smoothing with wrap-around neighbours
        tile = (2 * tile + np.roll(tile, 1, 0) + np.roll(tile, -1, 0)
                + np.roll(tile, 1, 1) + np.roll(tile, -1, 1)) / 6.0
        tile = np.clip(tile, 0, self.constants.max_halite).astype(np.int64)

        full = np.concatenate([tile, tile[:, ::-1]], axis=1)
        if self.num_players == 4:
            full[half:] = full[:half][::-1]
        return full

    def _shipyard_positions(self) -> List[Position]:
        s = self.map_size
        near, far = s // 4, s - 1 - s // 4
        if self.num_players == 4:
            return [Position(near, near), Position(far, near),
                    Position(near, far), Position(far, far)]
        positions = [Position(near, s // 2), Position(far, s // 2)]
        return positions[:self.num_players]

    def step(self, commands_by_player: Dict[int, List]) -> Tuple[GameState, Dict]:
        """
        Process one turn with every player's command batch.
        Returns: (state, info_dict)
        """
        if self.state is None:
            raise RuntimeError("Call reset() before step()")
        if self.state.done:
            raise RuntimeError("Game is over; call reset() to start another")

        state = self.state
        moves, spawns = self._validate_commands(commands_by_player)

        self._spawn_ships(spawns)
        stayed = self._move_ships(moves)
        destroyed = self._resolve_collisions()
        self._mine(stayed - destroyed)
        self._deposit()
        state.rebuild_map_index()

        if state.turn_number >= self.constants.max_turns:
            state.done = True
        else:
            state.turn_number += 1

        info = state.get_state_info()
        info['done'] = state.done
        info['destroyed'] = len(destroyed)
        return state, info

    def _validate_commands(self, commands_by_player: Dict[int, List]):
        """Split command batches into per-ship moves and spawning players."""
        moves: Dict[int, Direction] = {}
        spawns = []
        for pid, commands in commands_by_player.items():
            player = self.state.players.get(pid)
            if player is None:
                logger.warning(f"Ignoring commands from unknown player {pid}")
                continue
            for cmd in commands:
                if isinstance(cmd, SpawnCommand):
                    if pid not in spawns:
                        spawns.append(pid)
                elif isinstance(cmd, MoveCommand):
                    if not player.has_ship(cmd.ship_id):
                        logger.warning(f"Player {pid} commanded ship "
                                       f"{cmd.ship_id} it does not own")
                    elif cmd.ship_id in moves:
                        logger.warning(f"Duplicate command for ship {cmd.ship_id}")
                    else:
                        moves[cmd.ship_id] = cmd.direction
                else:
                    logger.warning(f"Ignoring unknown command {cmd!r}")
        return moves, spawns

    def _spawn_ships(self, spawns: List[int]):
        for pid in spawns:
            player = self.state.players[pid]
            if player.halite < self.constants.ship_cost:
                logger.warning(f"Player {pid} cannot afford a ship")
                continue
            player.halite -= self.constants.ship_cost
            ship = Ship(self._next_ship_id, pid, player.shipyard.position, 0)
            player.ships[ship.ship_id] = ship
            self._next_ship_id += 1

    def _move_ships(self, moves: Dict[int, Direction]) -> set:
        """Apply moves; returns ids of ships that stood still on purpose."""
        gm = self.state.game_map
        stayed = set()
        for player in self.state.players.values():
            for ship in player.ships.values():
                direction = moves.get(ship.ship_id, Direction.STILL)
                if direction == Direction.STILL:
                    stayed.add(ship.ship_id)
                    continue
                cost = gm.halite_at(ship.position) // self.constants.move_cost_ratio
                if ship.halite < cost:
                    continue
                ship.halite -= cost
                ship.position = gm.neighbor(ship.position, direction)
        return stayed

    def _resolve_collisions(self) -> set:
        gm = self.state.game_map
        by_cell = defaultdict(list)
        for ship in self.state.all_ships():
            by_cell[gm.normalize(ship.position)].append(ship)

        structures = {}
        for player in self.state.players.values():
            for pos in player.deposit_points():
                structures[gm.normalize(pos)] = player

        destroyed = set()
        for pos, ships in by_cell.items():
            if len(ships) < 2:
                continue
            cargo = sum(s.halite for s in ships)
            owner = structures.get(pos)
            if owner is not None:
                owner.halite += cargo
            else:
                gm.set_halite(pos, gm.halite_at(pos) + cargo)
            for s in ships:
                del self.state.players[s.owner].ships[s.ship_id]
                destroyed.add(s.ship_id)
            logger.debug(f"Collision at {pos} destroyed ships "
                         f"{[s.ship_id for s in ships]}")
        return destroyed

    def _mine(self, ship_ids: set):
        gm = self.state.game_map
        for ship in self.state.all_ships():
            if ship.ship_id not in ship_ids:
                continue
            cell = gm.halite_at(ship.position)
            room = self.constants.max_halite - ship.halite
            extracted = min(math.ceil(cell / self.constants.extract_ratio), room)
            if extracted <= 0:
                continue
            gm.set_halite(ship.position, cell - extracted)
            ship.halite += extracted

    def _deposit(self):
        gm = self.state.game_map
        for player in self.state.players.values():
            points = {gm.normalize(p) for p in player.deposit_points()}
            for ship in player.ships.values():
                if gm.normalize(ship.position) in points and ship.halite:
                    player.halite += ship.halite
                    ship.halite = 0
