"""
Tests for the Halite game layer.

Tests cover:
- Positions and toroidal map operations
- Commands and their wire format
- Game constants
- Engine protocol adapter
- Local rules engine
- ASCII renderer
"""

import sys
import os
import io
import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from game.actions import (
    Direction, ALL_CARDINALS, MoveCommand, SpawnCommand,
    serialize_commands, parse_commands,
)
from game.constants import GameConstants
from game.game_map import GameMap, Position
from game.units import Ship, Shipyard, Player
from game.game_state import GameState
from game.networking import Game, ProtocolError
from game.engine import GameEngine
from game.renderer import GameRenderer


HANDSHAKE = (
    '{"NEW_ENTITY_ENERGY_COST": 1000, "MAX_ENERGY": 1000, "MAX_TURNS": 400, '
    '"MOVE_COST_RATIO": 10, "EXTRACT_RATIO": 4, "DROPOFF_COST": 4000, '
    '"INSPIRATION_ENABLED": true}\n'
    "2 0\n"
    "0 1 1\n"
    "1 2 2\n"
    "4 4\n"
    "10 20 30 40\n"
    "50 0 60 70\n"
    "80 90 0 100\n"
    "110 120 130 140\n"
)


def make_game(frames: str = ""):
    out = io.StringIO()
    game = Game(io.StringIO(HANDSHAKE + frames), out)
    return game, out


class TestPosition:
    def test_directional_offset(self):
        p = Position(3, 3)
        assert p.directional_offset(Direction.NORTH) == Position(3, 2)
        assert p.directional_offset(Direction.SOUTH) == Position(3, 4)
        assert p.directional_offset(Direction.EAST) == Position(4, 3)
        assert p.directional_offset(Direction.WEST) == Position(2, 3)
        assert p.directional_offset(Direction.STILL) == p

    def test_cardinal_order(self):
        assert ALL_CARDINALS == (Direction.NORTH, Direction.SOUTH,
                                 Direction.EAST, Direction.WEST)

    def test_positions_are_hashable(self):
        assert len({Position(1, 2), Position(1, 2), Position(2, 1)}) == 2


class TestGameMap:
    def test_create_map(self):
        gm = GameMap(8, 6)
        assert gm.width == 8
        assert gm.height == 6
        assert gm.area == 48
        assert gm.total_halite() == 0

    def test_shape_mismatch_rejected(self):
        with pytest.raises(ValueError):
            GameMap(4, 4, np.zeros((3, 4), dtype=np.int64))

    def test_normalize_wraps(self):
        gm = GameMap(8, 8)
        assert gm.normalize(Position(-1, 8)) == Position(7, 0)
        assert gm.normalize(Position(9, -2)) == Position(1, 6)

    def test_distance_wraps(self):
        gm = GameMap(8, 8)
        assert gm.calculate_distance(Position(0, 0), Position(0, 0)) == 0
        assert gm.calculate_distance(Position(0, 0), Position(3, 2)) == 5
        assert gm.calculate_distance(Position(0, 0), Position(7, 7)) == 2
        assert gm.calculate_distance(Position(1, 4), Position(6, 4)) == 3

    def test_neighbor_wraps(self):
        gm = GameMap(8, 8)
        assert gm.neighbor(Position(0, 0), Direction.NORTH) == Position(0, 7)
        assert gm.neighbor(Position(7, 3), Direction.EAST) == Position(0, 3)

    def test_index(self):
        gm = GameMap(8, 8)
        assert gm.index(Position(3, 2)) == 19
        assert gm.index(Position(-1, 0)) == 7

    def test_halite_access(self):
        gm = GameMap(4, 4)
        gm.set_halite(Position(1, 2), 250)
        assert gm.halite_at(Position(1, 2)) == 250
        assert gm.at(Position(5, 6)).halite_amount == 250
        assert gm.total_halite() == 250

    def test_occupancy_from_state_index(self):
        gm = GameMap(8, 8)
        me = Player(0, Shipyard(0, Position(2, 2)))
        ship = Ship(7, 0, Position(3, 3), 0)
        me.ships[7] = ship
        state = GameState(gm, {0: me}, 0)
        state.rebuild_map_index()

        assert gm.is_occupied(Position(3, 3))
        assert gm.at(ship).ship is ship
        assert not gm.is_occupied(Position(2, 2))
        assert gm.at(Position(2, 2)).has_structure
        assert not gm.at(Position(2, 2)).is_empty
        assert gm.at(Position(4, 4)).is_empty


class TestCommands:
    def test_serialize_move(self):
        assert MoveCommand(5, Direction.NORTH).serialize() == "m 5 n"
        assert MoveCommand(5, Direction.STILL).serialize() == "m 5 o"
        assert MoveCommand(5, Direction.STILL).is_still

    def test_serialize_batch(self):
        cmds = [MoveCommand(1, Direction.EAST), MoveCommand(2, Direction.WEST),
                SpawnCommand()]
        assert serialize_commands(cmds) == "m 1 e m 2 w g"
        assert serialize_commands([]) == ""

    def test_parse_commands(self):
        cmds = parse_commands("m 3 s g m 4 o")
        assert cmds == [MoveCommand(3, Direction.SOUTH), SpawnCommand(),
                        MoveCommand(4, Direction.STILL)]

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_commands("m 3 x")
        with pytest.raises(ValueError):
            parse_commands("c 3")
        with pytest.raises(ValueError):
            parse_commands("m 3")

    def test_ship_commands(self):
        ship = Ship(9, 0, Position(0, 0))
        assert ship.move(Direction.EAST) == MoveCommand(9, Direction.EAST)
        assert ship.stay_still() == MoveCommand(9, Direction.STILL)


class TestConstants:
    def test_defaults(self):
        c = GameConstants()
        assert c.ship_cost == 1000
        assert c.max_halite == 1000
        assert c.move_cost_ratio == 10
        assert c.extract_ratio == 4

    def test_from_json_ignores_unknown_keys(self):
        c = GameConstants.from_json('{"NEW_ENTITY_ENERGY_COST": 500, '
                                    '"MAX_TURNS": 425, "CAPTURE_ENABLED": false}')
        assert c.ship_cost == 500
        assert c.max_turns == 425
        assert c.max_halite == 1000

    def test_for_map_size(self):
        assert GameConstants.for_map_size(32).max_turns == 400
        assert GameConstants.for_map_size(64).max_turns == 500
        assert GameConstants.for_map_size(64, max_turns=100).max_turns == 100

    def test_to_json_round_trip(self):
        c = GameConstants(ship_cost=700, max_turns=300)
        assert GameConstants.from_json(c.to_json()) == c


class TestNetworking:
    def test_handshake(self):
        game, _ = make_game()
        assert game.my_id == 0
        assert game.constants.max_turns == 400
        assert game.game_map.width == 4
        assert game.game_map.halite_at(Position(3, 3)) == 140
        assert game.me.shipyard.position == Position(1, 1)
        assert game.state.players[1].shipyard.position == Position(2, 2)
        assert game.turn_number == 0

    def test_ready_sends_name(self):
        game, out = make_game()
        game.ready("GreedyMiner")
        assert out.getvalue() == "GreedyMiner\n"

    def test_update_frame(self):
        frame = (
            "1\n"
            "0 2 1 4000\n"
            "0 1 2 50\n"
            "3 3 0 0\n"
            "7 0 3\n"
            "1 1 0 5000\n"
            "4 2 1 10\n"
            "2\n"
            "1 2 99\n"
            "0 0 0\n"
        )
        game, _ = make_game(frame)
        assert game.update_frame()

        assert game.turn_number == 1
        assert game.me.halite == 4000
        assert sorted(game.me.ships) == [0, 3]
        assert game.me.ships[0].position == Position(1, 2)
        assert game.me.ships[0].halite == 50
        assert 7 in game.me.dropoffs
        assert game.state.players[1].ships[4].owner == 1
        assert game.game_map.halite_at(Position(1, 2)) == 99
        assert game.game_map.halite_at(Position(0, 0)) == 0
        assert game.game_map.is_occupied(Position(2, 1))
        assert not game.game_map.is_occupied(Position(1, 1))

    def test_ships_replaced_each_frame(self):
        frames = (
            "1\n0 1 0 0\n5 1 2 0\n1 0 0 0\n0\n"
            "2\n0 0 0 0\n1 0 0 0\n0\n"
        )
        game, _ = make_game(frames)
        assert game.update_frame()
        assert game.game_map.is_occupied(Position(1, 2))
        assert game.update_frame()
        assert game.me.ships == {}
        assert not game.game_map.is_occupied(Position(1, 2))

    def test_end_of_input_ends_game(self):
        game, _ = make_game()
        assert game.update_frame() is False

    def test_end_turn_writes_commands(self):
        game, out = make_game()
        assert game.end_turn([MoveCommand(1, Direction.NORTH), SpawnCommand()])
        assert out.getvalue() == "m 1 n g\n"

    def test_end_turn_on_closed_stream(self):
        game, out = make_game()
        out.close()
        assert game.end_turn([SpawnCommand()]) is False

    def test_malformed_handshake(self):
        with pytest.raises(ProtocolError):
            Game(io.StringIO("not json\n"), io.StringIO())
        with pytest.raises(ProtocolError):
            Game(io.StringIO('{}\n2\n'), io.StringIO())
        with pytest.raises(ProtocolError):
            Game(io.StringIO('{}\n1 3\n0 1 1\n'), io.StringIO())

    def test_truncated_handshake(self):
        with pytest.raises(ProtocolError):
            Game(io.StringIO(HANDSHAKE.rsplit("\n", 2)[0] + "\n"), io.StringIO())

    def test_malformed_frame(self):
        game, _ = make_game("1\n0 x 0 0\n")
        with pytest.raises(ProtocolError):
            game.update_frame()

    def test_frame_with_unknown_player(self):
        game, _ = make_game("1\n9 0 0 0\n")
        with pytest.raises(ProtocolError):
            game.update_frame()


def place_ship(state, ship_id, owner, x, y, halite=0):
    ship = Ship(ship_id, owner, Position(x, y), halite)
    state.players[owner].ships[ship_id] = ship
    state.rebuild_map_index()
    return ship


class TestGameEngine:
    def test_reset(self):
        engine = GameEngine(map_size=16, num_players=2, seed=1)
        state = engine.reset()
        assert state.turn_number == 1
        assert state.game_map.width == 16
        assert len(state.players) == 2
        for p in state.players.values():
            assert p.halite == 5000
            assert state.game_map.halite_at(p.shipyard.position) == 0
        assert state.game_map.total_halite() > 0

    def test_map_is_mirror_symmetric(self):
        engine = GameEngine(map_size=16, num_players=2, seed=3)
        halite = engine.reset().game_map.halite
        assert np.array_equal(halite, halite[:, ::-1])

    def test_four_player_map(self):
        engine = GameEngine(map_size=16, num_players=4, seed=3)
        state = engine.reset()
        halite = state.game_map.halite
        assert np.array_equal(halite, halite[::-1, :])
        assert len({p.shipyard.position for p in state.players.values()}) == 4

    def test_same_seed_same_map(self):
        a = GameEngine(map_size=16, seed=11).reset().game_map.halite
        b = GameEngine(map_size=16, seed=11).reset().game_map.halite
        assert np.array_equal(a, b)

    def test_invalid_setup(self):
        with pytest.raises(ValueError):
            GameEngine(map_size=9)
        with pytest.raises(ValueError):
            GameEngine(map_size=16, num_players=3)

    def test_step_before_reset(self):
        engine = GameEngine(map_size=8)
        with pytest.raises(RuntimeError):
            engine.step({})

    def test_spawn(self):
        engine = GameEngine(map_size=8, num_players=2, seed=0)
        state = engine.reset()
        state, info = engine.step({0: [SpawnCommand()], 1: []})
        me = state.players[0]
        assert me.halite == 4000
        assert len(me.ships) == 1
        ship = me.get_ships()[0]
        assert ship.position == me.shipyard.position
        assert state.game_map.is_occupied(me.shipyard.position)
        assert info['ships'] == {0: 1, 1: 0}

    def test_move_pays_cost(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        state.game_map.set_halite(Position(3, 3), 200)
        ship = place_ship(state, 50, 0, 3, 3, halite=100)
        engine.step({0: [MoveCommand(50, Direction.EAST)]})
        assert ship.position == Position(4, 3)
        assert ship.halite == 80

    def test_unaffordable_move_stays_without_mining(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        state.game_map.set_halite(Position(3, 3), 200)
        ship = place_ship(state, 50, 0, 3, 3, halite=5)
        engine.step({0: [MoveCommand(50, Direction.EAST)]})
        assert ship.position == Position(3, 3)
        assert ship.halite == 5
        assert state.game_map.halite_at(Position(3, 3)) == 200

    def test_mining(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        state.game_map.set_halite(Position(3, 3), 101)
        ship = place_ship(state, 50, 0, 3, 3, halite=0)
        engine.step({0: [MoveCommand(50, Direction.STILL)]})
        assert ship.halite == 26
        assert state.game_map.halite_at(Position(3, 3)) == 75

    def test_mining_capped_by_capacity(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        state.game_map.set_halite(Position(3, 3), 400)
        ship = place_ship(state, 50, 0, 3, 3, halite=990)
        engine.step({})
        assert ship.halite == 1000
        assert state.game_map.halite_at(Position(3, 3)) == 390

    def test_deposit_on_shipyard(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        yard = state.players[0].shipyard.position
        ship = place_ship(state, 50, 0, yard.x + 1, yard.y, halite=600)
        state.game_map.set_halite(Position(yard.x + 1, yard.y), 0)
        engine.step({0: [MoveCommand(50, Direction.WEST)]})
        assert ship.halite == 0
        assert state.players[0].halite == 5600

    def test_collision_destroys_ships(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        for x in (3, 4, 5):
            state.game_map.set_halite(Position(x, 1), 0)
        place_ship(state, 50, 0, 3, 1, halite=100)
        place_ship(state, 51, 1, 5, 1, halite=40)
        state, info = engine.step({0: [MoveCommand(50, Direction.EAST)],
                                   1: [MoveCommand(51, Direction.WEST)]})
        assert info['destroyed'] == 2
        assert state.players[0].ships == {}
        assert state.players[1].ships == {}
        assert state.game_map.halite_at(Position(4, 1)) == 140

    def test_collision_on_shipyard_credits_owner(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        yard = state.players[0].shipyard.position
        west = Position(yard.x - 1, yard.y)
        east = Position(yard.x + 1, yard.y)
        for p in (west, east):
            state.game_map.set_halite(p, 0)
        place_ship(state, 50, 0, west.x, west.y, halite=100)
        place_ship(state, 51, 1, east.x, east.y, halite=40)
        yard_halite = state.game_map.halite_at(yard)
        bank = state.players[0].halite

        state, info = engine.step({0: [MoveCommand(50, Direction.EAST)],
                                   1: [MoveCommand(51, Direction.WEST)]})
        assert info['destroyed'] == 2
        assert state.players[0].ships == {}
        assert state.players[1].ships == {}
        assert state.players[0].halite == bank + 140
        assert state.players[1].halite == 5000
        assert state.game_map.halite_at(yard) == yard_halite

    def test_foreign_ship_commands_ignored(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        state.game_map.set_halite(Position(3, 1), 0)
        ship = place_ship(state, 50, 1, 3, 1)
        engine.step({0: [MoveCommand(50, Direction.EAST)]})
        assert ship.position == Position(3, 1)

    def test_game_ends_after_max_turns(self):
        engine = GameEngine(map_size=8, max_turns=3, seed=0)
        state = engine.reset()
        turns = 0
        while not state.done:
            state, info = engine.step({})
            turns += 1
        assert turns == 3
        assert state.turn_number == 3
        assert info['done']
        with pytest.raises(RuntimeError):
            engine.step({})


class TestRenderer:
    def test_render(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        place_ship(state, 50, 0, 3, 3)
        text = GameRenderer.render(state)
        assert "Turn: 1/400 (399 left)" in text
        assert text.count("Y") >= 2
        assert "a" in text.splitlines()[8]

    def test_ship_on_shipyard_is_uppercase(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        yard = state.players[1].shipyard.position
        place_ship(state, 50, 1, yard.x, yard.y)
        rows = GameRenderer.render(state, show_info=False).splitlines()
        assert rows[2 + yard.y][2 + yard.x] == "B"

    def test_render_compact(self):
        engine = GameEngine(map_size=8, seed=0)
        state = engine.reset()
        assert GameRenderer.render_compact(state) == \
            "T0001 P0[s=0 h=5000] P1[s=0 h=5000]"
