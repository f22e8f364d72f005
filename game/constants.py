"""
Game Constants - Rule parameters sent by the engine at the start of a game.

The engine sends a single JSON object; only the keys the bot and the
local simulator use are kept. Defaults match the standard Halite III
rules so the simulator can run without an engine.
"""

import json
from dataclasses import dataclass, asdict
from typing import Any, Dict


# Default game length by map size (Halite III convention)
TURNS_BY_MAP_SIZE = {32: 400, 40: 425, 48: 450, 56: 475, 64: 500}


@dataclass(frozen=True)
class GameConstants:
    ship_cost: int = 1000
    dropoff_cost: int = 4000
    max_halite: int = 1000
    max_turns: int = 400
    extract_ratio: int = 4
    move_cost_ratio: int = 10

    # JSON key -> field name
    _KEYS = {
        'NEW_ENTITY_ENERGY_COST': 'ship_cost',
        'DROPOFF_COST': 'dropoff_cost',
        'MAX_ENERGY': 'max_halite',
        'MAX_TURNS': 'max_turns',
        'EXTRACT_RATIO': 'extract_ratio',
        'MOVE_COST_RATIO': 'move_cost_ratio',
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameConstants':
        kwargs = {}
        for key, name in cls._KEYS.items():
            if key in data:
                kwargs[name] = int(data[key])
        return cls(**kwargs)

    @classmethod
    def from_json(cls, line: str) -> 'GameConstants':
        return cls.from_dict(json.loads(line))

    @classmethod
    def for_map_size(cls, map_size: int, **overrides) -> 'GameConstants':
        """Defaults with the game length the engine would pick for this map."""
        overrides.setdefault('max_turns', TURNS_BY_MAP_SIZE.get(map_size, 400))
        return cls(**overrides)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def to_json(self) -> str:
        """Engine-style JSON line, as the simulator's handshake would send it."""
        values = self.to_dict()
        return json.dumps({key: values[name] for key, name in self._KEYS.items()})
