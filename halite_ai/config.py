"""
Planner Configuration - Tunables for the greedy mining bot.

Every threshold the state tracker, planner and spawn gate use lives here
so tests and experiments can vary them without touching the logic.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple
import os
import json


@dataclass(frozen=True)
class PlannerConfig:
    """Immutable bot configuration"""
    # Ship state
    return_fraction: float = 0.9      # Head home at this share of MAX_HALITE
    endgame_turns: int = 30           # Everyone returns in the last N turns

    # Target selection
    extract_fraction: float = 0.25    # Expected one-turn yield of a cell
    stay_bias: float = 1.2            # A move must beat staying by this factor

    # Spawning
    spawn_divisor: int = 75           # Ship cap = max(min_ship_cap, area // divisor)
    min_ship_cap: int = 8
    large_map_area: int = 1600
    stop_buffer_small: int = 80       # Stop spawning this many turns before the end
    stop_buffer_large: int = 110
    reserve_schedule: Tuple[Tuple[int, int], ...] = ((50, 500), (120, 280))
    late_reserve: int = 125
    congestion_radius: int = 4        # "Near the shipyard" is distance < radius
    congestion_cap: int = 2           # Max returning ships near the shipyard

    # Housekeeping
    prune_orphaned_states: bool = True

    def ship_cap(self, map_area: int) -> int:
        return max(self.min_ship_cap, map_area // self.spawn_divisor)

    def stop_buffer(self, map_area: int) -> int:
        if map_area <= self.large_map_area:
            return self.stop_buffer_small
        return self.stop_buffer_large

    def reserve(self, turn_number: int) -> int:
        """Halite kept back on top of the ship cost at this point in the game."""
        for before_turn, amount in self.reserve_schedule:
            if turn_number < before_turn:
                return amount
        return self.late_reserve

    def is_endgame(self, turn_number: int, max_turns: int) -> bool:
        return turn_number > max_turns - self.endgame_turns

    @classmethod
    def from_env(cls) -> 'PlannerConfig':
        """Load overrides from HALITE_BOT_<FIELD> environment variables"""
        defaults = cls()
        kwargs: Dict[str, Any] = {}
        for name, value in asdict(defaults).items():
            raw = os.getenv(f"HALITE_BOT_{name.upper()}")
            if raw is None or name == 'reserve_schedule':
                continue
            if isinstance(value, bool):
                kwargs[name] = raw.lower() in ('1', 'true', 'yes')
            else:
                kwargs[name] = type(value)(raw)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration"""
        data = asdict(self)
        data['reserve_schedule'] = [list(step) for step in self.reserve_schedule]
        return data

    def save(self, filepath: str):
        """Save configuration to file"""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> 'PlannerConfig':
        """Load configuration from file; missing keys keep their defaults"""
        with open(filepath, 'r') as f:
            data = json.load(f)
        known = set(asdict(cls()).keys())
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        if 'reserve_schedule' in data:
            data['reserve_schedule'] = tuple(tuple(step) for step in data['reserve_schedule'])
        return cls(**data)
