"""
Greedy Mining Agent - Turns one snapshot into one command batch.

Per turn:
1. Update every ship's MINING/RETURNING state
2. Plan moves in priority order, claiming destination cells
3. Ask the spawn gate whether to build a ship
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from game.actions import SpawnCommand
from game.constants import GameConstants
from game.game_state import GameState
from halite_ai.config import PlannerConfig
from halite_ai.planner import ShipPlan, TurnPlanner
from halite_ai.spawn import SpawnGate
from halite_ai.state_tracker import ShipStateTracker

logger = logging.getLogger(__name__)


@dataclass
class TurnPlan:
    """Everything decided for one turn."""
    turn_number: int
    ship_plans: List[ShipPlan]
    spawn: bool
    endgame: bool

    @property
    def commands(self) -> List:
        commands = [p.command for p in self.ship_plans]
        if self.spawn:
            commands.append(SpawnCommand())
        return commands


class HaliteAgent:
    """
    Greedy single-turn bot. Ship states persist across turns; everything
    else is recomputed from each snapshot.
    """

    def __init__(self, constants: GameConstants,
                 config: Optional[PlannerConfig] = None,
                 seed: Optional[int] = None):
        self.constants = constants
        self.config = config or PlannerConfig()
        self.seed = seed
        # Reserved for randomized tie-breaking; the decision rules are deterministic
        self.rng = np.random.default_rng(seed)
        self.tracker = ShipStateTracker(constants.max_halite, self.config)
        self.planner = TurnPlanner(constants, self.config)
        self.spawn_gate = SpawnGate(constants, self.config)

    def plan_turn(self, state: GameState) -> TurnPlan:
        me = state.me
        ships = me.get_ships()
        endgame = self.config.is_endgame(state.turn_number, self.constants.max_turns)

        if self.config.prune_orphaned_states:
            dropped = self.tracker.prune(s.ship_id for s in ships)
            if dropped:
                logger.debug(f"Forgot {dropped} ships that are gone")
        self.tracker.update_all(ships, me.shipyard.position, endgame)

        ship_plans, claimed = self.planner.plan(state, self.tracker, endgame)
        spawn = self.spawn_gate.should_spawn(state, claimed, self.tracker)

        return TurnPlan(state.turn_number, ship_plans, spawn, endgame)

    def get_action(self, state: GameState) -> List:
        """Command batch for this turn."""
        plan = self.plan_turn(state)
        returning = sum(1 for s in state.me.get_ships()
                        if self.tracker.is_returning(s.ship_id))
        logger.info(f"Turn {plan.turn_number}: {len(plan.ship_plans)} ships "
                    f"({returning} returning), halite {state.me.halite}, "
                    f"spawn={plan.spawn}{' [endgame]' if plan.endgame else ''}")
        return plan.commands
