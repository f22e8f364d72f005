"""
Halite AI - Greedy single-turn mining bot.

Each turn, from the current snapshot only:
- Ships flip between MINING and RETURNING (cargo threshold, shipyard
  arrival, endgame recall)
- Ships are ordered returning-first, richest-first
- Each ship picks a target cell and a one-step move, claiming its
  destination so no two ships end on the same cell
- A spawn gate decides whether to build another ship
"""

from halite_ai.config import PlannerConfig
from halite_ai.state_tracker import ShipState, ShipStateTracker
from halite_ai.planner import ClaimedCells, ShipPlan, TurnPlanner
from halite_ai.spawn import SpawnGate
from halite_ai.agent import HaliteAgent, TurnPlan

__all__ = [
    "PlannerConfig",
    "ShipState",
    "ShipStateTracker",
    "ClaimedCells",
    "ShipPlan",
    "TurnPlanner",
    "SpawnGate",
    "HaliteAgent",
    "TurnPlan",
]
