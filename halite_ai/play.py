"""
Play Loop - Run the bot against the Halite engine or in the local simulator.

In engine mode stdout carries the protocol, so all logging goes to
bot-<player_id>.log in the log directory (bot.log if the handshake
fails before the id is known). See cli.py for the command line.
"""

import logging
import logging.handlers
import os
import sys
import time
from typing import Dict, Optional, TextIO

from game.engine import GameEngine
from game.networking import Game, ProtocolError
from game.renderer import GameRenderer
from halite_ai.agent import HaliteAgent
from halite_ai.config import PlannerConfig

logger = logging.getLogger(__name__)

BOT_NAME = "GreedyMiner"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def buffer_logging(level: int = logging.INFO) -> logging.handlers.MemoryHandler:
    """Hold records emitted before the player id, and so the log file, is known."""
    handler = logging.handlers.MemoryHandler(capacity=1000,
                                             flushLevel=logging.CRITICAL + 1)
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def setup_logging(player_id: Optional[int], log_dir: Optional[str] = ".",
                  level: int = logging.INFO,
                  pending: Optional[logging.handlers.MemoryHandler] = None):
    """
    Send log records to bot-<player_id>.log, or bot.log when the id is
    unknown; never to stdout. Records held in `pending` are written first.
    """
    if log_dir is None:
        return
    if pending is not None:
        logging.getLogger().removeHandler(pending)
    os.makedirs(log_dir, exist_ok=True)
    filename = f"bot-{player_id}.log" if player_id is not None else "bot.log"
    logging.basicConfig(
        filename=os.path.join(log_dir, filename),
        filemode='w',
        level=level,
        format=LOG_FORMAT,
        force=True,
    )
    if pending is not None:
        root = logging.getLogger()
        for record in pending.buffer:
            root.handle(record)
        pending.buffer.clear()
        pending.close()


def resolve_seed(seed: Optional[int]) -> int:
    return seed if seed is not None else int(time.time())


def run_bot(seed: Optional[int] = None, name: str = BOT_NAME,
            log_dir: Optional[str] = ".", level: int = logging.INFO,
            config: Optional[PlannerConfig] = None,
            input_stream: Optional[TextIO] = None,
            output_stream: Optional[TextIO] = None) -> int:
    """
    Play one game over the engine protocol.
    Returns the number of turns played.
    """
    seed = resolve_seed(seed)
    pending = buffer_logging(level) if log_dir is not None else None
    try:
        game = Game(input_stream, output_stream)
    except ProtocolError:
        setup_logging(None, log_dir, level, pending)
        logger.exception("Malformed handshake from engine")
        raise
    setup_logging(game.my_id, log_dir, level, pending)

    agent = HaliteAgent(game.constants, config or PlannerConfig.from_env(), seed)
    game.ready(name)
    logger.info(f"Successfully created bot! My player id is {game.my_id}. "
                f"Bot rng seed is {seed}.")

    turns = 0
    try:
        while game.update_frame():
            commands = agent.get_action(game.state)
            turns += 1
            if not game.end_turn(commands):
                break
    except ProtocolError:
        logger.exception(f"Malformed frame from engine after {turns} turns")
        raise

    logger.info(f"Game finished after {turns} turns")
    return turns


def simulate(map_size: int = 32, num_players: int = 2,
             max_turns: Optional[int] = None, seed: Optional[int] = None,
             config: Optional[PlannerConfig] = None,
             render_every: int = 0, out: Optional[TextIO] = None) -> Dict:
    """
    Self-play: every seat is driven by its own agent in the local simulator.
    Returns final halite and ship counts per player plus collision losses.
    """
    seed = resolve_seed(seed)
    out = out or sys.stdout
    engine = GameEngine(map_size=map_size, num_players=num_players,
                        max_turns=max_turns, seed=seed)
    state = engine.reset()
    agents = {pid: HaliteAgent(engine.constants, config, seed)
              for pid in state.players}

    if render_every:
        print(GameRenderer.render(state), file=out)

    destroyed = 0
    while not state.done:
        commands = {pid: agent.get_action(state.view(pid))
                    for pid, agent in agents.items()}
        state, info = engine.step(commands)
        destroyed += info['destroyed']
        logger.debug(GameRenderer.render_compact(state))

        if render_every and state.turn_number % render_every == 0:
            print(f"\n--- Turn {state.turn_number} ---", file=out)
            print(GameRenderer.render(state), file=out)

    result = state.get_state_info()
    result['destroyed'] = destroyed
    result['seed'] = seed
    return result

