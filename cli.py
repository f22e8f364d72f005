#!/usr/bin/env python3
"""
Greedy Halite Bot - Command Line Interface

Usage:
    python cli.py play [seed]                       # Play against the engine on stdin/stdout
    python cli.py simulate --map-size 32 --players 2
    python cli.py simulate --players 4 --render-every 50
    python cli.py config --output planner.json      # Write the default config
"""

import argparse
import logging
import sys

from halite_ai.config import PlannerConfig
from halite_ai.play import BOT_NAME, LOG_FORMAT, run_bot, simulate


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='halite-greedy-bot',
        description='Greedy single-turn Halite mining bot'
    )
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log every ship decision')
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='PlannerConfig JSON file')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Play command
    play_parser = subparsers.add_parser('play', help='Play a game against the engine')
    play_parser.add_argument('seed', type=int, nargs='?', default=None,
                             help='RNG seed (default: current time)')
    play_parser.add_argument('--name', type=str, default=BOT_NAME,
                             help='Bot name sent to the engine')
    play_parser.add_argument('--log-dir', type=str, default='.',
                             help='Directory for bot-<id>.log files')

    # Simulate command
    sim_parser = subparsers.add_parser('simulate', help='Self-play in the local simulator')
    sim_parser.add_argument('--map-size', '-m', type=int, default=32,
                            help='Map width and height (even, >= 8)')
    sim_parser.add_argument('--players', '-p', type=int, choices=[1, 2, 4], default=2,
                            help='Number of seats, each driven by the bot')
    sim_parser.add_argument('--turns', '-t', type=int, default=None,
                            help='Game length (default: engine rule for the map size)')
    sim_parser.add_argument('--seed', '-s', type=int, default=None,
                            help='Map and bot seed (default: current time)')
    sim_parser.add_argument('--render-every', '-r', type=int, default=0,
                            help='Print the map every N turns')

    # Config command
    config_parser = subparsers.add_parser('config', help='Write the effective configuration')
    config_parser.add_argument('--output', '-o', type=str, required=True,
                               help='Destination JSON file')

    return parser


def load_config(args) -> PlannerConfig:
    if args.config:
        return PlannerConfig.load(args.config)
    return PlannerConfig.from_env()


def cmd_play(args):
    """Play one game over the engine protocol"""
    level = logging.DEBUG if args.verbose else logging.INFO
    run_bot(seed=args.seed, name=args.name, log_dir=args.log_dir,
            level=level, config=load_config(args))
    return 0


def cmd_simulate(args):
    """Run a local self-play game and print the scores"""
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)

    result = simulate(map_size=args.map_size, num_players=args.players,
                      max_turns=args.turns, seed=args.seed,
                      config=load_config(args), render_every=args.render_every)

    print("=" * 60)
    print(f"SIMULATION RESULTS (seed {result['seed']})")
    print("=" * 60)
    print(f"Turns played: {result['turn']}")
    print(f"Ships lost to collisions: {result['destroyed']}")
    print(f"Halite left on map: {result['map_halite']}")
    print("-" * 60)
    for pid in sorted(result['halite']):
        print(f"Player {pid}: {result['halite'][pid]} halite, "
              f"{result['ships'][pid]} ships")
    return 0


def cmd_config(args):
    """Save the configuration the bot would run with"""
    config = load_config(args)
    config.save(args.output)
    print(f"Configuration written to {args.output}")
    return 0


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        'play': cmd_play,
        'simulate': cmd_simulate,
        'config': cmd_config,
    }

    if args.command in commands:
        return commands[args.command](args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main() or 0)
