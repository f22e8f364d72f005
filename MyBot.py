#!/usr/bin/env python3
"""
Engine entry point: `python MyBot.py [seed]`.

The Halite engine launches this script and talks to it over stdin/stdout.
"""

import sys

from cli import main

if __name__ == '__main__':
    sys.exit(main(['play'] + sys.argv[1:]) or 0)
