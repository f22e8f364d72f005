"""
Game Renderer - ASCII visualization of a game snapshot.

Renders the map as text for debugging local simulations.
"""

from game.game_map import Position
from game.game_state import GameState
from game.units import Shipyard

# Halite density glyphs, lowest to highest
HALITE_GLYPHS = " .:-=+*#"

SHIPYARD_SYMBOL = 'Y'
DROPOFF_SYMBOL = 'D'
SHIP_SYMBOLS = "abcd"


class GameRenderer:
    """Text view of halite density, structures and ships."""

    @staticmethod
    def render(state: GameState, show_info: bool = True) -> str:
        """Full map with a header line per player and a legend."""
        gm = state.game_map
        h, w = gm.height, gm.width
        max_halite = state.constants.max_halite
        lines = []

        if show_info:
            lines.append(f"Turn: {state.turn_number}/{state.constants.max_turns} "
                         f"({state.turns_remaining} left)  Map halite: {gm.total_halite()}")
            lines.append("  ".join(
                f"P{pid} halite: {p.halite} ships: {len(p.ships)}"
                for pid, p in sorted(state.players.items())))
            lines.append("")

        lines.append("  " + "".join(f"{x % 10}" for x in range(w)))
        lines.append("  " + "-" * w)

        for y in range(h):
            row = f"{y % 10}|"
            for x in range(w):
                row += GameRenderer._cell_symbol(state, x, y, max_halite)
            row += f"|{y % 10}"
            lines.append(row)

        lines.append("  " + "-" * w)
        lines.append("  " + "".join(f"{x % 10}" for x in range(w)))

        if show_info:
            lines.append("")
            lines.append("Legend: Y=Shipyard D=Dropoff a-d=ships of P0-P3 "
                         f"halite '{HALITE_GLYPHS}' low->high")
            if state.done:
                winner = max(state.players.values(), key=lambda p: p.halite)
                lines.append(f"\n*** GAME OVER: PLAYER {winner.player_id} LEADS "
                             f"WITH {winner.halite} ***")

        return "\n".join(lines)

    @staticmethod
    def _cell_symbol(state: GameState, x: int, y: int, max_halite: int) -> str:
        cell = state.game_map.at(Position(x, y))
        ship = cell.ship
        if ship is not None:
            sym = SHIP_SYMBOLS[ship.owner % len(SHIP_SYMBOLS)]
            # Uppercase when sitting on a structure
            return sym.upper() if cell.has_structure else sym
        if cell.has_structure:
            return SHIPYARD_SYMBOL if isinstance(cell.structure, Shipyard) else DROPOFF_SYMBOL
        level = min(cell.halite_amount * len(HALITE_GLYPHS) // (max_halite + 1),
                    len(HALITE_GLYPHS) - 1)
        return HALITE_GLYPHS[level]

    @staticmethod
    def render_compact(state: GameState) -> str:
        """Compact single-line rendering for logging."""
        parts = [f"T{state.turn_number:04d}"]
        for pid, p in sorted(state.players.items()):
            parts.append(f"P{pid}[s={len(p.ships)} h={p.halite}]")
        return " ".join(parts)
