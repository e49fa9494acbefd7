from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple

if TYPE_CHECKING:
    from .grid import Grid

Position = Tuple[int, int]
Delta = Tuple[int, int]


class Direction(Enum):
    """Move command returned once per tick."""

    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"
    STAY = "stay"


# y grows upwards: the first map line is the top row.
DELTAS: Dict[Direction, Delta] = {
    Direction.UP: (0, 1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.STAY: (0, 0),
}

# Fixed enumeration order; BFS tie-breaking and escape tie-breaking depend on it.
MOVES_4: Sequence[Direction] = (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT)


def legal_moves(grid: "Grid", pos: Position) -> List[Direction]:
    """Return the orthogonal moves whose destination exists and is not a wall."""
    moves: List[Direction] = []
    for direction in MOVES_4:
        dest = grid.step(pos, direction)
        if dest is None or grid.is_wall(dest):
            continue
        moves.append(direction)
    return moves


def is_legal_move(grid: "Grid", pos: Position, direction: Direction) -> bool:
    """Return True if the move is legal; STAY always is."""
    if direction is Direction.STAY:
        return True
    dest = grid.step(pos, direction)
    return dest is not None and not grid.is_wall(dest)
