from __future__ import annotations

from typing import Iterable, Tuple

from . import config
from .grid import Grid, Passable
from .rules import Position


class ThreatMap:
    """Per-tick view of ghost positions measured with the torus metric.

    Tiles within distance 1 of a threat are "danger" tiles: planning searches treat them as
    walls even though the board does not.
    """

    def __init__(self, grid: Grid, threats: Iterable[Position] = ()) -> None:
        self.grid = grid
        self.threats: Tuple[Position, ...] = tuple(grid.wrap(t) for t in threats)

    def min_distance(self, pos: Position) -> int:
        if not self.threats:
            return config.NO_THREAT_DISTANCE
        return min(self.grid.toroidal_distance(pos, t) for t in self.threats)

    def is_danger(self, pos: Position) -> bool:
        return any(self.grid.toroidal_distance(pos, t) <= 1 for t in self.threats)

    def passable(self) -> Passable:
        """Predicate for planning searches: not a wall and not next to a threat."""
        grid = self.grid

        def _passable(pos: Position) -> bool:
            return not grid.is_wall(pos) and not self.is_danger(pos)

        return _passable
