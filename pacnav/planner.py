"""Safety-constrained foraging: first step towards the nearest reachable goal tile."""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Optional

from . import config
from .grid import Grid
from .rules import Direction, Position
from .threats import ThreatMap

logger = logging.getLogger(__name__)


class PathPlanner:
    """Shortest safe route to the nearest food, gated by a breathing-room check.

    The route avoids walls and danger tiles. Once BFS dequeues the nearest goal, the planner
    flood-fills from the tile one step along that route; if fewer than ``min_safe_area`` tiles
    are open there, it gives up and reports no direction. It does not retry against the
    next-nearest goal.
    """

    def __init__(
        self,
        *,
        goal_tags: Optional[Iterable[int]] = None,
        min_safe_area: Optional[int] = None,
        flood_fill_cap: Optional[int] = None,
    ) -> None:
        self.goal_tags: FrozenSet[int] = frozenset(goal_tags) if goal_tags is not None else config.GOAL_TAGS
        self.min_safe_area = int(min_safe_area if min_safe_area is not None else config.MIN_SAFE_AREA)
        self.flood_fill_cap = int(flood_fill_cap if flood_fill_cap is not None else config.FLOOD_FILL_CAP)

    def plan(self, grid: Grid, start: Position, threats: ThreatMap) -> Optional[Direction]:
        start = grid.wrap(start)
        passable = threats.passable()

        def is_goal(pos: Position) -> bool:
            return pos != start and grid.tile_at(pos) in self.goal_tags

        direction = grid.shortest_path_first_step(start, is_goal, passable)
        if direction is None:
            logger.debug("No safe route to any goal from %s", start)
            return None

        first = grid.step(start, direction)
        if first is None:
            return None
        area = grid.flood_fill(first, passable, self.flood_fill_cap)
        if area < self.min_safe_area:
            logger.debug(
                "Rejected %s from %s: open area %d < %d",
                direction.value,
                start,
                area,
                self.min_safe_area,
            )
            return None
        return direction
