"""Evasion: score the immediate moves by threat clearance and open space."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Optional

from . import config
from .grid import Grid
from .rules import Direction, MOVES_4, Position, legal_moves
from .threats import ThreatMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscapeScoring:
    """Empirical scoring weights; defaults come from ``config``."""

    distance_weight: float = field(default_factory=lambda: float(config.ESCAPE_DISTANCE_WEIGHT))
    cramped_area: int = field(default_factory=lambda: int(config.ESCAPE_CRAMPED_AREA))
    cramped_penalty: float = field(default_factory=lambda: float(config.ESCAPE_CRAMPED_PENALTY))
    tight_area: int = field(default_factory=lambda: int(config.ESCAPE_TIGHT_AREA))
    tight_penalty: float = field(default_factory=lambda: float(config.ESCAPE_TIGHT_PENALTY))
    open_area_weight: float = field(default_factory=lambda: float(config.ESCAPE_OPEN_AREA_WEIGHT))
    food_bonus: float = field(default_factory=lambda: float(config.ESCAPE_FOOD_BONUS))

    def open_area_term(self, area: int) -> float:
        if area < self.cramped_area:
            return -self.cramped_penalty
        if area < self.tight_area:
            return -self.tight_penalty
        return self.open_area_weight * float(area)


def random_safe_move(grid: Grid, pos: Position, threats: ThreatMap, rng: random.Random) -> Direction:
    """Uniform pick among legal moves that avoid danger tiles, else among all legal moves."""
    legal = legal_moves(grid, pos)
    if not legal:
        return Direction.STAY
    safe = [d for d in legal if not threats.is_danger(grid.step(pos, d))]
    return rng.choice(safe if safe else legal)


class EscapePlanner:
    """Pick the move that keeps the most distance and room from the ghosts.

    Moves into walls, onto a threat or next to one are never scored. When nothing survives,
    the choice is delegated to :func:`random_safe_move`.
    """

    def __init__(
        self,
        *,
        flood_fill_cap: Optional[int] = None,
        scoring: Optional[EscapeScoring] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.flood_fill_cap = int(flood_fill_cap if flood_fill_cap is not None else config.FLOOD_FILL_CAP)
        self.scoring = scoring if scoring is not None else EscapeScoring()
        self.rng = rng if rng is not None else random.Random()

    def score_moves(self, grid: Grid, pos: Position, threats: ThreatMap) -> Dict[Direction, float]:
        """Scores of the surviving candidates, in enumeration order."""
        scores: Dict[Direction, float] = {}
        for direction in MOVES_4:
            dest = grid.step(pos, direction)
            if dest is None or grid.is_wall(dest):
                continue
            clearance = threats.min_distance(dest)
            if clearance <= 1:
                continue

            area = grid.flood_fill(dest, grid.not_wall, self.flood_fill_cap)
            score = self.scoring.distance_weight * float(clearance)
            score += self.scoring.open_area_term(area)
            if grid.tile_at(dest) == config.FOOD:
                score += self.scoring.food_bonus
            scores[direction] = score
        return scores

    def plan(self, grid: Grid, pos: Position, threats: ThreatMap) -> Direction:
        pos = grid.wrap(pos)
        scores = self.score_moves(grid, pos, threats)
        if not scores:
            logger.debug("Every escape from %s is blocked or threatened; picking at random", pos)
            return random_safe_move(grid, pos, threats, self.rng)

        best: Optional[Direction] = None
        best_score = 0.0
        for direction, score in scores.items():
            if best is None or score > best_score:
                best = direction
                best_score = score
        return best
