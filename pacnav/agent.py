"""Decision loop: stuck recovery, threat triage, safe foraging and escape fallback."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from . import config
from .environment import Snapshot
from .escape import EscapePlanner, EscapeScoring, random_safe_move
from .planner import PathPlanner
from .rules import Direction, Position
from .threats import ThreatMap

logger = logging.getLogger(__name__)

TIER_MISSING_INPUT = "missing_input"
TIER_STUCK = "stuck"
TIER_ESCAPE = "escape"
TIER_FORAGE = "forage"
TIER_FALLBACK = "fallback"

TIERS = (TIER_MISSING_INPUT, TIER_STUCK, TIER_ESCAPE, TIER_FORAGE, TIER_FALLBACK)


@dataclass(frozen=True)
class AgentMemory:
    """State carried between ticks by the caller.

    ``still_ticks`` counts the consecutive ticks the agent has been observed at
    ``last_position``, the current tick included.
    """

    last_position: Optional[Position] = None
    still_ticks: int = 0

    def observe(self, position: Position) -> "AgentMemory":
        if position == self.last_position:
            return AgentMemory(position, self.still_ticks + 1)
        return AgentMemory(position, 1)

    def recovered(self) -> "AgentMemory":
        return AgentMemory(self.last_position, 0)


@dataclass(frozen=True)
class Decision:
    move: Direction
    memory: AgentMemory
    tier: str


class PacmanAgent:
    """Rule-based Pac-Man controller for toroidal boards.

    Each tick runs the first tier that applies:
    - stuck: the same position for ``stuck_threshold`` ticks -> random safe move;
    - escape: a ghost within ``panic_distance`` -> best-scoring escape move;
    - forage: a safe route to the nearest food with enough room -> its first step;
    - fallback: escape move.

    The agent holds tuning and the random source only; per-tick memory is an
    :class:`AgentMemory` value passed in and returned by :meth:`decide`.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        rng: Optional[random.Random] = None,
        panic_distance: Optional[int] = None,
        stuck_threshold: Optional[int] = None,
        min_safe_area: Optional[int] = None,
        flood_fill_cap: Optional[int] = None,
        escape_scoring: Optional[EscapeScoring] = None,
    ) -> None:
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)

        self.panic_distance = int(panic_distance if panic_distance is not None else config.PANIC_DISTANCE)
        self.stuck_threshold = int(stuck_threshold if stuck_threshold is not None else config.STUCK_THRESHOLD)

        self.path_planner = PathPlanner(min_safe_area=min_safe_area, flood_fill_cap=flood_fill_cap)
        self.escape_planner = EscapePlanner(
            flood_fill_cap=flood_fill_cap,
            scoring=escape_scoring,
            rng=self.rng,
        )

    def info(self) -> str:
        return f"pacnav: cyclic survivor (seed={self.seed})"

    def decide(self, snapshot: Snapshot, memory: Optional[AgentMemory] = None) -> Decision:
        memory = memory if memory is not None else AgentMemory()
        grid = snapshot.grid
        if grid is None or snapshot.agent is None:
            logger.debug("Board or position unavailable; staying put")
            return Decision(Direction.STAY, memory, TIER_MISSING_INPUT)

        pos = grid.wrap(snapshot.agent)
        if not grid.in_bounds(pos):
            logger.debug("Position %s is off the %dx%d board; staying put", pos, grid.width, grid.height)
            return Decision(Direction.STAY, memory, TIER_MISSING_INPUT)
        threats = ThreatMap(grid, snapshot.threats)

        memory = memory.observe(pos)
        if memory.still_ticks >= self.stuck_threshold:
            move = random_safe_move(grid, pos, threats, self.rng)
            logger.debug("Stuck at %s for %d ticks; recovery move %s", pos, memory.still_ticks, move.value)
            return Decision(move, memory.recovered(), TIER_STUCK)

        nearest = threats.min_distance(pos)
        if nearest <= self.panic_distance:
            move = self.escape_planner.plan(grid, pos, threats)
            logger.debug("Ghost at distance %d from %s; escaping %s", nearest, pos, move.value)
            return Decision(move, memory, TIER_ESCAPE)

        move = self.path_planner.plan(grid, pos, threats)
        if move is not None:
            return Decision(move, memory, TIER_FORAGE)

        move = self.escape_planner.plan(grid, pos, threats)
        logger.debug("No safe food route from %s; fallback %s", pos, move.value)
        return Decision(move, memory, TIER_FALLBACK)
