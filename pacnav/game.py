"""Headless Pac-Man simulator used by the CLI, benchmarks and tests.

The simulator enforces the rules the decision engine deliberately ignores: walls block
Pac-Man, eaten food scores, ghosts wander at random and touching one ends the game.
It implements the environment shape read by :class:`pacnav.environment.EnvironmentAdapter`.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from . import config
from .rules import DELTAS, Direction, Position
from .utils import format_position

logger = logging.getLogger(__name__)

Ghost = Tuple[int, int, int]

# Ghosts try directions in this order before the random pick.
GHOST_MOVES = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


class PacmanGame:
    """Game state manager."""

    def __init__(self, map_text: Optional[str] = None, seed: Optional[int] = None, toroidal: bool = True) -> None:
        self.seed = seed
        self.rng = random.Random(seed)
        self.toroidal = bool(toroidal)
        self.map_text = map_text if map_text is not None else config.DEFAULT_MAP

        self.board: List[List[int]] = []
        self.width = 0
        self.height = 0
        self.pacman: Optional[Position] = None
        self.ghosts: List[Ghost] = []
        self.total_goals = 0
        self.reset()

    def reset(self) -> None:
        self.load_map(self.map_text)
        self.score = 0
        self.steps = 0
        self.game_over = False
        self.won = False
        self.terminal_reason: Optional[str] = None

    def load_map(self, text: str) -> None:
        """Parse a map string; the first line is the top row (highest y).

        ``W``/``#`` wall, ``.`` food, ``o`` power pellet, ``P`` Pac-Man start, ``G`` ghost (on top
        of food); anything else is empty. Short lines are padded with empty tiles.
        """
        lines = text.strip("\n").split("\n")
        if not lines or not lines[0]:
            raise ValueError("empty map")
        self.height = len(lines)
        self.width = max(len(line) for line in lines)
        self.board = [[config.EMPTY] * self.height for _ in range(self.width)]
        self.pacman = None
        self.ghosts = []
        self.total_goals = 0

        for i, line in enumerate(lines):
            y = self.height - 1 - i
            for x in range(self.width):
                c = line[x] if x < len(line) else " "
                if c in ("W", "#"):
                    self.board[x][y] = config.WALL
                elif c == ".":
                    self.board[x][y] = config.FOOD
                    self.total_goals += 1
                elif c == "o":
                    self.board[x][y] = config.POWER
                    self.total_goals += 1
                elif c == "P":
                    self.pacman = (x, y)
                elif c == "G":
                    self.board[x][y] = config.FOOD
                    self.total_goals += 1
                    self.ghosts.append((x, y, 0))

        if self.pacman is None:
            logger.warning("Map has no Pac-Man start tile 'P'")

    # ----------------------------
    # Environment interface
    # ----------------------------
    def get_game(self, index: int = 0) -> List[List[int]]:
        return [list(column) for column in self.board]

    def get_pos(self, index: int = 0) -> Optional[str]:
        if self.pacman is None:
            return None
        return format_position(self.pacman)

    def get_ghosts(self, index: Optional[int] = None) -> List[str]:
        return [f"{x},{y},{kind}" for x, y, kind in self.ghosts]

    def is_cyclic(self) -> bool:
        return self.toroidal

    # ----------------------------
    # Rules
    # ----------------------------
    def _target(self, pos: Position, direction: Direction) -> Position:
        dx, dy = DELTAS[direction]
        nx, ny = pos[0] + dx, pos[1] + dy
        if self.toroidal:
            return (nx % self.width, ny % self.height)
        if not (0 <= nx < self.width and 0 <= ny < self.height):
            return pos
        return (nx, ny)

    def remaining_goals(self) -> int:
        return sum(1 for column in self.board for tag in column if tag in config.GOAL_TAGS)

    def move_pacman(self, direction: Direction) -> bool:
        """Apply Pac-Man's move; returns True if a goal tile was eaten."""
        if direction is Direction.STAY or self.pacman is None:
            return False

        nx, ny = self._target(self.pacman, direction)
        if self.board[nx][ny] == config.WALL:
            return False

        self.pacman = (nx, ny)
        if self.board[nx][ny] in config.GOAL_TAGS:
            self.board[nx][ny] = config.EMPTY
            self.score += 1
            return True
        return False

    def move_ghosts(self) -> None:
        for i, (x, y, kind) in enumerate(self.ghosts):
            options = []
            for direction in GHOST_MOVES:
                nx, ny = self._target((x, y), direction)
                if self.board[nx][ny] != config.WALL:
                    options.append((nx, ny))
            if options:
                nx, ny = self.rng.choice(options)
                self.ghosts[i] = (nx, ny, kind)

    def check_collision(self) -> bool:
        if self.pacman is None:
            return False
        return any((x, y) == self.pacman for x, y, _ in self.ghosts)

    def step(self, direction: Direction) -> bool:
        """Advance one tick; returns True if Pac-Man ate this tick."""
        if self.game_over:
            return False
        self.steps += 1

        ate = self.move_pacman(direction)
        self.move_ghosts()

        if self.score >= self.total_goals:
            self.game_over = True
            self.won = True
            self.terminal_reason = "win"
            logger.debug("All %d goals eaten in %d steps", self.total_goals, self.steps)
            return ate

        if self.check_collision():
            self.game_over = True
            self.terminal_reason = "collision"
            logger.debug("Caught at %s after %d steps", self.pacman, self.steps)
        return ate
