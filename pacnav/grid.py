"""Rectangular tile grid with toroidal-aware breadth-first search primitives.

Every search takes a caller-supplied ``passable`` predicate, so the same grid can be searched
with walls only, or with walls plus "virtual walls" around threats. Searches never mutate
the grid and allocate at most O(width * height) auxiliary state.

Coordinates are ``(x, y)`` with ``cells[x][y]`` storage; on a toroidal grid each axis wraps
independently.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Dict, Iterator, List, Optional, Sequence, Tuple

from . import config
from .rules import DELTAS, MOVES_4, Direction, Position


Passable = Callable[[Position], bool]
GoalTest = Callable[[Position], bool]

# Distance-field sentinel for unreached tiles and obstacles.
UNREACHED = -1


class GridError(ValueError):
    """Malformed board, or out-of-range access on a bounded (non-toroidal) grid."""


class DistanceField:
    """BFS depth per tile, or ``UNREACHED``."""

    def __init__(self, width: int, height: int, depths: List[List[int]]) -> None:
        self.width = width
        self.height = height
        self._depths = depths

    def __getitem__(self, pos: Position) -> int:
        x, y = pos
        if not (0 <= x < self.width and 0 <= y < self.height):
            return UNREACHED
        return self._depths[x][y]

    def reachable(self, pos: Position) -> bool:
        return self[pos] != UNREACHED

    def reached_count(self) -> int:
        return sum(1 for column in self._depths for depth in column if depth != UNREACHED)


class Grid:
    """Immutable snapshot of a board of integer tile tags."""

    def __init__(self, cells: Sequence[Sequence[int]], toroidal: bool = True) -> None:
        if cells is None or len(cells) == 0:
            raise GridError("null or empty board")
        first = cells[0]
        if first is None or len(first) == 0:
            raise GridError("empty columns")
        height = len(first)
        for x, column in enumerate(cells):
            if column is None or len(column) != height:
                raise GridError(f"ragged board: column {x} does not have {height} cells")

        self._cells: Tuple[Tuple[int, ...], ...] = tuple(tuple(int(v) for v in column) for column in cells)
        self.width = len(self._cells)
        self.height = height
        self.toroidal = bool(toroidal)

    @classmethod
    def filled(cls, width: int, height: int, tag: int = config.EMPTY, toroidal: bool = True) -> "Grid":
        if width <= 0 or height <= 0:
            raise GridError(f"grid dimensions must be positive, got {width}x{height}")
        return cls([[tag] * height for _ in range(width)], toroidal=toroidal)

    def __repr__(self) -> str:
        mode = "toroidal" if self.toroidal else "bounded"
        return f"Grid({self.width}x{self.height}, {mode})"

    # ----------------------------
    # Coordinates
    # ----------------------------
    def wrap(self, pos: Position) -> Position:
        if not self.toroidal:
            return pos
        return (pos[0] % self.width, pos[1] % self.height)

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, pos: Position) -> int:
        x, y = self.wrap(pos)
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise GridError(f"position {pos} is outside a {self.width}x{self.height} bounded grid")
        return self._cells[x][y]

    def is_wall(self, pos: Position) -> bool:
        return self.tile_at(pos) == config.WALL

    def step(self, pos: Position, direction: Direction) -> Optional[Position]:
        """Neighbor of ``pos`` in ``direction``; None when it falls off a bounded grid."""
        dx, dy = DELTAS[direction]
        nxt = (pos[0] + dx, pos[1] + dy)
        if self.toroidal:
            return self.wrap(nxt)
        if not self.in_bounds(nxt):
            return None
        return nxt

    def _steps(self, pos: Position) -> Iterator[Tuple[Direction, Position]]:
        for direction in MOVES_4:
            nxt = self.step(pos, direction)
            if nxt is not None:
                yield direction, nxt

    def neighbors4(self, pos: Position) -> List[Position]:
        """Orthogonal neighbors in Up, Right, Down, Left order."""
        return [nxt for _, nxt in self._steps(pos)]

    def toroidal_distance(self, a: Position, b: Position) -> int:
        """Per-axis wrapped Manhattan distance."""
        dx = abs(a[0] - b[0]) % self.width
        dy = abs(a[1] - b[1]) % self.height
        return min(dx, self.width - dx) + min(dy, self.height - dy)

    def not_wall(self, pos: Position) -> bool:
        return self.tile_at(pos) != config.WALL

    # ----------------------------
    # Searches
    # ----------------------------
    def flood_fill(self, start: Position, passable: Passable, limit: int) -> int:
        """Count tiles reached by BFS from ``start``, stopping after ``limit`` dequeues.

        The start tile always counts. The result is a lower bound on the size of the
        connected component once the cap is hit.
        """
        if limit <= 0:
            return 0
        start = self.wrap(start)
        if not self.in_bounds(start):
            return 0

        q: Deque[Position] = deque([start])
        seen = {start}
        count = 0
        while q and count < limit:
            cur = q.popleft()
            count += 1
            for nxt in self.neighbors4(cur):
                if nxt in seen or not passable(nxt):
                    continue
                seen.add(nxt)
                q.append(nxt)
        return count

    def shortest_path_first_step(
        self,
        start: Position,
        is_goal: GoalTest,
        passable: Passable,
    ) -> Optional[Direction]:
        """Direction of the first move on a shortest path to the nearest goal tile.

        The start tile is never a goal. Equal-length paths are decided by FIFO expansion with
        Up, Right, Down, Left enumeration. Returns None if no goal is reachable.
        """
        start = self.wrap(start)
        first_move: Dict[Position, Direction] = {}
        q: Deque[Position] = deque([start])
        seen = {start}
        while q:
            cur = q.popleft()
            if cur != start and is_goal(cur):
                return first_move[cur]
            for direction, nxt in self._steps(cur):
                if nxt in seen or not passable(nxt):
                    continue
                seen.add(nxt)
                first_move[nxt] = direction if cur == start else first_move[cur]
                q.append(nxt)
        return None

    def shortest_path(self, start: Position, goal: Position, passable: Passable) -> Optional[List[Position]]:
        """Full shortest path ``[start, ..., goal]``, or None if the goal is unreachable."""
        start = self.wrap(start)
        goal = self.wrap(goal)
        if not (self.in_bounds(start) and self.in_bounds(goal)):
            return None
        if start == goal:
            return [start]

        parent: Dict[Position, Position] = {}
        q: Deque[Position] = deque([start])
        seen = {start}
        while q:
            cur = q.popleft()
            if cur == goal:
                break
            for nxt in self.neighbors4(cur):
                if nxt in seen or not passable(nxt):
                    continue
                seen.add(nxt)
                parent[nxt] = cur
                q.append(nxt)

        if goal not in parent:
            return None
        path: List[Position] = [goal]
        while path[-1] != start:
            path.append(parent[path[-1]])
        return path[::-1]

    def all_distances(self, start: Position, passable: Passable) -> DistanceField:
        """BFS depth from ``start`` to every tile; unreached tiles hold ``UNREACHED``."""
        depths = [[UNREACHED] * self.height for _ in range(self.width)]
        start = self.wrap(start)
        if not self.in_bounds(start):
            return DistanceField(self.width, self.height, depths)

        depths[start[0]][start[1]] = 0
        q: Deque[Position] = deque([start])
        while q:
            cur = q.popleft()
            depth = depths[cur[0]][cur[1]]
            for nxt in self.neighbors4(cur):
                if depths[nxt[0]][nxt[1]] != UNREACHED or not passable(nxt):
                    continue
                depths[nxt[0]][nxt[1]] = depth + 1
                q.append(nxt)
        return DistanceField(self.width, self.height, depths)
