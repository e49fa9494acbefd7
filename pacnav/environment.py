"""Per-tick snapshots and the adapter that reads them from a game environment.

An environment exposes ``get_game(index)`` (column-major tile board), ``get_pos(index)``
(``"x,y"``) and a ghost accessor that comes in one of two shapes: ``get_ghosts(index)`` or
``get_ghosts()``. The shape is detected once, when the adapter is built, and never re-probed.
Anything missing or malformed degrades to "unknown" (board/position) or "no threats".
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .grid import Grid
from .rules import Position
from .utils import parse_position, parse_threats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Immutable input of one decision: board, agent position and threat positions."""

    grid: Optional[Grid]
    agent: Optional[Position]
    threats: Tuple[Position, ...] = ()

    @classmethod
    def from_board(
        cls,
        board: Sequence[Sequence[int]],
        agent: Optional[Position],
        threats: Sequence[Position] = (),
        *,
        toroidal: bool = True,
    ) -> "Snapshot":
        return cls(Grid(board, toroidal=toroidal), agent, tuple(threats))


# ----------------------------
# Threat accessor variants
# ----------------------------
class ThreatAccessor:
    """No accessor available: nothing is known, so nothing is dangerous."""

    name = "none"

    def read(self) -> Any:
        return []


class IndexedThreatAccessor(ThreatAccessor):
    name = "indexed"

    def __init__(self, method: Callable[..., Any], index: int = 0) -> None:
        self._method = method
        self.index = index

    def read(self) -> Any:
        return self._method(self.index)


class PlainThreatAccessor(ThreatAccessor):
    name = "plain"

    def __init__(self, method: Callable[..., Any]) -> None:
        self._method = method

    def read(self) -> Any:
        return self._method()


def _accepts(method: Callable[..., Any], *args: Any) -> Optional[bool]:
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return None
    try:
        signature.bind(*args)
    except TypeError:
        return False
    return True


def select_threat_accessor(env: Any, index: int = 0, method_name: str = "get_ghosts") -> ThreatAccessor:
    """Pick the accessor variant for ``env``: indexed first, then no-argument, then none."""
    method = getattr(env, method_name, None)
    if not callable(method):
        logger.info("Environment has no %s(); assuming no threats", method_name)
        return ThreatAccessor()

    indexed = _accepts(method, index)
    if indexed is None or indexed:
        # Uninspectable callables (C extensions, some proxies) get the indexed shape first.
        return IndexedThreatAccessor(method, index)
    if _accepts(method):
        return PlainThreatAccessor(method)

    logger.warning("%s() accepts neither an index nor no arguments; assuming no threats", method_name)
    return ThreatAccessor()


class EnvironmentAdapter:
    """Reads :class:`Snapshot` values from an environment object."""

    def __init__(self, env: Any, *, index: int = 0, toroidal: Optional[bool] = None) -> None:
        self.env = env
        self.index = index
        self.threat_accessor = select_threat_accessor(env, index=index)
        self.toroidal = toroidal if toroidal is not None else self._probe_toroidal()
        logger.debug(
            "Environment adapter ready: threats=%s toroidal=%s",
            self.threat_accessor.name,
            self.toroidal,
        )

    def _probe_toroidal(self) -> bool:
        is_cyclic = getattr(self.env, "is_cyclic", None)
        if callable(is_cyclic):
            return bool(is_cyclic())
        return True

    def read_board(self) -> Optional[Grid]:
        get_game = getattr(self.env, "get_game", None)
        if not callable(get_game):
            return None
        try:
            board = get_game(self.index)
        except Exception as exc:
            logger.warning("Board accessor failed (%s); treating the board as missing", exc)
            return None
        if board is None:
            return None
        try:
            return Grid(board, toroidal=self.toroidal)
        except (ValueError, TypeError) as exc:
            logger.warning("Ignoring malformed board: %s", exc)
            return None

    def read_position(self) -> Optional[Position]:
        get_pos = getattr(self.env, "get_pos", None)
        if not callable(get_pos):
            return None
        try:
            raw = get_pos(self.index)
        except Exception as exc:
            logger.warning("Position accessor failed (%s); treating the position as unknown", exc)
            return None
        return parse_position(raw)

    def read_threats(self) -> List[Position]:
        try:
            raw = self.threat_accessor.read()
        except Exception as exc:
            logger.warning("Threat accessor %s failed (%s); assuming no threats", self.threat_accessor.name, exc)
            return []
        return parse_threats(raw)

    def snapshot(self) -> Snapshot:
        return Snapshot(self.read_board(), self.read_position(), tuple(self.read_threats()))
