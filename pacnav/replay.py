"""msgpack decision traces: what the agent saw and chose, tick by tick.

Key design goals:
- Atomic writes (temp file + replace), so a crashed run never leaves a half-written trace.
- Tolerant decoding: malformed rows are skipped, a corrupt file reads as "no replay".
"""

from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import msgpack

from .rules import Direction, Position

logger = logging.getLogger(__name__)

# On-disk format version for the msgpack payload.
REPLAY_FORMAT_VERSION = 1


@dataclass(frozen=True)
class ReplayTick:
    tick: int
    agent: Optional[Position]
    threats: Tuple[Position, ...]
    move: Direction
    tier: str


@dataclass
class Replay:
    meta: Dict[str, Any] = field(default_factory=dict)
    ticks: List[ReplayTick] = field(default_factory=list)


def _as_position(raw: Any) -> Optional[Position]:
    if isinstance(raw, (list, tuple)) and len(raw) == 2 and all(isinstance(v, int) for v in raw):
        return (int(raw[0]), int(raw[1]))
    return None


class ReplayRecorder:
    """Buffer ticks in memory and write them once with :meth:`save`."""

    def __init__(self, path: str | Path, meta: Optional[Dict[str, Any]] = None) -> None:
        self.path = Path(path)
        self.meta: Dict[str, Any] = dict(meta or {})
        self.rows: List[list] = []

    def record(
        self,
        tick: int,
        agent: Optional[Position],
        threats: Sequence[Position],
        move: Direction,
        tier: str,
    ) -> None:
        self.rows.append(
            [
                int(tick),
                list(agent) if agent is not None else None,
                [list(t) for t in threats],
                move.value,
                tier,
            ]
        )

    def save(self) -> bool:
        """Write the trace atomically; returns True on success."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"v": REPLAY_FORMAT_VERSION, "meta": self.meta, "ticks": self.rows}
        blob = msgpack.packb(payload, use_bin_type=True)
        tmp_path = str(self.path) + ".tmp"

        def _write_blob(path: str) -> None:
            with open(path, "wb") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())

        try:
            _write_blob(tmp_path)
        except OSError as exc:
            logger.error("Failed to write temp replay: %s", exc)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False

        saved = False
        try:
            os.replace(tmp_path, self.path)
            saved = True
        except OSError as exc:
            if exc.errno in {errno.EACCES, errno.EPERM}:
                logger.warning("Atomic replace denied (%s); falling back to overwrite", exc)
                try:
                    _write_blob(str(self.path))
                    saved = True
                except OSError as fallback_exc:
                    logger.error("Fallback write failed: %s", fallback_exc)
            else:
                logger.error("Replay save failed: %s", exc)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

        if saved:
            logger.info("Saved %d replay ticks to %s", len(self.rows), self.path)
        return saved


def decode_replay(blob: bytes) -> Replay:
    """Decode a replay payload; raises ValueError for unsupported payloads."""
    obj = msgpack.unpackb(blob, raw=False, use_list=False)
    if not isinstance(obj, dict) or "ticks" not in obj:
        raise ValueError("Unsupported replay payload")
    version = int(obj.get("v", 0) or 0)
    if version != REPLAY_FORMAT_VERSION:
        logger.warning("Replay format v%d differs from v%d; decoding anyway", version, REPLAY_FORMAT_VERSION)

    meta = obj.get("meta") or {}
    replay = Replay(meta=dict(meta) if isinstance(meta, dict) else {})
    skipped = 0
    for row in obj.get("ticks") or ():
        if not isinstance(row, (list, tuple)) or len(row) != 5:
            skipped += 1
            continue
        tick, agent, threats, move, tier = row
        try:
            direction = Direction(move)
        except ValueError:
            skipped += 1
            continue
        positions = tuple(p for p in (_as_position(t) for t in (threats or ())) if p is not None)
        replay.ticks.append(ReplayTick(int(tick), _as_position(agent), positions, direction, str(tier)))
    if skipped:
        logger.warning("Skipped %d malformed replay rows", skipped)
    return replay


def load_replay(path: str | Path) -> Optional[Replay]:
    """Load a replay file; missing or corrupt files yield None."""
    path = Path(path)
    if not path.exists():
        logger.info("No replay file at %s", path)
        return None
    try:
        return decode_replay(path.read_bytes())
    except (ValueError, TypeError, msgpack.UnpackException) as exc:
        logger.error("Load replay failed: %s", exc)
        return None
