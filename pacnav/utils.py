from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from .rules import Position

logger = logging.getLogger(__name__)


def parse_position(raw: Any) -> Optional[Position]:
    """Parse ``"x,y"`` (extra fields such as ``"x,y,type"`` are ignored) into a position.

    Integer pairs are accepted as-is. Anything malformed yields None.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        parts = raw.split(",")
        if len(parts) < 2:
            return None
        try:
            return (int(parts[0].strip()), int(parts[1].strip()))
        except ValueError:
            return None
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        x, y = raw[0], raw[1]
        if isinstance(x, int) and isinstance(y, int) and not isinstance(x, bool) and not isinstance(y, bool):
            return (x, y)
    return None


def parse_threats(entries: Optional[Iterable[Any]]) -> List[Position]:
    """Parse threat entries, dropping malformed ones individually."""
    if entries is None:
        return []
    if isinstance(entries, str):
        entries = [entries]
    try:
        iterator = iter(entries)
    except TypeError:
        logger.debug("Threat list is not iterable (%r); assuming no threats", type(entries).__name__)
        return []
    threats: List[Position] = []
    dropped = 0
    for entry in iterator:
        pos = parse_position(entry)
        if pos is None:
            dropped += 1
            continue
        threats.append(pos)
    if dropped:
        logger.debug("Dropped %d malformed threat entries", dropped)
    return threats


def format_position(pos: Position) -> str:
    return f"{pos[0]},{pos[1]}"
