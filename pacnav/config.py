"""Central configuration for the navigation engine and the headless simulator."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

# Logging
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)-12s - %(levelname)-8s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging if the host application has not done so already.

    This keeps the package library-friendly (it will not override an existing logging setup),
    while preserving CLI ergonomics.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT, stream=sys.stdout)


configure_logging()

logger = logging.getLogger("pacnav")


# ----------------------------
# Paths
# ----------------------------
REPO_ROOT = Path(__file__).resolve().parents[1]


def _default_runs_dir() -> Path:
    """Resolve the telemetry/replay directory (supports env override)."""
    raw = os.environ.get("PACNAV_RUNS_DIR")
    if raw:
        return Path(raw).expanduser().resolve()
    return REPO_ROOT / "runs"


RUNS_DIR = _default_runs_dir()


def set_runs_dir(runs_dir: str | Path) -> None:
    """Update the runs directory at runtime (used for isolated evaluations)."""
    global RUNS_DIR
    RUNS_DIR = Path(runs_dir).expanduser().resolve()


# ----------------------------
# Board tags
# ----------------------------
EMPTY = 0
WALL = 1
FOOD = 3
POWER = 5

GOAL_TAGS = frozenset({FOOD, POWER})


# ----------------------------
# Decision loop
# ----------------------------
# Threat triage: escape first when the nearest ghost is this close (toroidal steps).
PANIC_DISTANCE = 4

# Same reported position for this many consecutive ticks forces a random recovery move.
STUCK_THRESHOLD = 5

# Returned by ThreatMap.min_distance when no threats are known.
NO_THREAT_DISTANCE = 100

# Path planner acceptance filter.
MIN_SAFE_AREA = 80
FLOOD_FILL_CAP = 100

# Escape scoring (empirical tuning).
ESCAPE_DISTANCE_WEIGHT = 10.0
ESCAPE_CRAMPED_AREA = 20
ESCAPE_CRAMPED_PENALTY = 100000.0
ESCAPE_TIGHT_AREA = 50
ESCAPE_TIGHT_PENALTY = 5000.0
ESCAPE_OPEN_AREA_WEIGHT = 5.0
ESCAPE_FOOD_BONUS = 5.0


# ----------------------------
# Simulator
# ----------------------------
MAX_STEPS_PER_GAME = 2000
PROGRESS_LOG_INTERVAL = 200

DEFAULT_MAP = "\n".join(
    [
        "WWWWWWWWWW..WWWWWWWWWW",
        "W.........GG.........W",
        "W.WWWW.WW.WW.WW.WWWW.W",
        "W.W....W..WW..W....W.W",
        "W.W.WW.W.WWWW.W.WW.W.W",
        "W.W.WW..........WW.W.W",
        "Wo.....WW.WW.WW.....oW",
        "WW.WWW.WW.WW.WW.WWW.WW",
        "W..W..............W..W",
        "W.WW.WWW..P...WWW.WW.W",
        "..WW.WWW......WWW.WW..",
        "...W..............W...",
        "WW.WWW.WW.WW.WW.WWW.WW",
        "W......WW.WW.WW......W",
        "W.W.WW..........WW.W.W",
        "W.W.WW.W.WWWW.W.WW.W.W",
        "W.W....W..WW..W....W.W",
        "W.WWWW.WW.WW.WW.WWWW.W",
        "Wo........GG........oW",
        "W.WWWWWWWWWWWWWWWWWW.W",
        "W....................W",
        "WWWWWWWWWW..WWWWWWWWWW",
    ]
)


def validate_config() -> None:
    """Basic sanity checks."""
    ok = True
    if PANIC_DISTANCE < 0:
        logger.error("PANIC_DISTANCE must be >= 0")
        ok = False
    if STUCK_THRESHOLD < 1:
        logger.error("STUCK_THRESHOLD must be >= 1")
        ok = False
    if FLOOD_FILL_CAP < 1:
        logger.error("FLOOD_FILL_CAP must be >= 1")
        ok = False
    if MIN_SAFE_AREA > FLOOD_FILL_CAP:
        logger.error("MIN_SAFE_AREA must be <= FLOOD_FILL_CAP (flood fills never count past the cap)")
        ok = False
    if ESCAPE_CRAMPED_AREA > ESCAPE_TIGHT_AREA:
        logger.error("ESCAPE_CRAMPED_AREA must be <= ESCAPE_TIGHT_AREA")
        ok = False
    if MAX_STEPS_PER_GAME < 1:
        logger.error("MAX_STEPS_PER_GAME must be >= 1")
        ok = False
    if not ok:
        raise SystemExit(1)
