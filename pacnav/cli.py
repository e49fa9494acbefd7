"""Command-line interface and run loop."""

from __future__ import annotations

import argparse
import cProfile
import json
import logging
import pstats
import time
from collections import Counter
from pathlib import Path
from typing import Optional

from . import config
from .agent import TIERS, AgentMemory, PacmanAgent
from .environment import EnvironmentAdapter
from .game import PacmanGame
from .replay import ReplayRecorder

logger = logging.getLogger(__name__)


def _output_path(path: str) -> Path:
    """Relative output paths land under the runs directory."""
    p = Path(path).expanduser()
    return p if p.is_absolute() else config.RUNS_DIR / p


def _open_jsonl(path: Optional[str]):
    if not path:
        return None
    p = _output_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p.open("a", encoding="utf-8")


def _read_map(map_path: Optional[str]) -> Optional[str]:
    if not map_path:
        return None
    return Path(map_path).read_text(encoding="utf-8")


def _replay_path(record: str, episode: int, num_games: int) -> Path:
    path = _output_path(record)
    if num_games == 1:
        return path
    return path.with_name(f"{path.stem}.{episode:04d}{path.suffix or '.msgpack'}")


def run(
    num_games: int,
    seed: Optional[int],
    max_steps: Optional[int] = None,
    map_path: Optional[str] = None,
    log_jsonl: Optional[str] = None,
    record: Optional[str] = None,
    debug: bool = False,
    runs_dir: Optional[str] = None,
) -> int:
    config_snapshot = {"MAX_STEPS_PER_GAME": config.MAX_STEPS_PER_GAME, "RUNS_DIR": config.RUNS_DIR}
    package_logger = logging.getLogger("pacnav")
    previous_level = package_logger.level
    if debug:
        package_logger.setLevel(logging.DEBUG)
    if max_steps is not None:
        config.MAX_STEPS_PER_GAME = int(max_steps)
    if runs_dir:
        config.set_runs_dir(runs_dir)

    config.validate_config()

    agent = PacmanAgent(seed=seed)
    game = PacmanGame(map_text=_read_map(map_path), seed=seed)
    adapter = EnvironmentAdapter(game)
    logger.info("Starting %d game(s) with %s (threat accessor: %s)", num_games, agent.info(), adapter.threat_accessor.name)

    scores: list[int] = []
    wins = 0
    total_steps = 0
    t0 = time.time()

    jsonl_f = _open_jsonl(log_jsonl)

    try:
        for i in range(num_games):
            game.reset()
            memory = AgentMemory()
            tiers: Counter[str] = Counter()
            recorder = None
            if record:
                recorder = ReplayRecorder(
                    _replay_path(record, i + 1, num_games),
                    meta={"episode": i + 1, "seed": seed, "width": game.width, "height": game.height},
                )
            start_game_time = time.time()

            while not game.game_over:
                if game.steps >= config.MAX_STEPS_PER_GAME:
                    logger.info("Reached per-game step cap (%d); ending game", config.MAX_STEPS_PER_GAME)
                    game.game_over = True
                    game.terminal_reason = "step_cap"
                    break

                snapshot = adapter.snapshot()
                decision = agent.decide(snapshot, memory)
                memory = decision.memory
                tiers[decision.tier] += 1
                if recorder is not None:
                    recorder.record(game.steps, snapshot.agent, snapshot.threats, decision.move, decision.tier)

                game.step(decision.move)
                total_steps += 1

                if game.steps % config.PROGRESS_LOG_INTERVAL == 0:
                    logger.info(
                        "Game %d | Step %d | Score %d/%d",
                        i + 1,
                        game.steps,
                        game.score,
                        game.total_goals,
                    )

            scores.append(game.score)
            wins += int(game.won)
            elapsed_game = time.time() - start_game_time
            logger.info(
                "Game %d/%d: Score=%d/%d Steps=%d (%.2fs) | %s | tiers %s",
                i + 1,
                num_games,
                game.score,
                game.total_goals,
                game.steps,
                elapsed_game,
                game.terminal_reason,
                dict(tiers),
            )
            if recorder is not None:
                recorder.save()
            if jsonl_f is not None:
                row = {
                    "ts": time.time(),
                    "episode": i + 1,
                    "score": game.score,
                    "total_goals": game.total_goals,
                    "steps": game.steps,
                    "seed": seed,
                    "won": bool(game.won),
                    "terminal_reason": game.terminal_reason,
                    "width": game.width,
                    "height": game.height,
                }
                row.update({f"tier_{name}": int(tiers.get(name, 0)) for name in TIERS})
                jsonl_f.write(json.dumps(row) + "\n")
                jsonl_f.flush()

        elapsed = time.time() - t0
        if scores:
            logger.info(
                "Session: avg=%.2f max=%d wins=%d games=%d total_steps=%d (%.2fs)",
                sum(scores) / len(scores),
                max(scores),
                wins,
                len(scores),
                total_steps,
                elapsed,
            )
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted after %d games", len(scores))
        return 130
    finally:
        if jsonl_f is not None:
            jsonl_f.close()
        for attr, value in config_snapshot.items():
            setattr(config, attr, value)
        package_logger.setLevel(previous_level)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Pac-Man navigation agent (headless)")
    parser.add_argument("--num-games", "--games", type=int, default=10, help="Number of games to run")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--max-steps", type=int, default=None, help="Per-game step cap (safety)")
    parser.add_argument("--map", dest="map_path", type=str, default=None, help="Map file (W/# . o P G characters)")
    parser.add_argument("--debug", action="store_true", help="Log every decision tier at DEBUG level")
    parser.add_argument("--profile", action="store_true", help="Enable profiling output")
    parser.add_argument("--runs-dir", type=str, default=None, help="Directory for relative --log-jsonl/--record paths")
    parser.add_argument(
        "--log-jsonl",
        type=str,
        default=None,
        help="Append per-episode metrics to a JSONL file (e.g. session.jsonl under the runs directory)",
    )
    parser.add_argument(
        "--record",
        type=str,
        default=None,
        help="Write msgpack decision traces (one file per game when --num-games > 1)",
    )

    args = parser.parse_args(argv)
    kwargs = dict(
        num_games=args.num_games,
        seed=args.seed,
        max_steps=args.max_steps,
        map_path=args.map_path,
        log_jsonl=args.log_jsonl,
        record=args.record,
        debug=args.debug,
        runs_dir=args.runs_dir,
    )

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        rc = run(**kwargs)
        profiler.disable()
        stats = pstats.Stats(profiler).sort_stats("cumulative")
        print("\n=== Profiling Results ===")
        stats.print_stats(30)
        return rc

    return run(**kwargs)
