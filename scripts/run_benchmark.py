import argparse
import subprocess
import sys
from pathlib import Path

import pandas as pd


def run_command(cmd: list[str]) -> None:
    print(f">> {' '.join(cmd)}")
    subprocess.run(cmd, check=True)


def describe_jsonl(path: Path, label: str) -> None:
    if not path.exists():
        print(f"warning: {path} does not exist")
        return
    df = pd.read_json(path, lines=True)
    cols = ["score", "steps", "total_goals"]
    print(f"\n--- {label} ({path.name}) ---")
    print(df[cols].describe())
    print(f"win rate: {100.0 * df['won'].mean():.1f}%")
    print(df["terminal_reason"].value_counts().to_string())


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a seeded headless benchmark for the Pac-Man agent")
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed to fix during the benchmark",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=100,
        help="Number of games to play",
    )
    parser.add_argument(
        "--map",
        type=Path,
        default=None,
        help="Optional map file (defaults to the built-in maze)",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=2000,
        help="Per-game step cap",
    )
    parser.add_argument(
        "--runs-dir",
        type=Path,
        default=Path("runs"),
        help="Where to emit JSONL telemetry files",
    )

    args = parser.parse_args()
    args.runs_dir.mkdir(parents=True, exist_ok=True)

    log = args.runs_dir / f"bench_seed{args.seed}.jsonl"
    if log.exists():
        log.unlink()

    cmd = [
        sys.executable,
        "-m",
        "pacnav",
        "--num-games",
        str(args.games),
        "--seed",
        str(args.seed),
        "--max-steps",
        str(args.max_steps),
        "--log-jsonl",
        str(log.resolve()),
    ]
    if args.map is not None:
        cmd += ["--map", str(args.map)]

    run_command(cmd)
    describe_jsonl(log, "benchmark")


if __name__ == "__main__":
    main()
