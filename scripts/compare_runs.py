from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

TIER_COLUMNS = [
    "tier_missing_input",
    "tier_stuck",
    "tier_escape",
    "tier_forage",
    "tier_fallback",
]


def describe(path: Path, label: str) -> None:
    if not path.exists():
        print(f"warning: {path} not found")
        return
    df = pd.read_json(path, lines=True)
    print(f"\n--- {label} ({path.name}) ---")
    print(df[["score", "steps"]].describe())
    print(f"win rate: {100.0 * df['won'].mean():.1f}%")

    cols = [c for c in TIER_COLUMNS if c in df.columns]
    total_steps = df["steps"].sum()
    if cols and total_steps:
        shares = 100.0 * df[cols].sum() / total_steps
        print("decision tiers (% of steps):")
        print(shares.round(2).to_string())


def main() -> None:
    parser = argparse.ArgumentParser(description="Describe and compare JSONL benchmark runs")
    parser.add_argument(
        "--baseline",
        type=Path,
        default=Path("runs/baseline.jsonl"),
        help="Reference run to summarize",
    )
    parser.add_argument(
        "--candidate",
        type=Path,
        default=Path("runs/candidate.jsonl"),
        help="Run to compare against the baseline",
    )
    args = parser.parse_args()

    describe(args.baseline, "baseline")
    describe(args.candidate, "candidate")


if __name__ == "__main__":
    main()
