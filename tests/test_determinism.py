from __future__ import annotations

import json
import os
import shutil
import unittest
import uuid

from pacnav import config
from pacnav.cli import run
from pacnav.replay import load_replay


class DeterminismTest(unittest.TestCase):
    def setUp(self):
        self.tmp_root = os.path.abspath(os.path.join(os.getcwd(), f"tmp-determinism-{uuid.uuid4().hex}"))
        os.makedirs(self.tmp_root, exist_ok=True)

    def tearDown(self):
        shutil.rmtree(self.tmp_root, ignore_errors=True)

    def _run_rows(self, seed: int, log_path: str, record: str | None = None) -> list[dict]:
        rc = run(num_games=3, seed=seed, max_steps=200, log_jsonl=log_path, record=record)
        self.assertEqual(rc, 0)
        with open(log_path, encoding="utf-8") as fh:
            return [json.loads(line) for line in fh]

    def test_headless_runs_are_deterministic(self):
        outcomes = []
        for run_id in range(2):
            log_path = os.path.join(self.tmp_root, f"run{run_id}.jsonl")
            rows = self._run_rows(2026, log_path)
            outcomes.append([(r["score"], r["steps"], r["terminal_reason"]) for r in rows])
        self.assertEqual(outcomes[0], outcomes[1])

    def test_telemetry_rows_count_every_tier(self):
        rows = self._run_rows(7, os.path.join(self.tmp_root, "tiers.jsonl"))
        self.assertEqual(len(rows), 3)
        for row in rows:
            tier_total = sum(v for k, v in row.items() if k.startswith("tier_"))
            self.assertEqual(tier_total, row["steps"])
            self.assertLessEqual(row["steps"], 200)
            self.assertIn(row["terminal_reason"], ("win", "collision", "step_cap"))

    def test_step_cap_is_restored(self):
        self._run_rows(1, os.path.join(self.tmp_root, "cap.jsonl"))
        self.assertEqual(config.MAX_STEPS_PER_GAME, 2000)

    def test_runs_dir_is_restored(self):
        original = config.RUNS_DIR
        rc = run(num_games=1, seed=4, max_steps=20, log_jsonl="session.jsonl", runs_dir=self.tmp_root)
        self.assertEqual(rc, 0)
        self.assertTrue(os.path.exists(os.path.join(self.tmp_root, "session.jsonl")))
        self.assertEqual(config.RUNS_DIR, original)

    def test_recordings_match_telemetry(self):
        log_path = os.path.join(self.tmp_root, "rec.jsonl")
        rows = self._run_rows(3, log_path, record=os.path.join(self.tmp_root, "trace.msgpack"))
        for episode, row in enumerate(rows, start=1):
            replay = load_replay(os.path.join(self.tmp_root, f"trace.{episode:04d}.msgpack"))
            self.assertIsNotNone(replay)
            self.assertEqual(len(replay.ticks), row["steps"])
            self.assertEqual(replay.meta["episode"], episode)


if __name__ == "__main__":
    unittest.main()
