from __future__ import annotations

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from combate.cli import main


PROJECT_ROOT = Path(__file__).resolve().parents[1]
CATALOG = str(PROJECT_ROOT / "data" / "skills.json")


def _run(*argv: str) -> str:
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        exit_code = main(["--catalog", CATALOG, *argv])
    assert exit_code == 0
    return buffer.getvalue()


class CliTests(unittest.TestCase):
    def test_cost_table_as_json(self) -> None:
        payload = json.loads(_run("--format", "json", "cost", "attack"))
        self.assertEqual(payload["skill"], "attack")
        self.assertEqual(len(payload["levels"]), 10)
        self.assertEqual(payload["levels"][2]["cumulativeCost"], 6)
        self.assertEqual(payload["levels"][-1]["cumulativeCost"], 55)

    def test_cost_table_as_text(self) -> None:
        output = _run("cost", "criticalChance")
        self.assertTrue(output.startswith("Critical Chance"))
        self.assertIn("Cumulative", output)

    def test_stats_for_saved_build(self) -> None:
        build = {
            "equippedItems": {
                "weapon": {"code": "gun", "name": "Gun", "stats": {"attack": 50, "criticalChance": 10}},
            },
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "build.json"
            path.write_text(json.dumps(build), encoding="utf-8")
            payload = json.loads(_run("--build", str(path), "--format", "json", "stats"))

        self.assertEqual(payload["attack"]["total"], 70.0)
        self.assertEqual(payload["criticalChance"]["total"], 20.0)
        self.assertNotIn("health", payload)

    def test_tick_and_combat_are_seeded(self) -> None:
        first = json.loads(_run("--format", "json", "tick", "--seed", "7"))
        second = json.loads(_run("--format", "json", "tick", "--seed", "7"))
        self.assertEqual(first, second)
        self.assertEqual(first["log"], second["log"])

        fed = json.loads(_run("--format", "json", "combat", "--food", "steak", "--seed", "3"))
        plain = json.loads(_run("--format", "json", "combat", "--seed", "3"))
        self.assertGreater(fed["ticksSurvived"], plain["ticksSurvived"])
        self.assertEqual(plain["finalHunger"], 10)

    def test_combat_text_output_can_include_trace(self) -> None:
        output = _run("combat", "--seed", "3", "--show-log")
        self.assertIn("Ticks survived", output)
        self.assertIn("--- Hit 1 (Health:", output)
        self.assertNotIn("<strong>", output)

    def test_malformed_build_file_is_a_usage_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            empty = Path(tmp) / "empty.json"
            empty.write_text(json.dumps({"assignedSkillLevels": None}), encoding="utf-8")
            listed = Path(tmp) / "listed.json"
            listed.write_text(json.dumps({"assignedSkillLevels": [3]}), encoding="utf-8")

            payload = json.loads(_run("--build", str(empty), "--format", "json", "stats"))
            self.assertEqual(payload["attack"]["skillValue"], 20.0)

            with redirect_stderr(io.StringIO()):
                with self.assertRaises(SystemExit) as ctx:
                    main(["--catalog", CATALOG, "--build", str(listed), "stats"])
        self.assertEqual(ctx.exception.code, 2)

    def test_errors_exit_with_usage_code(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as missing_catalog:
                main(["--catalog", str(PROJECT_ROOT / "missing.json"), "stats"])
            with self.assertRaises(SystemExit) as unknown_skill:
                main(["--catalog", CATALOG, "cost", "stamina"])
            with self.assertRaises(SystemExit) as unknown_food:
                main(["--catalog", CATALOG, "combat", "--food", "cake"])

        self.assertEqual(missing_catalog.exception.code, 2)
        self.assertEqual(unknown_skill.exception.code, 2)
        self.assertEqual(unknown_food.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
