from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from .build import food_item, new_build
from .calculator import aggregate_display_stats, combat_stats, resolve_tick
from .catalog import SkillCatalog, cumulative_cost, get_level_entry
from .config import CatalogError, CatalogRepository, load_catalog
from .engine import simulate_sustained, simulate_without_food
from .formatting import (
    format_code_to_name,
    format_stat_details,
    format_sustained_result,
    format_tick_result,
)
from .models import MAX_SKILL_LEVEL, BuildState, ModelError, parse_skill_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="combate-simulator",
        description="Character build stats and combat tick simulation.",
    )
    parser.add_argument(
        "--catalog",
        default=None,
        help="Path to the JSON/YAML skills catalog (defaults to data/skills.json).",
    )
    parser.add_argument(
        "--build",
        default=None,
        help="Path to a JSON build state; a fresh level 1 build is used when omitted.",
    )
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    parser.add_argument("--log-level", default="warning")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("stats", help="Show aggregated stat totals for the build.")

    tick = subparsers.add_parser("tick", help="Resolve a single combat tick.")
    tick.add_argument("--seed", type=int, default=None)

    combat = subparsers.add_parser("combat", help="Run a sustained combat until defeat or the tick cap.")
    combat.add_argument("--food", default=None, help="Catalog code of the food to eat when health is critical.")
    combat.add_argument("--seed", type=int, default=None)
    combat.add_argument("--show-log", action="store_true", help="Print the full trace (table output only).")

    cost = subparsers.add_parser("cost", help="Show per-level and cumulative costs of a skill.")
    cost.add_argument("skill", help="Skill code, e.g. attack or criticalChance.")
    return parser


def _load_catalog(path: Optional[str]) -> SkillCatalog:
    if path:
        return load_catalog(Path(path))
    return CatalogRepository().load()


def _load_build(path: Optional[str], catalog: SkillCatalog) -> BuildState:
    if not path:
        return new_build(catalog)
    build_path = Path(path)
    if not build_path.exists():
        raise ModelError(f"Build file not found: {build_path}")
    try:
        payload = json.loads(build_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ModelError(f"Invalid JSON in {build_path}: {exc}") from exc
    return BuildState.from_dict(payload)


def _print_json(payload: Any) -> None:
    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def _run_stats(args: argparse.Namespace, catalog: SkillCatalog, state: BuildState) -> None:
    stats = aggregate_display_stats(state, catalog)
    if args.format == "json":
        _print_json({code.value: details.to_dict() for code, details in stats.items()})
        return
    for code, details in stats.items():
        print(format_stat_details(code, details))


def _run_tick(args: argparse.Namespace, catalog: SkillCatalog, state: BuildState) -> None:
    result = resolve_tick(combat_stats(state, catalog), random.Random(args.seed))
    if args.format == "json":
        _print_json(result.to_dict())
        return
    print(format_tick_result(result))


def _run_combat(args: argparse.Namespace, catalog: SkillCatalog, state: BuildState) -> None:
    rng = random.Random(args.seed)
    if args.food:
        result = simulate_sustained(state, catalog, food_item(catalog, args.food), rng)
    else:
        result = simulate_without_food(state, catalog, rng)
    if args.format == "json":
        _print_json(result.to_dict())
        return
    print(format_sustained_result(result, show_log=args.show_log))


def _run_cost(args: argparse.Namespace, catalog: SkillCatalog) -> None:
    code = parse_skill_code(args.skill)
    rows = []
    for level in range(1, MAX_SKILL_LEVEL + 1):
        entry = get_level_entry(catalog, code, level)
        rows.append(
            {
                "level": level,
                "value": entry.value if entry else None,
                "cost": entry.cost if entry else None,
                "unlockAtLevel": entry.unlock_at_level if entry else None,
                "cumulativeCost": cumulative_cost(catalog, code, level),
            }
        )
    if args.format == "json":
        _print_json({"skill": code.value, "levels": rows})
        return

    header = f"{'Level':<7}{'Value':<9}{'Cost':<6}{'Unlock':<8}Cumulative"
    print(format_code_to_name(code.value))
    print(header)
    print("-" * len(header))
    for row in rows:
        value = "-" if row["value"] is None else f"{row['value']:g}"
        cost = "-" if row["cost"] is None else str(row["cost"])
        unlock = "-" if row["unlockAtLevel"] is None else str(row["unlockAtLevel"])
        print(f"{row['level']:<7}{value:<9}{cost:<6}{unlock:<8}{row['cumulativeCost']}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        catalog = _load_catalog(args.catalog)
    except CatalogError as exc:
        parser.error(str(exc))

    try:
        if args.command == "cost":
            _run_cost(args, catalog)
            return 0
        state = _load_build(args.build, catalog)
        if args.command == "stats":
            _run_stats(args, catalog, state)
        elif args.command == "tick":
            _run_tick(args, catalog, state)
        elif args.command == "combat":
            _run_combat(args, catalog, state)
    except ModelError as exc:
        parser.error(str(exc))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
