from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from .build import apply_sustained_result, apply_tick, food_item
from .calculator import aggregate_display_stats, combat_stats, resolve_tick
from .catalog import SkillCatalog, cumulative_cost, get_level_entry, skill_table
from .config import CatalogRepository, resolve_project_root
from .engine import simulate_sustained, simulate_without_food
from .formatting import build_summary
from .models import (
    DEFAULT_MAX_HEALTH,
    DEFAULT_MAX_HUNGER,
    MAX_SKILL_LEVEL,
    BuildState,
    ModelError,
    parse_skill_code,
)

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Combate Build Simulator API",
    description="Stat aggregation and combat tick simulation for character builds.",
    version="1.0.0",
)

catalog_repo = CatalogRepository(project_root=resolve_project_root())
catalog: SkillCatalog = catalog_repo.load_or_unloaded()


class ItemInput(BaseModel):
    code: str
    name: str = ""
    stats: Dict[str, float] = Field(default_factory=dict)


class BuildStateInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_level: int = Field(default=1, ge=1, alias="playerLevel")
    skill_points_available: int = Field(default=0, alias="skillPointsAvailable")
    skill_points_spent: int = Field(default=0, ge=0, alias="skillPointsSpent")
    current_health: float = Field(default=DEFAULT_MAX_HEALTH, alias="currentHealth")
    current_hunger: int = Field(default=DEFAULT_MAX_HUNGER, ge=0, alias="currentHunger")
    assigned_skill_levels: Dict[str, int] = Field(default_factory=dict, alias="assignedSkillLevels")
    equipped_items: Dict[str, Optional[ItemInput]] = Field(default_factory=dict, alias="equippedItems")
    active_buffs: Dict[str, Optional[ItemInput]] = Field(default_factory=dict, alias="activeBuffs")


class StatsRequest(BaseModel):
    build: BuildStateInput = Field(default_factory=BuildStateInput)


class TickRequest(BaseModel):
    build: BuildStateInput = Field(default_factory=BuildStateInput)
    seed: Optional[int] = None


class CombatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    build: BuildStateInput = Field(default_factory=BuildStateInput)
    food_code: Optional[str] = Field(default=None, alias="foodCode")
    seed: Optional[int] = None


def _to_build_state(payload: BuildStateInput) -> BuildState:
    try:
        return BuildState.from_dict(payload.model_dump(by_alias=True))
    except ModelError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid build: {exc}") from exc


def _rng(seed: Optional[int]) -> random.Random:
    return random.Random(seed)


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "catalog_loaded": catalog.loaded}


@app.get("/api/v1/catalog")
def catalog_summary() -> Dict[str, Any]:
    return {
        "loaded": catalog.loaded,
        "skills": {
            code: {
                str(level): {
                    "value": entry.value,
                    "cost": entry.cost,
                    "unlockAtLevel": entry.unlock_at_level,
                }
                for level, entry in sorted(skill_table(catalog, code).items())
            }
            for code in sorted(catalog.skills.keys())
        },
        "items": {
            item.code: {
                "usage": item.usage,
                "isConsumable": item.is_consumable,
                "flatStats": dict(item.flat_stats),
            }
            for item in catalog.items.values()
        },
        "foods": sorted(item.code for item in catalog.food_items()),
    }


@app.get("/api/v1/skills/{code}/cost")
def skill_cost(code: str, level: int = MAX_SKILL_LEVEL) -> Dict[str, Any]:
    try:
        skill = parse_skill_code(code)
    except ModelError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    entry = get_level_entry(catalog, skill, level)
    return {
        "skill": skill.value,
        "level": level,
        "cumulativeCost": cumulative_cost(catalog, skill, level),
        "entry": (
            {"value": entry.value, "cost": entry.cost, "unlockAtLevel": entry.unlock_at_level}
            if entry is not None
            else None
        ),
    }


@app.post("/api/v1/stats")
def stats(payload: StatsRequest) -> Dict[str, Any]:
    state = _to_build_state(payload.build)
    details = aggregate_display_stats(state, catalog)
    return {
        "stats": {code.value: item.to_dict() for code, item in details.items()},
        "summary": build_summary(state, details),
    }


@app.post("/api/v1/tick")
def tick(payload: TickRequest) -> Dict[str, Any]:
    state = _to_build_state(payload.build)
    if state.current_health <= 0:
        raise HTTPException(status_code=400, detail="Cannot simulate, character has no health.")

    result = resolve_tick(combat_stats(state, catalog), _rng(payload.seed))
    return {
        "result": result.to_dict(),
        "build": apply_tick(state, result).to_dict(),
    }


@app.post("/api/v1/combat")
def combat(payload: CombatRequest) -> Dict[str, Any]:
    state = _to_build_state(payload.build)

    if payload.food_code:
        try:
            food = food_item(catalog, payload.food_code)
        except ModelError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        result = simulate_sustained(state, catalog, food, _rng(payload.seed))
        food_name = food.name
    else:
        result = simulate_without_food(state, catalog, _rng(payload.seed))
        food_name = "no food"

    logger.info(
        "Combat finished: %d ticks, %.1f damage, capped=%s",
        result.ticks_survived,
        result.total_damage_dealt,
        result.stopped_by_cap,
    )
    return {
        "result": result.to_dict(),
        "build": apply_sustained_result(state, result, food_name).to_dict(),
    }
