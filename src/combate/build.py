"""Build-state transitions: skill points, player level, gear, buffs and food.

Every function takes a ``BuildState`` and returns a new one; the input is
never modified, so callers decide when a change is committed.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from .catalog import SkillCatalog, get_level_entry, max_health, max_hunger
from .formatting import format_code_to_name
from .models import (
    MAX_SKILL_LEVEL,
    MIN_SKILL_LEVEL,
    Buff,
    BuffSlot,
    BuildState,
    CatalogItem,
    EquipmentSlot,
    EquippedItem,
    FoodItem,
    ModelError,
    SkillCode,
    SustainedCombatResult,
    TickResult,
)

logger = logging.getLogger(__name__)


SKILL_POINTS_PER_LEVEL = 4
MIN_PLAYER_LEVEL = 1
MAX_PLAYER_LEVEL = 50


def new_build(catalog: Optional[SkillCatalog]) -> BuildState:
    return BuildState(
        player_level=MIN_PLAYER_LEVEL,
        skill_points_available=SKILL_POINTS_PER_LEVEL,
        skill_points_spent=0,
        current_health=max_health(catalog, 0),
        current_hunger=max_hunger(catalog, 0),
    )


def _require_item(catalog: Optional[SkillCatalog], code: str) -> CatalogItem:
    item = catalog.item(code) if catalog is not None else None
    if item is None:
        raise ModelError(f"Item '{code}' not found in catalog.")
    return item


def skill_upgrade_allowed(state: BuildState, code: SkillCode, catalog: Optional[SkillCatalog]) -> bool:
    current = state.skill_level(code)
    if current >= MAX_SKILL_LEVEL:
        return False
    entry = get_level_entry(catalog, code, current + 1)
    if entry is None:
        return False
    return state.skill_points_available >= entry.cost and state.player_level >= entry.unlock_at_level


def increase_skill(state: BuildState, code: SkillCode, catalog: Optional[SkillCatalog]) -> BuildState:
    if not skill_upgrade_allowed(state, code, catalog):
        logger.debug("Skill %s cannot be raised from level %d", code.value, state.skill_level(code))
        return state

    was_health_full = state.current_health >= max_health(catalog, state.skill_level(SkillCode.HEALTH))
    was_hunger_full = state.current_hunger >= max_hunger(catalog, state.skill_level(SkillCode.HUNGER))

    next_level = state.skill_level(code) + 1
    entry = get_level_entry(catalog, code, next_level)
    cost = entry.cost if entry is not None else 0

    updated = state.copy()
    updated.assigned_skill_levels[code] = next_level
    updated.skill_points_available -= cost
    updated.skill_points_spent += cost

    if code is SkillCode.HEALTH and was_health_full:
        updated.current_health = max_health(catalog, next_level)
    if code is SkillCode.HUNGER and was_hunger_full:
        updated.current_hunger = max_hunger(catalog, next_level)
    return updated


def decrease_skill(state: BuildState, code: SkillCode, catalog: Optional[SkillCatalog]) -> BuildState:
    current = state.skill_level(code)
    if current <= MIN_SKILL_LEVEL:
        return state

    entry = get_level_entry(catalog, code, current)
    refund = entry.cost if entry is not None else 0

    updated = state.copy()
    updated.assigned_skill_levels[code] = current - 1
    updated.skill_points_available += refund
    updated.skill_points_spent -= refund
    return updated


def change_player_level(state: BuildState, delta: int) -> BuildState:
    new_level = max(MIN_PLAYER_LEVEL, min(MAX_PLAYER_LEVEL, state.player_level + delta))
    if new_level == state.player_level:
        return state

    old_total = state.player_level * SKILL_POINTS_PER_LEVEL
    new_total = new_level * SKILL_POINTS_PER_LEVEL

    updated = state.copy()
    updated.player_level = new_level
    updated.skill_points_available += new_total - old_total
    if updated.skill_points_spent > new_total:
        logger.warning(
            "Player level lowered to %d; spent points (%d) exceed the new total (%d), resetting skills.",
            new_level,
            updated.skill_points_spent,
            new_total,
        )
        for skill in updated.assigned_skill_levels:
            updated.assigned_skill_levels[skill] = MIN_SKILL_LEVEL
        updated.skill_points_spent = 0
        updated.skill_points_available = new_total
    return updated


def equip_item(
    state: BuildState,
    code: str,
    catalog: Optional[SkillCatalog],
    stats: Optional[Mapping[str, float]] = None,
) -> BuildState:
    """Equip a catalog item in its usage slot, optionally with rolled stats."""
    item = _require_item(catalog, code)
    try:
        slot = EquipmentSlot(item.usage)
    except ValueError as exc:
        raise ModelError(f"Item '{code}' cannot be equipped (usage '{item.usage}').") from exc

    configured: Dict[str, float] = dict(stats) if stats else dict(item.flat_stats)
    updated = state.copy()
    updated.equipped_items[slot] = EquippedItem(code=code, name=format_code_to_name(code), stats=configured)
    return updated


def unequip_item(state: BuildState, slot: EquipmentSlot) -> BuildState:
    if state.item_in(slot) is None:
        return state
    updated = state.copy()
    updated.equipped_items[slot] = None
    return updated


def toggle_buff(state: BuildState, code: str, catalog: Optional[SkillCatalog]) -> BuildState:
    item = _require_item(catalog, code)
    buff = Buff(code=code, name=format_code_to_name(code), stats=dict(item.flat_stats))
    updated = state.copy()

    if item.usage == BuffSlot.AMMO.value:
        active = state.buff_in(BuffSlot.AMMO)
        # Ammo lives in both the buff slot and the ammo equipment slot.
        if active is not None and active.code == code:
            updated.active_buffs[BuffSlot.AMMO] = None
            updated.equipped_items[EquipmentSlot.AMMO] = None
        else:
            updated.active_buffs[BuffSlot.AMMO] = buff
            updated.equipped_items[EquipmentSlot.AMMO] = buff
        return updated

    active = state.buff_in(BuffSlot.CONSUMABLE)
    if active is not None and active.code == code:
        updated.active_buffs[BuffSlot.CONSUMABLE] = None
    else:
        updated.active_buffs[BuffSlot.CONSUMABLE] = buff
    return updated


def food_item(catalog: Optional[SkillCatalog], code: str) -> FoodItem:
    item = _require_item(catalog, code)
    return FoodItem(name=format_code_to_name(code), health_regen=item.health_regen, code=code)


def consume_food(state: BuildState, food: FoodItem, catalog: Optional[SkillCatalog]) -> BuildState:
    """Eat one portion outside combat."""
    if state.current_hunger < 1:
        logger.info("Not enough hunger to eat %s.", food.name)
        return state
    if state.current_health >= max_health(catalog, state.skill_level(SkillCode.HEALTH)):
        logger.info("Cannot eat %s, health is already full or overcharged.", food.name)
        return state

    updated = state.copy()
    updated.current_hunger -= 1
    updated.current_health += food.health_regen
    return updated


def apply_tick(state: BuildState, tick: TickResult) -> BuildState:
    updated = state.copy()
    updated.current_health = max(0.0, state.current_health - tick.health_lost)
    return updated


def apply_sustained_result(
    state: BuildState,
    result: SustainedCombatResult,
    food_name: str,
) -> BuildState:
    updated = state.copy()
    updated.current_health = result.final_health
    updated.current_hunger = result.final_hunger
    updated.last_simulation_summary = (
        f"Survived {result.ticks_survived} hits using {food_name}, "
        f"dealing {result.total_damage_dealt:g} total damage."
    )
    return updated
