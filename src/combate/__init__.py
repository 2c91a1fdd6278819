"""Character build simulator: stat aggregation and combat ticks."""

from .build import (
    SKILL_POINTS_PER_LEVEL,
    apply_sustained_result,
    apply_tick,
    change_player_level,
    consume_food,
    decrease_skill,
    equip_item,
    food_item,
    increase_skill,
    new_build,
    skill_upgrade_allowed,
    toggle_buff,
    unequip_item,
)
from .calculator import (
    INCOMING_DAMAGE_PER_TICK,
    aggregate,
    aggregate_display_stats,
    combat_stats,
    resolve_tick,
)
from .catalog import SkillCatalog, cumulative_cost, get_level_entry, max_health, max_hunger
from .config import CatalogError, CatalogRepository, load_catalog
from .engine import (
    MAX_TICKS_WITH_FOOD,
    MAX_TICKS_WITHOUT_FOOD,
    simulate_sustained,
    simulate_without_food,
)
from .formatting import build_summary, format_code_to_name, format_skill_value
from .models import (
    Buff,
    BuffSlot,
    BuildState,
    CombatStats,
    EquipmentSlot,
    EquippedItem,
    FoodItem,
    ModelError,
    SkillCode,
    SkillLevelEntry,
    StatDetails,
    SustainedCombatResult,
    TickResult,
)

__all__ = [
    "SKILL_POINTS_PER_LEVEL",
    "apply_sustained_result",
    "apply_tick",
    "change_player_level",
    "consume_food",
    "decrease_skill",
    "equip_item",
    "food_item",
    "increase_skill",
    "new_build",
    "skill_upgrade_allowed",
    "toggle_buff",
    "unequip_item",
    "INCOMING_DAMAGE_PER_TICK",
    "aggregate",
    "aggregate_display_stats",
    "combat_stats",
    "resolve_tick",
    "SkillCatalog",
    "cumulative_cost",
    "get_level_entry",
    "max_health",
    "max_hunger",
    "CatalogError",
    "CatalogRepository",
    "load_catalog",
    "MAX_TICKS_WITH_FOOD",
    "MAX_TICKS_WITHOUT_FOOD",
    "simulate_sustained",
    "simulate_without_food",
    "build_summary",
    "format_code_to_name",
    "format_skill_value",
    "Buff",
    "BuffSlot",
    "BuildState",
    "CombatStats",
    "EquipmentSlot",
    "EquippedItem",
    "FoodItem",
    "ModelError",
    "SkillCode",
    "SkillLevelEntry",
    "StatDetails",
    "SustainedCombatResult",
    "TickResult",
]
