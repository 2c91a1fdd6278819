from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class ModelError(ValueError):
    """Raised for malformed build/catalog payloads."""


class SkillCode(str, Enum):
    ATTACK = "attack"
    PRECISION = "precision"
    CRITICAL_CHANCE = "criticalChance"
    CRITICAL_DAMAGES = "criticalDamages"
    ARMOR = "armor"
    DODGE = "dodge"
    HEALTH = "health"
    HUNGER = "hunger"
    LOOT_CHANCE = "lootChance"


class EquipmentSlot(str, Enum):
    WEAPON = "weapon"
    AMMO = "ammo"
    HELMET = "helmet"
    CHEST = "chest"
    PANTS = "pants"
    BOOTS = "boots"
    GLOVES = "gloves"


class BuffSlot(str, Enum):
    AMMO = "ammo"
    CONSUMABLE = "consumable"


MIN_SKILL_LEVEL = 0
MAX_SKILL_LEVEL = 10

DEFAULT_MAX_HEALTH = 50.0
DEFAULT_MAX_HUNGER = 10


def _require(payload: Mapping[str, Any], key: str) -> Any:
    if key not in payload:
        raise ModelError(f"Missing required field: {key}")
    return payload[key]


def _to_stats(raw: Any) -> Dict[str, float]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ModelError(f"Stats must be a mapping, got {type(raw).__name__}.")
    stats: Dict[str, float] = {}
    for key, value in raw.items():
        try:
            stats[str(key)] = float(value)
        except (TypeError, ValueError) as exc:
            raise ModelError(f"Invalid value for stat '{key}': {value!r}") from exc
    return stats


def _mapping_field(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    raw = payload.get(key)
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ModelError(f"Field '{key}' must be an object, got {type(raw).__name__}.")
    return raw


def parse_skill_code(value: Any) -> SkillCode:
    try:
        return SkillCode(str(value))
    except ValueError as exc:
        raise ModelError(f"Unknown skill code '{value}'.") from exc


def parse_equipment_slot(value: Any) -> EquipmentSlot:
    try:
        return EquipmentSlot(str(value))
    except ValueError as exc:
        raise ModelError(f"Unknown equipment slot '{value}'.") from exc


def parse_buff_slot(value: Any) -> BuffSlot:
    try:
        return BuffSlot(str(value))
    except ValueError as exc:
        raise ModelError(f"Unknown buff slot '{value}'.") from exc


@dataclass(slots=True, frozen=True)
class SkillLevelEntry:
    value: float
    cost: int = 0
    unlock_at_level: int = 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SkillLevelEntry":
        try:
            return cls(
                value=float(payload.get("value", 0.0)),
                cost=int(payload.get("cost", 0)),
                unlock_at_level=int(payload.get("unlockAtLevel", 0)),
            )
        except (TypeError, ValueError) as exc:
            raise ModelError(f"Invalid skill level entry: {exc}") from exc


@dataclass(slots=True, frozen=True)
class CatalogItem:
    """Non-skill catalog record: equipment, ammo, buffs and food."""

    code: str
    usage: str = ""
    is_consumable: bool = False
    flat_stats: Dict[str, float] = field(default_factory=dict)

    @property
    def health_regen(self) -> float:
        return self.flat_stats.get("healthRegen", 0.0)

    @classmethod
    def from_dict(cls, code: str, payload: Mapping[str, Any]) -> "CatalogItem":
        return cls(
            code=code,
            usage=str(payload.get("usage", "")),
            is_consumable=bool(payload.get("isConsumable", False)),
            flat_stats=_to_stats(payload.get("flatStats")),
        )


@dataclass(slots=True, frozen=True)
class EquippedItem:
    code: str
    name: str
    stats: Dict[str, float] = field(default_factory=dict)

    def stat(self, key: str) -> float:
        return self.stats.get(key, 0.0)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "EquippedItem":
        if not isinstance(payload, Mapping):
            raise ModelError(f"Item must be an object, got {type(payload).__name__}.")
        code = str(_require(payload, "code"))
        return cls(
            code=code,
            name=str(payload.get("name", code)),
            stats=_to_stats(payload.get("stats")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "name": self.name, "stats": dict(self.stats)}


# Buffs share the equipped item shape (code, display name, stats).
Buff = EquippedItem


@dataclass(slots=True, frozen=True)
class FoodItem:
    name: str
    health_regen: float = 0.0
    code: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "FoodItem":
        flat_stats = _to_stats(payload.get("flatStats"))
        code = str(payload.get("code", ""))
        return cls(
            name=str(payload.get("name", code or "food")),
            health_regen=flat_stats.get("healthRegen", 0.0),
            code=code,
        )


def _empty_skill_levels() -> Dict[SkillCode, int]:
    return {code: MIN_SKILL_LEVEL for code in SkillCode}


def _empty_equipment() -> Dict[EquipmentSlot, Optional[EquippedItem]]:
    return {slot: None for slot in EquipmentSlot}


def _empty_buffs() -> Dict[BuffSlot, Optional[Buff]]:
    return {slot: None for slot in BuffSlot}


@dataclass(slots=True)
class BuildState:
    """Player build snapshot. Owned by the caller; the core only reads it."""

    assigned_skill_levels: Dict[SkillCode, int] = field(default_factory=_empty_skill_levels)
    equipped_items: Dict[EquipmentSlot, Optional[EquippedItem]] = field(default_factory=_empty_equipment)
    active_buffs: Dict[BuffSlot, Optional[Buff]] = field(default_factory=_empty_buffs)
    current_health: float = DEFAULT_MAX_HEALTH
    current_hunger: int = DEFAULT_MAX_HUNGER
    player_level: int = 1
    skill_points_available: int = 0
    skill_points_spent: int = 0
    last_simulation_summary: str = "No simulation has been run yet."

    def skill_level(self, code: SkillCode) -> int:
        return self.assigned_skill_levels.get(code, MIN_SKILL_LEVEL)

    def item_in(self, slot: EquipmentSlot) -> Optional[EquippedItem]:
        return self.equipped_items.get(slot)

    def buff_in(self, slot: BuffSlot) -> Optional[Buff]:
        return self.active_buffs.get(slot)

    def copy(self) -> "BuildState":
        return BuildState(
            assigned_skill_levels=dict(self.assigned_skill_levels),
            equipped_items=dict(self.equipped_items),
            active_buffs=dict(self.active_buffs),
            current_health=self.current_health,
            current_hunger=self.current_hunger,
            player_level=self.player_level,
            skill_points_available=self.skill_points_available,
            skill_points_spent=self.skill_points_spent,
            last_simulation_summary=self.last_simulation_summary,
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BuildState":
        if not isinstance(payload, Mapping):
            raise ModelError("Build state must be an object.")

        levels = _empty_skill_levels()
        for raw_code, raw_level in _mapping_field(payload, "assignedSkillLevels").items():
            code = parse_skill_code(raw_code)
            try:
                level = int(raw_level)
            except (TypeError, ValueError) as exc:
                raise ModelError(f"Invalid level for skill '{raw_code}': {raw_level!r}") from exc
            levels[code] = max(MIN_SKILL_LEVEL, min(MAX_SKILL_LEVEL, level))

        equipment = _empty_equipment()
        for raw_slot, raw_item in _mapping_field(payload, "equippedItems").items():
            slot = parse_equipment_slot(raw_slot)
            equipment[slot] = EquippedItem.from_dict(raw_item) if raw_item else None

        buffs = _empty_buffs()
        for raw_slot, raw_buff in _mapping_field(payload, "activeBuffs").items():
            slot = parse_buff_slot(raw_slot)
            buffs[slot] = Buff.from_dict(raw_buff) if raw_buff else None

        try:
            current_health = float(payload.get("currentHealth", DEFAULT_MAX_HEALTH))
            current_hunger = int(payload.get("currentHunger", DEFAULT_MAX_HUNGER))
            player_level = int(payload.get("playerLevel", 1))
            points_available = int(payload.get("skillPointsAvailable", 0))
            points_spent = int(payload.get("skillPointsSpent", 0))
        except (TypeError, ValueError) as exc:
            raise ModelError(f"Invalid build state resources: {exc}") from exc

        return cls(
            assigned_skill_levels=levels,
            equipped_items=equipment,
            active_buffs=buffs,
            current_health=current_health,
            current_hunger=current_hunger,
            player_level=player_level,
            skill_points_available=points_available,
            skill_points_spent=points_spent,
            last_simulation_summary=str(
                payload.get("lastSimulationSummary", "No simulation has been run yet.")
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerLevel": self.player_level,
            "skillPointsAvailable": self.skill_points_available,
            "skillPointsSpent": self.skill_points_spent,
            "currentHealth": self.current_health,
            "currentHunger": self.current_hunger,
            "assignedSkillLevels": {code.value: level for code, level in self.assigned_skill_levels.items()},
            "equippedItems": {
                slot.value: (item.to_dict() if item else None)
                for slot, item in self.equipped_items.items()
            },
            "activeBuffs": {
                slot.value: (buff.to_dict() if buff else None)
                for slot, buff in self.active_buffs.items()
            },
            "lastSimulationSummary": self.last_simulation_summary,
        }


@dataclass(slots=True, frozen=True)
class StatDetails:
    skill_value: float
    equipment_value: float
    equipment_items: Tuple[EquippedItem, ...]
    ammo_percent: float
    buff_percent: float
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skillValue": self.skill_value,
            "equipmentValue": self.equipment_value,
            "equipmentItems": [item.to_dict() for item in self.equipment_items],
            "ammoPercent": self.ammo_percent,
            "buffPercent": self.buff_percent,
            "total": self.total,
        }


@dataclass(slots=True, frozen=True)
class CombatStats:
    """The six stat totals a combat tick reads."""

    attack: StatDetails
    precision: StatDetails
    critical_chance: StatDetails
    critical_damages: StatDetails
    armor: StatDetails
    dodge: StatDetails

    def to_dict(self) -> Dict[str, Any]:
        return {
            SkillCode.ATTACK.value: self.attack.to_dict(),
            SkillCode.PRECISION.value: self.precision.to_dict(),
            SkillCode.CRITICAL_CHANCE.value: self.critical_chance.to_dict(),
            SkillCode.CRITICAL_DAMAGES.value: self.critical_damages.to_dict(),
            SkillCode.ARMOR.value: self.armor.to_dict(),
            SkillCode.DODGE.value: self.dodge.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class TickResult:
    final_damage_dealt: float
    health_lost: float
    log: Tuple[str, ...]
    was_critical: bool
    was_hit: bool
    was_dodge: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finalDamageDealt": self.final_damage_dealt,
            "healthLost": self.health_lost,
            "log": list(self.log),
            "wasCritical": self.was_critical,
            "wasHit": self.was_hit,
            "wasDodge": self.was_dodge,
        }


@dataclass(slots=True, frozen=True)
class SustainedCombatResult:
    total_damage_dealt: float
    ticks_survived: int
    log: Tuple[str, ...]
    final_health: float
    final_hunger: int
    stopped_by_cap: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDamageDealt": self.total_damage_dealt,
            "ticksSurvived": self.ticks_survived,
            "log": list(self.log),
            "finalHealth": self.final_health,
            "finalHunger": self.final_hunger,
            "stoppedByCap": self.stopped_by_cap,
        }
