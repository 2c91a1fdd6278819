from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Protocol, Tuple

from .catalog import SkillCatalog, get_level_entry
from .models import (
    BuffSlot,
    BuildState,
    CombatStats,
    EquipmentSlot,
    EquippedItem,
    SkillCode,
    StatDetails,
    TickResult,
)


INCOMING_DAMAGE_PER_TICK = 10.0

# Stats shown in the character sheet, in display order.
DISPLAY_STATS: Tuple[SkillCode, ...] = (
    SkillCode.ATTACK,
    SkillCode.PRECISION,
    SkillCode.CRITICAL_CHANCE,
    SkillCode.CRITICAL_DAMAGES,
    SkillCode.ARMOR,
    SkillCode.DODGE,
    SkillCode.LOOT_CHANCE,
)


class RandomSource(Protocol):
    def random(self) -> float:
        ...


@dataclass(slots=True, frozen=True)
class StatRule:
    slots: Tuple[EquipmentSlot, ...] = ()
    buffed_by_attack_percent: bool = False


STAT_RULES: Dict[SkillCode, StatRule] = {
    SkillCode.ATTACK: StatRule(slots=(EquipmentSlot.WEAPON,), buffed_by_attack_percent=True),
    SkillCode.PRECISION: StatRule(slots=(EquipmentSlot.GLOVES,)),
    SkillCode.CRITICAL_CHANCE: StatRule(slots=(EquipmentSlot.WEAPON,)),
    SkillCode.CRITICAL_DAMAGES: StatRule(slots=(EquipmentSlot.HELMET,)),
    SkillCode.ARMOR: StatRule(slots=(EquipmentSlot.CHEST, EquipmentSlot.PANTS)),
    SkillCode.DODGE: StatRule(slots=(EquipmentSlot.BOOTS,)),
    SkillCode.HEALTH: StatRule(),
    SkillCode.HUNGER: StatRule(),
    SkillCode.LOOT_CHANCE: StatRule(),
}


def round_half_up(value: float, digits: int = 1) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def _percent_attack(buff: Optional[EquippedItem]) -> float:
    if buff is None:
        return 0.0
    return buff.stat("percentAttack")


def aggregate(
    stat_code: SkillCode,
    state: BuildState,
    catalog: Optional[SkillCatalog],
) -> StatDetails:
    """Combine skill level value, gear and active buffs into one stat total.

    Attack is the only stat scaled by the ammo and consumable
    ``percentAttack`` buffs; every other stat is skill plus gear.
    """
    rule = STAT_RULES[stat_code]
    entry = get_level_entry(catalog, stat_code, state.skill_level(stat_code))
    skill_value = entry.value if entry is not None else 0.0

    equipment_value = 0.0
    contributing: List[EquippedItem] = []
    for slot in rule.slots:
        item = state.item_in(slot)
        if item is None:
            continue
        equipment_value += item.stat(stat_code.value)
        contributing.append(item)

    ammo_percent = 0.0
    buff_percent = 0.0
    if rule.buffed_by_attack_percent:
        ammo_percent = _percent_attack(state.buff_in(BuffSlot.AMMO))
        buff_percent = _percent_attack(state.buff_in(BuffSlot.CONSUMABLE))
        total = (skill_value + equipment_value) * (1 + ammo_percent / 100 + buff_percent / 100)
    else:
        total = skill_value + equipment_value

    return StatDetails(
        skill_value=skill_value,
        equipment_value=equipment_value,
        equipment_items=tuple(contributing),
        ammo_percent=ammo_percent,
        buff_percent=buff_percent,
        total=round_half_up(total, 1),
    )


def aggregate_display_stats(
    state: BuildState,
    catalog: Optional[SkillCatalog],
) -> Dict[SkillCode, StatDetails]:
    return {code: aggregate(code, state, catalog) for code in DISPLAY_STATS}


def combat_stats(state: BuildState, catalog: Optional[SkillCatalog]) -> CombatStats:
    return CombatStats(
        attack=aggregate(SkillCode.ATTACK, state, catalog),
        precision=aggregate(SkillCode.PRECISION, state, catalog),
        critical_chance=aggregate(SkillCode.CRITICAL_CHANCE, state, catalog),
        critical_damages=aggregate(SkillCode.CRITICAL_DAMAGES, state, catalog),
        armor=aggregate(SkillCode.ARMOR, state, catalog),
        dodge=aggregate(SkillCode.DODGE, state, catalog),
    )


def _roll(rng: RandomSource) -> float:
    return rng.random() * 100


def resolve_tick(stats: CombatStats, rng: RandomSource) -> TickResult:
    """Resolve one exchange against the fixed incoming hit.

    Draws exactly three rolls in order: dodge, hit, critical. Armor only
    mitigates incoming health loss; the hit/critical chain only shapes
    outgoing damage.
    """
    log: List[str] = []
    health_lost = INCOMING_DAMAGE_PER_TICK

    was_dodge = _roll(rng) < stats.dodge.total
    if was_dodge:
        health_lost = 0.0
        log.append("<strong>DODGE!</strong> No health lost.")
    else:
        damage_reduction = INCOMING_DAMAGE_PER_TICK * (stats.armor.total / 100)
        health_lost -= damage_reduction
        log.append(f"<strong>ARMOR</strong> reduced health loss by {damage_reduction:.1f}.")

    base_damage = stats.attack.total
    log.append(f"Base damage potential is {base_damage:.1f}.")

    was_hit = _roll(rng) < stats.precision.total
    if not was_hit:
        base_damage /= 2
        log.append("<strong>MISSED!</strong> Damage was halved.")
    else:
        log.append("<strong>HIT!</strong> Full damage potential.")

    was_critical = _roll(rng) < stats.critical_chance.total
    if was_critical:
        crit_multiplier = 1 + stats.critical_damages.total / 100
        crit_bonus = base_damage * (stats.critical_damages.total / 100)
        final_damage = base_damage * crit_multiplier
        log.append(
            f"<strong>CRITICAL HIT!</strong> Damage multiplied by {crit_multiplier:.2f} (+{crit_bonus:.1f})."
        )
    else:
        final_damage = base_damage
        log.append("Normal hit.")

    return TickResult(
        final_damage_dealt=round_half_up(final_damage, 1),
        health_lost=round_half_up(health_lost, 1),
        log=tuple(log),
        was_critical=was_critical,
        was_hit=was_hit,
        was_dodge=was_dodge,
    )
