from __future__ import annotations

import logging
import random
from typing import List, Optional

from .calculator import INCOMING_DAMAGE_PER_TICK, RandomSource, combat_stats, resolve_tick, round_half_up
from .catalog import SkillCatalog, max_health
from .models import BuildState, FoodItem, SkillCode, SustainedCombatResult

logger = logging.getLogger(__name__)


MAX_TICKS_WITH_FOOD = 2000
MAX_TICKS_WITHOUT_FOOD = 1000

DEFEAT_LINE = "--- COMBAT OVER: Player defeated. Not enough health to continue. ---"
TICK_CAP_LINE = "--- SIMULATION STOPPED: Maximum number of hits reached. ---"


def _rng_or_default(rng: Optional[RandomSource]) -> RandomSource:
    return rng if rng is not None else random.Random()


def simulate_sustained(
    state: BuildState,
    catalog: Optional[SkillCatalog],
    food: Optional[FoodItem] = None,
    rng: Optional[RandomSource] = None,
) -> SustainedCombatResult:
    """Fight fixed incoming hits until death or the tick cap, eating when critical.

    Works on copies of the state's health and hunger; the caller commits
    the returned values. Combat stats are captured once on entry.
    """
    rng = _rng_or_default(rng)
    stats = combat_stats(state, catalog)

    food_name = food.name if food is not None else "no food"
    health_per_food = food.health_regen if food is not None else 0.0
    health_cap = max_health(catalog, state.skill_level(SkillCode.HEALTH))

    health = float(state.current_health)
    hunger = int(state.current_hunger)
    total_damage = 0.0
    ticks = 0
    log: List[str] = [
        f"--- Simulation started with {food_name} (+{health_per_food:g} HP per hunger point) ---"
    ]

    while ticks < MAX_TICKS_WITH_FOOD:
        if health <= INCOMING_DAMAGE_PER_TICK and hunger > 0 and health_per_food > 0:
            log.append(f"<strong>CRITICAL HEALTH!</strong> HP at {health:.1f}. Trying to eat.")
            while hunger > 0 and health <= INCOMING_DAMAGE_PER_TICK:
                if health >= health_cap:
                    log.append(
                        f"Stopped eating: health is full or overcharged ({health:.1f} / {health_cap:g})."
                    )
                    break
                hunger -= 1
                health_before = health
                health += health_per_food
                log.append(
                    f"<strong>ATE {food_name.upper()}!</strong> Healed {health_per_food:g}. "
                    f"HP: {health_before:.1f} -> {health:.1f}. Hunger left: {hunger}."
                )

        if health <= 0:
            log.append(DEFEAT_LINE)
            logger.debug("Sustained combat lost after %d ticks", ticks)
            break

        tick = resolve_tick(stats, rng)
        health -= tick.health_lost
        total_damage += tick.final_damage_dealt
        ticks += 1

        log.append(f"--- Hit {ticks} | Health left: {max(0.0, health):.1f} | Hunger: {hunger} ---")
        log.extend(tick.log)

    stopped_by_cap = ticks >= MAX_TICKS_WITH_FOOD
    if stopped_by_cap:
        log.append(TICK_CAP_LINE)
        logger.warning("Sustained combat hit the %d tick cap", MAX_TICKS_WITH_FOOD)

    return SustainedCombatResult(
        total_damage_dealt=round_half_up(total_damage, 1),
        ticks_survived=ticks,
        log=tuple(log),
        final_health=max(0.0, health),
        final_hunger=hunger,
        stopped_by_cap=stopped_by_cap,
    )


def simulate_without_food(
    state: BuildState,
    catalog: Optional[SkillCatalog],
    rng: Optional[RandomSource] = None,
) -> SustainedCombatResult:
    """Fight until health runs out with no eating and a lower tick cap.

    The damage of the tick that drops health below zero is dropped, unless
    it is the very first tick of the fight.
    """
    rng = _rng_or_default(rng)
    stats = combat_stats(state, catalog)

    health = float(state.current_health)
    total_damage = 0.0
    ticks = 0
    log: List[str] = []

    while health > 0 and ticks < MAX_TICKS_WITHOUT_FOOD:
        tick = resolve_tick(stats, rng)
        health -= tick.health_lost
        if health >= 0 or ticks == 0:
            total_damage += tick.final_damage_dealt
        ticks += 1
        log.append(f"--- Hit {ticks} (Health: {max(0.0, health):.1f}) ---")
        log.extend(tick.log)

    stopped_by_cap = ticks >= MAX_TICKS_WITHOUT_FOOD
    if stopped_by_cap:
        log.append(TICK_CAP_LINE)
        logger.warning("Combat without food hit the %d tick cap", MAX_TICKS_WITHOUT_FOOD)
    else:
        logger.debug("Combat without food ended after %d ticks", ticks)

    return SustainedCombatResult(
        total_damage_dealt=round_half_up(total_damage, 1),
        ticks_survived=ticks,
        log=tuple(log),
        final_health=max(0.0, health),
        final_hunger=int(state.current_hunger),
        stopped_by_cap=stopped_by_cap,
    )
