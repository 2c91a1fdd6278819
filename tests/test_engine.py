from __future__ import annotations

import random
import unittest

from combate.catalog import SkillCatalog
from combate.config import catalog_from_payload
from combate.engine import (
    DEFEAT_LINE,
    MAX_TICKS_WITH_FOOD,
    MAX_TICKS_WITHOUT_FOOD,
    TICK_CAP_LINE,
    simulate_sustained,
    simulate_without_food,
)
from combate.models import BuildState, FoodItem, SkillCode


class ScriptedRandom:
    def __init__(self, values):
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


def _catalog(health_base: float = 50, dodge_base: float = 0) -> SkillCatalog:
    def table(base: float, step: float) -> dict:
        return {str(level): {"value": base + step * level, "cost": level} for level in range(0, 11)}

    return catalog_from_payload(
        {
            "skills": {
                "attack": table(20, 10),
                "precision": table(50, 5),
                "criticalChance": table(10, 5),
                "criticalDamages": table(100, 20),
                "armor": table(0, 4),
                "dodge": table(dodge_base, 4),
                "health": table(health_base, 10),
                "hunger": table(10, 1),
            }
        }
    )


BREAD = FoodItem(name="Bread", health_regen=10.0, code="bread")


class SustainedCombatTests(unittest.TestCase):
    def test_without_food_matches_plain_variant(self) -> None:
        catalog = _catalog()
        state = BuildState(current_health=50.0, current_hunger=10)

        plain = simulate_without_food(state, catalog, random.Random(11))
        for food in (None, FoodItem(name="Water", health_regen=0.0)):
            with self.subTest(food=food):
                sustained = simulate_sustained(state, catalog, food, random.Random(11))
                self.assertEqual(sustained.ticks_survived, plain.ticks_survived)
                self.assertEqual(sustained.total_damage_dealt, plain.total_damage_dealt)
                self.assertEqual(sustained.final_health, plain.final_health)
                self.assertEqual(sustained.final_hunger, 10)

        self.assertEqual(plain.ticks_survived, 5)
        self.assertEqual(plain.final_health, 0.0)

    def test_panic_eating_extends_the_fight(self) -> None:
        catalog = _catalog()
        state = BuildState(current_health=50.0, current_hunger=10)

        result = simulate_sustained(state, catalog, BREAD, random.Random(3))

        # 4 hits to reach 10 HP, 10 eat+hit rounds, one last hit from 10 to 0.
        self.assertEqual(result.ticks_survived, 15)
        self.assertEqual(result.final_hunger, 0)
        self.assertEqual(result.final_health, 0.0)
        self.assertEqual(sum("ATE BREAD!" in line for line in result.log), 10)
        self.assertEqual(result.log[-1], DEFEAT_LINE)
        self.assertFalse(result.stopped_by_cap)
        self.assertTrue(result.log[0].startswith("--- Simulation started with Bread (+10 HP"))

    def test_overheal_guard_stops_eating_at_max_health(self) -> None:
        catalog = _catalog(health_base=5)
        state = BuildState(current_health=8.0, current_hunger=3)

        result = simulate_sustained(state, catalog, BREAD, random.Random(0))

        self.assertIn("CRITICAL HEALTH!", result.log[1])
        self.assertTrue(result.log[2].startswith("Stopped eating"))
        self.assertEqual(sum("ATE BREAD!" in line for line in result.log), 3)
        for line in result.log:
            if "ATE BREAD!" in line:
                self.assertIn("HP: -2.0 -> 8.0", line)
        self.assertEqual(result.ticks_survived, 4)
        self.assertEqual(result.final_hunger, 0)
        self.assertEqual(result.final_health, 0.0)

    def test_untouchable_build_stops_at_tick_cap(self) -> None:
        catalog = _catalog(dodge_base=100)
        state = BuildState(current_health=50.0, current_hunger=10)

        result = simulate_sustained(state, catalog, BREAD, random.Random(8))

        self.assertEqual(result.ticks_survived, MAX_TICKS_WITH_FOOD)
        self.assertTrue(result.stopped_by_cap)
        self.assertEqual(result.log[-1], TICK_CAP_LINE)
        self.assertEqual(result.final_health, 50.0)
        self.assertEqual(result.final_hunger, 10)

    def test_ticks_never_exceed_cap(self) -> None:
        catalog = _catalog()
        for seed in range(20):
            state = BuildState(current_health=30.0 + seed, current_hunger=seed % 5)
            result = simulate_sustained(state, catalog, BREAD, random.Random(seed))
            self.assertLessEqual(result.ticks_survived, MAX_TICKS_WITH_FOOD)
            self.assertTrue(result.final_health == 0.0 or result.stopped_by_cap)

    def test_dead_character_never_fights(self) -> None:
        result = simulate_sustained(BuildState(current_health=0.0, current_hunger=0), _catalog(), BREAD)
        self.assertEqual(result.ticks_survived, 0)
        self.assertEqual(result.total_damage_dealt, 0.0)
        self.assertEqual(result.log[-1], DEFEAT_LINE)

    def test_stats_are_frozen_and_state_is_not_mutated(self) -> None:
        state = BuildState(current_health=50.0, current_hunger=10)
        state.assigned_skill_levels[SkillCode.ATTACK] = 2
        before = state.to_dict()

        simulate_sustained(state, _catalog(), BREAD, random.Random(1))
        simulate_without_food(state, _catalog(), random.Random(1))

        self.assertEqual(state.to_dict(), before)

    def test_unloaded_catalog_uses_default_max_health(self) -> None:
        state = BuildState(current_health=10.0, current_hunger=1)
        result = simulate_sustained(state, SkillCatalog.unloaded(), BREAD, random.Random(2))
        # Attack is zero without a catalog, the fight still resolves.
        self.assertEqual(result.total_damage_dealt, 0.0)
        self.assertIn("ATE BREAD!", result.log[2])


class CombatWithoutFoodTests(unittest.TestCase):
    def test_first_tick_damage_counts_even_when_it_kills(self) -> None:
        state = BuildState(current_health=5.0)
        # miss dodge, hit, no critical
        result = simulate_without_food(state, _catalog(), ScriptedRandom([0.99, 0.0, 0.99]))
        self.assertEqual(result.ticks_survived, 1)
        self.assertEqual(result.total_damage_dealt, 20.0)
        self.assertEqual(result.final_health, 0.0)

    def test_later_killing_tick_damage_is_dropped(self) -> None:
        state = BuildState(current_health=15.0)
        draws = [0.99, 0.0, 0.99] * 2
        result = simulate_without_food(state, _catalog(), ScriptedRandom(draws))
        self.assertEqual(result.ticks_survived, 2)
        self.assertEqual(result.total_damage_dealt, 20.0)

    def test_plain_variant_has_lower_cap(self) -> None:
        catalog = _catalog(dodge_base=100)
        result = simulate_without_food(BuildState(current_health=50.0, current_hunger=4), catalog, random.Random(4))
        self.assertEqual(result.ticks_survived, MAX_TICKS_WITHOUT_FOOD)
        self.assertTrue(result.stopped_by_cap)
        self.assertEqual(result.log[-1], TICK_CAP_LINE)
        self.assertEqual(result.final_hunger, 4)

    def test_result_payload_uses_output_contract_keys(self) -> None:
        result = simulate_without_food(BuildState(current_health=20.0), _catalog(), random.Random(9))
        payload = result.to_dict()
        self.assertEqual(
            set(payload.keys()),
            {"totalDamageDealt", "ticksSurvived", "log", "finalHealth", "finalHunger", "stoppedByCap"},
        )
        self.assertIsInstance(payload["log"], list)


if __name__ == "__main__":
    unittest.main()
