from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .models import (
    DEFAULT_MAX_HEALTH,
    DEFAULT_MAX_HUNGER,
    MAX_SKILL_LEVEL,
    MIN_SKILL_LEVEL,
    CatalogItem,
    SkillCode,
    SkillLevelEntry,
)


@dataclass(slots=True, frozen=True)
class SkillCatalog:
    """Static lookup data: per-level skill tables plus item records."""

    skills: Mapping[str, Mapping[int, SkillLevelEntry]] = field(default_factory=dict)
    items: Mapping[str, CatalogItem] = field(default_factory=dict)
    loaded: bool = True

    @classmethod
    def unloaded(cls) -> "SkillCatalog":
        return cls(skills={}, items={}, loaded=False)

    def item(self, code: str) -> Optional[CatalogItem]:
        if not self.loaded:
            return None
        return self.items.get(code)

    def food_items(self) -> List[CatalogItem]:
        return [item for item in self.items.values() if item.is_consumable and item.health_regen > 0]


def _code_key(code: SkillCode | str) -> str:
    if isinstance(code, Enum):
        return str(code.value)
    return str(code)


def clamp_skill_level(level: int) -> int:
    return max(MIN_SKILL_LEVEL, min(MAX_SKILL_LEVEL, int(level)))


def get_level_entry(
    catalog: Optional[SkillCatalog],
    skill_code: SkillCode | str,
    level: int,
) -> Optional[SkillLevelEntry]:
    if catalog is None or not catalog.loaded:
        return None
    table = catalog.skills.get(_code_key(skill_code))
    if table is None:
        return None
    return table.get(clamp_skill_level(level))


def cumulative_cost(
    catalog: Optional[SkillCatalog],
    skill_code: SkillCode | str,
    level: int,
) -> int:
    """Total points needed to reach ``level`` from zero; level 0 is free."""
    if level <= MIN_SKILL_LEVEL:
        return 0
    if catalog is None or not catalog.loaded or _code_key(skill_code) not in catalog.skills:
        return 0

    total = 0
    for index in range(1, level + 1):
        entry = get_level_entry(catalog, skill_code, index)
        if entry is not None and entry.cost:
            total += entry.cost
    return total


def max_health(catalog: Optional[SkillCatalog], level: int) -> float:
    entry = get_level_entry(catalog, SkillCode.HEALTH, level)
    if entry is None or not entry.value:
        return DEFAULT_MAX_HEALTH
    return entry.value


def max_hunger(catalog: Optional[SkillCatalog], level: int) -> int:
    entry = get_level_entry(catalog, SkillCode.HUNGER, level)
    if entry is None or not entry.value:
        return DEFAULT_MAX_HUNGER
    return int(entry.value)


def skill_table(catalog: Optional[SkillCatalog], skill_code: SkillCode | str) -> Dict[int, SkillLevelEntry]:
    if catalog is None or not catalog.loaded:
        return {}
    return dict(catalog.skills.get(_code_key(skill_code), {}))
